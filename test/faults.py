"""
Faults module behavioral tests (codes, payloads, trigger, rendering).

Scope
- Validate FaultCode values and host normalization via __codes__.
- Validate getdoc() lookups via __docs__.
- Validate payload properties and copy.replace() overrides.
- Validate trigger(): raise/warn outside shell mode, render (and exit for errors) inside it.

Conventions
- Test method names follow CamelCase per project convention.
- Host hooks are patched onto __main__ for the duration of a test.
"""

from __future__ import annotations

import copy
import io
import sys
import unittest
import warnings
from types import SimpleNamespace
from unittest import TestCase, mock

from rich.console import Console

from cmdline import (
    FaultCode,
    CommandLineError,
    CommandLineWarning,
    DuplicateOptionWarning,
    InvalidCommandError,
    NoCommandSpecifiedError,
    UnrecognizedOptionError,
    getdoc,
    trigger,
)


class TestFaultCode(TestCase):
    """Stable identifiers and their host-facing labels."""

    def testValues(self):
        self.assertEqual(FaultCode.INVALID_COMMAND, 11101)
        self.assertEqual(FaultCode.NO_COMMAND_SPECIFIED, 11102)
        self.assertEqual(FaultCode.UNRECOGNIZED_OPTION, 11111)
        self.assertEqual(FaultCode.ARGUMENT_MISSING, 11112)
        self.assertEqual(FaultCode.INVALID_ARGUMENT, 11113)
        self.assertEqual(FaultCode.DUPLICATE_OPTION, 12111)
        self.assertEqual(FaultCode.DUPLICATE_COMMAND, 12112)

    def testNormalizeDefaultsToValue(self):
        self.assertEqual(FaultCode.INVALID_COMMAND.normalize(), "11101")

    def testNormalizeHonorsHostCodes(self):
        with mock.patch.object(sys.modules["__main__"], "__codes__", {FaultCode.INVALID_COMMAND: "E-CMD"}, create=True):
            self.assertEqual(FaultCode.INVALID_COMMAND.normalize(), "E-CMD")
            self.assertEqual(FaultCode.ARGUMENT_MISSING.normalize(), "11112")


class TestGetdoc(TestCase):
    """Documentation lookups."""

    def testRejectsPlainIntegers(self):
        with self.assertRaises(TypeError):
            getdoc(11101)

    def testMissingDocumentationIsNone(self):
        self.assertIsNone(getdoc(FaultCode.INVALID_COMMAND))

    def testHostDocumentation(self):
        docs = {FaultCode.INVALID_COMMAND: "https://example.invalid/commands"}
        with mock.patch.object(sys.modules["__main__"], "__docs__", docs, create=True):
            self.assertEqual(getdoc(FaultCode.INVALID_COMMAND), "https://example.invalid/commands")


class TestPayloads(TestCase):
    """Message and option payloads."""

    def testMessageAndPayload(self):
        fault = UnrecognizedOptionError("unrecognized command line option: -q", option="-q", suggestions=[])
        self.assertEqual(fault.message, "unrecognized command line option: -q")
        self.assertEqual(str(fault), "unrecognized command line option: -q")
        self.assertEqual(fault.option, "-q")
        self.assertEqual(fault.suggestions, [])

    def testAbsentPayloadIsNone(self):
        fault = NoCommandSpecifiedError()
        self.assertEqual(fault.message, "")
        self.assertIsNone(fault.hint)
        self.assertIsNone(fault.code)

    def testOptionsAreReadOnly(self):
        fault = InvalidCommandError("bad", command="x")
        with self.assertRaises(TypeError):
            fault.options["command"] = "y"

    def testReplaceMergesOverrides(self):
        fault = InvalidCommandError("bad", command="x", hint="first")
        other = copy.replace(fault, hint="second")
        self.assertIsInstance(other, InvalidCommandError)
        self.assertIsNot(other, fault)
        self.assertEqual(other.message, "bad")
        self.assertEqual(other.command, "x")
        self.assertEqual(other.hint, "second")
        self.assertEqual(fault.hint, "first")

    def testFamilies(self):
        self.assertTrue(issubclass(InvalidCommandError, CommandLineError))
        self.assertTrue(issubclass(DuplicateOptionWarning, CommandLineWarning))
        self.assertTrue(issubclass(DuplicateOptionWarning, Warning))


class TestTrigger(TestCase):
    """Surfacing faults with trigger()."""

    def setUp(self):
        self.buffer = io.StringIO()
        self.console = Console(file=self.buffer, width=200)
        self.tool = SimpleNamespace(name="tool")

    def testErrorIsRaisedOutsideShell(self):
        fault = InvalidCommandError("invalid command specified: x", command="x")
        with self.assertRaises(InvalidCommandError) as context:
            trigger(fault, hint="run 'tool --help'")
        self.assertEqual(context.exception.command, "x")
        self.assertEqual(context.exception.hint, "run 'tool --help'")

    def testErrorIsRenderedAndExitsInShell(self):
        fault = InvalidCommandError(
            "invalid command specified: x",
            title="invalid command",
            code=FaultCode.INVALID_COMMAND,
            command="x",
            hint="run 'tool --help' to see available commands",
        )
        with self.assertRaises(SystemExit) as context:
            trigger(fault, tool=self.tool, shell=True, console=self.console)
        self.assertEqual(context.exception.code, 1)
        output = self.buffer.getvalue()
        self.assertIn("[ tool — 11101 | Invalid Command ]", output)
        self.assertIn("invalid command specified: x", output)
        self.assertIn("→ run 'tool --help' to see available commands", output)

    def testFancyRenderingKeepsTheHeader(self):
        fault = NoCommandSpecifiedError("no command", title="no command specified", code=FaultCode.NO_COMMAND_SPECIFIED)
        with self.assertRaises(SystemExit):
            trigger(fault, tool=self.tool, shell=True, fancy=True, console=self.console)
        self.assertIn("No Command Specified", self.buffer.getvalue())

    def testHostProgramName(self):
        fault = NoCommandSpecifiedError("no command", code=FaultCode.NO_COMMAND_SPECIFIED)
        with mock.patch.object(sys.modules["__main__"], "__prog__", "mytool", create=True):
            with self.assertRaises(SystemExit):
                trigger(fault, tool=self.tool, shell=True, console=self.console)
        self.assertIn("[ mytool — 11102 |", self.buffer.getvalue())

    def testWarningOutsideShell(self):
        fault = DuplicateOptionWarning("option -o collides", option="-o", existing="-o")
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            trigger(fault, hint="rename one of them")
        self.assertEqual(len(caught), 1)
        self.assertIsInstance(caught[0].message, DuplicateOptionWarning)
        self.assertEqual(caught[0].message.hint, "rename one of them")

    def testWarningInShellIsPrintedWithoutExit(self):
        fault = DuplicateOptionWarning("option -o collides", title="duplicate option", code=FaultCode.DUPLICATE_OPTION)
        trigger(fault, tool=self.tool, shell=True, console=self.console)
        self.assertIn("Duplicate Option", self.buffer.getvalue())

    def testTriggerRejectsOtherObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))


if __name__ == "__main__":
    unittest.main()
