"""
Utilities behavioral tests (sentinel, coalesce, rename, mirror, metaclass).

Scope
- Validate the Unset sentinel: singleton, falsy, unions, sealed.
- Validate coalesce() keeps falsy values other than Unset.
- Validate @rename and mirror() (read-only, hands out the stored object).
- Validate IntrospectableType: typename, mirrored fields, displayable override.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from cmdline.utils import IntrospectableType, Unset, UnsetType, coalesce, mirror, rename


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testUsableInUnions(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", str | Unset)
        self.assertNotIsInstance(3, str | Unset)

    def testSealed(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})


class TestCoalesce(TestCase):
    """Behavioral tests for coalesce()."""

    def testUnsetTakesDefault(self):
        self.assertEqual(coalesce(Unset, "x"), "x")
        self.assertIsNone(coalesce(Unset))

    def testFalsyValuesKept(self):
        self.assertIsNone(coalesce(None, "x"))
        self.assertEqual(coalesce("", "x"), "")
        self.assertEqual(coalesce(0, 1), 0)


class TestRename(TestCase):
    """Behavioral tests for @rename."""

    def testAssignsNames(self):
        @rename("visible")
        def hidden():
            pass

        self.assertEqual(hidden.__name__, "visible")
        self.assertEqual(hidden.__qualname__, "visible")

    def testRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(3)
        with self.assertRaises(TypeError):
            rename("name")(42)


class TestMirror(TestCase):
    """Behavioral tests for mirror()."""

    def setUp(self):
        class Holder:
            label = mirror("label")

            def __init__(self, label):
                self._label = label

        self.Holder = Holder

    def testExposesStoredObject(self):
        stored = ("a", "b")
        self.assertIs(self.Holder(stored).label, stored)

    def testReadOnly(self):
        holder = self.Holder("x")
        with self.assertRaises(AttributeError):
            holder.label = "y"

    def testRejectsNonStringName(self):
        with self.assertRaises(TypeError):
            mirror(3)


class TestIntrospectableType(TestCase):
    """Behavioral tests for the shared metaclass."""

    def testTypenameAndFields(self):
        class BuildStep(metaclass=IntrospectableType):
            __introspectable__ = ("name",)

            def __init__(self, name):
                self._name = name

        step = BuildStep("compile")
        self.assertEqual(BuildStep.__typename__, "build-step")
        self.assertEqual(step.name, "compile")
        self.assertEqual(repr(step), "build-step(name='compile')")

    def testDisplayableOverridesRepr(self):
        class Step(metaclass=IntrospectableType):
            __introspectable__ = ("name",)
            __displayable__ = ("name", "size")

            def __init__(self, name):
                self._name = name

            @property
            def size(self):
                return len(self._name)

        self.assertEqual(repr(Step("ab")), "step(name='ab', size=2)")


if __name__ == "__main__":
    unittest.main()
