"""
cmdline faults (errors and warnings) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue.
- CommandLineError / CommandLineWarning: base types carrying a message plus an
  immutable options mapping (title, code, hint and the offending payload).
- trigger(): single entry point to surface a fault (raise, warn, or render and exit).
- getdoc(): optional documentation lookup for a code from the host application.

Error kinds raised by the parser
- UnrecognizedOptionError: option token matches neither global nor command options.
- ArgumentMissingError: a required argument is absent or looks like an option.
- InvalidArgumentError: a validator rejected the supplied argument.
- InvalidCommandError: the first plain token is not a registered command.
- NoCommandSpecifiedError: arguments were given but no command was selected.

Warnings raised at registration time
- DuplicateOptionWarning / DuplicateCommandWarning: the first registration wins.

Integration
- Parser.parse() raises faults directly; invoke() surfaces them with
  trigger(fault, shell=True, ...) so they are rendered with rich on stderr and the
  process exits with status 1.
- Hosts may expose __codes__, __docs__, __prog__ and __styles__ in __main__.
"""
import copy
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce, rename

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (1110x): INVALID_COMMAND, NO_COMMAND_SPECIFIED
    - switches (1111x): UNRECOGNIZED_OPTION, ARGUMENT_MISSING, INVALID_ARGUMENT
    - registration warnings (1211x): DUPLICATE_OPTION, DUPLICATE_COMMAND
    """
    # --- routing errors ---
    INVALID_COMMAND         = 11101
    NO_COMMAND_SPECIFIED    = 11102

    # --- option errors ---
    UNRECOGNIZED_OPTION     = 11111
    ARGUMENT_MISSING        = 11112
    INVALID_ARGUMENT        = 11113

    # --- warnings ---
    DUPLICATE_OPTION        = 12111
    DUPLICATE_COMMAND       = 12112

    def normalize(self):
        """
        return a host-normalized label for this code.

        a __codes__ mapping in __main__ may override the numeric id; otherwise
        the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _payload(name, /):
    # read-only view over one entry of the fault options
    @rename(name)
    def getter(self):
        return self.options.get(name)
    return property(getter)


def _render(fault, palette, title_style, message_style):
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", False)
    fancy = options.get("fancy", False)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    tool = options.get("tool")
    prog = text(getattr(main, "__prog__", tool.name if tool is not None else "cmdline"), styler("prog-name"))
    code = options.get("code")

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(code.normalize() if code is not None else "-", styler("code")),
        " | ",
        text(str(options.get("title", type(fault).__name__)).title(), styler(title_style)),
        " ]"
    )
    message = text(fault.message, styler(message_style))
    parts = [message]
    if hint := options.get("hint"):
        parts.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    if fancy:
        return Panel(Group(*parts), title=header, title_align="left")
    return Group(header, *parts)


class CommandLineError(Exception):
    """
    base class for every parse failure.

    the message is the human sentence; everything else (title, code, hint and the
    offending payload such as option/argument/command) lives in `options`.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    title = _payload("title")
    code = _payload("code")
    hint = _payload("hint")

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "error-message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        }, "error-title", "error-message")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        self.options.get("console", console).print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnrecognizedOptionError(CommandLineError):
    option = _payload("option")
    suggestions = _payload("suggestions")


class ArgumentMissingError(CommandLineError):
    option = _payload("option")


class InvalidArgumentError(CommandLineError):
    argument = _payload("argument")
    option = _payload("option")


class InvalidCommandError(CommandLineError):
    command = _payload("command")
    suggestions = _payload("suggestions")


class NoCommandSpecifiedError(CommandLineError): ...


class CommandLineWarning(Warning):
    """
    base class for registration-time warnings (non-fatal).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType(options)

    title = _payload("title")
    code = _payload("code")
    hint = _payload("hint")

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "warning-title": "bold #FFC2E0",
            "warning-message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        }, "warning-title", "warning-message")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            # user code -> registration method -> trigger() -> here
            return warnings.warn(self, stacklevel=4)
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DuplicateOptionWarning(CommandLineWarning):
    option = _payload("option")
    existing = _payload("existing")


class DuplicateCommandWarning(CommandLineWarning):
    command = _payload("command")
    existing = _payload("existing")


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see the base classes).
    - options are merged into a copy of the fault via copy.replace() first.
    - outside shell mode errors are raised and warnings go through warnings.warn;
      in shell mode both are printed with rich and errors exit with status 1.

    typical options
    - tool, shell, fancy, colorful, console, title, code, hint, docs.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation for a fault code, read from __docs__ in __main__.
    returns None when the host provides nothing.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "CommandLineError",
    "UnrecognizedOptionError",
    "ArgumentMissingError",
    "InvalidArgumentError",
    "InvalidCommandError",
    "NoCommandSpecifiedError",
    "CommandLineWarning",
    "DuplicateOptionWarning",
    "DuplicateCommandWarning",
    "trigger",
    "getdoc",
)
