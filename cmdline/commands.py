"""
cmdline command layer: named units of work selected on the command line.

What this module provides
- Command: a name, a description, an insertion-ordered set of options and a
  processing callback. The callback receives the positional arguments (input
  files) collected after the command token, exactly once, after every option on
  the command line has been handled.
- command(...): create a Command from a function, directly or as a decorator.

Core ideas
- The processing capability is injected at construction (a stored function), not
  supplied by subclassing.
- Commands compare and hash by name; the name is the unique key on the command line.
- Options keep the order they were added in; that order is the help order.
- Registering an option that shares a spelling with an existing one keeps the
  first registration and emits DuplicateOptionWarning.

Quick start
    from cmdline import Arity, Option, command

    @command("build", "Build the inputs")
    def build(inputs):
        print("building", inputs)

    build.add_option(Option("o", "output", Arity.REQUIRED, "Output file"))
"""
import functools
import re

from rich.console import Console
from rich.text import Text

from .faults import DuplicateOptionWarning, FaultCode, getdoc, trigger
from .options import Option, OptionSet
from .rendering import Painter, option_line
from .utils import *


@functools.total_ordering
class Command(metaclass=IntrospectableType):
    """
    Command selected by its name on the command line.

    Properties
    - name, descr, callback: read-only.
    - options: tuple of the command's options in insertion order.
    - longest: length of the longest long spelling among its options.
    """

    __introspectable__ = (
        "name",
        "descr",
        "callback",
    )
    __displayable__ = __introspectable__ + ("options",)

    def __new__(cls, name, descr, callback=Unset, /, options=()):
        """
        Construct a Command.

        Parameters
        - name: str
          Non-empty token without whitespace that selects the command.
        - descr: str
          Non-empty description for the command summary.
        - callback: Unset | Callable[[list[str]], Any]
          Processing capability, called with the positional arguments.
        - options: Iterable[Option]
          Options registered right away, in order (see add_option).
        """
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not name or re.search(r"\s", name) or name.startswith("-"):
            raise ValueError(f"{cls.__typename__} 'name' must be a non-empty token not starting with '-'")

        if not isinstance(descr, str):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        elif not (descr := descr.strip()):
            raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")

        if (callback := coalesce(callback)) is not None and not callable(callback):
            raise TypeError(f"{cls.__typename__} 'callback' must be callable")

        self = super().__new__(cls)
        self._name = name
        self._descr = descr
        self._callback = callback
        self._options = OptionSet()

        for option in options:
            self.add_option(option)
        return self

    @property
    def options(self):
        return tuple(self._options)

    @property
    def longest(self):
        return self._options.longest

    def add_option(self, option, /):
        """
        Add an option scoped to this command.

        A collision (shared short or long spelling) keeps the first option and
        emits DuplicateOptionWarning. Returns the option that ends up registered.
        """
        if not isinstance(option, Option):
            raise TypeError("add_option() argument must be an option")
        if (existing := self._options.add(option)) is not None:
            trigger(DuplicateOptionWarning(
                "option %s collides with %s already registered on command %r" % (option.label, existing.label, self._name),
                title="duplicate option",
                code=FaultCode.DUPLICATE_OPTION,
                option=option,
                existing=existing,
                hint="give each option of %r its own spellings" % self._name,
                docs=getdoc(FaultCode.DUPLICATE_OPTION),
            ))
            return existing
        return option

    def render_options(self, paint=Unset, /):
        """
        Build the option block shown in the command-scoped help.

            Options for "build" command:
              -o, --output    Output file
        """
        paint = coalesce(paint, Painter())
        lines = [Text.assemble(paint('Options for "%s" command:' % self._name, "section-label"))]
        if not self._options:
            lines.append(Text("  No options supported."))
        for option in self._options:
            lines.append(option_line(option, self.longest, paint))
        return Text("\n").join(lines)

    def print_options(self, console=Unset, /):
        coalesce(console, Console()).print(self.render_options(), soft_wrap=True)

    def process(self, inputs, /):
        """
        Run the processing callback with the positional arguments.

        Without a callback this is a no-op returning None.
        """
        if self._callback is None:
            return None
        return self._callback(inputs)

    def __eq__(self, other):
        if not isinstance(other, Command):
            return NotImplemented
        return self._name == other._name

    def __lt__(self, other):
        if not isinstance(other, Command):
            return NotImplemented
        return self._name < other._name

    def __hash__(self):
        return hash(self._name)


def command(name, descr, /, *args, **kwargs):
    """
    Create a Command from a processing function.

    Invocation modes
    - Direct:
        build = command("build", "Build the inputs", on_build)
    - Decorator:
        @command("build", "Build the inputs")
        def build(inputs): ...

    Extra keyword arguments (options=...) are forwarded to Command.
    """
    if args:
        return Command(name, descr, *args, **kwargs)

    @rename("command")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@command() must be applied to a callable")
        return Command(name, descr, callback, **kwargs)

    return wrapper


__all__ = (
    "Command",
    "command",
)
