"""
cmdline parser: registration, the argument scan, usage rendering and the runner.

What this module provides
- Parser: owns the registered commands (sorted by name) and the global options
  (sorted), with a built-in -h/--help global option.
  • parse(args) scans the argument list once and returns an outcome or raises a
    CommandLineError. It never terminates the process.
  • render_usage()/print_usage() build the full summary or a command-scoped view.
- Completed(command, inputs): the selected command has processed its inputs.
- HelpRequested(command, explicit): help was rendered instead of running a
  command; command is None for the full summary and explicit is False only when
  no arguments were supplied at all.
- invoke(parser, prompt): runner for scripts. Renders faults with rich and exits
  with status 1, and exits with parser.status after an explicit help request.

Scan rules (one token at a time, left to right)
- "--name": long option. Global options are searched first, then the selected
  command's options. REQUIRED/OPTIONAL arity consumes the next token when it does
  not start with "-"; REQUIRED fails with ArgumentMissingError otherwise.
- "-x...": short option on the second character, same resolution. When the token
  is longer than two characters, the rest is the argument (attached form, wins
  over the next token).
- anything else: the command name when no command is selected yet, otherwise a
  positional argument collected for the command.
- the help option stops the scan: with a selected command its option block is
  shown, otherwise the help option's handler shows the full summary.

Quick start
    from cmdline import Arity, Option, Parser, invoke

    parser = Parser("tool", "Does things.", "Report bugs to the tracker.")

    @parser.command("build", "Build the inputs")
    def build(inputs):
        print("building", inputs)

    build.add_option(Option("o", "output", Arity.REQUIRED, "Output file"))

    if __name__ == "__main__":
        invoke(parser)
"""
import difflib
import logging
import shlex
import sys
from collections import namedtuple
from collections.abc import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .commands import Command, command
from .faults import *
from .options import Arity, Option, OptionSet
from .rendering import Painter, command_line, option_line
from .utils import *

logger = logging.getLogger(__name__)

Completed = namedtuple("Completed", ("command", "inputs"))
HelpRequested = namedtuple("HelpRequested", ("command", "explicit"))


def _extract(option, token, attached, args, index):
    """
    Pick the argument of `option` found at args[index].

    Returns (argument_or_None, index_of_last_consumed_token).
    """
    if option.arity is Arity.NONE:
        return None, index
    if attached:
        return attached, index
    if index + 1 < len(args) and not args[index + 1].startswith("-"):
        return args[index + 1], index + 1
    if option.argument_required():
        raise ArgumentMissingError(
            "command line option %s is missing an argument" % token,
            title="missing argument",
            code=FaultCode.ARGUMENT_MISSING,
            option=token,
            hint="pass a value right after %s (for example: %s <value>)" % (token, token),
            docs=getdoc(FaultCode.ARGUMENT_MISSING),
        )
    return None, index


class Parser:
    """
    Command line parser for one application.

    Parameters
    - name: application name shown in the usage line.
    - descr: application description (optional).
    - footer: text closing every usage printout (optional).
    - colorful: apply the palette when rendering (default False).
    - fancy: wrap usage printouts in a rich Panel (default False).
    - status: exit status used by invoke() after an explicit help request (default 1).
    - console: rich Console receiving usage printouts (default: stdout console).
    """

    name = mirror("name")
    descr = mirror("descr")
    footer = mirror("footer")
    colorful = mirror("colorful")
    fancy = mirror("fancy")
    status = mirror("status")

    def __init__(
            self,
            name,
            descr=Unset,
            footer=Unset,
            /,
            *,
            colorful=False,
            fancy=False,
            status=1,
            console=Unset,
    ):
        if not isinstance(name, str):
            raise TypeError("parser 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError("parser 'name' cannot be empty")
        for label, object in (("descr", descr), ("footer", footer)):
            if not isinstance(object, str | Unset | None):
                raise TypeError(f"parser '{label}' must be a string")
        if not isinstance(status, int):
            raise TypeError("parser 'status' must be an integer")

        self._name = name
        self._descr = coalesce(descr)
        self._footer = coalesce(footer)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        self._status = status
        self._console = coalesce(console, Console())

        self._commands = {}
        self._options = OptionSet(sorted=True)
        self._longest = 0

        self._help = Option("h", "help", Arity.NONE, "Prints usage information", self._on_help)
        self.add_global_option(self._help)

    @property
    def console(self):
        return self._console

    @property
    def help(self):
        """
        The built-in -h/--help global option.
        """
        return self._help

    @property
    def commands(self):
        """
        Registered commands sorted by name.
        """
        return tuple(sorted(self._commands.values()))

    @property
    def options(self):
        """
        Global options in their sorted order (the help option included).
        """
        return tuple(self._options)

    def _on_help(self, option, argument):
        self.print_usage()

    def add_command(self, command, /):
        """
        Register a command. A second command with the same name is ignored with a
        DuplicateCommandWarning. Returns the command that ends up registered.
        """
        if not isinstance(command, Command):
            raise TypeError("add_command() argument must be a command")
        if (existing := self._commands.get(command.name)) is not None:
            trigger(DuplicateCommandWarning(
                "command %r is already registered" % command.name,
                title="duplicate command",
                code=FaultCode.DUPLICATE_COMMAND,
                command=command,
                existing=existing,
                hint="give each command a unique name",
                docs=getdoc(FaultCode.DUPLICATE_COMMAND),
            ))
            return existing
        self._commands[command.name] = command
        self._longest = max(self._longest, len(command.name))
        return command

    def add_global_option(self, option, /):
        """
        Register an option usable regardless of the selected command. A collision
        with a registered global option keeps the first one and emits
        DuplicateOptionWarning. Returns the option that ends up registered.
        """
        if not isinstance(option, Option):
            raise TypeError("add_global_option() argument must be an option")
        if (existing := self._options.add(option)) is not None:
            trigger(DuplicateOptionWarning(
                "global option %s collides with %s" % (option.label, existing.label),
                title="duplicate option",
                code=FaultCode.DUPLICATE_OPTION,
                option=option,
                existing=existing,
                hint="give each global option its own spellings",
                docs=getdoc(FaultCode.DUPLICATE_OPTION),
            ))
            return existing
        return option

    def command(self, name, descr, /, **kwargs):
        """
        Decorator building a Command from a function and registering it.

            @parser.command("build", "Build the inputs")
            def build(inputs): ...
        """
        @rename("command")
        def wrapper(callback, /):
            return self.add_command(command(name, descr, **kwargs)(callback))

        return wrapper

    def render_usage(self, command=None, /):
        """
        Build the usage printout: the full summary when command is None, otherwise
        the view scoped to `command` (its options instead of commands and globals).
        """
        paint = Painter(self._colorful)
        lines = []

        lines.append(Text.assemble(
            paint("Usage", "usage-label"),
            ": ",
            paint(self._name, "program-name"),
            " ",
            paint("<COMMAND> [OPTIONS...] [INPUT FILE]", "usage-section"),
        ))
        if self._descr:
            lines.append(paint(self._descr, "description-section"))
        lines.append(Text())

        if command is None:
            lines.append(paint("Commands:", "section-label"))
            for each in self.commands:
                lines.append(command_line(each, self._longest, paint))
            lines.append(Text())
            lines.append(paint("Global options:", "section-label"))
            for option in self._options:
                lines.append(option_line(option, self._options.longest, paint))
        else:
            lines.append(command.render_options(paint))
        lines.append(Text())

        lines.append(paint(
            "For options related to a specific command, use --help or -h as an option for the desired command.",
            "hint-section",
        ))
        if self._footer:
            lines.append(Text())
            lines.append(paint(self._footer, "footer-section"))

        renderable = Text("\n").join(lines)
        if self._fancy:
            title = self._name if command is None else "%s %s" % (self._name, command.name)
            renderable = Panel(
                renderable,
                title=Text.assemble("[", " ", f"{title} HELP".upper(), " ", "]", style=paint.style("panel-title")),
                title_align="left",
            )
        return renderable

    def print_usage(self, command=None, /):
        # plain layout is never wrapped or cropped, whatever the console width
        self._console.print(self.render_usage(command), soft_wrap=not self._fancy)

    def _resolve(self, lookup, key, command):
        # globals first, then the selected command's own options
        option = getattr(self._options, lookup)(key)
        if option is None and command is not None:
            option = getattr(command._options, lookup)(key)
        return option

    def _unrecognized(self, shown, typed, command):
        spellings = list(self._options.spellings())
        if command is not None:
            spellings.extend(command._options.spellings())
        suggestions = difflib.get_close_matches(typed, spellings, 5)
        route = self._name if command is None else "%s %s" % (self._name, command.name)
        try:
            hint = "did you mean %r? you can also run '%s --help' to see all options" % (suggestions[0], route)
        except IndexError:
            hint = "try '%s --help' to see all available options" % route
        return UnrecognizedOptionError(
            "unrecognized command line option: %s" % shown,
            title="unrecognized option",
            code=FaultCode.UNRECOGNIZED_OPTION,
            option=shown,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.UNRECOGNIZED_OPTION),
        )

    def _helped(self, command):
        if command is not None:
            logger.debug("help requested for command %r", command.name)
            self.print_usage(command)
        else:
            logger.debug("help requested for %r", self._name)
            self._help.handle(None)
        return HelpRequested(command, True)

    def parse(self, args, /):
        """
        Scan `args` (the process arguments without the program name).

        Returns
        - HelpRequested(None, False) when args is empty (full usage printed).
        - HelpRequested(command_or_None, True) when -h/--help stopped the scan.
        - Completed(command, inputs) after the selected command processed inputs.

        Raises
        - UnrecognizedOptionError, ArgumentMissingError, InvalidArgumentError,
          InvalidCommandError, NoCommandSpecifiedError. The scan stops at the first
          fault; handlers that already ran are not undone.
        """
        if isinstance(args, str) or not isinstance(args, Iterable):
            raise TypeError("parse() argument must be an iterable of strings")
        args = list(args)
        for arg in args:
            if not isinstance(arg, str):
                raise TypeError("parse() argument must be an iterable of strings")

        if not args:
            self.print_usage()
            return HelpRequested(None, False)

        command = None
        inputs = []

        index = 0
        while index < len(args):
            token = args[index]

            if token.startswith("--"):
                name = token[2:]
                option = self._resolve("long", name, command)
                if option is self._help:
                    return self._helped(command)
                if option is None:
                    raise self._unrecognized(name, token, command)
                argument, index = _extract(option, token, None, args, index)
                logger.debug("option %s resolved with argument %r", option.label, argument)
                option.handle(argument)
            elif token.startswith("-"):
                option = self._resolve("short", token[1:2], command) if len(token) > 1 else None
                if option is self._help:
                    return self._helped(command)
                if option is None:
                    raise self._unrecognized(token, token, command)
                argument, index = _extract(option, token, token[2:], args, index)
                logger.debug("option %s resolved with argument %r", option.label, argument)
                option.handle(argument)
            elif command is not None:
                inputs.append(token)
            else:
                try:
                    command = self._commands[token]
                except KeyError:
                    suggestions = difflib.get_close_matches(token, self._commands.keys(), 5)
                    try:
                        hint = "did you mean %r? you can also run '%s --help' to see available commands" % (
                            suggestions[0], self._name
                        )
                    except IndexError:
                        hint = "run '%s --help' to see available commands" % self._name
                    raise InvalidCommandError(
                        "invalid command specified: %s" % token,
                        title="invalid command",
                        code=FaultCode.INVALID_COMMAND,
                        command=token,
                        suggestions=suggestions,
                        hint=hint,
                        docs=getdoc(FaultCode.INVALID_COMMAND),
                    ) from None
                logger.debug("command %r selected", token)

            index += 1

        if command is None:
            raise NoCommandSpecifiedError(
                "no command was specified on the command line",
                title="no command specified",
                code=FaultCode.NO_COMMAND_SPECIFIED,
                hint="run '%s --help' to see available commands" % self._name,
                docs=getdoc(FaultCode.NO_COMMAND_SPECIFIED),
            )

        logger.debug("processing command %r with %d input(s)", command.name, len(inputs))
        command.process(inputs)
        return Completed(command, inputs)

    def __invoke__(self, prompt=Unset):
        """
        Parse a prompt the way a script entry point would.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence (kept verbatim).

        Behavior
        - faults are rendered with rich on stderr, then the process exits with 1.
        - an explicit help request exits with self.status.
        - any other outcome is returned.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            for token in tokens:
                if not isinstance(token, str):
                    raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        try:
            outcome = self.parse(tokens)
        except CommandLineError as fault:
            trigger(fault, tool=self, shell=True, fancy=self._fancy, colorful=self._colorful)
            raise  # trigger() exits in shell mode

        if isinstance(outcome, HelpRequested) and outcome.explicit:
            sys.exit(self._status)
        return outcome


def invoke(object, prompt=Unset, /):
    """
    Convenience runner: call object.__invoke__(prompt).

    Raises
    - TypeError when `object` does not implement __invoke__.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "Parser",
    "Completed",
    "HelpRequested",
    "invoke",
)
