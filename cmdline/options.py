r"""
cmdline option descriptors and the option registry.

Overview
- Arity
  • NONE: a presence-only switch (e.g., -v/--verbose).
  • OPTIONAL: the switch may carry one argument (e.g., --color [WHEN]).
  • REQUIRED: the switch must carry one argument (e.g., -o FILE, -oFILE).

- Option
  • Single switch with an optional short spelling (one character, written "-x")
    and an optional long spelling (written "--name"); at least one is required.
  • Carries a description (mandatory), an optional validator (predicate over the
    raw argument string) and an optional handler (called with the option and the
    argument, or None when no argument was given).
  • Equality is a similarity relation: two options are equal when they share a
    short spelling OR a long spelling. The relation is not transitive, so options
    are deliberately unhashable.
  • Ordering: short spellings when both have one, else long spellings, else the
    short character against the first character of the other's long spelling;
    on a tie in that mixed case the option holding the short spelling goes first.

- OptionSet
  • Ordered registry backed by two maps (short → option, long → option) unioned
    at lookup time, plus the display order (insertion or sorted).
  • Tracks the longest long spelling for help alignment.

- option(...)
  • Decorator building an Option and binding the decorated function as its handler.

Quick example:
    >>> from cmdline.options import Arity, option
    >>> @option("o", "output", Arity.REQUIRED, "Output file")
    ... def on_output(option, argument): ...
"""
import bisect
import re
from enum import IntEnum

from .faults import FaultCode, InvalidArgumentError, getdoc
from .utils import *


class Arity(IntEnum):
    """
    whether an option takes no argument, an optional one, or a required one.
    """
    NONE = 0
    OPTIONAL = 1
    REQUIRED = 2


def _sanitize_spellings(cls, metadata, /):
    """
    Internal: validate and normalize the short and long spellings.

    - short: None/Unset or exactly one character that is neither '-' nor whitespace.
    - long: None/Unset or a non-empty string without whitespace that does not
      start with '-' (the dashes are added by the parser, not stored).
    - at least one of both must remain.

    Raises
    - TypeError: non-string spellings, or both spellings missing.
    - ValueError: malformed spellings.
    """
    short = metadata["short"] = coalesce(metadata["short"])
    long = metadata["long"] = coalesce(metadata["long"])

    if short is None and long is None:
        raise TypeError(f"{cls.__typename__} must specify a short or a long spelling")

    if short is not None:
        if not isinstance(short, str):
            raise TypeError(f"{cls.__typename__} 'short' must be a string")
        if len(short) != 1 or short == "-" or short.isspace():
            raise ValueError(f"{cls.__typename__} 'short' must be a single non-dash character")

    if long is not None:
        if not isinstance(long, str):
            raise TypeError(f"{cls.__typename__} 'long' must be a string")
        if not long or long.startswith("-") or re.search(r"\s", long):
            raise ValueError(f"{cls.__typename__} 'long' must be a non-empty name without dashes prefix or spaces")


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate arity, description and the two callables.
    """
    arity = metadata["arity"]
    if isinstance(arity, str):
        try:
            arity = Arity[arity.strip().upper()]
        except KeyError:
            raise ValueError(f"{cls.__typename__} 'arity' must be one of 'none', 'optional' or 'required'") from None
    try:
        metadata["arity"] = Arity(arity)
    except ValueError:
        raise ValueError(f"{cls.__typename__} 'arity' must be one of 'none', 'optional' or 'required'") from None

    if not isinstance(descr := metadata["descr"], str):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = descr

    for name in ("validator", "handler"):
        metadata[name] = coalesce(metadata[name])
        if metadata[name] is not None and not callable(metadata[name]):
            raise TypeError(f"{cls.__typename__} '{name}' must be callable")


def _compare(this, that, /):
    if this._short is not None and that._short is not None:
        a, b = this._short, that._short
    elif this._long is not None and that._long is not None:
        a, b = this._long, that._long
    elif this._short is not None:
        a, b = this._short, that._long[0]
        if a == b:
            return -1
    else:
        a, b = this._long[0], that._short
        if a == b:
            return 1
    return (a > b) - (a < b)


class Option(metaclass=IntrospectableType):
    """
    Named switch specification.

    Properties
    - short, long, arity, descr, validator, handler (read-only; use the setters
      for validator/handler).
    - label: rendered spellings, e.g. "-o, --output", "-v" or "--dry-run".
    """

    __introspectable__ = (
        "short",
        "long",
        "arity",
        "descr",
        "validator",
        "handler",
    )

    def __new__(
            cls,
            short=Unset,
            long=Unset,
            /,
            arity=Arity.NONE,
            descr=Unset,
            handler=Unset,
            *,
            validator=Unset,
    ):
        """
        Construct an Option.

        Parameters
        - short: Unset | None | str
          Single character used as "-x". Omit or pass None when there is none.
        - long: Unset | None | str
          Name used as "--name". Omit or pass None when there is none.
        - arity: Arity | int | "none" | "optional" | "required"
        - descr: str
          Mandatory help text.
        - handler: Unset | None | Callable[[Option, str | None], Any]
        - validator: Unset | None | Callable[[str], bool]

        Raises
        - TypeError / ValueError on any violated invariant.
        """
        metadata = {
            "short": short,
            "long": long,
            "arity": arity,
            "descr": descr,
            "validator": validator,
            "handler": handler,
        }
        _sanitize_spellings(cls, metadata)
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def label(self):
        return ", ".join(spelling for spelling in (
            "-" + self._short if self._short is not None else None,
            "--" + self._long if self._long is not None else None,
        ) if spelling)

    def argument_required(self):
        return self._arity is Arity.REQUIRED

    def argument_optional(self):
        return self._arity is Arity.OPTIONAL

    def set_validator(self, validator, /):
        """
        Install (or clear with None) the argument validator.

        The validator runs before the handler, only when an argument is present
        and the option takes one. A falsy result fails the parse with
        InvalidArgumentError. Returns the validator so it can be used as a
        decorator.
        """
        if validator is not None and not callable(validator):
            raise TypeError("set_validator() argument must be callable or None")
        self._validator = validator
        return validator

    def set_handler(self, handler, /):
        """
        Install (or clear with None) the handler called as handler(option, argument).
        Returns the handler so it can be used as a decorator.
        """
        if handler is not None and not callable(handler):
            raise TypeError("set_handler() argument must be callable or None")
        self._handler = handler
        return handler

    def handle(self, argument=None, /):
        """
        Validate then dispatch one occurrence of this option.

        - argument is not None and arity is OPTIONAL or REQUIRED and a validator is
          installed: a falsy verdict raises InvalidArgumentError.
        - then, if a handler is installed, call handler(self, argument).

        An argument given to a NONE-arity option is not rejected here; the parser
        never extracts one for such options.
        """
        if argument is not None and self._arity is not Arity.NONE:
            if self._validator is not None and not self._validator(argument):
                raise InvalidArgumentError(
                    "invalid argument %r for option %s" % (argument, self.label),
                    title="invalid argument",
                    code=FaultCode.INVALID_ARGUMENT,
                    argument=argument,
                    option=self,
                    hint="check the accepted values for %s" % self.label,
                    docs=getdoc(FaultCode.INVALID_ARGUMENT),
                )
        if self._handler is not None:
            self._handler(self, argument)

    def __eq__(self, other):
        if not isinstance(other, Option):
            return NotImplemented
        return (
            (self._short is not None and self._short == other._short) or
            (self._long is not None and self._long == other._long)
        )

    # equality is a similarity relation, no consistent hash exists
    __hash__ = None

    def __lt__(self, other):
        if not isinstance(other, Option):
            return NotImplemented
        return _compare(self, other) < 0

    def __le__(self, other):
        if not isinstance(other, Option):
            return NotImplemented
        return _compare(self, other) <= 0

    def __gt__(self, other):
        if not isinstance(other, Option):
            return NotImplemented
        return _compare(self, other) > 0

    def __ge__(self, other):
        if not isinstance(other, Option):
            return NotImplemented
        return _compare(self, other) >= 0


class OptionSet:
    """
    Ordered option registry with lookup by either spelling.

    - sorted=False keeps insertion order (command options in help text).
    - sorted=True keeps Option ordering (global options in help text).

    add() never replaces: when the new option is equal to a registered one (shares
    a spelling), the registered option is returned and nothing changes.
    """

    def __init__(self, *, sorted=False):
        self._sorted = bool(sorted)
        self._options = []
        self._shorts = {}
        self._longs = {}
        self._longest = 0

    @property
    def longest(self):
        """
        Length of the longest long spelling (without dashes), 0 when none.
        """
        return self._longest

    def add(self, option, /):
        """
        Register `option`. Returns None on success, or the colliding option.
        """
        if not isinstance(option, Option):
            raise TypeError("OptionSet.add() argument must be an option")
        if (existing := self.find(option)) is not None:
            return existing

        if self._sorted:
            bisect.insort(self._options, option)
        else:
            self._options.append(option)

        if option.short is not None:
            self._shorts[option.short] = option
        if option.long is not None:
            self._longs[option.long] = option
            self._longest = max(self._longest, len(option.long))
        return None

    def find(self, option, /):
        """
        Return the registered option equal to `option` (shared spelling), else None.
        """
        if option.short is not None and option.short in self._shorts:
            return self._shorts[option.short]
        if option.long is not None and option.long in self._longs:
            return self._longs[option.long]
        return None

    def short(self, character, /):
        """
        Exact lookup by short spelling (the character after "-").
        """
        return self._shorts.get(character)

    def long(self, name, /):
        """
        Exact lookup by long spelling (the text after "--").
        """
        return self._longs.get(name)

    def spellings(self):
        """
        Every registered spelling with its dashes, in display order.
        """
        for option in self._options:
            if option.short is not None:
                yield "-" + option.short
            if option.long is not None:
                yield "--" + option.long

    def __iter__(self):
        return iter(tuple(self._options))

    def __len__(self):
        return len(self._options)

    def __bool__(self):
        return bool(self._options)

    def __contains__(self, option):
        return isinstance(option, Option) and self.find(option) is not None

    def __repr__(self):
        return "option-set(%s)" % ", ".join(option.label for option in self._options)


def option(short=Unset, long=Unset, /, arity=Arity.NONE, descr=Unset, *, validator=Unset):
    """
    Decorator/factory binding a handler to a new Option.

    Usage
        @option("o", "output", Arity.REQUIRED, "Output file")
        def on_output(option, argument): ...

    The decorator returns the Option (not the function). It may be applied only
    once and refuses non-callables. The handler is the decorated function, so
    there is no handler parameter.
    """
    option = Option(short, long, arity, descr, validator=validator)

    @rename("option")
    def wrapper(handler, /):
        if not callable(handler):
            raise TypeError("@option() must be applied to a callable")
        if option._handler is not None:
            raise TypeError("@option() must be applied only once")
        option._handler = handler
        return option

    return wrapper


__all__ = (
    "Arity",
    "Option",
    "OptionSet",
    "option",
)
