"""
cmdline utilities (small helpers shared by options, commands and the parser)

Overview
- Unset: "not provided" sentinel, distinct from None (None is a valid "no
  argument" value for option handlers). Falsy, prints as "Unset".
- coalesce(value, default=None): materialize Unset, keep None/""/0 untouched.
- @rename("name"): stable __name__/__qualname__ for generated callables.
- mirror("attr"): read-only property over self._attr.
- IntrospectableType: metaclass behind Option and Command (typename, mirrored
  fields, __repr__/__rich_repr__).
"""
import functools
import operator
import re
from typing import final


@final
class UnsetType:
    """
    Type of the Unset sentinel. A single instance exists per process.
    """

    def __ror__(self, other, /):
        # str | Unset in isinstance checks
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()
"""
The "not provided" sentinel. Use coalesce(value, default) to materialize it.
"""


def coalesce(object, default=None, /):
    """
    Return `object` unless it is Unset, in which case return `default`.
    """
    return object if object is not Unset else default


def rename(name, /):
    """
    Decorator assigning __name__ and __qualname__ on a callable.
    """
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def wrapper(function):
        if not callable(function):
            raise TypeError("@rename() must be applied to a callable")
        function.__qualname__ = function.__name__ = name
        return function

    return wrapper


def mirror(name, /):
    """
    Build a read-only property that exposes `self._<name>`.

        >>> class X:
        ...     _label = "x"
        ...     label = mirror("label")
        >>> X().label
        'x'
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return getattr(self, "_" + name)

    return property(getter)


class IntrospectableType(type):
    """
    Metaclass wiring read-only fields and stable representations.

    - __typename__ is derived from the class name ("Option" → "option")
      and used in construction errors.
    - every name in __introspectable__ becomes a property over "_<name>".
    - __repr__/__rich_repr__ list __displayable__ when set, otherwise
      __introspectable__.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",
    "IntrospectableType",

    # Constants
    "Unset",
)
