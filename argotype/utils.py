"""
argotype utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the specification, parsing and formatting layers.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the arguments/commands modules.

Overview
- UnsetType / Unset
  • Singleton sentinel for “not provided”, distinct from None (None can be a real value,
    e.g. a conversion function returning None for an empty string).

- coalesce(value, default=None)
  • Replace Unset with a concrete default; every other value, falsey or not, is kept.

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated closures (help renderers, runners).

- mirror("attr")
  • Read-only property over a private backing field (self._attr) that hands out frozen
    views: tuples for sequences, MappingProxyType for mappings, frozensets for sets.

- ordinal(number)
  • “first”, “second”, …, “11th”, “22nd”: position-first wording used in fault messages.

- SpecificationType
  • Metaclass shared by the specification records: derives __typename__, publishes the
    names in __introspectable__ as mirrored properties and gives stable __repr__/__rich_repr__.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
    >>> ordinal(2), ordinal(12), ordinal(23)
    ('second', '12th', '23rd')
"""
import builtins
import functools
import operator
import re
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Sentinel type representing a value that was not provided.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset".
    - Non-subclassable and a per-process singleton.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
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

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Returns
    - object, if object is not Unset (None, 0, "" and [] are preserved).
    - default, if object is Unset.
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator that will.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - @rename(name)          -> decorator

    Notes
    - Purely cosmetic: tracebacks and reprs of generated closures (help renderers,
      runners bound to a specification) read as intended instead of '<locals>' noise.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _freeze(object):
    """
    Shallow read-only view of a container; other objects are returned as-is.

    - Sequence (non-string) → tuple
    - Mapping → MappingProxyType (live view over the backing dict)
    - Set → frozenset
    """
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    elif isinstance(object, Mapping):
        return object if isinstance(object, MappingProxyType) else MappingProxyType(object)
    elif isinstance(object, Set):
        return frozenset(object)
    return coalesce(object)


def mirror(name, /):
    """
    Define a read-only property that mirrors the private backing attribute "_{name}".

    Containers are handed out as frozen views (see _freeze), so specification records
    stay immutable from the outside even though they are assembled from plain dicts
    and lists; Unset backing values surface as None.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with English suffixes ("11th", "21st", "112th").
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, 113th, …)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


class SpecificationType(type):
    """
    Metaclass for the immutable specification records.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens), used as
      the subject of every build-time error message ("command-specification ...").
    - Publish every name listed in __introspectable__ as a read-only property over the
      matching private field (see mirror()).
    - Provide stable __repr__/__rich_repr__ (fields from __displayable__ when set,
      otherwise __introspectable__).

    Records never change after construction: builders produce new records through
    __replace__, which copies the private fields and applies the overrides.
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
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
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
    "ordinal",

    # Types
    "UnsetType",
    "SpecificationType",

    # Constants
    "Unset",
)
