r"""
argotype argument records (the leaves of a specification).

Overview
- Positional: a value assigned by position; required or optional.
- Extra: the variadic sink that collects positional values past the declared list.
- Option: a named switch with an optional one-letter short alias and a cardinality:
  • "boolean": presence only (no value, no conversion function).
  • "scalar":  exactly one value per occurrence.
  • "list":    every occurrence appends one value.

Records are immutable: every field is published through a read-only property (see
SpecificationType in argotype.utils). They validate themselves on construction; rules
that involve more than one record (duplicates, ordering) live in the specification
builders of argotype.commands.

Validation highlights
- short aliases match r"[A-Za-z0-9_]" (exactly one character).
- long names match r"[A-Za-z0-9_-]+".
- positional/extra names match r"\S+".
- conversion functions must be callable; boolean options take none.
- descriptions must be strings (surrounding whitespace is trimmed).

Quick example:
    >>> from argotype.arguments import Positional, Option
    >>> Positional("count", "how many", type=int)
    positional(name='count', descr='how many', type=<class 'int'>, required=True)
    >>> Option("C", "cwd", "change directory", "scalar").short
    'C'
"""
import re

from .faults import SpecificationError
from .utils import *

SHORT_PATTERN = r"[A-Za-z0-9_]"
LONG_PATTERN = r"[A-Za-z0-9_-]+"

CARDINALITIES = ("boolean", "scalar", "list")


def _sanitize_descr(cls, descr, /):
    """
    Internal: descriptions are mandatory strings; surrounding whitespace is dropped.
    """
    if not isinstance(descr, str):
        raise SpecificationError(f"{cls.__typename__} 'descr' must be a string")
    return descr.strip()


def _sanitize_name(cls, name, /):
    if not isinstance(name, str):
        raise SpecificationError(f"{cls.__typename__} 'name' must be a string")
    if not re.fullmatch(r"\S+", name):
        raise SpecificationError(f"{cls.__typename__} name {name!r} must be a non-empty string without whitespace")
    return name


def _sanitize_type(cls, type, /):
    if not callable(type):
        raise SpecificationError(f"{cls.__typename__} 'type' must be callable")
    return type


class Positional(metaclass=SpecificationType):
    """
    Positional parameter: filled in declaration order, converted by its 'type'.
    """

    __introspectable__ = (
        "name",
        "descr",
        "type",
        "required",
    )

    def __new__(cls, name, descr="", /, type=str, required=True):
        self = super().__new__(cls)
        self._name = _sanitize_name(cls, name)
        self._descr = _sanitize_descr(cls, descr)
        self._type = _sanitize_type(cls, type)
        self._required = bool(required)
        return self

    @property
    def label(self):
        """
        "<name>" for required parameters, "[name]" for optional ones.
        """
        return f"<{self._name}>" if self._required else f"[{self._name}]"


class Extra(metaclass=SpecificationType):
    """
    Variadic sink: receives, converted, every positional value past the declared ones.
    """

    __introspectable__ = (
        "name",
        "descr",
        "type",
    )

    def __new__(cls, name, descr="", /, type=str):
        self = super().__new__(cls)
        self._name = _sanitize_name(cls, name)
        self._descr = _sanitize_descr(cls, descr)
        self._type = _sanitize_type(cls, type)
        return self

    @property
    def label(self):
        return f"[...{self._name}]"


class Option(metaclass=SpecificationType):
    """
    Named option.

    Parameters
    - short: str | None
      One character from [A-Za-z0-9_], or None for a long-only option.
    - long: str
      One or more characters from [A-Za-z0-9_-]; the key of the option in parse results.
    - descr: str
      Help text.
    - cardinality: "boolean" | "scalar" | "list" (default "boolean")
    - type: Callable[[str], T] (keyword)
      Conversion function for scalar/list options (identity when omitted). Passing one
      for a boolean option is rejected.
    """

    __introspectable__ = (
        "short",
        "long",
        "descr",
        "cardinality",
        "type",
    )

    def __new__(cls, short, long, descr="", cardinality="boolean", /, type=Unset):
        if short is not None:
            if not isinstance(short, str):
                raise SpecificationError(f"{cls.__typename__} short option must be a string or None")
            if len(short) != 1:
                raise SpecificationError(f"{cls.__typename__} short option {short!r} must be a single letter")
            if not re.fullmatch(SHORT_PATTERN, short):
                raise SpecificationError(
                    f"{cls.__typename__} short option {short!r} must be a single letter from a-z, A-Z, 0-9 or '_'"
                )

        if not isinstance(long, str):
            raise SpecificationError(f"{cls.__typename__} long option must be a string")
        if not long:
            raise SpecificationError(f"{cls.__typename__} long option must be a non-empty string")
        if not re.fullmatch(LONG_PATTERN, long):
            raise SpecificationError(
                f"{cls.__typename__} long option {long!r} must be a string of letters from a-z, A-Z, 0-9, '_' or '-'"
            )

        if cardinality not in CARDINALITIES:
            raise SpecificationError(
                f"{cls.__typename__} {long!r} cardinality must be one of 'boolean', 'scalar' or 'list'"
            )
        if cardinality == "boolean" and type is not Unset:
            raise SpecificationError(f"{cls.__typename__} boolean option {long!r} cannot take a conversion function")

        self = super().__new__(cls)
        self._short = short
        self._long = long
        self._descr = _sanitize_descr(cls, descr)
        self._cardinality = cardinality
        self._type = Unset if cardinality == "boolean" else _sanitize_type(cls, coalesce(type, str))
        return self

    @property
    def boolean(self):
        return self._cardinality == "boolean"

    @property
    def label(self):
        """
        Help-column label, e.g. "-C, --cwd <value>" or "    --dry-run".
        """
        prefix = f"-{self._short}, " if self._short else "    "
        suffix = "" if self.boolean else " <value>"
        return f"{prefix}--{self._long}{suffix}"

    def __str__(self):
        """
        Quoted form used in fault messages: "'--cwd' (-C)" or "'--dry-run'".
        """
        return f"'--{self._long}'" + (f" (-{self._short})" if self._short else "")


__all__ = (
    "Positional",
    "Extra",
    "Option",
    "CARDINALITIES",
)
