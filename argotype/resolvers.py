"""
Option and positional resolution.

Both resolvers are created fresh for every invocation and hold all per-run state,
so built specifications stay immutable and re-entrant.

OptionResolver
- long options: '--name' / '--name=value'
- short clusters: '-abc' resolved letter by letter; a value-bearing letter takes the
  rest of the cluster ('-Cdir') or, when it is the last letter, the next token ('-C dir')
- cardinality: boolean → True, scalar → converted value, list → list of converted values
- duplicate policy: repeated boolean/scalar options fail unless duplicates are allowed
  (then boolean stays True and the last scalar wins); lists always append
- built-in signals: options listed in 'signals' call their handler (which raises
  HelpRequested/VersionRequested) as soon as they are resolved

PositionalResolver
- fills declared positionals in order, then the extra sink, else fails
- checks the required count once scanning is done

Failures are raised through the 'fault' factory handed in by the runner, which binds
them to the help renderer and the name path of the running command/group.
"""
import difflib

from .faults import *
from .tokens import TokenKind
from .utils import ordinal


def _convert(fault, spec, raw, subject, index):
    """
    Apply a conversion function, turning ValueError into an InvalidValueError.
    """
    try:
        return spec.type(raw)
    except ValueError as exception:
        detail = str(exception)
        raise fault(
            InvalidValueError,
            "invalid value %r for %s at %s position%s" % (
                raw, subject, ordinal(index), (": " + detail) if detail else ""
            ),
            hint="check the expected format of %s" % subject,
            index=index,
        ) from exception


class OptionResolver:
    """
    Resolve option tokens against one option table.

    Parameters
    - options: Mapping[str, Option], long name → option
    - shorts: Mapping[str, str], short alias → long name
    - fault: callable(type, message, **details) -> ParseFailure
    - duplicates: bool, the allow-duplicate-options policy
    - signals: Mapping[str, Callable[[], NoReturn]], long name → early-exit handler
    """

    def __init__(self, options, shorts, /, *, fault, duplicates=False, signals=None):
        self._options = options
        self._shorts = shorts
        self._fault = fault
        self._duplicates = duplicates
        self._signals = signals or {}
        self.values = {}

    def resolve(self, token, stream):
        """
        Resolve a LONG or SHORT token; value-bearing options may take the next token.
        """
        if token.kind is TokenKind.LONG:
            self._resolve_long(token, stream)
        else:
            self._resolve_short(token, stream)

    def _resolve_long(self, token, stream):
        index = stream.index
        try:
            option = self._options[token.name]
        except KeyError:
            suggestions = difflib.get_close_matches(token.name, self._options.keys(), 5)
            try:
                hint = "did you mean '--%s'?" % suggestions[0]
            except IndexError:
                hint = None
            raise self._fault(
                UnknownOptionError,
                "unknown option '--%s' given at %s position" % (token.name, ordinal(index)),
                index=index,
                suggestions=suggestions,
                **({"hint": hint} if hint else {}),
            ) from None

        if option.boolean:
            if token.value is not None:
                raise self._fault(
                    FlagAssignmentError,
                    "boolean option %s at %s position does not take a value" % (option, ordinal(index)),
                    hint="remove everything from '=' (for example: --%s)" % option.long,
                    index=index,
                )
            self._store(option, None, index)
            return

        raw = token.value if token.value is not None else self._take(option, stream, index)
        self._store(option, raw, index)

    def _resolve_short(self, token, stream):
        index = stream.index
        letters = token.name
        position = 0
        while position < len(letters):
            letter = letters[position]
            try:
                option = self._options[self._shorts[letter]]
            except KeyError:
                raise self._fault(
                    UnknownOptionError,
                    "unknown short option '-%s' given at %s position" % (letter, ordinal(index)),
                    index=index,
                    suggestions=[],
                ) from None

            if option.boolean:
                self._store(option, None, index)
                position += 1
                continue

            # the rest of the cluster, as a single value, belongs to this option
            remainder = letters[position + 1:]
            raw = remainder if remainder else self._take(option, stream, index)
            self._store(option, raw, index)
            return

    def _take(self, option, stream, index):
        if not stream:
            raise self._fault(
                OptionValueRequiredError,
                "option %s at %s position requires a value" % (option, ordinal(index)),
                hint="provide a value (for example: --%s=<value> or --%s <value>)" % (option.long, option.long),
                index=index,
            )
        return stream.take()

    def _store(self, option, raw, index):
        if option.long in self._signals:
            self._signals[option.long]()

        if option.cardinality == "list":
            self.values.setdefault(option.long, []).append(
                _convert(self._fault, option, raw, "option %s" % option, index)
            )
            return

        if option.long in self.values and not self._duplicates:
            raise self._fault(
                DuplicatedOptionError,
                "option %s given multiple times (again at %s position)" % (option, ordinal(index)),
                hint="keep a single %s; each option can be specified only once" % option,
                index=index,
            )

        if option.boolean:
            self.values[option.long] = True
        else:
            self.values[option.long] = _convert(self._fault, option, raw, "option %s" % option, index)


class PositionalResolver:
    """
    Assign positional values to declared slots, then to the extra sink.

    Parameters
    - positionals: Sequence[Positional]
    - extra: Extra | None
    - fault: callable(type, message, **details) -> ParseFailure
    """

    def __init__(self, positionals, extra, /, *, fault):
        self._positionals = positionals
        self._extra = extra
        self._fault = fault
        self._values = []
        self._extras = []

    def accept(self, raw, index):
        if len(self._values) < len(self._positionals):
            positional = self._positionals[len(self._values)]
            self._values.append(_convert(self._fault, positional, raw, "positional %s" % positional.label, index))
        elif self._extra is not None:
            self._extras.append(_convert(self._fault, self._extra, raw, "positional %s" % self._extra.label, index))
        else:
            raise self._fault(
                UnexpectedPositionalError,
                "extra positional argument %r given at %s position" % (raw, ordinal(index)),
                hint="remove this extra value or quote it if it belongs to a single parameter",
                index=index,
            )

    def finalize(self):
        """
        Check the required count and return the positional tuple.

        Declared slots come first (absent optional ones as None), extra values follow.
        """
        required = [positional for positional in self._positionals if positional.required]
        if len(self._values) < len(required):
            missing = " ".join(positional.label for positional in required[len(self._values):])
            raise self._fault(
                MissingPositionalsError,
                "required positional parameters not given (missing %s)" % missing,
                hint="add the missing values in the expected order",
                missing=missing,
            )
        padding = (None,) * (len(self._positionals) - len(self._values))
        return tuple(self._values) + padding + tuple(self._extras)


__all__ = (
    "OptionResolver",
    "PositionalResolver",
)
