"""
argotype faults (errors and control-flow signals) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every parse failure. Codes are
  grouped by domain to keep copy consistent and make logs/searches predictable.
- SpecificationError: build-time programmer mistakes (bad names, duplicates, ordering).
- ParseFailure and its subclasses: run-time user-input mistakes. Each one is bound to
  the help renderer and the name path of the command/group where it happened.
- CommandSignal / HelpRequested / VersionRequested: early exits requested by the user
  (built-in --help / --version); they carry the already rendered text.

The engine only raises these. It never prints and never exits; the entry point
(commands.run) or the host adapter (shell.main) decides what each one becomes.

Rendering
- ParseFailure implements __rich__ so a host can hand it straight to a rich Console.
- Lowercased tone, one-sentence message, a single clear hint.
- Styles are configurable via a __styles__ mapping in __main__; fault codes can be
  remapped via a __codes__ mapping in __main__ (see FaultCode.normalize).
"""
from collections import defaultdict
from enum import IntEnum

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes for parse failures (stable identifiers).

    grouping (by high-level domain)
    - routing (1110x)
      • MISSING_SUBCOMMAND, UNKNOWN_SUBCOMMAND
    - options (1111x)
      • UNKNOWN_OPTION, FLAG_ASSIGNMENT, DUPLICATED_OPTION, OPTION_VALUE_REQUIRED,
        INVALID_VALUE
    - positionals (1112x)
      • SINGLE_DASH, UNEXPECTED_POSITIONAL, MISSING_POSITIONALS
    """
    # --- routing errors (11xxx) ---
    MISSING_SUBCOMMAND          = 11101
    UNKNOWN_SUBCOMMAND          = 11102

    # --- option errors (11xxx) ---
    UNKNOWN_OPTION              = 11111
    FLAG_ASSIGNMENT             = 11112
    DUPLICATED_OPTION           = 11113
    OPTION_VALUE_REQUIRED       = 11114
    INVALID_VALUE               = 11115

    # --- positional errors (11xxx) ---
    SINGLE_DASH                 = 11121
    UNEXPECTED_POSITIONAL       = 11122
    MISSING_POSITIONALS         = 11123

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class SpecificationError(ValueError):
    """
    Raised while a specification is being assembled (never while parsing).

    These are programmer mistakes: invalid short/long name characters, duplicated names,
    required positionals after optional ones, misplaced or repeated extra sinks. The
    message always names the offending declaration.
    """


class ParseFailure(Exception):
    """
    Base class of every run-time parse failure.

    Attributes
    - message: str, the one-sentence, lowercased description.
    - code: FaultCode of the concrete failure.
    - title: short headline used by renderers.
    - hint: single actionable suggestion.
    - path: tuple[str, ...], name path of the command/group that failed (root first).
    - fullname: the path joined by spaces, as shown in usage lines.
    - index: 1-based position of the offending token in the vector handed to that
      command/group, or None when the failure is not about a single token.
    - help(): renders the contextual help text of the failing command/group.
    """
    code = Unset
    title = "parse failure"

    def __init__(self, message, /, *, help, path, hint=Unset, index=None, **details):
        assert isinstance(message, str)
        super().__init__(message)
        self.message = message
        self.path = tuple(path)
        self.hint = coalesce(hint, "run '%s --help' to see the expected usage" % " ".join(self.path))
        self.index = index
        self.details = details
        self._help = help

    @property
    def fullname(self):
        return " ".join(self.path)

    def help(self):
        """
        Render the help text of the command/group where this failure occurred.
        """
        return self._help()

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.details.get("colorful", True)
        fancy = self.details.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        prog = text(getattr(main, "__prog__", self.fullname), "prog-name")

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint"))

        if fancy:
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    def __replace__(self, **overrides):
        """
        Return a copy of this failure with rendering/detail overrides applied.
        """
        details = {**self.details, **overrides}
        index = details.pop("index", self.index)
        hint = details.pop("hint", self.hint)
        return type(self)(self.message, help=self._help, path=self.path, hint=hint, index=index, **details)


class UnknownOptionError(ParseFailure):
    code = FaultCode.UNKNOWN_OPTION
    title = "unknown option"


class FlagAssignmentError(ParseFailure):
    code = FaultCode.FLAG_ASSIGNMENT
    title = "boolean option cannot take a value"


class DuplicatedOptionError(ParseFailure):
    code = FaultCode.DUPLICATED_OPTION
    title = "duplicated option"


class OptionValueRequiredError(ParseFailure):
    code = FaultCode.OPTION_VALUE_REQUIRED
    title = "missing option value"


class InvalidValueError(ParseFailure):
    code = FaultCode.INVALID_VALUE
    title = "invalid value"


class SingleDashError(ParseFailure):
    code = FaultCode.SINGLE_DASH
    title = "invalid single dash"


class UnexpectedPositionalError(ParseFailure):
    code = FaultCode.UNEXPECTED_POSITIONAL
    title = "unexpected positional"


class MissingPositionalsError(ParseFailure):
    code = FaultCode.MISSING_POSITIONALS
    title = "missing positionals"


class MissingSubcommandError(ParseFailure):
    code = FaultCode.MISSING_SUBCOMMAND
    title = "missing subcommand"


class UnknownSubcommandError(ParseFailure):
    code = FaultCode.UNKNOWN_SUBCOMMAND
    title = "unknown subcommand"


class CommandSignal(Exception):
    """
    Early exit requested from the command line (not an error).

    Attributes
    - text: the rendered help text, or the version text (None when the unit
      registered no version).
    - path: name path of the command/group that received the request.
    """

    def __init__(self, text, /, *, path):
        super().__init__(text)
        self.text = text
        self.path = tuple(path)


class HelpRequested(CommandSignal):
    """Raised when the built-in help option is given."""


class VersionRequested(CommandSignal):
    """Raised when the built-in version option is given."""


__all__ = (
    "FaultCode",
    "SpecificationError",
    "ParseFailure",
    "UnknownOptionError",
    "FlagAssignmentError",
    "DuplicatedOptionError",
    "OptionValueRequiredError",
    "InvalidValueError",
    "SingleDashError",
    "UnexpectedPositionalError",
    "MissingPositionalsError",
    "MissingSubcommandError",
    "UnknownSubcommandError",
    "CommandSignal",
    "HelpRequested",
    "VersionRequested",
)
