"""
Token classification and the token stream consumed by the runners.

classify() decides, for one raw argument, which of the following it is:

    SEPARATOR   "--" while options are still accepted
    DASH        a lone "-"
    LONG        "--name" or "--name=value" (split at the first '=')
    SHORT       "-abc", a cluster of short aliases (name holds "abc")
    POSITIONAL  anything else, and every token once options are no longer accepted

It is pure: the "still accepting options" bit is owned by the caller, which flips it
after a separator or (depending on policy) after the first positional.
"""
import enum
from collections import deque, namedtuple


class TokenKind(enum.Enum):
    SEPARATOR = "separator"
    DASH = "dash"
    LONG = "long"
    SHORT = "short"
    POSITIONAL = "positional"


Token = namedtuple("Token", ("kind", "raw", "name", "value"))
Token.__doc__ = """
Classified argument.

- kind: TokenKind
- raw: the token exactly as given
- name: option name without dashes (LONG), the letters of the cluster (SHORT), else None
- value: inline value after '=' (LONG, None when absent), the token itself (POSITIONAL/DASH)
"""


def classify(raw, /, *, options=True):
    """
    Classify one raw argument.

    Parameters
    - raw: str
    - options: bool (keyword-only)
      Whether options are still accepted. When False every token is POSITIONAL,
      including "--", "-" and dash-prefixed words.
    """
    if not options:
        return Token(TokenKind.POSITIONAL, raw, None, raw)
    if raw == "--":
        return Token(TokenKind.SEPARATOR, raw, None, None)
    if raw == "-":
        return Token(TokenKind.DASH, raw, None, raw)
    if raw.startswith("--"):
        name, separator, value = raw[2:].partition("=")
        return Token(TokenKind.LONG, raw, name, value if separator else None)
    if raw.startswith("-"):
        return Token(TokenKind.SHORT, raw, raw[1:], None)
    return Token(TokenKind.POSITIONAL, raw, None, raw)


class Stream:
    """
    Left-to-right cursor over an argument vector.

    The stream remembers the 1-based position of the token most recently taken, which
    fault messages use ("unknown option '--x' at third position").
    """

    def __init__(self, args, /):
        self._tokens = deque(args)
        self.index = 0

    def __bool__(self):
        return bool(self._tokens)

    def __len__(self):
        return len(self._tokens)

    def take(self):
        """
        Pop and return the next raw token (IndexError when exhausted).
        """
        token = self._tokens.popleft()
        self.index += 1
        return token

    def remaining(self):
        """
        The untouched tail of the vector, as a list.
        """
        return list(self._tokens)


__all__ = (
    "TokenKind",
    "Token",
    "classify",
    "Stream",
)
