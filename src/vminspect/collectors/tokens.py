from __future__ import annotations

import re
from typing import Iterable, List

from vminspect.errors import ParseError

# Delimiters used by /proc/<pid>/status and the smaps detail lines.
KEY_VALUE_DELIMS = ": \t"
# Delimiters used by the smaps region header.
FIELD_DELIMS = " \t"

_DIGITS = {
    10: frozenset("0123456789"),
    16: frozenset("0123456789abcdefABCDEF"),
}


def split_lines(text: str) -> List[str]:
    """
    Split on "\\n" only; a final newline does not add an empty line.
    comm and mapped paths may hold \\r, \\x0c, \\x1c... which are data here.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def tokenize(line: str, delimiters: Iterable[str] = KEY_VALUE_DELIMS) -> List[str]:
    """
    Split a line on any of the delimiter characters.
    Empty tokens are dropped, so runs of delimiters collapse.
    """
    pattern = "[" + "".join(re.escape(d) for d in delimiters) + "]+"
    return [t for t in re.split(pattern, line) if t]


def parse_int(token: str, bits: int = 64, radix: int = 10) -> int:
    """
    Strict unsigned integer parse.

    The whole token must be digits of `radix` (no sign, prefix or padding)
    and the value must fit in `bits` bits, otherwise ParseError.
    """
    digits = _DIGITS.get(radix)
    if digits is None:
        raise ValueError(f"unsupported radix {radix}")
    if not token or any(ch not in digits for ch in token):
        raise ParseError(f"invalid digit found in string {token!r} (radix {radix})")

    value = int(token, radix)
    if value >> bits:
        raise ParseError(f"number too large to fit in u{bits}: {token!r}")
    return value


def field_value(tokens: List[str], line: str) -> str:
    """Return the value token of a `Key: value` line or fail on a bare key."""
    if len(tokens) < 2:
        raise ParseError(f"missing value in line {line!r}")
    return tokens[1]
