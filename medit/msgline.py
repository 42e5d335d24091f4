"""Message-line helpers: message formatting, escape expansion and reply editing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

_HEXDIGITS = "0123456789abcdef"
_OCTAL = frozenset("01234567")
_HEX = frozenset(_HEXDIGITS)
_INT_CONVERSIONS = {"d": 10, "i": 10, "o": 8, "x": 16, "D": 10}
_SIMPLE_ESCAPES = {
    "\\": "\\", "n": "\n", "r": "\r", "t": "\t",
    "f": "\f", "b": "\b", "a": "\a", "e": "\x1b",
}

_RETURN, _NEWLINE, _ESCAPE = 0x0D, 0x0A, 0x1B
_QUOTE, _BELL, _RUBOUT, _BACKSPACE, _KILL = 0x11, 0x07, 0x7F, 0x08, 0x15


class ReplyAborted(Exception):
    """Raised when the user aborts a reply with C-G."""


@dataclass(frozen=True)
class Reply:
    """A finished reply: its text, what was echoed, and whether ESC ended it."""

    text: str
    echo: str
    escaped: bool = False


def format_int(value: int, radix: int = 10) -> str:
    """Render an integer in *radix* (2..16) with lower-case digits and a leading '-'."""
    if not 2 <= radix <= 16:
        raise ValueError(f"radix must be between 2 and 16, got {radix}")
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits = []
    while True:
        value, rem = divmod(value, radix)
        digits.append(_HEXDIGITS[rem])
        if not value:
            break
    return sign + "".join(reversed(digits))


def format_message(fmt: str, *args: object) -> str:
    """Expand %d %i %o %x %D %s in *fmt*; any other %c yields c itself."""
    values = iter(args)

    def next_arg(spec: str) -> object:
        try:
            return next(values)
        except StopIteration:
            raise ValueError(f"no argument for %{spec}") from None

    out = []
    chars = iter(fmt)
    for c in chars:
        if c != "%":
            out.append(c)
            continue
        spec = next(chars, "")
        if spec in _INT_CONVERSIONS:
            out.append(format_int(int(next_arg(spec)), _INT_CONVERSIONS[spec]))
        elif spec == "s":
            out.append(str(next_arg(spec)))
        else:
            out.append(spec)
    return "".join(out)


def expand_escapes(text: str) -> str:
    """Expand backslash escapes: \\n \\t ..., \\ooo octal and \\xhh hex.

    Raises ValueError on a malformed escape.
    """
    out = []
    chars = iter(text)
    for c in chars:
        if c != "\\":
            out.append(c)
            continue
        code = next(chars, "")
        if not code:
            raise ValueError("trailing backslash")
        if code in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[code])
        elif code in "0123":
            d1, d2 = next(chars, ""), next(chars, "")
            if d1 not in _OCTAL or d2 not in _OCTAL:
                raise ValueError(f"bad octal escape \\{code}{d1}{d2}")
            out.append(chr(int(code + d1 + d2, 8)))
        elif code == "x":
            d1, d2 = next(chars, ""), next(chars, "")
            if d1 not in _HEX or d2 not in _HEX:
                raise ValueError(f"bad hex escape \\x{d1}{d2}")
            out.append(chr(int(d1 + d2, 16)))
        else:
            out.append(code)
    return "".join(out)


def _shown(code: int, masked: bool) -> str:
    glyph = "*" if masked else chr(code ^ 0x40 if code < 0x20 else code)
    return "^" + glyph if code < 0x20 else glyph


def read_reply(keys: Iterable[str | int], limit: int, password: bool = False) -> Reply:
    """Edit a reply from a sequence of keys, as typed at the message-line prompt.

    Return, newline or ESC ends the reply; C-Q quotes the next key; DEL and
    backspace erase a character; C-U erases all; C-G raises ReplyAborted.
    At most ``limit - 1`` characters are kept. In password mode typed
    characters echo as '*'.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")
    stream = iter(keys)

    def next_key() -> int:
        try:
            key = next(stream)
        except StopIteration:
            raise EOFError("input ended before the reply was complete") from None
        return ord(key) if isinstance(key, str) else int(key)

    text: list[str] = []
    echo: list[str] = []
    while True:
        code = next_key()
        if code in (_RETURN, _NEWLINE, _ESCAPE):
            return Reply("".join(text), "".join(echo), code == _ESCAPE)
        if code == _QUOTE:
            code = next_key()
            if len(text) < limit - 1:
                text.append(chr(code))
                echo.append(_shown(code, False))
        elif code == _BELL:
            raise ReplyAborted("reply aborted")
        elif code in (_RUBOUT, _BACKSPACE):
            if text:
                text.pop()
                echo.pop()
        elif code == _KILL:
            text.clear()
            echo.clear()
        elif len(text) < limit - 1:
            text.append(chr(code))
            echo.append(_shown(code, password))