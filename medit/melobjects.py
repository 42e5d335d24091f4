"""Values of the MEL extension language and the operations on them.

A MEL value is a :class:`MelObject`: an integer, real, string, thread (an
executable list of objects), code (a built-in callable), name (a reference
to a variable) or stack mark.
"""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Any

INT_MAX = 2**31 - 1
MAX_INDENT = 64
_PRINT_WIDTH = 132
_WORD_BITS = 64
_WORD_MASK = (1 << _WORD_BITS) - 1

ARITHMETIC_OPS = frozenset({"+", "-", "*", "/", "%", "and", "or"})
RELATIONAL_OPS = frozenset({"eq", "ne", "lt", "gt", "le", "ge"})
STRING_OPS = frozenset({"strcmp", "."})


class MelError(Exception):
    """An error raised while evaluating MEL code."""


class Kind(enum.Enum):
    """The type of a MEL object."""

    INT = "Z"
    REAL = "R"
    STRING = "S"
    THREAD = "T"
    CODE = "C"
    NAME = "N"
    MARK = "M"


_NUMERIC = (Kind.INT, Kind.REAL)


@dataclass
class MelObject:
    """A MEL value.

    ``value`` holds an int, a float, a str, a list of objects (thread), a
    callable (code) or, for a name, a variable with ``name`` and ``obj``
    attributes. ``name`` is the name a code object is installed under.
    """

    kind: Kind
    value: Any = None
    bound: bool = False
    immediate: bool = False
    name: str = ""

    def copy(self) -> MelObject:
        """Return a copy; a thread copy shares its elements with the original."""
        if self.kind in (Kind.NAME, Kind.MARK):
            raise MelError("dup_ob: unknown object type")
        value = list(self.value) if self.kind is Kind.THREAD and self.value is not None else self.value
        return dataclasses.replace(self, value=value)


def _wrap(value: int) -> int:
    """Reduce an integer to a signed machine word."""
    value &= _WORD_MASK
    return value - (1 << _WORD_BITS) if value >> (_WORD_BITS - 1) else value


def _wrong_type(op: str) -> MelError:
    return MelError(f"{op}: wrong type for operands")


def parse_number(word: str) -> int | float | None:
    """Parse a MEL numeric literal; return None if *word* is not a number.

    A leading ``0`` starts an octal number, ``0x`` a hexadecimal one; other
    words are decimal with an optional sign and fraction. Decimal integers
    not below INT_MAX are read as reals.
    """
    if word.startswith("0"):
        body = word[1:]
        if body[:1] in ("x", "X"):
            digits = body[1:]
            if not all(c in "0123456789abcdefABCDEF" for c in digits):
                return None
            return int(digits, 16) if digits else 0
        if not all(c in "01234567" for c in body):
            return None
        return int(body, 8) if body else 0

    sign = 1
    rest = word
    if rest[:1] == "-":
        sign, rest = -1, rest[1:]
    elif rest[:1] == "+":
        rest = rest[1:]

    whole, dot, fraction = rest.partition(".")
    if not all(c.isdigit() and c.isascii() for c in whole + fraction):
        return None
    if not dot:
        magnitude = int(whole) if whole else 0
        if magnitude < INT_MAX:
            return sign * magnitude
        return float(sign * magnitude)
    return sign * float(f"{whole or 0}.{fraction or 0}")


def _require(obj: MelObject, kinds: tuple[Kind, ...]) -> bool:
    return obj is not None and obj.kind in kinds


def _int_arith(op: str, a: int, b: int) -> int:
    if op in ("/", "%"):
        quotient = abs(a) // abs(b)
        if (a < 0) != (b < 0):
            quotient = -quotient
        return quotient if op == "/" else a - b * quotient
    if op == "+":
        return a + b
    if op == "-":
        return a - b
    if op == "*":
        return a * b
    if op == "and":
        return a & b
    if op == "or":
        return a | b
    raise _wrong_type(op)


def _real_arith(op: str, a: float, b: float) -> float:
    if op == "+":
        return a + b
    if op == "-":
        return a - b
    if op == "*":
        return a * b
    if op == "/":
        return a / b
    raise _wrong_type(op)


def arithmetic(op: str, a: MelObject, b: MelObject) -> MelObject:
    """Apply arithmetic *op* to *a* (lower on the stack) and *b* (the top).

    Integers give an integer result with C semantics (truncating division,
    machine-word overflow); a real operand makes the result real, where only
    ``+ - * /`` are allowed.
    """
    if not (_require(a, _NUMERIC) and _require(b, _NUMERIC)):
        raise MelError("illegal operands for arithmetic operation")
    if op in ("/", "%") and b.value == 0:
        raise MelError("attempt to divide by zero")
    if a.kind is Kind.INT and b.kind is Kind.INT:
        return MelObject(Kind.INT, _wrap(_int_arith(op, a.value, b.value)))
    return MelObject(Kind.REAL, _real_arith(op, float(a.value), float(b.value)))


_COMPARISONS = {
    "eq": lambda top, below: top == below,
    "ne": lambda top, below: top != below,
    "lt": lambda top, below: top < below,
    "gt": lambda top, below: top > below,
    "le": lambda top, below: top <= below,
    "ge": lambda top, below: top >= below,
}


def relational(op: str, a: MelObject, b: MelObject) -> MelObject:
    """Compare the top object *b* with *a* below it; the result is 1 or 0.

    ``lt`` is true when *b* < *a*, and likewise for the other operators.
    Both operands must be strings, or both numbers.
    """
    both_strings = _require(a, (Kind.STRING,)) and _require(b, (Kind.STRING,))
    both_numbers = _require(a, _NUMERIC) and _require(b, _NUMERIC)
    if not (both_strings or both_numbers) or op not in _COMPARISONS:
        raise _wrong_type(op)
    return MelObject(Kind.INT, int(_COMPARISONS[op](b.value, a.value)))


def string_op(op: str, a: MelObject, b: MelObject) -> MelObject:
    """Apply a string operation to *a* (below) and *b* (the top).

    ``.`` concatenates *a* then *b*; ``strcmp`` gives the sign of comparing
    *b* with *a* as -1, 0 or 1.
    """
    if not (_require(a, (Kind.STRING,)) and _require(b, (Kind.STRING,))):
        raise _wrong_type(op)
    if op == ".":
        return MelObject(Kind.STRING, a.value + b.value)
    if op == "strcmp":
        return MelObject(Kind.INT, (b.value > a.value) - (b.value < a.value))
    raise _wrong_type(op)


def _flags(obj: MelObject) -> str:
    letters = obj.kind.value
    if obj.bound:
        letters += "B"
    if obj.immediate:
        letters += "I"
    return f"[{letters}]:"


def _format_int(value: int, radix: int) -> str:
    if radix == 10:
        return str(value)
    unsigned = value & _WORD_MASK
    return format(unsigned, "x" if radix == 16 else "o")


def _format_lines(obj: MelObject | None, indent: int, radix: int, verbose: bool) -> list[str]:
    prefix = " " * min(indent, MAX_INDENT)
    if obj is None:
        return [prefix + "[NULL]"]
    head = prefix + (_flags(obj) if verbose else "")
    kind = obj.kind

    if kind is Kind.INT:
        return [head + _format_int(obj.value, radix)]
    if kind is Kind.STRING:
        room = max(_PRINT_WIDTH - 10 - len(head) - 1, 0)
        return [f"{head}<{obj.value[:room]}>"]
    if kind is Kind.REAL:
        return [f"{head}{obj.value:f}"]
    if kind is Kind.CODE:
        return [f"{head}{obj.name} "]
    if kind is Kind.THREAD:
        if obj.value is None:
            return [prefix + "[NULL THREAD]"]
        if not verbose:
            return [prefix + "[T]"]
        lines = [f"{head}len={len(obj.value)}"]
        for element in obj.value:
            lines.extend(_format_lines(element, indent + 3, radix, verbose))
        return lines
    if kind is Kind.MARK:
        return [prefix + "[MARK]"]
    # Kind.NAME
    variable = obj.value
    lines = [f"{prefix}{variable.name}:"]
    if variable.obj is obj:
        lines.append("Circular ob!")
    else:
        lines.extend(_format_lines(variable.obj, indent + 3, radix, verbose))
    return lines


def format_object(obj: MelObject | None, indent: int = 0, radix: int = 10, verbose: bool = False) -> str:
    """Render *obj* for display, one line per nested object.

    Integers are shown in *radix* (10, 16 or 8); *verbose* adds type flags
    and lists the contents of threads. Indentation is capped at 64 columns.
    """
    if radix not in (8, 10, 16):
        raise ValueError(f"radix must be 8, 10 or 16, got {radix}")
    return "\n".join(_format_lines(obj, max(indent, 0), radix, verbose))