"""Interpreter for MEL, the editor's small stack-based extension language.

Input is a stream of blank-separated words. ``<...>`` is a string (nested
angle brackets balance, a backslash quotes the next character), ``'name``
pushes a reference to a variable, numbers are pushed, and any other word is
looked up and executed. ``{ ... }`` compiles words into a thread instead of
running them.
"""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from functools import partial
from typing import Callable, Iterator, TextIO

from medit.melobjects import (
    Kind,
    MelError,
    MelObject,
    arithmetic,
    format_object,
    parse_number,
    relational,
    string_op,
)

MAX_STACK = 256
MAX_WORD = 32
START_STRING = "<"
END_STRING = ">"
TIC = "'"
RC_FILE = ".melrc"

_VALUE_KINDS = (Kind.INT, Kind.REAL, Kind.STRING)


class _EndOfInput(Exception):
    """No more input is available."""


class _Quit(Exception):
    """The ``q`` word was executed."""


@dataclass(eq=False)
class _Variable:
    name: str
    obj: MelObject


class Interpreter:
    """A MEL interpreter writing its messages to *output* (default: stdout)."""

    def __init__(self, output: TextIO | None = None) -> None:
        self._output = output if output is not None else sys.stdout
        self._stack: list[MelObject] = []
        self._code: dict[str, _Variable] = {}
        self._names: dict[str, _Variable] = {}
        self._sources: list[Iterator[str]] = []
        self._refill: Callable[[], str | None] | None = None
        self._compile_depth = 0
        self._thread_depth = 0
        self._run_next = False
        self._break = False
        self._exit = False
        self.radix = 10
        self.verbose = False
        self._undefined = MelObject(Kind.CODE, self._undefined_word, bound=True, name=" _UNDEFINED_ ")
        self._install_builtins()

    # ----------------------------------------------------------------- setup

    def _install_builtins(self) -> None:
        table: list[tuple[str, Callable[[], None], bool]] = [
            ("t", self._test, False),
            ("q", self._quit, False),
            ("+", partial(self._binary, arithmetic, "+"), False),
            ("-", partial(self._binary, arithmetic, "-"), False),
            ("*", partial(self._binary, arithmetic, "*"), False),
            ("/", partial(self._binary, arithmetic, "/"), False),
            ("%", partial(self._binary, arithmetic, "%"), False),
            (".", partial(self._binary, string_op, "."), False),
            ("=", self._print_pop, False),
            ("?", self._print_top, False),
            ("dec", partial(self._set_radix, 10), False),
            ("hex", partial(self._set_radix, 16), False),
            ("oct", partial(self._set_radix, 8), False),
            ("not", self._not, False),
            ("ne", partial(self._binary, relational, "ne"), False),
            ("eq", partial(self._binary, relational, "eq"), False),
            ("lt", partial(self._binary, relational, "lt"), False),
            ("gt", partial(self._binary, relational, "gt"), False),
            ("le", partial(self._binary, relational, "le"), False),
            ("ge", partial(self._binary, relational, "ge"), False),
            ("cmp", partial(self._binary, string_op, "strcmp"), False),
            ("depth", self._depth, False),
            ("dup", self._dup, False),
            ("drop", self._drop, False),
            ("over", self._over, False),
            ("rot", self._rot, False),
            ("exch", self._exch, False),
            ("clear", self._clear, False),
            (".c", self._clear, False),
            ("exec", self._x_exec, False),
            (".x", self._x_exec, False),
            ("rpt", self._rpt, False),
            ("def", self._def, False),
            ("set", self._set, False),
            ("!", self._store, False),
            ("@", self._load, False),
            ("loop", self._loop, False),
            ("if", self._if, False),
            ("load", self._load_file, False),
            (".s", self._print_stack, False),
            ("namelist", self._dump_names, False),
            ("codelist", self._dump_code, False),
            ("dmptop", self._dump_top, False),
            ("dmpvar", self._dump_var, False),
            ("push", self._push_name, False),
            ("verbose", self._toggle_verbose, False),
            (".v", self._toggle_verbose, False),
            (" _UNDEFINED_ ", self._undefined_word, False),
            (" _BRK_ ", self._set_break, False),
            ("break", partial(self._push_code, " _BRK_ "), False),
            (" _EXIT_ ", self._set_exit, False),
            ("exit", partial(self._push_code, " _EXIT_ "), False),
            ("[", self._mark, True),
            ("]", self._pack_thread, True),
            ("{", self._compile, True),
            ("}", self._end_compile, True),
            ("count_to_mark", self._count_to_mark, False),
            ("$", self._set_run_next, True),
        ]
        for name, function, immediate in table:
            obj = MelObject(Kind.CODE, function, bound=True, immediate=immediate, name=name)
            self._code[name] = _Variable(name, obj)

    # ------------------------------------------------------------ public API

    def push(self, obj: MelObject) -> None:
        """Push *obj* on the stack; raise MelError when the stack is full."""
        if len(self._stack) >= MAX_STACK:
            raise MelError("stack is full")
        self._stack.append(obj)

    def pop(self) -> MelObject:
        """Pop the top object; raise MelError when the stack is empty."""
        if not self._stack:
            raise MelError("Empty stack.")
        return self._stack.pop()

    def lookup(self, name: str) -> MelObject | None:
        """Return the object bound to *name* (built-ins first), or None."""
        variable = self._find(name)
        return variable.obj if variable is not None else None

    def define(self, name: str, obj: MelObject) -> None:
        """Bind *obj* to *name*; built-in words cannot be redefined."""
        variable = self._find(name)
        if variable is None:
            self._names[name] = _Variable(name, obj)
        elif self._code.get(name) is variable:
            raise MelError("can't redefine a code object")
        else:
            variable.obj = obj
        obj.bound = True

    def run(self, text: str) -> bool:
        """Interpret *text*; return True if it executed ``q``."""
        self._sources = [iter(text)]
        return self._session(None)

    def repl(self, stream: TextIO) -> bool:
        """Interpret lines read from *stream*, prompting with '>'.

        Return True if ``q`` ended the session, False at end of input.
        """

        def refill() -> str | None:
            self._output.write(">")
            flush = getattr(self._output, "flush", None)
            if flush is not None:
                flush()
            return stream.readline() or None

        while True:
            try:
                return self._session(refill)
            except KeyboardInterrupt:
                self._write("interrupted")

    # -------------------------------------------------------------- internals

    def _session(self, refill: Callable[[], str | None] | None) -> bool:
        self._refill = refill
        try:
            self._interpret()
        except _Quit:
            return True
        finally:
            self._sources = []
            self._refill = None
        return False

    def _write(self, text: str) -> None:
        self._output.write(text + "\n")

    def _show(self, obj: MelObject | None, indent: int = 0) -> str:
        return format_object(obj, indent, self.radix, self.verbose)

    def _find(self, name: str) -> _Variable | None:
        return self._code.get(name) or self._names.get(name)

    def _need(self, name: str, count: int) -> None:
        if len(self._stack) < count:
            raise MelError(f"{name}: end of stack")

    def _next_char(self) -> str:
        while True:
            while self._sources:
                try:
                    return next(self._sources[-1])
                except StopIteration:
                    self._sources.pop()
            if self._refill is None:
                raise _EndOfInput
            line = self._refill()
            if line is None:
                raise _EndOfInput
            self._sources.append(iter(line))

    def _get_word(self) -> str:
        c = self._next_char()
        while c.isspace():
            c = self._next_char()
        if c == START_STRING:
            return c
        chars = [c]
        try:
            while not (c := self._next_char()).isspace():
                chars.append(c)
        except _EndOfInput:
            pass
        if len(chars) > MAX_WORD:
            self._write("get_word: word truncated")
            del chars[MAX_WORD:]
        return "".join(chars)

    def _scan_string(self) -> str:
        depth = 1
        chars: list[str] = []
        try:
            while True:
                c = self._next_char()
                if c == "\\":
                    c = self._next_char()
                elif c == END_STRING:
                    depth -= 1
                    if depth <= 0:
                        break
                elif c == START_STRING:
                    depth += 1
                chars.append(c)
        except _EndOfInput:
            raise MelError("unterminated string") from None
        return "".join(chars)

    def _interpret(self) -> None:
        while True:
            self._break = self._exit = False
            try:
                word = self._get_word()
            except _EndOfInput:
                return
            try:
                self._do_word(word)
            except MelError as exc:
                self._write(str(exc))
            except RecursionError:
                self._write("recursion too deep")

    def _do_word(self, word: str) -> None:
        if word == START_STRING:
            self.push(MelObject(Kind.STRING, self._scan_string()))
            return
        if word.startswith(TIC):
            name = word[len(TIC):]
            variable = self._find(name)
            if variable is None:
                variable = self._names[name] = _Variable(name, self._undefined)
            self.push(MelObject(Kind.NAME, variable))
            return
        variable = self._find(word)
        if variable is None:
            number = parse_number(word)
            if number is None:
                self._write(f"undefined var <{word}>")
            else:
                kind = Kind.INT if isinstance(number, int) else Kind.REAL
                self.push(MelObject(kind, number))
        elif self._compile_depth == 0 or variable.obj.immediate or self._run_next:
            self._run_next = False
            self._exec(variable.obj)
        else:
            self.push(MelObject(Kind.NAME, variable))

    def _exec(self, obj: MelObject) -> None:
        kind = obj.kind
        if kind is Kind.CODE:
            obj.value()
        elif kind in _VALUE_KINDS:
            self.push(MelObject(kind, obj.value))
        elif kind is Kind.THREAD:
            if self._thread_depth:
                self.push(obj)
            else:
                self._exec_thread(obj)
        elif kind is Kind.NAME:
            self._call(obj.value.obj)
        else:
            raise MelError("exec: Internal error -- no flag")

    def _call(self, obj: MelObject) -> None:
        if obj.kind is Kind.THREAD:
            self._exec_thread(obj)
        else:
            self._exec(obj)

    def _exec_thread(self, thread: MelObject) -> None:
        self._thread_depth += 1
        try:
            for element in thread.value or ():
                self._exec(element)
                if self._exit or self._break:
                    break
        finally:
            self._thread_depth -= 1
            self._exit = False

    # --------------------------------------------------------------- builtins

    def _test(self) -> None:
        self._write("Well, we are executing a test now")

    def _quit(self) -> None:
        raise _Quit

    def _undefined_word(self) -> None:
        self._write("Executing undefined object.")

    def _binary(self, operation: Callable[[str, MelObject, MelObject], MelObject], op: str) -> None:
        self._need(op, 2)
        top = self.pop()
        below = self.pop()
        try:
            result = operation(op, below, top)
        except MelError:
            self._stack.extend((below, top))
            raise
        self.push(result)

    def _set_radix(self, radix: int) -> None:
        self.radix = radix

    def _toggle_verbose(self) -> None:
        self.verbose = not self.verbose

    def _not(self) -> None:
        self._need("not", 1)
        obj = self.pop()
        self.push(MelObject(Kind.INT, 0 if obj.value else 1))

    def _depth(self) -> None:
        self.push(MelObject(Kind.INT, len(self._stack)))

    def _dup(self) -> None:
        self._need("dup", 1)
        self.push(self._stack[-1].copy())

    def _drop(self) -> None:
        self.pop()

    def _over(self) -> None:
        self._need("over", 2)
        self.push(self._stack[-2].copy())

    def _rot(self) -> None:
        self._need("rot", 3)
        first = self._stack.pop(-3)
        self._stack.append(first)

    def _exch(self) -> None:
        self._need("exch", 2)
        self._stack[-1], self._stack[-2] = self._stack[-2], self._stack[-1]

    def _clear(self) -> None:
        self._stack.clear()

    def _x_exec(self) -> None:
        self._need("exec", 1)
        self._call(self.pop())

    def _rpt(self) -> None:
        self._need("rpt", 2)
        count = self.pop()
        body = self.pop()
        if count.kind is not Kind.INT:
            raise MelError("illegal count for rpt")
        try:
            for _ in range(count.value):
                if self._break:
                    break
                self._call(body)
        finally:
            self._break = False

    def _loop(self) -> None:
        self._need("loop", 1)
        body = self.pop()
        try:
            while not self._break:
                self._call(body)
        finally:
            self._break = False

    def _if(self) -> None:
        self._need("if", 2)
        body = self.pop()
        condition = self.pop()
        if condition.value:
            self._call(body)

    def _set_break(self) -> None:
        self._break = True

    def _set_exit(self) -> None:
        self._exit = True

    def _push_code(self, name: str) -> None:
        self.push(self._code[name].obj)

    def _def(self) -> None:
        self._need("def", 2)
        name = self.pop()
        value = self.pop()
        if name.kind is not Kind.STRING:
            raise MelError("def: TOS is not of right type")
        try:
            self.define(name.value, value)
        except MelError as exc:
            raise MelError(f"def: {exc}") from exc

    def _set(self) -> None:
        self._need("set", 1)
        value = self.pop()
        try:
            name = self._get_word()
        except _EndOfInput:
            self._stack.append(value)
            raise MelError("set: no name") from None
        try:
            self.define(name, value)
        except MelError as exc:
            raise MelError(f"set: {exc}") from exc

    def _store(self) -> None:
        self._need("store", 2)
        target = self.pop()
        value = self.pop()
        if target.kind is not Kind.NAME:
            raise MelError("store: not a variable")
        value.bound = True
        target.value.obj = value

    def _load(self) -> None:
        self._need("load", 1)
        obj = self.pop()
        if obj.kind is Kind.NAME:
            obj = obj.value.obj
        elif not obj.bound:
            raise MelError("load: no variable")
        if obj.kind not in _VALUE_KINDS:
            raise MelError("load: illegal variable value")
        self.push(MelObject(obj.kind, obj.value))

    def _push_name(self) -> None:
        if not self._stack or self._stack[-1].kind is not Kind.STRING:
            return
        variable = self._find(self._stack[-1].value)
        if variable is not None:
            self.push(variable.obj)

    def _load_file(self) -> None:
        self._need("load", 1)
        obj = self.pop()
        if obj.kind is not Kind.STRING:
            raise MelError("load_file: no file name")
        if not os.access(obj.value, os.R_OK):
            raise MelError("load_file: can't access file")
        try:
            with open(obj.value, encoding="utf-8", errors="replace") as handle:
                text = handle.read()
        except OSError:
            raise MelError("load_file: can't access file") from None
        self._sources.append(iter(text))

    def _mark(self) -> None:
        self.push(MelObject(Kind.MARK))

    def _marked_count(self) -> int:
        for count, obj in enumerate(reversed(self._stack)):
            if obj.kind is Kind.MARK:
                return count
        raise MelError("_count_to_mark: no mark")

    def _count_to_mark(self) -> None:
        self.push(MelObject(Kind.INT, self._marked_count()))

    def _pack_thread(self) -> None:
        count = self._marked_count()
        start = len(self._stack) - count
        elements = self._stack[start:]
        del self._stack[start - 1:]
        self.push(MelObject(Kind.THREAD, elements))

    def _compile(self) -> None:
        self._mark()
        self._compile_depth += 1

    def _end_compile(self) -> None:
        try:
            self._pack_thread()
        finally:
            self._compile_depth = max(0, self._compile_depth - 1)

    def _set_run_next(self) -> None:
        self._run_next = True

    def _print_pop(self) -> None:
        self._need("printpop", 1)
        self._write(self._show(self.pop()))

    def _print_top(self) -> None:
        self._need("printtop", 1)
        self._write(self._show(self._stack[-1]))

    def _print_stack(self) -> None:
        for obj in reversed(self._stack):
            self._write(self._show(obj, 2))

    def _dump_top(self) -> None:
        if self._stack:
            self._write(self._show(self._stack[-1]))

    def _dump_var(self) -> None:
        self._need("pr_var", 1)
        obj = self.pop()
        if obj.kind is not Kind.STRING:
            raise MelError("dmpvar: TOS must be a string")
        variable = self._find(obj.value)
        if variable is None:
            self._write("[NULL]")
        else:
            self._write(format_object(variable.obj, len(obj.value), self.radix, True))

    def _dump(self, variables: dict[str, _Variable]) -> None:
        for variable in reversed(list(variables.values())):
            self._write(f"{variable.name}: {self._show(variable.obj)}")

    def _dump_names(self) -> None:
        self._dump(self._names)

    def _dump_code(self) -> None:
        self._dump(self._code)


def main(argv: list[str] | None = None) -> int:
    """Run the interactive interpreter on stdin; return the exit status."""
    parser = argparse.ArgumentParser(
        prog="mel",
        description="Interactive interpreter for the MEL extension language.",
    )
    parser.parse_args(argv)
    interpreter = Interpreter(sys.stdout)
    if os.access(RC_FILE, os.R_OK):
        try:
            with open(RC_FILE, encoding="utf-8", errors="replace") as handle:
                text = handle.read()
        except OSError:
            text = ""
        if interpreter.run(text):
            return 0
    if interpreter.repl(sys.stdin):
        return 0
    print("EOF on input", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())