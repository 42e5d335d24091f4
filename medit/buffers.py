"""Buffers, windows and the editor state that ties them together.

A buffer holds a list of lines. Positions in a buffer are line indexes; the
index ``len(buffer.lines)`` stands for the end of the buffer, just past the
last line.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Callable

NAME_WIDTH = 16
SIZE_WIDTH = 6
LIST_WIDTH = 128
FILE_COLUMN = 1 + 1 + SIZE_WIDTH + 1 + NAME_WIDTH + 1
SCREEN_ROWS = 24
LIST_BUFFER_NAME = "[List]"
MAIN_BUFFER_NAME = "main"
LIST_HEADER = (
    "C   Size Buffer           File",
    "-   ---- ------           ----",
)

_POSITION = ("dot_line", "dot_offset", "mark_line", "mark_offset")


class BufferFlag(enum.IntFlag):
    """State bits of a buffer."""

    CHANGED = 1
    TEMP = 2


class WindowFlag(enum.IntFlag):
    """Redisplay hints of a window."""

    FORCE = 1
    MOVE = 2
    HARD = 4
    MODE = 8


def _copy_position(source: object, target: object) -> None:
    for attribute in _POSITION:
        setattr(target, attribute, getattr(source, attribute))


def format_size(num: int, width: int) -> str:
    """Render a non-negative number right-aligned in a field of *width* columns."""
    if num < 0:
        raise ValueError(f"size must not be negative, got {num}")
    return str(num).rjust(width)


@dataclass(eq=False)
class Line:
    """One line of text; ``newline`` tells whether it ended with a newline."""

    text: str = ""
    newline: bool = True


@dataclass(eq=False)
class Buffer:
    """A named buffer of lines with its own saved dot and mark."""

    name: str
    filename: str = ""
    flags: BufferFlag = BufferFlag(0)
    lines: list[Line] = field(default_factory=list)
    dot_line: int = 0
    dot_offset: int = 0
    mark_line: int | None = None
    mark_offset: int = 0
    windows: int = 0
    wrap: bool = False
    password: str = ""

    @property
    def changed(self) -> bool:
        return bool(self.flags & BufferFlag.CHANGED)

    @property
    def temporary(self) -> bool:
        return bool(self.flags & BufferFlag.TEMP)

    def add_line(self, text: str) -> Line:
        """Append a line holding *text* and return it."""
        line = Line(text)
        self.lines.append(line)
        return line

    def clear(self, confirm: Callable[[str], bool] | None = None) -> bool:
        """Remove all text; return False if the user declines to discard changes.

        *confirm* is asked "Discard changes" when a normal buffer has been
        changed; without it the changes are discarded.
        """
        if (
            not self.temporary
            and self.changed
            and confirm is not None
            and not confirm("Discard changes")
        ):
            return False
        self.flags &= ~BufferFlag.CHANGED
        self.lines.clear()
        self.dot_line = 0
        self.dot_offset = 0
        self.mark_line = None
        self.mark_offset = 0
        return True

    def size(self) -> int:
        """Return the number of characters, counting line-ending newlines."""
        return sum(len(line.text) + (1 if line.newline else 0) for line in self.lines)


@dataclass(eq=False)
class Window:
    """A view on a buffer: its screen rows, top line, dot and mark."""

    buffer: Buffer
    rows: int
    top_row: int = 0
    top_line: int = 0
    top_offset: int = 0
    dot_line: int = 0
    dot_offset: int = 0
    mark_line: int | None = None
    mark_offset: int = 0
    flags: WindowFlag = WindowFlag(0)
    force: int = 0


class Editor:
    """The set of buffers and windows, and the current window."""

    def __init__(self) -> None:
        self.buffers: list[Buffer] = []
        self.messages: list[str] = []
        self.tabsize = 8
        self.goal = 0
        self.column = 0
        self.last_flag = 0
        self.this_flag = 0
        self.list_buffer = self.find_buffer(LIST_BUFFER_NAME, True, BufferFlag.TEMP)
        main = self.find_buffer(MAIN_BUFFER_NAME, True)
        main.windows = 1
        window = Window(main, rows=SCREEN_ROWS - 2)
        self.windows: list[Window] = [window]
        self.current_window = window

    @property
    def current_buffer(self) -> Buffer:
        return self.current_window.buffer

    def message(self, text: str) -> None:
        """Show *text* on the message line."""
        self.messages.append(text)

    def find_buffer(
        self, name: str, create: bool = False, flags: BufferFlag = BufferFlag(0)
    ) -> Buffer | None:
        """Return the buffer called *name*, creating it when *create* is set.

        Raises ValueError for a built-in (temporary) buffer; returns None if
        the buffer does not exist and is not to be created.
        """
        for buffer in self.buffers:
            if buffer.name == name:
                if buffer.temporary:
                    raise ValueError("Cannot select builtin buffer")
                return buffer
        if not create:
            return None
        buffer = Buffer(name, flags=BufferFlag(flags))
        self.buffers.insert(0, buffer)
        return buffer

    def _leave(self, window: Window) -> None:
        old = window.buffer
        old.windows -= 1
        if old.windows == 0:
            _copy_position(window, old)

    def use_buffer(self, name: str) -> Buffer:
        """Show the buffer *name* in the current window, creating it if needed."""
        buffer = self.find_buffer(name, True)
        window = self.current_window
        self._leave(window)
        window.buffer = buffer
        window.top_line = 0
        window.top_offset = 0
        first_use = buffer.windows == 0
        buffer.windows += 1
        if first_use:
            _copy_position(buffer, window)
            return buffer
        for other in self.windows:
            if other is not window and other.buffer is buffer:
                _copy_position(other, window)
                break
        return buffer

    def kill_buffer(self, name: str, confirm: Callable[[str], bool] | None = None) -> bool:
        """Delete the buffer *name*; return False if discarding was declined.

        An unknown name is not an error. Raises ValueError if the buffer is
        on screen.
        """
        buffer = self.find_buffer(name)
        if buffer is None:
            return True
        if buffer.windows != 0:
            raise ValueError("Buffer is being displayed")
        if not buffer.clear(confirm):
            return False
        self.buffers.remove(buffer)
        return True

    def make_list(self) -> Buffer:
        """Rebuild the buffer list in the list buffer and return it."""
        listing = self.list_buffer
        listing.flags &= ~BufferFlag.CHANGED
        listing.clear()
        listing.filename = ""
        for header in LIST_HEADER:
            listing.add_line(header)
        for buffer in self.buffers:
            if buffer.temporary:
                continue
            nbytes = sum(len(line.text) + 1 for line in buffer.lines)
            entry = "{} {} {}".format(
                "*" if buffer.changed else " ",
                format_size(nbytes, SIZE_WIDTH),
                buffer.name,
            )
            if buffer.filename:
                entry = entry.ljust(FILE_COLUMN)
                room = max(LIST_WIDTH - 1 - len(entry), 0)
                entry += buffer.filename[:room]
            listing.add_line(entry)
        return listing

    def _split(self) -> Window:
        window = self.current_window
        if window.rows < 3:
            raise ValueError(f"Cannot split a {window.rows} line window")
        upper = (window.rows - 1) // 2
        lower = window.rows - 1 - upper
        new = Window(
            window.buffer,
            rows=lower,
            top_row=window.top_row + upper + 1,
            top_line=window.top_line,
            top_offset=window.top_offset,
        )
        _copy_position(window, new)
        window.rows = upper
        window.flags |= WindowFlag.MODE
        new.flags |= WindowFlag.MODE
        window.buffer.windows += 1
        self.windows.insert(self.windows.index(window) + 1, new)
        return new

    def _popup(self) -> Window:
        if len(self.windows) == 1:
            self._split()
        return next(w for w in self.windows if w is not self.current_window)

    def list_buffers(self) -> Window:
        """Show the buffer list in a window, splitting the screen if needed."""
        listing = self.make_list()
        if listing.windows == 0:
            window = self._popup()
            self._leave(window)
            window.buffer = listing
            listing.windows += 1
        shown = None
        for window in self.windows:
            if window.buffer is listing:
                window.top_line = 0
                window.top_offset = 0
                window.dot_line = 0
                window.dot_offset = 0
                window.mark_line = None
                window.mark_offset = 0
                window.flags |= WindowFlag.MODE
                shown = shown or window
        return shown

    def any_changed(self) -> bool:
        """Return True if any normal buffer has unsaved changes."""
        return any(b.changed and not b.temporary for b in self.buffers)