"""Cursor motion commands: characters, lines, pages, marks and paragraphs.

The lines of a buffer form a ring with the end-of-buffer position (index
``len(buffer.lines)``) as its head, so stepping forward from the end lands
on the first line and stepping back from the first line lands on the end.
"""

from __future__ import annotations

from medit.buffers import Buffer, Editor, WindowFlag

LINE_COMMAND = 0x0001  # last command was a line up/down move


def _head(buffer: Buffer) -> int:
    return len(buffer.lines)


def _forw(buffer: Buffer, index: int) -> int:
    return (index + 1) % (len(buffer.lines) + 1)


def _back(buffer: Buffer, index: int) -> int:
    return (index - 1) % (len(buffer.lines) + 1)


def _text(buffer: Buffer, index: int) -> str:
    return buffer.lines[index].text if index < len(buffer.lines) else ""


def _in_word(editor: Editor) -> bool:
    window = editor.current_window
    text = _text(window.buffer, window.dot_line)
    if window.dot_offset >= len(text):
        return False
    char = text[window.dot_offset]
    return (char.isascii() and char.isalnum()) or char in "$_"


def goto_bol(editor: Editor) -> bool:
    """Move to the beginning of the current line."""
    editor.current_window.dot_offset = 0
    return True


def goto_eol(editor: Editor) -> bool:
    """Move to the end of the current line."""
    window = editor.current_window
    window.dot_offset = len(_text(window.buffer, window.dot_line))
    window.flags |= WindowFlag.MOVE
    return True


def backward_char(editor: Editor, n: int = 1) -> bool:
    """Move back *n* characters; return False on running into the start."""
    if n < 0:
        return forward_char(editor, -n)
    window = editor.current_window
    buffer = window.buffer
    for _ in range(n):
        if window.dot_offset == 0:
            previous = _back(buffer, window.dot_line)
            if previous == _head(buffer):
                return False
            window.dot_line = previous
            window.dot_offset = len(_text(buffer, previous))
        else:
            window.dot_offset -= 1
    window.flags |= WindowFlag.MOVE
    return True


def forward_char(editor: Editor, n: int = 1) -> bool:
    """Move forward *n* characters; return False on running into the end."""
    if n < 0:
        return backward_char(editor, -n)
    window = editor.current_window
    buffer = window.buffer
    for _ in range(n):
        if window.dot_offset >= len(_text(buffer, window.dot_line)):
            following = _forw(buffer, window.dot_line)
            if following == _head(buffer):
                return False
            window.dot_line = following
            window.dot_offset = 0
            window.flags |= WindowFlag.MOVE
        else:
            window.dot_offset += 1
    window.flags |= WindowFlag.MOVE
    return True


def goto_bob(editor: Editor) -> bool:
    """Move to the beginning of the buffer."""
    window = editor.current_window
    window.dot_line = _forw(window.buffer, _head(window.buffer))
    window.dot_offset = 0
    window.flags |= WindowFlag.MOVE
    return True


def goto_eob(editor: Editor) -> bool:
    """Move to the end of the last line of the buffer."""
    window = editor.current_window
    buffer = window.buffer
    window.dot_line = _back(buffer, _head(buffer))
    window.dot_offset = len(_text(buffer, window.dot_line))
    window.flags |= WindowFlag.MOVE
    return True


def goto_line(editor: Editor, number: int) -> bool:
    """Move to the start of line *number* (1-based), or to the end if past it.

    Return False for a negative number.
    """
    if number < 0:
        return False
    window = editor.current_window
    buffer = window.buffer
    head = _head(buffer)
    index = _forw(buffer, head)
    current = 1
    while index != head and current != number:
        current += 1
        index = _forw(buffer, index)
    window.dot_line = index
    window.dot_offset = 0
    window.flags |= WindowFlag.MOVE
    return True


def goal_offset(text: str, goal: int, tabsize: int = 8) -> int:
    """Return the offset in *text* that best matches display column *goal*."""
    column = 0
    for index, char in enumerate(text):
        new_column = column
        if char == "\t":
            new_column += tabsize - new_column % tabsize - 1
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            new_column += 1
        new_column += 1
        if new_column > goal:
            return index
        column = new_column
    return len(text)


def _start_line_move(editor: Editor) -> None:
    if not editor.last_flag & LINE_COMMAND:
        editor.goal = editor.column
    editor.this_flag |= LINE_COMMAND


def _land(editor: Editor, index: int) -> None:
    window = editor.current_window
    window.dot_line = index
    window.dot_offset = goal_offset(_text(window.buffer, index), editor.goal, editor.tabsize)
    window.flags |= WindowFlag.MOVE


def forward_line(editor: Editor, n: int = 1) -> bool:
    """Move down *n* lines, keeping the goal column; stop at the last line."""
    if n < 0:
        return backward_line(editor, -n)
    _start_line_move(editor)
    buffer = editor.current_buffer
    index = editor.current_window.dot_line
    for _ in range(n):
        following = _forw(buffer, index)
        if following == _head(buffer):
            break
        index = following
    _land(editor, index)
    return True


def backward_line(editor: Editor, n: int = 1) -> bool:
    """Move up *n* lines, keeping the goal column; stop at the first line."""
    if n < 0:
        return forward_line(editor, -n)
    _start_line_move(editor)
    buffer = editor.current_buffer
    index = editor.current_window.dot_line
    for _ in range(n):
        previous = _back(buffer, index)
        if previous == _head(buffer):
            break
        index = previous
    _land(editor, index)
    return True


def _page_lines(editor: Editor) -> int:
    return max(editor.current_window.rows - 2, 1)


def _show_top(editor: Editor, index: int) -> None:
    window = editor.current_window
    window.top_line = index
    window.top_offset = 0
    window.dot_line = index
    window.dot_offset = 0
    window.flags |= WindowFlag.MOVE


def forward_page(editor: Editor, n: int | None = None) -> bool:
    """Scroll forward *n* lines, or a window less two lines by default."""
    if n is None:
        n = _page_lines(editor)
    elif n < 0:
        return backward_page(editor, -n)
    window = editor.current_window
    buffer = window.buffer
    head = _head(buffer)
    index = window.top_line
    for _ in range(n):
        if index == head:
            break
        index = _forw(buffer, index)
    if index == head:
        index = _back(buffer, index)
    _show_top(editor, index)
    return True


def backward_page(editor: Editor, n: int | None = None) -> bool:
    """Scroll backward *n* lines, or a window less two lines by default."""
    if n is None:
        n = _page_lines(editor)
    elif n < 0:
        return forward_page(editor, -n)
    window = editor.current_window
    buffer = window.buffer
    index = window.top_line
    for _ in range(n):
        previous = _back(buffer, index)
        if previous == _head(buffer):
            break
        index = previous
    _show_top(editor, index)
    return True


def set_mark(editor: Editor) -> bool:
    """Set the mark at the cursor."""
    window = editor.current_window
    window.mark_line = window.dot_line
    window.mark_offset = window.dot_offset
    editor.message("[Mark set]")
    return True


def swap_mark(editor: Editor) -> bool:
    """Exchange the cursor and the mark; raise ValueError if there is no mark."""
    window = editor.current_window
    if window.mark_line is None:
        raise ValueError("No mark in this window")
    window.dot_line, window.mark_line = window.mark_line, window.dot_line
    window.dot_offset, window.mark_offset = window.mark_offset, window.dot_offset
    window.flags |= WindowFlag.MOVE
    return True


def is_blank_line(text: str) -> bool:
    """Return True if *text* holds only spaces and tabs."""
    return all(char in " \t" for char in text)


def first_nonblank(text: str) -> int:
    """Return the index of the first character that is not a space or tab, or -1."""
    for index, char in enumerate(text):
        if char not in " \t":
            return index
    return -1


def is_para_boundary(text: str) -> bool:
    """Return True if a line with *text* separates paragraphs.

    Blank lines, quotes, comments, POD markers, bullets and the ``-- ``
    signature marker are boundaries.
    """
    index = first_nonblank(text)
    if index < 0:
        return True
    c = text[index]
    c1 = text[index + 1] if index + 1 < len(text) else ""
    if c in ">#=":
        return True
    if (c, c1) in (("/", "*"), ("*", "/")):
        return True
    if c.isascii() and c.isdigit() and c1 == ")":
        return True
    if c in ".o" and c1 == " ":
        return True
    if c == "-":
        if c1.isspace():
            return True
        if c1 == "-" and len(text) == 3 and index == 0 and text[2] == " ":
            return True
    return c == "o" and c1.isspace()


def backward_paragraph(editor: Editor, n: int = 1) -> bool:
    """Move to the first word of the current (or previous) paragraph, *n* times."""
    if n < 0:
        return forward_paragraph(editor, -n)
    window = editor.current_window
    buffer = window.buffer
    head = _head(buffer)
    for _ in range(n):
        previous = _back(buffer, window.dot_line)
        at_start = window.dot_offset == 0 and (
            previous == head or is_para_boundary(_text(buffer, previous))
        )
        if not at_start:
            moved = backward_char(editor, 1)
            while moved and not _in_word(editor):
                moved = backward_char(editor, 1)
        window.dot_offset = 0
        while _back(buffer, window.dot_line) != head:
            if is_para_boundary(_text(buffer, window.dot_line)):
                break
            window.dot_line = _back(buffer, window.dot_line)
        moved = True
        while moved and not _in_word(editor):
            moved = forward_char(editor, 1)
    window.flags |= WindowFlag.MOVE
    return True


def forward_paragraph(editor: Editor, n: int = 1) -> bool:
    """Move to the end of the current (or next) paragraph, *n* times."""
    if n < 0:
        return backward_paragraph(editor, -n)
    window = editor.current_window
    buffer = window.buffer
    head = _head(buffer)
    for _ in range(n):
        moved = forward_char(editor, 1)
        while moved and not _in_word(editor):
            moved = forward_char(editor, 1)
        window.dot_offset = 0
        if moved:
            window.dot_line = _forw(buffer, window.dot_line)
        while window.dot_line != head:
            if is_para_boundary(_text(buffer, window.dot_line)):
                break
            window.dot_line = _forw(buffer, window.dot_line)
        window.dot_line = _back(buffer, window.dot_line)
        window.dot_offset = len(_text(buffer, window.dot_line))
    window.flags |= WindowFlag.MOVE
    return True