import pytest

from medit.buffers import (
    FILE_COLUMN,
    LIST_BUFFER_NAME,
    LIST_HEADER,
    LIST_WIDTH,
    MAIN_BUFFER_NAME,
    SIZE_WIDTH,
    Buffer,
    BufferFlag,
    Editor,
    format_size,
)


def test_format_size_right_aligned():
    text = format_size(42, SIZE_WIDTH)
    assert len(text) == SIZE_WIDTH
    assert text.strip() == "42"
    assert text.endswith("42")


def test_format_size_negative_rejected():
    with pytest.raises(ValueError):
        format_size(-1, SIZE_WIDTH)


def test_add_line_and_size():
    buffer = Buffer("b")
    for text in ("ab", "cde"):
        buffer.add_line(text)
    assert [line.text for line in buffer.lines] == ["ab", "cde"]
    assert buffer.size() == len("ab") + len("cde") + 2


def test_size_skips_missing_newline():
    buffer = Buffer("b")
    buffer.add_line("abc").newline = False
    assert buffer.size() == len("abc")


def test_clear_declined_keeps_text():
    buffer = Buffer("b")
    buffer.add_line("keep")
    buffer.flags |= BufferFlag.CHANGED
    prompts = []
    result = buffer.clear(lambda prompt: prompts.append(prompt) or False)
    assert result is False
    assert [line.text for line in buffer.lines] == ["keep"]
    assert prompts == ["Discard changes"]


def test_clear_accepted_resets():
    buffer = Buffer("b")
    buffer.add_line("x")
    buffer.flags |= BufferFlag.CHANGED
    buffer.mark_line = 0
    assert buffer.clear(lambda prompt: True) is True
    assert buffer.lines == []
    assert not buffer.changed
    assert buffer.mark_line is None
    assert buffer.dot_line == 0


def test_find_buffer_create_and_lookup():
    editor = Editor()
    assert editor.find_buffer("other") is None
    created = editor.find_buffer("other", True)
    assert editor.buffers[0] is created
    assert editor.find_buffer("other") is created
    assert created.name == "other"


def test_find_builtin_buffer_raises():
    editor = Editor()
    with pytest.raises(ValueError):
        editor.find_buffer(LIST_BUFFER_NAME)


def test_use_buffer_saves_and_restores_dot():
    editor = Editor()
    main = editor.current_buffer
    main.add_line("one")
    main.add_line("two")
    window = editor.current_window
    window.dot_line, window.dot_offset = 1, 2
    other = editor.use_buffer("other")
    assert window.buffer is other
    assert editor.current_buffer is other
    assert main.windows == 0
    assert (main.dot_line, main.dot_offset) == (1, 2)
    assert other.windows == 1
    editor.use_buffer(MAIN_BUFFER_NAME)
    assert (window.dot_line, window.dot_offset) == (1, 2)
    assert main.windows == 1
    assert other.windows == 0


def test_kill_buffer():
    editor = Editor()
    editor.find_buffer("gone", True)
    assert editor.kill_buffer("gone") is True
    assert editor.find_buffer("gone") is None
    assert editor.kill_buffer("never-existed") is True


def test_kill_displayed_buffer_raises():
    editor = Editor()
    with pytest.raises(ValueError):
        editor.kill_buffer(MAIN_BUFFER_NAME)


def test_kill_changed_buffer_declined():
    editor = Editor()
    buffer = editor.find_buffer("dirty", True)
    buffer.add_line("x")
    buffer.flags |= BufferFlag.CHANGED
    assert editor.kill_buffer("dirty", lambda prompt: False) is False
    assert editor.find_buffer("dirty") is buffer


def test_make_list_contents():
    editor = Editor()
    notes = editor.find_buffer("notes", True)
    notes.filename = "notes.txt"
    notes.add_line("hi")
    notes.flags |= BufferFlag.CHANGED
    lines = [line.text for line in editor.make_list().lines]
    assert tuple(lines[:2]) == LIST_HEADER
    normal = [b for b in editor.buffers if not b.temporary]
    assert len(lines) == 2 + len(normal)
    assert not any(LIST_BUFFER_NAME in text for text in lines)
    row = next(text for text in lines if " notes" in text)
    assert row.startswith("*")
    assert row.index("notes.txt") == FILE_COLUMN
    assert row[2:2 + SIZE_WIDTH].strip() == str(len("hi") + 1)
    main_row = next(text for text in lines if text.endswith(MAIN_BUFFER_NAME))
    assert main_row.startswith(" ")


def test_make_list_truncates_long_filename():
    editor = Editor()
    buffer = editor.find_buffer("long", True)
    buffer.filename = "f" * 300
    lines = [line.text for line in editor.make_list().lines]
    row = next(text for text in lines if " long" in text)
    assert len(row) == LIST_WIDTH - 1


def test_list_buffers_splits_screen():
    editor = Editor()
    rows = editor.current_window.rows
    shown = editor.list_buffers()
    assert shown.buffer is editor.list_buffer
    assert len(editor.windows) == 2
    assert sum(w.rows for w in editor.windows) + len(editor.windows) - 1 == rows
    assert editor.current_buffer.name == MAIN_BUFFER_NAME
    assert editor.list_buffer.windows == 1
    assert editor.current_buffer.windows == 1
    assert shown.mark_line is None and shown.dot_line == 0
    again = editor.list_buffers()
    assert again is shown
    assert len(editor.windows) == 2


def test_any_changed():
    editor = Editor()
    assert editor.any_changed() is False
    editor.list_buffer.flags |= BufferFlag.CHANGED
    assert editor.any_changed() is False
    editor.current_buffer.flags |= BufferFlag.CHANGED
    assert editor.any_changed() is True