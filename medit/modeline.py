"""The mode line drawn at the bottom of each window."""

from __future__ import annotations

from medit.buffers import Window


def _dot_char(window: Window) -> int:
    lines = window.buffer.lines
    if window.dot_line < len(lines):
        text = lines[window.dot_line].text
        if window.dot_offset < len(text):
            return ord(text[window.dot_offset]) & 0xFF
    return 0


def _dot_has_newline(window: Window) -> bool:
    lines = window.buffer.lines
    return window.dot_line < len(lines) and lines[window.dot_line].newline


def format_modeline(
    window: Window,
    width: int,
    version: str = "",
    mouse: bool = False,
    vi_mode: bool = False,
) -> str:
    """Return the mode line for *window*, exactly *width* columns wide.

    It shows the changed marker, the version, mode letters (M mouse, V vi,
    W wrap), the buffer and file names, the character under the cursor in
    hex and whether the cursor line ends with a newline, padded with '-'.
    """
    if width < 1:
        raise ValueError(f"width must be positive, got {width}")
    buffer = window.buffer
    parts = ["-", "*" if buffer.changed else "-", version, "-"]
    # The padding count skips a few of the fixed characters, so the padded
    # text runs past the width and is cut at the screen edge.
    count = 2 + len(version) + 1
    for letter, enabled in (("M", mouse), ("V", vi_mode), ("W", buffer.wrap)):
        if enabled:
            parts.append(letter)
            count += 1
    parts.append("- ")
    count += 1
    parts.append(buffer.name + " ")
    count += len(buffer.name) + 1
    if buffer.filename:
        parts.append(f"- {buffer.filename} ")
        count += len(buffer.filename) + 3
    parts.append(f"- {_dot_char(window):02x} -")
    parts.append("N" if _dot_has_newline(window) else "-")
    count += 1
    parts.append("-" * max(width - count, 0))
    return "".join(parts)[:width]