"""The virtual screen and the helpers used to bring the real screen up to date."""

from __future__ import annotations


class VirtualScreen:
    """A grid of characters written through a software cursor."""

    def __init__(self, rows: int, cols: int, tabsize: int = 8) -> None:
        if rows < 1 or cols < 1 or tabsize < 1:
            raise ValueError("rows, cols and tabsize must be positive")
        self.rows = rows
        self.cols = cols
        self.tabsize = tabsize
        self.row = 0
        self.col = 0
        self._cells = [[" "] * cols for _ in range(rows)]

    def move(self, row: int, col: int) -> None:
        """Place the cursor; raise ValueError for a position off the screen."""
        if not 0 <= row <= self.rows:
            raise ValueError(f"nonsense value for row: {row}")
        if not 0 <= col <= self.cols:
            raise ValueError(f"nonsense value for col: {col}")
        self.row = row
        self.col = col

    def put_char(self, char: str | int) -> bool:
        """Write a character, wrapping long lines and expanding tabs.

        Return False when the cursor has run off the bottom of the screen.
        """
        if isinstance(char, int):
            char = chr(char)
        if len(char) != 1:
            raise ValueError("put_char takes a single character")
        if self.row >= self.rows:
            return False
        if self.col >= self.cols:
            self.row += 1
            if self.row >= self.rows:
                return False
            self.col = 0
            self.put_char(char)
        elif char == "\t":
            while True:
                self.put_char(" ")
                if not (self.col % self.tabsize and self.col < self.cols):
                    break
        else:
            self._cells[self.row][self.col] = char
            self.col += 1
        return True

    def erase_eol(self) -> bool:
        """Blank the current row from the cursor to its end."""
        if self.row >= self.rows:
            return False
        cells = self._cells[self.row]
        cells[self.col:] = [" "] * (self.cols - self.col)
        return True

    def row_text(self, row: int) -> str:
        """Return the characters of *row*."""
        if not 0 <= row < self.rows:
            raise IndexError(f"row {row} is off the screen")
        return "".join(self._cells[row])


def display_offset(text: str, pos: int, tabsize: int = 8) -> int:
    """Return the display column of character *pos* in *text*, expanding tabs."""
    if pos > len(text):
        raise ValueError(f"position {pos} is past the end of the line")
    offset = 0
    for char in text[:pos]:
        offset = (offset // tabsize + 1) * tabsize if char == "\t" else offset + 1
    return offset


def visible_char(code: int | str) -> tuple[str, bool]:
    """Return how a screen byte is drawn: the glyph and whether it is highlighted.

    Control characters show as their letter, DEL as '~'; bytes with the high
    bit set (also used for selected text) show stripped, with control values
    as '?'.
    """
    if isinstance(code, str):
        code = ord(code)
    if not 0 <= code <= 0xFF:
        raise ValueError(f"not a byte: {code}")
    if code < 0x20:
        return chr(code ^ 0x40), True
    if code == 0x7F:
        return "~", True
    if code >= 0x80:
        low = code & 0x7F
        if low < 0x20:
            return "?", True
        if low == 0x7F:
            return "~", True
        return chr(low), True
    return chr(code), False


def plan_line_update(virtual: str, physical: str) -> tuple[int, str, bool] | None:
    """Work out the writes that turn the *physical* row into the *virtual* one.

    Return None if they agree, else ``(column, text, erase)``: write *text*
    at *column*, then erase to the end of the line if *erase* is set.
    Erasing is used only when it saves more than three characters.
    """
    if len(virtual) != len(physical):
        raise ValueError("virtual and physical rows differ in width")
    width = len(virtual)
    left = 0
    while left < width and virtual[left] == physical[left]:
        left += 1
    if left == width:
        return None

    right = width
    nonblank = False
    while virtual[right - 1] == physical[right - 1]:
        right -= 1
        if virtual[right] != " ":
            nonblank = True
    end = right
    if not nonblank:
        while end != left and virtual[end - 1] == " ":
            end -= 1
        if right - end <= 3:
            end = right
    return left, virtual[left:end], end != right