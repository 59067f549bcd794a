"""Braille canvas: 2x4 virtual pixels per text cell."""

from typing import List

import numpy as np

BRAILLE_BASE = 0x2800

# Bit for each dot, indexed [row][column] inside a cell.
# Left column is dots 1, 2, 3, 7; right column is dots 4, 5, 6, 8.
DOT_BITS = (
    (0x01, 0x08),
    (0x02, 0x10),
    (0x04, 0x20),
    (0x40, 0x80),
)


class BrailleCanvas:
    """Pixel grid rendered as rows of braille glyphs."""

    def __init__(self, width: int, height: int):
        """Initialize braille canvas.

        Args:
            width: Width in characters (2 pixels each)
            height: Height in characters (4 pixels each)
        """
        self.width = width
        self.height = height
        self.pixels = np.zeros((height * 4, width * 2), dtype=bool)

    @property
    def pixel_width(self) -> int:
        return self.width * 2

    @property
    def pixel_height(self) -> int:
        return self.height * 4

    def set(self, x: int, y: int) -> None:
        """Turn on pixel (x, y); coordinates outside the canvas are ignored."""
        if 0 <= x < self.pixel_width and 0 <= y < self.pixel_height:
            self.pixels[y, x] = True

    def plot_line(self, rows: List[int]) -> None:
        """Plot one pixel row per column, joining vertical gaps.

        When two neighbouring points are more than one row apart the rows
        in between are filled on the later column.
        """
        for x, y in enumerate(rows[:self.pixel_width]):
            self.set(x, y)
            if x == 0:
                continue
            previous = rows[x - 1]
            steps = abs(y - previous)
            direction = 1 if y > previous else -1
            for s in range(1, steps):
                self.set(x, previous + s * direction)

    def rows(self) -> List[str]:
        """Render the canvas as one string per character row."""
        lines = []
        for char_row in range(self.height):
            cells = []
            for char_col in range(self.width):
                block = self.pixels[char_row * 4:char_row * 4 + 4, char_col * 2:char_col * 2 + 2]
                code = BRAILLE_BASE
                for dy in range(4):
                    for dx in range(2):
                        if block[dy, dx]:
                            code |= DOT_BITS[dy][dx]
                cells.append(chr(code))
            lines.append("".join(cells))
        return lines
