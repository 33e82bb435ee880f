"""In-memory drawing surface that records draw calls instead of painting."""

from typing import List, Tuple

import numpy as np


class RecordingSurface:
    """Surface implementation for renderer and controller tests."""

    def __init__(self, width: int, height: int):
        self.width = int(width)
        self.height = int(height)
        self.calls: List[Tuple] = []
        self.clears = 0

    def clear(self, color):
        self.calls = [("clear", color)]
        self.clears += 1

    def line(self, x0, y0, x1, y1, color, width):
        self.calls.append(("line", x0, y0, x1, y1, color, width))

    def circle(self, x, y, radius, fill, stroke, stroke_width):
        self.calls.append(("circle", x, y, radius, fill, stroke, stroke_width))

    def text(self, x, y, text, color, size):
        self.calls.append(("text", x, y, text, color, size))

    def of_kind(self, kind: str) -> List[Tuple]:
        return [c for c in self.calls if c[0] == kind]

    def to_array(self) -> np.ndarray:
        return np.zeros((self.height, self.width, 3), dtype=np.uint8)
