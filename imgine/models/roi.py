from __future__ import annotations
from dataclasses import dataclass
import numpy as np


@dataclass(frozen=True)
class Roi:
    """
    Axis-aligned rectangle over an image's pixel grid.
    Never owns pixels; view() hands back a numpy slice.
    """
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def full(cls, pixels: np.ndarray) -> "Roi":
        rows, cols = pixels.shape[:2]
        return cls(0, 0, cols, rows)

    @classmethod
    def parse(cls, text: str) -> "Roi":
        """Build a Roi from an 'x,y,width,height' string."""
        parts = [p.strip() for p in text.split(",")]
        if len(parts) != 4:
            raise ValueError(f"ROI must be 'x,y,width,height', got {text!r}")
        return cls(*(int(p) for p in parts))

    @property
    def area(self) -> int:
        return max(self.width, 0) * max(self.height, 0)

    def fits(self, width: int, height: int) -> bool:
        return (self.x >= 0 and self.y >= 0
                and self.width >= 0 and self.height >= 0
                and self.x + self.width <= width
                and self.y + self.height <= height)

    def clipped(self, width: int, height: int) -> "Roi":
        """Intersect with the (0, 0, width, height) grid."""
        x1 = min(max(self.x, 0), width)
        y1 = min(max(self.y, 0), height)
        x2 = min(max(self.x + self.width, 0), width)
        y2 = min(max(self.y + self.height, 0), height)
        return Roi(x1, y1, max(x2 - x1, 0), max(y2 - y1, 0))

    def view(self, pixels: np.ndarray) -> np.ndarray:
        return pixels[self.y:self.y + self.height, self.x:self.x + self.width]

    def as_tuple(self):
        return self.x, self.y, self.width, self.height
