from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import numpy as np


@dataclass
class Image:
    """
    Simple data object: 8-bit pixels in OpenCV channel order (+ optional
    source path for bookkeeping).
    """
    pixels: np.ndarray # Shape (H, W) or (H, W, C) with C in 1..4, dtype uint8, BGR(A) order.
    path: Path | None = None # Source of the image.

    @property
    def rows(self) -> int:
        return self.pixels.shape[0]

    @property
    def cols(self) -> int:
        return self.pixels.shape[1]

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else self.pixels.shape[2]
