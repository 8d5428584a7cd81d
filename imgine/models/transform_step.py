from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Union
import numpy as np
import cv2


@dataclass(frozen=True)
class CvtColorStep:
    """One OpenCV cvtColor call (float32 in, float32 out)."""
    code: int
    label: str = ""

    def apply(self, mat: np.ndarray) -> np.ndarray:
        return cv2.cvtColor(np.ascontiguousarray(mat, dtype=np.float32), self.code)


@dataclass(frozen=True)
class DirectionStep:
    """
    One direction-flag transform from color_matrices, run forward or
    inverse. The transform picks its precomputed matrix from the flag.
    """
    transform: Callable[..., np.ndarray]
    inverse: bool = False
    label: str = ""

    def apply(self, mat: np.ndarray) -> np.ndarray:
        return self.transform(mat, inverse=self.inverse)


TransformStep = Union[CvtColorStep, DirectionStep]
