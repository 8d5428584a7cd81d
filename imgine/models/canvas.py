from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

from .image import Image
from .roi import Roi


@dataclass
class CanvasState:
    """One visual state of a canvas: its image and the selected ROI."""
    image: Image
    roi: Roi


@dataclass
class Canvas:
    """
    Working session of one canvas. `history` holds earlier states,
    most recent last.
    """
    id: str
    name: str
    current: CanvasState
    history: List[CanvasState] = field(default_factory=list)

    @property
    def image(self) -> Image:
        return self.current.image

    @property
    def roi(self) -> Roi:
        return self.current.roi
