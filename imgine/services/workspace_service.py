from __future__ import annotations

import uuid
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np

from ..exceptions import CanvasNotFoundError, UnsupportedChannelCountError
from ..models.canvas import Canvas, CanvasState
from ..models.image import Image
from ..models.roi import Roi
from .color_transfer_service import ColorTransferService
from .histogram_service import HistogramService
from .image_service import ImageService
from .statistics_service import StatisticsService

logger = logging.getLogger(__name__)

# channel count -> (OpenCV type name, depth in bits, sample type)
IMG_CV_TYPES = {
    1: ("CV_8UC1", 8, "uchar"),
    2: ("CV_8UC2", 8, "uchar"),
    3: ("CV_8UC3", 8, "uchar"),
    4: ("CV_8UC4", 8, "uchar"),
}


class Workspace:
    """
    Caller-owned registry of canvases. Create one per session and pass it
    around; nothing here is process-wide.
    """

    def __init__(self,
                 image_service: ImageService = None,
                 color_transfer_service: ColorTransferService = None,
                 histogram_service: HistogramService = None):
        self.image_service = image_service or ImageService()
        self.color_transfer_service = color_transfer_service or ColorTransferService()
        self.histogram_service = histogram_service or HistogramService()
        self.stats_service = StatisticsService()

        self.canvases: Dict[str, Canvas] = {}
        self.active_canvas: Optional[Canvas] = None
        self._canvas_counter = 0

    # ─── bookkeeping ──────────────────────────────────────────────
    def new_canvas(
        self,
        image: Image = None,
        *,
        rows: int = 0,
        cols: int = 0,
        channels: int = 3,
        name: str = None,
    ) -> Canvas:
        """
        Register a canvas holding `image`, or a black rows x cols image,
        and make it the active one.
        """
        if image is None:
            if channels not in IMG_CV_TYPES:
                raise UnsupportedChannelCountError(f"Canvases hold 1-4 channels, not {channels}")
            shape = (rows, cols) if channels == 1 else (rows, cols, channels)
            image = self.image_service.create_image(np.zeros(shape, dtype=np.uint8))

        self._canvas_counter += 1
        name = name or f"canvas{self._canvas_counter}"
        if name in self.canvases:
            raise ValueError(f"A canvas named {name!r} already exists")

        canvas = Canvas(
            id=uuid.uuid4().hex,
            name=name,
            current=CanvasState(image=image, roi=Roi.full(image.pixels)),
        )
        self.canvases[name] = canvas
        self.active_canvas = canvas
        logger.info(f"Canvas {name!r} created ({image.cols}x{image.rows}, {image.channels} ch)")
        return canvas

    def get(self, name: str = None) -> Canvas:
        """Named canvas, or the active one when no name is given."""
        if name is None:
            if self.active_canvas is None:
                raise CanvasNotFoundError("No active canvas")
            return self.active_canvas
        try:
            return self.canvases[name]
        except KeyError:
            raise CanvasNotFoundError(f"No canvas named {name!r}") from None

    def list(self) -> List[str]:
        return list(self.canvases)

    def switch_to(self, name: str) -> Canvas:
        self.active_canvas = self.get(name)
        return self.active_canvas

    def rename(self, old: str, new: str) -> Canvas:
        canvas = self.get(old)
        if new in self.canvases:
            raise ValueError(f"A canvas named {new!r} already exists")
        del self.canvases[old]
        canvas.name = new
        self.canvases[new] = canvas
        return canvas

    def delete(self, name: str) -> None:
        canvas = self.get(name)
        del self.canvases[name]
        if self.active_canvas is canvas:
            self.active_canvas = next(iter(self.canvases.values()), None)
        logger.info(f"Canvas {name!r} deleted")

    def properties(self, name: str = None) -> dict:
        canvas = self.get(name)
        image = canvas.image
        cv_type, depth, sample = IMG_CV_TYPES[image.channels]
        return {
            "id": canvas.id,
            "name": canvas.name,
            "rows": image.rows,
            "cols": image.cols,
            "channels": image.channels,
            "depth": depth,
            "sample": sample,
            "type": cv_type,
            "roi": canvas.roi.as_tuple(),
            "history": len(canvas.history),
        }

    # ─── import / export ──────────────────────────────────────────
    def import_image(self, path: Union[str, Path], name: str = None) -> Canvas:
        image = self.image_service.load(path)
        return self.new_canvas(image, name=name or Path(path).stem)

    def export(self, name: str, path: Union[str, Path]) -> Path:
        image = self.get(name).image
        out = self.image_service.create_image(image.pixels, path)
        self.image_service.save(out)
        return out.path

    # ─── state changes ────────────────────────────────────────────
    def commit(self, name: str, image: Image) -> Canvas:
        """Replace a canvas's image, pushing the previous state to history."""
        canvas = self.get(name)
        canvas.history.append(canvas.current)
        roi = canvas.roi
        if not roi.fits(image.cols, image.rows):
            roi = Roi.full(image.pixels)
        canvas.current = CanvasState(image=image, roi=roi)
        return canvas

    def undo(self, name: str = None) -> Canvas:
        canvas = self.get(name)
        if not canvas.history:
            raise ValueError(f"Canvas {canvas.name!r} has no history to undo")
        canvas.current = canvas.history.pop()
        return canvas

    def select(self, name: str, roi: Roi) -> Roi:
        """
        Set the canvas ROI. Selections reaching outside the image are
        clipped to it.
        """
        canvas = self.get(name)
        image = canvas.image
        clipped = roi.clipped(image.cols, image.rows)
        if clipped != roi:
            logger.warning(f"ROI {roi.as_tuple()} clipped to {clipped.as_tuple()} "
                           f"on canvas {canvas.name!r}")
        canvas.current = CanvasState(image=image, roi=clipped)
        return clipped

    # ─── inspection ───────────────────────────────────────────────
    def inspect(self, name: str, x: int, y: int) -> dict:
        return self.image_service.inspect_pixel(self.get(name).image, x, y)

    def statistics(self, name: str = None):
        canvas = self.get(name)
        return self.stats_service.region_statistics(canvas.image.pixels, canvas.roi)

    # ─── procedures (results land in a new, active canvas) ────────
    def run_color_transfer(self, src_name: str, ref_name: str, space=None) -> Canvas:
        src, ref = self.get(src_name), self.get(ref_name)
        result = self.color_transfer_service.transfer(
            src.image, src.roi, ref.image, ref.roi, space)
        return self.new_canvas(result, name=self._derived_name(src.name, "transfer"))

    def run_equalize(self, name: str, space=None) -> Canvas:
        canvas = self.get(name)
        result = self.histogram_service.equalize(canvas.image, space)
        return self.new_canvas(result, name=self._derived_name(canvas.name, "equalized"))

    def run_grayscale(self, name: str) -> Canvas:
        canvas = self.get(name)
        result = self.image_service.grayscale(canvas.image)
        return self.new_canvas(result, name=self._derived_name(canvas.name, "gray"))

    def run_histogram(self, name: str) -> Canvas:
        canvas = self.get(name)
        result = self.histogram_service.render(canvas.image)
        return self.new_canvas(result, name=self._derived_name(canvas.name, "histogram"))

    def _derived_name(self, base: str, suffix: str) -> str:
        name = f"{base}_{suffix}"
        n = 2
        while name in self.canvases:
            name = f"{base}_{suffix}{n}"
            n += 1
        return name
