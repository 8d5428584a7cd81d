from __future__ import annotations

import os
import logging
from typing import Dict, List, Optional, Tuple

import numpy as np
import cv2
from dotenv import load_dotenv

from ..exceptions import UnsupportedChannelCountError, UnsupportedColorspaceError
from ..models.colorspace import Colorspace
from ..models.image import Image
from ..models.roi import Roi
from .image_service import ImageService
from .statistics_service import StatisticsService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# 8-bit cvtColor codes (to, from) and the channel carrying lightness/value.
# RGB-family spaces have no lightness channel, so their first channel is used.
_EQUALIZE_SPACES: Dict[Colorspace, Tuple[Optional[int], Optional[int], int]] = {
    Colorspace.BGR: (None, None, 0),
    Colorspace.RGB: (cv2.COLOR_BGR2RGB, cv2.COLOR_RGB2BGR, 0),
    Colorspace.CIELAB: (cv2.COLOR_BGR2Lab, cv2.COLOR_Lab2BGR, 0),
    Colorspace.HSV: (cv2.COLOR_BGR2HSV, cv2.COLOR_HSV2BGR, 2),
    Colorspace.HLS: (cv2.COLOR_BGR2HLS, cv2.COLOR_HLS2BGR, 1),
    Colorspace.YCrCb: (cv2.COLOR_BGR2YCrCb, cv2.COLOR_YCrCb2BGR, 0),
    Colorspace.CIEXYZ: (cv2.COLOR_BGR2XYZ, cv2.COLOR_XYZ2BGR, 1),
}

GRAY_COLOR = (255, 255, 255)
BGR_COLORS = ((255, 0, 0), (0, 255, 0), (0, 0, 255))


class HistogramService:
    """
    256-bin histograms: computing, drawing, and equalizing them.
    Works on the 8-bit buffer as stored; nothing here goes through float.
    """

    def __init__(self,
                 width: int = None,
                 height: int = None,
                 thickness: int = None,
                 default_space: str = None):
        self.width = int(width or os.getenv("IMGINE_HIST_WIDTH", "512"))
        self.height = int(height or os.getenv("IMGINE_HIST_HEIGHT", "256"))
        self.thickness = int(thickness or os.getenv("IMGINE_HIST_THICKNESS", "2"))
        self.default_space = Colorspace.from_name(
            default_space or os.getenv("IMGINE_DEFAULT_EQUALIZE_SPACE", "CIELAB"))
        self.img_svc = ImageService()
        self.stats_svc = StatisticsService()

    # ─── computation ──────────────────────────────────────────────
    def compute(self, pixels: np.ndarray, roi: Roi | None = None) -> List[np.ndarray]:
        """
        One (256,) float32 histogram per color channel over [0, 256).
        Alpha is left out. Bins sum to the pixel count of the image or ROI.
        """
        if roi is not None:
            self.stats_svc.check_roi(pixels, roi)
            pixels = roi.view(pixels)
        pixels = np.ascontiguousarray(pixels)
        channels = 1 if pixels.ndim == 2 else pixels.shape[2]
        if channels == 4:
            channels = 3
        elif channels == 2:
            channels = 1
        return [
            cv2.calcHist([pixels], [i], None, [256], [0, 256]).ravel()
            for i in range(channels)
        ]

    # ─── rendering ────────────────────────────────────────────────
    def render(self, img: Image) -> Image:
        """
        Draw every channel histogram as a polyline on a black
        width x height canvas: white for grayscale, blue/green/red for BGR.
        """
        is_gray = img.channels in (1, 2)
        pixels = img.pixels
        if is_gray:
            gray = pixels if pixels.ndim == 2 else np.ascontiguousarray(pixels[:, :, 0])
            pixels = self.img_svc.to_three_channels(gray)
        histograms = self.compute(pixels)
        if is_gray:
            histograms, colors = histograms[:1], (GRAY_COLOR,)
        else:
            colors = BGR_COLORS

        canvas = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        bin_w = self.width / 256.0
        for hist, color in zip(histograms, colors):
            norm = cv2.normalize(hist, None, alpha=0, beta=self.height - 1,
                                 norm_type=cv2.NORM_MINMAX).ravel()
            pts = np.array(
                [[round(i * bin_w), self.height - 1 - round(float(v))] for i, v in enumerate(norm)],
                dtype=np.int32,
            ).reshape(-1, 1, 2)
            cv2.polylines(canvas, [pts], isClosed=False, color=color,
                          thickness=self.thickness)
        return self.img_svc.create_image(canvas)

    # ─── equalization ─────────────────────────────────────────────
    def equalize(self, img: Image, space=None) -> Image:
        """
        Equalize the lightness/value channel of `img` in `space`.

        Single-channel images (and gray + alpha) always equalize channel 0.
        Color images are converted with 8-bit cvtColor, one channel is
        equalized, and the result is converted back; alpha is preserved.
        """
        space = Colorspace.from_name(space or self.default_space)
        pixels = img.pixels
        channels = img.channels

        if channels == 1:
            gray = pixels.reshape(pixels.shape[:2])
            return self.img_svc.create_image(cv2.equalizeHist(np.ascontiguousarray(gray)))
        if channels == 2:
            out = pixels.copy()
            out[:, :, 0] = cv2.equalizeHist(np.ascontiguousarray(pixels[:, :, 0]))
            return self.img_svc.create_image(out)
        if channels not in (3, 4):
            raise UnsupportedChannelCountError(
                f"Cannot equalize a {channels}-channel image")

        try:
            to_code, from_code, channel = _EQUALIZE_SPACES[space]
        except KeyError:
            raise UnsupportedColorspaceError(
                f"Equalization is not defined in {space.value}; use one of "
                f"{', '.join(s.value for s in _EQUALIZE_SPACES)}") from None

        bgr, alpha = self.img_svc.split_alpha(pixels)
        converted = bgr if to_code is None else cv2.cvtColor(bgr, to_code)
        planes = list(cv2.split(converted))
        planes[channel] = cv2.equalizeHist(planes[channel])
        merged = cv2.merge(planes)
        restored = merged if from_code is None else cv2.cvtColor(merged, from_code)
        logger.debug(f"Equalized channel {channel} in {space.value}")
        return self.img_svc.create_image(self.img_svc.merge_alpha(restored, alpha))
