from __future__ import annotations
from typing import Tuple
import numpy as np
import cv2

from ..exceptions import DegenerateStatisticsError, RoiOutOfBoundsError
from ..models.roi import Roi


class StatisticsService:
    """Per-channel mean and population standard deviation over a ROI."""

    @staticmethod
    def check_roi(pixels: np.ndarray, roi: Roi) -> None:
        rows, cols = pixels.shape[:2]
        if not roi.fits(cols, rows):
            raise RoiOutOfBoundsError(
                f"ROI {roi.as_tuple()} exceeds the {cols}x{rows} image"
            )
        if roi.area == 0:
            raise DegenerateStatisticsError(
                f"ROI {roi.as_tuple()} has zero area; statistics are undefined"
            )

    def region_statistics(
        self, pixels: np.ndarray, roi: Roi
    ) -> Tuple[Tuple[float, ...], Tuple[float, ...]]:
        """
        Args:
            pixels: (H, W) or (H, W, C) array, 8-bit or float.
            roi: window to measure; must lie inside the image.

        Returns:
            (means, stddevs), one entry per channel in the array's own order.
        """
        self.check_roi(pixels, roi)
        window = np.ascontiguousarray(roi.view(pixels))
        if window.dtype not in (np.uint8, np.float32, np.float64):
            window = window.astype(np.float64)
        mean, stddev = cv2.meanStdDev(window)
        return (tuple(float(v) for v in mean.ravel()),
                tuple(float(v) for v in stddev.ravel()))
