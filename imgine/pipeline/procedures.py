"""
Pure-function surface of the color engine.

Every function takes read-only inputs and returns a newly owned result;
callers' images are never modified.
"""
from __future__ import annotations
from typing import Tuple

import numpy as np

from ..models.image import Image
from ..models.roi import Roi
from ..services.colorspace_service import ColorspaceService
from ..services.color_transfer_service import ColorTransferService
from ..services.histogram_service import HistogramService
from ..services.image_service import ImageService
from ..services.statistics_service import StatisticsService


def convert_colorspace(
    mat: np.ndarray,
    src_space,
    dst_space,
    *,
    colorspace_service: ColorspaceService = ColorspaceService(),
) -> np.ndarray:
    """Convert a float32 (H, W, 3) matrix from `src_space` into `dst_space`."""
    return colorspace_service.convert(mat, src_space, dst_space)


def region_statistics(
    image: Image | np.ndarray,
    roi: Roi,
    *,
    stats_service: StatisticsService = StatisticsService(),
) -> Tuple[Tuple[float, ...], Tuple[float, ...]]:
    """Per-channel (means, stddevs) over `roi`."""
    pixels = image.pixels if isinstance(image, Image) else image
    return stats_service.region_statistics(pixels, roi)


def color_transfer(
    source_image: Image,
    source_roi: Roi,
    reference_image: Image,
    reference_roi: Roi,
    space=None,
    *,
    color_transfer_service: ColorTransferService = None,
) -> Image:
    """
    Impose the reference swatch's color statistics on the source image.
    `space` defaults to Ruderman lαβ (IMGINE_DEFAULT_TRANSFER_SPACE).
    """
    color_transfer_service = color_transfer_service or ColorTransferService()
    return color_transfer_service.transfer(
        source_image, source_roi, reference_image, reference_roi, space)


def grayscale(
    image: Image,
    *,
    image_service: ImageService = ImageService(),
) -> Image:
    return image_service.grayscale(image)


def equalize_histogram(
    image: Image,
    space=None,
    *,
    histogram_service: HistogramService = None,
) -> Image:
    """Equalize the lightness/value channel; `space` defaults to CIELAB."""
    histogram_service = histogram_service or HistogramService()
    return histogram_service.equalize(image, space)


def render_histogram(
    image: Image,
    *,
    histogram_service: HistogramService = None,
) -> Image:
    histogram_service = histogram_service or HistogramService()
    return histogram_service.render(image)
