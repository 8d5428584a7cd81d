from __future__ import annotations

import os
import logging
from typing import Sequence

import numpy as np
from dotenv import load_dotenv

from ..exceptions import DegenerateStatisticsError
from ..models.colorspace import Colorspace
from ..models.image import Image
from ..models.roi import Roi
from .colorspace_service import ColorspaceService
from .image_service import ImageService
from .statistics_service import StatisticsService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

ZERO_VARIANCE_POLICIES = ("reject", "epsilon")


class ColorTransferService:
    """
    Statistical color transfer
    (E. Reinhard et al., "Color Transfer between Images", 2001;
    E. Reinhard & T. Pouli, "Colour Spaces for Colour Transfer", 2011).

    The source ROI and the reference ROI pick which statistics get matched;
    the affine remap itself runs over every pixel of the source image.
    *   No I/O here; works only with Image objects (BGR numpy arrays).
    *   Uses environment variables for configuration.
    """

    def __init__(self,
                 default_space: str = None,
                 zero_variance_policy: str = None,
                 epsilon: float = None):
        """
        Args:
            default_space: colorspace used when transfer() gets none (defaults to env var)
            zero_variance_policy: 'reject' or 'epsilon' (defaults to env var)
            epsilon: smallest source stddev accepted, or substituted (defaults to env var)
        """
        self.default_space = Colorspace.from_name(
            default_space or os.getenv("IMGINE_DEFAULT_TRANSFER_SPACE", "Ruderman_lab"))
        self.zero_variance_policy = (
            zero_variance_policy or os.getenv("IMGINE_ZERO_VARIANCE_POLICY", "reject")).lower()
        if self.zero_variance_policy not in ZERO_VARIANCE_POLICIES:
            raise ValueError(
                f"zero_variance_policy must be one of {ZERO_VARIANCE_POLICIES}, "
                f"got {self.zero_variance_policy!r}")
        self.epsilon = float(epsilon if epsilon is not None
                             else os.getenv("IMGINE_STDDEV_EPSILON", "1e-6"))

        self.img_svc = ImageService()
        self.colorspace_svc = ColorspaceService()
        self.stats_svc = StatisticsService()

    # ─── Public API ────────────────────────────────────────────────
    def transfer(
        self,
        source: Image,
        source_roi: Roi,
        reference: Image,
        reference_roi: Roi,
        space=None,
    ) -> Image:
        """
        Match the source swatch's per-channel mean/stddev to the reference
        swatch's, in `space`, and return a *new* 8-bit BGR image.
        """
        space = Colorspace.from_name(space or self.default_space)
        self.img_svc.require_channels(source.pixels, 3)
        self.img_svc.require_channels(reference.pixels, 3)
        self.stats_svc.check_roi(source.pixels, source_roi)
        self.stats_svc.check_roi(reference.pixels, reference_roi)

        src_mat = self.img_svc.to_float(source)
        ref_mat = self.img_svc.to_float(reference)

        src_conv = self.colorspace_svc.convert(src_mat, Colorspace.BGR, space)
        ref_swatch = self.colorspace_svc.convert(
            reference_roi.view(ref_mat), Colorspace.BGR, space)

        src_mean, src_std = self.stats_svc.region_statistics(src_conv, source_roi)
        ref_mean, ref_std = self.stats_svc.region_statistics(
            ref_swatch, Roi.full(ref_swatch))
        logger.debug(f"Swatch stats in {space.value}: src mean={src_mean} std={src_std}, "
                     f"ref mean={ref_mean} std={ref_std}")

        src_std = self._guard_source_stddev(src_std, space)
        if any(s < self.epsilon for s in ref_std):
            logger.warning(f"Reference swatch has zero variance in {space.value}; "
                           f"affected channels collapse to the reference mean")

        dst_conv = self._remap(src_conv, src_mean, src_std, ref_mean, ref_std)
        dst_mat = self.colorspace_svc.convert(dst_conv, space, Colorspace.BGR)
        return self.img_svc.create_image(self.img_svc.to_uint8(dst_mat))

    # ─── Internal helpers ──────────────────────────────────────────
    def _guard_source_stddev(self, src_std: Sequence[float], space: Colorspace):
        flat = [i for i, s in enumerate(src_std) if s < self.epsilon]
        if not flat:
            return src_std
        if self.zero_variance_policy == "reject":
            raise DegenerateStatisticsError(
                f"Source swatch has zero variance in {space.value} channel(s) {flat}; "
                f"pick a textured region or use the 'epsilon' policy")
        logger.warning(f"Source swatch has zero variance in {space.value} channel(s) {flat}; "
                       f"substituting stddev={self.epsilon:g}")
        return tuple(max(s, self.epsilon) for s in src_std)

    @staticmethod
    def _remap(mat: np.ndarray, src_mean, src_std, ref_mean, ref_std) -> np.ndarray:
        """out[i] = (ref_std[i] / src_std[i]) * (pixel[i] - src_mean[i]) + ref_mean[i]"""
        src_mean = np.asarray(src_mean, dtype=np.float64)
        src_std = np.asarray(src_std, dtype=np.float64)
        ref_mean = np.asarray(ref_mean, dtype=np.float64)
        ref_std = np.asarray(ref_std, dtype=np.float64)

        scale = ref_std / src_std
        out = (mat - src_mean) * scale + ref_mean
        return out.astype(np.float32)
