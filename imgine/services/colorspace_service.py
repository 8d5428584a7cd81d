from __future__ import annotations
import logging
import numpy as np

from ..models.colorspace import Colorspace
from ..repositories.transform_repository import TransformRepository
from .image_service import ImageService

logger = logging.getLogger(__name__)


class ColorspaceService:
    """
    Converts float32 3-channel matrices between named colorspaces by
    running the steps the route table hands back.
    """

    def __init__(self):
        self.transform_repository = TransformRepository()

    def convert(self, mat: np.ndarray, src_space, dst_space) -> np.ndarray:
        """
        Args:
            mat: (H, W, 3) matrix holding samples in `src_space`
                 (RGB family scaled to [0, 1]).
            src_space, dst_space: Colorspace members or names.

        Returns:
            np.ndarray: a new float32 (H, W, 3) matrix in `dst_space`.
        """
        src = Colorspace.from_name(src_space)
        dst = Colorspace.from_name(dst_space)
        ImageService.require_channels(mat, 3)

        out = np.array(mat, dtype=np.float32, copy=True)
        for step in self.transform_repository.retrieve_route(src, dst):
            out = step.apply(out)
        return out

    def describe_route(self, src_space, dst_space) -> str:
        """Human-readable route, e.g. 'HSV -> BGR -> CIEXYZ'."""
        path = self.transform_repository.retrieve_path(
            Colorspace.from_name(src_space), Colorspace.from_name(dst_space)
        )
        return " -> ".join(space.value for space in path)
