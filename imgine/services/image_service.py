from __future__ import annotations
from pathlib import Path
from typing import Iterable, Iterator, Tuple, Union
import logging
import numpy as np
import cv2

from ..exceptions import UnsupportedChannelCountError
from ..models.image import Image
from ..models.roi import Roi
from ..repositories.image_repository import ImageRepository

logger = logging.getLogger(__name__)


class ImageService:
    """I/O helpers plus the 8-bit <-> float plumbing every algorithm shares."""
    def __init__(self):
        self.image_repository = ImageRepository()

    def create_image(self, pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        return self.image_repository.create_image(pixels, path)

    def load(self, path: str | Path) -> Image:
        """Load a single image from disk into an Image object."""
        return self.image_repository.load(path)

    def stream_gallery(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> Iterator[Image]:
        """
        Yield images lazily instead of returning a gigantic list.
        """
        return self.image_repository.iter_dir(folder,
                                              recursive=recursive,
                                              exts=exts)

    def save(self, image: Image) -> None:
        self.image_repository.save(image)

    def get_image_dimensions(self, img: Image):
        return self.image_repository.retrieve_image_dimensions(img)

    # ─── channel plumbing ─────────────────────────────────────────
    @staticmethod
    def require_channels(pixels: np.ndarray, expected: int = 3) -> None:
        channels = 1 if pixels.ndim == 2 else pixels.shape[2]
        if channels != expected:
            raise UnsupportedChannelCountError(
                f"Expected a {expected}-channel image, got {channels} channel(s)"
            )

    @staticmethod
    def split_alpha(pixels: np.ndarray) -> Tuple[np.ndarray, np.ndarray | None]:
        """Separate BGRA into (BGR, alpha); other layouts pass through untouched."""
        if pixels.ndim == 3 and pixels.shape[2] == 4:
            return np.ascontiguousarray(pixels[:, :, :3]), pixels[:, :, 3].copy()
        return pixels, None

    @staticmethod
    def merge_alpha(pixels: np.ndarray, alpha: np.ndarray | None) -> np.ndarray:
        if alpha is None:
            return pixels
        return np.dstack([pixels, alpha])

    @staticmethod
    def to_three_channels(gray: np.ndarray) -> np.ndarray:
        """Replicate a single channel across B, G and R."""
        return cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)

    # ─── 8-bit <-> float ──────────────────────────────────────────
    @staticmethod
    def to_float(img: Image) -> np.ndarray:
        """
        Copy Image.pixels into a float32 matrix scaled to [0, 1].
        The canonical 8-bit buffer is never touched.
        """
        return img.pixels.astype(np.float32) / np.float32(255.0)

    @staticmethod
    def to_uint8(mat: np.ndarray) -> np.ndarray:
        """Rescale a [0, 1] float matrix by 255 and quantize (saturating)."""
        return np.clip(np.rint(mat * 255.0), 0, 255).astype(np.uint8)

    # ─── simple transforms ────────────────────────────────────────
    def grayscale(self, img: Image) -> Image:
        """
        Luma with fixed weights 0.299 R + 0.587 G + 0.114 B.
        Single-channel images are copied as-is.
        """
        pixels = img.pixels
        channels = img.channels
        if channels == 1:
            gray = pixels.reshape(pixels.shape[:2]).copy()
        elif channels == 3:
            gray = cv2.cvtColor(pixels, cv2.COLOR_BGR2GRAY)
        elif channels == 4:
            gray = cv2.cvtColor(pixels, cv2.COLOR_BGRA2GRAY)
        else:
            raise UnsupportedChannelCountError(
                f"Cannot convert a {channels}-channel image to grayscale"
            )
        return self.create_image(gray)

    def crop_pixels(self, img: Image, roi: Roi) -> np.ndarray:
        rows, cols = self.get_image_dimensions(img)
        if roi.area == 0 or not roi.fits(cols, rows):
            logger.error(f"Invalid crop {roi.as_tuple()} for a {cols}x{rows} image")
            raise ValueError(f"Invalid crop bounds {roi.as_tuple()} for a {cols}x{rows} image")
        return roi.view(img.pixels).copy()

    # ─── pixel inspection ─────────────────────────────────────────
    @staticmethod
    def rgb_to_hex(r: int, g: int, b: int) -> str:
        """Convert RGB values to a '#'-prefixed hexadecimal string."""
        return f"#{int(r):02x}{int(g):02x}{int(b):02x}"

    @staticmethod
    def alpha_to_opacity(a: int) -> float:
        """Convert an 8-bit alpha value to an opacity between 0 and 1."""
        return int(a) / 255.0

    def inspect_pixel(self, img: Image, x: int, y: int) -> dict:
        """
        Describe the pixel at column x, row y.

        Returns:
            dict: channel values (image channel order), plus 'hex' for
            color pixels and 'opacity' for pixels with alpha.
        """
        rows, cols = self.get_image_dimensions(img)
        if not (0 <= x < cols and 0 <= y < rows):
            raise IndexError(f"Pixel ({x}, {y}) outside a {cols}x{rows} image")

        values = np.atleast_1d(img.pixels[y, x]).tolist()
        details: dict = {"x": x, "y": y, "values": values}
        if len(values) == 1:
            details["hex"] = self.rgb_to_hex(values[0], values[0], values[0])
        elif len(values) == 2:
            details["hex"] = self.rgb_to_hex(values[0], values[0], values[0])
            details["opacity"] = self.alpha_to_opacity(values[1])
        else:
            b, g, r = values[:3]
            details["hex"] = self.rgb_to_hex(r, g, b)
            if len(values) == 4:
                details["opacity"] = self.alpha_to_opacity(values[3])
        return details
