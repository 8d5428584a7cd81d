from __future__ import annotations
from pathlib import Path
from typing import Union, Iterable, Iterator
import logging
import os
import numpy as np
import cv2
from PIL import Image as PILImage
from dotenv import load_dotenv

from ..exceptions import ImageLoadError
from ..models.image import Image

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class ImageRepository:
    """
    Handles file I/O and pixel updates for Image entities.
    Pixels are kept in OpenCV order (gray, BGR or BGRA) once loaded.
    """
    def __init__(self):
        exts = os.getenv("VALID_IMAGE_EXTENSIONS", ".png,.jpg,.jpeg,.bmp,.tif,.tiff,.webp")
        self.VALID_EXTS = {ext.strip().lower() for ext in exts.split(",") if ext.strip()}

    @staticmethod
    def create_image(pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        if path is None:
            return Image(pixels)
        return Image(pixels=pixels, path=Path(path))

    @staticmethod
    def retrieve_image_dimensions(img: Image):
        return img.pixels.shape[:2]

    @staticmethod
    def load(path: Union[str, Path]) -> Image:
        path = Path(path)
        arr = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if arr is None:
            raise ImageLoadError(f"Image not found or unreadable: {path}")
        if arr.dtype != np.uint8:
            # 16-bit PNG/TIFF: keep the 8 most significant bits
            arr = (arr >> 8).astype(np.uint8) if arr.dtype == np.uint16 else cv2.convertScaleAbs(arr)
        if arr.ndim == 3 and arr.shape[2] == 1:
            arr = arr[:, :, 0]
        return Image(pixels=arr, path=path)

    @staticmethod
    def _to_pil_order(pixels: np.ndarray) -> np.ndarray:
        if pixels.ndim == 2:
            return pixels
        channels = pixels.shape[2]
        if channels == 3:
            return cv2.cvtColor(pixels, cv2.COLOR_BGR2RGB)
        if channels == 4:
            return cv2.cvtColor(pixels, cv2.COLOR_BGRA2RGBA)
        if channels == 1:
            return pixels[:, :, 0]
        # gray + alpha
        return pixels

    def save(self, image: Image) -> None:
        if image.path is None:
            raise ValueError("Cannot save an image without a path")
        Path(image.path).parent.mkdir(parents=True, exist_ok=True)
        pixels = np.ascontiguousarray(self._to_pil_order(image.pixels))
        PILImage.fromarray(pixels).save(image.path)

    def iter_dir(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> Iterator[Image]:
        """
        Yield Image objects one at a time.  Nothing accumulates in memory.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(folder)

        allowed = {e.lower() for e in (exts or self.VALID_EXTS)}
        pattern = "**/*" if recursive else "*"

        for p in sorted(folder.glob(pattern)):
            if p.suffix.lower() not in allowed:
                logger.debug(f"Skipping due to extension: {p}")
                continue
            if not p.is_file():
                logger.debug(f"Skipping because not file: {p}")
                continue
            try:
                yield self.load(p)
            except ImageLoadError as err:
                logger.warning(f"Skipping {p.name}: {err}")

