"""
Batch Color Transfer Pipeline
Streams a folder of images and imposes one reference swatch's color
statistics on each of them, whole image as the source swatch.
"""

import os
import logging
from pathlib import Path
from typing import List, Union

from dotenv import load_dotenv
from tqdm import tqdm

from ..exceptions import ImgineError
from ..models.image import Image
from ..models.roi import Roi
from ..services.color_transfer_service import ColorTransferService
from ..services.image_service import ImageService
from .swatch_validator import is_good_swatch

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

TRANSFER_DIR = os.getenv("TRANSFER_DIR_PATH", "data/transferred")
OUTPUT_EXT = os.getenv("OUTPUT_IMG_EXT", ".png")


def transfer_gallery(
    folder: Union[str, Path],
    reference: Image,
    reference_roi: Roi = None,
    space=None,
    *,
    recursive: bool = False,
    image_service: ImageService = ImageService(),
    color_transfer_service: ColorTransferService = None,
    out_dir: Union[str, Path] = TRANSFER_DIR,
    ext: str = OUTPUT_EXT,
) -> List[Path]:
    """
    Apply color transfer from `reference` to every image in `folder`.

    This pipeline:
    1. Streams the gallery lazily (unreadable files are skipped)
    2. Validates each image as a source swatch and skips rejected ones
       (flat images pass when the service uses the epsilon policy)
    3. Transfers the reference swatch statistics onto the image
    4. Saves the result as <stem>_transfer<ext> under `out_dir`

    Args:
        folder: Directory holding the images to recolor
        reference: Image providing the target color statistics
        reference_roi: Swatch inside `reference` (whole image by default)
        space: Colorspace to match statistics in (service default when None)
        recursive: Also walk sub-directories
        out_dir: Directory to save results to
        ext: File extension for saved results

    Returns:
        List[Path]: paths of the saved images, in gallery order
    """
    color_transfer_service = color_transfer_service or ColorTransferService()
    space = space or color_transfer_service.default_space
    reference_roi = reference_roi or Roi.full(reference.pixels)
    require_variance = color_transfer_service.zero_variance_policy == "reject"
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    saved: List[Path] = []
    skipped = 0
    gallery = image_service.stream_gallery(folder, recursive=recursive)

    for img in tqdm(gallery, desc="transfer", ncols=70, unit="img"):
        source_roi = Roi.full(img.pixels)
        ok, details = is_good_swatch(img, source_roi, space,
                                     epsilon=color_transfer_service.epsilon,
                                     require_variance=require_variance)
        if not ok:
            logger.warning(f"Skipping {img.path}: {details['reason']}")
            skipped += 1
            continue

        try:
            result = color_transfer_service.transfer(
                img, source_roi, reference, reference_roi, space)
        except ImgineError as err:
            logger.warning(f"Skipping {img.path}: {err}")
            skipped += 1
            continue

        stem = Path(img.path).stem if img.path else f"image{len(saved)}"
        result.path = out_dir / f"{stem}_transfer{ext}"
        image_service.save(result)
        saved.append(result.path)

    logger.info(f"Batch transfer complete: {len(saved)} saved, {skipped} skipped, "
                f"results in {out_dir}")
    return saved
