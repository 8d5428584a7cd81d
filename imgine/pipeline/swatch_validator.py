from typing import Tuple

from ..exceptions import ImgineError
from ..models.colorspace import Colorspace
from ..models.image import Image
from ..models.roi import Roi
from ..services.colorspace_service import ColorspaceService
from ..services.image_service import ImageService
from ..services.statistics_service import StatisticsService


def is_good_swatch(
    img: Image,
    roi: Roi,
    space=Colorspace.Ruderman_lab,
    *,
    epsilon: float = 1e-6,
    require_variance: bool = True,
    image_service: ImageService = ImageService(),
    colorspace_service: ColorspaceService = ColorspaceService(),
    stats_service: StatisticsService = StatisticsService(),
) -> Tuple[bool, dict]:
    """
    Determines if a ROI can serve as a color-transfer source swatch:
      - 3-channel image
      - ROI inside the image
      - Non-zero area
      - Non-zero variance in every channel of `space` (when require_variance)

    Args:
        img (Image): The image the swatch is taken from.
        roi (Roi): The swatch.
        space: Colorspace the statistics are matched in.
        epsilon (float): Smallest acceptable per-channel stddev.
        require_variance (bool): False when the caller substitutes epsilon
            for flat channels instead of rejecting them.

    Returns:
        Tuple[bool, dict]:
            - True if all conditions are met, False otherwise.
            - A dictionary with the swatch statistics or a rejection reason.
    """
    details: dict = {"roi": roi.as_tuple()}

    # Check channel count
    if img.channels != 3:
        return False, {"reason": "need_three_channels", "channels": img.channels, **details}

    # Check bounds
    if not roi.fits(img.cols, img.rows):
        return False, {"reason": "out_of_bounds", **details}

    # Check area
    if roi.area == 0:
        return False, {"reason": "zero_area", **details}

    # Check variance in the transfer space
    try:
        space = Colorspace.from_name(space)
        crop = image_service.create_image(image_service.crop_pixels(img, roi))
        swatch = colorspace_service.convert(
            image_service.to_float(crop), Colorspace.BGR, space)
        means, stddevs = stats_service.region_statistics(swatch, Roi.full(swatch))
    except ImgineError as err:
        return False, {"reason": "statistics_failed", "error": str(err), **details}

    details.update(space=space.value, means=means, stddevs=stddevs)
    if require_variance and min(stddevs) < epsilon:
        return False, {"reason": "zero_variance", **details}

    # All checks passed
    return True, details
