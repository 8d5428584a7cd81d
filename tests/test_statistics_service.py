import numpy as np
import pytest

from imgine.exceptions import DegenerateStatisticsError, RoiOutOfBoundsError
from imgine.models.image import Image
from imgine.models.roi import Roi
from imgine.pipeline.procedures import region_statistics
from imgine.services.statistics_service import StatisticsService


def test_means_and_population_stddev_in_channel_order():
    pixels = np.zeros((4, 4, 3), np.uint8)
    pixels[:, :, 0] = 10          # B constant
    pixels[:, :2, 1] = 0          # G half 0, half 100
    pixels[:, 2:, 1] = 100
    pixels[:, :, 2] = 255         # R constant
    means, stddevs = StatisticsService().region_statistics(pixels, Roi.full(pixels))
    assert means == pytest.approx((10.0, 50.0, 255.0))
    assert stddevs == pytest.approx((0.0, 50.0, 0.0))


def test_only_the_roi_is_measured():
    pixels = np.zeros((10, 10, 3), np.float32)
    pixels[2:4, 3:6] = (0.25, 0.5, 0.75)
    means, stddevs = region_statistics(pixels, Roi(3, 2, 3, 2))
    assert means == pytest.approx((0.25, 0.5, 0.75))
    assert stddevs == pytest.approx((0.0, 0.0, 0.0), abs=1e-7)


def test_accepts_image_objects_and_single_channel():
    img = Image(pixels=np.array([[0, 2], [4, 6]], np.uint8))
    means, stddevs = region_statistics(img, Roi(0, 0, 2, 2))
    assert means == pytest.approx((3.0,))
    assert stddevs == pytest.approx((np.sqrt(5.0),))


def test_four_channel_images_report_four_channels():
    pixels = np.full((3, 3, 4), 9, np.uint8)
    means, stddevs = region_statistics(pixels, Roi(0, 0, 3, 3))
    assert len(means) == len(stddevs) == 4


def test_zero_area_roi_is_rejected():
    with pytest.raises(DegenerateStatisticsError):
        StatisticsService().region_statistics(np.zeros((5, 5, 3), np.uint8), Roi(1, 1, 0, 3))


def test_out_of_bounds_roi_is_rejected():
    with pytest.raises(RoiOutOfBoundsError):
        StatisticsService().region_statistics(np.zeros((5, 5, 3), np.uint8), Roi(3, 3, 4, 4))
    with pytest.raises(ValueError):
        StatisticsService().region_statistics(np.zeros((5, 5, 3), np.uint8), Roi(-1, 0, 2, 2))
