import numpy as np
import pytest

from imgine.models.image import Image
from imgine.models.roi import Roi
from imgine.pipeline.swatch_validator import is_good_swatch


def test_textured_swatch_passes(textured_bgr):
    ok, details = is_good_swatch(textured_bgr, Roi(0, 0, 20, 20))
    assert ok
    assert details["space"] == "Ruderman_lab"
    assert len(details["stddevs"]) == 3


def test_flat_swatch_is_zero_variance():
    flat = Image(pixels=np.full((8, 8, 3), 128, np.uint8))
    ok, details = is_good_swatch(flat, Roi(0, 0, 8, 8))
    assert not ok
    assert details["reason"] == "zero_variance"


def test_rejections_carry_reasons(textured_bgr):
    assert is_good_swatch(textured_bgr, Roi(60, 0, 10, 10))[1]["reason"] == "out_of_bounds"
    assert is_good_swatch(textured_bgr, Roi(0, 0, 0, 10))[1]["reason"] == "zero_area"
    gray = Image(pixels=np.zeros((8, 8), np.uint8))
    assert is_good_swatch(gray, Roi(0, 0, 8, 8))[1]["reason"] == "need_three_channels"
    assert is_good_swatch(textured_bgr, Roi(0, 0, 8, 8), "Pantone")[1]["reason"] == "statistics_failed"


def test_flat_swatch_passes_when_variance_not_required():
    flat = Image(pixels=np.full((8, 8, 3), 128, np.uint8))
    ok, details = is_good_swatch(flat, Roi(0, 0, 8, 8), require_variance=False)
    assert ok
    assert details["stddevs"] == pytest.approx((0.0, 0.0, 0.0), abs=1e-6)


def test_statistics_cover_only_the_swatch(textured_bgr):
    pixels = textured_bgr.pixels.copy()
    pixels[:8, :8] = 128
    ok, details = is_good_swatch(Image(pixels=pixels), Roi(0, 0, 8, 8), "BGR")
    assert not ok
    assert details["reason"] == "zero_variance"
