import numpy as np
import pytest

from imgine.exceptions import DegenerateStatisticsError, UnsupportedChannelCountError
from imgine.models.colorspace import Colorspace
from imgine.models.image import Image
from imgine.models.roi import Roi
from imgine.pipeline.procedures import color_transfer
from imgine.services.colorspace_service import ColorspaceService
from imgine.services.color_transfer_service import ColorTransferService
from imgine.services.image_service import ImageService
from imgine.services.statistics_service import StatisticsService

SRC_ROI = Roi(8, 6, 32, 24)
REF_ROI = Roi(5, 5, 30, 30)


def _stats_in(space, img: Image, roi: Roi):
    mat = ColorspaceService().convert(ImageService.to_float(img), Colorspace.BGR, space)
    return StatisticsService().region_statistics(mat, roi)


def test_output_keeps_shape_and_dtype(textured_bgr, warm_bgr):
    out = ColorTransferService().transfer(textured_bgr, SRC_ROI, warm_bgr, REF_ROI)
    assert out.pixels.shape == textured_bgr.pixels.shape
    assert out.pixels.dtype == np.uint8


def test_source_image_is_not_modified(textured_bgr, warm_bgr):
    before = textured_bgr.pixels.copy()
    color_transfer(textured_bgr, SRC_ROI, warm_bgr, REF_ROI, "RGB")
    assert np.array_equal(textured_bgr.pixels, before)


def test_rgb_transfer_matches_reference_statistics(textured_bgr, warm_bgr):
    out = color_transfer(textured_bgr, SRC_ROI, warm_bgr, REF_ROI, Colorspace.RGB)
    out_mean, out_std = _stats_in(Colorspace.RGB, out, SRC_ROI)
    ref_mean, ref_std = _stats_in(Colorspace.RGB, warm_bgr, REF_ROI)
    assert np.allclose(out_mean, ref_mean, atol=0.005)
    assert np.allclose(out_std, ref_std, atol=0.005)


def test_lalphabeta_transfer_matches_reference_statistics(textured_bgr, warm_bgr):
    out = color_transfer(textured_bgr, SRC_ROI, warm_bgr, REF_ROI, Colorspace.Ruderman_lab)
    out_mean, out_std = _stats_in(Colorspace.Ruderman_lab, out, SRC_ROI)
    ref_mean, ref_std = _stats_in(Colorspace.Ruderman_lab, warm_bgr, REF_ROI)
    assert np.allclose(out_mean, ref_mean, atol=0.02)
    assert np.allclose(out_std, ref_std, rtol=0.15, atol=0.01)


def test_default_space_is_lalphabeta():
    assert ColorTransferService().default_space is Colorspace.Ruderman_lab


def test_transfer_moves_colors_towards_reference(textured_bgr, warm_bgr):
    out = color_transfer(textured_bgr, SRC_ROI, warm_bgr, REF_ROI, "CIELAB")
    b, g, r = out.pixels.reshape(-1, 3).mean(axis=0)
    assert r > g > b


def test_zero_variance_source_is_rejected_by_default():
    gray_src = Image(pixels=np.full((2, 2, 3), 128, np.uint8))
    white_ref = Image(pixels=np.full((2, 2, 3), 255, np.uint8))
    service = ColorTransferService(zero_variance_policy="reject")
    with pytest.raises(DegenerateStatisticsError):
        service.transfer(gray_src, Roi(0, 0, 2, 2), white_ref, Roi(0, 0, 2, 2))


def test_zero_variance_source_uses_epsilon_when_configured(caplog):
    gray_src = Image(pixels=np.full((2, 2, 3), 128, np.uint8))
    white_ref = Image(pixels=np.full((2, 2, 3), 255, np.uint8))
    service = ColorTransferService(zero_variance_policy="epsilon", epsilon=1e-6)
    with caplog.at_level("WARNING"):
        out = service.transfer(gray_src, Roi(0, 0, 2, 2), white_ref, Roi(0, 0, 2, 2))
    assert "zero variance" in caplog.text
    assert out.pixels.shape == (2, 2, 3)
    assert out.pixels.min() >= 253


def test_policy_is_read_from_environment(monkeypatch):
    monkeypatch.setenv("IMGINE_ZERO_VARIANCE_POLICY", "epsilon")
    monkeypatch.setenv("IMGINE_STDDEV_EPSILON", "0.01")
    service = ColorTransferService()
    assert service.zero_variance_policy == "epsilon"
    assert service.epsilon == pytest.approx(0.01)


def test_unknown_policy_is_rejected():
    with pytest.raises(ValueError):
        ColorTransferService(zero_variance_policy="ignore")


def test_non_three_channel_images_are_rejected(textured_bgr):
    gray = Image(pixels=np.full((48, 64), 100, np.uint8))
    with pytest.raises(UnsupportedChannelCountError):
        color_transfer(gray, Roi(0, 0, 4, 4), textured_bgr, Roi(0, 0, 4, 4))
    bgra = Image(pixels=np.full((48, 64, 4), 100, np.uint8))
    with pytest.raises(UnsupportedChannelCountError):
        color_transfer(textured_bgr, Roi(0, 0, 4, 4), bgra, Roi(0, 0, 4, 4))


def test_out_of_bounds_swatch_is_rejected(textured_bgr, warm_bgr):
    with pytest.raises(ValueError):
        color_transfer(textured_bgr, Roi(60, 40, 10, 10), warm_bgr, REF_ROI)
