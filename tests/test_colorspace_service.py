import itertools

import numpy as np
import pytest

from imgine.exceptions import (
    NoRouteError, UnknownColorspaceError, UnsupportedChannelCountError,
)
from imgine.models import color_matrices as cm
from imgine.models.colorspace import Colorspace
from imgine.models.transform_step import DirectionStep
from imgine.repositories.transform_repository import TransformRepository
from imgine.services.colorspace_service import ColorspaceService

ALL_PAIRS = list(itertools.product(Colorspace, Colorspace))


@pytest.fixture(scope="module")
def service():
    return ColorspaceService()


@pytest.mark.parametrize("a,b", ALL_PAIRS, ids=lambda s: s.value)
def test_round_trip_reproduces_input(service, unit_bgr, a, b):
    in_a = service.convert(unit_bgr, Colorspace.BGR, a)
    there_and_back = service.convert(service.convert(in_a, a, b), b, a)
    result = service.convert(there_and_back, a, Colorspace.BGR)
    assert result.dtype == np.float32
    assert result.shape == unit_bgr.shape
    assert np.abs(result - unit_bgr).max() < 1e-3


def test_every_ordered_pair_has_a_route():
    repo = TransformRepository()
    for a, b in ALL_PAIRS:
        path = repo.retrieve_path(a, b)
        assert path[0] is a and path[-1] is b


def test_direct_spaces_convert_in_one_step():
    repo = TransformRepository()
    assert len(repo.retrieve_route(Colorspace.RGB, Colorspace.HSV)) == 1
    assert len(repo.retrieve_route(Colorspace.BGR, Colorspace.CIELAB)) == 1
    assert repo.retrieve_route(Colorspace.HLS, Colorspace.HLS) == ()


def test_perceptual_spaces_route_through_xyz_hub(service):
    path = TransformRepository().retrieve_path(Colorspace.HSV, Colorspace.Ruderman_lab)
    assert Colorspace.CIEXYZ in path
    assert path[-3:] == (Colorspace.CIEXYZ, Colorspace.LMS, Colorspace.Ruderman_lab)
    assert service.describe_route("CIELAB", "LMS").startswith("CIELAB -> BGR -> CIEXYZ")


def test_missing_route_fails_fast():
    with pytest.raises(NoRouteError):
        TransformRepository.retrieve_route("BGR", Colorspace.LMS)


def test_pipeline_matches_matrix_library(service, unit_bgr):
    expected = cm.lms_lalphabeta(cm.xyz_lms(cm.bgr_xyz(unit_bgr)))
    actual = service.convert(unit_bgr, Colorspace.BGR, Colorspace.Ruderman_lab)
    assert np.allclose(actual, expected, atol=1e-5)


def test_names_resolve_case_insensitively(service, unit_bgr):
    by_name = service.convert(unit_bgr, "bgr", "ruderman_LAB")
    by_enum = service.convert(unit_bgr, Colorspace.BGR, Colorspace.Ruderman_lab)
    assert np.array_equal(by_name, by_enum)


def test_unknown_name_is_a_lookup_failure(service, unit_bgr):
    with pytest.raises(UnknownColorspaceError):
        service.convert(unit_bgr, "BGR", "CMYK")
    with pytest.raises(KeyError):
        Colorspace.from_name("sRGB-linear")


def test_non_three_channel_input_is_rejected(service):
    with pytest.raises(UnsupportedChannelCountError):
        service.convert(np.zeros((4, 4), np.float32), "BGR", "HSV")
    with pytest.raises(UnsupportedChannelCountError):
        service.convert(np.zeros((4, 4, 4), np.float32), "BGR", "HSV")


def test_input_is_not_modified(service, unit_bgr):
    before = unit_bgr.copy()
    out = service.convert(unit_bgr, "BGR", "BGR")
    assert out is not unit_bgr
    out[...] = 0
    service.convert(unit_bgr, "BGR", "LMS")
    assert np.array_equal(unit_bgr, before)


def test_hsv_uses_degrees(service):
    red = np.array([[[0.0, 0.0, 1.0]]], np.float32)
    green = np.array([[[0.0, 1.0, 0.0]]], np.float32)
    assert service.convert(red, "BGR", "HSV")[0, 0, 0] == pytest.approx(0.0, abs=1e-3)
    assert service.convert(green, "BGR", "HSV")[0, 0, 0] == pytest.approx(120.0, abs=1e-2)


def test_cielab_route_uses_closed_form_lab(service, unit_bgr):
    (step,) = TransformRepository.retrieve_route(Colorspace.BGR, Colorspace.CIELAB)
    assert isinstance(step, DirectionStep)
    assert step.transform is cm.bgr_lab and step.inverse is False
    lab = service.convert(unit_bgr, "BGR", "CIELAB")
    assert np.allclose(lab, cm.bgr_lab(unit_bgr), atol=1e-6)
    back = service.convert(lab, "CIELAB", "BGR")
    assert np.abs(back - unit_bgr).max() < 1e-4


def test_inverse_edges_run_the_same_transform_flagged():
    forward = TransformRepository.retrieve_route(Colorspace.CIEXYZ, Colorspace.LMS)
    backward = TransformRepository.retrieve_route(Colorspace.LMS, Colorspace.CIEXYZ)
    assert forward[0].transform is backward[0].transform is cm.xyz_lms
    assert (forward[0].inverse, backward[0].inverse) == (False, True)
