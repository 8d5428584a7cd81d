import numpy as np
import pytest

from imgine.models.image import Image


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def textured_bgr(rng):
    """48x64 BGR image, every channel uniformly random in [90, 160]."""
    return Image(pixels=rng.integers(90, 161, size=(48, 64, 3), dtype=np.uint8))


@pytest.fixture
def warm_bgr(rng):
    """40x40 BGR image with a warm cast: low blue, high red."""
    b = rng.integers(70, 111, size=(40, 40), dtype=np.uint8)
    g = rng.integers(110, 151, size=(40, 40), dtype=np.uint8)
    r = rng.integers(140, 181, size=(40, 40), dtype=np.uint8)
    return Image(pixels=np.dstack([b, g, r]))


@pytest.fixture
def unit_bgr(rng):
    """Float32 BGR matrix in [0.05, 0.95], the working range of every route."""
    return rng.uniform(0.05, 0.95, size=(16, 16, 3)).astype(np.float32)


@pytest.fixture
def gradient_gray():
    row = np.arange(0, 256, 4, dtype=np.uint8)
    return Image(pixels=np.tile(row, (32, 1)))
