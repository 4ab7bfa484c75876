import numpy as np
import pytest
from pixstack.domain.models import Blur, ChromaticAberration
from pixstack.features.effects.logic import apply_blur, apply_chromatic_aberration, fringe_offsets
from pixstack.features.effects.processor import EffectsProcessor


def column_raster(w=10, h=10):
    img = np.zeros((h, w, 4), dtype=np.uint8)
    img[..., 0] = (np.arange(w) * 10)[None, :]
    img[..., 1] = 77
    img[..., 2] = (np.arange(h) * 3)[:, None]
    img[..., 3] = 200
    return img


def test_blur_zero_radius_is_identity():
    img = column_raster()
    assert apply_blur(img, 0) is img


def test_blur_smooths():
    img = np.zeros((16, 16, 4), dtype=np.uint8)
    img[::2, ::2] = 255
    res = EffectsProcessor(Blur(3)).process(img)
    assert res.shape == img.shape
    assert res.dtype == np.uint8
    assert res.astype(float).std() < img.astype(float).std() / 4


def test_blur_keeps_uniform_image():
    img = np.full((9, 7, 4), 123, dtype=np.uint8)
    np.testing.assert_array_equal(apply_blur(img, 5), img)


def test_fringe_offsets():
    np.testing.assert_array_equal(fringe_offsets(10, 50), [-5, -4, -3, -2, -1, 0, 1, 2, 3, 4])
    np.testing.assert_array_equal(fringe_offsets(10, 0), np.zeros(10))
    # A single pixel has no center offset
    np.testing.assert_array_equal(fringe_offsets(1, 100), [0])


def test_chromatic_aberration_moves_red_only():
    img = column_raster()
    res = EffectsProcessor(ChromaticAberration(50)).process(img)

    src_cols = np.array([0, 0, 0, 1, 3, 5, 7, 9, 9, 9])
    np.testing.assert_array_equal(res[0, :, 0], src_cols * 10)
    np.testing.assert_array_equal(res[..., 1:], img[..., 1:])
    # Source is untouched
    np.testing.assert_array_equal(img, column_raster())


@pytest.mark.parametrize("amount", [0, -10])
def test_chromatic_aberration_non_positive_is_identity(amount):
    img = column_raster()
    np.testing.assert_array_equal(apply_chromatic_aberration(img, amount), img)


def test_chromatic_aberration_center_fixed():
    img = np.random.default_rng(5).integers(0, 256, size=(11, 11, 4), dtype=np.uint8)
    res = apply_chromatic_aberration(img, 255)
    np.testing.assert_array_equal(res[5, 5], img[5, 5])
