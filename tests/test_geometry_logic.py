import numpy as np
import pytest
from pixstack.domain.models import Crop, Flip, Rotate
from pixstack.features.geometry.logic import crop_raster, cropped_range, flip_raster, rotate_raster
from pixstack.features.geometry.processor import GeometryProcessor


def make_raster(h, w):
    return np.arange(h * w * 4, dtype=np.uint32).astype(np.uint8).reshape(h, w, 4)


def test_cropped_range_full_image():
    assert cropped_range([0, 0, 0, 0], (100, 200)) == [0, 0, 100, 200]


def test_cropped_range_left_half_removed():
    assert cropped_range([5000, 0, 0, 0], (100, 200)) == [50, 0, 50, 200]


def test_cropped_range_vertical_margins():
    assert cropped_range([0, 2500, 0, 2500], (100, 200)) == [0, 50, 100, 100]


def test_cropped_range_overlapping_margins():
    # left + right margin > 1 collapses the width to zero
    assert cropped_range([8000, 0, 8000, 0], (100, 100)) == [80, 0, 0, 100]


@pytest.mark.parametrize(
    "crop",
    [
        [20000, 0, 0, 0],
        [-5000, -1, 0, 0],
        [10000, 10000, 10000, 10000],
        [3333, 1234, 9999, 42],
    ],
)
def test_cropped_range_stays_in_bounds(crop):
    w, h = 100, 200
    x, y, cw, ch = cropped_range(crop, (w, h))
    assert 0 <= x <= w and 0 <= y <= h
    assert cw >= 0 and ch >= 0
    assert x + cw <= w and y + ch <= h


def test_cropped_range_clamps_fractions():
    assert cropped_range([20000, 0, 0, 0], (100, 200)) == [100, 0, 0, 200]
    assert cropped_range([-5000, -1, 0, 0], (100, 200)) == [0, 0, 100, 200]


def test_crop_raster_window():
    img = make_raster(8, 8)
    res = crop_raster(img, (2500, 2500, 2500, 2500))
    np.testing.assert_array_equal(res, img[2:6, 2:6])
    assert not np.shares_memory(res, img)


def test_crop_raster_never_empty():
    img = make_raster(10, 10)
    assert crop_raster(img, (8000, 0, 8000, 0)).shape == (10, 1, 4)
    assert crop_raster(img, (10000, 10000, 0, 0)).shape == (1, 1, 4)


def test_crop_processor_zero_rect_is_identity():
    img = make_raster(4, 6)
    res = GeometryProcessor(Crop()).process(img)
    np.testing.assert_array_equal(res, img)


def test_rotate_clockwise():
    img = make_raster(2, 3)
    res = rotate_raster(img, 90)
    assert res.shape == (3, 2, 4)
    # Top-left of the result is the old bottom-left
    np.testing.assert_array_equal(res[0, 0], img[1, 0])
    np.testing.assert_array_equal(res[0, 1], img[0, 0])
    assert res.flags["C_CONTIGUOUS"]


def test_rotate_angles():
    img = make_raster(2, 3)
    np.testing.assert_array_equal(rotate_raster(img, 270), rotate_raster(img, -90))
    np.testing.assert_array_equal(rotate_raster(rotate_raster(img, 90), 270), img)
    np.testing.assert_array_equal(rotate_raster(img, 180), img[::-1, ::-1])
    np.testing.assert_array_equal(GeometryProcessor(Rotate(45)).process(img), img)


def test_flip():
    img = make_raster(3, 4)
    np.testing.assert_array_equal(flip_raster(img, False), img[:, ::-1])
    # vertical flips both axes
    np.testing.assert_array_equal(GeometryProcessor(Flip(True)).process(img), img[::-1, ::-1])
    np.testing.assert_array_equal(flip_raster(flip_raster(img, False), False), img)
