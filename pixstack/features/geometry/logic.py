from typing import Sequence
import numpy as np
from pixstack.domain.types import Dimensions, PixelWindow, Raster, UNIT_SCALE
from pixstack.kernel.system.logging import get_logger

logger = get_logger(__name__)


def cropped_range(crop: Sequence[int], img_dim: Dimensions) -> PixelWindow:
    """
    Fixed-point crop (left, top, right margin, bottom margin; 10000 == 1.0)
    -> absolute [left, top, width, height] window, clamped to the image.
    """
    w, h = int(img_dim[0]), int(img_dim[1])
    left, top, right, bottom = (min(1.0, max(0.0, c / UNIT_SCALE)) for c in crop)
    logger.debug(f"crop range fn: {(left, top, right, bottom)}")

    win = [
        left,
        top,
        max(0.0, 1.0 - right - left),
        max(0.0, 1.0 - bottom - top),
    ]
    logger.debug(f"crop range window: {win}")

    x = min(int(win[0] * w), w)
    y = min(int(win[1] * h), h)
    cw = min(int(win[2] * w), w - x)
    ch = min(int(win[3] * h), h - y)

    logger.debug(f"crop range window abs: {[x, y, cw, ch]} res: {(w, h)}")
    return [x, y, cw, ch]


def crop_raster(img: Raster, crop: Sequence[int]) -> Raster:
    """
    Extracts the window; never returns an empty raster (min 1x1).
    """
    h, w = img.shape[:2]
    x, y, cw, ch = cropped_range(crop, (w, h))
    x = min(x, max(0, w - 1))
    y = min(y, max(0, h - 1))
    cw = max(1, min(cw, w - x))
    ch = max(1, min(ch, h - y))
    return img[y : y + ch, x : x + cw].copy()


def rotate_raster(img: Raster, angle: int) -> Raster:
    """
    Clockwise right-angle rotation. Other angles are ignored.
    """
    if angle == 90:
        k = -1
    elif angle in (270, -90):
        k = 1
    elif angle == 180:
        k = 2
    else:
        return img
    return np.ascontiguousarray(np.rot90(img, k=k))


def flip_raster(img: Raster, vertical: bool) -> Raster:
    """
    Horizontal flip, plus a vertical one when `vertical` is set.
    """
    if vertical:
        img = np.flipud(img)
    return np.ascontiguousarray(np.fliplr(img))
