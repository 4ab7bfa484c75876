import numpy as np
import cv2
from pixstack.domain.types import Raster


def apply_blur(img: Raster, radius: float) -> Raster:
    """
    Gaussian blur with sigma = radius, edges clamped. Radius 0 is a no-op.
    """
    if radius <= 0:
        return img

    res = cv2.GaussianBlur(
        img,
        (0, 0),
        sigmaX=float(radius),
        sigmaY=float(radius),
        borderType=cv2.BORDER_REPLICATE,
    )
    return np.ascontiguousarray(res)


def fringe_offsets(size: int, amount: int) -> np.ndarray:
    """
    Per-coordinate sample offset along one axis: distance from the center
    as a fraction of the half extent, times amount / 10, truncated.
    """
    center = size // 2
    coords = np.arange(size, dtype=np.float32)
    if center == 0:
        return np.zeros(size, dtype=np.int64)
    offset = (coords - center) / np.float32(center) * np.float32(amount / 10.0)
    return offset.astype(np.int64)


def apply_chromatic_aberration(img: Raster, amount: int) -> Raster:
    """
    Red-channel fringe. Red is resampled from the untouched source at an
    outward offset; green, blue and alpha are kept.
    """
    if amount <= 0:
        return img

    h, w = img.shape[:2]
    src = img.copy()
    xs = np.clip(np.arange(w) + fringe_offsets(w, amount), 0, w - 1)
    ys = np.clip(np.arange(h) + fringe_offsets(h, amount), 0, h - 1)

    res = img.copy()
    res[:, :, 0] = src[ys[:, None], xs[None, :], 0]
    return res
