import math
from typing import Callable, Dict, Tuple
import numpy as np
from numba import njit, prange  # type: ignore
from pixstack.domain.models import ScaleFilter
from pixstack.domain.types import Dimensions, Raster, RESIZE_GAMMA


def _sinc(x: float) -> float:
    if x == 0.0:
        return 1.0
    x *= math.pi
    return math.sin(x) / x


def _box(x: float) -> float:
    return 1.0 if -0.5 < x <= 0.5 else 0.0


def _bilinear(x: float) -> float:
    x = abs(x)
    return 1.0 - x if x < 1.0 else 0.0


def _hamming(x: float) -> float:
    x = abs(x)
    if x == 0.0:
        return 1.0
    if x >= 1.0:
        return 0.0
    return _sinc(x) * (0.54 + 0.46 * math.cos(math.pi * x))


def _bicubic(b: float, c: float) -> Callable[[float], float]:
    """
    Mitchell-Netravali family. (0, 0.5) is Catmull-Rom, (1/3, 1/3) Mitchell.
    """

    def kernel(x: float) -> float:
        x = abs(x)
        if x < 1.0:
            return ((12 - 9 * b - 6 * c) * x**3 + (-18 + 12 * b + 6 * c) * x**2 + (6 - 2 * b)) / 6.0
        if x < 2.0:
            return ((-b - 6 * c) * x**3 + (6 * b + 30 * c) * x**2 + (-12 * b - 48 * c) * x + (8 * b + 24 * c)) / 6.0
        return 0.0

    return kernel


def _lanczos3(x: float) -> float:
    if -3.0 < x < 3.0:
        return _sinc(x) * _sinc(x / 3.0)
    return 0.0


# filter -> (kernel, support radius)
FILTERS: Dict[ScaleFilter, Tuple[Callable[[float], float], float]] = {
    ScaleFilter.BOX: (_box, 0.5),
    ScaleFilter.BILINEAR: (_bilinear, 1.0),
    ScaleFilter.HAMMING: (_hamming, 1.0),
    ScaleFilter.CATMULL_ROM: (_bicubic(0.0, 0.5), 2.0),
    ScaleFilter.MITCHELL: (_bicubic(1.0 / 3.0, 1.0 / 3.0), 2.0),
    ScaleFilter.LANCZOS3: (_lanczos3, 3.0),
}


def precompute_coeffs(in_size: int, out_size: int, filter_kind: ScaleFilter) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convolution weights for one axis.

    Returns (bounds, coeffs): bounds[i] = (first source index, tap count),
    coeffs[i, :count] the normalized weights of output sample i.
    """
    kernel, support = FILTERS[filter_kind]
    scale = in_size / out_size
    filterscale = max(scale, 1.0)
    support = support * filterscale
    ksize = int(math.ceil(support)) * 2 + 1

    bounds = np.zeros((out_size, 2), dtype=np.int64)
    coeffs = np.zeros((out_size, ksize), dtype=np.float64)
    ss = 1.0 / filterscale

    for xx in range(out_size):
        center = (xx + 0.5) * scale
        xmin = max(int(center - support + 0.5), 0)
        xmax = min(int(center + support + 0.5), in_size) - xmin
        ww = 0.0
        for x in range(xmax):
            w = kernel((x + xmin - center + 0.5) * ss)
            coeffs[xx, x] = w
            ww += w
        if ww != 0.0:
            coeffs[xx, :xmax] /= ww
        elif xmax > 0:
            # No tap inside the kernel support: take the nearest source sample
            coeffs[xx, :xmax] = 0.0
            coeffs[xx, min(max(int(center) - xmin, 0), xmax - 1)] = 1.0
        bounds[xx, 0] = xmin
        bounds[xx, 1] = xmax

    return bounds, coeffs


@njit(parallel=True, cache=True)
def _resample_horizontal_jit(src: np.ndarray, bounds: np.ndarray, coeffs: np.ndarray) -> np.ndarray:
    h, _, c = src.shape
    out_w = bounds.shape[0]
    res = np.zeros((h, out_w, c), dtype=np.float64)
    for y in prange(h):
        for xx in range(out_w):
            xmin = bounds[xx, 0]
            n = bounds[xx, 1]
            for ch in range(c):
                acc = 0.0
                for k in range(n):
                    acc += src[y, xmin + k, ch] * coeffs[xx, k]
                res[y, xx, ch] = acc
    return res


@njit(parallel=True, cache=True)
def _resample_vertical_jit(src: np.ndarray, bounds: np.ndarray, coeffs: np.ndarray) -> np.ndarray:
    _, w, c = src.shape
    out_h = bounds.shape[0]
    res = np.zeros((out_h, w, c), dtype=np.float64)
    for yy in prange(out_h):
        ymin = bounds[yy, 0]
        n = bounds[yy, 1]
        for x in range(w):
            for ch in range(c):
                acc = 0.0
                for k in range(n):
                    acc += src[ymin + k, x, ch] * coeffs[yy, k]
                res[yy, x, ch] = acc
    return res


def to_linear(img: Raster, gamma: float = RESIZE_GAMMA) -> np.ndarray:
    """
    8-bit display values -> float64 linear light. Alpha stays linear.
    """
    res = img.astype(np.float64) / 255.0
    res[..., :3] = np.power(res[..., :3], gamma)
    return res


def from_linear(img: np.ndarray, gamma: float = RESIZE_GAMMA) -> Raster:
    res = np.clip(img, 0.0, 1.0)
    res[..., :3] = np.power(res[..., :3], 1.0 / gamma)
    return np.rint(res * 255.0).astype(np.uint8)


def resolve_dimensions(target: Dimensions) -> Dimensions:
    """
    Coerces degenerate target sides (zero or negative) to 1.
    """
    return max(1, int(target[0])), max(1, int(target[1]))


def resize_gamma_correct(img: Raster, dimensions: Dimensions, filter_kind: ScaleFilter) -> Raster:
    """
    Separable convolution resize in linear light.
    """
    h, w = img.shape[:2]
    out_w, out_h = max(1, int(dimensions[0])), max(1, int(dimensions[1]))

    lin = to_linear(img)

    bounds_x, coeffs_x = precompute_coeffs(max(1, w), out_w, filter_kind)
    lin = _resample_horizontal_jit(np.ascontiguousarray(lin), bounds_x, coeffs_x)

    bounds_y, coeffs_y = precompute_coeffs(max(1, h), out_h, filter_kind)
    lin = _resample_vertical_jit(np.ascontiguousarray(lin), bounds_y, coeffs_y)

    return from_linear(lin)
