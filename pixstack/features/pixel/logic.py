import math
import numpy as np
from numba import njit  # type: ignore
from pixstack.domain.types import CONTRAST_K, DESAT_W0, DESAT_W1, DESAT_W2

# All kernels work in place on an (N, 4) float32 block owned by the caller.
# Values are not clamped; out-of-range results survive until quantization.


@njit(nogil=True, cache=True, fastmath=True)
def apply_brightness(block: np.ndarray, amount: int) -> None:
    amt = np.float32(amount / 255.0)
    for i in range(block.shape[0]):
        block[i, 0] += amt
        block[i, 1] += amt
        block[i, 2] += amt


@njit(nogil=True, cache=True, fastmath=True)
def apply_exposure(block: np.ndarray, amount: int) -> None:
    """
    Stop-based: +100 is four stops up.
    """
    factor = np.float32(2.0 ** ((amount / 100.0) * 4.0))
    for i in range(block.shape[0]):
        block[i, 0] *= factor
        block[i, 1] *= factor
        block[i, 2] *= factor


def contrast_factor(amount: int) -> float:
    """
    8-bit contrast formula, normalized. Denominator is kept away from zero.
    """
    c = amount / 255.0
    denom = CONTRAST_K - c
    if abs(denom) < 1e-6:
        denom = 1e-6 if denom >= 0 else -1e-6
    return (CONTRAST_K * (c + 1.0)) / denom


@njit(nogil=True, cache=True, fastmath=True)
def _contrast_jit(block: np.ndarray, factor: float) -> None:
    f = np.float32(factor)
    for i in range(block.shape[0]):
        for ch in range(3):
            block[i, ch] = f * (block[i, ch] - np.float32(0.5)) + np.float32(0.5)


def apply_contrast(block: np.ndarray, amount: int) -> None:
    _contrast_jit(block, contrast_factor(amount))


@njit(nogil=True, cache=True)
def _round_half_away(v: float) -> float:
    if v < 0.0:
        return -math.floor(-v + 0.5)
    return math.floor(v + 0.5)


@njit(nogil=True, cache=True)
def apply_posterize(block: np.ndarray, levels: int) -> None:
    lv = max(1, levels)
    for i in range(block.shape[0]):
        for ch in range(3):
            block[i, ch] = _round_half_away(block[i, ch] * lv) / lv


@njit(nogil=True, cache=True, fastmath=True)
def apply_desaturate(block: np.ndarray, amount: int) -> None:
    factor = np.float32(amount / 100.0)
    for i in range(block.shape[0]):
        val = block[i, 0] * DESAT_W0 + block[i, 1] * DESAT_W1 + block[i, 2] * DESAT_W2
        for ch in range(3):
            block[i, ch] = block[i, ch] + (val - block[i, ch]) * factor


@njit(nogil=True, cache=True, fastmath=True)
def apply_equalize(block: np.ndarray, dark: int, bright: int) -> None:
    """
    Maps [dark/255, bright/255] onto [0, 1]; extrapolates outside it.
    """
    lo = dark / 255.0
    span = (bright - dark) / 255.0
    if span == 0.0:
        return
    for i in range(block.shape[0]):
        for ch in range(3):
            block[i, ch] = (block[i, ch] - lo) / span


@njit(nogil=True, cache=True, fastmath=True)
def apply_noise(block: np.ndarray, amount: int, targets: np.ndarray) -> None:
    """
    `targets` is (N, 3) or (N, 1) uniform noise; one column means mono.
    """
    amt = np.float32(amount / 100.0)
    mono = targets.shape[1] == 1
    for i in range(block.shape[0]):
        for ch in range(3):
            t = targets[i, 0] if mono else targets[i, ch]
            block[i, ch] = block[i, ch] + (t - block[i, ch]) * amt


@njit(nogil=True, cache=True, fastmath=True)
def apply_fill(block: np.ndarray, r: int, g: int, b: int, a: int) -> None:
    target = np.empty(4, dtype=np.float32)
    target[0] = r / 255.0
    target[1] = g / 255.0
    target[2] = b / 255.0
    target[3] = a / 255.0
    t = target[3]
    for i in range(block.shape[0]):
        for ch in range(4):
            block[i, ch] = block[i, ch] + (target[ch] - block[i, ch]) * t


@njit(nogil=True, cache=True)
def _rgb_vec(r: int, g: int, b: int) -> np.ndarray:
    m = np.empty(3, dtype=np.float32)
    m[0] = r / 255.0
    m[1] = g / 255.0
    m[2] = b / 255.0
    return m


@njit(nogil=True, cache=True, fastmath=True)
def apply_mult(block: np.ndarray, r: int, g: int, b: int) -> None:
    m = _rgb_vec(r, g, b)
    for i in range(block.shape[0]):
        for ch in range(3):
            block[i, ch] *= m[ch]


@njit(nogil=True, cache=True, fastmath=True)
def apply_add(block: np.ndarray, r: int, g: int, b: int) -> None:
    m = _rgb_vec(r, g, b)
    for i in range(block.shape[0]):
        for ch in range(3):
            block[i, ch] += m[ch]


@njit(nogil=True, cache=True, fastmath=True)
def apply_invert(block: np.ndarray) -> None:
    for i in range(block.shape[0]):
        for ch in range(3):
            block[i, ch] = np.float32(1.0) - block[i, ch]


@njit(nogil=True, cache=True)
def apply_channel_copy(block: np.ndarray, target: int, source: int) -> None:
    if target == source:
        return
    for i in range(block.shape[0]):
        block[i, target] = block[i, source]


@njit(nogil=True, cache=True)
def _rgb_to_hsl(r: float, g: float, b: float):
    mx = max(r, max(g, b))
    mn = min(r, min(g, b))
    lightness = (mx + mn) / 2.0
    d = mx - mn
    if d == 0.0:
        return 0.0, 0.0, lightness

    denom = 1.0 - abs(mx + mn - 1.0)
    sat = d / denom if denom != 0.0 else 0.0

    if mx == r:
        hue = 60.0 * (((g - b) / d) % 6.0)
    elif mx == g:
        hue = 60.0 * ((b - r) / d + 2.0)
    else:
        hue = 60.0 * ((r - g) / d + 4.0)
    return hue, sat, lightness


@njit(nogil=True, cache=True)
def _hsl_to_rgb(hue: float, sat: float, lightness: float):
    c = (1.0 - abs(2.0 * lightness - 1.0)) * sat
    hp = (hue % 360.0) / 60.0
    x = c * (1.0 - abs(hp % 2.0 - 1.0))
    m = lightness - c / 2.0

    if hp < 1.0:
        r, g, b = c, x, 0.0
    elif hp < 2.0:
        r, g, b = x, c, 0.0
    elif hp < 3.0:
        r, g, b = 0.0, c, x
    elif hp < 4.0:
        r, g, b = 0.0, x, c
    elif hp < 5.0:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x
    return r + m, g + m, b + m


@njit(nogil=True, cache=True)
def apply_hsl(block: np.ndarray, hue: int, saturation: int, lightness: int) -> None:
    """
    Hue shift in degrees, saturation/lightness scaled by percent.
    """
    s_mul = saturation / 100.0
    l_mul = lightness / 100.0
    for i in range(block.shape[0]):
        h, s, lum = _rgb_to_hsl(block[i, 0], block[i, 1], block[i, 2])
        r, g, b = _hsl_to_rgb(h + hue, s * s_mul, lum * l_mul)
        block[i, 0] = r
        block[i, 1] = g
        block[i, 2] = b


@njit(nogil=True, cache=True, fastmath=True)
def apply_multiply_alpha(block: np.ndarray) -> None:
    for i in range(block.shape[0]):
        a = block[i, 3]
        block[i, 0] *= a
        block[i, 1] *= a
        block[i, 2] *= a


@njit(nogil=True, cache=True)
def apply_divide_alpha(block: np.ndarray) -> int:
    """
    Unpremultiply. Pixels with zero alpha are left as they are.
    Returns how many pixels were skipped.
    """
    skipped = 0
    for i in range(block.shape[0]):
        a = block[i, 3]
        if a == 0.0 or np.isnan(a):
            skipped += 1
            continue
        block[i, 0] /= a
        block[i, 1] /= a
        block[i, 2] /= a
    return skipped
