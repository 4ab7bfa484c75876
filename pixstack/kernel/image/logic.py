from typing import Any
import numpy as np
from numba import njit  # type: ignore
from pixstack.domain.types import Raster, PixelBlock
from pixstack.kernel.image.validation import ensure_raster


@njit(nogil=True, cache=True, fastmath=True)
def _uint8_to_block_jit(px: np.ndarray) -> np.ndarray:
    """
    (N, 4) uint8 -> (N, 4) float32 [0.0, 1.0].
    """
    n = px.shape[0]
    res = np.empty((n, 4), dtype=np.float32)
    inv_255 = np.float32(1.0 / 255.0)
    for i in range(n):
        for ch in range(4):
            res[i, ch] = np.float32(px[i, ch]) * inv_255
    return res


@njit(nogil=True, cache=True)
def _block_to_uint8_jit(block: np.ndarray, out: np.ndarray) -> None:
    """
    Scale to uint8 by truncation (clips & handles NaNs).
    The 1e-3 cushion absorbs float32 round-off so that k/255 maps back to k.
    """
    n = block.shape[0]
    for i in range(n):
        for ch in range(4):
            val = block[i, ch]
            if np.isnan(val):
                v = 0.0
            else:
                v = val * 255.0 + 1e-3

            if v < 0.0:
                v = 0.0
            elif v > 255.0:
                v = 255.0

            out[i, ch] = np.uint8(v)


def uint8_to_block(px: np.ndarray) -> PixelBlock:
    """Converts (N, 4) uint8 pixels to a normalized float32 block."""
    res: PixelBlock = _uint8_to_block_jit(np.ascontiguousarray(px))
    return res


def block_to_uint8(block: PixelBlock, out: np.ndarray) -> None:
    """Quantizes a float block into `out` ((N, 4) uint8) in place."""
    _block_to_uint8_jit(np.ascontiguousarray(block, dtype=np.float32), out)


def pixel_to_block(pixel: Any) -> PixelBlock:
    """
    Lifts one RGBA pixel (4 floats) into a (1, 4) block.
    """
    arr = np.asarray(pixel, dtype=np.float32).reshape(-1)
    if arr.shape[0] != 4:
        raise ValueError(f"Pixel must have 4 channels, got {arr.shape[0]}")
    return arr.reshape(1, 4).copy()


def raster_from_pil(img: Any) -> Raster:
    """
    PIL.Image (any mode) -> (H, W, 4) uint8 raster.
    """
    if img.mode != "RGBA":
        img = img.convert("RGBA")
    return ensure_raster(np.array(img, dtype=np.uint8))


def raster_to_pil(raster: Raster) -> Any:
    from PIL import Image

    return Image.fromarray(ensure_raster(raster))
