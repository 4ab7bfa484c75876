import numpy as np
from pixstack.domain.types import Raster, PixelBlock


def ensure_raster(img: np.ndarray) -> Raster:
    """
    Validates an (H, W, 4) uint8 RGBA raster and makes it C-contiguous.
    """
    if not isinstance(img, np.ndarray):
        raise ValueError(f"Raster must be a numpy array, got {type(img).__name__}")
    if img.ndim != 3 or img.shape[2] != 4:
        raise ValueError(f"Raster must have shape (H, W, 4), got {img.shape}")
    if img.dtype != np.uint8:
        raise ValueError(f"Raster must be uint8, got {img.dtype}")
    return np.ascontiguousarray(img)


def ensure_block(block: np.ndarray) -> PixelBlock:
    """
    Validates an (N, 4) float32 pixel block.
    """
    if block.ndim != 2 or block.shape[1] != 4:
        raise ValueError(f"Pixel block must have shape (N, 4), got {block.shape}")
    if block.dtype != np.float32:
        raise ValueError(f"Pixel block must be float32, got {block.dtype}")
    return block
