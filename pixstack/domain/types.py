from dataclasses import dataclass
from typing import Tuple, List
import numpy as np
from numpy.typing import NDArray

# (H, W, 4) uint8 RGBA
Raster = NDArray[np.uint8]
# (N, 4) float32, normalized
PixelBlock = NDArray[np.float32]
Pixel = NDArray[np.float32]

# (width, height)
Dimensions = Tuple[int, int]
# left, top, right margin, bottom margin in fixed-point units
CropRect = Tuple[int, int, int, int]
# left, top, width, height in pixels
PixelWindow = List[int]

UNIT_SCALE = 10000

# Legacy desaturation weights, applied positionally to R, G, B.
DESAT_W0 = 0.59
DESAT_W1 = 0.3
DESAT_W2 = 0.11

CONTRAST_K = 1.0156863

RESIZE_GAMMA = 2.2


@dataclass(frozen=True)
class AppConfig:
    max_workers: int
    pixel_chunk_size: int
    log_level: str
