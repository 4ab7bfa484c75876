"""
pixstack - ordered, reconfigurable RGBA edit stacks.

Two stacks are applied to a raster: per-pixel operations in a parallel
sweep (`process_pixels`) and whole-image operations in sequence
(`process_image` / `run_image_stack`). `is_per_pixel` routes an operation
to the right one.
"""

__version__ = "0.1.0"

from pixstack.domain.errors import (
    ExpressionError,
    ImageOperationError,
    ImageStackError,
    PixstackError,
)
from pixstack.domain.interfaces import PipelineContext
from pixstack.domain.models import (
    HSV,
    Add,
    Blur,
    Brightness,
    Channel,
    ChannelSwap,
    ChromaticAberration,
    Contrast,
    Crop,
    Desaturate,
    DivideByAlpha,
    Equalize,
    Exposure,
    Expression,
    Fill,
    Flip,
    Invert,
    Mult,
    MultiplyByAlpha,
    Noise,
    OpKind,
    Operation,
    PixelShaderParam,
    Posterize,
    Resize,
    Rotate,
    ScaleFilter,
    clamp_operation,
    classify,
    is_per_pixel,
)
from pixstack.features.geometry.logic import cropped_range
from pixstack.features.pixel.processor import apply_pixel, apply_pixel_block
from pixstack.services.rendering.engine import EditEngine, EditResult, process_pixels, run_pixel_stack
from pixstack.services.rendering.image_processor import apply_image, process_image, run_image_stack

__all__ = [
    "__version__",
    "ExpressionError",
    "ImageOperationError",
    "ImageStackError",
    "PixstackError",
    "PipelineContext",
    "Operation",
    "OpKind",
    "Channel",
    "ScaleFilter",
    "Brightness",
    "Exposure",
    "Contrast",
    "Posterize",
    "Desaturate",
    "Equalize",
    "Noise",
    "Fill",
    "Mult",
    "Add",
    "Invert",
    "ChannelSwap",
    "HSV",
    "ChromaticAberration",
    "Blur",
    "Crop",
    "Resize",
    "Rotate",
    "Flip",
    "MultiplyByAlpha",
    "DivideByAlpha",
    "Expression",
    "PixelShaderParam",
    "classify",
    "is_per_pixel",
    "clamp_operation",
    "cropped_range",
    "apply_pixel",
    "apply_pixel_block",
    "apply_image",
    "process_image",
    "run_image_stack",
    "process_pixels",
    "run_pixel_stack",
    "EditEngine",
    "EditResult",
]
