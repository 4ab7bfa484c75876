from typing import Any, Optional
import numpy as np
from pixstack.domain.errors import ExpressionEvalError
from pixstack.domain.models import (
    Add,
    Brightness,
    ChannelSwap,
    Contrast,
    Desaturate,
    DivideByAlpha,
    Equalize,
    Exposure,
    Expression,
    Fill,
    HSV,
    Invert,
    Mult,
    MultiplyByAlpha,
    Noise,
    Operation,
    Posterize,
)
from pixstack.domain.types import Pixel, PixelBlock
from pixstack.features.expression.logic import compile_expression, evaluate_block
from pixstack.features.pixel.logic import (
    apply_add,
    apply_brightness,
    apply_channel_copy,
    apply_contrast,
    apply_desaturate,
    apply_divide_alpha,
    apply_equalize,
    apply_exposure,
    apply_fill,
    apply_hsl,
    apply_invert,
    apply_mult,
    apply_multiply_alpha,
    apply_noise,
    apply_posterize,
)
from pixstack.kernel.image.logic import pixel_to_block


def apply_pixel_block(op: Operation, block: PixelBlock, rng: Optional[np.random.Generator] = None) -> int:
    """
    Applies one per-pixel operation to every pixel of an (N, 4) block in place.

    Returns the number of pixels the operation had to leave untouched
    (zero alpha on unpremultiply, non-finite expression results).
    Whole-image operations are identity here.
    """
    if isinstance(op, Brightness):
        apply_brightness(block, op.amount)
    elif isinstance(op, Exposure):
        apply_exposure(block, op.amount)
    elif isinstance(op, Contrast):
        apply_contrast(block, op.amount)
    elif isinstance(op, Posterize):
        apply_posterize(block, op.levels)
    elif isinstance(op, Desaturate):
        apply_desaturate(block, op.amount)
    elif isinstance(op, Equalize):
        apply_equalize(block, op.dark, op.bright)
    elif isinstance(op, Noise):
        gen = rng if rng is not None else np.random.default_rng()
        targets = gen.random((block.shape[0], 1 if op.mono else 3), dtype=np.float32)
        apply_noise(block, op.amount, targets)
    elif isinstance(op, Fill):
        apply_fill(block, *op.color)
    elif isinstance(op, Mult):
        apply_mult(block, *op.color)
    elif isinstance(op, Add):
        apply_add(block, *op.color)
    elif isinstance(op, Invert):
        apply_invert(block)
    elif isinstance(op, ChannelSwap):
        apply_channel_copy(block, int(op.target), int(op.source))
    elif isinstance(op, HSV):
        apply_hsl(block, op.hue, op.saturation, op.lightness)
    elif isinstance(op, MultiplyByAlpha):
        apply_multiply_alpha(block)
    elif isinstance(op, DivideByAlpha):
        return int(apply_divide_alpha(block))
    elif isinstance(op, Expression):
        return evaluate_block(compile_expression(op.text), block)
    return 0


def apply_pixel(op: Operation, pixel: Any, rng: Optional[np.random.Generator] = None) -> Pixel:
    """
    Pure single-pixel form: returns a new (4,) float32 pixel.

    Raises ExpressionError when an Expression fails to parse or evaluate;
    the input is never modified.
    """
    block = pixel_to_block(pixel)
    skipped = apply_pixel_block(op, block, rng)
    if skipped and isinstance(op, Expression):
        raise ExpressionEvalError(f"Expression {op.text!r} produced a non-finite value")
    res: Pixel = block[0]
    return res
