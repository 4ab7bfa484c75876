from typing import Iterable, Optional
import numpy as np
import cv2
from pixstack.domain.errors import ImageOperationError, ImageStackError
from pixstack.domain.interfaces import PipelineContext
from pixstack.domain.models import (
    Blur,
    ChromaticAberration,
    Crop,
    Flip,
    Operation,
    Resize,
    Rotate,
)
from pixstack.domain.types import Raster
from pixstack.features.effects.processor import EffectsProcessor
from pixstack.features.geometry.processor import GeometryProcessor
from pixstack.features.resample.processor import ResampleProcessor
from pixstack.kernel.image.validation import ensure_raster
from pixstack.kernel.system.logging import get_logger

logger = get_logger(__name__)


def process_image(op: Operation, raster: Raster) -> Raster:
    """
    Applies one whole-image operation and returns the resulting raster,
    which may have new dimensions. `raster` itself is never modified.

    Per-pixel operations are identity here.
    Raises ImageOperationError if the operation cannot be applied.
    """
    img = ensure_raster(raster)

    if isinstance(op, (Crop, Rotate, Flip)):
        processor = GeometryProcessor(op)
    elif isinstance(op, Resize):
        processor = ResampleProcessor(op)
    elif isinstance(op, (Blur, ChromaticAberration)):
        processor = EffectsProcessor(op)
    else:
        return img

    try:
        res = processor.process(img)
    except (cv2.error, ValueError, MemoryError, IndexError) as e:
        raise ImageOperationError(f"{op.label} failed: {e}", op) from e

    try:
        return ensure_raster(res)
    except ValueError as e:
        raise ImageOperationError(f"{op.label} produced an invalid raster: {e}", op) from e


apply_image = process_image


def run_image_stack(
    raster: Raster,
    ops: Iterable[Operation],
    context: Optional[PipelineContext] = None,
) -> Raster:
    """
    Runs whole-image operations in order, each on the previous output.

    On failure raises ImageStackError; its `raster` attribute holds the
    output of the last successful step.
    """
    current = ensure_raster(raster)
    for idx, op in enumerate(ops):
        if op.per_pixel:
            continue
        try:
            current = process_image(op, current)
        except ImageOperationError as e:
            logger.error(f"Image stack step {idx} ({op.label}) failed: {e}")
            if context is not None:
                context.report(f"{op.label}: {e}")
            raise ImageStackError(str(e), op, idx, current) from e

    if context is not None:
        context.metrics["image_size"] = (int(current.shape[1]), int(current.shape[0]))
    return np.ascontiguousarray(current)
