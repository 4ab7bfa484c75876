from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union
import numpy as np
from pixstack.domain.errors import ExpressionError
from pixstack.domain.interfaces import PipelineContext
from pixstack.domain.models import Operation, is_per_pixel
from pixstack.domain.types import Raster
from pixstack.features.pixel.processor import apply_pixel_block
from pixstack.kernel.image.logic import block_to_uint8, uint8_to_block
from pixstack.kernel.image.validation import ensure_raster
from pixstack.kernel.system.config import APP_CONFIG
from pixstack.kernel.system.logging import get_logger
from pixstack.services.rendering.image_processor import run_image_stack

logger = get_logger(__name__)

RngLike = Union[None, int, np.random.Generator]


def _chunk_ranges(total: int, chunk_size: int) -> List[Tuple[int, int]]:
    return [(lo, min(lo + chunk_size, total)) for lo in range(0, total, chunk_size)]


def _chunk_generators(rng: RngLike, count: int) -> List[np.random.Generator]:
    """
    One independent generator per chunk, derived from the caller's rng/seed.
    """
    if isinstance(rng, np.random.Generator):
        seq = np.random.SeedSequence(int(rng.integers(0, 2**63 - 1)))
    else:
        seq = np.random.SeedSequence(rng)
    return [np.random.default_rng(s) for s in seq.spawn(count)]


def _sweep_chunk(
    px: np.ndarray,
    ops: Sequence[Operation],
    rng: np.random.Generator,
) -> Tuple[int, List[str]]:
    """
    Runs the whole stack over one chunk of (N, 4) uint8 pixels in place.
    Returns (pixels left untouched by some op, failure messages).
    """
    block = uint8_to_block(px)
    skipped = 0
    failures: List[str] = []
    for op in ops:
        try:
            skipped += apply_pixel_block(op, block, rng)
        except ExpressionError as e:
            failures.append(f"{op.label}: {e}")
    block_to_uint8(block, px)
    return skipped, failures


def process_pixels(
    raster: Raster,
    ops: Sequence[Operation],
    rng: RngLike = None,
    chunk_size: Optional[int] = None,
    max_workers: Optional[int] = None,
    context: Optional[PipelineContext] = None,
) -> Raster:
    """
    Applies the per-pixel stack to every pixel of `raster` in place.

    The buffer is split into fixed-size pixel chunks swept concurrently;
    within a chunk the stack is applied in order. A failing operation is
    logged and treated as identity, the sweep always completes.
    """
    img = ensure_raster(raster)
    pixel_ops = [op for op in ops if is_per_pixel(op)]
    if not pixel_ops or img.size == 0:
        return raster

    flat = img.reshape(-1, 4)
    chunk = max(1, int(chunk_size or APP_CONFIG.pixel_chunk_size))
    ranges = _chunk_ranges(flat.shape[0], chunk)
    gens = _chunk_generators(rng, len(ranges))
    workers = max(1, min(len(ranges), int(max_workers or APP_CONFIG.max_workers)))

    if workers == 1:
        results = [_sweep_chunk(flat[lo:hi], pixel_ops, g) for (lo, hi), g in zip(ranges, gens)]
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures: List[Future[Tuple[int, List[str]]]] = [
                pool.submit(_sweep_chunk, flat[lo:hi], pixel_ops, g) for (lo, hi), g in zip(ranges, gens)
            ]
            results = [f.result() for f in futures]

    skipped = sum(r[0] for r in results)
    failures = sorted({msg for r in results for msg in r[1]})
    for msg in failures:
        logger.error(f"Pixel operation failed, treated as identity: {msg}")
    if skipped:
        logger.debug(f"{skipped} pixel evaluations left unchanged")

    if context is not None:
        context.errors.extend(failures)
        context.metrics["skipped_pixels"] = skipped

    if img is not raster:
        raster[...] = img
    return raster


run_pixel_stack = process_pixels


@dataclass
class EditResult:
    image_op: Raster
    pixel_op: Raster


@dataclass
class _ImageStage:
    source_hash: str
    stack: Tuple[Operation, ...]
    data: Raster


class EditEngine:
    """
    Holds the two result slots of an edit: the image-stack output and the
    pixel-stack output derived from it. The image stage is cached and only
    recomputed when the source or the image stack changes.
    """

    def __init__(self, rng: RngLike = None) -> None:
        self.rng = rng
        self.cache: Optional[_ImageStage] = None

    @staticmethod
    def invalidates(op: Operation) -> str:
        """
        Which slot an edit to `op` dirties: "pixel_op" or "image_op".
        """
        return "pixel_op" if is_per_pixel(op) else "image_op"

    def clear(self) -> None:
        self.cache = None

    def process(
        self,
        source: Raster,
        pixel_stack: Sequence[Operation],
        image_stack: Sequence[Operation],
        source_hash: str,
        context: Optional[PipelineContext] = None,
    ) -> EditResult:
        if context is None:
            context = PipelineContext(source_hash=source_hash)

        stack = tuple(image_stack)
        cached = self.cache
        if cached is not None and cached.source_hash == source_hash and cached.stack == stack:
            image_res = cached.data
        else:
            image_res = run_image_stack(source, stack, context)
            if np.shares_memory(image_res, source):
                image_res = image_res.copy()
            # Shared between results; callers must copy before editing
            image_res.setflags(write=False)
            self.cache = _ImageStage(source_hash, stack, image_res)

        pixel_res = process_pixels(image_res.copy(), pixel_stack, rng=self.rng, context=context)
        return EditResult(image_op=image_res, pixel_op=pixel_res)
