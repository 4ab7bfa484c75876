from pixstack.domain.models import Operation, Resize
from pixstack.domain.types import Raster
from pixstack.features.resample.logic import resize_gamma_correct, resolve_dimensions


class ResampleProcessor:
    """
    `keep_aspect` is an editing hint; the target size is taken as given.
    """

    def __init__(self, op: Operation):
        self.op = op

    def process(self, image: Raster) -> Raster:
        op = self.op
        if not isinstance(op, Resize) or tuple(op.dimensions) == (0, 0):
            return image

        return resize_gamma_correct(image, resolve_dimensions(op.dimensions), op.filter)
