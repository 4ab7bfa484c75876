from pixstack.domain.models import Crop, Flip, Operation, Rotate
from pixstack.domain.types import Raster
from pixstack.features.geometry.logic import crop_raster, flip_raster, rotate_raster


class GeometryProcessor:
    """
    Crop, right-angle rotation and flips.
    """

    def __init__(self, op: Operation):
        self.op = op

    def process(self, image: Raster) -> Raster:
        op = self.op
        if isinstance(op, Crop):
            if tuple(op.rect) == (0, 0, 0, 0):
                return image
            return crop_raster(image, op.rect)
        if isinstance(op, Rotate):
            return rotate_raster(image, op.angle)
        if isinstance(op, Flip):
            return flip_raster(image, op.vertical)
        return image
