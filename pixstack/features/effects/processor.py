from pixstack.domain.models import Blur, ChromaticAberration, Operation
from pixstack.domain.types import Raster
from pixstack.features.effects.logic import apply_blur, apply_chromatic_aberration


class EffectsProcessor:
    """
    Neighborhood effects: blur and color fringe.
    """

    def __init__(self, op: Operation):
        self.op = op

    def process(self, image: Raster) -> Raster:
        op = self.op
        if isinstance(op, Blur):
            return apply_blur(image, op.radius)
        if isinstance(op, ChromaticAberration):
            return apply_chromatic_aberration(image, op.amount)
        return image
