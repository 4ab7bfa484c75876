from dataclasses import dataclass, fields, replace
from enum import IntEnum, StrEnum
from typing import Any, ClassVar, Dict, Tuple
from pixstack.domain.types import CropRect, Dimensions


class Channel(IntEnum):
    RED = 0
    GREEN = 1
    BLUE = 2
    ALPHA = 3


class ScaleFilter(StrEnum):
    BOX = "Box"
    BILINEAR = "Bilinear"
    HAMMING = "Hamming"
    CATMULL_ROM = "CatmullRom"
    MITCHELL = "Mitchell"
    LANCZOS3 = "Lanczos3"


class OpKind(StrEnum):
    PER_PIXEL = "per-pixel"
    WHOLE_IMAGE = "whole-image"


@dataclass(frozen=True)
class Operation:
    """
    One entry of an edit stack. Subclasses are immutable values.
    """

    label: ClassVar[str] = "Operation"
    kind: ClassVar[OpKind] = OpKind.PER_PIXEL

    @property
    def per_pixel(self) -> bool:
        return self.kind == OpKind.PER_PIXEL

    def __str__(self) -> str:
        return self.label

    def _sort_key(self) -> Tuple[int, Tuple[Any, ...]]:
        # Variant position first, then fields in declaration order
        return OPERATION_TYPES.index(type(self)), tuple(getattr(self, f.name) for f in fields(self))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Operation):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Operation):
            return NotImplemented
        return self._sort_key() <= other._sort_key()

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Operation):
            return NotImplemented
        return self._sort_key() > other._sort_key()

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Operation):
            return NotImplemented
        return self._sort_key() >= other._sort_key()


# --- per-pixel ---------------------------------------------------------------


@dataclass(frozen=True)
class Brightness(Operation):
    label: ClassVar[str] = "Brightness"
    amount: int = 0


@dataclass(frozen=True)
class Exposure(Operation):
    label: ClassVar[str] = "Exposure"
    amount: int = 0


@dataclass(frozen=True)
class Contrast(Operation):
    label: ClassVar[str] = "Contrast"
    amount: int = 0


@dataclass(frozen=True)
class Posterize(Operation):
    label: ClassVar[str] = "Posterize"
    levels: int = 8


@dataclass(frozen=True)
class Desaturate(Operation):
    label: ClassVar[str] = "Desaturate"
    amount: int = 0


@dataclass(frozen=True)
class Equalize(Operation):
    label: ClassVar[str] = "Equalize"
    dark: int = 0
    bright: int = 255


@dataclass(frozen=True)
class Noise(Operation):
    label: ClassVar[str] = "Noise"
    amount: int = 0
    mono: bool = False


@dataclass(frozen=True)
class Fill(Operation):
    label: ClassVar[str] = "Fill color"
    color: Tuple[int, int, int, int] = (255, 255, 255, 0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", tuple(self.color))


@dataclass(frozen=True)
class Mult(Operation):
    label: ClassVar[str] = "Mult color"
    color: Tuple[int, int, int] = (255, 255, 255)

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", tuple(self.color))


@dataclass(frozen=True)
class Add(Operation):
    label: ClassVar[str] = "Add color"
    color: Tuple[int, int, int] = (0, 0, 0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", tuple(self.color))


@dataclass(frozen=True)
class Invert(Operation):
    label: ClassVar[str] = "Invert"


@dataclass(frozen=True)
class ChannelSwap(Operation):
    """
    Copies `source` into `target`.
    """

    label: ClassVar[str] = "Channel Copy"
    target: Channel = Channel.RED
    source: Channel = Channel.RED

    def __post_init__(self) -> None:
        object.__setattr__(self, "target", Channel(self.target))
        object.__setattr__(self, "source", Channel(self.source))


@dataclass(frozen=True)
class HSV(Operation):
    label: ClassVar[str] = "HSV"
    hue: int = 0
    saturation: int = 100
    lightness: int = 100


@dataclass(frozen=True)
class MultiplyByAlpha(Operation):
    label: ClassVar[str] = "Multiply with alpha"


@dataclass(frozen=True)
class DivideByAlpha(Operation):
    label: ClassVar[str] = "Divide by alpha"


@dataclass(frozen=True)
class Expression(Operation):
    label: ClassVar[str] = "Expression"
    text: str = "r = r"


@dataclass(frozen=True)
class PixelShaderParam(Operation):
    """
    Parameter for the external shader preview. Identity on the CPU path.
    """

    label: ClassVar[str] = "Shader"
    value: int = 0


# --- whole-image -------------------------------------------------------------


@dataclass(frozen=True)
class ChromaticAberration(Operation):
    label: ClassVar[str] = "Color Fringe"
    kind: ClassVar[OpKind] = OpKind.WHOLE_IMAGE
    amount: int = 0


@dataclass(frozen=True)
class Blur(Operation):
    label: ClassVar[str] = "Blur"
    kind: ClassVar[OpKind] = OpKind.WHOLE_IMAGE
    radius: int = 0


@dataclass(frozen=True)
class Crop(Operation):
    """
    left, top, right margin, bottom margin; 10000 == 1.0 of the edge.
    """

    label: ClassVar[str] = "Crop"
    kind: ClassVar[OpKind] = OpKind.WHOLE_IMAGE
    rect: CropRect = (0, 0, 0, 0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "rect", tuple(self.rect))


@dataclass(frozen=True)
class Resize(Operation):
    label: ClassVar[str] = "Resize"
    kind: ClassVar[OpKind] = OpKind.WHOLE_IMAGE
    dimensions: Dimensions = (0, 0)
    keep_aspect: bool = True
    filter: ScaleFilter = ScaleFilter.BILINEAR

    def __post_init__(self) -> None:
        object.__setattr__(self, "dimensions", tuple(self.dimensions))
        object.__setattr__(self, "filter", ScaleFilter(self.filter))


@dataclass(frozen=True)
class Rotate(Operation):
    label: ClassVar[str] = "Rotate"
    kind: ClassVar[OpKind] = OpKind.WHOLE_IMAGE
    angle: int = 90


@dataclass(frozen=True)
class Flip(Operation):
    """
    Always flips horizontally; `vertical` adds a vertical flip on top.
    """

    label: ClassVar[str] = "Flip"
    kind: ClassVar[OpKind] = OpKind.WHOLE_IMAGE
    vertical: bool = False


OPERATION_TYPES: Tuple[type, ...] = (
    Brightness,
    Exposure,
    Contrast,
    Posterize,
    Desaturate,
    Equalize,
    Noise,
    Fill,
    Mult,
    Add,
    Invert,
    ChannelSwap,
    HSV,
    ChromaticAberration,
    Blur,
    Crop,
    Resize,
    Rotate,
    Flip,
    MultiplyByAlpha,
    DivideByAlpha,
    Expression,
    PixelShaderParam,
)

# Editing range per numeric field (inclusive).
PARAM_RANGES: Dict[Tuple[type, str], Tuple[int, int]] = {
    (Brightness, "amount"): (-255, 255),
    (Exposure, "amount"): (-100, 100),
    (Contrast, "amount"): (-128, 128),
    (Posterize, "levels"): (1, 255),
    (Desaturate, "amount"): (0, 100),
    (Equalize, "dark"): (-128, 128),
    (Equalize, "bright"): (64, 2000),
    (Noise, "amount"): (0, 100),
    (Fill, "color"): (0, 255),
    (Mult, "color"): (0, 255),
    (Add, "color"): (0, 255),
    (HSV, "hue"): (0, 360),
    (HSV, "saturation"): (0, 200),
    (HSV, "lightness"): (0, 200),
    (ChromaticAberration, "amount"): (0, 255),
    (Blur, "radius"): (0, 20),
    (Crop, "rect"): (0, 10000),
    (Resize, "dimensions"): (0, 10000),
    (PixelShaderParam, "value"): (0, 255),
}


def classify(op: Operation) -> OpKind:
    return op.kind


def is_per_pixel(op: Operation) -> bool:
    """
    Routes an op to the pixel sweep (True) or the image stack (False).
    """
    return op.kind == OpKind.PER_PIXEL


def clamp_operation(op: Operation) -> Operation:
    """
    Returns a copy of `op` with every ranged field pulled into its range.
    """
    changes = {}
    for f in fields(op):
        bounds = PARAM_RANGES.get((type(op), f.name))
        if bounds is None:
            continue
        lo, hi = bounds
        val = getattr(op, f.name)
        if isinstance(val, tuple):
            changes[f.name] = tuple(min(hi, max(lo, int(v))) for v in val)
        else:
            changes[f.name] = min(hi, max(lo, int(val)))
    return replace(op, **changes) if changes else op
