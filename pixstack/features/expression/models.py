from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class Token:
    type: str
    value: str
    position: int


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Boolean:
    value: bool


@dataclass(frozen=True)
class Name:
    id: str


@dataclass(frozen=True)
class Unary:
    op: str
    operand: "Node"


@dataclass(frozen=True)
class Binary:
    op: str
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class Call:
    func: str
    args: Tuple["Node", ...]


@dataclass(frozen=True)
class Assign:
    target: str
    # "=" or a compound operator such as "+="
    op: str
    value: "Node"


Node = Union[Number, Boolean, Name, Unary, Binary, Call, Assign]


@dataclass(frozen=True)
class Program:
    statements: Tuple[Node, ...]


CHANNEL_VARS: Tuple[str, ...] = ("r", "g", "b", "a")
