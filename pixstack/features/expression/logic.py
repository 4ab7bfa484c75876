from functools import lru_cache
from typing import Any, Callable, Dict
import numpy as np
from pixstack.domain.errors import ExpressionEvalError
from pixstack.features.expression.models import (
    Assign,
    Binary,
    Boolean,
    Call,
    CHANNEL_VARS,
    Name,
    Node,
    Number,
    Program,
    Unary,
)
from pixstack.features.expression.parser import parse

Value = Any


def _round_half_away(x: Value) -> Value:
    return np.sign(x) * np.floor(np.abs(x) + 0.5)


def _clamp(x: Value, lo: Value, hi: Value) -> Value:
    return np.minimum(np.maximum(x, lo), hi)


def _log(x: Value, base: Value) -> Value:
    return np.log(x) / np.log(base)


# name -> (callable, arity); arity -1 means one or more
FUNCTIONS: Dict[str, tuple[Callable[..., Value], int]] = {
    "min": (lambda *xs: _reduce(np.minimum, xs), -1),
    "max": (lambda *xs: _reduce(np.maximum, xs), -1),
    "abs": (np.abs, 1),
    "floor": (np.floor, 1),
    "ceil": (np.ceil, 1),
    "round": (_round_half_away, 1),
    "sqrt": (np.sqrt, 1),
    "exp": (np.exp, 1),
    "ln": (np.log, 1),
    "log": (_log, 2),
    "log2": (np.log2, 1),
    "log10": (np.log10, 1),
    "sin": (np.sin, 1),
    "cos": (np.cos, 1),
    "tan": (np.tan, 1),
    "asin": (np.arcsin, 1),
    "acos": (np.arccos, 1),
    "atan": (np.arctan, 1),
    "pow": (np.power, 2),
    "clamp": (_clamp, 3),
}


def _reduce(fn: Callable[[Value, Value], Value], xs: tuple) -> Value:
    res = xs[0]
    for x in xs[1:]:
        res = fn(res, x)
    return res


def _is_bool(v: Value) -> bool:
    return np.asarray(v).dtype == np.bool_


def _number(v: Value, op: str) -> Value:
    if _is_bool(v):
        raise ExpressionEvalError(f"Operator {op!r} expects a number, got a boolean")
    return v


def _boolean(v: Value, op: str) -> Value:
    if not _is_bool(v):
        raise ExpressionEvalError(f"Operator {op!r} expects a boolean, got a number")
    return v


_ARITHMETIC: Dict[str, Callable[[Value, Value], Value]] = {
    "+": np.add,
    "-": np.subtract,
    "*": np.multiply,
    "/": np.divide,
    "%": np.fmod,
    "^": np.power,
}

_COMPARE: Dict[str, Callable[[Value, Value], Value]] = {
    "==": np.equal,
    "!=": np.not_equal,
    "<": np.less,
    "<=": np.less_equal,
    ">": np.greater,
    ">=": np.greater_equal,
}


class Evaluator:
    """
    Walks a parsed program. Values are numpy arrays (one entry per pixel)
    or scalars, so one walk evaluates a whole pixel block.
    """

    def __init__(self, env: Dict[str, Value]) -> None:
        self.env = env

    def run(self, program: Program) -> None:
        with np.errstate(all="ignore"):
            for stmt in program.statements:
                try:
                    self.eval(stmt)
                except RecursionError:
                    raise ExpressionEvalError("Expression is nested too deeply") from None

    def eval(self, node: Node) -> Value:
        if isinstance(node, Number):
            return np.float64(node.value)
        if isinstance(node, Boolean):
            return np.bool_(node.value)
        if isinstance(node, Name):
            if node.id not in self.env:
                raise ExpressionEvalError(f"Unknown variable {node.id!r}")
            return self.env[node.id]
        if isinstance(node, Unary):
            val = self.eval(node.operand)
            if node.op == "-":
                return np.negative(_number(val, "-"))
            return np.logical_not(_boolean(val, "!"))
        if isinstance(node, Binary):
            return self._binary(node)
        if isinstance(node, Call):
            return self._call(node)
        if isinstance(node, Assign):
            val = self.eval(node.value)
            if node.op != "=":
                if node.target not in self.env:
                    raise ExpressionEvalError(f"Unknown variable {node.target!r}")
                arith = node.op[0]
                val = _ARITHMETIC[arith](_number(self.env[node.target], arith), _number(val, arith))
            self.env[node.target] = val
            return val
        raise ExpressionEvalError(f"Unsupported node {type(node).__name__}")

    def _binary(self, node: Binary) -> Value:
        left = self.eval(node.left)
        right = self.eval(node.right)
        op = node.op
        if op in _ARITHMETIC:
            return _ARITHMETIC[op](_number(left, op), _number(right, op))
        if op in _COMPARE:
            if _is_bool(left) != _is_bool(right):
                raise ExpressionEvalError(f"Cannot compare a boolean with a number using {op!r}")
            return _COMPARE[op](left, right)
        if op == "&&":
            return np.logical_and(_boolean(left, op), _boolean(right, op))
        if op == "||":
            return np.logical_or(_boolean(left, op), _boolean(right, op))
        raise ExpressionEvalError(f"Unknown operator {op!r}")

    def _call(self, node: Call) -> Value:
        name = node.func[len("math::") :] if node.func.startswith("math::") else node.func
        args = [self.eval(a) for a in node.args]

        if name == "if":
            if len(args) != 3:
                raise ExpressionEvalError("if() expects 3 arguments")
            return np.where(_boolean(args[0], "if"), args[1], args[2])

        if name not in FUNCTIONS:
            raise ExpressionEvalError(f"Unknown function {node.func!r}")
        fn, arity = FUNCTIONS[name]
        if (arity == -1 and not args) or (arity != -1 and len(args) != arity):
            raise ExpressionEvalError(f"{name}() got {len(args)} arguments")
        return fn(*(_number(a, name) for a in args))


@lru_cache(maxsize=128)
def compile_expression(text: str) -> Program:
    """
    Parses once per distinct expression text.
    """
    return parse(text)


def evaluate_block(program: Program, block: np.ndarray) -> int:
    """
    Runs `program` over every pixel of an (N, 4) block, in place.

    Channels are bound as float64 `r, g, b, a`. Numeric channel variables
    are written back afterwards; a pixel whose new values are not finite
    keeps its previous values. Returns the number of such pixels.
    """
    n = block.shape[0]
    env: Dict[str, Value] = {name: block[:, i].astype(np.float64) for i, name in enumerate(CHANNEL_VARS)}
    Evaluator(env).run(program)

    results: Dict[int, np.ndarray] = {}
    ok = np.ones(n, dtype=bool)
    for i, name in enumerate(CHANNEL_VARS):
        val = env.get(name)
        if val is None or _is_bool(val):
            continue
        arr = np.broadcast_to(np.asarray(val, dtype=np.float64), (n,))
        results[i] = arr
        ok &= np.isfinite(arr)

    for i, arr in results.items():
        block[ok, i] = arr[ok]
    return int(n - np.count_nonzero(ok))
