import logging
from functools import reduce
from typing import Sequence

import numpy as np

from Calculus.expression import (
    ADD, COS, LN, MULTIPLY, POWER, SIN, SUBTRACT,
    Expression, Number, Operation, UnsupportedOperatorError, Variable,
)
from Calculus.point import Point

logger = logging.getLogger(__name__)

# Operator semantics over float64; n-ary folds run left to right.
OPERATIONS = {
    ADD: lambda values: reduce(np.add, values, np.float64(0.0)),
    MULTIPLY: lambda values: reduce(np.multiply, values, np.float64(1.0)),
    POWER: lambda values: np.power(values[0], values[1]),
    SUBTRACT: lambda values: np.subtract(values[0], values[1]),
    LN: lambda values: np.log(values[0]),
    SIN: lambda values: np.sin(values[0]),
    COS: lambda values: np.cos(values[0]),
}


def apply_operator(operator: str, values: Sequence[float]) -> float:
    """Applies one operator to already evaluated operands.

    Invalid domains give nan or inf instead of raising, e.g. ``ln 0`` is
    ``-inf`` and ``(-8)^(1/3)`` is ``nan``.
    """
    try:
        operation = OPERATIONS[operator]
    except KeyError:
        raise UnsupportedOperatorError(f"Evaluation rule for '{operator}' not implemented") from None

    with np.errstate(all='ignore'):
        return float(operation([np.float64(v) for v in values]))


def evaluate(node: Expression, point: Point) -> float:
    if isinstance(node, Number):
        return node.value
    if isinstance(node, Variable):
        return point.get(node.name)
    if isinstance(node, Operation):
        return apply_operator(node.operator, [evaluate(child, point) for child in node.operands])
    raise UnsupportedOperatorError(f"Cannot evaluate {node!r}")
