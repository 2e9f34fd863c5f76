import logging
from typing import List

from Calculus.evaluator import apply_operator
from Calculus.expression import (
    ADD, MULTIPLY, NARY_OPERATORS, POWER, SUBTRACT,
    Expression, Number, Operation, is_number, is_operation,
)

logger = logging.getLogger(__name__)


def _flatten(op: str, operands: List[Expression]) -> List[Expression]:
    # (a + (b + c)) -> (a + b + c); children are already flat
    flat = []
    for operand in operands:
        if is_operation(operand, op):
            flat.extend(operand.operands)
        else:
            flat.append(operand)
    return flat


def _collapse(op: str, operands: List[Expression], empty_value: float) -> Expression:
    if not operands:
        return Number(empty_value)
    if len(operands) == 1:
        return operands[0]
    return Operation(op, operands)


# --- Expression Simplifier ---
class Simplifier:
    """Bottom-up canonicalising rewrite.

    The result is a fresh tree: leaves are cloned, never shared with the
    input. Running it on its own output returns an equal tree.
    """

    def run(self, node: Expression) -> Expression:
        if not isinstance(node, Operation):
            return node.clone()

        op = node.operator
        simplified_children = [self.run(child) for child in node.operands]
        if op in NARY_OPERATORS:
            simplified_children = _flatten(op, simplified_children)

        if all(isinstance(child, Number) for child in simplified_children):
            result_node = Number(apply_operator(op, [child.value for child in simplified_children]))
        elif op == ADD:
            result_node = self._simplify_add(simplified_children)
        elif op == MULTIPLY:
            result_node = self._simplify_multiply(simplified_children)
        elif op == POWER:
            result_node = self._simplify_power(*simplified_children)
        elif op == SUBTRACT:
            left, right = simplified_children
            result_node = left if is_number(right, 0.0) else Operation(op, simplified_children)
        else:
            result_node = Operation(op, simplified_children)

        return result_node

    @staticmethod
    def _simplify_add(operands):
        operands = [o for o in operands if not is_number(o, 0.0)]
        numbers = [o.value for o in operands if isinstance(o, Number)]
        if len(numbers) >= 2:
            constant = apply_operator(ADD, numbers)
            operands = [o for o in operands if not isinstance(o, Number)]
            if constant != 0.0:
                operands.insert(0, Number(constant))
        return _collapse(ADD, operands, 0.0)

    @staticmethod
    def _simplify_multiply(operands):
        if any(is_number(o, 0.0) for o in operands):
            return Number(0.0)
        operands = [o for o in operands if not is_number(o, 1.0)]
        numbers = [o.value for o in operands if isinstance(o, Number)]
        if len(numbers) >= 2:
            constant = apply_operator(MULTIPLY, numbers)
            if constant == 0.0:
                return Number(0.0)
            operands = [o for o in operands if not isinstance(o, Number)]
            if constant != 1.0:
                operands.insert(0, Number(constant))
        return _collapse(MULTIPLY, operands, 1.0)

    @staticmethod
    def _simplify_power(base, exponent):
        if is_number(exponent, 0.0):
            # A numeric base was folded already (0^0 -> 1 there); only a
            # symbolic base reaches this point.
            return Number(0.0) if is_number(base, 0.0) else Number(1.0)
        if is_number(exponent, 1.0):
            return base
        if is_number(base, 1.0):
            return Number(1.0)
        return Operation(POWER, (base, exponent))


def simplify(node: Expression) -> Expression:
    return Simplifier().run(node)
