import logging
from typing import Iterable, Iterator, Tuple, Union

from Calculus.expression import (
    ADD, COS, LN, MULTIPLY, POWER, SIN, SUBTRACT,
    Add, Cos, Expression, Ln, Multiply, Number, Operation, Power, Sin, Subtract,
    UnsupportedOperatorError, Variable, depends_on, is_number, to_text,
)
from Calculus.simplifier import simplify

# --- Logger Setup ---
logger = logging.getLogger(__name__)


# --- Derivative Computation ---
class Differentiator:
    """Structural derivative with respect to one variable.

    The result is not simplified; unchanged operands are deep copies.
    """

    def __init__(self, variable: str):
        self.variable = variable

    def run(self, node: Expression) -> Expression:
        return self._differentiate(node)

    def _differentiate(self, node):
        # Base cases: constants or the variable itself
        if isinstance(node, Number):
            return Number(0.0)
        if isinstance(node, Variable):
            return Number(1.0 if node.name == self.variable else 0.0)
        if not isinstance(node, Operation):
            raise UnsupportedOperatorError(f"Cannot differentiate {node!r}")

        op = node.operator
        args = node.operands

        if op == ADD:
            return Add(*[self._differentiate(arg) for arg in args])

        if op == SUBTRACT:
            u, v = args
            return Subtract(self._differentiate(u), self._differentiate(v))

        if op == MULTIPLY:
            # (a*b*c)' = a'*b*c + b'*a*c + c'*a*b
            terms = []
            for i, arg in enumerate(args):
                others = [other.clone() for j, other in enumerate(args) if j != i]
                terms.append(Multiply(self._differentiate(arg), *others))
            return Add(*terms)

        if op == POWER:
            return self._power_rule(*args)

        # Chain rule for functions
        if op == LN:
            u, = args
            if u == Variable(self.variable):
                return Power(u.clone(), -1)
            return Multiply(Power(u.clone(), -1), self._differentiate(u))
        if op == SIN:
            u, = args
            return Multiply(Cos(u.clone()), self._differentiate(u))
        if op == COS:
            u, = args
            return Multiply(-1, Sin(u.clone()), self._differentiate(u))

        raise UnsupportedOperatorError(f"Differentiation rule for '{op}' not implemented")

    def _power_rule(self, base, exp):
        v = self.variable
        base_depends = depends_on(base, v)
        exp_depends = depends_on(exp, v)

        if base_depends and exp_depends:
            if base == Variable(v) and exp == Variable(v):
                # x^x: (ln x + 1) * x^x
                return Multiply(Add(Ln(base.clone()), 1), Power(base.clone(), base.clone()))
            if base == exp:
                # f^f: (ln f + 1) * f^f * f'
                return Multiply(Add(Ln(base.clone()), 1), Power(base.clone(), base.clone()), self._differentiate(base))
            # f^g: f^g * (g' * ln f + g * f^-1 * f')
            return Multiply(
                Power(base.clone(), exp.clone()),
                Add(
                    Multiply(self._differentiate(exp), Ln(base.clone())),
                    Multiply(exp.clone(), Power(base.clone(), -1), self._differentiate(base)),
                ),
            )

        if base_depends:  # Power Rule: f(x)^c
            if is_number(exp, 0.0):
                return Number(0.0)
            if isinstance(exp, Number):
                new_exp = Number(exp.value - 1.0)
            else:
                new_exp = Add(exp.clone(), -1)
            return Multiply(exp.clone(), Power(base.clone(), new_exp), self._differentiate(base))

        if exp_depends:  # Exponential Rule: c^g(x)
            if is_number(base, 0.0) or is_number(base, 1.0):
                return Number(0.0)
            return Multiply(Power(base.clone(), exp.clone()), Ln(base.clone()), self._differentiate(exp))

        return Number(0.0)


def derivative(node: Expression, variable: str) -> Expression:
    return Differentiator(variable).run(node)


# --- Repeated and Mixed Partial Derivatives ---
class DifferentiationPlan:
    """Ordered differentiation variables, e.g. ``"y y z"`` for d3/dy2dz.

    Variables are applied left to right and the expression is simplified
    after every step.
    """

    def __init__(self, variables: Union[str, Iterable[str]] = ()):
        if isinstance(variables, str):
            variables = variables.split()
        self.variables = list(variables)

    def steps(self, expression: Expression) -> Iterator[Tuple[str, Expression]]:
        for variable in self.variables:
            expression = simplify(derivative(expression, variable))
            logger.debug(f"d/d{variable} -> {to_text(expression)}")
            yield variable, expression

    def act_on(self, expression: Expression) -> Expression:
        result = expression.clone()
        for _, result in self.steps(expression):
            pass
        return result

    def __repr__(self):
        return f"DifferentiationPlan({self.variables!r})"


def apply_all(plan: Iterable[str], expression: Expression) -> Expression:
    return DifferentiationPlan(plan).act_on(expression)
