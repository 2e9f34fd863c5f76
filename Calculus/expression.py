import logging
from dataclasses import dataclass
from typing import Tuple, Union

# --- Logger Setup ---
logger = logging.getLogger(__name__)

# --- Operators ---
ADD = '+'
SUBTRACT = '-'
MULTIPLY = '*'
POWER = '^'
LN = 'ln'
SIN = 'sin'
COS = 'cos'

NARY_OPERATORS = {ADD, MULTIPLY}
BINARY_OPERATORS = {SUBTRACT, POWER}
SUPPORTED_FUNCTIONS = {LN, SIN, COS}


# --- Errors ---
class ParseError(ValueError):
    """Raised by the tokenizer/parser; never escapes ``Calculus.parser.parse``."""


class UnsupportedOperatorError(RuntimeError):
    """An operator reached a rule table that has no entry for it."""


# --- Expression Tree ---
class Expression:
    def clone(self) -> 'Expression':
        raise NotImplementedError

    def __str__(self):
        return to_text(self)


@dataclass(frozen=True, repr=False)
class Number(Expression):
    value: float

    def __post_init__(self):
        object.__setattr__(self, 'value', float(self.value))

    def clone(self):
        return Number(self.value)

    def __repr__(self):
        return _format_number(self.value)


@dataclass(frozen=True, repr=False)
class Variable(Expression):
    name: str

    def clone(self):
        return Variable(self.name)

    def __repr__(self):
        return self.name


@dataclass(frozen=True, repr=False)
class Operation(Expression):
    operator: str
    operands: Tuple[Expression, ...]

    def __post_init__(self):
        object.__setattr__(self, 'operands', tuple(convert(o) for o in self.operands))

    def clone(self):
        return Operation(self.operator, tuple(o.clone() for o in self.operands))

    def __repr__(self):
        return f"{self.operator}({', '.join(map(repr, self.operands))})"


def convert(value: Union[Expression, float, int, str]) -> Expression:
    if isinstance(value, Expression):
        return value
    if isinstance(value, str):
        return Variable(value)
    return Number(value)


def is_number(node: Expression, value=None) -> bool:
    if not isinstance(node, Number):
        return False
    return value is None or node.value == value


def is_operation(node: Expression, operator: str) -> bool:
    return isinstance(node, Operation) and node.operator == operator


# --- Constructors ---
# Plain numbers and strings are promoted to Number and Variable leaves.
def Add(*operands):
    return Operation(ADD, operands)


def Subtract(left, right):
    return Operation(SUBTRACT, (left, right))


def Multiply(*operands):
    return Operation(MULTIPLY, operands)


def Power(base, exponent):
    return Operation(POWER, (base, exponent))


def Ln(argument):
    return Operation(LN, (argument,))


def Sin(argument):
    return Operation(SIN, (argument,))


def Cos(argument):
    return Operation(COS, (argument,))


def depends_on(node: Expression, variable: str) -> bool:
    if isinstance(node, Variable):
        return node.name == variable
    if isinstance(node, Operation):
        return any(depends_on(child, variable) for child in node.operands)
    return False


# --- Helper and Formatting Functions ---
def _format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def to_text(node: Expression) -> str:
    """Fully parenthesised infix form that ``Calculus.parser.parse`` reads back."""
    if isinstance(node, Number):
        return _format_number(node.value)
    if isinstance(node, Variable):
        return node.name

    args_text = [to_text(child) for child in node.operands]
    if node.operator in SUPPORTED_FUNCTIONS:
        return f"{node.operator}({args_text[0]})"
    return f"({node.operator.join(args_text)})"


def to_latex(node: Expression) -> str:
    if isinstance(node, Number):
        return _format_number(node.value)
    if isinstance(node, Variable):
        return node.name

    op = node.operator

    # Define operator precedence for parenthesis insertion
    precedence = {ADD: 1, SUBTRACT: 1, MULTIPLY: 2, POWER: 3}

    def format_child(child_node, is_left_child=False):
        child_latex = to_latex(child_node)

        if isinstance(child_node, Number) and child_node.value < 0 and not is_left_child:
            return f"({child_latex})"
        if not isinstance(child_node, Operation):
            return child_latex

        op_prec = precedence.get(op, 99)
        child_prec = precedence.get(child_node.operator, 99)

        if child_prec < op_prec:
            return f"({child_latex})"
        if child_prec == op_prec:
            if op == POWER and is_left_child:
                return f"({child_latex})"
            if op == SUBTRACT and not is_left_child:
                return f"({child_latex})"
        if op == POWER and is_left_child and child_node.operator in SUPPORTED_FUNCTIONS:
            return f"({child_latex})"
        return child_latex

    args_latex = [format_child(c, i == 0) for i, c in enumerate(node.operands)]

    if op == ADD:
        return " + ".join(args_latex)
    if op == SUBTRACT:
        return f"{args_latex[0]} - {args_latex[1]}"
    if op == MULTIPLY:
        first = node.operands[0]
        rest = " \\cdot ".join(args_latex[1:])
        # Rule 1: Handle unary minus like -x
        if is_number(first, -1.0):
            return f"-{rest}"
        # Rule 2: Use implicit multiplication after a leading constant (e.g., 4x)
        if isinstance(first, Number) and not isinstance(node.operands[1], Number):
            return f"{args_latex[0]}{rest}"
        # Rule 3 (Default): use \cdot
        return " \\cdot ".join(args_latex)
    if op == POWER:
        return f"{{{args_latex[0]}}}^{{{to_latex(node.operands[1])}}}"
    if op in SUPPORTED_FUNCTIONS:
        return f"\\{op}({to_latex(node.operands[0])})"

    raise UnsupportedOperatorError(f"No LaTeX rule for operator '{op}'")
