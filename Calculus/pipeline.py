import math
import time
import tracemalloc
import logging

from Calculus.differentiator import DifferentiationPlan
from Calculus.evaluator import evaluate
from Calculus.expression import to_latex, to_text
from Calculus.parser import parse
from Calculus.point import Point

# --- Logger Setup ---
logger = logging.getLogger(__name__)


def round_result(value: float) -> float:
    # Half away from zero to two decimals; values of 1e15 and above have no
    # fractional digits left, nan and inf pass through
    if not math.isfinite(value) or abs(value) >= 1e15:
        return value
    return math.copysign(math.floor(abs(value) * 100 + 0.5), value) / 100


def format_result(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    text = f"{round_result(value):.2f}"
    return "0.00" if text == "-0.00" else text


def split_input(text: str):
    lines = (text or '').split('\n')
    lines += [''] * (3 - len(lines))
    formula, order, bindings = lines[:3]
    return formula, order, bindings


def run(text: str) -> str:
    """``"<formula>\\n<variables>\\n<bindings>"`` -> value of the derivative, e.g. ``"30.00"``."""
    formula, order, bindings = split_input(text)
    point = Point(bindings)
    plan = DifferentiationPlan(order)
    expression = parse(formula, point.variables)
    return format_result(evaluate(plan.act_on(expression), point))


# --- Main Compute Function ---
def compute_partial_derivative(formula: str, order: str, bindings: str = ''):
    tracemalloc.start()
    start_time = time.perf_counter()

    try:
        # 1. Parse the bindings and the formula
        point = Point(bindings)
        plan = DifferentiationPlan(order)
        expression = parse(formula, point.variables)

        # 2. Differentiate step by step
        steps = [{
            "id": "step_0_initial_expression",
            "variable": None,
            "expression": to_text(expression),
            "latex": to_latex(expression),
        }]
        result = expression
        for index, (variable, result) in enumerate(plan.steps(expression), start=1):
            steps.append({
                "id": f"step_{index}_d{variable}",
                "variable": variable,
                "expression": to_text(result),
                "latex": to_latex(result),
            })

        # 3. Evaluate at the point
        value = evaluate(result, point)
    finally:
        end_time = time.perf_counter()
        _, peak_memory = tracemalloc.get_traced_memory()
        tracemalloc.stop()

    return {
        "derivative": to_text(result),
        "derivative_latex": to_latex(result),
        "steps": steps,
        "value": value if math.isfinite(value) else None,
        "result": format_result(value),
        "execution_time_ms": (end_time - start_time) * 1000,
        "peak_memory_bytes": peak_memory,
    }
