import random
from sympy import symbols, S, sin, cos, log, Add, Mul, Pow, Symbol, Rational, Integer, Float, E, pi, latex

FUNCTIONS = {sin: "sin", cos: "cos", log: "ln"}


def to_formula(expr):
    """Writes a SymPy expression in the calculator's formula syntax."""
    if expr == E:
        return "e"
    if expr == pi:
        return "pi"
    if isinstance(expr, Symbol):
        return expr.name
    if isinstance(expr, Integer):
        return str(int(expr))
    if isinstance(expr, Rational):
        return f"({expr.p}*({expr.q}^-1))"
    if isinstance(expr, Float):
        return repr(float(expr))
    if isinstance(expr, Add):
        return "(" + "+".join(to_formula(arg) for arg in expr.args) + ")"
    if isinstance(expr, Mul):
        return "(" + "*".join(to_formula(arg) for arg in expr.args) + ")"
    if isinstance(expr, Pow):
        base, exponent = expr.args
        return f"({to_formula(base)}^{to_formula(exponent)})"
    if expr.func in FUNCTIONS:
        return f"{FUNCTIONS[expr.func]}({to_formula(expr.args[0])})"
    raise ValueError(f"Cannot write {expr.func} in formula syntax")


def generate_random_expression(variables, num_terms=3, max_depth=2, functions=(sin, cos)):

    # Ensure all variables are SymPy symbols
    variables = [symbols(v) if isinstance(v, str) else v for v in variables]

    operators = ["add", "mul", "pow"]
    functions = list(functions)

    def create_leaf():
        if random.random() < 0.7:
            return random.choice(variables)  # variable
        else:
            return S(random.randint(1, 10))  # constant

    # Exponents are small positive integers, so x^y never appears
    def safe_exponent():
        return S(random.randint(1, 5))

    def create_node(current_depth):
        if current_depth >= max_depth or random.random() < 0.4:
            return create_leaf()

        choice = random.choice(operators + (["func"] if functions else []))

        # function node
        if choice == "func":
            func = random.choice(functions)
            return func(create_node(current_depth + 1))

        # operator node
        left = create_node(current_depth + 1)
        right = create_node(current_depth + 1)

        if choice == "add":
            return left + right

        elif choice == "mul":
            return left * right

        elif choice == "pow":
            return Pow(left, safe_exponent())

    terms = [create_node(0) for _ in range(num_terms)]
    expr = Add(*terms)

    # Return the SymPy expression, its formula string, and its LaTeX representation
    return expr, to_formula(expr), latex(expr)


if __name__ == '__main__':
    x, y = symbols('x y')
    expr, expr_str, expr_latex = generate_random_expression([x, y], num_terms=2, max_depth=3)
    print(f"Generated Expression: {expr}")
    print(f"Generated Expression String: {expr_str}")
    print(f"Generated Expression LaTeX: {expr_latex}")
