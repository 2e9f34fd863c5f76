import os
import logging
import json
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from typing import Optional, List

from sympy import diff, symbols

# Partial derivative engine
from Calculus.differentiator import DifferentiationPlan
from Calculus.evaluator import evaluate
from Calculus.expression import to_latex, to_text
from Calculus.parser import parse
from Calculus.pipeline import compute_partial_derivative, format_result, run
from Calculus.point import Point

# Random expression generator
from generate_expression import generate_random_expression, to_formula

# -------------------------------------------------------------------
# Setup
# -------------------------------------------------------------------
LOG_LEVEL = os.environ.get("CALCULUS_LOG_LEVEL", "DEBUG").upper()
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "CALCULUS_ALLOWED_ORIGINS",
        "http://localhost:5173,http://localhost:4000",
    ).split(",")
    if origin.strip()
]

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -------------------------------------------------------------------
# Symbol Normalization (π → pi, × → *, − → -)
# -------------------------------------------------------------------
def normalize_expression(expr: str):
    if not expr:
        return expr
    expr = expr.replace("π", "pi")
    expr = expr.replace("×", "*").replace("·", "*")
    expr = expr.replace("−", "-")
    return expr

# -------------------------------------------------------------------
# Health Endpoints
# -------------------------------------------------------------------
@app.get("/ping")
async def ping():
    logger.info("Uptime ping received")
    return {"status": "ok", "message": "Backend is alive"}

@app.get("/uptime")
async def uptime():
    logger.info("Uptime monitor pinged this server.")
    return {"status": "alive"}

# -------------------------------------------------------------------
# Pydantic Models
# -------------------------------------------------------------------
class DerivativeInput(BaseModel):
    formula: str
    order: str = 'x'
    bindings: str = ''


class RunInput(BaseModel):
    input: str


class GenerationInput(BaseModel):
    num_terms: Optional[int] = 3
    max_depth: Optional[int] = 2
    variables: Optional[List[str]] = ['x']
    order: Optional[str] = None

# -------------------------------------------------------------------
# Streaming Step Engine
# -------------------------------------------------------------------
async def derivative_step_generator(formula: str, order: str, bindings: str):

    try:
        point = Point(bindings)
        expression = parse(formula, point.variables)
        result = expression

        for variable, result in DifferentiationPlan(order).steps(expression):
            step = {
                'type': 'step',
                'variable': variable,
                'expression': to_text(result),
                'latex': to_latex(result),
            }
            yield f"data: {json.dumps(step)}\n\n"

        final_msg = {
            'type': 'complete',
            'derivative': to_text(result),
            'derivative_latex': to_latex(result),
            'result': format_result(evaluate(result, point)),
        }
        yield f"data: {json.dumps(final_msg)}\n\n"

    except Exception as e:
        logger.error("Unexpected derivative error", exc_info=True)
        err = {
            'type': 'error',
            'detail': f"Unexpected server error: {str(e)}"
        }
        yield f"data: {json.dumps(err)}\n\n"

# -------------------------------------------------------------------
# API Endpoints
# -------------------------------------------------------------------
@app.get("/solve_stream")
async def solve_derivative_stream(formula: str, order: str = 'x', bindings: str = ''):

    formula = normalize_expression(formula)

    logger.debug(f"Solve request (normalized): {formula}")
    return StreamingResponse(
        derivative_step_generator(formula, order, bindings),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        }
    )

@app.post("/differentiate")
async def differentiate_endpoint(input_data: DerivativeInput):
    formula = normalize_expression(input_data.formula)
    try:
        return compute_partial_derivative(formula, input_data.order, input_data.bindings)
    except Exception as e:
        logger.error(f"Error computing derivative for '{formula}'", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Derivative failed: {str(e)}"
        )

@app.post("/run")
async def run_endpoint(input_data: RunInput):
    try:
        return {"result": run(normalize_expression(input_data.input))}
    except Exception as e:
        logger.error("Run error", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Run failed: {str(e)}"
        )

@app.post("/generate")
async def generate_expression_endpoint(input_data: GenerationInput):
    try:
        expr_sym, expr_str, expr_latex = generate_random_expression(
            variables=input_data.variables,
            num_terms=input_data.num_terms,
            max_depth=input_data.max_depth
        )

        response = {
            "expression_string": expr_str,
            "expression_latex": expr_latex,
        }
        if input_data.order:
            reference = expr_sym
            for name in input_data.order.split():
                reference = diff(reference, symbols(name))
            response["reference_derivative"] = to_formula(reference)
        return response

    except Exception as e:
        logger.error("Generation error", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Generation failed: {str(e)}"
        )
