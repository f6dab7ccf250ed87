"""Stub tools used by the examples.

Also loadable from the command line::

    PYTHONPATH=examples tandem ask "What is 10% of the temperature in Paris?" --tools demo_tools
"""

import ast
import operator

from tandem.tools import tool

_FAKE_WEATHER = {
    "beijing": "Cloudy, 18C",
    "paris": "Sunny, 25C",
    "oslo": "Rain, 9C",
}

_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.USub: operator.neg,
}


def _evaluate(node: ast.AST) -> float:
    if isinstance(node, ast.Constant) and isinstance(node.value, int | float):
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _OPERATORS:
        return _OPERATORS[type(node.op)](_evaluate(node.left), _evaluate(node.right))
    if isinstance(node, ast.UnaryOp) and type(node.op) in _OPERATORS:
        return _OPERATORS[type(node.op)](_evaluate(node.operand))
    raise ValueError("only + - * / and numbers are supported")


@tool(description="Get the current weather for a city")
async def weather(city: str) -> str:
    """Look up the weather.

    Args:
        city: City name, e.g. Paris
    """
    return _FAKE_WEATHER.get(city.lower(), f"No weather data for {city}")


@tool(description="Evaluate an arithmetic expression")
def calculator(expression: str) -> str:
    """Evaluate arithmetic.

    Args:
        expression: Expression using + - * / and parentheses, e.g. 25 * 0.1
    """
    return str(_evaluate(ast.parse(expression, mode="eval").body))
