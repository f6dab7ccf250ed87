"""Tool construction and lookup helpers."""

import inspect
import types
from collections.abc import Callable, Iterable
from typing import Any, Union, get_type_hints

from tandem.tools.base import Tool, ToolFunction, ToolParameter, ToolSchema


def _python_type_to_json_schema(py_type: Any) -> str:
    """Convert Python type hint to JSON Schema type.

    Args:
        py_type: Python type annotation

    Returns:
        JSON Schema type string
    """
    origin = getattr(py_type, "__origin__", None)
    if origin is type(None):
        return "null"

    # Unwrap Union types (including Optional)
    if origin is Union or isinstance(py_type, types.UnionType):
        args = getattr(py_type, "__args__", ())
        non_none = [arg for arg in args if arg is not type(None)]
        if non_none:
            py_type = non_none[0]
            origin = getattr(py_type, "__origin__", None)

    if origin in (list, dict):
        py_type = origin

    type_map = {
        str: "string",
        int: "integer",
        float: "number",
        bool: "boolean",
        list: "array",
        dict: "object",
    }

    return type_map.get(py_type, "string")


def _param_description(fn: ToolFunction, param_name: str) -> str:
    # Simple parsing: look for "param_name: description" in the docstring
    if fn.__doc__:
        for line in fn.__doc__.split("\n"):
            line = line.strip()
            if line.startswith(f"{param_name}:"):
                return line[len(param_name) + 1 :].strip()
    return f"Parameter {param_name}"


def tool(description: str, name: str | None = None) -> Callable[[ToolFunction], Tool]:
    """Decorator that turns a function into a :class:`Tool`.

    Introspects the function signature and docstring to build the tool schema.
    Nothing is registered globally; collect the resulting tools and pass them
    to an engine or planner explicitly.

    Args:
        description: Human-readable description of what the tool does
        name: Tool name, defaults to the function name

    Returns:
        Decorator producing a Tool

    Example:
        @tool(description="Get the current weather for a city")
        async def weather(city: str) -> str:
            '''Look up the weather.

            Args:
                city: City name
            '''
            ...
    """

    def decorator(fn: ToolFunction) -> Tool:
        hints = get_type_hints(fn)
        sig = inspect.signature(fn)

        parameters: list[ToolParameter] = []
        for param_name, param in sig.parameters.items():
            param_type = hints.get(param_name, str)
            parameters.append(
                ToolParameter(
                    name=param_name,
                    type=_python_type_to_json_schema(param_type),
                    description=_param_description(fn, param_name),
                    required=param.default == inspect.Parameter.empty,
                )
            )

        schema = ToolSchema(
            name=name or fn.__name__,
            description=description,
            parameters=parameters,
        )
        return Tool(schema=schema, fn=fn)

    return decorator


def index_tools(tools: Iterable[Tool]) -> dict[str, Tool]:
    """Build a name-keyed lookup map.

    Later tools with a duplicate name replace earlier ones.
    """
    return {t.name: t for t in tools}


def select_tools(tools: list[Tool], names: list[str] | None) -> list[Tool]:
    """Return the subset of ``tools`` named in ``names``.

    An empty or missing allow-list selects every tool. Order follows ``tools``.
    """
    if not names:
        return list(tools)
    allowed = set(names)
    return [t for t in tools if t.name in allowed]


def collect_tools(namespace: Any) -> list[Tool]:
    """Collect every Tool attribute of a module or object."""
    return [value for value in vars(namespace).values() if isinstance(value, Tool)]
