"""Tool capability interface.

A tool is a name, a description, a parameter contract and an async
``execute``. The package ships no concrete tools; build them with the
``@tool`` decorator or by constructing :class:`Tool` directly.

Usage::

    from tandem.tools import tool

    @tool(description="Evaluate an arithmetic expression")
    def calculator(expression: str) -> str:
        ...
"""

from tandem.tools.base import Tool, ToolFunction, ToolParameter, ToolSchema
from tandem.tools.registry import collect_tools, index_tools, select_tools, tool

__all__ = [
    "Tool",
    "ToolFunction",
    "ToolParameter",
    "ToolSchema",
    "collect_tools",
    "index_tools",
    "select_tools",
    "tool",
]
