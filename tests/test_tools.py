"""Tests for tool construction and schema generation."""

import types

import pytest

from tandem.tools.base import Tool, ToolParameter, ToolSchema
from tandem.tools.registry import collect_tools, index_tools, select_tools, tool


def test_tool_schema_to_openai_format():
    """Test converting ToolSchema to OpenAI format."""
    schema = ToolSchema(
        name="test_tool",
        description="A test tool",
        parameters=[
            ToolParameter(name="arg1", type="string", description="First arg", required=True),
            ToolParameter(
                name="arg2",
                type="string",
                description="Second arg",
                required=False,
                enum=["a", "b"],
            ),
        ],
    )

    openai_format = schema.to_openai_format()

    assert openai_format["type"] == "function"
    assert openai_format["function"]["name"] == "test_tool"
    assert openai_format["function"]["description"] == "A test tool"
    properties = openai_format["function"]["parameters"]["properties"]
    assert properties["arg2"]["enum"] == ["a", "b"]
    assert openai_format["function"]["parameters"]["required"] == ["arg1"]


def test_tool_schema_describe():
    schema = ToolSchema(
        name="search",
        description="Search the web",
        parameters=[
            ToolParameter(name="query", type="string", description="Search terms"),
            ToolParameter(name="limit", type="integer", description="Max hits", required=False),
        ],
    )

    assert schema.describe() == (
        "- search: Search the web\n"
        "  Parameters:\n"
        "    - query (string): Search terms\n"
        "    - limit (integer, optional): Max hits"
    )


def test_tool_decorator_builds_tool():
    """Test that @tool turns a function into a Tool."""

    @tool(description="Test function")
    async def test_func(arg1: str) -> str:
        """Test function.

        Args:
            arg1: First argument
        """
        return f"Result: {arg1}"

    assert isinstance(test_func, Tool)
    assert test_func.name == "test_func"
    assert test_func.description == "Test function"
    assert len(test_func.schema.parameters) == 1
    assert test_func.schema.parameters[0].description == "First argument"


def test_tool_decorator_custom_name():
    @tool(description="Renamed", name="lookup")
    def find(key: str) -> str:
        return key

    assert find.name == "lookup"


def test_tool_decorator_type_inference():
    """Test that decorator infers types from type hints."""

    @tool(description="Multi-type function")
    async def multi_type(
        str_arg: str,
        int_arg: int,
        float_arg: float,
        bool_arg: bool,
        list_arg: list[str],
        dict_arg: dict[str, int],
        maybe_arg: int | None = None,
    ) -> str:
        return "ok"

    params = {p.name: p for p in multi_type.schema.parameters}

    assert params["str_arg"].type == "string"
    assert params["int_arg"].type == "integer"
    assert params["float_arg"].type == "number"
    assert params["bool_arg"].type == "boolean"
    assert params["list_arg"].type == "array"
    assert params["dict_arg"].type == "object"
    assert params["maybe_arg"].type == "integer"
    assert params["maybe_arg"].required is False
    assert params["str_arg"].description == "Parameter str_arg"


@pytest.mark.asyncio
async def test_tool_execution_async_and_sync():
    """Test executing async and sync tools."""

    @tool(description="Addition tool")
    async def add(a: int, b: int) -> str:
        return str(a + b)

    @tool(description="Multiplication tool")
    def mul(a: int, b: int) -> int:
        return a * b

    assert await add.execute({"a": 5, "b": 3}) == "8"
    assert await mul.execute({"a": 5, "b": 3}) == "15"


@pytest.mark.asyncio
async def test_tool_execution_rejects_bad_arguments():
    @tool(description="Echo")
    def echo(text: str) -> str:
        return text

    with pytest.raises(TypeError):
        await echo.execute({"wrong": "x"})
    with pytest.raises(TypeError, match="expected a JSON object"):
        await echo.execute(["x"])


def test_select_tools():
    @tool(description="A")
    def a() -> str:
        return "a"

    @tool(description="B")
    def b() -> str:
        return "b"

    tools = [a, b]

    assert select_tools(tools, None) == [a, b]
    assert select_tools(tools, []) == [a, b]
    assert select_tools(tools, ["b", "missing"]) == [b]
    assert index_tools(tools) == {"a": a, "b": b}


def test_collect_tools_from_module():
    module = types.ModuleType("fake_tools")

    @tool(description="Ping")
    def ping() -> str:
        return "pong"

    module.ping = ping
    module.not_a_tool = lambda: None

    assert collect_tools(module) == [ping]
