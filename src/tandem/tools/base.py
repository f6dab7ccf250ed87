"""Base types for the tool system."""

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any


@dataclass
class ToolParameter:
    """Definition of a tool parameter."""

    name: str
    type: str  # JSON Schema type
    description: str
    required: bool = True
    enum: list[str] | None = None


@dataclass
class ToolSchema:
    """JSON Schema representation of a tool for LLM function calling."""

    name: str
    description: str
    parameters: list[ToolParameter]

    def to_openai_format(self) -> dict[str, Any]:
        """Convert to OpenAI function calling format.

        Returns:
            Dictionary matching OpenAI's function schema format
        """
        properties = {}
        required = []

        for param in self.parameters:
            param_schema: dict[str, Any] = {
                "type": param.type,
                "description": param.description,
            }
            if param.enum:
                param_schema["enum"] = param.enum

            properties[param.name] = param_schema

            if param.required:
                required.append(param.name)

        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": properties,
                    "required": required,
                },
            },
        }

    def describe(self) -> str:
        """Render the tool as a plain-text entry for prompts."""
        lines = [f"- {self.name}: {self.description}"]
        if self.parameters:
            lines.append("  Parameters:")
            for param in self.parameters:
                suffix = "" if param.required else ", optional"
                lines.append(f"    - {param.name} ({param.type}{suffix}): {param.description}")
        return "\n".join(lines)


# Tool function signature: sync or async function that returns a string result
ToolFunction = Callable[..., Awaitable[str] | str]


@dataclass
class Tool:
    """A tool that the agent can use."""

    schema: ToolSchema
    fn: ToolFunction

    @property
    def name(self) -> str:
        return self.schema.name

    @property
    def description(self) -> str:
        return self.schema.description

    def describe(self) -> str:
        return self.schema.describe()

    async def execute(self, arguments: dict[str, Any]) -> str:
        """Execute the tool with given arguments.

        Args:
            arguments: Parsed call arguments, passed to the function as keywords

        Returns:
            Tool execution result as string

        Raises:
            TypeError: If ``arguments`` does not match the function signature
        """
        if not isinstance(arguments, dict):
            raise TypeError(f"expected a JSON object, got {type(arguments).__name__}")
        result = self.fn(**arguments)
        if inspect.isawaitable(result):
            result = await result
        return result if isinstance(result, str) else str(result)
