"""LLM client protocol and data types."""

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any, Protocol

from tandem.errors import MalformedToolCallError


@dataclass
class Message:
    """A message in the conversation."""

    role: str  # "system", "user", "assistant", "tool"
    content: str
    tool_calls: list["ToolCall"] | None = None
    tool_call_id: str | None = None  # For tool response messages
    name: str | None = None  # Tool name for tool response messages


@dataclass
class ToolCall:
    """A complete tool call requested by the LLM."""

    id: str
    name: str
    arguments: Any


@dataclass
class ToolCallChunk:
    """A partial tool call delivered while streaming.

    ``arguments`` is a raw fragment of the call's JSON text and is not
    expected to be valid JSON on its own.
    """

    index: int
    id: str | None = None
    name: str | None = None
    arguments: str | None = None


@dataclass
class CompletionResponse:
    """Response from LLM completion."""

    content: str
    tool_calls: list[ToolCall] | None = None
    finish_reason: str = "stop"
    # Calls dropped from tool_calls because their arguments were not valid JSON
    malformed: list[MalformedToolCallError] = field(default_factory=list)


@dataclass
class CompletionChunk:
    """One streamed piece of a completion."""

    content: str = ""
    tool_call_chunks: list[ToolCallChunk] = field(default_factory=list)
    finish_reason: str | None = None


class LLMClient(Protocol):
    """Protocol for LLM client implementations."""

    async def complete(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        tool_choice: str | dict[str, Any] | None = None,
    ) -> CompletionResponse:
        """Generate a completion from the LLM.

        Args:
            messages: Conversation history
            tools: Available tools in OpenAI function format
            temperature: Sampling temperature override
            max_tokens: Maximum tokens to generate
            tool_choice: "auto", "none", or a specific function to force

        Returns:
            CompletionResponse with content and optional tool calls
        """
        ...

    def stream_complete(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        temperature: float | None = None,
    ) -> AsyncIterator[CompletionChunk]:
        """Stream a completion from the LLM.

        Args:
            messages: Conversation history
            tools: Available tools in OpenAI function format
            temperature: Sampling temperature override

        Yields:
            Completion chunks carrying text deltas and tool call fragments
        """
        ...


def forced_tool_choice(name: str) -> dict[str, Any]:
    """Build a ``tool_choice`` value that forces a call to ``name``."""
    return {"type": "function", "function": {"name": name}}
