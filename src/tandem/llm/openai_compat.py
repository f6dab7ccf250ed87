"""Client for OpenAI-compatible inference servers."""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

from openai import APIError, AsyncOpenAI

from tandem.errors import MalformedToolCallError, ModelInvocationError
from tandem.llm.client import (
    CompletionChunk,
    CompletionResponse,
    Message,
    ToolCall,
    ToolCallChunk,
)

logger = logging.getLogger(__name__)


class OpenAICompatibleClient:
    """LLM client for any OpenAI-compatible ``/v1/chat/completions`` endpoint.

    OpenAI itself, DashScope's compatible mode and self-hosted servers all
    speak the same protocol, so provider differences reduce to the base URL
    and API key handed to this class.
    """

    def __init__(
        self,
        model: str,
        base_url: str | None = None,
        api_key: str = "none",
        timeout: int = 120,
        temperature: float = 0.0,
    ) -> None:
        """Initialise the client.

        Args:
            model: Model name served by the backend.
            base_url: OpenAI-compatible endpoint (must include ``/v1``).
                ``None`` uses the SDK default (api.openai.com).
            api_key: API key (many backends ignore this but the SDK requires one).
            timeout: Request timeout in seconds.
            temperature: Default sampling temperature.
        """
        self.model = model
        self.temperature = temperature
        self.client = AsyncOpenAI(base_url=base_url, api_key=api_key, timeout=timeout)

    def _convert_messages(self, messages: list[Message]) -> list[dict[str, Any]]:
        """Convert internal Message format to OpenAI format."""
        openai_messages: list[dict[str, Any]] = []

        for msg in messages:
            message_dict: dict[str, Any] = {
                "role": msg.role,
                "content": msg.content,
            }

            if msg.tool_calls:
                message_dict["tool_calls"] = [
                    {
                        "id": tc.id,
                        "type": "function",
                        "function": {
                            "name": tc.name,
                            "arguments": json.dumps(tc.arguments),
                        },
                    }
                    for tc in msg.tool_calls
                ]

            if msg.tool_call_id:
                message_dict["tool_call_id"] = msg.tool_call_id
            if msg.name:
                message_dict["name"] = msg.name

            openai_messages.append(message_dict)

        return openai_messages

    def _parse_tool_calls(
        self, tool_calls: Any
    ) -> tuple[list[ToolCall], list[MalformedToolCallError]]:
        """Parse tool calls from an OpenAI-compatible response.

        Returns:
            Tuple of (calls, errors). A call whose arguments are not valid
            JSON is left out of ``calls`` and reported in ``errors``.
        """
        parsed: list[ToolCall] = []
        errors: list[MalformedToolCallError] = []
        for index, tc in enumerate(tool_calls or []):
            raw = tc.function.arguments or ""
            try:
                args = json.loads(raw) if raw.strip() else {}
            except json.JSONDecodeError as e:
                errors.append(MalformedToolCallError(index, tc.function.name, raw, str(e)))
                continue
            parsed.append(
                ToolCall(
                    id=tc.id,
                    name=tc.function.name,
                    arguments=args,
                )
            )
        return parsed, errors

    @staticmethod
    def _convert_chunks(tool_calls: Any) -> list[ToolCallChunk]:
        """Convert streamed ``delta.tool_calls`` entries to ToolCallChunks."""
        chunks: list[ToolCallChunk] = []
        for tc in tool_calls or []:
            function = getattr(tc, "function", None)
            chunks.append(
                ToolCallChunk(
                    index=tc.index,
                    id=tc.id or None,
                    name=(function.name or None) if function else None,
                    arguments=function.arguments if function else None,
                )
            )
        return chunks

    async def complete(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        tool_choice: str | dict[str, Any] | None = None,
    ) -> CompletionResponse:
        """Generate a completion.

        Args:
            messages: Conversation history.
            tools: Available tools in OpenAI function format.
            temperature: Sampling temperature override.
            max_tokens: Maximum tokens to generate.
            tool_choice: Tool selection mode; defaults to "auto" when tools are given.

        Returns:
            CompletionResponse with content and optional tool calls. Calls
            with invalid JSON arguments are reported in ``malformed``.

        Raises:
            ModelInvocationError: If the backend request fails.
        """
        params: dict[str, Any] = {
            "model": self.model,
            "messages": self._convert_messages(messages),
            "temperature": temperature if temperature is not None else self.temperature,
        }

        if tools:
            params["tools"] = tools
            params["tool_choice"] = tool_choice or "auto"

        if max_tokens:
            params["max_tokens"] = max_tokens

        try:
            response = await self.client.chat.completions.create(**params)
        except APIError as e:
            logger.warning("Completion request to %s failed: %s", self.model, e)
            raise ModelInvocationError(f"Completion request failed: {e}") from e

        if not response.choices:
            raise ModelInvocationError("Completion response contained no choices")

        choice = response.choices[0]
        message = choice.message

        tool_calls, malformed = self._parse_tool_calls(message.tool_calls)

        return CompletionResponse(
            content=message.content or "",
            tool_calls=tool_calls if tool_calls else None,
            finish_reason=choice.finish_reason or "stop",
            malformed=malformed,
        )

    async def stream_complete(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
        temperature: float | None = None,
    ) -> AsyncIterator[CompletionChunk]:
        """Stream a completion.

        Tool calls are not assembled here; their fragments are passed through
        so the caller can accumulate them.

        Args:
            messages: Conversation history.
            tools: Available tools in OpenAI function format.
            temperature: Sampling temperature override.

        Yields:
            CompletionChunk objects with text deltas and tool call fragments.
        """
        params: dict[str, Any] = {
            "model": self.model,
            "messages": self._convert_messages(messages),
            "temperature": temperature if temperature is not None else self.temperature,
            "stream": True,
        }

        if tools:
            params["tools"] = tools
            params["tool_choice"] = "auto"

        try:
            stream = await self.client.chat.completions.create(**params)
            async for chunk in stream:
                if not chunk.choices:
                    continue
                choice = chunk.choices[0]
                delta = choice.delta
                content = (delta.content or "") if delta else ""
                tool_call_chunks = self._convert_chunks(delta.tool_calls) if delta else []
                if content or tool_call_chunks or choice.finish_reason:
                    yield CompletionChunk(
                        content=content,
                        tool_call_chunks=tool_call_chunks,
                        finish_reason=choice.finish_reason,
                    )
        except APIError as e:
            logger.warning("Streaming request to %s failed: %s", self.model, e)
            raise ModelInvocationError(f"Streaming request failed: {e}") from e
