"""LLM client abstraction and the OpenAI-compatible implementation."""

from .client import (
    CompletionChunk,
    CompletionResponse,
    LLMClient,
    Message,
    ToolCall,
    ToolCallChunk,
    forced_tool_choice,
)
from .factory import create_llm_client
from .openai_compat import OpenAICompatibleClient

__all__ = [
    "CompletionChunk",
    "CompletionResponse",
    "LLMClient",
    "Message",
    "OpenAICompatibleClient",
    "ToolCall",
    "ToolCallChunk",
    "create_llm_client",
    "forced_tool_choice",
]
