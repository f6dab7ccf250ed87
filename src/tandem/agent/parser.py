"""Parser for ReAct steps written as JSON text.

Some models ignore native function calling and answer with a JSON object
instead::

    {"thought": "...", "action": {"name": "search", "arguments": {...}}}
    {"thought": "...", "final_answer": "..."}

``ReActParser`` validates that shape with pydantic. When an object carries
both an ``action`` and a ``final_answer``, the action wins and the loop
continues.
"""

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field, ValidationError


class Action(BaseModel):
    """A tool invocation expressed in a ReAct JSON object."""

    name: str = Field(description="Name of the tool to use")
    arguments: dict[str, Any] = Field(
        default_factory=dict, description="Arguments passed to the tool"
    )


class ReActOutput(BaseModel):
    """One ReAct step: a thought plus either an action or a final answer."""

    thought: str = Field(description="Reasoning behind the current step")
    action: Action | None = Field(default=None, description="Tool to call, if any")
    final_answer: str | None = Field(default=None, description="Answer when no action is needed")

    def is_final_answer(self) -> bool:
        return self.final_answer is not None

    def is_action(self) -> bool:
        return self.action is not None


@dataclass
class ParseResult:
    success: bool
    data: ReActOutput | None = None
    error: str | None = None


def _strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def looks_like_json_object(text: str) -> bool:
    """Cheap check used before attempting a full parse."""
    return _strip_code_fence(text).startswith("{")


class ReActParser:
    """Parses and validates ReAct JSON output."""

    def parse(self, output: Any) -> ParseResult:
        """Parse raw model output.

        Args:
            output: A JSON string (optionally fenced in a markdown code block)
                or an already-decoded object

        Returns:
            ParseResult with the validated step or an error message
        """
        data = output
        if isinstance(output, str):
            try:
                data = json.loads(_strip_code_fence(output))
            except json.JSONDecodeError:
                return ParseResult(success=False, error="Output is not valid JSON")

        try:
            parsed = ReActOutput.model_validate(data)
        except ValidationError as e:
            messages = ", ".join(err["msg"] for err in e.errors())
            return ParseResult(success=False, error=f"Validation error: {messages}")

        if parsed.action is None and parsed.final_answer is None:
            return ParseResult(
                success=False,
                error='Output must contain "action" or "final_answer"',
            )

        if parsed.action is not None and parsed.final_answer is not None:
            parsed = ReActOutput(thought=parsed.thought, action=parsed.action)

        return ParseResult(success=True, data=parsed)

    def parse_with_fallback(self, output: Any) -> ParseResult:
        """Parse, salvaging what is usable when strict parsing fails.

        Text that is not a JSON object becomes a bare thought. Objects that
        fail validation are searched for a string ``final_answer`` or a
        named ``action``.
        """
        result = self.parse(output)
        if result.success:
            return result

        if isinstance(output, str):
            try:
                decoded = json.loads(_strip_code_fence(output))
            except json.JSONDecodeError:
                decoded = None
            if not isinstance(decoded, dict):
                return ParseResult(success=True, data=ReActOutput(thought=output))
            output = decoded

        if isinstance(output, dict):
            thought = output.get("thought")
            if not isinstance(thought, str):
                thought = "Unable to parse thought"

            final_answer = output.get("final_answer")
            if isinstance(final_answer, str):
                return ParseResult(
                    success=True,
                    data=ReActOutput(thought=thought, final_answer=final_answer),
                )

            action = output.get("action")
            if isinstance(action, dict) and isinstance(action.get("name"), str):
                arguments = action.get("arguments")
                return ParseResult(
                    success=True,
                    data=ReActOutput(
                        thought=thought,
                        action=Action(
                            name=action["name"],
                            arguments=arguments if isinstance(arguments, dict) else {},
                        ),
                    ),
                )

        return result
