"""Reassembly of streamed tool calls.

Streaming models deliver a tool call as a series of fragments that share an
``index``: the id and name usually arrive once, and the JSON arguments arrive
as arbitrary slices of text. ``ToolCallAccumulator`` merges those fragments
and only parses the arguments once the stream for the turn has ended.
"""

import json
from collections.abc import Iterable
from dataclasses import dataclass, field

from tandem.errors import MalformedToolCallError
from tandem.llm.client import ToolCall, ToolCallChunk


@dataclass
class _PartialToolCall:
    index: int
    id: str | None = None
    name: str | None = None
    fragments: list[str] = field(default_factory=list)

    @property
    def raw_arguments(self) -> str:
        return "".join(self.fragments)


class ToolCallAccumulator:
    """Merges ``ToolCallChunk`` fragments into complete ``ToolCall`` objects."""

    def __init__(self, id_prefix: str = "call"):
        """Initialize the accumulator.

        Args:
            id_prefix: Prefix for ids synthesized for calls that never
                received one; the call index is appended.
        """
        self.id_prefix = id_prefix
        self._partials: dict[int, _PartialToolCall] = {}

    def __len__(self) -> int:
        return len(self._partials)

    def add(self, chunk: ToolCallChunk) -> None:
        """Fold one fragment into the call at ``chunk.index``."""
        partial = self._partials.get(chunk.index)
        if partial is None:
            partial = _PartialToolCall(index=chunk.index)
            self._partials[chunk.index] = partial

        if chunk.id and partial.id is None:
            partial.id = chunk.id
        if chunk.name and partial.name is None:
            partial.name = chunk.name
        if chunk.arguments:
            partial.fragments.append(chunk.arguments)

    def extend(self, chunks: Iterable[ToolCallChunk]) -> None:
        for chunk in chunks:
            self.add(chunk)

    def finish(self) -> tuple[list[ToolCall], list[MalformedToolCallError]]:
        """Parse every accumulated call.

        Returns:
            Tuple of (calls, errors). Calls are in ascending index order.
            A call whose arguments are not valid JSON, or which never got a
            name, is left out of ``calls`` and reported in ``errors``.
        """
        calls: list[ToolCall] = []
        errors: list[MalformedToolCallError] = []

        for index in sorted(self._partials):
            partial = self._partials[index]
            raw = partial.raw_arguments

            if not partial.name:
                errors.append(
                    MalformedToolCallError(index, None, raw, "tool name was never received")
                )
                continue

            if raw.strip():
                try:
                    arguments = json.loads(raw)
                except json.JSONDecodeError as e:
                    errors.append(MalformedToolCallError(index, partial.name, raw, str(e)))
                    continue
            else:
                arguments = {}

            calls.append(
                ToolCall(
                    id=partial.id or f"{self.id_prefix}_{index}",
                    name=partial.name,
                    arguments=arguments,
                )
            )

        return calls, errors
