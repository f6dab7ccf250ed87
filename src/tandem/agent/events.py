"""Progress events emitted by the ReAct engine and the planner.

Observers receive one event at a time and are awaited before the run
continues, so they see events in the exact order they happened.
"""

from __future__ import annotations

import inspect
import time
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tandem.planner.plan import Plan


@dataclass
class AgentEvent:
    """Base class for all events."""

    type: str = field(init=False, default="event")
    timestamp: float = field(init=False, default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ThoughtEvent(AgentEvent):
    """Model reasoning text.

    In streaming mode a turn produces one event per text delta followed by a
    closing event with an empty chunk and ``is_complete=True``. All events of
    one turn share ``thought_id``.
    """

    thought_id: str
    chunk: str
    is_complete: bool = False

    def __post_init__(self) -> None:
        self.type = "thought"


@dataclass
class ToolCallEvent(AgentEvent):
    tool_call_id: str
    tool_name: str
    args: Any

    def __post_init__(self) -> None:
        self.type = "tool_call"


@dataclass
class ToolCallResultEvent(AgentEvent):
    tool_call_id: str
    tool_name: str
    result: str
    success: bool
    duration: float  # seconds

    def __post_init__(self) -> None:
        self.type = "tool_call_result"


@dataclass
class ErrorEvent(AgentEvent):
    message: str

    def __post_init__(self) -> None:
        self.type = "error"


@dataclass
class FinalResultEvent(AgentEvent):
    content: str
    total_duration: float  # seconds
    iteration_count: int

    def __post_init__(self) -> None:
        self.type = "final_result"


@dataclass
class PlanUpdateEvent(AgentEvent):
    plan: Plan

    def __post_init__(self) -> None:
        self.type = "plan_update"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "timestamp": self.timestamp, "plan": self.plan.to_dict()}


# Observers may be sync or async; async ones are awaited.
Observer = Callable[[AgentEvent], Awaitable[None] | None]


async def emit(observer: Observer | None, event: AgentEvent) -> None:
    """Deliver ``event`` to ``observer`` if there is one."""
    if observer is None:
        return
    result = observer(event)
    if inspect.isawaitable(result):
        await result
