"""Exception hierarchy for tandem.

None of these escape ``ReActEngine.run`` or ``Planner.run``. They are raised
inside the loops and turned into observations, ``error`` events or a failed
``PlannerResult``.
"""

from typing import Any


class TandemError(Exception):
    """Base class for all tandem errors."""


class ToolNotFoundError(TandemError):
    """The model asked for a tool that is not in the current tool set."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        listing = ", ".join(available) if available else "(none)"
        super().__init__(f"Tool '{name}' not found. Available tools: {listing}")


class ToolExecutionError(TandemError):
    """Raised by tool implementations to report a tool-specific failure."""


class ModelInvocationError(TandemError):
    """The model client failed to produce a response."""


class MalformedToolCallError(TandemError):
    """A streamed tool call could not be turned into a usable call."""

    def __init__(
        self,
        index: int,
        name: str | None,
        raw_arguments: str,
        reason: str,
    ):
        self.index = index
        self.name = name
        self.raw_arguments = raw_arguments
        self.reason = reason
        label = name or f"#{index}"
        super().__init__(f"Malformed arguments for tool call {label}: {reason}")


class PlanGenerationError(TandemError):
    """The planner model did not return a usable plan."""


class InvalidStepTransition(TandemError):
    """A plan step was moved along an edge the state machine does not allow."""

    def __init__(self, step_id: str, current: Any, target: Any, reason: str = ""):
        self.step_id = step_id
        self.current = current
        self.target = target
        message = f"Step '{step_id}' cannot move from {current} to {target}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
