"""Tests for progress events."""

import pytest

from tandem.agent.events import (
    ErrorEvent,
    FinalResultEvent,
    PlanUpdateEvent,
    ThoughtEvent,
    ToolCallEvent,
    ToolCallResultEvent,
    emit,
)
from tandem.planner.plan import Plan, PlanStep


def test_event_types():
    assert ThoughtEvent(thought_id="t", chunk="c").type == "thought"
    assert ToolCallEvent(tool_call_id="1", tool_name="x", args={}).type == "tool_call"
    assert (
        ToolCallResultEvent(
            tool_call_id="1", tool_name="x", result="r", success=True, duration=0.1
        ).type
        == "tool_call_result"
    )
    assert ErrorEvent(message="m").type == "error"
    assert FinalResultEvent(content="c", total_duration=1.0, iteration_count=1).type == (
        "final_result"
    )


def test_to_dict_includes_type_and_timestamp():
    data = ThoughtEvent(thought_id="t1", chunk="hello", is_complete=True).to_dict()

    assert data["type"] == "thought"
    assert data["thought_id"] == "t1"
    assert data["is_complete"] is True
    assert isinstance(data["timestamp"], float)


def test_plan_update_to_dict_uses_plan_format():
    plan = Plan(goal="g", steps=[PlanStep(id="1", description="d", required_tools=["x"])])

    data = PlanUpdateEvent(plan=plan).to_dict()

    assert data["type"] == "plan_update"
    assert data["plan"]["steps"][0]["requiredTools"] == ["x"]
    assert data["plan"]["steps"][0]["status"] == "pending"


@pytest.mark.asyncio
async def test_emit_handles_sync_async_and_missing_observers():
    seen = []

    def sync_observer(event):
        seen.append(("sync", event.type))

    async def async_observer(event):
        seen.append(("async", event.type))

    event = ErrorEvent(message="boom")
    await emit(sync_observer, event)
    await emit(async_observer, event)
    await emit(None, event)

    assert seen == [("sync", "error"), ("async", "error")]
