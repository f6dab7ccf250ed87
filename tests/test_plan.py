"""Tests for the plan model and the step state machine."""

import random

import pytest
from pydantic import ValidationError

from tandem.errors import InvalidStepTransition
from tandem.planner.plan import (
    Plan,
    PlanDraft,
    PlanHistoryEntry,
    PlanRefinement,
    PlanStep,
    StepRevision,
    StepStatus,
)


def _plan(*steps: PlanStep) -> Plan:
    return Plan(goal="goal", steps=list(steps), reasoning="because")


def _done(step_id: str, result: str = "ok") -> PlanStep:
    return PlanStep(id=step_id, description=f"step {step_id}", status=StepStatus.DONE, result=result)


# -- State machine -----------------------------------------------------------


def test_step_happy_path():
    step = PlanStep(id="1", description="fetch")
    step.start()
    assert step.status == StepStatus.IN_PROGRESS
    step.complete("found it")
    assert step.status == StepStatus.DONE
    assert step.result == "found it"
    assert step.is_terminal


def test_step_fail_records_reason():
    step = PlanStep(id="1", description="fetch")
    step.start()
    step.fail("timeout")
    assert step.status == StepStatus.FAILED
    assert step.result == "timeout"


def test_pending_step_can_be_skipped():
    step = PlanStep(id="1", description="fetch")
    step.skip()
    assert step.status == StepStatus.SKIPPED
    assert step.is_terminal


@pytest.mark.parametrize(
    "status,action",
    [
        (StepStatus.PENDING, "complete"),
        (StepStatus.DONE, "start"),
        (StepStatus.FAILED, "start"),
        (StepStatus.SKIPPED, "start"),
        (StepStatus.IN_PROGRESS, "skip"),
        (StepStatus.IN_PROGRESS, "start"),
        (StepStatus.DONE, "fail"),
    ],
)
def test_illegal_transitions_raise(status, action):
    step = PlanStep(id="s", description="d", status=status)
    with pytest.raises(InvalidStepTransition) as exc:
        method = getattr(step, action)
        if action in ("complete", "fail"):
            method("x")
        else:
            method()
    assert exc.value.step_id == "s"
    assert step.status == status


# -- Dependency resolution ---------------------------------------------------


def test_next_step_follows_plan_order_and_dependencies():
    plan = _plan(
        PlanStep(id="a", description="A"),
        PlanStep(id="b", description="B", dependencies=["a"]),
        PlanStep(id="c", description="C"),
    )

    assert plan.next_step().id == "a"
    plan.start_step(plan.get_step("a"))
    # a is in progress, so b is blocked and c is next
    assert plan.next_step().id == "c"
    plan.record_result(plan.get_step("a"), "A done")
    assert plan.next_step().id == "b"


def test_unknown_dependency_is_never_met():
    plan = _plan(PlanStep(id="a", description="A", dependencies=["ghost"]))

    assert plan.next_step() is None
    assert [s.id for s in plan.blocked_steps()] == ["a"]


def test_start_step_refuses_unmet_dependencies():
    plan = _plan(
        PlanStep(id="a", description="A"),
        PlanStep(id="b", description="B", dependencies=["a"]),
    )

    with pytest.raises(InvalidStepTransition, match="unmet dependencies"):
        plan.start_step(plan.get_step("b"))
    assert plan.get_step("b").status == StepStatus.PENDING


def test_failed_dependency_blocks_dependents():
    plan = _plan(
        PlanStep(id="a", description="A", status=StepStatus.FAILED),
        PlanStep(id="b", description="B", dependencies=["a"]),
    )

    assert plan.next_step() is None
    assert not plan.is_complete()


def test_is_complete_accepts_done_and_skipped():
    plan = _plan(_done("a"), PlanStep(id="b", description="B", status=StepStatus.SKIPPED))
    assert plan.is_complete()
    assert _plan().is_complete()


@pytest.mark.parametrize("seed", range(20))
def test_random_dag_executes_in_dependency_order(seed):
    """Driving next_step to exhaustion on a random DAG respects every edge."""
    rng = random.Random(seed)
    size = rng.randint(1, 12)
    ids = [f"s{i}" for i in range(size)]
    steps = []
    for i, step_id in enumerate(ids):
        earlier = ids[:i]
        deps = rng.sample(earlier, k=rng.randint(0, min(3, len(earlier))))
        steps.append(PlanStep(id=step_id, description=step_id, dependencies=deps or None))
    rng.shuffle(steps)
    plan = _plan(*steps)

    order: list[str] = []
    while (step := plan.next_step()) is not None:
        for dep in step.dependencies or []:
            assert dep in order
        plan.start_step(step)
        plan.record_result(step, f"result of {step.id}")
        order.append(step.id)

    assert sorted(order) == sorted(ids)
    assert plan.is_complete()
    assert [h.step_id for h in plan.history] == order


# -- History and replanning --------------------------------------------------


def test_render_history():
    plan = _plan(PlanStep(id="1", description="Get weather"), PlanStep(id="2", description="Add"))
    assert plan.render_history() == ""

    step = plan.get_step("1")
    plan.start_step(step)
    plan.record_result(step, "Sunny")

    assert plan.render_history() == "Results of previous steps:\nStep 1 (Get weather): Sunny"


def test_replace_remaining_keeps_done_steps():
    plan = _plan(
        _done("A"),
        PlanStep(id="B", description="B"),
        PlanStep(id="C", description="C", dependencies=["B"]),
    )

    dropped = plan.replace_remaining([StepRevision(id="B2", description="B prime")])

    assert dropped == []
    assert [s.id for s in plan.steps] == ["A", "B2"]
    assert plan.steps[0].status == StepStatus.DONE
    assert plan.steps[0].result == "ok"
    assert plan.steps[1].status == StepStatus.PENDING


def test_replace_remaining_drops_revisions_reusing_done_ids():
    plan = _plan(_done("A"), PlanStep(id="B", description="B"))

    dropped = plan.replace_remaining(
        [
            StepRevision(id="A", description="redo A"),
            StepRevision(id="B", description="new B"),
            StepRevision(id="C", description="C", status="skipped"),
        ]
    )

    assert dropped == ["A"]
    assert [s.id for s in plan.steps] == ["A", "B", "C"]
    assert plan.get_step("A").description == "step A"
    assert plan.get_step("B").description == "new B"
    assert plan.get_step("C").status == StepStatus.SKIPPED


def test_snapshot_is_independent():
    plan = _plan(PlanStep(id="1", description="one"))
    snap = plan.snapshot()

    plan.start_step(plan.get_step("1"))

    assert snap.get_step("1").status == StepStatus.PENDING


def test_to_dict():
    plan = _plan(_done("1", "r1"), PlanStep(id="2", description="two", dependencies=["1"]))
    plan.history.append(PlanHistoryEntry(step_id="1", result="r1", timestamp=1.0))

    data = plan.to_dict()

    assert data["goal"] == "goal"
    assert data["reasoning"] == "because"
    assert data["steps"][0] == {"id": "1", "description": "step 1", "status": "done", "result": "r1"}
    assert data["steps"][1]["dependencies"] == ["1"]
    assert data["history"] == [{"stepId": "1", "result": "r1", "timestamp": 1.0}]


# -- Structured planner output -----------------------------------------------


def test_plan_draft_accepts_camel_case_and_builds_plan():
    draft = PlanDraft.model_validate(
        {
            "goal": "weather and math",
            "steps": [
                {"id": "1", "description": "get weather", "requiredTools": ["weather"]},
                {"id": "2", "description": "compute", "dependencies": ["1"]},
            ],
            "reasoning": "two parts",
        }
    )

    plan = draft.to_plan()

    assert plan.goal == "weather and math"
    assert plan.steps[0].required_tools == ["weather"]
    assert plan.steps[1].dependencies == ["1"]
    assert all(s.status == StepStatus.PENDING for s in plan.steps)
    assert plan.history == []


def test_plan_draft_rejects_duplicate_ids():
    with pytest.raises(ValidationError, match="duplicate step ids"):
        PlanDraft.model_validate(
            {
                "goal": "g",
                "steps": [{"id": "1", "description": "a"}, {"id": "1", "description": "b"}],
                "reasoning": "r",
            }
        )


def test_plan_draft_requires_reasoning():
    with pytest.raises(ValidationError):
        PlanDraft.model_validate({"goal": "g", "steps": []})


def test_plan_refinement_aliases():
    refinement = PlanRefinement.model_validate(
        {
            "shouldReplan": True,
            "reasoning": "weather changed",
            "updatedSteps": [{"id": "3", "description": "new", "status": "skipped"}],
        }
    )

    assert refinement.should_replan is True
    assert refinement.updated_steps[0].status == "skipped"


def test_refinement_schema_uses_aliases():
    schema = PlanRefinement.model_json_schema(by_alias=True)
    assert "shouldReplan" in schema["properties"]
    assert "updatedSteps" in schema["properties"]
