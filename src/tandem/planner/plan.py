"""Plan data model and step state machine.

A plan is an ordered list of steps. Each step may depend on other steps by
id and may restrict which tools it is allowed to use. Steps move through::

    pending -> in_progress -> done | failed
    pending -> skipped

``done``, ``failed`` and ``skipped`` are terminal. Any other move raises
:class:`~tandem.errors.InvalidStepTransition`.

The pydantic models at the bottom describe the structured output the
planner model must return; they are converted into the runtime dataclasses.
"""

import copy
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tandem.errors import InvalidStepTransition


class StepStatus(StrEnum):
    """Lifecycle state of a plan step."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    FAILED = "failed"
    SKIPPED = "skipped"


TERMINAL_STATUSES = frozenset({StepStatus.DONE, StepStatus.FAILED, StepStatus.SKIPPED})


@dataclass
class PlanStep:
    """One unit of planned work, executed by its own ReAct engine."""

    id: str
    description: str
    status: StepStatus = StepStatus.PENDING
    required_tools: list[str] | None = None
    dependencies: list[str] | None = None
    result: str | None = None

    def _move(self, expected: StepStatus, target: StepStatus) -> None:
        if self.status != expected:
            raise InvalidStepTransition(self.id, self.status, target)
        self.status = target

    def start(self) -> None:
        self._move(StepStatus.PENDING, StepStatus.IN_PROGRESS)

    def complete(self, result: str) -> None:
        self._move(StepStatus.IN_PROGRESS, StepStatus.DONE)
        self.result = result

    def fail(self, reason: str) -> None:
        self._move(StepStatus.IN_PROGRESS, StepStatus.FAILED)
        self.result = reason

    def skip(self) -> None:
        self._move(StepStatus.PENDING, StepStatus.SKIPPED)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "description": self.description,
            "status": str(self.status),
        }
        if self.required_tools is not None:
            data["requiredTools"] = list(self.required_tools)
        if self.dependencies is not None:
            data["dependencies"] = list(self.dependencies)
        if self.result is not None:
            data["result"] = self.result
        return data


@dataclass
class PlanHistoryEntry:
    """Result of a finished step, kept in execution order."""

    step_id: str
    result: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class Plan:
    """An executable plan for one goal."""

    goal: str
    steps: list[PlanStep] = field(default_factory=list)
    reasoning: str = ""
    history: list[PlanHistoryEntry] = field(default_factory=list)

    def get_step(self, step_id: str) -> PlanStep | None:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def is_complete(self) -> bool:
        """Whether every step is done or skipped."""
        return all(s.status in (StepStatus.DONE, StepStatus.SKIPPED) for s in self.steps)

    def dependencies_met(self, step: PlanStep) -> bool:
        """Whether every dependency of ``step`` resolves to a done step.

        A dependency on an id that is not in the plan is never met.
        """
        for dep_id in step.dependencies or []:
            dep = self.get_step(dep_id)
            if dep is None or dep.status != StepStatus.DONE:
                return False
        return True

    def next_step(self) -> PlanStep | None:
        """First pending step, in plan order, whose dependencies are all done."""
        for step in self.steps:
            if step.status == StepStatus.PENDING and self.dependencies_met(step):
                return step
        return None

    def blocked_steps(self) -> list[PlanStep]:
        """Pending steps that cannot start because of unmet dependencies."""
        return [
            s for s in self.steps if s.status == StepStatus.PENDING and not self.dependencies_met(s)
        ]

    def start_step(self, step: PlanStep) -> None:
        """Move ``step`` to in_progress, refusing if a dependency is not done."""
        if not self.dependencies_met(step):
            unmet = [
                d
                for d in step.dependencies or []
                if (dep := self.get_step(d)) is None or dep.status != StepStatus.DONE
            ]
            raise InvalidStepTransition(
                step.id,
                step.status,
                StepStatus.IN_PROGRESS,
                f"unmet dependencies {unmet}",
            )
        step.start()

    def record_result(self, step: PlanStep, result: str) -> None:
        """Mark ``step`` done and append its result to the history."""
        step.complete(result)
        self.history.append(PlanHistoryEntry(step_id=step.id, result=result))

    def completed_steps(self) -> list[PlanStep]:
        return [s for s in self.steps if s.status == StepStatus.DONE]

    def pending_steps(self) -> list[PlanStep]:
        return [s for s in self.steps if s.status == StepStatus.PENDING]

    def replace_remaining(self, revisions: list["StepRevision"]) -> list[str]:
        """Keep the done steps and replace everything else with ``revisions``.

        Revisions reusing the id of a done step are dropped.

        Returns:
            Ids of dropped revisions
        """
        kept = self.completed_steps()
        taken = {s.id for s in kept}
        dropped: list[str] = []
        new_steps: list[PlanStep] = []
        for revision in revisions:
            if revision.id in taken:
                dropped.append(revision.id)
                continue
            taken.add(revision.id)
            new_steps.append(revision.to_step())
        self.steps = kept + new_steps
        return dropped

    def render_history(self) -> str:
        """Render recorded step results as context for the next step."""
        if not self.history:
            return ""
        entries = []
        for entry in self.history:
            step = self.get_step(entry.step_id)
            description = step.description if step else "unknown"
            entries.append(f"Step {entry.step_id} ({description}): {entry.result}")
        return "Results of previous steps:\n" + "\n\n".join(entries)

    def snapshot(self) -> "Plan":
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "goal": self.goal,
            "steps": [s.to_dict() for s in self.steps],
            "reasoning": self.reasoning,
            "history": [
                {"stepId": h.step_id, "result": h.result, "timestamp": h.timestamp}
                for h in self.history
            ],
        }


# ---------------------------------------------------------------------------
# Structured planner output
# ---------------------------------------------------------------------------


class StepDraft(BaseModel):
    """A step as proposed by the planner model."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Unique identifier of the step")
    description: str = Field(..., description="What this step should accomplish")
    required_tools: list[str] | None = Field(
        default=None, alias="requiredTools", description="Tools this step needs"
    )
    dependencies: list[str] | None = Field(
        default=None, description="Ids of steps that must finish before this one"
    )

    def to_step(self) -> PlanStep:
        return PlanStep(
            id=self.id,
            description=self.description,
            required_tools=self.required_tools,
            dependencies=self.dependencies,
        )


class PlanDraft(BaseModel):
    """The complete plan returned by the ``generate_plan`` call."""

    goal: str = Field(..., description="The overall goal to accomplish")
    steps: list[StepDraft] = Field(..., description="Ordered steps that achieve the goal")
    reasoning: str = Field(..., description="Why this plan was chosen")

    @model_validator(mode="after")
    def _unique_ids(self) -> "PlanDraft":
        ids = [s.id for s in self.steps]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"duplicate step ids: {duplicates}")
        return self

    def to_plan(self) -> Plan:
        return Plan(
            goal=self.goal,
            steps=[s.to_step() for s in self.steps],
            reasoning=self.reasoning,
        )


class StepRevision(StepDraft):
    """A replacement step proposed during replanning."""

    status: Literal["pending", "skipped"] | None = Field(
        default=None, description="Mark a step as skipped instead of pending"
    )

    def to_step(self) -> PlanStep:
        step = super().to_step()
        if self.status == "skipped":
            step.skip()
        return step


class PlanRefinement(BaseModel):
    """Answer of the ``refine_plan`` call."""

    model_config = ConfigDict(populate_by_name=True)

    should_replan: bool = Field(
        ..., alias="shouldReplan", description="Whether the remaining plan must change"
    )
    reasoning: str = Field(default="", description="Explanation of the decision")
    updated_steps: list[StepRevision] | None = Field(
        default=None,
        alias="updatedSteps",
        description="Full replacement list for the remaining steps",
    )
