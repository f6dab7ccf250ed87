"""Goal planning on top of the ReAct engine.

Usage::

    from tandem.planner import Planner

    planner = Planner(llm=planner_llm, executor_llm=executor_llm)
    result = await planner.run("Compare the weather in Paris and Rome", tools=[weather])
    if result.success:
        print(result.response)
"""

from tandem.planner.orchestrator import Planner, PlannerResult
from tandem.planner.plan import (
    Plan,
    PlanDraft,
    PlanHistoryEntry,
    PlanRefinement,
    PlanStep,
    StepDraft,
    StepRevision,
    StepStatus,
)

__all__ = [
    "Plan",
    "PlanDraft",
    "PlanHistoryEntry",
    "PlanRefinement",
    "PlanStep",
    "Planner",
    "PlannerResult",
    "StepDraft",
    "StepRevision",
    "StepStatus",
]
