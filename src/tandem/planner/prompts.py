"""Prompts used by the planner."""

from tandem.planner.plan import Plan
from tandem.tools.base import Tool

PLANNER_SYSTEM_PROMPT = """You are a strategic planning AI. Your job is to break complex goals into executable steps.

For every goal, create a plan containing:
1. Clear, concrete steps that can be executed on their own
2. The right tools assigned to each step
3. Logical ordering and dependencies where needed

Return an object with:
- goal: the overall goal
- steps: an array of steps, each with id, description, requiredTools (optional) and dependencies (optional)
- reasoning: why you chose this plan

Keep steps focused and achievable. Each step must be doable by an AI agent holding the listed tools."""

REFINE_SYSTEM_PROMPT = """You are a strategic planning AI. Based on the results of the completed steps, decide whether the remaining plan needs to change.

Consider:
1. Did the steps produce the expected results?
2. Are the remaining steps still relevant?
3. Should steps be added, changed or skipped?

Return an object with:
- shouldReplan: whether changes are needed
- reasoning: an explanation of the decision
- updatedSteps: (when replanning) the full updated list of remaining steps"""

SUMMARY_SYSTEM_PROMPT = (
    "You are a helpful assistant. Summarize the results of a completed plan "
    "into a clear and thorough reply to the user."
)

GENERATE_PLAN_TOOL = "generate_plan"
REFINE_PLAN_TOOL = "refine_plan"


def plan_request(goal: str, tools: list[Tool]) -> str:
    listing = "\n".join(f"- {t.name}: {t.description}" for t in tools) or "(none)"
    return (
        f"Goal: {goal}\n\nAvailable tools:\n{listing}\n\n"
        f"Create a step-by-step plan to achieve this goal. "
        f"You must call the {GENERATE_PLAN_TOOL} tool to return your plan."
    )


def refine_request(plan: Plan, latest_result: str, tools: list[Tool]) -> str:
    completed = "\n".join(
        f"- {s.id}: {s.description}\n  Result: {s.result}" for s in plan.completed_steps()
    )
    remaining = "\n".join(f"- {s.id}: {s.description}" for s in plan.pending_steps())
    return (
        f"Goal: {plan.goal}\n\n"
        f"Completed steps:\n{completed or '(none)'}\n\n"
        f"Latest result: {latest_result}\n\n"
        f"Remaining steps:\n{remaining or '(none)'}\n\n"
        f"Available tools: {', '.join(t.name for t in tools) or '(none)'}\n\n"
        "Given the latest result, does the remaining plan need to change? "
        f"Answer by calling the {REFINE_PLAN_TOOL} tool."
    )


def render_step_results(plan: Plan) -> str:
    return "\n\n".join(
        f"Step {s.id}: {s.description}\nResult: {s.result}" for s in plan.completed_steps()
    )


def summary_request(plan: Plan) -> str:
    return (
        f"Original goal: {plan.goal}\n\n"
        f"Completed steps:\n{render_step_results(plan) or '(none)'}\n\n"
        "Give a final summary that answers the user's original goal."
    )
