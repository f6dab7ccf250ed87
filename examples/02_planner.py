"""
Planner Example
===============

Lets the planner split a goal into steps, executes each step with its own
ReAct loop and prints the plan every time it changes.

Prerequisites:
- An OpenAI-compatible endpoint and an API key in OPENAI_API_KEY
- tandem installed: pip install -e .

Usage:
    python examples/02_planner.py
"""

import asyncio
import os

from demo_tools import calculator, weather

from tandem.agent.events import AgentEvent
from tandem.llm import OpenAICompatibleClient
from tandem.planner import Plan, Planner


def print_plan(plan: Plan) -> None:
    print("\n📋 Plan")
    for step in plan.steps:
        deps = f" (after {', '.join(step.dependencies)})" if step.dependencies else ""
        print(f"   [{step.status}] {step.id}: {step.description}{deps}")


def print_event(event: AgentEvent) -> None:
    if event.type == "tool_call":
        print(f"   🔧 {event.tool_name}({event.args})")
    elif event.type == "tool_call_result":
        print(f"      → {event.result}")
    elif event.type == "error":
        print(f"   ⚠️  {event.message}")


async def main():
    """Plan and execute a two-part goal."""
    llm = OpenAICompatibleClient(
        model=os.environ.get("TANDEM_MODEL", "gpt-4o-mini"),
        base_url=os.environ.get("OPENAI_BASE_URL"),
        api_key=os.environ.get("OPENAI_API_KEY", "none"),
    )
    planner = Planner(llm=llm, max_iterations_per_step=5, streaming=False)

    result = await planner.run(
        "Find the weather in Beijing and Oslo, then compute the temperature difference.",
        [weather, calculator],
        observer=print_event,
        on_plan_update=print_plan,
    )

    if result.success:
        print(f"\n✓ Summary:\n{result.response}")
    else:
        print(f"\n✗ {result.response}")


def sync_main():
    """Synchronous wrapper for the async main function."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user")


if __name__ == "__main__":
    sync_main()
