"""
ReAct Agent Example
===================

Runs a single ReAct loop that has to call two tools before answering.
Events are printed as they arrive, so you can watch the model think,
call ``weather``, call ``calculator`` and finally answer.

Prerequisites:
- An OpenAI-compatible endpoint and an API key in OPENAI_API_KEY
- tandem installed: pip install -e .

Usage:
    python examples/01_react_agent.py
"""

import asyncio
import os

from demo_tools import calculator, weather

from tandem.agent import ReActEngine
from tandem.agent.events import AgentEvent
from tandem.llm import OpenAICompatibleClient


def print_event(event: AgentEvent) -> None:
    if event.type == "thought":
        print(event.chunk, end="\n" if event.is_complete else "", flush=True)
    elif event.type == "tool_call":
        print(f"\n🔧 {event.tool_name}({event.args})")
    elif event.type == "tool_call_result":
        mark = "✓" if event.success else "✗"
        print(f"   {mark} {event.result} ({event.duration:.2f}s)")
    elif event.type == "error":
        print(f"⚠️  {event.message}")
    elif event.type == "final_result":
        print(f"\n⏱  {event.iteration_count} iterations in {event.total_duration:.1f}s")


async def main():
    """Ask a question that needs both tools."""
    llm = OpenAICompatibleClient(
        model=os.environ.get("TANDEM_MODEL", "gpt-4o-mini"),
        base_url=os.environ.get("OPENAI_BASE_URL"),
        api_key=os.environ.get("OPENAI_API_KEY", "none"),
    )
    engine = ReActEngine(llm=llm, max_iterations=6, streaming=True)

    answer = await engine.run(
        "Get the weather in Paris, then compute 10% of the temperature.",
        tools=[weather, calculator],
        observer=print_event,
    )
    print(f"\n✓ Answer:\n{answer}")


def sync_main():
    """Synchronous wrapper for the async main function."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user")


if __name__ == "__main__":
    sync_main()
