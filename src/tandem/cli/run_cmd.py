"""Implementation of the ``ask`` and ``plan`` commands."""

from __future__ import annotations

import asyncio
import importlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel

from tandem.agent.events import (
    AgentEvent,
    ErrorEvent,
    FinalResultEvent,
    PlanUpdateEvent,
    ThoughtEvent,
    ToolCallEvent,
    ToolCallResultEvent,
)
from tandem.agent.loop import ReActEngine
from tandem.config.loader import ConfigError, load_config, setup_logging
from tandem.llm.factory import create_llm_client
from tandem.planner.orchestrator import Planner
from tandem.tools.registry import collect_tools

if TYPE_CHECKING:
    from tandem.config.schema import TandemConfig
    from tandem.tools.base import Tool

console = Console()
logger = logging.getLogger(__name__)

_STATUS_STYLES = {
    "pending": "dim",
    "in_progress": "yellow",
    "done": "green",
    "failed": "red",
    "skipped": "dim strike",
}


class EventRenderer:
    """Prints agent events to the console as they arrive."""

    def __init__(self, out: Console | None = None):
        self.out = out or console
        self._streaming_thought: str | None = None

    def __call__(self, event: AgentEvent) -> None:
        if isinstance(event, ThoughtEvent):
            self._thought(event)
            return

        self._end_thought()
        if isinstance(event, ToolCallEvent):
            self.out.print(f"[cyan]→ {escape(event.tool_name)}[/cyan] {escape(str(event.args))}")
        elif isinstance(event, ToolCallResultEvent):
            style = "green" if event.success else "red"
            self.out.print(
                f"[{style}]← {escape(event.tool_name)}[/{style}] "
                f"[dim]({event.duration:.2f}s)[/dim] {escape(event.result)}"
            )
        elif isinstance(event, ErrorEvent):
            self.out.print(f"[red]! {escape(event.message)}[/red]")
        elif isinstance(event, PlanUpdateEvent):
            lines = [
                f"[{_STATUS_STYLES[str(s.status)]}]{escape(s.id)}: {escape(s.description)} "
                f"({s.status})[/]"
                for s in event.plan.steps
            ]
            body = "\n".join(lines) or "(no steps)"
            self.out.print(Panel(body, title="Plan", border_style="blue"))
        elif isinstance(event, FinalResultEvent):
            self.out.print(
                f"[dim]finished in {event.iteration_count} iterations, "
                f"{event.total_duration:.2f}s[/dim]"
            )

    def _thought(self, event: ThoughtEvent) -> None:
        if event.is_complete:
            if event.chunk:
                self.out.print(f"[italic]{escape(event.chunk)}[/italic]")
            else:
                self._end_thought()
            return
        self._streaming_thought = event.thought_id
        self.out.print(event.chunk, end="", style="italic", markup=False, highlight=False)

    def _end_thought(self) -> None:
        if self._streaming_thought is not None:
            self.out.print()
            self._streaming_thought = None


def _load_tools(tools_module: str | None) -> list[Tool]:
    if not tools_module:
        return []
    module = importlib.import_module(tools_module)
    tools = collect_tools(module)
    logger.info("Loaded %d tools from %s", len(tools), tools_module)
    return tools


def _prepare(config_path: str | None, tools_module: str | None) -> tuple[TandemConfig, list[Tool]]:
    try:
        config = load_config(Path(config_path) if config_path else None)
    except ConfigError as e:
        console.print(f"[red]Failed to load config: {e}[/red]")
        raise typer.Exit(1) from e

    setup_logging(config.logging)

    try:
        tools = _load_tools(tools_module)
    except ImportError as e:
        console.print(f"[red]Failed to import tools module: {e}[/red]")
        raise typer.Exit(1) from e

    return config, tools


def ask_command(
    task: str,
    config_path: str | None = None,
    tools_module: str | None = None,
    stream: bool | None = None,
) -> None:
    """Run one ReAct loop and print the answer."""
    config, tools = _prepare(config_path, tools_module)

    engine = ReActEngine(
        llm=create_llm_client(config),
        max_iterations=config.agent.max_iterations,
        streaming=config.agent.streaming if stream is None else stream,
        system_prompt=config.agent.system_prompt,
        parse_text_actions=config.agent.parse_text_actions,
    )
    answer = asyncio.run(engine.run(task, tools=tools, observer=EventRenderer()))

    console.print("\n[bold green]answer[/bold green]")
    console.print(Markdown(answer))


def plan_command(
    goal: str,
    config_path: str | None = None,
    tools_module: str | None = None,
) -> None:
    """Run the planner and print the summary."""
    config, tools = _prepare(config_path, tools_module)

    planner_llm = create_llm_client(config, model=config.planner.planner_model)
    executor_llm = create_llm_client(config, model=config.planner.executor_model)
    planner = Planner(
        llm=planner_llm,
        executor_llm=executor_llm,
        max_iterations_per_step=config.planner.max_iterations_per_step,
        max_replan_attempts=config.planner.max_replan_attempts,
        streaming=config.planner.streaming,
        executor_options={
            "system_prompt": config.agent.system_prompt,
            "parse_text_actions": config.agent.parse_text_actions,
        },
    )
    result = asyncio.run(planner.run(goal, tools, observer=EventRenderer()))

    if not result.success:
        console.print(f"[red]{result.response}[/red]")
        raise typer.Exit(1)

    console.print("\n[bold green]summary[/bold green]")
    console.print(Markdown(result.response))
