"""Main CLI application using Typer."""

import sys

import typer
from rich.console import Console

from tandem import __version__

app = typer.Typer(
    name="tandem",
    help="Tandem - ReAct agent loop with a replanning planner",
    no_args_is_help=True,
)

console = Console()


@app.command()
def version():
    """Show tandem version."""
    console.print(f"tandem version {__version__}")


@app.command()
def ask(
    task: str = typer.Argument(..., help="Task for the agent"),
    config_path: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: ~/.tandem/tandem.yaml)",
    ),
    tools_module: str = typer.Option(
        None, "--tools", "-t", help="Python module whose Tool objects are offered to the agent"
    ),
    stream: bool = typer.Option(None, "--stream/--no-stream", help="Override agent.streaming"),
):
    """Run a single ReAct loop on TASK."""
    from tandem.cli.run_cmd import ask_command

    ask_command(task, config_path=config_path, tools_module=tools_module, stream=stream)


@app.command()
def plan(
    goal: str = typer.Argument(..., help="Goal to plan and execute"),
    config_path: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: ~/.tandem/tandem.yaml)",
    ),
    tools_module: str = typer.Option(
        None, "--tools", "-t", help="Python module whose Tool objects are offered to the planner"
    ),
):
    """Plan GOAL, execute every step and summarize the results."""
    from tandem.cli.run_cmd import plan_command

    plan_command(goal, config_path=config_path, tools_module=tools_module)


def main():
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
