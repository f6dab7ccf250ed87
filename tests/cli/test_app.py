"""Tests for CLI app entry point."""

from unittest.mock import patch

from typer.testing import CliRunner

from tandem import __version__
from tandem.cli.app import app, main

runner = CliRunner()


def test_version_command():
    """Test 'version' prints tandem version string."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert f"tandem version {__version__}" in result.output


def test_no_args_shows_help():
    """Test invoking with no arguments shows help (no_args_is_help)."""
    result = runner.invoke(app, [])
    # Typer's no_args_is_help triggers a SystemExit(0) that surfaces
    # as exit_code 0 or 2
    assert result.exit_code in (0, 2)
    assert "Usage" in result.output


def test_ask_command():
    """Test 'ask' delegates to ask_command."""
    with patch("tandem.cli.run_cmd.ask_command") as mock_cmd:
        result = runner.invoke(app, ["ask", "What is 2+2?", "--tools", "my_tools", "--stream"])
        assert result.exit_code == 0
        mock_cmd.assert_called_once_with(
            "What is 2+2?", config_path=None, tools_module="my_tools", stream=True
        )


def test_ask_command_stream_defaults_to_config():
    with patch("tandem.cli.run_cmd.ask_command") as mock_cmd:
        runner.invoke(app, ["ask", "hello"])
        assert mock_cmd.call_args.kwargs["stream"] is None


def test_plan_command():
    """Test 'plan' delegates to plan_command."""
    with patch("tandem.cli.run_cmd.plan_command") as mock_cmd:
        result = runner.invoke(app, ["plan", "Plan a trip", "-c", "cfg.yaml"])
        assert result.exit_code == 0
        mock_cmd.assert_called_once_with("Plan a trip", config_path="cfg.yaml", tools_module=None)


def test_main_keyboard_interrupt():
    """Test main() handles KeyboardInterrupt with exit code 130."""
    with (
        patch("tandem.cli.app.app", side_effect=KeyboardInterrupt),
        patch("tandem.cli.app.sys") as mock_sys,
    ):
        main()
        mock_sys.exit.assert_called_with(130)


def test_main_exception():
    """Test main() handles unexpected exceptions with exit code 1."""
    with (
        patch("tandem.cli.app.app", side_effect=RuntimeError("test error")),
        patch("tandem.cli.app.sys") as mock_sys,
    ):
        main()
        mock_sys.exit.assert_called_with(1)
