"""Pytest configuration and shared fixtures."""

import pytest

from tandem.agent.events import AgentEvent
from tandem.config.schema import TandemConfig
from tandem.tools.registry import tool


class EventRecorder:
    """Observer that keeps every event it receives."""

    def __init__(self):
        self.events: list[AgentEvent] = []

    def __call__(self, event: AgentEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [e.type for e in self.events]

    def of_type(self, event_type: str) -> list[AgentEvent]:
        return [e for e in self.events if e.type == event_type]


@pytest.fixture
def recorder() -> EventRecorder:
    """Provide a fresh event recorder."""
    return EventRecorder()


@pytest.fixture
def default_config() -> TandemConfig:
    """Provide a default configuration for tests."""
    return TandemConfig()


@pytest.fixture
def custom_config() -> TandemConfig:
    """Provide a custom configuration for tests."""
    config = TandemConfig()
    config.model.name = "qwen-plus"
    config.provider.provider = "tongyi"
    config.agent.max_iterations = 5
    return config


@pytest.fixture
def weather_tool():
    @tool(description="Get the current weather for a city")
    async def weather(city: str) -> str:
        """Look up the weather.

        Args:
            city: City name
        """
        return f"Sunny, 25C in {city}"

    return weather


@pytest.fixture
def calculator_tool():
    @tool(description="Evaluate a simple arithmetic expression")
    def calculator(expression: str) -> str:
        """Evaluate arithmetic.

        Args:
            expression: Expression such as 2 + 2
        """
        allowed = set("0123456789+-*/(). ")
        if not set(expression) <= allowed:
            raise ValueError(f"unsupported expression: {expression}")
        return str(eval(expression))  # noqa: S307

    return calculator
