"""Pydantic models for tandem.yaml configuration."""

from typing import Literal

from pydantic import BaseModel, Field

from tandem.agent.prompts import DEFAULT_REACT_PROMPT


class ModelConfig(BaseModel):
    """LLM model configuration."""

    name: str = Field(default="gpt-4o-mini", description="Default model name")
    temperature: float = Field(default=0.0, description="Sampling temperature", ge=0.0, le=2.0)


class ProviderConfig(BaseModel):
    """Model provider configuration."""

    provider: Literal["openai", "tongyi", "openai-compatible"] = Field(
        default="openai",
        description="Provider of the OpenAI-compatible endpoint",
    )
    base_url: str | None = Field(
        default=None,
        description="Endpoint URL including /v1 (required for 'openai-compatible')",
    )
    api_key_env: str = Field(
        default="OPENAI_API_KEY",
        description="Environment variable name containing the API key",
    )
    timeout: int = Field(default=120, description="Request timeout in seconds", ge=1)


class AgentConfig(BaseModel):
    """ReAct engine configuration."""

    max_iterations: int = Field(
        default=10, description="Maximum model turns per run", ge=1, le=100
    )
    streaming: bool = Field(default=False, description="Stream model output chunk by chunk")
    system_prompt: str = Field(
        default=DEFAULT_REACT_PROMPT,
        description="System prompt for the agent",
    )
    parse_text_actions: bool = Field(
        default=True,
        description="Interpret ReAct JSON objects written as plain text",
    )


class PlannerConfig(BaseModel):
    """Planner configuration."""

    planner_model: str | None = Field(
        default=None, description="Model used for planning (None = model.name)"
    )
    executor_model: str | None = Field(
        default=None, description="Model used to execute steps (None = model.name)"
    )
    max_iterations_per_step: int = Field(
        default=10, description="Iteration cap of each step's ReAct loop", ge=1, le=100
    )
    max_replan_attempts: int = Field(
        default=3, description="How many times the remaining steps may be rewritten", ge=0
    )
    streaming: bool = Field(default=True, description="Stream step execution output")


class LoggingConfig(BaseModel):
    """Logging configuration for the command-line harness."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING", description="Root log level"
    )


class TandemConfig(BaseModel):
    """Root configuration schema for tandem."""

    model: ModelConfig = Field(default_factory=ModelConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    planner: PlannerConfig = Field(default_factory=PlannerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
