"""ReAct agent loop for autonomous task execution.

This module implements the Reasoning + Acting (ReAct) pattern where the agent
alternates between reasoning about what to do and executing tool calls.
The loop continues until the model gives a final answer or the iteration
limit is reached; it never raises on model or tool failures.

Usage::

    from tandem.agent import ReActEngine
    from tandem.config.loader import load_config
    from tandem.llm.factory import create_llm_client

    config = load_config()
    engine = ReActEngine(llm=create_llm_client(config), streaming=True)
    answer = await engine.run("What is the weather in Paris?", tools=[weather])
"""

from tandem.agent.accumulator import ToolCallAccumulator
from tandem.agent.events import (
    AgentEvent,
    ErrorEvent,
    FinalResultEvent,
    Observer,
    PlanUpdateEvent,
    ThoughtEvent,
    ToolCallEvent,
    ToolCallResultEvent,
    emit,
)
from tandem.agent.loop import AgentState, ReActEngine
from tandem.agent.parser import ReActOutput, ReActParser
from tandem.agent.prompts import DEFAULT_REACT_PROMPT, FINAL_ANSWER_TOOL

__all__ = [
    "DEFAULT_REACT_PROMPT",
    "FINAL_ANSWER_TOOL",
    "AgentEvent",
    "AgentState",
    "ErrorEvent",
    "FinalResultEvent",
    "Observer",
    "PlanUpdateEvent",
    "ReActEngine",
    "ReActOutput",
    "ReActParser",
    "ThoughtEvent",
    "ToolCallAccumulator",
    "ToolCallEvent",
    "ToolCallResultEvent",
    "emit",
]
