"""ReAct agent loop implementation."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any

from tandem.agent.accumulator import ToolCallAccumulator
from tandem.agent.events import (
    AgentEvent,
    ErrorEvent,
    FinalResultEvent,
    Observer,
    ThoughtEvent,
    ToolCallEvent,
    ToolCallResultEvent,
    emit,
)
from tandem.agent.parser import ReActParser, looks_like_json_object
from tandem.agent.prompts import (
    DEFAULT_REACT_PROMPT,
    FINAL_ANSWER_TOOL,
    UserMessageTemplate,
    default_user_message,
    describe_tools,
    final_answer_suffix,
    malformed_call_message,
    model_error_message,
)
from tandem.errors import MalformedToolCallError, ToolNotFoundError
from tandem.llm.client import LLMClient, Message, ToolCall
from tandem.tools.base import Tool
from tandem.tools.registry import index_tools

logger = logging.getLogger(__name__)


class AgentState:
    """Maintains conversation state for one engine run."""

    def __init__(self, system_prompt: str):
        """Initialize agent state.

        Args:
            system_prompt: System message for the agent
        """
        self.messages: list[Message] = [Message(role="system", content=system_prompt)]

    def add_user_message(self, content: str) -> None:
        """Add a user message to the conversation.

        Args:
            content: User message content
        """
        self.messages.append(Message(role="user", content=content))

    def add_assistant_message(self, content: str, tool_calls: list[ToolCall] | None = None) -> None:
        """Add an assistant turn to the conversation.

        Args:
            content: Text the model produced this turn
            tool_calls: Calls the model requested this turn, if any
        """
        self.messages.append(
            Message(
                role="assistant",
                content=content,
                tool_calls=tool_calls or None,
            )
        )

    def add_tool_result(self, tool_call_id: str, tool_name: str, result: str) -> None:
        """Add a tool execution result to the conversation.

        Args:
            tool_call_id: ID of the tool call
            tool_name: Name of the tool that was executed
            result: Tool execution result
        """
        self.messages.append(
            Message(
                role="tool",
                content=result,
                tool_call_id=tool_call_id,
                name=tool_name,
            )
        )


@dataclass
class _RunContext:
    """Everything owned by a single ``ReActEngine.run`` call."""

    state: AgentState
    observer: Observer | None
    cancel_event: asyncio.Event | None
    started: float = field(default_factory=time.perf_counter)
    history: list[str] = field(default_factory=list)
    iterations: int = 0

    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def elapsed(self) -> float:
        return time.perf_counter() - self.started

    async def emit(self, event: AgentEvent) -> None:
        await emit(self.observer, event)


@dataclass
class _Turn:
    """What the model produced in one iteration."""

    content: str
    calls: list[ToolCall]
    malformed: list[MalformedToolCallError] = field(default_factory=list)
    text_answer: str | None = None


class ReActEngine:
    """Bounded thought/act/observe loop over a single conversation.

    The engine holds configuration only. Each ``run`` builds its own
    conversation and history, so one engine can serve concurrent runs.
    """

    def __init__(
        self,
        llm: LLMClient,
        max_iterations: int = 10,
        streaming: bool = False,
        system_prompt: str = DEFAULT_REACT_PROMPT,
        final_answer_tool: Tool | None = FINAL_ANSWER_TOOL,
        user_message_template: UserMessageTemplate = default_user_message,
        parse_text_actions: bool = True,
        temperature: float | None = None,
    ):
        """Initialize the engine.

        Args:
            llm: LLM client for generating responses
            max_iterations: Maximum number of model turns per run
            streaming: Stream model output and forward text chunk by chunk
            system_prompt: System prompt for the agent
            final_answer_tool: Reserved tool whose call ends the run with its
                ``answer`` argument. ``None`` leaves plain text as the only
                way to finish.
            user_message_template: Builds the first user message from the
                task, the tool descriptions and the optional context
            parse_text_actions: Interpret JSON ReAct objects written as plain
                text when the model makes no native tool calls
            temperature: Sampling temperature override
        """
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.llm = llm
        self.max_iterations = max_iterations
        self.streaming = streaming
        self.system_prompt = system_prompt
        self.final_answer_tool = final_answer_tool
        self.user_message_template = user_message_template
        self.parse_text_actions = parse_text_actions
        self.temperature = temperature
        self.parser = ReActParser()

    async def run(
        self,
        user_input: str,
        context: str | None = None,
        tools: list[Tool] | None = None,
        observer: Observer | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> str:
        """Run the loop until a final answer or the iteration cap.

        Failures of the model client or of tools never escape; they are
        reported through ``error`` events. Exactly one ``final_result`` event
        is emitted per run.

        Args:
            user_input: The task for this run
            context: Optional context, e.g. results of earlier plan steps
            tools: Tools available in this run
            observer: Optional callback receiving progress events
            cancel_event: When set, the run stops at the next check point

        Returns:
            The final answer, or a best-effort summary if the run stopped
            without one
        """
        tools = list(tools or [])
        lookup = index_tools(tools)
        offered = tools + ([self.final_answer_tool] if self.final_answer_tool else [])
        schemas = [t.schema.to_openai_format() for t in offered] or None
        available = [t.name for t in offered]

        system_prompt = self.system_prompt
        if self.final_answer_tool:
            system_prompt += final_answer_suffix(self.final_answer_tool.name)

        ctx = _RunContext(
            state=AgentState(system_prompt),
            observer=observer,
            cancel_event=cancel_event,
        )
        ctx.state.add_user_message(
            self.user_message_template(user_input, describe_tools(tools), context)
        )

        stop_reason = f"Max iterations reached ({self.max_iterations})."

        for iteration in range(1, self.max_iterations + 1):
            if ctx.cancelled():
                stop_reason = f"Run cancelled after {ctx.iterations} iterations."
                break

            ctx.iterations = iteration
            stamp = int(time.time() * 1000)
            thought_id = f"thought_{stamp}_{iteration}"
            logger.debug(
                "Iteration %d started (%d messages)", iteration, len(ctx.state.messages)
            )

            try:
                if self.streaming:
                    turn = await self._stream_turn(
                        ctx, schemas, thought_id, f"call_{stamp}_{iteration}"
                    )
                else:
                    turn = await self._complete_turn(ctx, schemas, thought_id)
            except Exception as e:
                logger.warning("Iteration %d failed: %s", iteration, e)
                await ctx.emit(ErrorEvent(message=f"Iteration {iteration} failed: {e}"))
                ctx.state.add_user_message(model_error_message(str(e)))
                continue

            if not turn.calls and self.parse_text_actions:
                self._resolve_text_action(turn, f"text_call_{stamp}_{iteration}")

            ctx.state.add_assistant_message(turn.content, turn.calls)
            if turn.content:
                ctx.history.append(f"Thought: {turn.content}")

            for error in turn.malformed:
                logger.warning("Dropped tool call in iteration %d: %s", iteration, error)
                await ctx.emit(ErrorEvent(message=str(error)))

            answer = self._final_answer(turn)
            if answer is not None:
                return await self._finish(ctx, answer)

            if not turn.calls:
                self._add_corrections(ctx, turn)
                if turn.content.strip() and not turn.malformed:
                    return await self._finish(ctx, turn.content)
                if not self.streaming and not turn.content.strip() and not turn.malformed:
                    # Neither text nor calls: stop instead of spinning.
                    logger.warning("Iteration %d produced an empty response", iteration)
                    stop_reason = (
                        f"Stopped after {iteration} iterations: "
                        "the model returned an empty response."
                    )
                    break
                continue

            cancelled = False
            for call in turn.calls:
                if ctx.cancelled():
                    cancelled = True
                    break
                await self._dispatch(ctx, call, lookup, available)
            if cancelled:
                stop_reason = f"Run cancelled after {ctx.iterations} iterations."
                break
            # Tool results must directly follow the assistant message.
            self._add_corrections(ctx, turn)

        fallback = stop_reason
        if ctx.history:
            fallback += "\n\n" + "\n\n".join(ctx.history)
        return await self._finish(ctx, fallback)

    async def _complete_turn(
        self,
        ctx: _RunContext,
        schemas: list[dict[str, Any]] | None,
        thought_id: str,
    ) -> _Turn:
        response = await self.llm.complete(
            messages=ctx.state.messages,
            tools=schemas,
            temperature=self.temperature,
        )
        content = response.content or ""
        if content:
            await ctx.emit(ThoughtEvent(thought_id=thought_id, chunk=content, is_complete=True))
        return _Turn(
            content=content,
            calls=list(response.tool_calls or []),
            malformed=list(response.malformed),
        )

    async def _stream_turn(
        self,
        ctx: _RunContext,
        schemas: list[dict[str, Any]] | None,
        thought_id: str,
        call_prefix: str,
    ) -> _Turn:
        """Forward text deltas as they arrive and accumulate tool call fragments."""
        accumulator = ToolCallAccumulator(id_prefix=call_prefix)
        parts: list[str] = []

        try:
            async for chunk in self.llm.stream_complete(
                messages=ctx.state.messages,
                tools=schemas,
                temperature=self.temperature,
            ):
                if chunk.content:
                    parts.append(chunk.content)
                    await ctx.emit(ThoughtEvent(thought_id=thought_id, chunk=chunk.content))
                if chunk.tool_call_chunks:
                    accumulator.extend(chunk.tool_call_chunks)
        finally:
            if parts:
                await ctx.emit(ThoughtEvent(thought_id=thought_id, chunk="", is_complete=True))

        calls, malformed = accumulator.finish()
        return _Turn(content="".join(parts), calls=calls, malformed=malformed)

    def _resolve_text_action(self, turn: _Turn, call_id: str) -> None:
        """Turn a JSON ReAct object written as text into a call or an answer."""
        if not looks_like_json_object(turn.content):
            return
        result = self.parser.parse_with_fallback(turn.content)
        if not result.success or result.data is None:
            return
        if result.data.action is not None:
            turn.calls = [
                ToolCall(
                    id=call_id,
                    name=result.data.action.name,
                    arguments=result.data.action.arguments,
                )
            ]
        elif result.data.final_answer is not None:
            turn.text_answer = result.data.final_answer

    @staticmethod
    def _add_corrections(ctx: _RunContext, turn: _Turn) -> None:
        """Tell the model which of its calls were dropped as malformed."""
        for error in turn.malformed:
            ctx.state.add_user_message(
                malformed_call_message(error.name or f"#{error.index}", error.reason)
            )

    def _final_answer(self, turn: _Turn) -> str | None:
        """Return the terminal answer of this turn, if it has one.

        A final-answer tool call takes precedence over any other call made
        in the same turn.
        """
        if self.final_answer_tool:
            for call in turn.calls:
                if call.name == self.final_answer_tool.name:
                    answer = None
                    if isinstance(call.arguments, dict):
                        answer = call.arguments.get("answer")
                    if isinstance(answer, str) and answer:
                        return answer
                    return turn.content
        return turn.text_answer

    async def _finish(self, ctx: _RunContext, content: str) -> str:
        await ctx.emit(
            FinalResultEvent(
                content=content,
                total_duration=ctx.elapsed(),
                iteration_count=ctx.iterations,
            )
        )
        return content

    async def _dispatch(
        self,
        ctx: _RunContext,
        call: ToolCall,
        lookup: dict[str, Tool],
        available: list[str],
    ) -> None:
        started = time.perf_counter()
        await ctx.emit(
            ToolCallEvent(tool_call_id=call.id, tool_name=call.name, args=call.arguments)
        )

        observation, success = await self._execute_tool_call(call, lookup, available)
        if not success:
            await ctx.emit(ErrorEvent(message=observation))

        await ctx.emit(
            ToolCallResultEvent(
                tool_call_id=call.id,
                tool_name=call.name,
                result=observation,
                success=success,
                duration=time.perf_counter() - started,
            )
        )
        ctx.state.add_tool_result(call.id, call.name, observation)
        ctx.history.append(f"Action: {call.name}\nObservation: {observation}")

    async def _execute_tool_call(
        self,
        call: ToolCall,
        lookup: dict[str, Tool],
        available: list[str],
    ) -> tuple[str, bool]:
        """Execute a tool call, turning every failure into an observation.

        Args:
            call: The tool call to execute
            lookup: Tools of this run keyed by name
            available: Names to list when the tool is unknown

        Returns:
            Tuple of (observation, success)
        """
        tool = lookup.get(call.name)
        if tool is None:
            logger.warning("Model requested unknown tool '%s'", call.name)
            return str(ToolNotFoundError(call.name, available)), False

        try:
            return await tool.execute(call.arguments), True
        except TypeError as e:
            logger.warning("Invalid arguments for tool '%s': %s", call.name, e)
            return f"Error: Invalid arguments for tool '{call.name}': {e}", False
        except Exception as e:
            logger.warning("Tool '%s' failed: %s", call.name, e)
            return f"Tool '{call.name}' failed: {e}", False
