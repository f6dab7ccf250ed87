"""Planner + ReAct two-loop orchestration.

The outer loop asks the planner model for a plan and walks its steps in
dependency order. Each step runs in a fresh :class:`ReActEngine` scoped to
the step's tools, with the results of earlier steps as context. After each
step the planner model may rewrite the remaining steps, up to a fixed
number of times. Finally the results are summarized for the user.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from tandem.agent.events import ErrorEvent, Observer, PlanUpdateEvent, ThoughtEvent, emit
from tandem.agent.loop import ReActEngine
from tandem.errors import PlanGenerationError, TandemError
from tandem.llm.client import LLMClient, Message, forced_tool_choice
from tandem.planner.plan import Plan, PlanDraft, PlanRefinement, PlanStep
from tandem.planner.prompts import (
    GENERATE_PLAN_TOOL,
    PLANNER_SYSTEM_PROMPT,
    REFINE_PLAN_TOOL,
    REFINE_SYSTEM_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
    plan_request,
    refine_request,
    render_step_results,
    summary_request,
)
from tandem.tools.base import Tool
from tandem.tools.registry import select_tools

logger = logging.getLogger(__name__)

PlanUpdateCallback = Callable[[Plan], Awaitable[None] | None]


@dataclass
class PlannerResult:
    """Outcome of a planner run. ``run`` reports failure here, never by raising."""

    success: bool
    response: str
    plan: Plan


def _is_set(event: asyncio.Event | None) -> bool:
    return event is not None and event.is_set()


def _cancelled(plan: Plan) -> PlannerResult:
    logger.info("Planner run for %r cancelled", plan.goal)
    return PlannerResult(success=False, response="Plan execution was cancelled.", plan=plan)


def _function_tool(name: str, description: str, model: type[BaseModel]) -> dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": model.model_json_schema(by_alias=True),
        },
    }


class Planner:
    """Decomposes a goal into steps and executes them with ReAct engines."""

    def __init__(
        self,
        llm: LLMClient,
        executor_llm: LLMClient | None = None,
        max_iterations_per_step: int = 10,
        max_replan_attempts: int = 3,
        streaming: bool = True,
        executor_options: dict[str, Any] | None = None,
    ):
        """Initialize the planner.

        Args:
            llm: Client used for planning, replanning and the final summary
            executor_llm: Client used by the per-step engines; defaults to ``llm``
            max_iterations_per_step: Iteration cap of each step's engine
            max_replan_attempts: How many times the remaining steps may be rewritten
            streaming: Whether step engines stream their output
            executor_options: Extra keyword arguments for each ReActEngine
        """
        self.llm = llm
        self.executor_llm = executor_llm or llm
        self.max_iterations_per_step = max_iterations_per_step
        self.max_replan_attempts = max_replan_attempts
        self.streaming = streaming
        self.executor_options = executor_options or {}

    async def run(
        self,
        goal: str,
        tools: list[Tool],
        observer: Observer | None = None,
        on_plan_update: PlanUpdateCallback | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> PlannerResult:
        """Plan and execute ``goal``.

        Args:
            goal: What the user wants accomplished
            tools: Every tool steps may use
            observer: Optional callback receiving progress events
            on_plan_update: Optional callback receiving a plan snapshot after
                every state change
            cancel_event: When set, no further step is started

        Returns:
            PlannerResult; ``success`` is False if planning or execution failed
        """
        try:
            plan = await self._generate_plan(goal, tools)
            await self._publish(plan, observer, on_plan_update)

            replan_attempts = 0
            while not plan.is_complete():
                if _is_set(cancel_event):
                    return _cancelled(plan)

                step = plan.next_step()
                if step is None:
                    blocked = [s.id for s in plan.blocked_steps()]
                    logger.warning("Plan stuck: steps %s have unmet dependencies", blocked)
                    await emit(
                        observer,
                        ErrorEvent(
                            message=f"Plan stopped: steps {blocked} have unmet dependencies"
                        ),
                    )
                    break

                result = await self._execute_step(
                    plan, step, tools, observer, on_plan_update, cancel_event
                )
                if result is None:
                    return _cancelled(plan)

                if replan_attempts < self.max_replan_attempts:
                    if await self._maybe_replan(plan, result, tools, observer):
                        replan_attempts += 1
                        await self._publish(plan, observer, on_plan_update)

            response = await self._summarize(plan, observer)
            return PlannerResult(success=True, response=response, plan=plan)

        except Exception as e:
            logger.exception("Planner failed for goal %r", goal)
            await emit(observer, ErrorEvent(message=f"Planner failed: {e}"))
            return PlannerResult(
                success=False,
                response=f"Unable to complete plan: {e}",
                plan=Plan(goal=goal, steps=[], reasoning="Plan execution failed", history=[]),
            )

    async def _execute_step(
        self,
        plan: Plan,
        step: PlanStep,
        tools: list[Tool],
        observer: Observer | None,
        on_plan_update: PlanUpdateCallback | None,
        cancel_event: asyncio.Event | None,
    ) -> str | None:
        """Run one step in a fresh engine.

        Returns:
            The step result, or None if the run was cancelled during the step
        """
        plan.start_step(step)
        await self._publish(plan, observer, on_plan_update)

        await emit(
            observer,
            ThoughtEvent(
                thought_id=f"step_{step.id}",
                chunk=f"Executing step {step.id}: {step.description}",
                is_complete=True,
            ),
        )

        engine = ReActEngine(
            llm=self.executor_llm,
            max_iterations=self.max_iterations_per_step,
            streaming=self.streaming,
            **self.executor_options,
        )
        try:
            result = await engine.run(
                step.description,
                context=plan.render_history() or None,
                tools=select_tools(tools, step.required_tools),
                observer=observer,
                cancel_event=cancel_event,
            )
        except Exception as e:
            step.fail(str(e))
            await self._publish(plan, observer, on_plan_update)
            raise

        if _is_set(cancel_event):
            # The engine's text is a stop notice, not a result.
            step.fail("cancelled")
            await self._publish(plan, observer, on_plan_update)
            return None

        plan.record_result(step, result)
        await self._publish(plan, observer, on_plan_update)
        return result

    async def _generate_plan(self, goal: str, tools: list[Tool]) -> Plan:
        """Obtain the initial plan with a forced ``generate_plan`` call.

        Raises:
            PlanGenerationError: If the model does not return a valid plan
        """
        response = await self.llm.complete(
            messages=[
                Message(role="system", content=PLANNER_SYSTEM_PROMPT),
                Message(role="user", content=plan_request(goal, tools)),
            ],
            tools=[
                _function_tool(
                    GENERATE_PLAN_TOOL,
                    "Produce a step-by-step execution plan. "
                    "You must call this tool to return your plan.",
                    PlanDraft,
                )
            ],
            tool_choice=forced_tool_choice(GENERATE_PLAN_TOOL),
        )

        if not response.tool_calls:
            raise PlanGenerationError("Model did not return a plan tool call")

        call = response.tool_calls[0]
        if call.name != GENERATE_PLAN_TOOL:
            raise PlanGenerationError(f"Unexpected tool call: {call.name}")

        try:
            draft = PlanDraft.model_validate(call.arguments)
        except ValidationError as e:
            raise PlanGenerationError(f"Invalid plan: {e}") from e

        plan = draft.to_plan()
        logger.info("Generated plan with %d steps for %r", len(plan.steps), goal)
        return plan

    async def _maybe_replan(
        self,
        plan: Plan,
        latest_result: str,
        tools: list[Tool],
        observer: Observer | None,
    ) -> bool:
        """Ask the planner model whether the remaining steps should change.

        A refinement that cannot be obtained or parsed leaves the plan as is.

        Returns:
            True if the plan was changed
        """
        try:
            response = await self.llm.complete(
                messages=[
                    Message(role="system", content=REFINE_SYSTEM_PROMPT),
                    Message(role="user", content=refine_request(plan, latest_result, tools)),
                ],
                tools=[
                    _function_tool(
                        REFINE_PLAN_TOOL,
                        "Report whether the remaining plan must change.",
                        PlanRefinement,
                    )
                ],
                tool_choice=forced_tool_choice(REFINE_PLAN_TOOL),
            )
            calls = [c for c in response.tool_calls or [] if c.name == REFINE_PLAN_TOOL]
            if not calls:
                raise PlanGenerationError("Model did not return a refinement tool call")
            refinement = PlanRefinement.model_validate(calls[0].arguments)
        except (TandemError, ValidationError) as e:
            logger.warning("Ignoring plan refinement: %s", e)
            await emit(observer, ErrorEvent(message=f"Plan refinement ignored: {e}"))
            return False

        if not refinement.should_replan or refinement.updated_steps is None:
            logger.debug("Planner kept the remaining steps: %s", refinement.reasoning)
            return False

        await emit(
            observer,
            ThoughtEvent(
                thought_id="replan",
                chunk=f"Replanning: {refinement.reasoning}",
                is_complete=True,
            ),
        )
        dropped = plan.replace_remaining(refinement.updated_steps)
        if dropped:
            logger.warning("Dropped revised steps reusing completed ids: %s", dropped)
        logger.info("Replanned: %d steps remain", len(plan.pending_steps()))
        return True

    async def _summarize(self, plan: Plan, observer: Observer | None) -> str:
        """Summarize completed work; falls back to the raw results on failure."""
        try:
            response = await self.llm.complete(
                messages=[
                    Message(role="system", content=SUMMARY_SYSTEM_PROMPT),
                    Message(role="user", content=summary_request(plan)),
                ],
            )
            if response.content:
                return response.content
            raise ValueError("empty summary")
        except Exception as e:
            logger.warning("Summary generation failed: %s", e)
            await emit(observer, ErrorEvent(message=f"Summary generation failed: {e}"))
            return f"Goal: {plan.goal}\n\n{render_step_results(plan)}"

    async def _publish(
        self,
        plan: Plan,
        observer: Observer | None,
        on_plan_update: PlanUpdateCallback | None,
    ) -> None:
        snapshot = plan.snapshot()
        await emit(observer, PlanUpdateEvent(plan=snapshot))
        if on_plan_update is not None:
            result = on_plan_update(snapshot)
            if inspect.isawaitable(result):
                await result
