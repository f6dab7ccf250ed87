"""Tandem - a bounded ReAct loop with a replanning planner on top.

Key modules:

- :mod:`tandem.agent` - ReAct engine, streamed tool call accumulation, events
- :mod:`tandem.planner` - Plan model and the plan/execute/replan orchestrator
- :mod:`tandem.llm` - LLM client protocol and the OpenAI-compatible client
- :mod:`tandem.tools` - Tool capability interface and the ``@tool`` decorator
- :mod:`tandem.config` - YAML configuration
"""

__version__ = "0.1.0"
