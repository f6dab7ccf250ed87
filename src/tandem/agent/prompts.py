"""Default prompts for the ReAct engine."""

from collections.abc import Callable

from tandem.tools.base import Tool, ToolParameter, ToolSchema

DEFAULT_REACT_PROMPT = """You are a helpful AI assistant that solves problems with the ReAct (reasoning + acting) method.

Workflow:
1. First write down your reasoning in the reply content (it is streamed to the user)
2. Then, if you need information, call the appropriate tool
3. Keep reasoning and acting based on the tool results

Important:
- Think first, then act
- Put your reasoning in the reply content
- Call the matching function when you need a tool"""

FINAL_ANSWER_TOOL_NAME = "give_final_answer"


async def _final_answer_noop(answer: str) -> str:
    return ""


FINAL_ANSWER_TOOL = Tool(
    schema=ToolSchema(
        name=FINAL_ANSWER_TOOL_NAME,
        description=(
            "Call this function to give the final answer once all reasoning is done. "
            "Only call it when you are sure of the answer."
        ),
        parameters=[
            ToolParameter(
                name="answer",
                type="string",
                description="The complete final answer",
            )
        ],
    ),
    fn=_final_answer_noop,
)


def final_answer_suffix(tool_name: str) -> str:
    return (
        "\n\nPay special attention:\n"
        f"- When you have the final answer, you must call the {tool_name} tool to give it\n"
        f"- Give the final answer only through {tool_name}, not directly in the reply"
    )


UserMessageTemplate = Callable[[str, str, str | None], str]


def default_user_message(task: str, tool_descriptions: str, context: str | None = None) -> str:
    message = f"Task: {task}\n\nAvailable tools:\n{tool_descriptions or '(none)'}"
    if context:
        message += f"\n\nContext from previous steps:\n{context}"
    return message


def describe_tools(tools: list[Tool]) -> str:
    return "\n\n".join(t.describe() for t in tools)


def model_error_message(error: str) -> str:
    return f"An error occurred: {error}\nPlease try again."


def malformed_call_message(tool_name: str, reason: str) -> str:
    return (
        f"Your call to '{tool_name}' was dropped because its arguments were not "
        f"valid JSON ({reason}). Please call it again with a valid JSON object."
    )
