"""Planner, replanner and execution agent, plus parsing of what they return.

The oracles are LangChain runnables. Their raw output is loosely typed, so
every node passes it through one of the ``parse_*`` functions below before
touching the state.
"""

from typing import Any, List, Mapping, Optional, Sequence

from langchain_core.messages import BaseMessage
from langchain_core.output_parsers.openai_tools import JsonOutputToolsParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import Runnable
from langgraph.prebuilt import create_react_agent

from plan_execute.configuration import Configuration
from plan_execute.errors import InvalidOracleOutput
from plan_execute.state import Continue, Plan, ReplanDecision, Respond, Response
from plan_execute.tools import create_tools
from plan_execute.utils import format_system_prompt, get_message_text, load_chat_model

PLAN_TOOL = Plan.__name__
RESPONSE_TOOL = Response.__name__


# --- Oracle factories -------------------------------------------------------

def create_planner(configuration: Optional[Configuration] = None) -> Runnable:
    """Build the planning oracle.

    Input: ``{"objective": str}``. Output: a ``Plan`` mapping.
    """
    configuration = configuration or Configuration()
    prompt = ChatPromptTemplate.from_template(configuration.planner_prompt)
    model = load_chat_model(configuration.planner_model)
    return prompt | model.with_structured_output(Plan)


def create_replanner(configuration: Optional[Configuration] = None) -> Runnable:
    """Build the replanning oracle.

    Input: ``{"objective", "plan", "past_steps"}``. Output: the parsed tool
    calls, one of ``Plan`` or ``Response``.
    """
    configuration = configuration or Configuration()
    prompt = ChatPromptTemplate.from_template(configuration.replanner_prompt)
    model = load_chat_model(configuration.replanner_model)
    return prompt | model.bind_tools([Plan, Response], tool_choice="any") | JsonOutputToolsParser()


def create_executor(configuration: Optional[Configuration] = None) -> Runnable:
    """Build the execution agent: a ReAct agent with web search.

    Input: ``{"messages": [...]}``. Output: the agent state with ``messages``.
    """
    configuration = configuration or Configuration()
    model = load_chat_model(configuration.executor_model)
    return create_react_agent(
        model,
        tools=create_tools(configuration),
        prompt=format_system_prompt(configuration.executor_prompt),
    )


# --- Output parsing ---------------------------------------------------------

def _parse_steps(raw: Any, node: str, allow_empty: bool) -> List[str]:
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        raise InvalidOracleOutput(node, f"steps must be a list, got {type(raw).__name__}")
    if not allow_empty and not raw:
        raise InvalidOracleOutput(node, "steps must not be empty")
    if not all(isinstance(step, str) for step in raw):
        raise InvalidOracleOutput(node, "every step must be a string")
    return list(raw)


def parse_plan(raw: Any) -> List[str]:
    """Validate the planner's output and return its steps."""
    if not isinstance(raw, Mapping) or "steps" not in raw:
        raise InvalidOracleOutput("plan", "expected a mapping with 'steps'")
    return _parse_steps(raw["steps"], "plan", allow_empty=False)


def parse_replan(raw: Any) -> ReplanDecision:
    """Turn the replanner's output into ``Continue`` or ``Respond``.

    Accepts an already typed decision, a single parsed tool call, or the list
    of tool calls produced by ``JsonOutputToolsParser`` (the first one wins).
    """
    if isinstance(raw, (Continue, Respond)):
        return raw
    if isinstance(raw, list):
        if not raw:
            raise InvalidOracleOutput("replan", "no tool call returned")
        raw = raw[0]
    if not isinstance(raw, Mapping):
        raise InvalidOracleOutput("replan", f"unexpected output type {type(raw).__name__}")

    args = raw.get("args")
    if not isinstance(args, Mapping):
        raise InvalidOracleOutput("replan", "tool call has no arguments")
    if raw.get("type") == RESPONSE_TOOL:
        text = args.get("response")
        if not isinstance(text, str):
            raise InvalidOracleOutput("replan", "response must be a string")
        return Respond(text=text)
    if raw.get("type") == PLAN_TOOL:
        return Continue(steps=tuple(_parse_steps(args.get("steps"), "replan", allow_empty=True)))
    raise InvalidOracleOutput("replan", f"unknown tool {raw.get('type')!r}")


def parse_execution(raw: Any) -> str:
    """Extract the result text from the execution agent's output."""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, Mapping):
        messages = raw.get("messages")
        if messages and isinstance(messages[-1], BaseMessage):
            return get_message_text(messages[-1])
    raise InvalidOracleOutput("execute", "expected text or an agent state with messages")
