"""Tests for validating raw oracle output at the collaborator boundary."""

import pytest
from langchain_core.messages import AIMessage, HumanMessage

from plan_execute.errors import InvalidOracleOutput
from plan_execute.oracles import parse_execution, parse_plan, parse_replan
from plan_execute.state import Continue, Respond

from conftest import plan_call, response_call


def test_parse_plan():
    assert parse_plan({"steps": ["a", "b"]}) == ["a", "b"]


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "a plan",
        {"plan": ["a"]},
        {"steps": []},
        {"steps": "a"},
        {"steps": ["a", 2]},
    ],
)
def test_parse_plan_rejects_bad_shapes(raw):
    with pytest.raises(InvalidOracleOutput) as exc_info:
        parse_plan(raw)

    assert exc_info.value.node == "plan"


def test_parse_replan_continue():
    assert parse_replan(plan_call(["a", "b"])) == Continue(steps=("a", "b"))


def test_parse_replan_accepts_empty_continue():
    assert parse_replan(plan_call([])) == Continue(steps=())


def test_parse_replan_respond():
    assert parse_replan(response_call("Stephen Curry, Akron, Ohio")) == Respond(
        text="Stephen Curry, Akron, Ohio"
    )


def test_parse_replan_uses_first_tool_call():
    raw = response_call("first") + plan_call(["second"])

    assert parse_replan(raw) == Respond(text="first")


def test_parse_replan_passes_typed_decisions_through():
    decision = Continue(steps=("a",))

    assert parse_replan(decision) is decision


@pytest.mark.parametrize(
    "raw",
    [
        [],
        None,
        "respond",
        [{"type": "Search", "args": {"query": "x"}}],
        [{"type": "Plan"}],
        [{"type": "Plan", "args": {"steps": "a"}}],
        [{"type": "Response", "args": {"response": None}}],
    ],
)
def test_parse_replan_rejects_bad_shapes(raw):
    with pytest.raises(InvalidOracleOutput) as exc_info:
        parse_replan(raw)

    assert exc_info.value.node == "replan"


def test_parse_execution_reads_last_message():
    raw = {"messages": [HumanMessage(content="task"), AIMessage(content="result")]}

    assert parse_execution(raw) == "result"


def test_parse_execution_joins_content_blocks():
    raw = {"messages": [AIMessage(content=[{"type": "text", "text": "re"}, "sult"])]}

    assert parse_execution(raw) == "result"


def test_parse_execution_accepts_text():
    assert parse_execution("result") == "result"


@pytest.mark.parametrize("raw", [None, {}, {"messages": []}, {"messages": ["text"]}])
def test_parse_execution_rejects_bad_shapes(raw):
    with pytest.raises(InvalidOracleOutput):
        parse_execution(raw)
