"""Shared fixtures: scripted stand-ins for the planner, agent and replanner."""

from typing import Any, List

import pytest
from langchain_core.messages import AIMessage, HumanMessage
from langchain_core.runnables import RunnableLambda

NBA_OBJECTIVE = "Who is the 2022 NBA Finals MVP and where is his hometown?"
NBA_STEPS = ["Find the 2022 NBA Finals MVP", "Find that person's hometown"]


def plan_call(steps: List[str]) -> list:
    return [{"type": "Plan", "args": {"steps": steps}}]


def response_call(text: str) -> list:
    return [{"type": "Response", "args": {"response": text}}]


class ScriptedOracle:
    """Returns queued outputs in order and records every input it receives."""

    def __init__(self, *outputs: Any, repeat_last: bool = False):
        self.outputs = list(outputs)
        self.repeat_last = repeat_last
        self.calls: List[Any] = []

    def __call__(self, inputs: Any) -> Any:
        self.calls.append(inputs)
        if len(self.outputs) == 1 and self.repeat_last:
            return self.outputs[0]
        return self.outputs.pop(0)

    def as_runnable(self) -> RunnableLambda:
        return RunnableLambda(self)


def echo_agent(inputs: dict) -> dict:
    """Fake ReAct agent: answers every task with 'done: <task>'."""
    task = inputs["messages"][-1].content
    return {"messages": [HumanMessage(content=task), AIMessage(content=f"done: {task}")]}


@pytest.fixture
def executor():
    return RunnableLambda(echo_agent)
