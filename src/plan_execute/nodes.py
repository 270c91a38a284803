"""Node handlers for the plan → execute → replan loop.

Each factory takes the oracle the node talks to and returns an async handler
with the ``(state, config) -> partial update`` signature the engine expects.
"""

from typing import Any, Dict

from langchain_core.messages import HumanMessage
from langchain_core.runnables import Runnable, RunnableConfig

from plan_execute.errors import EmptyPlanError
from plan_execute.oracles import parse_execution, parse_plan, parse_replan
from plan_execute.state import Respond, RunState
from plan_execute.utils import format_history, format_plan


# --- Planner node ---------------------------------------------------------

def create_plan_node(planner: Runnable):
    """Create the node that drafts the initial plan."""

    async def plan_step(state: RunState, config: RunnableConfig) -> Dict[str, Any]:
        raw = await planner.ainvoke({"objective": state["objective"]}, config)
        return {"plan": parse_plan(raw)}

    return plan_step


# --- Execution node -------------------------------------------------------

def create_execute_node(executor: Runnable):
    """Create the node that carries out the next step of the plan.

    The executed step is dropped from the plan and recorded in the history.
    """

    async def execute_step(state: RunState, config: RunnableConfig) -> Dict[str, Any]:
        plan = state["plan"]
        if not plan:
            raise EmptyPlanError()
        task = plan[0]
        raw = await executor.ainvoke({"messages": [HumanMessage(content=task)]}, config)
        return {
            "history": [(task, parse_execution(raw))],
            "plan": plan[1:],
        }

    return execute_step


# --- Replan node ----------------------------------------------------------

def create_replan_node(replanner: Runnable):
    """Create the node that revises the plan or produces the final answer."""

    async def replan_step(state: RunState, config: RunnableConfig) -> Dict[str, Any]:
        raw = await replanner.ainvoke(
            {
                "objective": state["objective"],
                "plan": format_plan(state["plan"]),
                "past_steps": format_history(state["history"]),
            },
            config,
        )
        decision = parse_replan(raw)
        if isinstance(decision, Respond):
            return {"final_answer": decision.text}
        return {"plan": list(decision.steps)}

    return replan_step
