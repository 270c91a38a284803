"""Define the plan-and-execute graph.

The planner drafts a plan, the agent executes its first step, and the
replanner either trims/revises the remaining plan or answers the user:

    START → planner → agent → replan ─┬─ done     → END
                        ▲             ├─ continue → agent
                        │             └─ replan   → replan
"""

from typing import AsyncIterator, Dict, Optional, Tuple

from langchain_core.runnables import Runnable, RunnableConfig

from plan_execute.configuration import Configuration
from plan_execute.engine import END, START, CompiledWorkflow, WorkflowGraph
from plan_execute.nodes import create_execute_node, create_plan_node, create_replan_node
from plan_execute.oracles import create_executor, create_planner, create_replanner
from plan_execute.state import Route, RunState, create_run_state

PLANNER = "planner"
AGENT = "agent"
REPLAN = "replan"


def should_end(state: RunState) -> Route:
    """Decide where to go after the replanner.

    An empty plan without an answer goes back to the replanner rather than
    to the agent, which has nothing left to execute.
    """
    if state.get("final_answer") is not None:
        return Route.DONE
    if not state.get("plan"):
        return Route.REPLAN
    return Route.CONTINUE


# --- Graph assembly -------------------------------------------------------

def create_plan_execute_graph(
    planner: Runnable,
    executor: Runnable,
    replanner: Runnable,
) -> WorkflowGraph:
    """Create the plan-and-execute graph with all nodes and edges.

    Returns:
        The uncompiled graph builder
    """
    builder = WorkflowGraph(RunState)

    builder.add_node(PLANNER, create_plan_node(planner))
    builder.add_node(AGENT, create_execute_node(executor))
    builder.add_node(REPLAN, create_replan_node(replanner))

    builder.add_edge(START, PLANNER)
    builder.add_edge(PLANNER, AGENT)
    builder.add_edge(AGENT, REPLAN)
    builder.add_conditional_edges(
        REPLAN,
        should_end,
        {Route.DONE: END, Route.CONTINUE: AGENT, Route.REPLAN: REPLAN},
    )
    return builder


def get_compiled_graph(
    configuration: Optional[Configuration] = None,
    *,
    planner: Optional[Runnable] = None,
    executor: Optional[Runnable] = None,
    replanner: Optional[Runnable] = None,
) -> CompiledWorkflow:
    """Get a compiled graph, building the default oracles for any not supplied."""
    configuration = configuration or Configuration()
    if planner is None:
        planner = create_planner(configuration)
    if executor is None:
        executor = create_executor(configuration)
    if replanner is None:
        replanner = create_replanner(configuration)
    return create_plan_execute_graph(planner, executor, replanner).compile()


async def start_run(
    objective: str,
    config: Optional[RunnableConfig] = None,
    graph: Optional[CompiledWorkflow] = None,
) -> AsyncIterator[Tuple[str, Dict]]:
    """Stream the super-steps of a run for ``objective``.

    A top-level ``recursion_limit`` in ``config`` wins; otherwise the limit
    comes from the configurable ``Configuration``.
    """
    configuration = Configuration.from_runnable_config(config)
    config = dict(config or {})
    if config.get("recursion_limit") is None:
        config["recursion_limit"] = configuration.recursion_limit
    if graph is None:
        graph = get_compiled_graph(configuration)
    async for node, state in graph.astream(create_run_state(objective), config):
        yield node, state
