"""Plan-and-Execute Agent.

This package answers a free-form objective with an iterative loop:
- Planner: Breaks the objective into an ordered list of steps
- Agent: Executes the next step with a tool-calling ReAct agent
- Replanner: Revises the remaining plan, or answers the user when done

The loop runs on a small state-graph engine that executes one node per
super-step, merges each node's partial update into the run state, and stops
at the terminal node or when the step budget is exhausted.
"""

from plan_execute.engine import END, START, CompiledWorkflow, WorkflowGraph
from plan_execute.graph import create_plan_execute_graph, get_compiled_graph, start_run
from plan_execute.state import RunState, create_run_state, merge_state

__all__ = [
    "END",
    "START",
    "CompiledWorkflow",
    "RunState",
    "WorkflowGraph",
    "create_plan_execute_graph",
    "create_run_state",
    "get_compiled_graph",
    "merge_state",
    "start_run",
]
