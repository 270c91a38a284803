"""
Command-line interface for the plan-and-execute agent.

Usage:
    plan-execute run "Who is the 2022 NBA Finals MVP and where is his hometown?"
    plan-execute plan "What is the hometown of the current Australian Open winner?"
    plan-execute replan "<objective>" --step "Find the winner" --done "Find the winner=Jannik Sinner"
    plan-execute execute "Who is the winner of the US Open?"
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from langchain_core.messages import HumanMessage

from plan_execute.configuration import Configuration
from plan_execute.errors import WorkflowError
from plan_execute.graph import get_compiled_graph, start_run
from plan_execute.oracles import (
    create_executor,
    create_planner,
    create_replanner,
    parse_execution,
    parse_plan,
    parse_replan,
)
from plan_execute.state import Respond
from plan_execute.utils import format_history, format_plan

DEFAULT_OBJECTIVE = "Who is the 2022 NBA Finals MVP and where is his hometown?"


def positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def _configuration(args: argparse.Namespace) -> Configuration:
    configuration = Configuration(recursion_limit=args.recursion_limit)
    if args.model:
        configuration.planner_model = args.model
        configuration.executor_model = args.model
        configuration.replanner_model = args.model
    return configuration


async def _run(args: argparse.Namespace) -> int:
    configuration = _configuration(args)
    graph = get_compiled_graph(configuration)
    final_answer = None
    async for node, state in start_run(
        args.objective, configuration.to_runnable_config(), graph=graph
    ):
        print(f"--- {node} ---")
        print({node: state})
        final_answer = state.get("final_answer")
    print(f"\nFINAL ANSWER: {final_answer}")
    return 0


async def _plan(args: argparse.Namespace) -> int:
    planner = create_planner(_configuration(args))
    steps = parse_plan(await planner.ainvoke({"objective": args.objective}))
    for i, step in enumerate(steps, 1):
        print(f"{i}. {step}")
    return 0


async def _replan(args: argparse.Namespace) -> int:
    replanner = create_replanner(_configuration(args))
    history = []
    for entry in args.done:
        task, _, result = entry.partition("=")
        history.append((task, result))
    raw = await replanner.ainvoke(
        {
            "objective": args.objective,
            "plan": format_plan(args.step),
            "past_steps": format_history(history),
        }
    )
    decision = parse_replan(raw)
    if isinstance(decision, Respond):
        print(f"RESPOND: {decision.text}")
    else:
        print("CONTINUE:")
        for i, step in enumerate(decision.steps, 1):
            print(f"{i}. {step}")
    return 0


async def _execute(args: argparse.Namespace) -> int:
    executor = create_executor(_configuration(args))
    raw = await executor.ainvoke({"messages": [HumanMessage(content=args.task)]})
    print(parse_execution(raw))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plan-execute",
        description="Answer an objective with a plan → execute → replan loop",
    )
    parser.add_argument(
        "--model",
        default=None,
        help="Use this provider/model for every oracle (e.g. openai/gpt-4o)",
    )
    parser.add_argument(
        "--recursion-limit",
        type=positive_int,
        default=Configuration.recursion_limit,
        help="Maximum number of super-steps in a run",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run the full loop and stream every step")
    run_parser.add_argument("objective", nargs="?", default=DEFAULT_OBJECTIVE)
    run_parser.set_defaults(func=_run)

    plan_parser = subparsers.add_parser("plan", help="Ask the planner for a plan")
    plan_parser.add_argument("objective")
    plan_parser.set_defaults(func=_plan)

    replan_parser = subparsers.add_parser("replan", help="Ask the replanner for one decision")
    replan_parser.add_argument("objective")
    replan_parser.add_argument(
        "--step", action="append", default=[], help="A remaining step (repeatable)"
    )
    replan_parser.add_argument(
        "--done", action="append", default=[], metavar="TASK=RESULT",
        help="A completed step and its result (repeatable)",
    )
    replan_parser.set_defaults(func=_replan)

    execute_parser = subparsers.add_parser("execute", help="Run the execution agent on one task")
    execute_parser.add_argument("task")
    execute_parser.set_defaults(func=_execute)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    try:
        return asyncio.run(args.func(args))
    except WorkflowError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
