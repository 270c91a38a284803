"""A small state-graph engine that runs one node per super-step.

Build a graph with :class:`WorkflowGraph`, then ``compile()`` it into an
immutable :class:`CompiledWorkflow`::

    builder = WorkflowGraph(RunState)
    builder.add_node("planner", plan_step)
    builder.add_node("agent", execute_step)
    builder.add_edge(START, "planner")
    builder.add_edge("planner", "agent")
    builder.add_conditional_edges("agent", should_end, {Route.DONE: END, Route.CONTINUE: "agent"})

    app = builder.compile()
    async for node, state in app.astream(create_run_state("..."), {"recursion_limit": 25}):
        print(node, state)

Each super-step invokes exactly one node, merges its partial update into the
state using the reducers declared on the state schema, picks the next node and
then emits ``(node_name, state)``. Runs are strictly sequential; independent
runs share nothing but the compiled graph, which is never mutated.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Callable,
    Dict,
    Hashable,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from langchain_core.runnables import RunnableConfig, ensure_config

from plan_execute.errors import (
    AmbiguousRoutingError,
    DeadEndNodeError,
    DuplicateNodeError,
    GraphRunError,
    GraphValidationError,
    NodeExecutionError,
    RecursionLimitExceeded,
    RoutingKeyError,
    UnknownNodeError,
    UnreachableNodeError,
)
from plan_execute.state import RunState, copy_state, merge_state

logger = logging.getLogger(__name__)

START = "__start__"
END = "__end__"

StateUpdate = Optional[Mapping[str, Any]]
NodeHandler = Callable[
    [Dict[str, Any], RunnableConfig], Union[StateUpdate, Awaitable[StateUpdate]]
]
RoutingFunction = Callable[[Dict[str, Any]], Hashable]


@dataclass(frozen=True)
class Branch:
    """A routing function together with its branch table."""

    decide: RoutingFunction
    targets: Mapping[Hashable, str]

    def resolve(self, source: str, state: Dict[str, Any]) -> str:
        try:
            key = self.decide(state)
        except GraphRunError:
            raise
        except Exception as e:
            raise NodeExecutionError(source, e) from e
        try:
            return self.targets[key]
        except (KeyError, TypeError):
            raise RoutingKeyError(source, key, self.targets.keys()) from None


class StepGuard:
    """Counts super-steps and aborts the run once the limit is passed."""

    def __init__(self, limit: Any):
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValueError(f"recursion_limit must be a positive integer, got {limit!r}")
        self.limit = limit
        self.steps = 0

    def tick(self) -> None:
        self.steps += 1
        if self.steps > self.limit:
            logger.warning(f"Recursion limit of {self.limit} exceeded, aborting run")
            raise RecursionLimitExceeded(self.limit)


# --- Builder -----------------------------------------------------------------

class WorkflowGraph:
    """Mutable graph definition. Call :meth:`compile` to get something runnable."""

    def __init__(self, state_schema: type = RunState):
        self._state_schema = state_schema
        self._nodes: Dict[str, NodeHandler] = {}
        self._edges: Dict[str, List[str]] = {}
        self._branches: Dict[str, List[Branch]] = {}
        self._entry_point: Optional[str] = None

    def add_node(self, name: str, handler: NodeHandler) -> WorkflowGraph:
        """Register a node handler under a unique name.

        Raises:
            DuplicateNodeError: If the name is already taken
        """
        if name in (START, END):
            raise ValueError(f"'{name}' is reserved and cannot be used as a node name")
        if name in self._nodes:
            raise DuplicateNodeError(name)
        self._nodes[name] = handler
        logger.debug(f"Added node: {name}")
        return self

    def add_edge(self, source: str, target: str) -> WorkflowGraph:
        """Add an unconditional edge. ``add_edge(START, name)`` sets the entry point."""
        if source == START:
            return self.set_entry_point(target)
        self._edges.setdefault(source, []).append(target)
        logger.debug(f"Added edge: {source} -> {target}")
        return self

    def add_conditional_edges(
        self,
        source: str,
        decide: RoutingFunction,
        branches: Mapping[Hashable, str],
    ) -> WorkflowGraph:
        """Route from ``source`` to ``branches[decide(state)]``."""
        branch = Branch(decide=decide, targets=MappingProxyType(dict(branches)))
        self._branches.setdefault(source, []).append(branch)
        logger.debug(f"Added conditional edges: {source} -> {list(branches.values())}")
        return self

    def set_entry_point(self, name: str) -> WorkflowGraph:
        if self._entry_point is not None and self._entry_point != name:
            raise AmbiguousRoutingError(
                f"Entry point already set to '{self._entry_point}', cannot also start at '{name}'"
            )
        self._entry_point = name
        return self

    def compile(self) -> CompiledWorkflow:
        """Validate the graph and freeze it.

        Raises:
            GraphValidationError: If the graph is not runnable
        """
        self._validate()
        routes: Dict[str, Union[str, Branch]] = {}
        for name in self._nodes:
            if name in self._edges:
                routes[name] = self._edges[name][0]
            else:
                routes[name] = self._branches[name][0]
        return CompiledWorkflow(
            nodes=self._nodes,
            routes=routes,
            entry_point=self._entry_point,
            state_schema=self._state_schema,
        )

    def _validate(self) -> None:
        if self._entry_point is None:
            raise GraphValidationError("No entry point set")
        if self._entry_point not in self._nodes:
            raise UnknownNodeError(self._entry_point, "the entry point")

        for source, targets in self._edges.items():
            if source not in self._nodes:
                raise UnknownNodeError(source, "an edge source")
            for target in targets:
                self._check_target(source, target)
        for source, branches in self._branches.items():
            if source not in self._nodes:
                raise UnknownNodeError(source, "a conditional edge source")
            for branch in branches:
                for target in branch.targets.values():
                    self._check_target(source, target)

        for name in self._nodes:
            edge_count = len(self._edges.get(name, []))
            branch_count = len(self._branches.get(name, []))
            if edge_count and branch_count:
                raise AmbiguousRoutingError(
                    f"Node '{name}' has both an unconditional edge and conditional edges"
                )
            if edge_count > 1 or branch_count > 1:
                raise AmbiguousRoutingError(f"Node '{name}' has more than one outgoing route")
            if not edge_count and not branch_count:
                raise DeadEndNodeError(name)

        reachable = self._find_reachable()
        for name in self._nodes:
            if name not in reachable:
                raise UnreachableNodeError(name)

    def _check_target(self, source: str, target: str) -> None:
        if target != END and target not in self._nodes:
            raise UnknownNodeError(target, f"an edge from '{source}'")

    def _find_reachable(self) -> set:
        reachable = set()
        to_visit = [self._entry_point]
        while to_visit:
            name = to_visit.pop()
            if name in reachable or name == END:
                continue
            reachable.add(name)
            to_visit.extend(self._edges.get(name, []))
            for branch in self._branches.get(name, []):
                to_visit.extend(branch.targets.values())
        return reachable


# --- Compiled graph ------------------------------------------------------------

class CompiledWorkflow:
    """An immutable, runnable graph produced by :meth:`WorkflowGraph.compile`."""

    def __init__(
        self,
        nodes: Mapping[str, NodeHandler],
        routes: Mapping[str, Union[str, Branch]],
        entry_point: str,
        state_schema: type,
    ):
        self._nodes = MappingProxyType(dict(nodes))
        self._routes = MappingProxyType(dict(routes))
        self._entry_point = entry_point
        self._state_schema = state_schema

    @property
    def nodes(self) -> Mapping[str, NodeHandler]:
        return self._nodes

    @property
    def entry_point(self) -> str:
        return self._entry_point

    def next_node(self, node: str, state: Dict[str, Any]) -> str:
        """Pick the successor of ``node`` for the given (already merged) state."""
        route = self._routes[node]
        if isinstance(route, Branch):
            return route.resolve(node, state)
        return route

    async def astream(
        self,
        input: Mapping[str, Any],
        config: Optional[RunnableConfig] = None,
    ) -> AsyncIterator[Tuple[str, Dict[str, Any]]]:
        """Run the graph, yielding ``(node_name, state)`` after every super-step.

        Every call starts an independent run. The iterator is single-pass;
        closing it early stops the run before the next node is scheduled.
        """
        config = ensure_config(config)
        guard = StepGuard(config.get("recursion_limit"))
        state = dict(input)
        current = self._entry_point

        while current != END:
            logger.debug(f"Step {guard.steps + 1}: running node '{current}'")
            update = await self._run_node(current, state, config)
            state = merge_state(state, update, self._state_schema)
            successor = self.next_node(current, state)
            logger.debug(f"Routing {current} -> {successor}")
            guard.tick()
            yield current, copy_state(state)
            current = successor

        logger.info(f"Run finished after {guard.steps} steps")

    async def ainvoke(
        self,
        input: Mapping[str, Any],
        config: Optional[RunnableConfig] = None,
    ) -> Dict[str, Any]:
        """Run the graph to completion and return the final state."""
        state = dict(input)
        async for _, state in self.astream(input, config):
            pass
        return state

    def invoke(
        self,
        input: Mapping[str, Any],
        config: Optional[RunnableConfig] = None,
    ) -> Dict[str, Any]:
        """Synchronous wrapper around :meth:`ainvoke`."""
        return asyncio.run(self.ainvoke(input, config))

    async def _run_node(
        self, node: str, state: Dict[str, Any], config: RunnableConfig
    ) -> StateUpdate:
        handler = self._nodes[node]
        try:
            update = handler(state, config)
            if inspect.isawaitable(update):
                update = await update
        except GraphRunError:
            raise
        except Exception as e:
            raise NodeExecutionError(node, e) from e
        if update is not None and not isinstance(update, Mapping):
            cause = TypeError(f"expected a mapping of state updates, got {type(update).__name__}")
            raise NodeExecutionError(node, cause)
        return update
