"""Exceptions raised while building or running a workflow graph."""

from typing import Optional


class WorkflowError(Exception):
    """Base class for every error raised by the workflow engine."""


# --- Compile-time errors ----------------------------------------------------

class GraphValidationError(WorkflowError):
    """The graph definition is invalid and cannot be compiled."""


class DuplicateNodeError(GraphValidationError):
    def __init__(self, name: str):
        super().__init__(f"Node '{name}' already exists")
        self.name = name


class UnknownNodeError(GraphValidationError):
    def __init__(self, name: str, referenced_by: Optional[str] = None):
        message = f"Node '{name}' is not registered"
        if referenced_by:
            message += f" (referenced by {referenced_by})"
        super().__init__(message)
        self.name = name


class AmbiguousRoutingError(GraphValidationError):
    """A node has more than one way of choosing its successor."""


class UnreachableNodeError(GraphValidationError):
    def __init__(self, name: str):
        super().__init__(f"Node '{name}' is unreachable from the entry point")
        self.name = name


class DeadEndNodeError(GraphValidationError):
    def __init__(self, name: str):
        super().__init__(f"Node '{name}' has no outgoing edge")
        self.name = name


# --- Run-time errors --------------------------------------------------------

class GraphRunError(WorkflowError):
    """A run was aborted. Only the run that raised it is affected."""


class RoutingKeyError(GraphRunError):
    def __init__(self, node: str, key: object, branches):
        super().__init__(
            f"Routing function for '{node}' returned {key!r}, "
            f"expected one of {sorted(str(b) for b in branches)}"
        )
        self.node = node
        self.key = key


class InvalidOracleOutput(GraphRunError):
    """An oracle returned something that does not match its contract."""

    def __init__(self, node: str, detail: str = ""):
        message = f"Invalid oracle output for '{node}'"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.node = node


class EmptyPlanError(GraphRunError):
    def __init__(self):
        super().__init__("Cannot execute a step: the plan is empty")


class NodeExecutionError(GraphRunError):
    """Wraps an exception raised by a node handler or its routing function.

    The original exception is kept on ``cause`` and chained as ``__cause__``.
    """

    def __init__(self, node: str, cause: BaseException):
        super().__init__(f"Node '{node}' failed: {cause!r}")
        self.node = node
        self.cause = cause


class RecursionLimitExceeded(GraphRunError):
    def __init__(self, limit: int):
        super().__init__(
            f"Recursion limit of {limit} reached without hitting a stop condition"
        )
        self.limit = limit
