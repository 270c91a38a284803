"""Define the state structures for the plan-and-execute workflow."""

import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union, get_type_hints

from typing_extensions import Annotated, TypedDict

logger = logging.getLogger(__name__)


# --- Field reducers ---------------------------------------------------------

def replace_if_present(current: Any, update: Any) -> Any:
    """Take the update when one was given, otherwise keep the current value."""
    if update is None:
        return current
    if isinstance(update, list):
        return list(update)
    return update


def append(current: Optional[list], update: Optional[list]) -> list:
    """Concatenate the update onto the current sequence."""
    return list(current or []) + list(update or [])


# --- Run state --------------------------------------------------------------

class RunState(TypedDict):
    """State threaded through a single plan-and-execute run.

    Each field declares how a node's partial output is merged into it.
    """
    objective: Annotated[str, replace_if_present]
    plan: Annotated[List[str], replace_if_present]
    history: Annotated[List[Tuple[str, str]], append]
    final_answer: Annotated[Optional[str], replace_if_present]


def create_run_state(objective: str) -> RunState:
    """Create the initial state for a run."""
    return RunState(objective=objective, plan=[], history=[], final_answer=None)


def copy_state(state: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy a state mapping, including its list fields."""
    return {key: list(value) if isinstance(value, list) else value for key, value in state.items()}


@lru_cache(maxsize=None)
def get_reducers(schema: type) -> Dict[str, Callable[[Any, Any], Any]]:
    """Read the per-field reducers declared on a state schema."""
    reducers = {}
    for name, hint in get_type_hints(schema, include_extras=True).items():
        metadata = getattr(hint, "__metadata__", ())
        reducer = next((m for m in metadata if callable(m)), replace_if_present)
        reducers[name] = reducer
    return reducers


def merge_state(
    current: Mapping[str, Any],
    patch: Optional[Mapping[str, Any]],
    schema: type = RunState,
) -> Dict[str, Any]:
    """Merge a node's partial update into the current state.

    Returns a new mapping that shares no lists with ``current`` or ``patch``.
    Keys the schema does not declare are dropped.
    """
    merged = copy_state(current)
    if not patch:
        return merged
    reducers = get_reducers(schema)
    for key, value in patch.items():
        reducer = reducers.get(key)
        if reducer is None:
            logger.debug(f"Ignoring undeclared state key: {key}")
            continue
        merged[key] = reducer(merged.get(key), value)
    return merged


# --- Oracle structures ------------------------------------------------------

class Plan(TypedDict):
    """Plan to follow in the future."""
    steps: Annotated[List[str], ..., "Different steps to follow, should be in sorted order"]


class Response(TypedDict):
    """Response to user."""
    response: str


@dataclass(frozen=True)
class Continue:
    """Replanner decision: keep going with these remaining steps."""
    steps: Tuple[str, ...]


@dataclass(frozen=True)
class Respond:
    """Replanner decision: the objective is answered."""
    text: str


ReplanDecision = Union[Continue, Respond]


# --- Routing ----------------------------------------------------------------

class Route(str, Enum):
    """Branch keys chosen after the replan node."""
    DONE = "done"
    CONTINUE = "continue"
    REPLAN = "replan"
