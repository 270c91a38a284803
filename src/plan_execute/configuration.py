"""Define the configurable parameters for the plan-and-execute agent."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Annotated, Any, Dict, Optional

from langchain_core.runnables import RunnableConfig, ensure_config

from plan_execute import prompts


@dataclass(kw_only=True)
class Configuration:
    """The configuration for the plan-and-execute agent."""

    # Prompt configuration
    planner_prompt: str = field(
        default=prompts.PLANNER_PROMPT,
        metadata={
            "description": "The prompt used to break the objective into an ordered list of steps."
        },
    )

    replanner_prompt: str = field(
        default=prompts.REPLANNER_PROMPT,
        metadata={
            "description": "The prompt used to revise the remaining plan or answer the user."
        },
    )

    executor_prompt: str = field(
        default=prompts.EXECUTOR_PROMPT,
        metadata={
            "description": "The system prompt for the tool-calling agent that carries out a single step."
        },
    )

    # LLM configuration
    planner_model: Annotated[str, {"__template_metadata__": {"kind": "llm"}}] = field(
        default="openai/gpt-4o",
        metadata={
            "description": "The model used to draft the initial plan (provider/model_name)."
        },
    )

    executor_model: Annotated[str, {"__template_metadata__": {"kind": "llm"}}] = field(
        default="openai/gpt-4o",
        metadata={
            "description": "The model driving the execution agent (provider/model_name)."
        },
    )

    replanner_model: Annotated[str, {"__template_metadata__": {"kind": "llm"}}] = field(
        default="openai/gpt-4o",
        metadata={
            "description": "The model used to revise the plan after each step (provider/model_name)."
        },
    )

    # Tool configuration
    max_search_results: int = field(
        default=3,
        metadata={
            "description": "The maximum number of search results to return."
        },
    )

    # Execution configuration
    recursion_limit: int = field(
        default=50,
        metadata={
            "description": "Maximum number of super-steps allowed in a single run."
        },
    )

    @classmethod
    def from_runnable_config(cls, config: Optional[RunnableConfig] = None) -> Configuration:
        """Create a Configuration instance from a RunnableConfig object."""
        config = ensure_config(config)
        configurable = config.get("configurable") or {}
        _fields = {f.name for f in fields(cls) if f.init}
        return cls(**{k: v for k, v in configurable.items() if k in _fields})

    def to_runnable_config(self, **overrides: Any) -> RunnableConfig:
        """Build the RunnableConfig passed to a run."""
        configurable: Dict[str, Any] = {f.name: getattr(self, f.name) for f in fields(self)}
        configurable.update(overrides)
        return RunnableConfig(
            recursion_limit=configurable["recursion_limit"],
            configurable=configurable,
        )
