"""Utility & helper functions."""

from datetime import UTC, datetime
from typing import Sequence, Tuple

from dotenv import load_dotenv
from langchain.chat_models import init_chat_model
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage


# Load environment variables from .env file
load_dotenv()


def get_message_text(msg: BaseMessage) -> str:
    """Get the text content of a message."""
    content = msg.content
    if isinstance(content, str):
        return content
    elif isinstance(content, dict):
        return content.get("text", "")
    else:
        txts = [c if isinstance(c, str) else (c.get("text") or "") for c in content]
        return "".join(txts).strip()


def format_system_prompt(prompt_template: str) -> str:
    """Format a system prompt template with the current system time."""
    return prompt_template.format(system_time=datetime.now(tz=UTC).isoformat())


def format_plan(plan: Sequence[str]) -> str:
    """Render the remaining plan one step per line."""
    return "\n".join(plan)


def format_history(history: Sequence[Tuple[str, str]]) -> str:
    """Render completed steps as ``task: result`` lines."""
    return "\n".join(f"{task}: {result}" for task, result in history)


def load_chat_model(fully_specified_name: str) -> BaseChatModel:
    """Load a chat model from a fully specified name.

    Args:
        fully_specified_name (str): String in the format 'provider/model'.
    """
    provider, model = fully_specified_name.split("/", maxsplit=1)
    return init_chat_model(model, model_provider=provider)
