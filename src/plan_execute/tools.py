"""This module provides tools for the execution agent.

It includes:
- Web Search: For general web results using Tavily.
"""

from typing import Any, Callable, List, Optional

from langchain_community.tools.tavily_search import TavilySearchResults

from plan_execute.configuration import Configuration


def create_tavily_tool(configuration: Optional[Configuration] = None):
    """Create the Tavily search tool.

    Returns:
        Configured TavilySearchResults tool
    """
    configuration = configuration or Configuration()
    return TavilySearchResults(max_results=configuration.max_search_results)


def create_tools(configuration: Optional[Configuration] = None) -> List[Callable[..., Any]]:
    """The list of tools available to the execution agent."""
    return [create_tavily_tool(configuration)]
