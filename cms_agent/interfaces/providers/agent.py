from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from cms_agent.domains.agents import Solvability
from cms_agent.domains.tools import ToolResult


class Agent(ABC):
    """Interface for the chat agents that solve tasks with tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the agent context name, e.g. recipe_editor."""
        pass

    @abstractmethod
    def set_context(self, messages: List[Dict[str, Any]]) -> None:
        """Set the chat messages the agent should act on."""
        pass

    @abstractmethod
    def set_model_config(self, provider: str, model: Optional[str] = None) -> None:
        """Select the chat-completion provider and model."""
        pass

    @abstractmethod
    def set_working_context(self, bindings: Dict[str, Any]) -> None:
        """Bind values, such as the record being saved, into the agent."""
        pass

    @abstractmethod
    async def determine_solvability(self) -> Solvability:
        """Run the agent and report whether the task was solved."""
        pass

    @abstractmethod
    def get_tool_results(self, flatten: bool = True) -> List[Any]:
        """Get the results of the tools the agent invoked.

        With flatten=False results are grouped per agent turn.
        """
        pass
