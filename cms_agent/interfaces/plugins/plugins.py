"""
Contracts for tools, the registry that indexes them, and the plugins that
ship them.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from cms_agent.domains.agents import ToolContext
from cms_agent.domains.tools import ToolResult, ToolSchema


class Tool(ABC):
    """A callable operation an agent can invoke against the CMS."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Function name agents call the tool by."""
        pass

    @property
    @abstractmethod
    def id(self) -> str:
        """Stable plugin id, e.g. ``ai_agent:create_recipe_node``."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        pass

    @property
    @abstractmethod
    def tool_schema(self) -> ToolSchema:
        """Declarative argument schema used for validation and discovery."""
        pass

    @abstractmethod
    def configure(self, config: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def get_schema(self) -> Dict[str, Any]:
        """JSON schema of the arguments, as sent to the model."""
        pass

    @abstractmethod
    async def run(self, arguments: Dict[str, Any], context: ToolContext) -> ToolResult:
        """Validate raw arguments, then execute. Never raises for bad input."""
        pass


class ToolRegistry(ABC):
    """Index of tools by name and id, with per-agent access."""

    @abstractmethod
    def register_tool(self, tool: Tool) -> bool:
        pass

    @abstractmethod
    def get_tool(self, tool_name: str) -> Optional[Tool]:
        """Look a tool up by function name, falling back to its plugin id."""
        pass

    @abstractmethod
    def assign_tool_to_agent(self, agent_name: str, tool_name: str) -> bool:
        pass

    @abstractmethod
    def revoke_agent_tools(self, agent_name: str) -> None:
        """Remove every tool assignment of an agent."""
        pass

    @abstractmethod
    def get_agent_tools(self, agent_name: str) -> List[Dict[str, Any]]:
        """Tool descriptions in the shape an agent provider expects."""
        pass

    @abstractmethod
    def list_all_tools(self) -> List[str]:
        pass

    @abstractmethod
    def get_tool_definitions(self) -> List[Dict[str, Any]]:
        """Serialized ToolSchema of every registered tool."""
        pass

    @abstractmethod
    def configure_all_tools(self, config: Dict[str, Any]) -> None:
        pass


class Plugin(ABC):
    """A bundle of tools discovered through package entry points."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        pass

    @abstractmethod
    def initialize(self, tool_registry: ToolRegistry) -> bool:
        """Register the plugin's tools into the given registry."""
        pass

    @abstractmethod
    def configure(self, config: Dict[str, Any]) -> None:
        pass


class PluginManager(ABC):
    """Loads plugins and executes their tools."""

    @abstractmethod
    def register_plugin(self, plugin: Plugin) -> bool:
        pass

    @abstractmethod
    def load_plugins(self) -> List[str]:
        """Load every plugin published under the entry point group."""
        pass

    @abstractmethod
    def get_plugin(self, name: str) -> Optional[Plugin]:
        pass

    @abstractmethod
    def list_plugins(self) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def execute_tool(
        self,
        tool_name: str,
        context: ToolContext,
        arguments: Optional[Dict[str, Any]] = None,
    ) -> ToolResult:
        """Run a tool by name or id; failures come back as error results."""
        pass

    @abstractmethod
    def configure(self, config: Dict[str, Any]) -> None:
        pass
