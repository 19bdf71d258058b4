"""
Tool registry for the CMS Agent system.

Tools are indexed by the function name an agent calls them with and by their
stable plugin id. Agents only see the tools that were assigned to them.
"""
import logging
from typing import Any, Dict, List, Optional

from cms_agent.interfaces.plugins.plugins import Tool
from cms_agent.interfaces.plugins.plugins import ToolRegistry as ToolRegistryInterface

logger = logging.getLogger(__name__)


class ToolRegistry(ToolRegistryInterface):
    """Per-instance tool index with per-agent access lists."""

    def __init__(self, config: Dict[str, Any] = None):
        self._tools: Dict[str, Tool] = {}
        self._ids: Dict[str, str] = {}  # plugin id -> function name
        self._agent_tools: Dict[str, List[str]] = {}
        self._config = config or {}

    def register_tool(self, tool: Tool) -> bool:
        """Configure a tool and index it. A tool that rejects the config is dropped."""
        try:
            tool.configure(self._config)
        except Exception as e:
            logger.error(f"Tool {tool.name} failed to configure: {e}")
            return False

        self._tools[tool.name] = tool
        self._ids[tool.id] = tool.name
        logger.info(f"Registered tool {tool.name} ({tool.id})")
        return True

    def get_tool(self, tool_name: str) -> Optional[Tool]:
        name = tool_name if tool_name in self._tools else self._ids.get(tool_name)
        return self._tools.get(name) if name else None

    def assign_tool_to_agent(self, agent_name: str, tool_name: str) -> bool:
        tool = self.get_tool(tool_name)
        if tool is None:
            logger.error(
                f"Cannot give {agent_name} unknown tool {tool_name}; "
                f"registered: {self.list_all_tools()}"
            )
            return False

        assigned = self._agent_tools.setdefault(agent_name, [])
        if tool.name not in assigned:
            assigned.append(tool.name)
        logger.debug(f"Agent {agent_name} tools: {assigned}")
        return True

    def revoke_agent_tools(self, agent_name: str) -> None:
        self._agent_tools.pop(agent_name, None)

    def get_agent_tools(self, agent_name: str) -> List[Dict[str, Any]]:
        """Name, description and parameter schema of each tool the agent may call."""
        assigned = (self._tools.get(name) for name in self._agent_tools.get(agent_name, []))
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.get_schema(),
            }
            for tool in assigned
            if tool is not None
        ]

    def list_all_tools(self) -> List[str]:
        return list(self._tools)

    def get_tool_definitions(self) -> List[Dict[str, Any]]:
        return [tool.tool_schema.model_dump(mode="json") for tool in self._tools.values()]

    def configure_all_tools(self, config: Dict[str, Any]) -> None:
        """Merge config into the registry settings and reconfigure every tool.

        Tools that fail are logged and stay registered with their old settings.
        """
        self._config.update(config)
        for name, tool in self._tools.items():
            try:
                tool.configure(self._config)
            except Exception as e:
                logger.error(f"Tool {name} rejected the new configuration: {e}")
