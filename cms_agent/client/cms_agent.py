"""
Simplified client interface for the CMS Agent system.

This module provides a clean API for hosts to save records through the
agent-aware pipeline and to run tools directly, without dealing with
internal wiring.
"""

import json
import importlib.util
from typing import Any, Dict, List, Optional

from cms_agent.domains.agents import ToolContext
from cms_agent.domains.records import Notice, Record
from cms_agent.domains.tools import ToolResult
from cms_agent.factories.agent_factory import CmsAgentFactory


class CmsAgent:
    """Client facade over the pre-save hook, record service and tools."""

    def __init__(self, config_path: str = None, config: Dict[str, Any] = None):
        """Initialize the agent system from config file or dictionary.

        Args:
            config_path: Path to configuration file (JSON or Python)
            config: Configuration dictionary
        """
        if not config and not config_path:
            raise ValueError("Either config or config_path must be provided")

        if config_path:
            with open(config_path, "r") as f:
                if config_path.endswith(".json"):
                    config = json.load(f)
                else:
                    # Assume it's a Python file
                    spec = importlib.util.spec_from_file_location("config", config_path)
                    config_module = importlib.util.module_from_spec(spec)
                    spec.loader.exec_module(config_module)
                    config = config_module.config

        self.presave_service = CmsAgentFactory.create_from_config(config)

    @property
    def records(self):
        """The record service saves go through."""
        return self.presave_service.record_service

    async def save(self, record: Record) -> Record:
        """Save a record, running the agent pre-save hook first.

        Notices from earlier saves are dropped, so messages() afterwards
        only reports on this one.
        """
        self.presave_service.messenger.clear()
        return await self.records.save(record)

    async def execute_tool(
        self,
        tool_name: str,
        arguments: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> ToolResult:
        """Run a tool directly, outside any agent.

        Args:
            tool_name: Function name or id of the tool
            arguments: Raw tool arguments
            user_id: User the tool acts for
        """
        agent_service = self.presave_service.agent_service
        context = ToolContext(
            records=self.records,
            references=self.records.references,
            user_id=user_id,
        )
        return await agent_service.plugin_manager.execute_tool(tool_name, context, arguments)

    def list_tools(self) -> List[Dict[str, Any]]:
        """Serialized schemas of every registered tool."""
        return self.presave_service.agent_service.tool_registry.get_tool_definitions()

    def messages(self) -> List[Notice]:
        """Notices raised by the most recent save."""
        return self.presave_service.messenger.messages()
