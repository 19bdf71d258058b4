"""
Agent service implementation.

This service manages agent profiles, their tool assignments, tool
execution on behalf of an agent, and the creation of agent instances.
"""

import logging
import traceback
from typing import Any, Callable, Dict, List, Optional

from cms_agent.domains.agents import AgentProfile, ToolContext
from cms_agent.domains.errors import ErrorKind
from cms_agent.domains.tools import ToolResult
from cms_agent.interfaces.providers.agent import Agent
from cms_agent.plugins.manager import PluginManager
from cms_agent.plugins.registry import ToolRegistry

logger = logging.getLogger(__name__)

AgentFactory = Callable[[AgentProfile, "AgentService"], Agent]


class AgentService:
    """Service for managing agents and running their tools."""

    def __init__(
        self,
        agent_factory: Optional[AgentFactory] = None,
        config: Optional[Dict[str, Any]] = None,
        tool_registry: Optional[ToolRegistry] = None,
    ):
        """Initialize the agent service.

        Args:
            agent_factory: Builds an Agent for a profile
            config: Optional service configuration
            tool_registry: Optional registry, a new one is created otherwise
        """
        self.agent_factory = agent_factory
        self.config = config or {}
        self.tool_registry = tool_registry or ToolRegistry(config=self.config)
        self.agents: List[AgentProfile] = []

        self.plugin_manager = PluginManager(
            config=self.config,
            tool_registry=self.tool_registry,
        )

    def register_ai_agent(
        self,
        name: str,
        instructions: str,
        tools: Optional[List[str]] = None,
    ) -> AgentProfile:
        """Register an agent profile and assign its tools.

        Registering a name again replaces both the profile and its tool access.

        Args:
            name: Agent context name, e.g. recipe_editor
            instructions: Agent instructions
            tools: Names or ids of the tools the agent may call
        """
        agent = AgentProfile(name=name, instructions=instructions)
        self.agents = [a for a in self.agents if a.name != name] + [agent]
        self.tool_registry.revoke_agent_tools(name)
        logger.info(f"Registered AI agent: {name}")

        for tool_name in tools or []:
            if self.assign_tool_for_agent(name, tool_name):
                logger.info(f"Assigned tool '{tool_name}' to agent '{name}'.")
            else:
                logger.warning(
                    f"Failed to assign tool '{tool_name}' to agent '{name}' (Tool might not be registered)."
                )
        return agent

    def get_agent(self, name: str) -> Optional[AgentProfile]:
        """Get a registered agent profile by name."""
        return next((a for a in self.agents if a.name == name), None)

    def assign_tool_for_agent(self, agent_name: str, tool_name: str) -> bool:
        """Assign a tool to an agent.

        Args:
            agent_name: Agent name
            tool_name: Tool name or id

        Returns:
            True if the tool was assigned
        """
        assigned = self.tool_registry.assign_tool_to_agent(agent_name, tool_name)
        agent = self.get_agent(agent_name)
        if assigned and agent is not None:
            tool = self.tool_registry.get_tool(tool_name)
            if tool.name not in agent.tools:
                agent.tools.append(tool.name)
        return assigned

    def get_agent_tools(self, agent_name: str) -> List[Dict[str, Any]]:
        """Get tools available to an agent.

        Args:
            agent_name: Agent name

        Returns:
            List of tool configurations
        """
        return self.tool_registry.get_agent_tools(agent_name)

    def get_agent_system_prompt(self, agent_name: str) -> str:
        """Build the system prompt for an agent."""
        agent = self.get_agent(agent_name)
        if agent is None:
            return ""

        system_prompt = f"You are {agent.name}, an AI assistant with the following instructions:\n\n"
        system_prompt += agent.instructions
        tool_names = [t["name"] for t in self.get_agent_tools(agent_name)]
        if tool_names:
            system_prompt += f"\n\nAVAILABLE TOOLS:\n{', '.join(tool_names)}"
        return system_prompt

    async def execute_tool(
        self,
        agent_name: str,
        tool_name: str,
        parameters: Dict[str, Any],
        context: ToolContext,
    ) -> ToolResult:
        """Execute a tool on behalf of an agent."""
        tool = self.tool_registry.get_tool(tool_name)
        if not tool:
            logger.warning(f"Tool '{tool_name}' not found for execution.")
            return ToolResult.error(
                f"Tool '{tool_name}' not found",
                kind=ErrorKind.NOT_FOUND,
                tool_name=tool_name,
            )

        agent_tools = self.get_agent_tools(agent_name)
        if not any(t.get("name") == tool.name for t in agent_tools):
            logger.warning(
                f"Agent '{agent_name}' attempted to use unassigned tool '{tool_name}'."
            )
            return ToolResult.error(
                f"Agent '{agent_name}' doesn't have access to tool '{tool_name}'",
                kind=ErrorKind.VALIDATION,
                tool_id=tool.id,
                tool_name=tool.name,
            )

        try:
            logger.debug(
                f"Executing tool '{tool.name}' for agent '{agent_name}' with params: {parameters}"
            )
            result = await self.plugin_manager.execute_tool(
                tool.name, context, parameters or {}
            )
            logger.info(
                f"Tool '{tool.name}' execution result status: {result.status.value}"
            )
            return result
        except Exception as e:
            logger.error(
                f"Error executing tool '{tool.name}': {e}\n{traceback.format_exc()}"
            )
            return ToolResult.error(
                f"Error executing tool: {str(e)}", tool_id=tool.id, tool_name=tool.name
            )

    def create_agent(self, name: str) -> Agent:
        """Create an agent instance for a registered profile.

        Raises:
            ValueError: if the profile is unknown or no factory is configured
        """
        profile = self.get_agent(name)
        if profile is None:
            raise ValueError(f"Agent '{name}' is not registered")
        if self.agent_factory is None:
            raise ValueError("No agent factory configured")
        return self.agent_factory(profile, self)
