"""
CMS Agent - function-call tools and pre-save hooks that let a chat agent
create and edit content records in a content-management system.

This package provides declarative tool schemas, a tool registry and plugin
manager, the recipe workshop tools, and the pre-save hook that merges agent
proposals into records being saved.
"""

# Client interface (main entry point)
from cms_agent.client.cms_agent import CmsAgent

# Factory for creating agent systems
from cms_agent.factories.agent_factory import CmsAgentFactory

# Useful tools and utilities
from cms_agent.plugins.manager import PluginManager
from cms_agent.plugins.registry import ToolRegistry
from cms_agent.plugins.tools.function_call import FunctionCallTool
from cms_agent.interfaces.plugins.plugins import Plugin, Tool
from cms_agent.domains.tools import ParameterType, ToolParameter, ToolResult, ToolSchema

# Package metadata
__all__ = [
    # Main client interfaces
    "CmsAgent",
    # Factories
    "CmsAgentFactory",
    # Tools
    "PluginManager",
    "ToolRegistry",
    "FunctionCallTool",
    "Plugin",
    "Tool",
    # Schemas
    "ParameterType",
    "ToolParameter",
    "ToolResult",
    "ToolSchema",
]
