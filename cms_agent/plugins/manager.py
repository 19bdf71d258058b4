"""
Plugin manager for the CMS Agent system.

Plugins are published under the ``cms_agent.plugins`` entry point group. Each
one registers its tools into a shared ToolRegistry, and the manager runs those
tools by function name or plugin id.
"""
import importlib.metadata
import logging
from typing import Any, Dict, List, Optional

from cms_agent.domains.agents import ToolContext
from cms_agent.domains.errors import ErrorKind
from cms_agent.domains.tools import ToolResult
from cms_agent.interfaces.plugins.plugins import Plugin
from cms_agent.interfaces.plugins.plugins import PluginManager as PluginManagerInterface
from cms_agent.plugins.registry import ToolRegistry

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "cms_agent.plugins"


class PluginManager(PluginManagerInterface):
    """Owns the loaded plugins and dispatches tool calls to the registry."""

    # "name:value" of every entry point loaded in this process
    _loaded_entry_points = set()

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        tool_registry: Optional[ToolRegistry] = None,
    ):
        self.config = config or {}
        self.tool_registry = tool_registry or ToolRegistry()
        self._plugins: Dict[str, Plugin] = {}

    def register_plugin(self, plugin: Plugin) -> bool:
        """Let the plugin add its tools, then hand it the current config.

        A plugin that raises in either step is not kept.
        """
        try:
            plugin.initialize(self.tool_registry)
            plugin.configure(self.config)
        except Exception as e:
            logger.error(f"Plugin {plugin.name} failed to initialize: {e}")
            self._plugins.pop(plugin.name, None)
            return False

        self._plugins[plugin.name] = plugin
        logger.info(f"Registered plugin {plugin.name}")
        return True

    def load_plugins(self) -> List[str]:
        """Register every plugin published under ENTRY_POINT_GROUP.

        Returns:
            Names of the entry points that were loaded by this call
        """
        return [
            entry_point.name
            for entry_point in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP)
            if self._load_entry_point(entry_point)
        ]

    def _load_entry_point(self, entry_point) -> bool:
        key = f"{entry_point.name}:{entry_point.value}"
        if key in PluginManager._loaded_entry_points:
            logger.info(f"Plugin {entry_point.name} already loaded, skipping")
            return False
        PluginManager._loaded_entry_points.add(key)

        try:
            plugin = entry_point.load()()
        except Exception as e:
            logger.error(f"Could not load plugin {entry_point.name}: {e}")
            return False
        return self.register_plugin(plugin)

    def get_plugin(self, name: str) -> Optional[Plugin]:
        return self._plugins.get(name)

    def list_plugins(self) -> List[Dict[str, Any]]:
        return [
            {"name": plugin.name, "description": plugin.description}
            for plugin in self._plugins.values()
        ]

    async def execute_tool(
        self,
        tool_name: str,
        context: ToolContext,
        arguments: Optional[Dict[str, Any]] = None,
    ) -> ToolResult:
        """Run a tool against a dict of raw arguments.

        Unknown tools and unexpected exceptions come back as error results,
        so callers never have to catch.
        """
        tool = self.tool_registry.get_tool(tool_name)
        if not tool:
            return ToolResult.error(
                f"Tool {tool_name} not found",
                kind=ErrorKind.NOT_FOUND,
                tool_name=tool_name,
            )

        try:
            return await tool.run(arguments or {}, context)
        except Exception as e:
            logger.exception(f"Tool {tool_name} raised: {e}")
            return ToolResult.error(str(e), tool_id=tool.id, tool_name=tool.name)

    def configure(self, config: Dict[str, Any]) -> None:
        """Merge new settings and push them to every tool and plugin."""
        self.config.update(config)
        self.tool_registry.configure_all_tools(config)
        for name, plugin in self._plugins.items():
            try:
                plugin.configure(self.config)
            except Exception as e:
                logger.error(f"Plugin {name} rejected the new configuration: {e}")
