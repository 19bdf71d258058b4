"""
Built-in plugin registering the recipe workshop tools.
"""
import logging
from typing import Any, Dict

from cms_agent.interfaces.plugins.plugins import Plugin, ToolRegistry
from cms_agent.plugins.tools import (
    CreateEmailCampaign,
    CreateRecipeNode,
    UpdateCookingInstructions,
)

logger = logging.getLogger(__name__)


class RecipeWorkshopPlugin(Plugin):
    """Registers the recipe creation, recipe editing and campaign tools."""

    def __init__(self):
        self._config = {}
        self._tools = [CreateRecipeNode(), UpdateCookingInstructions(), CreateEmailCampaign()]

    @property
    def name(self) -> str:
        return "recipe_workshop"

    @property
    def description(self) -> str:
        return "Tools that let agents create recipes, edit cooking instructions and send campaigns"

    def initialize(self, tool_registry: ToolRegistry) -> bool:
        registered = [tool.name for tool in self._tools if tool_registry.register_tool(tool)]
        if len(registered) != len(self._tools):
            raise RuntimeError(f"Only registered {registered} of the workshop tools")
        logger.info(f"Registered workshop tools: {registered}")
        return True

    def configure(self, config: Dict[str, Any]) -> None:
        self._config = config
