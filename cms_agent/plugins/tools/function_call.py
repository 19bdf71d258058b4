"""
FunctionCallTool implementation for the CMS Agent system.

This module provides the base FunctionCallTool class that binds a
declarative ToolSchema to an execute coroutine and can be extended to
create custom tools.
"""
import logging
from typing import Dict, Any

from cms_agent.domains.agents import ToolContext
from cms_agent.domains.errors import CmsAgentError, ErrorKind, ToolValidationError
from cms_agent.domains.tools import ToolResult, ToolSchema
from cms_agent.interfaces.plugins.plugins import Tool

logger = logging.getLogger(__name__)


class FunctionCallTool(Tool):
    """Base class for schema-described tools an agent can invoke.

    Subclasses set ``schema`` and implement ``execute``. Callers go through
    ``run``, which validates the raw arguments first and turns every failure
    into an error ToolResult.
    """

    schema: ToolSchema = None

    def __init__(self, schema: ToolSchema = None, registry=None):
        """Initialize the tool, optionally registering it with a registry."""
        self._schema = schema or self.schema
        if self._schema is None:
            raise ValueError(f"{type(self).__name__} has no tool schema")
        self._config = {}

        if registry is not None:
            registry.register_tool(self)

    @property
    def name(self) -> str:
        return self._schema.function_name

    @property
    def id(self) -> str:
        return self._schema.id

    @property
    def description(self) -> str:
        return self._schema.description

    @property
    def tool_schema(self) -> ToolSchema:
        return self._schema

    def configure(self, config: Dict[str, Any]) -> None:
        """Configure the tool with settings from config."""
        if config is None:
            raise TypeError("Config cannot be None")
        self._config = config

    def get_schema(self) -> Dict[str, Any]:
        """Return the JSON schema for this tool's parameters."""
        return self._schema.to_json_schema()

    def success(self, message: str, payload: Any = None) -> ToolResult:
        return ToolResult.success(
            message, payload=payload, tool_id=self.id, tool_name=self.name
        )

    def error(self, message: str, kind: ErrorKind = ErrorKind.EXECUTION) -> ToolResult:
        return ToolResult.error(message, kind=kind, tool_id=self.id, tool_name=self.name)

    async def run(self, arguments: Dict[str, Any], context: ToolContext) -> ToolResult:
        """Validate raw arguments against the schema and execute the tool."""
        try:
            validated = self._schema.validate_arguments(arguments)
        except ToolValidationError as e:
            logger.warning(f"Invalid arguments for tool {self.name}: {e}")
            return self.error(f"Error: {e}", kind=e.kind)

        logger.debug(f"Executing tool {self.name} with arguments: {validated}")
        try:
            return await self.execute(context, **validated)
        except CmsAgentError as e:
            logger.error(f"Tool {self.name} failed: {e}")
            return self.error(f"Error: {e}", kind=e.kind)
        except Exception as e:
            logger.exception(f"Tool {self.name} failed: {e}")
            return self.error(f"Error: {e}")

    async def execute(self, context: ToolContext, **params) -> ToolResult:
        """Execute the tool with validated parameters."""
        # Override in subclasses
        raise NotImplementedError("Tool must implement execute method")
