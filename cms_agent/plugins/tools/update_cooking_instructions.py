"""
Tool that proposes new cooking instructions for an existing recipe.

The record is not written here. The proposal travels back in the result
payload and the pre-save hook merges it into the record being saved.
"""
import logging

from cms_agent.domains.agents import ToolContext
from cms_agent.domains.errors import ErrorKind
from cms_agent.domains.tools import ParameterType, ToolParameter, ToolResult, ToolSchema
from cms_agent.plugins.tools.function_call import FunctionCallTool

logger = logging.getLogger(__name__)

UPDATE_COOKING_INSTRUCTIONS_SCHEMA = ToolSchema(
    id="ai_agent:update_cooking_instructions",
    function_name="update_cooking_instructions",
    label="Update cooking instructions.",
    description=(
        "This tool can be used to update cooking instructions of an existing recipe node. "
        "The cooking instructions would be placed in a full_html text field. "
        "So provide the value in proper HTML format."
    ),
    parameters=[
        ToolParameter(
            name="node_id",
            type=ParameterType.STRING,
            label="Node ID",
            description="The node ID of the recipe node.",
            required=True,
        ),
        ToolParameter(
            name="cooking_instructions",
            type=ParameterType.STRING,
            label="Cooking instructions",
            description="The raw HTML of cooking instructions.",
        ),
    ],
)


class UpdateCookingInstructions(FunctionCallTool):
    """Propose cooking instructions for a recipe."""

    schema = UPDATE_COOKING_INSTRUCTIONS_SCHEMA

    async def execute(self, context: ToolContext, **params) -> ToolResult:
        node_id = params["node_id"].strip()
        node = context.records.load("recipe", node_id)
        if node is None:
            return self.error(f"Error: No node found with ID {node_id}", ErrorKind.NOT_FOUND)

        logger.info(f"Prepared cooking instructions for recipe {node_id}")
        return self.success(
            f"Cooking instructions prepared for recipe {node_id}",
            payload={"node_id": node.id, "cooking_instructions": params.get("cooking_instructions")},
        )
