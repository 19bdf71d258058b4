"""
Tools for the CMS Agent system.

This package contains the FunctionCallTool base class and the built-in
recipe and email campaign tools.
"""

from cms_agent.plugins.tools.function_call import FunctionCallTool
from cms_agent.plugins.tools.create_recipe_node import CreateRecipeNode
from cms_agent.plugins.tools.create_email_campaign import CreateEmailCampaign
from cms_agent.plugins.tools.update_cooking_instructions import (
    UpdateCookingInstructions,
)

__all__ = [
    "FunctionCallTool",
    "CreateRecipeNode",
    "CreateEmailCampaign",
    "UpdateCookingInstructions",
]
