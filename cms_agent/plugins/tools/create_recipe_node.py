"""
Tool that lets an agent add a new recipe to the site.
"""
import logging

from cms_agent.domains.agents import ToolContext
from cms_agent.domains.errors import ErrorKind
from cms_agent.domains.records import TextFormat
from cms_agent.domains.tools import ParameterType, ToolParameter, ToolResult, ToolSchema
from cms_agent.plugins.tools.fields import (
    formatted_text,
    process_ingredients,
    validate_references,
)
from cms_agent.plugins.tools.function_call import FunctionCallTool

logger = logging.getLogger(__name__)

DIFFICULTY_LEVELS = ("easy", "medium", "hard")

CREATE_RECIPE_NODE_SCHEMA = ToolSchema(
    id="ai_agent:create_recipe_node",
    function_name="create_recipe_node",
    label="Create Recipe Node",
    description="This tool can be used to add a new Recipe content to the website.",
    parameters=[
        ToolParameter(
            name="title",
            type=ParameterType.STRING,
            label="Recipe Title",
            description="The title of the recipe.",
            required=True,
        ),
        ToolParameter(
            name="preparation_time",
            type=ParameterType.INTEGER,
            label="Preparation Time",
            description="Preparation time in minutes.",
        ),
        ToolParameter(
            name="cooking_time",
            type=ParameterType.INTEGER,
            label="Cooking Time",
            description="Cooking time in minutes.",
        ),
        ToolParameter(
            name="servings",
            type=ParameterType.INTEGER,
            label="Number of Servings",
            description="Number of servings this recipe makes.",
        ),
        ToolParameter(
            name="difficulty",
            type=ParameterType.STRING,
            label="Difficulty Level",
            description="Difficulty level: easy, medium, or hard.",
        ),
        ToolParameter(
            name="recipe_category",
            type=ParameterType.LIST_OF_STRING,
            label="Recipe Categories",
            description="Array of taxonomy term IDs for recipe categories.",
        ),
        ToolParameter(
            name="tags",
            type=ParameterType.LIST_OF_STRING,
            label="Recipe Tags",
            description="Array of taxonomy term IDs for recipe tags.",
        ),
        ToolParameter(
            name="summary",
            type=ParameterType.STRING,
            label="Recipe Summary",
            description="Brief description or summary of the recipe.",
        ),
        ToolParameter(
            name="ingredients",
            type=ParameterType.LIST_OF_OBJECT,
            label="Ingredients",
            description="Array of ingredient objects with 'quantity' and 'item' properties.",
        ),
        ToolParameter(
            name="directions",
            type=ParameterType.STRING,
            label="Cooking Directions",
            description="Step-by-step cooking instructions as HTML text.",
        ),
    ],
)

# argument name -> record field for the numeric values
_NUMERIC_FIELDS = {
    "preparation_time": "field_preparation_time",
    "cooking_time": "field_cooking_time",
    "servings": "field_number_of_servings",
}


class CreateRecipeNode(FunctionCallTool):
    """Create a recipe record from agent-supplied values."""

    schema = CREATE_RECIPE_NODE_SCHEMA

    async def execute(self, context: ToolContext, **params) -> ToolResult:
        title = (params.get("title") or "").strip()
        if not title:
            return self.error("Error: Recipe title is required.", ErrorKind.VALIDATION)

        difficulty = params.get("difficulty")
        if difficulty and difficulty not in DIFFICULTY_LEVELS:
            return self.error(
                "Error: Difficulty must be one of: easy, medium, hard.",
                ErrorKind.VALIDATION,
            )

        fields = {}
        for argument, field_name in _NUMERIC_FIELDS.items():
            value = params.get(argument)
            if value is not None and value > 0:
                fields[field_name] = value

        if difficulty:
            fields["field_difficulty"] = difficulty

        # Resolve every reference before anything is created.
        if params.get("recipe_category"):
            fields["field_recipe_category"] = validate_references(
                params["recipe_category"], "recipe_category", context.references
            )
        if params.get("tags"):
            fields["field_tags"] = validate_references(
                params["tags"], "tags", context.references
            )

        if params.get("summary"):
            fields["field_summary"] = formatted_text(
                params["summary"], TextFormat.BASIC_HTML
            )

        if params.get("ingredients"):
            ingredients = process_ingredients(params["ingredients"])
            if ingredients:
                fields["field_ingredients"] = ingredients

        if params.get("directions"):
            fields["field_recipe_instruction"] = formatted_text(
                params["directions"], TextFormat.FULL_HTML
            )

        record = context.records.create(
            "recipe",
            {
                "title": title,
                "uid": context.user_id,
                "langcode": context.langcode,
                **fields,
            },
        )
        record = await context.records.save(record)
        url = context.records.canonical_url(record)
        logger.info(f"Created recipe {record.id}: {title}")

        return self.success(
            f'Success: Recipe "{title}" created successfully with ID: {record.id}. Node URL: {url}',
            payload={"node_id": record.id, "url": url},
        )
