"""
Factory for creating and wiring components of the CMS Agent system.

This module handles the creation and dependency injection for all
services and components used in the system.
"""

import logging
from typing import Dict, Any, List

# Service imports
from cms_agent.services.agent import AgentService
from cms_agent.services.presave import DEFAULT_AGENT_TIMEOUT, EntityPresaveService
from cms_agent.services.records import RecordService

# Adapter imports
from cms_agent.adapters.memory_store import (
    InMemoryRecordAccessor,
    InMemoryReferenceResolver,
)
from cms_agent.adapters.messenger import MessengerAdapter
from cms_agent.adapters.mongo_store import MongoRecordAccessor, MongoReferenceResolver
from cms_agent.adapters.mongodb_adapter import MongoDBAdapter
from cms_agent.adapters.openai_agent import (
    DEFAULT_MAX_TURNS,
    OpenAIAgent,
    create_openai_client,
)

# Domain and plugin imports
from cms_agent.domains.records import Reference
from cms_agent.plugins.workshop import RecipeWorkshopPlugin

# Setup logger for this module
logger = logging.getLogger(__name__)

DEFAULT_AGENTS: List[Dict[str, Any]] = [
    {
        "name": "recipe_generator",
        "instructions": (
            "You create recipes for a cooking website. Read the task description, "
            "work out every recipe it asks for and create each one with the "
            "create_recipe_node tool. Give every recipe a title, times in minutes, "
            "servings, a difficulty of easy, medium or hard, ingredients as "
            "quantity and item pairs, and HTML directions."
        ),
        "tools": ["create_recipe_node"],
    },
    {
        "name": "recipe_editor",
        "instructions": (
            "You edit existing recipes based on editor feedback. The recipe being "
            "edited is in your working context as 'node'. Rewrite its cooking "
            "instructions according to the feedback and submit them, as HTML, with "
            "the update_cooking_instructions tool using the node id."
        ),
        "tools": ["update_cooking_instructions"],
    },
    {
        "name": "campaign_writer",
        "instructions": (
            "You write email campaigns with recipe recommendations for subscribers. "
            "Send the campaign with the create_email_campaign tool, with a catchy "
            "subject and an HTML body."
        ),
        "tools": ["create_email_campaign"],
    },
]


class CmsAgentFactory:
    """Factory for creating and wiring components of the CMS Agent system."""

    @staticmethod
    def _create_storage(config: Dict[str, Any]):
        """Create the record accessor and reference resolver."""
        base_url = config.get("site", {}).get("base_url", "http://localhost")

        if "mongo" in config:
            if "connection_string" not in config["mongo"]:
                raise ValueError("MongoDB connection string is required.")
            if "database" not in config["mongo"]:
                raise ValueError("MongoDB database name is required.")
            db_adapter = MongoDBAdapter(
                connection_string=config["mongo"]["connection_string"],
                database_name=config["mongo"]["database"],
            )
            logger.info("Using MongoDB record storage")
            accessor = MongoRecordAccessor(db_adapter, base_url=base_url)
            resolver = MongoReferenceResolver(db_adapter)
        else:
            logger.info("Using in-memory record storage")
            accessor = InMemoryRecordAccessor(base_url=base_url)
            resolver = InMemoryReferenceResolver()

        for term in config.get("terms", []):
            resolver.add_term(Reference(**term))
        return accessor, resolver

    @staticmethod
    def create_from_config(config: Dict[str, Any]) -> EntityPresaveService:
        """Create the agent system from configuration.

        Args:
            config: Configuration dictionary

        Returns:
            Configured EntityPresaveService, registered on its RecordService
        """
        if "openai" not in config or "api_key" not in config["openai"]:
            raise ValueError("OpenAI API key is required in config.")

        llm_model = config["openai"].get("model")
        if llm_model:
            logger.info(f"Using OpenAI as chat provider with model: {llm_model}")
        else:
            logger.info("Using OpenAI as chat provider")

        logfire_api_key = None
        if "logfire" in config:
            if "api_key" not in config["logfire"]:
                raise ValueError("Pydantic Logfire API key is required.")
            logfire_api_key = config["logfire"]["api_key"]

        client = create_openai_client(
            api_key=config["openai"]["api_key"],
            base_url=config["openai"].get("base_url"),
            logfire_api_key=logfire_api_key,
        )

        accessor, resolver = CmsAgentFactory._create_storage(config)
        record_service = RecordService(accessor, references=resolver)
        max_turns = config.get("max_turns", DEFAULT_MAX_TURNS)

        def agent_factory(profile, agent_service):
            return OpenAIAgent(
                profile=profile,
                agent_service=agent_service,
                client=client,
                records=record_service,
                references=resolver,
                model=llm_model,
                max_turns=max_turns,
            )

        agent_service = AgentService(agent_factory=agent_factory, config=config)

        # Initialize plugin system
        try:
            loaded_plugins = agent_service.plugin_manager.load_plugins()
            logger.info(f"Loaded {loaded_plugins} plugins")
        except Exception as e:
            logger.error(f"Error loading plugins: {e}")
        if agent_service.plugin_manager.get_plugin("recipe_workshop") is None:
            agent_service.plugin_manager.register_plugin(RecipeWorkshopPlugin())

        for agent_config in config.get("agents", DEFAULT_AGENTS):
            agent_service.register_ai_agent(
                name=agent_config["name"],
                instructions=agent_config["instructions"],
                tools=agent_config.get("tools", []),
            )

        return EntityPresaveService(
            agent_service=agent_service,
            messenger=MessengerAdapter(),
            provider="openai",
            model=llm_model,
            timeout=config.get("agent_timeout", DEFAULT_AGENT_TIMEOUT),
            task_routes=config.get("task_routes"),
            record_service=record_service,
        )
