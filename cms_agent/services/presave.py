"""
Pre-save hook implementation.

Hands free text from records being saved to an agent and merges the
agent's proposals back into the record before it is persisted.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from cms_agent.domains.agents import Solvability
from cms_agent.domains.errors import AgentFailure, AgentTimeout
from cms_agent.domains.records import NoticeLevel, Record, TextFormat
from cms_agent.domains.tools import ToolResult
from cms_agent.interfaces.providers.agent import Agent
from cms_agent.interfaces.providers.messenger import Messenger
from cms_agent.interfaces.services.presave import PresaveHook
from cms_agent.plugins.tools.fields import formatted_text, strip_tags
from cms_agent.plugins.tools.update_cooking_instructions import (
    UPDATE_COOKING_INSTRUCTIONS_SCHEMA,
)
from cms_agent.services.agent import AgentService
from cms_agent.services.records import RecordService

logger = logging.getLogger(__name__)

DEFAULT_AGENT_TIMEOUT = 60.0
GENERIC_ERROR = "There was an unexpected error."
TIMEOUT_ERROR = "The assistant did not respond in time."

# task type -> agent and success message
DEFAULT_TASK_ROUTES: Dict[str, Dict[str, str]] = {
    "recipe": {"agent": "recipe_generator", "message": "Recipes have been created"},
    "email_campaign": {"agent": "campaign_writer", "message": "Email campaign has been sent"},
}
DEFAULT_TASK_ROUTE = "recipe"


class EntityPresaveService(PresaveHook):
    """Runs agents for task and recipe records before they are saved."""

    def __init__(
        self,
        agent_service: AgentService,
        messenger: Messenger,
        provider: str = "openai",
        model: Optional[str] = None,
        timeout: float = DEFAULT_AGENT_TIMEOUT,
        task_routes: Optional[Dict[str, Dict[str, str]]] = None,
        record_service: Optional[RecordService] = None,
    ):
        self.agent_service = agent_service
        self.messenger = messenger
        self.provider = provider
        self.model = model
        self.timeout = timeout
        self.task_routes = {**DEFAULT_TASK_ROUTES, **(task_routes or {})}
        self.record_service = record_service
        if record_service is not None:
            record_service.add_presave_hook(self.entity_presave)

    async def entity_presave(self, record: Record) -> None:
        if record.entity_type != "node":
            return

        if record.bundle == "task":
            await self._handle_task(record)
        elif record.bundle == "recipe":
            await self._handle_recipe_feedback(record)

    async def _handle_task(self, record: Record) -> None:
        description = strip_tags(record.first_value("field_task_description") or "")
        if not description:
            logger.debug(f"Task {record.id} has no description, skipping agent")
            return

        task_type = record.first_value("field_task_type") or DEFAULT_TASK_ROUTE
        route = self.task_routes.get(task_type)
        if route is None:
            logger.warning(f"No agent route for task type '{task_type}', using default")
            route = self.task_routes[DEFAULT_TASK_ROUTE]

        try:
            agent = self._prepare_agent(
                route["agent"], description, {"user_id": record.uid}
            )
            solvability = await self._determine_solvability(agent)
        except AgentFailure as e:
            logger.error(f"Task agent failed for task {record.id}: {e}")
            self._report_failure(e)
            return

        if solvability == Solvability.SOLVABLE:
            self.messenger.add_message(route.get("message", "The task has been completed"))
        else:
            logger.warning(f"Agent {route['agent']} could not solve task {record.id}: {solvability.value}")
            self.messenger.add_message(GENERIC_ERROR, NoticeLevel.ERROR)

    async def _handle_recipe_feedback(self, record: Record) -> None:
        feedback = strip_tags(record.first_value("field_editor_feedback") or "")
        if not feedback:
            return

        try:
            agent = self._prepare_agent(
                "recipe_editor", feedback, {"node": record, "user_id": record.uid}
            )
            solvability = await self._determine_solvability(agent)
            if solvability != Solvability.SOLVABLE:
                logger.warning(f"Recipe editor could not apply feedback on {record.id}: {solvability.value}")
                self.messenger.add_message(GENERIC_ERROR, NoticeLevel.ERROR)
                return
            instructions = self._proposed_instructions(
                agent.get_tool_results(flatten=True), record.id
            )
        except AgentFailure as e:
            logger.error(f"Recipe editor failed for recipe {record.id}: {e}")
            self._report_failure(e)
            return
        except Exception as e:
            logger.exception(f"Could not apply recipe editor results to {record.id}: {e}")
            self.messenger.add_message(GENERIC_ERROR, NoticeLevel.ERROR)
            return

        if instructions is not None:
            record.set(
                "field_recipe_instruction",
                formatted_text(instructions, TextFormat.FULL_HTML),
            )
            logger.info(f"Updated cooking instructions of recipe {record.id}")

    def _report_failure(self, error: AgentFailure) -> None:
        message = TIMEOUT_ERROR if isinstance(error, AgentTimeout) else GENERIC_ERROR
        self.messenger.add_message(message, NoticeLevel.ERROR)

    def _prepare_agent(
        self, name: str, text: str, bindings: Optional[Dict[str, Any]] = None
    ) -> Agent:
        try:
            agent = self.agent_service.create_agent(name)
            agent.set_context([{"role": "user", "content": text}])
            agent.set_model_config(self.provider, self.model)
            if bindings:
                agent.set_working_context(bindings)
        except Exception as e:
            raise AgentFailure(f"Could not prepare agent {name}: {e}") from e
        return agent

    async def _determine_solvability(self, agent: Agent) -> Solvability:
        try:
            return await asyncio.wait_for(agent.determine_solvability(), self.timeout)
        except asyncio.TimeoutError as e:
            raise AgentTimeout(agent.name, self.timeout) from e
        except AgentFailure:
            raise
        except Exception as e:
            raise AgentFailure(f"Agent {agent.name} failed: {e}") from e

    @staticmethod
    def _proposed_instructions(
        results: List[ToolResult], record_id: Optional[str]
    ) -> Optional[str]:
        """Pick the last successful cooking instructions proposal for the record."""
        instructions = None
        for result in results:
            if result.tool_id != UPDATE_COOKING_INSTRUCTIONS_SCHEMA.id or not result.is_success:
                continue
            payload = result.decode_payload()
            if payload.get("node_id") != record_id:
                logger.warning(
                    f"Ignoring cooking instructions for recipe {payload.get('node_id')} "
                    f"while saving {record_id}"
                )
                continue
            if payload.get("cooking_instructions") is not None:
                instructions = payload["cooking_instructions"]
        return instructions
