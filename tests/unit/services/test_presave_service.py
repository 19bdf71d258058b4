"""
Tests for the EntityPresaveService.

The agents here are scripted: each script drives the real tools through the
AgentService, so the full save path runs from the hook to the stored record.
"""
import asyncio

import pytest

from cms_agent.adapters.memory_store import (
    InMemoryRecordAccessor,
    InMemoryReferenceResolver,
)
from cms_agent.adapters.messenger import MessengerAdapter
from cms_agent.domains.agents import Solvability, ToolContext
from cms_agent.domains.records import NoticeLevel, Record, Reference
from cms_agent.domains.tools import ToolResult
from cms_agent.interfaces.providers.agent import Agent
from cms_agent.plugins.tools.update_cooking_instructions import (
    UPDATE_COOKING_INSTRUCTIONS_SCHEMA,
)
from cms_agent.plugins.workshop import RecipeWorkshopPlugin
from cms_agent.services.agent import AgentService
from cms_agent.services.presave import (
    GENERIC_ERROR,
    TIMEOUT_ERROR,
    EntityPresaveService,
)
from cms_agent.services.records import RecordService


class ScriptedAgent(Agent):
    """Agent whose run is a test-supplied coroutine."""

    def __init__(self, profile, agent_service, records, script):
        self.profile = profile
        self.agent_service = agent_service
        self.records = records
        self.script = script
        self.messages = []
        self.bindings = {}
        self.provider = None
        self.model = None
        self.results = []

    @property
    def name(self):
        return self.profile.name

    def set_context(self, messages):
        self.messages = messages

    def set_model_config(self, provider, model=None):
        self.provider = provider
        self.model = model

    def set_working_context(self, bindings):
        self.bindings = bindings

    async def determine_solvability(self):
        return await self.script(self)

    def get_tool_results(self, flatten=True):
        return list(self.results)

    async def call(self, tool_name, **params):
        context = ToolContext(
            records=self.records,
            references=self.records.references,
            user_id=self.bindings.get("user_id"),
            bindings=self.bindings,
        )
        result = await self.agent_service.execute_tool(self.name, tool_name, params, context)
        self.results.append(result)
        return result


@pytest.fixture
def accessor():
    return InMemoryRecordAccessor(base_url="https://cms.test")


@pytest.fixture
def records(accessor):
    resolver = InMemoryReferenceResolver([Reference(id="1", vocabulary="recipe_category")])
    return RecordService(accessor, references=resolver)


@pytest.fixture
def scripts():
    """Agent name -> coroutine run as the agent."""
    return {}


@pytest.fixture
def created_agents():
    return []


@pytest.fixture
def agent_service(records, scripts, created_agents):
    def factory(profile, service):
        agent = ScriptedAgent(profile, service, records, scripts[profile.name])
        created_agents.append(agent)
        return agent

    service = AgentService(agent_factory=factory)
    service.plugin_manager.register_plugin(RecipeWorkshopPlugin())
    service.register_ai_agent(
        "recipe_generator", "Create recipes from tasks.", tools=["create_recipe_node"]
    )
    service.register_ai_agent(
        "recipe_editor", "Edit recipes from feedback.", tools=["update_cooking_instructions"]
    )
    service.register_ai_agent(
        "campaign_writer", "Write email campaigns.", tools=["create_email_campaign"]
    )
    return service


@pytest.fixture
def presave(agent_service, records):
    return EntityPresaveService(
        agent_service=agent_service,
        messenger=MessengerAdapter(),
        model="gpt-test",
        timeout=0.2,
        record_service=records,
    )


@pytest.fixture
def recipe(accessor):
    """A stored recipe with instructions."""
    return accessor.save(
        Record(
            bundle="recipe",
            title="Rice",
            uid="8",
            fields={"field_recipe_instruction": {"value": "<p>Cook.</p>", "format": "full_html"}},
        )
    )


def task(description, task_type=None, uid="8"):
    fields = {"field_task_description": [{"value": description, "format": "basic_html"}]}
    if task_type:
        fields["field_task_type"] = task_type
    return Record(bundle="task", title="Task", uid=uid, fields=fields)


def solvable_after(*calls):
    async def script(agent):
        for tool_name, params in calls:
            await agent.call(tool_name, **params(agent))
        return Solvability.SOLVABLE

    return script


def returns(verdict):
    async def script(agent):
        return verdict

    return script


class TestRecipeFeedback:
    """Test suite for the recipe feedback branch."""

    @pytest.mark.asyncio
    async def test_instructions_replaced(self, presave, records, recipe, scripts, created_agents):
        """Test the proposed instructions are stored with the save."""
        scripts["recipe_editor"] = solvable_after(
            (
                "update_cooking_instructions",
                lambda a: {"node_id": a.bindings["node"].id, "cooking_instructions": "<p>Boil.</p>"},
            )
        )
        recipe.set("field_editor_feedback", "<p>Make it simpler</p>")

        await records.save(recipe)

        stored = records.load("recipe", recipe.id)
        assert stored.get("field_recipe_instruction") == {
            "value": "<p>Boil.</p>",
            "format": "full_html",
        }
        assert presave.messenger.messages() == []

        agent = created_agents[0]
        assert agent.messages == [{"role": "user", "content": "Make it simpler"}]
        assert agent.bindings == {"node": recipe, "user_id": "8"}
        assert agent.provider == "openai"
        assert agent.model == "gpt-test"

    @pytest.mark.asyncio
    async def test_last_successful_proposal_wins(self, presave, records, recipe, scripts):
        """Test later proposals override earlier ones and failures are ignored."""
        scripts["recipe_editor"] = solvable_after(
            ("update_cooking_instructions", lambda a: {"node_id": a.bindings["node"].id, "cooking_instructions": "<p>A</p>"}),
            ("update_cooking_instructions", lambda a: {"node_id": a.bindings["node"].id, "cooking_instructions": "<p>B</p>"}),
            ("update_cooking_instructions", lambda a: {"node_id": "999", "cooking_instructions": "<p>C</p>"}),
        )
        recipe.set("field_editor_feedback", "Shorter please")

        await records.save(recipe)

        assert records.load("recipe", recipe.id).get("field_recipe_instruction")["value"] == "<p>B</p>"

    @pytest.mark.asyncio
    async def test_proposal_for_other_recipe_ignored(self, presave, records, recipe, scripts, accessor):
        """Test instructions proposed for another recipe are not applied."""
        other = accessor.save(Record(bundle="recipe", title="Pasta", uid="8"))
        scripts["recipe_editor"] = solvable_after(
            ("update_cooking_instructions", lambda a: {"node_id": a.bindings["node"].id, "cooking_instructions": "<p>Mine.</p>"}),
            ("update_cooking_instructions", lambda a: {"node_id": other.id, "cooking_instructions": "<p>Pasta.</p>"}),
        )
        recipe.set("field_editor_feedback", "Shorter please")

        await records.save(recipe)

        assert records.load("recipe", recipe.id).get("field_recipe_instruction")["value"] == "<p>Mine.</p>"
        assert accessor.load("recipe", other.id).get("field_recipe_instruction") is None

    @pytest.mark.asyncio
    async def test_proposal_without_instructions(self, presave, records, recipe, scripts):
        """Test a proposal without instructions leaves the field alone."""
        scripts["recipe_editor"] = solvable_after(
            ("update_cooking_instructions", lambda a: {"node_id": a.bindings["node"].id}),
        )
        recipe.set("field_editor_feedback", "Looks fine")

        await records.save(recipe)

        assert records.load("recipe", recipe.id).get("field_recipe_instruction")["value"] == "<p>Cook.</p>"

    @pytest.mark.asyncio
    async def test_unassigned_tool_has_no_effect(self, presave, records, recipe, scripts, accessor):
        """Test the editor cannot create recipes."""
        scripts["recipe_editor"] = solvable_after(
            ("create_recipe_node", lambda a: {"title": "Sneaky"}),
        )
        recipe.set("field_editor_feedback", "Add a new recipe")

        await records.save(recipe)

        assert accessor.count("recipe") == 1
        assert records.load("recipe", recipe.id).get("field_recipe_instruction")["value"] == "<p>Cook.</p>"

    @pytest.mark.asyncio
    async def test_not_solvable(self, presave, records, recipe, scripts):
        """Test an unsolvable request reports an error and still saves."""
        scripts["recipe_editor"] = returns(Solvability.NOT_SOLVABLE)
        recipe.set("field_editor_feedback", "Translate to Klingon")

        await records.save(recipe)

        notices = presave.messenger.messages()
        assert [(n.message, n.level) for n in notices] == [(GENERIC_ERROR, NoticeLevel.ERROR)]
        stored = records.load("recipe", recipe.id)
        assert stored.get("field_editor_feedback") == "Translate to Klingon"
        assert stored.get("field_recipe_instruction")["value"] == "<p>Cook.</p>"

    @pytest.mark.asyncio
    async def test_needs_answers(self, presave, records, recipe, scripts):
        """Test a request for more answers counts as not solved."""
        scripts["recipe_editor"] = returns(Solvability.NEEDS_ANSWERS)
        recipe.set("field_editor_feedback", "Change it")

        await records.save(recipe)

        assert presave.messenger.messages()[0].message == GENERIC_ERROR

    @pytest.mark.asyncio
    async def test_timeout(self, presave, records, recipe, scripts):
        """Test a slow agent reports a timeout and the save goes through."""

        async def slow(agent):
            await asyncio.sleep(5)
            return Solvability.SOLVABLE

        scripts["recipe_editor"] = slow
        recipe.set("field_editor_feedback", "Take your time")

        await records.save(recipe)

        notices = presave.messenger.messages()
        assert [(n.message, n.level) for n in notices] == [(TIMEOUT_ERROR, NoticeLevel.ERROR)]
        assert records.load("recipe", recipe.id).get("field_editor_feedback") == "Take your time"

    @pytest.mark.asyncio
    async def test_agent_exception(self, presave, records, recipe, scripts):
        """Test an agent crash is reported and the save goes through."""

        async def crash(agent):
            raise RuntimeError("provider down")

        scripts["recipe_editor"] = crash
        recipe.set("field_editor_feedback", "Anything")

        saved = await records.save(recipe)

        assert presave.messenger.messages()[0].message == GENERIC_ERROR
        assert records.load("recipe", saved.id) is not None

    @pytest.mark.asyncio
    async def test_undecodable_payload(self, presave, records, recipe, scripts):
        """Test a malformed proposal is reported without touching the record."""

        async def malformed(agent):
            agent.results.append(
                ToolResult.success(
                    "ok", payload="not json", tool_id=UPDATE_COOKING_INSTRUCTIONS_SCHEMA.id
                )
            )
            return Solvability.SOLVABLE

        scripts["recipe_editor"] = malformed
        recipe.set("field_editor_feedback", "Anything")

        await records.save(recipe)

        assert presave.messenger.messages()[0].message == GENERIC_ERROR
        assert records.load("recipe", recipe.id).get("field_recipe_instruction")["value"] == "<p>Cook.</p>"

    @pytest.mark.asyncio
    async def test_empty_feedback(self, presave, records, recipe, created_agents):
        """Test empty feedback does not start an agent."""
        recipe.set("field_editor_feedback", "<p> </p>")

        await records.save(recipe)

        assert created_agents == []
        assert presave.messenger.messages() == []


class TestTasks:
    """Test suite for the task branch."""

    @pytest.mark.asyncio
    async def test_recipe_task(self, presave, records, accessor, scripts, created_agents):
        """Test a recipe task creates recipes and reports success."""
        scripts["recipe_generator"] = solvable_after(
            ("create_recipe_node", lambda a: {"title": "Soup", "recipe_category": ["1"]}),
        )

        await records.save(task("<p>Create a <b>soup</b> recipe</p>"))

        assert accessor.count("recipe") == 1
        assert accessor.count("task") == 1
        assert [(n.message, n.level) for n in presave.messenger.messages()] == [
            ("Recipes have been created", NoticeLevel.STATUS)
        ]
        agent = created_agents[0]
        assert agent.messages == [{"role": "user", "content": "Create a soup recipe"}]
        assert agent.bindings == {"user_id": "8"}
        recipe = [r for r in accessor._records.values() if r.bundle == "recipe"][0]
        assert recipe.uid == "8"

    @pytest.mark.asyncio
    async def test_email_campaign_task(self, presave, records, accessor, scripts):
        """Test campaign tasks are routed to the campaign writer."""
        scripts["campaign_writer"] = solvable_after(
            ("create_email_campaign", lambda a: {"subject": "Soups", "mail_body": "<p>Hi</p>"}),
        )

        await records.save(task("Send a campaign about soups", task_type="email_campaign"))

        assert accessor.count("email_campaign") == 1
        assert presave.messenger.messages()[0].message == "Email campaign has been sent"

    @pytest.mark.asyncio
    async def test_unknown_task_type_uses_default(self, presave, records, scripts, created_agents):
        """Test an unknown task type falls back to the recipe route."""
        scripts["recipe_generator"] = returns(Solvability.SOLVABLE)

        await records.save(task("Do something", task_type="podcast"))

        assert created_agents[0].name == "recipe_generator"

    @pytest.mark.asyncio
    async def test_task_not_solvable(self, presave, records, scripts):
        """Test an unsolvable task reports an error."""
        scripts["recipe_generator"] = returns(Solvability.NOT_SOLVABLE)

        await records.save(task("Make me a sandwich"))

        assert [(n.message, n.level) for n in presave.messenger.messages()] == [
            (GENERIC_ERROR, NoticeLevel.ERROR)
        ]

    @pytest.mark.asyncio
    async def test_task_timeout(self, presave, records, accessor, scripts):
        """Test a task agent timing out."""

        async def slow(agent):
            await asyncio.sleep(5)

        scripts["recipe_generator"] = slow

        await records.save(task("Create a recipe"))

        assert presave.messenger.messages()[0].message == TIMEOUT_ERROR
        assert accessor.count("task") == 1

    @pytest.mark.asyncio
    async def test_empty_description(self, presave, records, created_agents):
        """Test a task without description does not start an agent."""
        await records.save(task(""))

        assert created_agents == []
        assert presave.messenger.messages() == []

    @pytest.mark.asyncio
    async def test_unregistered_agent(self, agent_service, records, scripts):
        """Test a route to an unknown agent is reported as an error."""
        presave = EntityPresaveService(
            agent_service=agent_service,
            messenger=MessengerAdapter(),
            task_routes={"podcast": {"agent": "podcaster", "message": "Done"}},
            record_service=records,
        )

        await records.save(task("Record a podcast", task_type="podcast"))

        assert presave.messenger.messages()[0].message == GENERIC_ERROR


class TestOtherRecords:
    """Test suite for records the hook ignores."""

    @pytest.mark.asyncio
    async def test_non_node_entity(self, presave, records, created_agents):
        """Test records that are not nodes are ignored."""
        record = task("Create a recipe")
        record.entity_type = "comment"

        await records.save(record)

        assert created_agents == []

    @pytest.mark.asyncio
    async def test_other_bundle(self, presave, records, created_agents):
        """Test other node kinds are ignored."""
        await records.save(
            Record(bundle="article", fields={"field_editor_feedback": "Rewrite"})
        )

        assert created_agents == []

    def test_registers_on_record_service(self, presave, records):
        """Test the hook registers itself with the record service."""
        assert presave.entity_presave in records._presave_hooks
