"""
Tests for the CmsAgent client interface.
"""
import json

import pytest
from unittest.mock import patch

from cms_agent.client.cms_agent import CmsAgent
from cms_agent.domains.errors import ErrorKind
from cms_agent.domains.records import NoticeLevel, Record

CONFIG = {
    "openai": {"api_key": "sk-test"},
    "terms": [{"id": "1", "vocabulary": "recipe_category", "name": "Main"}],
}


@pytest.fixture(autouse=True)
def mock_client():
    with patch("cms_agent.factories.agent_factory.create_openai_client") as create:
        yield create


@pytest.fixture
def cms_agent():
    return CmsAgent(config=CONFIG)


class TestCmsAgent:
    """Test suite for the CmsAgent client."""

    def test_requires_config(self):
        """Test a config or config path is required."""
        with pytest.raises(ValueError):
            CmsAgent()

    def test_json_config_file(self, tmp_path):
        """Test loading configuration from a JSON file."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps(CONFIG))

        agent = CmsAgent(config_path=str(path))
        assert agent.records.references.resolve("1", "recipe_category") is not None

    def test_python_config_file(self, tmp_path):
        """Test loading configuration from a Python file."""
        path = tmp_path / "config.py"
        path.write_text(f"config = {CONFIG!r}\n")

        agent = CmsAgent(config_path=str(path))
        assert agent.presave_service is not None

    def test_list_tools(self, cms_agent):
        """Test listing the registered tool schemas."""
        ids = {tool["id"] for tool in cms_agent.list_tools()}
        assert ids == {
            "ai_agent:create_recipe_node",
            "ai_agent:update_cooking_instructions",
            "ai_agent:create_email_campaign",
        }

    @pytest.mark.asyncio
    async def test_execute_tool(self, cms_agent):
        """Test running a tool directly."""
        result = await cms_agent.execute_tool(
            "create_recipe_node", {"title": "Soup", "recipe_category": ["1"]}, user_id="2"
        )

        assert result.is_success
        recipe = cms_agent.records.load("recipe", result.payload["node_id"])
        assert recipe.uid == "2"
        assert recipe.get("field_recipe_category") == [{"target_id": "1"}]

    @pytest.mark.asyncio
    async def test_execute_unknown_tool(self, cms_agent):
        """Test running a tool that does not exist."""
        result = await cms_agent.execute_tool("missing")
        assert result.error_kind == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_save(self, cms_agent):
        """Test saving a record the hook ignores."""
        saved = await cms_agent.save(Record(bundle="article", title="News"))

        assert saved.id is not None
        assert cms_agent.records.load("article", saved.id).title == "News"
        assert cms_agent.messages() == []

    @pytest.mark.asyncio
    async def test_execute_tool_reserved_argument_names(self, cms_agent):
        """Test arguments named like call parameters reach the tool as arguments."""
        result = await cms_agent.execute_tool(
            "create_recipe_node",
            {"title": "Soup", "user_id": "9", "context": "dinner", "tool_name": "x"},
            user_id="2",
        )

        assert result.is_success
        recipe = cms_agent.records.load("recipe", result.payload["node_id"])
        assert recipe.title == "Soup"
        assert recipe.uid == "2"

    @pytest.mark.asyncio
    async def test_save_drops_earlier_notices(self, cms_agent):
        """Test notices from a previous save are not reported for the next one."""
        messenger = cms_agent.presave_service.messenger
        messenger.add_message("There was an unexpected error.", NoticeLevel.ERROR)
        messenger.add_message("There was an unexpected error.", NoticeLevel.ERROR)

        await cms_agent.save(Record(bundle="article", title="News"))

        assert cms_agent.messages() == []
