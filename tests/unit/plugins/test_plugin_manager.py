"""
Tests for the PluginManager implementation.

This module covers plugin loading, registration, configuration and
tool execution, including the conversion of failures into error results.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from cms_agent.domains.agents import ToolContext
from cms_agent.domains.errors import ErrorKind
from cms_agent.domains.tools import ToolResult
from cms_agent.interfaces.plugins.plugins import Plugin
from cms_agent.plugins.manager import ENTRY_POINT_GROUP, PluginManager
from cms_agent.plugins.registry import ToolRegistry


@pytest.fixture
def mock_plugin():
    """Create a mock plugin."""
    plugin = MagicMock(spec=Plugin)
    plugin.name = "test_plugin"
    plugin.description = "Test plugin description"
    return plugin


@pytest.fixture
def mock_tool_registry():
    """Create a mock tool registry with proper mock methods."""
    registry = MagicMock(spec=ToolRegistry)
    registry.get_tool = MagicMock(return_value=None)
    registry.configure_all_tools = MagicMock()
    return registry


@pytest.fixture
def context():
    """A tool context with a mocked record service."""
    return ToolContext(records=MagicMock(), user_id="1")


@pytest.fixture(autouse=True)
def reset_entry_points():
    """Clear the class level record of loaded entry points."""
    PluginManager._loaded_entry_points = set()
    yield
    PluginManager._loaded_entry_points = set()


class TestPluginManager:
    """Test suite for PluginManager."""

    def test_init_default(self):
        """Test initialization with default values."""
        manager = PluginManager()
        assert isinstance(manager.tool_registry, ToolRegistry)
        assert manager.config == {}
        assert manager._plugins == {}

    def test_register_plugin_success(self, mock_plugin, mock_tool_registry):
        """Test successful plugin registration."""
        manager = PluginManager(config={"a": 1}, tool_registry=mock_tool_registry)
        assert manager.register_plugin(mock_plugin) is True
        mock_plugin.initialize.assert_called_once_with(mock_tool_registry)
        mock_plugin.configure.assert_called_once_with({"a": 1})
        assert manager.get_plugin("test_plugin") is mock_plugin

    def test_register_plugin_failure(self, mock_plugin, mock_tool_registry):
        """Test plugin registration failure."""
        mock_plugin.initialize.side_effect = RuntimeError("broken")
        manager = PluginManager(tool_registry=mock_tool_registry)
        assert manager.register_plugin(mock_plugin) is False
        assert manager.get_plugin("test_plugin") is None

    def test_list_plugins(self, mock_plugin, mock_tool_registry):
        """Test listing registered plugins."""
        manager = PluginManager(tool_registry=mock_tool_registry)
        manager.register_plugin(mock_plugin)
        assert manager.list_plugins() == [
            {"name": "test_plugin", "description": "Test plugin description"}
        ]

    @patch("cms_agent.plugins.manager.importlib.metadata.entry_points")
    def test_load_plugins(self, mock_entry_points, mock_plugin, mock_tool_registry):
        """Test loading plugins from entry points."""
        entry_point = MagicMock()
        entry_point.name = "test_plugin"
        entry_point.value = "pkg.module:TestPlugin"
        entry_point.load.return_value = MagicMock(return_value=mock_plugin)
        mock_entry_points.return_value = [entry_point]

        manager = PluginManager(tool_registry=mock_tool_registry)
        assert manager.load_plugins() == ["test_plugin"]
        mock_entry_points.assert_called_once_with(group=ENTRY_POINT_GROUP)

    @patch("cms_agent.plugins.manager.importlib.metadata.entry_points")
    def test_load_plugins_skips_loaded(self, mock_entry_points, mock_plugin, mock_tool_registry):
        """Test an entry point is only loaded once."""
        entry_point = MagicMock()
        entry_point.name = "test_plugin"
        entry_point.value = "pkg.module:TestPlugin"
        entry_point.load.return_value = MagicMock(return_value=mock_plugin)
        mock_entry_points.return_value = [entry_point]

        PluginManager(tool_registry=mock_tool_registry).load_plugins()
        assert PluginManager(tool_registry=mock_tool_registry).load_plugins() == []
        entry_point.load.assert_called_once()

    @patch("cms_agent.plugins.manager.importlib.metadata.entry_points")
    def test_load_plugins_error(self, mock_entry_points, mock_tool_registry):
        """Test a failing entry point is logged and skipped."""
        entry_point = MagicMock()
        entry_point.name = "broken"
        entry_point.value = "pkg.module:Broken"
        entry_point.load.side_effect = ImportError("missing")
        mock_entry_points.return_value = [entry_point]

        manager = PluginManager(tool_registry=mock_tool_registry)
        assert manager.load_plugins() == []

    def test_configure(self, mock_plugin, mock_tool_registry):
        """Test configuring the manager and its plugins."""
        manager = PluginManager(tool_registry=mock_tool_registry)
        manager.register_plugin(mock_plugin)
        mock_plugin.configure.reset_mock()

        manager.configure({"new": "value"})
        assert manager.config == {"new": "value"}
        mock_tool_registry.configure_all_tools.assert_called_once_with({"new": "value"})
        mock_plugin.configure.assert_called_once_with({"new": "value"})

    @pytest.mark.asyncio
    async def test_execute_tool_success(self, mock_tool_registry, context):
        """Test executing a tool passes raw arguments and the context."""
        tool = MagicMock()
        tool.run = AsyncMock(return_value=ToolResult.success("ok"))
        mock_tool_registry.get_tool.return_value = tool

        manager = PluginManager(tool_registry=mock_tool_registry)
        result = await manager.execute_tool("echo", context, {"text": "hi"})

        assert result.is_success
        tool.run.assert_awaited_once_with({"text": "hi"}, context)

    @pytest.mark.asyncio
    async def test_execute_tool_reserved_argument_names(self, mock_tool_registry, context):
        """Test arguments sharing a name with call parameters are passed through."""
        tool = MagicMock()
        tool.run = AsyncMock(return_value=ToolResult.success("ok"))
        mock_tool_registry.get_tool.return_value = tool
        arguments = {"context": "dinner", "tool_name": "soup", "user_id": "3"}

        manager = PluginManager(tool_registry=mock_tool_registry)
        result = await manager.execute_tool("echo", context, arguments)

        assert result.is_success
        tool.run.assert_awaited_once_with(arguments, context)

    @pytest.mark.asyncio
    async def test_execute_tool_without_arguments(self, mock_tool_registry, context):
        """Test omitted arguments reach the tool as an empty dict."""
        tool = MagicMock()
        tool.run = AsyncMock(return_value=ToolResult.success("ok"))
        mock_tool_registry.get_tool.return_value = tool

        await PluginManager(tool_registry=mock_tool_registry).execute_tool("echo", context)

        tool.run.assert_awaited_once_with({}, context)

    @pytest.mark.asyncio
    async def test_execute_tool_not_found(self, mock_tool_registry, context):
        """Test executing a tool that doesn't exist."""
        manager = PluginManager(tool_registry=mock_tool_registry)
        result = await manager.execute_tool("missing", context)

        assert not result.is_success
        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.message == "Tool missing not found"

    @pytest.mark.asyncio
    async def test_execute_tool_exception(self, mock_tool_registry, context):
        """Test an exception escaping a tool becomes an error result."""
        tool = MagicMock()
        tool.name = "echo"
        tool.id = "test:echo"
        tool.run = AsyncMock(side_effect=RuntimeError("exploded"))
        mock_tool_registry.get_tool.return_value = tool

        manager = PluginManager(tool_registry=mock_tool_registry)
        result = await manager.execute_tool("echo", context)

        assert not result.is_success
        assert result.error_kind == ErrorKind.EXECUTION
        assert result.message == "exploded"
        assert result.tool_id == "test:echo"
