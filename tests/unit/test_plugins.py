"""Unit tests for the plugin system."""

import sys
import types

import pytest

from iac_explain.core.engine import RuleEngine
from iac_explain.models.findings import Severity
from iac_explain.rules.base import SecurityRule
from iac_explain.utils.plugins import Plugin, PluginContext, PluginManager


class BucketLoggingRule(SecurityRule):
    id = "ACME_S3_LOGGING"
    title = "S3 bucket access logging disabled"
    severity = Severity.LOW
    provider = "aws"
    resource_types = ("aws_s3_bucket",)

    def evaluate(self, context):
        if context.resource.get("logging"):
            return None
        return self.finding(
            context,
            description="Bucket does not record access logs.",
            recommendation="Configure a logging target bucket.",
        )


class MockPlugin:
    """Mock plugin for testing."""

    name = "mock-plugin"
    version = "1.0.0"

    def __init__(self):
        self.initialized = False
        self.cleaned_up = False
        self.context = None

    def init(self, context):
        self.initialized = True
        self.context = context
        context.register_rule(BucketLoggingRule())

    def cleanup(self):
        self.cleaned_up = True


def plugin_module(name="test_module", **attributes):
    module = types.ModuleType(name)
    for key, value in attributes.items():
        setattr(module, key, value)
    return module


class TestPluginContext:
    """Tests for PluginContext."""

    def test_register_rule(self):
        """Test that registering through the context reaches the engine."""
        engine = RuleEngine()
        context = PluginContext(engine)

        context.register_rule(BucketLoggingRule())

        assert "ACME_S3_LOGGING" in engine
        assert context.registered_rules == ["ACME_S3_LOGGING"]

    def test_registered_rules_is_a_copy(self):
        context = PluginContext(RuleEngine())
        context.registered_rules.append("X")
        assert context.registered_rules == []


class TestPluginManager:
    """Tests for PluginManager."""

    @pytest.fixture
    def engine(self):
        return RuleEngine()

    @pytest.fixture
    def manager(self, engine):
        return PluginManager(engine)

    def test_loaded_plugins_initially_empty(self, manager):
        assert manager.loaded_plugins == []
        assert isinstance(manager.context, PluginContext)

    def test_register_plugin_instance(self, manager, engine):
        plugin = MockPlugin()

        manager._register_module_plugin(plugin_module(plugin=plugin), "test_module")

        assert manager.loaded_plugins == ["mock-plugin"]
        assert manager.get_plugin("mock-plugin") is plugin
        assert plugin.initialized
        assert plugin.context is manager.context
        assert engine.rule_ids == ["ACME_S3_LOGGING"]

    def test_register_plugin_class(self, manager):
        manager._register_module_plugin(plugin_module(Plugin=MockPlugin), "test_module")
        assert "mock-plugin" in manager.loaded_plugins

    def test_plugin_rule_evaluates(self, manager, engine):
        """Test that a plugin rule takes part in evaluation like a built-in one."""
        manager._register_module_plugin(plugin_module(plugin=MockPlugin()), "test_module")

        findings = engine.evaluate_one({"bucket": "logs"}, "aws_s3_bucket", "logs")

        assert [f.rule_id for f in findings] == ["ACME_S3_LOGGING"]

    def test_load_module_by_name(self, manager, monkeypatch):
        monkeypatch.setitem(
            sys.modules, "acme_iac_rules", plugin_module("acme_iac_rules", plugin=MockPlugin())
        )

        manager.load("acme_iac_rules")

        assert manager.loaded_plugins == ["mock-plugin"]

    def test_load_missing_module(self, manager):
        with pytest.raises(ImportError, match="Failed to import plugin module"):
            manager.load_plugin("definitely_not_a_module_xyz")

    def test_duplicate_plugin_raises(self, manager):
        manager._register_module_plugin(plugin_module(plugin=MockPlugin()), "one")

        with pytest.raises(ValueError, match="already loaded"):
            manager._register_module_plugin(plugin_module(plugin=MockPlugin()), "two")

    def test_module_without_plugin_raises(self, manager):
        with pytest.raises(ValueError, match="No plugin found"):
            manager._register_module_plugin(plugin_module("empty_module"), "empty_module")

    def test_plugin_missing_name_raises(self, manager):
        class InvalidPlugin:
            version = "1.0.0"

            def init(self, context):
                pass

            def cleanup(self):
                pass

        with pytest.raises(ValueError, match="missing required"):
            manager._register_module_plugin(plugin_module(plugin=InvalidPlugin()), "test_module")

    def test_unload_plugin(self, manager, engine):
        """Test that unloading cleans the plugin up but keeps its rules."""
        plugin = MockPlugin()
        manager._register_module_plugin(plugin_module(plugin=plugin), "test_module")

        manager.unload_plugin("mock-plugin")

        assert manager.loaded_plugins == []
        assert plugin.cleaned_up
        assert "ACME_S3_LOGGING" in engine

    def test_unload_nonexistent_plugin_raises(self, manager):
        with pytest.raises(KeyError, match="not loaded"):
            manager.unload_plugin("nonexistent")

    def test_get_plugin_nonexistent(self, manager):
        assert manager.get_plugin("nonexistent") is None

    def test_load_plugin_from_path(self, manager, engine, tmp_path):
        plugin_file = tmp_path / "extra_rules.py"
        plugin_file.write_text(
            '''
from iac_explain.models.findings import Severity
from iac_explain.rules.base import SecurityRule


class DynamoEncryptionRule(SecurityRule):
    id = "ACME_DYNAMO_SSE"
    title = "DynamoDB table without encryption"
    severity = Severity.MED
    resource_types = ("aws_dynamodb_table",)

    def evaluate(self, context):
        return None


class Plugin:
    name = "file-plugin"
    version = "0.2.0"

    def init(self, context):
        context.register_rule(DynamoEncryptionRule())

    def cleanup(self):
        pass
'''
        )

        manager.load(str(plugin_file))

        assert manager.loaded_plugins == ["file-plugin"]
        assert "ACME_DYNAMO_SSE" in engine

    def test_load_plugin_from_path_not_found(self, manager, tmp_path):
        with pytest.raises(FileNotFoundError):
            manager.load(str(tmp_path / "nonexistent.py"))


class TestPluginProtocol:
    """Tests for the Plugin protocol."""

    def test_mock_plugin_implements_protocol(self):
        assert isinstance(MockPlugin(), Plugin)
