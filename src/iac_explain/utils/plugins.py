"""Plugin system for contributing rules to an engine."""

from __future__ import annotations

import importlib
import importlib.util
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from iac_explain.utils.logging import get_logger

if TYPE_CHECKING:
    from iac_explain.core.engine import RuleEngine
    from iac_explain.rules.base import Rule

logger = get_logger("plugins")


@runtime_checkable
class Plugin(Protocol):
    """Protocol for iac-explain plugins.

    To create a plugin:
    1. Create a Python module/package
    2. Implement the Plugin protocol
    3. List the module (or file path) under ``rules.plugins`` in the config

    Example:
        class MyPlugin:
            name = "my-rules"
            version = "1.0.0"

            def init(self, context: PluginContext) -> None:
                context.register_rule(BucketLoggingRule())

            def cleanup(self) -> None:
                pass
    """

    name: str
    version: str

    def init(self, context: "PluginContext") -> None:
        """Initialize the plugin.

        Args:
            context: Plugin context for registration
        """
        ...

    def cleanup(self) -> None:
        """Cleanup plugin resources."""
        ...


class PluginContext:
    """Context handed to plugins; registers into one engine."""

    def __init__(self, engine: "RuleEngine") -> None:
        self._engine = engine
        self._registered: list[str] = []

    def register_rule(self, rule: "Rule") -> None:
        """Register a rule with the engine.

        Args:
            rule: Rule implementing the Rule protocol
        """
        self._engine.register(rule)
        self._registered.append(rule.id)
        logger.debug(f"Registered rule from plugin: {rule.id}")

    @property
    def registered_rules(self) -> list[str]:
        """Ids of every rule registered through this context."""
        return list(self._registered)


class PluginManager:
    """Loads plugins that contribute rules to an engine.

    Example:
        manager = PluginManager(engine)
        manager.load_plugin("my_company.iac_rules")
        manager.load_plugin_from_path("./rules/extra.py")
    """

    def __init__(self, engine: "RuleEngine") -> None:
        self._plugins: dict[str, Plugin] = {}
        self._context = PluginContext(engine)

    @property
    def context(self) -> PluginContext:
        return self._context

    def load(self, reference: str) -> None:
        """Load a plugin from a ``.py`` path or a module name."""
        if reference.endswith(".py"):
            self.load_plugin_from_path(reference)
        else:
            self.load_plugin(reference)

    def load_plugin(self, module_name: str) -> None:
        """Load a plugin by module name.

        Raises:
            ImportError: If module cannot be imported
            ValueError: If module doesn't provide a plugin
        """
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ImportError(f"Failed to import plugin module '{module_name}': {e}") from e

        self._register_module_plugin(module, module_name)

    def load_plugin_from_path(self, path: Path | str) -> None:
        """Load a plugin from a file path.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file doesn't provide a plugin
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Plugin file not found: {path}")

        module_name = f"iac_explain_plugin_{path.stem}"

        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ValueError(f"Cannot load plugin from: {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)

        self._register_module_plugin(module, str(path))

    def _register_module_plugin(self, module: Any, source: str) -> None:
        """Find, initialize and record the plugin exported by a module."""
        plugin: Plugin | None = None

        if hasattr(module, "plugin"):
            plugin = module.plugin
        elif hasattr(module, "Plugin"):
            plugin = module.Plugin()

        if plugin is None:
            raise ValueError(
                f"No plugin found in '{source}'. "
                "Module must export a 'plugin' instance or a 'Plugin' class."
            )

        if not hasattr(plugin, "name") or not hasattr(plugin, "version"):
            raise ValueError(f"Plugin from '{source}' missing required 'name' or 'version'")

        if plugin.name in self._plugins:
            raise ValueError(f"Plugin '{plugin.name}' is already loaded")

        plugin.init(self._context)
        self._plugins[plugin.name] = plugin
        logger.info(f"Loaded plugin: {plugin.name} v{plugin.version}")

    def unload_plugin(self, name: str) -> None:
        """Unload a plugin by name. Its rules stay registered.

        Raises:
            KeyError: If plugin is not loaded
        """
        if name not in self._plugins:
            raise KeyError(f"Plugin '{name}' is not loaded")

        plugin = self._plugins.pop(name)
        plugin.cleanup()
        logger.info(f"Unloaded plugin: {name}")

    def get_plugin(self, name: str) -> Plugin | None:
        return self._plugins.get(name)

    @property
    def loaded_plugins(self) -> list[str]:
        return list(self._plugins.keys())
