"""Utility functions for iac-explain."""

from iac_explain.utils.logging import configure_logging, get_logger, get_logger_with_context
from iac_explain.utils.errors import (
    IacExplainError,
    ValidationError,
    ConfigurationError,
    RuleEvaluationError,
    UnknownOperationError,
    PlanNotFoundError,
)
from iac_explain.utils.accessors import (
    get_int,
    get_list,
    get_mappings,
    get_str_list,
    is_truthy,
    safe_get,
)
from iac_explain.utils.config import (
    IacExplainConfig,
    AnalysisConfig,
    RulesConfig,
    OutputConfig,
    PolicySet,
    load_config,
    save_config,
    get_default_config,
)
from iac_explain.utils.plugins import Plugin, PluginContext, PluginManager

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "get_logger_with_context",
    # Errors
    "IacExplainError",
    "ValidationError",
    "ConfigurationError",
    "RuleEvaluationError",
    "UnknownOperationError",
    "PlanNotFoundError",
    # Accessors
    "get_int",
    "get_list",
    "get_mappings",
    "get_str_list",
    "is_truthy",
    "safe_get",
    # Config
    "IacExplainConfig",
    "AnalysisConfig",
    "RulesConfig",
    "OutputConfig",
    "PolicySet",
    "load_config",
    "save_config",
    "get_default_config",
    # Plugins
    "Plugin",
    "PluginContext",
    "PluginManager",
]
