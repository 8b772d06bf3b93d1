"""Core domain logic for iac-explain.

This module provides the main library API: plan and manifest parsing, the
rule engine, the resource analyzer and the host operations built on them.
"""

from iac_explain.core.plan import (
    TerraformPlanParser,
    classify_actions,
    parse_plan,
    provider_short_name,
)
from iac_explain.core.manifest import ManifestParser, extract_containers, pod_security_context
from iac_explain.core.analyzer import ResourceAnalyzer
from iac_explain.core.engine import RuleEngine, create_default_engine, run_rule
from iac_explain.core.operations import build_engine, dispatch, explain_plan, validate_k8s

__all__ = [
    # Plan
    "TerraformPlanParser",
    "classify_actions",
    "parse_plan",
    "provider_short_name",
    # Manifest
    "ManifestParser",
    "extract_containers",
    "pod_security_context",
    # Analysis
    "ResourceAnalyzer",
    # Engine
    "RuleEngine",
    "create_default_engine",
    "run_rule",
    # Operations
    "build_engine",
    "dispatch",
    "explain_plan",
    "validate_k8s",
]
