"""iac-explain: security review for infrastructure-as-code changes.

This package explains Terraform plans and Kubernetes manifests and flags the
security risks in them:

- **Plan Parser**: Validate ``terraform show -json`` output and classify changes
- **Manifest Parser**: Read multi-document YAML and JSON Kubernetes manifests
- **Rule Engine**: Register security rules and evaluate resources in isolation
- **Resource Analyzer**: Triage planned resources into coarse risk levels

Usage:
    # Library API
    from iac_explain import TerraformPlanParser, ManifestParser, create_default_engine

    engine = create_default_engine()

    # Terraform
    parser = TerraformPlanParser.from_file("plan.json")
    for resource in parser.resource_changes():
        findings = engine.evaluate_one(resource.after, resource.type, resource.name)

    # Kubernetes
    for resource in ManifestParser().parse_yaml(text):
        findings = engine.evaluate_one(resource, resource.kind, resource.name)

CLI:
    iac-explain explain-plan <workspace> [--plan plan.json] [--depth full]
    iac-explain validate-k8s <manifests-dir>
    iac-explain rules
"""

__version__ = "0.1.0"

# Core classes
from iac_explain.core.plan import TerraformPlanParser, parse_plan
from iac_explain.core.manifest import ManifestParser
from iac_explain.core.engine import RuleEngine, create_default_engine
from iac_explain.core.analyzer import ResourceAnalyzer
from iac_explain.core.operations import build_engine, dispatch, explain_plan, validate_k8s

# Models (commonly used)
from iac_explain.models.common import AuditError
from iac_explain.models.plan import ChangeAction, PlanSummary, ResourceInfo, TerraformPlan
from iac_explain.models.manifest import ClusterResource, Container
from iac_explain.models.findings import EvaluationResult, Finding, RuleCategory, Severity
from iac_explain.models.analysis import ResourceAnalysis, RiskLevel

# Rules
from iac_explain.rules import Rule, SecurityRule, default_rules

# Renderers
from iac_explain.renderers.base import Renderer, RenderContext, OutputFormat

__all__ = [
    # Version
    "__version__",
    # Core
    "TerraformPlanParser",
    "parse_plan",
    "ManifestParser",
    "RuleEngine",
    "create_default_engine",
    "ResourceAnalyzer",
    "build_engine",
    "dispatch",
    "explain_plan",
    "validate_k8s",
    # Models
    "AuditError",
    "ChangeAction",
    "PlanSummary",
    "ResourceInfo",
    "TerraformPlan",
    "ClusterResource",
    "Container",
    "EvaluationResult",
    "Finding",
    "RuleCategory",
    "Severity",
    "ResourceAnalysis",
    "RiskLevel",
    # Rules
    "Rule",
    "SecurityRule",
    "default_rules",
    # Renderers
    "Renderer",
    "RenderContext",
    "OutputFormat",
]
