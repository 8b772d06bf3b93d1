"""Data models for iac-explain.

All models are Pydantic BaseModel with frozen=True for immutability.
"""

from iac_explain.models.common import AuditError
from iac_explain.models.plan import (
    Change,
    ChangeAction,
    PlanSummary,
    ResourceChange,
    ResourceInfo,
    TerraformPlan,
)
from iac_explain.models.manifest import (
    Capabilities,
    ClusterResource,
    Container,
    ContainerPort,
    ContainerResources,
    EnvVar,
    ManifestParseResult,
    ObjectMeta,
    PodSecurityContext,
    SecurityContext,
)
from iac_explain.models.findings import (
    EvaluationResult,
    EvaluationTarget,
    Finding,
    ResourceRef,
    RuleCategory,
    RuleContext,
    RuleOutcome,
    Severity,
    sort_by_severity,
)
from iac_explain.models.analysis import ResourceAnalysis, RiskLevel
from iac_explain.models.operations import (
    ExplainPlanInput,
    ExplainPlanOutput,
    ValidateK8sInput,
    ValidateK8sOutput,
)

__all__ = [
    # Common
    "AuditError",
    # Plan
    "Change",
    "ChangeAction",
    "PlanSummary",
    "ResourceChange",
    "ResourceInfo",
    "TerraformPlan",
    # Manifest
    "Capabilities",
    "ClusterResource",
    "Container",
    "ContainerPort",
    "ContainerResources",
    "EnvVar",
    "ManifestParseResult",
    "ObjectMeta",
    "PodSecurityContext",
    "SecurityContext",
    # Findings
    "EvaluationResult",
    "EvaluationTarget",
    "Finding",
    "ResourceRef",
    "RuleCategory",
    "RuleContext",
    "RuleOutcome",
    "Severity",
    "sort_by_severity",
    # Analysis
    "ResourceAnalysis",
    "RiskLevel",
    # Operations
    "ExplainPlanInput",
    "ExplainPlanOutput",
    "ValidateK8sInput",
    "ValidateK8sOutput",
]
