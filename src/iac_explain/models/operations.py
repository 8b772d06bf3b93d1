"""Input and output models for the host-facing operations."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from iac_explain.models.analysis import ResourceAnalysis
from iac_explain.models.common import AuditError
from iac_explain.models.findings import Finding
from iac_explain.models.plan import ResourceInfo

CloudProvider = Literal["aws", "gcp", "azure"]
AnalysisDepth = Literal["fast", "full"]

_WIRE_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ExplainPlanInput(BaseModel):
    """Arguments of the ``explainPlan`` operation."""

    model_config = _WIRE_CONFIG

    workspace: str = Field(min_length=1, description="Terraform workspace directory")
    plan_path: str | None = Field(default=None, description="Plan JSON file")
    cloud: CloudProvider | None = Field(default=None, description="Restrict to one cloud")
    policy_set: str | None = Field(default=None, description="Named policy set from config")
    depth: AnalysisDepth = Field(default="fast", description="Analysis depth")


class ExplainPlanOutput(BaseModel):
    """Result of the ``explainPlan`` operation."""

    model_config = _WIRE_CONFIG

    summary: str
    terraform_version: str
    adds: int = 0
    changes: int = 0
    destroys: int = 0
    resources: list[ResourceInfo] = Field(default_factory=list)
    risks: list[Finding] = Field(default_factory=list)
    analyses: list[ResourceAnalysis] = Field(default_factory=list)
    errors: list[AuditError] = Field(default_factory=list)
    evidence_md: str = ""


class ValidateK8sInput(BaseModel):
    """Arguments of the ``validateK8s`` operation."""

    model_config = _WIRE_CONFIG

    manifests_dir: str | None = Field(default=None, description="Directory of manifests")
    helm_chart: str | None = Field(default=None, description="Helm chart directory")
    values: list[str] | None = Field(default=None, description="Extra Helm values files")


class ValidateK8sOutput(BaseModel):
    """Result of the ``validateK8s`` operation."""

    model_config = _WIRE_CONFIG

    findings: list[Finding] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list, description="Files that were read")
    resources_scanned: int = 0
    errors: list[AuditError] = Field(default_factory=list)
    report_md: str = ""
