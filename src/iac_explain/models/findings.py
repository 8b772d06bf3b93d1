"""Rule, finding and evaluation result models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from iac_explain.models.common import AuditError


class Severity(str, Enum):
    """Severity of a rule finding, ranked low < med < high < crit."""

    LOW = "low"
    MED = "med"
    HIGH = "high"
    CRIT = "crit"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [Severity.LOW, Severity.MED, Severity.HIGH, Severity.CRIT]


class RuleCategory(str, Enum):
    """Category of a security rule."""

    SECURITY = "security"
    COMPLIANCE = "compliance"
    BEST_PRACTICE = "best-practice"
    PERFORMANCE = "performance"


class ResourceRef(BaseModel):
    """Reference to the resource a finding is about."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    type: str = Field(description="Resource type or kind")
    name: str = Field(description="Resource name")
    path: str | None = Field(default=None, description="Address or file location")


class Finding(BaseModel):
    """A single rule match against a single resource."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    rule_id: str = Field(description="Id of the rule that matched")
    severity: Severity = Field(description="Finding severity")
    title: str = Field(description="Short title")
    description: str = Field(description="What was found")
    resource: ResourceRef | None = Field(default=None, description="Affected resource")
    evidence: str | None = Field(default=None, description="Concrete evidence")
    recommendation: str = Field(description="How to fix it")
    references: list[str] | None = Field(default=None, description="Reference URLs")


class RuleContext(BaseModel):
    """Read-only input handed to a rule's ``evaluate``."""

    model_config = {"frozen": True}

    resource: Any = Field(description="Resource payload (plan state or ClusterResource)")
    resource_type: str = Field(description="Resource type or kind")
    resource_name: str = Field(description="Resource name")
    resource_path: str | None = Field(default=None, description="Address or file location")


class EvaluationTarget(BaseModel):
    """One item of a batch evaluation."""

    model_config = {"frozen": True}

    resource: Any
    resource_type: str
    resource_name: str
    resource_path: str | None = None


class RuleOutcome(BaseModel):
    """Result of running one rule: a finding, nothing, or an error."""

    model_config = {"frozen": True}

    rule_id: str
    finding: Finding | None = None
    error: AuditError | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def matched(cls, rule_id: str, finding: Finding) -> "RuleOutcome":
        return cls(rule_id=rule_id, finding=finding)

    @classmethod
    def clean(cls, rule_id: str) -> "RuleOutcome":
        return cls(rule_id=rule_id)

    @classmethod
    def fail(cls, rule_id: str, error: AuditError) -> "RuleOutcome":
        return cls(rule_id=rule_id, error=error)


class EvaluationResult(BaseModel):
    """Findings and rule failures collected from an evaluation pass."""

    model_config = {"frozen": True}

    findings: list[Finding] = Field(default_factory=list)
    errors: list[AuditError] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        """True when no rule failed."""
        return not self.errors

    def findings_by_rule(self, rule_id: str) -> list[Finding]:
        """Get findings for a specific rule."""
        return [f for f in self.findings if f.rule_id == rule_id]


def sort_by_severity(findings: list[Finding]) -> list[Finding]:
    """Order findings most severe first, keeping evaluation order within a severity."""
    return sorted(findings, key=lambda f: f.severity.rank, reverse=True)
