"""Resource risk analysis models."""

from enum import Enum

from pydantic import BaseModel, Field

from iac_explain.models.plan import ResourceInfo


class RiskLevel(str, Enum):
    """Coarse triage level from the resource analyzer.

    Kept separate from :class:`~iac_explain.models.findings.Severity`; the two
    scales are not interchangeable.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _RISK_ORDER.index(self)


_RISK_ORDER = [RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL]


class ResourceAnalysis(BaseModel):
    """Heuristic risk assessment of one plan resource."""

    model_config = {"frozen": True}

    resource: ResourceInfo = Field(description="The analyzed resource")
    concerns: list[str] = Field(default_factory=list, description="Security concerns")
    recommendations: list[str] = Field(default_factory=list, description="Suggested fixes")
    risk_level: RiskLevel = Field(default=RiskLevel.LOW, description="Aggregated risk")
