"""Security rule protocol and base class."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from iac_explain.models.findings import Finding, ResourceRef, RuleCategory, RuleContext, Severity


@runtime_checkable
class Rule(Protocol):
    """Protocol for security rules.

    A rule declares which resource types it applies to and maps one
    resource to at most one finding. Rules must be pure: the same context
    always yields the same result.

    To implement a custom rule:
    1. Subclass SecurityRule (or implement this protocol directly)
    2. Register an instance with RuleEngine

    Example:
        class BucketLoggingRule(SecurityRule):
            id = "TF_AWS_S3_NO_LOGGING"
            title = "S3 Bucket Logging"
            description = "S3 buckets should have access logging enabled"
            severity = Severity.LOW
            provider = "aws"
            resource_types = ("aws_s3_bucket",)

            def evaluate(self, context: RuleContext) -> Finding | None:
                if context.resource.get("logging"):
                    return None
                return self.finding(
                    context,
                    description="Access logging is not enabled",
                    recommendation="Add a logging block",
                )
    """

    id: str
    title: str
    description: str
    severity: Severity
    category: RuleCategory
    provider: str | None
    resource_types: tuple[str, ...]
    references: tuple[str, ...] | None

    def evaluate(self, context: RuleContext) -> Finding | None:
        """Evaluate the rule against one resource.

        Args:
            context: Resource plus its type, name and path

        Returns:
            A finding if the rule matched, otherwise None
        """
        ...


class SecurityRule:
    """Base implementation with the finding helper.

    Subclasses set the class attributes and implement ``evaluate``.
    """

    id: str = ""
    title: str = ""
    description: str = ""
    severity: Severity = Severity.MED
    category: RuleCategory = RuleCategory.SECURITY
    provider: str | None = None
    resource_types: tuple[str, ...] = ()
    references: tuple[str, ...] | None = None

    def evaluate(self, context: RuleContext) -> Finding | None:
        """Evaluate the rule. Must be implemented by subclasses."""
        raise NotImplementedError

    def applies_to(self, resource_type: str) -> bool:
        return resource_type in self.resource_types

    def finding(
        self,
        context: RuleContext,
        description: str,
        recommendation: str,
        evidence: str | None = None,
        severity: Severity | None = None,
        references: tuple[str, ...] | list[str] | None = None,
    ) -> Finding:
        """Build a finding for this rule about the context's resource."""
        refs = references if references is not None else self.references
        return Finding(
            rule_id=self.id,
            severity=severity or self.severity,
            title=self.title,
            description=description,
            resource=ResourceRef(
                type=context.resource_type,
                name=context.resource_name,
                path=context.resource_path,
            ),
            evidence=evidence,
            recommendation=recommendation,
            references=list(refs) if refs is not None else None,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"
