"""Error handling utilities for iac-explain."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from iac_explain.models.common import AuditError


class IacExplainError(Exception):
    """Base exception for iac-explain."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR", details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_audit_error(self) -> AuditError:
        """Convert to AuditError model."""
        return AuditError(code=self.code, message=self.message, details=self.details)


class ValidationError(IacExplainError):
    """Input failed validation.

    ``details["fields"]`` lists every offending field path.
    """

    def __init__(self, message: str, field: str | None = None, fields: list[str] | None = None):
        details: dict[str, Any] = {}
        if field:
            details["field"] = field
        if fields:
            details["fields"] = fields
        super().__init__(message, code="VALIDATION_ERROR", details=details)

    @property
    def fields(self) -> list[str]:
        if "fields" in self.details:
            return list(self.details["fields"])
        if "field" in self.details:
            return [self.details["field"]]
        return []

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError, what: str = "input") -> "ValidationError":
        """Build from a pydantic error, keeping the dotted path of each failure."""
        fields = [format_location(err["loc"]) for err in exc.errors()]
        summary = "; ".join(
            f"{format_location(err['loc']) or '<root>'}: {err['msg']}" for err in exc.errors()
        )
        return cls(f"Invalid {what}: {summary}", fields=fields)


class ConfigurationError(IacExplainError):
    """Configuration error."""

    def __init__(self, message: str, config_key: str | None = None):
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, code="CONFIG_ERROR", details=details)


class RuleEvaluationError(IacExplainError):
    """A rule raised while evaluating a resource."""

    def __init__(self, rule_id: str, cause: Exception, resource_name: str | None = None):
        details: dict[str, Any] = {"rule_id": rule_id, "error_type": type(cause).__name__}
        if resource_name:
            details["resource_name"] = resource_name
        super().__init__(
            f"Rule {rule_id} evaluation failed: {cause}",
            code="RULE_ERROR",
            details=details,
        )


class UnknownOperationError(IacExplainError):
    """The host asked for an operation that is not routed."""

    def __init__(self, name: str):
        super().__init__(
            f"Unknown operation: {name}",
            code="UNKNOWN_OPERATION",
            details={"operation": name},
        )


class PlanNotFoundError(IacExplainError):
    """No plan file could be located."""

    def __init__(self, location: str):
        super().__init__(
            f"Plan file not found: {location}",
            code="PLAN_NOT_FOUND",
            details={"location": location},
        )


def format_location(loc: tuple[Any, ...]) -> str:
    """Join a pydantic error location into a dotted path."""
    return ".".join(str(part) for part in loc)
