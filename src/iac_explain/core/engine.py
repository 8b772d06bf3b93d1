"""Rule registry and evaluation engine."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from iac_explain.models.common import AuditError
from iac_explain.models.findings import (
    EvaluationResult,
    EvaluationTarget,
    Finding,
    RuleCategory,
    RuleContext,
    RuleOutcome,
    Severity,
)
from iac_explain.rules.base import Rule
from iac_explain.utils.errors import RuleEvaluationError, ValidationError
from iac_explain.utils.logging import get_logger

logger = get_logger("engine")


def run_rule(rule: Rule, context: RuleContext) -> RuleOutcome:
    """Run one rule, turning an exception into a structured outcome."""
    try:
        finding = rule.evaluate(context)
        if finding is None:
            return RuleOutcome.clean(rule.id)
        if not isinstance(finding, Finding):
            raise TypeError(f"evaluate returned {type(finding).__name__}, expected Finding or None")
        return RuleOutcome.matched(rule.id, finding)
    except Exception as e:
        error = RuleEvaluationError(rule.id, e, resource_name=context.resource_name)
        return RuleOutcome.fail(rule.id, error.to_audit_error())


class RuleEngine:
    """Registry of security rules and the evaluator that applies them.

    Rules are keyed by id; registering a rule whose id already exists
    replaces the earlier one. Evaluation selects the rules whose
    ``resource_types`` contain the resource's type and runs each in
    isolation: a rule that raises is reported as a diagnostic and never
    stops the others.

    Registration is not synchronized. Register everything up front, then
    evaluate from as many threads as needed.

    Example:
        engine = RuleEngine()
        engine.register_all([S3PublicAccessRule(), S3EncryptionRule()])

        findings = engine.evaluate_one(after_state, "aws_s3_bucket", "logs")
        for finding in findings:
            print(finding.severity, finding.title)
    """

    def __init__(self, rules: Iterable[Rule] | None = None) -> None:
        """Initialize a registry, optionally with an initial set of rules."""
        self._rules: dict[str, Rule] = {}
        if rules is not None:
            self.register_all(rules)

    def register(self, rule: Rule) -> None:
        """Register a rule, replacing any rule with the same id.

        Raises:
            ValidationError: If the rule has no id or no resource types
        """
        if not rule.id:
            raise ValidationError("Rule id cannot be empty", field="id")
        if not rule.resource_types:
            raise ValidationError(
                f"Rule {rule.id} must apply to at least one resource type",
                field="resource_types",
            )

        if rule.id in self._rules:
            logger.debug(f"Replacing rule: {rule.id}")
        self._rules[rule.id] = rule

    def register_all(self, rules: Iterable[Rule]) -> None:
        for rule in rules:
            self.register(rule)

    def unregister(self, rule_id: str) -> None:
        """Remove a rule by id.

        Raises:
            KeyError: If no rule with that id is registered
        """
        if rule_id not in self._rules:
            raise KeyError(f"No rule with id '{rule_id}' is registered")
        del self._rules[rule_id]

    def get(self, rule_id: str) -> Rule | None:
        return self._rules.get(rule_id)

    def count(self) -> int:
        return len(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: str) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    @property
    def rule_ids(self) -> list[str]:
        return list(self._rules.keys())

    def list_rules(
        self,
        provider: str | None = None,
        resource_type: str | None = None,
        severity: Severity | str | None = None,
        category: RuleCategory | str | None = None,
    ) -> list[Rule]:
        """List rules matching all of the given filters.

        Args:
            provider: Provider tag, e.g. "aws"
            resource_type: A type the rule must apply to
            severity: Declared rule severity
            category: Rule category

        Returns:
            Matching rules; all rules when no filter is given
        """
        severity = Severity(severity) if severity is not None else None
        category = RuleCategory(category) if category is not None else None

        rules = []
        for rule in self._rules.values():
            if provider is not None and rule.provider != provider:
                continue
            if resource_type is not None and resource_type not in rule.resource_types:
                continue
            if severity is not None and rule.severity != severity:
                continue
            if category is not None and rule.category != category:
                continue
            rules.append(rule)
        return rules

    def evaluate(
        self,
        resource: Any,
        resource_type: str,
        resource_name: str,
        resource_path: str | None = None,
    ) -> EvaluationResult:
        """Evaluate one resource against every applicable rule.

        Args:
            resource: Resource payload (plan ``after`` state or ClusterResource)
            resource_type: Terraform type or Kubernetes kind
            resource_name: Resource name
            resource_path: Plan address or file location

        Returns:
            Findings in rule order, plus one diagnostic per failed rule
        """
        context = RuleContext(
            resource=resource,
            resource_type=resource_type,
            resource_name=resource_name,
            resource_path=resource_path,
        )

        findings: list[Finding] = []
        errors: list[AuditError] = []

        for rule in self.list_rules(resource_type=resource_type):
            outcome = run_rule(rule, context)
            if outcome.error is not None:
                logger.warning(
                    outcome.error.message,
                    extra={"context": {"rule_id": rule.id, "resource": resource_path or resource_name}},
                )
                errors.append(outcome.error)
            elif outcome.finding is not None:
                findings.append(outcome.finding)

        return EvaluationResult(findings=findings, errors=errors)

    def evaluate_one(
        self,
        resource: Any,
        resource_type: str,
        resource_name: str,
        resource_path: str | None = None,
    ) -> list[Finding]:
        """Evaluate one resource and return only its findings."""
        return self.evaluate(resource, resource_type, resource_name, resource_path).findings

    def evaluate_batch(self, targets: Iterable[EvaluationTarget]) -> EvaluationResult:
        """Evaluate many resources, preserving input order."""
        findings: list[Finding] = []
        errors: list[AuditError] = []

        for target in targets:
            result = self.evaluate(
                target.resource,
                target.resource_type,
                target.resource_name,
                target.resource_path,
            )
            findings.extend(result.findings)
            errors.extend(result.errors)

        return EvaluationResult(findings=findings, errors=errors)

    def evaluate_many(self, targets: Iterable[EvaluationTarget]) -> list[Finding]:
        """Evaluate many resources and return only their findings."""
        return self.evaluate_batch(targets).findings


def create_default_engine() -> RuleEngine:
    """Create a new engine holding the built-in rule set.

    Each call returns an independent engine; callers own it and pass it to
    whatever evaluates resources.
    """
    from iac_explain.rules import default_rules

    return RuleEngine(default_rules())
