"""Terraform plan parsing and classification."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from iac_explain.models.plan import (
    ChangeAction,
    PlanSummary,
    ResourceChange,
    ResourceInfo,
    TerraformPlan,
)
from iac_explain.utils.errors import ValidationError
from iac_explain.utils.logging import get_logger

logger = get_logger("plan")

# Highest priority first. A replace ([delete, create]) classifies as create.
_ACTION_PRIORITY = (ChangeAction.CREATE, ChangeAction.DELETE, ChangeAction.UPDATE)


def classify_actions(actions: list[ChangeAction]) -> ChangeAction:
    """Reduce a change's action list to its single primary action.

    Priority is create > delete > update; anything else is no-op.
    """
    for action in _ACTION_PRIORITY:
        if action in actions:
            return action
    return ChangeAction.NO_OP


class TerraformPlanParser:
    """Parser for ``terraform show -json`` plan output.

    Validation happens once, in the constructor; a malformed plan raises
    ValidationError and no parser is created.

    Example:
        parser = TerraformPlanParser(plan_json)

        summary = parser.summary()
        print(f"{summary.adds} to add, {summary.destroys} to destroy")

        for resource in parser.by_action(ChangeAction.CREATE):
            print(resource.address)
    """

    def __init__(self, raw: Any) -> None:
        """Validate a plan.

        Args:
            raw: Plan as a mapping, JSON string or JSON bytes

        Raises:
            ValidationError: If the plan is not valid JSON or violates the schema
        """
        if isinstance(raw, (str, bytes, bytearray)):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as e:
                raise ValidationError(f"Plan is not valid JSON: {e}") from e

        try:
            self._plan = TerraformPlan.model_validate(raw)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e, what="plan") from e

        logger.debug(
            f"Parsed plan with {len(self._plan.resource_changes)} resource changes "
            f"(terraform {self._plan.terraform_version})"
        )

    @classmethod
    def from_file(cls, path: Path | str) -> "TerraformPlanParser":
        """Read and validate a plan JSON file."""
        return cls(Path(path).read_text(encoding="utf-8"))

    def summary(self) -> PlanSummary:
        """Count adds, changes and destroys.

        Each category is counted independently from the raw action list, so a
        replace counts as both an add and a destroy even though
        :meth:`resource_changes` classifies it as a single create.
        """
        adds = changes = destroys = 0
        for resource_change in self._plan.resource_changes:
            actions = resource_change.change.actions
            if ChangeAction.CREATE in actions:
                adds += 1
            if ChangeAction.DELETE in actions:
                destroys += 1
            if ChangeAction.UPDATE in actions:
                changes += 1

        return PlanSummary(
            adds=adds,
            changes=changes,
            destroys=destroys,
            total_resources=len(self._plan.resource_changes),
        )

    def resource_changes(self) -> list[ResourceInfo]:
        """Get every resource change as a classified ResourceInfo."""
        return [self._to_info(rc) for rc in self._plan.resource_changes]

    def by_action(self, action: ChangeAction | str) -> list[ResourceInfo]:
        """Get resources whose classified action matches."""
        action = ChangeAction(action)
        return [r for r in self.resource_changes() if r.action == action]

    def by_type(self, resource_type: str) -> list[ResourceInfo]:
        """Get resources of one type."""
        return [r for r in self.resource_changes() if r.type == resource_type]

    def by_provider(self, provider: str) -> list[ResourceInfo]:
        """Get resources managed by one provider (exact provider name)."""
        return [r for r in self.resource_changes() if r.provider == provider]

    def terraform_version(self) -> str:
        return self._plan.terraform_version

    def raw(self) -> TerraformPlan:
        """The validated plan."""
        return self._plan

    @staticmethod
    def _to_info(resource_change: ResourceChange) -> ResourceInfo:
        change = resource_change.change
        return ResourceInfo(
            address=resource_change.address,
            type=resource_change.type,
            name=resource_change.name,
            provider=resource_change.provider_name,
            action=classify_actions(change.actions),
            before=change.before,
            after=change.after,
        )


def parse_plan(raw: Any) -> TerraformPlanParser:
    """Validate a plan and return a parser over it."""
    return TerraformPlanParser(raw)


def provider_short_name(provider: str) -> str:
    """Normalize a provider address to its short name.

    ``registry.terraform.io/hashicorp/aws`` and ``aws`` both become ``aws``.
    """
    return provider.rstrip("/").rsplit("/", 1)[-1]
