"""Terraform plan data models.

These mirror the subset of the ``terraform show -json`` format that the
parser depends on. Provider-specific state (``before``/``after``) and the
optional top-level sections are kept as open mappings.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator


class ChangeAction(str, Enum):
    """An action Terraform plans to take on a resource."""

    NO_OP = "no-op"
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class Change(BaseModel):
    """The proposed transition of a single resource."""

    model_config = {"frozen": True}

    actions: list[ChangeAction] = Field(description="Ordered list of planned actions")
    before: dict[str, Any] | None = Field(description="State before the change")
    after: dict[str, Any] | None = Field(description="State after the change")
    after_unknown: dict[str, Any] | None = Field(
        default=None, description="Attributes known only after apply"
    )
    before_sensitive: dict[str, Any] | bool | None = Field(
        default=None, description="Sensitive attributes in the prior state"
    )
    after_sensitive: dict[str, Any] | bool | None = Field(
        default=None, description="Sensitive attributes in the planned state"
    )

    @model_validator(mode="after")
    def _check_state_presence(self) -> "Change":
        # A pure create starts from nothing; a pure delete ends with nothing.
        if self.actions == [ChangeAction.CREATE] and self.before is not None:
            raise ValueError("'before' must be null for a create-only change")
        if self.actions == [ChangeAction.DELETE] and self.after is not None:
            raise ValueError("'after' must be null for a delete-only change")
        return self


class ResourceChange(BaseModel):
    """One entry of ``resource_changes`` in a plan."""

    model_config = {"frozen": True}

    address: str = Field(description="Address, unique within the plan")
    module_address: str | None = Field(default=None, description="Owning module address")
    mode: Literal["managed", "data"] = Field(description="Resource mode")
    type: str = Field(description="Resource type, e.g. aws_s3_bucket")
    name: str = Field(description="Resource name")
    provider_name: str = Field(description="Provider that manages the resource")
    change: Change = Field(description="Proposed change")


class TerraformPlan(BaseModel):
    """A validated Terraform plan document."""

    model_config = {"frozen": True}

    format_version: str = Field(description="Plan JSON format version")
    terraform_version: str = Field(description="Terraform version that produced the plan")
    resource_changes: list[ResourceChange] = Field(description="Per-resource changes")

    variables: dict[str, Any] | None = Field(default=None, description="Input variables")
    planned_values: dict[str, Any] | None = Field(default=None, description="Planned values")
    configuration: dict[str, Any] | None = Field(default=None, description="Configuration")
    prior_state: dict[str, Any] | None = Field(default=None, description="Prior state")


class PlanSummary(BaseModel):
    """Counts of planned changes."""

    model_config = {"frozen": True}

    adds: int = Field(default=0, description="Changes that create a resource")
    changes: int = Field(default=0, description="Changes that update a resource")
    destroys: int = Field(default=0, description="Changes that delete a resource")
    total_resources: int = Field(default=0, description="Number of resource changes")


class ResourceInfo(BaseModel):
    """Flattened view of a resource change with a single classified action."""

    model_config = {"frozen": True}

    address: str
    type: str
    name: str
    provider: str
    action: ChangeAction = Field(description="Classified primary action")
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None
