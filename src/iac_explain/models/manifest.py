"""Kubernetes manifest data models.

Field names are snake_case in Python and camelCase on the wire; both
spellings are accepted on input.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from iac_explain.models.common import AuditError

_WIRE_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ObjectMeta(BaseModel):
    """Object metadata."""

    model_config = _WIRE_CONFIG

    name: str = Field(description="Object name")
    namespace: str | None = Field(default=None, description="Namespace, if any")
    labels: dict[str, str] | None = Field(default=None, description="Labels")
    annotations: dict[str, str] | None = Field(default=None, description="Annotations")


class ClusterResource(BaseModel):
    """A single Kubernetes object.

    ``spec`` and ``status`` are kept as open mappings; kind-specific views
    (containers, pod security context) are extracted on demand by
    :mod:`iac_explain.core.manifest`.
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    api_version: str = Field(description="API group and version")
    kind: str = Field(description="Object kind")
    metadata: ObjectMeta = Field(description="Object metadata")
    spec: dict[str, Any] | None = Field(default=None, description="Desired state")
    status: dict[str, Any] | None = Field(default=None, description="Observed state")

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str | None:
        return self.metadata.namespace


class Capabilities(BaseModel):
    model_config = _WIRE_CONFIG

    add: list[str] | None = None
    drop: list[str] | None = None


class SecurityContext(BaseModel):
    """Container-level security context."""

    model_config = _WIRE_CONFIG

    allow_privilege_escalation: bool | None = None
    privileged: bool | None = None
    read_only_root_filesystem: bool | None = None
    run_as_non_root: bool | None = None
    run_as_user: int | None = None
    run_as_group: int | None = None
    capabilities: Capabilities | None = None


class PodSecurityContext(BaseModel):
    """Pod-level security context, used as a fallback for containers."""

    model_config = _WIRE_CONFIG

    run_as_non_root: bool | None = None
    run_as_user: int | None = None
    run_as_group: int | None = None
    fs_group: int | None = None
    supplemental_groups: list[int] | None = None


class ContainerResources(BaseModel):
    model_config = _WIRE_CONFIG

    limits: dict[str, Any] | None = None
    requests: dict[str, Any] | None = None


class ContainerPort(BaseModel):
    model_config = _WIRE_CONFIG

    container_port: int
    protocol: str | None = None
    name: str | None = None


class EnvVar(BaseModel):
    model_config = _WIRE_CONFIG

    name: str
    value: str | None = None
    value_from: dict[str, Any] | None = None


class Container(BaseModel):
    """A container extracted from a workload's pod template."""

    model_config = _WIRE_CONFIG

    name: str = Field(description="Container name")
    image: str | None = Field(default=None, description="Image reference")
    ports: list[ContainerPort] | None = None
    resources: ContainerResources | None = None
    security_context: SecurityContext | None = None
    env: list[EnvVar] | None = None


class ManifestParseResult(BaseModel):
    """Resources parsed from a manifest stream plus any skipped-document diagnostics."""

    model_config = {"frozen": True}

    resources: list[ClusterResource] = Field(default_factory=list)
    errors: list[AuditError] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        """True when every document parsed."""
        return not self.errors
