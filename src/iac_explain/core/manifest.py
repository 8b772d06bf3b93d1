"""Kubernetes manifest parsing, filtering and container extraction."""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from iac_explain.models.common import AuditError
from iac_explain.models.manifest import (
    ClusterResource,
    Container,
    ManifestParseResult,
    PodSecurityContext,
)
from iac_explain.utils.accessors import get_list, safe_get
from iac_explain.utils.errors import format_location
from iac_explain.utils.logging import get_logger

logger = get_logger("manifest")

WORKLOAD_KINDS = ("Pod", "Deployment", "StatefulSet", "DaemonSet")
_TEMPLATE_KINDS = ("Deployment", "StatefulSet", "DaemonSet")

DEFAULT_NAMESPACE = "default"


class ManifestParser:
    """Parser for Kubernetes YAML and JSON manifests.

    YAML streams degrade per document: an invalid document is skipped and
    recorded, its siblings still parse. JSON input that cannot be decoded at
    all yields an empty result with a diagnostic instead of raising.

    Example:
        parser = ManifestParser()
        result = parser.load_yaml(text)

        for error in result.errors:
            print(error)

        deployments = parser.filter_by_kind(result.resources, "Deployment")
    """

    def load_yaml(self, text: str) -> ManifestParseResult:
        """Parse a (multi-document) YAML stream.

        Args:
            text: YAML text

        Returns:
            Parsed resources plus one diagnostic per skipped document
        """
        resources: list[ClusterResource] = []
        errors: list[AuditError] = []

        index = 0
        try:
            for document in yaml.safe_load_all(text):
                if document is not None:
                    self._collect(document, index, resources, errors)
                index += 1
        except yaml.YAMLError as e:
            # The loader cannot resume after a syntax error; keep what was read.
            errors.append(
                AuditError(
                    code="YAML_ERROR",
                    message=f"Invalid YAML: {e}",
                    details={"document": index},
                )
            )

        return self._finish(resources, errors)

    def parse_yaml(self, text: str) -> list[ClusterResource]:
        """Parse a YAML stream, logging skipped documents."""
        return self.load_yaml(text).resources

    def load_json(self, text: str) -> ManifestParseResult:
        """Parse a JSON object or array of objects.

        Args:
            text: JSON text

        Returns:
            Parsed resources; empty with a single diagnostic if the text is
            not decodable JSON or not an object/array
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            return self._finish(
                [], [AuditError(code="JSON_ERROR", message=f"Invalid JSON: {e}")]
            )

        if isinstance(data, dict):
            documents: list[Any] = [data]
        elif isinstance(data, list):
            documents = data
        else:
            return self._finish(
                [],
                [
                    AuditError(
                        code="JSON_ERROR",
                        message=f"Expected a JSON object or array, got {type(data).__name__}",
                    )
                ],
            )

        resources: list[ClusterResource] = []
        errors: list[AuditError] = []
        for index, document in enumerate(documents):
            self._collect(document, index, resources, errors)

        return self._finish(resources, errors)

    def parse_json(self, text: str) -> list[ClusterResource]:
        """Parse JSON manifests, logging skipped documents."""
        return self.load_json(text).resources

    def filter_by_kind(self, resources: Iterable[ClusterResource], kind: str) -> list[ClusterResource]:
        return [r for r in resources if r.kind == kind]

    def filter_by_namespace(
        self, resources: Iterable[ClusterResource], namespace: str
    ) -> list[ClusterResource]:
        return [r for r in resources if r.metadata.namespace == namespace]

    def group_by_kind(self, resources: Iterable[ClusterResource]) -> dict[str, list[ClusterResource]]:
        """Group resources by kind, in first-seen order."""
        groups: dict[str, list[ClusterResource]] = {}
        for resource in resources:
            groups.setdefault(resource.kind, []).append(resource)
        return groups

    def group_by_namespace(
        self, resources: Iterable[ClusterResource]
    ) -> dict[str, list[ClusterResource]]:
        """Group resources by namespace; unnamespaced ones go under "default"."""
        groups: dict[str, list[ClusterResource]] = {}
        for resource in resources:
            namespace = resource.metadata.namespace or DEFAULT_NAMESPACE
            groups.setdefault(namespace, []).append(resource)
        return groups

    @staticmethod
    def _collect(
        document: Any,
        index: int,
        resources: list[ClusterResource],
        errors: list[AuditError],
    ) -> None:
        if not isinstance(document, dict):
            errors.append(
                AuditError(
                    code="INVALID_DOCUMENT",
                    message=f"Document {index} is not a mapping",
                    details={"document": index},
                )
            )
            return

        try:
            resource = ClusterResource.model_validate(document)
        except PydanticValidationError as e:
            fields = [format_location(err["loc"]) for err in e.errors()]
            errors.append(
                AuditError(
                    code="INVALID_DOCUMENT",
                    message=f"Document {index} is not a valid resource: missing or invalid {', '.join(fields)}",
                    details={"document": index, "fields": fields},
                )
            )
            return

        resources.append(resource)
        for error in load_containers(resource)[1]:
            errors.append(error.model_copy(update={"details": {"document": index, **error.details}}))

    @staticmethod
    def _finish(resources: list[ClusterResource], errors: list[AuditError]) -> ManifestParseResult:
        for error in errors:
            logger.warning(f"Skipped manifest content: {error}")
        return ManifestParseResult(resources=resources, errors=errors)


def _pod_spec(resource: ClusterResource) -> Any:
    if resource.kind == "Pod":
        return resource.spec
    if resource.kind in _TEMPLATE_KINDS:
        return safe_get(resource.spec, "template", "spec")
    return None


def load_containers(resource: ClusterResource) -> tuple[list[Container], list[AuditError]]:
    """Validate the containers of a workload one by one.

    Pods read ``spec.containers``; Deployments, StatefulSets and DaemonSets
    read ``spec.template.spec.containers``. Other kinds have no containers.

    Returns:
        The valid containers in order, and one ``INVALID_CONTAINER``
        diagnostic per entry that was skipped
    """
    containers: list[Container] = []
    errors: list[AuditError] = []
    workload = f"{resource.kind}/{resource.name}"

    for index, raw in enumerate(get_list(_pod_spec(resource), "containers")):
        try:
            containers.append(Container.model_validate(raw))
        except PydanticValidationError as e:
            fields = [format_location(err["loc"]) for err in e.errors()]
            errors.append(
                AuditError(
                    code="INVALID_CONTAINER",
                    message=f"{workload} container {index} is not valid: missing or invalid {', '.join(fields)}",
                    details={"resource": workload, "container": index, "fields": fields},
                )
            )

    return containers, errors


def extract_containers(resource: ClusterResource) -> list[Container]:
    """Get the valid containers of a workload, skipping malformed entries."""
    return load_containers(resource)[0]


def pod_security_context(resource: ClusterResource) -> PodSecurityContext | None:
    """Get the pod-level security context of a workload, if set."""
    context = safe_get(_pod_spec(resource), "securityContext")
    if not isinstance(context, dict):
        return None
    return PodSecurityContext.model_validate(context)
