"""Shared test fixtures for iac-explain tests."""

import json
from pathlib import Path
from typing import Any

import pytest

from iac_explain.core.engine import RuleEngine, create_default_engine
from iac_explain.models.findings import RuleContext
from iac_explain.models.manifest import ClusterResource

AWS_PROVIDER = "registry.terraform.io/hashicorp/aws"


def resource_change(
    address: str,
    actions: list[str],
    before: dict[str, Any] | None = None,
    after: dict[str, Any] | None = None,
    provider: str = AWS_PROVIDER,
) -> dict[str, Any]:
    """Build one ``resource_changes`` entry."""
    resource_type, name = address.split(".")[-2:]
    return {
        "address": address,
        "mode": "managed",
        "type": resource_type,
        "name": name,
        "provider_name": provider,
        "change": {"actions": actions, "before": before, "after": after},
    }


def plan_document(*changes: dict[str, Any], version: str = "1.6.0") -> dict[str, Any]:
    """Build a plan document around some resource changes."""
    return {
        "format_version": "1.2",
        "terraform_version": version,
        "resource_changes": list(changes),
    }


def make_context(resource: Any, resource_type: str, name: str = "test") -> RuleContext:
    return RuleContext(resource=resource, resource_type=resource_type, resource_name=name)


def make_workload(
    containers: list[dict[str, Any]],
    kind: str = "Deployment",
    name: str = "web",
    pod_security_context: dict[str, Any] | None = None,
) -> ClusterResource:
    """Build a workload whose pod spec holds the given containers."""
    pod_spec: dict[str, Any] = {"containers": containers}
    if pod_security_context is not None:
        pod_spec["securityContext"] = pod_security_context

    if kind == "Pod":
        spec = pod_spec
        api_version = "v1"
    else:
        spec = {"replicas": 1, "template": {"spec": pod_spec}}
        api_version = "apps/v1"

    return ClusterResource.model_validate(
        {"apiVersion": api_version, "kind": kind, "metadata": {"name": name}, "spec": spec}
    )


@pytest.fixture
def engine() -> RuleEngine:
    """A fresh engine with the built-in rules."""
    return create_default_engine()


@pytest.fixture
def secure_bucket() -> dict[str, Any]:
    """Planned state of a private, encrypted, versioned bucket."""
    return {
        "bucket": "logs",
        "acl": "private",
        "server_side_encryption_configuration": [
            {"rule": [{"apply_server_side_encryption_by_default": [{"sse_algorithm": "AES256"}]}]}
        ],
        "versioning": [{"enabled": True}],
    }


@pytest.fixture
def sample_plan() -> dict[str, Any]:
    """A plan with a create, an update, a replace, a delete and a read."""
    return plan_document(
        resource_change(
            "aws_s3_bucket.public",
            ["create"],
            after={"bucket": "public", "acl": "public-read"},
        ),
        resource_change(
            "aws_security_group.web",
            ["update"],
            before={"ingress": []},
            after={
                "ingress": [
                    {"from_port": 22, "to_port": 22, "protocol": "tcp", "cidr_blocks": ["0.0.0.0/0"]}
                ],
                "egress": [],
            },
        ),
        resource_change(
            "aws_instance.app",
            ["delete", "create"],
            before={"ami": "ami-1"},
            after={"ami": "ami-2", "associate_public_ip_address": True},
        ),
        resource_change("aws_db_instance.old", ["delete"], before={"engine": "postgres"}),
        resource_change(
            "google_storage_bucket.assets",
            ["read"],
            before={"name": "assets"},
            after={"name": "assets"},
            provider="registry.terraform.io/hashicorp/google",
        ),
    )


@pytest.fixture
def plan_workspace(tmp_path: Path, sample_plan: dict[str, Any]) -> Path:
    """A workspace directory holding plan.json."""
    (tmp_path / "plan.json").write_text(json.dumps(sample_plan))
    return tmp_path


INSECURE_DEPLOYMENT = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: web
  namespace: prod
spec:
  replicas: 2
  template:
    spec:
      containers:
        - name: app
          image: nginx:latest
          securityContext:
            allowPrivilegeEscalation: true
"""

SECURE_POD = """\
apiVersion: v1
kind: Pod
metadata:
  name: worker
spec:
  securityContext:
    runAsNonRoot: true
  containers:
    - name: worker
      image: registry.example.com/worker:1.4.2
      resources:
        limits:
          cpu: 500m
          memory: 256Mi
      securityContext:
        allowPrivilegeEscalation: false
"""

CONFIG_MAP = """\
apiVersion: v1
kind: ConfigMap
metadata:
  name: settings
data:
  LOG_LEVEL: info
"""


@pytest.fixture
def manifests_dir(tmp_path: Path) -> Path:
    """A directory of manifests in nested folders and both formats."""
    root = tmp_path / "k8s"
    (root / "apps").mkdir(parents=True)
    (root / "apps" / "web.yaml").write_text(INSECURE_DEPLOYMENT + "---\n" + CONFIG_MAP)
    (root / "worker.yml").write_text(SECURE_POD)
    (root / "README.md").write_text("# not a manifest\n")
    return root
