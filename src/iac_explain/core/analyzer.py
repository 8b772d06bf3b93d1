"""Heuristic risk analysis of planned resources.

This is a coarse triage pass, independent of the rule engine. Each resource
gets a list of concerns and recommendations and a risk level that starts at
low and is only ever raised by the checks for its provider and type.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from iac_explain.core.plan import provider_short_name
from iac_explain.models.analysis import ResourceAnalysis, RiskLevel
from iac_explain.models.plan import ResourceInfo
from iac_explain.utils.accessors import get_int, get_mappings, get_str_list, is_truthy, safe_get
from iac_explain.utils.logging import get_logger

logger = get_logger("analyzer")

ANY_IPV4 = "0.0.0.0/0"
PUBLIC_GCS_MEMBERS = ("allUsers", "allAuthenticatedUsers")
ANY_AZURE_SOURCE = ("*", ANY_IPV4)


class _Assessment:
    """Mutable accumulator behind a ResourceAnalysis."""

    def __init__(self, resource: ResourceInfo) -> None:
        self.resource = resource
        self.after: dict[str, Any] = resource.after or {}
        self.concerns: list[str] = []
        self.recommendations: list[str] = []
        self.risk_level = RiskLevel.LOW

    def flag(self, concern: str, recommendation: str, risk: RiskLevel | None = None) -> None:
        """Record a concern and optionally raise (never lower) the risk level."""
        if concern not in self.concerns:
            self.concerns.append(concern)
        if recommendation not in self.recommendations:
            self.recommendations.append(recommendation)
        if risk is not None and risk.rank > self.risk_level.rank:
            self.risk_level = risk

    def result(self) -> ResourceAnalysis:
        return ResourceAnalysis(
            resource=self.resource,
            concerns=self.concerns,
            recommendations=self.recommendations,
            risk_level=self.risk_level,
        )


Check = Callable[[_Assessment], None]


class ResourceAnalyzer:
    """Scores plan resources by provider and type.

    Example:
        analyzer = ResourceAnalyzer()

        for analysis in analyzer.analyze_all(parser.resource_changes()):
            if analysis.risk_level != RiskLevel.LOW:
                print(analysis.resource.address, analysis.risk_level.value)
    """

    def __init__(self) -> None:
        self._checks: dict[str, dict[str, Check]] = {
            "aws": {
                "aws_s3_bucket": self._check_s3_bucket,
                "aws_security_group": self._check_security_group,
                "aws_security_group_rule": self._check_security_group,
                "aws_instance": self._check_ec2_instance,
                "aws_db_instance": self._check_rds_instance,
            },
            "google": {
                "google_storage_bucket": self._check_gcs_bucket,
                "google_compute_firewall": self._check_gcp_firewall,
            },
            "azurerm": {
                "azurerm_storage_account": self._check_azure_storage_account,
                "azurerm_network_security_group": self._check_azure_nsg,
            },
        }

    def analyze(self, resource: ResourceInfo) -> ResourceAnalysis:
        """Analyze a single resource.

        Unknown providers and types, and resources with no planned state,
        stay at low risk with no concerns.
        """
        assessment = _Assessment(resource)

        check = self._checks.get(provider_short_name(resource.provider), {}).get(resource.type)
        if check is not None and resource.after is not None:
            check(assessment)

        logger.debug(f"Analyzed {resource.address}: {assessment.risk_level.value}")
        return assessment.result()

    def analyze_all(self, resources: Iterable[ResourceInfo]) -> list[ResourceAnalysis]:
        return [self.analyze(r) for r in resources]

    # AWS

    def _check_s3_bucket(self, a: _Assessment) -> None:
        if safe_get(a.after, "acl") in ("public-read", "public-read-write"):
            a.flag(
                "S3 bucket has public ACL",
                "Use private ACL and configure public access block",
                RiskLevel.HIGH,
            )

        if not is_truthy(a.after, "server_side_encryption_configuration"):
            a.flag(
                "S3 bucket lacks server-side encryption",
                "Enable server-side encryption with KMS",
                RiskLevel.MEDIUM,
            )

        if safe_get(a.after, "versioning", 0, "enabled") is not True:
            a.flag("S3 bucket versioning is disabled", "Enable versioning for data protection")

    def _check_security_group(self, a: _Assessment) -> None:
        if a.resource.type == "aws_security_group_rule":
            entries = [a.after]
        else:
            entries = get_mappings(a.after, "ingress") + get_mappings(a.after, "egress")

        for entry in entries:
            if ANY_IPV4 not in get_str_list(entry, "cidr_blocks"):
                continue
            from_port = get_int(entry, "from_port") or 0
            to_port = get_int(entry, "to_port") or 65535
            if (
                from_port <= 22 <= to_port
                or from_port <= 3389 <= to_port
                or (from_port, to_port) == (0, 65535)
            ):
                a.flag(
                    "Security group allows unrestricted access to sensitive ports",
                    "Restrict source IP ranges and limit port access",
                    RiskLevel.CRITICAL,
                )

    def _check_ec2_instance(self, a: _Assessment) -> None:
        if is_truthy(a.after, "associate_public_ip_address"):
            a.flag(
                "EC2 instance has public IP address",
                "Use NAT Gateway or VPC endpoints instead of direct internet access",
                RiskLevel.MEDIUM,
            )

        if safe_get(a.after, "metadata_options", 0, "http_tokens") != "required":
            a.flag(
                "EC2 instance does not require IMDSv2",
                "Enable IMDSv2 requirement for enhanced security",
                RiskLevel.MEDIUM,
            )

    def _check_rds_instance(self, a: _Assessment) -> None:
        if is_truthy(a.after, "publicly_accessible"):
            a.flag(
                "RDS instance is publicly accessible",
                "Disable public accessibility and use VPC endpoints",
                RiskLevel.HIGH,
            )

        if not is_truthy(a.after, "storage_encrypted"):
            a.flag(
                "RDS instance storage is not encrypted",
                "Enable storage encryption",
                RiskLevel.MEDIUM,
            )

    # Google Cloud

    def _check_gcs_bucket(self, a: _Assessment) -> None:
        for binding in get_mappings(a.after, "iam_binding"):
            members = get_str_list(binding, "members")
            if any(member in members for member in PUBLIC_GCS_MEMBERS):
                a.flag(
                    "GCS bucket has public IAM bindings",
                    "Remove public IAM bindings and use specific principals",
                    RiskLevel.HIGH,
                )

    def _check_gcp_firewall(self, a: _Assessment) -> None:
        if ANY_IPV4 in get_str_list(a.after, "source_ranges"):
            a.flag(
                "GCP firewall rule allows traffic from anywhere",
                "Restrict source ranges to specific IP blocks",
                RiskLevel.HIGH,
            )

    # Azure

    def _check_azure_storage_account(self, a: _Assessment) -> None:
        if safe_get(a.after, "min_tls_version") != "TLS1_2":
            a.flag(
                "Azure Storage Account allows weak TLS versions",
                "Set minimum TLS version to TLS1_2",
                RiskLevel.MEDIUM,
            )

        # azurerm 4.x renamed the attribute.
        if not (
            is_truthy(a.after, "https_traffic_only")
            or is_truthy(a.after, "https_traffic_only_enabled")
        ):
            a.flag(
                "Azure Storage Account allows HTTP traffic",
                "Enable HTTPS-only traffic",
                RiskLevel.HIGH,
            )

    def _check_azure_nsg(self, a: _Assessment) -> None:
        for rule in get_mappings(a.after, "security_rule"):
            if safe_get(rule, "source_address_prefix") in ANY_AZURE_SOURCE:
                a.flag(
                    "Azure NSG rule allows traffic from any source",
                    "Restrict source address prefixes",
                    RiskLevel.HIGH,
                )
