"""Security group rules for Terraform plans."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from iac_explain.models.findings import Finding, RuleCategory, RuleContext, Severity
from iac_explain.rules.base import SecurityRule
from iac_explain.utils.accessors import get_int, get_mappings, get_str_list, safe_get

SENSITIVE_PORTS = (22, 3389, 1433, 3306, 5432, 6379, 27017)
SSH_PORT = 22
MAX_PORT = 65535

ANY_IPV4 = "0.0.0.0/0"
ANY_IPV6 = "::/0"

SECURITY_GROUP_TYPES = ("aws_security_group", "aws_security_group_rule")


def security_group_entries(context: RuleContext, direction: str) -> list[Mapping[str, Any]]:
    """Get the ingress or egress entries of a security group resource.

    A standalone ``aws_security_group_rule`` is a single entry whose
    direction is given by its ``type`` attribute.
    """
    if context.resource_type == "aws_security_group_rule":
        if safe_get(context.resource, "type") == direction and isinstance(context.resource, Mapping):
            return [context.resource]
        return []
    return get_mappings(context.resource, direction)


def port_range(entry: Mapping[str, Any]) -> tuple[int, int]:
    """Get an entry's (from, to) port range.

    An unset (or zero) ``to_port`` means the range is open to the top, which
    also covers the ``protocol = "-1"`` form of 0..0.
    """
    from_port = get_int(entry, "from_port") or 0
    to_port = get_int(entry, "to_port") or MAX_PORT
    return from_port, to_port


def covers_port(entry: Mapping[str, Any], port: int) -> bool:
    from_port, to_port = port_range(entry)
    return from_port <= port <= to_port


def is_open_to_all(entry: Mapping[str, Any]) -> bool:
    return ANY_IPV4 in get_str_list(entry, "cidr_blocks") or ANY_IPV6 in get_str_list(
        entry, "ipv6_cidr_blocks"
    )


class SecurityGroupOpenAllRule(SecurityRule):
    """Flags groups open to the internet on sensitive ports or for all egress.

    Ingress is checked first; only when no ingress entry matches does an
    open, full-range egress entry produce a (lower severity) finding.
    """

    id = "TF_AWS_SG_OPEN_ALL"
    title = "Security Group Open to All"
    description = "Security group should not allow unrestricted access from 0.0.0.0/0"
    severity = Severity.CRIT
    category = RuleCategory.SECURITY
    provider = "aws"
    resource_types = SECURITY_GROUP_TYPES
    references = ("https://docs.aws.amazon.com/vpc/latest/userguide/VPC_SecurityGroups.html",)

    def evaluate(self, context: RuleContext) -> Finding | None:
        for entry in security_group_entries(context, "ingress"):
            if not is_open_to_all(entry):
                continue
            exposed = [port for port in SENSITIVE_PORTS if covers_port(entry, port)]
            if exposed:
                return self.finding(
                    context,
                    description="Security group allows unrestricted access to sensitive ports",
                    evidence=(
                        f"Ingress rule allows {ANY_IPV4} access to ports: "
                        f"{', '.join(str(p) for p in exposed)}"
                    ),
                    recommendation=(
                        "Restrict source CIDR blocks to specific IP ranges and limit port access"
                    ),
                )

        for entry in security_group_entries(context, "egress"):
            if is_open_to_all(entry) and port_range(entry) == (0, MAX_PORT):
                return self.finding(
                    context,
                    severity=Severity.HIGH,
                    description="Security group allows unrestricted outbound access",
                    evidence=f"Egress rule allows {ANY_IPV4} access to all ports",
                    recommendation="Limit outbound traffic to specific destinations and ports",
                )

        return None


class SecurityGroupSSHRule(SecurityRule):
    """Flags groups that expose SSH to any IPv4 address."""

    id = "TF_AWS_SG_SSH_OPEN"
    title = "SSH Access Open to Internet"
    description = "Security group should not allow SSH access from 0.0.0.0/0"
    severity = Severity.CRIT
    category = RuleCategory.SECURITY
    provider = "aws"
    resource_types = SECURITY_GROUP_TYPES

    def evaluate(self, context: RuleContext) -> Finding | None:
        for entry in security_group_entries(context, "ingress"):
            if ANY_IPV4 in get_str_list(entry, "cidr_blocks") and covers_port(entry, SSH_PORT):
                return self.finding(
                    context,
                    description="Security group allows SSH access from anywhere on the internet",
                    evidence=f"SSH port ({SSH_PORT}) is accessible from {ANY_IPV4}",
                    recommendation=(
                        "Restrict SSH access to specific IP addresses or use "
                        "AWS Systems Manager Session Manager"
                    ),
                    references=[
                        "https://docs.aws.amazon.com/systems-manager/latest/userguide/session-manager.html"
                    ],
                )
        return None
