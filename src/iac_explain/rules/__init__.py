"""Built-in security rules."""

from iac_explain.rules.base import Rule, SecurityRule
from iac_explain.rules.aws_s3 import S3EncryptionRule, S3PublicAccessRule, S3VersioningRule
from iac_explain.rules.aws_security_group import SecurityGroupOpenAllRule, SecurityGroupSSHRule
from iac_explain.rules.kubernetes import (
    ContainerLimitsRule,
    LatestTagRule,
    PrivilegeEscalationRule,
    RunAsRootRule,
)

TERRAFORM_RULES: tuple[type[SecurityRule], ...] = (
    S3PublicAccessRule,
    S3EncryptionRule,
    S3VersioningRule,
    SecurityGroupOpenAllRule,
    SecurityGroupSSHRule,
)

KUBERNETES_RULES: tuple[type[SecurityRule], ...] = (
    ContainerLimitsRule,
    PrivilegeEscalationRule,
    RunAsRootRule,
    LatestTagRule,
)


def default_rules() -> list[SecurityRule]:
    """Fresh instances of every built-in rule, Terraform rules first."""
    return [rule_class() for rule_class in (*TERRAFORM_RULES, *KUBERNETES_RULES)]


__all__ = [
    "Rule",
    "SecurityRule",
    "S3PublicAccessRule",
    "S3EncryptionRule",
    "S3VersioningRule",
    "SecurityGroupOpenAllRule",
    "SecurityGroupSSHRule",
    "ContainerLimitsRule",
    "PrivilegeEscalationRule",
    "RunAsRootRule",
    "LatestTagRule",
    "TERRAFORM_RULES",
    "KUBERNETES_RULES",
    "default_rules",
]
