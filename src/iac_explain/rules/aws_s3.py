"""S3 bucket rules for Terraform plans."""

from __future__ import annotations

from iac_explain.models.findings import Finding, RuleCategory, RuleContext, Severity
from iac_explain.rules.base import SecurityRule
from iac_explain.utils.accessors import safe_get

PUBLIC_ACLS = ("public-read", "public-read-write")


class S3PublicAccessRule(SecurityRule):
    """Flags buckets with a public canned ACL."""

    id = "TF_AWS_S3_PUBLIC"
    title = "S3 Bucket Public Access"
    description = "S3 bucket should not allow public access"
    severity = Severity.HIGH
    category = RuleCategory.SECURITY
    provider = "aws"
    resource_types = ("aws_s3_bucket",)
    references = (
        "https://docs.aws.amazon.com/AmazonS3/latest/userguide/access-control-block-public-access.html",
    )

    def evaluate(self, context: RuleContext) -> Finding | None:
        acl = safe_get(context.resource, "acl")
        if acl not in PUBLIC_ACLS:
            return None

        return self.finding(
            context,
            description="S3 bucket has public ACL configuration",
            evidence=f'ACL is set to "{acl}"',
            recommendation=(
                'Set ACL to "private" and configure an aws_s3_bucket_public_access_block resource'
            ),
        )


class S3EncryptionRule(SecurityRule):
    """Flags buckets without a server-side encryption block."""

    id = "TF_AWS_S3_NO_ENCRYPTION"
    title = "S3 Bucket Encryption"
    description = "S3 bucket should have server-side encryption configured"
    severity = Severity.HIGH
    category = RuleCategory.SECURITY
    provider = "aws"
    resource_types = ("aws_s3_bucket",)
    references = (
        "https://docs.aws.amazon.com/AmazonS3/latest/userguide/serv-side-encryption.html",
    )

    def evaluate(self, context: RuleContext) -> Finding | None:
        # Terraform renders an absent block as an empty list.
        if safe_get(context.resource, "server_side_encryption_configuration"):
            return None

        return self.finding(
            context,
            description="S3 bucket does not have server-side encryption configured",
            evidence="Missing server_side_encryption_configuration block",
            recommendation=(
                "Add a server_side_encryption_configuration block with AES256 or aws:kms encryption"
            ),
        )


class S3VersioningRule(SecurityRule):
    """Flags buckets whose versioning is missing or disabled."""

    id = "TF_AWS_S3_NO_VERSIONING"
    title = "S3 Bucket Versioning"
    description = "S3 bucket should have versioning enabled"
    severity = Severity.MED
    category = RuleCategory.BEST_PRACTICE
    provider = "aws"
    resource_types = ("aws_s3_bucket",)
    references = ("https://docs.aws.amazon.com/AmazonS3/latest/userguide/Versioning.html",)

    def evaluate(self, context: RuleContext) -> Finding | None:
        versioning = safe_get(context.resource, "versioning")
        if safe_get(versioning, 0, "enabled") is True:
            return None

        return self.finding(
            context,
            description="S3 bucket does not have versioning enabled",
            evidence="Versioning is disabled" if versioning else "Missing versioning configuration",
            recommendation="Enable versioning to protect against accidental deletion and modification",
        )
