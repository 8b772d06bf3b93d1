"""Unit tests for the resource analyzer."""

import pytest

from iac_explain.core.analyzer import ResourceAnalyzer
from iac_explain.models.analysis import RiskLevel
from iac_explain.models.plan import ChangeAction, ResourceInfo

AWS = "registry.terraform.io/hashicorp/aws"
GOOGLE = "registry.terraform.io/hashicorp/google"
AZURE = "registry.terraform.io/hashicorp/azurerm"


def info(resource_type, after, provider=AWS, action=ChangeAction.CREATE):
    return ResourceInfo(
        address=f"{resource_type}.test",
        type=resource_type,
        name="test",
        provider=provider,
        action=action,
        before=None,
        after=after,
    )


@pytest.fixture
def analyzer() -> ResourceAnalyzer:
    return ResourceAnalyzer()


class TestAwsChecks:
    """Tests for AWS resource checks."""

    def test_public_unencrypted_bucket(self, analyzer):
        analysis = analyzer.analyze(info("aws_s3_bucket", {"acl": "public-read"}))

        assert analysis.risk_level == RiskLevel.HIGH
        assert analysis.concerns == [
            "S3 bucket has public ACL",
            "S3 bucket lacks server-side encryption",
            "S3 bucket versioning is disabled",
        ]
        assert len(analysis.recommendations) == 3

    def test_hardened_bucket(self, analyzer):
        after = {
            "acl": "private",
            "server_side_encryption_configuration": [{"rule": []}],
            "versioning": [{"enabled": True}],
        }

        analysis = analyzer.analyze(info("aws_s3_bucket", after))

        assert analysis.risk_level == RiskLevel.LOW
        assert analysis.concerns == []

    def test_versioning_alone_stays_low(self, analyzer):
        after = {"server_side_encryption_configuration": [{"rule": []}]}

        analysis = analyzer.analyze(info("aws_s3_bucket", after))

        assert analysis.risk_level == RiskLevel.LOW
        assert analysis.concerns == ["S3 bucket versioning is disabled"]

    def test_open_ssh_group_is_critical(self, analyzer):
        after = {"ingress": [{"from_port": 22, "to_port": 22, "cidr_blocks": ["0.0.0.0/0"]}]}

        analysis = analyzer.analyze(info("aws_security_group", after))

        assert analysis.risk_level == RiskLevel.CRITICAL

    def test_open_egress_all_ports_is_critical(self, analyzer):
        after = {"egress": [{"from_port": 0, "to_port": 0, "cidr_blocks": ["0.0.0.0/0"]}]}

        analysis = analyzer.analyze(info("aws_security_group", after))

        assert analysis.risk_level == RiskLevel.CRITICAL
        assert len(analysis.concerns) == 1

    def test_web_group_is_low(self, analyzer):
        after = {"ingress": [{"from_port": 443, "to_port": 443, "cidr_blocks": ["0.0.0.0/0"]}]}

        assert analyzer.analyze(info("aws_security_group", after)).risk_level == RiskLevel.LOW

    def test_standalone_group_rule(self, analyzer):
        after = {"type": "ingress", "from_port": 3389, "to_port": 3389, "cidr_blocks": ["0.0.0.0/0"]}

        analysis = analyzer.analyze(info("aws_security_group_rule", after))

        assert analysis.risk_level == RiskLevel.CRITICAL

    def test_ec2_instance(self, analyzer):
        analysis = analyzer.analyze(info("aws_instance", {"associate_public_ip_address": True}))

        assert analysis.risk_level == RiskLevel.MEDIUM
        assert "EC2 instance has public IP address" in analysis.concerns
        assert "EC2 instance does not require IMDSv2" in analysis.concerns

    def test_ec2_instance_hardened(self, analyzer):
        after = {"metadata_options": [{"http_tokens": "required"}]}

        assert analyzer.analyze(info("aws_instance", after)).concerns == []

    def test_rds_instance(self, analyzer):
        analysis = analyzer.analyze(info("aws_db_instance", {"publicly_accessible": True}))

        assert analysis.risk_level == RiskLevel.HIGH
        assert analysis.concerns == [
            "RDS instance is publicly accessible",
            "RDS instance storage is not encrypted",
        ]


class TestGoogleChecks:
    """Tests for Google Cloud resource checks."""

    def test_public_bucket_binding(self, analyzer):
        after = {"iam_binding": [{"role": "roles/storage.objectViewer", "members": ["allUsers"]}]}

        analysis = analyzer.analyze(info("google_storage_bucket", after, provider=GOOGLE))

        assert analysis.risk_level == RiskLevel.HIGH

    def test_private_bucket(self, analyzer):
        after = {"iam_binding": [{"members": ["user:ops@example.com"]}]}

        analysis = analyzer.analyze(info("google_storage_bucket", after, provider=GOOGLE))

        assert analysis.risk_level == RiskLevel.LOW

    def test_open_firewall(self, analyzer):
        after = {"source_ranges": ["0.0.0.0/0"]}

        analysis = analyzer.analyze(info("google_compute_firewall", after, provider=GOOGLE))

        assert analysis.concerns == ["GCP firewall rule allows traffic from anywhere"]


class TestAzureChecks:
    """Tests for Azure resource checks."""

    def test_weak_storage_account(self, analyzer):
        analysis = analyzer.analyze(info("azurerm_storage_account", {}, provider=AZURE))

        assert analysis.risk_level == RiskLevel.HIGH
        assert len(analysis.concerns) == 2

    @pytest.mark.parametrize("attribute", ["https_traffic_only", "https_traffic_only_enabled"])
    def test_hardened_storage_account(self, analyzer, attribute):
        after = {"min_tls_version": "TLS1_2", attribute: True}

        analysis = analyzer.analyze(info("azurerm_storage_account", after, provider=AZURE))

        assert analysis.risk_level == RiskLevel.LOW

    def test_open_nsg(self, analyzer):
        after = {
            "security_rule": [
                {"name": "allow-all", "source_address_prefix": "*"},
                {"name": "office", "source_address_prefix": "203.0.113.0/24"},
            ]
        }

        analysis = analyzer.analyze(info("azurerm_network_security_group", after, provider=AZURE))

        assert analysis.risk_level == RiskLevel.HIGH
        assert analysis.concerns == ["Azure NSG rule allows traffic from any source"]


class TestAnalyzerBehaviour:
    """Tests for dispatch and aggregation."""

    def test_unknown_type_is_low(self, analyzer):
        analysis = analyzer.analyze(info("aws_iam_role", {"name": "r"}))

        assert analysis.risk_level == RiskLevel.LOW
        assert analysis.concerns == []

    def test_unknown_provider_is_low(self, analyzer):
        analysis = analyzer.analyze(
            info("aws_s3_bucket", {"acl": "public-read"}, provider="registry.example.com/acme/aws2")
        )

        assert analysis.risk_level == RiskLevel.LOW

    def test_short_provider_name(self, analyzer):
        analysis = analyzer.analyze(info("aws_s3_bucket", {"acl": "public-read"}, provider="aws"))

        assert analysis.risk_level == RiskLevel.HIGH

    def test_deleted_resource_skipped(self, analyzer):
        analysis = analyzer.analyze(info("aws_s3_bucket", None, action=ChangeAction.DELETE))

        assert analysis.risk_level == RiskLevel.LOW
        assert analysis.concerns == []

    def test_risk_never_decreases(self, analyzer):
        """Test that a later medium concern does not lower an earlier high one."""
        analysis = analyzer.analyze(info("aws_db_instance", {"publicly_accessible": True}))

        assert analysis.risk_level == RiskLevel.HIGH

    def test_duplicate_concerns_collapsed(self, analyzer):
        after = {
            "ingress": [
                {"from_port": 22, "to_port": 22, "cidr_blocks": ["0.0.0.0/0"]},
                {"from_port": 3389, "to_port": 3389, "cidr_blocks": ["0.0.0.0/0"]},
            ]
        }

        analysis = analyzer.analyze(info("aws_security_group", after))

        assert len(analysis.concerns) == 1

    def test_analyze_all(self, analyzer):
        analyses = analyzer.analyze_all(
            [info("aws_instance", {}), info("aws_iam_role", {})]
        )

        assert [a.resource.type for a in analyses] == ["aws_instance", "aws_iam_role"]

    def test_risk_rank(self):
        assert [r.rank for r in RiskLevel] == [0, 1, 2, 3]
