"""Integration tests for end-to-end workflows."""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import INSECURE_DEPLOYMENT, SECURE_POD, plan_document, resource_change
from iac_explain.core.analyzer import ResourceAnalyzer
from iac_explain.core.engine import create_default_engine
from iac_explain.core.manifest import ManifestParser
from iac_explain.core.operations import build_engine, dispatch
from iac_explain.core.plan import TerraformPlanParser
from iac_explain.models.analysis import RiskLevel
from iac_explain.models.findings import EvaluationTarget, sort_by_severity
from iac_explain.models.plan import ChangeAction
from iac_explain.renderers import JSONRenderer, MarkdownRenderer, OutputFormat, RenderContext
from iac_explain.utils.config import load_config


class TestPlanWorkflow:
    """Integration tests for the plan review workflow."""

    @pytest.fixture
    def plan_text(self):
        return json.dumps(
            plan_document(
                resource_change(
                    "module.storage.aws_s3_bucket.data",
                    ["create"],
                    after={"bucket": "data", "acl": "public-read-write"},
                ),
                resource_change(
                    "aws_security_group_rule.rdp",
                    ["create"],
                    after={
                        "type": "ingress",
                        "from_port": 3389,
                        "to_port": 3389,
                        "cidr_blocks": ["10.0.0.0/8", "0.0.0.0/0"],
                    },
                ),
                resource_change(
                    "aws_s3_bucket.old_logs",
                    ["delete"],
                    before={"bucket": "old-logs", "acl": "public-read"},
                ),
            )
        )

    def test_parse_evaluate_analyze(self, plan_text):
        """Test the pipeline from plan JSON to sorted findings and analyses."""
        parser = TerraformPlanParser(plan_text)
        engine = create_default_engine()
        analyzer = ResourceAnalyzer()

        summary = parser.summary()
        assert (summary.adds, summary.changes, summary.destroys) == (2, 0, 1)

        live = [r for r in parser.resource_changes() if r.action != ChangeAction.DELETE]
        result = engine.evaluate_batch(
            EvaluationTarget(
                resource=r.after,
                resource_type=r.type,
                resource_name=r.name,
                resource_path=r.address,
            )
            for r in live
        )
        findings = sort_by_severity(result.findings)

        assert result.errors == []
        assert findings[0].rule_id == "TF_AWS_SG_OPEN_ALL"
        assert {f.rule_id for f in findings} >= {"TF_AWS_S3_PUBLIC", "TF_AWS_S3_NO_ENCRYPTION"}

        analyses = analyzer.analyze_all(live)
        assert [a.risk_level for a in analyses] == [RiskLevel.HIGH, RiskLevel.CRITICAL]

    def test_operation_and_reports(self, tmp_path, plan_text):
        (tmp_path / "tfplan.json").write_text(plan_text)

        output = dispatch("explainPlan", {"workspace": str(tmp_path), "depth": "full"})

        assert output.summary.startswith("Plan: 2 to add, 0 to change, 1 to destroy.")
        assert "module.storage.aws_s3_bucket.data" in output.evidence_md

        data = json.loads(JSONRenderer().render(output, RenderContext(format=OutputFormat.JSON)))
        assert data["risks"][0]["resource"]["path"] == "aws_security_group_rule.rdp"

    def test_config_driven_run(self, tmp_path, plan_text):
        """Test a run with disabled rules, a plugin and a policy set from config."""
        plugin = tmp_path / "extra.py"
        plugin.write_text(
            '''
from iac_explain.models.findings import Severity
from iac_explain.rules.base import SecurityRule


class TaggingRule(SecurityRule):
    id = "ACME_UNTAGGED"
    title = "Untagged resource"
    severity = Severity.LOW
    provider = "aws"
    resource_types = ("aws_s3_bucket",)

    def evaluate(self, context):
        if context.resource.get("tags"):
            return None
        return self.finding(context, description="No tags", recommendation="Tag the bucket")


class Plugin:
    name = "acme"
    version = "1.0.0"

    def init(self, context):
        context.register_rule(TaggingRule())

    def cleanup(self):
        pass
'''
        )
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            f"""
rules:
  disabled: [TF_AWS_S3_NO_ENCRYPTION]
  plugins: ["{plugin}"]
policy_sets:
  buckets:
    rules: [TF_AWS_S3_PUBLIC, TF_AWS_S3_NO_ENCRYPTION, ACME_UNTAGGED]
"""
        )
        workspace = tmp_path / "infra"
        workspace.mkdir()
        (workspace / "plan.json").write_text(plan_text)

        config = load_config(config_path)
        engine = build_engine(config)
        output = dispatch(
            "explainPlan", {"workspace": str(workspace), "policySet": "buckets"}, engine, config
        )

        assert [f.rule_id for f in output.risks] == ["TF_AWS_S3_PUBLIC", "ACME_UNTAGGED"]

    def test_concurrent_evaluation(self, plan_text):
        """Test that one engine serves many threads with identical results."""
        parser = TerraformPlanParser(plan_text)
        engine = create_default_engine()
        bucket = parser.by_type("aws_s3_bucket")[0]

        def run(_):
            findings = engine.evaluate_one(bucket.after, bucket.type, bucket.name, bucket.address)
            return [f.rule_id for f in findings]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(run, range(32)))

        assert all(r == results[0] for r in results)
        assert results[0] == ["TF_AWS_S3_PUBLIC", "TF_AWS_S3_NO_ENCRYPTION", "TF_AWS_S3_NO_VERSIONING"]


class TestManifestWorkflow:
    """Integration tests for the manifest validation workflow."""

    def test_parse_and_evaluate(self):
        parser = ManifestParser()
        engine = create_default_engine()

        resources = parser.parse_yaml(INSECURE_DEPLOYMENT + "---\n" + SECURE_POD)
        by_kind = parser.group_by_kind(resources)

        assert set(by_kind) == {"Deployment", "Pod"}

        findings = engine.evaluate_many(
            EvaluationTarget(resource=r, resource_type=r.kind, resource_name=r.metadata.name)
            for r in resources
        )

        assert {f.resource.name for f in findings} == {"web"}

    def test_mixed_directory(self, tmp_path):
        """Test a directory holding YAML, JSON and a broken file."""
        root = tmp_path / "manifests"
        root.mkdir()
        (root / "web.yaml").write_text(INSECURE_DEPLOYMENT)
        (root / "pod.json").write_text(
            json.dumps(
                {
                    "apiVersion": "v1",
                    "kind": "Pod",
                    "metadata": {"name": "debug"},
                    "spec": {"containers": [{"name": "shell", "image": "busybox"}]},
                }
            )
        )
        (root / "broken.json").write_text("{not json")

        output = dispatch("validateK8s", {"manifestsDir": str(root)})

        assert output.sources == ["broken.json", "pod.json", "web.yaml"]
        assert output.resources_scanned == 2
        assert [e.details["file"] for e in output.errors] == ["broken.json"]
        assert {f.resource.path.split("#")[0] for f in output.findings} == {"pod.json", "web.yaml"}

        report = MarkdownRenderer().render(output, RenderContext(format=OutputFormat.MARKDOWN))
        assert "## Errors" in report
        assert "`pod.json#Pod/debug`" in report
