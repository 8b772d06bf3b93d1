"""Host-facing operations: plan explanation and manifest validation.

These are the entry points a host (the CLI, or any tool server embedding the
library) calls with loosely typed arguments. Each operation validates its
input, reads files from disk, runs the engine and returns a single output
model that already carries its Markdown rendering.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from iac_explain.core.analyzer import ResourceAnalyzer
from iac_explain.core.engine import RuleEngine, create_default_engine
from iac_explain.core.manifest import ManifestParser
from iac_explain.core.plan import TerraformPlanParser, provider_short_name
from iac_explain.models.common import AuditError
from iac_explain.models.findings import Finding, sort_by_severity
from iac_explain.models.operations import (
    ExplainPlanInput,
    ExplainPlanOutput,
    ValidateK8sInput,
    ValidateK8sOutput,
)
from iac_explain.models.plan import ChangeAction, ResourceInfo
from iac_explain.renderers.base import OutputFormat, RenderContext
from iac_explain.renderers.markdown import MarkdownRenderer
from iac_explain.utils.config import IacExplainConfig, get_default_config
from iac_explain.utils.errors import (
    ConfigurationError,
    PlanNotFoundError,
    UnknownOperationError,
    ValidationError,
)
from iac_explain.utils.logging import get_logger, get_logger_with_context
from iac_explain.utils.plugins import PluginManager

logger = get_logger("operations")

DEFAULT_PLAN_FILES = ("plan.json", "tfplan.json")
MANIFEST_SUFFIXES = (".yaml", ".yml", ".json")

CLOUD_PROVIDERS = {
    "aws": "aws",
    "gcp": "google",
    "azure": "azurerm",
}


def build_engine(config: IacExplainConfig | None = None) -> RuleEngine:
    """Build an engine from configuration.

    Starts from the built-in rules, drops the disabled ones and loads every
    configured plugin into the result.

    Raises:
        ConfigurationError: If a plugin cannot be loaded
    """
    config = config or get_default_config()
    engine = create_default_engine()

    for rule_id in config.rules.disabled:
        if rule_id in engine:
            engine.unregister(rule_id)
        else:
            logger.warning(f"Cannot disable unknown rule: {rule_id}")

    manager = PluginManager(engine)
    for reference in config.rules.plugins:
        try:
            manager.load(reference)
        except (ImportError, FileNotFoundError, ValueError) as e:
            raise ConfigurationError(
                f"Failed to load plugin '{reference}': {e}", config_key="rules.plugins"
            ) from e

    return engine


def resolve_plan_path(workspace: Path, plan_path: str | None) -> Path:
    """Find the plan file for a workspace.

    Raises:
        PlanNotFoundError: If no plan file exists
    """
    if plan_path:
        path = Path(plan_path)
        if not path.is_absolute():
            path = workspace / path
        if not path.is_file():
            raise PlanNotFoundError(str(path))
        return path

    for name in DEFAULT_PLAN_FILES:
        candidate = workspace / name
        if candidate.is_file():
            return candidate

    raise PlanNotFoundError(str(workspace))


def explain_plan(
    request: ExplainPlanInput,
    engine: RuleEngine,
    config: IacExplainConfig | None = None,
) -> ExplainPlanOutput:
    """Explain a Terraform plan and report its risks.

    Args:
        request: Validated operation input
        engine: Engine whose rules are applied to every planned resource
        config: Configuration holding named policy sets

    Returns:
        Counts, classified resources, severity-ordered findings and, for a
        full analysis, per-resource risk triage

    Raises:
        PlanNotFoundError: If no plan file can be found
        ValidationError: If the plan is malformed
        ConfigurationError: If the policy set is unknown
    """
    config = config or get_default_config()
    log = get_logger_with_context("operations", workspace=request.workspace)

    policy_set = config.get_policy_set(request.policy_set) if request.policy_set else None

    plan_file = resolve_plan_path(Path(request.workspace), request.plan_path)
    log.info(f"Explaining plan {plan_file}")
    parser = TerraformPlanParser.from_file(plan_file)
    summary = parser.summary()

    resources = parser.resource_changes()
    if request.cloud is not None:
        provider = CLOUD_PROVIDERS[request.cloud]
        resources = [r for r in resources if provider_short_name(r.provider) == provider]

    findings: list[Finding] = []
    errors: list[AuditError] = []
    for resource in _evaluated(resources):
        result = engine.evaluate(resource.after, resource.type, resource.name, resource.address)
        findings.extend(result.findings)
        errors.extend(result.errors)

    if policy_set is not None:
        findings = [f for f in findings if policy_set.allows(f, _category(engine, f))]

    risks = sort_by_severity(findings)
    analyses = ResourceAnalyzer().analyze_all(resources) if request.depth == "full" else []

    output = ExplainPlanOutput(
        summary=_plan_summary(summary.adds, summary.changes, summary.destroys, len(risks)),
        terraform_version=parser.terraform_version(),
        adds=summary.adds,
        changes=summary.changes,
        destroys=summary.destroys,
        resources=resources,
        risks=risks,
        analyses=analyses,
        errors=errors,
    )
    log.debug(f"Plan explained: {len(resources)} resources, {len(risks)} risks")

    return output.model_copy(update={"evidence_md": _render_markdown(output)})


def validate_k8s(request: ValidateK8sInput, engine: RuleEngine) -> ValidateK8sOutput:
    """Validate Kubernetes manifests found under a directory.

    Unreadable files and invalid documents are reported in ``errors``; they
    never stop the remaining files from being checked.

    Raises:
        ValidationError: If neither a manifests directory nor a chart is
            given, or the directory does not exist
    """
    if not request.manifests_dir and not request.helm_chart:
        raise ValidationError(
            "Either manifestsDir or helmChart is required",
            fields=["manifestsDir", "helmChart"],
        )

    findings: list[Finding] = []
    errors: list[AuditError] = []
    sources: list[str] = []
    scanned = 0

    if request.helm_chart:
        errors.append(
            AuditError(
                code="HELM_UNSUPPORTED",
                message=f"Helm chart rendering is not supported: {request.helm_chart}",
                details={"helm_chart": request.helm_chart, "values": request.values or []},
            )
        )

    log = get_logger_with_context("operations", manifests_dir=request.manifests_dir)

    if request.manifests_dir:
        root = Path(request.manifests_dir)
        if not root.is_dir():
            raise ValidationError(
                f"Manifests directory not found: {root}", field="manifestsDir"
            )

        parser = ManifestParser()
        for path in find_manifest_files(root):
            source = path.relative_to(root).as_posix()
            sources.append(source)

            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                log.warning(f"Cannot read manifest: {e}", extra={"context": {"file": source}})
                errors.append(
                    AuditError(code="READ_ERROR", message=f"Cannot read {source}: {e}",
                               details={"file": source})
                )
                continue

            parsed = parser.load_json(text) if path.suffix.lower() == ".json" else parser.load_yaml(text)
            errors.extend(_with_file(e, source) for e in parsed.errors)

            for resource in parsed.resources:
                scanned += 1
                location = f"{source}#{resource.kind}/{resource.name}"
                result = engine.evaluate(resource, resource.kind, resource.name, location)
                findings.extend(result.findings)
                errors.extend(result.errors)

    output = ValidateK8sOutput(
        findings=sort_by_severity(findings),
        sources=sources,
        resources_scanned=scanned,
        errors=errors,
    )
    log.info(f"Validated {scanned} resources from {len(sources)} files")

    return output.model_copy(update={"report_md": _render_markdown(output)})


def find_manifest_files(root: Path) -> list[Path]:
    """All manifest files under a directory, recursively, in sorted order."""
    return sorted(
        p for p in root.rglob("*") if p.is_file() and p.suffix.lower() in MANIFEST_SUFFIXES
    )


OPERATIONS = ("explainPlan", "validateK8s")


def dispatch(
    name: str,
    arguments: dict[str, Any] | None,
    engine: RuleEngine | None = None,
    config: IacExplainConfig | None = None,
) -> BaseModel:
    """Route a named operation call.

    Args:
        name: Operation name, ``explainPlan`` or ``validateK8s``
        arguments: Raw arguments using wire (camelCase) names
        engine: Engine to evaluate with; built from ``config`` when omitted
        config: Configuration; defaults apply when omitted

    Raises:
        UnknownOperationError: For any other operation name
        ValidationError: If the arguments are invalid
    """
    if name not in OPERATIONS:
        raise UnknownOperationError(name)

    config = config or get_default_config()
    engine = engine or build_engine(config)
    arguments = arguments or {}

    try:
        if name == "explainPlan":
            return explain_plan(ExplainPlanInput.model_validate(arguments), engine, config)
        return validate_k8s(ValidateK8sInput.model_validate(arguments), engine)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e, what=f"{name} arguments") from e


def _evaluated(resources: list[ResourceInfo]) -> list[ResourceInfo]:
    # Deleted resources have no planned state to check.
    return [r for r in resources if r.action != ChangeAction.DELETE and r.after is not None]


def _category(engine: RuleEngine, finding: Finding) -> Any:
    rule = engine.get(finding.rule_id)
    return rule.category if rule is not None else None


def _plan_summary(adds: int, changes: int, destroys: int, risks: int) -> str:
    noun = "risk" if risks == 1 else "risks"
    return (
        f"Plan: {adds} to add, {changes} to change, {destroys} to destroy. "
        f"{risks} {noun} found."
    )


def _with_file(error: AuditError, source: str) -> AuditError:
    return AuditError(
        code=error.code,
        message=f"{source}: {error.message}",
        details={**error.details, "file": source},
    )


def _render_markdown(output: BaseModel) -> str:
    return MarkdownRenderer().render(output, RenderContext(format=OutputFormat.MARKDOWN))
