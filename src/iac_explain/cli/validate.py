"""CLI command for Kubernetes manifest validation."""

from pathlib import Path
from typing import List, Optional

import typer

from iac_explain.cli.utils import (
    console,
    exceeds_threshold,
    fail,
    get_config,
    render_output,
    resolve_fail_on,
    resolve_format,
)
from iac_explain.utils.errors import IacExplainError


def validate_cmd(
    ctx: typer.Context,
    manifests_dir: Optional[Path] = typer.Argument(
        None,
        help="Directory of Kubernetes manifests (*.yaml, *.yml, *.json)",
    ),
    helm_chart: Optional[str] = typer.Option(
        None,
        "--helm-chart",
        help="Helm chart directory",
    ),
    values: Optional[List[str]] = typer.Option(
        None,
        "--values",
        help="Extra Helm values file (repeatable)",
    ),
    format: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format (terminal, json, markdown)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file path",
    ),
    fail_on: Optional[str] = typer.Option(
        None,
        "--fail-on",
        help="Exit 1 if a finding is at or above this severity (low, med, high, crit, none)",
    ),
) -> None:
    """
    Validate Kubernetes manifests against security rules.

    Example:
        iac-explain validate-k8s ./k8s --format markdown -o report.md
    """
    from iac_explain.core.operations import build_engine, dispatch

    config = get_config(ctx)
    out_format = resolve_format(format, config)
    threshold = resolve_fail_on(fail_on, config)

    arguments = {
        "manifestsDir": str(manifests_dir) if manifests_dir else None,
        "helmChart": helm_chart,
        "values": values or None,
    }

    try:
        with console.status("Validating manifests..."):
            engine = build_engine(config)
            result = dispatch("validateK8s", arguments, engine, config)
    except IacExplainError as e:
        fail(e.message)

    render_output(result, out_format, output, config)

    if exceeds_threshold(result.findings, threshold):
        raise typer.Exit(1)
