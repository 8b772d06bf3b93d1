"""CLI command for Terraform plan explanation."""

from pathlib import Path
from typing import Optional

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


def explain_cmd(
    ctx: typer.Context,
    workspace: Path = typer.Argument(
        Path("."),
        help="Terraform workspace directory",
    ),
    plan: Optional[str] = typer.Option(
        None,
        "--plan",
        "-p",
        help="Plan JSON file (default: plan.json or tfplan.json in the workspace)",
    ),
    cloud: Optional[str] = typer.Option(
        None,
        "--cloud",
        "-c",
        help="Only analyze resources of one cloud (aws, gcp, azure)",
    ),
    policy_set: Optional[str] = typer.Option(
        None,
        "--policy-set",
        help="Named policy set from the config file",
    ),
    depth: Optional[str] = typer.Option(
        None,
        "--depth",
        "-d",
        help="Analysis depth (fast, full)",
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
        help="Exit 1 if a risk is at or above this severity (low, med, high, crit, none)",
    ),
) -> None:
    """
    Explain a Terraform plan and report its security risks.

    Reads the JSON produced by [bold]terraform show -json[/bold].

    Example:
        iac-explain explain-plan ./infra --plan tfplan.json --depth full
    """
    from iac_explain.core.operations import build_engine, dispatch

    config = get_config(ctx)
    out_format = resolve_format(format, config)
    threshold = resolve_fail_on(fail_on, config)

    arguments = {
        "workspace": str(workspace),
        "planPath": plan,
        "cloud": cloud or config.analysis.cloud,
        "policySet": policy_set,
        "depth": depth or config.analysis.depth,
    }

    try:
        with console.status("Analyzing plan..."):
            engine = build_engine(config)
            result = dispatch("explainPlan", arguments, engine, config)
    except IacExplainError as e:
        fail(e.message)

    render_output(result, out_format, output, config)

    if exceeds_threshold(result.risks, threshold):
        raise typer.Exit(1)
