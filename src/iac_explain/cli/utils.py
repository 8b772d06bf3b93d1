"""Shared utilities for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console

from iac_explain.models.findings import Finding, Severity
from iac_explain.renderers import OutputFormat, RenderContext, get_renderer
from iac_explain.renderers.terminal import TerminalRenderer
from iac_explain.utils.config import IacExplainConfig, get_default_config

# Shared console instance
console = Console()


def get_config(ctx: typer.Context) -> IacExplainConfig:
    """Get the configuration loaded by the main callback."""
    if isinstance(ctx.obj, dict) and "config" in ctx.obj:
        return ctx.obj["config"]
    return get_default_config()


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


def resolve_format(format: str | None, config: IacExplainConfig) -> OutputFormat:
    """Pick the output format from the option or the configured default."""
    value = format or config.output.default_format
    try:
        return OutputFormat(value)
    except ValueError:
        choices = ", ".join(f.value for f in OutputFormat)
        fail(f"Invalid format: {value} (choose from {choices})")


def render_output(
    data: Any,
    format: OutputFormat,
    output: Path | None,
    config: IacExplainConfig,
) -> None:
    """Render an operation result to the console or a file.

    Args:
        data: Output model to render
        format: Output format
        output: Optional output file path
        config: Configuration with color and verbosity settings
    """
    context = RenderContext(
        format=format,
        output_path=output,
        verbose=config.output.verbose,
        color=config.output.color,
    )

    if format == OutputFormat.TERMINAL:
        renderer = TerminalRenderer(console)
    else:
        renderer = get_renderer(format)

    if output:
        renderer.render_to_file(data, context)
        console.print(f"Report written to {output}")
        return

    text = renderer.render(data, context)
    if text:
        typer.echo(text)


def resolve_fail_on(fail_on: str | None, config: IacExplainConfig) -> Severity | None:
    """Pick the failure threshold; ``none`` disables it."""
    if fail_on is None:
        return config.output.fail_on
    if fail_on.lower() == "none":
        return None
    try:
        return Severity(fail_on.lower())
    except ValueError:
        fail(f"Invalid severity: {fail_on} (choose from low, med, high, crit, none)")


def exceeds_threshold(findings: list[Finding], threshold: Severity | None) -> bool:
    """Check whether any finding is at or above the threshold."""
    if threshold is None:
        return False
    return any(f.severity.rank >= threshold.rank for f in findings)


def severity_style(severity: str) -> str:
    """Get Rich style for a severity level."""
    styles = {
        "crit": "bold red",
        "high": "red",
        "med": "yellow",
        "low": "blue",
    }
    return styles.get(severity.lower(), "white")
