"""CLI command for listing registered rules."""

import json
from typing import Optional

import typer
from rich.table import Table

from iac_explain.cli.utils import console, fail, get_config, severity_style
from iac_explain.utils.errors import IacExplainError


def rules_cmd(
    ctx: typer.Context,
    provider: Optional[str] = typer.Option(
        None,
        "--provider",
        "-p",
        help="Only rules of this provider (aws, kubernetes, ...)",
    ),
    category: Optional[str] = typer.Option(
        None,
        "--category",
        "-c",
        help="Only rules of this category",
    ),
    severity: Optional[str] = typer.Option(
        None,
        "--severity",
        "-s",
        help="Only rules of this severity (low, med, high, crit)",
    ),
    format: str = typer.Option(
        "terminal",
        "--format",
        "-f",
        help="Output format (terminal, json)",
    ),
) -> None:
    """
    List the registered security rules.

    Includes rules contributed by configured plugins and skips disabled ones.

    Example:
        iac-explain rules --provider kubernetes
    """
    from iac_explain.core.operations import build_engine

    config = get_config(ctx)

    try:
        engine = build_engine(config)
    except IacExplainError as e:
        fail(e.message)

    try:
        rules = engine.list_rules(provider=provider, severity=severity, category=category)
    except ValueError as e:
        fail(str(e))

    if format == "json":
        data = [
            {
                "id": r.id,
                "title": r.title,
                "severity": r.severity.value,
                "category": r.category.value,
                "provider": r.provider,
                "resourceTypes": list(r.resource_types),
            }
            for r in rules
        ]
        typer.echo(json.dumps(data, indent=2))
        return

    table = Table(title=f"Rules ({len(rules)})")
    table.add_column("ID", style="bold")
    table.add_column("Severity")
    table.add_column("Category")
    table.add_column("Provider")
    table.add_column("Applies To")
    table.add_column("Title")

    for r in rules:
        style = severity_style(r.severity.value)
        table.add_row(
            r.id,
            f"[{style}]{r.severity.value.upper()}[/{style}]",
            r.category.value,
            r.provider,
            ", ".join(r.resource_types),
            r.title,
        )

    console.print(table)
