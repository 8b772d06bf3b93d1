"""Terminal renderer for iac-explain output."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from iac_explain.renderers.base import BaseRenderer, OutputFormat, RenderContext

SEVERITY_STYLES = {
    "crit": "bold red",
    "high": "red",
    "med": "yellow",
    "low": "blue",
}

RISK_STYLES = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
    "low": "green",
}


class TerminalRenderer(BaseRenderer):
    """Renderer for rich terminal output.

    Example:
        renderer = TerminalRenderer()
        renderer.render(plan_output, context)
    """

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the terminal renderer.

        Args:
            console: Rich console to use. Creates a new one if None.
        """
        self._console = console or Console()

    @property
    def format(self) -> OutputFormat:
        """The output format this renderer produces."""
        return OutputFormat.TERMINAL

    def render(self, data: Any, context: RenderContext) -> str:
        """Render data to the terminal.

        Note: This method prints to the console and returns an empty string.

        Returns:
            Empty string (output is printed to console)
        """
        class_name = data.__class__.__name__

        if class_name == "ExplainPlanOutput":
            self._render_plan_output(data, context)
        elif class_name == "ValidateK8sOutput":
            self._render_k8s_output(data, context)
        else:
            self._render_generic(data, context)

        return ""

    def render_to_file(self, data: Any, context: RenderContext) -> None:
        """Render data to a file.

        Captures terminal output and writes to file.
        """
        if context.output_path is None:
            raise ValueError("output_path must be set in context for file rendering")

        file_console = Console(record=True, force_terminal=context.color)
        original_console = self._console
        self._console = file_console

        try:
            self.render(data, context)
            output = file_console.export_text(styles=context.color)
            context.output_path.write_text(output, encoding="utf-8")
        finally:
            self._console = original_console

    def _render_plan_output(self, output: Any, context: RenderContext) -> None:
        """Render a plan explanation."""
        self._console.print()
        self._console.print(
            Panel(
                f"[bold]Terraform:[/bold] {output.terraform_version}\n"
                f"[bold]Summary:[/bold] {output.summary}",
                title="Terraform Plan Analysis",
            )
        )

        self._console.print()
        table = Table(title="Changes", show_header=False)
        table.add_column("Action", style="bold")
        table.add_column("Count")
        table.add_row("Adds", f"[green]{output.adds}[/green]")
        table.add_row("Changes", f"[yellow]{output.changes}[/yellow]")
        table.add_row("Destroys", f"[red]{output.destroys}[/red]")
        self._console.print(table)

        if output.risks:
            self._console.print()
            self._console.print(self._findings_table("Risks", output.risks, context))

        if output.analyses:
            self._console.print()
            table = Table(title="Resource Analysis")
            table.add_column("Risk")
            table.add_column("Resource", style="bold")
            table.add_column("Concerns")
            for analysis in output.analyses:
                style = RISK_STYLES.get(analysis.risk_level.value, "white")
                table.add_row(
                    f"[{style}]{analysis.risk_level.value.upper()}[/{style}]",
                    analysis.resource.address,
                    "\n".join(analysis.concerns) or "-",
                )
            self._console.print(table)

        self._render_errors(output.errors)

    def _render_k8s_output(self, output: Any, context: RenderContext) -> None:
        """Render a manifest validation report."""
        self._console.print()
        self._console.print(
            Panel(
                f"[bold]Files:[/bold] {len(output.sources)}\n"
                f"[bold]Resources:[/bold] {output.resources_scanned}\n"
                f"[bold]Findings:[/bold] {len(output.findings)}",
                title="Kubernetes Validation",
            )
        )

        if output.findings:
            self._console.print()
            self._console.print(self._findings_table("Findings", output.findings, context))
        else:
            self._console.print("[green]No security issues found.[/green]")

        self._render_errors(output.errors)

    def _findings_table(self, title: str, findings: list[Any], context: RenderContext) -> Table:
        table = Table(title=title)
        table.add_column("Severity")
        table.add_column("Rule", style="bold", no_wrap=True)
        table.add_column("Resource")
        table.add_column("Evidence")
        if context.verbose:
            table.add_column("Recommendation")

        for f in findings:
            style = SEVERITY_STYLES.get(f.severity.value, "white")
            resource = f.resource.path or f.resource.name if f.resource else "-"
            row = [
                f"[{style}]{f.severity.value.upper()}[/{style}]",
                f.rule_id,
                resource,
                f.evidence or f.description,
            ]
            if context.verbose:
                row.append(f.recommendation)
            table.add_row(*row)

        return table

    def _render_errors(self, errors: list[Any]) -> None:
        if not errors:
            return
        self._console.print()
        self._console.print("[bold red]Errors[/bold red]")
        for error in errors:
            self._console.print(f"  [red]•[/red] {error}")

    def _render_generic(self, data: Any, context: RenderContext) -> None:
        """Render generic data."""
        if isinstance(data, BaseModel):
            dict_data = data.model_dump(mode="json", by_alias=True)
        elif isinstance(data, dict):
            dict_data = data
        else:
            self._console.print(str(data))
            return

        self._console.print(json.dumps(dict_data, indent=2, default=str))
