"""Markdown renderer for iac-explain output."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from iac_explain.renderers.base import BaseRenderer, OutputFormat, RenderContext

_SEVERITY_ICONS = {"crit": "🔴", "high": "🟠", "med": "🟡", "low": "🔵"}


class MarkdownRenderer(BaseRenderer):
    """Renderer for Markdown output format.

    Produces the ``evidenceMd`` and ``reportMd`` documents of the plan and
    manifest operations.

    Example:
        renderer = MarkdownRenderer()
        md_str = renderer.render(plan_output, context)
    """

    @property
    def format(self) -> OutputFormat:
        """The output format this renderer produces."""
        return OutputFormat.MARKDOWN

    def render(self, data: Any, context: RenderContext) -> str:
        """Render data to a Markdown string.

        Args:
            data: The data to render
            context: Rendering context

        Returns:
            Markdown string
        """
        class_name = data.__class__.__name__

        if class_name == "ExplainPlanOutput":
            return self._render_plan_output(data, context)
        elif class_name == "ValidateK8sOutput":
            return self._render_k8s_output(data, context)

        return self._render_generic(data, context)

    def _render_plan_output(self, output: Any, context: RenderContext) -> str:
        """Render a plan explanation to Markdown."""
        lines = [
            "# Terraform Plan Analysis",
            "",
            f"**Terraform:** {output.terraform_version}",
            "",
            "## Summary",
            "",
            output.summary,
            "",
            f"- Adds: {output.adds}",
            f"- Changes: {output.changes}",
            f"- Destroys: {output.destroys}",
            f"- Risks: **{len(output.risks)}**",
            "",
        ]

        if output.risks:
            lines.extend(["## Risks", ""])
            lines.extend(self._findings_table(output.risks))
            lines.append("")

            lines.extend(["## Recommendations", ""])
            seen: set[str] = set()
            for finding in output.risks:
                if finding.recommendation in seen:
                    continue
                seen.add(finding.recommendation)
                lines.append(f"- **{finding.rule_id}:** {finding.recommendation}")
            lines.append("")

        if output.analyses:
            lines.extend(
                [
                    "## Resource Analysis",
                    "",
                    "| Risk | Resource | Concerns |",
                    "|------|----------|----------|",
                ]
            )
            for analysis in output.analyses:
                concerns = "; ".join(analysis.concerns) or "-"
                lines.append(
                    f"| {analysis.risk_level.value} | `{analysis.resource.address}` | "
                    f"{self._escape_md(concerns)} |"
                )
            lines.append("")

        if output.resources and context.verbose:
            lines.extend(["## Resources", ""])
            for resource in output.resources:
                lines.append(f"- `{resource.address}` ({resource.action.value})")
            lines.append("")

        lines.extend(self._errors_section(output.errors))

        return "\n".join(lines)

    def _render_k8s_output(self, output: Any, context: RenderContext) -> str:
        """Render a manifest validation report to Markdown."""
        lines = [
            "# Kubernetes Validation",
            "",
            f"- Files: {len(output.sources)}",
            f"- Resources Scanned: {output.resources_scanned}",
            f"- Findings: **{len(output.findings)}**",
            "",
        ]

        if output.findings:
            lines.extend(["## Findings", ""])
            lines.extend(self._findings_table(output.findings))
            lines.append("")
        else:
            lines.extend(["No security issues found.", ""])

        lines.extend(self._errors_section(output.errors))

        return "\n".join(lines)

    def _findings_table(self, findings: list[Any]) -> list[str]:
        lines = [
            "| Severity | Rule | Resource | Evidence |",
            "|----------|------|----------|----------|",
        ]
        for f in findings:
            icon = _SEVERITY_ICONS.get(f.severity.value, "")
            resource = f.resource.path or f.resource.name if f.resource else "-"
            evidence = self._escape_md(f.evidence or f.description)
            lines.append(
                f"| {icon} {f.severity.value} | {f.rule_id} | `{resource}` | {evidence} |"
            )
        return lines

    @staticmethod
    def _errors_section(errors: list[Any]) -> list[str]:
        if not errors:
            return []
        lines = ["## Errors", ""]
        for error in errors:
            lines.append(f"- `{error.code}`: {error.message}")
        lines.append("")
        return lines

    def _render_generic(self, data: Any, context: RenderContext) -> str:
        """Render generic data to Markdown."""
        if isinstance(data, BaseModel):
            dict_data = data.model_dump(mode="json")
        elif isinstance(data, dict):
            dict_data = data
        else:
            return str(data)

        lines = ["# Report", ""]

        for key, value in dict_data.items():
            lines.append(f"## {key.replace('_', ' ').title()}")
            lines.append("")
            lines.append(f"```\n{value}\n```")
            lines.append("")

        return "\n".join(lines)

    @staticmethod
    def _escape_md(text: str) -> str:
        """Escape special Markdown characters."""
        if not text:
            return text
        return text.replace("|", "\\|").replace("\n", " ")
