"""Main CLI entry point for iac-explain."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from iac_explain.cli import explain, rules, validate

app = typer.Typer(
    name="iac-explain",
    help="Explain infrastructure-as-code changes and flag security risks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

# Register subcommands
app.command(name="explain-plan")(explain.explain_cmd)
app.command(name="validate-k8s")(validate.validate_cmd)
app.command(name="rules")(rules.rules_cmd)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output"),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Config file (default: .iac-explain.yml, then user config locations)",
    ),
) -> None:
    """
    iac-explain: security review for Terraform plans and Kubernetes manifests.

    - [bold]explain-plan[/bold]: Summarize a Terraform plan and flag risky resources
    - [bold]validate-k8s[/bold]: Check Kubernetes manifests for insecure workloads
    - [bold]rules[/bold]: List the available security rules
    """
    from iac_explain.utils.config import load_config
    from iac_explain.utils.errors import ConfigurationError
    from iac_explain.utils.logging import configure_logging

    if verbose:
        configure_logging(level="DEBUG", structured=True)
    elif quiet:
        configure_logging(level="WARNING")
    else:
        configure_logging(level="INFO")

    try:
        loaded = load_config(config)
    except (FileNotFoundError, ConfigurationError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if verbose:
        loaded = loaded.model_copy(
            update={"output": loaded.output.model_copy(update={"verbose": True})}
        )

    ctx.obj = {"config": loaded}


@app.command()
def version() -> None:
    """Show the iac-explain version."""
    from iac_explain import __version__

    console.print(f"iac-explain version {__version__}")


if __name__ == "__main__":
    app()
