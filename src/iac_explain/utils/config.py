"""Configuration file support for iac-explain."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from iac_explain.models.findings import Finding, RuleCategory, Severity
from iac_explain.utils.errors import ConfigurationError


class AnalysisConfig(BaseModel):
    """Plan analysis defaults."""

    depth: Literal["fast", "full"] = Field(default="fast", description="Default analysis depth")
    cloud: Literal["aws", "gcp", "azure"] | None = Field(
        default=None, description="Restrict plan analysis to one cloud"
    )


class RulesConfig(BaseModel):
    """Rule registry configuration."""

    disabled: list[str] = Field(default_factory=list, description="Rule ids to skip")
    plugins: list[str] = Field(
        default_factory=list,
        description="Plugin modules or file paths contributing extra rules",
    )


class OutputConfig(BaseModel):
    """Output configuration."""

    default_format: str = Field(default="terminal", description="Default output format")
    color: bool = Field(default=True, description="Enable color output")
    verbose: bool = Field(default=False, description="Verbose output")
    fail_on: Severity | None = Field(
        default=Severity.HIGH,
        description="Exit non-zero when a finding is at or above this severity",
    )


class PolicySet(BaseModel):
    """A named selection of findings to report.

    Empty lists mean no restriction.
    """

    description: str = Field(default="", description="Policy set description")
    rules: list[str] = Field(default_factory=list, description="Rule ids to keep")
    categories: list[RuleCategory] = Field(default_factory=list, description="Categories to keep")
    min_severity: Severity | None = Field(default=None, description="Lowest severity to keep")

    def allows(self, finding: Finding, category: RuleCategory | None = None) -> bool:
        """Check whether a finding passes this policy set."""
        if self.rules and finding.rule_id not in self.rules:
            return False
        if self.categories and category not in self.categories:
            return False
        if self.min_severity is not None and finding.severity.rank < self.min_severity.rank:
            return False
        return True


class IacExplainConfig(BaseModel):
    """Main configuration for iac-explain."""

    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    rules: RulesConfig = Field(default_factory=RulesConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    policy_sets: dict[str, PolicySet] = Field(
        default_factory=dict, description="Named policy sets"
    )

    def get_policy_set(self, name: str) -> PolicySet:
        """Get a policy set by name.

        Raises:
            ConfigurationError: If no policy set has that name
        """
        if name not in self.policy_sets:
            raise ConfigurationError(
                f"Unknown policy set: {name}", config_key=f"policy_sets.{name}"
            )
        return self.policy_sets[name]


def get_config_paths() -> list[Path]:
    """Get possible configuration file paths.

    Returns:
        List of paths to check for configuration files
    """
    paths = []

    # Current directory
    paths.append(Path.cwd() / ".iac-explain.yml")
    paths.append(Path.cwd() / ".iac-explain.yaml")

    # Home directory
    home = Path.home()
    paths.append(home / ".iac-explain.yml")
    paths.append(home / ".config" / "iac-explain" / "config.yaml")

    # XDG config directory
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        paths.append(Path(xdg_config) / "iac-explain" / "config.yaml")

    return paths


def load_config(config_path: Path | str | None = None) -> IacExplainConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file. If None, searches default locations.

    Returns:
        Loaded configuration
    """
    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            return _load_config_file(path)
        raise FileNotFoundError(f"Config file not found: {config_path}")

    for path in get_config_paths():
        if path.exists():
            return _load_config_file(path)

    return IacExplainConfig()


def _load_config_file(path: Path) -> IacExplainConfig:
    """Load configuration from a specific file.

    Raises:
        ConfigurationError: If the file is not valid YAML or not a valid config
    """
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {path}: {e}") from e

    if data is None:
        return IacExplainConfig()

    try:
        return IacExplainConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}") from e


def save_config(config: IacExplainConfig, config_path: Path | str | None = None) -> Path:
    """Save configuration to file.

    Args:
        config: Configuration to save
        config_path: Path to save to. Defaults to ./.iac-explain.yml

    Returns:
        Path where config was saved
    """
    if config_path is None:
        config_path = Path.cwd() / ".iac-explain.yml"
    else:
        config_path = Path(config_path)

    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json", exclude_defaults=True)
    config_path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=False))

    return config_path


def get_default_config() -> IacExplainConfig:
    """Get the default configuration."""
    return IacExplainConfig()
