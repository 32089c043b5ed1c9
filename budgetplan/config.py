"""Configuration loading utilities for the budget planner."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

import yaml

SectionT = TypeVar("SectionT")


@dataclass
class SchoolConfig:
    """Default submission details used when a sheet does not carry them."""

    name: str = ""
    code: str = ""
    submitted_by: str = ""


@dataclass
class DashboardConfig:
    """Ranking settings for the dashboard aggregates."""

    top_n: int = 5


@dataclass
class InsightsConfig:
    """Settings for the narrative budget review."""

    provider: str = "offline"
    model: str = "gemini-2.5-pro"
    temperature: float = 0.65
    api_key_env: str = "GEMINI_API_KEY"


@dataclass
class OutputConfig:
    """Paths describing where dashboard reports should be written."""

    directory: Path = Path("output")
    quarters_report: str = "quarterly_totals.csv"
    goals_report: str = "goal_totals.csv"
    strategies_report: str = "strategy_totals.csv"
    ledgers_report: str = "ledger_totals.csv"
    line_items_report: str = "line_item_totals.csv"
    audit_log: str = "dashboard_audit.json"

    def resolved(self, base_path: Path) -> "OutputConfig":
        return OutputConfig(
            directory=_resolve_path(self.directory, base_path),
            quarters_report=self.quarters_report,
            goals_report=self.goals_report,
            strategies_report=self.strategies_report,
            ledgers_report=self.ledgers_report,
            line_items_report=self.line_items_report,
            audit_log=self.audit_log,
        )


@dataclass
class AppConfig:
    """Container for all configuration used by the CLI."""

    school: SchoolConfig = field(default_factory=SchoolConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)
    insights: InsightsConfig = field(default_factory=InsightsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def resolved(self, base_path: Path) -> "AppConfig":
        return AppConfig(
            school=self.school,
            dashboard=self.dashboard,
            insights=self.insights,
            output=self.output.resolved(base_path),
        )


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load :class:`AppConfig` from a YAML file.

    Without a path the built-in defaults are returned, with relative output
    paths resolved against the current directory.
    """

    if path is None:
        return AppConfig().resolved(Path.cwd())

    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file '{config_path}' does not exist")

    with config_path.open("r", encoding="utf-8") as stream:
        raw_config = yaml.safe_load(stream) or {}

    if not isinstance(raw_config, Mapping):
        raise ValueError("Configuration root must be a mapping")

    output_section = dict(_section(raw_config, "output"))
    if "directory" in output_section:
        output_section["directory"] = Path(output_section["directory"])

    config = AppConfig(
        school=_build(SchoolConfig, _section(raw_config, "school")),
        dashboard=_build(DashboardConfig, _section(raw_config, "dashboard")),
        insights=_build(InsightsConfig, _section(raw_config, "insights")),
        output=_build(OutputConfig, output_section),
    )
    return config.resolved(config_path.parent)


def _section(raw_config: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw_config.get(name) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"Configuration section '{name}' must be a mapping")
    return section


def _build(cls: Type[SectionT], section: Mapping[str, Any]) -> SectionT:
    known = {field_info.name for field_info in fields(cls)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(
            f"Unknown keys for '{cls.__name__}': {', '.join(unknown)}"
        )
    parsed: Dict[str, Any] = {key: value for key, value in section.items() if value is not None}
    return cls(**parsed)


def _resolve_path(path: Path, base_path: Path) -> Path:
    expanded = Path(path).expanduser()
    if expanded.is_absolute():
        return expanded
    return (base_path / expanded).resolve()


__all__ = [
    "AppConfig",
    "DashboardConfig",
    "InsightsConfig",
    "OutputConfig",
    "SchoolConfig",
    "load_config",
]
