"""Dashboard aggregates and their export to disk."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

import pandas as pd

from .aggregation import (
    DEFAULT_TOP_N,
    goal_totals,
    grand_total,
    ledger_totals,
    line_item_frame,
    quarterly_totals,
    strategy_totals,
)
from .config import OutputConfig
from .models import BudgetPlan

logger = logging.getLogger(__name__)


@dataclass
class DashboardSummary:
    """Structured output from :func:`build_dashboard`."""

    quarters: pd.DataFrame
    goals: pd.DataFrame
    strategies: pd.DataFrame
    ledgers: pd.DataFrame
    line_items: pd.DataFrame
    grand_total: float
    metadata: Dict[str, Any] = field(default_factory=dict)


def build_dashboard(plan: BudgetPlan, top_n: int = DEFAULT_TOP_N) -> DashboardSummary:
    """Collect the aggregates shown on the budget dashboard."""

    quarter_values = quarterly_totals(plan).as_dict()
    quarters = pd.DataFrame(
        {"quarter": [key.upper() for key in quarter_values], "total": list(quarter_values.values())}
    )
    goals = pd.DataFrame(
        [{"goal": entry.name, "total": entry.total} for entry in goal_totals(plan)],
        columns=["goal", "total"],
    )
    strategies = pd.DataFrame(
        [{"strategy": entry.name, "total": entry.total} for entry in strategy_totals(plan, top_n)],
        columns=["strategy", "total"],
    )
    ledgers = pd.DataFrame(
        [
            {"ledger_name": entry.name, "ledger_code": entry.code, "total": entry.total}
            for entry in ledger_totals(plan, top_n)
        ],
        columns=["ledger_name", "ledger_code", "total"],
    )

    activity_count = sum(len(goal.activities) for goal in plan.goals)
    item_count = sum(
        len(activity.line_items) for goal in plan.goals for activity in goal.activities
    )
    metadata = {
        "generated_at": datetime.now(timezone.utc).replace(microsecond=0).isoformat(),
        "school_name": plan.school_name,
        "school_code": plan.school_code,
        "submitted_by": plan.submitted_by,
        "goal_count": len(plan.goals),
        "activity_count": activity_count,
        "line_item_count": item_count,
        "top_n": top_n,
    }

    return DashboardSummary(
        quarters=quarters,
        goals=goals,
        strategies=strategies,
        ledgers=ledgers,
        line_items=line_item_frame(plan),
        grand_total=grand_total(plan),
        metadata=metadata,
    )


def export_dashboard(summary: DashboardSummary, output: OutputConfig) -> Dict[str, Path]:
    """Persist dashboard tables to the configured output directory."""

    output_dir = Path(output.directory)
    output_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Writing dashboard reports to %s", output_dir)

    paths: Dict[str, Path] = {}
    for key, frame, filename in (
        ("quarters", summary.quarters, output.quarters_report),
        ("goals", summary.goals, output.goals_report),
        ("strategies", summary.strategies, output.strategies_report),
        ("ledgers", summary.ledgers, output.ledgers_report),
        ("line_items", summary.line_items, output.line_items_report),
    ):
        target = output_dir / filename
        frame.to_csv(target, index=False)
        paths[key] = target

    audit_payload = summary.metadata.copy()
    audit_payload["grand_total"] = summary.grand_total
    audit_payload["quarters"] = summary.quarters.to_dict(orient="records")
    audit_path = output_dir / output.audit_log
    with audit_path.open("w", encoding="utf-8") as handle:
        json.dump(audit_payload, handle, ensure_ascii=False, indent=2)
    paths["audit"] = audit_path

    return paths


__all__ = ["DashboardSummary", "build_dashboard", "export_dashboard"]
