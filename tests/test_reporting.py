import json

import pandas as pd
import pytest

from budgetplan.config import OutputConfig
from budgetplan.models import BudgetPlan
from budgetplan.reporting import build_dashboard, export_dashboard


def test_build_dashboard_collects_aggregates(sample_plan):
    summary = build_dashboard(sample_plan, top_n=2)

    assert summary.grand_total == pytest.approx(3400)
    assert summary.quarters["quarter"].tolist() == ["Q1", "Q2", "Q3", "Q4"]
    assert summary.quarters["total"].tolist() == [1200, 1000, 200, 1000]
    assert summary.goals["goal"].tolist() == ["Academic Excellence", "Infrastructure"]
    assert summary.strategies["strategy"].tolist() == ["Outreach", "Maintenance"]
    assert summary.ledgers["ledger_code"].tolist() == ["K-1206", "L-1224"]
    assert summary.metadata["line_item_count"] == 4
    assert summary.metadata["activity_count"] == 3
    assert summary.metadata["school_code"] == "SB-01"


def test_build_dashboard_for_empty_plan():
    summary = build_dashboard(BudgetPlan())

    assert summary.grand_total == 0
    assert summary.goals.empty
    assert list(summary.ledgers.columns) == ["ledger_name", "ledger_code", "total"]
    assert summary.metadata["goal_count"] == 0


def test_export_dashboard_writes_reports(tmp_path, sample_plan):
    output = OutputConfig(directory=tmp_path / "reports")
    paths = export_dashboard(build_dashboard(sample_plan), output)

    assert set(paths) == {"quarters", "goals", "strategies", "ledgers", "line_items", "audit"}
    for path in paths.values():
        assert path.exists()

    ledgers = pd.read_csv(paths["ledgers"])
    assert ledgers["ledger_name"].iloc[0] == "Branding and Promotion"

    audit = json.loads(paths["audit"].read_text(encoding="utf-8"))
    assert audit["grand_total"] == pytest.approx(3400)
    assert audit["quarters"][0] == {"quarter": "Q1", "total": 1200.0}


def test_dashboard_includes_line_item_breakdown(tmp_path, sample_plan):
    summary = build_dashboard(sample_plan)

    assert summary.line_items["line_item"].tolist() == ["Workshop", "Books", "Campaign", "AC servicing"]
    assert summary.line_items["annual_total"].sum() == pytest.approx(summary.grand_total)

    paths = export_dashboard(summary, OutputConfig(directory=tmp_path))
    written = pd.read_csv(paths["line_items"])
    assert paths["line_items"].name == "line_item_totals.csv"
    assert written["annual_total"].tolist() == [400, 100, 2000, 900]
