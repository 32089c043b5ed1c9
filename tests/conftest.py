from __future__ import annotations

from pathlib import Path
import sys

import pytest

# Ensure project root is on sys.path for absolute imports
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from budgetplan.models import Activity, BudgetPlan, Goal, LineItem, QuarterDetail


def make_item(name: str, ledger=("", ""), **quarters) -> LineItem:
    """Build a line item; quarters are given as ``q1=(rate, quantity)``."""

    details = {key: QuarterDetail(rate=rate, quantity=quantity) for key, (rate, quantity) in quarters.items()}
    return LineItem(
        id=f"item-{name}",
        name=name,
        description=f"{name} details",
        unit="Nos",
        ledger_name=ledger[0],
        ledger_code=ledger[1],
        **details,
    )


@pytest.fixture
def sample_plan() -> BudgetPlan:
    faculty = Activity(
        id="act-faculty",
        name="Faculty Development",
        line_items=(
            make_item(
                "Workshop",
                ledger=("Conference and Seminar Expense", "E-1008"),
                q1=(100, 2),
                q3=(50, 4),
            ),
            make_item("Books", q2=(25, 4)),
        ),
    )
    outreach = Activity(
        id="act-outreach",
        name="Outreach",
        line_items=(
            make_item(
                "Campaign",
                ledger=("Branding and Promotion", "K-1206"),
                q1=(1000, 1),
                q4=(500, 2),
            ),
        ),
    )
    maintenance = Activity(
        id="act-maintenance",
        name="Maintenance",
        line_items=(
            make_item(
                "AC servicing",
                ledger=("Building Repairs & Maintenance", "L-1224"),
                q2=(300, 3),
            ),
        ),
    )
    return BudgetPlan(
        goals=(
            Goal(id="goal-academic", name="Academic Excellence", activities=(faculty, outreach)),
            Goal(id="goal-infra", name="Infrastructure", activities=(maintenance,)),
        ),
        school_name="School of Business",
        school_code="SB-01",
        submitted_by="Planning Office",
    )
