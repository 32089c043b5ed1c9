"""Aggregation of planned amounts across the budget hierarchy.

Every monetary figure is derived from the quarter rate/quantity pairs on the
line items.  Nothing is cached; totals are recomputed on each call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import pandas as pd

from .ledgers import ledger_code_for
from .models import QUARTERS, Activity, BudgetPlan, Goal, LineItem, QuarterDetail, iter_line_items

UNTITLED_GOAL = "Untitled Goal"
UNTITLED_STRATEGY = "Untitled Strategy"
DEFAULT_TOP_N = 5


@dataclass(frozen=True)
class QuarterTotals:
    q1: float = 0.0
    q2: float = 0.0
    q3: float = 0.0
    q4: float = 0.0

    @property
    def total(self) -> float:
        return self.q1 + self.q2 + self.q3 + self.q4

    def as_dict(self) -> Dict[str, float]:
        return {key: getattr(self, key) for key in QUARTERS}


@dataclass(frozen=True)
class NamedTotal:
    name: str
    total: float


@dataclass(frozen=True)
class LedgerTotal:
    name: str
    code: str
    total: float


def amount(quarter: Optional[QuarterDetail]) -> float:
    """Return ``rate * quantity`` treating missing values as zero."""

    if quarter is None:
        return 0.0
    rate = quarter.rate if quarter.rate is not None else 0.0
    quantity = quarter.quantity if quarter.quantity is not None else 0.0
    return rate * quantity


def line_item_total(item: LineItem) -> float:
    return sum(amount(item.quarter(key)) for key in QUARTERS)


def activity_total(activity: Activity) -> float:
    return sum(line_item_total(item) for item in activity.line_items)


def goal_total(goal: Goal) -> float:
    return sum(activity_total(activity) for activity in goal.activities)


def grand_total(plan: BudgetPlan) -> float:
    return sum(goal_total(goal) for goal in plan.goals)


def quarterly_totals(plan: BudgetPlan) -> QuarterTotals:
    """Sum each quarter across every line item of the plan."""

    sums = dict.fromkeys(QUARTERS, 0.0)
    for _, _, item in iter_line_items(plan):
        for key in QUARTERS:
            sums[key] += amount(item.quarter(key))
    return QuarterTotals(**sums)


def _rank(totals: Iterable, top_n: Optional[int]) -> List:
    # sorted() is stable, so equal totals keep their first-seen order
    ranked = sorted(totals, key=lambda entry: entry.total, reverse=True)
    if top_n is None:
        return ranked
    return ranked[: max(top_n, 0)]


def ledger_totals(plan: BudgetPlan, top_n: Optional[int] = DEFAULT_TOP_N) -> List[LedgerTotal]:
    """Total spend per ledger name, largest first.

    Line items without a ledger name are left out.  ``top_n=None`` returns
    every ledger.
    """

    sums: Dict[str, float] = {}
    codes: Dict[str, str] = {}
    for _, _, item in iter_line_items(plan):
        name = item.ledger_name
        if not name:
            continue
        sums[name] = sums.get(name, 0.0) + line_item_total(item)
        if not codes.get(name):
            codes[name] = ledger_code_for(name) or item.ledger_code or ""

    entries = [LedgerTotal(name=name, code=codes[name], total=total) for name, total in sums.items()]
    return _rank(entries, top_n)


def goal_totals(plan: BudgetPlan) -> List[NamedTotal]:
    """Goal totals in tree order; goals without positive spend are left out."""

    totals = [NamedTotal(name=goal.name or UNTITLED_GOAL, total=goal_total(goal)) for goal in plan.goals]
    return [entry for entry in totals if entry.total > 0]


def strategy_totals(plan: BudgetPlan, top_n: Optional[int] = DEFAULT_TOP_N) -> List[NamedTotal]:
    """Largest activities (strategies) across all goals."""

    totals = [
        NamedTotal(name=activity.name or UNTITLED_STRATEGY, total=activity_total(activity))
        for goal in plan.goals
        for activity in goal.activities
    ]
    return _rank([entry for entry in totals if entry.total > 0], top_n)


def line_item_frame(plan: BudgetPlan) -> pd.DataFrame:
    """One row per line item with the per-quarter and annual amounts."""

    columns = [
        "goal",
        "strategy",
        "line_item",
        "ledger_name",
        "ledger_code",
        *[f"{key}_amount" for key in QUARTERS],
        "annual_total",
    ]
    records = []
    for goal, activity, item in iter_line_items(plan):
        record = {
            "goal": goal.name,
            "strategy": activity.name,
            "line_item": item.name,
            "ledger_name": item.ledger_name,
            "ledger_code": item.ledger_code,
        }
        for key in QUARTERS:
            record[f"{key}_amount"] = amount(item.quarter(key))
        record["annual_total"] = line_item_total(item)
        records.append(record)
    return pd.DataFrame(records, columns=columns)


__all__ = [
    "DEFAULT_TOP_N",
    "LedgerTotal",
    "NamedTotal",
    "QuarterTotals",
    "activity_total",
    "amount",
    "goal_total",
    "grand_total",
    "ledger_totals",
    "line_item_frame",
    "line_item_total",
    "quarterly_totals",
    "strategy_totals",
]
