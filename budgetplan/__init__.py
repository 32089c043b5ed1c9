"""Budget planner core package.

This package provides the building blocks behind the quarterly budget
planning form: the Goal / Activity / Line Item tree, the roll-up of planned
amounts, and the spreadsheet import/export used to exchange plans.  The
command line interface in :mod:`budgetplan.cli` is built on the same
functions.
"""

from .aggregation import (
    activity_total,
    amount,
    goal_total,
    goal_totals,
    grand_total,
    ledger_totals,
    line_item_total,
    quarterly_totals,
    strategy_totals,
)
from .config import AppConfig, load_config
from .editing import NodeNotFoundError
from .io import ExportContext, ImportParseError, apply_import, read_plan, write_plan
from .ledgers import LEDGERS, LedgerEntry, ledger_code_for
from .models import Activity, BudgetPlan, Goal, LineItem, QuarterDetail
from .reporting import DashboardSummary, build_dashboard, export_dashboard

__all__ = [
    "LEDGERS",
    "Activity",
    "AppConfig",
    "BudgetPlan",
    "DashboardSummary",
    "ExportContext",
    "Goal",
    "ImportParseError",
    "LedgerEntry",
    "LineItem",
    "NodeNotFoundError",
    "QuarterDetail",
    "activity_total",
    "amount",
    "apply_import",
    "build_dashboard",
    "export_dashboard",
    "goal_total",
    "goal_totals",
    "grand_total",
    "ledger_code_for",
    "ledger_totals",
    "line_item_total",
    "load_config",
    "quarterly_totals",
    "read_plan",
    "strategy_totals",
    "write_plan",
]
