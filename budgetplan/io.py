"""Spreadsheet import and export of budget plans.

Export flattens the tree into one row per line item.  Import groups rows back
into goals and strategies by name, accepting the header spellings used by
older templates.
"""

from __future__ import annotations

import io
import logging
import math
import re
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from openpyxl.utils import get_column_letter

from .aggregation import amount, line_item_total
from .models import QUARTERS, Activity, BudgetPlan, Goal, LineItem, QuarterDetail, new_id

logger = logging.getLogger(__name__)

SHEET_NAME = "Budget Plan"
TIMESTAMP_FORMAT = "%d/%m/%Y, %H:%M:%S"

EXPORT_COLUMNS: Sequence[str] = (
    "School Code",
    "School / Activity / Function",
    "Serial No",
    "Goal",
    "Strategy",
    "Activity / Cost Head",
    "Details / Description",
    "Remarks",
    "VC Review Remarks",
    "Ledger Name",
    "Ledger Code",
    "Unit",
    "Q1 Quantity",
    "Q1 Rate",
    "Q1 Total (INR)",
    "Q2 Quantity",
    "Q2 Rate",
    "Q2 Total (INR)",
    "Q3 Quantity",
    "Q3 Rate",
    "Q3 Total (INR)",
    "Q4 Quantity",
    "Q4 Rate",
    "Q4 Total (INR)",
    "Annual Total (INR)",
    "Submitted By",
    "Submission Timestamp",
)

COLUMN_WIDTHS: Sequence[int] = (
    12, 30, 10, 35, 30, 35, 40, 25, 25, 30, 12, 10,
    10, 12, 15,
    10, 12, 15,
    10, 12, 15,
    10, 12, 15,
    20, 20, 25,
)

# Header candidates per field, in priority order.
FIELD_ALIASES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("school_name", ("School / Activity / Function", "School / Activity / Function Name")),
    ("school_code", ("School Code", "# Code")),
    ("submitted_by", ("Submitted By",)),
    ("goal", ("Goal", "Goal Objective")),
    ("strategy", ("Strategy", "Activity Cluster")),
    ("name", ("Activity / Cost Head", "Line Item")),
    ("description", ("Details / Description", "Description")),
    ("remarks", ("Remarks",)),
    ("review_comments", ("VC Review Remarks", "Review Comments")),
    ("ledger_name", ("Ledger Name",)),
    ("ledger_code", ("Ledger Code",)),
    ("unit", ("Unit",)),
    *(
        (f"{key}_{part}", (f"{key.upper()} {part.title()}",))
        for key in QUARTERS
        for part in ("quantity", "rate")
    ),
)
_ALIASES: Dict[str, Tuple[str, ...]] = dict(FIELD_ALIASES)

DEFAULT_GOAL = "General"
DEFAULT_STRATEGY = "Standard"
DEFAULT_LINE_ITEM = "Misc"
LINE_ITEM_TEXT_FIELDS: Sequence[str] = (
    "description",
    "remarks",
    "review_comments",
    "ledger_name",
    "ledger_code",
    "unit",
)


class ImportParseError(ValueError):
    """Raised when a file cannot be read as a budget spreadsheet."""


@dataclass
class ExportContext:
    """Submission details repeated on every exported row."""

    school_name: str = ""
    school_code: str = ""
    submitted_by: str = ""
    timestamp: Optional[str] = None

    def stamped(self) -> "ExportContext":
        if self.timestamp:
            return self
        return replace(self, timestamp=datetime.now().strftime(TIMESTAMP_FORMAT))

    @classmethod
    def from_plan(cls, plan: BudgetPlan, timestamp: Optional[str] = None) -> "ExportContext":
        return cls(
            school_name=plan.school_name or "",
            school_code=plan.school_code or "",
            submitted_by=plan.submitted_by or "",
            timestamp=timestamp,
        )


# ---------------------------------------------------------------------------
# Export


def serial_label(goal_index: int, activity_index: int, item_index: int) -> str:
    """Return the ``1.A.1`` style label for zero-based positions."""

    letter = chr(ord("a") + activity_index).upper()
    return f"{goal_index + 1}.{letter}.{item_index + 1}"


def flatten_plan(plan: BudgetPlan, context: ExportContext) -> List[Dict[str, Any]]:
    """Flatten ``plan`` into export rows keyed by :data:`EXPORT_COLUMNS`."""

    context = context.stamped()
    rows: List[Dict[str, Any]] = []
    for g_idx, goal in enumerate(plan.goals):
        for a_idx, activity in enumerate(goal.activities):
            for s_idx, item in enumerate(activity.line_items):
                row: Dict[str, Any] = {
                    "School Code": context.school_code,
                    "School / Activity / Function": context.school_name,
                    "Serial No": serial_label(g_idx, a_idx, s_idx),
                    "Goal": goal.name,
                    "Strategy": activity.name,
                    "Activity / Cost Head": item.name,
                    "Details / Description": item.description,
                    "Remarks": item.remarks,
                    "VC Review Remarks": item.review_comments,
                    "Ledger Name": item.ledger_name,
                    "Ledger Code": item.ledger_code,
                    "Unit": item.unit,
                }
                for key in QUARTERS:
                    quarter = item.quarter(key)
                    label = key.upper()
                    row[f"{label} Quantity"] = quarter.quantity
                    row[f"{label} Rate"] = quarter.rate
                    row[f"{label} Total (INR)"] = amount(quarter)
                row["Annual Total (INR)"] = line_item_total(item)
                row["Submitted By"] = context.submitted_by
                row["Submission Timestamp"] = context.timestamp
                rows.append(row)
    return rows


def plan_to_frame(plan: BudgetPlan, context: ExportContext) -> pd.DataFrame:
    return pd.DataFrame(flatten_plan(plan, context), columns=list(EXPORT_COLUMNS))


def plan_to_excel_bytes(plan: BudgetPlan, context: ExportContext) -> bytes:
    """Serialise ``plan`` to a single-sheet XLSX workbook."""

    frame = plan_to_frame(plan, context)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, index=False, sheet_name=SHEET_NAME)
        worksheet = writer.book[SHEET_NAME]
        for index, width in enumerate(COLUMN_WIDTHS, start=1):
            worksheet.column_dimensions[get_column_letter(index)].width = width
    buffer.seek(0)
    return buffer.getvalue()


def write_plan(path: Path, plan: BudgetPlan, context: ExportContext) -> Path:
    """Write ``plan`` to ``path`` as XLSX or CSV depending on the suffix."""

    path = Path(path)
    ext = path.suffix.lower()
    if ext not in {".xlsx", ".csv"}:
        raise ValueError(f"Unsupported export extension '{ext}' for '{path}'")

    path.parent.mkdir(parents=True, exist_ok=True)
    if ext == ".csv":
        plan_to_frame(plan, context).to_csv(path, index=False)
    else:
        path.write_bytes(plan_to_excel_bytes(plan, context))
    logger.info("Exported budget plan to %s", path)
    return path


def default_export_filename(school_code: Optional[str], school_name: Optional[str]) -> str:
    code = school_code or "N_A"
    name = re.sub(r"\s+", "_", school_name or "Budget")
    return f"Budget_Report_{code}_{name}.xlsx"


# ---------------------------------------------------------------------------
# Import


def coerce_numeric(values: pd.Series) -> pd.Series:
    """Coerce cell values into floats, substituting 0 for anything unparseable."""

    if not isinstance(values, pd.Series):
        values = pd.Series(values, dtype=object)
    if values.empty:
        return pd.Series(dtype=float, index=values.index)

    numeric = pd.to_numeric(values, errors="coerce").astype(float)
    text_mask = values.map(lambda value: isinstance(value, str))
    if text_mask.any():
        cleaned = values[text_mask].astype(str)
        cleaned = cleaned.str.replace(r"\s+", "", regex=True)
        cleaned = cleaned.str.replace(r"(?i)(₹|inr|rs\.?)", "", regex=True)
        cleaned = cleaned.str.replace(",", "", regex=False)
        numeric.loc[text_mask] = pd.to_numeric(cleaned, errors="coerce")
    return numeric.fillna(0.0)


def coerce_quantity(value: Any) -> float:
    """Scalar variant of :func:`coerce_numeric`."""

    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float, np.number)):
        number = float(value)
        return 0.0 if math.isnan(number) else number
    return float(coerce_numeric(pd.Series([value], dtype=object)).iloc[0])


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and value == "":
        return True
    return False


def _as_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def resolve_field(row: Mapping[str, Any], field_name: str) -> Optional[Any]:
    """Return the first non-empty value among the headers for ``field_name``."""

    for header in _ALIASES[field_name]:
        value = row.get(header)
        if not _is_missing(value):
            return value
    return None


def resolve_text(row: Mapping[str, Any], field_name: str, default: Optional[str] = "") -> Optional[str]:
    value = resolve_field(row, field_name)
    if value is None:
        return default
    return _as_text(value)


def _line_item_from_row(row: Mapping[str, Any]) -> LineItem:
    texts = {name: resolve_text(row, name) for name in LINE_ITEM_TEXT_FIELDS}
    quarters = {
        key: QuarterDetail(
            rate=coerce_quantity(resolve_field(row, f"{key}_rate")),
            quantity=coerce_quantity(resolve_field(row, f"{key}_quantity")),
        )
        for key in QUARTERS
    }
    return LineItem(
        id=new_id(),
        name=resolve_text(row, "name", DEFAULT_LINE_ITEM),
        **texts,
        **quarters,
    )


def _normalise_headers(frame: pd.DataFrame) -> pd.DataFrame:
    """Strip header whitespace, keeping the first of any clashing columns."""

    headers = [str(column).strip() for column in frame.columns]
    frame = frame.set_axis(headers, axis=1)
    duplicated = frame.columns.duplicated()
    if duplicated.any():
        logger.warning(
            "Ignoring duplicate columns after header normalisation: %s",
            ", ".join(sorted(set(frame.columns[duplicated]))),
        )
        frame = frame.loc[:, ~duplicated]
    return frame


def frame_to_plan(frame: pd.DataFrame) -> BudgetPlan:
    """Rebuild a plan from a flat table.

    Rows are grouped by exact goal name, then by exact strategy name within
    the goal.  Groups appear in first-seen order and every row becomes a new
    line item.  Two distinct goals that share a name end up merged.
    """

    frame = _normalise_headers(frame)
    frame = frame.dropna(how="all")
    if frame.empty:
        logger.info("Imported sheet has no data rows")
        return BudgetPlan()

    rows = frame.to_dict(orient="records")
    first = rows[0]

    # goal name -> (goal id, strategy name -> (activity id, items))
    grouped: Dict[str, Tuple[str, Dict[str, Tuple[str, List[LineItem]]]]] = {}
    for row in rows:
        goal_name = resolve_text(row, "goal", DEFAULT_GOAL)
        strategy_name = resolve_text(row, "strategy", DEFAULT_STRATEGY)

        if goal_name not in grouped:
            logger.debug("Creating goal '%s'", goal_name)
            grouped[goal_name] = (new_id(), {})
        strategies = grouped[goal_name][1]
        if strategy_name not in strategies:
            logger.debug("Creating strategy '%s' under goal '%s'", strategy_name, goal_name)
            strategies[strategy_name] = (new_id(), [])
        strategies[strategy_name][1].append(_line_item_from_row(row))

    goals = tuple(
        Goal(
            id=goal_id,
            name=goal_name,
            activities=tuple(
                Activity(id=activity_id, name=strategy_name, line_items=tuple(items))
                for strategy_name, (activity_id, items) in strategies.items()
            ),
        )
        for goal_name, (goal_id, strategies) in grouped.items()
    )
    logger.info("Imported %d line items into %d goals", len(rows), len(goals))
    return BudgetPlan(
        goals=goals,
        school_name=resolve_text(first, "school_name", None),
        school_code=resolve_text(first, "school_code", None),
        submitted_by=resolve_text(first, "submitted_by", None),
    )


def _read_first_sheet(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Budget sheet '{path}' does not exist")

    ext = path.suffix.lower()
    if ext in {".csv", ".txt"}:
        logger.debug("Reading CSV %s", path)
        return pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[""])
    if ext in {".xlsx", ".xlsm"}:
        logger.debug("Reading Excel %s", path)
        return pd.read_excel(
            path, sheet_name=0, dtype=object, keep_default_na=False, na_values=[""]
        )
    raise ValueError(f"Unsupported file extension '{ext}' for budget sheet '{path}'")


def read_plan(path: Path) -> BudgetPlan:
    """Load a plan from a spreadsheet file.

    Raises :class:`ImportParseError` when the file cannot be read; nothing is
    returned partially.
    """

    path = Path(path)
    logger.info("Importing budget plan from %s", path)
    try:
        frame = _read_first_sheet(path)
    except Exception as exc:
        raise ImportParseError(f"Unable to read budget sheet '{path}': {exc}") from exc
    return frame_to_plan(frame)


def apply_import(current: BudgetPlan, imported: BudgetPlan) -> BudgetPlan:
    """Replace ``current`` with ``imported``, keeping header fields the file lacks."""

    return BudgetPlan(
        goals=imported.goals,
        school_name=imported.school_name if imported.school_name is not None else current.school_name,
        school_code=imported.school_code if imported.school_code is not None else current.school_code,
        submitted_by=imported.submitted_by if imported.submitted_by is not None else current.submitted_by,
    )


__all__ = [
    "EXPORT_COLUMNS",
    "FIELD_ALIASES",
    "ExportContext",
    "ImportParseError",
    "apply_import",
    "coerce_numeric",
    "coerce_quantity",
    "default_export_filename",
    "flatten_plan",
    "frame_to_plan",
    "plan_to_excel_bytes",
    "plan_to_frame",
    "read_plan",
    "resolve_field",
    "serial_label",
    "write_plan",
]
