"""Data model for hierarchical budget plans."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple

QUARTERS: Tuple[str, ...] = ("q1", "q2", "q3", "q4")


def new_id() -> str:
    """Return a fresh identifier for a tree node."""

    return str(uuid.uuid4())


@dataclass(frozen=True)
class QuarterDetail:
    """Rate and quantity planned for one fiscal quarter."""

    rate: float = 0.0
    quantity: float = 0.0

    @classmethod
    def from_values(cls, rate: Any = None, quantity: Any = None) -> "QuarterDetail":
        return cls(
            rate=0.0 if rate is None else rate,
            quantity=0.0 if quantity is None else quantity,
        )

    def as_dict(self) -> Dict[str, float]:
        return {"rate": self.rate, "quantity": self.quantity}


@dataclass(frozen=True)
class LineItem:
    """Leaf cost entry of the budget tree."""

    id: str
    name: str = ""
    description: str = ""
    remarks: str = ""
    review_comments: str = ""
    ledger_name: str = ""
    ledger_code: str = ""
    unit: str = ""
    q1: QuarterDetail = field(default_factory=QuarterDetail)
    q2: QuarterDetail = field(default_factory=QuarterDetail)
    q3: QuarterDetail = field(default_factory=QuarterDetail)
    q4: QuarterDetail = field(default_factory=QuarterDetail)

    def quarter(self, key: str) -> QuarterDetail:
        if key not in QUARTERS:
            raise KeyError(f"Unknown quarter '{key}'")
        return getattr(self, key)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "remarks": self.remarks,
            "review_comments": self.review_comments,
            "ledger_name": self.ledger_name,
            "ledger_code": self.ledger_code,
            "unit": self.unit,
            **{key: self.quarter(key).as_dict() for key in QUARTERS},
        }


@dataclass(frozen=True)
class Activity:
    """Strategy cluster grouping line items under a goal."""

    id: str
    name: str = ""
    line_items: Tuple[LineItem, ...] = ()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "line_items": [item.as_dict() for item in self.line_items],
        }


@dataclass(frozen=True)
class Goal:
    """Top-level planning objective."""

    id: str
    name: str = ""
    activities: Tuple[Activity, ...] = ()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "activities": [activity.as_dict() for activity in self.activities],
        }


@dataclass(frozen=True)
class BudgetPlan:
    """A budget tree together with the header fields of the submission.

    Plans are immutable values.  Edits go through :mod:`budgetplan.editing`
    which rebuilds only the path from the edited node to the root, so two
    plan versions share every untouched subtree.
    """

    goals: Tuple[Goal, ...] = ()
    school_name: Optional[str] = None
    school_code: Optional[str] = None
    submitted_by: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.goals

    def as_dict(self) -> Dict[str, Any]:
        return {
            "school_name": self.school_name,
            "school_code": self.school_code,
            "submitted_by": self.submitted_by,
            "goals": [goal.as_dict() for goal in self.goals],
        }


def iter_line_items(plan: BudgetPlan) -> Iterator[Tuple[Goal, Activity, LineItem]]:
    """Yield ``(goal, activity, line_item)`` triples in tree order."""

    for goal in plan.goals:
        for activity in goal.activities:
            for item in activity.line_items:
                yield goal, activity, item


__all__ = [
    "QUARTERS",
    "Activity",
    "BudgetPlan",
    "Goal",
    "LineItem",
    "QuarterDetail",
    "iter_line_items",
    "new_id",
]
