"""Immutable edit operations on :class:`~budgetplan.models.BudgetPlan`.

Each operation returns a new plan.  Only the nodes on the path from the edited
node to the root are rebuilt; every other goal, activity and line item is the
very same object in the old and the new plan.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Optional, Sequence, Tuple, TypeVar

from .io import coerce_quantity
from .ledgers import ledger_code_for
from .models import QUARTERS, Activity, BudgetPlan, Goal, LineItem, new_id

Node = TypeVar("Node", Goal, Activity, LineItem)

EDITABLE_TEXT_FIELDS = frozenset(
    {"name", "description", "remarks", "review_comments", "unit", "ledger_name"}
)
QUARTER_FIELDS = frozenset({"rate", "quantity"})


class NodeNotFoundError(KeyError):
    """Raised when an edit refers to an id that is not part of the plan."""


def _replace_child(
    nodes: Sequence[Node],
    node_id: str,
    update: Callable[[Node], Node],
    kind: str,
) -> Tuple[Node, ...]:
    for index, node in enumerate(nodes):
        if node.id == node_id:
            return (*nodes[:index], update(node), *nodes[index + 1 :])
    raise NodeNotFoundError(f"{kind} '{node_id}' does not exist")


def _remove_child(nodes: Sequence[Node], node_id: str, kind: str) -> Tuple[Node, ...]:
    remaining = tuple(node for node in nodes if node.id != node_id)
    if len(remaining) == len(nodes):
        raise NodeNotFoundError(f"{kind} '{node_id}' does not exist")
    return remaining


def _update_goal(plan: BudgetPlan, goal_id: str, update: Callable[[Goal], Goal]) -> BudgetPlan:
    return replace(plan, goals=_replace_child(plan.goals, goal_id, update, "Goal"))


def _update_activity(
    plan: BudgetPlan,
    goal_id: str,
    activity_id: str,
    update: Callable[[Activity], Activity],
) -> BudgetPlan:
    return _update_goal(
        plan,
        goal_id,
        lambda goal: replace(
            goal,
            activities=_replace_child(goal.activities, activity_id, update, "Activity"),
        ),
    )


def _update_item(
    plan: BudgetPlan,
    goal_id: str,
    activity_id: str,
    item_id: str,
    update: Callable[[LineItem], LineItem],
) -> BudgetPlan:
    return _update_activity(
        plan,
        goal_id,
        activity_id,
        lambda activity: replace(
            activity,
            line_items=_replace_child(activity.line_items, item_id, update, "Line item"),
        ),
    )


def add_goal(plan: BudgetPlan, name: str = "") -> Tuple[BudgetPlan, str]:
    goal = Goal(id=new_id(), name=name)
    return replace(plan, goals=(*plan.goals, goal)), goal.id


def rename_goal(plan: BudgetPlan, goal_id: str, name: str) -> BudgetPlan:
    return _update_goal(plan, goal_id, lambda goal: replace(goal, name=name))


def remove_goal(plan: BudgetPlan, goal_id: str) -> BudgetPlan:
    return replace(plan, goals=_remove_child(plan.goals, goal_id, "Goal"))


def add_activity(plan: BudgetPlan, goal_id: str, name: str = "") -> Tuple[BudgetPlan, str]:
    activity = Activity(id=new_id(), name=name)
    updated = _update_goal(
        plan,
        goal_id,
        lambda goal: replace(goal, activities=(*goal.activities, activity)),
    )
    return updated, activity.id


def rename_activity(plan: BudgetPlan, goal_id: str, activity_id: str, name: str) -> BudgetPlan:
    return _update_activity(
        plan, goal_id, activity_id, lambda activity: replace(activity, name=name)
    )


def remove_activity(plan: BudgetPlan, goal_id: str, activity_id: str) -> BudgetPlan:
    return _update_goal(
        plan,
        goal_id,
        lambda goal: replace(
            goal, activities=_remove_child(goal.activities, activity_id, "Activity")
        ),
    )


def add_line_item(
    plan: BudgetPlan, goal_id: str, activity_id: str, name: str = ""
) -> Tuple[BudgetPlan, str]:
    item = LineItem(id=new_id(), name=name)
    updated = _update_activity(
        plan,
        goal_id,
        activity_id,
        lambda activity: replace(activity, line_items=(*activity.line_items, item)),
    )
    return updated, item.id


def remove_line_item(
    plan: BudgetPlan, goal_id: str, activity_id: str, item_id: str
) -> BudgetPlan:
    return _update_activity(
        plan,
        goal_id,
        activity_id,
        lambda activity: replace(
            activity,
            line_items=_remove_child(activity.line_items, item_id, "Line item"),
        ),
    )


def update_line_item(
    plan: BudgetPlan,
    goal_id: str,
    activity_id: str,
    item_id: str,
    field_name: str,
    value: str,
) -> BudgetPlan:
    """Set a text field of a line item.

    Choosing a ``ledger_name`` also fills ``ledger_code`` from the ledger
    table; a name that is not in the table leaves the code empty.
    """

    if field_name not in EDITABLE_TEXT_FIELDS:
        raise ValueError(f"Field '{field_name}' cannot be edited directly")

    if field_name == "ledger_name":
        changes = {"ledger_name": value, "ledger_code": ledger_code_for(value)}
    else:
        changes = {field_name: value}
    return _update_item(
        plan, goal_id, activity_id, item_id, lambda item: replace(item, **changes)
    )


def update_quarter(
    plan: BudgetPlan,
    goal_id: str,
    activity_id: str,
    item_id: str,
    quarter: str,
    field_name: str,
    value: Any,
) -> BudgetPlan:
    if quarter not in QUARTERS:
        raise ValueError(f"Unknown quarter '{quarter}'")
    if field_name not in QUARTER_FIELDS:
        raise ValueError(f"Quarter field must be one of {sorted(QUARTER_FIELDS)}")

    number = coerce_quantity(value)

    def _apply(item: LineItem) -> LineItem:
        detail = replace(item.quarter(quarter), **{field_name: number})
        return replace(item, **{quarter: detail})

    return _update_item(plan, goal_id, activity_id, item_id, _apply)


def update_context(
    plan: BudgetPlan,
    school_name: Optional[str] = None,
    school_code: Optional[str] = None,
    submitted_by: Optional[str] = None,
) -> BudgetPlan:
    changes = {
        key: value
        for key, value in (
            ("school_name", school_name),
            ("school_code", school_code),
            ("submitted_by", submitted_by),
        )
        if value is not None
    }
    if not changes:
        return plan
    return replace(plan, **changes)


__all__ = [
    "EDITABLE_TEXT_FIELDS",
    "NodeNotFoundError",
    "add_activity",
    "add_goal",
    "add_line_item",
    "remove_activity",
    "remove_goal",
    "remove_line_item",
    "rename_activity",
    "rename_goal",
    "update_context",
    "update_line_item",
    "update_quarter",
]
