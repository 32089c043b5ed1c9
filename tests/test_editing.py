from __future__ import annotations

import pytest

from budgetplan.aggregation import grand_total, line_item_total
from budgetplan.editing import (
    NodeNotFoundError,
    add_activity,
    add_goal,
    add_line_item,
    remove_activity,
    remove_goal,
    remove_line_item,
    rename_activity,
    rename_goal,
    update_context,
    update_line_item,
    update_quarter,
)
from budgetplan.models import BudgetPlan, QuarterDetail


def _build_plan():
    plan = BudgetPlan()
    plan, goal_id = add_goal(plan, "Goal")
    plan, activity_id = add_activity(plan, goal_id, "Cluster")
    plan, item_id = add_line_item(plan, goal_id, activity_id, "Item")
    return plan, goal_id, activity_id, item_id


def test_new_nodes_get_unique_ids_and_empty_defaults():
    plan, goal_id, activity_id, item_id = _build_plan()

    assert len({goal_id, activity_id, item_id}) == 3
    item = plan.goals[0].activities[0].line_items[0]
    assert item.id == item_id
    assert item.description == ""
    assert item.q1 == QuarterDetail(0, 0)
    assert grand_total(plan) == 0


def test_edits_return_new_plan_and_leave_input_untouched(sample_plan):
    updated = rename_goal(sample_plan, "goal-infra", "Campus")

    assert updated is not sample_plan
    assert sample_plan.goals[1].name == "Infrastructure"
    assert updated.goals[1].name == "Campus"


def test_quarter_edit_only_copies_the_ancestor_path(sample_plan):
    updated = update_quarter(
        sample_plan, "goal-academic", "act-faculty", "item-Books", "q2", "quantity", 10
    )

    old_goal, new_goal = sample_plan.goals[0], updated.goals[0]
    assert new_goal is not old_goal
    # untouched subtrees are shared, not copied
    assert updated.goals[1] is sample_plan.goals[1]
    assert new_goal.activities[1] is old_goal.activities[1]
    assert new_goal.activities[0].line_items[0] is old_goal.activities[0].line_items[0]

    books = new_goal.activities[0].line_items[1]
    assert books.q2 == QuarterDetail(rate=25, quantity=10)
    assert line_item_total(books) == 250
    assert books.id == "item-Books"


def test_update_quarter_coerces_unparseable_values_to_zero(sample_plan):
    updated = update_quarter(
        sample_plan, "goal-infra", "act-maintenance", "item-AC servicing", "q2", "rate", "abc"
    )
    assert updated.goals[1].activities[0].line_items[0].q2.rate == 0

    negative = update_quarter(
        sample_plan, "goal-infra", "act-maintenance", "item-AC servicing", "q2", "rate", -5
    )
    assert negative.goals[1].activities[0].line_items[0].q2.rate == -5


def test_update_quarter_rejects_unknown_quarter_or_field(sample_plan):
    with pytest.raises(ValueError):
        update_quarter(sample_plan, "goal-infra", "act-maintenance", "item-AC servicing", "q5", "rate", 1)
    with pytest.raises(ValueError):
        update_quarter(sample_plan, "goal-infra", "act-maintenance", "item-AC servicing", "q1", "amount", 1)


def test_selecting_known_ledger_fills_code():
    plan, goal_id, activity_id, item_id = _build_plan()

    plan = update_line_item(
        plan, goal_id, activity_id, item_id, "ledger_name", "Conference and Seminar Expense"
    )
    item = plan.goals[0].activities[0].line_items[0]
    assert item.ledger_code == "E-1008"

    plan = update_line_item(plan, goal_id, activity_id, item_id, "ledger_name", "Not A Real Ledger")
    item = plan.goals[0].activities[0].line_items[0]
    assert item.ledger_name == "Not A Real Ledger"
    assert item.ledger_code == ""


def test_ledger_code_and_id_are_not_directly_editable():
    plan, goal_id, activity_id, item_id = _build_plan()
    with pytest.raises(ValueError):
        update_line_item(plan, goal_id, activity_id, item_id, "ledger_code", "X-1")
    with pytest.raises(ValueError):
        update_line_item(plan, goal_id, activity_id, item_id, "id", "other")


def test_text_fields_update(sample_plan):
    updated = update_line_item(
        sample_plan, "goal-academic", "act-outreach", "item-Campaign", "review_comments", "Reduce scope"
    )
    assert updated.goals[0].activities[1].line_items[0].review_comments == "Reduce scope"


def test_remove_goal_drops_whole_subtree(sample_plan):
    updated = remove_goal(sample_plan, "goal-academic")

    assert [goal.name for goal in updated.goals] == ["Infrastructure"]
    assert grand_total(updated) == 900


def test_remove_activity_and_line_item(sample_plan):
    without_outreach = remove_activity(sample_plan, "goal-academic", "act-outreach")
    assert [a.name for a in without_outreach.goals[0].activities] == ["Faculty Development"]

    without_books = remove_line_item(sample_plan, "goal-academic", "act-faculty", "item-Books")
    assert [i.name for i in without_books.goals[0].activities[0].line_items] == ["Workshop"]


def test_rename_activity_preserves_order(sample_plan):
    updated = rename_activity(sample_plan, "goal-academic", "act-faculty", "Faculty Growth")
    assert [a.name for a in updated.goals[0].activities] == ["Faculty Growth", "Outreach"]


def test_ids_are_not_reused_after_deletion():
    plan, goal_id, _, _ = _build_plan()
    plan = remove_goal(plan, goal_id)
    plan, new_goal_id = add_goal(plan, "Goal")
    assert new_goal_id != goal_id


def test_unknown_ids_raise_node_not_found(sample_plan):
    with pytest.raises(NodeNotFoundError):
        rename_goal(sample_plan, "missing", "x")
    with pytest.raises(NodeNotFoundError):
        add_line_item(sample_plan, "goal-academic", "missing")
    with pytest.raises(NodeNotFoundError):
        remove_line_item(sample_plan, "goal-academic", "act-faculty", "missing")
    with pytest.raises(KeyError):
        remove_goal(sample_plan, "missing")


def test_update_context_only_touches_given_fields(sample_plan):
    updated = update_context(sample_plan, school_code="SB-02")

    assert updated.school_code == "SB-02"
    assert updated.school_name == "School of Business"
    assert updated.goals is sample_plan.goals
    assert update_context(sample_plan) is sample_plan
