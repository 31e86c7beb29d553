import logging
from datetime import date

from pocketbook.domain import MonthlyGoal, Transaction, UserProfile
from pocketbook.events import EventBus, TRANSACTION_ADDED, TRANSACTION_DELETED
from pocketbook.goals import (
    GoalTracker,
    add_goal,
    apply_transaction,
    find_goal,
    goal_progress,
    initialize_goals,
    is_under_budget,
    rebuild_goals,
    reverse_transaction,
    set_target,
)


def make_profile(goal=None):
    return UserProfile("Ravi", 80000.0, 1000.0, "2025-01-01T00:00:00", goal)


def expense(tid, amount, d=date(2025, 3, 5), category="Food"):
    return Transaction(tid, d, category, -amount)


def test_initialize_creates_twelve_goals_with_profile_target():
    goals = initialize_goals((), make_profile(56000.0), 2025)
    assert len(goals) == 12
    assert [g.month for g in goals][:2] == ["2025-01", "2025-02"]
    assert all(g.target_amount == 56000.0 for g in goals)
    assert all(g.current_amount == 0 for g in goals)


def test_initialize_defaults_to_fifty_thousand():
    goals = initialize_goals((), make_profile(None), 2025)
    assert goals[0].target_amount == 50000.0


def test_initialize_is_idempotent():
    once = initialize_goals((), make_profile(40000.0), 2025)
    twice = initialize_goals(once, make_profile(40000.0), 2025)
    assert twice == once


def test_initialize_keeps_existing_goal():
    existing = (MonthlyGoal("goal_2025-03", "2025-03", 1234.0, 200.0),)
    goals = initialize_goals(existing, make_profile(40000.0), 2025)
    assert len(goals) == 12
    march = find_goal(goals, "2025-03").get_or_else(None)
    assert march.target_amount == 1234.0
    assert march.current_amount == 200.0


def test_apply_adds_expense_to_matching_month():
    goals = initialize_goals((), make_profile(1000.0), 2025)
    goals = apply_transaction(goals, expense("t1", 200.0))
    assert find_goal(goals, "2025-03").get_or_else(None).current_amount == 200.0
    assert find_goal(goals, "2025-04").get_or_else(None).current_amount == 0


def test_apply_ignores_income():
    goals = initialize_goals((), make_profile(1000.0), 2025)
    income = Transaction("t1", date(2025, 3, 1), "Salary", 5000.0)
    assert apply_transaction(goals, income) == goals


def test_apply_creates_missing_goal_and_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="pocketbook.goals"):
        goals = apply_transaction((), expense("t1", 75.0, date(2024, 12, 31)), 9000.0)
    assert len(goals) == 1
    assert goals[0].month == "2024-12"
    assert goals[0].target_amount == 9000.0
    assert goals[0].current_amount == 75.0
    assert "No goal for 2024-12" in caplog.text


def test_add_then_reverse_restores_zero():
    goals = initialize_goals((), make_profile(1000.0), 2025)
    t = expense("t1", 200.0)
    goals = reverse_transaction(apply_transaction(goals, t), t)
    assert find_goal(goals, "2025-03").get_or_else(None).current_amount == 0


def test_reverse_clamps_at_zero(caplog):
    goals = (MonthlyGoal("goal_2025-03", "2025-03", 1000.0, 50.0),)
    with caplog.at_level(logging.WARNING, logger="pocketbook.goals"):
        goals = reverse_transaction(goals, expense("t1", 80.0))
    assert goals[0].current_amount == 0.0
    assert "clamping" in caplog.text


def test_goal_total_matches_log_after_mixed_operations():
    goals = initialize_goals((), make_profile(1000.0), 2025)
    log = []
    ops = [
        ("add", expense("a", 10.5)),
        ("add", expense("b", 99.99)),
        ("add", expense("c", 0.01)),
        ("del", "b"),
        ("add", expense("d", 250.0)),
        ("del", "a"),
        ("add", expense("e", 3.3)),
    ]
    for op, arg in ops:
        if op == "add":
            log.append(arg)
            goals = apply_transaction(goals, arg)
        else:
            t = next(x for x in log if x.id == arg)
            log.remove(t)
            goals = reverse_transaction(goals, t)

    expected = round(sum(abs(t.amount) for t in log), 2)
    assert find_goal(goals, "2025-03").get_or_else(None).current_amount == expected


def test_deleting_every_expense_leaves_exact_zero():
    goals = initialize_goals((), make_profile(1000.0), 2025)
    small = [expense("a", 0.1), expense("b", 0.2)]
    for t in small:
        goals = apply_transaction(goals, t)
    assert find_goal(goals, "2025-03").get_or_else(None).current_amount == 0.3

    for t in small:
        goals = reverse_transaction(goals, t)
    assert find_goal(goals, "2025-03").get_or_else(None).current_amount == 0

    rebuilt = rebuild_goals(goals, [expense("c", 0.1), expense("d", 0.2)])
    assert find_goal(rebuilt, "2025-03").get_or_else(None).current_amount == 0.3


def test_rebuild_recomputes_from_log_and_creates_missing_months():
    goals = (MonthlyGoal("goal_2025-03", "2025-03", 1000.0, 999.0),)
    trans = (expense("t1", 100.0), expense("t2", 50.0, date(2025, 4, 1)))
    rebuilt = rebuild_goals(goals, trans, 2000.0)
    assert find_goal(rebuilt, "2025-03").get_or_else(None).current_amount == 100.0
    april = find_goal(rebuilt, "2025-04").get_or_else(None)
    assert april.current_amount == 50.0
    assert april.target_amount == 2000.0


def test_set_target_rejects_non_positive():
    goals = initialize_goals((), make_profile(1000.0), 2025)
    for bad in (0, -10, float("nan")):
        result = set_target(goals, "goal_2025-03", bad)
        assert result.is_left()
        assert result.get_error()["error"] == "invalid_target"


def test_set_target_unknown_goal():
    result = set_target((), "goal_2030-01", 500.0)
    assert result.get_error()["error"] == "goal_not_found"


def test_set_target_updates_only_that_goal():
    goals = initialize_goals((), make_profile(1000.0), 2025)
    updated = set_target(goals, "goal_2025-03", 2500.0).get_or_else(None)
    assert find_goal(updated, "2025-03").get_or_else(None).target_amount == 2500.0
    assert find_goal(updated, "2025-02").get_or_else(None).target_amount == 1000.0


def test_add_goal_rejects_duplicate_month():
    goals = initialize_goals((), make_profile(1000.0), 2025)
    assert add_goal(goals, "2025-03", 10.0).get_error()["error"] == "goal_exists"
    assert add_goal(goals, "2026-01", 10.0).is_right()


def test_under_budget_and_progress():
    goal = MonthlyGoal("goal_2025-03", "2025-03", 1000.0, 1000.0)
    assert is_under_budget(goal)
    assert goal.is_achieved

    over = MonthlyGoal("goal_2025-03", "2025-03", 1000.0, 1500.0)
    assert not is_under_budget(over)
    progress = goal_progress(over)
    assert progress["progress"] == 100.0
    assert progress["remaining"] == -500.0
    assert progress["over_budget"] is True


def test_tracker_follows_bus_events_and_counts_repairs():
    bus = EventBus()
    tracker = GoalTracker(fallback_target=3000.0)
    tracker.subscribe(bus)
    tracker.initialize(make_profile(None), 2025)

    t = expense("t1", 120.0)
    results = bus.publish(TRANSACTION_ADDED, {"transaction": t})
    assert results == [{"month": "2025-03", "goal_delta": 120.0}]
    assert tracker.current("2025-03").current_amount == 120.0
    assert tracker.current("2025-03").target_amount == 3000.0

    bus.publish(TRANSACTION_DELETED, {"transaction": t})
    assert tracker.current("2025-03").current_amount == 0
    assert tracker.missing_goal_count == 0

    bus.publish(TRANSACTION_ADDED, {"transaction": expense("old", 5.0, date(2023, 1, 1))})
    assert tracker.missing_goal_count == 1

    bus.publish(TRANSACTION_DELETED, {"transaction": expense("ghost", 99.0)})
    assert tracker.clamp_count == 1
    assert tracker.current("2025-03").current_amount == 0
