"""Per-month expense goals, kept in step with the transaction log.

Goals are immutable; every operation returns a new tuple. `GoalTracker`
wraps the tuple for `AppState`, listens to transaction events on the state's
event bus and counts the consistency repairs the pure functions perform.
"""
import logging
from collections import defaultdict
from dataclasses import replace
from typing import Dict, Iterable, Optional, Tuple

from pocketbook.domain import MonthlyGoal, Transaction, UserProfile, goal_id_for
from pocketbook.events import Event, EventBus, TRANSACTION_ADDED, TRANSACTION_DELETED
from pocketbook.functional import Either, Left, Maybe, Nothing, Right, Some

logger = logging.getLogger(__name__)

DEFAULT_TARGET = 50000.0

Goals = Tuple[MonthlyGoal, ...]


def default_target(profile: Optional[UserProfile], fallback: float = DEFAULT_TARGET) -> float:
    if profile is not None and profile.monthly_expense_goal:
        return profile.monthly_expense_goal
    return fallback


def find_goal(goals: Iterable[MonthlyGoal], key: str) -> Maybe[MonthlyGoal]:
    for g in goals:
        if g.month == key:
            return Some(g)
    return Nothing()


def _new_goal(key: str, target: float) -> MonthlyGoal:
    return MonthlyGoal(id=goal_id_for(key), month=key, target_amount=target)


def initialize_goals(
    goals: Goals, profile: Optional[UserProfile], year: int, fallback: float = DEFAULT_TARGET
) -> Goals:
    """Make sure every month of `year` has a goal; existing goals are untouched."""
    target = default_target(profile, fallback)
    existing = {g.month for g in goals}
    missing = tuple(
        _new_goal(key, target)
        for key in (f"{year:04d}-{m:02d}" for m in range(1, 13))
        if key not in existing
    )
    return goals + missing


def _adjust(goals: Goals, key: str, delta: float) -> Goals:
    return tuple(
        replace(g, current_amount=round(g.current_amount + delta, 2)) if g.month == key else g
        for g in goals
    )


def apply_transaction(goals: Goals, t: Transaction, target: float = DEFAULT_TARGET) -> Goals:
    if not t.is_expense:
        return goals
    if find_goal(goals, t.month).is_none():
        logger.warning(
            "No goal for %s while applying transaction %s; creating one with target %.2f",
            t.month, t.id, target,
        )
        goals = goals + (_new_goal(t.month, target),)
    return _adjust(goals, t.month, abs(t.amount))


def reverse_transaction(goals: Goals, t: Transaction) -> Goals:
    if not t.is_expense:
        return goals

    goal = find_goal(goals, t.month).get_or_else(None)
    if goal is None:
        logger.warning("No goal for %s while reversing transaction %s", t.month, t.id)
        return goals

    remaining = round(goal.current_amount - abs(t.amount), 2)
    if remaining < 0:
        logger.warning(
            "Goal %s would go negative (%.2f) reversing %s; clamping to 0",
            goal.id, remaining, t.id,
        )
        remaining = 0.0
    return tuple(replace(g, current_amount=remaining) if g.id == goal.id else g for g in goals)


def rebuild_goals(goals: Goals, trans: Iterable[Transaction], target: float = DEFAULT_TARGET) -> Goals:
    """Recompute every current_amount from the log.

    Months with expenses but no goal get one with `target`.
    """
    totals: Dict[str, float] = defaultdict(float)
    for t in trans:
        if t.is_expense:
            totals[t.month] += abs(t.amount)

    existing = {g.month for g in goals}
    created = tuple(_new_goal(key, target) for key in sorted(set(totals) - existing))
    if created:
        logger.debug("Created goals for %s while rebuilding", ", ".join(g.month for g in created))
    return tuple(replace(g, current_amount=round(totals.get(g.month, 0.0), 2)) for g in goals + created)


def set_target(goals: Goals, goal_id: str, new_target: float) -> Either[dict, Goals]:
    if not isinstance(new_target, (int, float)) or not new_target > 0:
        return Left({
            "error": "invalid_target",
            "message": f"Goal target must be greater than 0, got {new_target!r}",
            "goal_id": goal_id,
        })
    if not any(g.id == goal_id for g in goals):
        return Left({
            "error": "goal_not_found",
            "message": f"Goal with ID {goal_id} does not exist",
            "goal_id": goal_id,
        })
    return Right(tuple(replace(g, target_amount=new_target) if g.id == goal_id else g for g in goals))


def add_goal(goals: Goals, key: str, target: float) -> Either[dict, Goals]:
    if not isinstance(target, (int, float)) or not target > 0:
        return Left({
            "error": "invalid_target",
            "message": f"Goal target must be greater than 0, got {target!r}",
            "month": key,
        })
    if find_goal(goals, key).is_some():
        return Left({
            "error": "goal_exists",
            "message": f"A goal for {key} already exists",
            "month": key,
        })
    return Right(goals + (_new_goal(key, target),))


def is_under_budget(goal: MonthlyGoal) -> bool:
    return goal.current_amount <= goal.target_amount


def goal_progress(goal: MonthlyGoal) -> dict:
    progress = min(goal.current_amount / goal.target_amount * 100, 100.0) if goal.target_amount > 0 else 100.0
    remaining = goal.target_amount - goal.current_amount
    return {
        "progress": progress,
        "remaining": remaining,
        "over_budget": remaining < 0,
    }


class GoalTracker:
    """Holds the goal set and keeps it in step with transaction events."""

    def __init__(self, goals: Goals = (), fallback_target: float = DEFAULT_TARGET):
        self.goals: Goals = tuple(goals)
        self.fallback_target = fallback_target
        self.profile: Optional[UserProfile] = None
        self.missing_goal_count = 0
        self.clamp_count = 0

    @property
    def target(self) -> float:
        return default_target(self.profile, self.fallback_target)

    def subscribe(self, bus: EventBus) -> None:
        bus.subscribe(TRANSACTION_ADDED, self.on_transaction_added)
        bus.subscribe(TRANSACTION_DELETED, self.on_transaction_deleted)

    def initialize(self, profile: Optional[UserProfile], year: int) -> Goals:
        self.profile = profile
        self.goals = initialize_goals(self.goals, profile, year, self.fallback_target)
        return self.goals

    def apply(self, t: Transaction) -> Goals:
        if t.is_expense and find_goal(self.goals, t.month).is_none():
            self.missing_goal_count += 1
        self.goals = apply_transaction(self.goals, t, self.target)
        return self.goals

    def reverse(self, t: Transaction) -> Goals:
        if t.is_expense:
            goal = find_goal(self.goals, t.month).get_or_else(None)
            if goal is None:
                self.missing_goal_count += 1
            elif round(goal.current_amount - abs(t.amount), 2) < 0:
                self.clamp_count += 1
        self.goals = reverse_transaction(self.goals, t)
        return self.goals

    def rebuild(self, trans: Iterable[Transaction]) -> Goals:
        self.goals = rebuild_goals(self.goals, trans, self.target)
        return self.goals

    def set_target(self, goal_id: str, new_target: float) -> Either[dict, Goals]:
        result = set_target(self.goals, goal_id, new_target)
        self.goals = result.get_or_else(self.goals)
        return result

    def add_goal(self, key: str, target: float) -> Either[dict, Goals]:
        result = add_goal(self.goals, key, target)
        self.goals = result.get_or_else(self.goals)
        return result

    def current(self, key: str) -> Optional[MonthlyGoal]:
        return find_goal(self.goals, key).get_or_else(None)

    def reset(self) -> None:
        self.goals = ()
        self.profile = None

    def on_transaction_added(self, event: Event, payload: dict) -> dict:
        t = payload["transaction"]
        self.apply(t)
        return {"month": t.month, "goal_delta": abs(t.amount) if t.is_expense else 0.0}

    def on_transaction_deleted(self, event: Event, payload: dict) -> dict:
        t = payload["transaction"]
        self.reverse(t)
        return {"month": t.month, "goal_delta": -abs(t.amount) if t.is_expense else 0.0}
