from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from pocketbook import aggregator
from pocketbook.alerts import spending_alerts
from pocketbook.domain import (
    Alert,
    CategoryShare,
    DailyExpense,
    DailyOutlook,
    MonthlyGoal,
    MonthlyPoint,
    Recommendation,
    RewardLadder,
    SavingsSummary,
    Transaction,
    month_key,
)
from pocketbook.goals import default_target, find_goal, goal_progress
from pocketbook.recommendations import recommend
from pocketbook.rewards import ladder
from pocketbook.state import AppState


@dataclass(frozen=True)
class Dashboard:
    today: date
    balance: float
    recent_transactions: Tuple[Transaction, ...]
    expense_series: List[MonthlyPoint]
    categories: List[CategoryShare]
    current_goal: Optional[MonthlyGoal]
    goal_progress: Optional[dict]
    daily_expenses: List[DailyExpense]
    outlook: DailyOutlook
    recommendations: List[Recommendation]
    rewards: RewardLadder
    savings: SavingsSummary
    alerts: List[Alert]


def build_dashboard(state: AppState, today: Optional[date] = None) -> Dashboard:
    """Everything the presentation layer shows, derived from the state in one pass."""
    today = today or state.today
    trans = state.transactions
    settings = state.settings

    current = find_goal(state.goals, month_key(today))
    goal = current.get_or_else(None)
    target = goal.target_amount if goal else default_target(state.user, settings.default_monthly_goal)
    points = state.user.reward_points if state.user else 0

    return Dashboard(
        today=today,
        balance=aggregator.current_balance(trans, state.user),
        recent_transactions=aggregator.recent_transactions(trans, settings.recent_limit),
        expense_series=aggregator.monthly_expense_series(trans, today, settings.trend_months),
        categories=aggregator.category_totals(trans, today.year, today.month),
        current_goal=goal,
        goal_progress=current.map(goal_progress).get_or_else(None),
        daily_expenses=aggregator.daily_rollup(trans, state.goals),
        outlook=aggregator.daily_outlook(trans, target, today),
        recommendations=recommend(trans, target, today.year, today.month),
        rewards=ladder(state.rewards, points),
        savings=aggregator.savings_summary(trans, today),
        alerts=spending_alerts(trans, state.user, today),
    )
