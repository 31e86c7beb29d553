import calendar
from collections import OrderedDict
from datetime import date
from functools import reduce
from typing import Iterable, List, Optional, Tuple

import pandas as pd

from pocketbook.domain import (
    CategoryShare,
    DailyExpense,
    DailyOutlook,
    MonthlyGoal,
    MonthlyPoint,
    PeriodTotals,
    SavingsSummary,
    Transaction,
    UserProfile,
    days_in_month,
    month_key,
)


def in_month(year: int, month: int):
    def _filter(t: Transaction) -> bool:
        return t.date.year == year and t.date.month == month

    return _filter


def expense_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.amount < 0, trans))


def income_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.amount > 0, trans))


def previous_month(year: int, month: int) -> Tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


def current_balance(trans: Iterable[Transaction], profile: Optional[UserProfile]) -> float:
    if profile is None:
        return 0.0
    return reduce(lambda acc, t: acc + t.amount, trans, profile.initial_balance)


def period_totals(trans: Iterable[Transaction], year: int, month: int) -> PeriodTotals:
    in_period = tuple(filter(in_month(year, month), trans))
    income = sum(t.amount for t in income_transactions(in_period))
    expense = sum(abs(t.amount) for t in expense_transactions(in_period))
    return PeriodTotals(income=income, expense=expense)


def category_totals(trans: Iterable[Transaction], year: int, month: int) -> List[CategoryShare]:
    """Current-month expense split by category, in first-seen order."""
    totals: "OrderedDict[str, float]" = OrderedDict()
    for t in expense_transactions(filter(in_month(year, month), trans)):
        totals[t.category] = totals.get(t.category, 0.0) + abs(t.amount)

    grand_total = sum(totals.values())
    return [
        CategoryShare(
            category=category,
            amount=amount,
            percentage=(amount / grand_total * 100) if grand_total > 0 else 0.0,
        )
        for category, amount in totals.items()
    ]


def daily_rollup(
    trans: Iterable[Transaction], goals: Iterable[MonthlyGoal] = ()
) -> List[DailyExpense]:
    """Group every expense by calendar date.

    A day is under budget when its total fits the month's goal spread evenly
    over the days of that month; days without a known goal count as under.
    """
    targets = {g.month: g.target_amount for g in goals}
    by_day: "OrderedDict[date, List[Transaction]]" = OrderedDict()
    for t in expense_transactions(trans):
        by_day.setdefault(t.date, []).append(t)

    rollups = []
    for day in sorted(by_day):
        day_trans = tuple(by_day[day])
        total = sum(abs(t.amount) for t in day_trans)
        key = month_key(day)
        under = True
        if key in targets:
            under = total <= targets[key] / days_in_month(key)
        rollups.append(DailyExpense(date=day, total_amount=total, transactions=day_trans, is_under_budget=under))
    return rollups


def recent_transactions(trans: Iterable[Transaction], limit: int = 3) -> Tuple[Transaction, ...]:
    return tuple(sorted(trans, key=lambda t: t.date, reverse=True)[: max(0, limit)])


def expense_history(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(sorted(expense_transactions(trans), key=lambda t: t.date, reverse=True))


def monthly_expense_series(
    trans: Iterable[Transaction], today: date, months: int = 6
) -> List[MonthlyPoint]:
    """Expense totals for the `months` calendar months ending with today's month."""
    periods = pd.period_range(end=pd.Period(year=today.year, month=today.month, freq="M"), periods=months, freq="M")
    expenses = expense_transactions(trans)

    if expenses:
        df = pd.DataFrame(
            {
                "date": pd.to_datetime([t.date for t in expenses]),
                "amount": [abs(t.amount) for t in expenses],
            }
        )
        totals = df.groupby(df["date"].dt.to_period("M"))["amount"].sum().reindex(periods, fill_value=0.0)
    else:
        totals = pd.Series(0.0, index=periods)

    return [
        MonthlyPoint(
            month=calendar.month_abbr[p.month],
            full_month=calendar.month_name[p.month],
            key=f"{p.year:04d}-{p.month:02d}",
            amount=float(amount),
        )
        for p, amount in zip(periods, totals.tolist())
    ]


def savings_summary(trans: Iterable[Transaction], today: date) -> SavingsSummary:
    trans = tuple(trans)
    this_month = period_totals(trans, today.year, today.month)
    last_month = period_totals(trans, *previous_month(today.year, today.month))
    return SavingsSummary(
        saved_this_month=this_month.net,
        change_vs_last_month=this_month.net - last_month.net,
    )


def daily_outlook(trans: Iterable[Transaction], target: float, today: date) -> DailyOutlook:
    month_expenses = expense_transactions(filter(in_month(today.year, today.month), trans))
    month_total = sum(abs(t.amount) for t in month_expenses)
    today_total = sum(abs(t.amount) for t in month_expenses if t.date == today)

    total_days = days_in_month(month_key(today))
    daily_average = month_total / today.day
    remaining_days = total_days - today.day
    remaining_budget = target - month_total
    per_day = remaining_budget / remaining_days if remaining_days > 0 else remaining_budget

    return DailyOutlook(
        today_total=today_total,
        daily_average=daily_average,
        projected_month_total=daily_average * total_days,
        remaining_budget=remaining_budget,
        recommended_daily=max(0.0, per_day),
    )
