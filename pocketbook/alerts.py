from datetime import date
from typing import Iterable, List, Optional

from pocketbook.aggregator import current_balance, in_month, period_totals
from pocketbook.currency import format_inr
from pocketbook.domain import Alert, Transaction, UserProfile

DANGER = "danger"
WARNING = "warning"
INFO = "info"

_SEVERITY = {DANGER: 0, WARNING: 1, INFO: 2}

HIGH_SPENDING_RATIO = 0.8
LOW_BALANCE_RATIO = 0.2
LOW_SAVINGS_RATIO = 0.1
ACTIVE_WEEK_DAYS = 7
ACTIVE_WEEK_COUNT = 5


def spending_alerts(
    trans: Iterable[Transaction], profile: Optional[UserProfile], today: date
) -> List[Alert]:
    trans = tuple(trans)
    salary = profile.salary if profile is not None else 0.0
    totals = period_totals(trans, today.year, today.month)
    month_count = len(tuple(filter(in_month(today.year, today.month), trans)))
    balance = current_balance(trans, profile)

    alerts = []

    if totals.expense > salary * HIGH_SPENDING_RATIO:
        share = round(totals.expense / (salary or 1) * 100)
        alerts.append(Alert(
            id="high-spending",
            type=WARNING,
            title="High Spending Alert",
            message=(
                f"You've spent {format_inr(totals.expense)} this month, "
                f"which is {share}% of your monthly salary."
            ),
        ))

    if balance < salary * LOW_BALANCE_RATIO:
        alerts.append(Alert(
            id="low-balance",
            type=DANGER,
            title="Low Balance Warning",
            message=f"Your current balance is {format_inr(balance)}. Consider reviewing your expenses.",
        ))

    if totals.income == 0 and month_count > 0:
        alerts.append(Alert(
            id="no-income",
            type=INFO,
            title="No Income Recorded",
            message=(
                "You haven't recorded any income this month. "
                "Don't forget to add your salary or other income sources."
            ),
        ))

    recent = [t for t in trans if 0 <= (today - t.date).days <= ACTIVE_WEEK_DAYS]
    if len(recent) >= ACTIVE_WEEK_COUNT:
        alerts.append(Alert(
            id="active-spending",
            type=INFO,
            title="Active Week",
            message=(
                f"You've made {len(recent)} transactions in the last {ACTIVE_WEEK_DAYS} days. "
                "Keep track of your spending patterns."
            ),
        ))

    savings = totals.net
    if 0 < savings < salary * LOW_SAVINGS_RATIO:
        alerts.append(Alert(
            id="savings-opportunity",
            type=INFO,
            title="Savings Opportunity",
            message=(
                f"You're saving {format_inr(savings)} this month. "
                "Consider increasing your savings rate for better financial health."
            ),
        ))

    return sorted(alerts, key=lambda a: _SEVERITY[a.type])
