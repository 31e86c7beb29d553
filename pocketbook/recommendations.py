"""Spending recommendations against a fixed share of the monthly goal."""
from collections import OrderedDict
from typing import Dict, Iterable, List

from pocketbook.aggregator import expense_transactions, in_month
from pocketbook.currency import SYMBOL
from pocketbook.domain import Recommendation, Transaction

ALLOCATION: Dict[str, float] = {
    "Food": 0.25,
    "Transportation": 0.15,
    "Entertainment": 0.10,
    "Shopping": 0.20,
    "Bills": 0.20,
    "Healthcare": 0.05,
    "Education": 0.03,
    "Other": 0.02,
}
DEFAULT_SHARE = 0.10

UNDER = "under"
OPTIMAL = "optimal"
OVER = "over"

UNDER_THRESHOLD = 80.0
OVER_THRESHOLD = 120.0


def recommended_amount(category: str, monthly_goal: float) -> float:
    return monthly_goal * ALLOCATION.get(category, DEFAULT_SHARE)


def classify(percentage: float) -> str:
    if percentage < UNDER_THRESHOLD:
        return UNDER
    if percentage > OVER_THRESHOLD:
        return OVER
    return OPTIMAL


def recommend(
    trans: Iterable[Transaction], monthly_goal: float, year: int, month: int
) -> List[Recommendation]:
    """Rate each category with spend in the given month.

    Categories with no spend get no entry. Over-budget entries come first,
    then the rest; each group is ordered by descending percentage.
    """
    spent: "OrderedDict[str, float]" = OrderedDict()
    for t in expense_transactions(filter(in_month(year, month), trans)):
        spent[t.category] = spent.get(t.category, 0.0) + abs(t.amount)

    recs = []
    for category, current in spent.items():
        if current <= 0:
            continue
        recommended = recommended_amount(category, monthly_goal)
        percentage = current * 100 / recommended if recommended > 0 else 0.0
        recs.append(Recommendation(
            category=category,
            recommended_amount=recommended,
            current_amount=current,
            percentage=percentage,
            status=classify(percentage),
        ))

    return sorted(recs, key=lambda r: (r.status != OVER, -r.percentage))


def advice(rec: Recommendation) -> str:
    name = rec.category.lower()
    if rec.status == OVER:
        return (
            f"Consider reducing {name} spending by "
            f"{SYMBOL}{rec.current_amount - rec.recommended_amount:.0f} this month."
        )
    if rec.status == UNDER:
        return (
            f"You're doing well with {name} spending. You can spend up to "
            f"{SYMBOL}{rec.recommended_amount - rec.current_amount:.0f} more."
        )
    return f"Your {name} spending is well-balanced."


def status_counts(recs: Iterable[Recommendation]) -> Dict[str, int]:
    counts = {OVER: 0, UNDER: 0, OPTIMAL: 0}
    for r in recs:
        counts[r.status] += 1
    return counts
