from datetime import date

import pytest

from pocketbook.domain import Transaction
from pocketbook.recommendations import (
    OPTIMAL,
    OVER,
    UNDER,
    advice,
    classify,
    recommend,
    recommended_amount,
    status_counts,
)


def spend(tid, category, amount, d=date(2025, 3, 10)):
    return Transaction(tid, d, category, -amount)


def test_exactly_120_percent_is_optimal():
    recs = recommend((spend("t1", "Food", 300.0),), 1000.0, 2025, 3)
    assert len(recs) == 1
    food = recs[0]
    assert food.recommended_amount == 250.0
    assert food.percentage == 120.0
    assert food.status == OPTIMAL


def test_classify_boundaries():
    assert classify(79.99) == UNDER
    assert classify(80.0) == OPTIMAL
    assert classify(120.0) == OPTIMAL
    assert classify(120.01) == OVER


def test_unknown_category_gets_ten_percent():
    assert recommended_amount("Netflix", 1000.0) == pytest.approx(100.0)
    assert recommended_amount("Education", 1000.0) == pytest.approx(30.0)


def test_only_current_month_expenses_count():
    trans = (
        spend("t1", "Food", 100.0),
        spend("t2", "Food", 900.0, date(2025, 2, 10)),
        Transaction("t3", date(2025, 3, 1), "Salary", 5000.0),
    )
    recs = recommend(trans, 1000.0, 2025, 3)
    assert [(r.category, r.current_amount) for r in recs] == [("Food", 100.0)]


def test_no_recommendation_without_spend():
    assert recommend((), 1000.0, 2025, 3) == []


def test_over_entries_sorted_first_then_by_percentage():
    trans = (
        spend("t1", "Food", 100.0),            # 40%  under
        spend("t2", "Other", 50.0),            # 250% over
        spend("t3", "Shopping", 200.0),        # 100% optimal
        spend("t4", "Transportation", 300.0),  # 200% over
        spend("t5", "Bills", 30.0),            # 15%  under
    )
    recs = recommend(trans, 1000.0, 2025, 3)
    assert [r.category for r in recs] == ["Other", "Transportation", "Shopping", "Food", "Bills"]
    assert [r.status for r in recs] == [OVER, OVER, OPTIMAL, UNDER, UNDER]


def test_advice_and_counts():
    recs = recommend((spend("t1", "Other", 50.0), spend("t2", "Food", 100.0)), 1000.0, 2025, 3)
    over, under = recs
    assert advice(over) == "Consider reducing other spending by ₹30 this month."
    assert advice(under) == "You're doing well with food spending. You can spend up to ₹150 more."
    assert status_counts(recs) == {OVER: 1, UNDER: 1, OPTIMAL: 0}
