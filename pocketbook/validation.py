"""Boundary checks for user input coming from forms.

Each validator returns Right(record) or Left({"error": "validation_failed",
"fields": {field: message}}).
"""
from datetime import date, datetime
from typing import Optional, Union

from pocketbook.currency import try_parse_inr
from pocketbook.domain import EXPENSE, INCOME, Transaction, UserProfile, new_transaction
from pocketbook.functional import Either, Left, Right, CORRUPT

DEFAULT_GOAL_RATIO = 0.7


def _failed(fields: dict) -> Left:
    return Left({
        "error": "validation_failed",
        "message": "; ".join(f"{k}: {v}" for k, v in fields.items()),
        "fields": fields,
    })


def validate_profile(
    name: str,
    salary: str,
    initial_balance: str = "",
    monthly_expense_goal: str = "",
    created_at: Optional[str] = None,
    goal_ratio: float = DEFAULT_GOAL_RATIO,
) -> Either[dict, UserProfile]:
    errors = {}

    if not (name or "").strip():
        errors["name"] = "Name is required"

    parsed_salary = try_parse_inr(salary)
    if parsed_salary.status == CORRUPT or parsed_salary.value <= 0:
        errors["salary"] = "Please enter a valid salary"

    parsed_balance = try_parse_inr(initial_balance)
    if parsed_balance.status == CORRUPT:
        errors["balance"] = "Please enter a valid initial balance"
    elif parsed_balance.value < 0:
        errors["balance"] = "Initial balance cannot be negative"

    parsed_goal = try_parse_inr(monthly_expense_goal)
    if parsed_goal.status == CORRUPT or (parsed_goal.ok and parsed_goal.value <= 0):
        errors["expenseGoal"] = "Please enter a valid expense goal"

    if errors:
        return _failed(errors)

    goal = parsed_goal.value if parsed_goal.ok else parsed_salary.value * goal_ratio
    return Right(UserProfile(
        name=name.strip(),
        salary=parsed_salary.value,
        initial_balance=parsed_balance.value,
        created_at=created_at or datetime.now().isoformat(),
        monthly_expense_goal=goal,
        reward_points=0,
    ))


def _as_date(value: Union[str, date, None]) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def validate_transaction_input(
    amount: str,
    category: str,
    on: Union[str, date, None],
    kind: str = EXPENSE,
    description: Optional[str] = None,
) -> Either[dict, Transaction]:
    """Build a new transaction from an unsigned amount and an income/expense choice."""
    errors = {}

    parsed = try_parse_inr(amount)
    if parsed.status == CORRUPT or parsed.value <= 0:
        errors["amount"] = "Please enter a valid amount"

    if not (category or "").strip():
        errors["category"] = "Please select a category"

    day = _as_date(on)
    if day is None:
        errors["date"] = "Please select a date"

    if kind not in (INCOME, EXPENSE):
        errors["type"] = "Type must be income or expense"

    if errors:
        return _failed(errors)

    signed = -parsed.value if kind == EXPENSE else parsed.value
    return Right(new_transaction(day, category.strip(), signed, (description or "").strip() or None))
