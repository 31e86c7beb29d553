import math
import random
import string
import time
from calendar import monthrange
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Tuple

TRANSACTION_CATEGORIES = ("Food", "Taxi", "Netflix", "Salary", "Paypal", "Shopping", "Other")

EXPENSE_CATEGORIES = (
    "Food",
    "Transportation",
    "Entertainment",
    "Shopping",
    "Bills",
    "Healthcare",
    "Education",
    "Other",
)

INCOME = "income"
EXPENSE = "expense"


def month_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def days_in_month(key: str) -> int:
    year, month = (int(p) for p in key.split("-"))
    return monthrange(year, month)[1]


def new_id(prefix: str) -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


@dataclass(frozen=True)
class Transaction:
    id: str
    date: date
    category: str
    amount: float              # + for income, - for expense
    description: Optional[str] = None

    def __post_init__(self):
        if not math.isfinite(self.amount) or self.amount == 0:
            raise ValueError(f"Transaction amount must be a non-zero number, got {self.amount!r}")

    @property
    def type(self) -> str:
        return INCOME if self.amount > 0 else EXPENSE

    @property
    def is_expense(self) -> bool:
        return self.amount < 0

    @property
    def month(self) -> str:
        return month_key(self.date)


def new_transaction(
    d: date, category: str, amount: float, description: Optional[str] = None
) -> Transaction:
    return Transaction(
        id=new_id("tx"),
        date=d,
        category=category,
        amount=amount,
        description=description or None,
    )


@dataclass(frozen=True)
class UserProfile:
    name: str
    salary: float
    initial_balance: float
    created_at: str
    monthly_expense_goal: Optional[float] = None
    reward_points: int = 0

    def __post_init__(self):
        if self.reward_points < 0:
            raise ValueError("reward_points cannot be negative")


@dataclass(frozen=True)
class MonthlyGoal:
    id: str
    month: str          # "YYYY-MM"
    target_amount: float
    current_amount: float = 0.0
    reward_points: int = 0

    @property
    def is_achieved(self) -> bool:
        # derived on read, never stored
        return self.current_amount <= self.target_amount


def goal_id_for(key: str) -> str:
    return f"goal_{key}"


@dataclass(frozen=True)
class DailyExpense:
    date: date
    total_amount: float
    transactions: Tuple[Transaction, ...]
    is_under_budget: bool = True


@dataclass(frozen=True)
class Reward:
    id: str
    title: str
    description: str
    points_required: int
    is_unlocked: bool = False
    unlocked_at: Optional[str] = None


@dataclass(frozen=True)
class Recommendation:
    category: str
    recommended_amount: float
    current_amount: float
    percentage: float
    status: str          # "under" | "optimal" | "over"


@dataclass(frozen=True)
class CategoryShare:
    category: str
    amount: float
    percentage: float

    @property
    def rounded_percentage(self) -> int:
        return int(math.floor(self.percentage + 0.5))


@dataclass(frozen=True)
class PeriodTotals:
    income: float = 0.0
    expense: float = 0.0

    @property
    def net(self) -> float:
        return self.income - self.expense


@dataclass(frozen=True)
class MonthlyPoint:
    month: str          # "Jan"
    full_month: str     # "January"
    key: str            # "YYYY-MM"
    amount: float


@dataclass(frozen=True)
class SavingsSummary:
    saved_this_month: float
    change_vs_last_month: float


@dataclass(frozen=True)
class DailyOutlook:
    today_total: float
    daily_average: float
    projected_month_total: float
    remaining_budget: float
    recommended_daily: float

    @property
    def over_budget(self) -> bool:
        return self.remaining_budget < 0


@dataclass(frozen=True)
class Alert:
    id: str
    type: str            # "danger" | "warning" | "info"
    title: str
    message: str


@dataclass(frozen=True)
class RewardLadder:
    points: int
    unlocked: Tuple[Reward, ...]
    locked: Tuple[Reward, ...]
    next_reward: Optional[Reward]
    progress: float
    points_to_next: int = field(default=0)
