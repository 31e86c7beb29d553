"""Application state: the single writer for the profile and transaction log.

Consumers get an AppState instance and call its mutating methods; each one
updates memory, publishes an event on the instance's bus and then persists.
Reads go through the derived properties or `pocketbook.view`.
"""
import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, List, Optional, Tuple

from pocketbook import aggregator
from pocketbook.config import Settings
from pocketbook.domain import DailyExpense, MonthlyGoal, Reward, Transaction, UserProfile, month_key
from pocketbook.errors import StorageError
from pocketbook.events import (
    EventBus,
    GOAL_UPDATED,
    LOGGED_OUT,
    POINTS_AWARDED,
    REWARD_UNLOCKED,
    TRANSACTION_ADDED,
    TRANSACTION_DELETED,
    USER_SET,
)
from pocketbook.functional import Either, Left, Loaded, Right, MISSING
from pocketbook.goals import GoalTracker
from pocketbook.rewards import DEFAULT_REWARDS, sync_rewards, unlock_reward
from pocketbook.storage import JsonFileStore, KeyValueStore, LocalStorage, MemoryStore
from pocketbook.validation import validate_profile

logger = logging.getLogger(__name__)


def store_from_settings(settings: Settings) -> KeyValueStore:
    if settings.storage_path:
        return JsonFileStore(settings.storage_path)
    return MemoryStore()


class AppState:

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings or Settings()
        self.storage = LocalStorage(
            store if store is not None else store_from_settings(self.settings),
            self.settings.storage_namespace,
        )
        self.clock = clock
        self.bus = EventBus()
        self.tracker = GoalTracker(fallback_target=self.settings.default_monthly_goal)
        self.tracker.subscribe(self.bus)

        self.user: Optional[UserProfile] = None
        self.transactions: Tuple[Transaction, ...] = ()
        self.rewards: Tuple[Reward, ...] = DEFAULT_REWARDS

        self.user_load: Loaded = Loaded(None)
        self.transactions_load: Loaded = Loaded(())
        self.degraded = False
        self.last_storage_error: Optional[StorageError] = None
        self.is_loaded = False

    # --- derived

    @property
    def today(self) -> date:
        return self.clock().date()

    @property
    def goals(self) -> Tuple[MonthlyGoal, ...]:
        return self.tracker.goals

    @property
    def balance(self) -> float:
        return aggregator.current_balance(self.transactions, self.user)

    @property
    def daily_expenses(self) -> List[DailyExpense]:
        return aggregator.daily_rollup(self.transactions, self.goals)

    @property
    def current_goal(self) -> Optional[MonthlyGoal]:
        return self.tracker.current(month_key(self.today))

    # --- persistence

    def _persist(self, action: Callable[[], None], what: str) -> bool:
        if self.degraded:
            logger.debug("Skipping %s write, running in memory only", what)
            return False
        try:
            action()
            return True
        except StorageError as e:
            self.degraded = True
            self.last_storage_error = e
            logger.error("Could not save %s, continuing in memory only: %s", what, e)
            return False

    def _save_user(self) -> bool:
        if self.user is None:
            return False
        user = self.user
        return self._persist(lambda: self.storage.save_user(user), "user")

    def _save_transactions(self) -> bool:
        trans = self.transactions
        return self._persist(lambda: self.storage.save_transactions(trans), "transactions")

    def load(self) -> "AppState":
        """Read the profile and log from the store and rebuild every cache."""
        try:
            self.user_load = self.storage.load_user()
            self.transactions_load = self.storage.load_transactions()
        except StorageError as e:
            self.degraded = True
            self.last_storage_error = e
            logger.error("Storage unavailable, starting empty in memory only: %s", e)
            self.user_load = Loaded(None, MISSING, str(e))
            self.transactions_load = Loaded((), MISSING, str(e))

        self.user = self.user_load.value
        self.transactions = tuple(self.transactions_load.value)
        self.tracker.reset()
        if self.user is not None:
            self.tracker.initialize(self.user, self.today.year)
            self.rewards = sync_rewards(self.rewards, self.user.reward_points, self.clock().isoformat())
        self.tracker.rebuild(self.transactions)
        self.is_loaded = True

        logger.info(
            "Loaded %s user and %d transactions (%s)",
            "a" if self.user else "no",
            len(self.transactions),
            self.transactions_load.status,
        )
        return self

    def retry_persistence(self) -> bool:
        """Leave degraded mode by writing the current state back."""
        self.degraded = False
        if self.user is None and not self.transactions:
            saved = self._persist(self.storage.clear_all, "cleared data")
        else:
            saved = self._save_transactions()
            if saved and self.user is not None:
                saved = self._save_user()
            elif saved:
                saved = self._persist(self.storage.remove_user, "user removal")
        if saved:
            self.last_storage_error = None
            logger.info("Storage available again")
        return saved

    # --- mutations

    def set_user(self, profile: UserProfile) -> UserProfile:
        self.user = profile
        self.tracker.initialize(profile, self.today.year)
        self.rewards = sync_rewards(self.rewards, profile.reward_points, self.clock().isoformat())
        self.bus.publish(USER_SET, {"user": profile})
        self._save_user()
        return profile

    def create_user(
        self,
        name: str,
        salary: str,
        initial_balance: str = "",
        monthly_expense_goal: str = "",
    ) -> Either[dict, UserProfile]:
        """Validate setup form input and, when it is clean, make it the current profile."""
        return validate_profile(
            name,
            salary,
            initial_balance,
            monthly_expense_goal,
            created_at=self.clock().isoformat(),
            goal_ratio=self.settings.default_goal_ratio,
        ).map(self.set_user)

    def add_transaction(self, transaction: Transaction) -> Transaction:
        if any(t.id == transaction.id for t in self.transactions):
            raise ValueError(f"Transaction {transaction.id} already exists")
        self.transactions = self.transactions + (transaction,)
        self.bus.publish(TRANSACTION_ADDED, {"transaction": transaction})
        self._save_transactions()
        return transaction

    def delete_transaction(self, transaction_id: str) -> Optional[Transaction]:
        removed = next((t for t in self.transactions if t.id == transaction_id), None)
        if removed is None:
            logger.info("Delete ignored, no transaction %s", transaction_id)
            return None
        self.transactions = tuple(t for t in self.transactions if t.id != transaction_id)
        self.bus.publish(TRANSACTION_DELETED, {"transaction": removed})
        self._save_transactions()
        return removed

    def update_monthly_goal(self, goal_id: str, target_amount: float) -> Either[dict, MonthlyGoal]:
        result = self.tracker.set_target(goal_id, target_amount)
        if result.is_left():
            return result
        goal = next(g for g in self.goals if g.id == goal_id)
        self.bus.publish(GOAL_UPDATED, {"goal": goal})
        return Right(goal)

    def add_monthly_goal(self, key: str, target_amount: float) -> Either[dict, MonthlyGoal]:
        result = self.tracker.add_goal(key, target_amount)
        if result.is_left():
            return result
        self.tracker.rebuild(self.transactions)
        goal = self.tracker.current(key)
        self.bus.publish(GOAL_UPDATED, {"goal": goal})
        return Right(goal)

    def unlock_reward(self, reward_id: str) -> Either[dict, Reward]:
        if not any(r.id == reward_id for r in self.rewards):
            return Left({
                "error": "reward_not_found",
                "message": f"Reward with ID {reward_id} does not exist",
                "reward_id": reward_id,
            })
        self.rewards = unlock_reward(self.rewards, reward_id, self.clock().isoformat())
        reward = next(r for r in self.rewards if r.id == reward_id)
        self.bus.publish(REWARD_UNLOCKED, {"reward": reward})
        return Right(reward)

    def award_points(self, points: int) -> Either[dict, UserProfile]:
        """Add (or, with a negative value, remove) reward points. Unlocks stay."""
        if self.user is None:
            return Left({"error": "no_user", "message": "Set up a profile before awarding points"})
        total = max(0, self.user.reward_points + int(points))
        self.user = replace(self.user, reward_points=total)
        self.rewards = sync_rewards(self.rewards, total, self.clock().isoformat())
        self.bus.publish(POINTS_AWARDED, {"points": points, "total": total})
        self._save_user()
        return Right(self.user)

    def logout(self) -> None:
        self._persist(self.storage.clear_all, "cleared data")
        self.user = None
        self.transactions = ()
        self.rewards = DEFAULT_REWARDS
        self.tracker.reset()
        self.bus.publish(LOGGED_OUT, {})
