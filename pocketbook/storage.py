"""Key-value persistence for the user profile and the transaction log.

Records are JSON strings under two keys, `<namespace>.user` and
`<namespace>.transactions`, using the camelCase field names of the browser
build so existing exports load unchanged.
"""
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

from pocketbook.domain import Transaction, UserProfile
from pocketbook.errors import StorageError
from pocketbook.functional import Loaded, OK, MISSING, CORRUPT

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "expense-tracker"


class KeyValueStore(ABC):

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass


class MemoryStore(KeyValueStore):

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(data or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """All keys in one JSON object file, rewritten atomically on every change."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Store {self.path} does not hold a JSON object")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except OSError as e:
            raise StorageError(f"Cannot write store {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if value is None or isinstance(value, str) else json.dumps(value)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


# --- record codecs

def transaction_to_dict(t: Transaction) -> dict:
    d = {
        "id": t.id,
        "date": t.date.isoformat(),
        "category": t.category,
        "amount": t.amount,
        "type": t.type,
    }
    if t.description:
        d["description"] = t.description
    return d


def transaction_from_dict(d: dict) -> Transaction:
    t = Transaction(
        id=str(d["id"]),
        date=date.fromisoformat(str(d["date"])[:10]),
        category=str(d["category"]),
        amount=float(d["amount"]),
        description=d.get("description") or None,
    )
    stored_type = d.get("type")
    if stored_type is not None and stored_type != t.type:
        logger.warning(
            "Transaction %s is tagged %r but its amount %.2f makes it %r; using the amount",
            t.id, stored_type, t.amount, t.type,
        )
    return t


def profile_to_dict(p: UserProfile) -> dict:
    d = {
        "name": p.name,
        "salary": p.salary,
        "initialBalance": p.initial_balance,
        "createdAt": p.created_at,
        "rewardPoints": p.reward_points,
    }
    if p.monthly_expense_goal is not None:
        d["monthlyExpenseGoal"] = p.monthly_expense_goal
    return d


def profile_from_dict(d: dict) -> UserProfile:
    goal = d.get("monthlyExpenseGoal")
    return UserProfile(
        name=str(d["name"]),
        salary=float(d["salary"]),
        initial_balance=float(d.get("initialBalance") or 0),
        created_at=str(d.get("createdAt") or ""),
        monthly_expense_goal=float(goal) if goal else None,
        reward_points=int(d.get("rewardPoints") or 0),
    )


class LocalStorage:
    """The two logical records on top of any KeyValueStore."""

    def __init__(self, store: KeyValueStore, namespace: str = DEFAULT_NAMESPACE):
        self.store = store
        self.user_key = f"{namespace}.user"
        self.transactions_key = f"{namespace}.transactions"

    def _load_json(self, key: str) -> Loaded:
        raw = self.store.get(key)
        if raw is None or raw == "":
            return Loaded(None, MISSING)
        try:
            return Loaded(json.loads(raw), OK)
        except json.JSONDecodeError as e:
            logger.warning("Stored value under %s is not valid JSON: %s", key, e)
            return Loaded(None, CORRUPT, str(e))

    def load_user(self) -> Loaded[Optional[UserProfile]]:
        loaded = self._load_json(self.user_key)
        if not loaded.ok:
            return loaded
        if loaded.value is None:
            return Loaded(None, MISSING)
        try:
            return Loaded(profile_from_dict(loaded.value), OK)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Stored user profile under %s is malformed: %s", self.user_key, e)
            return Loaded(None, CORRUPT, str(e))

    def load_transactions(self) -> Loaded[Tuple[Transaction, ...]]:
        loaded = self._load_json(self.transactions_key)
        if loaded.status == MISSING or (loaded.ok and loaded.value is None):
            return Loaded((), MISSING)
        if not loaded.ok:
            return Loaded((), CORRUPT, loaded.detail)
        if not isinstance(loaded.value, list):
            logger.warning("Stored transactions under %s are not a list", self.transactions_key)
            return Loaded((), CORRUPT, "transactions payload is not a list")

        trans = []
        seen = set()
        skipped = 0
        for entry in loaded.value:
            try:
                t = transaction_from_dict(entry)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                skipped += 1
                logger.warning("Skipping malformed stored transaction %r: %s", entry, e)
                continue
            if t.id in seen:
                skipped += 1
                logger.warning("Skipping repeated stored transaction id %s", t.id)
                continue
            seen.add(t.id)
            trans.append(t)

        if skipped:
            return Loaded(tuple(trans), CORRUPT, f"skipped {skipped} malformed or repeated transactions")
        return Loaded(tuple(trans), OK)

    def save_user(self, profile: UserProfile) -> None:
        self.store.set(self.user_key, json.dumps(profile_to_dict(profile), ensure_ascii=False))

    def save_transactions(self, trans: Iterable[Transaction]) -> None:
        payload = [transaction_to_dict(t) for t in trans]
        self.store.set(self.transactions_key, json.dumps(payload, ensure_ascii=False))

    def remove_user(self) -> None:
        self.store.remove(self.user_key)

    def clear_all(self) -> None:
        self.remove_user()
        self.store.remove(self.transactions_key)
