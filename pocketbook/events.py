from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

__all__ = [
    'Event', 'EventBus',
    'USER_SET', 'TRANSACTION_ADDED', 'TRANSACTION_DELETED', 'GOAL_UPDATED',
    'REWARD_UNLOCKED', 'POINTS_AWARDED', 'LOGGED_OUT',
]

USER_SET = "USER_SET"
TRANSACTION_ADDED = "TRANSACTION_ADDED"
TRANSACTION_DELETED = "TRANSACTION_DELETED"
GOAL_UPDATED = "GOAL_UPDATED"
REWARD_UNLOCKED = "REWARD_UNLOCKED"
POINTS_AWARDED = "POINTS_AWARDED"
LOGGED_OUT = "LOGGED_OUT"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    """Synchronous publish/subscribe; handlers run in subscription order."""

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = list(self._subscribers.get(name, []))
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in handlers]
