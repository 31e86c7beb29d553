"""Points-based reward ladder. Unlocks are one-way."""
from dataclasses import replace
from typing import Iterable, Optional, Tuple

from pocketbook.domain import Reward, RewardLadder

DEFAULT_REWARDS: Tuple[Reward, ...] = (
    Reward(
        id="reward_1",
        title="Budget Master",
        description="Stay under budget for 3 consecutive months",
        points_required=100,
    ),
    Reward(
        id="reward_2",
        title="Savings Champion",
        description="Save more than 30% of your income",
        points_required=200,
    ),
    Reward(
        id="reward_3",
        title="Expense Tracker",
        description="Log expenses for 30 consecutive days",
        points_required=150,
    ),
    Reward(
        id="reward_4",
        title="Smart Spender",
        description="Stay under budget in all categories",
        points_required=300,
    ),
)


def _unlock(r: Reward, now: str) -> Reward:
    if r.is_unlocked:
        return r
    return replace(r, is_unlocked=True, unlocked_at=now)


def sync_rewards(rewards: Iterable[Reward], points: int, now: str) -> Tuple[Reward, ...]:
    """Unlock every tier the points reach. Nothing is ever locked again."""
    return tuple(_unlock(r, now) if points >= r.points_required else r for r in rewards)


def unlock_reward(rewards: Iterable[Reward], reward_id: str, now: str) -> Tuple[Reward, ...]:
    return tuple(_unlock(r, now) if r.id == reward_id else r for r in rewards)


def next_reward(rewards: Iterable[Reward]) -> Optional[Reward]:
    locked = [r for r in rewards if not r.is_unlocked]
    return min(locked, key=lambda r: r.points_required) if locked else None


def reward_progress(rewards: Iterable[Reward], points: int) -> float:
    upcoming = next_reward(rewards)
    if upcoming is None:
        return 1.0
    if upcoming.points_required <= 0:
        return 1.0
    return min(max(points, 0) / upcoming.points_required, 1.0)


def points_to_next(rewards: Iterable[Reward], points: int) -> int:
    upcoming = next_reward(rewards)
    if upcoming is None:
        return 0
    return max(0, upcoming.points_required - points)


def ladder(rewards: Iterable[Reward], points: int) -> RewardLadder:
    rewards = tuple(rewards)
    by_threshold = sorted(rewards, key=lambda r: r.points_required)
    return RewardLadder(
        points=points,
        unlocked=tuple(r for r in by_threshold if r.is_unlocked),
        locked=tuple(r for r in by_threshold if not r.is_unlocked),
        next_reward=next_reward(rewards),
        progress=reward_progress(rewards, points),
        points_to_next=points_to_next(rewards, points),
    )
