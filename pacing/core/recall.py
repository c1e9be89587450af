"""
Weighted Recall Selector.

Shared selection algorithm used for both concept re-drilling and
anti-repetition media playback:

1. Items flagged "due" win outright
2. Otherwise items never picked this session
3. Never the same item twice in a row (unless it is the only option)
4. Uniform random choice among what is left
"""

from __future__ import annotations

import random
from collections.abc import Callable, Hashable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from loguru import logger

T = TypeVar("T")


@dataclass
class RecallHistory:
    """What has been picked so far in this session."""

    seen: set[Hashable] = field(default_factory=set)
    last_picked: Hashable | None = None

    def record(self, item_id: Hashable) -> None:
        self.seen.add(item_id)
        self.last_picked = item_id

    def reset(self) -> None:
        self.seen.clear()
        self.last_picked = None


def _identity(item):
    return item


def pick(
    pool: Sequence[T],
    history: RecallHistory,
    *,
    key: Callable[[T], Hashable] = _identity,
    is_due: Callable[[T], bool] | None = None,
    rng: random.Random | None = None,
) -> T:
    """
    Pick the next item from a pool.

    Args:
        pool: Candidate items (must be non-empty)
        history: Session history; updated with the pick
        key: Maps an item to its identifier
        is_due: Optional predicate flagging items due for a repeat
        rng: Random source (module-level random if None)

    Returns:
        The chosen item

    Raises:
        ValueError: If the pool is empty
    """
    if not pool:
        raise ValueError("Cannot pick from an empty pool")

    rng = rng or random

    due = [item for item in pool if is_due(item)] if is_due else []
    if due:
        candidates = due
    else:
        unseen = [item for item in pool if key(item) not in history.seen]
        candidates = unseen or list(pool)

    # Avoid back-to-back repeats
    if len(candidates) > 1:
        filtered = [item for item in candidates if key(item) != history.last_picked]
        candidates = filtered or candidates

    choice = rng.choice(candidates)
    history.record(key(choice))
    return choice


class RecallSelector(Generic[T]):
    """
    Stateful wrapper around pick() that owns its own history.

    One selector per independent stream (e.g. one per concept domain,
    one per media category set).
    """

    def __init__(
        self,
        key: Callable[[T], Hashable] = _identity,
        rng: random.Random | None = None,
    ):
        self.key = key
        self.rng = rng
        self.history = RecallHistory()

    def pick(self, pool: Sequence[T], is_due: Callable[[T], bool] | None = None) -> T:
        return pick(pool, self.history, key=self.key, is_due=is_due, rng=self.rng)

    def reset(self) -> None:
        self.history.reset()


# =============================================================================
# Media Rotation
# =============================================================================


@dataclass(frozen=True)
class MediaItem:
    """A playable media item (clip, animation, voice line)."""

    id: str
    category: str
    stage: str | None = None
    src: str = ""


class MediaRotation:
    """
    Anti-repetition picker over a fixed media catalogue.

    Prefers items not yet played this session and never plays the
    same item twice in a row when an alternative exists.
    """

    def __init__(self, catalogue: Sequence[MediaItem], rng: random.Random | None = None):
        self.catalogue = list(catalogue)
        self._selector: RecallSelector[MediaItem] = RecallSelector(key=lambda m: m.id, rng=rng)

    def pick(self, category: str, stage: str | None = None) -> MediaItem | None:
        """
        Pick a media item from a category.

        Args:
            category: Media category (e.g. "celebration", "calm")
            stage: Optional stage filter

        Returns:
            MediaItem, or None if nothing matches the filters
        """
        pool = [m for m in self.catalogue if m.category == category]
        if stage is not None:
            pool = [m for m in pool if m.stage == stage]
        if not pool:
            logger.debug(f"No media for category={category!r} stage={stage!r}")
            return None
        return self._selector.pick(pool)

    def pick_for_stage(self, stage: str) -> MediaItem | None:
        return self.pick("stage-up", stage)

    @property
    def played(self) -> set[Hashable]:
        return set(self._selector.history.seen)

    def reset(self) -> None:
        self._selector.reset()
