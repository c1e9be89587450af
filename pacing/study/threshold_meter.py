"""
Threshold Meter: bounded charge accumulator with one-shot threshold events.

Two uses:
- Reward meter: per-session charge firing spectacle events at 25/50/75/100%
- Progression meter: advances a never-regressing Stage at 33/66/100%

Thresholds are checked from highest to lowest on every add_charge() call,
so a single large increment fires only the highest threshold it reaches;
lower thresholds jumped over in the same call are skipped.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum

from loguru import logger


@dataclass(frozen=True)
class Threshold:
    """A percentage mark and the event tag it fires."""

    percent: float
    tag: str


REWARD_THRESHOLDS: tuple[Threshold, ...] = (
    Threshold(25, "wing-flare"),
    Threshold(50, "flame-burst"),
    Threshold(75, "aura-pulse"),
    Threshold(100, "mega-roar"),
)


class ThresholdMeter:
    """
    Charge accumulator clamped to [0, maximum].

    Charge only grows (no decay) until reset() is called explicitly.
    """

    SMOOTHING_RATE = 5.0

    def __init__(
        self,
        maximum: float = 100.0,
        thresholds: Sequence[Threshold] = REWARD_THRESHOLDS,
        name: str = "meter",
    ):
        if maximum <= 0:
            raise ValueError("maximum must be positive")
        percents = [t.percent for t in thresholds]
        if any(b <= a for a, b in zip(percents, percents[1:])):
            raise ValueError("thresholds must be strictly increasing")
        if any(p <= 0 or p > 100 for p in percents):
            raise ValueError("threshold percents must be in (0, 100]")

        self.name = name
        self.maximum = float(maximum)
        self.thresholds = tuple(thresholds)
        self.charge = 0.0
        self.display_charge = 0.0
        self.last_threshold_crossed = 0.0

    @property
    def percent(self) -> float:
        return self.charge / self.maximum * 100

    def add_charge(self, amount: float) -> str | None:
        """
        Add charge and report a newly crossed threshold.

        Args:
            amount: Charge to add; non-positive amounts are ignored

        Returns:
            Tag of the threshold crossed, or None
        """
        if amount <= 0:
            return None

        self.charge = min(self.charge + amount, self.maximum)
        crossed = self._check_thresholds()
        if crossed is not None:
            logger.debug(f"{self.name}: crossed {crossed.percent:g}% ({crossed.tag})")
            return crossed.tag
        return None

    def _check_thresholds(self) -> Threshold | None:
        percent = self.percent
        for threshold in reversed(self.thresholds):
            if percent >= threshold.percent and threshold.percent > self.last_threshold_crossed:
                self.last_threshold_crossed = threshold.percent
                return threshold
        return None

    def next_threshold(self) -> Threshold | None:
        """Lowest threshold not yet crossed."""
        for threshold in self.thresholds:
            if threshold.percent > self.last_threshold_crossed:
                return threshold
        return None

    def is_near_next_threshold(self, window: float = 10.0) -> bool:
        """True when charge sits within `window` percentage points below the next threshold."""
        upcoming = self.next_threshold()
        if upcoming is None:
            return False
        percent = self.percent
        return upcoming.percent - window <= percent < upcoming.percent

    def update(self, dt: float) -> None:
        """Ease the display value toward the true charge."""
        factor = min(1.0, dt * self.SMOOTHING_RATE)
        self.display_charge += (self.charge - self.display_charge) * factor

    def reset(self) -> None:
        self.charge = 0.0
        self.display_charge = 0.0
        self.last_threshold_crossed = 0.0


# =============================================================================
# Progression
# =============================================================================


class Stage(IntEnum):
    """Identity stages, in the order they are earned."""

    SPARK = 0
    EMBER = 1
    FLAME = 2
    BLAZE = 3


PROGRESSION_THRESHOLDS: tuple[Threshold, ...] = (
    Threshold(33, Stage.EMBER.name.lower()),
    Threshold(66, Stage.FLAME.name.lower()),
    Threshold(100, Stage.BLAZE.name.lower()),
)


class ProgressionMeter(ThresholdMeter):
    """
    Threshold meter that advances a Stage.

    The stage never regresses: reset() clears charge but keeps the stage.
    Only restart() (a brand-new game) returns to the first stage.
    """

    def __init__(
        self,
        maximum: float = 100.0,
        thresholds: Sequence[Threshold] = PROGRESSION_THRESHOLDS,
        name: str = "progression",
    ):
        super().__init__(maximum=maximum, thresholds=thresholds, name=name)
        for threshold in self.thresholds:
            self._stage_for(threshold.tag)  # validate tags up front
        self.stage = Stage.SPARK

    @staticmethod
    def _stage_for(tag: str) -> Stage:
        try:
            return Stage[tag.upper()]
        except KeyError:
            raise ValueError(f"Unknown stage tag: {tag!r}") from None

    def add_charge(self, amount: float) -> Stage | None:  # type: ignore[override]
        """
        Add charge and report a stage advance.

        Returns:
            The new Stage if it is strictly later than the current one, else None
        """
        tag = super().add_charge(amount)
        if tag is None:
            return None

        new_stage = self._stage_for(tag)
        if new_stage <= self.stage:
            return None

        logger.info(f"Stage advanced: {self.stage.name} -> {new_stage.name}")
        self.stage = new_stage
        return new_stage

    def restart(self) -> None:
        """Start over from the first stage."""
        self.reset()
        self.stage = Stage.SPARK
