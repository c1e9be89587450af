"""
Hint Ladder: per-prompt help escalation.

Levels:
0 - No hint
1 - Repeat the prompt label
2 - Visual pulse on the correct target
3 - Point toward the correct target
4 - Auto-complete the prompt for the learner (terminal)

Two tracks feed the same level:
- Time track (update): 0 -> 1 -> 2 -> 3 as time passes without an answer
- Miss track (on_miss): jumps to 2, then 3, then 4 after enough misses

The younger learner gets faster escalation than the older one.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from loguru import logger


class HintLevel(IntEnum):
    NONE = 0
    REPEAT = 1
    PULSE = 2
    POINT = 3
    AUTO_COMPLETE = 4


class Learner(str, Enum):
    """Whose turn it is."""

    LITTLE = "little"  # younger learner
    BIG = "big"  # older learner
    TEAM = "team"


@dataclass(frozen=True)
class HintProfile:
    """Escalation timings for one learner."""

    timeout_delay: float  # seconds before the first hint
    escalate_delay: float  # seconds between further timeout hints
    auto_complete_after: int  # misses before auto-complete

    def __post_init__(self):
        if self.timeout_delay < 0 or self.escalate_delay < 0:
            raise ValueError("Hint delays must be non-negative")
        if self.auto_complete_after < 1:
            raise ValueError("auto_complete_after must be at least 1")


LITTLE_PROFILE = HintProfile(timeout_delay=5.0, escalate_delay=5.0, auto_complete_after=3)
BIG_PROFILE = HintProfile(timeout_delay=8.0, escalate_delay=7.0, auto_complete_after=4)

DEFAULT_PROFILES: dict[Learner, HintProfile] = {
    Learner.LITTLE: LITTLE_PROFILE,
    Learner.BIG: BIG_PROFILE,
}


class HintLadder:
    """
    Escalation state machine for the active prompt.

    start_prompt() must be called before each prompt; it discards
    whatever state the previous prompt left behind.
    """

    def __init__(self, profiles: dict[Learner, HintProfile] | None = None):
        self.profiles = dict(profiles or DEFAULT_PROFILES)
        self.level = HintLevel.NONE
        self.miss_count = 0
        self.elapsed = 0.0
        self.concept = ""
        self.auto_completed = False
        self.profile = self.profile_for(Learner.BIG)

    def profile_for(self, learner: Learner | str) -> HintProfile:
        """Profile for a learner; team turns and unknown learners get the older learner's."""
        try:
            learner = Learner(learner.lower())
        except ValueError:
            return self.profiles.get(Learner.BIG, BIG_PROFILE)
        return self.profiles.get(learner) or self.profiles.get(Learner.BIG, BIG_PROFILE)

    def start_prompt(self, concept: str, learner: Learner | str) -> None:
        """Reset hint state for a new prompt."""
        self.level = HintLevel.NONE
        self.miss_count = 0
        self.elapsed = 0.0
        self.concept = concept
        self.auto_completed = False
        self.profile = self.profile_for(learner)

    def on_miss(self) -> HintLevel:
        """Register a wrong answer. Returns the new level."""
        if self.auto_completed:
            return self.level

        self.miss_count += 1
        if self.miss_count >= self.profile.auto_complete_after:
            self.level = HintLevel.AUTO_COMPLETE
            self.auto_completed = True
            logger.debug(f"Auto-completing '{self.concept}' after {self.miss_count} misses")
        elif self.miss_count >= 2:
            self.level = max(self.level, HintLevel.POINT)
        else:
            self.level = max(self.level, HintLevel.PULSE)
        return self.level

    def update(self, dt: float) -> bool:
        """
        Advance the time track.

        Climbs at most one level per call and never reaches AUTO_COMPLETE.

        Returns:
            True if the level changed during this call
        """
        if self.level >= HintLevel.AUTO_COMPLETE:
            return False

        self.elapsed += dt
        profile = self.profile
        previous = self.level

        if self.level == HintLevel.NONE and self.elapsed >= profile.timeout_delay:
            self.level = HintLevel.REPEAT
        elif (
            self.level == HintLevel.REPEAT
            and self.elapsed >= profile.timeout_delay + profile.escalate_delay
        ):
            self.level = HintLevel.PULSE
        elif (
            self.level == HintLevel.PULSE
            and self.elapsed >= profile.timeout_delay + profile.escalate_delay * 2
        ):
            self.level = HintLevel.POINT

        if self.level != previous:
            logger.debug(f"Hint for '{self.concept}' escalated to {self.level.name}")
            return True
        return False
