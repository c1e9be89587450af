"""
Pacing Engine: composition root for the adaptive pacing components.

Owns one instance of each component and wires them in the order an
activity uses them:

1. begin_session()  - consult the Session Gate, reset per-session state
2. start_prompt()   - Concept Tracker picks a concept, Hint Ladder restarts
3. tick(dt)         - Hint Ladder timing, meter smoothing, override hold
4. submit_answer()  - tracker + hint ladder, charge meters on success
5. complete_activity() / end_session()

Renderers and voice read the component state directly (hint level,
meter percent, stage, gate decision); nothing here draws or plays audio.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from pacing.core.recall import MediaItem, MediaRotation
from pacing.delivery.session_gate import GateConfig, GateDecision, GateStateStore, SessionGate
from pacing.learning.concept_tracker import (
    ConceptTracker,
    DifficultyAdjustment,
    TrackerConfig,
)
from pacing.study.hint_ladder import HintLadder, HintLevel, HintProfile, Learner
from pacing.study.threshold_meter import (
    PROGRESSION_THRESHOLDS,
    REWARD_THRESHOLDS,
    ProgressionMeter,
    Stage,
    Threshold,
    ThresholdMeter,
)


@dataclass
class ChargeConfig:
    """How much charge each outcome earns."""

    correct: float = 2.0
    hinted: float = 1.0  # correct after at least one hint
    auto_complete: float = 0.5
    activity: float = 10.0  # progression charge per completed activity


@dataclass
class EngineConfig:
    """Everything the engine needs to build its components."""

    tracker: TrackerConfig
    gate: GateConfig
    charge: ChargeConfig
    hint_profiles: dict[Learner, HintProfile] | None = None
    reward_max: float = 100.0
    reward_thresholds: Sequence[Threshold] = REWARD_THRESHOLDS
    progression_max: float = 100.0
    progression_thresholds: Sequence[Threshold] = PROGRESSION_THRESHOLDS
    max_frame_dt: float = 0.05

    @classmethod
    def default(cls) -> EngineConfig:
        return cls(tracker=TrackerConfig(), gate=GateConfig(), charge=ChargeConfig())


@dataclass
class AnswerOutcome:
    """What happened when an answer was submitted."""

    correct: bool
    resolved: bool  # prompt is over (correct or auto-completed)
    auto_completed: bool
    hint_level: HintLevel
    reward_event: str | None = None


@dataclass
class TickResult:
    hint_escalated: bool = False
    override_fired: bool = False
    timeout_expired: bool = False


class PacingEngine:
    """
    Single owner of all pacing state for one play device.

    Construct one per process (or per test) and pass it to activities.
    """

    def __init__(
        self,
        store: GateStateStore,
        config: EngineConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
        media: Sequence[MediaItem] = (),
    ):
        self.config = config or EngineConfig.default()
        self.rng = rng or random.Random()

        gate_kwargs = {"clock": clock} if clock is not None else {}
        self.gate = SessionGate(store, self.config.gate, **gate_kwargs)
        self.tracker = ConceptTracker(self.config.tracker, rng=self.rng)
        self.hint_ladder = HintLadder(self.config.hint_profiles)
        self.reward_meter = ThresholdMeter(
            self.config.reward_max, self.config.reward_thresholds, name="reward"
        )
        self.progression = ProgressionMeter(
            self.config.progression_max, self.config.progression_thresholds
        )
        self.media = MediaRotation(media, rng=self.rng)

        self.in_session = False
        self.prompt_active = False
        self.domain = ""
        self.learner: Learner | str = Learner.LITTLE

    # =========================================================================
    # Session boundaries
    # =========================================================================

    def begin_session(self) -> GateDecision:
        """Ask the gate for permission; on success reset per-session state."""
        decision = self.gate.can_start_session()
        if not decision.allowed:
            logger.info(f"Session blocked: {decision.reason.value}")
            return decision

        self.tracker.reset()
        self.reward_meter.reset()
        self.media.reset()
        self.in_session = True
        self.prompt_active = False
        logger.info("Session started")
        return decision

    def end_session(self) -> None:
        if not self.in_session:
            raise ValueError("No session in progress. Call begin_session() first.")
        self.gate.record_session_end()
        self.in_session = False
        self.prompt_active = False

    # =========================================================================
    # Prompts
    # =========================================================================

    def start_prompt(self, domain: str, pool: Sequence[str], learner: Learner | str) -> str:
        """
        Choose a concept and reset the hint ladder for it.

        Args:
            domain: Concept domain (e.g. "color")
            pool: Concepts the activity can show right now
            learner: Whose turn it is

        Returns:
            The concept to present
        """
        concept = self.tracker.next_concept(domain, pool)
        self.domain = domain
        self.learner = learner
        self.hint_ladder.start_prompt(concept, learner)
        self.prompt_active = True
        return concept

    def submit_answer(self, correct: bool) -> AnswerOutcome:
        if not self.prompt_active:
            raise ValueError("No prompt in progress. Call start_prompt() first.")

        ladder = self.hint_ladder
        concept = ladder.concept
        hinted = ladder.level > HintLevel.NONE
        self.tracker.record_answer(concept, self.domain, correct)

        if correct:
            amount = self.config.charge.hinted if hinted else self.config.charge.correct
            self.prompt_active = False
            return AnswerOutcome(
                correct=True,
                resolved=True,
                auto_completed=False,
                hint_level=ladder.level,
                reward_event=self.reward_meter.add_charge(amount),
            )

        level = ladder.on_miss()
        if not ladder.auto_completed:
            return AnswerOutcome(
                correct=False, resolved=False, auto_completed=False, hint_level=level
            )

        self.prompt_active = False
        return AnswerOutcome(
            correct=False,
            resolved=True,
            auto_completed=True,
            hint_level=level,
            reward_event=self.reward_meter.add_charge(self.config.charge.auto_complete),
        )

    def complete_activity(self, amount: float | None = None) -> Stage | None:
        """Charge the progression meter for a finished activity."""
        return self.progression.add_charge(
            self.config.charge.activity if amount is None else amount
        )

    # =========================================================================
    # Frame loop / input
    # =========================================================================

    def tick(self, dt: float) -> TickResult:
        """Advance all time-based state by one frame."""
        dt = min(max(dt, 0.0), self.config.max_frame_dt)
        result = TickResult()

        if self.prompt_active:
            result.hint_escalated = self.hint_ladder.update(dt)

        self.reward_meter.update(dt)
        self.progression.update(dt)

        was_timed_out = self.gate.timeout.active
        result.override_fired = self.gate.update(dt)
        result.timeout_expired = (
            was_timed_out and not self.gate.timeout.active and not result.override_fired
        )
        return result

    def key_down(self, key: str) -> None:
        self.gate.override_hold.press(key)

    def key_up(self, key: str) -> None:
        self.gate.override_hold.release(key)

    # =========================================================================
    # Read-only queries
    # =========================================================================

    @property
    def difficulty(self) -> DifficultyAdjustment:
        return self.tracker.get_difficulty_adjustment()

    @property
    def stage(self) -> Stage:
        return self.progression.stage
