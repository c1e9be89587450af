"""
Integration tests for PacingEngine: full prompt and session flows.
"""

import pytest

from pacing.delivery.session_gate import BlockReason
from pacing.engine import EngineConfig, PacingEngine
from pacing.learning.concept_tracker import DifficultyAdjustment
from pacing.study.hint_ladder import HintLevel, Learner
from pacing.study.threshold_meter import Stage

COLORS = ["red", "blue", "yellow", "green"]


@pytest.fixture
def engine(memory_store, clock, rng):
    engine = PacingEngine(memory_store, clock=clock, rng=rng)
    assert engine.begin_session().allowed
    return engine


def run_for(engine, seconds, frame=0.05):
    results = []
    for _ in range(round(seconds / frame)):
        results.append(engine.tick(frame))
    return results


class TestPromptFlow:
    def test_correct_answer_charges_reward_meter(self, engine):
        engine.start_prompt("color", COLORS, Learner.LITTLE)
        outcome = engine.submit_answer(True)

        assert outcome.resolved is True
        assert outcome.hint_level == HintLevel.NONE
        assert engine.reward_meter.charge == 2.0
        assert engine.prompt_active is False

    def test_hinted_answer_earns_less(self, engine):
        engine.start_prompt("color", COLORS, Learner.LITTLE)
        run_for(engine, 5.5)
        assert engine.hint_ladder.level == HintLevel.REPEAT

        engine.submit_answer(True)
        assert engine.reward_meter.charge == 1.0

    def test_hint_escalation_reported_per_transition(self, engine):
        engine.start_prompt("color", COLORS, Learner.LITTLE)
        results = run_for(engine, 16.0)
        assert sum(r.hint_escalated for r in results) == 3
        assert engine.hint_ladder.level == HintLevel.POINT

    def test_large_dt_clamped(self, engine):
        engine.start_prompt("color", COLORS, Learner.LITTLE)
        engine.tick(30.0)
        assert engine.hint_ladder.elapsed == pytest.approx(0.05)
        assert engine.hint_ladder.level == HintLevel.NONE

    def test_misses_lead_to_auto_complete(self, engine):
        concept = engine.start_prompt("color", COLORS, Learner.LITTLE)

        first = engine.submit_answer(False)
        assert first.resolved is False
        assert first.hint_level == HintLevel.PULSE

        second = engine.submit_answer(False)
        assert second.hint_level == HintLevel.POINT

        third = engine.submit_answer(False)
        assert third.resolved is True
        assert third.auto_completed is True
        assert engine.reward_meter.charge == 0.5

        record = engine.tracker.get_record(concept, "color")
        assert record.misses == 3
        assert record.needs_repeat is True

    def test_answer_without_prompt_rejected(self, engine):
        with pytest.raises(ValueError):
            engine.submit_answer(True)

    def test_missed_concept_comes_back_after_gap(self, engine):
        missed = engine.start_prompt("color", COLORS, Learner.BIG)
        for _ in range(4):
            engine.submit_answer(False)

        shown = []
        for _ in range(3):
            shown.append(engine.start_prompt("color", COLORS, Learner.BIG))
            engine.submit_answer(True)

        # Not immediately after the miss, but once the gap has passed
        assert shown[0] != missed
        assert missed in shown[1:]
        assert engine.tracker.get_record(missed, "color").needs_repeat is False

    def test_reward_events_surface_in_outcomes(self, engine):
        events = []
        for _ in range(13):
            engine.start_prompt("color", COLORS, Learner.LITTLE)
            outcome = engine.submit_answer(True)
            if outcome.reward_event:
                events.append(outcome.reward_event)
        assert events == ["wing-flare"]
        assert engine.difficulty == DifficultyAdjustment.HARDER


class TestSessionFlow:
    def test_end_session_starts_cooldown(self, engine, clock):
        engine.end_session()
        clock.advance(minutes=5)

        decision = engine.begin_session()
        assert decision.allowed is False
        assert decision.reason == BlockReason.COOLDOWN
        assert engine.in_session is False

    def test_end_session_requires_session(self, memory_store, clock):
        with pytest.raises(ValueError):
            PacingEngine(memory_store, clock=clock).end_session()

    def test_new_session_resets_per_session_state(self, engine, clock):
        engine.start_prompt("color", COLORS, Learner.LITTLE)
        engine.submit_answer(False)
        engine.submit_answer(True)
        engine.complete_activity(40)
        engine.end_session()

        clock.advance(hours=3)
        assert engine.begin_session().allowed

        assert engine.tracker.prompt_counter == 0
        assert engine.reward_meter.charge == 0
        # Progression persists across sessions
        assert engine.stage == Stage.EMBER

    def test_progression_from_activities(self, engine):
        stages = [engine.complete_activity() for _ in range(10)]
        assert [s for s in stages if s is not None] == [Stage.EMBER, Stage.FLAME, Stage.BLAZE]

    def test_override_via_key_hold(self, engine, clock):
        engine.end_session()
        assert engine.begin_session().allowed is False

        engine.key_down("q")
        engine.key_down("p")
        results = run_for(engine, 3.1)
        engine.key_up("q")
        engine.key_up("p")

        assert sum(r.override_fired for r in results) == 1
        assert engine.begin_session().allowed is True

    def test_releasing_a_key_cancels_override(self, engine):
        engine.end_session()
        engine.key_down("q")
        engine.key_down("p")
        run_for(engine, 2.0)
        engine.key_up("p")
        engine.key_down("p")
        results = run_for(engine, 2.0)

        assert not any(r.override_fired for r in results)
        assert engine.begin_session().allowed is False

    def test_calm_timeout_expiry_reported(self, memory_store, clock, rng):
        config = EngineConfig.default()
        config.gate.calm_timeout_seconds = 1.0
        engine = PacingEngine(memory_store, config, clock=clock, rng=rng)
        engine.gate.timeout.start()
        assert engine.begin_session().reason == BlockReason.TIMEOUT

        results = run_for(engine, 1.5)
        assert sum(r.timeout_expired for r in results) == 1
        assert engine.begin_session().allowed is True
