"""
Unit tests for Settings and the component configs it builds.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from config import Settings
from pacing.study.hint_ladder import Learner
from pacing.study.threshold_meter import Threshold


@pytest.fixture
def settings(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)  # no stray .env
    return Settings()


class TestDefaults:
    def test_hint_profiles(self, settings):
        profiles = settings.get_hint_profiles()
        assert profiles[Learner.LITTLE].timeout_delay == 5.0
        assert profiles[Learner.LITTLE].auto_complete_after == 3
        assert profiles[Learner.BIG].escalate_delay == 7.0
        assert profiles[Learner.BIG].auto_complete_after == 4

    def test_gate_config(self, settings):
        gate = settings.get_gate_config()
        assert gate.daily_reset_hour == 6
        assert gate.cooldown == timedelta(hours=2)
        assert gate.max_sessions_per_day == 4
        assert gate.override_hold_seconds == 3.0

    def test_thresholds_sorted(self, settings):
        config = settings.get_engine_config()
        assert list(config.reward_thresholds) == [
            Threshold(25, "wing-flare"),
            Threshold(50, "flame-burst"),
            Threshold(75, "aura-pulse"),
            Threshold(100, "mega-roar"),
        ]
        assert [t.tag for t in config.progression_thresholds] == ["ember", "flame", "blaze"]


class TestEnvironment:
    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PACING_MAX_SESSIONS_PER_DAY", "2")
        monkeypatch.setenv("PACING_COOLDOWN_MINUTES", "30")
        gate = Settings().get_gate_config()
        assert gate.max_sessions_per_day == 2
        assert gate.cooldown == timedelta(minutes=30)

    def test_invalid_reset_hour(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PACING_DAILY_RESET_HOUR", "25")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_threshold_percent(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PACING_REWARD_THRESHOLDS", '{"boom": 150}')
        with pytest.raises(ValidationError):
            Settings()

    def test_identical_override_keys(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PACING_OVERRIDE_KEYS", '["q", "Q"]')
        with pytest.raises(ValidationError):
            Settings()
