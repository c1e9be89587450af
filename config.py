"""
Configuration settings for the pacing engine.

Uses Pydantic Settings for environment variable management with .env file support.
All variables are prefixed with PACING_ (e.g. PACING_MAX_SESSIONS_PER_DAY=3).
"""
from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pacing.delivery.session_gate import GateConfig
from pacing.engine import ChargeConfig, EngineConfig
from pacing.learning.concept_tracker import TrackerConfig
from pacing.study.hint_ladder import HintProfile, Learner
from pacing.study.threshold_meter import Threshold


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PACING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Persistence
    # ========================================
    state_db_path: Path = Field(
        default=Path.home() / ".pacing" / "state.db",
        description="SQLite file holding the session gate counters",
    )

    # ========================================
    # Hint Ladder
    # ========================================
    little_timeout_delay: float = Field(default=5.0, ge=0, description="Seconds before first hint (younger learner)")
    little_escalate_delay: float = Field(default=5.0, ge=0, description="Seconds between hints (younger learner)")
    little_auto_complete_after: int = Field(default=3, ge=1, description="Misses before auto-complete (younger learner)")
    big_timeout_delay: float = Field(default=8.0, ge=0, description="Seconds before first hint (older learner)")
    big_escalate_delay: float = Field(default=7.0, ge=0, description="Seconds between hints (older learner)")
    big_auto_complete_after: int = Field(default=4, ge=1, description="Misses before auto-complete (older learner)")

    # ========================================
    # Concept Tracker
    # ========================================
    rolling_window_size: int = Field(default=5, ge=1, description="Answers kept for the difficulty signal")
    repeat_gap: int = Field(default=2, ge=1, description="Prompts before a missed concept may repeat")

    # ========================================
    # Meters
    # ========================================
    reward_max: float = Field(default=100.0, gt=0, description="Reward meter capacity")
    reward_thresholds: dict[str, float] = Field(
        default={"wing-flare": 25, "flame-burst": 50, "aura-pulse": 75, "mega-roar": 100},
        description="Reward event tag -> percent",
    )
    progression_max: float = Field(default=100.0, gt=0, description="Progression meter capacity")
    progression_thresholds: dict[str, float] = Field(
        default={"ember": 33, "flame": 66, "blaze": 100},
        description="Stage name -> percent",
    )
    charge_correct: float = Field(default=2.0, ge=0, description="Charge for an unhinted correct answer")
    charge_hinted: float = Field(default=1.0, ge=0, description="Charge for a correct answer after a hint")
    charge_auto_complete: float = Field(default=0.5, ge=0, description="Charge for an auto-completed prompt")
    charge_activity: float = Field(default=10.0, ge=0, description="Progression charge per finished activity")

    # ========================================
    # Session Gate
    # ========================================
    daily_reset_hour: int = Field(default=6, ge=0, le=23, description="Local hour the daily counter resets")
    cooldown_minutes: int = Field(default=120, ge=0, description="Minutes between sessions")
    max_sessions_per_day: int = Field(default=4, ge=1, description="Sessions allowed per day")
    calm_timeout_seconds: float = Field(default=180.0, gt=0, description="Length of a calm timeout")
    override_hold_seconds: float = Field(default=3.0, gt=0, description="Hold time for the caregiver override")
    override_keys: tuple[str, str] = Field(default=("q", "p"), description="Keys held together to override")

    # ========================================
    # Frame loop
    # ========================================
    max_frame_dt: float = Field(default=0.05, gt=0, description="Largest dt applied per tick (seconds)")

    @field_validator("reward_thresholds", "progression_thresholds")
    @classmethod
    def _check_percents(cls, value: dict[str, float]) -> dict[str, float]:
        for tag, percent in value.items():
            if not 0 < percent <= 100:
                raise ValueError(f"threshold {tag!r} must be in (0, 100], got {percent}")
        return value

    @model_validator(mode="after")
    def _check_override_keys(self) -> Settings:
        if self.override_keys[0].lower() == self.override_keys[1].lower():
            raise ValueError("override_keys must be two distinct keys")
        return self

    # ========================================
    # Helper Methods
    # ========================================
    def get_hint_profiles(self) -> dict[Learner, HintProfile]:
        return {
            Learner.LITTLE: HintProfile(
                self.little_timeout_delay, self.little_escalate_delay, self.little_auto_complete_after
            ),
            Learner.BIG: HintProfile(
                self.big_timeout_delay, self.big_escalate_delay, self.big_auto_complete_after
            ),
        }

    def get_tracker_config(self) -> TrackerConfig:
        return TrackerConfig(window_size=self.rolling_window_size, repeat_gap=self.repeat_gap)

    def get_gate_config(self) -> GateConfig:
        return GateConfig(
            daily_reset_hour=self.daily_reset_hour,
            cooldown=timedelta(minutes=self.cooldown_minutes),
            max_sessions_per_day=self.max_sessions_per_day,
            calm_timeout_seconds=self.calm_timeout_seconds,
            override_hold_seconds=self.override_hold_seconds,
            override_keys=self.override_keys,
        )

    def get_charge_config(self) -> ChargeConfig:
        return ChargeConfig(
            correct=self.charge_correct,
            hinted=self.charge_hinted,
            auto_complete=self.charge_auto_complete,
            activity=self.charge_activity,
        )

    @staticmethod
    def _thresholds(mapping: dict[str, float]) -> tuple[Threshold, ...]:
        return tuple(
            Threshold(percent, tag) for tag, percent in sorted(mapping.items(), key=lambda kv: kv[1])
        )

    def get_engine_config(self) -> EngineConfig:
        """Bundle every component config for PacingEngine."""
        return EngineConfig(
            tracker=self.get_tracker_config(),
            gate=self.get_gate_config(),
            charge=self.get_charge_config(),
            hint_profiles=self.get_hint_profiles(),
            reward_max=self.reward_max,
            reward_thresholds=self._thresholds(self.reward_thresholds),
            progression_max=self.progression_max,
            progression_thresholds=self._thresholds(self.progression_thresholds),
            max_frame_dt=self.max_frame_dt,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
