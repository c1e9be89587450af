"""
Session Gate: daily-usage and cooldown limits on starting play sessions.

Rules:
- At most 4 sessions per day; the counter resets once per calendar day,
  after 06:00 local time
- 2 hour cooldown after each session ends
- A caregiver can start a 3 minute calm timeout that blocks play
- Holding both override keys for 3 seconds clears every block
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Protocol

from loguru import logger

from pacing.delivery.state_store import GateState


class GateStateStore(Protocol):
    def load(self) -> GateState: ...

    def save(self, state: GateState) -> None: ...


class BlockReason(str, Enum):
    DAILY_LIMIT = "daily-limit"
    COOLDOWN = "cooldown"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class GateDecision:
    """Outcome of a can-start check."""

    allowed: bool
    reason: BlockReason | None = None
    wait_until: datetime | None = None

    @classmethod
    def allow(cls) -> GateDecision:
        return cls(allowed=True)

    @classmethod
    def block(cls, reason: BlockReason, wait_until: datetime | None = None) -> GateDecision:
        return cls(allowed=False, reason=reason, wait_until=wait_until)


@dataclass
class GateConfig:
    """Configuration for the session gate."""

    daily_reset_hour: int = 6
    cooldown: timedelta = timedelta(hours=2)
    max_sessions_per_day: int = 4
    calm_timeout_seconds: float = 180.0
    override_hold_seconds: float = 3.0
    override_keys: tuple[str, str] = ("q", "p")

    def __post_init__(self):
        if not 0 <= self.daily_reset_hour <= 23:
            raise ValueError("daily_reset_hour must be between 0 and 23")
        if self.max_sessions_per_day < 1:
            raise ValueError("max_sessions_per_day must be at least 1")
        if self.cooldown < timedelta(0):
            raise ValueError("cooldown must be non-negative")
        if self.override_hold_seconds <= 0:
            raise ValueError("override_hold_seconds must be positive")
        if len({k.lower() for k in self.override_keys}) != 2:
            raise ValueError("override_keys must be two distinct keys")


# =============================================================================
# Calm Timeout
# =============================================================================


class CalmTimeout:
    """Countdown that blocks play while active."""

    def __init__(self, duration: float = 180.0):
        self.duration = duration
        self.active = False
        self.remaining = 0.0

    @property
    def remaining_formatted(self) -> str:
        minutes = int(self.remaining // 60)
        seconds = int(self.remaining % 60)
        return f"{minutes}:{seconds:02d}"

    def start(self) -> None:
        self.active = True
        self.remaining = self.duration

    def end(self) -> None:
        self.active = False
        self.remaining = 0.0

    def toggle(self) -> None:
        if self.active:
            self.end()
        else:
            self.start()

    def update(self, dt: float) -> bool:
        """Count down. Returns True once, on the tick the timeout expires."""
        if not self.active:
            return False
        self.remaining -= dt
        if self.remaining <= 0:
            self.end()
            return True
        return False


# =============================================================================
# Override Hold
# =============================================================================


class OverrideHold:
    """
    Two-key long-press detector.

    Time accumulates only while both keys are held; releasing either
    drops it straight back to zero. Fires once per continuous hold.
    """

    def __init__(self, keys: Iterable[str] = ("q", "p"), hold_seconds: float = 3.0):
        self.keys = frozenset(k.lower() for k in keys)
        if len(self.keys) != 2:
            raise ValueError("override needs two distinct keys")
        self.hold_seconds = hold_seconds
        self.held: set[str] = set()
        self.held_for = 0.0
        self._fired = False

    @property
    def engaged(self) -> bool:
        return self.keys <= self.held

    def press(self, key: str) -> None:
        key = key.lower()
        if key in self.keys:
            self.held.add(key)

    def release(self, key: str) -> None:
        key = key.lower()
        if key in self.held:
            self.held.discard(key)
            self.held_for = 0.0
            self._fired = False

    def update(self, dt: float) -> bool:
        """Returns True on the tick the hold completes."""
        if not self.engaged:
            self.held_for = 0.0
            return False
        if self._fired:
            return False
        self.held_for += dt
        if self.held_for >= self.hold_seconds:
            self._fired = True
            return True
        return False

    @property
    def progress(self) -> float:
        return min(1.0, self.held_for / self.hold_seconds)


# =============================================================================
# Session Gate
# =============================================================================


class SessionGate:
    """
    Allow or deny starting a new session against wall-clock limits.

    Every mutation of the persisted counters is written straight back
    to the store.
    """

    def __init__(
        self,
        store: GateStateStore,
        config: GateConfig | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.config = config or GateConfig()
        self.clock = clock
        self.state = store.load()
        self.timeout = CalmTimeout(self.config.calm_timeout_seconds)
        self.override_hold = OverrideHold(
            self.config.override_keys, self.config.override_hold_seconds
        )

    @property
    def sessions_today(self) -> int:
        return self.state.sessions_today

    @property
    def last_session_end(self) -> datetime | None:
        return self.state.last_session_end

    def check_daily_reset(self) -> bool:
        """Zero the daily counter once per day after the reset hour. Returns True if reset."""
        now = self.clock()
        today = now.strftime("%Y-%m-%d")
        if now.hour >= self.config.daily_reset_hour and self.state.last_reset_date != today:
            logger.info(f"Daily reset for {today} (was {self.state.sessions_today} sessions)")
            self.state.sessions_today = 0
            self.state.last_reset_date = today
            self.store.save(self.state)
            return True
        return False

    def can_start_session(self) -> GateDecision:
        self.check_daily_reset()

        if self.state.sessions_today >= self.config.max_sessions_per_day:
            return GateDecision.block(BlockReason.DAILY_LIMIT)

        last_end = self.state.last_session_end
        if last_end is not None:
            wait_until = last_end + self.config.cooldown
            if self.clock() < wait_until:
                return GateDecision.block(BlockReason.COOLDOWN, wait_until)

        if self.timeout.active:
            return GateDecision.block(BlockReason.TIMEOUT)

        return GateDecision.allow()

    def record_session_end(self) -> None:
        self.state.sessions_today += 1
        self.state.last_session_end = self.clock()
        self.store.save(self.state)
        logger.info(f"Session ended ({self.state.sessions_today} today)")

    def override(self) -> None:
        """Caregiver reset: clear every block."""
        self.timeout.end()
        self.state.sessions_today = 0
        self.state.last_session_end = None
        self.store.save(self.state)
        logger.info("Session gate overridden by caregiver")

    def update(self, dt: float) -> bool:
        """
        Advance the calm timeout and the override hold.

        Returns:
            True if the override fired on this tick
        """
        self.timeout.update(dt)
        if self.override_hold.update(dt):
            self.override()
            return True
        return False
