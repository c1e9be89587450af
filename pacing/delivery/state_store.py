"""
SQLite State Store for the Session Gate.

Persists the small amount of state that must survive restarts:
- sessions_today
- last_reset_date
- last_session_end

Database location: ~/.pacing/state.db
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from loguru import logger

# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class GateState:
    """Persisted session-gate counters."""

    sessions_today: int = 0
    last_reset_date: str = ""  # YYYY-MM-DD
    last_session_end: datetime | None = None


def _encode(state: GateState) -> dict[str, str]:
    return {
        "sessions_today": str(state.sessions_today),
        "last_reset_date": state.last_reset_date,
        "last_session_end": state.last_session_end.isoformat() if state.last_session_end else "",
    }


def _decode(values: dict[str, str]) -> GateState:
    state = GateState()

    raw_count = values.get("sessions_today", "")
    if raw_count:
        try:
            state.sessions_today = max(0, int(raw_count))
        except ValueError:
            logger.warning(f"Corrupt sessions_today {raw_count!r}, using 0")

    state.last_reset_date = values.get("last_reset_date", "")

    raw_end = values.get("last_session_end", "")
    if raw_end:
        try:
            state.last_session_end = datetime.fromisoformat(raw_end)
        except ValueError:
            logger.warning(f"Corrupt last_session_end {raw_end!r}, ignoring")

    return state


# =============================================================================
# Stores
# =============================================================================


class MemoryGateStore:
    """In-process store; nothing survives the process."""

    def __init__(self, state: GateState | None = None):
        self._values = _encode(state or GateState())

    def load(self) -> GateState:
        return _decode(self._values)

    def save(self, state: GateState) -> None:
        self._values = _encode(state)


class GateStore:
    """
    SQLite-backed key-value persistence for the session gate.

    One row per field in the gate_state table.
    """

    DEFAULT_DB_PATH = Path.home() / ".pacing" / "state.db"

    def __init__(self, db_path: Path | None = None):
        """
        Initialize the state store.

        Args:
            db_path: Custom database path (defaults to ~/.pacing/state.db)
        """
        self.db_path = Path(db_path) if db_path else self.DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: sqlite3.Connection | None = None
        self._init_schema()

        logger.debug(f"GateStore initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_schema(self) -> None:
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS gate_state (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        self.conn.commit()

    def load(self) -> GateState:
        cursor = self.conn.execute("SELECT key, value FROM gate_state")
        return _decode({row["key"]: row["value"] for row in cursor.fetchall()})

    def save(self, state: GateState) -> None:
        self.conn.executemany(
            "INSERT OR REPLACE INTO gate_state (key, value) VALUES (?, ?)",
            list(_encode(state).items()),
        )
        self.conn.commit()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
