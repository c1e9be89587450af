"""
Integration tests for the SQLite gate store.
"""

from datetime import datetime

from pacing.delivery.session_gate import BlockReason, SessionGate
from pacing.delivery.state_store import GateState, GateStore


class TestGateStore:
    def test_empty_database_gives_defaults(self, sqlite_store):
        assert sqlite_store.load() == GateState()

    def test_round_trip(self, sqlite_store):
        state = GateState(
            sessions_today=3,
            last_reset_date="2024-03-04",
            last_session_end=datetime(2024, 3, 4, 15, 30, 12),
        )
        sqlite_store.save(state)
        assert sqlite_store.load() == state

    def test_unset_session_end(self, sqlite_store):
        sqlite_store.save(GateState(sessions_today=1, last_session_end=None))
        assert sqlite_store.load().last_session_end is None

    def test_survives_reopen(self, tmp_path):
        path = tmp_path / "nested" / "state.db"
        first = GateStore(path)
        first.save(GateState(sessions_today=2, last_reset_date="2024-03-04"))
        first.close()

        second = GateStore(path)
        assert second.load().sessions_today == 2
        second.close()

    def test_corrupt_values_fall_back(self, sqlite_store):
        sqlite_store.conn.executemany(
            "INSERT OR REPLACE INTO gate_state (key, value) VALUES (?, ?)",
            [("sessions_today", "lots"), ("last_session_end", "yesterday-ish")],
        )
        sqlite_store.conn.commit()

        state = sqlite_store.load()
        assert state.sessions_today == 0
        assert state.last_session_end is None


class TestGateAcrossRestarts:
    def test_limits_survive_restart(self, tmp_path, clock):
        path = tmp_path / "state.db"

        store = GateStore(path)
        gate = SessionGate(store, clock=clock)
        gate.can_start_session()
        gate.record_session_end()
        store.close()

        clock.advance(minutes=10)
        restarted = SessionGate(GateStore(path), clock=clock)
        decision = restarted.can_start_session()
        assert decision.reason == BlockReason.COOLDOWN
        assert restarted.sessions_today == 1
