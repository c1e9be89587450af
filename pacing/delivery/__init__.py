"""
Delivery: session access control and the caregiver CLI.

Components:
- SessionGate: Daily limit, cooldown, calm timeout, override
- GateStore: SQLite persistence for the gate counters
- cli: `pacing` command (status, override, end-session, simulate)
"""

from .session_gate import (
    BlockReason,
    CalmTimeout,
    GateConfig,
    GateDecision,
    OverrideHold,
    SessionGate,
)
from .state_store import GateState, GateStore, MemoryGateStore

__all__ = [
    # Gate
    "SessionGate",
    "GateConfig",
    "GateDecision",
    "BlockReason",
    "CalmTimeout",
    "OverrideHold",
    # Persistence
    "GateStore",
    "GateState",
    "MemoryGateStore",
]
