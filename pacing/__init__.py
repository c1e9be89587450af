"""
Pacing: adaptive pacing and progression engine for early-learning games.

Decides how much help each prompt gets, which concepts to re-drill,
when reward/progression thresholds fire, and whether a new play
session may start.

Components:
- core.recall: Weighted recall selection (concepts and media)
- learning.concept_tracker: Per-concept records and difficulty signal
- study.hint_ladder: Per-prompt hint escalation
- study.threshold_meter: Reward and progression meters
- delivery.session_gate: Daily limits, cooldown, caregiver override
- engine: PacingEngine composition root
"""

__version__ = "1.0.0"
