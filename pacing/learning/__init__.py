"""
Learning: per-concept performance tracking and spaced repetition.
"""

from pacing.learning.concept_tracker import (
    ConceptRecord,
    ConceptTracker,
    DifficultyAdjustment,
    TrackerConfig,
)

__all__ = [
    "ConceptRecord",
    "ConceptTracker",
    "DifficultyAdjustment",
    "TrackerConfig",
]
