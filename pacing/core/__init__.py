"""
Core Module - selection primitives shared across the engine.
"""

from pacing.core.recall import MediaItem, MediaRotation, RecallHistory, RecallSelector, pick

__all__ = [
    "MediaItem",
    "MediaRotation",
    "RecallHistory",
    "RecallSelector",
    "pick",
]
