"""
Study Module - in-prompt help and reward pacing.

Provides:
- Hint escalation per prompt (HintLadder)
- Threshold-crossing reward meter (ThresholdMeter)
- Never-regressing stage progression (ProgressionMeter)
"""

from pacing.study.hint_ladder import HintLadder, HintLevel, HintProfile, Learner
from pacing.study.threshold_meter import ProgressionMeter, Stage, Threshold, ThresholdMeter

__all__ = [
    "HintLadder",
    "HintLevel",
    "HintProfile",
    "Learner",
    "ProgressionMeter",
    "Stage",
    "Threshold",
    "ThresholdMeter",
]
