"""
Phase Classifier

Maps a frame's spine angle to a coarse swing phase. Each frame is
classified on its own; no state is carried between frames.
"""

from typing import Optional

from ..domain.analysis import SwingPhase

# Spine angle thresholds in degrees (all comparisons are strict)
BACKSWING_ANGLE_THRESHOLD = 85.0
DOWNSWING_ANGLE_THRESHOLD = 45.0
FOLLOW_THROUGH_ANGLE_THRESHOLD = 15.0


def classify_phase(spine_angle: Optional[float]) -> Optional[SwingPhase]:
    """
    Classify a single frame.

    - above 85 degrees: backswing
    - below 15 degrees: follow-through
    - below 45 degrees: downswing
    - anything else (45 to 85 inclusive): no phase
    """
    if spine_angle is None:
        return None

    if spine_angle > BACKSWING_ANGLE_THRESHOLD:
        return SwingPhase.BACKSWING
    if spine_angle < FOLLOW_THROUGH_ANGLE_THRESHOLD:
        return SwingPhase.FOLLOW_THROUGH
    if spine_angle < DOWNSWING_ANGLE_THRESHOLD:
        return SwingPhase.DOWNSWING
    return None
