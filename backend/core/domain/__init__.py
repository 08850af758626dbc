"""
Domain Models

Pure data structures representing golf swing analysis concepts.
No external dependencies - just Python dataclasses and enums.
"""

from .pose import (
    KeyPoint,
    KeyPointType,
    ImageOrientation,
    JointObservation,
    HandJointObservation,
)
from .analysis import (
    SwingPhase,
    AnalysisState,
    FrameMetrics,
    FrameOutcome,
    SwingAccumulator,
    AnalysisRun,
)

__all__ = [
    "KeyPoint",
    "KeyPointType",
    "ImageOrientation",
    "JointObservation",
    "HandJointObservation",
    "SwingPhase",
    "AnalysisState",
    "FrameMetrics",
    "FrameOutcome",
    "SwingAccumulator",
    "AnalysisRun",
]
