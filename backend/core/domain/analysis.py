"""
Swing Analysis Domain Models

Data structures for per-frame swing metrics, per-run accumulation and
the status of an analysis run.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from .pose import KeyPoint


class SwingPhase(Enum):
    """
    Coarse swing segments derived from spine angle.

    - BACKSWING: Club moving back, torso strongly tilted
    - DOWNSWING: Transition and acceleration
    - FOLLOW_THROUGH: After impact, spine near vertical
    """
    BACKSWING = "backswing"
    DOWNSWING = "downswing"
    FOLLOW_THROUGH = "follow_through"


class AnalysisState(Enum):
    """Lifecycle of a single analysis run."""
    IDLE = "idle"
    SAMPLING = "sampling"
    EXTRACTING = "extracting"
    AGGREGATING = "aggregating"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_finished(self) -> bool:
        return self in (AnalysisState.DONE, AnalysisState.FAILED, AnalysisState.CANCELLED)


@dataclass
class FrameMetrics:
    """
    Angles and phase measured on one sampled frame.

    All angles are in degrees. None means the key points needed for that
    calculation were not detected.
    """
    phase: Optional[SwingPhase] = None
    spine_angle: Optional[float] = None          # [0, 180], 0 = vertical
    hip_rotation: Optional[float] = None         # (-180, 180]
    shoulder_rotation: Optional[float] = None    # (-180, 180]
    key_points: list[KeyPoint] = field(default_factory=list)


@dataclass
class FrameOutcome:
    """
    Result of running the pipeline on one sampled frame.

    Either metrics is set (frame analyzed) or skip_reason is set
    (frame skipped and contributes nothing to the report).
    """
    frame_index: int
    timestamp: float
    metrics: Optional[FrameMetrics] = None
    skip_reason: Optional[str] = None

    @classmethod
    def analyzed(cls, frame_index: int, timestamp: float, metrics: FrameMetrics) -> "FrameOutcome":
        return cls(frame_index=frame_index, timestamp=timestamp, metrics=metrics)

    @classmethod
    def skipped(cls, frame_index: int, timestamp: float, reason: str) -> "FrameOutcome":
        return cls(frame_index=frame_index, timestamp=timestamp, skip_reason=reason)

    @property
    def is_skipped(self) -> bool:
        return self.metrics is None


@dataclass
class SwingAccumulator:
    """
    Per-run collection of frame results used for the report.

    Sequences only hold values that were actually measured. Aggregation
    does not depend on the order frames were added.
    """
    phases: list[SwingPhase] = field(default_factory=list)
    spine_angles: list[float] = field(default_factory=list)
    hip_rotations: list[float] = field(default_factory=list)
    shoulder_rotations: list[float] = field(default_factory=list)
    frames_analyzed: int = 0
    frames_skipped: int = 0

    def add(self, outcome: FrameOutcome) -> None:
        """Fold one frame outcome into the sequences."""
        if outcome.is_skipped:
            self.frames_skipped += 1
            return

        self.frames_analyzed += 1
        metrics = outcome.metrics
        if metrics.phase is not None:
            self.phases.append(metrics.phase)
        if metrics.spine_angle is not None:
            self.spine_angles.append(metrics.spine_angle)
        if metrics.hip_rotation is not None:
            self.hip_rotations.append(metrics.hip_rotation)
        if metrics.shoulder_rotation is not None:
            self.shoulder_rotations.append(metrics.shoulder_rotation)

    def phase_count(self, phase: SwingPhase) -> int:
        return sum(1 for p in self.phases if p == phase)


ProgressListener = Callable[["AnalysisRun"], None]


@dataclass
class AnalysisRun:
    """
    Status of one analysis run.

    Owned by whoever started the run and safe to read at any time.
    Progress only ever moves forward and reaches 1.0 on success.

    Usage:
        run = AnalysisRun()
        run.add_listener(lambda r: print(r.progress))
        report = await analyzer.analyze_video("swing.mp4", run=run)
    """
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    state: AnalysisState = AnalysisState.IDLE
    progress: float = 0.0
    report: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    frames_analyzed: int = 0
    frames_skipped: int = 0
    cancel_requested: bool = False
    _listeners: list[ProgressListener] = field(default_factory=list, repr=False)

    def add_listener(self, listener: ProgressListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ProgressListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def cancel(self) -> None:
        """Request cancellation; honoured at the next frame boundary."""
        self.cancel_requested = True

    def transition(self, state: AnalysisState) -> None:
        self.state = state
        self._notify()

    def update_progress(self, value: float) -> None:
        """Publish progress, clamped to [0, 1] and never decreasing."""
        value = min(max(value, 0.0), 1.0)
        if value > self.progress:
            self.progress = value
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
