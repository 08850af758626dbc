"""
Video Source Service

Reads the facts the pipeline needs from a video file (duration and
recorded orientation) and extracts single frames by timestamp.

OpenCV applies the recorded rotation when decoding, so extracted
frames are already displayed upright.
"""

import logging
import math
from typing import Any, Optional, Protocol

import cv2
import numpy as np

from ..exceptions import (
    DurationUnavailableError,
    FrameExtractionError,
    NoVideoTrackError,
    VideoOpenError,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DIMENSION = 1280


class FrameSource(Protocol):
    """Capability the orchestrator needs from an opened video."""

    duration_seconds: float
    orientation_angle: float

    def frame_at(self, timestamp: float) -> np.ndarray:
        ...

    def close(self) -> None:
        ...


# =============================================================================
# Orientation
# =============================================================================

def orientation_angle_from_transform(a: float, b: float, c: float, d: float) -> float:
    """
    Derive the video rotation angle from an affine transform matrix.

    Returns:
        90, -90, 180 or 0 degrees
    """
    if b == 1.0 and c == -1.0:
        return 90
    if b == -1.0 and c == 1.0:
        return -90
    if a == -1.0 and d == -1.0:
        return 180
    return 0


def transform_for_rotation(degrees: float) -> tuple[float, float, float, float]:
    """Affine (a, b, c, d) for a clockwise display rotation in degrees."""
    radians = math.radians(degrees)
    a = round(math.cos(radians))
    b = round(math.sin(radians))
    return (float(a), float(b), float(-b), float(a))


def limit_size(image: np.ndarray, max_dimension: int) -> np.ndarray:
    """Downscale so the longest side is at most max_dimension pixels."""
    h, w = image.shape[:2]
    longest = max(h, w)
    if longest <= max_dimension:
        return image
    scale = max_dimension / longest
    size = (max(1, round(w * scale)), max(1, round(h * scale)))
    return cv2.resize(image, size, interpolation=cv2.INTER_AREA)


# =============================================================================
# OpenCV Video Source
# =============================================================================

class VideoFrameSource:
    """
    Frame source backed by cv2.VideoCapture.

    Usage:
        with VideoFrameSource("swing.mp4") as source:
            print(source.duration_seconds, source.orientation_angle)
            image = source.frame_at(1.5)

    Raises on open:
        VideoOpenError: file cannot be opened
        NoVideoTrackError: no decodable video stream
        DurationUnavailableError: fps or frame count unusable
    """

    def __init__(self, video_path: str, max_dimension: int = DEFAULT_MAX_DIMENSION):
        self.video_path = video_path
        self.max_dimension = max_dimension

        self._cap = cv2.VideoCapture(video_path)
        if not self._cap.isOpened():
            self._cap.release()
            raise VideoOpenError(video_path)

        try:
            self.width = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
            self.height = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
            if self.width <= 0 or self.height <= 0:
                raise NoVideoTrackError(video_path)

            self.fps = float(self._cap.get(cv2.CAP_PROP_FPS))
            self.frame_count = float(self._cap.get(cv2.CAP_PROP_FRAME_COUNT))
            self.duration_seconds = self._read_duration()
            self.orientation_angle = self._read_orientation()
        except Exception:
            self._cap.release()
            raise

    def __enter__(self) -> "VideoFrameSource":
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any]
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release the capture."""
        self._cap.release()

    def frame_at(self, timestamp: float) -> np.ndarray:
        """
        Decode the frame shown at `timestamp` seconds.

        Raises:
            FrameExtractionError: if seeking or decoding fails
        """
        if not self._cap.set(cv2.CAP_PROP_POS_MSEC, timestamp * 1000):
            logger.debug(f"Seek to {timestamp:.3f}s not acknowledged by backend")

        ok, frame = self._cap.read()
        if not ok or frame is None:
            raise FrameExtractionError(timestamp)

        return limit_size(frame, self.max_dimension)

    # -------------------------------------------------------------------------
    # Private Helper Methods
    # -------------------------------------------------------------------------

    def _read_duration(self) -> float:
        if not math.isfinite(self.fps) or self.fps <= 0:
            raise DurationUnavailableError(self.video_path)
        if not math.isfinite(self.frame_count) or self.frame_count < 0:
            raise DurationUnavailableError(self.video_path)
        return self.frame_count / self.fps

    def _read_orientation(self) -> float:
        rotation = self._cap.get(cv2.CAP_PROP_ORIENTATION_META)
        if not math.isfinite(rotation):
            rotation = 0
        return orientation_angle_from_transform(*transform_for_rotation(rotation))


def open_video_source(video_path: str, max_dimension: int = DEFAULT_MAX_DIMENSION) -> VideoFrameSource:
    """Default frame source factory used by the orchestrator."""
    return VideoFrameSource(video_path, max_dimension=max_dimension)
