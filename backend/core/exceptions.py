"""
Swing Analysis Exceptions

Structured errors with error codes and HTTP status mapping.

Setup errors (VideoSetupError) abort a run. Frame-level errors
(FrameExtractionError, PoseDetectionError) are recovered inside the run
and only show up as skipped frames.
"""

from typing import Optional, Dict, Any


class SwingAnalysisError(Exception):
    """Base exception for all swing analysis errors"""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API response format"""
        result = {
            "error": self.code,
            "detail": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Setup Errors (fatal to a run)
# =============================================================================

class VideoSetupError(SwingAnalysisError):
    """Raised when a video cannot be prepared for analysis"""
    def __init__(self, message: str, code: str = "VIDEO_SETUP_ERROR", video: Optional[str] = None):
        details = {"video": video} if video else {}
        super().__init__(message, code, 422, details)


class VideoOpenError(VideoSetupError):
    """Raised when the video file cannot be opened"""
    def __init__(self, video: str):
        super().__init__(f"Could not open video: {video}", "VIDEO_OPEN_FAILED", video)


class NoVideoTrackError(VideoSetupError):
    """Raised when the file contains no decodable video track"""
    def __init__(self, video: str):
        super().__init__(f"No video track found: {video}", "NO_VIDEO_TRACK", video)


class DurationUnavailableError(VideoSetupError):
    """Raised when the video duration cannot be determined"""
    def __init__(self, video: str):
        super().__init__(f"Cannot read video duration: {video}", "DURATION_UNAVAILABLE", video)


# =============================================================================
# Frame Errors (recovered per frame)
# =============================================================================

class FrameExtractionError(SwingAnalysisError):
    """Raised when an image cannot be extracted at a timestamp"""
    def __init__(self, timestamp: float, reason: str = "decode failed"):
        super().__init__(
            f"Could not extract frame at {timestamp:.3f}s: {reason}",
            "FRAME_EXTRACTION_ERROR",
            422,
            {"timestamp": timestamp}
        )


class PoseDetectionError(SwingAnalysisError):
    """Raised when the pose provider fails on an image"""
    def __init__(self, message: str):
        super().__init__(message, "POSE_DETECTION_ERROR", 422, {"stage": "pose_detection"})


# =============================================================================
# Run Control
# =============================================================================

class AnalysisCancelledError(SwingAnalysisError):
    """Raised when a run is cancelled at a frame boundary"""
    def __init__(self, run_id: str):
        super().__init__(f"Analysis cancelled: {run_id}", "ANALYSIS_CANCELLED", 409, {"run_id": run_id})


class RunNotFound(SwingAnalysisError):
    """Raised when an analysis run id is unknown"""
    def __init__(self, run_id: str):
        super().__init__(f"Analysis run not found: {run_id}", "RUN_NOT_FOUND", 404, {"run_id": run_id})


class UnsupportedVideoFormat(SwingAnalysisError):
    """Raised when an uploaded file has an unsupported extension"""
    def __init__(self, suffix: str, allowed_suffixes: list):
        super().__init__(
            f"Unsupported video format: {suffix or 'none'}. Allowed: {', '.join(allowed_suffixes)}",
            "UNSUPPORTED_VIDEO_FORMAT",
            415,
            {"suffix": suffix, "allowed_suffixes": allowed_suffixes}
        )
