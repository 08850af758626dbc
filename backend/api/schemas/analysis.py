"""
Analysis API Schemas

Pydantic models for swing analysis API requests and responses.
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


class AnalysisStateEnum(str, Enum):
    """Analysis run states for API."""
    IDLE = "idle"
    SAMPLING = "sampling"
    EXTRACTING = "extracting"
    AGGREGATING = "aggregating"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


class AnalysisReportResponse(BaseModel):
    """
    Result of a synchronous video analysis.
    """
    state: AnalysisStateEnum = Field(..., description="Final run state")
    report: str = Field(..., description="Coaching report text")
    frames_analyzed: int = Field(..., ge=0, description="Sampled frames with a usable pose")
    frames_skipped: int = Field(..., ge=0, description="Sampled frames that failed or had no pose")

    class Config:
        json_schema_extra = {
            "example": {
                "state": "done",
                "report": "Swing Analysis:\n\nSwing Phases:\n- Backswing: 12 frames (40.0%)\n...",
                "frames_analyzed": 28,
                "frames_skipped": 2
            }
        }


class AnalysisJobResponse(BaseModel):
    """
    Status of a background analysis run.

    Poll until state is done, failed or cancelled.
    """
    run_id: str = Field(..., description="Analysis run ID")
    state: AnalysisStateEnum = Field(..., description="Current run state")
    progress: float = Field(..., ge=0.0, le=1.0, description="Fraction of sampled frames processed")
    frames_analyzed: int = Field(0, ge=0, description="Frames with a usable pose so far")
    frames_skipped: int = Field(0, ge=0, description="Frames skipped so far")
    report: Optional[str] = Field(None, description="Report text once done")
    error: Optional[str] = Field(None, description="Failure message if failed")
    error_code: Optional[str] = Field(None, description="Machine-readable failure code")

    class Config:
        json_schema_extra = {
            "example": {
                "run_id": "550e8400-e29b-41d4-a716-446655440000",
                "state": "extracting",
                "progress": 0.43,
                "frames_analyzed": 12,
                "frames_skipped": 1,
                "report": None,
                "error": None,
                "error_code": None
            }
        }


class ErrorResponse(BaseModel):
    """
    Error body returned for failed requests.
    """
    error: str = Field(..., description="Error code")
    detail: str = Field(..., description="Human-readable message")
    details: Optional[dict] = Field(None, description="Extra context")


class HealthResponse(BaseModel):
    """
    Health check response.
    """
    status: str = Field("healthy", description="Service status")
    version: str = Field(..., description="API version")
    mediapipe_available: bool = Field(..., description="Whether MediaPipe is working")
