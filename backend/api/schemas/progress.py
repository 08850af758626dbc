"""
Progress API Schemas

Pydantic models for the analysis progress WebSocket stream.
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum

from .analysis import AnalysisStateEnum


class WebSocketMessageType(str, Enum):
    """Types of WebSocket messages (server -> client)."""
    PROGRESS = "progress"              # Run state / progress changed
    COMPLETED = "completed"            # Report ready
    FAILED = "failed"                  # Setup error, no report
    CANCELLED = "cancelled"            # Run cancelled
    ERROR = "error"                    # Protocol error


class WebSocketMessage(BaseModel):
    """
    Base WebSocket message structure.

    All WebSocket communication uses this format.
    """
    type: WebSocketMessageType = Field(..., description="Message type")
    data: dict = Field(default_factory=dict, description="Message payload")
    timestamp: int = Field(..., description="Unix timestamp in milliseconds")

    class Config:
        json_schema_extra = {
            "example": {
                "type": "progress",
                "data": {"run_id": "550e8400", "state": "extracting", "progress": 0.5},
                "timestamp": 1704067200000
            }
        }


class ProgressMessage(BaseModel):
    """
    Payload of a progress / final message.
    """
    run_id: str = Field(..., description="Analysis run ID")
    state: AnalysisStateEnum = Field(..., description="Run state")
    progress: float = Field(..., ge=0.0, le=1.0, description="Progress fraction")
    report: Optional[str] = Field(None, description="Report text (completed only)")
    error: Optional[str] = Field(None, description="Failure message (failed only)")
