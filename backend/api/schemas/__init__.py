"""
API Schemas

Pydantic models for request/response validation.
"""

from .analysis import (
    AnalysisStateEnum,
    AnalysisReportResponse,
    AnalysisJobResponse,
    ErrorResponse,
    HealthResponse,
)

from .progress import (
    WebSocketMessageType,
    WebSocketMessage,
    ProgressMessage,
)

__all__ = [
    # Analysis schemas
    "AnalysisStateEnum",
    "AnalysisReportResponse",
    "AnalysisJobResponse",
    "ErrorResponse",
    "HealthResponse",
    # Progress schemas
    "WebSocketMessageType",
    "WebSocketMessage",
    "ProgressMessage",
]
