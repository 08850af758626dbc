"""
REST API Routes

FastAPI routes for golf swing analysis.
Handles HTTP requests for video analysis and run status.
"""

import logging
import os
import tempfile

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File

from .schemas import (
    AnalysisJobResponse,
    AnalysisReportResponse,
    AnalysisStateEnum,
    ErrorResponse,
    HealthResponse,
)
from .jobs import AnalysisJobManager, jobs
from config import Settings, get_settings
from core.domain.analysis import AnalysisRun, AnalysisState
from core.exceptions import SwingAnalysisError, UnsupportedVideoFormat
from core.services import MediaPipePoseProvider, SwingAnalyzer
from core.services.pose_detector import mediapipe_available

# Configure logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


# =============================================================================
# Dependencies
# =============================================================================

def get_analyzer(settings: Settings = Depends(get_settings)) -> SwingAnalyzer:
    """Build a SwingAnalyzer from settings."""
    def provider_factory() -> MediaPipePoseProvider:
        return MediaPipePoseProvider(
            model_complexity=settings.MEDIAPIPE_MODEL_COMPLEXITY,
            min_detection_confidence=settings.MEDIAPIPE_DETECTION_CONFIDENCE,
        )

    return SwingAnalyzer(
        pose_provider_factory=provider_factory,
        frame_rate=settings.ANALYSIS_FRAME_RATE,
        target_samples=settings.TARGET_SAMPLE_COUNT,
        min_confidence=settings.MIN_JOINT_CONFIDENCE,
        adaptive_orientation=settings.ADAPTIVE_ORIENTATION,
        max_dimension=settings.MAX_FRAME_DIMENSION,
    )


def get_job_manager() -> AnalysisJobManager:
    return jobs


# =============================================================================
# Health Check
# =============================================================================

@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Health check endpoint"
)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """
    Check if the API is running and MediaPipe is available.
    """
    return HealthResponse(
        status="healthy",
        version=settings.APP_VERSION,
        mediapipe_available=mediapipe_available()
    )


# =============================================================================
# Swing Analysis
# =============================================================================

@router.post(
    "/analysis/video",
    response_model=AnalysisReportResponse,
    responses={415: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    tags=["Swing Analysis"],
    summary="Analyze a golf swing video"
)
async def analyze_video(
    video: UploadFile = File(..., description="Video file (MP4, MOV)"),
    analyzer: SwingAnalyzer = Depends(get_analyzer),
    settings: Settings = Depends(get_settings),
) -> AnalysisReportResponse:
    """
    Analyze a golf swing from an uploaded video file and wait for the report.

    The video will be:
    1. Saved temporarily
    2. Sampled (at most 30 frames) and run through pose detection
    3. Measured for spine, hip and shoulder angles
    4. Summarized into a coaching report

    Returns:
        Report text plus how many frames were usable
    """
    temp_path = await _save_upload(video, settings)
    run = AnalysisRun()
    try:
        report = await analyzer.analyze_video(temp_path, run=run)
        return AnalysisReportResponse(
            state=AnalysisStateEnum(run.state.value),
            report=report,
            frames_analyzed=run.frames_analyzed,
            frames_skipped=run.frames_skipped,
        )

    except SwingAnalysisError:
        raise

    except Exception as e:
        logger.error(f"Video analysis failed: {e}")
        raise HTTPException(status_code=500, detail="Analysis failed")

    finally:
        # Clean up temp file
        if os.path.exists(temp_path):
            os.unlink(temp_path)


@router.post(
    "/analysis/jobs",
    response_model=AnalysisJobResponse,
    status_code=202,
    responses={415: {"model": ErrorResponse}},
    tags=["Swing Analysis"],
    summary="Start a background analysis"
)
async def start_analysis_job(
    video: UploadFile = File(..., description="Video file (MP4, MOV)"),
    analyzer: SwingAnalyzer = Depends(get_analyzer),
    settings: Settings = Depends(get_settings),
    manager: AnalysisJobManager = Depends(get_job_manager),
) -> AnalysisJobResponse:
    """
    Start analyzing an uploaded video without waiting for the result.

    Poll `GET /api/analysis/jobs/{run_id}` or connect to
    `WS /ws/analysis/{run_id}` for progress.
    """
    temp_path = await _save_upload(video, settings)
    run = manager.start(analyzer, temp_path, cleanup_path=temp_path)
    return _run_to_response(run)


@router.get(
    "/analysis/jobs/{run_id}",
    response_model=AnalysisJobResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Swing Analysis"],
    summary="Get analysis run status"
)
async def get_analysis_job(
    run_id: str,
    manager: AnalysisJobManager = Depends(get_job_manager),
) -> AnalysisJobResponse:
    """
    Current state and progress of a run; includes the report once done.
    """
    return _run_to_response(manager.get(run_id))


@router.delete(
    "/analysis/jobs/{run_id}",
    response_model=AnalysisJobResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Swing Analysis"],
    summary="Cancel an analysis run"
)
async def cancel_analysis_job(
    run_id: str,
    manager: AnalysisJobManager = Depends(get_job_manager),
) -> AnalysisJobResponse:
    """
    Request cancellation. The run stops before its next frame.
    """
    return _run_to_response(manager.cancel(run_id))


# =============================================================================
# Helper Functions
# =============================================================================

async def _save_upload(video: UploadFile, settings: Settings) -> str:
    """Write an upload to a temp file with its original extension."""
    suffix = os.path.splitext(video.filename or "")[1].lower()
    if suffix not in settings.ALLOWED_VIDEO_SUFFIXES:
        raise UnsupportedVideoFormat(suffix, sorted(settings.ALLOWED_VIDEO_SUFFIXES))

    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as temp_file:
        content = await video.read()
        temp_file.write(content)
        return temp_file.name


def _run_to_response(run: AnalysisRun) -> AnalysisJobResponse:
    """Convert domain AnalysisRun to API response schema."""
    return AnalysisJobResponse(
        run_id=run.id,
        state=AnalysisStateEnum(run.state.value),
        progress=run.progress,
        frames_analyzed=run.frames_analyzed,
        frames_skipped=run.frames_skipped,
        report=run.report if run.state == AnalysisState.DONE else None,
        error=run.error,
        error_code=run.error_code,
    )
