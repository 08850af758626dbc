"""
SwingCoach Backend API

FastAPI application for golf swing video analysis.

Run with:
    uvicorn main:app --reload --host 0.0.0.0 --port 8000

API docs available at:
    http://localhost:8000/docs (Swagger UI)
    http://localhost:8000/redoc (ReDoc)
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import router as api_router
from api.jobs import jobs
from api.websocket import websocket_endpoint
from config import get_settings
from core.exceptions import SwingAnalysisError

settings = get_settings()

# =============================================================================
# Logging Configuration
# =============================================================================

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan (startup/shutdown)
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the effective analysis settings on startup; cancel open runs on shutdown."""
    logger.info(f"{settings.APP_NAME} starting up...")
    logger.info(f"API docs: http://localhost:{settings.PORT}/docs")
    logger.info(f"Progress stream: ws://localhost:{settings.PORT}/ws/analysis/{{run_id}}")
    logger.info(
        f"Sampling {settings.TARGET_SAMPLE_COUNT} frames at {settings.ANALYSIS_FRAME_RATE} fps, "
        f"joint confidence > {settings.MIN_JOINT_CONFIDENCE}"
    )

    yield

    for run_id in list(jobs.tasks):
        jobs.cancel(run_id)
    logger.info(f"{settings.APP_NAME} shutting down, {len(jobs.tasks)} runs still open")


# =============================================================================
# FastAPI App
# =============================================================================

app = FastAPI(
    title=settings.APP_NAME,
    description="""
    **Golf Swing Video Analyzer**

    Samples a swing video, detects body pose per frame, measures spine tilt,
    hip rotation and shoulder rotation, and writes a coaching report.

    ## Endpoints

    - `GET /api/health` - Health check
    - `POST /api/analysis/video` - Analyze a video and wait for the report
    - `POST /api/analysis/jobs` - Start a background analysis
    - `GET /api/analysis/jobs/{run_id}` - Poll run status and report
    - `DELETE /api/analysis/jobs/{run_id}` - Cancel a run
    - `WS /ws/analysis/{run_id}` - Progress stream
    """,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# CORS Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Error Handlers
# =============================================================================

@app.exception_handler(SwingAnalysisError)
async def swing_analysis_exception_handler(
    request: Request,
    exc: SwingAnalysisError
) -> JSONResponse:
    """Handle analysis errors with their own status code"""
    logger.error(f"Analysis error: {exc.code} - {exc.message} ({request.method} {request.url.path})")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# =============================================================================
# Routes
# =============================================================================

# Include REST API routes
app.include_router(api_router, prefix="/api")

# WebSocket endpoint
app.websocket("/ws/analysis/{run_id}")(websocket_endpoint)


# =============================================================================
# Root endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "description": "Golf Swing Video Analyzer",
        "docs": "/docs",
        "health": "/api/health",
        "websocket": "ws://localhost:8000/ws/analysis/{run_id}"
    }


# =============================================================================
# Run directly (for development)
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level=settings.LOG_LEVEL.lower()
    )
