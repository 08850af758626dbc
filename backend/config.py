"""
Application Settings

Configuration loaded from environment variables (or a .env file).
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Server
    APP_NAME: str = "SwingCoach API"
    APP_VERSION: str = "1.0.0"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # CORS
    ALLOWED_ORIGINS: list[str] = [
        "http://localhost:3000",      # React dev server
        "http://localhost:5173",      # Vite dev server
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Frame sampling
    ANALYSIS_FRAME_RATE: float = 30.0
    TARGET_SAMPLE_COUNT: int = 30
    MAX_FRAME_DIMENSION: int = 1280

    # Pose detection
    MIN_JOINT_CONFIDENCE: float = 0.1
    ADAPTIVE_ORIENTATION: bool = False   # False = always rotate right (portrait capture)
    MEDIAPIPE_MODEL_COMPLEXITY: int = 1
    MEDIAPIPE_DETECTION_CONFIDENCE: float = 0.5

    # Background runs
    MAX_FINISHED_RUNS: int = 100         # finished runs kept for polling

    # Uploads
    ALLOWED_VIDEO_SUFFIXES: set[str] = {".mp4", ".mov", ".m4v", ".avi"}


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
