"""
Services Layer

Business logic services for golf swing analysis.
These services orchestrate domain models and external dependencies.
"""

from .pose_detector import PoseProvider, MediaPipePoseProvider
from .joint_extractor import JointExtractor
from .angle_calculator import AngleCalculator
from .phase_classifier import classify_phase
from .report_generator import ReportGenerator
from .video_source import VideoFrameSource
from .swing_analyzer import SwingAnalyzer

__all__ = [
    "PoseProvider",
    "MediaPipePoseProvider",
    "JointExtractor",
    "AngleCalculator",
    "classify_phase",
    "ReportGenerator",
    "VideoFrameSource",
    "SwingAnalyzer",
]
