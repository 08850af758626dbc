"""
Angle Calculator Service

Biomechanical angles for golf swing analysis, computed from the
normalized key points of one frame. All angles are in degrees.

This is pure mathematics - no external dependencies except numpy.
"""

from typing import List, Optional

import numpy as np

from ..domain.pose import KeyPoint, KeyPointType, find_key_point
from ..domain.analysis import FrameMetrics
from .phase_classifier import classify_phase


class AngleCalculator:
    """
    Calculates swing metrics from key points.

    - Spine angle (tilt away from vertical, unsigned)
    - Hip rotation (signed line angle of the hips)
    - Shoulder rotation (signed line angle of the shoulders)

    Every method returns None instead of failing when a required key
    point is missing. All methods are static - no state needed.
    """

    # -------------------------------------------------------------------------
    # Golf-Specific Angle Calculations
    # -------------------------------------------------------------------------

    @staticmethod
    def calculate_spine_angle(key_points: List[KeyPoint]) -> Optional[float]:
        """
        Calculate spine tilt.

        Measured between the vector root -> shoulder midpoint and the
        vertical axis.

        Returns:
            Spine angle in degrees, 0 to 180 (0 = perfectly vertical)
        """
        root = find_key_point(key_points, KeyPointType.ROOT)
        left_shoulder = find_key_point(key_points, KeyPointType.LEFT_SHOULDER)
        right_shoulder = find_key_point(key_points, KeyPointType.RIGHT_SHOULDER)

        if root is None or left_shoulder is None or right_shoulder is None:
            return None

        shoulder_mid = AngleCalculator.calculate_midpoint(left_shoulder, right_shoulder)
        spine_vector = np.array([
            shoulder_mid[0] - root.x,
            shoulder_mid[1] - root.y
        ])

        return float(abs(np.degrees(np.arctan2(spine_vector[0], spine_vector[1]))))

    @staticmethod
    def calculate_hip_rotation(key_points: List[KeyPoint]) -> Optional[float]:
        """
        Calculate hip line angle.

        Returns:
            Rotation in degrees, -180 to 180
        """
        left_hip = find_key_point(key_points, KeyPointType.LEFT_HIP)
        right_hip = find_key_point(key_points, KeyPointType.RIGHT_HIP)

        if left_hip is None or right_hip is None:
            return None

        return AngleCalculator.calculate_line_angle(left_hip, right_hip)

    @staticmethod
    def calculate_shoulder_rotation(key_points: List[KeyPoint]) -> Optional[float]:
        """
        Calculate shoulder line angle.

        Returns:
            Rotation in degrees, -180 to 180
        """
        left_shoulder = find_key_point(key_points, KeyPointType.LEFT_SHOULDER)
        right_shoulder = find_key_point(key_points, KeyPointType.RIGHT_SHOULDER)

        if left_shoulder is None or right_shoulder is None:
            return None

        return AngleCalculator.calculate_line_angle(left_shoulder, right_shoulder)

    # -------------------------------------------------------------------------
    # Complete Frame Analysis
    # -------------------------------------------------------------------------

    @classmethod
    def calculate_all(cls, key_points: List[KeyPoint]) -> FrameMetrics:
        """
        Calculate all metrics and the swing phase for a frame.

        Args:
            key_points: Normalized key points of one frame

        Returns:
            FrameMetrics (None for any value that could not be computed)
        """
        spine_angle = cls.calculate_spine_angle(key_points)
        return FrameMetrics(
            phase=classify_phase(spine_angle),
            spine_angle=spine_angle,
            hip_rotation=cls.calculate_hip_rotation(key_points),
            shoulder_rotation=cls.calculate_shoulder_rotation(key_points),
            key_points=list(key_points),
        )

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    @staticmethod
    def calculate_line_angle(start: KeyPoint, end: KeyPoint) -> float:
        """Signed angle of the line start -> end against the x axis."""
        vector = np.array([end.x - start.x, end.y - start.y])
        return float(np.degrees(np.arctan2(vector[1], vector[0])))

    @staticmethod
    def calculate_midpoint(p1: KeyPoint, p2: KeyPoint) -> tuple[float, float]:
        """Calculate midpoint between two key points."""
        return ((p1.x + p2.x) / 2, (p1.y + p2.y) / 2)
