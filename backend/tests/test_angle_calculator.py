"""
Angle Calculator Tests
"""
import pytest

from core.domain.analysis import SwingPhase
from core.domain.pose import KeyPoint, KeyPointType
from core.services.angle_calculator import AngleCalculator


def kp(point_type: KeyPointType, x: float, y: float) -> KeyPoint:
    return KeyPoint(type=point_type, x=x, y=y)


UPRIGHT = [
    kp(KeyPointType.ROOT, 0.0, 0.0),
    kp(KeyPointType.LEFT_SHOULDER, -1.0, 1.0),
    kp(KeyPointType.RIGHT_SHOULDER, 1.0, 1.0),
]


class TestSpineAngle:

    def test_shoulders_directly_above_root(self):
        assert AngleCalculator.calculate_spine_angle(UPRIGHT) == 0.0

    def test_horizontal_spine(self):
        key_points = [
            kp(KeyPointType.ROOT, 0.0, 0.0),
            kp(KeyPointType.LEFT_SHOULDER, 1.0, -0.5),
            kp(KeyPointType.RIGHT_SHOULDER, 1.0, 0.5),
        ]

        assert AngleCalculator.calculate_spine_angle(key_points) == pytest.approx(90.0)

    def test_angle_is_unsigned(self):
        leaning_left = [
            kp(KeyPointType.ROOT, 0.0, 0.0),
            kp(KeyPointType.LEFT_SHOULDER, -1.0, 0.0),
            kp(KeyPointType.RIGHT_SHOULDER, -1.0, 2.0),
        ]

        assert AngleCalculator.calculate_spine_angle(leaning_left) == pytest.approx(45.0)

    @pytest.mark.parametrize("missing", [
        KeyPointType.ROOT,
        KeyPointType.LEFT_SHOULDER,
        KeyPointType.RIGHT_SHOULDER,
    ])
    def test_missing_point_gives_none(self, missing):
        key_points = [p for p in UPRIGHT if p.type != missing]

        assert AngleCalculator.calculate_spine_angle(key_points) is None


class TestRotation:

    def test_level_hips(self):
        key_points = [
            kp(KeyPointType.LEFT_HIP, 0.4, 0.7),
            kp(KeyPointType.RIGHT_HIP, 0.6, 0.7),
        ]

        assert AngleCalculator.calculate_hip_rotation(key_points) == pytest.approx(0.0)

    def test_rotation_is_signed(self):
        key_points = [
            kp(KeyPointType.LEFT_SHOULDER, 0.0, 0.0),
            kp(KeyPointType.RIGHT_SHOULDER, 1.0, -1.0),
        ]

        assert AngleCalculator.calculate_shoulder_rotation(key_points) == pytest.approx(-45.0)

    def test_reversed_line(self):
        key_points = [
            kp(KeyPointType.LEFT_HIP, 1.0, 0.0),
            kp(KeyPointType.RIGHT_HIP, 0.0, 0.0),
        ]

        assert AngleCalculator.calculate_hip_rotation(key_points) == pytest.approx(180.0)

    def test_missing_points_give_none(self):
        assert AngleCalculator.calculate_hip_rotation(UPRIGHT) is None
        assert AngleCalculator.calculate_shoulder_rotation([]) is None


class TestCalculateAll:

    def test_empty_key_points_never_fail(self):
        metrics = AngleCalculator.calculate_all([])

        assert metrics.phase is None
        assert metrics.spine_angle is None
        assert metrics.hip_rotation is None
        assert metrics.shoulder_rotation is None

    def test_phase_from_spine_angle(self):
        metrics = AngleCalculator.calculate_all(UPRIGHT)

        assert metrics.spine_angle == 0.0
        assert metrics.phase == SwingPhase.FOLLOW_THROUGH
        assert metrics.shoulder_rotation == pytest.approx(0.0)
        assert metrics.key_points == UPRIGHT

    def test_first_duplicate_used(self):
        key_points = UPRIGHT + [kp(KeyPointType.ROOT, 5.0, 5.0)]

        assert AngleCalculator.calculate_spine_angle(key_points) == 0.0


def test_midpoint():
    assert AngleCalculator.calculate_midpoint(*UPRIGHT[1:]) == (0.0, 1.0)
