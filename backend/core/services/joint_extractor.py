"""
Joint Extractor Service

Turns raw pose provider output for one frame into normalized key points.

The app targets a phone held in portrait filming a side-on swing, so
the provider is always told to rotate the image right and coordinates
are remapped with (x, y) -> (1 - y, x). Set adaptive_orientation to
derive the hint from the video's orientation angle instead.
"""

import logging
from typing import List

import numpy as np

from ..domain.pose import (
    BODY_KEY_POINTS,
    ImageOrientation,
    JointObservation,
    KeyPoint,
    KeyPointType,
)
from .pose_detector import PoseProvider

logger = logging.getLogger(__name__)

MIN_JOINT_CONFIDENCE = 0.1

_ORIENTATION_FOR_ANGLE = {
    0: ImageOrientation.UP,
    90: ImageOrientation.RIGHT,
    -90: ImageOrientation.LEFT,
    180: ImageOrientation.DOWN,
}


def orientation_for_angle(video_angle: float) -> ImageOrientation:
    """Map a video rotation angle (0, 90, -90, 180) to an orientation hint."""
    return _ORIENTATION_FOR_ANGLE.get(int(video_angle), ImageOrientation.UP)


def normalize_point(x: float, y: float) -> tuple[float, float]:
    """Fixed 90 degree remap compensating for portrait capture."""
    return (1.0 - y, x)


class JointExtractor:
    """
    Extracts named key points from one image.

    Body joints are emitted first in BODY_KEY_POINTS order, followed by
    one WRIST per detected hand. Wrists are not deduplicated; metric
    lookups take the first match.
    """

    def __init__(
        self,
        pose_provider: PoseProvider,
        min_confidence: float = MIN_JOINT_CONFIDENCE,
        adaptive_orientation: bool = False,
    ):
        self.pose_provider = pose_provider
        self.min_confidence = min_confidence
        self.adaptive_orientation = adaptive_orientation

    def orientation_hint(self, video_angle: float = 0) -> ImageOrientation:
        if self.adaptive_orientation:
            return orientation_for_angle(video_angle)
        return ImageOrientation.RIGHT

    def extract(self, image: np.ndarray, video_angle: float = 0) -> List[KeyPoint]:
        """
        Detect and normalize key points in a single image.

        Args:
            image: Decoded frame
            video_angle: Orientation angle of the source video in degrees

        Returns:
            Key points above the confidence floor; empty if no usable pose

        Raises:
            PoseDetectionError: if the provider fails
        """
        orientation = self.orientation_hint(video_angle)

        body_joints = self.pose_provider.detect_body_pose(image, orientation)
        hand_joints = self.pose_provider.detect_hand_pose(image, orientation)

        key_points = self._body_key_points(body_joints)

        for joint in hand_joints:
            if joint.joint_name == KeyPointType.WRIST.value and self._is_confident(joint.confidence):
                key_points.append(self._to_key_point(KeyPointType.WRIST, joint.x, joint.y))

        logger.debug(f"Extracted {len(key_points)} key points")
        return key_points

    def _body_key_points(self, joints: List[JointObservation]) -> List[KeyPoint]:
        by_name = {}
        for joint in joints:
            by_name.setdefault(joint.joint_name, joint)

        key_points = []
        for point_type in BODY_KEY_POINTS:
            joint = by_name.get(point_type.value)
            if joint is not None and self._is_confident(joint.confidence):
                key_points.append(self._to_key_point(point_type, joint.x, joint.y))
        return key_points

    def _is_confident(self, confidence: float) -> bool:
        return confidence > self.min_confidence

    @staticmethod
    def _to_key_point(point_type: KeyPointType, x: float, y: float) -> KeyPoint:
        nx, ny = normalize_point(x, y)
        return KeyPoint(type=point_type, x=nx, y=ny)
