"""
Pose Detector Service

Defines the pose provider contract consumed by the joint extractor and a
MediaPipe-backed implementation of it (Pose for body joints, Hands for
hand joints).

Provider output uses normalized coordinates with the origin at the
lower-left corner of the oriented image. MediaPipe reports y downward,
so the adapter flips it.

Note: MediaPipe's type stubs are incomplete, so we use type: ignore comments
for mp.solutions access. This is a known issue with the mediapipe package.
"""

import logging
from typing import Any, List, Optional, Protocol

import cv2
import numpy as np

from ..domain.pose import (
    ImageOrientation,
    JointObservation,
    HandJointObservation,
    KeyPointType,
)
from ..exceptions import PoseDetectionError

logger = logging.getLogger(__name__)


class PoseProvider(Protocol):
    """
    Capability that finds body and hand joints in an image.

    Implementations may raise PoseDetectionError; an empty list means
    nothing was found.
    """

    def detect_body_pose(
        self,
        image: np.ndarray,
        orientation: ImageOrientation,
    ) -> List[JointObservation]:
        ...

    def detect_hand_pose(
        self,
        image: np.ndarray,
        orientation: ImageOrientation,
    ) -> List[HandJointObservation]:
        ...


# MediaPipe Pose landmark indices for the joints we report
_BODY_LANDMARKS = {
    KeyPointType.LEFT_SHOULDER: 11,
    KeyPointType.RIGHT_SHOULDER: 12,
    KeyPointType.LEFT_HIP: 23,
    KeyPointType.RIGHT_HIP: 24,
}

_HAND_WRIST = 0

_ROTATIONS = {
    ImageOrientation.RIGHT: cv2.ROTATE_90_CLOCKWISE,
    ImageOrientation.LEFT: cv2.ROTATE_90_COUNTERCLOCKWISE,
    ImageOrientation.DOWN: cv2.ROTATE_180,
}


def orient_image(image: np.ndarray, orientation: ImageOrientation) -> np.ndarray:
    """Rotate an encoded image so it appears upright."""
    rotation = _ROTATIONS.get(orientation)
    if rotation is None:
        return image
    return cv2.rotate(image, rotation)


class MediaPipePoseProvider:
    """
    Pose provider backed by MediaPipe Pose and MediaPipe Hands.

    MediaPipe Pose has no root joint, so ROOT is synthesized as the hip
    midpoint with the weaker of the two hip visibilities. MediaPipe Hands
    has no per-landmark confidence, so each wrist takes its hand's
    handedness score.

    Usage:
        with MediaPipePoseProvider() as provider:
            joints = provider.detect_body_pose(image, ImageOrientation.RIGHT)

    MediaPipe graphs are stateful; create one provider per analysis run.
    """

    _mp_pose: Any
    _mp_hands: Any

    def __init__(
        self,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.5,
        max_num_hands: int = 2,
    ):
        """
        Initialize MediaPipe graphs.

        Args:
            model_complexity: 0, 1, or 2. Higher = more accurate but slower.
            min_detection_confidence: Minimum confidence for person/hand detection.
            max_num_hands: Maximum number of hands to report.
        """
        import mediapipe as mp

        # MediaPipe's type stubs don't include solutions, but it exists at runtime
        self._mp_pose = mp.solutions.pose  # type: ignore[attr-defined]
        self._mp_hands = mp.solutions.hands  # type: ignore[attr-defined]

        # Sampled frames are far apart, so treat each one as an unrelated image
        self.pose = self._mp_pose.Pose(
            static_image_mode=True,
            model_complexity=model_complexity,
            enable_segmentation=False,
            min_detection_confidence=min_detection_confidence,
        )
        self.hands = self._mp_hands.Hands(
            static_image_mode=True,
            max_num_hands=max_num_hands,
            min_detection_confidence=min_detection_confidence,
        )

    def __enter__(self) -> "MediaPipePoseProvider":
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any]
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release MediaPipe resources."""
        self.pose.close()
        self.hands.close()

    # -------------------------------------------------------------------------
    # Provider Contract
    # -------------------------------------------------------------------------

    def detect_body_pose(
        self,
        image: np.ndarray,
        orientation: ImageOrientation,
    ) -> List[JointObservation]:
        results = self._process(self.pose, image, orientation)
        if not results.pose_landmarks:
            return []

        landmarks = results.pose_landmarks.landmark
        joints = [
            JointObservation(
                joint_name=point_type.value,
                x=landmarks[index].x,
                y=1.0 - landmarks[index].y,
                confidence=landmarks[index].visibility,
            )
            for point_type, index in _BODY_LANDMARKS.items()
        ]

        root = self._synthesize_root(joints)
        if root is not None:
            joints.insert(0, root)
        return joints

    def detect_hand_pose(
        self,
        image: np.ndarray,
        orientation: ImageOrientation,
    ) -> List[HandJointObservation]:
        results = self._process(self.hands, image, orientation)
        if not results.multi_hand_landmarks:
            return []

        handedness = results.multi_handedness or []
        joints = []
        for hand_index, hand in enumerate(results.multi_hand_landmarks):
            wrist = hand.landmark[_HAND_WRIST]
            score = 1.0
            if hand_index < len(handedness):
                score = handedness[hand_index].classification[0].score
            joints.append(HandJointObservation(
                hand_index=hand_index,
                joint_name=KeyPointType.WRIST.value,
                x=wrist.x,
                y=1.0 - wrist.y,
                confidence=score,
            ))
        return joints

    # -------------------------------------------------------------------------
    # Private Helper Methods
    # -------------------------------------------------------------------------

    def _process(self, graph: Any, image: np.ndarray, orientation: ImageOrientation) -> Any:
        """Orient, convert BGR to RGB and run a MediaPipe graph."""
        try:
            oriented = orient_image(image, orientation)
            if len(oriented.shape) == 3 and oriented.shape[2] == 3:
                oriented = cv2.cvtColor(oriented, cv2.COLOR_BGR2RGB)
            return graph.process(oriented)
        except Exception as e:
            raise PoseDetectionError(f"MediaPipe processing failed: {e}") from e

    @staticmethod
    def _synthesize_root(joints: List[JointObservation]) -> Optional[JointObservation]:
        """Root joint = hip midpoint."""
        hips = {
            j.joint_name: j for j in joints
            if j.joint_name in (KeyPointType.LEFT_HIP.value, KeyPointType.RIGHT_HIP.value)
        }
        if len(hips) != 2:
            return None
        left = hips[KeyPointType.LEFT_HIP.value]
        right = hips[KeyPointType.RIGHT_HIP.value]
        return JointObservation(
            joint_name=KeyPointType.ROOT.value,
            x=(left.x + right.x) / 2,
            y=(left.y + right.y) / 2,
            confidence=min(left.confidence, right.confidence),
        )


def mediapipe_available() -> bool:
    """Check whether MediaPipe graphs can be created."""
    try:
        with MediaPipePoseProvider():
            return True
    except Exception as e:
        logger.warning(f"MediaPipe not available: {e}")
        return False
