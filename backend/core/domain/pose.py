"""
Pose Domain Models

Data structures for body and hand joints returned by a pose provider,
and the normalized key points the swing pipeline works with.

Provider coordinates are normalized (0.0 to 1.0) with the origin at the
lower-left corner of the oriented image.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class KeyPointType(Enum):
    """
    Anatomical landmarks used by the swing metrics.

    Body joints come from the body pose request; WRIST comes from the
    hand pose request (one per detected hand).
    """
    ROOT = "root"
    LEFT_HIP = "left_hip"
    RIGHT_HIP = "right_hip"
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    WRIST = "wrist"


# Body joints extracted per frame, in emission order
BODY_KEY_POINTS = (
    KeyPointType.ROOT,
    KeyPointType.LEFT_HIP,
    KeyPointType.RIGHT_HIP,
    KeyPointType.LEFT_SHOULDER,
    KeyPointType.RIGHT_SHOULDER,
)


class ImageOrientation(Enum):
    """
    Orientation hint handed to the pose provider.

    Describes how the encoded image must be rotated to appear upright:
    RIGHT means rotate 90 degrees clockwise.
    """
    UP = "up"
    RIGHT = "right"
    LEFT = "left"
    DOWN = "down"


@dataclass(frozen=True)
class JointObservation:
    """
    A single body joint reported by the pose provider.

    Attributes:
        joint_name: Joint identifier (matches KeyPointType values for
                    the joints we care about)
        x: Horizontal position (0.0 = left edge, 1.0 = right edge)
        y: Vertical position (0.0 = bottom edge, 1.0 = top edge)
        confidence: Detection confidence (0.0 to 1.0)
    """
    joint_name: str
    x: float
    y: float
    confidence: float


@dataclass(frozen=True)
class HandJointObservation:
    """A single hand joint; hand_index identifies which detected hand."""
    hand_index: int
    joint_name: str
    x: float
    y: float
    confidence: float


@dataclass(frozen=True)
class KeyPoint:
    """
    Normalized key point for one analyzed frame.

    Position is already remapped for portrait capture, so the golfer
    is treated as seen side-on.
    """
    type: KeyPointType
    x: float
    y: float

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)


def find_key_point(
    key_points: list[KeyPoint],
    point_type: KeyPointType
) -> Optional[KeyPoint]:
    """Return the first key point of the given type (first match wins)."""
    return next((kp for kp in key_points if kp.type == point_type), None)
