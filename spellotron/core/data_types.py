"""
Data Types Module for SPELLOTRON.

Data classes and type definitions shared by the recognition engine:
skeletal joints, per-frame pose samples and the letter poses used as
goals.

Author: SPELLOTRON Team
Version: 1.0.0
"""

import math
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union
import numpy as np


class JointId(Enum):
    """
    The 20 skeletal landmarks reported by the depth sensor.

    Declaration order is the canonical joint order of a PoseSample.
    """
    HIP_CENTER = "hip_center"
    SPINE = "spine"
    SHOULDER_CENTER = "shoulder_center"
    HEAD = "head"
    SHOULDER_LEFT = "shoulder_left"
    ELBOW_LEFT = "elbow_left"
    WRIST_LEFT = "wrist_left"
    HAND_LEFT = "hand_left"
    SHOULDER_RIGHT = "shoulder_right"
    ELBOW_RIGHT = "elbow_right"
    WRIST_RIGHT = "wrist_right"
    HAND_RIGHT = "hand_right"
    HIP_LEFT = "hip_left"
    KNEE_LEFT = "knee_left"
    ANKLE_LEFT = "ankle_left"
    FOOT_LEFT = "foot_left"
    HIP_RIGHT = "hip_right"
    KNEE_RIGHT = "knee_right"
    ANKLE_RIGHT = "ankle_right"
    FOOT_RIGHT = "foot_right"


JOINT_ORDER: Tuple[JointId, ...] = tuple(JointId)
JOINT_INDEX: Dict[JointId, int] = {joint_id: i for i, joint_id in enumerate(JOINT_ORDER)}

ALPHABET: Tuple[str, ...] = tuple(string.ascii_uppercase)


class TrackingState(Enum):
    """Tracking quality of a single joint."""
    TRACKED = "tracked"
    INFERRED = "inferred"
    NOT_TRACKED = "not_tracked"


@dataclass(frozen=True)
class Point3D:
    """
    A point in sensor space (meters).

    Attributes:
        x: Horizontal coordinate.
        y: Vertical coordinate.
        z: Depth.
    """
    x: float
    y: float
    z: float

    def to_array(self) -> np.ndarray:
        """Convert to numpy array [x, y, z]."""
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.z))


ORIGIN = Point3D(0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Joint:
    """
    One skeletal landmark in one frame.

    Attributes:
        joint_id: Which landmark this is.
        position: 3D position.
        tracking_state: Tracking quality reported by the sensor.
    """
    joint_id: JointId
    position: Point3D = ORIGIN
    tracking_state: TrackingState = TrackingState.TRACKED

    @property
    def is_usable(self) -> bool:
        """True if the joint may take part in a comparison."""
        return (
            self.tracking_state is not TrackingState.NOT_TRACKED
            and self.position.is_finite()
        )

    @classmethod
    def untracked(cls, joint_id: JointId) -> "Joint":
        return cls(joint_id, ORIGIN, TrackingState.NOT_TRACKED)


JointsInput = Union[Mapping[JointId, Joint], Iterable[Joint]]


@dataclass(frozen=True)
class PoseSample:
    """
    Snapshot of every body joint for one frame.

    Joints are stored in canonical JOINT_ORDER, exactly one per landmark.
    Build samples through `from_joints` / `from_positions`, which fill
    missing landmarks as NOT_TRACKED.

    Attributes:
        joints: One Joint per landmark, in JOINT_ORDER.
        timestamp: Capture time in seconds (clock units), optional.
        image: Rendered image reference owned by the rendering layer.
    """
    joints: Tuple[Joint, ...]
    timestamp: Optional[float] = None
    image: Optional[Any] = field(default=None, compare=False, hash=False, repr=False)

    def __post_init__(self):
        if len(self.joints) != len(JOINT_ORDER):
            raise ValueError(
                f"PoseSample needs {len(JOINT_ORDER)} joints, got {len(self.joints)}"
            )
        for expected, joint in zip(JOINT_ORDER, self.joints):
            if joint.joint_id is not expected:
                raise ValueError(
                    f"Joint out of order: expected {expected.value}, got {joint.joint_id.value}"
                )

    @classmethod
    def from_joints(
        cls,
        joints: JointsInput,
        timestamp: Optional[float] = None,
        image: Optional[Any] = None,
    ) -> "PoseSample":
        """
        Build a sample from any collection of joints.

        Args:
            joints: Mapping JointId -> Joint, or an iterable of Joint.
            timestamp: Capture time.
            image: Opaque rendered image reference.

        Returns:
            PoseSample: Sample with untracked fillers for absent landmarks.
        """
        if isinstance(joints, Mapping):
            by_id = dict(joints)
        else:
            by_id = {joint.joint_id: joint for joint in joints}
        ordered = tuple(by_id.get(joint_id) or Joint.untracked(joint_id) for joint_id in JOINT_ORDER)
        return cls(ordered, timestamp=timestamp, image=image)

    @classmethod
    def from_positions(
        cls,
        positions: Mapping[JointId, Tuple[float, float, float]],
        tracking: Optional[Mapping[JointId, TrackingState]] = None,
        timestamp: Optional[float] = None,
    ) -> "PoseSample":
        """Build a sample from raw (x, y, z) tuples."""
        tracking = tracking or {}
        joints = [
            Joint(joint_id, Point3D(*map(float, xyz)), tracking.get(joint_id, TrackingState.TRACKED))
            for joint_id, xyz in positions.items()
        ]
        return cls.from_joints(joints, timestamp=timestamp)

    def __getitem__(self, joint_id: JointId) -> Joint:
        return self.joints[JOINT_INDEX[joint_id]]

    def __iter__(self) -> Iterator[Joint]:
        return iter(self.joints)

    def __len__(self) -> int:
        return len(self.joints)

    def usable_mask(self) -> np.ndarray:
        """Boolean mask (20,) of joints that can be compared."""
        return np.array([joint.is_usable for joint in self.joints], dtype=bool)

    def inferred_mask(self) -> np.ndarray:
        return np.array(
            [joint.tracking_state is TrackingState.INFERRED for joint in self.joints],
            dtype=bool,
        )

    def to_numpy(self) -> np.ndarray:
        """
        Joint positions as a matrix.

        Returns:
            np.ndarray: Shape (20, 3) in JOINT_ORDER.
        """
        return np.array([joint.position.to_array() for joint in self.joints], dtype=np.float64)

    def tracked_count(self) -> int:
        return int(self.usable_mask().sum())


@dataclass(frozen=True)
class LetterPose:
    """
    Canonical goal pose for one alphabet character.

    Attributes:
        name: Single uppercase letter A-Z.
        sample: The goal skeleton.
    """
    name: str
    sample: PoseSample

    def __post_init__(self):
        if len(self.name) != 1 or self.name not in ALPHABET:
            raise ValueError(f"LetterPose name must be one uppercase letter A-Z, got {self.name!r}")
