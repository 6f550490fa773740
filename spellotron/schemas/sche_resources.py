"""
Resource Schemas - on-disk formats of the pose library and word lists.

Author: SPELLOTRON Team
Version: 1.0.0
"""

from typing import Dict, List
from pydantic import BaseModel, Field, field_validator

from ..core.data_types import (
    Joint, JointId, LetterPose, Point3D, PoseSample, TrackingState
)


# ==================== POSE LIBRARY ====================

class JointSchema(BaseModel):
    """One joint of a stored pose."""
    joint: JointId = Field(..., description="Landmark name, e.g. 'elbow_left'")
    x: float = Field(..., description="X position (meters)")
    y: float = Field(..., description="Y position (meters)")
    z: float = Field(..., description="Z position (meters)")
    tracking: TrackingState = Field(TrackingState.TRACKED, description="Tracking quality")

    def to_joint(self) -> Joint:
        return Joint(self.joint, Point3D(self.x, self.y, self.z), self.tracking)


class LetterPoseSchema(BaseModel):
    """Stored goal pose of one letter."""
    name: str = Field(..., description="Letter A-Z")
    joints: List[JointSchema] = Field(default_factory=list, description="Joint positions")

    @field_validator("name")
    @classmethod
    def name_is_letter(cls, value: str) -> str:
        value = value.strip().upper()
        if len(value) != 1 or not ("A" <= value <= "Z"):
            raise ValueError(f"pose name must be a single letter A-Z, got {value!r}")
        return value

    def to_letter_pose(self) -> LetterPose:
        sample = PoseSample.from_joints(joint.to_joint() for joint in self.joints)
        return LetterPose(self.name, sample)

    @classmethod
    def from_letter_pose(cls, pose: LetterPose) -> "LetterPoseSchema":
        return cls(
            name=pose.name,
            joints=[
                JointSchema(
                    joint=joint.joint_id,
                    x=joint.position.x,
                    y=joint.position.y,
                    z=joint.position.z,
                    tracking=joint.tracking_state,
                )
                for joint in pose.sample
            ],
        )


class PoseLibrarySchema(BaseModel):
    """Whole pose library file."""
    poses: List[LetterPoseSchema] = Field(default_factory=list)


# ==================== WORD LISTS ====================

class WordListsSchema(BaseModel):
    """Word lists keyed by difficulty level name."""
    levels: Dict[str, List[str]] = Field(default_factory=dict)
