"""
Shared fixtures: a synthetic 26-letter alphabet and a manual clock.

Letters are semaphore-like: each letter holds the left and right arm
straight out at its own pair of angles, the rest of the body standing
still. Arm angles differ by at least 45 degrees between any two letters.
"""

import math
import random

import numpy as np
import pytest

from spellotron.core.clock import ManualClock
from spellotron.core.config import Settings
from spellotron.core.data_types import ALPHABET, JointId, LetterPose, PoseSample
from spellotron.modules.game_session import GameSession
from spellotron.modules.pose_library import PoseLibrary

BODY = {
    JointId.HIP_CENTER: (0.0, 0.0, 2.0),
    JointId.SPINE: (0.0, 0.25, 2.0),
    JointId.SHOULDER_CENTER: (0.0, 0.5, 2.0),
    JointId.HEAD: (0.0, 0.7, 2.0),
    JointId.SHOULDER_LEFT: (-0.2, 0.45, 2.0),
    JointId.SHOULDER_RIGHT: (0.2, 0.45, 2.0),
    JointId.HIP_LEFT: (-0.1, -0.05, 2.0),
    JointId.KNEE_LEFT: (-0.1, -0.5, 2.0),
    JointId.ANKLE_LEFT: (-0.1, -0.9, 2.0),
    JointId.FOOT_LEFT: (-0.1, -0.95, 1.9),
    JointId.HIP_RIGHT: (0.1, -0.05, 2.0),
    JointId.KNEE_RIGHT: (0.1, -0.5, 2.0),
    JointId.ANKLE_RIGHT: (0.1, -0.9, 2.0),
    JointId.FOOT_RIGHT: (0.1, -0.95, 1.9),
}

LEFT_ARM = (JointId.ELBOW_LEFT, JointId.WRIST_LEFT, JointId.HAND_LEFT)
RIGHT_ARM = (JointId.ELBOW_RIGHT, JointId.WRIST_RIGHT, JointId.HAND_RIGHT)
ARM_REACH = (0.3, 0.55, 0.65)


def _arm(shoulder, angle_deg, joints):
    sx, sy, sz = shoulder
    angle = math.radians(angle_deg)
    return {
        joint: (sx + reach * math.cos(angle), sy + reach * math.sin(angle), sz)
        for joint, reach in zip(joints, ARM_REACH)
    }


def arm_positions(left_deg, right_deg):
    """Full-body positions with both arms straight at the given angles."""
    positions = dict(BODY)
    positions.update(_arm(BODY[JointId.SHOULDER_LEFT], left_deg, LEFT_ARM))
    positions.update(_arm(BODY[JointId.SHOULDER_RIGHT], right_deg, RIGHT_ARM))
    return positions


def letter_angles(letter):
    index = ALPHABET.index(letter)
    return 45.0 * (index % 8), 45.0 * (index // 8) + 180.0


def letter_sample(letter, timestamp=None):
    left, right = letter_angles(letter)
    return PoseSample.from_positions(arm_positions(left, right), timestamp=timestamp)


def make_library(letters=ALPHABET):
    return PoseLibrary(LetterPose(letter, letter_sample(letter)) for letter in letters)


def shifted(sample, offset):
    """Same skeleton moved rigidly by `offset` meters."""
    offset = np.asarray(offset, dtype=float)
    positions = {
        joint.joint_id: tuple(joint.position.to_array() + offset)
        for joint in sample
    }
    return PoseSample.from_positions(positions, timestamp=sample.timestamp)


@pytest.fixture
def library():
    return make_library()


@pytest.fixture
def clock():
    return ManualClock(start=100.0)


@pytest.fixture
def config(tmp_path):
    return Settings(
        REQUIRED_FRAMES=3,
        SESSION_LOG_ENABLED=False,
        SESSION_LOG_DIR=str(tmp_path / "logs"),
    )


@pytest.fixture
def make_session(library, clock, config):
    def factory(words=("cat", "dog"), **kwargs):
        kwargs.setdefault("config", config)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("rng", random.Random(7))
        return GameSession(library, list(words), **kwargs)
    return factory


def hold_letter(session, letter, frames=None):
    """Feed enough matching frames to confirm `letter`; returns the last FrameResult."""
    frames = frames or session.debouncer.required_frames
    result = None
    for _ in range(frames):
        result = session.process_frame(letter_sample(letter))
    return result


def spell(session):
    """Hold every remaining letter of the current word."""
    results = []
    while session.progression.is_in_progress:
        results.append(hold_letter(session, session.progression.current_letter))
    return results
