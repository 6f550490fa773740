# Spellotron Package
# Pose-recognition and word progression engine for the spelling game

from .core import (
    PoseSample, LetterPose, Joint, JointId, TrackingState,
    compare_poses, RecognitionDebouncer, EventDispatcher, ManualClock, MonotonicClock,
)
from .modules import GameSession, WordProgression, PoseLibrary, FramePipeline
from .utils import SessionLogger

__all__ = [
    'PoseSample',
    'LetterPose',
    'Joint',
    'JointId',
    'TrackingState',
    'compare_poses',
    'RecognitionDebouncer',
    'EventDispatcher',
    'ManualClock',
    'MonotonicClock',
    'GameSession',
    'WordProgression',
    'PoseLibrary',
    'FramePipeline',
    'SessionLogger',
]
