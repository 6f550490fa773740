"""
Core Module for SPELLOTRON.

Contains data types, pose comparison, recognition debouncing, timing and events.
"""

from .data_types import (
    Point3D, Joint, JointId, TrackingState, PoseSample, LetterPose,
    JOINT_ORDER, JOINT_INDEX, ALPHABET,
)
from .comparator import compare_poses, joint_deviations, normalize_skeleton
from .debouncer import RecognitionDebouncer, RecognitionState
from .clock import Clock, MonotonicClock, ManualClock, format_elapsed
from .events import (
    EventDispatcher, GameEvent, PoseConfirmed, CharacterAdvanced, WordStarted,
    WordCompleted, SessionPaused, SessionResumed,
)

__all__ = [
    # Data types
    'Point3D', 'Joint', 'JointId', 'TrackingState', 'PoseSample', 'LetterPose',
    'JOINT_ORDER', 'JOINT_INDEX', 'ALPHABET',

    # Comparison
    'compare_poses', 'joint_deviations', 'normalize_skeleton',

    # Recognition
    'RecognitionDebouncer', 'RecognitionState',

    # Timing
    'Clock', 'MonotonicClock', 'ManualClock', 'format_elapsed',

    # Events
    'EventDispatcher', 'GameEvent', 'PoseConfirmed', 'CharacterAdvanced', 'WordStarted',
    'WordCompleted', 'SessionPaused', 'SessionResumed',
]
