"""
Modules Package for SPELLOTRON.

Contains the pose library, word progression, game session and frame pipeline.
"""

from .pose_library import PoseLibrary
from .word_progression import WordProgression, WordProgressState, GoalCursor, CharacterResult
from .game_session import GameSession, FrameResult, TimerSnapshot, WordSummary
from .frame_pipeline import FramePipeline
from .resource_loader import (
    load_pose_library, save_pose_library, load_word_file, load_word_lists, load_word_list,
)

__all__ = [
    # Library
    'PoseLibrary',

    # Progression
    'WordProgression', 'WordProgressState', 'GoalCursor', 'CharacterResult',

    # Session
    'GameSession', 'FrameResult', 'TimerSnapshot', 'WordSummary',
    'FramePipeline',

    # Resources
    'load_pose_library', 'save_pose_library', 'load_word_file', 'load_word_lists', 'load_word_list',
]
