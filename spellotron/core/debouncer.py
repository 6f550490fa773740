"""
Recognition Debouncer Module for SPELLOTRON.

Turns the noisy per-frame similarity stream into a single stable
"pose confirmed" decision.

State machine:
    IDLE (streak = 0) ──s >= T──► ACCUMULATING (streak = k)
          ▲                              │
          └──── s < T (hard reset) ◄─────┤
          └──── streak == K: emit PoseConfirmed, reset ◄┘

A single lucky frame can never trigger a match, and one bad frame
restarts the count. Confirmation is keyed on a frame count by default,
so it depends on the sensor keeping a steady frame rate. Setting
`sustain_seconds` switches to a held-time window instead.

Author: SPELLOTRON Team
Version: 1.0.0
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Optional, Tuple

from .clock import Clock, MonotonicClock
from .data_types import LetterPose
from .events import PoseConfirmed
from ..helpers.exception_handler import ProgressionStateError

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 92.0
DEFAULT_REQUIRED_FRAMES = 15


@dataclass
class RecognitionState:
    """
    Mutable recognition state.

    Attributes:
        streak: Consecutive qualifying frames observed.
        goal: Active goal pose.
        run_started_at: Clock time of the first frame of the current run.
        confirmations: Confirmations emitted for the current goal.
    """
    streak: int = 0
    goal: Optional[LetterPose] = None
    run_started_at: Optional[float] = None
    confirmations: int = 0


class RecognitionDebouncer:
    """
    Debounces similarity scores into PoseConfirmed events.

    Example:
        >>> debouncer = RecognitionDebouncer(threshold=92.0, required_frames=15)
        >>> debouncer.set_goal(library.get("A"))
        >>> for _ in range(15):
        ...     event = debouncer.observe(95.0)
        >>> event.letter
        'A'
    """

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        required_frames: int = DEFAULT_REQUIRED_FRAMES,
        sustain_seconds: Optional[float] = None,
        history_size: int = 1000,
        clock: Optional[Clock] = None,
    ):
        """
        Args:
            threshold: Minimum similarity for a frame to qualify.
            required_frames: Consecutive qualifying frames needed.
            sustain_seconds: If set, the run must last this long instead.
            history_size: Similarities kept for the current goal.
            clock: Time source, used only in held-time mode.
        """
        if required_frames < 1:
            raise ValueError("required_frames must be >= 1")
        if sustain_seconds is not None and sustain_seconds < 0:
            raise ValueError("sustain_seconds must be >= 0")

        self._threshold = threshold
        self._required_frames = required_frames
        self._sustain_seconds = sustain_seconds
        self._clock = clock or MonotonicClock()

        self._state = RecognitionState()
        self._history: Deque[float] = deque(maxlen=history_size)

        self._on_pose_confirmed: Optional[Callable[[PoseConfirmed], None]] = None

    @property
    def state(self) -> RecognitionState:
        return self._state

    @property
    def streak(self) -> int:
        return self._state.streak

    @property
    def goal(self) -> Optional[LetterPose]:
        return self._state.goal

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def required_frames(self) -> int:
        return self._required_frames

    @property
    def similarity_history(self) -> Tuple[float, ...]:
        """Similarities observed since the goal was assigned."""
        return tuple(self._history)

    def set_goal(self, goal: LetterPose) -> None:
        """Assign a new goal pose; always restarts the streak."""
        self._state = RecognitionState(goal=goal)
        self._history.clear()
        logger.debug(f"goal set to {goal.name}")

    def reset(self) -> None:
        """Drop the current streak but keep goal and history."""
        self._state.streak = 0
        self._state.run_started_at = None

    def observe(self, similarity: float, now: Optional[float] = None) -> Optional[PoseConfirmed]:
        """
        Feed one frame's similarity.

        Args:
            similarity: Score from compare_poses for this frame.
            now: Frame time; read from the clock when omitted.

        Returns:
            PoseConfirmed when the goal has just been confirmed, else None.
        """
        goal = self._state.goal
        if goal is None:
            raise ProgressionStateError(message="Debouncer has no goal pose")
        if now is None:
            now = self._clock.now()

        self._history.append(similarity)

        if not similarity >= self._threshold:  # NaN never qualifies
            self.reset()
            return None

        if self._state.streak == 0:
            self._state.run_started_at = now
        self._state.streak += 1

        if not self._is_sustained(now):
            return None

        event = PoseConfirmed(letter=goal.name, timestamp=now)
        self._state.confirmations += 1
        self.reset()
        logger.info(f"pose {goal.name} confirmed")

        if self._on_pose_confirmed:
            self._on_pose_confirmed(event)
        return event

    def _is_sustained(self, now: float) -> bool:
        if self._sustain_seconds is None:
            return self._state.streak >= self._required_frames
        return now - self._state.run_started_at >= self._sustain_seconds

    def set_on_pose_confirmed(self, callback: Callable[[PoseConfirmed], None]) -> None:
        """Set callback fired on every confirmation."""
        self._on_pose_confirmed = callback
