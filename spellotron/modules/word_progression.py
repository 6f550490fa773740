"""
Word Progression Module for SPELLOTRON.

Finite State Machine driving the life cycle of one goal word:

    NOT_STARTED ──start_word──► IN_PROGRESS(0) ──► ... ──► IN_PROGRESS(n-1) ──► COMPLETE
                                    │  advance_character (one per confirmed pose)  │
                                    └──────────────────────────────────────────────┘

Transitions only move forward. COMPLETE is terminal until start_word
re-initializes the machine for the next word.

Scoring:
    Each word is worth at most `max_score`, split evenly between its
    characters. A character completed after `elapsed` seconds earns

        scorable     = max(0, char_goal_time - elapsed)
        contribution = int(budget * scorable / char_goal_time)

    so an instant hit earns the whole per-character budget and one taking
    `char_goal_time` seconds or more earns nothing.

Paused time never counts: the session freezes the timers on pause and
shifts every stored timestamp forward by the paused duration on resume.

Author: SPELLOTRON Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..core.clock import Clock, MonotonicClock
from ..core.data_types import LetterPose
from ..core.debouncer import RecognitionDebouncer
from ..core.events import (
    CharacterAdvanced, EventDispatcher, PoseConfirmed, WordCompleted, WordStarted
)
from ..helpers.enums import ProgressState
from ..helpers.exception_handler import InvalidWordError, ProgressionStateError
from .pose_library import PoseLibrary

logger = logging.getLogger(__name__)

MAX_SCORE = 1234567
CHAR_GOAL_TIME = 21.5  # seconds
MAX_WORD_LENGTH = 10


@dataclass(frozen=True)
class GoalCursor:
    """
    Current character index and its goal pose, published together.

    Attributes:
        index: Characters completed so far (index of the goal letter).
        letter: Goal letter, None once the word is complete.
        pose: Goal pose of `letter`.
    """
    index: int = 0
    letter: Optional[str] = None
    pose: Optional[LetterPose] = None


@dataclass(frozen=True)
class CharacterResult:
    """Outcome of one completed character."""
    letter: str
    elapsed: float
    contribution: int
    similarity_history: Tuple[float, ...] = ()


@dataclass
class WordProgressState:
    """
    Per-word progress. Replaced whenever a new word starts.

    Attributes:
        word: Uppercase goal word.
        letters: Characters of the word, in order.
        per_character_point_budget: max_score / len(word).
        accumulated_score: Points earned so far in this word.
        word_start_time: Clock time the word started (pause-shifted).
        character_start_time: Clock time the current character started (pause-shifted).
        paused_accumulated: Total time spent paused during this word.
        frozen_at: Clock time the timers were frozen, None when running.
        completed_at: Clock time the last character was confirmed.
        results: Completed characters.
    """
    word: str = ""
    letters: Tuple[str, ...] = ()
    per_character_point_budget: float = 0.0
    accumulated_score: int = 0
    word_start_time: float = 0.0
    character_start_time: float = 0.0
    paused_accumulated: float = 0.0
    frozen_at: Optional[float] = None
    completed_at: Optional[float] = None
    results: List[CharacterResult] = field(default_factory=list)


class WordProgression:
    """
    Drives one word from its first letter to completion.

    Example:
        >>> progression = WordProgression(library, debouncer, events, clock)
        >>> progression.start_word("cat")
        >>> progression.current_letter
        'C'
        >>> progression.advance_character()  # after PoseConfirmed("C")
        411522
    """

    def __init__(
        self,
        pose_library: PoseLibrary,
        debouncer: RecognitionDebouncer,
        events: Optional[EventDispatcher] = None,
        clock: Optional[Clock] = None,
        max_score: float = MAX_SCORE,
        char_goal_time: float = CHAR_GOAL_TIME,
        max_word_length: int = MAX_WORD_LENGTH,
    ):
        if char_goal_time <= 0:
            raise ValueError("char_goal_time must be positive")
        if max_score < 0:
            raise ValueError("max_score must be >= 0")

        self._library = pose_library
        self._debouncer = debouncer
        self._events = events or EventDispatcher()
        self._clock = clock or MonotonicClock()
        self._max_score = max_score
        self._char_goal_time = char_goal_time
        self._max_word_length = max_word_length

        self._progress_state = ProgressState.NOT_STARTED
        self._state = WordProgressState()
        self._cursor = GoalCursor()

    # ==================== PROPERTIES ====================

    @property
    def progress_state(self) -> ProgressState:
        return self._progress_state

    @property
    def state(self) -> WordProgressState:
        return self._state

    @property
    def cursor(self) -> GoalCursor:
        return self._cursor

    @property
    def word(self) -> str:
        return self._state.word

    @property
    def letters(self) -> Tuple[str, ...]:
        return self._state.letters

    @property
    def current_index(self) -> int:
        return self._cursor.index

    @property
    def current_letter(self) -> Optional[str]:
        return self._cursor.letter

    @property
    def goal_pose(self) -> Optional[LetterPose]:
        return self._cursor.pose

    @property
    def score(self) -> int:
        return self._state.accumulated_score

    @property
    def per_character_point_budget(self) -> float:
        return self._state.per_character_point_budget

    @property
    def results(self) -> List[CharacterResult]:
        return list(self._state.results)

    @property
    def is_complete(self) -> bool:
        return self._progress_state is ProgressState.COMPLETE

    @property
    def is_in_progress(self) -> bool:
        return self._progress_state is ProgressState.IN_PROGRESS

    @property
    def is_frozen(self) -> bool:
        return self._state.frozen_at is not None

    @property
    def char_goal_time(self) -> float:
        return self._char_goal_time

    @property
    def max_score(self) -> float:
        return self._max_score

    @property
    def spelled_so_far(self) -> str:
        """Letters already completed, e.g. 'CA' for CAT at index 2."""
        return "".join(self._state.letters[:self._cursor.index])

    # ==================== LIFE CYCLE ====================

    def validate_word(self, word: str) -> str:
        """
        Normalize a candidate word.

        Returns:
            str: Trimmed uppercase word.

        Raises:
            InvalidWordError: Empty, too long, or not made of letters A-Z.
        """
        normalized = (word or "").strip().upper()
        if not normalized:
            raise InvalidWordError(message="Word is empty")
        if len(normalized) > self._max_word_length:
            raise InvalidWordError(
                message=f"Word {normalized!r} exceeds {self._max_word_length} characters"
            )
        if not (normalized.isascii() and normalized.isalpha()):
            raise InvalidWordError(message=f"Word {normalized!r} must contain only letters A-Z")
        return normalized

    def start_word(self, word: str, word_start_time: Optional[float] = None) -> None:
        """
        Start a new word and make its first letter the goal.

        Args:
            word: Goal word, any case.
            word_start_time: Start time; read from the clock when omitted.

        Raises:
            InvalidWordError: See validate_word.
            MissingLetterPoseError: A letter has no goal pose.
        """
        normalized = self.validate_word(word)
        first_pose, *_ = [self._library.get(letter) for letter in normalized]
        now = self._clock.now() if word_start_time is None else word_start_time

        self._state = WordProgressState(
            word=normalized,
            letters=tuple(normalized),
            per_character_point_budget=self._max_score / len(normalized),
            word_start_time=now,
            character_start_time=now,
        )
        self._progress_state = ProgressState.IN_PROGRESS
        self._set_goal(GoalCursor(0, first_pose.name, first_pose))

        logger.info(f"Word started: {normalized}")
        self._events.emit(WordStarted(word=normalized, first_letter=first_pose.name))

    def advance_character(self, now: Optional[float] = None) -> int:
        """
        Finish the current character and move to the next one.

        Called once per PoseConfirmed event for the current goal letter.

        Args:
            now: Confirmation time; read from the clock when omitted.

        Returns:
            int: Points earned by the completed character.

        Raises:
            ProgressionStateError: No word in progress.
        """
        if self._progress_state is not ProgressState.IN_PROGRESS:
            raise ProgressionStateError(
                message=f"Cannot advance character in state {self._progress_state.value}"
            )
        if now is None:
            now = self._clock.now()

        state = self._state
        completed_letter = self._cursor.letter
        elapsed = self.character_elapsed(now)
        contribution = self.compute_contribution(elapsed)
        history = self._debouncer.similarity_history

        state.accumulated_score += contribution
        state.results.append(CharacterResult(completed_letter, elapsed, contribution, history))
        logger.debug(
            f"Character {completed_letter} took {elapsed:.2f}s, "
            f"got {contribution} / {state.per_character_point_budget:.0f}"
        )

        next_index = self._cursor.index + 1
        if next_index == len(state.letters):
            state.completed_at = now
            self._progress_state = ProgressState.COMPLETE
            self._cursor = GoalCursor(next_index, None, None)
            word_time = self.word_elapsed(now)
            logger.info(f"Word completed: {state.word} score={state.accumulated_score} time={word_time:.2f}s")
            self._events.emit(WordCompleted(
                word=state.word,
                final_score=state.accumulated_score,
                elapsed_time=word_time,
                similarity_history=history,
            ))
            return contribution

        next_letter = state.letters[next_index]
        next_pose = self._library.get(next_letter)
        state.character_start_time = now
        self._set_goal(GoalCursor(next_index, next_pose.name, next_pose))
        self._events.emit(CharacterAdvanced(
            new_letter=next_pose.name,
            index=next_index,
            similarity_history=history,
            contribution=contribution,
        ))
        return contribution

    def handle_pose_confirmed(self, event: PoseConfirmed, now: Optional[float] = None) -> Optional[int]:
        """
        Apply a confirmation if it is for the current goal letter.

        Confirmations arriving after completion or naming an earlier goal
        are ignored.

        Returns:
            Optional[int]: Contribution, or None when ignored.
        """
        if not self.is_in_progress:
            logger.debug(f"Ignoring confirmation of {event.letter}: word not in progress")
            return None
        if event.letter != self._cursor.letter:
            logger.warning(f"Ignoring stale confirmation of {event.letter}; goal is {self._cursor.letter}")
            return None
        return self.advance_character(event.timestamp if now is None else now)

    def _set_goal(self, cursor: GoalCursor) -> None:
        self._cursor = cursor
        self._debouncer.set_goal(cursor.pose)

    # ==================== SCORING ====================

    def compute_contribution(self, elapsed_seconds: float) -> int:
        """
        Points for a character completed after `elapsed_seconds`.

        Linear from the full per-character budget at 0 s down to 0 at
        char_goal_time, truncated to an integer.
        """
        elapsed_seconds = max(0.0, elapsed_seconds)
        scorable = max(0.0, self._char_goal_time - elapsed_seconds)
        return int(self._state.per_character_point_budget * (scorable / self._char_goal_time))

    # ==================== TIMING ====================

    def _reading(self, now: Optional[float]) -> float:
        if self._state.frozen_at is not None:
            return self._state.frozen_at
        return self._clock.now() if now is None else now

    def character_elapsed(self, now: Optional[float] = None) -> float:
        """Seconds spent on the current character, pauses excluded."""
        if self._progress_state is ProgressState.NOT_STARTED:
            return 0.0
        if self._progress_state is ProgressState.COMPLETE:
            return self._state.results[-1].elapsed
        return max(0.0, self._reading(now) - self._state.character_start_time)

    def word_elapsed(self, now: Optional[float] = None) -> float:
        """Seconds spent on the word, pauses excluded."""
        if self._progress_state is ProgressState.NOT_STARTED:
            return 0.0
        if self._state.completed_at is not None:
            return max(0.0, self._state.completed_at - self._state.word_start_time)
        return max(0.0, self._reading(now) - self._state.word_start_time)

    def shift_timestamps(self, offset: float) -> None:
        """Move the word and character start times forward by `offset` seconds."""
        self._state.word_start_time += offset
        self._state.character_start_time += offset
        self._state.paused_accumulated += offset

    def freeze(self, at: float) -> None:
        """Stop elapsed readings at `at` (pause)."""
        if self._state.frozen_at is None:
            self._state.frozen_at = at

    def thaw(self, now: float) -> float:
        """
        Resume the timers after a freeze.

        Returns:
            float: Paused duration that was excluded.
        """
        frozen_at = self._state.frozen_at
        if frozen_at is None:
            return 0.0
        paused = max(0.0, now - frozen_at)
        self._state.frozen_at = None
        if self._state.completed_at is None:
            self.shift_timestamps(paused)
        return paused
