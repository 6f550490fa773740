"""
Game Session Module for SPELLOTRON.

Owns the per-frame recognition pipeline and mediates between
consecutive words:

    PoseSample ─► compare_poses ─► RecognitionDebouncer ─► WordProgression
                                         │ PoseConfirmed          │ score, elapsed
                                         ▼                        ▼
                                   EventDispatcher          session total + summaries

The session totals only its own words, read from its WordProgression,
so several sessions may share one EventDispatcher.

Every mutating call (frames, pause/resume, word changes, sensor status)
runs under one re-entrant lock, so frames are always applied in order
against the goal that is active when they are processed.

Pausing never stops a clock. The session freezes the timers when the
pause starts and shifts every stored timestamp forward by the exact
paused duration on resume, so scoring never counts paused time.

Author: SPELLOTRON Team
Version: 1.0.0
"""

import logging
import random
import threading
import uuid
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

from ..core.clock import Clock, MonotonicClock, format_elapsed
from ..core.comparator import compare_poses
from ..core.config import Settings, settings
from ..core.data_types import PoseSample
from ..core.debouncer import RecognitionDebouncer
from ..core.events import (
    EventDispatcher, GameEvent, PoseConfirmed, SessionPaused, SessionResumed
)
from ..helpers.enums import DifficultyLevel, ProgressState
from ..helpers.exception_handler import CustomException, NoEligibleWordError
from ..utils.logger import LogCategory, SessionLogger, create_session_logger
from .pose_library import PoseLibrary
from .word_progression import WordProgression

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameResult:
    """
    Outcome of one processed frame.

    Attributes:
        processed: False when the frame was display-only (paused, no
            active word, or word complete).
        similarity: Similarity to the goal pose, None if not processed.
        streak: Debouncer streak after this frame.
        confirmed: Confirmation emitted by this frame, if any.
        contribution: Points earned if this frame completed a character.
        word_completed: True if this frame completed the word.
    """
    processed: bool
    similarity: Optional[float] = None
    streak: int = 0
    confirmed: Optional[PoseConfirmed] = None
    contribution: Optional[int] = None
    word_completed: bool = False


@dataclass(frozen=True)
class TimerSnapshot:
    """Elapsed times for the on-screen timer labels."""
    character_elapsed: float
    word_elapsed: float

    @property
    def character_label(self) -> str:
        return format_elapsed(self.character_elapsed)

    @property
    def word_label(self) -> str:
        return format_elapsed(self.word_elapsed)


@dataclass(frozen=True)
class WordSummary:
    """Post-word summary: the word, its final score and completion time."""
    word: str
    score: int
    elapsed_time: float

    @property
    def elapsed_label(self) -> str:
        return format_elapsed(self.elapsed_time)


class GameSession:
    """
    One player's game: random words, pause/resume, total score.

    Example:
        >>> session = GameSession(library, ["cat", "dog"], clock=clock)
        >>> session.start_next_word()
        'DOG'
        >>> result = session.process_frame(sample)
        >>> result.similarity
        97.3
    """

    def __init__(
        self,
        pose_library: PoseLibrary,
        word_list: Iterable[str],
        level: Union[DifficultyLevel, int, str] = DifficultyLevel.FIRST_GRADE,
        config: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        events: Optional[EventDispatcher] = None,
        rng: Optional[random.Random] = None,
        session_logger: Optional[SessionLogger] = None,
    ):
        """
        Args:
            pose_library: Alphabet of goal poses; must hold all 26 letters.
            word_list: Candidate words for this level.
            level: Difficulty level.
            config: Settings; module defaults when omitted.
            clock: Time source.
            events: Dispatcher for engine events.
            rng: Random source for word selection.
            session_logger: Structured session log.

        Raises:
            MissingLetterPoseError: The pose library is incomplete.
        """
        self._config = config or settings
        pose_library.validate_complete()

        self._library = pose_library
        self._level = DifficultyLevel.parse(level)
        self._clock = clock or MonotonicClock()
        self._events = events or EventDispatcher()
        self._rng = rng or random.Random()
        self.session_id = str(uuid.uuid4())

        self._word_list = list(word_list)
        self._eligible_words = self.filter_words(self._word_list, self._config.MAX_WORD_LENGTH)

        self._debouncer = RecognitionDebouncer(
            threshold=self._config.SIMILARITY_THRESHOLD,
            required_frames=self._config.REQUIRED_FRAMES,
            sustain_seconds=self._config.SUSTAIN_SECONDS,
            history_size=self._config.SIMILARITY_HISTORY_SIZE,
            clock=self._clock,
        )
        self._progression = WordProgression(
            pose_library,
            self._debouncer,
            events=self._events,
            clock=self._clock,
            max_score=self._config.MAX_SCORE,
            char_goal_time=self._config.CHAR_GOAL_TIME,
            max_word_length=self._config.MAX_WORD_LENGTH,
        )

        self._lock = threading.RLock()
        self._is_paused = False
        self._paused_at: Optional[float] = None
        self._sensor_issue = False
        self._total_score = 0
        self._summaries: List[WordSummary] = []
        self._frames_received = 0
        self._frames_processed = 0
        self._resume_count = 0

        if session_logger is None and self._config.SESSION_LOG_ENABLED:
            session_logger = create_session_logger(self.session_id, self._config.SESSION_LOG_DIR)
        self._session_logger = session_logger
        if self._session_logger is not None:
            self._events.subscribe(GameEvent, self._session_logger.log_event)

        logger.info(
            f"GameSession {self.session_id} created: level={self._level.value}, "
            f"{len(self._eligible_words)}/{len(self._word_list)} eligible words"
        )

    # ==================== PROPERTIES ====================

    @property
    def events(self) -> EventDispatcher:
        return self._events

    @property
    def progression(self) -> WordProgression:
        return self._progression

    @property
    def debouncer(self) -> RecognitionDebouncer:
        return self._debouncer

    @property
    def level(self) -> DifficultyLevel:
        return self._level

    @property
    def announces_letters(self) -> bool:
        """Pre-K players hear each new letter spoken."""
        return self._level is DifficultyLevel.PRE_K

    @property
    def eligible_words(self) -> List[str]:
        return list(self._eligible_words)

    @property
    def is_paused(self) -> bool:
        return self._is_paused

    @property
    def sensor_issue(self) -> bool:
        return self._sensor_issue

    @property
    def total_score(self) -> int:
        return self._total_score

    @property
    def word_summaries(self) -> List[WordSummary]:
        return list(self._summaries)

    @property
    def words_completed(self) -> int:
        return len(self._summaries)

    @property
    def frames_received(self) -> int:
        return self._frames_received

    @property
    def frames_processed(self) -> int:
        return self._frames_processed

    @property
    def resume_count(self) -> int:
        """Times the game has resumed; frames captured before a resume are stale."""
        return self._resume_count

    @property
    def tick_interval(self) -> float:
        """Timer label refresh interval in seconds."""
        return self._config.TICK_INTERVAL_MS / 1000.0

    # ==================== WORDS ====================

    @staticmethod
    def filter_words(words: Sequence[str], max_length: int) -> List[str]:
        """Trimmed words made of 1..max_length letters."""
        eligible = []
        for word in words:
            word = (word or "").strip()
            if 0 < len(word) <= max_length and word.isascii() and word.isalpha():
                eligible.append(word)
        return eligible

    def next_word(self) -> str:
        """
        Pick a random word of displayable length.

        The list is filtered once at construction, so a uniform pick among
        eligible words equals re-drawing the raw list until one fits,
        without the risk of drawing forever.

        Raises:
            NoEligibleWordError: No word in the list fits.
        """
        if not self._eligible_words:
            raise NoEligibleWordError(
                message=f"None of {len(self._word_list)} words has 1..{self._config.MAX_WORD_LENGTH} letters"
            )
        word = self._rng.choice(self._eligible_words)
        logger.debug(f"Random word selected: {word}")
        return word

    def start_next_word(self, now: Optional[float] = None) -> str:
        """
        Start a fresh word.

        Returns:
            str: The uppercase word now in progress.

        Raises:
            NoEligibleWordError: No word in the list fits.
            MissingLetterPoseError: A letter of the word has no goal pose.
        """
        with self._lock:
            now = self._clock.now() if now is None else now
            try:
                self._progression.start_word(self.next_word(), word_start_time=now)
            except CustomException as e:
                logger.error(f"Cannot start next word: {e}")
                if self._session_logger is not None:
                    self._session_logger.error(LogCategory.SESSION, "Cannot start next word", {"error": str(e)})
                raise
            if self._is_paused:
                self._progression.freeze(now)
            return self._progression.word

    def continue_game(self, now: Optional[float] = None) -> Optional[str]:
        """
        "Continue" command from the summary screen.

        Starts the next word only when the current one is finished (or
        none was started), the game is not paused and the sensor is up.

        Returns:
            Optional[str]: The new word, or None when ignored.
        """
        with self._lock:
            if self._sensor_issue or self._is_paused:
                return None
            if self._progression.progress_state is ProgressState.IN_PROGRESS:
                return None
            return self.start_next_word(now)

    # ==================== FRAMES ====================

    def process_frame(self, sample: PoseSample, now: Optional[float] = None) -> FrameResult:
        """
        Run one frame through comparison, debouncing and progression.

        Args:
            sample: Player skeleton for the frame.
            now: Frame time; sample.timestamp or the clock when omitted.

        Returns:
            FrameResult: What the frame did.
        """
        with self._lock:
            self._frames_received += 1
            if self._is_paused or not self._progression.is_in_progress:
                return FrameResult(processed=False)

            if now is None:
                now = sample.timestamp if sample.timestamp is not None else self._clock.now()
            self._frames_processed += 1

            goal = self._progression.goal_pose
            similarity = compare_poses(
                sample,
                goal.sample,
                max_joint_deviation=self._config.MAX_JOINT_DEVIATION,
                inferred_joint_weight=self._config.INFERRED_JOINT_WEIGHT,
            )
            confirmed = self._debouncer.observe(similarity, now)
            if confirmed is None:
                return FrameResult(processed=True, similarity=similarity, streak=self._debouncer.streak)

            self._events.emit(confirmed)
            contribution = self._progression.handle_pose_confirmed(confirmed, now)
            word_completed = contribution is not None and self._progression.is_complete
            if word_completed:
                self._record_completed_word()
            return FrameResult(
                processed=True,
                similarity=similarity,
                streak=self._debouncer.streak,
                confirmed=confirmed,
                contribution=contribution,
                word_completed=word_completed,
            )

    def tick(self, now: Optional[float] = None) -> TimerSnapshot:
        """Timer label refresh; reads elapsed times, never changes game state."""
        with self._lock:
            return TimerSnapshot(
                character_elapsed=self._progression.character_elapsed(now),
                word_elapsed=self._progression.word_elapsed(now),
            )

    # ==================== PAUSE / RESUME ====================

    def pause(self, now: Optional[float] = None) -> bool:
        """
        Pause the game. Frames stop reaching recognition and timers freeze.

        Returns:
            bool: False if already paused.
        """
        with self._lock:
            return self._pause(now, sensor_issue=False)

    def resume(self, now: Optional[float] = None) -> bool:
        """
        Resume after a pause, excluding the paused time from every timer.

        Refused while the sensor is disconnected.

        Returns:
            bool: True if the game was resumed.
        """
        with self._lock:
            if self._sensor_issue:
                logger.info("Resume ignored: sensor disconnected")
                return False
            return self._resume(now)

    def toggle_pause(self, now: Optional[float] = None) -> bool:
        """Pause or resume; returns the new paused flag."""
        with self._lock:
            if self._is_paused:
                self.resume(now)
            else:
                self.pause(now)
            return self._is_paused

    def _pause(self, now: Optional[float], sensor_issue: bool) -> bool:
        if self._is_paused:
            return False
        now = self._clock.now() if now is None else now
        self._is_paused = True
        self._paused_at = now
        self._progression.freeze(now)
        logger.info(f"Game paused at {now:.3f}")
        self._events.emit(SessionPaused(timestamp=now, sensor_issue=sensor_issue))
        return True

    def _resume(self, now: Optional[float]) -> bool:
        if not self._is_paused:
            return False
        now = self._clock.now() if now is None else now
        paused_duration = max(0.0, now - self._paused_at)
        self._progression.thaw(now)
        self._debouncer.reset()
        self._is_paused = False
        self._paused_at = None
        self._resume_count += 1
        logger.info(f"Game resumed after {paused_duration:.3f}s")
        self._events.emit(SessionResumed(timestamp=now, paused_duration=paused_duration))
        return True

    # ==================== SENSOR STATUS ====================

    def sensor_disconnected(self, now: Optional[float] = None) -> None:
        """Sensor lost: pause and block resume until it reconnects."""
        with self._lock:
            logger.warning("Sensor disconnected")
            self._sensor_issue = True
            self._pause(now, sensor_issue=True)
            if self._session_logger is not None:
                self._session_logger.warning(LogCategory.SYSTEM, "Sensor disconnected")

    def sensor_connected(self, now: Optional[float] = None) -> None:
        """Sensor back: clear the issue and resume with timers shifted."""
        with self._lock:
            if not self._sensor_issue:
                return
            logger.info("Sensor connected")
            self._sensor_issue = False
            self._resume(now)
            if self._session_logger is not None:
                self._session_logger.info(LogCategory.SYSTEM, "Sensor connected")

    # ==================== SCORE ====================

    def _record_completed_word(self) -> None:
        progression = self._progression
        score = progression.score
        self._total_score += score
        self._summaries.append(WordSummary(progression.word, score, progression.word_elapsed()))
        logger.info(f"Session total score: {self._total_score}")

    def save_log(self):
        """Write the session log, if one is attached; returns its path."""
        if self._session_logger is None:
            return None
        return self._session_logger.save_session_log()
