"""
Events Module for SPELLOTRON.

Semantic events emitted by the engine for UI and audio collaborators,
and a small dispatcher to deliver them. The engine never touches
presentation state; it only emits these.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameEvent:
    """Base class of every engine event."""


@dataclass(frozen=True)
class PoseConfirmed(GameEvent):
    """The goal pose for `letter` was held long enough."""
    letter: str
    timestamp: float = 0.0


@dataclass(frozen=True)
class CharacterAdvanced(GameEvent):
    """
    The previous character was completed and `new_letter` is the goal.

    Attributes:
        new_letter: The new goal letter.
        index: Index of the new letter inside the word.
        similarity_history: Per-frame similarity scores recorded while the
            previous letter was the goal.
        contribution: Points earned by the previous letter.
    """
    new_letter: str
    index: int
    similarity_history: Tuple[float, ...] = field(default_factory=tuple)
    contribution: int = 0


@dataclass(frozen=True)
class WordStarted(GameEvent):
    word: str
    first_letter: str


@dataclass(frozen=True)
class WordCompleted(GameEvent):
    """
    The last character of the word was confirmed.

    Attributes:
        word: The completed word.
        final_score: Accumulated score of the word.
        elapsed_time: Word completion time in seconds, pauses excluded.
        similarity_history: Similarities recorded for the last letter.
    """
    word: str
    final_score: int
    elapsed_time: float
    similarity_history: Tuple[float, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SessionPaused(GameEvent):
    timestamp: float
    sensor_issue: bool = False


@dataclass(frozen=True)
class SessionResumed(GameEvent):
    timestamp: float
    paused_duration: float


E = TypeVar("E", bound=GameEvent)
Listener = Callable[[GameEvent], None]


class EventDispatcher:
    """
    Delivers events to listeners subscribed by event type.

    Listeners registered for a base class (e.g. GameEvent) receive every
    subclass too. Delivery is synchronous, in subscription order, and a
    listener exception propagates to the emitter.

    Example:
        >>> events = EventDispatcher()
        >>> events.subscribe(WordCompleted, lambda e: print(e.final_score))
        >>> events.emit(WordCompleted("CAT", 1234566, 2.5))
        1234566
    """

    def __init__(self):
        self._listeners: List[Tuple[Type[GameEvent], Listener]] = []
        self._lock = threading.Lock()

    def subscribe(self, event_type: Type[E], listener: Callable[[E], None]) -> Callable[[], None]:
        """
        Register a listener.

        Args:
            event_type: Event class to listen for.
            listener: Callable taking the event.

        Returns:
            Callable: Unsubscribe function.
        """
        entry = (event_type, listener)
        with self._lock:
            self._listeners.append(entry)

        def unsubscribe() -> None:
            with self._lock:
                if entry in self._listeners:
                    self._listeners.remove(entry)

        return unsubscribe

    def emit(self, event: GameEvent) -> None:
        with self._lock:
            targets = [listener for event_type, listener in self._listeners if isinstance(event, event_type)]
        logger.debug(f"emit {type(event).__name__} to {len(targets)} listener(s)")
        for listener in targets:
            listener(event)

    def listener_count(self, event_type: Type[GameEvent]) -> int:
        with self._lock:
            return sum(1 for registered, _ in self._listeners if registered is event_type)
