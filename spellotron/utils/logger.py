"""
Logger Module for SPELLOTRON.

Session logging functionality plus process-wide logging setup.
"""

from dataclasses import asdict, dataclass, field, is_dataclass
from typing import Any, Dict, List, Optional
from enum import Enum
import json
import logging
import logging.config
import time
from pathlib import Path

from ..core.config import settings
from ..core.events import (
    CharacterAdvanced, GameEvent, PoseConfirmed, SessionPaused, SessionResumed,
    WordCompleted, WordStarted,
)


class LogLevel(Enum):
    """Log levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogCategory(Enum):
    """Log categories."""
    SESSION = "session"
    RECOGNITION = "recognition"
    PROGRESS = "progress"
    SCORE = "score"
    SYSTEM = "system"


_EVENT_CATEGORIES = {
    PoseConfirmed: LogCategory.RECOGNITION,
    CharacterAdvanced: LogCategory.PROGRESS,
    WordStarted: LogCategory.PROGRESS,
    WordCompleted: LogCategory.SCORE,
    SessionPaused: LogCategory.SESSION,
    SessionResumed: LogCategory.SESSION,
}


@dataclass
class LogEntry:
    """Log entry."""
    timestamp: float
    level: LogLevel
    category: LogCategory
    message: str
    data: Optional[Dict] = None


@dataclass
class SessionLogger:
    """
    Structured log of one game session, saved as JSON.
    """

    session_id: str
    log_dir: str = settings.SESSION_LOG_DIR
    entries: List[LogEntry] = field(default_factory=list)

    def __post_init__(self):
        self.log_dir = Path(self.log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def log(self, level: LogLevel, category: LogCategory, message: str, data: Optional[Dict] = None):
        """
        Log a message.

        Args:
            level: Log level
            category: Log category
            message: Log message
            data: Optional data
        """
        entry = LogEntry(
            timestamp=time.time(),
            level=level,
            category=category,
            message=message,
            data=data
        )
        self.entries.append(entry)

    def info(self, category: LogCategory, message: str, data: Optional[Dict] = None):
        """Log info message."""
        self.log(LogLevel.INFO, category, message, data)

    def warning(self, category: LogCategory, message: str, data: Optional[Dict] = None):
        """Log warning message."""
        self.log(LogLevel.WARNING, category, message, data)

    def error(self, category: LogCategory, message: str, data: Optional[Dict] = None):
        """Log error message."""
        self.log(LogLevel.ERROR, category, message, data)

    def log_event(self, event: GameEvent):
        """Record an engine event under its category."""
        category = _EVENT_CATEGORIES.get(type(event), LogCategory.SYSTEM)
        data = _event_data(event)
        self.info(category, type(event).__name__, data)

    def entries_for(self, category: LogCategory) -> List[LogEntry]:
        return [entry for entry in self.entries if entry.category is category]

    def save_session_log(self) -> Path:
        """Save session log to file."""
        log_file = self.log_dir / f"session_{self.session_id}_{int(time.time())}.json"

        log_data = {
            'session_id': self.session_id,
            'timestamp': time.time(),
            'entries': [
                {
                    'timestamp': entry.timestamp,
                    'level': entry.level.value,
                    'category': entry.category.value,
                    'message': entry.message,
                    'data': entry.data
                }
                for entry in self.entries
            ]
        }

        with open(log_file, 'w', encoding='utf-8') as f:
            json.dump(log_data, f, indent=2, ensure_ascii=False)
        return log_file


def _event_data(event: GameEvent) -> Dict[str, Any]:
    data = asdict(event) if is_dataclass(event) else {}
    if 'similarity_history' in data:
        history = data.pop('similarity_history')
        data['frames'] = len(history)
        data['best_similarity'] = round(max(history), 2) if history else None
    return data


def create_session_logger(session_id: str, log_dir: str = settings.SESSION_LOG_DIR) -> SessionLogger:
    """
    Create a session logger.

    Args:
        session_id: Session ID
        log_dir: Log directory

    Returns:
        SessionLogger instance
    """
    return SessionLogger(session_id, log_dir)


def configure_logging(config_file: Optional[str] = None) -> bool:
    """
    Configure stdlib logging from an ini file.

    Returns:
        True if the file was found and applied.
    """
    config_file = config_file or settings.LOGGING_CONFIG_FILE
    if not Path(config_file).exists():
        logging.basicConfig(level=logging.INFO)
        logging.getLogger(__name__).warning(f"Logging config {config_file} not found, using basicConfig")
        return False
    logging.config.fileConfig(config_file, disable_existing_loggers=False)
    return True
