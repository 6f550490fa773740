import json
import logging

from spellotron.core.config import Settings, settings
from spellotron.core.events import CharacterAdvanced, WordCompleted
from spellotron.utils.logger import LogCategory, LogLevel, SessionLogger, configure_logging


def test_session_log_is_saved_as_json(tmp_path):
    session_logger = SessionLogger("abc", log_dir=str(tmp_path / "logs"))
    session_logger.info(LogCategory.SESSION, "started")
    session_logger.log_event(WordCompleted("CAT", 1234566, 2.5, (90.0, 97.5)))

    path = session_logger.save_session_log()
    data = json.loads(path.read_text(encoding="utf-8"))

    assert data["session_id"] == "abc"
    assert [entry["message"] for entry in data["entries"]] == ["started", "WordCompleted"]
    completed = data["entries"][1]
    assert completed["category"] == "score"
    assert completed["data"]["frames"] == 2
    assert completed["data"]["best_similarity"] == 97.5
    assert "similarity_history" not in completed["data"]


def test_log_event_category(tmp_path):
    session_logger = SessionLogger("abc", log_dir=str(tmp_path))
    session_logger.log_event(CharacterAdvanced("A", 1))
    entry = session_logger.entries[0]
    assert entry.category is LogCategory.PROGRESS
    assert entry.level is LogLevel.INFO
    assert entry.data["best_similarity"] is None


def test_configure_logging_from_ini():
    assert configure_logging(settings.LOGGING_CONFIG_FILE)
    assert logging.getLogger("spellotron").level == logging.INFO


def test_configure_logging_missing_file(tmp_path):
    assert not configure_logging(str(tmp_path / "missing.ini"))


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("SPELLOTRON_REQUIRED_FRAMES", "5")
    monkeypatch.setenv("SPELLOTRON_SUSTAIN_SECONDS", "0.5")
    config = Settings()
    assert config.REQUIRED_FRAMES == 5
    assert config.SUSTAIN_SECONDS == 0.5
    assert config.SIMILARITY_THRESHOLD == 92.0
