import pytest

from spellotron.core.events import (
    EventDispatcher,
    GameEvent, PoseConfirmed, SessionPaused, SessionResumed, WordCompleted,
)
from spellotron.helpers.enums import DifficultyLevel, ProgressState
from spellotron.helpers.exception_handler import MissingLetterPoseError, NoEligibleWordError
from spellotron.modules.game_session import GameSession
from spellotron.utils.logger import LogCategory, LogLevel, SessionLogger

from .conftest import hold_letter, letter_sample, make_library, spell


def test_incomplete_library_rejected(config, clock):
    with pytest.raises(MissingLetterPoseError):
        GameSession(make_library("ABC"), ["cab"], config=config, clock=clock)


def test_next_word_only_returns_eligible_words(make_session):
    session = make_session(["", "  ", "supercalifragilistic", "cat", "x-ray", "elephant"])
    assert session.eligible_words == ["cat", "elephant"]
    for _ in range(200):
        assert session.next_word() in ("cat", "elephant")


def test_next_word_without_eligible_words_raises_every_time(make_session):
    session = make_session(["antidisestablishment", "incomprehensibility"])
    for _ in range(1000):
        with pytest.raises(NoEligibleWordError):
            session.next_word()


def test_end_to_end_instant_word(make_session):
    session = make_session(["cat", "dog"])
    received = []
    session.events.subscribe(GameEvent, received.append)

    word = session.start_next_word()
    assert word in ("CAT", "DOG")
    spell(session)

    progression = session.progression
    assert progression.progress_state is ProgressState.COMPLETE
    assert progression.cursor.index == 3
    assert 1234567 - 3 <= progression.score <= 1234567
    assert session.total_score == progression.score
    assert [summary.word for summary in session.word_summaries] == [word]

    confirmed = [event.letter for event in received if isinstance(event, PoseConfirmed)]
    assert confirmed == list(word)
    assert sum(isinstance(event, WordCompleted) for event in received) == 1


def test_wrong_pose_never_advances(make_session):
    session = make_session(["cat"])
    session.start_next_word()
    result = hold_letter(session, "Z", frames=50)
    assert result.processed
    assert result.similarity < session.debouncer.threshold
    assert session.progression.cursor.index == 0


def test_frame_result_reports_completion(make_session, clock):
    session = make_session(["a"])
    session.start_next_word()
    result = hold_letter(session, "A")
    assert result.confirmed == PoseConfirmed("A", clock.now())
    assert result.word_completed
    assert result.contribution == 1234567


def test_frames_after_completion_are_display_only(make_session):
    session = make_session(["a"])
    session.start_next_word()
    spell(session)
    result = session.process_frame(letter_sample("A"))
    assert not result.processed
    assert session.words_completed == 1


def test_time_is_scored(make_session, clock):
    session = make_session(["ab"])
    session.start_next_word()
    clock.advance(10.75)
    hold_letter(session, "A")
    assert session.progression.results[0].contribution == int((1234567 / 2) * 0.5)


def test_pause_excludes_paused_time(make_session, clock):
    session = make_session(["cat"])
    session.start_next_word()
    clock.advance(2.0)
    assert session.pause()
    clock.advance(30.0)
    assert session.tick().character_elapsed == pytest.approx(2.0)
    assert session.resume()
    clock.advance(1.0)

    snapshot = session.tick()
    assert snapshot.character_elapsed == pytest.approx(3.0)
    assert snapshot.word_elapsed == pytest.approx(3.0)


def test_paused_frames_do_not_reach_recognition(make_session):
    session = make_session(["cat"])
    session.start_next_word()
    session.pause()
    for _ in range(20):
        result = session.process_frame(letter_sample("C"))
        assert not result.processed
    assert session.progression.cursor.index == 0
    assert session.frames_received == 20
    assert session.frames_processed == 0


def test_resume_restarts_streak(make_session):
    session = make_session(["cat"])
    session.start_next_word()
    hold_letter(session, "C", frames=2)
    assert session.debouncer.streak == 2
    session.pause()
    session.resume()
    assert session.debouncer.streak == 0


def test_pause_and_resume_emit_events(make_session, clock):
    session = make_session(["cat"])
    received = []
    session.events.subscribe(GameEvent, received.append)
    session.start_next_word()
    session.pause()
    assert not session.pause()
    clock.advance(4.0)
    session.resume()
    assert not session.resume()

    assert SessionPaused(timestamp=100.0) in received
    assert SessionResumed(timestamp=104.0, paused_duration=4.0) in received


def test_toggle_pause(make_session):
    session = make_session(["cat"])
    session.start_next_word()
    assert session.toggle_pause() is True
    assert session.toggle_pause() is False


def test_sensor_disconnect_blocks_resume(make_session, clock):
    session = make_session(["cat"])
    session.start_next_word()
    clock.advance(1.0)
    session.sensor_disconnected()
    assert session.is_paused
    assert session.sensor_issue
    clock.advance(5.0)
    assert not session.resume()
    assert session.is_paused

    session.sensor_connected()
    assert not session.is_paused
    assert not session.sensor_issue
    assert session.tick().character_elapsed == pytest.approx(1.0)


def test_continue_game_starts_next_word_only_when_finished(make_session):
    session = make_session(["a"])
    assert session.continue_game() == "A"
    assert session.continue_game() is None
    spell(session)

    session.pause()
    assert session.continue_game() is None
    session.resume()
    assert session.continue_game() == "A"
    assert session.words_completed == 1


def test_continue_game_ignored_during_sensor_issue(make_session):
    session = make_session(["a"])
    session.sensor_disconnected()
    assert session.continue_game() is None


def test_tick_labels(make_session, clock):
    session = make_session(["cat"])
    session.start_next_word()
    clock.advance(65.42)
    snapshot = session.tick()
    assert snapshot.character_label == "01:05.42"
    assert snapshot.word_label == "01:05.42"
    assert session.tick_interval == pytest.approx(0.01)


def test_tick_before_any_word(make_session):
    snapshot = make_session(["cat"]).tick()
    assert snapshot.character_label == "00:00.00"


def test_scores_accumulate_across_words(make_session):
    session = make_session(["a", "b"])
    for _ in range(3):
        session.continue_game()
        spell(session)
    assert session.words_completed == 3
    assert session.total_score == 3 * 1234567


def test_pre_k_announces_letters(make_session):
    assert make_session(["cat"], level=0).announces_letters
    assert make_session(["cat"], level="pre_k").level is DifficultyLevel.PRE_K
    assert not make_session(["cat"], level=3).announces_letters
    assert make_session(["cat"], level=42).level is DifficultyLevel.FIRST_GRADE


def test_session_logger_records_events(make_session, tmp_path):
    session_logger = SessionLogger("test", log_dir=str(tmp_path))
    session = make_session(["a"], session_logger=session_logger)
    session.start_next_word()
    spell(session)
    session.sensor_disconnected()

    assert [entry.message for entry in session_logger.entries_for(LogCategory.SCORE)] == ["WordCompleted"]
    assert session_logger.entries_for(LogCategory.SYSTEM)
    path = session.save_log()
    assert path.exists()


def test_save_log_without_logger(make_session):
    assert make_session(["cat"]).save_log() is None


def test_sessions_sharing_a_dispatcher_keep_their_own_totals(library, clock, config):
    shared = EventDispatcher()
    first = GameSession(library, ["a"], config=config, clock=clock, events=shared)
    second = GameSession(library, ["be"], config=config, clock=clock, events=shared)

    first.start_next_word()
    spell(first)
    second.start_next_word()
    clock.advance(2.0)
    spell(second)

    assert [summary.word for summary in first.word_summaries] == ["A"]
    assert [summary.word for summary in second.word_summaries] == ["BE"]
    assert first.total_score == 1234567
    assert second.total_score == second.progression.score
    assert second.word_summaries[0].elapsed_time == pytest.approx(2.0)


def test_resume_count(make_session):
    session = make_session(["cat"])
    session.pause()
    assert session.resume_count == 0
    session.resume()
    session.sensor_disconnected()
    session.sensor_connected()
    assert session.resume_count == 2


def test_failed_word_start_is_logged(make_session, tmp_path):
    session_logger = SessionLogger("test", log_dir=str(tmp_path))
    session = make_session(["antidisestablishment"], session_logger=session_logger)
    with pytest.raises(NoEligibleWordError):
        session.start_next_word()
    errors = [entry for entry in session_logger.entries if entry.level is LogLevel.ERROR]
    assert len(errors) == 1
    assert errors[0].category is LogCategory.SESSION
    assert "[002]" in errors[0].data["error"]
