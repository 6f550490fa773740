import pytest

from spellotron.core.clock import ManualClock
from spellotron.core.debouncer import RecognitionDebouncer
from spellotron.core.events import (
    CharacterAdvanced, EventDispatcher, GameEvent, PoseConfirmed, WordCompleted, WordStarted,
)
from spellotron.helpers.enums import ProgressState
from spellotron.helpers.exception_handler import (
    InvalidWordError, MissingLetterPoseError, ProgressionStateError,
)
from spellotron.modules.word_progression import CHAR_GOAL_TIME, MAX_SCORE, WordProgression

from .conftest import make_library


@pytest.fixture
def events():
    return EventDispatcher()


@pytest.fixture
def received(events):
    received = []
    events.subscribe(GameEvent, received.append)
    return received


@pytest.fixture
def progression(library, events):
    clock = ManualClock(start=10.0)
    debouncer = RecognitionDebouncer(required_frames=3, clock=clock)
    return WordProgression(library, debouncer, events=events, clock=clock)


def test_start_word_sets_first_goal(progression, received):
    progression.start_word("cat")
    assert progression.word == "CAT"
    assert progression.progress_state is ProgressState.IN_PROGRESS
    assert progression.cursor.index == 0
    assert progression.current_letter == "C"
    assert progression.goal_pose.name == "C"
    assert progression.per_character_point_budget == pytest.approx(MAX_SCORE / 3)
    assert received == [WordStarted(word="CAT", first_letter="C")]


@pytest.mark.parametrize("word", ["", "   ", "abcdefghijk", "c4t", "ca t", "café"])
def test_invalid_words_rejected(progression, word):
    with pytest.raises(InvalidWordError):
        progression.start_word(word)
    assert progression.progress_state is ProgressState.NOT_STARTED


def test_word_of_max_length_accepted(progression):
    progression.start_word("abcdefghij")
    assert len(progression.letters) == 10


def test_missing_letter_pose_aborts_start(events):
    clock = ManualClock()
    partial = make_library("CAT")
    progression = WordProgression(partial, RecognitionDebouncer(clock=clock), events=events, clock=clock)
    with pytest.raises(MissingLetterPoseError):
        progression.start_word("cab")
    assert progression.progress_state is ProgressState.NOT_STARTED


def test_contribution_is_full_budget_at_zero_elapsed(progression):
    progression.start_word("cat")
    assert progression.compute_contribution(0.0) == int(MAX_SCORE / 3)


def test_contribution_is_zero_at_goal_time(progression):
    progression.start_word("cat")
    assert progression.compute_contribution(CHAR_GOAL_TIME) == 0
    assert progression.compute_contribution(CHAR_GOAL_TIME + 60) == 0


def test_contribution_is_linear(progression):
    progression.start_word("ab")
    half = progression.compute_contribution(CHAR_GOAL_TIME / 2)
    assert half == int((MAX_SCORE / 2) * 0.5)


def test_instant_word_scores_max_within_truncation(progression, received):
    progression.start_word("dog", word_start_time=10.0)
    total = 0
    for letter in "DOG":
        assert progression.current_letter == letter
        total += progression.advance_character(now=10.0)

    assert progression.is_complete
    assert progression.cursor.index == 3
    assert progression.current_letter is None
    assert total == progression.score
    assert MAX_SCORE - 3 <= progression.score <= MAX_SCORE

    completed = [event for event in received if isinstance(event, WordCompleted)]
    assert len(completed) == 1
    assert completed[0].final_score == progression.score
    assert completed[0].elapsed_time == 0.0


def test_character_advanced_events_carry_next_letter(progression, received):
    progression.start_word("cat", word_start_time=10.0)
    progression.advance_character(now=12.0)
    advanced = [event for event in received if isinstance(event, CharacterAdvanced)]
    assert len(advanced) == 1
    assert advanced[0].new_letter == "A"
    assert advanced[0].index == 1
    assert advanced[0].contribution == progression.results[0].contribution


def test_character_timer_restarts_per_letter(progression):
    progression.start_word("cat", word_start_time=10.0)
    progression.advance_character(now=15.0)
    assert progression.character_elapsed(now=16.5) == pytest.approx(1.5)
    assert progression.word_elapsed(now=16.5) == pytest.approx(6.5)
    assert progression.results[0].elapsed == pytest.approx(5.0)


def test_debouncer_follows_goal(progression):
    progression.start_word("cat")
    debouncer = progression._debouncer
    assert debouncer.goal.name == "C"
    progression.advance_character()
    assert debouncer.goal.name == "A"


def test_index_and_letter_stay_consistent(progression):
    progression.start_word("banana", word_start_time=10.0)
    while progression.is_in_progress:
        cursor = progression.cursor
        assert 0 <= cursor.index < len(progression.letters)
        assert cursor.letter == progression.letters[cursor.index]
        assert cursor.pose.name == cursor.letter
        progression.advance_character(now=11.0)
    assert progression.spelled_so_far == "BANANA"


def test_advance_after_completion_raises(progression):
    progression.start_word("a")
    progression.advance_character()
    with pytest.raises(ProgressionStateError):
        progression.advance_character()


def test_advance_before_start_raises(progression):
    with pytest.raises(ProgressionStateError):
        progression.advance_character()


def test_stale_confirmation_is_ignored(progression):
    progression.start_word("cat", word_start_time=10.0)
    progression.handle_pose_confirmed(PoseConfirmed("C", 11.0))
    assert progression.handle_pose_confirmed(PoseConfirmed("C", 11.1)) is None
    assert progression.cursor.index == 1


def test_confirmation_after_completion_is_ignored(progression):
    progression.start_word("a", word_start_time=10.0)
    assert progression.handle_pose_confirmed(PoseConfirmed("A", 11.0)) is not None
    assert progression.handle_pose_confirmed(PoseConfirmed("A", 11.5)) is None
    assert len(progression.results) == 1


def test_freeze_and_thaw_exclude_paused_time(progression):
    progression.start_word("cat", word_start_time=10.0)
    progression.freeze(12.0)
    assert progression.is_frozen
    assert progression.character_elapsed(now=50.0) == pytest.approx(2.0)

    paused = progression.thaw(40.0)
    assert paused == pytest.approx(28.0)
    assert not progression.is_frozen
    assert progression.character_elapsed(now=41.0) == pytest.approx(3.0)
    assert progression.word_elapsed(now=41.0) == pytest.approx(3.0)
    assert progression.state.paused_accumulated == pytest.approx(28.0)


def test_thaw_without_freeze_is_noop(progression):
    progression.start_word("cat", word_start_time=10.0)
    assert progression.thaw(20.0) == 0.0
    assert progression.word_elapsed(now=20.0) == pytest.approx(10.0)


def test_restart_replaces_previous_word(progression):
    progression.start_word("cat")
    progression.advance_character()
    progression.start_word("dog")
    assert progression.cursor.index == 0
    assert progression.score == 0
    assert progression.results == []
