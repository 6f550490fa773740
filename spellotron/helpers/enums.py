import enum


class DifficultyLevel(enum.Enum):
    PRE_K = 'pre_k'
    FIRST_GRADE = 'first_grade'
    SECOND_GRADE = 'second_grade'
    THIRD_GRADE = 'third_grade'
    FOURTH_GRADE = 'fourth_grade'
    FIFTH_GRADE = 'fifth_grade'
    SIXTH_GRADE = 'sixth_grade'
    SEVENTH_GRADE = 'seventh_grade'
    EIGHTH_GRADE = 'eighth_grade'

    @classmethod
    def from_number(cls, level: int) -> 'DifficultyLevel':
        """Map the level-select index (0 = pre-K ... 8 = eighth grade); unknown falls back to first grade."""
        members = list(cls)
        if 0 <= level < len(members):
            return members[level]
        return cls.FIRST_GRADE

    @classmethod
    def parse(cls, value) -> 'DifficultyLevel':
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls.from_number(value)
        text = str(value).strip().lower().replace('-', '_').replace(' ', '_')
        if text.isdigit():
            return cls.from_number(int(text))
        return cls(text)


class ProgressState(enum.Enum):
    NOT_STARTED = 'not_started'
    IN_PROGRESS = 'in_progress'
    COMPLETE = 'complete'
