from typing import Optional


class CustomException(Exception):
    code = '000'
    message = 'Spellotron error'

    def __init__(self, code: Optional[str] = None, message: Optional[str] = None):
        if code:
            self.code = code
        if message:
            self.message = message
        super().__init__(self.message)

    def __str__(self):
        return f"[{self.code}] {self.message}"


class InvalidWordError(CustomException):
    """Word is empty, too long or not made of letters."""
    code = '001'
    message = 'Invalid word'


class NoEligibleWordError(CustomException):
    """The configured word list holds no word within the length bound."""
    code = '002'
    message = 'No eligible word in word list'


class MissingLetterPoseError(CustomException):
    """A goal letter is absent from the loaded alphabet library."""
    code = '003'
    message = 'Letter pose missing from pose library'


class ProgressionStateError(CustomException):
    code = '004'
    message = 'Operation not allowed in current state'


class ResourceLoadError(CustomException):
    code = '005'
    message = 'Failed to load resource'
