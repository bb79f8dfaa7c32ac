"""Exception types raised by the questionnaire core."""
from typing import Optional


class QuestionnaireError(Exception):
    """Base class for questionnaire errors."""


class ValidationError(QuestionnaireError):
    """A required field is missing at final submission."""


class TransportError(QuestionnaireError):
    """Delivery to the persistence API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class StateError(QuestionnaireError):
    """Operation attempted from an invalid engine state."""


class DuplicateSubmissionError(StateError):
    """Submit called while a previous submission is still in flight."""


class AnswerError(QuestionnaireError, ValueError):
    """Invalid value passed to an answer mutation."""
