"""
Daily Crash Questionnaire core.

Branching flow engine, answer normalization and submission delivery for the
daily fatigue ("crash"), energy, sleep and symptom questionnaire.
"""

from .answers import AnswerSet, EnergyGraphPoint, SleepMetrics, sleep_assessment
from .errors import (
    AnswerError,
    DuplicateSubmissionError,
    QuestionnaireError,
    StateError,
    TransportError,
    ValidationError,
)
from .flow import QuestionnaireFlow, StepDescriptor, StepKind, can_advance, describe_step, total_steps
from .normalizer import (
    QUESTIONNAIRE_VERSION,
    EnergyGraphEntry,
    SubmissionRecord,
    format_time_interval,
    normalize_submission,
)
from .session import QuestionnaireSession
from .status import SubmissionStatusTracker
from .transport import HttpSubmissionTransport, SubmissionTransport

__all__ = [
    "AnswerSet",
    "EnergyGraphPoint",
    "SleepMetrics",
    "sleep_assessment",
    "AnswerError",
    "DuplicateSubmissionError",
    "QuestionnaireError",
    "StateError",
    "TransportError",
    "ValidationError",
    "QuestionnaireFlow",
    "StepDescriptor",
    "StepKind",
    "can_advance",
    "describe_step",
    "total_steps",
    "QUESTIONNAIRE_VERSION",
    "EnergyGraphEntry",
    "SubmissionRecord",
    "format_time_interval",
    "normalize_submission",
    "QuestionnaireSession",
    "SubmissionStatusTracker",
    "HttpSubmissionTransport",
    "SubmissionTransport",
]
