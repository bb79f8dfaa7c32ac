"""Pydantic models for the questionnaire API."""
from .questionnaire import (
    EnergyGraphPointIn,
    QuestionnaireSubmissionIn,
    SubmitResponse,
    StoredQuestionnaire,
    QuestionnaireListResponse,
    ErrorResponse,
)

__all__ = [
    "EnergyGraphPointIn",
    "QuestionnaireSubmissionIn",
    "SubmitResponse",
    "StoredQuestionnaire",
    "QuestionnaireListResponse",
    "ErrorResponse",
]
