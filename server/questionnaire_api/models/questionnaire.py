"""Questionnaire submission models (wire format of the client payload)."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from questionnaire.normalizer import NOT_SPECIFIED

MAX_TEXT_LENGTH = 500


class EnergyGraphPointIn(BaseModel):
    """One point of the energy curve."""

    model_config = ConfigDict(populate_by_name=True)

    time_interval: float = Field(alias="timeInterval", ge=0)
    energy_level: float = Field(alias="energyLevel", ge=0, le=100)
    timestamp: str


class QuestionnaireSubmissionIn(BaseModel):
    """Complete daily questionnaire as sent by the client."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    timestamp: datetime
    data_type: Literal["completeQuestionnaire"] = Field(alias="dataType")
    energy_graph_points: list[EnergyGraphPointIn] = Field(alias="energyGraphPoints")
    refreshment_level: int = Field(alias="refreshmentLevel", ge=1, le=10)
    has_excessive_fatigue: bool = Field(alias="hasExcessiveFatigue")
    crash_time_of_day: str = Field(alias="crashTimeOfDay")
    selected_symptoms: list[str] = Field(alias="selectedSymptoms")
    other_symptoms_description: str = Field(
        alias="otherSymptomsDescription", max_length=MAX_TEXT_LENGTH
    )
    crash_duration: str = Field(alias="crashDuration")
    crash_duration_number: int = Field(alias="crashDurationNumber", ge=0)
    crash_trigger: list[str] = Field(alias="crashTrigger")
    crash_sub_triggers: list[str] = Field(alias="crashSubTriggers")
    crash_trigger_description: str = Field(
        alias="crashTriggerDescription", max_length=MAX_TEXT_LENGTH
    )
    sleep_quality: int = Field(alias="sleepQuality", ge=1, le=10)
    sleep_duration: float = Field(alias="sleepDuration", ge=0)
    wake_up_hour: int = Field(alias="wakeUpHour", ge=5, le=23)
    completion_status: Literal["completed"] = Field(alias="completionStatus")
    questionnaire_version: str = Field(alias="questionnaireVersion", min_length=1)

    @model_validator(mode="after")
    def check_required_answers(self) -> "QuestionnaireSubmissionIn":
        """Same required-field rules the client applies before sending."""
        if not self.user_id.strip():
            raise ValueError("missing user id")
        if not self.energy_graph_points:
            raise ValueError("no energy data")
        if self.has_excessive_fatigue and self.crash_duration in ("", NOT_SPECIFIED):
            raise ValueError("crash duration required")
        return self


class SubmitResponse(BaseModel):
    """Response to a stored submission."""

    success: bool = True
    id: int


class StoredQuestionnaire(BaseModel):
    """A stored submission with storage metadata."""

    id: int
    user_id: str
    received_at: str
    submission: dict


class QuestionnaireListResponse(BaseModel):
    """A user's stored submissions, newest first."""

    success: bool = True
    data: list[StoredQuestionnaire]


class ErrorResponse(BaseModel):
    """Error body returned with non-2xx status codes."""

    error: str
