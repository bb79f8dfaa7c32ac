"""
Submission Normalizer.

Turns a finished AnswerSet into an immutable, versioned SubmissionRecord.
Validation runs again here even though the flow engine gates each step,
because submit can be reached without going through the gates.

Normalization rules:
- Empty optional strings are replaced by explicit sentinels
- Answers that belong to the branch the user did not take are dropped
- Energy graph points get a human-readable clock time
- Sets are emitted in catalogue order so records compare stably
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from . import options
from .answers import AnswerSet
from .errors import StateError, ValidationError

logger = logging.getLogger(__name__)

QUESTIONNAIRE_VERSION = "6.0"
DATA_TYPE = "completeQuestionnaire"
COMPLETION_STATUS = "completed"

NOT_SPECIFIED = "Not specified"
NONE_TEXT = "None"

# Energy graph index 0 corresponds to 08:00, each unit is 30 minutes
GRAPH_BASE_HOUR = 8
GRAPH_MINUTES_PER_UNIT = 30


def format_time_interval(time_index: float) -> str:
    """
    Clock time for an energy graph index.

    Examples:
        0  -> "8:00 AM"
        8  -> "12:00 PM"
        28 -> "10:00 PM"
        32 -> "12:00 AM" (wrapped past midnight)
    """
    total_minutes = int(time_index * GRAPH_MINUTES_PER_UNIT)
    hours = (GRAPH_BASE_HOUR + total_minutes // 60) % 24
    minutes = total_minutes % 60

    period = "AM" if hours < 12 else "PM"
    if hours == 0:
        display_hour = 12
    elif hours > 12:
        display_hour = hours - 12
    else:
        display_hour = hours

    return f"{display_hour}:{minutes:02d} {period}"


@dataclass(frozen=True)
class EnergyGraphEntry:
    """One normalized energy reading."""

    time_index: float
    energy_level: float
    formatted_timestamp: str

    def to_dict(self) -> dict:
        return {
            "timeInterval": self.time_index,
            "energyLevel": self.energy_level,
            "timestamp": self.formatted_timestamp,
        }


@dataclass(frozen=True)
class SubmissionRecord:
    """Canonical, immutable snapshot of one completed questionnaire."""

    user_id: str
    timestamp: datetime
    energy_graph_points: Tuple[EnergyGraphEntry, ...]
    refreshment_level: int
    has_excessive_fatigue: bool
    crash_time_of_day: str
    selected_symptoms: Tuple[str, ...]
    other_symptoms_description: str
    crash_duration: str
    crash_duration_number: int
    crash_trigger: Tuple[str, ...]
    crash_sub_triggers: Tuple[str, ...]
    crash_trigger_description: str
    sleep_quality: int
    sleep_duration: float
    wake_up_hour: int
    questionnaire_version: str = QUESTIONNAIRE_VERSION
    completion_status: str = COMPLETION_STATUS
    data_type: str = DATA_TYPE

    def to_payload(self) -> Dict[str, Any]:
        """JSON body expected by the persistence API."""
        return {
            "userId": self.user_id,
            "timestamp": self.timestamp.isoformat(),
            "dataType": self.data_type,
            "energyGraphPoints": [entry.to_dict() for entry in self.energy_graph_points],
            "refreshmentLevel": self.refreshment_level,
            "hasExcessiveFatigue": self.has_excessive_fatigue,
            "crashTimeOfDay": self.crash_time_of_day,
            "selectedSymptoms": list(self.selected_symptoms),
            "otherSymptomsDescription": self.other_symptoms_description,
            "crashDuration": self.crash_duration,
            "crashDurationNumber": self.crash_duration_number,
            "crashTrigger": list(self.crash_trigger),
            "crashSubTriggers": list(self.crash_sub_triggers),
            "crashTriggerDescription": self.crash_trigger_description,
            "sleepQuality": self.sleep_quality,
            "sleepDuration": self.sleep_duration,
            "wakeUpHour": self.wake_up_hour,
            "completionStatus": self.completion_status,
            "questionnaireVersion": self.questionnaire_version,
        }


def validate_answers(answers: AnswerSet, user_id: Optional[str]) -> None:
    """
    Check the fields a submission cannot do without, in order.

    Raises:
        ValidationError: First missing required field
    """
    if not user_id or not user_id.strip():
        raise ValidationError("missing user id")
    if not answers.energy_graph_points:
        raise ValidationError("no energy data")
    if answers.has_excessive_fatigue is True and not answers.crash_duration:
        raise ValidationError("crash duration required")


def normalize_submission(
    answers: AnswerSet,
    user_id: Optional[str],
    *,
    now: Optional[datetime] = None,
) -> SubmissionRecord:
    """
    Build the submission record for a completed answer set.

    Args:
        answers: Collected answers
        user_id: Identifier of the submitting user
        now: Submission instant (defaults to the current UTC time)

    Returns:
        The immutable SubmissionRecord

    Raises:
        ValidationError: A required field is missing
        StateError: The fatigue question was never answered
    """
    validate_answers(answers, user_id)

    fatigue = answers.has_excessive_fatigue
    if fatigue is None:
        raise StateError("fatigue question unanswered at submission")

    timestamp = now or datetime.now(timezone.utc)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)

    if fatigue:
        crash_time_of_day = _crash_time_text(answers)
        crash_duration = answers.crash_duration
        crash_duration_number = (
            answers.crash_duration_number if options.asks_duration_count(crash_duration) else 0
        )
        crash_trigger = _ordered(answers.crash_trigger, options.MAIN_TRIGGERS)
        sub_catalogue = [sub for main in crash_trigger for sub in options.sub_triggers_for(main)]
        crash_sub_triggers = _ordered(answers.selected_sub_triggers, sub_catalogue)
        crash_trigger_description = answers.crash_trigger_description or NONE_TEXT
        other_symptoms_description = NONE_TEXT
    else:
        crash_time_of_day = NOT_SPECIFIED
        crash_duration = NOT_SPECIFIED
        crash_duration_number = 0
        crash_trigger = ()
        crash_sub_triggers = ()
        crash_trigger_description = NONE_TEXT
        other_symptoms_description = answers.other_symptoms_description or NONE_TEXT

    record = SubmissionRecord(
        user_id=user_id.strip(),
        timestamp=timestamp.astimezone(timezone.utc),
        energy_graph_points=tuple(
            EnergyGraphEntry(
                time_index=point.time_index,
                energy_level=point.percentage,
                formatted_timestamp=format_time_interval(point.time_index),
            )
            for point in answers.energy_graph_points
        ),
        refreshment_level=answers.refreshment_level,
        has_excessive_fatigue=fatigue,
        crash_time_of_day=crash_time_of_day,
        selected_symptoms=_ordered(answers.selected_symptoms, options.SYMPTOM_OPTIONS),
        other_symptoms_description=other_symptoms_description,
        crash_duration=crash_duration,
        crash_duration_number=crash_duration_number,
        crash_trigger=crash_trigger,
        crash_sub_triggers=crash_sub_triggers,
        crash_trigger_description=crash_trigger_description,
        sleep_quality=answers.sleep_quality_slider,
        sleep_duration=answers.sleep_duration,
        wake_up_hour=answers.wake_up_hour,
    )

    logger.info(
        f"[NORMALIZE] Record for {record.user_id}: fatigue={fatigue}, "
        f"{len(record.energy_graph_points)} energy points, "
        f"{len(record.selected_symptoms)} symptoms"
    )
    return record


def _crash_time_text(answers: AnswerSet) -> str:
    if answers.crash_time_of_day:
        return answers.crash_time_of_day
    if answers.crash_time is not None:
        return answers.crash_time.strftime("%H:%M")
    return NOT_SPECIFIED


def _ordered(values: Iterable[str], catalogue: List[str]) -> Tuple[str, ...]:
    """Values in catalogue order; anything not in the catalogue goes last, sorted."""
    values = set(values)
    known = [value for value in catalogue if value in values]
    unknown = sorted(values.difference(catalogue))
    return tuple(known + unknown)
