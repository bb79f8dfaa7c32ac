"""
Typed answer set for the daily crash questionnaire.

Each questionnaire field is a dataclass attribute. All mutations go through
set_answer() or the toggle helpers so that option sets, numeric ranges and
the sub-trigger invariant are enforced in one place.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from . import options
from .errors import AnswerError

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 500


@dataclass(frozen=True)
class EnergyGraphPoint:
    """One sample of the user-drawn energy curve."""

    time_index: float  # 0 = 08:00, one unit = 30 minutes
    percentage: float  # 0-100


@dataclass
class SleepMetrics:
    """Sleep data read from the device's health store, used as pre-fill."""

    duration_hours: float = 0.0
    stages: Dict[str, float] = field(default_factory=dict)  # stage -> hours


@dataclass
class AnswerSet:
    """Answers collected so far, partitioned by questionnaire step."""

    # Step 1
    refreshment_level: int = 1
    wake_up_hour: int = 8
    sleep_quality_slider: int = 1

    # Step 2
    energy_graph_points: List[EnergyGraphPoint] = field(default_factory=list)

    # Step 3 (None = not answered yet)
    has_excessive_fatigue: Optional[bool] = None

    # Step 4 (fatigue branch)
    crash_time_of_day: str = ""
    crash_time: Optional[time] = None

    # Step 4 (no fatigue) / step 5 (fatigue)
    selected_symptoms: Set[str] = field(default_factory=set)

    # Step 5 (no fatigue)
    other_symptoms_description: str = ""

    # Step 6 (fatigue branch)
    crash_duration: str = ""
    crash_duration_number: int = 1
    crash_trigger: Set[str] = field(default_factory=set)
    selected_sub_triggers: Set[str] = field(default_factory=set)
    crash_trigger_description: str = ""

    # Pre-filled from the health store and shown on step 1; not submitted
    # except for the total duration
    sleep_duration: float = 0.0
    sleep_stages: Dict[str, float] = field(default_factory=dict)

    @property
    def crash_time_set(self) -> bool:
        return bool(self.crash_time_of_day) or self.crash_time is not None

    def set_answer(self, name: str, value: Any) -> None:
        """
        Validate and store one answer.

        Raises:
            AnswerError: Unknown field name or invalid value
        """
        setter = _SETTERS.get(name)
        if setter is None:
            raise AnswerError(f"Unknown questionnaire field: {name}")
        setter(self, value)

    def toggle_symptom(self, symptom: str) -> None:
        if symptom not in options.SYMPTOM_OPTIONS:
            raise AnswerError(f"Unknown symptom: {symptom}")
        if symptom in self.selected_symptoms:
            self.selected_symptoms.discard(symptom)
        else:
            self.selected_symptoms.add(symptom)

    def toggle_main_trigger(self, trigger: str) -> None:
        """Select or deselect a main trigger; deselecting drops its sub-triggers."""
        if trigger not in options.CRASH_TRIGGER_OPTIONS:
            raise AnswerError(f"Unknown crash trigger: {trigger}")
        if trigger in self.crash_trigger:
            self.crash_trigger.discard(trigger)
            self.selected_sub_triggers.difference_update(options.sub_triggers_for(trigger))
        else:
            self.crash_trigger.add(trigger)

    def toggle_sub_trigger(self, sub_trigger: str) -> None:
        parent = options.parent_trigger_of(sub_trigger)
        if parent is None:
            raise AnswerError(f"Unknown crash sub-trigger: {sub_trigger}")
        if parent not in self.crash_trigger:
            raise AnswerError(
                f"Sub-trigger '{sub_trigger}' requires main trigger '{parent}' to be selected"
            )
        if sub_trigger in self.selected_sub_triggers:
            self.selected_sub_triggers.discard(sub_trigger)
        else:
            self.selected_sub_triggers.add(sub_trigger)

    def apply_sleep_metrics(self, metrics: SleepMetrics) -> None:
        """Fold health-store sleep data into the answers."""
        self.sleep_duration = max(float(metrics.duration_hours), 0.0)
        self.sleep_stages = {stage: float(hours) for stage, hours in metrics.stages.items()}
        logger.debug(
            f"[ANSWERS] Sleep pre-fill applied: {self.sleep_duration:.1f}h, "
            f"stages={sorted(self.sleep_stages)}"
        )


def sleep_assessment(sleep_quality: int) -> str:
    """Short text assessment for a 1-10 sleep quality rating."""
    if sleep_quality < 4:
        return "Your sleep was insufficient; consider resting more."
    if sleep_quality >= 7:
        return "Great sleep; you should feel refreshed today."
    return "Your sleep was fair; monitor how you feel today."


# ============================================================================
# Field setters
# ============================================================================


def _int_in_range(name: str, value: Any, low: int, high: int) -> int:
    # bool is an int subclass but never a valid slider value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise AnswerError(f"{name} must be a number, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise AnswerError(f"{name} must be a whole number, got {value!r}")
    number = int(value)
    if not low <= number <= high:
        raise AnswerError(f"{name} must be between {low} and {high}, got {number}")
    return number


def _text(value: Any) -> str:
    text = "" if value is None else str(value)
    return text[:MAX_TEXT_LENGTH]


def _string_set(name: str, values: Iterable[str], allowed: Iterable[str]) -> Set[str]:
    if isinstance(values, str):
        raise AnswerError(f"{name} must be a collection of strings")
    allowed = set(allowed)
    result = set(values)
    unknown = result - allowed
    if unknown:
        raise AnswerError(f"Unknown {name} option(s): {sorted(unknown)}")
    return result


def _to_point(raw: Any) -> EnergyGraphPoint:
    if isinstance(raw, EnergyGraphPoint):
        point = raw
    else:
        try:
            time_index, percentage = raw
            point = EnergyGraphPoint(float(time_index), float(percentage))
        except (TypeError, ValueError):
            raise AnswerError(f"Energy graph point must be (time_index, percentage), got {raw!r}")
    if not (math.isfinite(point.time_index) and math.isfinite(point.percentage)):
        raise AnswerError(f"Energy graph point must be finite, got {point!r}")
    if point.time_index < 0:
        raise AnswerError(f"Energy graph time index must not be negative, got {point.time_index}")
    if not 0 <= point.percentage <= 100:
        raise AnswerError(f"Energy level must be between 0 and 100, got {point.percentage}")
    return point


def _set_refreshment_level(answers: AnswerSet, value: Any) -> None:
    answers.refreshment_level = _int_in_range("refreshment_level", value, 1, 10)


def _set_wake_up_hour(answers: AnswerSet, value: Any) -> None:
    answers.wake_up_hour = _int_in_range("wake_up_hour", value, 5, 23)


def _set_sleep_quality_slider(answers: AnswerSet, value: Any) -> None:
    answers.sleep_quality_slider = _int_in_range("sleep_quality_slider", value, 1, 10)


def _set_energy_graph_points(answers: AnswerSet, value: Any) -> None:
    answers.energy_graph_points = [_to_point(raw) for raw in (value or [])]


def _set_has_excessive_fatigue(answers: AnswerSet, value: Any) -> None:
    if value is not None and not isinstance(value, bool):
        raise AnswerError(f"has_excessive_fatigue must be True, False or None, got {value!r}")
    answers.has_excessive_fatigue = value


def _set_crash_time_of_day(answers: AnswerSet, value: Any) -> None:
    value = value or ""
    if value and value not in options.CRASH_TIME_OPTIONS:
        raise AnswerError(f"Unknown crash time of day: {value}")
    answers.crash_time_of_day = value


def _set_crash_time(answers: AnswerSet, value: Any) -> None:
    if value is not None and not isinstance(value, time):
        raise AnswerError(f"crash_time must be a datetime.time, got {value!r}")
    answers.crash_time = value


def _set_selected_symptoms(answers: AnswerSet, value: Any) -> None:
    answers.selected_symptoms = _string_set("symptom", value or (), options.SYMPTOM_OPTIONS)


def _set_other_symptoms_description(answers: AnswerSet, value: Any) -> None:
    answers.other_symptoms_description = _text(value)


def _set_crash_duration(answers: AnswerSet, value: Any) -> None:
    value = value or ""
    if value and value not in options.CRASH_DURATION_OPTIONS:
        raise AnswerError(f"Unknown crash duration: {value}")
    answers.crash_duration = value
    # A new unit may have a smaller maximum
    answers.crash_duration_number = min(
        answers.crash_duration_number, options.duration_max_value(value)
    )


def _set_crash_duration_number(answers: AnswerSet, value: Any) -> None:
    high = options.duration_max_value(answers.crash_duration)
    answers.crash_duration_number = _int_in_range("crash_duration_number", value, 1, high)


def _set_crash_trigger(answers: AnswerSet, value: Any) -> None:
    triggers = _string_set("crash trigger", value or (), options.MAIN_TRIGGERS)
    answers.crash_trigger = triggers
    allowed = {sub for main in triggers for sub in options.sub_triggers_for(main)}
    answers.selected_sub_triggers &= allowed


def _set_selected_sub_triggers(answers: AnswerSet, value: Any) -> None:
    allowed = [sub for main in answers.crash_trigger for sub in options.sub_triggers_for(main)]
    answers.selected_sub_triggers = _string_set("crash sub-trigger", value or (), allowed)


def _set_crash_trigger_description(answers: AnswerSet, value: Any) -> None:
    answers.crash_trigger_description = _text(value)


def _set_sleep_duration(answers: AnswerSet, value: Any) -> None:
    try:
        hours = float(value)
    except (TypeError, ValueError):
        raise AnswerError(f"sleep_duration must be a number of hours, got {value!r}")
    if hours < 0:
        raise AnswerError(f"sleep_duration must not be negative, got {hours}")
    answers.sleep_duration = hours


_SETTERS: Dict[str, Callable[[AnswerSet, Any], None]] = {
    "refreshment_level": _set_refreshment_level,
    "wake_up_hour": _set_wake_up_hour,
    "sleep_quality_slider": _set_sleep_quality_slider,
    "energy_graph_points": _set_energy_graph_points,
    "has_excessive_fatigue": _set_has_excessive_fatigue,
    "crash_time_of_day": _set_crash_time_of_day,
    "crash_time": _set_crash_time,
    "selected_symptoms": _set_selected_symptoms,
    "other_symptoms_description": _set_other_symptoms_description,
    "crash_duration": _set_crash_duration,
    "crash_duration_number": _set_crash_duration_number,
    "crash_trigger": _set_crash_trigger,
    "selected_sub_triggers": _set_selected_sub_triggers,
    "crash_trigger_description": _set_crash_trigger_description,
    "sleep_duration": _set_sleep_duration,
}

ANSWER_FIELDS = frozenset(_SETTERS)
