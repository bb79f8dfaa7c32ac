"""
Questionnaire Flow Engine.

Decides which step comes next given the answers so far and whether the user
may move forward. The step table branches on the fatigue screening answer:

    fatigue = yes:  1 sleep, 2 energy, 3 fatigue, 4 crash time,
                    5 crash symptoms, 6 crash details
    fatigue = no:   1 sleep, 2 energy, 3 fatigue, 4 symptom checklist,
                    5 other symptoms

describe_step() and can_advance() are pure functions of (step, answers);
QuestionnaireFlow holds the mutable position and delegates to them.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from . import options
from .answers import AnswerSet, sleep_assessment
from .errors import StateError

logger = logging.getLogger(__name__)

STEPS_WITH_FATIGUE = 6
STEPS_WITHOUT_FATIGUE = 5


class StepKind(str, Enum):
    """Content shown on a questionnaire step."""

    NOT_STARTED = "not_started"
    SLEEP_AND_REFRESHMENT = "sleep_and_refreshment"
    ENERGY_GRAPH = "energy_graph"
    FATIGUE_SCREENING = "fatigue_screening"
    CRASH_TIME = "crash_time"
    SYMPTOM_CHECKLIST = "symptom_checklist"
    CRASH_SYMPTOMS = "crash_symptoms"
    OTHER_SYMPTOMS = "other_symptoms"
    CRASH_DETAILS = "crash_details"


@dataclass(frozen=True)
class StepDescriptor:
    """What a step asks for, independent of how it is rendered."""

    step: int
    kind: StepKind
    title: str
    fields: Tuple[str, ...] = ()
    choices: Tuple[str, ...] = ()
    is_final: bool = False
    hint: str = ""


_STEP_TITLES = {
    StepKind.NOT_STARTED: "Willkommen",
    StepKind.SLEEP_AND_REFRESHMENT: "Wie erholt fühlen Sie sich heute?",
    StepKind.ENERGY_GRAPH: "Zeichnen Sie Ihren Energieverlauf für heute",
    StepKind.FATIGUE_SCREENING: "Hatten Sie heute eine übermäßige Erschöpfung (Crash)?",
    StepKind.CRASH_TIME: "Wann hat der Crash begonnen?",
    StepKind.SYMPTOM_CHECKLIST: "Bitte markieren Sie die heute vorliegenden Symptome",
    StepKind.CRASH_SYMPTOMS: "Bitte markieren Sie die heute vorliegenden Symptome",
    StepKind.OTHER_SYMPTOMS: (
        "Falls andere Symptome aufgetreten sind, beschreiben Sie diese bitte kurz "
        "(Schweregrad, Dauer etc.)"
    ),
    StepKind.CRASH_DETAILS: "Wie lange dauerte der Crash und was hat ihn ausgelöst?",
}

_STEP_FIELDS = {
    StepKind.SLEEP_AND_REFRESHMENT: ("refreshment_level", "wake_up_hour", "sleep_quality_slider"),
    StepKind.ENERGY_GRAPH: ("energy_graph_points",),
    StepKind.FATIGUE_SCREENING: ("has_excessive_fatigue",),
    StepKind.CRASH_TIME: ("crash_time_of_day", "crash_time"),
    StepKind.SYMPTOM_CHECKLIST: ("selected_symptoms",),
    StepKind.CRASH_SYMPTOMS: ("selected_symptoms",),
    StepKind.OTHER_SYMPTOMS: ("other_symptoms_description",),
    StepKind.CRASH_DETAILS: (
        "crash_duration",
        "crash_duration_number",
        "crash_trigger",
        "selected_sub_triggers",
        "crash_trigger_description",
    ),
}

_STEP_CHOICES = {
    StepKind.CRASH_TIME: tuple(options.CRASH_TIME_OPTIONS),
    StepKind.SYMPTOM_CHECKLIST: tuple(options.SYMPTOM_OPTIONS),
    StepKind.CRASH_SYMPTOMS: tuple(options.SYMPTOM_OPTIONS),
    StepKind.CRASH_DETAILS: tuple(options.CRASH_DURATION_OPTIONS),
}


def total_steps(has_excessive_fatigue: Optional[bool]) -> int:
    """Number of steps; an unanswered fatigue question assumes the longer branch."""
    if has_excessive_fatigue is False:
        return STEPS_WITHOUT_FATIGUE
    return STEPS_WITH_FATIGUE


def step_kind(step: int, has_excessive_fatigue: Optional[bool]) -> Optional[StepKind]:
    """Kind of the given step on the current branch, or None if out of range."""
    if step == 0:
        return StepKind.NOT_STARTED
    if step == 1:
        return StepKind.SLEEP_AND_REFRESHMENT
    if step == 2:
        return StepKind.ENERGY_GRAPH
    if step == 3:
        return StepKind.FATIGUE_SCREENING
    if step == 4:
        if has_excessive_fatigue is True:
            return StepKind.CRASH_TIME
        return StepKind.SYMPTOM_CHECKLIST
    if step == 5:
        if has_excessive_fatigue is True:
            return StepKind.CRASH_SYMPTOMS
        return StepKind.OTHER_SYMPTOMS
    if step == 6 and has_excessive_fatigue is not False:
        return StepKind.CRASH_DETAILS
    return None


def describe_step(step: int, answers: AnswerSet) -> StepDescriptor:
    """
    Describe the content of a step for the current answers.

    Raises:
        ValueError: Step is outside the current branch
    """
    fatigue = answers.has_excessive_fatigue
    kind = step_kind(step, fatigue)
    if kind is None:
        raise ValueError(f"Step {step} does not exist (total steps: {total_steps(fatigue)})")

    choices = _STEP_CHOICES.get(kind, ())
    if kind == StepKind.FATIGUE_SCREENING:
        choices = ("Ja", "Nein")

    return StepDescriptor(
        step=step,
        kind=kind,
        title=_STEP_TITLES[kind],
        fields=_STEP_FIELDS.get(kind, ()),
        choices=choices,
        is_final=step == total_steps(fatigue),
        hint=_step_hint(kind, answers),
    )


def _step_hint(kind: StepKind, answers: AnswerSet) -> str:
    """Feedback line under the step; only the sleep step has one."""
    if kind != StepKind.SLEEP_AND_REFRESHMENT:
        return ""
    hint = sleep_assessment(answers.sleep_quality_slider)
    if answers.sleep_duration > 0:
        stages = ", ".join(
            f"{stage} {hours:.1f}h" for stage, hours in sorted(answers.sleep_stages.items())
        )
        hint += f" Recorded sleep: {answers.sleep_duration:.1f}h"
        hint += f" ({stages})." if stages else "."
    return hint


def can_advance(step: int, answers: AnswerSet, submitting: bool = False) -> bool:
    """Whether the affirmative action on `step` is enabled."""
    fatigue = answers.has_excessive_fatigue

    # Steps after the screening depend on its answer
    if step >= 4 and fatigue is None:
        return False

    if step == 1:
        return True
    if step == 2:
        return bool(answers.energy_graph_points)
    if step == 3:
        return fatigue is not None
    if step == 4:
        if fatigue is True:
            return answers.crash_time_set
        return True
    if step == 5:
        if fatigue is True:
            return bool(answers.selected_symptoms)
        return True
    if step == 6:
        # Only exists on the crash branch
        return fatigue is True and bool(answers.crash_duration) and not submitting
    return False


class QuestionnaireFlow:
    """
    Step position and answers of one questionnaire run.

    Not thread-safe: callers confine a flow to a single task.
    """

    def __init__(self, answers: Optional[AnswerSet] = None):
        self.answers = answers or AnswerSet()
        self.current_step = 0
        self.completed = False

    @property
    def total_steps(self) -> int:
        return total_steps(self.answers.has_excessive_fatigue)

    @property
    def started(self) -> bool:
        return self.current_step > 0

    @property
    def is_final_step(self) -> bool:
        return self.started and self.current_step == self.total_steps

    @property
    def progress(self) -> float:
        """Fraction of steps reached, 0.0-1.0."""
        return self.current_step / self.total_steps

    def describe(self) -> StepDescriptor:
        return describe_step(self.current_step, self.answers)

    def can_advance(self, submitting: bool = False) -> bool:
        return can_advance(self.current_step, self.answers, submitting)

    def start(self) -> None:
        if self.current_step == 0:
            self.current_step = 1
            logger.debug("[FLOW] Questionnaire started")

    def advance(self, submitting: bool = False) -> bool:
        """
        Move to the next step if the current one is complete.

        Returns:
            True if the step changed. Blocked steps and the final step are
            no-ops; completing the final step is done by submitting.
        """
        if not self.started or self.completed:
            return False
        if not self.can_advance(submitting):
            logger.debug(f"[FLOW] Step {self.current_step} incomplete, staying")
            return False
        if self.current_step >= self.total_steps:
            return False
        self.current_step += 1
        logger.debug(f"[FLOW] Advanced to step {self.current_step}/{self.total_steps}")
        return True

    def back(self) -> bool:
        """Move one step back, never below step 1."""
        if self.completed or self.current_step <= 1:
            return False
        self.current_step -= 1
        logger.debug(f"[FLOW] Back to step {self.current_step}/{self.total_steps}")
        return True

    def set_answer(self, name: str, value: Any) -> None:
        self._ensure_mutable()
        self.answers.set_answer(name, value)
        if name == "has_excessive_fatigue":
            self._clamp_step()

    def toggle_symptom(self, symptom: str) -> None:
        self._ensure_mutable()
        self.answers.toggle_symptom(symptom)

    def toggle_main_trigger(self, trigger: str) -> None:
        self._ensure_mutable()
        self.answers.toggle_main_trigger(trigger)

    def toggle_sub_trigger(self, sub_trigger: str) -> None:
        self._ensure_mutable()
        self.answers.toggle_sub_trigger(sub_trigger)

    def mark_completed(self) -> None:
        self.completed = True

    def reset(self) -> None:
        self.answers = AnswerSet()
        self.current_step = 0
        self.completed = False

    def _clamp_step(self) -> None:
        if self.current_step > self.total_steps:
            logger.debug(
                f"[FLOW] Branch changed, clamping step {self.current_step} to {self.total_steps}"
            )
            self.current_step = self.total_steps

    def _ensure_mutable(self) -> None:
        if self.completed:
            raise StateError("Questionnaire already submitted; retake to change answers")
