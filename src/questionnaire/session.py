"""
Questionnaire session.

Binds one user's flow to its collaborators (transport, status tracker,
clock) and owns the asynchronous submission:

- Only one submission may be in flight; a second submit() is rejected
- Failure leaves the session on the final step with last_error set
- Every attempt is tagged with the session generation; retake() starts a new
  generation, so a late result from an abandoned attempt is discarded

A session must be driven from a single asyncio task.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from .answers import AnswerSet, SleepMetrics
from .errors import DuplicateSubmissionError, QuestionnaireError, StateError, TransportError
from .flow import QuestionnaireFlow, StepDescriptor
from .normalizer import SubmissionRecord, normalize_submission
from .status import SubmissionStatusTracker
from .transport import SubmissionTransport

logger = logging.getLogger(__name__)


class QuestionnaireSession:
    """One user's in-progress or completed daily questionnaire."""

    def __init__(
        self,
        user_id: str,
        transport: SubmissionTransport,
        tracker: Optional[SubmissionStatusTracker] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Create a session.

        Args:
            user_id: Identifier sent with the submission
            transport: Delivers the finished record to storage
            tracker: Optional daily status tracker, marked on success
            clock: Returns the submission instant (defaults to UTC now)
        """
        self.user_id = user_id
        self.transport = transport
        self.tracker = tracker
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self.flow = QuestionnaireFlow()
        self.generation = 0
        self.submitting = False
        self.last_error: Optional[str] = None
        self.record: Optional[SubmissionRecord] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def answers(self) -> AnswerSet:
        return self.flow.answers

    @property
    def current_step(self) -> int:
        return self.flow.current_step

    @property
    def total_steps(self) -> int:
        return self.flow.total_steps

    @property
    def completed(self) -> bool:
        return self.flow.completed

    @property
    def can_advance(self) -> bool:
        return self.flow.can_advance(self.submitting)

    @property
    def already_submitted_today(self) -> bool:
        if self.tracker is None:
            return False
        return self.tracker.has_submitted_today(self.user_id)

    def describe(self) -> StepDescriptor:
        return self.flow.describe()

    # ------------------------------------------------------------------
    # User events
    # ------------------------------------------------------------------

    def start(self) -> None:
        self.flow.start()

    def set_answer(self, name: str, value: Any) -> None:
        self.flow.set_answer(name, value)

    def toggle_symptom(self, symptom: str) -> None:
        self.flow.toggle_symptom(symptom)

    def toggle_main_trigger(self, trigger: str) -> None:
        self.flow.toggle_main_trigger(trigger)

    def toggle_sub_trigger(self, sub_trigger: str) -> None:
        self.flow.toggle_sub_trigger(sub_trigger)

    def apply_sleep_metrics(self, metrics: SleepMetrics) -> None:
        self.flow.answers.apply_sleep_metrics(metrics)

    def advance(self) -> bool:
        return self.flow.advance(self.submitting)

    def back(self) -> bool:
        if self.submitting:
            return False
        return self.flow.back()

    async def proceed(self) -> Optional[SubmissionRecord]:
        """
        The affirmative "next" action: advance, or submit on the final step.

        Returns:
            The submission record when this call completed the questionnaire
        """
        if self.submitting or not self.can_advance:
            return None
        if self.flow.is_final_step:
            return await self.submit()
        self.advance()
        return None

    async def submit(self) -> Optional[SubmissionRecord]:
        """
        Normalize the answers and deliver them.

        Returns:
            The delivered record, or None if the session was retaken while
            the delivery was in flight

        Raises:
            DuplicateSubmissionError: A submission is already in flight
            StateError: Not on the final step, or already completed
            ValidationError: A required answer is missing
            TransportError: Delivery failed; the user may retry
        """
        if self.submitting:
            logger.warning(f"[SUBMIT] Duplicate submit ignored for {self.user_id}")
            raise DuplicateSubmissionError("A submission is already in progress")
        if self.flow.completed:
            raise StateError("Questionnaire already submitted; retake to submit again")
        if not self.flow.is_final_step:
            raise StateError(
                f"Cannot submit from step {self.current_step}; "
                f"final step is {self.total_steps}"
            )

        generation = self.generation
        self.submitting = True
        self.last_error = None

        try:
            try:
                record = normalize_submission(self.answers, self.user_id, now=self._clock())
            except QuestionnaireError as e:
                self.last_error = str(e)
                logger.info(f"[SUBMIT] Rejected for {self.user_id}: {e}")
                raise

            logger.info(
                f"[SUBMIT] Delivering questionnaire for {self.user_id} (generation {generation})"
            )

            try:
                await self.transport.deliver(record)
            except TransportError as e:
                if generation != self.generation:
                    logger.info(f"[SUBMIT] Discarding failure of abandoned attempt: {e}")
                    return None
                self.last_error = str(e)
                logger.error(f"[SUBMIT] Delivery failed for {self.user_id}: {e}")
                raise
        finally:
            # A retake already cleared the flag for the new generation
            if generation == self.generation:
                self.submitting = False

        if generation != self.generation:
            logger.info(
                f"[SUBMIT] Session retaken during delivery, ignoring result of generation {generation}"
            )
            return None

        self.record = record
        self.flow.mark_completed()
        if self.tracker is not None:
            self.tracker.mark_submitted(self.user_id, record.timestamp)
        logger.info(f"[SUBMIT] Questionnaire submitted successfully for {self.user_id}")
        return record

    def retake(self) -> None:
        """Discard all answers and start over from the welcome screen."""
        self.generation += 1
        self.flow.reset()
        self.submitting = False
        self.last_error = None
        self.record = None
        logger.info(f"[SUBMIT] Questionnaire reset for {self.user_id} (generation {self.generation})")
