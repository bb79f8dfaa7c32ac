"""
Daily submission status tracking.

Remembers when each user last submitted so the client can show the
"already done today" state instead of a fresh questionnaire.
"""

import logging
import threading
from datetime import date, datetime, timezone
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class SubmissionStatusTracker:
    """Thread-safe record of the last successful submission per user."""

    def __init__(self):
        self._last_submission: Dict[str, datetime] = {}
        self._lock = threading.Lock()

    def mark_submitted(self, user_id: str, when: Optional[datetime] = None) -> None:
        """Record a successful submission (defaults to now, UTC)."""
        when = when or datetime.now(timezone.utc)
        with self._lock:
            self._last_submission[user_id] = when
        logger.info(f"[STATUS] {user_id} submitted at {when.isoformat()}")

    def last_submission(self, user_id: str) -> Optional[datetime]:
        with self._lock:
            return self._last_submission.get(user_id)

    def has_submitted_today(self, user_id: str, today: Optional[date] = None) -> bool:
        """
        Check whether the user already submitted on the given day.

        Args:
            user_id: User to check
            today: Calendar day to compare against (defaults to the local date)
        """
        last = self.last_submission(user_id)
        if last is None:
            return False
        today = today or date.today()
        # Compare in local time, which is the user's notion of "today"
        return last.astimezone().date() == today

    def reset(self, user_id: Optional[str] = None) -> None:
        """Forget one user's status, or everyone's."""
        with self._lock:
            if user_id is None:
                self._last_submission.clear()
            else:
                self._last_submission.pop(user_id, None)
