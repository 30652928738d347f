"""
In-memory notification state.

Remembers, for the lifetime of the process, which assignment reminders
have been scheduled or sent and the last score seen for each course.
Nothing is persisted; a restart starts from empty state.
"""

import logging
import threading
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class ReminderState(str, Enum):
    """Lifecycle of one (assignment, lead time) reminder."""
    SCHEDULED = "scheduled"
    SENT = "sent"


class ReminderTracker:
    """
    Tracks reminder state per assignment and lead time.

    A pair is claimed when its timer is started and marked sent when the
    notification goes out. Claiming is an atomic check-and-set, so a pair
    can only ever be scheduled once even if evaluation passes overlap.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._reminders: Dict[int, Dict[timedelta, ReminderState]] = {}
        self._due_times: Dict[int, datetime] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._reminders)

    def claim(self, assignment_id: int, lead: timedelta, due_at: datetime) -> bool:
        """
        Reserve a reminder slot.

        Args:
            assignment_id: Canvas assignment identifier
            lead: Lead time before the deadline
            due_at: Deadline, remembered for eviction

        Returns:
            bool: True if the slot was free and is now scheduled
        """
        with self._lock:
            self._due_times[assignment_id] = due_at
            slots = self._reminders.setdefault(assignment_id, {})
            if lead in slots:
                return False
            slots[lead] = ReminderState.SCHEDULED
            return True

    def mark_sent(self, assignment_id: int, lead: timedelta) -> None:
        with self._lock:
            self._reminders.setdefault(assignment_id, {})[lead] = ReminderState.SENT

    def is_claimed(self, assignment_id: int, lead: timedelta) -> bool:
        with self._lock:
            return lead in self._reminders.get(assignment_id, {})

    def is_sent(self, assignment_id: int, lead: timedelta) -> bool:
        with self._lock:
            return self._reminders.get(assignment_id, {}).get(lead) is ReminderState.SENT

    def prune(self, now: datetime, grace: timedelta) -> int:
        """
        Forget assignments whose deadline passed more than `grace` ago.

        Returns:
            int: Number of assignments removed
        """
        with self._lock:
            expired = [
                assignment_id
                for assignment_id, due_at in self._due_times.items()
                if due_at + grace < now
            ]
            for assignment_id in expired:
                del self._due_times[assignment_id]
                self._reminders.pop(assignment_id, None)

        if expired:
            logger.info(f"Pruned reminder state for {len(expired)} past assignments")
        return len(expired)


class ScoreTracker:
    """
    Last observed current score per course.

    The baseline for an unseen course is 0.0, so the first real score
    observed for a course is reported as a change.
    """

    DEFAULT_SCORE = 0.0

    def __init__(self):
        self._lock = threading.Lock()
        self._scores: Dict[int, float] = {}

    def get(self, course_id: int) -> float:
        with self._lock:
            return self._scores.get(course_id, self.DEFAULT_SCORE)

    def observe(self, course_id: int, score: float) -> Optional[float]:
        """
        Record a score and report whether it changed.

        Returns:
            The previous score if `score` differs from it, else None
        """
        with self._lock:
            previous = self._scores.get(course_id, self.DEFAULT_SCORE)
            if previous == score:
                return None
            self._scores[course_id] = score
            return previous
