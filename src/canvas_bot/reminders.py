"""
Assignment reminder scheduling.

For each assignment due soon and not yet submitted, registers one
one-shot APScheduler job per lead time (12h, 6h, 3h and 1h before the
deadline). Each job composes the reminder text when it fires and sends
it to Telegram.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional, Tuple

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.date import DateTrigger

from canvas_bot.models import Assignment
from canvas_bot.notify.composer import ReminderComposer
from canvas_bot.notify.formatters import MessageFormatter
from canvas_bot.notify.telegram import TelegramNotifier
from canvas_bot.tracking import ReminderTracker

logger = logging.getLogger(__name__)

REMINDER_LEADS: Tuple[timedelta, ...] = (
    timedelta(hours=12),
    timedelta(hours=6),
    timedelta(hours=3),
    timedelta(hours=1),
)

DEFAULT_WINDOW = timedelta(hours=48)


def reminder_job_id(assignment_id: int, lead: timedelta) -> str:
    return f"reminder_{assignment_id}_{int(lead.total_seconds() // 3600)}h"


class ReminderScheduler:
    """
    Decides which reminders an assignment needs and schedules them.

    Scheduling state lives in the injected ReminderTracker, so the same
    assignment can be evaluated any number of times without duplicate
    reminders.
    """

    def __init__(
        self,
        tracker: ReminderTracker,
        composer: ReminderComposer,
        notifier: TelegramNotifier,
        scheduler: BaseScheduler,
        window: timedelta = DEFAULT_WINDOW,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.tracker = tracker
        self.composer = composer
        self.notifier = notifier
        self.scheduler = scheduler
        self.window = window
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def evaluate(self, assignments: Iterable[Assignment]) -> List[Tuple[Assignment, timedelta]]:
        """
        Schedule reminders for every qualifying assignment.

        Args:
            assignments: Assignments from one course fetch

        Returns:
            List of (assignment, lead time) pairs scheduled by this call
        """
        now = self.clock()
        scheduled: List[Tuple[Assignment, timedelta]] = []

        for assignment in assignments:
            if not assignment.is_due_within(self.window, now):
                continue
            if assignment.has_submitted_submissions:
                logger.info(f"Assignment '{assignment.name}' is already submitted.")
                continue
            scheduled.extend(self.schedule(assignment, now))

        return scheduled

    def schedule(self, assignment: Assignment, now: datetime) -> List[Tuple[Assignment, timedelta]]:
        """Register jobs for the lead times of `assignment` that are still ahead."""
        scheduled: List[Tuple[Assignment, timedelta]] = []
        if assignment.due_at is None:
            return scheduled

        for lead in REMINDER_LEADS:
            fire_at = assignment.due_at - lead
            if now > fire_at:
                continue
            if not self.tracker.claim(assignment.id, lead, assignment.due_at):
                continue

            logger.info(
                f"Reminder for '{assignment.name}' scheduled at "
                f"{MessageFormatter.format_datetime(fire_at)}"
            )
            # One-shot: APScheduler drops the job after it runs.
            self.scheduler.add_job(
                self.fire,
                DateTrigger(run_date=fire_at),
                args=[assignment, lead],
                id=reminder_job_id(assignment.id, lead),
                misfire_grace_time=None,
                replace_existing=True,
            )
            scheduled.append((assignment, lead))

        return scheduled

    def fire(self, assignment: Assignment, lead: timedelta) -> None:
        """Compose and send one reminder, then mark it sent."""
        logger.info(MessageFormatter.format_reminder_log(assignment))
        try:
            message = self.composer.compose(assignment)
            self.notifier.send_message(message)
        except Exception as e:
            logger.error(f"Error sending reminder for '{assignment.name}': {e}", exc_info=True)
        self.tracker.mark_sent(assignment.id, lead)
