"""
Main orchestrator for Canvas Notifier Bot.

Coordinates the long-running monitoring workflow:
1. Announce startup on Telegram
2. Resolve the favorited course ids
3. Per course: check assignments now and every day at the run hour,
   scheduling deadline reminders
4. Every hour: check course scores and report changes

All recurring work runs as APScheduler jobs on a background thread pool.
"""

import logging
import sys
import threading
from datetime import datetime, timedelta, tzinfo
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from tzlocal import get_localzone

from canvas_bot.canvas import CanvasClient, CanvasDecodeError, CanvasFetchError
from canvas_bot.config import ConfigurationError, Settings, get_settings, setup_logging
from canvas_bot.notify import MessageFormatter, ReminderComposer, TelegramNotifier
from canvas_bot.reminders import ReminderScheduler
from canvas_bot.tracking import ReminderTracker, ScoreTracker

logger = logging.getLogger(__name__)

GRADES_JOB_ID = "grades"


def daily_trigger(hour: int, tz: tzinfo) -> CronTrigger:
    """Fires every day at `hour`:00 in `tz`."""
    return CronTrigger(hour=hour, minute=0, second=0, timezone=tz)


def next_daily_run(now: datetime, hour: int = 8) -> datetime:
    """
    Next firing of the daily trigger at or after `now` (timezone-aware).

    Today if `hour`:00 is still ahead, otherwise tomorrow.
    """
    return daily_trigger(hour, now.tzinfo).get_next_fire_time(None, now)


def build_scheduler(tz: tzinfo) -> BackgroundScheduler:
    """Background scheduler whose late jobs run once instead of being dropped."""
    return BackgroundScheduler(
        timezone=tz,
        job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": None},
    )


class CanvasMonitor:
    """
    Main orchestrator for Canvas monitoring.

    Owns the trackers, the HTTP clients and the job scheduler. Registers
    one daily assignment job per course plus one grade job.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[CanvasClient] = None,
        notifier: Optional[TelegramNotifier] = None,
        composer: Optional[ReminderComposer] = None,
        reminder_tracker: Optional[ReminderTracker] = None,
        score_tracker: Optional[ScoreTracker] = None,
        reminders: Optional[ReminderScheduler] = None,
        scheduler: Optional[BaseScheduler] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the monitor with all components."""
        self.settings = settings or get_settings()
        self.timezone = (
            ZoneInfo(self.settings.timezone) if self.settings.timezone else get_localzone()
        )
        self.clock = clock or (lambda: datetime.now(self.timezone))

        self.client = client or CanvasClient(settings=self.settings)
        self.notifier = notifier or TelegramNotifier(settings=self.settings)
        self.composer = composer or ReminderComposer.from_settings(self.settings)
        self.formatter = MessageFormatter()

        self.scheduler = scheduler or build_scheduler(self.timezone)
        self.reminder_tracker = reminder_tracker or ReminderTracker()
        self.score_tracker = score_tracker or ScoreTracker()
        self.reminders = reminders or ReminderScheduler(
            tracker=self.reminder_tracker,
            composer=self.composer,
            notifier=self.notifier,
            scheduler=self.scheduler,
            window=timedelta(hours=self.settings.reminder_window_hours),
            clock=self.clock,
        )

    def check_assignments(self, course_id: int) -> bool:
        """
        Fetch one course's assignments and schedule any reminders due.

        Never raises: a failed check is logged and the next daily run
        tries again.

        Returns:
            bool: True if the check completed
        """
        try:
            assignments = self.client.fetch_assignments(course_id)
            self.reminder_tracker.prune(
                self.clock(), timedelta(hours=self.settings.tracker_grace_hours)
            )
            scheduled = self.reminders.evaluate(assignments)
        except (CanvasFetchError, CanvasDecodeError) as e:
            logger.error(f"Error fetching assignments for course {course_id}: {e}")
            return False
        except Exception:
            logger.exception(f"Assignment check failed for course {course_id}")
            return False

        logger.info(
            f"Course {course_id}: {len(assignments)} assignments, "
            f"{len(scheduled)} reminders scheduled"
        )
        return True

    def check_grades(self) -> int:
        """
        Compare every course's current score with the last one seen.

        Returns:
            int: Number of score change notifications sent

        Raises:
            CanvasFetchError: If the courses request fails
            CanvasDecodeError: If the courses response is malformed
        """
        courses = self.client.fetch_courses()
        changes = 0

        for course in courses:
            for enrollment in course.enrollments:
                score = enrollment.current_score
                previous = self.score_tracker.observe(course.id, score)
                if previous is not None:
                    logger.info(f"Course {course.id} score has changed: {previous} -> {score}")
                    self.notifier.send_message(self.formatter.format_score_change(course, score))
                    changes += 1
                logger.info(f"Course {course.id}: {course.name} - Score: {score}")

        return changes

    def run_grade_check(self) -> bool:
        """Grade job body: one check, failures logged until the next interval."""
        try:
            self.check_grades()
        except (CanvasFetchError, CanvasDecodeError) as e:
            logger.error(f"Error fetching courses: {e}")
            return False
        except Exception:
            logger.exception("Grade check failed")
            return False
        return True

    def schedule_jobs(self, course_ids: List[int]) -> None:
        """Register the grade job and one daily assignment job per course."""
        now = self.clock()

        self.scheduler.add_job(
            self.run_grade_check,
            IntervalTrigger(seconds=self.settings.grade_check_interval, timezone=self.timezone),
            id=GRADES_JOB_ID,
            next_run_time=now,
        )

        for course_id in course_ids:
            # First run immediately, then daily at the run hour.
            self.scheduler.add_job(
                self.check_assignments,
                daily_trigger(self.settings.daily_run_hour, self.timezone),
                args=[course_id],
                id=f"assignments_{course_id}",
                next_run_time=now,
            )

        next_run = next_daily_run(now, self.settings.daily_run_hour)
        logger.info(
            f"Next daily assignment run scheduled for: "
            f"{self.formatter.format_datetime(next_run)}"
        )

    def start(self) -> List[int]:
        """
        Announce startup, register all jobs and start the scheduler.

        Returns:
            List[int]: Course ids that got an assignment job

        Raises:
            CanvasFetchError: If the favorited courses cannot be fetched
            CanvasDecodeError: If the favorites response is malformed
        """
        logger.info("=" * 50)
        logger.info("Starting Canvas Notifier Bot")
        logger.info("=" * 50)

        self.notifier.send_message(self.formatter.format_startup())

        course_ids = self.client.fetch_course_ids()

        self.schedule_jobs(course_ids)
        self.scheduler.start()

        logger.info(f"Monitoring {len(course_ids)} courses")
        return course_ids

    def wait_forever(self) -> None:
        """Block the calling thread; the jobs never finish on their own."""
        threading.Event().wait()

    def shutdown(self) -> None:
        """Stop the scheduler without waiting for running jobs."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)


def main() -> int:
    """
    Entry point for the Canvas Notifier Bot.

    Returns:
        int: Exit code (0 for clean shutdown, 1 for failure)
    """
    try:
        # Validate configuration early
        settings = get_settings()
    except ConfigurationError as e:
        setup_logging()
        print(f"Configuration error: {e}", file=sys.stderr)
        print("Please check your environment variables.", file=sys.stderr)
        return 1

    setup_logging(settings)
    logger.debug(f"Loaded configuration for {settings.canvas_base_url}")

    monitor = CanvasMonitor(settings)
    try:
        monitor.start()
    except (CanvasFetchError, CanvasDecodeError) as e:
        logger.error(f"Error fetching course IDs: {e}")
        return 1

    try:
        monitor.wait_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        monitor.shutdown()

    return 0


if __name__ == "__main__":
    sys.exit(main())
