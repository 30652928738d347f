"""
Message formatters for Telegram notifications.

Formats Canvas data into plain-text messages and language-model prompts.
"""

from datetime import datetime
from typing import Optional

from canvas_bot.models import Assignment, Course


class MessageFormatter:
    """
    Formats notification content for Telegram messages.

    Messages are sent without a parse mode, so no markup is used.
    """

    STARTUP_MESSAGE = "Server Updated"

    @staticmethod
    def format_datetime(dt: Optional[datetime]) -> str:
        """Format datetime for display."""
        if dt is None:
            return "Not specified"
        return dt.strftime("%a, %d %b %Y %H:%M:%S %Z")

    @staticmethod
    def rewrite_link(url: str, old_host: str, new_host: str) -> str:
        """
        Rewrite the first occurrence of `old_host` in a link.

        Purely cosmetic: points links at the institution's Canvas host
        instead of the shared instructure domain.
        """
        if not old_host:
            return url
        return url.replace(old_host, new_host, 1)

    @staticmethod
    def hours_until_due(assignment: Assignment, now: datetime) -> float:
        """Fractional hours left; negative once the deadline has passed."""
        remaining = assignment.time_until_due(now)
        if remaining is None:
            return 0.0
        return remaining.total_seconds() / 3600

    @classmethod
    def format_reminder_prompt(
        cls,
        assignment: Assignment,
        now: datetime,
        link_host_from: str = "canvas",
        link_host_to: str = "csus",
    ) -> str:
        """
        Build the urgency prompt for an assignment reminder.

        Args:
            assignment: The assignment that is coming due
            now: Current time, used for the hours-remaining figure
            link_host_from: Link substring to rewrite
            link_host_to: Replacement substring

        Returns:
            str: Prompt text
        """
        hours = cls.hours_until_due(assignment, now)
        link = cls.rewrite_link(assignment.html_url, link_host_from, link_host_to)
        return (
            "Create a motivating message that will get the user to do his homework, "
            "the close it is to the due date, the more urgent the message should be ."
            f"The assignment '{assignment.name}' is due in {hours:.1f} hours. "
            f"Here is the link to the assignment: {link}"
        )

    @classmethod
    def format_reminder_log(cls, assignment: Assignment) -> str:
        """One-line description of a firing reminder, for the logs."""
        return (
            f"Reminder: The assignment '{assignment.name}' is due at "
            f"{cls.format_datetime(assignment.due_at)}."
        )

    @classmethod
    def format_score_change(cls, course: Course, score: float) -> str:
        """
        Format a grade change notification.

        Args:
            course: Course whose score changed
            score: New current score

        Returns:
            str: Formatted message string
        """
        return (
            f"Score change detected for Course: {course.course_code}. "
            f"New score: {score:.2f}"
        )

    @classmethod
    def format_startup(cls) -> str:
        """Notice sent once when the process starts."""
        return cls.STARTUP_MESSAGE
