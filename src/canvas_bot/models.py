"""
Data models for Canvas Notifier Bot.

Defines Pydantic models for the Canvas REST API records we consume:
- Assignment
- Enrollment
- Course
"""

from datetime import datetime, timedelta
from typing import List, Optional

from dateutil.tz import UTC
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class Assignment(BaseModel):
    """
    Represents a Canvas assignment as returned by /courses/:id/assignments.

    Attributes:
        id: Canvas assignment identifier
        name: Assignment title
        due_at: When the assignment is due (None means no due date)
        has_submitted_submissions: Whether a submission exists
        html_url: Direct link to the assignment page
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    due_at: Optional[datetime] = None
    has_submitted_submissions: bool = False
    html_url: str = ""

    @field_validator("due_at")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Canvas timestamps are UTC; apply UTC when the offset is missing."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    def time_until_due(self, now: datetime) -> Optional[timedelta]:
        """Time left until the deadline, or None when there is no due date."""
        if self.due_at is None:
            return None
        return self.due_at - now

    def is_due_within(self, window: timedelta, now: datetime) -> bool:
        """Check if the deadline is still ahead and no further than `window`."""
        remaining = self.time_until_due(now)
        if remaining is None:
            return False
        return timedelta(0) < remaining <= window


class Enrollment(BaseModel):
    """
    An enrollment record attached to a course when total scores are requested.

    Canvas returns null scores for courses without graded work.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    computed_current_grade: Optional[str] = None
    computed_current_score: Optional[float] = None
    computed_current_letter_grade: Optional[str] = None
    computed_final_grade: Optional[str] = None
    computed_final_score: Optional[float] = None

    @property
    def current_score(self) -> float:
        """Current score with null read as zero."""
        return self.computed_current_score or 0.0


class Course(BaseModel):
    """
    Represents a favorited Canvas course.

    Attributes:
        id: Canvas course identifier
        name: Full course name
        course_code: Short course code (e.g., "CSC 131")
        enrollments: Enrollment records carrying score data
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str = ""
    course_code: str = ""
    enrollments: List[Enrollment] = Field(default_factory=list)

    @computed_field
    @property
    def display_name(self) -> str:
        """Formatted course name for display."""
        return f"{self.course_code}: {self.name}" if self.course_code else self.name
