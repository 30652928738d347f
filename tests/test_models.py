"""Tests for models.py — decoding Canvas records."""

from datetime import datetime, timezone

from canvas_bot.models import Assignment, Course

from conftest import hours, make_assignment


def test_assignment_from_canvas_json():
    a = Assignment.model_validate({
        "id": 42,
        "name": "Lab 3",
        "due_at": "2026-03-12T06:59:59Z",
        "has_submitted_submissions": False,
        "html_url": "https://canvas.instructure.com/courses/1/assignments/42",
        "points_possible": 10,
    })

    assert a.id == 42
    assert a.due_at == datetime(2026, 3, 12, 6, 59, 59, tzinfo=timezone.utc)
    assert a.has_submitted_submissions is False


def test_assignment_without_due_date():
    a = Assignment.model_validate({"id": 1, "name": "Reading", "due_at": None})

    assert a.due_at is None
    assert a.time_until_due(datetime.now(timezone.utc)) is None
    assert not a.is_due_within(hours(48), datetime.now(timezone.utc))


def test_is_due_within_window(now):
    assert make_assignment(due_in=hours(47)).is_due_within(hours(48), now)
    assert make_assignment(due_in=hours(48)).is_due_within(hours(48), now)
    assert not make_assignment(due_in=hours(49)).is_due_within(hours(48), now)
    assert not make_assignment(due_in=-hours(1)).is_due_within(hours(48), now)


def test_course_with_enrollment_scores():
    c = Course.model_validate({
        "id": 7,
        "name": "Operating Systems",
        "course_code": "CSC 139",
        "enrollments": [
            {"type": "student", "computed_current_score": 88.25, "computed_current_grade": "B+"},
            {"type": "student", "computed_current_score": None},
        ],
    })

    assert c.display_name == "CSC 139: Operating Systems"
    assert c.enrollments[0].current_score == 88.25
    assert c.enrollments[1].current_score == 0.0


def test_course_without_enrollments():
    c = Course.model_validate({"id": 7, "name": "Sandbox"})

    assert c.enrollments == []
    assert c.display_name == "Sandbox"


def test_due_at_without_offset_is_read_as_utc(now):
    a = Assignment.model_validate({"id": 3, "name": "Lab", "due_at": "2026-03-10T12:00:00"})

    assert a.due_at == datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
    assert a.time_until_due(now) == hours(3)
    assert a.is_due_within(hours(48), now)
