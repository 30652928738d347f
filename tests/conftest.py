"""Shared fixtures for canvas-bot tests."""

import os

os.environ.setdefault("CANVAS_API_KEY", "test-canvas-token")
os.environ.setdefault("BOT_TOKEN", "test-bot-token")

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from canvas_bot.config import Settings, get_settings
from canvas_bot.models import Assignment

NOW = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def settings():
    return Settings(
        canvas_api_key="test-canvas-token",
        bot_token="test-bot-token",
        telegram_chat_ids="111,222",
        _env_file=None,
    )


@pytest.fixture()
def now():
    return NOW


def make_response(status_code=200, json_data=None, reason="OK", text=""):
    """Build a fake requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = reason
    response.text = text
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


def make_assignment(assignment_id=1, due_in=None, submitted=False, now=NOW, **kwargs):
    """Assignment due `due_in` (a timedelta) after `now`; None for no due date."""
    return Assignment(
        id=assignment_id,
        name=kwargs.pop("name", f"Homework {assignment_id}"),
        due_at=now + due_in if due_in is not None else None,
        has_submitted_submissions=submitted,
        html_url=kwargs.pop(
            "html_url",
            f"https://canvas.instructure.com/courses/9/assignments/{assignment_id}",
        ),
    )


def hours(n):
    return timedelta(hours=n)
