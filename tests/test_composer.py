"""Tests for notify/composer.py and notify/formatters.py — reminder text."""

from unittest.mock import MagicMock

import requests

from canvas_bot.config import Settings
from canvas_bot.notify import (
    GroqTextGenerator,
    MessageFormatter,
    ReminderComposer,
    build_text_generator,
    identity_generator,
)
from canvas_bot.models import Course

from conftest import hours, make_assignment, make_response


def test_prompt_mentions_name_hours_and_rewritten_link(now):
    assignment = make_assignment(assignment_id=5, due_in=hours(5), name="Lab 4")

    prompt = MessageFormatter.format_reminder_prompt(assignment, now)

    assert "'Lab 4' is due in 5.0 hours" in prompt
    assert "https://csus.instructure.com/courses/9/assignments/5" in prompt
    assert "canvas.instructure.com" not in prompt


def test_hours_can_be_fractional_or_negative(now):
    assert MessageFormatter.hours_until_due(make_assignment(due_in=hours(1.5)), now) == 1.5
    assert MessageFormatter.hours_until_due(make_assignment(due_in=-hours(0.25)), now) == -0.25


def test_rewrite_link_replaces_first_occurrence_only():
    url = "https://canvas.example.edu/canvas/1"

    assert MessageFormatter.rewrite_link(url, "canvas", "csus") == "https://csus.example.edu/canvas/1"
    assert MessageFormatter.rewrite_link(url, "", "csus") == url


def test_score_change_message_uses_two_decimals():
    course = Course(id=1, name="Algorithms", course_code="CSC 130")

    assert MessageFormatter.format_score_change(course, 85.5) == (
        "Score change detected for Course: CSC 130. New score: 85.50"
    )


def test_identity_generator_echoes_prompt():
    assert identity_generator("do it") == "do it"


def test_composer_uses_injected_generator(now):
    generator = MagicMock(return_value="Go do your homework!")
    composer = ReminderComposer(text_generator=generator, clock=lambda: now)

    message = composer.compose(make_assignment(due_in=hours(3)))

    assert message == "Go do your homework!"
    prompt = generator.call_args.args[0]
    assert "due in 3.0 hours" in prompt


def test_composer_default_is_identity(now):
    composer = ReminderComposer(link_host_to="sac", clock=lambda: now)

    message = composer.compose(make_assignment(due_in=hours(1)))

    assert message.startswith("Create a motivating message")
    assert "https://sac.instructure.com" in message


def test_groq_generator_returns_model_text():
    session = MagicMock()
    session.post.return_value = make_response(json_data={
        "choices": [{"message": {"content": "  Only 3 hours left, start now!  "}}],
    })
    generator = GroqTextGenerator(api_key="gk", model="m", session=session)

    assert generator("prompt") == "Only 3 hours left, start now!"
    payload = session.post.call_args.kwargs["json"]
    assert payload["model"] == "m"
    assert payload["messages"] == [{"role": "user", "content": "prompt"}]
    headers = session.headers.update.call_args.args[0]
    assert headers["Authorization"] == "Bearer gk"


def test_groq_generator_falls_back_to_prompt_on_http_error():
    session = MagicMock()
    response = make_response(status_code=500)
    response.raise_for_status.side_effect = requests.exceptions.HTTPError("500")
    session.post.return_value = response
    generator = GroqTextGenerator(api_key="gk", session=session)

    assert generator("prompt") == "prompt"


def test_groq_generator_falls_back_on_unexpected_body():
    session = MagicMock()
    session.post.return_value = make_response(json_data={"choices": []})
    generator = GroqTextGenerator(api_key="gk", session=session)

    assert generator("prompt") == "prompt"


def test_build_text_generator_without_key_is_identity(settings):
    assert build_text_generator(settings) is identity_generator


def test_build_text_generator_with_key_uses_groq():
    s = Settings(canvas_api_key="k", bot_token="b", groq_api_key="gk", _env_file=None)

    generator = build_text_generator(s)

    assert isinstance(generator, GroqTextGenerator)
    assert generator.model == s.groq_model


def test_default_clock_is_aware():
    composer = ReminderComposer()

    assert composer.clock().tzinfo is not None
