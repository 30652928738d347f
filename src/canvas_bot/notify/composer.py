"""
Reminder message composition.

Builds the urgency prompt for an assignment and passes it through a
pluggable text-generation capability. The capability is any callable
taking prompt text and returning message text; the default echoes the
prompt unchanged. When a Groq API key is configured, the prompt is
rephrased by Groq's OpenAI-compatible chat completions endpoint.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

import requests

from canvas_bot.config import Settings, get_settings
from canvas_bot.models import Assignment
from canvas_bot.notify.formatters import MessageFormatter

logger = logging.getLogger(__name__)

GROQ_CHAT_URL = "https://api.groq.com/openai/v1/chat/completions"

TextGenerator = Callable[[str], str]


def identity_generator(prompt: str) -> str:
    """Return the prompt unchanged."""
    return prompt


class GroqTextGenerator:
    """
    Rephrases prompts with a Groq-hosted chat model.

    Best effort: any failure is logged and the prompt itself is returned,
    so a reminder is never lost because the model was unavailable.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "llama-3.1-8b-instant",
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    def __call__(self, prompt: str) -> str:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.7,
            "max_tokens": 300,
        }

        try:
            response = self.session.post(GROQ_CHAT_URL, json=payload, timeout=self.timeout)
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except requests.exceptions.RequestException as e:
            logger.error(f"Groq request failed, sending prompt as-is: {e}")
            return prompt
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected Groq response, sending prompt as-is: {e}")
            return prompt

        content = (content or "").strip()
        return content or prompt


def build_text_generator(settings: Optional[Settings] = None) -> TextGenerator:
    """Pick the text generator implied by configuration."""
    settings = settings or get_settings()
    if settings.groq_api_key:
        logger.info(f"Reminder text will be rephrased with Groq model {settings.groq_model}")
        return GroqTextGenerator(
            api_key=settings.groq_api_key,
            model=settings.groq_model,
            timeout=settings.request_timeout,
        )
    return identity_generator


class ReminderComposer:
    """Turns an assignment into the text of its reminder notification."""

    def __init__(
        self,
        text_generator: TextGenerator = identity_generator,
        link_host_from: str = "canvas",
        link_host_to: str = "csus",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.text_generator = text_generator
        self.link_host_from = link_host_from
        self.link_host_to = link_host_to
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ReminderComposer":
        settings = settings or get_settings()
        return cls(
            text_generator=build_text_generator(settings),
            link_host_from=settings.link_host_from,
            link_host_to=settings.link_host_to,
        )

    def compose(self, assignment: Assignment) -> str:
        """Build the prompt for `assignment` as of now and generate the message."""
        prompt = MessageFormatter.format_reminder_prompt(
            assignment,
            self.clock(),
            link_host_from=self.link_host_from,
            link_host_to=self.link_host_to,
        )
        return self.text_generator(prompt)
