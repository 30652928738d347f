"""Telegram notification module for Canvas Bot."""

from canvas_bot.notify.composer import (
    GroqTextGenerator,
    ReminderComposer,
    build_text_generator,
    identity_generator,
)
from canvas_bot.notify.formatters import MessageFormatter
from canvas_bot.notify.telegram import NotificationDeliveryError, TelegramNotifier

__all__ = [
    "GroqTextGenerator",
    "MessageFormatter",
    "NotificationDeliveryError",
    "ReminderComposer",
    "TelegramNotifier",
    "build_text_generator",
    "identity_generator",
]
