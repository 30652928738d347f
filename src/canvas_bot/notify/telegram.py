"""
Telegram Bot API client.

Sends notifications via Telegram Bot API.
https://core.telegram.org/bots/api
"""

import logging
from typing import List, Optional

import requests

from canvas_bot.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Telegram Bot API endpoints
TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/{method}"


class NotificationDeliveryError(Exception):
    """Raised when Telegram rejects a message for one recipient."""

    def __init__(self, chat_id: str, message: str):
        super().__init__(f"chat {chat_id}: {message}")
        self.chat_id = chat_id


class TelegramNotifier:
    """
    Telegram Bot API client for sending notifications.

    Every message is delivered to each configured chat independently;
    a failure for one chat never prevents delivery to the others.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        chat_ids: Optional[List[str]] = None,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize Telegram notifier.

        Args:
            token: Telegram Bot API token (from @BotFather)
            chat_ids: Telegram chat IDs (users, groups, or channels)
            settings: Optional settings instance, will use default if not provided
            session: Optional requests session (used by tests)
        """
        settings = settings or get_settings()

        self.token = token or settings.bot_token
        self.chat_ids = list(chat_ids) if chat_ids is not None else settings.chat_ids
        self.timeout = settings.request_timeout

        self.api_url = TELEGRAM_API_URL.format(token=self.token, method="sendMessage")
        self.session = session or requests.Session()

    def send_message(self, message: str) -> bool:
        """
        Send a text message to every configured chat.

        Args:
            message: The message text to send

        Returns:
            bool: True if every recipient received the message
        """
        success = True
        for chat_id in self.chat_ids:
            try:
                self._send_to_chat(chat_id, message)
                logger.info(f"Message sent successfully to chat ID {chat_id}")
            except NotificationDeliveryError as e:
                logger.error(f"Telegram delivery failed: {e}")
                success = False
        return success

    def _send_to_chat(self, chat_id: str, message: str) -> None:
        """
        Post one message to one chat.

        Raises:
            NotificationDeliveryError: If the request fails or Telegram rejects it
        """
        payload = {
            "chat_id": chat_id,
            "text": message,
        }

        try:
            response = self.session.post(self.api_url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise NotificationDeliveryError(chat_id, "request timed out")
        except requests.exceptions.RequestException as e:
            raise NotificationDeliveryError(chat_id, f"request failed: {e}")

        if response.status_code != 200:
            raise NotificationDeliveryError(
                chat_id, f"{response.status_code} - {response.text}"
            )

        try:
            data = response.json()
        except ValueError:
            raise NotificationDeliveryError(chat_id, "undecodable response body")

        if not isinstance(data, dict):
            raise NotificationDeliveryError(chat_id, f"unexpected response body: {data!r}")

        if not data.get("ok"):
            raise NotificationDeliveryError(chat_id, str(data.get("description")))

    def get_chat_ids(self) -> List[str]:
        """
        List distinct chat IDs that have messaged the bot.

        Reads the pending updates queue, so it only sees chats that wrote
        to the bot recently.

        Returns:
            List[str]: Chat IDs in first-seen order
        """
        url = TELEGRAM_API_URL.format(token=self.token, method="getUpdates")
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()

        data = response.json()
        result = data.get("result")
        if not isinstance(result, list):
            raise ValueError("Unexpected getUpdates response format")

        chat_ids: List[str] = []
        for update in result:
            chat = (update.get("message") or {}).get("chat") or {}
            chat_id = chat.get("id")
            if chat_id is None:
                continue
            chat_id = str(chat_id)
            if chat_id not in chat_ids:
                chat_ids.append(chat_id)

        return chat_ids
