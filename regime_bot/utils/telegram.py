"""Telegram alerts for warn/error decision records. Never log token or chat_id."""

from __future__ import annotations
import logging

import requests

logger = logging.getLogger("regime_bot.utils.telegram")


class TelegramNotifier:
    """Posts plain-text messages to one chat. A no-op when unconfigured."""

    def __init__(self, bot_token: str = "", chat_id: str = "", timeout: float = 10.0):
        self._bot_token = bot_token
        self._chat_id = chat_id
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._bot_token and self._chat_id)

    def send(self, text: str) -> bool:
        """Returns True on success. Network failures are logged, not raised."""
        if not self.configured:
            logger.debug("Telegram not configured, skipping message (len=%d)", len(text))
            return False
        url = f"https://api.telegram.org/bot{self._bot_token}/sendMessage"
        try:
            r = requests.post(url, json={"chat_id": self._chat_id, "text": text}, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Telegram error: %s", type(e).__name__)
            return False
        if r.status_code != 200:
            logger.warning("Telegram send failed: %s %s", r.status_code, r.text[:200])
            return False
        return True
