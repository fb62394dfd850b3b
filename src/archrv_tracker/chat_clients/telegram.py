"""
archrv_tracker.chat_clients.telegram

Telegram Bot API client used to deliver notices.

Responsibilities:
- Post `sendMessage` requests to the configured group in HTML parse mode.
- Split over-long texts and send the chunks in order.
- Surface any failure as a DeliveryError carrying the API description.
"""

from __future__ import annotations

from typing import Any

import httpx

from archrv_tracker.chat_clients.markup import split_text
from archrv_tracker.errors import DeliveryError
from archrv_tracker.settings import Settings


class TelegramClient:
    def __init__(self, *, settings: Settings, http: httpx.AsyncClient) -> None:
        self._settings = settings
        self._http = http

    def _endpoint(self, method: str) -> str:
        base = self._settings.telegram_api_base.rstrip("/")
        return f"{base}/bot{self._settings.telegram_bot_token}/{method}"

    async def send_message(self, text: str) -> None:
        for chunk in split_text(text):
            await self._send_one(chunk)

    async def _send_one(self, text: str) -> None:
        payload: dict[str, Any] = {
            "chat_id": self._settings.telegram_chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_notification": True,
        }
        try:
            r = await self._http.post(self._endpoint("sendMessage"), json=payload)
        except httpx.HTTPError as e:
            # The request URL embeds the bot token; report only the error type.
            raise DeliveryError(f"fail to send request: {type(e).__name__}", cause=e) from e

        if r.status_code != httpx.codes.OK:
            raise DeliveryError(f"fail to send request: {_description(r)}")


def _description(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return f"HTTP {r.status_code}"
    if isinstance(body, dict) and body.get("description"):
        return str(body["description"])
    return f"HTTP {r.status_code}"


# --- Module Notes -----------------------------------------------------------
# No retries here, 429 back-off included: the notifier logs the
# failure and moves on to the next merged message.
