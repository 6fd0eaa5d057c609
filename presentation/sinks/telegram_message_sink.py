"""
Telegram message sink.

Shows a reveal animation by editing one Telegram message in place.

Telegram allows only a limited number of edits per chat, so:
1. Intermediate frames are throttled to one edit per min_edit_interval
2. The final frame is always delivered
3. Short rate limits are waited out, long ones skip intermediate frames
4. HTML parse errors fall back to plain text
"""

import asyncio
import logging
import time
from typing import Optional

from aiogram.exceptions import TelegramBadRequest, TelegramRetryAfter
from aiogram.types import InlineKeyboardMarkup, Message

from domain.services.reveal_sink import IRevealSink
from presentation.sinks.telegram_html import markup_to_telegram_html, strip_html_tags
from shared.constants import TELEGRAM_EDIT_INTERVAL_SECONDS, TELEGRAM_MAX_RATE_LIMIT_WAIT

logger = logging.getLogger(__name__)


def chat_sink_id(chat_id: int) -> str:
    """Sink id of a chat: one reveal per chat at a time"""
    return f"tg:{chat_id}"


class TelegramMessageSink(IRevealSink):
    """
    Reveal sink backed by a Telegram message.

    Edits happen only inside write(); the sink never schedules work of
    its own, so once a reveal stops writing the message stops changing.
    """

    # After this many consecutive parse errors stay in plain text
    MAX_PARSE_ERRORS = 2

    def __init__(
        self,
        message: Message,
        min_edit_interval: float = TELEGRAM_EDIT_INTERVAL_SECONDS,
        sink_id: Optional[str] = None,
        reply_markup: Optional[InlineKeyboardMarkup] = None,
    ):
        self.message = message
        self.min_edit_interval = min_edit_interval
        self.reply_markup = reply_markup
        self._sink_id = sink_id or chat_sink_id(message.chat.id)
        self._last_update_time: Optional[float] = None
        self._last_sent_text = ""
        self._is_finalized = False
        self._parse_error_count = 0
        self._force_plain_text = False
        self.edit_count = 0

    @property
    def sink_id(self) -> str:
        return self._sink_id

    @property
    def is_finalized(self) -> bool:
        return self._is_finalized

    @property
    def last_sent_text(self) -> str:
        return self._last_sent_text

    async def write(self, markup: str, is_final: bool = False) -> None:
        if self._is_finalized:
            logger.debug(f"Sink {self._sink_id}: ignoring write, already finalized")
            return

        if not is_final and self._within_edit_interval():
            return

        text = markup_to_telegram_html(markup)
        if not strip_html_tags(text).strip():
            # Telegram rejects messages without visible text
            return

        if is_final:
            self._is_finalized = True
            await self._edit(text, is_final=True)
            return

        if text == self._last_sent_text:
            return

        await self._edit(text)

    def _within_edit_interval(self) -> bool:
        if self._last_update_time is None:
            return False
        return time.monotonic() - self._last_update_time < self.min_edit_interval

    async def _edit(self, text: str, is_final: bool = False) -> bool:
        if self._force_plain_text:
            return await self._edit_plain(text)

        try:
            await self.message.edit_text(
                text,
                parse_mode="HTML",
                reply_markup=self.reply_markup,
            )
            self._mark_sent(text)
            self._parse_error_count = 0
            return True

        except TelegramRetryAfter as e:
            if e.retry_after > TELEGRAM_MAX_RATE_LIMIT_WAIT and not is_final:
                logger.warning(
                    f"Sink {self._sink_id}: rate limited for {e.retry_after}s, skipping frame"
                )
                return False
            logger.info(f"Sink {self._sink_id}: rate limited, waiting {e.retry_after}s")
            await asyncio.sleep(e.retry_after + 0.5)
            return await self._edit(text, is_final=is_final)

        except TelegramBadRequest as e:
            error = str(e).lower()
            if "message is not modified" in error:
                self._mark_sent(text)
                return True
            if "message to edit not found" in error:
                logger.warning(f"Sink {self._sink_id}: message deleted, no further edits")
                self._is_finalized = True
                return False

            self._parse_error_count += 1
            logger.error(f"Sink {self._sink_id}: Telegram error (count={self._parse_error_count}): {e}")
            if self._parse_error_count >= self.MAX_PARSE_ERRORS:
                self._force_plain_text = True
                logger.warning(f"Sink {self._sink_id}: switching to plain text mode")
            return await self._edit_plain(text)

    async def _edit_plain(self, text: str) -> bool:
        plain_text = strip_html_tags(text)
        try:
            await self.message.edit_text(
                plain_text,
                parse_mode=None,
                reply_markup=self.reply_markup,
            )
            return True
        except TelegramBadRequest as e:
            if "message is not modified" not in str(e).lower():
                logger.error(f"Sink {self._sink_id}: plain text fallback failed: {e}")
            return False
        finally:
            # Remember the HTML so the same broken frame is not re-sent
            self._mark_sent(text)

    def _mark_sent(self, text: str) -> None:
        self._last_update_time = time.monotonic()
        self._last_sent_text = text
        self.edit_count += 1
