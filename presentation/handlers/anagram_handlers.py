import html
import logging

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import Message

from application.services.anagram_service import AnagramService
from application.services.reveal_scheduler import RevealScheduler
from domain.validators.input_validator import validate_anagram_input
from presentation.sinks.telegram_message_sink import TelegramMessageSink, chat_sink_id
from shared.constants import (
    ANAGRAM_INPUT_MAX_LENGTH,
    CANCELLED_TEXT,
    ERROR_INPUT_TOO_LONG,
    LOADING_TEXT_TEMPLATE,
    NOTHING_TO_CANCEL_TEXT,
    TELEGRAM_EDIT_INTERVAL_SECONDS,
    WELCOME_TEXT,
)

logger = logging.getLogger(__name__)


class AnagramHandlers:
    """Bot handlers: a text message is an anagram request"""

    def __init__(
        self,
        anagram_service: AnagramService,
        scheduler: RevealScheduler,
        edit_interval: float = TELEGRAM_EDIT_INTERVAL_SECONDS,
    ):
        self.anagram_service = anagram_service
        self.scheduler = scheduler
        self.edit_interval = edit_interval

    async def start(self, message: Message) -> None:
        """Handle /start - greeting with the input hint"""
        await message.answer(WELCOME_TEXT, parse_mode="HTML")

    async def cancel(self, message: Message) -> None:
        """Handle /cancel - stop the running reveal, keep what was shown"""
        if self.scheduler.cancel(chat_sink_id(message.chat.id)):
            await message.answer(CANCELLED_TEXT)
        else:
            await message.answer(NOTHING_TO_CANCEL_TEXT)

    async def skip(self, message: Message) -> None:
        """Handle /skip - stop the animation and show the full answer"""
        if not self.scheduler.cancel(chat_sink_id(message.chat.id), reveal_remaining=True):
            await message.answer(NOTHING_TO_CANCEL_TEXT)

    async def handle_text(self, message: Message) -> None:
        """
        Handle a phrase: show the loading text, then type the anagrams
        into that same message.

        A new phrase in the same chat supersedes a reveal still running.
        """
        raw_input = message.text or ""
        if not raw_input.strip():
            return

        ok, error, input_text = validate_anagram_input(raw_input)
        if not ok:
            logger.info(f"Chat {message.chat.id}: input rejected: {error}")
            if len(raw_input.strip()) > ANAGRAM_INPUT_MAX_LENGTH:
                await message.answer(ERROR_INPUT_TOO_LONG)
            else:
                await message.answer(html.escape(error))
            return

        loading = await message.answer(
            html.escape(LOADING_TEXT_TEMPLATE.format(input=input_text)),
            parse_mode="HTML",
        )
        sink = TelegramMessageSink(
            loading,
            min_edit_interval=self.edit_interval,
            sink_id=chat_sink_id(message.chat.id),
        )
        handle = await self.anagram_service.reveal_anagrams(input_text, sink)
        logger.info(f"Chat {message.chat.id}: reveal {handle.session.session_id} started")


def register_handlers(router: Router, handlers: AnagramHandlers) -> None:
    """
    Register anagram handlers.

    Commands first: any other text message is treated as a phrase.
    """
    router.message.register(handlers.start, Command("start"))
    router.message.register(handlers.cancel, Command("cancel"))
    router.message.register(handlers.skip, Command("skip"))
    router.message.register(handlers.handle_text, F.text & ~F.text.startswith("/"))
