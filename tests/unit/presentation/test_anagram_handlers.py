"""Unit tests for AnagramHandlers."""

import pytest
from unittest.mock import AsyncMock, Mock

from aiogram import Router

from application.services.anagram_service import AnagramService
from domain.entities.reveal_session import RevealStatus
from presentation.handlers.anagram_handlers import AnagramHandlers, register_handlers
from presentation.sinks.telegram_message_sink import TelegramMessageSink
from shared.constants import (
    ANAGRAM_FALLBACK_MESSAGE,
    CANCELLED_TEXT,
    ERROR_INPUT_TOO_LONG,
    NOTHING_TO_CANCEL_TEXT,
    WELCOME_TEXT,
)


@pytest.fixture
def loading_message():
    message = Mock()
    message.chat = Mock()
    message.chat.id = 42
    message.edit_text = AsyncMock()
    return message


@pytest.fixture
def anagram_service():
    service = Mock()
    handle = Mock()
    handle.session.session_id = "abcd1234"
    service.reveal_anagrams = AsyncMock(return_value=handle)
    return service


@pytest.fixture
def reveal_scheduler():
    scheduler = Mock()
    scheduler.cancel = Mock(return_value=True)
    return scheduler


@pytest.fixture
def handlers(anagram_service, reveal_scheduler):
    return AnagramHandlers(anagram_service, reveal_scheduler, edit_interval=0.5)


class TestCommands:

    @pytest.mark.asyncio
    async def test_start(self, handlers, mock_message):
        await handlers.start(mock_message)
        mock_message.answer.assert_awaited_once_with(WELCOME_TEXT, parse_mode="HTML")

    @pytest.mark.asyncio
    async def test_cancel_running(self, handlers, mock_message, reveal_scheduler):
        await handlers.cancel(mock_message)

        reveal_scheduler.cancel.assert_called_once_with("tg:42")
        mock_message.answer.assert_awaited_once_with(CANCELLED_TEXT)

    @pytest.mark.asyncio
    async def test_cancel_nothing_running(self, handlers, mock_message, reveal_scheduler):
        reveal_scheduler.cancel.return_value = False
        await handlers.cancel(mock_message)

        mock_message.answer.assert_awaited_once_with(NOTHING_TO_CANCEL_TEXT)

    @pytest.mark.asyncio
    async def test_skip_running_is_quiet(self, handlers, mock_message, reveal_scheduler):
        await handlers.skip(mock_message)

        reveal_scheduler.cancel.assert_called_once_with("tg:42", reveal_remaining=True)
        mock_message.answer.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_skip_nothing_running(self, handlers, mock_message, reveal_scheduler):
        reveal_scheduler.cancel.return_value = False
        await handlers.skip(mock_message)

        mock_message.answer.assert_awaited_once_with(NOTHING_TO_CANCEL_TEXT)


class TestHandleText:

    @pytest.mark.asyncio
    async def test_phrase_starts_reveal_in_loading_message(
        self, handlers, mock_message, loading_message, anagram_service
    ):
        mock_message.text = "  listen "
        mock_message.answer = AsyncMock(return_value=loading_message)

        await handlers.handle_text(mock_message)

        mock_message.answer.assert_awaited_once_with("Anagramming listen...", parse_mode="HTML")
        input_text, sink = anagram_service.reveal_anagrams.await_args.args
        assert input_text == "listen"
        assert isinstance(sink, TelegramMessageSink)
        assert sink.sink_id == "tg:42"
        assert sink.message is loading_message
        assert sink.min_edit_interval == 0.5

    @pytest.mark.asyncio
    async def test_loading_text_is_escaped(self, handlers, mock_message, loading_message):
        mock_message.text = "<b>&"
        mock_message.answer = AsyncMock(return_value=loading_message)

        await handlers.handle_text(mock_message)

        assert mock_message.answer.await_args.args[0] == "Anagramming &lt;b&gt;&amp;..."

    @pytest.mark.asyncio
    async def test_blank_ignored(self, handlers, mock_message, anagram_service):
        mock_message.text = "   "
        await handlers.handle_text(mock_message)

        mock_message.answer.assert_not_awaited()
        anagram_service.reveal_anagrams.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_too_long_rejected(self, handlers, mock_message, anagram_service):
        mock_message.text = "a" * 21
        await handlers.handle_text(mock_message)

        mock_message.answer.assert_awaited_once_with(ERROR_INPUT_TOO_LONG)
        anagram_service.reveal_anagrams.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_control_characters_rejected(self, handlers, mock_message, anagram_service):
        mock_message.text = "ab\x07c"
        await handlers.handle_text(mock_message)

        mock_message.answer.assert_awaited_once()
        anagram_service.reveal_anagrams.assert_not_awaited()


def test_register_handlers(handlers):
    router = Router(name="test")
    register_handlers(router, handlers)

    callbacks = [h.callback for h in router.message.handlers]
    assert callbacks == [handlers.start, handlers.cancel, handlers.skip, handlers.handle_text]


class TestHandleTextFallback:

    @pytest.mark.asyncio
    async def test_formatting_failure_still_replaces_loading_text(
        self, mock_message, loading_message, mock_anagram_source, scheduler
    ):
        """The loading message ends showing the fallback, never stuck on 'Anagramming...'"""
        formatter = Mock()
        formatter.format = Mock(side_effect=RuntimeError("formatter exploded"))
        service = AnagramService(mock_anagram_source, formatter, scheduler)
        handlers = AnagramHandlers(service, scheduler, edit_interval=0.5)
        mock_message.text = "cats"
        mock_message.answer = AsyncMock(return_value=loading_message)

        await handlers.handle_text(mock_message)
        handle = scheduler.get("tg:42")
        assert handle is not None
        session = await handle

        assert session.status == RevealStatus.COMPLETED
        assert loading_message.edit_text.await_args.args[0] == ANAGRAM_FALLBACK_MESSAGE

    @pytest.mark.asyncio
    async def test_lone_surrogate_response_is_revealed(
        self, mock_message, loading_message, mock_anagram_source, formatter, scheduler
    ):
        mock_anagram_source.fetch = AsyncMock(return_value="\\ud83d anagrams")
        handlers = AnagramHandlers(AnagramService(mock_anagram_source, formatter, scheduler), scheduler)
        mock_message.text = "cats"
        mock_message.answer = AsyncMock(return_value=loading_message)

        await handlers.handle_text(mock_message)
        await scheduler.get("tg:42")

        assert loading_message.edit_text.await_args.args[0] == "\ufffd anagrams"
