"""
Pytest configuration and shared fixtures for the test suite.
"""

import asyncio
import os
from typing import List
from unittest.mock import AsyncMock, Mock

import pytest

# Set required environment variables BEFORE any application imports
os.environ.setdefault("TELEGRAM_TOKEN", "123456:test-telegram-token")
os.environ.setdefault("API_BASE_URL", "https://api.roachagram.test/")
os.environ.setdefault("LOG_DIR", "logs")

from application.services.reveal_scheduler import RevealScheduler
from domain.services.response_formatter import ResponseFormatter
from infrastructure.sanitizer.nh3_sanitizer import Nh3HtmlSanitizer
from infrastructure.sinks.memory_sink import InMemoryRevealSink


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays and only yields"""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)


# ============================================================================
# Formatting Fixtures
# ============================================================================

@pytest.fixture
def sanitizer() -> Nh3HtmlSanitizer:
    """Create the default allow-list sanitizer."""
    return Nh3HtmlSanitizer()


@pytest.fixture
def formatter(sanitizer: Nh3HtmlSanitizer) -> ResponseFormatter:
    """Create a formatter with the real sanitizer."""
    return ResponseFormatter(sanitizer)


# ============================================================================
# Reveal Fixtures
# ============================================================================

@pytest.fixture
def recording_sleep() -> RecordingSleep:
    """Create a sleep function that never really waits."""
    return RecordingSleep()


@pytest.fixture
def scheduler(recording_sleep: RecordingSleep) -> RevealScheduler:
    """Create a scheduler with 10ms base delay and recorded sleeps."""
    return RevealScheduler(unit_delay_ms=10, sleep=recording_sleep)


@pytest.fixture
def memory_sink() -> InMemoryRevealSink:
    """Create an in-memory sink."""
    return InMemoryRevealSink("test-sink")


# ============================================================================
# Mock Fixtures
# ============================================================================

@pytest.fixture
def mock_message() -> Mock:
    """Create a mock Telegram message in chat 42."""
    message = Mock()
    message.chat = Mock()
    message.chat.id = 42
    message.message_id = 1001
    message.text = ""
    message.edit_text = AsyncMock()
    message.answer = AsyncMock()
    return message


@pytest.fixture
def mock_anagram_source() -> Mock:
    """Create a mock anagram source."""
    source = Mock()
    source.fetch = AsyncMock(return_value="**listen** -> silent")
    return source
