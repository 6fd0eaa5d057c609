"""
Anagram Service

Application service behind an anagram request:
fetch from the API, format the response, reveal it into a sink.
"""

import logging
from typing import Optional

from application.services.reveal_scheduler import RevealHandle, RevealScheduler
from domain.services.anagram_source import AnagramSourceError, IAnagramSource
from domain.services.reveal_sink import IRevealSink
from domain.services.response_formatter import ResponseFormatter
from shared.constants import ANAGRAM_FALLBACK_MESSAGE

logger = logging.getLogger(__name__)


class AnagramService:
    """
    Orchestrates one anagram request.

    A failed fetch or a response that cannot be formatted is never surfaced
    to the user as an error: the fixed fallback message is revealed through
    the same animation instead.
    """

    def __init__(
        self,
        anagram_source: IAnagramSource,
        formatter: ResponseFormatter,
        scheduler: RevealScheduler,
        fallback_message: str = ANAGRAM_FALLBACK_MESSAGE,
    ):
        self.anagram_source = anagram_source
        self.formatter = formatter
        self.scheduler = scheduler
        self.fallback_message = fallback_message

    async def prepare(self, input_text: str) -> str:
        """
        Fetch and format anagrams for `input_text`.

        Args:
            input_text: Phrase typed by the user

        Returns:
            Safe markup, or the fallback message if the fetch or the
            formatting failed
        """
        try:
            raw = await self.anagram_source.fetch(input_text)
        except AnagramSourceError as e:
            logger.warning(f"Anagram fetch failed, using fallback message: {e}")
            return self.fallback_message

        try:
            return self.formatter.format(raw, input_text)
        except Exception as e:
            logger.error(f"Formatting anagram response failed, using fallback message: {e}", exc_info=True)
            return self.fallback_message

    async def reveal_anagrams(
        self,
        input_text: str,
        sink: IRevealSink,
        unit_delay_ms: Optional[float] = None,
    ) -> RevealHandle:
        """
        Fetch, format and start revealing anagrams into `sink`.

        Returns as soon as the reveal has started; await the returned
        handle to wait for the animation to finish.
        """
        markup = await self.prepare(input_text)
        return self.scheduler.reveal(sink, markup, unit_delay_ms=unit_delay_ms)
