"""
Dependency Injection Container

Centralizes all dependency creation and wiring, and owns the objects
with a lifecycle (HTTP client, reveal registry) so they are torn down
in one place.

Usage:
    container = Container(settings)
    handlers = container.anagram_handlers()
    ...
    await container.close()
"""

import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from shared.config.settings import Settings

logger = logging.getLogger(__name__)


class Container:
    """
    Dependency Injection Container.

    Each service is created lazily and cached (singleton per container).
    Tests build a container from hand-made Settings and swap cached
    entries before first use.
    """

    def __init__(self, settings: Optional["Settings"] = None):
        if settings is None:
            from shared.config.settings import settings as env_settings
            settings = env_settings
        self.settings = settings
        self._cache = {}

    # === Infrastructure ===

    def html_sanitizer(self):
        """Get or create the HTML sanitizer"""
        if "html_sanitizer" not in self._cache:
            from infrastructure.sanitizer.nh3_sanitizer import Nh3HtmlSanitizer
            self._cache["html_sanitizer"] = Nh3HtmlSanitizer()
        return self._cache["html_sanitizer"]

    def anagram_source(self):
        """Get or create the anagram API client"""
        if "anagram_source" not in self._cache:
            from infrastructure.anagram.roachagram_api_client import RoachagramApiClient
            self._cache["anagram_source"] = RoachagramApiClient(
                base_url=self.settings.anagram_api.base_url,
                timeout=self.settings.anagram_api.timeout,
            )
        return self._cache["anagram_source"]

    # === Domain / Application ===

    def response_formatter(self):
        """Get or create the response formatter"""
        if "response_formatter" not in self._cache:
            from domain.services.response_formatter import ResponseFormatter
            self._cache["response_formatter"] = ResponseFormatter(self.html_sanitizer())
        return self._cache["response_formatter"]

    def reveal_scheduler(self):
        """Get or create the reveal registry shared by all sinks"""
        if "reveal_scheduler" not in self._cache:
            from application.services.reveal_scheduler import RevealScheduler
            self._cache["reveal_scheduler"] = RevealScheduler(
                unit_delay_ms=self.settings.reveal.unit_delay_ms,
            )
        return self._cache["reveal_scheduler"]

    def anagram_service(self):
        """Get or create AnagramService"""
        if "anagram_service" not in self._cache:
            from application.services.anagram_service import AnagramService
            self._cache["anagram_service"] = AnagramService(
                anagram_source=self.anagram_source(),
                formatter=self.response_formatter(),
                scheduler=self.reveal_scheduler(),
            )
        return self._cache["anagram_service"]

    # === Presentation ===

    def anagram_handlers(self):
        """Create AnagramHandlers with all dependencies"""
        if "anagram_handlers" not in self._cache:
            from presentation.handlers.anagram_handlers import AnagramHandlers
            self._cache["anagram_handlers"] = AnagramHandlers(
                anagram_service=self.anagram_service(),
                scheduler=self.reveal_scheduler(),
                edit_interval=self.settings.reveal.edit_interval,
            )
        return self._cache["anagram_handlers"]

    # === Lifecycle ===

    async def close(self) -> None:
        """Stop running reveals and release network resources"""
        scheduler = self._cache.get("reveal_scheduler")
        if scheduler is not None:
            await scheduler.shutdown()

        source = self._cache.get("anagram_source")
        if source is not None and hasattr(source, "close"):
            await source.close()

        logger.info("Container closed")
