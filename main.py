#!/usr/bin/env python3
"""
Roachagram Bot - anagrams typed out in Telegram

Send the bot a word or a short phrase; it asks the Roachagram API for
anagrams, formats the answer and types it into the chat.

Architecture:
- Domain: formatting pipeline, reveal units and sessions, interfaces
- Application: reveal scheduler and anagram request orchestration
- Infrastructure: Roachagram API client, HTML sanitizer
- Presentation: Telegram handlers, message sink, middleware
"""

import asyncio
import logging
import signal
import sys

from aiogram import Bot, Dispatcher, Router
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.types import BotCommand

from shared.config.settings import settings
from shared.container import Container
from shared.logging.config import setup_logging
from presentation.handlers.anagram_handlers import register_handlers
from presentation.middleware.correlation import CorrelationIdMiddleware

setup_logging(settings.log_level, settings.log_dir, debug=settings.debug)

logger = logging.getLogger(__name__)


class Application:
    """Main application class"""

    def __init__(self):
        self.bot: Bot = None
        self.dp: Dispatcher = None
        self.container: Container = None
        self._shutdown_event = asyncio.Event()

    async def setup(self):
        """Initialize application components"""
        logger.info("Initializing Roachagram bot...")

        self.container = Container(settings)

        self.bot = Bot(
            token=settings.telegram.token,
            default=DefaultBotProperties(parse_mode=ParseMode.HTML)
        )
        self.dp = Dispatcher()

        # Register middleware
        self.dp.message.outer_middleware(CorrelationIdMiddleware())

        # Register handlers
        router = Router(name="anagrams")
        register_handlers(router, self.container.anagram_handlers())
        self.dp.include_router(router)

        # Register bot commands in Telegram menu
        await self._register_bot_commands()

        logger.info(
            f"Bot initialized (API: {settings.anagram_api.base_url}, "
            f"unit delay: {settings.reveal.unit_delay_ms}ms)"
        )

    async def _register_bot_commands(self):
        """Register bot commands in Telegram menu"""
        commands = [
            BotCommand(command="start", description="How to use the bot"),
            BotCommand(command="skip", description="Show the full answer now"),
            BotCommand(command="cancel", description="Stop typing"),
        ]

        try:
            await self.bot.set_my_commands(commands)
            logger.info(f"Registered {len(commands)} bot commands in Telegram menu")
        except Exception as e:
            logger.warning(f"Failed to register bot commands: {e}")

    async def start(self):
        """Start the bot"""
        await self.setup()

        logger.info("Starting bot polling...")
        info = await self.bot.get_me()
        logger.info(f"Bot: @{info.username} (ID: {info.id})")

        # Set up signal handlers (Unix only)
        if sys.platform != "win32":
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.add_signal_handler(sig, lambda: asyncio.create_task(self.shutdown()))

        # Start polling
        await self.dp.start_polling(
            self.bot,
            handle_signals=sys.platform == "win32"  # Let aiogram handle signals on Windows
        )

    async def shutdown(self):
        """Graceful shutdown"""
        if self._shutdown_event.is_set():
            return

        logger.info("Shutting down...")
        self._shutdown_event.set()

        # Stop polling
        if self.dp:
            await self.dp.stop_polling()

        # Stop reveals and close the API client
        if self.container:
            await self.container.close()

        # Close bot session
        if self.bot:
            await self.bot.session.close()

        logger.info("Shutdown complete")


async def main():
    """Main entry point"""
    app = Application()

    try:
        await app.start()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
    finally:
        await app.shutdown()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
