"""
Correlation ID Middleware for aiogram.

Wraps the handling of every incoming update in a correlation scope so
all log lines of one anagram request, including its reveal animation,
share the same id.
"""

import logging
from typing import Any, Awaitable, Callable, Dict

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject

from shared.logging.correlation import correlation_scope

logger = logging.getLogger(__name__)


class CorrelationIdMiddleware(BaseMiddleware):
    """
    Assigns a correlation_id (tg-{8hex}) to each incoming update.

    The id is also put into handler data as `correlation_id`.
    """

    async def __call__(
        self,
        handler: Callable[[TelegramObject, Dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: Dict[str, Any],
    ) -> Any:
        with correlation_scope("tg-") as cid:
            data["correlation_id"] = cid
            logger.debug(f"Handling {type(event).__name__}")
            return await handler(event, data)
