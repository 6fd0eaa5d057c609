"""
Correlation ID context for request tracing.

Every incoming Telegram update gets a short id kept in a ContextVar.
asyncio copies the context into tasks created while handling the update,
so log lines of the reveal animation carry the id of the request that
started it.

Usage:
    with correlation_scope("tg-") as cid:
        ...  # every log line in here (and in tasks spawned here) has cid
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator, Optional

_correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    """Get current correlation_id (or None if not set)."""
    return _correlation_id_var.get()


def set_correlation_id(cid: Optional[str]) -> Token:
    """Set correlation_id for the current context; returns a token for reset."""
    return _correlation_id_var.set(cid)


def reset_correlation_id(token: Token) -> None:
    """Restore the correlation_id that was current before set_correlation_id."""
    _correlation_id_var.reset(token)


def generate_correlation_id(prefix: str = "") -> str:
    """
    Generate a new correlation_id.

    Format: {prefix}{8 hex chars}, e.g. tg-a1b2c3d4
    """
    short = uuid.uuid4().hex[:8]
    return f"{prefix}{short}" if prefix else short


@contextmanager
def correlation_scope(prefix: str = "") -> Iterator[str]:
    """Run a block under a fresh correlation_id, restoring the previous one afterwards."""
    cid = generate_correlation_id(prefix)
    token = set_correlation_id(cid)
    try:
        yield cid
    finally:
        reset_correlation_id(token)
