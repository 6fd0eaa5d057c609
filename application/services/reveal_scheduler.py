"""
Reveal Scheduler

Typing animation for display markup. Streams a text into a sink one
reveal unit at a time (a character, or a whole tag) with punctuation
aware pacing.

Guarantees:
1. At most one running reveal per sink id; a new reveal supersedes the old one
2. Units are written strictly in document order, a tag is never split
3. A superseded session never writes to its sink again
4. A finished, non-superseded reveal leaves the sink showing the full text
5. Cancellation is silent: it is never reported as an error
"""

import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from domain.entities.reveal_session import RevealSession
from domain.services.reveal_sink import IRevealSink
from domain.services.reveal_tokenizer import tokenize_markup, unit_delay_ms
from domain.value_objects.reveal_unit import RevealUnit
from shared.constants import REVEAL_DEFAULT_UNIT_DELAY_MS

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[Any]]


class RevealHandle:
    """
    Handle of one running reveal.

    Awaiting the handle (or wait()) returns the finished RevealSession.
    A cancellation requested through the handle or the scheduler never
    raises out of wait().
    """

    def __init__(self, session: RevealSession, task: asyncio.Task):
        self._session = session
        self._task = task

    @property
    def session(self) -> RevealSession:
        return self._session

    @property
    def sink_id(self) -> str:
        return self._session.sink_id

    @property
    def task(self) -> asyncio.Task:
        return self._task

    def done(self) -> bool:
        return self._task.done()

    def cancel(self, reveal_remaining: bool = False) -> bool:
        """
        Stop the reveal before its next unit.

        Args:
            reveal_remaining: Show the full text once the loop has stopped
                instead of leaving the sink mid-animation

        Returns:
            False if the reveal had already finished
        """
        if self._task.done():
            return False

        self._session.request_cancel(reveal_remaining=reveal_remaining)
        if not reveal_remaining:
            # Interrupt the pending sleep so its timer is released right away
            self._task.cancel()
        logger.info(
            f"Reveal {self._session.session_id} on {self.sink_id}: cancel requested "
            f"(reveal_remaining={reveal_remaining})"
        )
        return True

    async def wait(self) -> RevealSession:
        """Wait for the reveal to finish and return its session"""
        try:
            await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if not (self._task.done() and self._task.cancelled() and self._session.cancelled):
                raise
        return self._session

    def __await__(self):
        return self.wait().__await__()


class RevealScheduler:
    """
    Registry and driver of reveal sessions, keyed by sink id.

    Owned by whichever component manages the sinks (see Container); there
    is no module level instance.

    Usage:
        scheduler = RevealScheduler(unit_delay_ms=40)

        handle = scheduler.reveal(sink, markup)   # returns immediately
        session = await handle                    # optional

        scheduler.cancel(sink.sink_id)            # stop, keep partial output
        await scheduler.shutdown()                # stop everything
    """

    def __init__(
        self,
        unit_delay_ms: float = REVEAL_DEFAULT_UNIT_DELAY_MS,
        sleep: Optional[SleepFunc] = None,
    ):
        if unit_delay_ms is None or unit_delay_ms < 0:
            raise ValueError("unit_delay_ms must be a non-negative number")
        self.unit_delay_ms = unit_delay_ms
        self._sleep: SleepFunc = sleep or asyncio.sleep
        self._active: Dict[str, RevealHandle] = {}  # sink_id -> handle

    def reveal(
        self,
        sink: IRevealSink,
        text: str,
        unit_delay_ms: Optional[float] = None,
    ) -> RevealHandle:
        """
        Start revealing `text` into `sink`.

        Any reveal still running for the same sink id is cancelled first.
        Must be called from a running event loop.

        Args:
            sink: Target display surface
            text: Safe markup to reveal
            unit_delay_ms: Base delay per unit; scheduler default when None

        Returns:
            Handle of the new reveal

        Raises:
            ValueError: text is None or the delay is negative
        """
        if text is None:
            raise ValueError("text must not be None")
        delay_ms = self.unit_delay_ms if unit_delay_ms is None else unit_delay_ms
        if delay_ms < 0:
            raise ValueError("unit_delay_ms must be a non-negative number")

        sink_id = sink.sink_id
        self._supersede(sink_id)

        session = RevealSession(sink_id=sink_id, text=text)
        task = asyncio.create_task(
            self._run(session, sink, delay_ms),
            name=f"reveal:{sink_id}:{session.session_id}",
        )
        handle = RevealHandle(session, task)
        self._active[sink_id] = handle
        task.add_done_callback(functools.partial(self._on_task_done, handle))

        logger.info(
            f"Reveal {session.session_id} on {sink_id}: started "
            f"({len(text)}ch, unit_delay={delay_ms}ms)"
        )
        return handle

    def _supersede(self, sink_id: str) -> None:
        """Cancel the running reveal of a sink before a new one takes over"""
        previous = self._active.pop(sink_id, None)
        if previous is None or previous.done():
            return

        previous.session.request_cancel(superseded=True)
        previous.task.cancel()
        logger.info(
            f"Reveal {previous.session.session_id} on {sink_id}: superseded "
            f"at {previous.session.cursor}/{len(previous.session.text)}ch"
        )

    def _on_task_done(self, handle: RevealHandle, task: asyncio.Task) -> None:
        """Release the registry entry of a finished reveal"""
        if task.cancelled():
            # Cancelled before the loop ever ran
            handle.session.mark_cancelled()
        if self._active.get(handle.sink_id) is handle:
            del self._active[handle.sink_id]

    async def _run(self, session: RevealSession, sink: IRevealSink, delay_ms: float) -> RevealSession:
        units = tokenize_markup(session.text)
        session.start()

        try:
            await self._emit_units(session, sink, units, delay_ms)

            if session.superseded or (session.cancelled and not session.reveal_remaining):
                session.mark_cancelled()
                return session

            # Final write: the sink must not be left mid-animation
            await sink.write(session.text, is_final=True)
            if session.cancelled:
                session.output = session.text
                session.cursor = len(session.text)
                session.mark_cancelled()
            else:
                session.complete()

        except asyncio.CancelledError:
            session.mark_cancelled()
            if not session.cancelled:
                raise

        except Exception as e:
            logger.error(f"Reveal {session.session_id} on {session.sink_id} failed: {e}")
            session.fail(str(e))
            return session

        logger.info(
            f"Reveal {session.session_id} on {session.sink_id}: {session.status.value} "
            f"after {session.units_emitted}/{len(units)} units"
        )
        return session

    async def _emit_units(
        self,
        session: RevealSession,
        sink: IRevealSink,
        units: List[RevealUnit],
        delay_ms: float,
    ) -> None:
        last_index = len(units) - 1
        for index, unit in enumerate(units):
            # Checked before every mutation of the sink
            if session.cancelled:
                return
            await sink.write(session.advance(unit))
            if index < last_index:
                await self._sleep(unit_delay_ms(unit, delay_ms) / 1000)

    # === Registry ===

    def get(self, sink_id: str) -> Optional[RevealHandle]:
        """Running reveal of a sink, if any"""
        handle = self._active.get(sink_id)
        if handle is None or handle.done():
            return None
        return handle

    def is_active(self, sink_id: str) -> bool:
        return self.get(sink_id) is not None

    @property
    def active_sink_ids(self) -> List[str]:
        return [sink_id for sink_id, handle in self._active.items() if not handle.done()]

    def cancel(self, sink_id: str, reveal_remaining: bool = False) -> bool:
        """Cancel the running reveal of a sink. Returns False if nothing was running."""
        handle = self.get(sink_id)
        if handle is None:
            return False
        return handle.cancel(reveal_remaining=reveal_remaining)

    def release(self, sink_id: str) -> None:
        """Forget a sink that is going away, cancelling its reveal"""
        handle = self._active.pop(sink_id, None)
        if handle and not handle.done():
            handle.cancel()
        logger.debug(f"Sink {sink_id}: released")

    async def shutdown(self) -> None:
        """Cancel every running reveal and wait until all of them have exited"""
        handles = list(self._active.values())
        self._active.clear()
        for handle in handles:
            handle.cancel()
        if handles:
            await asyncio.gather(*(h.task for h in handles), return_exceptions=True)
        logger.info(f"RevealScheduler shut down ({len(handles)} reveals cancelled)")
