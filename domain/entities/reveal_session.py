import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from domain.value_objects.reveal_unit import RevealUnit


class RevealStatus(Enum):
    """Status of a reveal session"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class RevealSession:
    """
    Reveal session entity - one typing animation of a text into a sink.

    Tracks how far the animation got (cursor), what the sink has been
    shown so far (output) and whether the session was asked to stop.
    """

    sink_id: str
    text: str
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    status: RevealStatus = RevealStatus.PENDING
    cursor: int = 0
    output: str = ""
    units_emitted: int = 0
    cancelled: bool = False
    superseded: bool = False
    reveal_remaining: bool = False
    error: Optional[str] = None
    created_at: datetime = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    def __post_init__(self):
        if self.text is None:
            raise ValueError("RevealSession text must not be None")
        if self.created_at is None:
            self.created_at = datetime.utcnow()

    def start(self) -> None:
        """Mark session as running"""
        if self.status != RevealStatus.PENDING:
            raise ValueError(f"Cannot start reveal with status {self.status}")
        self.status = RevealStatus.RUNNING
        self.started_at = datetime.utcnow()

    def advance(self, unit: RevealUnit) -> str:
        """Append the next unit to the revealed output and return the new output"""
        if self.status != RevealStatus.RUNNING:
            raise ValueError(f"Cannot advance reveal with status {self.status}")
        self.output += unit.text
        self.cursor += len(unit)
        self.units_emitted += 1
        return self.output

    def request_cancel(self, superseded: bool = False, reveal_remaining: bool = False) -> None:
        """
        Ask the session to stop before its next unit.

        A superseded session never touches its sink again, so
        reveal_remaining is ignored for it.
        """
        self.cancelled = True
        if superseded:
            self.superseded = True
            self.reveal_remaining = False
        elif reveal_remaining:
            self.reveal_remaining = True

    def complete(self) -> None:
        """Mark session as fully revealed"""
        if self.status != RevealStatus.RUNNING:
            raise ValueError(f"Cannot complete reveal with status {self.status}")
        self.output = self.text
        self.cursor = len(self.text)
        self.status = RevealStatus.COMPLETED
        self.finished_at = datetime.utcnow()

    def mark_cancelled(self) -> None:
        """Mark session as stopped by cancellation"""
        if self.is_finished:
            return
        self.status = RevealStatus.CANCELLED
        self.finished_at = datetime.utcnow()

    def fail(self, error: str) -> None:
        """Mark session as failed"""
        if self.is_finished:
            raise ValueError(f"Cannot fail reveal with status {self.status}")
        self.status = RevealStatus.FAILED
        self.error = error
        self.finished_at = datetime.utcnow()

    @property
    def is_finished(self) -> bool:
        return self.status in (RevealStatus.COMPLETED, RevealStatus.CANCELLED, RevealStatus.FAILED)

    @property
    def is_exhausted(self) -> bool:
        """True once the cursor reached the end of the text"""
        return self.cursor >= len(self.text)

    @property
    def progress(self) -> float:
        """Fraction of the text revealed so far"""
        if not self.text:
            return 1.0
        return min(self.cursor / len(self.text), 1.0)

    @property
    def duration(self) -> Optional[float]:
        """Seconds between start and finish"""
        if self.started_at and self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None
