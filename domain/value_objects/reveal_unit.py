from dataclasses import dataclass
from enum import Enum

from shared.constants import (
    CLAUSE_CHARS,
    LINE_BREAK_CHARS,
    REVEAL_CHAR_MULTIPLIER,
    REVEAL_CLAUSE_MULTIPLIER,
    REVEAL_LINE_BREAK_MULTIPLIER,
    REVEAL_SENTENCE_END_MULTIPLIER,
    REVEAL_TAG_MULTIPLIER,
    SENTENCE_END_CHARS,
)


class RevealUnitKind(str, Enum):
    """Kind of atomic chunk emitted by the reveal animation"""
    CHAR = "char"
    TAG = "tag"


@dataclass(frozen=True)
class RevealUnit:
    """
    Value object for the smallest chunk the reveal animation emits.

    Either a single visible character or one complete markup tag
    (from '<' up to and including the next '>').
    """

    text: str
    kind: RevealUnitKind = RevealUnitKind.CHAR

    def __post_init__(self):
        if not self.text:
            raise ValueError("RevealUnit text must not be empty")
        if self.kind == RevealUnitKind.CHAR and len(self.text) != 1:
            raise ValueError(f"CHAR unit must be a single character, got {len(self.text)}")

    @classmethod
    def char(cls, value: str) -> "RevealUnit":
        return cls(value, RevealUnitKind.CHAR)

    @classmethod
    def tag(cls, value: str) -> "RevealUnit":
        return cls(value, RevealUnitKind.TAG)

    @property
    def is_tag(self) -> bool:
        return self.kind == RevealUnitKind.TAG

    @property
    def delay_multiplier(self) -> int:
        """How many base delays to wait after this unit is shown"""
        if self.is_tag:
            return REVEAL_TAG_MULTIPLIER
        if self.text in SENTENCE_END_CHARS:
            return REVEAL_SENTENCE_END_MULTIPLIER
        if self.text in CLAUSE_CHARS:
            return REVEAL_CLAUSE_MULTIPLIER
        if self.text in LINE_BREAK_CHARS:
            return REVEAL_LINE_BREAK_MULTIPLIER
        return REVEAL_CHAR_MULTIPLIER

    def __len__(self) -> int:
        return len(self.text)

    def __str__(self) -> str:
        return self.text
