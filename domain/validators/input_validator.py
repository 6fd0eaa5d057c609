"""
Input validation for anagram requests.

The phrase is sent to an external API and echoed back inside markup,
so it is kept short and free of control characters.
"""

import logging
from typing import Optional

from pydantic import BaseModel, ValidationError, field_validator

from shared.constants import ANAGRAM_INPUT_MAX_LENGTH

logger = logging.getLogger(__name__)


class ValidatedAnagramInput(BaseModel):
    """Validated phrase to find anagrams for"""
    text: str

    @field_validator('text', mode='before')
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator('text')
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v:
            raise ValueError('Input cannot be empty')

        if len(v) > ANAGRAM_INPUT_MAX_LENGTH:
            raise ValueError(f'Input too long (max {ANAGRAM_INPUT_MAX_LENGTH} characters)')

        if '\x00' in v:
            raise ValueError('Null bytes detected')

        if any(ord(c) < 32 for c in v):
            raise ValueError('Control characters detected')

        return v


def validate_anagram_input(value: Optional[str]) -> tuple[bool, str, Optional[str]]:
    """
    Validate a phrase typed by the user.

    Returns:
        (success, error_message, validated_value)
    """
    try:
        validated = ValidatedAnagramInput(text=value)
    except ValidationError as e:
        error = e.errors()[0].get('msg', str(e)) if e.errors() else str(e)
        logger.debug(f"Anagram input rejected: {error}")
        return False, error, None
    return True, "", validated.text
