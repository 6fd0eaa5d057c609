from abc import ABC, abstractmethod
from typing import Optional


class AnagramSourceError(Exception):
    """Raised when the anagram source cannot produce a usable response"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class IAnagramSource(ABC):
    """Interface for the external anagram generator"""

    @abstractmethod
    async def fetch(self, input_text: str) -> str:
        """
        Fetch the raw anagram response for the given input.

        Raises:
            ValueError: input is blank
            AnagramSourceError: network or protocol failure
        """
        pass
