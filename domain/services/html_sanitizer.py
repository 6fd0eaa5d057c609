from abc import ABC, abstractmethod


class IHtmlSanitizer(ABC):
    """Interface for allow-list based HTML sanitizers"""

    @abstractmethod
    def sanitize(self, markup: str) -> str:
        """
        Strip every tag and attribute that is not explicitly allowed.

        Implementations must be idempotent and must never raise.
        """
        pass
