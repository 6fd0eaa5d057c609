from abc import ABC, abstractmethod


class IRevealSink(ABC):
    """
    Interface for a display surface fed by the reveal animation.

    Every write carries the complete markup revealed so far and
    replaces whatever the sink showed before.
    """

    @property
    @abstractmethod
    def sink_id(self) -> str:
        """Stable identifier; at most one reveal runs per sink id"""
        pass

    @abstractmethod
    async def write(self, markup: str, is_final: bool = False) -> None:
        """Show `markup`. `is_final` marks the last write of a reveal."""
        pass
