from dataclasses import dataclass, field
from typing import List

from domain.services.reveal_sink import IRevealSink


@dataclass
class SinkWrite:
    markup: str
    is_final: bool = False


class InMemoryRevealSink(IRevealSink):
    """Reveal sink that keeps every frame it was shown"""

    def __init__(self, sink_id: str = "memory"):
        self._sink_id = sink_id
        self.writes: List[SinkWrite] = []
        self.content = ""

    @property
    def sink_id(self) -> str:
        return self._sink_id

    async def write(self, markup: str, is_final: bool = False) -> None:
        self.writes.append(SinkWrite(markup=markup, is_final=is_final))
        self.content = markup

    @property
    def frames(self) -> List[str]:
        return [w.markup for w in self.writes]

    @property
    def final_writes(self) -> List[SinkWrite]:
        return [w for w in self.writes if w.is_final]

    def clear(self) -> None:
        self.writes.clear()
        self.content = ""
