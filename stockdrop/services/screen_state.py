from __future__ import annotations

import itertools
import logging

from stockdrop.schemas.market import MarketRecord
from stockdrop.schemas.screener import ScreenResult

logger = logging.getLogger(__name__)


class ScreenState:
    """Latest pipeline result for one screen.

    Each refresh takes a generation from ``begin``. Only the newest issued
    generation may publish; a response for a superseded refresh is dropped
    even if it arrives last.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._counter = itertools.count(1)
        self._issued = 0
        self._latest: ScreenResult | None = None

    def begin(self) -> int:
        self._issued = next(self._counter)
        return self._issued

    @property
    def current_generation(self) -> int:
        return self._issued

    @property
    def latest(self) -> ScreenResult | None:
        return self._latest

    def is_current(self, generation: int) -> bool:
        return generation == self._issued

    def publish(self, generation: int, result: ScreenResult) -> bool:
        if not self.is_current(generation):
            logger.info(
                "Discarding %s result for generation %d (generation %d is newer)",
                self.name,
                generation,
                self._issued,
            )
            return False
        self._latest = result
        return True

    def page(self, offset: int, limit: int) -> tuple[list[MarketRecord], int]:
        if self._latest is None:
            return [], 0
        items = self._latest.items
        return list(items[offset : offset + limit]), len(items)

    def clear(self) -> None:
        self._latest = None
