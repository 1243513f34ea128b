"""Notification hooks consumed by scoring, progression and UI layers.

:class:`Game` receives a :class:`ScoringSink` when it is constructed and calls
one method per notification.  :class:`EventBus` is a sink that forwards each
notification to whichever callback currently owns the matching slot.
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

Position = Optional[Tuple[float, float]]


class Slot(Enum):
    """Notification slots; each holds at most one subscriber."""

    CARD_TO_FOUNDATION = auto()
    GAME_WON = auto()
    NO_MOVES = auto()


class ScoringSink:
    """Receiver for engine notifications.  The base class ignores them."""

    def card_to_foundation(self, card, points: int, position: Position) -> None:
        """A single card reached a foundation."""

    def game_won(self, board) -> None:
        """All 52 cards are on the foundations."""

    def no_moves(self, board) -> None:
        """The board has no legal move left."""


class EventBus(ScoringSink):
    """A :class:`ScoringSink` dispatching to per-slot subscribers.

    Subscribing to an occupied slot replaces its subscriber; the displaced
    callback is returned so the caller can restore it later.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[Slot, Callable] = {}

    def subscribe(self, slot: Slot, callback: Callable) -> Optional[Callable]:
        previous = self._subscribers.get(slot)
        if previous is not None and previous is not callback:
            logger.info("Replacing subscriber for %s", slot.name)
        self._subscribers[slot] = callback
        return previous

    def unsubscribe(self, slot: Slot, callback: Callable) -> bool:
        """Remove ``callback`` from ``slot`` if it is still the subscriber."""
        if self._subscribers.get(slot) is callback:
            del self._subscribers[slot]
            return True
        return False

    def subscriber(self, slot: Slot) -> Optional[Callable]:
        return self._subscribers.get(slot)

    def emit(self, slot: Slot, *args) -> bool:
        callback = self._subscribers.get(slot)
        if callback is None:
            return False
        callback(*args)
        return True

    # ScoringSink -----------------------------------------------------
    def card_to_foundation(self, card, points: int, position: Position) -> None:
        self.emit(Slot.CARD_TO_FOUNDATION, card, points, position)

    def game_won(self, board) -> None:
        self.emit(Slot.GAME_WON, board)

    def no_moves(self, board) -> None:
        self.emit(Slot.NO_MOVES, board)
