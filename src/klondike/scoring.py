from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

# Points for each rank when a card first reaches a foundation
CARD_POINTS = {
    'A': 10, '2': 10, '3': 15, '4': 20, '5': 25, '6': 30, '7': 35,
    '8': 40, '9': 45, '10': 50, 'J': 55, 'Q': 60, 'K': 65,
}


class ScoreTracker:
    """Award foundation points at most once per card in a game."""

    def __init__(self) -> None:
        self.scored: set[str] = set()
        self.total = 0

    def award(self, card) -> int:
        """Return the points earned by ``card`` reaching a foundation.

        A card pulled back from a foundation and played again earns ``0``.
        """

        if card.id in self.scored:
            logger.info("%r already scored", card)
            return 0
        points = CARD_POINTS[card.rank]
        self.scored.add(card.id)
        self.total += points
        return points

    def is_scored(self, card_id: str) -> bool:
        return card_id in self.scored

    def reset(self) -> None:
        self.scored.clear()
        self.total = 0
