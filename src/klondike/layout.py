"""Reference board geometry.

A front-end owns its real layout; this module provides the default one so a
front-end (or a test) can produce the rectangles the drop resolver consumes.
"""

from __future__ import annotations

from typing import Callable, List, Tuple

import pygame

from .drag import DropTarget, DropTargetRegistry
from .models import Board
from .rules import SUITS

# Card dimensions
CARD_WIDTH = 64
CARD_HEIGHT = 104

# Distance showing between stacked cards
FACE_UP_OFFSET = 33
FACE_DOWN_OFFSET = 8
# Offsets never shrink below this share so ranks stay readable
MIN_COMPRESSION = 0.65

COLUMN_GAP = 12
TOP_MARGIN = 20
ROW_GAP = 24


def stack_offsets(cards, available_height: float | None = None) -> List[float]:
    """Return the vertical offset of each card in a column.

    Offsets shrink evenly when the column would not fit into
    ``available_height``.
    """
    if not cards:
        return []
    needed = CARD_HEIGHT + sum(
        FACE_UP_OFFSET if c.face_up else FACE_DOWN_OFFSET for c in cards[:-1]
    )
    factor = 1.0
    if available_height is not None and needed > available_height and len(cards) > 1:
        factor = max(MIN_COMPRESSION, (available_height - CARD_HEIGHT) / (needed - CARD_HEIGHT))

    offsets = [0.0]
    for prev in cards[:-1]:
        step = FACE_UP_OFFSET if prev.face_up else FACE_DOWN_OFFSET
        offsets.append(offsets[-1] + step * factor)
    return offsets


class BoardLayout:
    """Default placement: stock, waste and foundations on top, columns below."""

    def __init__(self, origin: Tuple[int, int] = (0, 0), available_height: float | None = None) -> None:
        self.origin = origin
        self.available_height = available_height

    @property
    def tableau_top(self) -> int:
        return self.origin[1] + TOP_MARGIN + CARD_HEIGHT + ROW_GAP

    def _slot_x(self, slot: int) -> int:
        return self.origin[0] + slot * (CARD_WIDTH + COLUMN_GAP)

    def stock_rect(self) -> pygame.Rect:
        return pygame.Rect(self._slot_x(0), self.origin[1] + TOP_MARGIN, CARD_WIDTH, CARD_HEIGHT)

    def waste_rect(self) -> pygame.Rect:
        return pygame.Rect(self._slot_x(1), self.origin[1] + TOP_MARGIN, CARD_WIDTH, CARD_HEIGHT)

    def foundation_rect(self, suit: str) -> pygame.Rect:
        slot = 3 + SUITS.index(suit)
        return pygame.Rect(self._slot_x(slot), self.origin[1] + TOP_MARGIN, CARD_WIDTH, CARD_HEIGHT)

    def column_offsets(self, board: Board, index: int) -> List[float]:
        return stack_offsets(board.tableau[index], self.available_height)

    def column_rect(self, board: Board, index: int) -> pygame.Rect:
        """Bounding box of column ``index``; an empty column keeps one card slot."""
        offsets = self.column_offsets(board, index)
        height = CARD_HEIGHT + (int(offsets[-1]) if offsets else 0)
        return pygame.Rect(self._slot_x(index), self.tableau_top, CARD_WIDTH, height)

    def card_rect(self, board: Board, index: int, row: int) -> pygame.Rect:
        offsets = self.column_offsets(board, index)
        return pygame.Rect(
            self._slot_x(index), self.tableau_top + int(offsets[row]), CARD_WIDTH, CARD_HEIGHT
        )

    def run_rect(self, board: Board, index: int, start: int, delta: Tuple[int, int] = (0, 0)) -> pygame.Rect:
        """Bounding box of the run from ``start`` to the top, moved by ``delta``."""
        top = self.card_rect(board, index, start)
        bottom = self.card_rect(board, index, len(board.tableau[index]) - 1)
        rect = top.union(bottom)
        return rect.move(delta)

    def register_targets(self, registry: DropTargetRegistry, board_fn: Callable[[], Board]) -> None:
        """Register every column and foundation with live bounds.

        ``board_fn`` returns the current board so column heights follow play.
        """
        for i in range(len(board_fn().tableau)):
            registry.register(
                DropTarget('tableau', i, bounds=lambda i=i: self.column_rect(board_fn(), i))
            )
        for suit in SUITS:
            registry.register(
                DropTarget('foundation', suit, bounds=lambda s=suit: self.foundation_rect(s))
            )
