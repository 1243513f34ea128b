"""Move validation and execution.

Every function here is pure: the board passed in is never modified.  A legal
move produces a brand new :class:`~klondike.models.Board`; an illegal one is
declined by returning ``None``.
"""

from __future__ import annotations

import logging

from .models import Board, Move
from .rules import DECK_SIZE, can_drop, is_valid_run

logger = logging.getLogger(__name__)


def move_cards(board: Board, move: Move) -> list:
    """Return the cards ``move`` would pick up from its source."""

    if move.is_draw or move.count < 1:
        return []
    source = board.pile(move.source)
    if move.count > len(source):
        return []
    return source[-move.count:]


def validate_move(board: Board, move: Move) -> tuple[bool, str]:
    """Validate ``move`` against ``board``.

    Returns ``(ok, message)`` where ``message`` explains a rejection.
    """

    if move.is_draw:
        if not board.stock and not board.waste:
            return False, 'Stock and waste are empty'
        return True, ''

    if move.source.kind not in ('tableau', 'waste', 'foundation'):
        return False, f'Cannot move cards from {move.source.kind}'
    if move.target.kind not in ('tableau', 'foundation'):
        return False, f'Cannot move cards onto {move.target.kind}'
    if move.source == move.target:
        return False, 'Source and target are the same pile'
    if move.source.kind == 'tableau' and not 0 <= move.source.key < len(board.tableau):
        return False, f'Unknown column {move.source.key}'
    if move.count < 1:
        return False, 'Nothing to move'

    cards = move_cards(board, move)
    if not cards:
        return False, f'{move.source!r} holds fewer than {move.count} cards'
    if move.source.kind != 'tableau' and move.count != 1:
        return False, f'Only the top card of {move.source.kind} can move'
    if not is_valid_run(cards):
        return False, 'Cards do not form a face-up run'
    return can_drop(board, cards, move.target)


def _draw(board: Board) -> None:
    if not board.stock:
        # Recycle: the waste goes back face down so the draw order repeats.
        board.stock = list(reversed(board.waste))
        board.waste = []
        for c in board.stock:
            c.face_up = False
    card = board.stock.pop()
    card.face_up = True
    board.waste.append(card)


def apply_move(board: Board, move: Move) -> Board | None:
    """Return the board after ``move`` or ``None`` if it is not legal."""

    ok, msg = validate_move(board, move)
    if not ok:
        logger.info("Invalid: %s", msg)
        return None

    new = board.clone()
    if move.is_draw:
        _draw(new)
    else:
        source = new.pile(move.source)
        cards = source[-move.count:]
        del source[-move.count:]
        if move.source.kind == 'tableau' and source and not source[-1].face_up:
            source[-1].face_up = True
        new.pile(move.target).extend(cards)

    new.moves += 1
    new.is_won = new.foundation_count() == DECK_SIZE
    return new


def check_conservation(board: Board) -> None:
    """Raise :class:`~klondike.models.ConservationError` on lost or duplicated cards."""

    board.check_conservation()
