from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .models import Board, Card, PileRef

# Card constants
SUIT_SYMBOLS = {'♥': 'hearts', '♦': 'diamonds', '♣': 'clubs', '♠': 'spades'}
SUITS = list(SUIT_SYMBOLS.values())
RANKS = ['A', '2', '3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K']
RED_SUITS = {'hearts', 'diamonds'}

DECK_SIZE = len(SUITS) * len(RANKS)
TABLEAU_COLUMNS = 7


def rank_value(rank: str) -> int:
    return RANKS.index(rank) + 1


def suit_color(suit: str) -> str:
    return 'red' if suit in RED_SUITS else 'black'


def suit_symbol(suit: str) -> str:
    return next((sym for sym, name in SUIT_SYMBOLS.items() if name == suit), '?')


def can_place_on_foundation(pile, card) -> bool:
    """Return ``True`` if ``card`` may be added to the foundation ``pile``."""

    if not pile:
        return card.rank == 'A'
    top = pile[-1]
    return top.suit == card.suit and card.value == top.value + 1


def can_place_on_tableau(top, card) -> bool:
    """Return ``True`` if ``card`` may be placed on a column whose top is ``top``.

    ``top`` is ``None`` for an empty column, which only accepts a King.
    """

    if top is None:
        return card.rank == 'K'
    return top.color != card.color and card.value == top.value - 1


def is_valid_run(cards) -> bool:
    """Return ``True`` if ``cards`` can be picked up together."""

    if not cards:
        return False
    if any(not c.face_up for c in cards):
        return False
    return all(can_place_on_tableau(cards[i], cards[i + 1]) for i in range(len(cards) - 1))


def movable_run_start(column) -> int | None:
    """Return the index of the deepest card starting a run at the column top."""

    if not column or not column[-1].face_up:
        return None
    start = len(column) - 1
    while start > 0 and column[start - 1].face_up and can_place_on_tableau(column[start - 1], column[start]):
        start -= 1
    return start


def can_drop(board: "Board", cards: "list[Card]", target: "PileRef") -> tuple[bool, str]:
    """Check whether ``cards`` may land on ``target`` in ``board``.

    This is the one policy check shared by the executor, the drop resolver,
    the hint scan and the no-moves detection.
    """

    if not cards:
        return False, 'Nothing to move'
    if target.kind == 'foundation':
        if len(cards) != 1:
            return False, 'Only single cards go to a foundation'
        if target.key not in board.foundations:
            return False, f'Unknown foundation {target.key}'
        if target.key != cards[0].suit:
            return False, f'{cards[0]!r} belongs on the {cards[0].suit} foundation'
        if not can_place_on_foundation(board.foundations[target.key], cards[0]):
            return False, f'{cards[0]!r} does not fit on the {target.key} foundation'
        return True, ''
    if target.kind == 'tableau':
        if not isinstance(target.key, int) or not 0 <= target.key < len(board.tableau):
            return False, f'Unknown column {target.key}'
        if len(cards) > 1 and not is_valid_run(cards):
            return False, 'Cards do not form a run'
        column = board.tableau[target.key]
        top = column[-1] if column else None
        if top is not None and not top.face_up:
            return False, 'Column top is face down'
        if not can_place_on_tableau(top, cards[0]):
            if top is None:
                return False, 'Only a King may fill an empty column'
            return False, f'{cards[0]!r} does not fit on {top!r}'
        return True, ''
    return False, f'Cannot drop onto {target.kind}'
