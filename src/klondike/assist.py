"""Read-only scans over a board: win detection, auto-collect, hints and
no-moves detection.

Nothing here mutates the board it is given.  :func:`collect_moves` plans an
auto-collect sequence on a private copy; the caller decides whether to apply
it.
"""

from __future__ import annotations

from .models import Board, Move, PileRef
from .moves import apply_move
from .rules import DECK_SIZE, can_drop, can_place_on_foundation, movable_run_start


class Hint:
    """A suggested move for the UI to highlight."""

    def __init__(self, card_id: str | None, type: str, move: Move):
        self.card_id = card_id
        self.type = type
        self.move = move

    def __repr__(self) -> str:
        return f"Hint({self.card_id!r}, {self.type!r})"

    def to_dict(self) -> dict:
        return {"card_id": self.card_id, "type": self.type}


def is_won(board: Board) -> bool:
    return board.foundation_count() == DECK_SIZE


def _sources(board: Board) -> list[PileRef]:
    return [PileRef.waste()] + [PileRef.tableau(i) for i in range(len(board.tableau))]


def _foundation_move_for(board: Board, source: PileRef) -> Move | None:
    pile = board.pile(source)
    if not pile or not pile[-1].face_up:
        return None
    card = pile[-1]
    if can_place_on_foundation(board.foundations[card.suit], card):
        return Move(source, PileRef.foundation(card.suit))
    return None


def find_foundation_move(board: Board, sources: list[PileRef] | None = None) -> Move | None:
    """Return the first single-card move to a foundation, if any."""

    for source in sources or _sources(board):
        move = _foundation_move_for(board, source)
        if move:
            return move
    return None


def collect_moves(board: Board) -> list[Move]:
    """Plan the auto-collect sequence for ``board``.

    Each step moves one card onto a foundation, so the plan never exceeds 52
    moves.
    """

    tableau_first = [PileRef.tableau(i) for i in range(len(board.tableau))] + [PileRef.waste()]
    plan: list[Move] = []
    sim = board
    while len(plan) < DECK_SIZE:
        move = find_foundation_move(sim, tableau_first)
        if move is None:
            break
        nxt = apply_move(sim, move)
        if nxt is None:  # pragma: no cover - scan and executor share rules
            break
        plan.append(move)
        sim = nxt
    return plan


def _is_pointless(board: Board, source: PileRef, start: int, target: PileRef) -> bool:
    # A run already at the bottom of its column gains nothing from an empty one
    return (
        source.kind == 'tableau'
        and start == 0
        and target.kind == 'tableau'
        and not board.tableau[target.key]
    )


def tableau_moves(board: Board):
    """Yield every useful move onto another tableau column, in scan order."""

    targets = [PileRef.tableau(i) for i in range(len(board.tableau))]
    if board.waste:
        card = board.waste[-1]
        for target in targets:
            if can_drop(board, [card], target)[0]:
                yield Move(PileRef.waste(), target)
    for i, column in enumerate(board.tableau):
        start = movable_run_start(column)
        if start is None:
            continue
        source = PileRef.tableau(i)
        for idx in range(start, len(column)):
            run = column[idx:]
            for target in targets:
                if target == source or _is_pointless(board, source, idx, target):
                    continue
                if can_drop(board, run, target)[0]:
                    yield Move(source, target, len(run))


def find_hint(board: Board) -> Hint | None:
    """Return the first available move in hint priority order."""

    if is_won(board):
        return None
    move = find_foundation_move(board)
    if move:
        return Hint(board.pile(move.source)[-1].id, 'foundation', move)
    move = next(tableau_moves(board), None)
    if move:
        return Hint(board.pile(move.source)[-move.count].id, 'tableau', move)
    if board.stock or board.waste:
        card_id = board.stock[-1].id if board.stock else None
        return Hint(card_id, 'stock', Move.draw())
    return None


def _stock_card_playable(board: Board, card) -> bool:
    if can_place_on_foundation(board.foundations[card.suit], card):
        return True
    return any(
        can_drop(board, [card], PileRef.tableau(i))[0] for i in range(len(board.tableau))
    )


def has_available_moves(board: Board) -> bool:
    """Return ``True`` unless the board is stuck.

    A won board is never reported as stuck.  Besides the visible moves, every
    card in the stock and waste is checked as it would appear on top of the
    waste during a full recycle.
    """

    if is_won(board):
        return True
    if find_foundation_move(board) is not None:
        return True
    if next(tableau_moves(board), None) is not None:
        return True
    for card in board.stock + board.waste:
        if _stock_card_playable(board, card):
            return True
    return False
