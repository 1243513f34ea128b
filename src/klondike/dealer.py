"""Dealing new games, optionally guaranteed to be winnable.

A ``'solvable'`` deal is only returned after :func:`solve` has played it to a
win with the same executor the game uses, so the returned move list is a
constructive proof that the layout can be completed.
"""

from __future__ import annotations

import logging
import random

from .models import Board, Card, Deck, Move, PileRef
from .moves import apply_move
from .rules import TABLEAU_COLUMNS, can_drop, movable_run_start

logger = logging.getLogger(__name__)

DEAL_MODES = ('random', 'solvable')

# Bounds for the solvability search
MAX_DEAL_ATTEMPTS = 500
MAX_SOLVER_ITERATIONS = 2000
MAX_STOCK_CYCLES = 4


def deal(cards: list[Card]) -> Board:
    """Lay out ``cards`` in the standard Klondike pattern.

    Column ``i`` receives ``i + 1`` cards with only the last one face up; the
    remaining 24 cards form the face-down stock, drawn from its end.
    """

    if len(cards) != 52:
        raise ValueError(f"A deal needs 52 cards, got {len(cards)}")
    board = Board()
    idx = 0
    for col in range(TABLEAU_COLUMNS):
        for row in range(col + 1):
            card = cards[idx].copy()
            card.face_up = row == col
            board.tableau[col].append(card)
            idx += 1
    board.stock = [Card(c.suit, c.rank, False) for c in cards[idx:]]
    return board


def _random_board(rng: random.Random) -> Board:
    deck = Deck()
    deck.shuffle(rng)
    return deal(deck.cards)


def _next_solver_move(board: Board) -> Move | None:
    """Pick the next greedy move, not counting draws."""

    columns = [PileRef.tableau(i) for i in range(len(board.tableau))]

    for source in columns + [PileRef.waste()]:
        pile = board.pile(source)
        if pile and pile[-1].face_up and can_drop(board, [pile[-1]], PileRef.foundation(pile[-1].suit))[0]:
            return Move(source, PileRef.foundation(pile[-1].suit))

    # Only shift runs that uncover a hidden card or clear a column.
    for source in columns:
        column = board.pile(source)
        start = movable_run_start(column)
        if start is None:
            continue
        reveals = start > 0 and not column[start - 1].face_up
        run = column[start:]
        for target in columns:
            if target == source:
                continue
            empty_target = not board.pile(target)
            if empty_target and not reveals:
                continue
            if not empty_target and not (reveals or start == 0):
                continue
            if can_drop(board, run, target)[0]:
                return Move(source, target, len(run))

    if board.waste:
        card = board.waste[-1]
        for target in columns:
            if can_drop(board, [card], target)[0]:
                return Move(PileRef.waste(), target)
    return None


def solve(board: Board,
          max_iterations: int = MAX_SOLVER_ITERATIONS,
          max_stock_cycles: int = MAX_STOCK_CYCLES) -> list[Move] | None:
    """Try to win ``board`` by greedy forward simulation.

    Returns the list of moves that wins the game, or ``None`` if the greedy
    player gets stuck.  ``board`` itself is left untouched.
    """

    sim = board
    solution: list[Move] = []
    cycles = 0
    progress_since_cycle = True
    for _ in range(max_iterations):
        if sim.is_won:
            return solution
        move = _next_solver_move(sim)
        if move is None:
            if sim.stock:
                move = Move.draw()
            elif sim.waste and cycles < max_stock_cycles and progress_since_cycle:
                cycles += 1
                progress_since_cycle = False
                move = Move.draw()
            else:
                return None
        else:
            progress_since_cycle = True
        nxt = apply_move(sim, move)
        if nxt is None:  # pragma: no cover - planner and executor share rules
            return None
        solution.append(move)
        sim = nxt
    return solution if sim.is_won else None


def generate_board(mode: str = 'random',
                   rng: random.Random | None = None,
                   max_attempts: int = MAX_DEAL_ATTEMPTS) -> Board:
    """Return a freshly dealt board for ``mode``.

    ``'solvable'`` reshuffles until :func:`solve` wins the deal.  When no
    winnable deal turns up within ``max_attempts`` the last random deal is
    returned instead of blocking.
    """

    if mode not in DEAL_MODES:
        raise ValueError(f"Unknown deal mode {mode!r}")
    rng = rng or random.Random()
    if mode == 'random':
        return _random_board(rng)

    board = None
    for attempt in range(1, max_attempts + 1):
        board = _random_board(rng)
        solution = solve(board)
        if solution is not None:
            logger.info("Solvable deal found on attempt %d (%d moves)", attempt, len(solution))
            return board
    logger.warning("No solvable deal in %d attempts; using a random deal", max_attempts)
    return board if board is not None else _random_board(rng)
