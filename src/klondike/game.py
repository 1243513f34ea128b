# game.py
"""Klondike game facade.

:class:`Game` is the object a front-end talks to.  It owns the current
:class:`~klondike.models.Board`, the undo history, the active drag, the
current hint and the "no moves" flag.

* Every change to the board goes through :meth:`Game._commit`, which checks
  card conservation *before* swapping the new board in.
* Undo keeps a JSON snapshot per state, so restoring a state is exact down
  to the ``moves`` counter and face-up flags.
* Illegal moves are declined (``False``/``None``), never raised.
* The module also carries a small command line front-end used by the
  ``klondike`` console script.
"""

from __future__ import annotations

import argparse
import logging
import random
from typing import Iterable

from .assist import Hint, collect_moves, find_hint, has_available_moves, is_won
from .dealer import MAX_DEAL_ATTEMPTS, deal, generate_board
from .drag import DROP_SENSITIVITY, DragState, DropTarget, DropTargetRegistry, find_best_drop_target
from .events import Position, ScoringSink
from .models import Board, Deck, Move, PileRef
from .moves import apply_move, validate_move
from .options import load_options
from .rules import SUIT_SYMBOLS, SUITS, TABLEAU_COLUMNS, is_valid_run, suit_symbol
from .scoring import ScoreTracker

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

# All game actions are appended to this file.  Every ``klondike.*`` module
# logs through a child of this logger.
LOG_FILE = 'klondike_game.log'

logger = logging.getLogger('klondike')
if not logger.handlers:
    handler = logging.FileHandler(LOG_FILE, encoding="utf-8")
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False


def log_action(action: str) -> None:
    """Log a game action."""

    logger.info(action)


HELP_TEXT = (
    "Commands: draw (d), undo (u), hint (h), collect (c), new, help, quit (q)\n"
    "Moves: <from> <to> [count]  piles are w, t1..t7, f♥ f♦ f♣ f♠ (or fh fd fc fs)"
)

SUIT_LETTERS = {'h': 'hearts', 'd': 'diamonds', 'c': 'clubs', 's': 'spades'}
COMMAND_ALIASES = {
    'd': 'draw', 'draw': 'draw',
    'u': 'undo', 'undo': 'undo',
    'h': 'hint', 'hint': 'hint',
    'c': 'collect', 'collect': 'collect',
    'new': 'new', 'help': 'help', '?': 'help',
    'q': 'quit', 'quit': 'quit',
}


class Game:
    """Encapsulates the state of one Klondike session."""

    def __init__(
        self,
        sink: ScoringSink | None = None,
        mode: str = 'solvable',
        auto_collect: bool = True,
        max_deal_attempts: int = MAX_DEAL_ATTEMPTS,
        sensitivity: float = DROP_SENSITIVITY,
    ) -> None:
        """Create a session holding an unshuffled deal.

        Call :meth:`new_game` to shuffle and deal for real.
        """

        self.sink = sink or ScoringSink()
        self.mode = mode
        self.auto_collect = auto_collect
        self.max_deal_attempts = max_deal_attempts
        self.sensitivity = sensitivity
        self.scores = ScoreTracker()
        self.targets = DropTargetRegistry()
        self.drag: DragState | None = None
        self.hint: Hint | None = None
        self.has_no_moves = False
        # Snapshots of every board state for undo
        self.snapshots: list[str] = []
        self.board = Board()
        self.load_board(deal(Deck().cards))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def new_game(self, mode: str | None = None, seed: int | None = None) -> Board:
        """Deal a fresh board and clear the undo history.

        ``mode`` is ``'random'`` or ``'solvable'``; ``seed`` makes the deal
        reproducible.
        """

        mode = mode or self.mode
        rng = random.Random(seed)
        board = generate_board(mode, rng, self.max_deal_attempts)
        self.load_board(board)
        log_action(f"New game ({mode}, seed={seed})")
        return board

    def load_board(self, board: Board) -> None:
        """Replace the whole game with ``board`` (history, hint and drag reset)."""

        board.check_conservation()
        board.is_won = is_won(board)
        self.board = board
        self.snapshots = [board.to_json()]
        self.drag = None
        self.hint = None
        self.has_no_moves = False
        self.scores.reset()
        self.check_for_available_moves()

    @property
    def is_won(self) -> bool:
        return self.board.is_won

    @property
    def can_undo(self) -> bool:
        return len(self.snapshots) > 1

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def _commit(self, board: Board, move: Move, position: Position = None) -> None:
        """Make ``board`` current after ``move`` and fire notifications."""

        board.check_conservation()
        was_won = self.board.is_won
        self.board = board
        self.snapshots.append(board.to_json())
        self.drag = None
        self.hint = None
        log_action(f"{move!r} (moves={board.moves})")

        if move.target.kind == 'foundation' and move.count == 1:
            card = board.foundations[move.target.key][-1]
            points = self.scores.award(card)
            self.sink.card_to_foundation(card, points, position)
        if board.is_won and not was_won:
            log_action(f"Game won in {board.moves} moves")
            self.sink.game_won(board)
        self.check_for_available_moves()

    def _play(self, move: Move, position: Position = None) -> bool:
        new = apply_move(self.board, move)
        if new is None:
            return False
        self._commit(new, move, position)
        return True

    def _tableau_face_up(self) -> bool:
        return all(c.face_up for col in self.board.tableau for c in col)

    def move(self, move: Move, position: Position = None) -> bool:
        """Apply ``move`` if it is legal.

        ``position`` is the screen point reported with a foundation
        notification.  Returns ``False`` and leaves everything untouched when
        the move is declined.
        """

        if not self._play(move, position):
            return False
        if self.auto_collect and not self.board.is_won and self._tableau_face_up():
            self.collect_all_available()
        return True

    def draw_card(self) -> bool:
        """Draw one card to the waste, recycling the waste when the stock is empty."""

        return self.move(Move.draw())

    def undo(self) -> bool:
        """Revert the most recent move.  Returns ``False`` if there is none."""

        if not self.can_undo:
            return False
        self.snapshots.pop()
        self.board = Board.from_json(self.snapshots[-1])
        self.drag = None
        self.hint = None
        log_action(f"Undo (moves={self.board.moves})")
        self.check_for_available_moves()
        return True

    def collect_all_available(self) -> list[Move]:
        """Move every card that can go to a foundation, one move at a time."""

        applied = []
        for move in collect_moves(self.board):
            if not self._play(move):  # pragma: no cover - plan comes from this board
                break
            applied.append(move)
        if applied:
            log_action(f"Collected {len(applied)} cards")
        return applied

    # ------------------------------------------------------------------
    # Dragging
    # ------------------------------------------------------------------
    def start_drag(self, source: PileRef, index: int | None = None) -> DragState | None:
        """Pick up cards from ``source``.

        For a tableau column ``index`` selects the first card of the run
        (default: the top card).  Returns ``None`` when nothing there may be
        picked up.
        """

        self.drag = None
        if source.kind == 'stock':
            return None
        try:
            pile = self.board.pile(source)
        except ValueError:
            return None
        if not pile:
            return None
        top = len(pile) - 1
        if index is None:
            index = top
        if index < 0 or index > top or (source.kind != 'tableau' and index != top):
            return None
        cards = pile[index:]
        if not is_valid_run(cards):
            return None
        self.drag = DragState(cards, source)
        return self.drag

    def cancel_drag(self) -> None:
        self.drag = None

    def _drag_is_current(self, drag: DragState | None) -> bool:
        """Return ``True`` if ``drag`` still holds the top cards of its source."""

        if drag is None:
            return False
        pile = self.board.pile(drag.source)
        count = len(drag.dragged_cards)
        if count > len(pile):
            return False
        held = [c.id for c in drag.dragged_cards]
        if [c.id for c in pile[-count:]] != held:
            logger.info("Stale drag of %r dropped", drag)
            return False
        return True

    def attempt_drop(
        self,
        drag_rect,
        pointer: tuple[float, float],
        targets: Iterable[DropTarget] | DropTargetRegistry | None = None,
    ) -> bool:
        """Drop the dragged run on the best target under ``drag_rect``.

        The drag ends either way; when no target qualifies the board is left
        exactly as it was.
        """

        drag = self.drag
        self.drag = None
        if not self._drag_is_current(drag):
            return False
        target = find_best_drop_target(
            drag_rect,
            pointer,
            drag,
            self.board,
            self.targets if targets is None else targets,
            self.sensitivity,
        )
        if target is None:
            logger.info("Drop rejected for %r", drag)
            return False
        return self.move(Move(drag.source, target.pile, len(drag.dragged_cards)), pointer)

    def drop_on(self, target: PileRef, position: Position = None) -> bool:
        """Drop the dragged run straight onto ``target`` (tap-to-move)."""

        drag = self.drag
        self.drag = None
        if not self._drag_is_current(drag):
            return False
        return self.move(Move(drag.source, target, len(drag.dragged_cards)), position)

    # ------------------------------------------------------------------
    # Hints and detection
    # ------------------------------------------------------------------
    def get_hint(self) -> Hint | None:
        self.hint = find_hint(self.board)
        return self.hint

    def clear_hint(self) -> None:
        self.hint = None

    def check_for_available_moves(self) -> bool:
        """Update and return :attr:`has_no_moves`."""

        stuck = not self.board.is_won and not has_available_moves(self.board)
        if stuck and not self.has_no_moves:
            log_action("No moves available")
            self.has_no_moves = True
            self.sink.no_moves(self.board)
        self.has_no_moves = stuck
        return stuck

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------
    def to_json(self) -> str:
        return self.board.to_json()

    def from_json(self, s: str) -> None:
        self.load_board(Board.from_json(s))

    # ------------------------------------------------------------------
    # Command line front-end
    # ------------------------------------------------------------------
    @staticmethod
    def parse_pile(token: str) -> PileRef | None:
        t = token.strip().lower()
        if t == 'w':
            return PileRef.waste()
        if t.startswith('t') and t[1:].isdigit():
            idx = int(t[1:]) - 1
            if 0 <= idx < TABLEAU_COLUMNS:
                return PileRef.tableau(idx)
            return None
        if t.startswith('f') and len(t) == 2:
            suit = SUIT_LETTERS.get(t[1]) or SUIT_SYMBOLS.get(t[1])
            if suit:
                return PileRef.foundation(suit)
        return None

    def parse_input(self, inp: str):
        """Parse a command line into ``(command, payload)``.

        Moves come back as ``('move', (source, target, count))`` where
        ``count`` is ``None`` when omitted.
        """

        parts = inp.strip().split()
        if not parts:
            return 'error', 'Empty input'
        if len(parts) == 1:
            cmd = COMMAND_ALIASES.get(parts[0].lower())
            if cmd:
                return cmd, None
            return 'error', f"Unknown command '{parts[0]}'"
        if len(parts) > 3:
            return 'error', 'Too many arguments'

        src = self.parse_pile(parts[0])
        if src is None:
            return 'error', f"Unknown pile '{parts[0]}'"
        dst = self.parse_pile(parts[1])
        if dst is None:
            return 'error', f"Unknown pile '{parts[1]}'"
        count = None
        if len(parts) == 3:
            try:
                count = int(parts[2])
            except ValueError:
                return 'error', 'Invalid count'
            if count < 1:
                return 'error', 'Invalid count'
        return 'move', (src, dst, count)

    def resolve_count(self, source: PileRef, target: PileRef) -> int:
        """Return the largest legal run size for ``source`` -> ``target`` (1 if none)."""

        if source.kind != 'tableau':
            return 1
        column = self.board.pile(source)
        for count in range(len(column), 1, -1):
            if validate_move(self.board, Move(source, target, count))[0]:
                return count
        return 1

    def render(self) -> str:
        """Return a plain text picture of the board."""

        b = self.board
        waste = repr(b.waste[-1]) if b.waste else '--'
        found = '  '.join(
            f"{suit_symbol(s)} {b.foundations[s][-1]!r}" if b.foundations[s] else f"{suit_symbol(s)} --"
            for s in SUITS
        )
        lines = [f"Stock: [{len(b.stock)}]  Waste: {waste}  Foundations: {found}  Moves: {b.moves}"]
        for i, col in enumerate(b.tableau, 1):
            cards = ' '.join(repr(c) if c.face_up else '##' for c in col)
            lines.append(f"t{i}: {cards}")
        return '\n'.join(lines)

    def handle_command(self, cmd: str, payload) -> bool:
        """Run one parsed command.  Returns ``False`` when the player quits."""

        if cmd == 'quit':
            log_action('Game quit')
            return False
        if cmd == 'help':
            print(HELP_TEXT)
        elif cmd == 'error':
            print(payload)
        elif cmd == 'draw':
            if not self.draw_card():
                print('Nothing left to draw')
        elif cmd == 'undo':
            if not self.undo():
                print('Nothing to undo')
        elif cmd == 'hint':
            hint = self.get_hint()
            print(f"Hint: {hint.move!r}" if hint else 'Hint: no moves')
        elif cmd == 'collect':
            print(f"Collected {len(self.collect_all_available())} cards")
        elif cmd == 'new':
            self.new_game()
        elif cmd == 'move':
            src, dst, count = payload
            if count is None:
                count = self.resolve_count(src, dst)
            if not self.move(Move(src, dst, count)):
                print('Invalid move')
        return True

    def play(self, seed: int | None = None) -> None:
        """Deal a game and run the command loop until the player quits."""

        self.new_game(seed=seed)
        while True:
            print(self.render())
            if self.board.is_won:
                print('You won!')
            elif self.has_no_moves:
                print('No moves left. Type "new" or "undo".')
            try:
                inp = input("> ")
            except (EOFError, OSError):
                logger.info('Input unsupported; quitting')
                return
            cmd, payload = self.parse_input(inp)
            if not self.handle_command(cmd, payload):
                return


def create_parser(options: dict | None = None) -> argparse.ArgumentParser:
    opts = options if options is not None else load_options()
    parser = argparse.ArgumentParser(description='Play Klondike solitaire in the terminal')
    parser.add_argument('--mode', default=opts['deal_mode'], choices=['random', 'solvable'],
                        help='deal mode')
    parser.add_argument('--seed', type=int, default=None, help='seed for a reproducible deal')
    parser.add_argument('--max-attempts', type=int, default=opts['max_deal_attempts'],
                        help='deals tried before a solvable game gives up')
    parser.add_argument('--no-auto-collect', dest='auto_collect', action='store_false',
                        default=opts['auto_collect'],
                        help='do not collect cards automatically once every card is face up')
    parser.add_argument('--sensitivity', type=float, default=opts['drop_sensitivity'],
                        help='overlap difference (px^2) below which drops go to the nearest pile')
    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``klondike`` command."""

    args = create_parser().parse_args(argv)
    game = Game(
        mode=args.mode,
        auto_collect=args.auto_collect,
        max_deal_attempts=args.max_attempts,
        sensitivity=args.sensitivity,
    )
    game.play(seed=args.seed)


if __name__ == '__main__':
    main()
