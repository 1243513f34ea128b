from .game import (
    Game, create_parser, main,
    logger, log_action,
)
from .models import Card, Deck, Board, PileRef, Move, ConservationError
from .rules import (
    SUIT_SYMBOLS, SUITS, RANKS, DECK_SIZE, TABLEAU_COLUMNS,
    can_place_on_foundation, can_place_on_tableau, is_valid_run, can_drop,
)
from .moves import apply_move, validate_move, check_conservation
from .dealer import deal, generate_board, solve
from .assist import Hint, is_won, find_hint, collect_moves, has_available_moves
from .drag import DragState, DropTarget, DropTargetRegistry, find_best_drop_target
from .events import EventBus, ScoringSink, Slot
from .scoring import ScoreTracker, CARD_POINTS
from .layout import BoardLayout

__all__ = [
    'Game', 'create_parser', 'main', 'logger', 'log_action',
    'Card', 'Deck', 'Board', 'PileRef', 'Move', 'ConservationError',
    'SUIT_SYMBOLS', 'SUITS', 'RANKS', 'DECK_SIZE', 'TABLEAU_COLUMNS',
    'can_place_on_foundation', 'can_place_on_tableau', 'is_valid_run', 'can_drop',
    'apply_move', 'validate_move', 'check_conservation',
    'deal', 'generate_board', 'solve',
    'Hint', 'is_won', 'find_hint', 'collect_moves', 'has_available_moves',
    'DragState', 'DropTarget', 'DropTargetRegistry', 'find_best_drop_target',
    'EventBus', 'ScoringSink', 'Slot',
    'ScoreTracker', 'CARD_POINTS',
    'BoardLayout',
]
