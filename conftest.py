import os
import sys

import pytest

# Add repository root and ``src`` directory to Python path for tests
ROOT_DIR = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, ROOT_DIR)
sys.path.insert(0, os.path.join(ROOT_DIR, "src"))

# Geometry only; no window is ever opened
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from klondike import Board, Card, Game  # noqa: E402
from klondike.rules import RANKS, SUITS  # noqa: E402


def c(text: str, face_up: bool = True) -> Card:
    """Build a card from short notation such as ``"Qh"`` or ``"10s"``."""
    suits = {'h': 'hearts', 'd': 'diamonds', 'c': 'clubs', 's': 'spades'}
    return Card(suits[text[-1]], text[:-1], face_up)


def make_board(tableau=None, foundations=None, waste=None) -> Board:
    """Return a conserving board with the given piles.

    ``tableau`` holds up to seven lists of cards, ``foundations`` maps a suit
    to the highest rank already played.  Every card not placed elsewhere ends
    up face down in the stock in canonical order.
    """
    board = Board()
    used = set()
    for i, col in enumerate(tableau or []):
        board.tableau[i] = list(col)
        used.update(card.id for card in col)
    for suit, top in (foundations or {}).items():
        ranks = RANKS[: RANKS.index(top) + 1]
        board.foundations[suit] = [Card(suit, r, True) for r in ranks]
        used.update(f"{suit}-{r}" for r in ranks)
    board.waste = list(waste or [])
    used.update(card.id for card in board.waste)
    board.stock = [Card(s, r) for s in SUITS for r in RANKS if f"{s}-{r}" not in used]
    return board


def full_foundations_except(*card_ids: str) -> dict:
    """Return foundations holding every card below the lowest excluded rank per suit."""
    tops = {}
    for suit in SUITS:
        excluded = [RANKS.index(cid.split('-')[1]) for cid in card_ids if cid.startswith(suit + '-')]
        limit = min(excluded) if excluded else len(RANKS)
        if limit > 0:
            tops[suit] = RANKS[limit - 1]
    return tops


@pytest.fixture
def game():
    """A game with auto-collect off, holding the unshuffled deal."""
    return Game(mode='random', auto_collect=False)


@pytest.fixture(autouse=True)
def no_user_options(monkeypatch, tmp_path):
    """Keep option reads and writes out of the real home directory."""
    import klondike.options as options

    monkeypatch.setattr(options, "USER_DIR", tmp_path / ".klondike")
    monkeypatch.setattr(options, "OPTIONS_FILE", tmp_path / ".klondike" / "options.json")
