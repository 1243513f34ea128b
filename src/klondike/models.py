"""Cards, piles and the board state shared by every part of the engine."""

from __future__ import annotations

import json
import random
import time
from collections import Counter

from .rules import (
    DECK_SIZE,
    RANKS,
    SUITS,
    TABLEAU_COLUMNS,
    rank_value,
    suit_color,
    suit_symbol,
)

PILE_KINDS = ('tableau', 'foundation', 'waste', 'stock')


class ConservationError(ValueError):
    """Raised when a board no longer holds exactly the 52 distinct cards."""


class Card:
    """A playing card.

    ``suit`` and ``rank`` never change once the card exists.  ``face_up`` is
    the only attribute the engine toggles.
    """

    def __init__(self, suit: str, rank: str, face_up: bool = False):
        if suit not in SUITS:
            raise ValueError(f"Unknown suit {suit!r}")
        if rank not in RANKS:
            raise ValueError(f"Unknown rank {rank!r}")
        self.suit = suit
        self.rank = rank
        self.face_up = face_up

    @property
    def id(self) -> str:
        return f"{self.suit}-{self.rank}"

    @property
    def color(self) -> str:
        return suit_color(self.suit)

    @property
    def value(self) -> int:
        return rank_value(self.rank)

    def __repr__(self) -> str:
        """Return the short form ``<rank><symbol>``."""

        return f"{self.rank}{suit_symbol(self.suit)}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.suit == other.suit and self.rank == other.rank

    def __hash__(self) -> int:
        return hash((self.suit, self.rank))

    def copy(self) -> "Card":
        return Card(self.suit, self.rank, self.face_up)

    def to_dict(self) -> dict:
        return {"suit": self.suit, "rank": self.rank, "face_up": self.face_up}

    @staticmethod
    def from_dict(d: dict) -> "Card":
        return Card(d["suit"], d["rank"], d.get("face_up", False))


class Deck:
    """A standard 52-card deck."""

    def __init__(self) -> None:
        # Canonical order so a seeded shuffle reproduces the same game.
        self.cards = [Card(s, r) for s in SUITS for r in RANKS]

    def shuffle(self, rng: random.Random | None = None) -> None:
        """Shuffle the deck in place (uniform Fisher-Yates)."""

        (rng or random).shuffle(self.cards)


class PileRef:
    """Names one pile on the board.

    ``key`` is the column index for ``tableau``, the suit for ``foundation``
    and ``None`` for ``waste`` and ``stock``.
    """

    __slots__ = ("kind", "key")

    def __init__(self, kind: str, key=None):
        if kind not in PILE_KINDS:
            raise ValueError(f"Unknown pile kind {kind!r}")
        if kind == 'tableau' and not isinstance(key, int):
            raise ValueError("A tableau pile needs a column index")
        if kind == 'foundation' and key not in SUITS:
            raise ValueError(f"Unknown foundation suit {key!r}")
        if kind in ('waste', 'stock'):
            key = None
        self.kind = kind
        self.key = key

    @classmethod
    def tableau(cls, index: int) -> "PileRef":
        return cls('tableau', index)

    @classmethod
    def foundation(cls, suit: str) -> "PileRef":
        return cls('foundation', suit)

    @classmethod
    def waste(cls) -> "PileRef":
        return cls('waste')

    @classmethod
    def stock(cls) -> "PileRef":
        return cls('stock')

    def __repr__(self) -> str:
        if self.key is None:
            return self.kind
        return f"{self.kind}[{self.key}]"

    def __eq__(self, other) -> bool:
        if not isinstance(other, PileRef):
            return NotImplemented
        return self.kind == other.kind and self.key == other.key

    def __hash__(self) -> int:
        return hash((self.kind, self.key))

    def to_dict(self) -> dict:
        return {"kind": self.kind, "key": self.key}

    @staticmethod
    def from_dict(d: dict) -> "PileRef":
        return PileRef(d["kind"], d.get("key"))


class Move:
    """A move of ``count`` cards from the top of ``source`` onto ``target``.

    Drawing from the stock is the move ``stock -> waste``; when the stock is
    empty the same move recycles the waste.
    """

    __slots__ = ("source", "target", "count")

    def __init__(self, source: PileRef, target: PileRef, count: int = 1):
        self.source = source
        self.target = target
        self.count = count

    @classmethod
    def draw(cls) -> "Move":
        return cls(PileRef.stock(), PileRef.waste(), 1)

    @property
    def is_draw(self) -> bool:
        return self.source.kind == 'stock' and self.target.kind == 'waste'

    def __repr__(self) -> str:
        if self.is_draw:
            return "Move(draw)"
        return f"Move({self.source!r} -> {self.target!r} x{self.count})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Move):
            return NotImplemented
        return (self.source, self.target, self.count) == (other.source, other.target, other.count)

    def __hash__(self) -> int:
        return hash((self.source, self.target, self.count))

    def to_dict(self) -> dict:
        return {
            "source": self.source.to_dict(),
            "target": self.target.to_dict(),
            "count": self.count,
        }

    @staticmethod
    def from_dict(d: dict) -> "Move":
        return Move(PileRef.from_dict(d["source"]), PileRef.from_dict(d["target"]), d.get("count", 1))


class Board:
    """The complete state of one Klondike game."""

    def __init__(self) -> None:
        self.tableau: list[list[Card]] = [[] for _ in range(TABLEAU_COLUMNS)]
        self.foundations: dict[str, list[Card]] = {s: [] for s in SUITS}
        self.stock: list[Card] = []
        self.waste: list[Card] = []
        self.moves = 0
        self.is_won = False
        self.start_time: float | None = time.time()

    def pile(self, ref: PileRef) -> list[Card]:
        """Return the list backing the pile named by ``ref``."""

        if ref.kind == 'tableau':
            if not 0 <= ref.key < len(self.tableau):
                raise ValueError(f"No tableau column {ref.key}")
            return self.tableau[ref.key]
        if ref.kind == 'foundation':
            return self.foundations[ref.key]
        if ref.kind == 'waste':
            return self.waste
        return self.stock

    def all_cards(self) -> list[Card]:
        cards = [c for col in self.tableau for c in col]
        for suit in SUITS:
            cards.extend(self.foundations[suit])
        cards.extend(self.stock)
        cards.extend(self.waste)
        return cards

    def foundation_count(self) -> int:
        return sum(len(p) for p in self.foundations.values())

    def find_card(self, card_id: str) -> tuple[PileRef, int] | None:
        """Return ``(pile, index)`` of the card with ``card_id``."""

        for i, col in enumerate(self.tableau):
            for j, c in enumerate(col):
                if c.id == card_id:
                    return PileRef.tableau(i), j
        for suit, pile in self.foundations.items():
            for j, c in enumerate(pile):
                if c.id == card_id:
                    return PileRef.foundation(suit), j
        for ref in (PileRef.waste(), PileRef.stock()):
            for j, c in enumerate(self.pile(ref)):
                if c.id == card_id:
                    return ref, j
        return None

    def check_conservation(self) -> None:
        """Raise :class:`ConservationError` unless all 52 cards are present once."""

        ids = [c.id for c in self.all_cards()]
        if len(ids) != DECK_SIZE or len(set(ids)) != DECK_SIZE:
            dupes = sorted(i for i, n in Counter(ids).items() if n > 1)
            missing = sorted({f"{s}-{r}" for s in SUITS for r in RANKS} - set(ids))
            raise ConservationError(
                f"Board holds {len(ids)} cards; duplicates={dupes} missing={missing}"
            )

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "tableau": [[c.to_dict() for c in col] for col in self.tableau],
            "foundations": {s: [c.to_dict() for c in p] for s, p in self.foundations.items()},
            "stock": [c.to_dict() for c in self.stock],
            "waste": [c.to_dict() for c in self.waste],
            "moves": self.moves,
            "is_won": self.is_won,
            "start_time": self.start_time,
        }

    @staticmethod
    def from_dict(data: dict) -> "Board":
        board = Board()
        board.tableau = [[Card.from_dict(c) for c in col] for col in data.get("tableau", [])]
        while len(board.tableau) < TABLEAU_COLUMNS:
            board.tableau.append([])
        foundations = data.get("foundations", {})
        board.foundations = {s: [Card.from_dict(c) for c in foundations.get(s, [])] for s in SUITS}
        board.stock = [Card.from_dict(c) for c in data.get("stock", [])]
        board.waste = [Card.from_dict(c) for c in data.get("waste", [])]
        board.moves = data.get("moves", 0)
        board.is_won = data.get("is_won", False)
        board.start_time = data.get("start_time")
        return board

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @staticmethod
    def from_json(s: str) -> "Board":
        return Board.from_dict(json.loads(s))

    def clone(self) -> "Board":
        """Return a deep copy that shares no card objects with ``self``."""

        board = Board()
        board.tableau = [[c.copy() for c in col] for col in self.tableau]
        board.foundations = {s: [c.copy() for c in p] for s, p in self.foundations.items()}
        board.stock = [c.copy() for c in self.stock]
        board.waste = [c.copy() for c in self.waste]
        board.moves = self.moves
        board.is_won = self.is_won
        board.start_time = self.start_time
        return board
