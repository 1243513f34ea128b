"""Drag state and drop target resolution.

The resolver works purely on rectangles handed in by the UI.  It never asks
a window or document for geometry; callers refresh the registered bounds
right before a query and the resolver only reads them.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Tuple, Union

import pygame

from .models import Board, Card, PileRef
from .rules import can_drop

logger = logging.getLogger(__name__)

# Intersection areas closer than this (in square pixels) count as a tie
DROP_SENSITIVITY = 100

RectLike = Union[pygame.Rect, Tuple[int, int, int, int]]


class DragState:
    """An in-progress pointer gesture carrying a run of cards."""

    def __init__(self, cards: List[Card], source: PileRef) -> None:
        self.is_dragging = True
        self.dragged_cards = list(cards)
        self.source = source

    @property
    def source_type(self) -> str:
        return self.source.kind

    @property
    def source_index(self) -> Optional[int]:
        return self.source.key if self.source.kind == 'tableau' else None

    @property
    def source_foundation(self) -> Optional[str]:
        return self.source.key if self.source.kind == 'foundation' else None

    def __repr__(self) -> str:
        return f"DragState({self.dragged_cards!r} from {self.source!r})"


class DropTarget:
    """A pile that can receive a drop, with its on-screen rectangle.

    ``bounds`` is an optional callable returning the current rectangle; it is
    consulted by :meth:`refresh` so layout changes are picked up on demand.
    """

    def __init__(
        self,
        kind: str,
        key,
        rect: Optional[RectLike] = None,
        bounds: Optional[Callable[[], RectLike]] = None,
    ) -> None:
        if kind not in ('tableau', 'foundation'):
            raise ValueError(f"Drop targets are tableau or foundation piles, not {kind!r}")
        self.pile = PileRef(kind, key)
        self.bounds = bounds
        self.rect = pygame.Rect(rect) if rect is not None else pygame.Rect(0, 0, 0, 0)
        if bounds is not None and rect is None:
            self.refresh()

    @property
    def kind(self) -> str:
        return self.pile.kind

    @property
    def key(self):
        return self.pile.key

    def refresh(self) -> None:
        if self.bounds is not None:
            self.rect = pygame.Rect(self.bounds())

    def __repr__(self) -> str:
        return f"DropTarget({self.pile!r}, {tuple(self.rect)})"


class DropTargetRegistry:
    """Registered drop targets, kept in registration order."""

    def __init__(self) -> None:
        self._targets: List[DropTarget] = []

    def register(self, target: DropTarget) -> DropTarget:
        """Add ``target``, replacing any target already registered for its pile."""
        for i, existing in enumerate(self._targets):
            if existing.pile == target.pile:
                self._targets[i] = target
                return target
        self._targets.append(target)
        return target

    def unregister(self, pile: PileRef) -> bool:
        before = len(self._targets)
        self._targets = [t for t in self._targets if t.pile != pile]
        return len(self._targets) != before

    def refresh(self) -> None:
        for target in self._targets:
            target.refresh()

    def clear(self) -> None:
        self._targets.clear()

    def __iter__(self):
        return iter(list(self._targets))

    def __len__(self) -> int:
        return len(self._targets)


def intersection_area(a: pygame.Rect, b: pygame.Rect) -> int:
    clip = a.clip(b)
    return clip.width * clip.height


def find_best_drop_target(
    drag_rect: RectLike,
    pointer: Tuple[float, float],
    drag: DragState,
    board: Board,
    targets: Union[Iterable[DropTarget], DropTargetRegistry],
    sensitivity: float = DROP_SENSITIVITY,
) -> Optional[DropTarget]:
    """Return the single best legal target for ``drag`` or ``None``.

    Candidates must overlap ``drag_rect``, differ from the drag source and
    accept the dragged run.  Every candidate whose overlap is within
    ``sensitivity`` of the largest overlap stays in the running, and of those
    the target whose centre is nearest ``pointer`` wins.  Ties keep
    registration order, so the result is fully deterministic.
    """

    if isinstance(targets, DropTargetRegistry):
        targets.refresh()
        targets = list(targets)
    else:
        targets = list(targets)
        for target in targets:
            target.refresh()

    drag_rect = pygame.Rect(drag_rect)
    pointer_vec = pygame.math.Vector2(pointer)
    candidates: List[Tuple[DropTarget, int, float]] = []
    for target in targets:
        if not drag_rect.colliderect(target.rect):
            continue
        if target.pile == drag.source:
            continue
        ok, msg = can_drop(board, drag.dragged_cards, target.pile)
        if not ok:
            logger.debug("Filtered %r: %s", target.pile, msg)
            continue
        area = intersection_area(drag_rect, target.rect)
        dist = pointer_vec.distance_to(target.rect.center)
        candidates.append((target, area, dist))

    if not candidates:
        return None
    largest = max(area for _, area, _ in candidates)
    close = [cand for cand in candidates if largest - cand[1] <= sensitivity]
    # min() keeps the first of equal distances, i.e. registration order
    return min(close, key=lambda cand: cand[2])[0]
