"""Klondike move rules.

:func:`is_valid_move` is the single legality check. The ``find_*`` helpers
scan the playfield for a legal placement so that click and drop handlers can
validate before asking the engine to move anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from klondike.cards import Card, color_of, rank_index
from klondike.playfield import PileType, Playfield


@dataclass(frozen=True)
class Move:
    card: Card
    target_pile_type: PileType
    target_pile_index: int
    source_pile_type: Optional[PileType] = None
    source_pile_index: Optional[int] = None
    source_card_index: Optional[int] = None


def _is_top_of_source(card: Card, playfield: Playfield) -> bool:
    pile_type = PileType.coerce(card.pile_type)
    if pile_type is None:
        return False
    index = card.pile_index
    if pile_type.is_multi and (index is None or not 0 <= index < playfield.pile_count(pile_type)):
        return False
    pile = playfield.pile(pile_type, index)
    return card.card_index is not None and 0 <= card.card_index == len(pile) - 1


def is_valid_move(
    source: Optional[Card],
    target_top: Optional[Card],
    target_pile_type,
    playfield: Optional[Playfield] = None,
) -> bool:
    """Return True when ``source`` may be placed on a pile whose top is ``target_top``.

    ``target_top`` is None for an empty pile. When a playfield is supplied and
    the source card carries its location, foundation moves also require the
    source to be the last card of its pile.
    """
    if source is None:
        return False

    pile_type = PileType.coerce(target_pile_type)

    if pile_type is PileType.TABLEAU:
        if target_top is None:
            return source.rank == "king"
        return (
            color_of(target_top.suit) != color_of(source.suit)
            and rank_index(source.rank) + 1 == rank_index(target_top.rank)
        )

    if pile_type is PileType.FOUNDATION:
        if playfield is not None and source.pile_type is not None:
            if not _is_top_of_source(source, playfield):
                return False
        if target_top is None:
            return source.rank == "ace"
        return (
            target_top.suit == source.suit
            and rank_index(source.rank) - 1 == rank_index(target_top.rank)
        )

    return False


def find_foundation_target(playfield: Playfield, card: Card) -> Optional[int]:
    for fi, pile in enumerate(playfield.foundation):
        top = pile[-1] if pile else None
        if is_valid_move(card, top, PileType.FOUNDATION, playfield):
            return fi
    return None


def find_tableau_run(playfield: Playfield, pile_index: int, target_top: Optional[Card]) -> Optional[int]:
    """
    Highest face-up card index in a tableau pile that can go onto ``target_top``.
    A card already at the bottom of its pile is never sent to an empty pile.
    """
    if not 0 <= pile_index < len(playfield.tableau):
        return None
    pile = playfield.tableau[pile_index]
    lowest = 1 if target_top is None else 0
    for ci in range(len(pile) - 1, lowest - 1, -1):
        card = pile[ci]
        if card.face_up and is_valid_move(card, target_top, PileType.TABLEAU):
            return ci
    return None


def find_click_move(playfield: Playfield, card: Card) -> Optional[Move]:
    """Pick where a clicked card should go: a foundation first, then the tableau."""
    source_type = PileType.coerce(card.pile_type)
    if source_type is not PileType.FOUNDATION:
        fi = find_foundation_target(playfield, card)
        if fi is not None:
            return Move(card, PileType.FOUNDATION, fi)

    if source_type is PileType.TABLEAU and card.pile_index is not None:
        if not 0 <= card.pile_index < len(playfield.tableau):
            return None
        for ti, pile in enumerate(playfield.tableau):
            if ti == card.pile_index:
                continue
            top = pile[-1] if pile else None
            ci = find_tableau_run(playfield, card.pile_index, top)
            if ci is not None:
                moving = playfield.located(PileType.TABLEAU, card.pile_index, ci)
                return Move(moving, PileType.TABLEAU, ti, PileType.TABLEAU, card.pile_index, ci)
        return None

    for ti, pile in enumerate(playfield.tableau):
        top = pile[-1] if pile else None
        if is_valid_move(card, top, PileType.TABLEAU):
            return Move(card, PileType.TABLEAU, ti)
    return None


def find_drop_move(playfield: Playfield, card: Card, target_pile_type, target_pile_index: int) -> Optional[Move]:
    """Validate a card dropped on a pile, searching tableau sources for a movable run."""
    pile_type = PileType.coerce(target_pile_type)
    if pile_type is None or not pile_type.is_multi:
        return None
    if not 0 <= target_pile_index < playfield.pile_count(pile_type):
        return None
    target_top = playfield.top(pile_type, target_pile_index)

    source_type = PileType.coerce(card.pile_type)
    if pile_type is PileType.TABLEAU and source_type is PileType.TABLEAU and card.pile_index is not None:
        if card.pile_index == target_pile_index or not 0 <= card.pile_index < len(playfield.tableau):
            return None
        ci = find_tableau_run(playfield, card.pile_index, target_top)
        if ci is None:
            return None
        moving = playfield.located(PileType.TABLEAU, card.pile_index, ci)
        return Move(moving, PileType.TABLEAU, target_pile_index, PileType.TABLEAU, card.pile_index, ci)

    if is_valid_move(card, target_top, pile_type, playfield):
        return Move(card, pile_type, target_pile_index)
    return None
