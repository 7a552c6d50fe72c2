"""Playfield record: draw, waste, four foundations and seven tableau piles.

Playfields are immutable. Every change builds a new record with
:meth:`Playfield.with_piles`; untouched piles and the (frozen) cards inside
them are shared between the old and new record, which is what lets the undo
history keep plain references instead of deep copies.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union

from klondike.cards import Card

FOUNDATION_COUNT = 4
TABLEAU_COUNT = 7

Pile = Tuple[Card, ...]
PileValue = Union[Pile, Tuple[Pile, ...]]


class PileType(str, Enum):
    DRAW = "draw"
    WASTE = "waste"
    FOUNDATION = "foundation"
    TABLEAU = "tableau"

    @property
    def is_multi(self) -> bool:
        """Foundation and tableau hold several indexed piles."""
        return self in (PileType.FOUNDATION, PileType.TABLEAU)

    @classmethod
    def coerce(cls, value) -> Optional["PileType"]:
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


def _pile(cards: Iterable[Card]) -> Pile:
    return tuple(c.unlocated() for c in cards)


@dataclass(frozen=True)
class Playfield:
    draw: Pile = ()
    waste: Pile = ()
    foundation: Tuple[Pile, ...] = ((),) * FOUNDATION_COUNT
    tableau: Tuple[Pile, ...] = ((),) * TABLEAU_COUNT

    @classmethod
    def empty(cls) -> "Playfield":
        return cls()

    @classmethod
    def build(cls, draw=(), waste=(), foundation=None, tableau=None) -> "Playfield":
        """Create a playfield from any iterables of cards."""
        foundation = list(foundation or [])
        tableau = list(tableau or [])
        foundation += [[]] * (FOUNDATION_COUNT - len(foundation))
        tableau += [[]] * (TABLEAU_COUNT - len(tableau))
        return cls(
            draw=_pile(draw),
            waste=_pile(waste),
            foundation=tuple(_pile(p) for p in foundation[:FOUNDATION_COUNT]),
            tableau=tuple(_pile(p) for p in tableau[:TABLEAU_COUNT]),
        )

    # ----- Accessors -----
    def get(self, pile_type: PileType) -> PileValue:
        return getattr(self, PileType(pile_type).value)

    def pile(self, pile_type: PileType, index: Optional[int] = None) -> Pile:
        pile_type = PileType(pile_type)
        value = self.get(pile_type)
        if pile_type.is_multi:
            return value[index or 0]
        return value

    def pile_count(self, pile_type: PileType) -> int:
        pile_type = PileType(pile_type)
        return len(self.get(pile_type)) if pile_type.is_multi else 1

    def top(self, pile_type: PileType, index: Optional[int] = None) -> Optional[Card]:
        cards = self.pile(pile_type, index)
        return cards[-1] if cards else None

    def located(self, pile_type: PileType, index: Optional[int], card_index: int) -> Card:
        """Return the card at a position with its positional metadata attached."""
        pile_type = PileType(pile_type)
        card = self.pile(pile_type, index)[card_index]
        return card.at(pile_type.value, index if pile_type.is_multi else None, card_index)

    def with_piles(self, changes: Mapping[PileType, PileValue]) -> "Playfield":
        return replace(self, **{PileType(k).value: v for k, v in changes.items()})

    def with_pile(self, pile_type: PileType, index: Optional[int], cards: Iterable[Card]) -> "Playfield":
        pile_type = PileType(pile_type)
        cards = tuple(cards)
        if not pile_type.is_multi:
            return self.with_piles({pile_type: cards})
        piles = list(self.get(pile_type))
        piles[index] = cards
        return self.with_piles({pile_type: tuple(piles)})

    # ----- Counts -----
    def iter_cards(self) -> Iterator[Card]:
        yield from self.draw
        yield from self.waste
        for p in self.foundation:
            yield from p
        for p in self.tableau:
            yield from p

    def total_cards(self) -> int:
        return sum(1 for _ in self.iter_cards())

    def foundation_count(self) -> int:
        return sum(len(p) for p in self.foundation)

    def is_empty(self) -> bool:
        return self.total_cards() == 0

    # ----- Serialization -----
    def to_dict(self) -> Dict[str, Any]:
        return {
            "draw": [c.to_dict() for c in self.draw],
            "waste": [c.to_dict() for c in self.waste],
            "foundation": [[c.to_dict() for c in p] for p in self.foundation],
            "tableau": [[c.to_dict() for c in p] for p in self.tableau],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Playfield":
        if not isinstance(data, Mapping):
            raise ValueError("Playfield data must be a mapping")
        piles = {}
        for pile_type in PileType:
            if pile_type.value in data:
                piles[pile_type] = pile_value_from_json(pile_type, data[pile_type.value])
        return cls().with_piles(piles)


def pile_value_to_json(pile_type: PileType, value: PileValue):
    if PileType(pile_type).is_multi:
        return [[c.to_dict() for c in p] for p in value]
    return [c.to_dict() for c in value]


def pile_value_from_json(pile_type: PileType, raw) -> PileValue:
    pile_type = PileType(pile_type)
    if not isinstance(raw, list):
        raise ValueError(f"Pile data for '{pile_type.value}' must be a list")
    if not pile_type.is_multi:
        return tuple(Card.from_dict(c) for c in raw)
    expected = FOUNDATION_COUNT if pile_type is PileType.FOUNDATION else TABLEAU_COUNT
    if len(raw) != expected or not all(isinstance(p, list) for p in raw):
        raise ValueError(f"'{pile_type.value}' must hold {expected} lists of cards")
    return tuple(tuple(Card.from_dict(c) for c in p) for p in raw)
