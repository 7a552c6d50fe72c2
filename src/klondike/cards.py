"""Card records and deck constants for Klondike."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

# Ordered low -> high; rule checks compare positions in this tuple.
RANKS = ("ace", "2", "3", "4", "5", "6", "7", "8", "9", "10", "jack", "queen", "king")
SUITS = ("clubs", "diamonds", "hearts", "spades")
SUIT_COLORS = {
    "clubs": "black",
    "diamonds": "red",
    "hearts": "red",
    "spades": "black",
}

FACE_UP = "up"
FACE_DOWN = "down"

DECK_SIZE = len(RANKS) * len(SUITS)

RANK_TO_TEXT = {"ace": "A", "jack": "J", "queen": "Q", "king": "K"}
for _r in RANKS[1:10]:
    RANK_TO_TEXT[_r] = _r
SUIT_SYMBOLS = {"clubs": "♣", "diamonds": "♦", "hearts": "♥", "spades": "♠"}


def rank_index(rank: str) -> int:
    return RANKS.index(rank)


def color_of(suit: str) -> str:
    return SUIT_COLORS[suit]


def is_red(suit: str) -> bool:
    return SUIT_COLORS.get(suit) == "red"


@dataclass(frozen=True)
class Card:
    """A single playing card.

    ``pile_type``, ``pile_index`` and ``card_index`` locate the card when it is
    handed around as a move source. They are addressing only and take no part
    in equality, so a located card still equals the card sitting in the pile.
    """

    rank: str
    suit: str
    face: str = FACE_DOWN
    pile_type: Optional[str] = field(default=None, compare=False)
    pile_index: Optional[int] = field(default=None, compare=False)
    card_index: Optional[int] = field(default=None, compare=False)

    @property
    def face_up(self) -> bool:
        return self.face == FACE_UP

    @property
    def color(self) -> str:
        return color_of(self.suit)

    def turned(self, face: str) -> "Card":
        if face == self.face:
            return self
        return replace(self, face=face)

    def at(self, pile_type: str, pile_index: Optional[int], card_index: int) -> "Card":
        return replace(self, pile_type=pile_type, pile_index=pile_index, card_index=card_index)

    def unlocated(self) -> "Card":
        if self.pile_type is None and self.pile_index is None and self.card_index is None:
            return self
        return Card(self.rank, self.suit, self.face)

    def to_dict(self) -> Dict[str, Any]:
        return {"rank": self.rank, "suit": self.suit, "face": self.face}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Card":
        if not isinstance(data, Mapping):
            raise ValueError(f"Card data must be a mapping, got {type(data).__name__}")
        rank = data.get("rank")
        suit = data.get("suit")
        face = data.get("face", FACE_DOWN)
        if rank not in RANKS:
            raise ValueError(f"Unknown rank: {rank!r}")
        if suit not in SUITS:
            raise ValueError(f"Unknown suit: {suit!r}")
        if face not in (FACE_UP, FACE_DOWN):
            raise ValueError(f"Unknown face: {face!r}")
        return cls(rank, suit, face)

    def __repr__(self):
        arrow = "↑" if self.face_up else "↓"
        return f"{RANK_TO_TEXT[self.rank]}{SUIT_SYMBOLS[self.suit]}{arrow}"


def make_deck() -> List[Card]:
    """All 52 cards face down, suits outer and ranks inner."""
    return [Card(rank, suit, FACE_DOWN) for suit in SUITS for rank in RANKS]


# ---------- Drag payload ----------

def card_to_payload(card: Card) -> str:
    return json.dumps({
        "rank": card.rank,
        "suit": card.suit,
        "face": card.face,
        "pileType": card.pile_type,
        "pileIndex": card.pile_index,
        "cardIndex": card.card_index,
    })


def card_from_payload(text) -> Optional[Card]:
    """Rebuild a located card from a drag payload, or None when it is unusable."""
    if not text:
        return None
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict) or not data.get("rank") or not data.get("suit"):
        return None
    try:
        card = Card.from_dict(data)
    except ValueError:
        return None
    pile_index = data.get("pileIndex")
    card_index = data.get("cardIndex")
    if pile_index is not None and not isinstance(pile_index, int):
        return None
    if card_index is not None and not isinstance(card_index, int):
        return None
    return replace(card, pile_type=data.get("pileType"), pile_index=pile_index, card_index=card_index)
