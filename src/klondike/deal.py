# deal.py - shuffling and the opening Klondike layout
import random
from typing import List, Optional, Sequence

from klondike.cards import FACE_DOWN, FACE_UP, Card, make_deck
from klondike.playfield import TABLEAU_COUNT, Playfield


def shuffle_deck(rng: Optional[random.Random] = None) -> List[Card]:
    """Return a fresh 52-card deck in uniformly random order (Fisher-Yates)."""
    rng = rng or random
    deck = make_deck()
    for i in range(len(deck) - 1, 0, -1):
        j = rng.randint(0, i)
        deck[i], deck[j] = deck[j], deck[i]
    return deck


def deal_deck(deck: Sequence[Card]) -> Playfield:
    """
    Lay out a deck: tableau pile i gets i+1 cards with only the last one face up,
    the rest becomes the draw pile (reversed so popping from the end follows deck order).
    A short deck simply leaves the later piles short or empty.
    """
    cards = [c.unlocated().turned(FACE_DOWN) for c in deck]
    pos = 0
    tableau = []
    for col in range(TABLEAU_COUNT):
        pile = cards[pos:pos + col + 1]
        pos += len(pile)
        if pile:
            pile[-1] = pile[-1].turned(FACE_UP)
        tableau.append(pile)

    draw = list(reversed(cards[pos:]))
    return Playfield.build(draw=draw, tableau=tableau)
