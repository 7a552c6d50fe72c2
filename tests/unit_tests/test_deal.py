import random
from collections import Counter

from klondike.cards import RANKS, SUITS, make_deck
from klondike.deal import deal_deck, shuffle_deck


def test_shuffle_keeps_every_card_once() -> None:
    for seed in range(20):
        deck = shuffle_deck(random.Random(seed))
        assert len(deck) == 52
        assert Counter((c.rank, c.suit) for c in deck) == Counter((r, s) for s in SUITS for r in RANKS)
        assert all(not c.face_up for c in deck)


def test_shuffle_is_reproducible_with_a_seed() -> None:
    assert shuffle_deck(random.Random(7)) == shuffle_deck(random.Random(7))
    assert shuffle_deck(random.Random(7)) != shuffle_deck(random.Random(8))


def test_shuffle_can_leave_a_card_in_place() -> None:
    # j is drawn from [0, i], so the last card may stay put
    class Stay:
        def randint(self, a, b):
            return b

    assert shuffle_deck(Stay()) == make_deck()


def test_deal_distribution() -> None:
    pf = deal_deck(shuffle_deck(random.Random(1)))
    assert [len(p) for p in pf.tableau] == [1, 2, 3, 4, 5, 6, 7]
    assert len(pf.draw) == 24
    assert pf.waste == ()
    assert all(len(f) == 0 for f in pf.foundation)
    for pile in pf.tableau:
        assert pile[-1].face_up
        assert not any(c.face_up for c in pile[:-1])
    assert not any(c.face_up for c in pf.draw)
    assert pf.total_cards() == 52


def test_deal_order_follows_the_deck() -> None:
    deck = make_deck()
    pf = deal_deck(deck)
    assert pf.tableau[0] == (deck[0].turned("up"),)
    assert pf.tableau[1] == (deck[1], deck[2].turned("up"))
    # Popping the draw pile yields the undealt cards in deck order
    assert pf.draw[-1] == deck[28]
    assert pf.draw[0] == deck[51]


def test_deal_does_not_touch_the_deck() -> None:
    deck = [c.turned("up") for c in make_deck()]
    deal_deck(deck)
    assert all(c.face_up for c in deck)


def test_short_deck_leaves_tail_piles_short() -> None:
    pf = deal_deck(make_deck()[:5])
    assert [len(p) for p in pf.tableau] == [1, 2, 2, 0, 0, 0, 0]
    assert pf.draw == ()
    assert deal_deck([]).is_empty()
