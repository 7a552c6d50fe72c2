"""Klondike playfield engine.

:class:`GameEngine` owns the playfield, the shuffled deck, the undo/redo
history, the game clock and the "game won" flag. Presentation code reads its
queries and calls its commands; it never edits piles directly.

Every command replaces the playfield as a whole. History entries hold the
previous pile values of just the pile types a command touched, keyed by
:class:`~klondike.playfield.PileType`. Because playfields and cards are
immutable, those values can be stored as-is.

Commands never raise for odd input. A draw with nothing to draw, an undo with
no history or a move from a pile that does not exist simply does nothing.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Callable, Dict, List, Mapping, Optional

from klondike.cards import DECK_SIZE, FACE_DOWN, FACE_UP, Card
from klondike.deal import deal_deck, shuffle_deck
from klondike.playfield import (
    PileType,
    PileValue,
    Playfield,
    pile_value_from_json,
    pile_value_to_json,
)
from klondike.rules import Move
from klondike.timer import GameTimer

logger = logging.getLogger(__name__)

GAME_WIN = "gamewin"
STATE_VERSION = 1

EVENT_PLAYFIELD = "playfield"
EVENT_TIMER = "timer"
EVENT_WON = "won"
EVENT_NEW_GAME = "new_game"
EVENT_QUIT = "quit"
# An active, unfinished game with at least one move is being thrown away.
EVENT_ABANDONED = "abandoned"

HistoryEntry = Dict[PileType, PileValue]
Listener = Callable[[str], None]

_SOURCE_TYPES = (PileType.WASTE, PileType.FOUNDATION, PileType.TABLEAU)
_TARGET_TYPES = (PileType.WASTE, PileType.FOUNDATION, PileType.TABLEAU)


class GameEngine:
    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng
        self._playfield: Playfield = Playfield.empty()
        self._shuffled_deck: List[Card] = []
        self._undo: List[HistoryEntry] = []
        self._redo: List[HistoryEntry] = []
        self._listeners: List[Listener] = []
        self.modal_type: Optional[str] = None
        self.timer = GameTimer()

    # ---------- Queries ----------
    @property
    def playfield(self) -> Playfield:
        return self._playfield

    @property
    def shuffled_deck(self) -> List[Card]:
        return list(self._shuffled_deck)

    @property
    def game_active(self) -> bool:
        return bool(self._shuffled_deck)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def elapsed(self) -> int:
        return self.timer.elapsed

    game_timer = elapsed

    @property
    def timer_running(self) -> bool:
        return self.timer.running

    @property
    def is_won(self) -> bool:
        return self.modal_type == GAME_WIN

    # ---------- Observers ----------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(event)``; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str):
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed on %s event", listener, event)

    def _commit(self, playfield: Playfield):
        self._playfield = playfield
        self._notify(EVENT_PLAYFIELD)

    def _in_progress(self) -> bool:
        return self.game_active and not self.is_won and bool(self._undo or self._redo)

    # ---------- Timer ----------
    def start_timer(self, reset: bool = True):
        self.timer.start(reset)
        self._notify(EVENT_TIMER)

    def stop_timer(self, reset: bool = True):
        self.timer.stop(reset)
        self._notify(EVENT_TIMER)

    def tick(self, dt: float):
        if self.timer.tick(dt):
            self._notify(EVENT_TIMER)

    # ---------- Game lifecycle ----------
    def shuffle_deck(self):
        self._shuffled_deck = shuffle_deck(self._rng)

    def deal_deck(self):
        self._undo = []
        self._redo = []
        self._commit(deal_deck(self._shuffled_deck))
        self.check_game_state()

    def new_game(self):
        if self._in_progress():
            self._notify(EVENT_ABANDONED)
        self.modal_type = None
        self.stop_timer()
        self.shuffle_deck()
        self.deal_deck()
        self.start_timer()
        logger.debug("New game dealt")
        self._notify(EVENT_NEW_GAME)

    def restart_game(self):
        """Deal the current shuffled deck again, giving the same opening layout."""
        self.modal_type = None
        self.deal_deck()
        self.stop_timer()
        self.start_timer()
        logger.debug("Game restarted")

    def quit_game(self):
        if self._in_progress():
            self._notify(EVENT_ABANDONED)
        self.modal_type = None
        self._shuffled_deck = []
        self._undo = []
        self._redo = []
        self._commit(Playfield.empty())
        self.stop_timer()
        logger.debug("Game quit")
        self._notify(EVENT_QUIT)

    exit_game = quit_game

    def set_playfield(self, playfield: Playfield):
        """Replace the playfield outright; history is left alone."""
        self._commit(playfield)

    # ---------- Moves ----------
    def draw_card(self):
        pf = self._playfield
        if pf.draw:
            card = pf.draw[-1].turned(FACE_UP)
            new_pf = pf.with_piles({
                PileType.DRAW: pf.draw[:-1],
                PileType.WASTE: pf.waste + (card,),
            })
        elif pf.waste:
            # Recycle: the bottom of the waste becomes the next card drawn.
            new_pf = pf.with_piles({
                PileType.DRAW: tuple(c.turned(FACE_DOWN) for c in reversed(pf.waste)),
                PileType.WASTE: (),
            })
        else:
            return

        self._undo.append({PileType.DRAW: pf.draw, PileType.WASTE: pf.waste})
        self._redo = []
        self._commit(new_pf)
        self.check_game_state()

    def move_card(
        self,
        source: Card,
        target_pile_type,
        target_pile_index: int,
        source_pile_type=None,
        source_pile_index: Optional[int] = None,
        source_card_index: Optional[int] = None,
    ):
        """
        Move ``source`` and every card above it onto the target pile, face up.
        The source location defaults to the card's own pile metadata. Legality
        is the caller's business (see klondike.rules); this only checks that
        the addresses make sense.
        """
        if source is None:
            return
        pf = self._playfield
        src_type = PileType.coerce(source_pile_type if source_pile_type is not None else source.pile_type)
        tgt_type = PileType.coerce(target_pile_type)
        if src_type not in _SOURCE_TYPES or tgt_type not in _TARGET_TYPES:
            logger.debug("Ignoring move %r: bad pile types %r -> %r", source, src_type, tgt_type)
            return

        src_index = source_pile_index if source_pile_index is not None else source.pile_index
        src_index = src_index or 0
        tgt_index = target_pile_index or 0
        if not (0 <= src_index < pf.pile_count(src_type) and 0 <= tgt_index < pf.pile_count(tgt_type)):
            return
        if src_type is tgt_type and src_index == tgt_index:
            return

        src_pile = pf.pile(src_type, src_index)
        card_index = source_card_index if source_card_index is not None else source.card_index
        if card_index is None:
            card_index = _find_card(src_pile, source)
        if card_index is None or not 0 <= card_index < len(src_pile):
            return
        found = src_pile[card_index]
        if (found.rank, found.suit) != (source.rank, source.suit):
            logger.debug("Ignoring move %r: card at %s[%s][%s] is %r", source, src_type.value, src_index, card_index, found)
            return

        moving = tuple(c.turned(FACE_UP) for c in src_pile[card_index:])
        new_pf = pf.with_pile(src_type, src_index, src_pile[:card_index])
        new_pf = new_pf.with_pile(tgt_type, tgt_index, new_pf.pile(tgt_type, tgt_index) + moving)

        entry: HistoryEntry = {src_type: pf.get(src_type)}
        if tgt_type is not src_type:
            entry[tgt_type] = pf.get(tgt_type)
        self._undo.append(entry)
        self._redo = []
        self._commit(new_pf)
        self.check_game_state()

    def apply(self, move: Optional[Move]) -> bool:
        """Carry out a move found by klondike.rules; False when there is none."""
        if move is None:
            return False
        self.move_card(
            move.card,
            move.target_pile_type,
            move.target_pile_index,
            move.source_pile_type,
            move.source_pile_index,
            move.source_card_index,
        )
        return True

    # ---------- History ----------
    def _swap_in(self, entry: HistoryEntry) -> HistoryEntry:
        current = self._playfield
        inverse = {pile_type: current.get(pile_type) for pile_type in entry}
        self._commit(current.with_piles(entry))
        return inverse

    def undo(self):
        if not self._undo:
            return
        self._redo.append(self._swap_in(self._undo.pop()))

    def redo(self):
        if not self._redo:
            return
        self._undo.append(self._swap_in(self._redo.pop()))

    # ---------- State checks ----------
    def check_game_state(self):
        """Detect a win, otherwise turn up any face-down tableau or waste top."""
        pf = self._playfield
        if pf.foundation_count() == DECK_SIZE:
            self.stop_timer(reset=False)
            if self.modal_type != GAME_WIN:
                self.modal_type = GAME_WIN
                logger.info("Game won in %d seconds", self.timer.elapsed)
                self._notify(EVENT_WON)
            return

        flipped = False
        tableau = []
        for pile in pf.tableau:
            if pile and not pile[-1].face_up:
                pile = pile[:-1] + (pile[-1].turned(FACE_UP),)
                flipped = True
            tableau.append(pile)
        waste = pf.waste
        if waste and not waste[-1].face_up:
            waste = waste[:-1] + (waste[-1].turned(FACE_UP),)
            flipped = True

        if flipped:
            self._commit(pf.with_piles({PileType.TABLEAU: tuple(tableau), PileType.WASTE: waste}))

    # ---------- Persistence ----------
    def on_storage_rehydrated(self):
        """Settle a freshly restored engine: drop a finished game, resume the clock otherwise."""
        if self.modal_type == GAME_WIN:
            self.quit_game()
            return
        if self.timer.elapsed > 0 or self._shuffled_deck:
            self.start_timer(reset=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": STATE_VERSION,
            "playfield": self._playfield.to_dict(),
            "shuffled_deck": [c.to_dict() for c in self._shuffled_deck],
            "undo": [_entry_to_json(e) for e in self._undo],
            "redo": [_entry_to_json(e) for e in self._redo],
            "game_timer": self.timer.elapsed,
            "modal_type": self.modal_type,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], rng: Optional[random.Random] = None) -> "GameEngine":
        if not isinstance(data, Mapping):
            raise ValueError("Saved game must be a mapping")
        engine = cls(rng=rng)
        engine._playfield = Playfield.from_dict(data.get("playfield") or {})

        deck = data.get("shuffled_deck") or []
        if not isinstance(deck, list):
            raise ValueError("'shuffled_deck' must be a list")
        engine._shuffled_deck = [Card.from_dict(c) for c in deck]

        for key in ("undo", "redo"):
            raw = data.get(key) or []
            if not isinstance(raw, list):
                raise ValueError(f"'{key}' must be a list")
            entries = [_entry_from_json(e) for e in raw]
            if key == "undo":
                engine._undo = entries
            else:
                engine._redo = entries

        game_timer = data.get("game_timer", 0)
        if not isinstance(game_timer, int) or game_timer < 0:
            raise ValueError(f"Bad game timer value: {game_timer!r}")
        engine.timer = GameTimer(game_timer)

        modal_type = data.get("modal_type")
        if modal_type not in (None, GAME_WIN):
            raise ValueError(f"Unknown modal type: {modal_type!r}")
        engine.modal_type = modal_type
        return engine


def _find_card(pile, card: Card) -> Optional[int]:
    for i, c in enumerate(pile):
        if c.rank == card.rank and c.suit == card.suit:
            return i
    return None


def _entry_to_json(entry: HistoryEntry) -> Dict[str, Any]:
    return {pile_type.value: pile_value_to_json(pile_type, value) for pile_type, value in entry.items()}


def _entry_from_json(raw) -> HistoryEntry:
    if not isinstance(raw, Mapping):
        raise ValueError("History entries must be mappings")
    entry: HistoryEntry = {}
    for key, value in raw.items():
        pile_type = PileType.coerce(key)
        if pile_type is None:
            raise ValueError(f"Unknown pile type in history: {key!r}")
        entry[pile_type] = pile_value_from_json(pile_type, value)
    return entry
