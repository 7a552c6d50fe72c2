# game.py - Klondike table: draws the engine's playfield and turns clicks/drags into engine commands
import logging
from typing import Optional

import pygame

from klondike import common as C
from klondike.cards import card_from_payload, card_to_payload
from klondike.engine import GameEngine
from klondike.playfield import FOUNDATION_COUNT, TABLEAU_COUNT, PileType
from klondike.rules import find_click_move, find_drop_move
from klondike.statistics import Statistics
from klondike.timer import format_elapsed

logger = logging.getLogger(__name__)

DRAG_THRESHOLD = 4


class KlondikeScene(C.Scene):
    """
    Klondike, draw one, unlimited passes through the stock.
    - Click the stock to turn a card; click the empty stock to recycle the waste.
    - Click a face-up card to send it to a foundation, or else to a tableau pile.
    - Drag a card (or a face-up run) onto a pile.
    Keys: N new, R restart, Q quit game, U / Ctrl+Z undo, Y / Ctrl+Y redo, Esc exit.
    """

    def __init__(self, app, engine: Optional[GameEngine] = None, stats: Optional[Statistics] = None):
        super().__init__(app)
        self.engine = engine or GameEngine()
        self.stats = stats
        self.draw_view = C.PileView(PileType.DRAW)
        self.waste_view = C.PileView(PileType.WASTE)
        self.foundation_views = [C.PileView(PileType.FOUNDATION, i) for i in range(FOUNDATION_COUNT)]
        self.tableau_views = [C.PileView(PileType.TABLEAU, i) for i in range(TABLEAU_COUNT)]

        # Drag state: payload plus where it came from; cards stay in the engine until dropped
        self.drag = None
        self._mouse = (0, 0)

        eng = self.engine
        self.buttons = [
            C.Button("New", 0, 0, on_click=eng.new_game),
            C.Button("Restart", 0, 0, on_click=eng.restart_game, enabled=lambda: eng.game_active),
            C.Button("Undo", 0, 0, on_click=eng.undo, enabled=lambda: eng.can_undo and not eng.is_won),
            C.Button("Redo", 0, 0, on_click=eng.redo, enabled=lambda: eng.can_redo and not eng.is_won),
            C.Button("Quit", 0, 0, on_click=eng.quit_game, enabled=lambda: eng.game_active),
        ]
        self.compute_layout()

    # ----- Layout -----
    def compute_layout(self):
        gap_x = C.CARD_GAP_X
        block_w = TABLEAU_COUNT * C.CARD_W + (TABLEAU_COUNT - 1) * gap_x
        left = max(10, (C.SCREEN_W - block_w) // 2)
        top = C.TOP_BAR_H + 30

        def col_x(i):
            return left + i * (C.CARD_W + gap_x)

        self.draw_view.x, self.draw_view.y = col_x(0), top
        self.waste_view.x, self.waste_view.y = col_x(1), top
        for i, f in enumerate(self.foundation_views):
            f.x, f.y = col_x(3 + i), top
        tab_y = top + C.CARD_H + C.CARD_GAP_Y
        for i, t in enumerate(self.tableau_views):
            t.x, t.y = col_x(i), tab_y
            t.fan_y = C.TABLEAU_FAN_Y

        x = C.SCREEN_W - 12
        for b in reversed(self.buttons):
            x -= b.rect.width
            b.rect.topleft = (x, 12)
            x -= 8

    def _views(self):
        yield self.draw_view
        yield self.waste_view
        yield from self.foundation_views
        yield from self.tableau_views

    def _cards(self, view):
        return self.engine.playfield.pile(view.pile_type, view.pile_index)

    # ----- Drag helpers -----
    def _start_drag(self, view, card_index, pos):
        card = self.engine.playfield.located(view.pile_type, view.pile_index, card_index)
        self.drag = {
            "payload": card_to_payload(card),
            "view": view,
            "card_index": card_index,
            "start": pos,
            "moved": False,
        }

    def _drop_target(self, pos):
        for view in self.foundation_views + self.tableau_views:
            if view.area(len(self._cards(view))).collidepoint(pos):
                return view
        return None

    def _finish_drag(self, pos):
        drag, self.drag = self.drag, None
        card = card_from_payload(drag["payload"])
        if card is None:
            logger.debug("Discarding unreadable drag payload %r", drag["payload"])
            return
        pf = self.engine.playfield
        if not drag["moved"]:
            self.engine.apply(find_click_move(pf, card))
            return
        target = self._drop_target(pos)
        if target is not None:
            self.engine.apply(find_drop_move(pf, card, target.pile_type, target.pile_index))

    # ----- Events -----
    def handle_event(self, e):
        if e.type == pygame.MOUSEMOTION:
            self._mouse = e.pos
            if self.drag and not self.drag["moved"]:
                sx, sy = self.drag["start"]
                if abs(e.pos[0] - sx) > DRAG_THRESHOLD or abs(e.pos[1] - sy) > DRAG_THRESHOLD:
                    self.drag["moved"] = True

        elif e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
            self._mouse = e.pos
            for b in self.buttons:
                if b.click(e.pos):
                    self.drag = None
                    return
            if self.engine.is_won:
                return

            if self.draw_view.hit(e.pos, len(self.engine.playfield.draw)) is not None:
                self.engine.draw_card()
                return

            waste = self.engine.playfield.waste
            wi = self.waste_view.hit(e.pos, len(waste))
            if wi is not None and wi == len(waste) - 1:
                self._start_drag(self.waste_view, wi, e.pos)
                return

            for view in self.foundation_views + self.tableau_views:
                cards = self._cards(view)
                hi = view.hit(e.pos, len(cards))
                if hi is None or hi < 0:
                    continue
                if view.pile_type is PileType.FOUNDATION and hi != len(cards) - 1:
                    return
                if cards[hi].face_up:
                    self._start_drag(view, hi, e.pos)
                return

        elif e.type == pygame.MOUSEBUTTONUP and e.button == 1:
            self._mouse = e.pos
            if self.drag:
                self._finish_drag(e.pos)

        elif e.type == pygame.KEYDOWN:
            ctrl = bool(getattr(e, "mod", 0) & pygame.KMOD_CTRL)
            if e.key == pygame.K_n:
                self.engine.new_game()
            elif e.key == pygame.K_r and self.engine.game_active:
                self.engine.restart_game()
            elif e.key == pygame.K_q and self.engine.game_active:
                self.engine.quit_game()
            elif e.key == pygame.K_u or (ctrl and e.key == pygame.K_z):
                if not self.engine.is_won:
                    self.engine.undo()
            elif e.key == pygame.K_y:
                if not self.engine.is_won:
                    self.engine.redo()
            elif e.key == pygame.K_ESCAPE:
                self.quit_requested = True

    def update(self, dt):
        self.engine.tick(dt)

    # ----- Drawing -----
    def draw(self, screen):
        screen.fill(C.TABLE_BG)
        pygame.draw.rect(screen, (0, 70, 28), (0, 0, C.SCREEN_W, C.TOP_BAR_H))

        clock = C.FONT_UI.render(f"Time {format_elapsed(self.engine.elapsed)}", True, C.WHITE)
        screen.blit(clock, (20, (C.TOP_BAR_H - clock.get_height()) // 2))
        if self.stats is not None:
            line = f"Won {self.stats.games_won}  Lost {self.stats.games_lost}  Win rate {self.stats.win_rate()}"
            s = C.FONT_SMALL.render(line, True, C.WHITE)
            screen.blit(s, (40 + clock.get_width(), (C.TOP_BAR_H - s.get_height()) // 2))

        for b in self.buttons:
            b.draw(screen, hover=b.hovered(self._mouse))

        drag_view = self.drag["view"] if self.drag and self.drag["moved"] else None
        for view in self._views():
            cards = self._cards(view)
            if view is drag_view:
                cards = cards[:self.drag["card_index"]]
            view.draw(screen, cards)

        if drag_view is not None:
            mx, my = self._mouse
            lifted = self._cards(drag_view)[self.drag["card_index"]:]
            for i, c in enumerate(lifted):
                screen.blit(C.get_card_surface(c), (mx - C.CARD_W // 2, my - C.CARD_H // 2 + i * C.TABLEAU_FAN_Y))

        if not self.engine.game_active:
            msg = C.FONT_UI.render("Press N or click New to deal a game", True, C.BANNER)
            screen.blit(msg, (C.SCREEN_W // 2 - msg.get_width() // 2, C.SCREEN_H - 50))

        if self.engine.is_won:
            overlay = pygame.Surface((C.SCREEN_W, C.SCREEN_H), pygame.SRCALPHA)
            overlay.fill((0, 0, 0, 140))
            screen.blit(overlay, (0, 0))
            title = C.FONT_TITLE.render("You won!", True, C.BANNER)
            screen.blit(title, (C.SCREEN_W // 2 - title.get_width() // 2, C.SCREEN_H // 2 - 60))
            sub = C.FONT_UI.render(
                f"Time {format_elapsed(self.engine.elapsed)}  -  press N for a new game", True, C.WHITE)
            screen.blit(sub, (C.SCREEN_W // 2 - sub.get_width() // 2, C.SCREEN_H // 2))
