# __main__.py - entry point
import logging
import os
import random

import pygame

from klondike import common as C
from klondike import settings as S
from klondike import statistics as stats_mod
from klondike import storage
from klondike.engine import GameEngine
from klondike.scenes.game import KlondikeScene

logger = logging.getLogger("klondike")


def _initial_window_size():
    info = pygame.display.Info()
    # Keep a safety margin so the window never hides under taskbar
    margin_w, margin_h = 120, 140
    w = min(C.SCREEN_W, max(640, info.current_w - margin_w))
    h = min(C.SCREEN_H, max(480, info.current_h - margin_h))
    return w, h


def configure_logging(level_name: str):
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.WARNING),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_engine(settings) -> GameEngine:
    """Restore the saved game when autosave is on, otherwise deal a fresh one."""
    seed = S.shuffle_seed()
    rng = random.Random(seed) if seed is not None else None
    engine = None
    if settings.get("autosave"):
        engine = storage.load_game(rng=rng)
    if engine is None:
        engine = GameEngine(rng=rng)
    if not engine.game_active:
        engine.new_game()
    return engine


def main():
    settings = S.load_settings()
    configure_logging(settings["log_level"])

    os.environ.setdefault("SDL_VIDEO_CENTERED", "1")
    pygame.init()

    C.apply_card_size(settings["card_size"])
    w, h = _initial_window_size()
    C.SCREEN_W, C.SCREEN_H = w, h
    screen = pygame.display.set_mode((w, h), pygame.RESIZABLE)
    pygame.display.set_caption("Klondike Solitaire")
    C.setup_fonts()
    clock = pygame.time.Clock()

    engine = build_engine(settings)
    stats = stats_mod.load_statistics()
    stats_mod.track(engine, stats)
    scene = KlondikeScene(app=None, engine=engine, stats=stats)
    logger.info("Started with %d cards in play", engine.playfield.total_cards())

    running = True
    while running:
        dt = clock.tick(60) / 1000.0
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                running = False
                break
            if e.type == pygame.VIDEORESIZE:
                C.SCREEN_W, C.SCREEN_H = e.size
                screen = pygame.display.set_mode((C.SCREEN_W, C.SCREEN_H), pygame.RESIZABLE)
                scene.compute_layout()
                continue
            scene.handle_event(e)
        if scene.quit_requested:
            running = False
        scene.update(dt)
        scene.draw(screen)
        pygame.display.flip()

    if settings.get("autosave"):
        storage.save_game(engine)
    stats_mod.save_statistics(stats)
    pygame.quit()


if __name__ == "__main__":
    main()
