import importlib

import pytest


@pytest.fixture
def pygame_dummy(monkeypatch):
    """pygame with the dummy SDL drivers and stand-in fonts, so no display or font files are needed."""
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")

    pygame = importlib.import_module("pygame")

    class DummyFont:
        def __init__(self, size):
            self._size = max(1, int(size) if size else 1)

        def render(self, text, *_, **__):
            width = max(1, len(str(text)) * max(self._size // 2, 1))
            height = max(1, self._size)
            return pygame.Surface((width, height), pygame.SRCALPHA)

        def size(self, text):
            width = max(1, len(str(text)) * max(self._size // 2, 1))
            return width, max(1, self._size)

        def get_height(self):
            return max(1, self._size)

    def _make_font(size):
        return DummyFont(size or 24)

    monkeypatch.setattr(
        pygame.font,
        "SysFont",
        lambda *args, size=None, **kwargs: _make_font(size if size is not None else (args[1] if len(args) > 1 else None)),
        raising=False,
    )
    monkeypatch.setattr(
        pygame.font,
        "Font",
        lambda *args, size=None, **kwargs: _make_font(size if size is not None else (args[1] if len(args) > 1 else None)),
        raising=False,
    )
    monkeypatch.setattr(pygame.font, "get_default_font", lambda: "dummy", raising=False)

    pygame.init()
    common = importlib.import_module("klondike.common")
    monkeypatch.setattr(common, "SCREEN_W", 1280)
    monkeypatch.setattr(common, "SCREEN_H", 800)
    common.apply_card_size("Medium")
    common.setup_fonts()
    yield pygame
    pygame.quit()
