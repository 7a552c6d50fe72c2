import importlib
import json
import os
import types


def test_application_flow(monkeypatch, tmp_path, pygame_dummy):
    pygame = pygame_dummy
    monkeypatch.setenv("KLONDIKE_HOME", str(tmp_path))
    monkeypatch.setenv("KLONDIKE_SEED", "5")
    monkeypatch.delenv("KLONDIKE_CARD_SIZE", raising=False)
    monkeypatch.delenv("KLONDIKE_LOG_LEVEL", raising=False)

    entry = importlib.import_module("klondike.__main__")
    scene_module = importlib.import_module("klondike.scenes.game")

    captured = {}

    class DummyClock:
        def tick(self, _fps):
            return 16

    monkeypatch.setattr(pygame.time, "Clock", lambda: DummyClock())
    monkeypatch.setattr(pygame.display, "Info", lambda: types.SimpleNamespace(current_w=1600, current_h=900))
    monkeypatch.setattr(pygame.display, "set_mode", lambda size, flags=0: pygame.Surface(size))
    monkeypatch.setattr(pygame.display, "flip", lambda: None)
    monkeypatch.setattr(pygame.display, "set_caption", lambda _title: None)
    monkeypatch.setattr(entry, "_initial_window_size", lambda: (1024, 768))

    orig_scene_cls = scene_module.KlondikeScene

    class LoggedScene(orig_scene_cls):
        def __init__(self, app, *args, **kwargs):
            super().__init__(app, *args, **kwargs)
            captured["scene"] = self

    monkeypatch.setattr(entry, "KlondikeScene", LoggedScene)

    def _click_stock():
        scene = captured["scene"]
        pos = scene.draw_view.top_rect(len(scene.engine.playfield.draw)).center
        return [
            pygame.event.Event(pygame.MOUSEMOTION, {"pos": pos, "rel": (0, 0), "buttons": (0, 0, 0)}),
            pygame.event.Event(pygame.MOUSEBUTTONDOWN, {"pos": pos, "button": 1}),
            pygame.event.Event(pygame.MOUSEBUTTONUP, {"pos": pos, "button": 1}),
        ]

    def _record_waste():
        captured["waste"] = len(captured["scene"].engine.playfield.waste)
        return [pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_n, "mod": 0})]

    event_steps = [
        _click_stock,
        _record_waste,
        _click_stock,
        lambda: [pygame.event.Event(pygame.QUIT, {})],
    ]

    index = {"value": 0}

    def scripted_events():
        step = index["value"]
        if step >= len(event_steps):
            return []
        index["value"] += 1
        return event_steps[step]()

    monkeypatch.setattr(pygame.event, "get", scripted_events)

    quit_calls = []
    real_quit = pygame.quit

    def tracked_quit():
        quit_calls.append(True)
        real_quit()

    monkeypatch.setattr(pygame, "quit", tracked_quit)

    entry.main()

    assert quit_calls, "pygame.quit() should be called"
    assert captured["waste"] == 1

    engine = captured["scene"].engine
    assert engine.game_active
    assert len(engine.playfield.waste) == 1

    save_file = tmp_path / "klondike_save.json"
    stats_file = tmp_path / "klondike_stats.json"
    assert os.path.isfile(save_file)
    with open(stats_file, encoding="utf-8") as f:
        assert json.load(f)["games_lost"] == 1

    # A second launch picks the saved game back up
    restored = entry.build_engine({"autosave": True})
    assert restored.playfield == engine.playfield
    assert restored.timer_running
