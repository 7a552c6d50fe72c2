import random

from klondike.cards import RANKS, SUITS, Card
from klondike.engine import GameEngine
from klondike.playfield import PileType, Playfield
from klondike.statistics import Statistics, load_statistics, save_statistics, track


def test_streaks_and_best_time() -> None:
    stats = Statistics()
    stats.record_win(300)
    stats.record_win(200)
    stats.record_win(250)
    assert stats.games_won == 3
    assert stats.current_streak == 3 and stats.current_streak_type == "win"
    assert stats.best_win_streak == 3
    assert stats.best_win_time == 200
    assert stats.total_game_time == 750

    stats.record_loss()
    stats.record_loss()
    assert stats.current_streak == 2 and stats.current_streak_type == "loss"
    assert stats.worst_lose_streak == 2
    assert stats.best_win_streak == 3

    stats.record_win(400)
    assert stats.current_streak == 1
    assert stats.best_win_time == 200


def test_win_rate() -> None:
    stats = Statistics()
    assert stats.win_rate() == "0%"
    stats.record_win(10)
    stats.record_loss()
    stats.record_loss()
    assert stats.win_rate() == "33%"


def test_reset() -> None:
    stats = Statistics()
    stats.record_win(10)
    stats.reset()
    assert stats == Statistics()


def test_from_dict_drops_bad_values() -> None:
    stats = Statistics.from_dict({"games_won": 4, "games_lost": -2, "current_streak_type": "tie", "best_win_time": "fast"})
    assert stats.games_won == 4
    assert stats.games_lost == 0
    assert stats.current_streak_type is None
    assert stats.best_win_time == 0
    assert Statistics.from_dict(None) == Statistics()


def test_save_and_load(tmp_path) -> None:
    path = str(tmp_path / "stats.json")
    stats = Statistics()
    stats.record_win(42)
    assert save_statistics(stats, path)
    assert load_statistics(path) == stats
    assert load_statistics(str(tmp_path / "missing.json")) == Statistics()


def test_unreadable_file_gives_fresh_statistics(tmp_path) -> None:
    path = tmp_path / "stats.json"
    path.write_text("oops", encoding="utf-8")
    assert load_statistics(str(path)) == Statistics()


def test_track_counts_wins_and_abandoned_games() -> None:
    engine = GameEngine(rng=random.Random(1))
    stats = Statistics()
    untrack = track(engine, stats)

    engine.new_game()
    engine.draw_card()
    engine.new_game()
    assert stats.games_lost == 1

    foundation = [[Card(r, s, "up") for r in RANKS] for s in SUITS]
    king = foundation[3].pop()
    engine.set_playfield(Playfield.build(foundation=foundation, tableau=[[king]]))
    engine.tick(12)
    engine.move_card(engine.playfield.located(PileType.TABLEAU, 0, 0), "foundation", 3)
    assert stats.games_won == 1
    assert stats.best_win_time == 12

    untrack()
    engine.new_game()
    engine.draw_card()
    engine.quit_game()
    assert stats.games_lost == 1
