"""Win/loss statistics kept across games."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional

from klondike import settings as S
from klondike.engine import EVENT_ABANDONED, EVENT_WON

logger = logging.getLogger(__name__)

STATS_FILENAME = "klondike_stats.json"


@dataclass
class Statistics:
    games_won: int = 0
    games_lost: int = 0
    current_streak: int = 0
    current_streak_type: Optional[str] = None  # "win" | "loss"
    best_win_streak: int = 0
    worst_lose_streak: int = 0
    best_win_time: int = 0
    total_game_time: int = 0

    def record_win(self, game_time: int):
        self.games_won += 1
        self.total_game_time += game_time
        self.current_streak = self.current_streak + 1 if self.current_streak_type == "win" else 1
        self.current_streak_type = "win"
        self.best_win_streak = max(self.best_win_streak, self.current_streak)
        if not self.best_win_time or game_time < self.best_win_time:
            self.best_win_time = game_time

    def record_loss(self):
        self.games_lost += 1
        self.current_streak = self.current_streak + 1 if self.current_streak_type == "loss" else 1
        self.current_streak_type = "loss"
        self.worst_lose_streak = max(self.worst_lose_streak, self.current_streak)

    def win_rate(self) -> str:
        total = self.games_won + self.games_lost
        rate = round(self.games_won / total * 100) if total else 0
        return f"{rate}%"

    def reset(self):
        for f in fields(self):
            setattr(self, f.name, f.default)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Statistics":
        stats = cls()
        if not isinstance(data, Mapping):
            return stats
        for f in fields(cls):
            value = data.get(f.name)
            if f.name == "current_streak_type":
                if value in ("win", "loss"):
                    stats.current_streak_type = value
            elif isinstance(value, int) and value >= 0:
                setattr(stats, f.name, value)
        return stats


def stats_path() -> str:
    return os.path.join(S.settings_dir(), STATS_FILENAME)


def load_statistics(path: Optional[str] = None) -> Statistics:
    path = path or stats_path()
    try:
        with open(path, "r", encoding="utf-8") as f:
            return Statistics.from_dict(json.load(f))
    except FileNotFoundError:
        return Statistics()
    except (OSError, ValueError) as exc:
        logger.warning("Resetting unreadable statistics %s: %s", path, exc)
        return Statistics()


def save_statistics(stats: Statistics, path: Optional[str] = None) -> bool:
    path = path or stats_path()
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(stats.to_dict(), f, indent=2)
    except OSError as exc:
        logger.warning("Could not write statistics to %s: %s", path, exc)
        return False
    return True


def track(engine, stats: Statistics):
    """Record wins and abandoned games from an engine; returns the unsubscribe callable."""

    def on_event(event: str):
        if event == EVENT_WON:
            stats.record_win(engine.elapsed)
        elif event == EVENT_ABANDONED:
            stats.record_loss()

    return engine.subscribe(on_event)
