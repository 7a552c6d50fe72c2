# storage.py - save and restore the engine between sessions
import json
import logging
import os
import random
from typing import Optional

from klondike import settings as S
from klondike.engine import GameEngine

logger = logging.getLogger(__name__)

SAVE_FILENAME = "klondike_save.json"


def save_path() -> str:
    return os.path.join(S.settings_dir(), SAVE_FILENAME)


def _write_json(path: str, data) -> bool:
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("Could not write %s: %s", path, exc)
        return False
    return True


def _read_json(path: str):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return None


def has_saved_game(path: Optional[str] = None) -> bool:
    return os.path.isfile(path or save_path())


def save_game(engine: GameEngine, path: Optional[str] = None) -> bool:
    return _write_json(path or save_path(), engine.to_dict())


def load_game(path: Optional[str] = None, rng: Optional[random.Random] = None) -> Optional[GameEngine]:
    """
    Rebuild an engine from the save file and settle it with on_storage_rehydrated().
    A missing or corrupt save gives None so the caller can start fresh.
    """
    path = path or save_path()
    data = _read_json(path)
    if data is None:
        return None
    try:
        engine = GameEngine.from_dict(data, rng=rng)
    except ValueError as exc:
        logger.warning("Discarding corrupt saved game %s: %s", path, exc)
        return None
    engine.on_storage_rehydrated()
    return engine


def clear_saved_game(path: Optional[str] = None):
    path = path or save_path()
    try:
        if os.path.isfile(path):
            os.remove(path)
    except OSError as exc:
        logger.warning("Could not remove %s: %s", path, exc)
