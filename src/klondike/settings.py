# settings.py - persisted user settings plus environment overrides
import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CARD_SIZES = ("Small", "Medium", "Large")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_DEFAULT_SETTINGS: Dict[str, Any] = {
    "card_size": "Medium",   # Small | Medium | Large
    "autosave": True,        # save the game on exit and restore it on launch
    "log_level": "WARNING",
}

_CURRENT_SETTINGS: Dict[str, Any] = dict(_DEFAULT_SETTINGS)


def settings_dir() -> str:
    # KLONDIKE_HOME wins, then %APPDATA% on Windows, else ~/.klondike_solitaire
    override = os.environ.get("KLONDIKE_HOME", "").strip()
    if override:
        return override
    base = os.environ.get("APPDATA")
    if base:
        return os.path.join(base, "KlondikeSolitaire")
    return os.path.join(os.path.expanduser("~"), ".klondike_solitaire")


def settings_path() -> str:
    return os.path.join(settings_dir(), "settings.json")


def _clean(values: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    size = str(values.get("card_size", "")).capitalize()
    if size in CARD_SIZES:
        out["card_size"] = size
    if isinstance(values.get("autosave"), bool):
        out["autosave"] = values["autosave"]
    level = str(values.get("log_level", "")).upper()
    if level in LOG_LEVELS:
        out["log_level"] = level
    return out


def get_current_settings() -> Dict[str, Any]:
    return dict(_CURRENT_SETTINGS)


def load_settings() -> Dict[str, Any]:
    """Read the settings file over the defaults; a missing or broken file leaves defaults."""
    global _CURRENT_SETTINGS
    _CURRENT_SETTINGS = dict(_DEFAULT_SETTINGS)
    path = settings_path()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        data = None
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        data = None
    if isinstance(data, dict):
        _CURRENT_SETTINGS.update(_clean(data))

    env = {
        "card_size": os.environ.get("KLONDIKE_CARD_SIZE", ""),
        "log_level": os.environ.get("KLONDIKE_LOG_LEVEL", ""),
    }
    _CURRENT_SETTINGS.update(_clean(env))
    return get_current_settings()


def save_settings(new_values: Dict[str, Any]) -> bool:
    """Merge known keys and write them to disk. Returns False if the write failed."""
    _CURRENT_SETTINGS.update(_clean(new_values))
    path = settings_path()
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(_CURRENT_SETTINGS, f, indent=2)
    except OSError as exc:
        logger.warning("Could not write settings to %s: %s", path, exc)
        return False
    return True


def shuffle_seed() -> Optional[int]:
    """Integer from KLONDIKE_SEED for reproducible deals, or None."""
    raw = os.environ.get("KLONDIKE_SEED", "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer KLONDIKE_SEED=%r", raw)
        return None
