import json
import os
from typing import Dict

from app_logging import app_logger

STRINGS_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "strings.json")

_cached_strings: Dict[str, str] = {}


def refresh_cache_strings() -> Dict[str, str]:
    """Reload user facing messages from strings.json into the in-process cache."""
    global _cached_strings
    with open(STRINGS_FILE, encoding="utf-8") as strings_file:
        _cached_strings = json.load(strings_file)
    app_logger.info(f"Loaded {len(_cached_strings)} message strings")
    return _cached_strings


def gettext(key: str) -> str:
    if not _cached_strings:
        refresh_cache_strings()
    # Unknown keys fall back to the key itself so a missing string never breaks a response
    return _cached_strings.get(key, key)
