import json
import logging
import os
from typing import Any, Dict, List, Optional

from libya_auto import config

logger = logging.getLogger(__name__)

LOCALES_DIR = os.path.join(os.path.dirname(__file__), "locales")
LOAD_ERROR = "Failed to load translations"


class Dictionary:
    """Translation bundle for one locale, looked up by dotted key."""

    def __init__(self, locale: str, messages: Dict[str, Any], error: Optional[str] = None):
        self.locale = locale
        self.messages = messages
        self.error = error

    @property
    def direction(self) -> str:
        return "rtl" if self.locale in config.RTL_LOCALES else "ltr"

    def get(self, key: str) -> Optional[str]:
        node: Any = self.messages
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node if isinstance(node, str) else None

    def t(self, key: str, **params) -> str:
        value = self.get(key)
        if value is None:
            if not self.error:
                logger.warning("missing translation %s for locale %s", key, self.locale)
            return key
        return value.format(**params) if params else value

    __call__ = t


def _read_bundle(locale: str) -> Dict[str, Any]:
    if locale not in config.LOCALES:
        raise LookupError(f"unsupported locale {locale!r}")
    path = os.path.join(LOCALES_DIR, locale, "common.json")
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_dictionary(locale: str) -> Dictionary:
    """Load the bundle for ``locale``, re-reading it from disk every call.

    Falls back once to the fallback locale; if that fails too, returns an
    error-shaped dictionary whose lookups echo their keys.
    """
    try:
        return Dictionary(locale, _read_bundle(locale))
    except (LookupError, OSError, ValueError) as exc:
        logger.error("Failed to load dictionary for locale %s: %s", locale, exc)
    try:
        return Dictionary(config.FALLBACK_LOCALE, _read_bundle(config.FALLBACK_LOCALE))
    except (LookupError, OSError, ValueError) as exc:
        logger.error("Failed to load fallback dictionary: %s", exc)
    return Dictionary(config.FALLBACK_LOCALE, {}, error=LOAD_ERROR)


def flatten_keys(messages: Dict[str, Any], prefix: str = "") -> List[str]:
    keys = []
    for name, value in messages.items():
        key = f"{prefix}{name}"
        if isinstance(value, dict):
            keys.extend(flatten_keys(value, key + "."))
        else:
            keys.append(key)
    return keys


def missing_keys(reference: Dict[str, Any], other: Dict[str, Any]) -> List[str]:
    """Dotted keys present in exactly one of the two bundles."""
    a, b = set(flatten_keys(reference)), set(flatten_keys(other))
    return sorted(a ^ b)
