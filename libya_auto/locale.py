import logging
import re
from typing import Optional

from flask import g, redirect, request

from libya_auto import config

logger = logging.getLogger(__name__)

LOCALE_PREFIX_RE = re.compile(r"^/(?:%s)(?:/|$)" % "|".join(config.LOCALES))


def resolve_locale(cookie: Optional[str], accept_language: Optional[str]) -> str:
    """Cookie first, then a substring match on Accept-Language, then the default."""
    if cookie in config.LOCALES:
        return cookie
    header = (accept_language or "").lower()
    for locale in ("ar", "en"):
        if locale in header:
            return locale
    return config.DEFAULT_LOCALE


def localized_redirect_target(path: str, query: str = "", cookie: Optional[str] = None,
                              accept_language: Optional[str] = None) -> Optional[str]:
    """Where an unprefixed path should go, or None if it passes through."""
    if any(path.startswith(prefix) for prefix in config.UNLOCALIZED_PREFIXES):
        return None
    if LOCALE_PREFIX_RE.match(path):
        return None
    locale = resolve_locale(cookie, accept_language)
    target = f"/{locale}{'' if path == '/' else path}"
    if query:
        target = f"{target}?{query}"
    return target


def switch_locale_path(path: str, locale: str, query: str = "") -> str:
    if LOCALE_PREFIX_RE.match(path):
        rest = path.split("/", 2)[2] if path.count("/") > 1 else ""
        target = f"/{locale}/{rest}" if rest else f"/{locale}"
    else:
        target = f"/{locale}{'' if path == '/' else path}"
    if query:
        target = f"{target}?{query}"
    return target


def redirect_to_locale():
    target = localized_redirect_target(
        request.path,
        request.query_string.decode("utf-8", "replace"),
        request.cookies.get(config.LOCALE_COOKIE),
        request.headers.get("Accept-Language"),
    )
    if target is not None:
        logger.debug("locale redirect %s -> %s", request.path, target)
        return redirect(target)
    return None


def remember_locale(response):
    locale = g.get("url_locale")
    if locale and request.cookies.get(config.LOCALE_COOKIE) != locale:
        response.set_cookie(config.LOCALE_COOKIE, locale, max_age=365 * 24 * 3600, samesite="Lax")
    return response


def init_app(app):
    app.before_request(redirect_to_locale)
    app.after_request(remember_locale)
