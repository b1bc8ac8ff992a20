"""Admin session handling.

The session lives in a mutable mapping (the signed Flask session cookie in
the app) under the same two keys the browser front end used for local
storage. There is no refresh or expiry: a session ends on logout or when the
stored data is cleared.
"""
import functools
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, MutableMapping, Optional

from flask import current_app, g, redirect, session, url_for

from libya_auto import config
from libya_auto.api import ApiClient, ApiError

logger = logging.getLogger(__name__)


class AuthError(Exception):
    pass


@dataclass(frozen=True)
class AuthSession:
    token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None


class AuthContext:
    def __init__(self, store: MutableMapping, base_url: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.store = store
        self.base_url = base_url
        self.timeout = timeout
        self.session = self._restore()

    def _restore(self) -> AuthSession:
        token = self.store.get(config.TOKEN_KEY)
        raw_user = self.store.get(config.USER_KEY)
        if token is None and raw_user is None:
            return AuthSession()
        try:
            if not token or raw_user is None:
                raise ValueError("incomplete session")
            user = json.loads(raw_user)
            if not isinstance(user, dict):
                raise ValueError("user is not an object")
        except (TypeError, ValueError) as exc:
            logger.error("Failed to restore authentication state: %s", exc)
            self._clear_store()
            return AuthSession()
        return AuthSession(token, user)

    def _clear_store(self):
        self.store.pop(config.TOKEN_KEY, None)
        self.store.pop(config.USER_KEY, None)

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return self.session.user

    def client(self) -> ApiClient:
        return ApiClient(self.base_url, token=self.session.token, timeout=self.timeout)

    def login(self, username: str, password: str) -> AuthSession:
        try:
            data = ApiClient(self.base_url, timeout=self.timeout).post(
                "/auth/login", {"username": username, "password": password}
            )
        except ApiError as exc:
            logger.error("Login error: %s", exc)
            raise AuthError(exc.detail or "Login failed") from exc
        if not isinstance(data, dict) or not data.get("token"):
            raise AuthError("Login failed")
        user = data.get("user") or {}
        self.session = AuthSession(data["token"], user)
        self.store[config.TOKEN_KEY] = data["token"]
        self.store[config.USER_KEY] = json.dumps(user)
        return self.session

    def logout(self):
        self.session = AuthSession()
        self._clear_store()


def get_auth() -> AuthContext:
    if "auth" not in g:
        g.auth = AuthContext(
            session,
            current_app.config["API_URL"],
            current_app.config["API_TIMEOUT"],
        )
    return g.auth


def login_required(view):
    @functools.wraps(view)
    def wrapped(*args, **kwargs):
        if not get_auth().is_authenticated:
            return redirect(url_for("admin.login", locale=g.locale))
        return view(*args, **kwargs)

    return wrapped
