import json
from unittest.mock import patch

import pytest

from libya_auto.api import ApiError
from libya_auto.auth import AuthContext, AuthError
from libya_auto.config import TOKEN_KEY, USER_KEY

USER = {"id": "1", "username": "admin", "role": "admin"}


@patch("libya_auto.api.ApiClient.post")
def test_login_stores_session_and_authorizes_client(mock_post):
    mock_post.return_value = {"token": "tok", "user": USER}
    store = {}
    auth = AuthContext(store, "http://backend.test")

    auth.login("admin", "secret")

    mock_post.assert_called_once_with("/auth/login", {"username": "admin", "password": "secret"})
    assert auth.is_authenticated
    assert auth.user == USER
    assert store[TOKEN_KEY] == "tok"
    assert json.loads(store[USER_KEY]) == USER
    assert auth.client().headers()["Authorization"] == "Bearer tok"


@patch("libya_auto.api.ApiClient.post")
def test_logout_clears_everything(mock_post):
    mock_post.return_value = {"token": "tok", "user": USER}
    store = {"unrelated": 1}
    auth = AuthContext(store)
    auth.login("admin", "secret")

    auth.logout()

    assert not auth.is_authenticated
    assert auth.user is None
    assert "Authorization" not in auth.client().headers()
    assert store == {"unrelated": 1}


@patch("libya_auto.api.ApiClient.post")
def test_failed_login_uses_backend_message(mock_post):
    mock_post.side_effect = ApiError("Invalid credentials", 401, "Invalid credentials")
    store = {}
    auth = AuthContext(store)

    with pytest.raises(AuthError, match="Invalid credentials"):
        auth.login("admin", "wrong")

    assert not auth.is_authenticated
    assert store == {}


@patch("libya_auto.api.ApiClient.post")
def test_failed_login_without_message(mock_post):
    mock_post.side_effect = ApiError("POST /auth/login failed: refused")

    with pytest.raises(AuthError, match="Login failed"):
        AuthContext({}).login("admin", "secret")


def test_session_restored_from_store():
    store = {TOKEN_KEY: "tok", USER_KEY: json.dumps(USER)}
    auth = AuthContext(store)
    assert auth.is_authenticated
    assert auth.user["username"] == "admin"


@pytest.mark.parametrize("store", [
    {TOKEN_KEY: "tok", USER_KEY: "{broken"},
    {TOKEN_KEY: "tok", USER_KEY: "[1, 2]"},
    {TOKEN_KEY: "tok"},
    {USER_KEY: json.dumps(USER)},
])
def test_corrupt_store_is_discarded(store):
    auth = AuthContext(store)
    assert not auth.is_authenticated
    assert TOKEN_KEY not in store
    assert USER_KEY not in store
