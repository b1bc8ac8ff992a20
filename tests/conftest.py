import json

import pytest
import requests

from libya_auto import config
from libya_auto.app import app as flask_app


def make_response(status=200, body=None):
    response = requests.Response()
    response.status_code = status
    response.reason = "OK" if status < 400 else "Error"
    response._content = b"" if body is None else json.dumps(body).encode("utf-8")
    return response


@pytest.fixture
def app():
    flask_app.config.update(TESTING=True, API_URL="http://backend.test", SECRET_KEY="test-secret")
    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    with client.session_transaction() as sess:
        sess[config.TOKEN_KEY] = "tok-123"
        sess[config.USER_KEY] = json.dumps({"id": "1", "username": "admin", "role": "admin"})
    return client
