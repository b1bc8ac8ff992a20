from unittest.mock import patch

import pytest
import requests

from libya_auto.api import ApiClient, ApiError, fetch_all, multipart_fields
from tests.conftest import make_response

BASE = "http://backend.test"


@patch("requests.Session.send")
def test_get_prefixes_base_url(mock_send):
    mock_send.return_value = make_response(body=[{"_id": "1"}])
    client = ApiClient(BASE)

    assert client.get("/cars", {"lang": "ar"}) == [{"_id": "1"}]

    prepared = mock_send.call_args[0][0]
    assert prepared.method == "GET"
    assert prepared.url == "http://backend.test/cars?lang=ar"
    assert "Authorization" not in prepared.headers


@patch("requests.Session.send")
def test_token_is_sent_per_request(mock_send):
    mock_send.return_value = make_response(body={})
    ApiClient(BASE, token="abc").put("/blog/7", {"published": True})

    prepared = mock_send.call_args[0][0]
    assert prepared.method == "PUT"
    assert prepared.headers["Authorization"] == "Bearer abc"
    assert prepared.headers["Content-Type"] == "application/json"


@patch("requests.Session.send")
def test_post_form_forces_multipart(mock_send):
    mock_send.return_value = make_response(201, {"_id": "9"})
    client = ApiClient(BASE, token="abc")

    result = client.post_form(
        "/brands/create",
        {"name": "Kia"},
        files=[("logo", ("kia.png", b"png-bytes", "image/png"))],
        headers={"content-type": "application/json", "X-Trace": "1"},
    )

    assert result == {"_id": "9"}
    prepared = mock_send.call_args[0][0]
    assert prepared.headers["Content-Type"].startswith("multipart/form-data; boundary=")
    assert prepared.headers["X-Trace"] == "1"
    assert prepared.headers["Authorization"] == "Bearer abc"
    assert b'name="name"' in prepared.body
    assert b'filename="kia.png"' in prepared.body


@patch("requests.Session.send")
def test_put_form_without_fields_is_still_multipart(mock_send):
    mock_send.return_value = make_response(204)
    assert ApiClient(BASE).put_form("/hero-slides/1") is None

    prepared = mock_send.call_args[0][0]
    assert prepared.method == "PUT"
    assert prepared.headers["Content-Type"].startswith("multipart/form-data")


@patch("requests.Session.send")
def test_backend_message_is_surfaced(mock_send):
    mock_send.return_value = make_response(400, {"message": "Brand already exists"})

    with pytest.raises(ApiError) as excinfo:
        ApiClient(BASE).post("/brands/create", {"name": "Kia"})

    assert excinfo.value.status_code == 400
    assert excinfo.value.detail == "Brand already exists"
    assert str(excinfo.value) == "Brand already exists"


@patch("requests.Session.send")
def test_connection_error_becomes_api_error(mock_send):
    mock_send.side_effect = requests.ConnectionError("refused")

    with pytest.raises(ApiError) as excinfo:
        ApiClient(BASE).delete("/cars/1")

    assert excinfo.value.status_code is None
    assert excinfo.value.detail is None
    assert mock_send.call_count == 1


@patch("requests.Session.close")
@patch("requests.Session.send")
def test_each_call_closes_its_session(mock_send, mock_close):
    mock_send.return_value = make_response(body=[])
    client = ApiClient(BASE)

    client.get("/brands/all-brands")
    client.get("/cars/all-cars")

    assert mock_send.call_count == 2
    assert mock_close.call_count == 2


def test_multipart_fields_expands_lists_and_bools():
    fields = multipart_fields({"brands": ["a", "b"], "isActive": False, "skip": None, "order": 2})
    assert fields == [("brands", "a"), ("brands", "b"), ("isActive", "false"), ("order", "2")]


def test_fetch_all_returns_results_by_name():
    assert fetch_all(a=lambda: 1, b=lambda: "two") == {"a": 1, "b": "two"}


def test_fetch_all_propagates_failure():
    def boom():
        raise ApiError("down")

    with pytest.raises(ApiError):
        fetch_all(ok=lambda: [], bad=boom)
