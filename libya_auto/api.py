"""Thin client for the dealership REST backend.

Every call is a single request on its own session: no retry, no caching.
Headers are built per request from the client's own token, so nothing global
is mutated when a user logs in or out.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

import requests
from requests.structures import CaseInsensitiveDict
from urllib3.filepost import encode_multipart_formdata

from libya_auto import config

logger = logging.getLogger(__name__)

FileField = Tuple[str, Tuple[str, bytes, str]]


class ApiError(Exception):
    """A backend call failed, either on the wire or with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        # the backend's own ``message``, when it sent one
        self.detail = detail


def _backend_message(response: requests.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return None


def multipart_fields(data: Optional[Dict[str, Any]]) -> list:
    """Flatten a form dict into multipart fields; list values repeat the name."""
    fields = []
    for name, value in (data or {}).items():
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        for v in values:
            if isinstance(v, bool):
                v = "true" if v else "false"
            fields.append((name, str(v)))
    return fields


class ApiClient:
    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.base_url = (base_url or config.API_URL).rstrip("/")
        self.token = token
        self.timeout = timeout if timeout is not None else config.API_TIMEOUT

    def url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    def headers(self, extra: Optional[Dict[str, str]] = None) -> CaseInsensitiveDict:
        headers = CaseInsensitiveDict(extra or {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _send(self, method: str, endpoint: str, headers: Optional[Dict[str, str]] = None, **kwargs):
        url = self.url(endpoint)
        logger.debug("API %s: %s", method, url)
        # one session per call; fetch_all runs calls on several threads at once
        try:
            with requests.Session() as session:
                response = session.request(
                    method, url, headers=self.headers(headers), timeout=self.timeout, **kwargs
                )
        except requests.RequestException as exc:
            raise ApiError(f"{method} {endpoint} failed: {exc}") from exc
        if not response.ok:
            detail = _backend_message(response)
            message = detail or f"{method} {endpoint} returned {response.status_code}"
            raise ApiError(message, response.status_code, detail)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"{method} {endpoint} returned invalid JSON", response.status_code) from exc

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None):
        return self._send("GET", endpoint, params=params or {})

    def post(self, endpoint: str, data: Optional[Dict[str, Any]] = None):
        return self._send("POST", endpoint, json=data or {})

    def put(self, endpoint: str, data: Optional[Dict[str, Any]] = None):
        return self._send("PUT", endpoint, json=data or {})

    def delete(self, endpoint: str):
        return self._send("DELETE", endpoint)

    def _send_form(self, method: str, endpoint: str, data, files, headers):
        fields = multipart_fields(data) + list(files or [])
        body, content_type = encode_multipart_formdata(fields)
        merged = CaseInsensitiveDict(headers or {})
        merged["Content-Type"] = content_type
        return self._send(method, endpoint, headers=merged, data=body)

    def post_form(self, endpoint: str, data: Optional[Dict[str, Any]] = None,
                  files: Optional[Iterable[FileField]] = None,
                  headers: Optional[Dict[str, str]] = None):
        return self._send_form("POST", endpoint, data, files, headers)

    def put_form(self, endpoint: str, data: Optional[Dict[str, Any]] = None,
                 files: Optional[Iterable[FileField]] = None,
                 headers: Optional[Dict[str, str]] = None):
        return self._send_form("PUT", endpoint, data, files, headers)


def fetch_all(**calls: Callable[[], Any]) -> Dict[str, Any]:
    """Run independent backend calls together and return results by name."""
    if not calls:
        return {}
    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        futures = {name: pool.submit(fn) for name, fn in calls.items()}
        return {name: future.result() for name, future in futures.items()}
