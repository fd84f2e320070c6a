from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from dashboard.data.errors import ApiError, StoreUnavailableError

logger = logging.getLogger(__name__)


def _build_session():
    session = requests.Session()
    retry = Retry(
        total=2,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=("GET", "POST", "PUT", "DELETE"),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_connections=10, pool_maxsize=10)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class ApiClient:
    """Authenticated access to the MoodLog backend for one signed-in user."""

    def __init__(self, base_url: str, token: str, user_id: str, session=None, timeout: int = 10):
        if not base_url:
            raise ValueError("API_BASE_URL not configured")
        if not token:
            raise ValueError("BACKEND_SESSION_SECRET not configured")
        if not user_id:
            raise ValueError("Missing user id for API request")
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.user_id = user_id
        self.timeout = timeout
        self._session = session if session is not None else _build_session()

    def store_url(self, path: str, prefix: str = "/v1/store") -> str:
        return f"{prefix}/{quote(path.strip('/'), safe='/')}"

    def request(self, method: str, path: str, params: dict | None = None, json: dict | None = None) -> Any:
        headers = {
            "X-User-Id": self.user_id,
            "X-Backend-Token": self.token,
        }
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise StoreUnavailableError(str(exc)) from exc
        if response.status_code >= 400:
            try:
                detail = response.json().get("detail")
            except (ValueError, AttributeError):
                detail = response.text
            raise ApiError(response.status_code, detail)
        if response.status_code == 204:
            return None
        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("%s %s returned a non-JSON body", method, path)
            raise ApiError(response.status_code, "Response body is not JSON") from exc
        if not isinstance(payload, dict):
            raise ApiError(response.status_code, f"Unexpected response body of type {type(payload).__name__}")
        return payload

    def close(self) -> None:
        close = getattr(self._session, "close", None)
        if close is not None:
            close()
