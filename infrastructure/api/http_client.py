import logging
from typing import Any, Callable, Dict, List, Optional

import requests

log = logging.getLogger(__name__)

SessionInvalidatedListener = Callable[[str], None]


class ApiError(Exception):
    """Non-2xx response or network failure talking to the ticketing backend."""

    def __init__(self, status_code: Optional[int], reason: str):
        self.status_code = status_code
        self.reason = reason
        super().__init__(reason)


class TransportUnauthorized(ApiError):
    pass


def _extract_reason(resp) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "message"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {resp.status_code}"


class ApiClient:
    """
    Thin JSON client for the ticketing backend.
    Attaches the bearer token and turns a 401 on an authenticated call into a
    single "session invalidated" signal for whoever subscribed.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._token_provider = token_provider
        self._invalidation_listeners: List[SessionInvalidatedListener] = []

    def set_token_provider(self, provider: Callable[[], Optional[str]]) -> None:
        self._token_provider = provider

    def on_session_invalidated(self, listener: SessionInvalidatedListener) -> None:
        if listener not in self._invalidation_listeners:
            self._invalidation_listeners.append(listener)

    def _emit_session_invalidated(self, reason: str) -> None:
        for listener in list(self._invalidation_listeners):
            listener(reason)

    def request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {"Content-Type": "application/json"}
        token = self._token_provider() if self._token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            resp = requests.request(
                method,
                url,
                headers=headers,
                json=json,
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.error(f"❌ Network error on {method} {path}: {e}")
            raise ApiError(None, f"Network error: {e}") from e

        if resp.status_code == 401:
            reason = _extract_reason(resp)
            if token:
                log.warning(f"⚠️ {method} {path} rejected the auth token: {reason}")
                self._emit_session_invalidated(reason)
            raise TransportUnauthorized(401, reason)

        if not 200 <= resp.status_code < 300:
            reason = _extract_reason(resp)
            log.error(f"❌ {method} {path} failed: {resp.status_code} {reason}")
            raise ApiError(resp.status_code, reason)

        try:
            body = resp.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {"data": body}

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request("PUT", path, json=json)
