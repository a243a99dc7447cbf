"""HTTP transport for the finance backend."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import requests

from finsync.events import InvalidationBus, InvalidationEvent
from finsync.exceptions import ResponseError, UnauthorizedError
from finsync.normalizer import UNAUTHORIZED_MESSAGE, server_message
from finsync.schema import DEFAULT_API_URL, DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


class TransportClient:
    """Issue JSON requests against the backend with bearer authentication.

    Every request carries a fixed deadline. A 401 response raises
    :class:`UnauthorizedError` and, unless the caller opts out, publishes an
    :class:`InvalidationEvent` on the bus so that every session consumer can
    react, even when the failing request had nothing to do with the session.
    Other non-2xx responses raise :class:`ResponseError`; connection failures
    and timeouts propagate as ``requests`` exceptions.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        token_provider: TokenProvider | None = None,
        bus: InvalidationBus | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider or (lambda: None)
        self.bus = bus or InvalidationBus()
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def __enter__(self) -> "TransportClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _headers(self) -> dict[str, str]:
        token = self.token_provider()
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        broadcast_unauthorized: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body (None when empty).

        Raises:
            UnauthorizedError: On 401.
            ResponseError: On any other non-2xx status.
            requests.ConnectionError: When the backend is unreachable.
            requests.Timeout: When the deadline is exceeded.
        """
        url = f"{self.base_url}{path}"
        logger.debug("%s %s params=%s", method, path, params)
        headers = self._headers()
        if json is not None:
            headers["Content-Type"] = "application/json"
        response = self.session.request(
            method,
            url,
            params=params,
            json=json,
            headers=headers,
            timeout=self.timeout_seconds,
        )
        payload = self._decode(response)
        logger.debug("%s %s -> %s", method, path, response.status_code)

        if response.status_code == 401:
            message = server_message(payload) or UNAUTHORIZED_MESSAGE
            if broadcast_unauthorized:
                self.bus.publish(InvalidationEvent(reason=message, method=method, path=path))
            raise UnauthorizedError(message, status=401)
        if not response.ok:
            raise ResponseError(
                response.status_code,
                payload,
                f"Request failed with status code {response.status_code}",
            )
        return payload

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None, **kwargs: Any) -> Any:
        return self.request("POST", path, json=json, **kwargs)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
