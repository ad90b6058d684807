"""HTTP client for provider pages and REST endpoints"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ugl.exceptions import TransportError
from ugl.models import ProxyConfig

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class HttpClient:
    """Thin httpx wrapper routing every request through the optional proxy.

    Network failures become TransportError; HTTP error statuses are
    returned to the caller, which knows what they mean for its provider.
    """

    def __init__(
        self,
        proxy: ProxyConfig | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.proxy = proxy
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.Client:
        kwargs: dict[str, Any] = {"timeout": self.timeout, "follow_redirects": True}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        elif self.proxy is not None:
            kwargs["proxy"] = self.proxy.url
        return httpx.Client(**kwargs)

    def status(self, url: str) -> int:
        """GET a page and return only its status code"""
        log.debug(f"GET {url}")
        try:
            with self._client() as client:
                response = client.get(url)
        except httpx.HTTPError as e:
            raise TransportError(f"GET {url} failed: {e}")
        log.debug(f"GET {url} -> {response.status_code}")
        return response.status_code

    def get_json(self, url: str, *, token: str | None = None) -> dict[str, Any]:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        log.debug(f"GET {url}")
        try:
            with self._client() as client:
                response = client.get(url, headers=headers)
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TransportError(f"GET {url} failed: {e}")

    def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        token: str | None = None,
        auth: tuple[str, str] | None = None,
    ) -> httpx.Response:
        """POST a JSON body with bearer token or basic auth"""
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        log.debug(f"POST {url}")
        try:
            with self._client() as client:
                response = client.post(url, json=payload, headers=headers, auth=auth)
        except httpx.HTTPError as e:
            raise TransportError(f"POST {url} failed: {e}")
        log.debug(f"POST {url} -> {response.status_code}")
        return response
