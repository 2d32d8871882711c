"""HTTP session for the vCO REST API."""

from __future__ import annotations

import logging
from typing import Any

import requests

from vco_workflows import __version__
from vco_workflows.config import VcoSettings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class VcoSession:
    """Authenticated GET/POST against the configured API base URL.

    Proxies are taken from the usual ``http_proxy``/``https_proxy``
    environment variables by requests itself.
    """

    def __init__(
        self,
        settings: VcoSettings,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._base_url = settings.url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.auth = (settings.username, settings.password)
        self._session.verify = settings.verify_ssl
        self._session.headers.update(
            {
                "Accept": "application/json",
                "User-Agent": f"vco-workflows/{__version__}",
            }
        )
        if not settings.verify_ssl:
            logger.warning(
                "TLS certificate verification is disabled", extra={"url": self._base_url}
            )

    @property
    def base_url(self) -> str:
        return self._base_url

    def url_for(self, endpoint: str) -> str:
        return f"{self._base_url}/{endpoint.lstrip('/')}"

    def get(self, endpoint: str, headers: dict[str, str] | None = None) -> requests.Response:
        url = self.url_for(endpoint)
        logger.debug("GET", extra={"url": url})
        resp = self._session.get(url, headers=headers, timeout=self._timeout)
        resp.raise_for_status()
        return resp

    def post(
        self,
        endpoint: str,
        body: str | dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        url = self.url_for(endpoint)
        logger.debug("POST", extra={"url": url})
        if isinstance(body, str):
            merged = {"Content-Type": "application/json", **(headers or {})}
            resp = self._session.post(url, data=body, headers=merged, timeout=self._timeout)
        else:
            resp = self._session.post(url, json=body, headers=headers, timeout=self._timeout)
        resp.raise_for_status()
        return resp

    def close(self) -> None:
        self._session.close()
