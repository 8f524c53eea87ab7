"""
HTTP clients for the storefront API and the payment vault.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import requests

from .config import CheckoutConfig
from .errors import ApiRequestError

__all__ = ["ApiClient", "VaultClient"]


def _request_json(
    session: requests.Session,
    method: str,
    url: str,
    *,
    body: Optional[Any] = None,
    auth: Optional[tuple] = None,
    timeout: int = 30,
) -> Any:
    try:
        response = session.request(
            method.upper(),
            url,
            json=body,
            auth=auth,
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise ApiRequestError(f"Request to {url} failed: {exc}") from exc

    if response.status_code >= 400:
        raise ApiRequestError(
            f"{url} responded with {response.status_code}: {response.text}",
            status=response.status_code,
        )
    if not response.content:
        return None
    try:
        return response.json()
    except json.JSONDecodeError as exc:
        raise ApiRequestError(
            f"Failed to parse JSON from {url}: {response.text}",
            status=response.status_code,
        ) from exc


class ApiClient:
    """
    Authenticated client for the storefront API.
    """

    def __init__(
        self,
        config: CheckoutConfig,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()

    def url(self, path: str) -> str:
        return f"{self.config.api_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, body: Optional[Any] = None) -> Any:
        url = self.url(path)
        logging.debug("%s %s", method.upper(), url)
        return _request_json(
            self.session,
            method,
            url,
            body=body,
            auth=(self.config.store_id, self.config.public_key),
            timeout=self.config.timeout_seconds,
        )


class VaultClient:
    """
    Client for the vault that creates payment intents and gateway authorizations.
    """

    def __init__(
        self,
        config: CheckoutConfig,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()

    def url(self, path: str) -> str:
        return f"{self.config.vault_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, body: Optional[Any] = None) -> Any:
        url = self.url(path)
        logging.info("Submitting %s %s to the vault", method.upper(), path)
        return _request_json(
            self.session,
            method,
            url,
            body=body,
            auth=(self.config.store_id, self.config.public_key),
            timeout=self.config.timeout_seconds,
        )
