"""
Small JSON-over-HTTPS helper shared by the LinkedIn and Box adapters.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from common.exceptions import ProviderCallFailed

logger = logging.getLogger(__name__)


@dataclass
class ProviderResponse:
    status_code: int
    payload: Any


class TimeoutSession(requests.Session):
    """Session that applies a default timeout to every request (client libraries pass none)."""

    def __init__(self, timeout: float):
        super().__init__()
        self.timeout = timeout

    def request(self, method, url, *args, **kwargs):
        kwargs.setdefault("timeout", self.timeout)
        return super().request(method, url, *args, **kwargs)


def _parse_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    return response.json()


def _raw_body(response: requests.Response) -> Any:
    try:
        return _parse_body(response)
    except ValueError:
        return response.text[:2000]


def post_json(provider: str, url: str, body: Dict[str, Any], *, timeout: float,
              headers: Optional[Dict[str, str]] = None, params: Optional[Dict[str, str]] = None,
              session: Optional[requests.Session] = None) -> ProviderResponse:
    """
    POST a JSON body and return the parsed response.
    Raises ProviderCallFailed on transport errors, non-2xx statuses and unparseable bodies.
    """
    send = (session or requests).post
    all_headers = {"Content-Type": "application/json"}
    all_headers.update(headers or {})

    try:
        response = send(url, data=json.dumps(body), headers=all_headers, params=params, timeout=timeout)
    except requests.RequestException as exc:
        logger.warning("%s request failed: %s", provider, exc.__class__.__name__)
        raise ProviderCallFailed(provider, f"{provider} request failed: {exc.__class__.__name__}") from exc

    if not 200 <= response.status_code < 300:
        payload = _raw_body(response)
        logger.warning("%s returned %s", provider, response.status_code)
        raise ProviderCallFailed(
            provider,
            f"{provider} returned HTTP {response.status_code}",
            status_code=response.status_code,
            payload=payload,
        )

    try:
        payload = _parse_body(response)
    except ValueError as exc:
        raise ProviderCallFailed(
            provider,
            f"{provider} returned a malformed response",
            status_code=response.status_code,
            payload=response.text[:2000],
        ) from exc

    return ProviderResponse(status_code=response.status_code, payload=payload)
