"""Shared HTTP client for the JSON upstreams.

Wraps a ``requests.Session`` so that adapters get decoded JSON or one of
two domain errors, never a raw ``requests`` exception:

- TransportError: connection failure, timeout or bad HTTP status, after
  the retry policy is exhausted
- UpstreamFormatError: the body is not JSON
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import requests

from ...config import HttpConfig, get_config
from ...domain.errors import TransportError, UpstreamFormatError
from .retry import RetryPolicy


class _RetryableStatus(Exception):
    """Raised internally for 429 and 5xx responses so the policy retries them."""

    def __init__(self, response: requests.Response) -> None:
        super().__init__(f"HTTP {response.status_code}")
        self.response = response


def _is_retryable(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


@dataclass
class HttpClient:
    """JSON-over-HTTP client with uniform retry behaviour.

    Attributes:
        config: HTTP configuration (user agent, default retry policy)
        session: Underlying requests session
    """

    config: HttpConfig = field(default_factory=lambda: get_config().http)
    session: requests.Session = field(default_factory=requests.Session)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        self.session.headers["User-Agent"] = self.config.user_agent

    def get_json(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = 30,
        retry: Optional[RetryPolicy] = None,
    ) -> Any:
        """GET ``url`` and decode the JSON body."""
        return self._request(
            "GET", url, retry=retry, timeout=timeout, params=params, headers=headers
        )

    def post_json(
        self,
        url: str,
        data: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = 30,
        retry: Optional[RetryPolicy] = None,
    ) -> Any:
        """POST a form or raw body to ``url`` and decode the JSON reply."""
        return self._request(
            "POST", url, retry=retry, timeout=timeout, data=data, headers=headers
        )

    def _request(
        self,
        method: str,
        url: str,
        retry: Optional[RetryPolicy],
        timeout: float,
        **kwargs: Any,
    ) -> Any:
        policy = retry or RetryPolicy.from_settings(self.config)
        attempts = 0

        def attempt() -> requests.Response:
            nonlocal attempts
            attempts += 1
            response = self.session.request(method, url, timeout=timeout, **kwargs)
            if _is_retryable(response.status_code):
                raise _RetryableStatus(response)
            return response

        try:
            response = policy.call(
                attempt,
                retry_on=(requests.ConnectionError, requests.Timeout, _RetryableStatus),
                operation=f"{method} {url}",
            )
        except _RetryableStatus as e:
            raise TransportError(
                f"{method} {url} failed with HTTP {e.response.status_code}",
                url=url,
                attempts=attempts,
                status_code=e.response.status_code,
            )
        except requests.RequestException as e:
            raise TransportError(
                f"{method} {url} failed", cause=e, url=url, attempts=attempts
            )

        if not response.ok:
            raise TransportError(
                f"{method} {url} failed with HTTP {response.status_code}",
                url=url,
                attempts=attempts,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamFormatError(
                f"Response from {url} is not JSON", cause=e, source=url
            )

        self._logger.debug(
            "HTTP request succeeded",
            extra={"method": method, "url": url, "attempts": attempts},
        )
        return payload

    def close(self) -> None:
        self.session.close()
