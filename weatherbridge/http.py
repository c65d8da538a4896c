"""Blocking HTTP GET primitive shared by providers."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

import requests
from requests import Response

from .errors import NetworkError, QuotaExceeded


logger = logging.getLogger(__name__)


@dataclass
class RequestConfig:
    timeout: float = 10.0
    # When disabled any response body is treated as success.
    validate_status: bool = True


class HttpClient:
    """Issue GET requests and return the raw response text."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        config: Optional[RequestConfig] = None,
    ) -> None:
        self.config = config or RequestConfig()
        self.session = session or requests.Session()
        self._testing_mode = os.environ.get("TESTING_MODE", "0") == "1"
        self._log = logging.getLogger(self.__class__.__name__)

    def fetch(
        self,
        url: str,
        params: Optional[Mapping[str, object]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> str:
        self._log.debug("calling: %s", url)
        try:
            response = self.session.get(url, params=params, headers=headers, timeout=self.config.timeout)
        except requests.Timeout as exc:
            self._log.error("Request timed out", exc_info=exc)
            raise NetworkError("timeout") from exc
        except requests.RequestException as exc:
            self._log.error("Request failed", exc_info=exc)
            raise NetworkError("request failed") from exc
        self._log_response(response)
        return self._handle_response(response).text

    def _handle_response(self, response: Response) -> Response:
        if not self.config.validate_status:
            return response
        if response.status_code == 429:
            self._log.warning("Quota exceeded: %s", response.text)
            raise QuotaExceeded("quota exceeded", status_code=429)
        if not 200 <= response.status_code < 300:
            self._log.error("Provider returned %s: %s", response.status_code, response.text)
            raise NetworkError(f"HTTP {response.status_code}", status_code=response.status_code)
        return response

    def _log_response(self, response: Response) -> None:
        if not self._testing_mode:
            return
        logger.info(
            "HTTP response",
            extra={"url": response.url, "status": response.status_code, "body": response.text[:500]},
        )


def fetch(url: str, timeout: float = 10.0) -> str:
    """Fetch ``url`` with a throwaway client."""
    with requests.Session() as session:
        return HttpClient(session=session, config=RequestConfig(timeout=timeout)).fetch(url)


__all__ = ["HttpClient", "RequestConfig", "fetch"]
