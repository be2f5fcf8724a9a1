"""HTTP access for the manifest and for image bytes."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from imagelink.application.interfaces import IFetcher
from imagelink.config import REQUEST_TIMEOUT_SEC
from imagelink.errors import EncodingError, InvalidResponseError, NetworkError
from imagelink.models.source_url import SourceURL

LOGGER = logging.getLogger(__name__)


class HttpFetcher(IFetcher):
    """Plain GET requests over a shared :class:`requests.Session`.

    There is no retry policy; callers decide when to try again.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT_SEC,
    ):
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._timeout = timeout

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def fetch_bytes(self, url: str) -> bytes:
        return self._get(url).content

    def fetch_text(self, url: str) -> str:
        data = self._get(url).content
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise EncodingError(f"Invalid data encoding for {url}: {exc.reason}") from exc

    def _get(self, url: str) -> requests.Response:
        source = SourceURL.parse(url)
        LOGGER.debug("GET %s", source.raw)
        try:
            response = self._session.get(source.raw, timeout=self._timeout)
        except requests.RequestException as exc:
            raise NetworkError(f"Request to {source.raw} failed: {exc}") from exc
        if not 200 <= response.status_code <= 299:
            raise InvalidResponseError(
                f"Invalid response from {source.raw}: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response
