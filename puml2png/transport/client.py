"""Blocking httpx client that fetches rendered diagrams from a PlantUML server."""

from __future__ import annotations

import logging
from types import TracebackType
from urllib.parse import urlparse

import httpx

from puml2png.codec import encode

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "http://www.plantuml.com/plantuml"
DEFAULT_TIMEOUT = 10.0

# The server answers syntax errors with 400 plus an image describing the
# problem, which is more useful on disk than nothing.
SOFT_ERROR_STATUSES = frozenset({400})


def _validate_server_url(url: str) -> str:
    """Reject base URLs that can't be used to build a render request."""
    if "\r" in url or "\n" in url:
        raise ValueError("CRLF injection detected in server url")

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise ValueError(f"PlantUML server url must be http(s), got {parsed.scheme!r}")
    if not parsed.netloc:
        raise ValueError(f"PlantUML server url has no host: {url!r}")

    return url.rstrip("/")


class PlantUMLClient:
    """Renders diagram source through ``GET {server}/{format}/{token}``.

    ``render`` never raises: every failure is logged and reported as None.
    Pass ``http_client`` to reuse a preconfigured ``httpx.Client`` (tests
    hand in one backed by ``httpx.MockTransport``); otherwise the client
    creates and owns one.
    """

    def __init__(
        self,
        server_url: str = DEFAULT_SERVER_URL,
        output_format: str = "png",
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.server_url = _validate_server_url(server_url)
        self.output_format = output_format
        self.timeout = timeout
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def url_for(self, source: str) -> str:
        """Full request URL for the given diagram source."""
        return f"{self.server_url}/{self.output_format}/{encode(source)}"

    def render(self, source: str) -> bytes | None:
        """Fetch the rendered image for ``source``, or None on any failure."""
        try:
            url = self.url_for(source)
            response = self._http.get(url, timeout=self.timeout)
        except httpx.TimeoutException as exc:
            logger.error("Render request timed out after %.1fs: %s", self.timeout, exc)
            return None
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error("Render request failed: %s", exc)
            return None

        return self._process_response(response)

    def ping(self) -> bool:
        """True if the server answers at all (any status below 500)."""
        try:
            response = self._http.get(self.server_url, timeout=self.timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug("Server %s unreachable: %s", self.server_url, exc)
            return False
        return response.status_code < 500

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> PlantUMLClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _process_response(self, response: httpx.Response) -> bytes | None:
        status = response.status_code

        if status == 200:
            return self._non_empty(response.content)

        if status in SOFT_ERROR_STATUSES:
            logger.error(
                "Server returned status %d; keeping its diagnostic image", status
            )
            return self._non_empty(response.content)

        logger.error("Server returned status %d", status)
        return None

    @staticmethod
    def _non_empty(body: bytes) -> bytes | None:
        if not body:
            logger.error("Server returned an empty body")
            return None
        return body
