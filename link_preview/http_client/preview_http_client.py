"""
This module provides the size-capped, redirect-checked async HTTP client used
to fetch pages and images for link previews.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import httpx

from link_preview.core.errors import FetchFailureError, InvalidPreviewError
from link_preview.core.logging import get_logger
from link_preview.core.settings import Settings, get_settings
from link_preview.utils.error_logger import log_http_error
from link_preview.utils.url_utils import is_permitted_link_preview_url

logger = get_logger(__name__)

MAX_FETCHED_CONTENT_SIZE = 2 * 1024 * 1024

# Twitter doesn't return Open Graph tags to our default user agent.
# `curl -A Signal "https://twitter.com/signalapp/status/1280166087577997312?s=20"`
# If this ever changes we can switch back to the default.
LINK_PREVIEW_USER_AGENT = "WhatsApp/2"

UrlPolicy = Callable[[str], bool]


@dataclass(frozen=True)
class FetchSessionConfig:
    """Immutable configuration for one link preview fetch session."""

    user_agent: str = LINK_PREVIEW_USER_AGENT
    max_response_size: int = MAX_FETCHED_CONTENT_SIZE
    timeout_seconds: float = 30.0
    connect_timeout_seconds: float = 10.0
    max_redirects: int = 10
    url_policy: UrlPolicy = is_permitted_link_preview_url

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, url_policy: UrlPolicy | None = None
    ) -> FetchSessionConfig:
        settings = settings or get_settings()
        return cls(
            timeout_seconds=settings.http_timeout_seconds,
            connect_timeout_seconds=settings.http_connect_timeout_seconds,
            max_redirects=settings.http_max_redirects,
            url_policy=url_policy or is_permitted_link_preview_url,
        )

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            # No response cache: always ask origin servers for fresh content.
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
        }


@dataclass(frozen=True)
class FetchedResource:
    """Body of a successful (2xx) response, read within the size cap."""

    final_url: str
    status_code: int
    content: bytes
    encoding: str


class PreviewHttpClient:
    """
    Async HTTP client for link preview resources.

    Every call builds a fresh httpx.AsyncClient from an immutable
    FetchSessionConfig, so no cookies, cache or connection state survive
    between calls. Redirects are followed by hand: each hop must pass the same
    URL policy as the original URL and redirect bodies are never read. The
    final body is streamed and the transfer is aborted once it exceeds the
    configured size cap.
    """

    def __init__(
        self,
        config: FetchSessionConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            config: Session configuration. Built from settings when omitted.
            transport: Optional httpx transport, used by tests to stub the network.
        """
        self.config = config or FetchSessionConfig.from_settings()
        self._transport = transport

    def _build_client(self) -> httpx.AsyncClient:
        # Redirects are followed by get() so every hop stays streamed and capped.
        return httpx.AsyncClient(
            headers=self.config.headers,
            timeout=httpx.Timeout(
                self.config.timeout_seconds, connect=self.config.connect_timeout_seconds
            ),
            follow_redirects=False,
            transport=self._transport,
        )

    def _check_request_url(self, request: httpx.Request) -> None:
        """Applied to the original request and to every redirect target."""
        url = str(request.url)
        if not self.config.url_policy(url):
            logger.warning(
                f"Refusing to fetch URL not permitted for link previews (host: {request.url.host})"
            )
            raise FetchFailureError("URL not permitted for link previews")

    async def _send_following_redirects(
        self, client: httpx.AsyncClient, url: str
    ) -> httpx.Response:
        """
        Sends a streamed GET and follows up to max_redirects redirects.

        Redirect responses are closed without reading their bodies. The
        returned response is still open and must be closed by the caller.
        """
        request = client.build_request("GET", url)
        for hop in range(self.config.max_redirects + 1):
            self._check_request_url(request)
            response = await client.send(request, stream=True)
            if response.next_request is None:
                return response
            await response.aclose()
            logger.debug(f"Redirect {hop + 1}: {response.status_code} -> {response.next_request.url.host}")
            request = response.next_request
        raise FetchFailureError(f"Exceeded {self.config.max_redirects} redirects")

    async def _read_capped(self, response: httpx.Response) -> bytes:
        limit = self.config.max_response_size

        declared = response.headers.get("Content-Length")
        if declared and declared.isdigit() and int(declared) > limit:
            raise FetchFailureError(f"Declared response size {declared} exceeds {limit} bytes")

        received = bytearray()
        async for chunk in response.aiter_bytes():
            received.extend(chunk)
            if len(received) > limit:
                raise FetchFailureError(f"Response exceeded {limit} bytes")
        return bytes(received)

    async def get(self, url: str, operation: str = "http_get") -> FetchedResource:
        """
        Performs a single GET and reads the body within the size cap.

        Args:
            url: The URL to request.
            operation: Name used when logging failures.

        Returns:
            The final URL, status code, body and text encoding of the response.

        Raises:
            FetchFailureError: For non-2xx responses, rejected redirects,
                too many redirects, oversized bodies and transport errors.
        """
        logger.debug(f"Making GET request to {url} for link preview")
        async with self._build_client() as client:
            try:
                response = await self._send_following_redirects(client, url)
                try:
                    if not response.is_success:
                        log_http_error(
                            "preview_http_client",
                            url,
                            response=response,
                            operation=operation,
                            context={"status_code": response.status_code},
                        )
                        raise FetchFailureError(f"Invalid response: {response.status_code}")

                    content = await self._read_capped(response)
                finally:
                    await response.aclose()

                final_url = str(response.url)
                if final_url != url:
                    logger.debug(f"Request to {url} was redirected. Final URL: {final_url}")
                return FetchedResource(
                    final_url=final_url,
                    status_code=response.status_code,
                    content=content,
                    encoding=response.encoding or "utf-8",
                )
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                log_http_error("preview_http_client", url, error=e, operation=operation)
                raise FetchFailureError(f"Request error for GET {url}: {e}") from e

    async def fetch_text(self, url: str) -> tuple[str, str]:
        """
        Fetches a page and decodes it as text.

        Returns:
            (final_url, body_text). Relative URLs inside the page must be
            resolved against final_url, not against the requested URL.

        Raises:
            FetchFailureError: See get().
            InvalidPreviewError: When the body is empty or cannot be decoded.
        """
        resource = await self.get(url, operation="fetch_text")
        try:
            text = resource.content.decode(resource.encoding)
        except (UnicodeDecodeError, LookupError) as e:
            logger.warning(f"Response object could not be parsed: {e}")
            raise InvalidPreviewError("Response body is not decodable text") from e
        if not text:
            logger.warning("Response object could not be parsed")
            raise InvalidPreviewError("Response body is empty")
        return resource.final_url, text

    async def fetch_bytes(self, url: str) -> bytes:
        """
        Fetches raw bytes, typically an image.

        Raises:
            FetchFailureError: See get().
            InvalidPreviewError: When the body is empty or not strictly
                smaller than the size cap.
        """
        resource = await self.get(url, operation="fetch_bytes")
        if not resource.content or len(resource.content) >= self.config.max_response_size:
            logger.warning("Response object could not be parsed")
            raise InvalidPreviewError("Response body is empty or too large")
        return resource.content
