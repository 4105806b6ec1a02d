"""Resolution of MMS attachments that carry TxMS messages."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterable
from urllib.parse import urlsplit

import httpx

from txms_relay import __version__
from txms_relay.decoder.segments import split_segments
from txms_relay.errors import EmptyMessageError

logger = logging.getLogger(__name__)

DEFAULT_CARRIER_SUFFIX = ".txms.txt"
DEFAULT_FETCH_TIMEOUT = 10.0
USER_AGENT = f"txms-relay/{__version__}"


class AttachmentResolver:
    """Fetches carrier attachments and yields their message segments.

    Only URLs whose path ends with the carrier suffix are fetched. Fetch
    failures are logged and skipped, never raised. Iteration is lazy, so a
    consumer that stops early leaves the remaining URLs untouched.
    """

    def __init__(
        self,
        *,
        suffix: str = DEFAULT_CARRIER_SUFFIX,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
    ) -> None:
        """Initialize the resolver.

        Args:
            suffix: File suffix that marks a message carrier.
            timeout: HTTP request timeout in seconds.
        """
        self.suffix = suffix.lower()
        self.timeout = timeout

    def is_carrier(self, url: str) -> bool:
        """Return True if the URL path ends with the carrier suffix."""
        try:
            path = urlsplit(url).path
        except ValueError:
            return False
        return path.lower().endswith(self.suffix)

    async def resolve(self, urls: Iterable[str]) -> AsyncIterator[list[str]]:
        """Yield the segments of each carrier attachment in URL order.

        Args:
            urls: Attachment URLs from the webhook payload.

        Yields:
            Segments of one attachment's text.
        """
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        ) as client:
            for url in urls:
                if not self.is_carrier(url):
                    logger.debug("Skipping non-carrier attachment: %s", url)
                    continue

                text = await self._fetch(client, url)
                if text is None:
                    continue

                try:
                    segments = split_segments(text)
                except EmptyMessageError:
                    logger.warning("Attachment %s is empty", url)
                    continue

                yield segments

    async def _fetch(self, client: httpx.AsyncClient, url: str) -> str | None:
        """Fetch attachment text, returning None on any failure."""
        try:
            response = await client.get(url)
        except httpx.TimeoutException:
            logger.warning("Attachment fetch timeout: %s", url)
            return None
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Attachment fetch failed for %s: %s", url, e)
            return None

        if not response.is_success:
            logger.warning("Attachment fetch failed for %s: HTTP %d", url, response.status_code)
            return None

        return response.text
