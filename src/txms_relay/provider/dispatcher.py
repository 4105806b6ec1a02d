"""Submission of canonical transactions to a blockchain node."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from prometheus_client import Counter, Histogram

from txms_relay import __version__
from txms_relay.provider.errors import ErrorNormalizer
from txms_relay.provider.models import ProviderConfig, ProviderKind, SubmissionOutcome

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
USER_AGENT = f"txms-relay/{__version__}"
JSONRPC_VERSION = "2.0"
JSONRPC_REQUEST_ID = 1

SUBMISSIONS_TOTAL = Counter(
    "txms_relay_submissions_total",
    "Transactions submitted to the provider",
    ["provider", "outcome"],
)

SUBMISSION_SECONDS = Histogram(
    "txms_relay_submission_seconds",
    "Provider round trip time in seconds",
    ["provider"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

Handler = Callable[[str], Awaitable[SubmissionOutcome]]


def _extract_error(error: Any) -> str | None:
    """Pull the error text out of a Blockbook or JSON-RPC error field."""
    if not error:
        return None
    if isinstance(error, dict):
        message = error.get("message")
        return str(message) if message else str(error)
    return str(error)


class ProviderDispatcher:
    """Submits transactions using the protocol named by the provider config.

    Performs exactly one HTTP round trip per call. Failures never raise; they
    are reported through the returned SubmissionOutcome.

    Example:
        ```python
        config = ProviderConfig(ProviderKind.JSON_RPC, "http://node:8545", "eth_sendRawTransaction")
        dispatcher = ProviderDispatcher(config)
        outcome = await dispatcher.dispatch("0x02f8...")
        ```
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        normalizer: ErrorNormalizer | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            config: Provider backend configuration.
            normalizer: Error normalizer for rejections.
            timeout: HTTP request timeout in seconds.
        """
        self.config = config
        self.normalizer = normalizer or ErrorNormalizer()
        self.timeout = timeout

        self._handlers: dict[ProviderKind, Handler] = {
            ProviderKind.RAW_HTTP: self._submit_raw,
            ProviderKind.JSON_RPC: self._submit_json_rpc,
        }

    async def dispatch(self, tx: str) -> SubmissionOutcome:
        """Submit a canonical hex transaction.

        Args:
            tx: ``0x``-prefixed lowercase hex transaction.

        Returns:
            The submission outcome.
        """
        kind = self.config.kind
        handler = self._handlers.get(kind) if isinstance(kind, ProviderKind) else None
        if handler is None:
            logger.error("Unknown provider type: %s", kind)
            outcome = SubmissionOutcome.unknown_provider(tx, str(kind))
        else:
            started = time.monotonic()
            outcome = await handler(tx)
            SUBMISSION_SECONDS.labels(provider=self.config.label).observe(
                time.monotonic() - started
            )

        SUBMISSIONS_TOTAL.labels(
            provider=self.config.label, outcome=outcome.status.value
        ).inc()
        return outcome

    async def _submit_raw(self, tx: str) -> SubmissionOutcome:
        """POST the transaction as a plain text body (Blockbook sendtx)."""
        return await self._post(
            tx,
            content=tx,
            headers={"Content-Type": "text/plain", "User-Agent": USER_AGENT},
        )

    async def _submit_json_rpc(self, tx: str) -> SubmissionOutcome:
        """POST the transaction inside a JSON-RPC 2.0 envelope."""
        payload = {
            "jsonrpc": JSONRPC_VERSION,
            "method": self.config.rpc_method,
            "params": [tx],
            "id": JSONRPC_REQUEST_ID,
        }
        return await self._post(tx, json=payload, headers={"User-Agent": USER_AGENT})

    async def _post(self, tx: str, **request: Any) -> SubmissionOutcome:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.config.endpoint, **request)
        except httpx.TimeoutException:
            logger.warning("Provider timeout after %.1fs", self.timeout)
            return SubmissionOutcome.transport_error(tx, "Provider request timed out")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Provider request failed: %s", e)
            return SubmissionOutcome.transport_error(tx, str(e) or type(e).__name__)

        return self._interpret(tx, response)

    def _interpret(self, tx: str, response: httpx.Response) -> SubmissionOutcome:
        """Map a provider response onto a submission outcome."""
        try:
            data = response.json()
        except ValueError:
            logger.error(
                "Provider returned non-JSON response: %s %s",
                response.status_code,
                response.text[:200],
            )
            return SubmissionOutcome.transport_error(
                tx, f"Invalid provider response (HTTP {response.status_code})"
            )

        if not isinstance(data, dict):
            return SubmissionOutcome.transport_error(tx, "Invalid provider response")

        result = data.get("result")
        if response.is_success and result:
            logger.info("Transaction accepted: %s", result)
            return SubmissionOutcome.confirmed(tx, str(result))

        raw_error = _extract_error(data.get("error"))
        if raw_error:
            category = self.normalizer.normalize(raw_error)
            logger.info("Transaction rejected: %s", raw_error)
            return SubmissionOutcome.rejected(tx, raw_error, category)

        if not response.is_success:
            logger.error("Provider returned HTTP %d", response.status_code)
            return SubmissionOutcome.transport_error(tx, f"HTTP {response.status_code}")

        return SubmissionOutcome.transport_error(tx, "Provider response carried no result")
