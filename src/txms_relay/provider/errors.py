"""Normalization of node error strings into user-facing phrases.

Node software reports rejections with implementation-specific wording. The
table below maps the go-ethereum transaction pool and state transition errors
to short phrases suitable for an SMS reply. Unknown strings pass through
unchanged.

Reference:
    https://github.com/ethereum/go-ethereum/blob/master/core/txpool/errors.go
    https://github.com/ethereum/go-ethereum/blob/master/core/error.go
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from types import MappingProxyType

KNOWN_ERRORS: Mapping[str, str] = MappingProxyType(
    {
        "nonce too low": "Nonce too low.",
        "nonce too high": "Nonce too high.",
        "nonce has max value": "Nonce has max value.",
        "insufficient funds for gas * price + value": "Insufficient funds.",
        "insufficient funds for transfer": "Insufficient funds for transfer.",
        "replacement transaction underpriced": "Replacement transaction underpriced.",
        "transaction underpriced": "Transaction underpriced.",
        "already known": "Transaction already known.",
        "known transaction": "Transaction already known.",
        "intrinsic gas too low": "Intrinsic gas too low.",
        "exceeds block gas limit": "Gas limit exceeds block gas limit.",
        "gas limit reached": "Block gas limit reached.",
        "oversized data": "Transaction too large.",
        "invalid sender": "Invalid sender.",
        "negative value": "Negative value.",
        "txpool is full": "Transaction pool is full.",
        "transaction type not supported": "Transaction type not supported.",
        "max fee per gas less than block base fee": "Max fee per gas too low.",
        "max priority fee per gas higher than max fee per gas": (
            "Priority fee higher than max fee."
        ),
        "invalid transaction v, r, s values": "Invalid signature.",
        "only replay-protected (EIP-155) transactions allowed over RPC": (
            "Transaction is not replay-protected."
        ),
        "future transaction tries to replace pending": (
            "Future transaction tries to replace pending."
        ),
        "account limit exceeded": "Account limit exceeded.",
    }
)

# Blockbook forwards node errors as "<code>: <message>"
_RPC_CODE_PREFIX = re.compile(r"^-?\d+:\s*")


class ErrorNormalizer:
    """Lookup of known node errors with optional operator-supplied entries."""

    def __init__(self, extra: Mapping[str, str] | None = None) -> None:
        """Initialize the normalizer.

        Args:
            extra: Additional or overriding table entries.
        """
        self._table: dict[str, str] = {**KNOWN_ERRORS, **(extra or {})}

    def normalize(self, raw_error: str) -> str:
        """Map a node error to its phrase, or return it unchanged."""
        text = raw_error.strip()
        for candidate in (text, _RPC_CODE_PREFIX.sub("", text)):
            if candidate in self._table:
                return self._table[candidate]
            # Newer geth appends details, e.g. "nonce too low: address 0x.., tx: 1 state: 2"
            head, sep, _ = candidate.partition(":")
            if sep and head in self._table:
                return self._table[head]
        return raw_error


_default_normalizer = ErrorNormalizer()


def normalize_error(raw_error: str) -> str:
    """Normalize a node error using the built-in table."""
    return _default_normalizer.normalize(raw_error)
