"""Request-level errors raised before a transaction reaches the provider.

Each error carries the legacy ``errno`` reported to SMS gateways, a stable
``category`` phrase and the HTTP status the relay answers with.
"""

from __future__ import annotations


class RelayError(Exception):
    """Base exception for relay validation failures."""

    errno: int = 0
    category: str = "Relay error"
    status: int = 422

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.category)
        self.detail = detail or self.category


class EmptyMessageError(RelayError):
    """The message body is absent or blank."""

    errno = 1
    category = "Empty message"


class EmptySegmentError(RelayError):
    """A segment of the message body is blank."""

    errno = 2
    category = "Empty message part"


class DecodeFailureError(RelayError):
    """A non-hex segment could not be decoded into a transaction."""

    errno = 4
    category = "Undecodable message part"


class NoValidTransactionsError(RelayError):
    """No attachment produced a transaction that could be dispatched."""

    errno = 7
    category = "No valid transactions processed"


class MalformedRequestError(RelayError):
    """The webhook request is not a JSON object."""

    errno = 8
    category = "Malformed request"
    status = 400
