"""Data models for the provider module."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEFAULT_RPC_METHOD = "eth_sendRawTransaction"


class ProviderKind(Enum):
    """Wire protocol used to submit transactions to a node."""

    RAW_HTTP = "raw-http"
    JSON_RPC = "json-rpc"

    @classmethod
    def from_tag(cls, tag: str) -> ProviderKind | None:
        """Resolve a configuration tag such as ``blockbook`` or ``rpc``.

        Returns:
            The matching kind, or None for an unknown tag.
        """
        return _PROVIDER_TAGS.get(tag.strip().lower())


_PROVIDER_TAGS: dict[str, ProviderKind] = {
    "blockbook": ProviderKind.RAW_HTTP,
    "raw-http": ProviderKind.RAW_HTTP,
    "rpc": ProviderKind.JSON_RPC,
    "json-rpc": ProviderKind.JSON_RPC,
}


@dataclass(frozen=True)
class ProviderConfig:
    """Immutable description of the node backend.

    Attributes:
        kind: Submission protocol. Unknown configuration tags are kept as the
            raw string and reported by the dispatcher on every request.
        endpoint: URL the transaction is POSTed to.
        rpc_method: JSON-RPC method name, used by JSON_RPC only.
    """

    kind: ProviderKind | str
    endpoint: str
    rpc_method: str | None = None

    @property
    def label(self) -> str:
        """Short name used in logs and metrics."""
        return self.kind.value if isinstance(self.kind, ProviderKind) else "unknown"


class OutcomeStatus(Enum):
    """Terminal states of a submission."""

    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    TRANSPORT_ERROR = "transport_error"
    UNKNOWN_PROVIDER = "unknown_provider"


@dataclass(frozen=True)
class SubmissionOutcome:
    """Result of a single submission attempt.

    Use the factory classmethods; they guarantee that a sent outcome has an
    identifier and a failed one has an error category.
    """

    status: OutcomeStatus
    transaction: str
    identifier: str | None = None
    error_category: str | None = None
    raw_error: str | None = None

    @property
    def sent(self) -> bool:
        """Return True if the node accepted the transaction."""
        return self.status == OutcomeStatus.CONFIRMED

    @classmethod
    def confirmed(cls, transaction: str, identifier: str) -> SubmissionOutcome:
        return cls(OutcomeStatus.CONFIRMED, transaction, identifier=identifier)

    @classmethod
    def rejected(
        cls, transaction: str, raw_error: str, error_category: str
    ) -> SubmissionOutcome:
        return cls(
            OutcomeStatus.REJECTED,
            transaction,
            error_category=error_category,
            raw_error=raw_error,
        )

    @classmethod
    def transport_error(cls, transaction: str, raw_error: str) -> SubmissionOutcome:
        return cls(
            OutcomeStatus.TRANSPORT_ERROR,
            transaction,
            error_category="Transport error",
            raw_error=raw_error,
        )

    @classmethod
    def unknown_provider(cls, transaction: str, tag: str) -> SubmissionOutcome:
        return cls(
            OutcomeStatus.UNKNOWN_PROVIDER,
            transaction,
            error_category="Unknown provider type",
            raw_error=f"Unknown provider type: {tag}",
        )
