"""Data models for the relay module."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

DEFAULT_BODY_FIELD = "body"
DEFAULT_MEDIA_FIELD = "mms"


def iso_timestamp(moment: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with milliseconds, e.g. 2024-05-01T12:00:00.000Z."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class IncomingPayload:
    """An inbound SMS/MMS webhook message.

    Attributes:
        body: Message text, if the gateway sent one.
        attachments: Attachment URLs in gateway order.
        sender: Originating number, used for logging only.
    """

    body: str | None = None
    attachments: tuple[str, ...] = ()
    sender: str | None = None

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        *,
        body_field: str = DEFAULT_BODY_FIELD,
        media_field: str = DEFAULT_MEDIA_FIELD,
    ) -> IncomingPayload:
        """Create an IncomingPayload from a webhook JSON object."""
        body = data.get(body_field)
        media = data.get(media_field)
        if isinstance(media, str):
            media = [media]
        attachments = tuple(url for url in media or () if isinstance(url, str))
        sender = data.get("from")
        return cls(
            body=body if isinstance(body, str) else None,
            attachments=attachments,
            sender=str(sender) if sender is not None else None,
        )


@dataclass(frozen=True)
class ResponsePayload:
    """Result returned to the webhook caller.

    Attributes:
        message: Human-readable summary, short enough for an SMS reply.
        sent: True if the provider accepted the transaction.
        status: HTTP status code for this result.
        date: Generation time.
        hash: Transaction identifier reported by the provider.
        errno: Legacy error number.
        error: Stable error category or normalized provider reason.
    """

    message: str
    sent: bool
    status: int
    date: datetime = field(default_factory=lambda: datetime.now(UTC))
    hash: str | None = None
    errno: int | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the JSON response, omitting absent fields."""
        data: dict[str, Any] = {"message": self.message, "sent": self.sent}
        if self.hash is not None:
            data["hash"] = self.hash
        if self.errno is not None:
            data["errno"] = self.errno
        if self.error is not None:
            data["error"] = self.error
        data["date"] = iso_timestamp(self.date)
        return data


@dataclass(frozen=True)
class RelayResponse:
    """Terminal result of handling one webhook request."""

    payloads: tuple[ResponsePayload, ...]
    batch: bool = False

    @property
    def status(self) -> int:
        """HTTP status: 200 if every payload succeeded, else the first failure's."""
        for payload in self.payloads:
            if payload.status != 200:
                return payload.status
        return 200

    def body(self) -> dict[str, Any] | list[dict[str, Any]]:
        """JSON body: a list in batch mode, otherwise the single payload."""
        if self.batch:
            return [payload.to_dict() for payload in self.payloads]
        return self.payloads[0].to_dict()
