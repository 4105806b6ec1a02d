"""Splitting of inbound message bodies into transaction segments."""

from __future__ import annotations

from txms_relay.errors import EmptyMessageError

SEGMENT_SEPARATOR = "\n"


def split_segments(body: str | None) -> list[str]:
    """Split a message body into ordered, trimmed segments.

    Blank segments are kept in place; rejecting them is the decoder's job.

    Args:
        body: Raw message body as received from the gateway.

    Returns:
        List of segments in message order.

    Raises:
        EmptyMessageError: If the body is missing or blank.
    """
    if body is None or not body.strip():
        raise EmptyMessageError()
    return [part.strip() for part in body.split(SEGMENT_SEPARATOR)]
