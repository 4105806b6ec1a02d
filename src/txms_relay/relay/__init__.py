"""Relay layer - inbound messages to formatted submission results."""

from txms_relay.relay.attachments import AttachmentResolver
from txms_relay.relay.formatter import ResponseFormatter, short_tag
from txms_relay.relay.models import IncomingPayload, RelayResponse, ResponsePayload
from txms_relay.relay.pipeline import RelayPipeline, SegmentPolicy

__all__ = [
    "AttachmentResolver",
    "IncomingPayload",
    "RelayPipeline",
    "RelayResponse",
    "ResponseFormatter",
    "ResponsePayload",
    "SegmentPolicy",
    "short_tag",
]
