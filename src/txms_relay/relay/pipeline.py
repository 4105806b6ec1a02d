"""Decode-and-dispatch pipeline for inbound webhook messages."""

from __future__ import annotations

import logging
from contextlib import aclosing
from enum import Enum
from typing import TYPE_CHECKING

from txms_relay.decoder.decoder import TransactionDecoder
from txms_relay.decoder.segments import split_segments
from txms_relay.errors import EmptyMessageError, NoValidTransactionsError, RelayError
from txms_relay.provider.dispatcher import ProviderDispatcher
from txms_relay.provider.errors import ErrorNormalizer
from txms_relay.relay.attachments import AttachmentResolver
from txms_relay.relay.formatter import ResponseFormatter
from txms_relay.relay.models import IncomingPayload, RelayResponse, ResponsePayload

if TYPE_CHECKING:
    from txms_relay.config import Settings

logger = logging.getLogger(__name__)


class SegmentPolicy(Enum):
    """How many segments of a message are relayed."""

    FIRST = "first"  # only the first segment, remaining ones are discarded
    ALL = "all"  # every segment, in order


class RelayPipeline:
    """Turns an inbound message into provider submissions and a response.

    The body is relayed when present; otherwise carrier attachments are
    resolved one at a time until one of them produces a dispatch.
    """

    def __init__(
        self,
        decoder: TransactionDecoder,
        dispatcher: ProviderDispatcher,
        formatter: ResponseFormatter | None = None,
        resolver: AttachmentResolver | None = None,
        *,
        policy: SegmentPolicy = SegmentPolicy.FIRST,
    ) -> None:
        """Initialize the pipeline.

        Args:
            decoder: Segment decoder.
            dispatcher: Provider dispatcher.
            formatter: Response formatter.
            resolver: Attachment resolver; None disables attachment handling.
            policy: Segment policy.
        """
        self.decoder = decoder
        self.dispatcher = dispatcher
        self.formatter = formatter or ResponseFormatter()
        self.resolver = resolver
        self.policy = policy

    @classmethod
    def from_settings(cls, settings: Settings) -> RelayPipeline:
        """Build a pipeline wired from application settings."""
        dispatcher = ProviderDispatcher(
            settings.node.to_config(),
            normalizer=ErrorNormalizer(settings.error_messages),
            timeout=settings.node.timeout,
        )
        resolver = None
        if settings.attachments.enabled:
            resolver = AttachmentResolver(
                suffix=settings.attachments.suffix,
                timeout=settings.attachments.timeout,
            )
        return cls(
            TransactionDecoder(),
            dispatcher,
            resolver=resolver,
            policy=SegmentPolicy(settings.segment_policy),
        )

    async def handle(self, payload: IncomingPayload) -> RelayResponse:
        """Relay one inbound message.

        Never raises for relay errors; they are returned as formatted payloads.

        Args:
            payload: The inbound message.

        Returns:
            RelayResponse with one payload, or one per segment in ALL mode.
        """
        try:
            if payload.body is not None and payload.body.strip():
                return await self._relay_segments(split_segments(payload.body))

            if payload.attachments and self.resolver is not None:
                return await self._relay_attachments(self.resolver, payload.attachments)

            raise EmptyMessageError()
        except RelayError as e:
            logger.warning("Err(%d): %s", e.errno, e.detail)
            return self._response([self.formatter.format_error(e)])

    async def _relay_attachments(
        self, resolver: AttachmentResolver, urls: tuple[str, ...]
    ) -> RelayResponse:
        """Relay the first attachment whose segments produce a dispatch."""
        async with aclosing(resolver.resolve(urls)) as batches:
            async for segments in batches:
                try:
                    return await self._relay_segments(segments, require_dispatch=True)
                except RelayError as e:
                    logger.warning("Skipping attachment: Err(%d): %s", e.errno, e.detail)

        raise NoValidTransactionsError()

    async def _relay_segments(
        self, segments: list[str], *, require_dispatch: bool = False
    ) -> RelayResponse:
        """Decode and dispatch segments according to the segment policy.

        Args:
            segments: Segments of one message body or attachment.
            require_dispatch: In ALL mode, fail unless at least one segment
                reached the dispatcher.

        Raises:
            RelayError: In FIRST mode, if the first segment cannot be decoded.
            NoValidTransactionsError: In ALL mode with ``require_dispatch``,
                if no segment could be decoded.
        """
        if self.policy == SegmentPolicy.FIRST:
            if len(segments) > 1:
                logger.debug("Discarding %d trailing segments", len(segments) - 1)
            return self._response([await self._relay_one(segments[0])])

        payloads: list[ResponsePayload] = []
        dispatched = 0
        for segment in segments:
            try:
                payloads.append(await self._relay_one(segment))
                dispatched += 1
            except RelayError as e:
                logger.warning("Err(%d): %s", e.errno, e.detail)
                payloads.append(self.formatter.format_error(e))

        if require_dispatch and not dispatched:
            raise NoValidTransactionsError("No segment reached the provider")
        return self._response(payloads)

    async def _relay_one(self, segment: str) -> ResponsePayload:
        tx = self.decoder.decode(segment)
        outcome = await self.dispatcher.dispatch(tx)
        payload = self.formatter.format(outcome)
        if outcome.sent:
            logger.info("OK %s", payload.message)
        else:
            logger.error("%s (%s)", payload.message, outcome.raw_error)
        return payload

    def _response(self, payloads: list[ResponsePayload]) -> RelayResponse:
        return RelayResponse(tuple(payloads), batch=self.policy == SegmentPolicy.ALL)
