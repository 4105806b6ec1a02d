"""Normalization of message segments into canonical hex transactions."""

from __future__ import annotations

import logging
import re
from typing import Protocol

from txms_relay.decoder.txms import TxmsCodec
from txms_relay.errors import DecodeFailureError, EmptySegmentError

logger = logging.getLogger(__name__)

HEX_PATTERN = re.compile(r"(0[xX])?[0-9a-fA-F]+")
CANONICAL_PATTERN = re.compile(r"0x[0-9a-f]+")


class HexCodec(Protocol):
    """Protocol for compact message codecs."""

    def decode(self, message: str) -> str:
        """Return the ``0x``-prefixed hex transaction carried by a message."""
        ...


def is_hex(segment: str) -> bool:
    """Return True if the segment is already a hex transaction."""
    return HEX_PATTERN.fullmatch(segment) is not None


def canonicalize_hex(segment: str) -> str:
    """Lowercase a hex segment and make sure it carries the ``0x`` prefix."""
    lowered = segment.lower()
    return lowered if lowered.startswith("0x") else f"0x{lowered}"


class TransactionDecoder:
    """Turns message segments into canonical hex transactions.

    Hex segments are normalized in place; anything else is handed to the
    compact message codec.
    """

    def __init__(self, codec: HexCodec | None = None) -> None:
        """Initialize the decoder.

        Args:
            codec: Codec for non-hex segments. Defaults to TxmsCodec.
        """
        self.codec = codec or TxmsCodec()

    def decode(self, segment: str) -> str:
        """Decode a single segment.

        Args:
            segment: Trimmed message segment.

        Returns:
            Canonical ``0x``-prefixed lowercase hex transaction.

        Raises:
            EmptySegmentError: If the segment is blank.
            DecodeFailureError: If the codec rejects the segment.
        """
        if is_hex(segment):
            hex_tx = canonicalize_hex(segment)
            logger.debug("HEX message: %s", hex_tx)
            return hex_tx

        if not segment:
            raise EmptySegmentError()

        try:
            decoded = self.codec.decode(segment)
        except ValueError as e:
            raise DecodeFailureError(str(e)) from e

        hex_tx = decoded.lower()
        if not CANONICAL_PATTERN.fullmatch(hex_tx):
            raise DecodeFailureError(f"Codec returned non-hex output: {decoded!r}")

        logger.debug("TxMS message: %s", hex_tx)
        return hex_tx
