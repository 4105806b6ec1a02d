"""Decoding layer - message segments to canonical hex transactions."""

from txms_relay.decoder.decoder import HexCodec, TransactionDecoder, canonicalize_hex, is_hex
from txms_relay.decoder.segments import split_segments
from txms_relay.decoder.txms import TxmsCodec, TxmsError

__all__ = [
    "HexCodec",
    "TransactionDecoder",
    "TxmsCodec",
    "TxmsError",
    "canonicalize_hex",
    "is_hex",
    "split_segments",
]
