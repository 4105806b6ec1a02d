"""TxMS compact message codec.

A TxMS message packs the hex digits of a serialized transaction two bytes per
UTF-16 code unit, so a 200 byte transaction fits in 100 characters. Code units
that would not survive an SMS gateway (control, format, private-use,
unassigned, surrogate and separator characters) and the escape marker itself
are written as ``~`` followed by two code units, each holding one byte offset
by 0x100.

Example:
    ```python
    codec = TxmsCodec()
    message = codec.encode("0x02f8b1")
    assert codec.decode(message) == "0x02f8b1"
    ```
"""

from __future__ import annotations

import re
import unicodedata

ESCAPE = 0x7E  # "~"
BYTE_OFFSET = 0x100
UNSAFE_CATEGORIES = frozenset({"Cc", "Cf", "Cn", "Co", "Cs", "Zl", "Zp", "Zs"})

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


class TxmsError(ValueError):
    """Raised when a value cannot be encoded or decoded as TxMS."""


def _needs_escape(unit: int) -> bool:
    return unit == ESCAPE or unicodedata.category(chr(unit)) in UNSAFE_CATEGORIES


def _code_units(message: str) -> list[int]:
    """Return the UTF-16 code units of a string."""
    raw = message.encode("utf-16-be", "surrogatepass")
    return [int.from_bytes(raw[i : i + 2], "big") for i in range(0, len(raw), 2)]


class TxmsCodec:
    """Encoder and decoder for TxMS messages."""

    def encode(self, hex_tx: str) -> str:
        """Encode a hex transaction into a TxMS message.

        Args:
            hex_tx: Transaction hex, with or without ``0x`` prefix.

        Returns:
            The compact message.

        Raises:
            TxmsError: If the input is not hexadecimal.
        """
        digits = hex_tx[2:] if hex_tx[:2].lower() == "0x" else hex_tx
        if not _HEX_DIGITS.fullmatch(digits):
            raise TxmsError("Not a hex format")

        remainder = len(digits) % 4
        if remainder:
            digits = "0" * (4 - remainder) + digits

        chars: list[str] = []
        for i in range(0, len(digits), 4):
            unit = int(digits[i : i + 4], 16)
            if _needs_escape(unit):
                chars.append(chr(ESCAPE))
                chars.append(chr(BYTE_OFFSET + (unit >> 8)))
                chars.append(chr(BYTE_OFFSET + (unit & 0xFF)))
            else:
                chars.append(chr(unit))
        return "".join(chars)

    def decode(self, message: str) -> str:
        """Decode a TxMS message into a ``0x``-prefixed hex transaction.

        Args:
            message: The compact message.

        Returns:
            Lowercase hex transaction with ``0x`` prefix.

        Raises:
            TxmsError: If an escape sequence is truncated or malformed, or the
                message carries no transaction bytes.
        """
        units = _code_units(message)
        digits: list[str] = []
        i = 0
        while i < len(units):
            unit = units[i]
            if unit == ESCAPE:
                if i + 2 >= len(units):
                    raise TxmsError(f"Truncated escape sequence at position {i}")
                high = units[i + 1] - BYTE_OFFSET
                low = units[i + 2] - BYTE_OFFSET
                if not (0 <= high <= 0xFF and 0 <= low <= 0xFF):
                    raise TxmsError(f"Invalid escape sequence at position {i}")
                digits.append(f"{high:02x}{low:02x}")
                i += 3
            else:
                digits.append(f"{unit:04x}")
                i += 1

        # Drop the zero padding added by encode, keeping whole bytes.
        hex_tx = "".join(digits).lstrip("0")
        if not hex_tx:
            raise TxmsError("Message carries no transaction data")
        if len(hex_tx) % 2:
            hex_tx = "0" + hex_tx
        return f"0x{hex_tx}"
