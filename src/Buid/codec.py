"""Sortable base-62 text form for BUIDs and their halves.

- Alphabet is 0-9, A-Z, a-z in ASCII order, so for strings of equal length
  lexicographic order is numeric order.
- Output is fixed-length and left-padded with "0": a 16-byte ID becomes 22
  characters, an 8-byte half 11 characters.
"""

from __future__ import annotations

from typing import Final

ALPHABET: Final[str] = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
_BASE: Final[int] = len(ALPHABET)
_INDEX: Final[dict[str, int]] = {ch: i for i, ch in enumerate(ALPHABET)}


class FormatError(ValueError):
    """Raised when text cannot be decoded into a BUID value."""

    pass


def text_length(size: int) -> int:
    """Number of base-62 characters needed to hold ``size`` bytes losslessly."""
    limit = 1 << (8 * size)
    n, cap = 0, 1
    while cap < limit:
        cap *= _BASE
        n += 1
    return n


ID_TEXT_LENGTH: Final[int] = text_length(16)
HALF_TEXT_LENGTH: Final[int] = text_length(8)
ZERO_ID_TEXT: Final[str] = ALPHABET[0] * ID_TEXT_LENGTH


def encode(raw: bytes) -> str:
    value = int.from_bytes(raw, "big")
    chars: list[str] = []
    for _ in range(text_length(len(raw))):
        value, rem = divmod(value, _BASE)
        chars.append(ALPHABET[rem])
    chars.reverse()
    return "".join(chars)


def decode(text: str | bytes, size: int) -> bytes:
    """Decode fixed-length base-62 ``text`` into exactly ``size`` bytes.

    Raises:
        FormatError: on a wrong length, a character outside the alphabet, or a
            value too large for ``size`` bytes.
    """
    if isinstance(text, bytes | bytearray):
        try:
            text = bytes(text).decode("ascii")
        except UnicodeDecodeError as exc:
            raise FormatError("BUID text must be ASCII") from exc
    expected = text_length(size)
    if len(text) != expected:
        raise FormatError(f"expected {expected} characters, got {len(text)}")
    value = 0
    for ch in text:
        digit = _INDEX.get(ch)
        if digit is None:
            raise FormatError(f"invalid character {ch!r} in BUID text")
        value = value * _BASE + digit
    if value >> (8 * size):
        raise FormatError(f"value of {text!r} does not fit in {size} bytes")
    return value.to_bytes(size, "big")


__all__ = [
    "ALPHABET",
    "FormatError",
    "HALF_TEXT_LENGTH",
    "ID_TEXT_LENGTH",
    "ZERO_ID_TEXT",
    "decode",
    "encode",
    "text_length",
]
