"""
Human readable binary text for byte sequences, like "11010010 00110010 ".
Mostly useful for debugging and for writing test fixtures.
"""

from typing import Optional

from bitarray import bitarray

from bitbuffer.errors import InvalidArgumentError
from bitbuffer.number_codec import int_to_bytes, long_to_bytes, short_to_bytes


def bytes_to_text(data: bytes) -> str:
    """
    Render every byte as 8 binary digits followed by a single space.

    Args:
        data: Bytes to render

    Returns:
        The binary text, e.g. "11010010 " for ``bytes([210])``
    """
    bits = bitarray(endian="big")
    bits.frombytes(bytes(data))
    digits = bits.to01()
    return "".join(digits[i:i + 8] + " " for i in range(0, len(digits), 8))


def text_to_bytes(text: Optional[str]) -> Optional[bytes]:
    """
    Parse binary text back into bytes.

    Spaces are ignored. When the digit count is not a multiple of 8 the
    first byte takes the leading ``len % 8`` digits as they are written,
    so "1000000 10000000" gives ``bytes([64, 128])``.

    Args:
        text: Binary digits, optionally grouped with spaces, or None

    Returns:
        The parsed bytes, an empty bytes object for empty text, None for None

    Raises:
        InvalidArgumentError: If the text holds anything but 0, 1 and spaces
    """
    if text is None:
        return None
    digits = text.replace(" ", "")
    if not digits:
        return b""
    # bitarray skips underscores and whitespace itself, so check first
    if digits.strip("01"):
        raise InvalidArgumentError(f"Not a binary string: {text!r}")
    bits = bitarray(digits, endian="big")

    first_length = len(bits) % 8 or 8
    result = bytearray([int(bits[:first_length].to01(), 2)])
    result.extend(bits[first_length:].tobytes())
    return bytes(result)


def short_to_text(value: int) -> str:
    """Binary text of a 16-bit integer."""
    return bytes_to_text(short_to_bytes(value))


def int_to_text(value: int) -> str:
    """Binary text of a 32-bit integer."""
    return bytes_to_text(int_to_bytes(value))


def long_to_text(value: int) -> str:
    """Binary text of a 64-bit integer."""
    return bytes_to_text(long_to_bytes(value))
