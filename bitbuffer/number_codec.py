"""
Conversion between signed integers and fixed width big-endian bytes.
"""

import struct
from typing import Optional

from bitbuffer.errors import InvalidArgumentError

# byte width -> struct format for a signed big-endian value
_FORMATS = {2: ">h", 4: ">i", 8: ">q"}


def _format_for(width: int) -> str:
    try:
        return _FORMATS[width]
    except KeyError:
        raise InvalidArgumentError(
            f"Width must be one of {sorted(_FORMATS)}, got {width}"
        ) from None


def to_bytes(value: int, width: int) -> bytes:
    """
    Encode ``value`` as ``width`` big-endian bytes in two's complement.

    Bits above the width are dropped, so ``to_bytes(0x1FFFF, 2)`` gives
    ``b"\\xff\\xff"``.

    Args:
        value: Integer to encode
        width: Byte width, one of 2, 4 or 8

    Returns:
        The encoded bytes

    Raises:
        InvalidArgumentError: If width is not supported
    """
    fmt = _format_for(width)
    bits = width * 8
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return struct.pack(fmt, value)


def from_bytes(data: Optional[bytes], width: int) -> Optional[int]:
    """
    Decode the first ``width`` bytes of ``data`` as a signed big-endian integer.

    Args:
        data: Source bytes, or None
        width: Byte width, one of 2, 4 or 8

    Returns:
        The decoded integer, or None when data is None

    Raises:
        InvalidArgumentError: If width is not supported or data is too short
    """
    fmt = _format_for(width)
    if data is None:
        return None
    if len(data) < width:
        raise InvalidArgumentError(
            f"Need {width} bytes to decode, got {len(data)}"
        )
    return struct.unpack(fmt, bytes(data[:width]))[0]


def short_to_bytes(value: int) -> bytes:
    return to_bytes(value, 2)


def int_to_bytes(value: int) -> bytes:
    return to_bytes(value, 4)


def long_to_bytes(value: int) -> bytes:
    return to_bytes(value, 8)


def bytes_to_short(data: Optional[bytes]) -> Optional[int]:
    return from_bytes(data, 2)


def bytes_to_int(data: Optional[bytes]) -> Optional[int]:
    return from_bytes(data, 4)


def bytes_to_long(data: Optional[bytes]) -> Optional[int]:
    return from_bytes(data, 8)
