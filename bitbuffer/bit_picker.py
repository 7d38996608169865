"""
Bit picking primitives working on a single byte.

Bits are numbered from the most significant one: bit 0 is the leftmost
bit of the byte, bit 7 the rightmost.
"""

from bitbuffer.errors import InvalidArgumentError

BYTE_MASK = 0xFF


def _check_length(bit_length: int) -> None:
    if bit_length > 8:
        raise InvalidArgumentError(
            "One byte has 8 bits, bit length must not be larger than 8"
        )
    if bit_length < 0:
        raise InvalidArgumentError("Length cannot be negative")


def right_mask(bit_length: int) -> int:
    """
    Mask selecting the lowest ``bit_length`` bits of a byte.

    Example: ``right_mask(3) == 0b00000111``.
    """
    return ~(BYTE_MASK << bit_length) & BYTE_MASK


def left_mask(bit_length: int) -> int:
    """
    Mask selecting the highest ``bit_length`` bits of a byte.

    Example: ``left_mask(3) == 0b11100000``.
    """
    return (right_mask(bit_length) << (8 - bit_length)) & BYTE_MASK


def pick_middle(data: int, start_bit: int, end_bit: int) -> int:
    """
    Return bits ``[start_bit, end_bit)`` of ``data``, right-justified.

    No validation is done here, callers are expected to pass
    ``0 <= start_bit <= end_bit <= 8``.

    Args:
        data: Source byte
        start_bit: First bit to take, counted from the left
        end_bit: Bit after the last one to take

    Returns:
        The picked bits as an integer in ``[0, 2 ** (end_bit - start_bit))``
    """
    right_move = 8 + start_bit - end_bit
    return ((data << start_bit) & BYTE_MASK) >> right_move


def pick_right(data: int, bit_length: int) -> int:
    """
    Pick the lowest ``bit_length`` bits of ``data``.

    Example: for ``10010011`` picking 3 bits gives ``011``,
    picking 5 bits gives ``10011``.

    Args:
        data: Source byte
        bit_length: Number of bits to pick, 0 to 8

    Returns:
        The picked bits

    Raises:
        InvalidArgumentError: If bit_length is negative or larger than 8
    """
    _check_length(bit_length)
    return data & right_mask(bit_length)


def pick_left(data: int, bit_length: int) -> int:
    """
    Pick the highest ``bit_length`` bits of ``data``, right-justified.

    Example: for ``10010011`` picking 3 bits gives ``100``,
    picking 5 bits gives ``10010``.

    Args:
        data: Source byte
        bit_length: Number of bits to pick, 0 to 8

    Returns:
        The picked bits

    Raises:
        InvalidArgumentError: If bit_length is negative or larger than 8
    """
    _check_length(bit_length)
    return (data & left_mask(bit_length)) >> (8 - bit_length)


def pick_part(data: int, from_bit: int, bit_length: int) -> int:
    """
    Pick ``bit_length`` bits of ``data`` starting at ``from_bit``.

    Example: for ``10010011`` picking 3 bits from bit 1 gives ``001``,
    picking 5 bits from bit 2 gives ``01001``.

    Raises:
        InvalidArgumentError: If from_bit + bit_length is larger than 8,
            or either of them is negative
    """
    if from_bit + bit_length > 8:
        raise InvalidArgumentError(
            "One byte has 8 bits, from bit plus bit length must not be larger than 8"
        )
    if from_bit < 0:
        raise InvalidArgumentError("From bit cannot be negative")
    if bit_length < 0:
        raise InvalidArgumentError("Length cannot be negative")
    return pick_middle(data, from_bit, from_bit + bit_length)
