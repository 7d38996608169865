"""
Bit addressable buffer over a fixed size byte array.

Works like a byte buffer with a position and a limit, but every get and
put is measured in bits. Write fields with the ``put_*`` methods, call
``flip()``, then read them back in the same order with the ``get_*``
methods. The ``*_at`` variants address the buffer by absolute bit index
and never move the cursor.
"""

import logging
from typing import NamedTuple, Optional, Tuple

from bitbuffer.bit_picker import left_mask, pick_left, pick_middle, pick_right, right_mask
from bitbuffer.errors import InvalidArgumentError, OutOfRangeError
from bitbuffer.number_codec import to_bytes

logger = logging.getLogger(__name__)


class _Fragment(NamedTuple):
    """Part of a bit run that lies inside one byte."""

    byte_offset: int  # 0 for the byte the run starts in, 1 for the next one
    start_bit: int
    length: int


def _split_run(bit_in_byte: int, bit_length: int) -> Tuple[_Fragment, ...]:
    """Split a run of at most 8 bits into one fragment, or two if it crosses a byte."""
    end = bit_in_byte + bit_length
    if end <= 8:
        return (_Fragment(0, bit_in_byte, bit_length),)
    return (
        _Fragment(0, bit_in_byte, 8 - bit_in_byte),
        _Fragment(1, 0, end - 8),
    )


class BitBuffer:
    """
    Fixed capacity buffer read and written in runs of bits.

    Use ``BitBuffer.wrap()`` or ``BitBuffer.allocate()`` to create one.

    The cursor is a byte index plus a bit offset inside that byte. The
    readable or writable region ends at ``limit`` bytes, minus ``pad_bits``
    unused bits at the end of the last byte.
    """

    BITS_PER_BYTE = 8

    def __init__(self, storage: bytearray, capacity_bits: int, pad_bits: int = 0) -> None:
        self._storage = storage
        self._capacity_bits = capacity_bits
        self._pad_bits = pad_bits
        self._position = 0
        self._bit_in_byte = 0
        self._limit = len(storage)

    @classmethod
    def wrap(cls, data: bytes) -> "BitBuffer":
        """
        Create a buffer holding a copy of ``data``.

        Args:
            data: Initial content, must not be empty

        Returns:
            A buffer with the cursor at bit 0 and every bit readable

        Raises:
            InvalidArgumentError: If data is None or empty
        """
        if data is None or len(data) == 0:
            raise InvalidArgumentError("Data should not be None or empty")
        storage = bytearray(data)
        logger.debug("Wrapped %d bytes", len(storage))
        return cls(storage, len(storage) * cls.BITS_PER_BYTE)

    @classmethod
    def allocate(cls, bit_length: int) -> "BitBuffer":
        """
        Create a zero filled buffer able to hold exactly ``bit_length`` bits.

        Args:
            bit_length: Capacity in bits, not bytes

        Returns:
            An empty buffer ready for writing

        Raises:
            InvalidArgumentError: If bit_length is not positive
        """
        if bit_length <= 0:
            raise InvalidArgumentError("Bit length must be larger than 0")
        byte_length = (bit_length + 7) // cls.BITS_PER_BYTE
        used_in_last = bit_length % cls.BITS_PER_BYTE
        pad_bits = cls.BITS_PER_BYTE - used_in_last if used_in_last else 0
        logger.debug(
            "Allocated %d bits in %d bytes (%d pad bits)", bit_length, byte_length, pad_bits
        )
        return cls(bytearray(byte_length), bit_length, pad_bits)

    @property
    def capacity_bits(self) -> int:
        return self._capacity_bits

    @property
    def pad_bits(self) -> int:
        return self._pad_bits

    @property
    def position(self) -> int:
        """Cursor as an absolute bit index."""
        return self._position * self.BITS_PER_BYTE + self._bit_in_byte

    def __len__(self) -> int:
        return len(self._storage)

    def __repr__(self) -> str:
        return (
            f"BitBuffer(position={self.position}, limit={self._limit}, "
            f"pad_bits={self._pad_bits}, capacity_bits={self._capacity_bits})"
        )

    # cursor

    def remaining_bits(self) -> int:
        """Number of bits between the cursor and the end of the usable region."""
        return (
            (self._limit - self._position) * self.BITS_PER_BYTE
            - self._bit_in_byte
            - self._pad_bits
        )

    def _remaining_bits_from(self, start_bit: int) -> int:
        byte_index, bit_in_byte = divmod(start_bit, self.BITS_PER_BYTE)
        return (self._limit - byte_index) * self.BITS_PER_BYTE - bit_in_byte - self._pad_bits

    def flip(self) -> None:
        """
        Turn a written buffer into a readable one.

        A partially written byte is committed and its unwritten bits become
        padding. The limit is set to the end of the written data and the
        cursor goes back to bit 0.
        """
        if self._bit_in_byte > 0:
            self._position += 1
            self._pad_bits = self.BITS_PER_BYTE - self._bit_in_byte
        else:
            self._pad_bits = 0
        self._limit = self._position
        self._position = 0
        self._bit_in_byte = 0
        logger.debug("Flipped: limit=%d, pad_bits=%d", self._limit, self._pad_bits)

    def _advance(self, bit_length: int) -> None:
        moved, self._bit_in_byte = divmod(self._bit_in_byte + bit_length, self.BITS_PER_BYTE)
        self._position += moved

    # get

    @staticmethod
    def _check_byte_length(bit_length: int) -> None:
        if bit_length > 8:
            logger.debug("Rejected bit length %d, larger than a byte", bit_length)
            raise InvalidArgumentError(
                "One byte has 8 bits, bit length must not be larger than 8"
            )
        if bit_length < 0:
            logger.debug("Rejected negative bit length %d", bit_length)
            raise InvalidArgumentError("Length cannot be negative")

    def _check_remaining(self, bit_length: int) -> None:
        remaining = self.remaining_bits()
        if remaining < bit_length:
            logger.debug("Rejected %d bits, only %d remaining", bit_length, remaining)
            raise OutOfRangeError(
                f"Not enough bits: requested {bit_length}, remaining {remaining}"
            )

    def _read_run(self, byte_index: int, bit_in_byte: int, bit_length: int) -> int:
        value = 0
        for fragment in _split_run(bit_in_byte, bit_length):
            source = self._storage[byte_index + fragment.byte_offset]
            bits = pick_middle(source, fragment.start_bit, fragment.start_bit + fragment.length)
            value = (value << fragment.length) | bits
        return value

    def get_byte(self, bit_length: int = 8) -> int:
        """
        Read ``bit_length`` bits at the cursor into one byte.

        Example: buffer "10010101 01110001". Getting 5 bits returns 18
        ("10010"), then getting 8 bits returns 174 ("10101110"). Three bits
        remain, so getting 4 more raises OutOfRangeError.

        Args:
            bit_length: Number of bits to read, 0 to 8

        Returns:
            The bits read, right-justified

        Raises:
            InvalidArgumentError: If bit_length is negative or larger than 8
            OutOfRangeError: If fewer than bit_length bits remain
        """
        self._check_byte_length(bit_length)
        if bit_length == 0:
            return 0
        self._check_remaining(bit_length)
        value = self._read_run(self._position, self._bit_in_byte, bit_length)
        self._advance(bit_length)
        return value

    def get_byte_at(self, start_bit: int, bit_length: int = 8) -> int:
        """
        Read ``bit_length`` bits starting at absolute bit ``start_bit``.

        The cursor does not move. The request is still bounded by the bits
        remaining after the cursor, so only produced (or flipped) data can
        be read.

        Example: buffer "10010101 01110001", start bit 2 and 8 bits
        returns 85 ("01010101").

        Raises:
            InvalidArgumentError: If bit_length is negative or larger than 8
            OutOfRangeError: If fewer than bit_length bits remain, or the
                addressed bits lie outside the buffer limit. A negative
                start_bit is such an address; the put variants treat it as
                a malformed call instead.
        """
        self._check_byte_length(bit_length)
        if bit_length == 0:
            return 0
        self._check_remaining(bit_length)
        if start_bit < 0:
            logger.debug("Rejected read at negative bit %d", start_bit)
            raise OutOfRangeError(f"Bit position {start_bit} is negative")
        byte_index, bit_in_byte = divmod(start_bit, self.BITS_PER_BYTE)
        last_byte = byte_index + _split_run(bit_in_byte, bit_length)[-1].byte_offset
        if last_byte >= self._limit:
            logger.debug("Rejected read of byte %d, limit is %d", last_byte, self._limit)
            raise OutOfRangeError(
                f"Bits {start_bit}..{start_bit + bit_length} are beyond the limit"
            )
        return self._read_run(byte_index, bit_in_byte, bit_length)

    @staticmethod
    def _first_chunk_length(bit_length: int) -> int:
        return bit_length % 8 or 8

    def get_bytes(self, bit_length: int) -> bytes:
        """
        Read ``bit_length`` bits at the cursor into ``ceil(bit_length / 8)`` bytes.

        The first byte holds the leftover ``bit_length % 8`` bits, the
        following bytes are full. Example: buffer "10010101 01110001",
        getting 14 bits returns [37, 92] ("00100101 01011100").

        Raises:
            InvalidArgumentError: If bit_length is negative
            OutOfRangeError: If fewer than bit_length bits remain
        """
        if bit_length < 0:
            raise InvalidArgumentError("Length cannot be negative")
        if bit_length == 0:
            return b""
        self._check_remaining(bit_length)
        first_length = self._first_chunk_length(bit_length)
        result = bytearray([self.get_byte(first_length)])
        for _ in range((bit_length - first_length) // 8):
            result.append(self.get_byte())
        return bytes(result)

    def get_bytes_at(self, start_bit: int, bit_length: int) -> bytes:
        """
        Absolute version of ``get_bytes``, leaves the cursor alone.

        Example: buffer "10010101 01110001", start bit 2 and 14 bits
        returns [21, 113] ("00010101 01110001").
        """
        if bit_length < 0:
            raise InvalidArgumentError("Length cannot be negative")
        if bit_length == 0:
            return b""
        self._check_remaining(bit_length)
        first_length = self._first_chunk_length(bit_length)
        result = bytearray([self.get_byte_at(start_bit, first_length)])
        start_bit += first_length
        for _ in range((bit_length - first_length) // 8):
            result.append(self.get_byte_at(start_bit))
            start_bit += 8
        return bytes(result)

    # put

    def _write_run(self, byte_index: int, bit_in_byte: int, data: int, bit_length: int) -> None:
        pending = bit_length
        for fragment in _split_run(bit_in_byte, bit_length):
            pending -= fragment.length
            chunk = (data >> pending) & right_mask(fragment.length)
            shift = 8 - fragment.start_bit - fragment.length
            cover = right_mask(fragment.length) << shift
            index = byte_index + fragment.byte_offset
            self._storage[index] = (self._storage[index] & ~cover & 0xFF) | (chunk << shift)

    def _check_writable(self, bit_length: int) -> None:
        if self._position >= self._limit:
            logger.debug("Rejected put of %d bits, cursor is at the limit", bit_length)
            raise OutOfRangeError("No space left in buffer")
        self._check_remaining(bit_length)

    @staticmethod
    def _check_start_bit(start_bit: int) -> None:
        if start_bit < 0:
            logger.debug("Rejected put at negative bit %d", start_bit)
            raise InvalidArgumentError("Bit position cannot be negative")

    def _check_writable_at(self, start_bit: int, bit_length: int) -> None:
        byte_index = start_bit // self.BITS_PER_BYTE
        remaining = self._remaining_bits_from(start_bit)
        if self._limit <= byte_index or remaining < bit_length:
            logger.debug(
                "Rejected put of %d bits at bit %d, %d remaining from there",
                bit_length, start_bit, remaining,
            )
            raise OutOfRangeError(
                f"Not enough bits at position {start_bit}: requested {bit_length}"
            )

    def put_bits(self, data: int, bit_length: int = 8) -> "BitBuffer":
        """
        Write the low ``bit_length`` bits of ``data`` at the cursor.

        The bits are merged into the existing byte content, bits outside
        the written run are kept. Example, data 6 ("110") in an empty buffer:
        3 bits give "11000000", 4 bits give "01100000", 2 bits give
        "10000000". With the first byte already "110" and the cursor at bit
        3, 8 bits of 6 give "11000000 11000000".

        Args:
            data: Source byte, only its low bit_length bits are used
            bit_length: Number of bits to write, 0 to 8

        Returns:
            This buffer

        Raises:
            InvalidArgumentError: If bit_length is negative or larger than 8
            OutOfRangeError: If fewer than bit_length bits remain
        """
        self._check_byte_length(bit_length)
        if bit_length == 0:
            return self
        self._check_writable(bit_length)
        self._write_run(self._position, self._bit_in_byte, data, bit_length)
        self._advance(bit_length)
        return self

    def put_bits_at(self, data: int, start_bit: int, bit_length: int = 8) -> "BitBuffer":
        """
        Write the low ``bit_length`` bits of ``data`` at absolute bit ``start_bit``.

        The cursor does not move. Example: buffer "10000001", data 6 with
        3 bits at bit 3 gives "10011001".

        Raises:
            InvalidArgumentError: If bit_length is negative or larger than 8,
                or start_bit is negative, even for a zero length put
                (``get_byte_at`` raises OutOfRangeError for a negative start)
            OutOfRangeError: If the bits from start_bit to the limit are
                fewer than bit_length
        """
        self._check_byte_length(bit_length)
        self._check_start_bit(start_bit)
        if bit_length == 0:
            return self
        self._check_writable_at(start_bit, bit_length)
        byte_index, bit_in_byte = divmod(start_bit, self.BITS_PER_BYTE)
        self._write_run(byte_index, bit_in_byte, data, bit_length)
        return self

    @staticmethod
    def _check_source_length(data: bytes, bit_length: Optional[int]) -> int:
        available = len(data) * 8
        if bit_length is None:
            return available
        if bit_length > available:
            logger.debug("Rejected %d bits from a %d bit source", bit_length, available)
            raise InvalidArgumentError(
                f"Data has {available} bits, bit length must not be larger than that"
            )
        if bit_length < 0:
            logger.debug("Rejected negative bit length %d", bit_length)
            raise InvalidArgumentError("Length cannot be negative")
        return bit_length

    def put_bytes(self, data: bytes, bit_length: Optional[int] = None) -> "BitBuffer":
        """
        Write the leftmost ``bit_length`` bits of ``data`` at the cursor.

        Full bytes go first, the last partial byte contributes its high
        bits: 10 bits of "11111111 11000000" write "11111111 11".

        Args:
            data: Source bytes
            bit_length: Number of bits to write, every bit of data when None

        Returns:
            This buffer

        Raises:
            InvalidArgumentError: If bit_length is negative or larger than
                the bits in data
            OutOfRangeError: If fewer than bit_length bits remain
        """
        bit_length = self._check_source_length(data, bit_length)
        if bit_length == 0:
            return self
        self._check_writable(bit_length)
        full_bytes, last_length = divmod(bit_length, 8)
        for i in range(full_bytes):
            self.put_bits(data[i])
        if last_length:
            self.put_bits(pick_left(data[full_bytes], last_length), last_length)
        return self

    def put_bytes_at(
        self, data: bytes, start_bit: int, bit_length: Optional[int] = None
    ) -> "BitBuffer":
        """Absolute version of ``put_bytes``, leaves the cursor alone."""
        bit_length = self._check_source_length(data, bit_length)
        self._check_start_bit(start_bit)
        if bit_length == 0:
            return self
        self._check_writable_at(start_bit, bit_length)
        full_bytes, last_length = divmod(bit_length, 8)
        for i in range(full_bytes):
            self.put_bits_at(data[i], start_bit)
            start_bit += 8
        if last_length:
            self.put_bits_at(pick_left(data[full_bytes], last_length), start_bit, last_length)
        return self

    def put_right_bytes(self, data: bytes, bit_length: int) -> "BitBuffer":
        """
        Write the rightmost ``bit_length`` bits of ``data`` at the cursor.

        10 bits of "00001001 10011100" write "01 10011100".
        """
        bit_length = self._check_source_length(data, bit_length)
        if bit_length == 0:
            return self
        self._check_writable(bit_length)
        first_length = self._first_chunk_length(bit_length)
        used = data[len(data) - (bit_length + 7) // 8:]
        self.put_bits(pick_right(used[0], first_length), first_length)
        for byte in used[1:]:
            self.put_bits(byte)
        return self

    def _put_number_bits(self, data: int, bit_length: int, width: int) -> "BitBuffer":
        total_bits = width * 8
        if not 0 <= bit_length <= total_bits:
            raise InvalidArgumentError(
                f"Bit length must be between 0 and {total_bits}, got {bit_length}"
            )
        shifted = to_bytes(data << (total_bits - bit_length), width)
        return self.put_bytes(shifted, bit_length)

    def put_short_bits(self, data: int, bit_length: int) -> "BitBuffer":
        """
        Write the low ``bit_length`` bits of a 16-bit integer.

        14 bits of 2460 ("00001001 10011100") write "00100110 011100".
        """
        return self._put_number_bits(data, bit_length, 2)

    def put_int_bits(self, data: int, bit_length: int) -> "BitBuffer":
        """Write the low ``bit_length`` bits of a 32-bit integer."""
        return self._put_number_bits(data, bit_length, 4)

    def put_long_bits(self, data: int, bit_length: int) -> "BitBuffer":
        """Write the low ``bit_length`` bits of a 64-bit integer."""
        return self._put_number_bits(data, bit_length, 8)

    # snapshots

    def array(self) -> bytes:
        """
        Copy of the whole content up to the capacity.

        Pad bits of the last byte are zeroed: a 14 bit buffer filled with
        ones returns "11111111 11111100".
        """
        byte_count = (self._capacity_bits + 7) // 8
        result = bytearray(self._storage[:byte_count])
        used_in_last = self._capacity_bits % 8
        if used_in_last:
            result[-1] &= left_mask(used_in_last)
        return bytes(result)

    def used_array(self) -> bytes:
        """
        Copy of the content from the start up to the cursor.

        With 10 bits "11111111 11" put (or got), returns "11111111 11000000".
        """
        if self._bit_in_byte == 0:
            return bytes(self._storage[:self._position])
        result = bytearray(self._storage[:self._position + 1])
        result[-1] &= left_mask(self._bit_in_byte)
        return bytes(result)
