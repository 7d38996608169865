"""
Errors raised by the bit buffer and its helpers.
"""


class BitBufferError(Exception):
    """Base class for every error raised by this package."""


class InvalidArgumentError(BitBufferError, ValueError):
    """
    A malformed call: negative or oversized bit length, empty input,
    or a source that holds fewer bits than requested.
    """


class OutOfRangeError(BitBufferError, IndexError):
    """
    Not enough bits remain for the requested get or put, or the
    addressed position lies outside the readable region of the buffer.
    """
