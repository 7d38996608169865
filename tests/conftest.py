import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from bitbuffer.bit_buffer import BitBuffer  # noqa: E402


@pytest.fixture()
def three_bytes():
    """Source bytes "11010010 00110010 01001000"."""
    return bytes([210, 50, 72])


@pytest.fixture()
def wrapped(three_bytes):
    """A readable buffer over ``three_bytes``."""
    return BitBuffer.wrap(three_bytes)


def cursor_state(buffer: BitBuffer):
    """Everything a caller can observe about the cursor."""
    return buffer.position, buffer.remaining_bits(), buffer.used_array()


@pytest.fixture()
def cursor_state_fn():
    return cursor_state
