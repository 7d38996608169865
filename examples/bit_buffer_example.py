"""
Example script packing a small record into 27 bits and reading it back.

Record layout:
    version   3 bits
    flags     5 bits
    port     14 bits
    channel   5 bits
"""

import argparse
import logging
import sys
from pathlib import Path

# Add the parent directory to Python path
sys.path.append(str(Path(__file__).parent.parent))

from bitbuffer.binary_text import bytes_to_text
from bitbuffer.bit_buffer import BitBuffer

FIELDS = [("version", 3), ("flags", 5), ("port", 14), ("channel", 5)]


def pack(record: dict) -> BitBuffer:
    buffer = BitBuffer.allocate(sum(width for _, width in FIELDS))
    buffer.put_bits(record["version"], 3)
    buffer.put_bits(record["flags"], 5)
    buffer.put_short_bits(record["port"], 14)
    buffer.put_bits(record["channel"], 5)
    return buffer


def unpack(buffer: BitBuffer) -> dict:
    record = {}
    for name, width in FIELDS:
        raw = buffer.get_bytes(width)
        record[name] = int.from_bytes(raw, "big")
    return record


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--verbose", action="store_true", help="show debug logging")
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    record = {"version": 5, "flags": 0b10110, "port": 8080, "channel": 17}
    print(f"Record: {record}")

    buffer = pack(record)
    print(f"Packed: {bytes_to_text(buffer.array())}")
    print(f"Bits left: {buffer.remaining_bits()}")

    buffer.flip()
    decoded = unpack(buffer)
    print(f"Unpacked: {decoded}")

    # Patch the channel in place without touching the cursor
    buffer.put_bits_at(3, 22, 5)
    print(f"Patched: {bytes_to_text(buffer.array())}")


if __name__ == "__main__":
    main()
