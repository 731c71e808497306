"""
Merkle Commit - Byte String Utilities

Unsigned lexicographic comparison and 0x-prefixed hex conversion used for
ordering sibling hashes and for every hex value crossing the API boundary.
"""

import re

from merkle_commit.crypto.errors import FormatError

HEX_PATTERN = re.compile(r"^0x(?:[0-9a-fA-F]{2})*$")


def compare_bytes(a: bytes, b: bytes) -> int:
    """
    Compare two byte strings.

    The shorter string sorts first when one is a prefix of the other.

    Returns:
        Negative, zero or positive, like a classic cmp()
    """
    for x, y in zip(a, b):
        if x != y:
            return x - y
    return len(a) - len(b)


def to_hex(data: bytes) -> str:
    """Encode bytes as a 0x-prefixed lowercase hex string."""
    return "0x" + data.hex()


def from_hex(value: str) -> bytes:
    """
    Decode a 0x-prefixed hex string.

    Raises:
        FormatError: If the prefix is missing, the length is odd or a
            character is not a hex digit
    """
    if not isinstance(value, str) or not HEX_PATTERN.fullmatch(value):
        raise FormatError(f"Invalid hex string: {value!r}")
    return bytes.fromhex(value[2:])
