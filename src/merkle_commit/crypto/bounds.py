"""Index validity guard shared by the tree engine and the facade."""

from collections.abc import Sized

from merkle_commit.crypto.errors import IndexOutOfBounds


def check_bounds(sequence: Sized, index: int) -> None:
    """Raise IndexOutOfBounds unless 0 <= index < len(sequence)."""
    if isinstance(index, bool) or not isinstance(index, int):
        raise IndexOutOfBounds(f"Index {index!r} is not an integer")
    if index < 0 or index >= len(sequence):
        raise IndexOutOfBounds(f"Index {index} out of bounds")
