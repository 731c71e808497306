"""
Unit tests for byte utilities and the bounds guard.
"""

import pytest

from merkle_commit.crypto.bounds import check_bounds
from merkle_commit.crypto.bytes import compare_bytes, from_hex, to_hex
from merkle_commit.crypto.errors import FormatError, IndexOutOfBounds


class TestCompareBytes:
    """Tests for compare_bytes."""

    def test_equal(self) -> None:
        assert compare_bytes(b"\x01\x02", b"\x01\x02") == 0

    def test_first_difference_decides(self) -> None:
        assert compare_bytes(b"\x01\xff", b"\x02\x00") < 0
        assert compare_bytes(b"\x02\x00", b"\x01\xff") > 0

    def test_unsigned(self) -> None:
        """0x80 sorts after 0x7f."""
        assert compare_bytes(b"\x80", b"\x7f") > 0

    def test_prefix_is_less(self) -> None:
        assert compare_bytes(b"\x01", b"\x01\x00") < 0
        assert compare_bytes(b"", b"\x00") < 0


class TestHex:
    """Tests for hex encoding."""

    def test_to_hex(self) -> None:
        assert to_hex(b"\xde\xad\xbe\xef") == "0xdeadbeef"
        assert to_hex(b"") == "0x"

    def test_from_hex(self) -> None:
        assert from_hex("0xdeadbeef") == b"\xde\xad\xbe\xef"
        assert from_hex("0xDEADBEEF") == b"\xde\xad\xbe\xef"

    def test_round_trip(self) -> None:
        data = bytes(range(256))
        assert from_hex(to_hex(data)) == data

    @pytest.mark.parametrize("value", ["deadbeef", "0xabc", "0xzz", "0x 1", "", None, 12])
    def test_from_hex_rejects(self, value: object) -> None:
        with pytest.raises(FormatError):
            from_hex(value)  # type: ignore[arg-type]

    def test_format_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            from_hex("nope")


class TestCheckBounds:
    """Tests for check_bounds."""

    def test_in_bounds(self) -> None:
        check_bounds([1, 2, 3], 0)
        check_bounds([1, 2, 3], 2)

    @pytest.mark.parametrize("index", [-1, 3, 100])
    def test_out_of_bounds(self, index: int) -> None:
        with pytest.raises(IndexOutOfBounds):
            check_bounds([1, 2, 3], index)

    def test_rejects_non_integers(self) -> None:
        with pytest.raises(IndexOutOfBounds):
            check_bounds([1, 2, 3], True)  # type: ignore[arg-type]
        with pytest.raises(IndexOutOfBounds):
            check_bounds([1, 2, 3], "1")  # type: ignore[arg-type]

    def test_is_index_error(self) -> None:
        with pytest.raises(IndexError):
            check_bounds([], 0)
