"""
Unit tests for byte transcoding.

Tests cover:
- One character per byte
- Scalar decoding of every byte
- Legacy multi-unit forms
- Out-of-range and truncated sequences
"""

import pytest

from src.tokenization.byte_transcoder import decode_scalar, encode_bytes, transcode
from src.tokenization.vocabulary import bytes_to_unicode


class TestEncodeBytes:
    """Test suite for encode_bytes."""

    def test_one_character_per_byte(self):
        """Test every byte becomes exactly one character."""
        data = bytes(range(256))
        encoded = encode_bytes(data)

        assert len(encoded) == 256

    def test_ascii_unchanged(self):
        """Test ASCII bytes map to the same code point."""
        assert encode_bytes(b"hello") == "hello"

    @pytest.mark.parametrize("data", [
        bytes(range(256)),
        "héllo wörld".encode("utf-8"),
        "你好🌍".encode("utf-8"),
        b"\x00\xff\x80\x7f",
    ])
    def test_decode_scalar_recovers_bytes(self, data):
        """Test decoding each encoded character recovers the original byte."""
        encoded = encode_bytes(data)

        assert [decode_scalar(ch) for ch in encoded] == list(data)


class TestDecodeScalar:
    """Test suite for decode_scalar."""

    @pytest.mark.parametrize("char", ["A", "é", "€", "😀"])
    def test_characters(self, char):
        """Test standard 1 to 4 unit forms decode to the code point."""
        assert decode_scalar(char) == ord(char)

    def test_bytes_argument(self):
        """Test raw encoded units are accepted."""
        assert decode_scalar(b"\xc3\xa9") == 0xE9
        assert decode_scalar(b"\xe2\x82\xac") == 0x20AC

    def test_five_unit_form(self):
        """Test the obsolete 5-unit form."""
        assert decode_scalar(b"\xf8\x88\x80\x80\x80") == 0x200000

    def test_six_unit_form(self):
        """Test the obsolete 6-unit form."""
        assert decode_scalar(b"\xfc\x84\x80\x80\x80\x80") == 0x4000000

    @pytest.mark.parametrize("lead", [b"\x80", b"\xbf", b"\xfe", b"\xff"])
    def test_invalid_lead_decodes_to_zero(self, lead):
        """Test lead units that cannot start a sequence decode to 0."""
        assert decode_scalar(lead) == 0

    def test_truncated_sequence(self):
        """Test a sequence shorter than its lead announces is rejected."""
        with pytest.raises(ValueError) as exc_info:
            decode_scalar(b"\xe2\x82")

        assert "Truncated" in str(exc_info.value)

    def test_empty(self):
        """Test empty input is rejected."""
        with pytest.raises(ValueError):
            decode_scalar(b"")


class TestTranscode:
    """Test suite for transcoding into the byte alphabet."""

    def test_space_and_letters(self):
        """Test spaces map to the shifted alphabet character."""
        assert transcode(" hi", bytes_to_unicode()) == "Ġhi"

    def test_multibyte(self):
        """Test multi-byte characters give one alphabet character per byte."""
        byte_encoder = bytes_to_unicode()
        result = transcode("é", byte_encoder)

        assert result == byte_encoder[0xC3] + byte_encoder[0xA9]

    def test_total_mapping(self):
        """Test every byte value is mapped."""
        byte_encoder = bytes_to_unicode()
        text = bytes(range(128)).decode("ascii")

        assert len(transcode(text, byte_encoder)) == 128
