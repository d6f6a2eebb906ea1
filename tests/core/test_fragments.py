"""Tests for the fragment decoder."""

import pytest

from drivefetch.core.errors import DecodeError
from drivefetch.core.fragments import (
    decode_fragment,
    decode_fragment_text,
    encode_fragment,
    parse_fragment_hex,
)


class TestDecodeFragment:
    def test_drops_type_tag(self):
        assert decode_fragment("00313233") == b"123"

    def test_strips_trailing_nul_padding_only(self):
        assert decode_fragment("00" + (b" hi \n".hex()) + "0000") == b" hi \n"

    def test_keeps_interior_nul_bytes(self):
        assert decode_fragment("00410042") == b"A\x00B"

    def test_accepts_lowercase_and_uppercase(self):
        assert decode_fragment("00abCD") == b"\xab\xcd"

    @pytest.mark.parametrize("value", ["", None, "f"])
    def test_short_input_is_empty(self, value):
        assert decode_fragment(value) == b""

    def test_tag_only_is_empty(self):
        assert decode_fragment("00") == b""

    def test_odd_length_fails_soft(self):
        diagnostics = []
        assert decode_fragment("00313", diagnostics) == b""
        assert len(diagnostics) == 1
        assert "odd length" in diagnostics[0].reason

    def test_non_hex_fails_soft(self, caplog):
        diagnostics = []
        assert decode_fragment("00ZZ", diagnostics) == b""
        assert diagnostics[0].value == "00ZZ"
        assert "malformed fragment" in caplog.text

    def test_text_decoding_replaces_invalid_utf8(self):
        assert decode_fragment_text("0068ff69") == "h�i"

    def test_encode_is_inverse(self):
        assert encode_fragment(b"data:image/png;base64,") == "00" + b"data:image/png;base64,".hex().upper()
        assert decode_fragment(encode_fragment(b"\x01\x02", type_tag=1)) == b"\x01\x02"


class TestParseFragmentHex:
    @pytest.mark.parametrize("value", [None, "0", "00G1"])
    def test_strict_parser_raises(self, value):
        with pytest.raises(DecodeError):
            parse_fragment_hex(value)

    def test_error_value_truncated(self):
        with pytest.raises(DecodeError) as exc_info:
            parse_fragment_hex("Z" * 200)
        assert len(exc_info.value.value) == 64
