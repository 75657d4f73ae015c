"""Tests for codec.py."""

from __future__ import annotations

import pytest

from pathwatch.codec import DEFAULT_ENCODING, get_codec, is_default
from pathwatch.core.errors import EncodingError, ErrorCode


class TestGetCodec:
    """Tests for get_codec."""

    def test_default_encoding(self) -> None:
        codec = get_codec(DEFAULT_ENCODING)
        assert codec.name == "utf8"
        assert codec.python_name == "utf-8"

    @pytest.mark.parametrize("name", ["latin-1", "utf-16", "cp1252", "shift_jis"])
    def test_known_text_encodings(self, name: str) -> None:
        assert get_codec(name).name == name

    def test_unknown_encoding_raises(self) -> None:
        with pytest.raises(EncodingError) as exc_info:
            get_codec("bogus-encoding")
        assert exc_info.value.code == ErrorCode.ENCODING_UNSUPPORTED
        assert exc_info.value.details == {"encoding": "bogus-encoding"}

    def test_bytes_codec_rejected(self) -> None:
        """base64 is a codec but cannot turn file bytes into text."""
        with pytest.raises(EncodingError):
            get_codec("base64")

    def test_non_string_name_rejected(self) -> None:
        with pytest.raises(EncodingError):
            get_codec(None)  # type: ignore[arg-type]


class TestCodec:
    """Tests for Codec encode/decode."""

    def test_encode_decode(self) -> None:
        codec = get_codec("latin-1")
        assert codec.encode("café") == b"caf\xe9"
        assert codec.decode(b"caf\xe9") == "café"

    def test_incremental_decoder_joins_split_sequence(self) -> None:
        """A multi-byte character split across chunks decodes once complete."""
        decoder = get_codec("utf8").incremental_decoder()
        data = "é".encode()

        first = decoder.decode(data[:1])
        second = decoder.decode(data[1:], True)

        assert first == ""
        assert second == "é"

    def test_incremental_encoder(self) -> None:
        encoder = get_codec("utf-16").incremental_encoder()
        encoded = encoder.encode("ab") + encoder.encode("c", True)
        assert encoded.decode("utf-16") == "abc"


class TestIsDefault:
    def test_default(self) -> None:
        assert is_default("utf8")

    def test_alias_is_not_default(self) -> None:
        assert not is_default("utf-8")
