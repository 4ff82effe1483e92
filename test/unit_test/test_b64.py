"""
Unit tests for the strict base64url codec.
"""

import pytest

from jws_core import InvalidBase64Error
from jws_core.utils.b64 import (
    b64_std_decode,
    b64_std_encode,
    b64url_decode,
    b64url_encode,
)


class TestBase64Url:
    """Tests for unpadded base64url encoding and decoding."""

    def test_encode_is_unpadded(self):
        """Test encoding never emits '=' padding."""
        assert b64url_encode(b"a") == "YQ"
        assert b64url_encode(b"ab") == "YWI"
        assert b64url_encode(b"abc") == "YWJj"
        assert b64url_encode(b"") == ""

    def test_encode_uses_url_safe_alphabet(self):
        """Test '+' and '/' are replaced by '-' and '_'."""
        assert b64url_encode(b"\xfb\xff\xbf") == "-_-_"

    def test_decode_text_and_bytes(self):
        """Test both str and bytes input decode."""
        assert b64url_decode("YWJj") == b"abc"
        assert b64url_decode(b"YWI") == b"ab"
        assert b64url_decode("-_-_") == b"\xfb\xff\xbf"
        assert b64url_decode("") == b""

    @pytest.mark.parametrize(
        "value",
        [
            "YQ==",      # padding
            "YW+j",      # standard alphabet
            "YW/j",
            "YW J",      # whitespace
            "YWJj\n",
            "YW\n",      # trailing newline
            "e31",       # unused trailing bits set
            "YWJjZ",     # impossible length
            "é",
        ],
    )
    def test_decode_rejects_malformed_input(self, value):
        """Test anything outside strict unpadded base64url is refused."""
        with pytest.raises(InvalidBase64Error) as exc_info:
            b64url_decode(value)
        assert exc_info.value.error_code == "INVALID_BASE64"

    def test_decode_rejects_non_text(self):
        """Test non-text input is refused rather than crashing."""
        with pytest.raises(InvalidBase64Error):
            b64url_decode(12345)


class TestStandardBase64:
    """Tests for the padded standard alphabet used by x5c."""

    def test_encode_decode(self):
        """Test standard base64 keeps its padding."""
        assert b64_std_encode(b"a") == "YQ=="
        assert b64_std_decode("YQ==") == b"a"

    def test_decode_rejects_url_safe_alphabet(self):
        """Test url-safe characters are not accepted in x5c entries."""
        with pytest.raises(InvalidBase64Error):
            b64_std_decode("-_-_")
