"""
Strict base64url helpers for JWS segments and JWK members.

Encoding and decoding are delegated to PyJWT's ``jwt.utils``; this module only
adds the strictness the compact serialization requires (no padding, no
characters outside the url-safe alphabet).
"""
import base64
import binascii
import re
from typing import Union

from jwt.utils import base64url_decode, base64url_encode

from jws_core.security.exceptions import InvalidBase64Error

_B64URL_RE = re.compile(r"[A-Za-z0-9_-]*")


def b64url_encode(data: bytes) -> str:
    """Encode bytes as unpadded base64url text."""
    return base64url_encode(data).decode("ascii")


def b64url_decode(data: Union[str, bytes]) -> bytes:
    """
    Decode unpadded base64url text.

    Args:
        data: base64url text

    Returns:
        The decoded bytes

    Raises:
        InvalidBase64Error: If the input contains padding, characters outside
            the url-safe alphabet, has an impossible length or sets unused
            trailing bits
    """
    if isinstance(data, bytes):
        data = data.decode("latin-1")
    if not isinstance(data, str) or not _B64URL_RE.fullmatch(data):
        raise InvalidBase64Error()
    # A single trailing sextet can never encode a whole byte.
    if len(data) % 4 == 1:
        raise InvalidBase64Error()
    try:
        decoded = base64url_decode(data)
    except (binascii.Error, ValueError) as e:
        raise InvalidBase64Error() from e
    # Only one text encodes a given byte string; the decoder drops unused bits.
    if b64url_encode(decoded) != data:
        raise InvalidBase64Error()
    return decoded


def b64_std_encode(data: bytes) -> str:
    """Encode bytes as padded standard base64 (used by ``x5c``)."""
    return base64.b64encode(data).decode("ascii")


def b64_std_decode(data: str) -> bytes:
    """Decode padded standard base64, rejecting non-alphabet characters."""
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise InvalidBase64Error() from e
