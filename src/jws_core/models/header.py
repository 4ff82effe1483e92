"""
JWS protected header model and its JSON codec.
"""
import json
import logging
from typing import Annotated, Any, Dict, List, Optional

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    TypeAdapter,
    ValidationError,
)

from jws_core.models.jwa import JwaAlg
from jws_core.models.jwk import Jwk
from jws_core.security.exceptions import (
    CriticalExtensionError,
    InvalidBase64Error,
    InvalidHeaderFormatError,
)
from jws_core.utils.b64 import b64_std_decode, b64_std_encode

logger = logging.getLogger(__name__)

# Recognised on input, never re-emitted.
ACCEPTED_ONLY_MEMBERS = ("x5u", "x5t", "x5t#S256")


def _load_certificate(value: Any) -> x509.Certificate:
    if isinstance(value, x509.Certificate):
        return value
    if not isinstance(value, str):
        raise ValueError("x5c entries must be base64 strings")
    try:
        der = b64_std_decode(value)
    except InvalidBase64Error as e:
        raise ValueError("x5c entry is not valid base64") from e
    return x509.load_der_x509_certificate(der)


def _dump_certificate(cert: x509.Certificate) -> str:
    return b64_std_encode(cert.public_bytes(serialization.Encoding.DER))


X509Certificate = Annotated[
    x509.Certificate,
    BeforeValidator(_load_certificate),
    PlainSerializer(_dump_certificate, return_type=str),
]

_url_adapter = TypeAdapter(AnyUrl)


def _check_url(value: str) -> str:
    # Parsed for validity only; the text is kept exactly as received.
    try:
        _url_adapter.validate_python(value)
    except ValidationError as e:
        raise ValueError(f"jku is not a valid URL: {value!r}") from e
    return value


UrlString = Annotated[str, AfterValidator(_check_url)]


class ProtectedHeader(BaseModel):
    """
    The JWS protected header.

    Fields are emitted in declaration order and omitted when unset. ``x5c``
    holds the certificate chain leaf first.
    """
    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
        extra="ignore",
    )

    alg: JwaAlg = Field(..., description="Signature algorithm")
    jku: Optional[UrlString] = Field(None, description="JWK-Set URL (never fetched)")
    jwk: Optional[Jwk] = Field(None, description="Embedded public key")
    kid: Optional[str] = Field(None, description="Key ID")
    crit: Optional[List[str]] = Field(None, description="Critical extensions")
    typ: Optional[str] = Field(None, description="Media type of the whole JWS")
    cty: Optional[str] = Field(None, description="Media type of the payload")
    x5c: Optional[List[X509Certificate]] = Field(
        None, description="Certificate chain, leaf first"
    )

    @classmethod
    def from_json_bytes(cls, raw: bytes) -> "ProtectedHeader":
        """
        Parse a protected header from its decoded JSON bytes.

        A non-empty ``crit`` is refused before any other member is
        interpreted.

        Args:
            raw: UTF-8 JSON of the header

        Returns:
            The parsed header

        Raises:
            CriticalExtensionError: If ``crit`` is present and non-empty
            InvalidHeaderFormatError: If the JSON or any member is malformed
        """
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError) as e:
            raise InvalidHeaderFormatError("Header is not valid JSON") from e

        if not isinstance(data, dict):
            raise InvalidHeaderFormatError("Header must be a JSON object")

        if data.get("crit"):
            logger.warning("Rejecting header with critical extensions")
            raise CriticalExtensionError()

        for name in ACCEPTED_ONLY_MEMBERS:
            data.pop(name, None)

        try:
            return cls.model_validate(data)
        except (ValidationError, RecursionError) as e:
            raise InvalidHeaderFormatError("Header members are malformed") from e

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-ready dict form of the header."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json_bytes(self) -> bytes:
        """Return the compact UTF-8 JSON encoding of the header."""
        return json.dumps(self.to_dict(), separators=(",", ":")).encode("utf-8")


class JwsHeader(BaseModel):
    """The caller-controlled header subset carried by an unsigned message."""
    model_config = ConfigDict(frozen=True)

    kid: Optional[str] = None
    typ: Optional[str] = None
    cty: Optional[str] = None

    @classmethod
    def from_protected(cls, header: ProtectedHeader) -> "JwsHeader":
        return cls(kid=header.kid, typ=header.typ, cty=header.cty)
