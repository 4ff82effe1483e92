"""
JSON Web Key (RFC 7517) models for public keys.

Only public members are modelled. A document carrying private key members is
rejected at parse time, so a ``Jwk`` can never transport a private key.
"""
import json
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    TypeAdapter,
    ValidationError,
    model_validator,
)

from jws_core.models.jwa import EcCurve, JwaAlg, JwkUse
from jws_core.security.exceptions import (
    InvalidBase64Error,
    InvalidJwkFormatError,
    UnknownKidError,
)
from jws_core.utils.b64 import b64url_decode, b64url_encode

PRIVATE_KEY_MEMBERS = frozenset({"d", "p", "q", "dp", "dq", "qi", "oth", "k"})


def _decode_member(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        raise ValueError("expected a base64url string")
    try:
        return b64url_decode(value)
    except InvalidBase64Error as e:
        raise ValueError("invalid base64url value") from e


Base64UrlBytes = Annotated[
    bytes,
    BeforeValidator(_decode_member),
    PlainSerializer(b64url_encode, return_type=str),
]


class _JwkModel(BaseModel):
    """Shared config and helpers for the JWK variants."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def reject_private_members(cls, data: Any) -> Any:
        """Refuse documents that carry private key material."""
        if isinstance(data, dict):
            leaked = PRIVATE_KEY_MEMBERS.intersection(data)
            if leaked:
                raise ValueError(
                    f"private key members are not accepted: {sorted(leaked)}"
                )
        return data

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-ready dict form of this key."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        """Return the compact JSON form of this key."""
        return json.dumps(self.to_dict(), separators=(",", ":"))


class EcJwk(_JwkModel):
    """Elliptic curve public key."""
    kty: Literal["EC"] = "EC"
    crv: EcCurve = Field(..., description="Curve name")
    x: Base64UrlBytes = Field(..., description="Big-endian X coordinate")
    y: Base64UrlBytes = Field(..., description="Big-endian Y coordinate")
    alg: Optional[JwaAlg] = Field(None, description="Algorithm for this key")
    use_: Optional[JwkUse] = Field(None, alias="use", description="Key usage")
    kid: Optional[str] = Field(None, description="Key ID")


class RsaJwk(_JwkModel):
    """RSA public key."""
    kty: Literal["RSA"] = "RSA"
    n: Base64UrlBytes = Field(..., description="Big-endian modulus")
    e: Base64UrlBytes = Field(..., description="Big-endian public exponent")
    alg: Optional[JwaAlg] = Field(None, description="Algorithm for this key")
    use_: Optional[JwkUse] = Field(None, alias="use", description="Key usage")
    kid: Optional[str] = Field(None, description="Key ID")


Jwk = Annotated[Union[EcJwk, RsaJwk], Field(discriminator="kty")]

_jwk_adapter = TypeAdapter(Jwk)


def parse_jwk(data: Union[str, bytes, Dict[str, Any]]) -> Union[EcJwk, RsaJwk]:
    """
    Parse a single JWK from JSON text or an already decoded dict.

    Raises:
        InvalidJwkFormatError: If the document is not a valid public JWK
    """
    try:
        if isinstance(data, (str, bytes)):
            return _jwk_adapter.validate_json(data)
        return _jwk_adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidJwkFormatError(f"Invalid JWK: {e.error_count()} error(s)") from e


class JwkKeySet(BaseModel):
    """A set of public JWKs, as published at a ``jku`` location."""
    model_config = ConfigDict(frozen=True)

    keys: List[Jwk] = Field(default_factory=list, description="Public keys")

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "JwkKeySet":
        """
        Parse a JWK-Set document.

        Raises:
            InvalidJwkFormatError: If the document or any key in it is invalid
        """
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise InvalidJwkFormatError(
                f"Invalid JWK set: {e.error_count()} error(s)"
            ) from e

    def to_json(self) -> str:
        """Return the compact JSON form of the set."""
        return json.dumps(
            self.model_dump(mode="json", by_alias=True, exclude_none=True),
            separators=(",", ":"),
        )

    def find(self, kid: str) -> Optional[Union[EcJwk, RsaJwk]]:
        """Return the first key with ``kid``, if any."""
        for key in self.keys:
            if key.kid == kid:
                return key
        return None

    def validator_for(self, kid: str):
        """
        Build a validator for the key identified by ``kid``.

        Raises:
            UnknownKidError: If no key in the set has this kid
        """
        from jws_core.security.keys import JwsValidator

        key = self.find(kid)
        if key is None:
            raise UnknownKidError(f"Unknown key ID: {kid}")
        return JwsValidator.from_jwk(key)
