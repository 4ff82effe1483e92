"""
Unsigned JWS messages and the signed compact serialization (RFC 7515 3.1).
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Sequence, Union

from cryptography import x509
from pydantic import ValidationError

from jws_core.models.header import JwsHeader, ProtectedHeader
from jws_core.models.jwk import EcJwk, RsaJwk
from jws_core.security.exceptions import (
    InvalidCompactFormatError,
    InvalidHeaderFormatError,
    ValidatorAlgMismatchError,
)
from jws_core.security.keys import JwsSigner, JwsValidator
from jws_core.security.x5c import verify_chain
from jws_core.utils.b64 import b64url_decode, b64url_encode

if TYPE_CHECKING:
    from jws_core.config.jws_config import JWSConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JwsInner:
    """
    An unsigned message: payload bytes plus the kid/typ/cty header subset.

    The ``with_*`` methods return new messages and leave this one untouched.
    """
    payload: bytes
    header: JwsHeader = field(default_factory=JwsHeader)

    @classmethod
    def from_config(cls, payload: bytes, config: "JWSConfig") -> "JwsInner":
        """Create a message carrying the configured default ``typ``, if any."""
        return cls(payload=payload, header=JwsHeader(typ=config.default_typ))

    def with_kid(self, kid: str) -> "JwsInner":
        return replace(self, header=self.header.model_copy(update={"kid": kid}))

    def with_typ(self, typ: str) -> "JwsInner":
        return replace(self, header=self.header.model_copy(update={"typ": typ}))

    def with_cty(self, cty: str) -> "JwsInner":
        return replace(self, header=self.header.model_copy(update={"cty": cty}))

    def sign(
        self,
        signer: JwsSigner,
        jku: Optional[str] = None,
        jwk: Optional[Union[EcJwk, RsaJwk]] = None,
    ) -> "JwsCompact":
        """
        Sign this message.

        Args:
            signer: Key to sign with; its algorithm becomes the header ``alg``
            jku: Optional JWK-Set URL to advertise in the header
            jwk: Optional public key to embed in the header

        Returns:
            The signed compact object

        Raises:
            InvalidHeaderFormatError: If ``jku`` or ``jwk`` is malformed
            CryptoProviderError: If signing fails
        """
        try:
            header = ProtectedHeader(
                alg=signer.alg,
                jku=jku,
                jwk=jwk,
                kid=self.header.kid,
                typ=self.header.typ,
                cty=self.header.cty,
            )
        except ValidationError as e:
            raise InvalidHeaderFormatError("Cannot build protected header") from e

        hdr_b64 = b64url_encode(header.to_json_bytes())
        payload_b64 = b64url_encode(self.payload)
        sign_input = f"{hdr_b64}.{payload_b64}".encode("ascii")

        signature = signer.sign_bytes(sign_input)
        logger.debug(
            "Signed JWS - alg=%s kid=%s payload=%d bytes signature=%d bytes",
            header.alg.value,
            header.kid,
            len(self.payload),
            len(signature),
        )

        return JwsCompact(
            header=header,
            payload=self.payload,
            sign_input=sign_input,
            signature=signature,
        )

    def sign_embed_public_jwk(
        self, signer: JwsSigner, kid: Optional[str] = None
    ) -> "JwsCompact":
        """Sign with the signer's own public JWK embedded in the header."""
        return self.sign(signer, jwk=signer.to_jwk(kid))


@dataclass(frozen=True)
class JwsCompact:
    """
    A signed JWS in compact form.

    ``sign_input`` is exactly what was signed. For a parsed object it is the
    verbatim text before the final ``.``, never a re-encoding of ``header``.
    """
    header: ProtectedHeader
    payload: bytes
    sign_input: bytes
    signature: bytes

    @classmethod
    def from_str(cls, text: Union[str, bytes]) -> "JwsCompact":
        """
        Parse a compact serialization.

        Args:
            text: ``header "." payload "." signature``, each unpadded base64url

        Returns:
            The parsed, not yet validated, object

        Raises:
            InvalidCompactFormatError: If there are not exactly three segments
            InvalidBase64Error: If any segment is not valid base64url
            InvalidHeaderFormatError: If the header is malformed
            CriticalExtensionError: If the header carries a non-empty ``crit``
        """
        if isinstance(text, (bytes, bytearray)):
            text = bytes(text).decode("latin-1")
        if not isinstance(text, str):
            raise InvalidCompactFormatError("Compact serialization must be text")

        segments = text.split(".")
        if len(segments) != 3:
            raise InvalidCompactFormatError(
                f"Expected 3 segments, found {len(segments)}"
            )
        hdr_str, payload_str, sig_str = segments

        header = ProtectedHeader.from_json_bytes(b64url_decode(hdr_str))
        payload = b64url_decode(payload_str)
        signature = b64url_decode(sig_str)

        # Every character is in the base64url alphabet by now.
        sign_input = text[: text.rindex(".")].encode("ascii")

        return cls(
            header=header,
            payload=payload,
            sign_input=sign_input,
            signature=signature,
        )

    def to_string(self) -> str:
        """
        Serialize to compact form.

        The header is re-encoded from the typed model, so its bytes may differ
        from those of a token that was parsed with a different member order.
        """
        hdr_b64 = b64url_encode(self.header.to_json_bytes())
        return ".".join(
            (hdr_b64, b64url_encode(self.payload), b64url_encode(self.signature))
        )

    def __str__(self) -> str:
        return self.to_string()

    @property
    def kid(self) -> Optional[str]:
        return self.header.kid

    @property
    def jku(self) -> Optional[str]:
        return self.header.jku

    @property
    def jwk(self) -> Optional[Union[EcJwk, RsaJwk]]:
        return self.header.jwk

    def get_jwk_kid(self) -> Optional[str]:
        return self.kid

    def get_jwk_pubkey_url(self) -> Optional[str]:
        return self.jku

    def get_jwk_pubkey(self) -> Optional[Union[EcJwk, RsaJwk]]:
        return self.jwk

    def embedded_jwk_validator(self) -> Optional[JwsValidator]:
        """Build a validator from the header's embedded ``jwk``, if present."""
        if self.header.jwk is None:
            return None
        return JwsValidator.from_jwk(self.header.jwk)

    def get_x5c_pubkey(
        self,
        trust_anchors: Optional[Sequence[x509.Certificate]] = None,
        at_time: Optional[datetime] = None,
    ) -> Optional[x509.Certificate]:
        """
        Verify the embedded ``x5c`` chain and return its leaf certificate.

        Args:
            trust_anchors: Optional roots the chain must terminate at. Without
                them only the chain's internal consistency is checked.
            at_time: Time to check validity windows against (default: now)

        Returns:
            The leaf certificate, or None if the header has no ``x5c``

        Raises:
            InvalidHeaderFormatError: If ``x5c`` is an empty list
            X5cPublicKeyDeniedError: If the chain fails verification
        """
        if self.header.x5c is None:
            return None
        return verify_chain(self.header.x5c, trust_anchors, at_time)

    def validate(self, validator: JwsValidator) -> JwsInner:
        """
        Verify the signature and release the message.

        The validator must belong to the same algorithm family as the header
        ``alg``; no other combination is ever attempted.

        Returns:
            The kid/typ/cty header subset and the payload

        Raises:
            ValidatorAlgMismatchError: If validator and header ``alg`` differ
            InvalidSignatureError: If the signature does not verify
            CryptoProviderError: If the provider fails
        """
        if not isinstance(validator, JwsValidator):
            raise TypeError(f"Expected a JwsValidator, got {type(validator).__name__}")
        if validator.alg is not self.header.alg:
            logger.warning(
                "Rejecting JWS - validator alg %s does not match header alg %s",
                validator.alg.value,
                self.header.alg.value,
            )
            raise ValidatorAlgMismatchError(
                f"Validator {validator.alg.value} cannot check "
                f"{self.header.alg.value} signatures"
            )

        validator.verify(self.sign_input, self.signature)
        logger.debug(
            "Validated JWS - alg=%s kid=%s", self.header.alg.value, self.header.kid
        )

        return JwsInner(
            payload=self.payload,
            header=JwsHeader.from_protected(self.header),
        )
