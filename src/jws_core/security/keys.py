"""
Signing and validation key material for ES256, RS256 and HS256.

``JwsSigner`` and ``JwsValidator`` are closed hierarchies: each has exactly one
concrete variant per ``JwaAlg``. Instances are immutable and hold no mutable
state, so they can be shared read-only between threads.
"""
import logging
import secrets
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Optional, Union

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, hmac, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

from jws_core.models.jwa import EcCurve, JwaAlg, JwkUse
from jws_core.models.jwk import EcJwk, RsaJwk
from jws_core.security.exceptions import (
    CryptoProviderError,
    InvalidSignatureError,
    JwkPublicKeyDeniedError,
    PrivateKeyDeniedError,
)
from jws_core.utils.b64 import b64url_decode

if TYPE_CHECKING:
    from jws_core.config.jws_config import JWSConfig

logger = logging.getLogger(__name__)

RSA_MIN_SIZE = 3072
RSA_SIG_SIZE = 384
RSA_MIN_VALIDATION_SIG_SIZE = 256
RSA_EXPONENT_SIZE = 3
RSA_PUBLIC_EXPONENT = 65537
ES256_COORD_SIZE = 32
ES256_SIG_SIZE = 64
HS256_MIN_KEY_SIZE = 32


@contextmanager
def provider_call(operation: str):
    """Translate cryptography provider failures into ``CryptoProviderError``."""
    try:
        yield
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        logger.error("Cryptography provider failed during %s: %s", operation, e)
        raise CryptoProviderError(f"{operation} failed") from e


def _to_padded_bytes(value: int, length: int) -> bytes:
    """Big-endian encode ``value``, left-padded with zeros to ``length``."""
    return value.to_bytes(max(length, (value.bit_length() + 7) // 8), "big")


# ------------------------------------------------------------------ validators


class JwsValidator(ABC):
    """Public (or, for HS256, shared) key material that checks signatures."""

    alg: ClassVar[JwaAlg]

    @abstractmethod
    def verify(self, sign_input: bytes, signature: bytes) -> None:
        """
        Check ``signature`` over ``sign_input``.

        Raises:
            InvalidSignatureError: If the signature has the wrong length or
                does not verify
            CryptoProviderError: If the provider fails
        """

    @abstractmethod
    def to_jwk(self, kid: Optional[str] = None) -> Union[EcJwk, RsaJwk]:
        """Export the public key as a JWK."""

    @staticmethod
    def from_jwk(jwk: Union[EcJwk, RsaJwk]) -> "JwsValidator":
        """
        Build a validator from a published public JWK.

        EC points are rebuilt on P-256 and must lie on the curve.

        Raises:
            CryptoProviderError: If the key material is rejected
        """
        if isinstance(jwk, EcJwk):
            if jwk.crv != EcCurve.P256:
                raise CryptoProviderError(f"Unsupported curve: {jwk.crv}")
            with provider_call("EC public key construction"):
                numbers = ec.EllipticCurvePublicNumbers(
                    int.from_bytes(jwk.x, "big"),
                    int.from_bytes(jwk.y, "big"),
                    ec.SECP256R1(),
                )
                pkey = numbers.public_key()
            return Es256Validator(pkey)
        if isinstance(jwk, RsaJwk):
            with provider_call("RSA public key construction"):
                numbers = rsa.RSAPublicNumbers(
                    int.from_bytes(jwk.e, "big"),
                    int.from_bytes(jwk.n, "big"),
                )
                pkey = numbers.public_key()
            return Rs256Validator(pkey)
        raise TypeError(f"Expected a Jwk, got {type(jwk).__name__}")

    @staticmethod
    def from_certificate(cert: x509.Certificate) -> "JwsValidator":
        """
        Build a validator from the public key of an X.509 certificate.

        Raises:
            CryptoProviderError: If the key is not P-256 EC or RSA
        """
        with provider_call("certificate public key extraction"):
            pkey = cert.public_key()
        if isinstance(pkey, ec.EllipticCurvePublicKey):
            if not isinstance(pkey.curve, ec.SECP256R1):
                raise CryptoProviderError(f"Unsupported curve: {pkey.curve.name}")
            return Es256Validator(pkey)
        if isinstance(pkey, rsa.RSAPublicKey):
            return Rs256Validator(pkey)
        raise CryptoProviderError(
            f"Unsupported certificate key type: {type(pkey).__name__}"
        )


@dataclass(frozen=True, eq=False)
class Es256Validator(JwsValidator):
    """ECDSA P-256 / SHA-256 public key."""
    alg: ClassVar[JwaAlg] = JwaAlg.ES256

    pkey: ec.EllipticCurvePublicKey = field(repr=False)
    digest: hashes.HashAlgorithm = field(default_factory=hashes.SHA256)

    def verify(self, sign_input: bytes, signature: bytes) -> None:
        if len(signature) != ES256_SIG_SIZE:
            raise InvalidSignatureError(
                f"ES256 signatures must be {ES256_SIG_SIZE} bytes"
            )
        r = int.from_bytes(signature[:ES256_COORD_SIZE], "big")
        s = int.from_bytes(signature[ES256_COORD_SIZE:], "big")
        with provider_call("ES256 verification"):
            der_sig = encode_dss_signature(r, s)
            try:
                self.pkey.verify(der_sig, sign_input, ec.ECDSA(self.digest))
            except InvalidSignature as e:
                raise InvalidSignatureError() from e

    def to_jwk(self, kid: Optional[str] = None) -> EcJwk:
        numbers = self.pkey.public_numbers()
        return EcJwk(
            crv=EcCurve.P256,
            x=numbers.x.to_bytes(ES256_COORD_SIZE, "big"),
            y=numbers.y.to_bytes(ES256_COORD_SIZE, "big"),
            alg=JwaAlg.ES256,
            use_=JwkUse.Sig,
            kid=kid,
        )


@dataclass(frozen=True, eq=False)
class Rs256Validator(JwsValidator):
    """RSASSA-PKCS1-v1_5 / SHA-256 public key."""
    alg: ClassVar[JwaAlg] = JwaAlg.RS256

    pkey: rsa.RSAPublicKey = field(repr=False)
    digest: hashes.HashAlgorithm = field(default_factory=hashes.SHA256)

    def verify(self, sign_input: bytes, signature: bytes) -> None:
        # Smaller legacy keys are accepted here, never generated.
        if len(signature) < RSA_MIN_VALIDATION_SIG_SIZE:
            raise InvalidSignatureError(
                f"RS256 signatures must be at least "
                f"{RSA_MIN_VALIDATION_SIG_SIZE} bytes"
            )
        with provider_call("RS256 verification"):
            try:
                self.pkey.verify(
                    signature, sign_input, padding.PKCS1v15(), self.digest
                )
            except InvalidSignature as e:
                raise InvalidSignatureError() from e

    def to_jwk(self, kid: Optional[str] = None) -> RsaJwk:
        numbers = self.pkey.public_numbers()
        return RsaJwk(
            n=_to_padded_bytes(numbers.n, RSA_SIG_SIZE),
            e=_to_padded_bytes(numbers.e, RSA_EXPONENT_SIZE),
            alg=JwaAlg.RS256,
            use_=JwkUse.Sig,
            kid=kid,
        )


@dataclass(frozen=True, eq=False)
class Hs256Validator(JwsValidator):
    """HMAC-SHA256 shared secret; verification recomputes the MAC."""
    alg: ClassVar[JwaAlg] = JwaAlg.HS256

    skey: bytes = field(repr=False)
    digest: hashes.HashAlgorithm = field(default_factory=hashes.SHA256)

    def verify(self, sign_input: bytes, signature: bytes) -> None:
        with provider_call("HS256 verification"):
            mac = hmac.HMAC(self.skey, self.digest)
            mac.update(sign_input)
            try:
                mac.verify(signature)
            except InvalidSignature as e:
                raise InvalidSignatureError() from e

    def to_jwk(self, kid: Optional[str] = None):
        raise JwkPublicKeyDeniedError()


# --------------------------------------------------------------------- signers


class JwsSigner(ABC):
    """Private key material that produces JWS signatures."""

    alg: ClassVar[JwaAlg]

    @abstractmethod
    def sign_bytes(self, data: bytes) -> bytes:
        """
        Sign ``data`` and return the JWS signature bytes.

        Raises:
            CryptoProviderError: If the provider fails
        """

    @abstractmethod
    def to_validator(self) -> JwsValidator:
        """Return the validator paired with this signer."""

    @abstractmethod
    def export_der(self) -> bytes:
        """
        Export the private key as DER.

        Raises:
            PrivateKeyDeniedError: For symmetric keys
        """

    def to_jwk(self, kid: Optional[str] = None) -> Union[EcJwk, RsaJwk]:
        """
        Export the public half of this key as a JWK.

        Raises:
            JwkPublicKeyDeniedError: For symmetric keys
        """
        return self.to_validator().to_jwk(kid)

    @staticmethod
    def generate(
        alg: Union[JwaAlg, str], config: Optional["JWSConfig"] = None
    ) -> "JwsSigner":
        """
        Generate a fresh signer for ``alg``.

        Args:
            alg: Algorithm of the new key
            config: Optional settings for RSA modulus and HMAC secret sizes;
                the minimum sizes are used when omitted

        Raises:
            CryptoProviderError: If key generation fails
        """
        alg = JwaAlg(alg)
        if alg is JwaAlg.ES256:
            return Es256Signer.new_key()
        if alg is JwaAlg.RS256:
            bits = config.rsa_key_bits if config else RSA_MIN_SIZE
            return Rs256Signer.new_key(bits)
        if alg is JwaAlg.HS256:
            size = config.hmac_key_bytes if config else HS256_MIN_KEY_SIZE
            return Hs256Signer.new_key(size)
        raise CryptoProviderError(f"Unsupported algorithm: {alg}")

    @staticmethod
    def generate_es256() -> "Es256Signer":
        return Es256Signer.new_key()

    @staticmethod
    def generate_rs256(bits: int = RSA_MIN_SIZE) -> "Rs256Signer":
        return Rs256Signer.new_key(bits)

    @staticmethod
    def generate_hs256(size: int = HS256_MIN_KEY_SIZE) -> "Hs256Signer":
        return Hs256Signer.new_key(size)

    @staticmethod
    def import_der(alg: Union[JwaAlg, str], der: bytes) -> "JwsSigner":
        """
        Restore an asymmetric signer from private key DER.

        SEC1, PKCS#1 and PKCS#8 encodings are accepted.

        Raises:
            CryptoProviderError: If the DER is malformed, the key type does not
                match ``alg``, or ``alg`` is HS256
        """
        alg = JwaAlg(alg)
        if alg is JwaAlg.HS256:
            raise CryptoProviderError("HS256 secrets have no DER form")
        with provider_call("DER private key import"):
            skey = serialization.load_der_private_key(der, password=None)
        if alg is JwaAlg.ES256:
            if not isinstance(skey, ec.EllipticCurvePrivateKey):
                raise CryptoProviderError("DER does not hold an EC private key")
            if not isinstance(skey.curve, ec.SECP256R1):
                raise CryptoProviderError(f"Unsupported curve: {skey.curve.name}")
            return Es256Signer(skey)
        if not isinstance(skey, rsa.RSAPrivateKey):
            raise CryptoProviderError("DER does not hold an RSA private key")
        return Rs256Signer(skey)


@dataclass(frozen=True, eq=False)
class Es256Signer(JwsSigner):
    """ECDSA P-256 / SHA-256 private key."""
    alg: ClassVar[JwaAlg] = JwaAlg.ES256

    skey: ec.EllipticCurvePrivateKey = field(repr=False)
    digest: hashes.HashAlgorithm = field(default_factory=hashes.SHA256)

    @classmethod
    def new_key(cls) -> "Es256Signer":
        with provider_call("ES256 key generation"):
            skey = ec.generate_private_key(ec.SECP256R1())
        logger.debug("Generated ES256 signing key")
        return cls(skey)

    @classmethod
    def from_jwk_components(cls, x: str, y: str, d: str) -> "Es256Signer":
        """
        Build a signer from the base64url ``x``, ``y`` and ``d`` members of a
        private EC JWK.

        Raises:
            InvalidBase64Error: If any member is not base64url
            CryptoProviderError: If the components do not form a P-256 key
        """
        xi = int.from_bytes(b64url_decode(x), "big")
        yi = int.from_bytes(b64url_decode(y), "big")
        di = int.from_bytes(b64url_decode(d), "big")
        with provider_call("EC private key construction"):
            public_numbers = ec.EllipticCurvePublicNumbers(xi, yi, ec.SECP256R1())
            skey = ec.EllipticCurvePrivateNumbers(di, public_numbers).private_key()
        return cls(skey)

    def sign_bytes(self, data: bytes) -> bytes:
        with provider_call("ES256 signing"):
            der_sig = self.skey.sign(data, ec.ECDSA(self.digest))
            r, s = decode_dss_signature(der_sig)
        # Fixed width: 32-byte r then 32-byte s, zero-padded on the left.
        return r.to_bytes(ES256_COORD_SIZE, "big") + s.to_bytes(ES256_COORD_SIZE, "big")

    def to_validator(self) -> Es256Validator:
        return Es256Validator(self.skey.public_key(), self.digest)

    def export_der(self) -> bytes:
        with provider_call("ES256 DER export"):
            return self.skey.private_bytes(
                encoding=serialization.Encoding.DER,
                format=serialization.PrivateFormat.TraditionalOpenSSL,
                encryption_algorithm=serialization.NoEncryption(),
            )


@dataclass(frozen=True, eq=False)
class Rs256Signer(JwsSigner):
    """RSASSA-PKCS1-v1_5 / SHA-256 private key."""
    alg: ClassVar[JwaAlg] = JwaAlg.RS256

    skey: rsa.RSAPrivateKey = field(repr=False)
    digest: hashes.HashAlgorithm = field(default_factory=hashes.SHA256)

    @classmethod
    def new_key(cls, bits: int = RSA_MIN_SIZE) -> "Rs256Signer":
        """Generate a legacy RSA key of at least ``RSA_MIN_SIZE`` bits."""
        if bits < RSA_MIN_SIZE:
            raise CryptoProviderError(
                f"RSA keys must be at least {RSA_MIN_SIZE} bits, got {bits}"
            )
        with provider_call("RS256 key generation"):
            skey = rsa.generate_private_key(
                public_exponent=RSA_PUBLIC_EXPONENT, key_size=bits
            )
        logger.debug("Generated RS256 signing key (%d bits)", bits)
        return cls(skey)

    def sign_bytes(self, data: bytes) -> bytes:
        with provider_call("RS256 signing"):
            return self.skey.sign(data, padding.PKCS1v15(), self.digest)

    def to_validator(self) -> Rs256Validator:
        return Rs256Validator(self.skey.public_key(), self.digest)

    def export_der(self) -> bytes:
        with provider_call("RS256 DER export"):
            return self.skey.private_bytes(
                encoding=serialization.Encoding.DER,
                format=serialization.PrivateFormat.TraditionalOpenSSL,
                encryption_algorithm=serialization.NoEncryption(),
            )


@dataclass(frozen=True, eq=False)
class Hs256Signer(JwsSigner):
    """HMAC-SHA256 shared secret."""
    alg: ClassVar[JwaAlg] = JwaAlg.HS256

    skey: bytes = field(repr=False)
    digest: hashes.HashAlgorithm = field(default_factory=hashes.SHA256)

    @classmethod
    def new_key(cls, size: int = HS256_MIN_KEY_SIZE) -> "Hs256Signer":
        return cls.from_raw(secrets.token_bytes(size))

    @classmethod
    def from_raw(cls, secret: bytes) -> "Hs256Signer":
        """
        Build a signer from raw secret bytes.

        Raises:
            CryptoProviderError: If the secret is shorter than 32 bytes
        """
        if len(secret) < HS256_MIN_KEY_SIZE:
            raise CryptoProviderError(
                f"HS256 secrets must be at least {HS256_MIN_KEY_SIZE} bytes"
            )
        return cls(bytes(secret))

    def sign_bytes(self, data: bytes) -> bytes:
        with provider_call("HS256 signing"):
            mac = hmac.HMAC(self.skey, self.digest)
            mac.update(data)
            return mac.finalize()

    def to_validator(self) -> Hs256Validator:
        return Hs256Validator(self.skey, self.digest)

    def export_der(self) -> bytes:
        raise PrivateKeyDeniedError()

    def to_jwk(self, kid: Optional[str] = None):
        raise JwkPublicKeyDeniedError()
