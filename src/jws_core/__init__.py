"""
JSON Web Signature (RFC 7515) engine for ES256, RS256 and HS256.

Example usage:
    from jws_core import InvalidSignatureError, JwaAlg, JwsCompact, JwsInner, JwsSigner

    signer = JwsSigner.generate(JwaAlg.ES256)
    token = str(JwsInner(payload=b"hello").with_kid("key-1").sign(signer))

    jwsc = JwsCompact.from_str(token)
    try:
        released = jwsc.validate(signer.to_validator())
        print(released.payload)
    except InvalidSignatureError:
        print("Signature rejected")
"""

from .config.jws_config import JWSConfig, get_jws_config
from .jws.compact import JwsCompact, JwsInner
from .models.header import JwsHeader, ProtectedHeader
from .models.jwa import EcCurve, JwaAlg, JwkUse
from .models.jwk import EcJwk, Jwk, JwkKeySet, RsaJwk, parse_jwk
from .security.exceptions import (
    CriticalExtensionError,
    CryptoProviderError,
    InvalidBase64Error,
    InvalidCompactFormatError,
    InvalidHeaderFormatError,
    InvalidJwkFormatError,
    InvalidSignatureError,
    JwkPublicKeyDeniedError,
    JwsError,
    PrivateKeyDeniedError,
    UnknownKidError,
    ValidatorAlgMismatchError,
    X5cPublicKeyDeniedError,
)
from .security.keys import (
    Es256Signer,
    Es256Validator,
    Hs256Signer,
    Hs256Validator,
    JwsSigner,
    JwsValidator,
    Rs256Signer,
    Rs256Validator,
)

__all__ = [
    "JWSConfig",
    "get_jws_config",
    "JwsCompact",
    "JwsInner",
    "JwsHeader",
    "ProtectedHeader",
    "EcCurve",
    "JwaAlg",
    "JwkUse",
    "EcJwk",
    "Jwk",
    "JwkKeySet",
    "RsaJwk",
    "parse_jwk",
    "CriticalExtensionError",
    "CryptoProviderError",
    "InvalidBase64Error",
    "InvalidCompactFormatError",
    "InvalidHeaderFormatError",
    "InvalidJwkFormatError",
    "InvalidSignatureError",
    "JwkPublicKeyDeniedError",
    "JwsError",
    "PrivateKeyDeniedError",
    "UnknownKidError",
    "ValidatorAlgMismatchError",
    "X5cPublicKeyDeniedError",
    "Es256Signer",
    "Es256Validator",
    "Hs256Signer",
    "Hs256Validator",
    "JwsSigner",
    "JwsValidator",
    "Rs256Signer",
    "Rs256Validator",
]
