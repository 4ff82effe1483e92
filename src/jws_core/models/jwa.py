"""
JSON Web Algorithm tags and key usage hints.
"""
from enum import Enum


class JwaAlg(str, Enum):
    """Signature algorithms supported by this library."""
    ES256 = "ES256"  # ECDSA P-256 / SHA-256
    RS256 = "RS256"  # RSASSA-PKCS1-v1_5 / SHA-256
    HS256 = "HS256"  # HMAC / SHA-256


class JwkUse(str, Enum):
    """Intended use of a public key."""
    Sig = "sig"
    Enc = "enc"


class EcCurve(str, Enum):
    """Elliptic curves a JWK may name."""
    P256 = "P-256"
