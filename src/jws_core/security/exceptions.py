"""
Error taxonomy for JWS building, parsing, signing and validation.

Every kind is a direct subclass of ``JwsError``; there is no deeper hierarchy.
"""


class JwsError(Exception):
    """Base exception for JWS errors."""
    error_code = "JWS_ERROR"
    default_message = "JWS operation failed."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCompactFormatError(JwsError):
    """Compact serialization does not have exactly three segments."""
    error_code = "INVALID_COMPACT_FORMAT"
    default_message = "Compact serialization must have exactly three segments."


class InvalidBase64Error(JwsError):
    """A segment or key member is not valid base64url."""
    error_code = "INVALID_BASE64"
    default_message = "Invalid base64url data."


class InvalidHeaderFormatError(JwsError):
    """Protected header JSON is malformed, or its x5c chain is."""
    error_code = "INVALID_HEADER_FORMAT"
    default_message = "Invalid protected header."


class InvalidSignatureError(JwsError):
    """Signature failed verification or has the wrong length."""
    error_code = "INVALID_SIGNATURE"
    default_message = "Invalid signature."


class CriticalExtensionError(JwsError):
    """Header lists critical extensions, none of which are supported."""
    error_code = "CRITICAL_EXTENSION"
    default_message = "Unsupported critical header extension."


class ValidatorAlgMismatchError(JwsError):
    """Validator algorithm family differs from the header ``alg``."""
    error_code = "VALIDATOR_ALG_MISMATCH"
    default_message = "Validator does not match the header algorithm."


class X5cPublicKeyDeniedError(JwsError):
    """Embedded certificate chain failed verification."""
    error_code = "X5C_PUBLIC_KEY_DENIED"
    default_message = "Certificate chain verification failed."


class PrivateKeyDeniedError(JwsError):
    """DER export attempted on a symmetric key."""
    error_code = "PRIVATE_KEY_DENIED"
    default_message = "Symmetric keys cannot be exported as DER."


class JwkPublicKeyDeniedError(JwsError):
    """JWK export attempted on a symmetric key."""
    error_code = "JWK_PUBLIC_KEY_DENIED"
    default_message = "Symmetric keys have no public JWK."


class CryptoProviderError(JwsError):
    """The underlying cryptography provider failed."""
    error_code = "CRYPTO_PROVIDER_ERROR"
    default_message = "Cryptographic operation failed."


class InvalidJwkFormatError(JwsError):
    """A JWK or JWK-Set document could not be parsed."""
    error_code = "INVALID_JWK_FORMAT"
    default_message = "Invalid JWK document."


class UnknownKidError(JwsError):
    """No key with the requested kid exists in the key set."""
    error_code = "UNKNOWN_KID"
    default_message = "Unknown key ID."
