"""
Verification of ``x5c`` certificate chains embedded in JWS headers.

Without trust anchors only the internal consistency of the presented chain is
established: validity windows, issuer names and signatures from the leaf up to
the last certificate. Passing ``trust_anchors`` additionally requires the chain
to terminate at one of them.
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm

from jws_core.security.exceptions import (
    InvalidHeaderFormatError,
    X5cPublicKeyDeniedError,
)

logger = logging.getLogger(__name__)


def is_directly_issued_by(cert: x509.Certificate, issuer: x509.Certificate) -> bool:
    """Return True if ``issuer``'s name and key account for ``cert``."""
    try:
        cert.verify_directly_issued_by(issuer)
    except (ValueError, TypeError, InvalidSignature, UnsupportedAlgorithm):
        return False
    return True


def verify_chain(
    chain: Sequence[x509.Certificate],
    trust_anchors: Optional[Sequence[x509.Certificate]] = None,
    at_time: Optional[datetime] = None,
) -> x509.Certificate:
    """
    Verify a leaf-first certificate chain.

    Args:
        chain: Certificates, leaf first, each issued by the next
        trust_anchors: Optional roots the chain must terminate at
        at_time: Time to check validity windows against (default: now)

    Returns:
        The leaf certificate

    Raises:
        InvalidHeaderFormatError: If the chain is empty
        X5cPublicKeyDeniedError: If any check fails
    """
    if not chain:
        raise InvalidHeaderFormatError("x5c chain is empty")

    now = at_time or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    for depth, cert in enumerate(chain):
        if not cert.not_valid_before_utc <= now <= cert.not_valid_after_utc:
            logger.info(
                "x5c certificate outside validity period - depth=%d subject=%s",
                depth,
                cert.subject.rfc4514_string(),
            )
            raise X5cPublicKeyDeniedError(
                f"Certificate at depth {depth} is not valid at {now.isoformat()}"
            )

    for depth in range(len(chain) - 1):
        if not is_directly_issued_by(chain[depth], chain[depth + 1]):
            logger.info(
                "x5c chain link broken - depth=%d subject=%s",
                depth,
                chain[depth].subject.rfc4514_string(),
            )
            raise X5cPublicKeyDeniedError(
                f"Certificate at depth {depth} is not issued by the next certificate"
            )

    if trust_anchors:
        top = chain[-1]
        anchored = any(
            top == anchor or is_directly_issued_by(top, anchor)
            for anchor in trust_anchors
        )
        if not anchored:
            logger.info(
                "x5c chain does not terminate at a trust anchor - subject=%s",
                top.subject.rfc4514_string(),
            )
            raise X5cPublicKeyDeniedError(
                "Certificate chain does not terminate at a trust anchor"
            )

    return chain[0]
