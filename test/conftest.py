"""
Pytest configuration and fixtures for testing.
"""
import json
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from jws_core import Es256Signer, JwsSigner, Rs256Signer
from jws_core.utils.b64 import b64url_encode


@pytest.fixture
def es256_signer():
    """Fresh ES256 signing key."""
    return JwsSigner.generate_es256()


@pytest.fixture(scope="session")
def rs256_signer():
    """
    RS256 signing key at the minimum modulus size.

    Generating 3072-bit RSA keys is slow, so one key is shared by the session.
    """
    return Rs256Signer.new_key()


@pytest.fixture(scope="session")
def other_rs256_signer():
    """A second, unrelated RS256 key."""
    return Rs256Signer.new_key()


@pytest.fixture
def hs256_signer():
    """Fresh HS256 shared secret."""
    return JwsSigner.generate_hs256()


@pytest.fixture
def all_signers(es256_signer, rs256_signer, hs256_signer):
    """One signer per supported algorithm."""
    return [es256_signer, rs256_signer, hs256_signer]


@pytest.fixture
def forge_compact():
    """
    Build a compact JWS from an arbitrary header dict.

    Lets tests put members in the header that ``JwsInner.sign`` never writes,
    e.g. ``crit``, ``x5c`` or ``x5t``. The result is correctly signed.
    """
    def _forge(signer, header, payload=b"payload"):
        hdr_b64 = b64url_encode(json.dumps(header).encode("utf-8"))
        payload_b64 = b64url_encode(payload)
        sign_input = f"{hdr_b64}.{payload_b64}".encode("ascii")
        signature = signer.sign_bytes(sign_input)
        return f"{hdr_b64}.{payload_b64}.{b64url_encode(signature)}"

    return _forge


def _name(common_name):
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])


@pytest.fixture
def make_certificate():
    """
    Issue a certificate for ``subject_key`` signed by ``issuer_key``.

    Omitting the issuer produces a self-signed certificate.
    """
    def _make(
        common_name,
        subject_key,
        issuer_name=None,
        issuer_key=None,
        not_before=None,
        not_after=None,
        ca=False,
    ):
        now = datetime.now(timezone.utc)
        builder = (
            x509.CertificateBuilder()
            .subject_name(_name(common_name))
            .issuer_name(_name(issuer_name or common_name))
            .public_key(subject_key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(not_before or now - timedelta(days=1))
            .not_valid_after(not_after or now + timedelta(days=30))
            .add_extension(
                x509.BasicConstraints(ca=ca, path_length=None), critical=True
            )
        )
        return builder.sign(issuer_key or subject_key, hashes.SHA256())

    return _make


@pytest.fixture
def x5c_chain(make_certificate):
    """
    A three-certificate ES256 chain: leaf, intermediate, self-signed root.

    Returns a dict with the chain (leaf first), the root and a signer holding
    the leaf key.
    """
    root_key = ec.generate_private_key(ec.SECP256R1())
    intermediate_key = ec.generate_private_key(ec.SECP256R1())
    leaf_key = ec.generate_private_key(ec.SECP256R1())

    root = make_certificate("Test Root", root_key, ca=True)
    intermediate = make_certificate(
        "Test Intermediate", intermediate_key, "Test Root", root_key, ca=True
    )
    leaf = make_certificate(
        "Test Leaf", leaf_key, "Test Intermediate", intermediate_key
    )

    return {
        "chain": [leaf, intermediate, root],
        "root": root,
        "root_key": root_key,
        "leaf_signer": Es256Signer(leaf_key),
    }
