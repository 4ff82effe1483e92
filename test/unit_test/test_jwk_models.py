"""
Unit tests for the JWK models and key sets.
"""
import json

import pytest
from pydantic import ValidationError

from jws_core import (
    EcCurve,
    EcJwk,
    Es256Validator,
    InvalidJwkFormatError,
    JwaAlg,
    JwkKeySet,
    JwkUse,
    Rs256Validator,
    RsaJwk,
    UnknownKidError,
    parse_jwk,
)

EC_JWK = {
    "kty": "EC",
    "crv": "P-256",
    "x": "f83OJ3D2xF1Bg8vub9tLe1gHMzV76e8Tus9uPHvRVEU",
    "y": "x_FEzRu9m36HLN_tue659LNpXW6pCyStikYjKIWI5a0",
    "kid": "ec-1",
}


class TestParseJwk:
    """Tests for parsing single JWK documents."""

    def test_parse_ec_from_dict(self):
        """Test an EC JWK dict parses into EcJwk with decoded coordinates."""
        jwk = parse_jwk(EC_JWK)

        assert isinstance(jwk, EcJwk)
        assert jwk.crv is EcCurve.P256
        assert len(jwk.x) == 32
        assert len(jwk.y) == 32
        assert jwk.kid == "ec-1"
        assert jwk.alg is None
        assert jwk.use_ is None

    def test_parse_rsa_from_json(self):
        """Test an RSA JWK parses from JSON text."""
        jwk = parse_jwk('{"kty":"RSA","n":"AQAB","e":"AQAB","alg":"RS256","use":"sig"}')

        assert isinstance(jwk, RsaJwk)
        assert jwk.n == b"\x01\x00\x01"
        assert jwk.e == b"\x01\x00\x01"
        assert jwk.alg is JwaAlg.RS256
        assert jwk.use_ is JwkUse.Sig

    def test_dict_round_trip_keeps_member_names(self):
        """Test serialization uses 'use' and omits unset members."""
        jwk = parse_jwk({**EC_JWK, "use": "sig"})

        assert jwk.to_dict() == {**EC_JWK, "use": "sig"}
        assert json.loads(jwk.to_json()) == {**EC_JWK, "use": "sig"}

    @pytest.mark.parametrize("member", ["d", "p", "q", "dp", "dq", "qi", "oth", "k"])
    def test_private_members_rejected(self, member):
        """Test a JWK carrying private key material never parses."""
        with pytest.raises(InvalidJwkFormatError):
            parse_jwk({**EC_JWK, member: "AAAA"})

    @pytest.mark.parametrize(
        "document",
        [
            {"kty": "oct", "k": "AAAA"},
            {"kty": "OKP", "crv": "Ed25519", "x": "AAAA"},
            {"x": "AAAA", "y": "AAAA"},
            {"kty": "EC", "crv": "P-384", "x": "AAAA", "y": "AAAA"},
            {"kty": "EC", "x": "AA==", "y": "AAAA"},
            {"kty": "EC", "x": EC_JWK["x"], "y": EC_JWK["y"]},
            {"kty": "RSA", "n": "AQAB"},
            {"kty": "EC", "x": "AAAA", "y": "AAAA", "use": "wrap"},
        ],
    )
    def test_invalid_documents_rejected(self, document):
        """Test unknown kty, missing members and bad encodings are refused."""
        with pytest.raises(InvalidJwkFormatError) as exc_info:
            parse_jwk(document)
        assert exc_info.value.error_code == "INVALID_JWK_FORMAT"

    def test_malformed_json_rejected(self):
        """Test non-JSON text is refused."""
        with pytest.raises(InvalidJwkFormatError):
            parse_jwk("{not json")

    def test_models_are_frozen(self):
        """Test JWKs cannot be mutated after construction."""
        jwk = parse_jwk(EC_JWK)
        with pytest.raises(ValidationError):
            jwk.kid = "other"


class TestJwkKeySet:
    """Tests for JWK-Set parsing and kid lookup."""

    def test_find_and_validator_for(self, es256_signer, rs256_signer):
        """Test keys are found by kid and turned into matching validators."""
        keyset = JwkKeySet(
            keys=[es256_signer.to_jwk("ec-key"), rs256_signer.to_jwk("rsa-key")]
        )

        assert keyset.find("ec-key").kid == "ec-key"
        assert keyset.find("missing") is None
        assert isinstance(keyset.validator_for("ec-key"), Es256Validator)
        assert isinstance(keyset.validator_for("rsa-key"), Rs256Validator)

    def test_unknown_kid(self, es256_signer):
        """Test lookup of an absent kid raises UnknownKidError."""
        keyset = JwkKeySet(keys=[es256_signer.to_jwk("ec-key")])

        with pytest.raises(UnknownKidError) as exc_info:
            keyset.validator_for("nope")
        assert exc_info.value.error_code == "UNKNOWN_KID"

    def test_json_round_trip(self, es256_signer, rs256_signer):
        """Test a serialized set parses back to the same keys."""
        keyset = JwkKeySet(
            keys=[es256_signer.to_jwk("ec-key"), rs256_signer.to_jwk("rsa-key")]
        )

        restored = JwkKeySet.from_json(keyset.to_json())

        assert [k.to_dict() for k in restored.keys] == [
            k.to_dict() for k in keyset.keys
        ]

    def test_set_with_private_key_rejected(self):
        """Test one private key poisons the whole set."""
        document = json.dumps({"keys": [EC_JWK, {**EC_JWK, "d": "AAAA"}]})

        with pytest.raises(InvalidJwkFormatError):
            JwkKeySet.from_json(document)

    def test_empty_set(self):
        """Test a set without keys parses and finds nothing."""
        keyset = JwkKeySet.from_json('{"keys":[]}')
        assert keyset.find("any") is None
