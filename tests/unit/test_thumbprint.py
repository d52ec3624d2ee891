"""Tests for COSE Key Thumbprints of key material."""

import cbor2
import pytest

from token_signers import InvalidKeyProvided, InvalidKeyReason, KeyMaterial, get_backend
from token_signers.thumbprint import (
    canonical_cbor,
    cose_key_from_handle,
    key_thumbprint,
    thumbprint_uri,
)

pytestmark = [pytest.mark.unit, pytest.mark.requires_crypto]


class TestKeyThumbprint:
    """RFC 9679 thumbprints of RSA and EC keys."""

    def test_private_and_public_halves_match(
        self, rsa_private: KeyMaterial, rsa_public: KeyMaterial, rsa_certificate: KeyMaterial
    ) -> None:
        thumbprint = key_thumbprint(rsa_public)

        assert len(thumbprint) == 32
        assert key_thumbprint(rsa_private) == thumbprint
        assert key_thumbprint(rsa_certificate) == thumbprint

    def test_different_keys_differ(
        self, rsa_public: KeyMaterial, other_rsa_public: KeyMaterial, ec_public: KeyMaterial
    ) -> None:
        assert len({key_thumbprint(k) for k in (rsa_public, other_rsa_public, ec_public)}) == 3

    @pytest.mark.parametrize("hash_name, size", [("sha256", 32), ("sha384", 48), ("sha512", 64)])
    def test_hash_algorithms(self, ec_public: KeyMaterial, hash_name: str, size: int) -> None:
        assert len(key_thumbprint(ec_public, hash_name)) == size

    def test_unsupported_hash(self, ec_public: KeyMaterial) -> None:
        with pytest.raises(ValueError, match="Unsupported hash algorithm"):
            key_thumbprint(ec_public, "md5")

    def test_secret_has_no_thumbprint(self) -> None:
        with pytest.raises(InvalidKeyProvided) as exc_info:
            key_thumbprint(KeyMaterial(b"secret"))

        assert exc_info.value.reason is InvalidKeyReason.INCOMPATIBLE_KEY

    def test_unparseable_pem(self) -> None:
        key = KeyMaterial(b"-----BEGIN PUBLIC KEY-----\nAAAA\n-----END PUBLIC KEY-----\n")

        with pytest.raises(InvalidKeyProvided) as exc_info:
            key_thumbprint(key)

        assert exc_info.value.reason is InvalidKeyReason.CANNOT_BE_PARSED

    def test_uri(self, ec_public: KeyMaterial) -> None:
        uri = thumbprint_uri(ec_public)

        assert uri.startswith("urn:ietf:params:oauth:ckt:sha256:")
        assert "=" not in uri

    def test_openssh_public_key(self, rsa_public: KeyMaterial, rsa_ssh_public: KeyMaterial) -> None:
        assert key_thumbprint(rsa_ssh_public) == key_thumbprint(rsa_public)

    def test_uses_given_backend(self, spy_backend, ec_public: KeyMaterial) -> None:
        uri = thumbprint_uri(ec_public, backend=spy_backend)

        assert uri == thumbprint_uri(ec_public)
        assert spy_backend.public_loads == 1


class TestCoseKeyConversion:
    def test_ec_key_members(self, ec_key_pairs) -> None:
        _, public = ec_key_pairs["secp521r1"]
        handle = get_backend().load_public_key(public.content)

        cose_key = cose_key_from_handle(handle)

        assert cose_key[1] == 2, "Should be EC2 key type"
        assert cose_key[-1] == 3, "Should be P-521 curve"
        assert len(cose_key[-2]) == 66, "X coordinate should be 66 bytes"
        assert len(cose_key[-3]) == 66, "Y coordinate should be 66 bytes"

    def test_rsa_key_members(self, rsa_public: KeyMaterial) -> None:
        handle = get_backend().load_public_key(rsa_public.content)

        cose_key = cose_key_from_handle(handle)

        assert cose_key[1] == 3, "Should be RSA key type"
        assert len(cose_key[-1]) == 256, "Modulus should be 256 bytes"
        assert cose_key[-2] == (65537).to_bytes(3, "big")

    def test_canonical_cbor_keeps_required_members(self) -> None:
        cose_key = {-3: b"y", 1: 2, -2: b"x", -1: 1, 2: b"kid", 3: -7}

        decoded = cbor2.loads(canonical_cbor(cose_key))

        assert decoded == {1: 2, -1: 1, -2: b"x", -3: b"y"}

    def test_canonical_cbor_missing_member(self) -> None:
        with pytest.raises(ValueError, match="Required field -3 missing"):
            canonical_cbor({1: 2, -1: 1, -2: b"x"})

    def test_canonical_cbor_unsupported_type(self) -> None:
        with pytest.raises(ValueError, match="Unsupported key type: 4"):
            canonical_cbor({1: 4, -1: b"k"})
