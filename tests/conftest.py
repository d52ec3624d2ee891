"""Pytest configuration and shared fixtures for token-signers tests."""

import os
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from cryptography.x509.oid import NameOID

from token_signers import (
    CryptographyBackend,
    KeyHandle,
    KeyMaterial,
    SignatureAlgorithm,
    VerifyOutcome,
)
from token_signers.registry import default_registry


def _private_pem(private_key, passphrase: Optional[bytes] = None) -> bytes:
    encryption = (
        serialization.BestAvailableEncryption(passphrase)
        if passphrase
        else serialization.NoEncryption()
    )
    return private_key.private_bytes(
        serialization.Encoding.PEM, serialization.PrivateFormat.PKCS8, encryption
    )


def _public_pem(private_key) -> bytes:
    return private_key.public_key().public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo
    )


def _openssh_public(private_key) -> bytes:
    return private_key.public_key().public_bytes(
        serialization.Encoding.OpenSSH, serialization.PublicFormat.OpenSSH
    )


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    """Generate a 2048-bit RSA key for testing."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_private(rsa_private_key) -> KeyMaterial:
    return KeyMaterial(_private_pem(rsa_private_key))


@pytest.fixture(scope="session")
def rsa_public(rsa_private_key) -> KeyMaterial:
    return KeyMaterial(_public_pem(rsa_private_key))


@pytest.fixture(scope="session")
def other_rsa_public() -> KeyMaterial:
    """Public half of an unrelated 2048-bit RSA key."""
    return KeyMaterial(_public_pem(rsa.generate_private_key(65537, 2048)))


@pytest.fixture(scope="session")
def encrypted_rsa_private(rsa_private_key) -> KeyMaterial:
    return KeyMaterial(_private_pem(rsa_private_key, b"correct horse"), b"correct horse")


@pytest.fixture(scope="session")
def short_rsa_private() -> KeyMaterial:
    """A 1024-bit RSA key, below the default minimum."""
    return KeyMaterial(_private_pem(rsa.generate_private_key(65537, 1024)))


@pytest.fixture(scope="session")
def rsa_certificate(rsa_private_key) -> KeyMaterial:
    """Self-signed certificate wrapping the RSA public key."""
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "token-signers test")])
    now = datetime.now(timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(rsa_private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=1))
        .sign(rsa_private_key, hashes.SHA256())
    )
    return KeyMaterial(certificate.public_bytes(serialization.Encoding.PEM))


@pytest.fixture(scope="session")
def ec_keys() -> dict[str, ec.EllipticCurvePrivateKey]:
    """Generate one EC key per supported curve."""
    return {
        "secp256r1": ec.generate_private_key(ec.SECP256R1()),
        "secp384r1": ec.generate_private_key(ec.SECP384R1()),
        "secp521r1": ec.generate_private_key(ec.SECP521R1()),
    }


@pytest.fixture(scope="session")
def ec_private(ec_keys) -> KeyMaterial:
    """P-256 private key."""
    return KeyMaterial(_private_pem(ec_keys["secp256r1"]))


@pytest.fixture(scope="session")
def ec_public(ec_keys) -> KeyMaterial:
    """P-256 public key."""
    return KeyMaterial(_public_pem(ec_keys["secp256r1"]))


@pytest.fixture(scope="session")
def ec_key_pairs(ec_keys) -> dict[str, tuple[KeyMaterial, KeyMaterial]]:
    """(private, public) key material per curve."""
    return {
        curve: (KeyMaterial(_private_pem(key)), KeyMaterial(_public_pem(key)))
        for curve, key in ec_keys.items()
    }


@pytest.fixture(scope="session")
def rsa_ssh_public(rsa_private_key) -> KeyMaterial:
    """The RSA public key as an OpenSSH "ssh-rsa AAAA..." line."""
    return KeyMaterial(_openssh_public(rsa_private_key))


@pytest.fixture(scope="session")
def openssh_keys(rsa_private_key, ec_keys) -> dict[str, KeyMaterial]:
    """Keys in the OpenSSH encodings, by name."""
    ed25519_key = ed25519.Ed25519PrivateKey.generate()
    return {
        "ssh-ed25519": KeyMaterial(_openssh_public(ed25519_key)),
        "ecdsa-sha2-nistp256": KeyMaterial(_openssh_public(ec_keys["secp256r1"])),
        "rsa-openssh-private": KeyMaterial(
            rsa_private_key.private_bytes(
                serialization.Encoding.PEM,
                serialization.PrivateFormat.OpenSSH,
                serialization.NoEncryption(),
            )
        ),
    }


@pytest.fixture
def hmac_secret() -> KeyMaterial:
    """A secret long enough for HS512."""
    return KeyMaterial(b"k" * 64)


class SpyBackend(CryptographyBackend):
    """Backend recording how often the primitives run."""

    def __init__(self) -> None:
        self.sign_calls = 0
        self.verify_calls = 0
        self.public_loads = 0

    def load_public_key(self, content: bytes, passphrase: Optional[bytes] = None) -> KeyHandle:
        self.public_loads += 1
        return super().load_public_key(content, passphrase)

    def sign(self, payload: bytes, handle: KeyHandle, algorithm: SignatureAlgorithm) -> bytes:
        self.sign_calls += 1
        return super().sign(payload, handle, algorithm)

    def verify(
        self,
        payload: bytes,
        signature: bytes,
        handle: KeyHandle,
        algorithm: SignatureAlgorithm,
    ) -> VerifyOutcome:
        self.verify_calls += 1
        return super().verify(payload, signature, handle, algorithm)


@pytest.fixture
def spy_backend() -> SpyBackend:
    return SpyBackend()


@pytest.fixture(autouse=True)
def reset_environment():
    """Reset environment variables and the cached registry for each test."""
    original_env = os.environ.copy()
    default_registry.cache_clear()
    yield
    os.environ.clear()
    os.environ.update(original_env)
    default_registry.cache_clear()


def pytest_configure(config):
    """Configure pytest with custom settings."""
    config.addinivalue_line(
        "markers", "requires_crypto: mark test as requiring cryptographic operations"
    )
