"""Cryptography backends providing the sign and verify primitives.

Signers never touch a crypto library directly. They go through the narrow
CryptoBackend protocol below, which CryptographyBackend implements on top of
the ``cryptography`` package.
"""

import logging
from enum import Enum
from functools import lru_cache
from typing import Any, Optional, Protocol

from cryptography import x509
from cryptography.exceptions import InternalError, InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, hmac, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa, utils

from .algorithms import CURVE_COORDINATE_SIZES, SignatureAlgorithm, SignatureScheme
from .keys import KeyFamily, KeyHandle, is_asymmetric_key, is_ssh_public_key

logger = logging.getLogger(__name__)

_HASHES = {
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
}

# Exceptions the cryptography package raises for unusable input or internal faults
_CRYPTO_ERRORS = (ValueError, TypeError, UnsupportedAlgorithm, InternalError)


class KeyLoadError(Exception):
    """Raised by a backend when key bytes cannot be turned into a handle."""


class BackendError(Exception):
    """Raised by a backend when a primitive fails."""


class VerifyOutcome(str, Enum):
    """Definite result of a verify primitive."""

    VALID = "valid"
    INVALID = "invalid"


class CryptoBackend(Protocol):
    """Protocol for the primitives a signer needs."""

    def load_private_key(self, content: bytes, passphrase: Optional[bytes]) -> KeyHandle:
        """Load a private key handle.

        Raises:
            KeyLoadError: If the content is not a usable private key
        """

    def load_public_key(self, content: bytes, passphrase: Optional[bytes] = None) -> KeyHandle:
        """Load a public key handle from a public key, certificate or private key.

        Raises:
            KeyLoadError: If no public key can be obtained from the content
        """

    def load_secret(self, content: bytes) -> KeyHandle:
        """Load a shared secret handle.

        Raises:
            KeyLoadError: If the content is PEM or OpenSSH key text that cannot be parsed
        """

    def describe_key(self, handle: KeyHandle) -> dict[str, Any]:
        """Report the family and parameters of a loaded key."""

    def infer_family(self, content: bytes, passphrase: Optional[bytes] = None) -> KeyFamily:
        """Best-effort family of raw key content, UNKNOWN when unparseable."""

    def sign(self, payload: bytes, handle: KeyHandle, algorithm: SignatureAlgorithm) -> bytes:
        """Sign a payload.

        Raises:
            BackendError: If the primitive fails
        """

    def verify(
        self,
        payload: bytes,
        signature: bytes,
        handle: KeyHandle,
        algorithm: SignatureAlgorithm,
    ) -> VerifyOutcome:
        """Verify a signature.

        Raises:
            BackendError: If the signature could not be checked
        """


def _to_handle(key: Any, is_private: bool) -> KeyHandle:
    """Tag a cryptography key object with its family."""
    if isinstance(key, (rsa.RSAPrivateKey, rsa.RSAPublicKey)):
        return KeyHandle(KeyFamily.RSA, key, key.key_size, is_private=is_private)
    if isinstance(key, (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey)):
        return KeyHandle(KeyFamily.EC, key, key.key_size, key.curve.name, is_private)
    return KeyHandle(KeyFamily.UNKNOWN, key, getattr(key, "key_size", 0), is_private=is_private)


def _load_private(content: bytes, passphrase: Optional[bytes]) -> Any:
    if b"OPENSSH PRIVATE KEY-----" in content:
        return serialization.load_ssh_private_key(content, password=passphrase or None)
    return serialization.load_pem_private_key(content, password=passphrase or None)


class CryptographyBackend:
    """CryptoBackend implementation using the ``cryptography`` package."""

    def load_private_key(self, content: bytes, passphrase: Optional[bytes]) -> KeyHandle:
        try:
            key = _load_private(content, passphrase)
        except _CRYPTO_ERRORS as e:
            raise KeyLoadError(str(e)) from e
        handle = _to_handle(key, is_private=True)
        logger.debug(
            "Loaded private key (family=%s, bits=%d)", handle.family.value, handle.key_size
        )
        return handle

    def load_public_key(self, content: bytes, passphrase: Optional[bytes] = None) -> KeyHandle:
        try:
            if is_ssh_public_key(content):
                key = serialization.load_ssh_public_key(content.strip())
            elif b"CERTIFICATE-----" in content:
                key = x509.load_pem_x509_certificate(content).public_key()
            elif b"PRIVATE KEY-----" in content:
                key = _load_private(content, passphrase).public_key()
            else:
                key = serialization.load_pem_public_key(content)
        except _CRYPTO_ERRORS as e:
            raise KeyLoadError(str(e)) from e
        handle = _to_handle(key, is_private=False)
        logger.debug(
            "Loaded public key (family=%s, bits=%d)", handle.family.value, handle.key_size
        )
        return handle

    def load_secret(self, content: bytes) -> KeyHandle:
        # PEM and OpenSSH content is an asymmetric key, whatever the caller intended
        if is_asymmetric_key(content):
            if b"PRIVATE KEY-----" in content:
                return self.load_private_key(content, None)
            return self.load_public_key(content)
        return KeyHandle(KeyFamily.HMAC_SECRET, content, len(content) * 8, is_private=True)

    def describe_key(self, handle: KeyHandle) -> dict[str, Any]:
        return handle.describe()

    def infer_family(self, content: bytes, passphrase: Optional[bytes] = None) -> KeyFamily:
        """Best-effort family of raw key content, UNKNOWN when unparseable."""
        if not is_asymmetric_key(content):
            return KeyFamily.HMAC_SECRET
        try:
            if b"PRIVATE KEY-----" in content:
                return self.load_private_key(content, passphrase).family
            return self.load_public_key(content).family
        except KeyLoadError:
            return KeyFamily.UNKNOWN

    def sign(self, payload: bytes, handle: KeyHandle, algorithm: SignatureAlgorithm) -> bytes:
        if not handle.is_private:
            raise BackendError("A private key is required to create a signature")

        hash_algorithm = _HASHES[algorithm.hash_name]()
        try:
            if algorithm.scheme is SignatureScheme.HMAC:
                mac = hmac.HMAC(handle.key, hash_algorithm)
                mac.update(payload)
                return mac.finalize()

            if algorithm.scheme is SignatureScheme.PKCS1V15:
                return handle.key.sign(payload, padding.PKCS1v15(), hash_algorithm)

            if algorithm.scheme is SignatureScheme.PSS:
                return handle.key.sign(payload, self._pss(hash_algorithm), hash_algorithm)

            # ECDSA: convert DER to the raw (r||s) form used in JWS
            signature_der = handle.key.sign(payload, ec.ECDSA(hash_algorithm))
            r, s = utils.decode_dss_signature(signature_der)
            size = CURVE_COORDINATE_SIZES[algorithm.curve]
            return r.to_bytes(size, byteorder="big") + s.to_bytes(size, byteorder="big")
        except _CRYPTO_ERRORS as e:
            raise BackendError(str(e) or type(e).__name__) from e

    def verify(
        self,
        payload: bytes,
        signature: bytes,
        handle: KeyHandle,
        algorithm: SignatureAlgorithm,
    ) -> VerifyOutcome:
        hash_algorithm = _HASHES[algorithm.hash_name]()
        try:
            if algorithm.scheme is SignatureScheme.HMAC:
                mac = hmac.HMAC(handle.key, hash_algorithm)
                mac.update(payload)
                mac.verify(signature)
                return VerifyOutcome.VALID

            public_key = handle.key.public_key() if handle.is_private else handle.key

            if algorithm.scheme is SignatureScheme.PKCS1V15:
                public_key.verify(signature, payload, padding.PKCS1v15(), hash_algorithm)
                return VerifyOutcome.VALID

            if algorithm.scheme is SignatureScheme.PSS:
                public_key.verify(signature, payload, self._pss(hash_algorithm), hash_algorithm)
                return VerifyOutcome.VALID

            # ECDSA: convert raw (r||s) signature to DER
            size = CURVE_COORDINATE_SIZES[algorithm.curve]
            if len(signature) != 2 * size:
                return VerifyOutcome.INVALID
            r = int.from_bytes(signature[:size], byteorder="big")
            s = int.from_bytes(signature[size:], byteorder="big")
            public_key.verify(utils.encode_dss_signature(r, s), payload, ec.ECDSA(hash_algorithm))
            return VerifyOutcome.VALID

        except InvalidSignature:
            return VerifyOutcome.INVALID
        except _CRYPTO_ERRORS as e:
            raise BackendError(str(e) or type(e).__name__) from e

    @staticmethod
    def _pss(hash_algorithm: hashes.HashAlgorithm) -> padding.PSS:
        # JWS fixes the PSS salt length to the digest length
        return padding.PSS(mgf=padding.MGF1(hash_algorithm), salt_length=padding.PSS.DIGEST_LENGTH)


@lru_cache(maxsize=None)
def get_backend() -> CryptographyBackend:
    """Return the process-wide default backend."""
    return CryptographyBackend()
