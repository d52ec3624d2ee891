"""COSE Key Thumbprints (RFC 9679) for key material.

A thumbprint identifies the public half of a key independently of how it was
encoded, which makes it a convenient ``kid`` for tokens signed through a
registry.
"""

import base64
import hashlib
from typing import Any, Optional

from . import cbor_utils
from .algorithms import CURVE_COORDINATE_SIZES
from .backend import CryptoBackend, KeyLoadError, get_backend
from .errors import InvalidKeyProvided
from .keys import KeyFamily, KeyHandle, KeyMaterial

COSE_KTY_EC2 = 2
COSE_KTY_RSA = 3

COSE_CURVES = {
    "secp256r1": 1,  # P-256
    "secp384r1": 2,  # P-384
    "secp521r1": 3,  # P-521
}

# Required members for each key type according to RFC 9679
REQUIRED_MEMBERS = {
    COSE_KTY_EC2: [1, -1, -2, -3],  # kty, crv, x, y
    COSE_KTY_RSA: [1, -1, -2],  # kty, n, e
}


def _int_to_bytes(value: int, length: int = 0) -> bytes:
    return value.to_bytes(length or (value.bit_length() + 7) // 8, byteorder="big")


def cose_key_from_handle(handle: KeyHandle) -> dict[int, Any]:
    """Convert the public part of a loaded key to a COSE key dictionary.

    Raises:
        InvalidKeyProvided: If the key is not an RSA or supported EC key
    """
    if handle.family is KeyFamily.RSA:
        public_key = handle.key.public_key() if handle.is_private else handle.key
        numbers = public_key.public_numbers()
        return {
            1: COSE_KTY_RSA,
            -1: _int_to_bytes(numbers.n),  # n
            -2: _int_to_bytes(numbers.e),  # e
        }

    if handle.family is KeyFamily.EC and handle.curve in COSE_CURVES:
        public_key = handle.key.public_key() if handle.is_private else handle.key
        numbers = public_key.public_numbers()
        size = CURVE_COORDINATE_SIZES[handle.curve]
        return {
            1: COSE_KTY_EC2,
            -1: COSE_CURVES[handle.curve],
            -2: _int_to_bytes(numbers.x, size),
            -3: _int_to_bytes(numbers.y, size),
        }

    raise InvalidKeyProvided.incompatible_key("RSA or EC", handle.curve or handle.family.value)


def canonical_cbor(cose_key: dict[int, Any]) -> bytes:
    """Create canonical CBOR representation of COSE key for thumbprint.

    Args:
        cose_key: COSE key as a dictionary with integer labels

    Returns:
        Canonical CBOR encoding of the key

    Raises:
        ValueError: If key type is unsupported or required fields are missing
    """
    kty = cose_key.get(1)
    if kty not in REQUIRED_MEMBERS:
        raise ValueError(f"Unsupported key type: {kty}")

    filtered_key = {}
    for label in REQUIRED_MEMBERS[kty]:
        if label not in cose_key:
            raise ValueError(f"Required field {label} missing from COSE key")
        filtered_key[label] = cose_key[label]

    return cbor_utils.encode(dict(sorted(filtered_key.items())), canonical=True)


def key_thumbprint(
    key: KeyMaterial, hash_name: str = "sha256", backend: Optional[CryptoBackend] = None
) -> bytes:
    """Compute the COSE Key Thumbprint of an RSA or EC key.

    Args:
        key: Public key, certificate or private key material
        hash_name: Hash algorithm to use (sha256, sha384, sha512)
        backend: Backend used to load the key (defaults to the shared one)

    Returns:
        Thumbprint as bytes

    Raises:
        InvalidKeyProvided: If the key cannot be parsed or is a shared secret
        ValueError: If hash algorithm is unsupported
    """
    if hash_name not in ("sha256", "sha384", "sha512"):
        raise ValueError(f"Unsupported hash algorithm: {hash_name}")

    if not key.is_asymmetric:
        raise InvalidKeyProvided.incompatible_key("RSA or EC", KeyFamily.HMAC_SECRET.value)

    try:
        handle = (backend or get_backend()).load_public_key(key.content, key.passphrase)
    except KeyLoadError as e:
        raise InvalidKeyProvided.cannot_be_parsed(str(e)) from e

    canonical = canonical_cbor(cose_key_from_handle(handle))
    return hashlib.new(hash_name, canonical).digest()


def thumbprint_uri(
    key: KeyMaterial, hash_name: str = "sha256", backend: Optional[CryptoBackend] = None
) -> str:
    """Compute the COSE Key Thumbprint URI of a key.

    Returns:
        Thumbprint URI as defined in RFC 9679
    """
    thumbprint = key_thumbprint(key, hash_name, backend)
    b64url = base64.urlsafe_b64encode(thumbprint).rstrip(b"=").decode("ascii")
    return f"urn:ietf:params:oauth:ckt:{hash_name}:{b64url}"
