"""Supported signature algorithms.

Each algorithm is an immutable record pairing a signature scheme and hash
with the key family it requires. The set is closed: signers dispatch on the
record's data, never on subclasses.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .keys import KeyFamily


class SignatureScheme(str, Enum):
    """Primitive used to produce the signature."""

    HMAC = "HMAC"
    PKCS1V15 = "PKCS1v15"
    PSS = "PSS"
    ECDSA = "ECDSA"


# Byte length of one coordinate (and of r and s) for each supported curve
CURVE_COORDINATE_SIZES = {
    "secp256r1": 32,
    "secp384r1": 48,
    "secp521r1": 66,
}

DIGEST_SIZES = {
    "sha256": 32,
    "sha384": 48,
    "sha512": 64,
}


@dataclass(frozen=True)
class SignatureAlgorithm:
    """A signing algorithm as exposed in a token's ``alg`` header.

    Attributes:
        algorithm_id: JWS identifier, e.g. "RS256"
        key_family: Family every key used with this algorithm must have
        hash_name: Hash function fed to the primitive (sha256, sha384, sha512)
        scheme: Signature primitive
        curve: Required curve for ECDSA algorithms
        min_key_bits: Shortest acceptable key (RSA modulus or HMAC secret)
    """

    algorithm_id: str
    key_family: KeyFamily
    hash_name: str
    scheme: SignatureScheme
    curve: Optional[str] = None
    min_key_bits: int = 0

    def __post_init__(self) -> None:
        if self.hash_name not in DIGEST_SIZES:
            raise ValueError(f"Unsupported hash algorithm: {self.hash_name}")
        if (self.scheme is SignatureScheme.ECDSA) != (self.curve is not None):
            raise ValueError(f"{self.algorithm_id}: a curve is required for ECDSA only")

    @property
    def digest_size(self) -> int:
        return DIGEST_SIZES[self.hash_name]

    @property
    def signature_size(self) -> Optional[int]:
        """Fixed signature length in bytes, when the algorithm has one."""
        if self.scheme is SignatureScheme.HMAC:
            return self.digest_size
        if self.scheme is SignatureScheme.ECDSA:
            return 2 * CURVE_COORDINATE_SIZES[self.curve]
        return None  # RSA signatures follow the modulus length

    def __str__(self) -> str:
        return self.algorithm_id


def _hmac(algorithm_id: str, hash_name: str) -> SignatureAlgorithm:
    return SignatureAlgorithm(
        algorithm_id,
        KeyFamily.HMAC_SECRET,
        hash_name,
        SignatureScheme.HMAC,
        min_key_bits=DIGEST_SIZES[hash_name] * 8,
    )


def _rsa(algorithm_id: str, hash_name: str, scheme: SignatureScheme) -> SignatureAlgorithm:
    return SignatureAlgorithm(algorithm_id, KeyFamily.RSA, hash_name, scheme, min_key_bits=2048)


def _ecdsa(algorithm_id: str, hash_name: str, curve: str) -> SignatureAlgorithm:
    return SignatureAlgorithm(
        algorithm_id, KeyFamily.EC, hash_name, SignatureScheme.ECDSA, curve=curve
    )


HS256 = _hmac("HS256", "sha256")
HS384 = _hmac("HS384", "sha384")
HS512 = _hmac("HS512", "sha512")

RS256 = _rsa("RS256", "sha256", SignatureScheme.PKCS1V15)
RS384 = _rsa("RS384", "sha384", SignatureScheme.PKCS1V15)
RS512 = _rsa("RS512", "sha512", SignatureScheme.PKCS1V15)

PS256 = _rsa("PS256", "sha256", SignatureScheme.PSS)
PS384 = _rsa("PS384", "sha384", SignatureScheme.PSS)
PS512 = _rsa("PS512", "sha512", SignatureScheme.PSS)

ES256 = _ecdsa("ES256", "sha256", "secp256r1")
ES384 = _ecdsa("ES384", "sha384", "secp384r1")
ES512 = _ecdsa("ES512", "sha512", "secp521r1")

SUPPORTED_ALGORITHMS: tuple[SignatureAlgorithm, ...] = (
    HS256,
    HS384,
    HS512,
    RS256,
    RS384,
    RS512,
    PS256,
    PS384,
    PS512,
    ES256,
    ES384,
    ES512,
)
