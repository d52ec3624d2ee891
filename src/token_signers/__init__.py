"""token-signers: pluggable signature algorithms for token libraries."""

# Hide module imports
from . import algorithms, backend, config, errors, keys, registry, signers, thumbprint, validation
from .algorithms import (
    ES256,
    ES384,
    ES512,
    HS256,
    HS384,
    HS512,
    PS256,
    PS384,
    PS512,
    RS256,
    RS384,
    RS512,
    SUPPORTED_ALGORITHMS,
    SignatureAlgorithm,
    SignatureScheme,
)
from .backend import (
    BackendError,
    CryptoBackend,
    CryptographyBackend,
    KeyLoadError,
    VerifyOutcome,
    get_backend,
)
from .config import Settings
from .errors import (
    CannotSignPayload,
    InsecureKeyLengthWarning,
    InvalidKeyProvided,
    InvalidKeyReason,
    SignerError,
    UnsupportedAlgorithm,
    VerificationFailed,
)
from .keys import KeyFamily, KeyHandle, KeyMaterial
from .registry import SignerRegistry, default_registry
from .signers import Signer
from .thumbprint import key_thumbprint, thumbprint_uri
from .validation import KeyTypeValidator

del algorithms, backend, config, errors, keys, registry, signers, thumbprint, validation

__version__ = "0.1.0"


__all__ = [
    "__version__",
    # Key material
    "KeyFamily",
    "KeyHandle",
    "KeyMaterial",
    # Algorithms
    "SignatureAlgorithm",
    "SignatureScheme",
    "SUPPORTED_ALGORITHMS",
    "HS256",
    "HS384",
    "HS512",
    "RS256",
    "RS384",
    "RS512",
    "PS256",
    "PS384",
    "PS512",
    "ES256",
    "ES384",
    "ES512",
    # Signing
    "Signer",
    "KeyTypeValidator",
    "SignerRegistry",
    "default_registry",
    # Backends
    "CryptoBackend",
    "CryptographyBackend",
    "VerifyOutcome",
    "KeyLoadError",
    "BackendError",
    "get_backend",
    # Configuration
    "Settings",
    # Thumbprints
    "key_thumbprint",
    "thumbprint_uri",
    # Errors
    "SignerError",
    "InvalidKeyProvided",
    "InvalidKeyReason",
    "CannotSignPayload",
    "VerificationFailed",
    "UnsupportedAlgorithm",
    "InsecureKeyLengthWarning",
]
