"""Exceptions raised by signers, the key validator and the registry.

Every error derives from SignerError so a token library can catch the whole
family at once, while the concrete classes keep the kinds apart:

- InvalidKeyProvided: the key could not be loaded, or does not fit the algorithm
- CannotSignPayload: the signing primitive failed for a valid key
- VerificationFailed: the verify primitive errored (not a signature mismatch)
- UnsupportedAlgorithm: no signer is registered for an algorithm identifier
"""

from enum import Enum
from typing import Optional


class SignerError(Exception):
    """Base class for all token signer errors."""


class InvalidKeyReason(str, Enum):
    """Why a key was refused."""

    CANNOT_BE_PARSED = "cannot_be_parsed"
    INCOMPATIBLE_KEY = "incompatible_key"
    CANNOT_BE_EMPTY = "cannot_be_empty"
    TOO_SHORT = "too_short"


class InvalidKeyProvided(SignerError, ValueError):
    """Raised when key material is unusable for the requested algorithm."""

    def __init__(self, message: str, reason: InvalidKeyReason):
        super().__init__(message)
        self.reason = reason

    @classmethod
    def cannot_be_parsed(cls, diagnostic: str) -> "InvalidKeyProvided":
        """The backend could not load the key bytes into a usable handle.

        Args:
            diagnostic: Error string reported by the cryptography backend

        Returns:
            The exception instance
        """
        return cls(
            f"It was not possible to parse your key, reason: {diagnostic}",
            InvalidKeyReason.CANNOT_BE_PARSED,
        )

    @classmethod
    def incompatible_key(
        cls, expected: Optional[str] = None, actual: Optional[str] = None
    ) -> "InvalidKeyProvided":
        """The key loaded fine but belongs to the wrong family or curve."""
        message = "This key is not compatible with this signer"
        if expected is not None:
            message += f" (expected {expected}, got {actual or 'unknown'})"
        return cls(message, InvalidKeyReason.INCOMPATIBLE_KEY)

    @classmethod
    def cannot_be_empty(cls) -> "InvalidKeyProvided":
        return cls("Key cannot be empty", InvalidKeyReason.CANNOT_BE_EMPTY)

    @classmethod
    def too_short(cls, expected_bits: int, actual_bits: int) -> "InvalidKeyProvided":
        """The key is shorter than the algorithm's minimum length."""
        return cls(
            f"Key provided is shorter than {expected_bits} bits, only {actual_bits} bits provided",
            InvalidKeyReason.TOO_SHORT,
        )


class CannotSignPayload(SignerError):
    """Raised when the signing primitive fails for a loaded, compatible key."""

    @classmethod
    def error_happened(cls, diagnostic: str) -> "CannotSignPayload":
        return cls(f"There was an error while creating the signature: {diagnostic}")


class VerificationFailed(SignerError):
    """Raised when a signature could not be checked at all.

    A signature that simply does not match is not an error; Signer.verify
    returns False for it.
    """

    @classmethod
    def error_happened(cls, diagnostic: str) -> "VerificationFailed":
        return cls(f"There was an error while verifying the signature: {diagnostic}")


class UnsupportedAlgorithm(SignerError, KeyError):
    """Raised when an algorithm identifier has no registered signer."""

    def __init__(self, algorithm_id: str):
        super().__init__(algorithm_id)
        self.algorithm_id = algorithm_id

    def __str__(self) -> str:
        return f"Unsupported signing algorithm: {self.algorithm_id!r}"


class InsecureKeyLengthWarning(UserWarning):
    """Emitted when an HMAC secret is shorter than the digest it feeds."""
