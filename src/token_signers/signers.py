"""Signers binding one algorithm to the cryptography backend.

A Signer is the uniform interface a token library talks to:
- sign(payload, key) returns signature bytes
- verify(expected_signature, payload, key) returns True or False

Both validate the key against the algorithm before any primitive runs.
"""

import logging
from typing import Optional, Union

from .algorithms import SignatureAlgorithm
from .backend import BackendError, CryptoBackend, KeyLoadError, VerifyOutcome, get_backend
from .errors import CannotSignPayload, VerificationFailed
from .keys import KeyFamily, KeyHandle, KeyMaterial
from .validation import KeyTypeValidator

logger = logging.getLogger(__name__)


class Signer:
    """Signs and verifies payloads with a single algorithm.

    Signers hold no mutable state and can be shared between threads.
    """

    __slots__ = ("_algorithm", "_backend", "_validator")

    def __init__(
        self,
        algorithm: SignatureAlgorithm,
        backend: Optional[CryptoBackend] = None,
        validator: Optional[KeyTypeValidator] = None,
    ):
        """Initialize a signer.

        Args:
            algorithm: The algorithm this signer implements
            backend: Cryptography backend (defaults to the ``cryptography`` one)
            validator: Key validator (defaults to the algorithm's own key policy)
        """
        self._algorithm = algorithm
        self._backend = backend or get_backend()
        self._validator = validator or KeyTypeValidator()

    @property
    def algorithm(self) -> SignatureAlgorithm:
        return self._algorithm

    @property
    def algorithm_id(self) -> str:
        """Get the JWS algorithm identifier, e.g. "RS256"."""
        return self._algorithm.algorithm_id

    def sign(self, payload: bytes, key: KeyMaterial) -> bytes:
        """Sign a payload.

        Args:
            payload: The bytes to sign
            key: Private key (or shared secret for HMAC algorithms)

        Returns:
            The signature bytes

        Raises:
            InvalidKeyProvided: If the key cannot be parsed or does not fit the algorithm
            CannotSignPayload: If the signing primitive fails
        """
        handle = self._load(key, private=True)
        logger.debug("Signing %d bytes with %s", len(payload), self.algorithm_id)

        try:
            signature = self._backend.sign(payload, handle, self._algorithm)
        except BackendError as e:
            logger.warning("Signing with %s failed: %s", self.algorithm_id, e)
            raise CannotSignPayload.error_happened(str(e)) from e

        if not signature:
            raise CannotSignPayload.error_happened("the backend returned an empty signature")
        return signature

    def verify(self, expected_signature: bytes, payload: bytes, key: KeyMaterial) -> bool:
        """Verify a signature over a payload.

        Args:
            expected_signature: Signature to check
            payload: The bytes that were signed
            key: Public key, certificate, private key or shared secret

        Returns:
            True if the signature matches, False otherwise

        Raises:
            InvalidKeyProvided: If the key cannot be parsed or does not fit the algorithm
            VerificationFailed: If the signature could not be checked at all
        """
        handle = self._load(key, private=False)
        logger.debug("Verifying %d bytes with %s", len(payload), self.algorithm_id)

        try:
            outcome = self._backend.verify(payload, expected_signature, handle, self._algorithm)
        except BackendError as e:
            logger.warning("Verification with %s failed: %s", self.algorithm_id, e)
            raise VerificationFailed.error_happened(str(e)) from e

        return outcome is VerifyOutcome.VALID

    def _load(self, key: KeyMaterial, private: bool) -> KeyHandle:
        loaded: Union[KeyHandle, KeyLoadError]
        try:
            if self._algorithm.key_family is KeyFamily.HMAC_SECRET:
                loaded = self._backend.load_secret(key.content)
            elif private:
                loaded = self._backend.load_private_key(key.content, key.passphrase)
            else:
                loaded = self._backend.load_public_key(key.content, key.passphrase)
        except KeyLoadError as e:
            loaded = e
        return self._validator.validate(loaded, self._algorithm)

    def __repr__(self) -> str:
        return f"Signer({self.algorithm_id})"
