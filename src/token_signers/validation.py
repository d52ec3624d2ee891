"""Key type validation run before every sign and verify call."""

import logging
import warnings
from typing import Optional, Union

from .algorithms import SignatureAlgorithm, SignatureScheme
from .backend import KeyLoadError
from .errors import InsecureKeyLengthWarning, InvalidKeyProvided
from .keys import KeyFamily, KeyHandle

logger = logging.getLogger(__name__)


class KeyTypeValidator:
    """Checks that a loaded key fits an algorithm.

    The checks, in order:
    - the load step produced a handle (otherwise cannot_be_parsed)
    - the handle's family matches the algorithm (otherwise incompatible_key)
    - EC keys use the algorithm's curve (otherwise incompatible_key)
    - the key is long enough (RSA raises too_short, HMAC warns unless enforced)
    """

    def __init__(
        self, rsa_min_key_bits: Optional[int] = None, enforce_hmac_key_length: bool = False
    ):
        """Initialize the validator with a key length policy.

        Args:
            rsa_min_key_bits: Smallest accepted RSA modulus; None keeps the
                              algorithm's own minimum
            enforce_hmac_key_length: Raise instead of warning for short HMAC secrets
        """
        self.rsa_min_key_bits = rsa_min_key_bits
        self.enforce_hmac_key_length = enforce_hmac_key_length

    def validate(
        self, loaded: Union[KeyHandle, KeyLoadError], algorithm: SignatureAlgorithm
    ) -> KeyHandle:
        """Validate the outcome of a load step against an algorithm.

        Args:
            loaded: Handle returned by the backend, or the error it raised
            algorithm: Algorithm the key is about to be used with

        Returns:
            The validated handle

        Raises:
            InvalidKeyProvided: If the key cannot be used with the algorithm
        """
        if isinstance(loaded, KeyLoadError):
            logger.warning("Rejected key for %s: cannot be parsed", algorithm.algorithm_id)
            raise InvalidKeyProvided.cannot_be_parsed(str(loaded)) from loaded

        if loaded.family != algorithm.key_family:
            logger.warning(
                "Rejected key for %s: family %s is not %s",
                algorithm.algorithm_id,
                loaded.family.value,
                algorithm.key_family.value,
            )
            raise InvalidKeyProvided.incompatible_key(
                algorithm.key_family.value, loaded.family.value
            )

        if algorithm.scheme is SignatureScheme.ECDSA and loaded.curve != algorithm.curve:
            logger.warning(
                "Rejected key for %s: curve %s is not %s",
                algorithm.algorithm_id,
                loaded.curve,
                algorithm.curve,
            )
            raise InvalidKeyProvided.incompatible_key(algorithm.curve, loaded.curve)

        self._check_length(loaded, algorithm)
        return loaded

    def _check_length(self, handle: KeyHandle, algorithm: SignatureAlgorithm) -> None:
        if handle.family is KeyFamily.RSA:
            minimum = self.rsa_min_key_bits or algorithm.min_key_bits
            if handle.key_size < minimum:
                raise InvalidKeyProvided.too_short(minimum, handle.key_size)

        elif handle.family is KeyFamily.HMAC_SECRET and handle.key_size < algorithm.min_key_bits:
            if self.enforce_hmac_key_length:
                raise InvalidKeyProvided.too_short(algorithm.min_key_bits, handle.key_size)
            warnings.warn(
                f"The HMAC secret is {handle.key_size} bits long, which is below the "
                f"recommended {algorithm.min_key_bits} bits for {algorithm.algorithm_id}",
                InsecureKeyLengthWarning,
                stacklevel=5,
            )
