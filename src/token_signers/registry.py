"""Registry resolving algorithm identifiers to signers.

The registry is built once from a closed set of algorithms and is read-only
afterwards, so a token library can resolve the ``alg`` header of any token
without locking.
"""

import logging
from collections.abc import Iterable, Iterator
from functools import lru_cache
from types import MappingProxyType
from typing import Optional

from .algorithms import SUPPORTED_ALGORITHMS, SignatureAlgorithm
from .backend import CryptoBackend
from .config import Settings
from .errors import UnsupportedAlgorithm
from .signers import Signer
from .validation import KeyTypeValidator

logger = logging.getLogger(__name__)


class SignerRegistry:
    """Immutable mapping of algorithm identifier to Signer."""

    __slots__ = ("_signers",)

    def __init__(self, signers: Iterable[Signer]):
        """Initialize the registry.

        Args:
            signers: Signers to register, one per algorithm identifier

        Raises:
            ValueError: If two signers share an algorithm identifier
        """
        by_id: dict[str, Signer] = {}
        for signer in signers:
            if signer.algorithm_id in by_id:
                raise ValueError(f"Duplicate algorithm identifier: {signer.algorithm_id}")
            by_id[signer.algorithm_id] = signer
        self._signers = MappingProxyType(by_id)
        logger.debug("Signer registry built with %s", ", ".join(by_id) or "no algorithms")

    @classmethod
    def from_algorithms(
        cls,
        algorithms: Iterable[SignatureAlgorithm] = SUPPORTED_ALGORITHMS,
        backend: Optional[CryptoBackend] = None,
        validator: Optional[KeyTypeValidator] = None,
    ) -> "SignerRegistry":
        """Create a registry with one signer per algorithm."""
        return cls(Signer(algorithm, backend, validator) for algorithm in algorithms)

    @classmethod
    def from_settings(
        cls, settings: Settings, backend: Optional[CryptoBackend] = None
    ) -> "SignerRegistry":
        """Create a registry honouring the enabled algorithms and key policy of settings."""
        validator = KeyTypeValidator(
            rsa_min_key_bits=settings.rsa_min_key_bits,
            enforce_hmac_key_length=settings.enforce_hmac_key_length,
        )
        algorithms = SUPPORTED_ALGORITHMS
        if settings.enabled_algorithms is not None:
            enabled = set(settings.enabled_algorithms)
            algorithms = tuple(a for a in SUPPORTED_ALGORITHMS if a.algorithm_id in enabled)
        return cls.from_algorithms(algorithms, backend, validator)

    def resolve(self, algorithm_id: str) -> Signer:
        """Resolve a signer by algorithm identifier.

        Args:
            algorithm_id: JWS algorithm identifier, e.g. "RS256"

        Returns:
            The registered signer

        Raises:
            UnsupportedAlgorithm: If no signer is registered for the identifier
        """
        try:
            return self._signers[algorithm_id]
        except KeyError:
            raise UnsupportedAlgorithm(algorithm_id) from None

    @property
    def algorithm_ids(self) -> tuple[str, ...]:
        return tuple(self._signers)

    def __contains__(self, algorithm_id: object) -> bool:
        return algorithm_id in self._signers

    def __iter__(self) -> Iterator[Signer]:
        return iter(self._signers.values())

    def __len__(self) -> int:
        return len(self._signers)

    def __repr__(self) -> str:
        return f"SignerRegistry({', '.join(self._signers)})"


@lru_cache(maxsize=None)
def default_registry() -> SignerRegistry:
    """Return the process-wide registry built from environment settings."""
    return SignerRegistry.from_settings(Settings())
