"""Key material and loaded key handles."""

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Union

from .errors import InvalidKeyProvided

if TYPE_CHECKING:
    from .backend import CryptoBackend

PEM_MARKER = b"-----BEGIN "

# Leading algorithm names of OpenSSH public key lines
SSH_PUBLIC_KEY_PREFIXES = (
    b"ssh-rsa ",
    b"ssh-dss ",
    b"ssh-ed25519 ",
    b"ecdsa-sha2-",
    b"sk-ecdsa-sha2-",
    b"sk-ssh-ed25519",
)


class KeyFamily(str, Enum):
    """Structural category of a key."""

    RSA = "RSA"
    EC = "EC"
    HMAC_SECRET = "HMAC_SECRET"
    UNKNOWN = "UNKNOWN"


def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def is_ssh_public_key(content: bytes) -> bool:
    return content.lstrip().startswith(SSH_PUBLIC_KEY_PREFIXES)


def is_asymmetric_key(content: bytes) -> bool:
    """Whether content is PEM or OpenSSH key text rather than a raw secret."""
    return PEM_MARKER in content or is_ssh_public_key(content)


@dataclass(frozen=True)
class KeyMaterial:
    """Key bytes as supplied by the caller.

    The content is either PEM text (public key, private key or certificate),
    an OpenSSH key, or a raw shared secret. It is never modified by a signer
    and can be reused across any number of sign/verify calls.

    Attributes:
        content: PEM or OpenSSH encoded key, or raw secret bytes
        passphrase: Passphrase for an encrypted private key, if any
    """

    content: bytes
    passphrase: Optional[bytes] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.content, bytes):
            object.__setattr__(self, "content", _to_bytes(self.content))
        if self.passphrase is not None and not isinstance(self.passphrase, bytes):
            object.__setattr__(self, "passphrase", _to_bytes(self.passphrase))
        if not self.content:
            raise InvalidKeyProvided.cannot_be_empty()

    def __repr__(self) -> str:
        kind = "asymmetric" if self.is_asymmetric else "secret"
        return f"KeyMaterial({kind}, {len(self.content)} bytes)"

    @classmethod
    def from_text(
        cls, text: Union[str, bytes], passphrase: Optional[Union[str, bytes]] = None
    ) -> "KeyMaterial":
        """Create key material from in-memory text or bytes."""
        return cls(_to_bytes(text), None if passphrase is None else _to_bytes(passphrase))

    @classmethod
    def from_file(
        cls, path: Union[str, Path], passphrase: Optional[Union[str, bytes]] = None
    ) -> "KeyMaterial":
        """Read key material from a file.

        Args:
            path: Path to a PEM file or a file holding a raw secret
            passphrase: Optional passphrase for an encrypted private key

        Raises:
            InvalidKeyProvided: If the file cannot be read or is empty
        """
        try:
            content = Path(path).read_bytes()
        except OSError as e:
            raise InvalidKeyProvided.cannot_be_parsed(str(e)) from e
        return cls.from_text(content, passphrase)

    @property
    def is_asymmetric(self) -> bool:
        return is_asymmetric_key(self.content)

    @cached_property
    def inferred_family(self) -> KeyFamily:
        """Family of the key according to the default backend, inferred on first access."""
        return self.infer_family()

    def infer_family(self, backend: Optional["CryptoBackend"] = None) -> KeyFamily:
        """Infer the family of the key with a specific backend.

        Args:
            backend: Backend used to parse the key (defaults to the shared one)
        """
        from .backend import get_backend

        return (backend or get_backend()).infer_family(self.content, self.passphrase)


@dataclass(frozen=True)
class KeyHandle:
    """A loaded key tagged with its family.

    Handles are produced by a backend's load step and only live for the
    duration of a single sign or verify call.
    """

    family: KeyFamily
    key: Any = field(repr=False)
    key_size: int
    curve: Optional[str] = None
    is_private: bool = False

    def describe(self) -> dict[str, Any]:
        """Return the family and parameters of the key."""
        return {
            "family": self.family,
            "key_size": self.key_size,
            "curve": self.curve,
            "is_private": self.is_private,
        }
