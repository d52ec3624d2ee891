"""Signer policy settings read from the environment."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .algorithms import SUPPORTED_ALGORITHMS


class Settings(BaseSettings):
    """Key policy and algorithm selection.

    Values come from ``TOKEN_SIGNERS_*`` environment variables, falling back
    to the defaults below.
    """

    model_config = SettingsConfigDict(
        env_prefix="TOKEN_SIGNERS_",
        case_sensitive=False,
        extra="ignore",
    )

    enabled_algorithms: Optional[list[str]] = Field(
        default=None,
        description="Algorithm identifiers to register (defaults to every supported algorithm)",
    )

    enforce_hmac_key_length: bool = Field(
        default=False,
        description="Reject HMAC secrets shorter than the digest instead of warning",
    )

    rsa_min_key_bits: int = Field(
        default=2048,
        ge=1024,
        description="Smallest RSA modulus accepted for RS* and PS* algorithms",
    )

    @field_validator("enabled_algorithms")
    @classmethod
    def validate_enabled_algorithms(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is None:
            return v
        known = {algorithm.algorithm_id for algorithm in SUPPORTED_ALGORITHMS}
        unknown = [algorithm_id for algorithm_id in v if algorithm_id not in known]
        if unknown:
            raise ValueError(f"Unknown algorithms: {', '.join(unknown)}")
        return v
