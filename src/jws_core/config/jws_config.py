"""
Settings for key generation and message defaults.

Settings are only read when a caller asks for them; the signing and validation
code never touches the environment or the filesystem on its own.
"""
import os
from functools import lru_cache
from typing import Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

RSA_MIN_KEY_BITS = 3072
HMAC_MIN_KEY_BYTES = 32


class JWSConfig(BaseSettings):
    """
    JWS settings, read from ``JWS_*`` environment variables or a ``.env`` file.
    """
    rsa_key_bits: int = Field(
        default=RSA_MIN_KEY_BITS,
        description="Modulus size for newly generated RS256 keys",
    )
    hmac_key_bytes: int = Field(
        default=HMAC_MIN_KEY_BYTES,
        description="Secret size for newly generated HS256 keys",
    )
    default_typ: Optional[str] = Field(
        default=None,
        description="typ header applied by JwsInner.from_config",
    )

    model_config = SettingsConfigDict(
        env_prefix="JWS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("rsa_key_bits")
    @classmethod
    def validate_rsa_key_bits(cls, v: int) -> int:
        """Refuse to mint RSA keys below the minimum size."""
        if v < RSA_MIN_KEY_BITS:
            raise ValueError(f"rsa_key_bits must be at least {RSA_MIN_KEY_BITS}")
        return v

    @field_validator("hmac_key_bytes")
    @classmethod
    def validate_hmac_key_bytes(cls, v: int) -> int:
        """Refuse HMAC secrets shorter than the SHA-256 output."""
        if v < HMAC_MIN_KEY_BYTES:
            raise ValueError(f"hmac_key_bytes must be at least {HMAC_MIN_KEY_BYTES}")
        return v

    @classmethod
    def from_yaml(cls, config_path: Optional[str] = None) -> "JWSConfig":
        """
        Load settings from a YAML file.

        Args:
            config_path: Path to the YAML file. If None, uses the
                JWS_CONFIG_PATH env var or defaults to ./jws.yaml

        Returns:
            JWSConfig instance; environment defaults if the file is missing
        """
        if config_path is None:
            config_path = os.getenv("JWS_CONFIG_PATH", "jws.yaml")

        if not os.path.exists(config_path):
            return cls()

        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}

        if not isinstance(config_data, dict):
            raise ValueError(f"{config_path} must contain a mapping")

        return cls(**{key.lower(): value for key, value in config_data.items()})


@lru_cache()
def get_jws_config() -> JWSConfig:
    """
    Get cached JWS settings, from YAML when JWS_CONFIG_PATH points at a file.
    """
    return JWSConfig.from_yaml()
