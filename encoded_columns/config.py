from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Encoded column defaults loaded from ENCODED_COLUMNS_* environment variables."""

    # Logging
    debug: bool = False
    log_level: str = "INFO"

    # Digest backend defaults, used when encode_args omit them
    default_digest_algorithm: str = "SHA-256"
    default_digest_format: str = "base64"

    # Bcrypt work factor when encode_args has no "cost"
    default_bcrypt_cost: int = 12

    # Default key for the Fernet backend
    # Generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
    field_encryption_key: str = ""

    model_config = {
        "env_prefix": "ENCODED_COLUMNS_",
        "extra": "ignore",
    }

    @field_validator("default_bcrypt_cost")
    @classmethod
    def _cost_in_range(cls, value: int) -> int:
        if not 4 <= value <= 31:
            raise ValueError("default_bcrypt_cost must be between 4 and 31")
        return value

    @field_validator("default_digest_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("hex", "base64"):
            raise ValueError("default_digest_format must be 'hex' or 'base64'")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
