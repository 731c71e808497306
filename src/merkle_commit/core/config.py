"""
Merkle Commit - Configuration
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    # Application
    APP_NAME: str = "Merkle Commit"
    VERSION: str = "1.0.0"
    ENV: str = "development"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8082
    WORKERS: int = 1
    LOG_LEVEL: str = "INFO"

    # Tree sources, a dumped document takes precedence over a weights table
    TREE_DOCUMENT_PATH: Optional[str] = None
    TOKEN_WEIGHTS_PATH: Optional[str] = None

    # Limits on untrusted input sizes
    MAX_LEAVES: int = Field(default=1_000_000, ge=1)
    MAX_MULTIPROOF_LEAVES: int = Field(default=1024, ge=1)

    # Rendering, 0 shows full hashes
    RENDER_HEX_CHARS: int = Field(default=0, ge=0)

    # Metrics
    METRICS_ENABLED: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
