"""Application settings, read from the environment and an optional .env file."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Settings for path enumeration, logging and test-script output.

    Every field can be overridden with a ``FLOWCOVER_`` environment variable,
    e.g. ``FLOWCOVER_MAX_PATHS=500``.
    """

    model_config = SettingsConfigDict(
        env_prefix="FLOWCOVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Enumeration ceiling. Candidate path counts grow exponentially with
    # branch and loop nesting.
    max_paths: int = Field(default=10_000, ge=1)
    max_expansions: int = Field(default=200_000, ge=1)

    default_criterion: str = "edge"
    log_level: str = "WARNING"

    test_file_prefix: str = "test_"
    indent: str = "    "


settings = AppConfig()
