"""
Skill Challenge Engine - Application Settings

Loads configuration from environment variables using Pydantic Settings
and applies the configured log level.
"""

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

LOGGER_NAME = "skill_challenge"


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # Generation
    rng_seed: int | None = None
    minimum_solutions: int = Field(default=3, ge=1)

    # Suggestions
    suggestion_limit: int = Field(default=5, ge=1)

    model_config = {
        "env_prefix": "SKILL_CHALLENGE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached singleton settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Apply the configured level to the package logger and return it."""
    settings = settings if settings is not None else get_settings()
    if settings.debug:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(settings.log_level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if not logging.getLogger().handlers and not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
    return logger
