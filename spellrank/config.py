#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Configuration - Loads tunable settings from environment variables.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# get_settings: Returns cached Settings instance.
# configure_logging: Applies the configured log level to the root logger.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# Settings: Configuration model matching SPELLRANK_* environment variables.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# pydantic_settings: Settings management.
# functools.lru_cache: Caching.
# logging: Root logger setup.
# spellrank.constants: Default values.

from functools import lru_cache
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

from spellrank.constants import (
    ADAPTIVE_MIXING_PROBABILITY,
    AUDIO_GAP_THRESHOLD_MS,
    CONFLICT_MAX_RETRIES,
    CONFLICT_RETRY_DELAY_SECONDS,
    LETTER_GAP_THRESHOLD_MS,
    MIN_SECONDS_PER_LETTER,
    RATING_CEILING,
    RATING_FLOOR,
    TAU,
    VOLATILITY_MAX_ITERATIONS,
)


class Settings(BaseSettings):
    """Core settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="SPELLRANK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "spellrank"

    # Glicko-2
    glicko_tau: float = TAU
    volatility_max_iterations: int = VOLATILITY_MAX_ITERATIONS
    rating_floor: float = RATING_FLOOR
    rating_ceiling: float = RATING_CEILING

    # Word Selection
    adaptive_mixing_probability: float = ADAPTIVE_MIXING_PROBABILITY

    # Anti-Cheat
    letter_gap_threshold_ms: float = LETTER_GAP_THRESHOLD_MS
    audio_gap_threshold_ms: float = AUDIO_GAP_THRESHOLD_MS
    min_seconds_per_letter: float = MIN_SECONDS_PER_LETTER

    # Persistence retries
    conflict_max_retries: int = CONFLICT_MAX_RETRIES
    conflict_retry_delay_seconds: float = CONFLICT_RETRY_DELAY_SECONDS

    # Logging
    log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Set up root logging for applications embedding the core"""
    logging.basicConfig(level=(level or get_settings().log_level).upper())
