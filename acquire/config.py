import logging
import sys
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from acquire.schemas.game_engine import EndGameRule

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App config
    DEBUG: bool = False

    # Game rules
    END_GAME_RULE: EndGameRule = EndGameRule.OBSERVED

    # Fixed seed for tile shuffles (replays, local testing)
    TILE_SEED: int | None = None

    @field_validator("END_GAME_RULE", mode="before")
    @classmethod
    def normalize_end_game_rule(cls, v: str | EndGameRule) -> str | EndGameRule:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("TILE_SEED")
    @classmethod
    def validate_tile_seed(cls, v: int | None) -> int | None:
        if v is not None and v < 0:
            raise ValueError("TILE_SEED must be a non-negative integer")
        return v


def configure_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if debug else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    configure_logging(settings.DEBUG)
    logger.info("Settings loaded successfully")
    logger.debug("End game rule: %s", settings.END_GAME_RULE.value)
    logger.debug("Tile seed: %s", settings.TILE_SEED)
    return settings
