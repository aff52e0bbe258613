"""Application configuration."""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment."""

    app_name: str = "Decision Canvas Engine"
    debug: bool = False
    log_level: str = "INFO"

    # Paths
    rules_dir: str = "rules"

    # Tree layout defaults (pixels)
    layout_node_width: float = 180.0
    layout_node_height: float = 60.0
    layout_horizontal_spacing: float = 40.0
    layout_level_spacing: float = 80.0
    layout_padding: float = 20.0

    model_config = SettingsConfigDict(
        env_prefix="DECISION_CANVAS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Set the package log level from settings (DEBUG when debug is on)."""
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("decision_canvas").setLevel(level)
