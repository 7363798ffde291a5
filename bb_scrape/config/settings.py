import logging
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_VERSION = "0.4.0"


class AppSettings(BaseSettings):
    """Application settings loaded from BB_* environment variables or .env file."""

    # League site
    host: str = Field("dozerverse.com", description="Host serving the league pages.")
    prefix: str = Field(
        "/brutalball/", description="Path prefix joined in front of every page path."
    )
    request_timeout: float = Field(
        15.0, gt=0, description="Per-request timeout in seconds."
    )
    max_attempts: int = Field(
        4, ge=1, description="Total attempts per page, including the first one."
    )

    # Worker pool
    workers: int = Field(4, ge=1, description="Concurrent team-page workers.")
    request_pause_ms: int = Field(
        75, ge=0, description="Pause after each request from the same worker."
    )
    jitter_ms: int = Field(
        50, ge=0, description="Upper bound of random jitter added to the pause."
    )

    # Extraction
    flip_sides: bool = Field(
        False,
        description="Swap home/away after side selection on the season page.",
    )

    # Local cache and export
    store_dir: Path = Field(Path(".store"), description="Cache directory.")
    out_dir: Path = Field(Path("out"), description="Default export directory.")

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )
    log_file: Path = Field(
        Path(".store/bb_scrape.log"), description="Debug log file sink."
    )

    model_config = SettingsConfigDict(
        env_prefix="BB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def base_url(self) -> str:
        return f"http://{self.host}/{self.prefix.strip('/')}/"


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid BB_LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
