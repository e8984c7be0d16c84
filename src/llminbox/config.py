"""Configuration management for llminbox."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable overrides.

    All settings can be overridden via environment variables
    prefixed with LLMINBOX_ (e.g. LLMINBOX_DATA_DIR, LLMINBOX_WAIT_TIMEOUT).
    """

    model_config = {"env_prefix": "LLMINBOX_"}

    # Storage
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".llminbox",
        description="Root directory for all llminbox data",
    )

    # Server
    host: str = "127.0.0.1"
    port: int = 9094

    # Capture
    wait_timeout: float = 10.0  # seconds before WaitFor gives up
    poll_interval: float = 0.1  # seconds between WaitFor queries
    caption_window: float = 20.0  # +/- seconds around the playback position
    page_text_limit: int = 5000  # characters kept from a full-page extract
    fetch_timeout: float = 30.0  # seconds for caption track downloads

    @property
    def db_path(self) -> Path:
        """SQLite database path."""
        return self.data_dir / "llminbox.db"

    def ensure_dirs(self) -> None:
        """Create all required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton: import this throughout the app
settings = Settings()
