import tempfile
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_prefix="RECEIVER_", env_file=".env", extra="ignore")

    app_name: str = "multipart_receiver"
    tmp_dir: Path = Path(tempfile.gettempdir())
    data_dir: Path = Path.home() / "data"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    chunk_size: int = 1024 * 1024
    stale_tmp_hours: int = 24

    def ensure_directories(self) -> None:
        """Create the temp and data directories if missing."""
        self.tmp_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)


settings = Settings()
