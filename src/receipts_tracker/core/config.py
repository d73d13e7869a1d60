from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    environment: str = "dev"

    database_url: str = "sqlite:///./receipts.db"
    db_timeout_seconds: float = 5.0

    storage_root: Path = Path(".")
    upload_directory: str = "img"
    max_upload_bytes: int = 16 * 1024 * 1024
    allowed_extensions: list[str] = ["gif", "jpg", "jpeg", "png", "tiff"]

    log_file: Path | None = None

    @property
    def upload_path(self) -> Path:
        return self.storage_root / self.upload_directory


settings = Settings()
