from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="APP_")

    # Database
    database_url: str = "sqlite:///./db.sqlite3"

    # Blob storage
    blob_backend: Literal["memory", "vercel"] = "memory"
    blob_base_url: str = "https://blob.vercel-storage.com"
    blob_read_write_token: str | None = None
    blob_timeout_seconds: float = 120.0
    approvals_prefix: str = "approvals/"

    # Auth
    session_cookie_name: str = "session"

    log_level: str = "INFO"


settings = Settings()
