"""Client-side settings, read from TASKBOARD_* environment variables."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Where the API lives and where the CLI keeps its session cookie."""

    model_config = SettingsConfigDict(
        env_prefix="TASKBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_url: str = "http://localhost:8000/api"
    session_file: Path = Field(default_factory=lambda: Path.home() / ".taskboard" / "session.json")
    timeout_seconds: float = 10.0
