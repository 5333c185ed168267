"""Runtime settings loaded from the environment (and an optional .env file)."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

DEFAULT_DATA_DIR = "data"
DB_FILENAME = "research_helper.db"
ARXIV_API_URL = "https://export.arxiv.org/api/query"


class Settings(BaseModel):
    data_dir: Path = Path(DEFAULT_DATA_DIR)
    db_path: Path | None = None  # defaults to <data_dir>/research_helper.db
    arxiv_api_url: str = ARXIV_API_URL
    http_timeout: float = 30.0
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 3000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper()

    def model_post_init(self, context) -> None:
        self.data_dir = self.data_dir.expanduser().resolve()
        if self.db_path is None:
            self.db_path = self.data_dir / DB_FILENAME
        else:
            self.db_path = self.db_path.expanduser().resolve()

    @property
    def projects_dir(self) -> Path:
        return self.data_dir / "projects"


def load_settings(env_file: str | os.PathLike | None = None) -> Settings:
    """Build Settings from RESEARCH_HELPER_* variables; unset ones keep their defaults."""
    load_dotenv(env_file)

    env_map = {
        "data_dir": "RESEARCH_HELPER_DATA_DIR",
        "db_path": "RESEARCH_HELPER_DB_PATH",
        "arxiv_api_url": "ARXIV_API_URL",
        "http_timeout": "RESEARCH_HELPER_HTTP_TIMEOUT",
        "log_level": "RESEARCH_HELPER_LOG_LEVEL",
        "host": "HOST",
        "port": "PORT",
    }
    values: dict = {field: os.environ[var] for field, var in env_map.items() if os.environ.get(var)}

    origins = os.environ.get("RESEARCH_HELPER_CORS_ORIGINS")
    if origins:
        values["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]

    return Settings(**values)
