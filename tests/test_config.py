"""Tests for settings loading."""

import os
from pathlib import Path

import pytest

from research_helper.config import ARXIV_API_URL, DB_FILENAME, Settings, load_settings

ENV_VARS = [
    "RESEARCH_HELPER_DATA_DIR",
    "RESEARCH_HELPER_DB_PATH",
    "ARXIV_API_URL",
    "RESEARCH_HELPER_HTTP_TIMEOUT",
    "RESEARCH_HELPER_LOG_LEVEL",
    "RESEARCH_HELPER_CORS_ORIGINS",
    "HOST",
    "PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    # Keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)
    yield
    # load_dotenv writes straight into os.environ
    for var in ENV_VARS:
        os.environ.pop(var, None)


def test_defaults(tmp_path):
    settings = load_settings()

    assert settings.data_dir == (tmp_path / "data").resolve()
    assert settings.db_path == settings.data_dir / DB_FILENAME
    assert settings.projects_dir == settings.data_dir / "projects"
    assert settings.arxiv_api_url == ARXIV_API_URL
    assert settings.http_timeout == 30.0
    assert settings.port == 3000
    assert settings.cors_origins == ["*"]


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("RESEARCH_HELPER_DATA_DIR", str(tmp_path / "research"))
    monkeypatch.setenv("RESEARCH_HELPER_HTTP_TIMEOUT", "5")
    monkeypatch.setenv("RESEARCH_HELPER_LOG_LEVEL", "debug")
    monkeypatch.setenv("RESEARCH_HELPER_CORS_ORIGINS", "http://localhost:5173, http://localhost:3001")
    monkeypatch.setenv("PORT", "8080")

    settings = load_settings()

    assert settings.data_dir == (tmp_path / "research").resolve()
    assert settings.db_path == (tmp_path / "research" / DB_FILENAME).resolve()
    assert settings.http_timeout == 5.0
    assert settings.log_level == "DEBUG"
    assert settings.cors_origins == ["http://localhost:5173", "http://localhost:3001"]
    assert settings.port == 8080


def test_explicit_db_path(monkeypatch, tmp_path):
    monkeypatch.setenv("RESEARCH_HELPER_DB_PATH", str(tmp_path / "elsewhere" / "rh.db"))
    assert load_settings().db_path == (tmp_path / "elsewhere" / "rh.db").resolve()


def test_env_file_is_read(tmp_path):
    env_file = tmp_path / "custom.env"
    env_file.write_text(f"RESEARCH_HELPER_DATA_DIR={tmp_path / 'from-file'}\n", encoding="utf-8")

    assert load_settings(env_file).data_dir == (tmp_path / "from-file").resolve()


def test_settings_can_be_built_directly(tmp_path):
    settings = Settings(data_dir=Path(tmp_path))
    assert settings.db_path == tmp_path.resolve() / DB_FILENAME
