"""Application settings via Pydantic BaseSettings."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from pagescribe.types import BrowserName


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PAGESCRIBE_", env_file=".env", env_file_encoding="utf-8"
    )

    # Target
    base_url: str = "https://github.com/"
    timeout: int = 30000  # ms, applied to navigation and generated tests
    retries: int = 2  # reruns of a failing generated test (pytest-rerunfailures)
    parallel: bool = True  # run the generated suite with pytest-xdist
    browser: BrowserName = BrowserName.CHROMIUM
    headless: bool = True

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    # Artifacts
    workspace_dir: str = "."  # snapshot lands in <workspace_dir>/analysis/
    output_dir: str = "tests/generated"
    rules_file: str | None = None  # optional YAML analyzer rules


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
