from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv(override=False)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseModel):
    """Runtime configuration for the content pipeline."""

    content_root: Path = Field(default_factory=lambda: Path(os.getenv("APEX_CONTENT_ROOT", "content")))
    words_per_minute: int = Field(default_factory=lambda: int(os.getenv("APEX_WORDS_PER_MINUTE", "200")))
    related_limit: int = Field(default_factory=lambda: int(os.getenv("APEX_RELATED_LIMIT", "3")))
    load_workers: int = Field(default_factory=lambda: int(os.getenv("APEX_LOAD_WORKERS", "1")))
    log_level: str = Field(default_factory=lambda: os.getenv("APEX_LOG_LEVEL", "INFO"))

    model_config = {
        "frozen": True,
        "validate_default": True,
    }

    @field_validator("words_per_minute", "related_limit", "load_workers")
    @classmethod
    def _require_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: object) -> str:
        level = str(value or "INFO").strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level '{value}'")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance built from the environment."""

    return Settings()


def configure_logging(level: str | int | None = None) -> None:
    """Install a root handler for hosts that have not configured logging themselves."""

    if level is None:
        level = get_settings().log_level
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("apex_academy").setLevel(level)


__all__ = ["LOG_FORMAT", "Settings", "configure_logging", "get_settings"]
