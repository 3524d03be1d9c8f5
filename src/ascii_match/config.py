"""Centralized configuration for ascii-match using Pydantic Settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ascii_match.search.selector import SelectionMode


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``ASCII_MATCH_*`` environment variables.

    Invalid values fail at startup with a pydantic ``ValidationError``.
    """

    model_config = SettingsConfigDict(
        env_prefix="ASCII_MATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Corpus
    art_root: Path = Field(default=Path("./art"), description="Folder scanned recursively for *.txt art files")
    art_suffix: str = Field(default=".txt", description="File suffix of art files")
    max_art_bytes: int = Field(
        default=3500,
        ge=1,
        description="Files larger than this are skipped because they will not fit in one message",
    )

    # Matching
    shingle_width: int = Field(default=2, ge=1, description="Shingle width used by the index-time analyzer")
    tie_breaker: float = Field(default=0.1, ge=0.0, le=1.0, description="DisMax tie breaker between tags and blob")
    selection_mode: SelectionMode = Field(
        default=SelectionMode.RANDOM,
        description="random: uniform choice among matches; top_score: best relevance score wins",
    )
    index_workers: int = Field(default=1, ge=1, description="Threads used to analyze documents at build time")

    # Server settings
    host: str = Field(default="0.0.0.0", description="HTTP bind host")
    port: int = Field(default=8080, ge=1, le=65535, description="HTTP bind port")

    # Slack rendering
    slack_buttons: bool = Field(default=False, description="Attach 'Post it!' / 'Shuffle!' buttons to responses")

    # Logging
    log_level: Literal["debug", "info", "warning", "error", "critical"] = Field(
        default="info", description="Logging level"
    )
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @field_validator("log_level", mode="before")
    @classmethod
    def _lower_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.lower()
        return value

    @field_validator("art_suffix")
    @classmethod
    def _check_suffix(cls, value: str) -> str:
        if not value.startswith("."):
            raise ValueError("art_suffix must start with '.'")
        return value
