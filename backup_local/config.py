"""Configuration management for the backup-local system."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

import yaml
from croniter import croniter
from humanfriendly import InvalidSize, parse_size
from pydantic import BaseModel, Field, field_validator, model_validator


class ChecksConfig(BaseModel):
    """System checks configuration."""

    min_free_space: str = Field(
        default="0", description="Minimum free space required on the backup drive"
    )

    @field_validator("min_free_space", mode="before")
    @classmethod
    def coerce_byte_count(cls, v):
        """Accept a bare byte count such as ``0`` as well as a size string."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("min_free_space")
    @classmethod
    def validate_min_free_space(cls, v: str) -> str:
        """Validate the min_free_space format."""
        try:
            parse_size(v)
            return v
        except InvalidSize as e:
            raise ValueError(f"Invalid size format for min_free_space: {e}")


class AppConfig(BaseModel):
    """Main application configuration."""

    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_file: str = Field(
        default="log/backup_local.log",
        description="Path to log file relative to the working directory",
    )
    volume: Optional[str] = Field(
        default=None,
        description="Mount source for the backup drive (UUID=..., LABEL=... or device path)",
    )
    mount_point: str = Field(description="Directory the backup drive is mounted on")
    sources: List[str] = Field(description="Directories to copy onto the backup drive")
    excludes: List[str] = Field(
        default_factory=list, description="rsync exclude patterns"
    )
    schedule: str = Field(
        default="0 0 * * *",
        description="Cron-like schedule: 'minute hour day-of-month month day-of-week'",
    )
    checks: ChecksConfig = Field(default_factory=ChecksConfig)
    monitor_url: Optional[str] = Field(
        default=None, description="Push monitor URL notified after each run"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(valid_levels))}")
        return v_upper

    @field_validator("mount_point")
    @classmethod
    def validate_mount_point(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("mount_point must be an absolute path")
        return v.rstrip("/") or "/"

    @field_validator("sources")
    @classmethod
    def validate_sources(cls, v: List[str]) -> List[str]:
        """Validate source directory paths."""
        if not v:
            raise ValueError("At least one source directory is required")
        for source in v:
            if not source.startswith("/"):
                raise ValueError(f"Source must be an absolute path: {source}")
        return v

    @field_validator("schedule")
    @classmethod
    def validate_schedule(cls, v: str) -> str:
        """Validate the cron schedule format."""
        schedule_parts = v.strip().split()

        if len(schedule_parts) != 5:
            raise ValueError(
                "Schedule must have 5 fields: 'minute hour day-of-month month day-of-week'"
            )

        if not croniter.is_valid(v):
            raise ValueError(f"Invalid cron schedule format: {v}")
        return v

    @model_validator(mode="after")
    def validate_sources_unique(self) -> AppConfig:
        """Ensure no source is listed twice."""
        normalized = [source.rstrip("/") for source in self.sources]
        if len(normalized) != len(set(normalized)):
            raise ValueError("Source directories must be unique")
        # rsync copies each source to <slot>/<basename>; two sources sharing
        # a basename would be merged into one directory.
        basenames = {}
        for source in normalized:
            name = os.path.basename(source)
            if name in basenames:
                raise ValueError(
                    f"Sources {basenames[name]} and {source} would both be copied to '{name}'"
                )
            basenames[name] = source
        return self

    @property
    def min_free_space_bytes(self) -> int:
        """Get minimum free space as bytes."""
        return parse_size(self.checks.min_free_space)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    """Load and validate configuration from YAML file."""
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML format in config file: {e}")

    if config_data is None:
        raise ValueError("Configuration file is empty")

    try:
        return AppConfig(**config_data)
    except Exception as e:
        raise ValueError(f"Configuration validation error: {e}")
