"""
Configuration for zfs-telemetry.

Settings come from a YAML file, then ZFS_TELEMETRY_* environment variables
override individual values.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

from zfs_telemetry.telemetry.collectors.service_collector import DEFAULT_SERVICE_UNITS

logger = logging.getLogger(__name__)

ENV_PREFIX = "ZFS_TELEMETRY_"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class ConfigError(Exception):
    """Configuration is invalid."""


class BinaryNotFoundError(ConfigError):
    """A required binary is missing or not executable."""


class ZpoolNotFoundError(BinaryNotFoundError):
    pass


class ZfsNotFoundError(BinaryNotFoundError):
    pass


class ExporterConfig(BaseModel):
    """zfs-telemetry configuration."""

    listen_host: str = Field(default="0.0.0.0", description="Address to listen on")
    listen_port: int = Field(default=9134, ge=1, le=65535)
    metrics_path: str = Field(default="/metrics", description="Path of the metrics endpoint")

    log_level: str = Field(default="INFO")
    log_dir: Optional[str] = Field(default=None, description="Directory for log files")
    log_json: bool = False

    scrape_timeout: float = Field(
        default=10.0, gt=0, description="Budget in seconds for all commands of one collection"
    )
    zpool_path: str = "zpool"
    zfs_path: str = "zfs"

    services: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SERVICE_UNITS),
        description="Service keys to monitor",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level == "WARN":
            level = "WARNING"
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("metrics_path")
    @classmethod
    def _check_metrics_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("metrics_path must start with '/'")
        return value

    @field_validator("services", mode="before")
    @classmethod
    def _split_services(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        return [s.strip() for s in value if s and s.strip()]

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ExporterConfig":
        """
        Load configuration from a YAML file.

        A missing file yields the defaults.
        """
        config_path = Path(path)
        if not config_path.exists():
            logger.info(f"Config file {config_path} not found, using defaults")
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigError(f"{config_path}: expected a mapping at top level")

        return cls(**data)

    def save(self, path: Union[str, Path]) -> None:
        """Write configuration as YAML."""
        config_path = Path(path)
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            yaml.safe_dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)

    def apply_environment(self, environ: Optional[Mapping[str, str]] = None) -> "ExporterConfig":
        """
        Return a copy with ZFS_TELEMETRY_* overrides applied.

        Invalid values are logged and ignored.
        """
        env = os.environ if environ is None else environ
        data = self.model_dump()

        for name in type(self).model_fields:
            raw = env.get(ENV_PREFIX + name.upper())
            if not raw:
                continue
            candidate = dict(data, **{name: raw})
            try:
                type(self).model_validate(candidate)
            except ValueError as e:
                logger.warning(f"Ignoring invalid {ENV_PREFIX}{name.upper()}={raw!r}: {e}")
                continue
            data = candidate

        return type(self).model_validate(data)

    def validate_binaries(self) -> None:
        """
        Check that zpool and zfs can be executed.

        Raises:
            ZpoolNotFoundError, ZfsNotFoundError
        """
        _check_binary(self.zpool_path, ZpoolNotFoundError)
        _check_binary(self.zfs_path, ZfsNotFoundError)

    def service_units(self) -> Dict[str, List[str]]:
        """Map configured service keys to their candidate systemd units."""
        units = {}
        for key in self.services:
            if key not in DEFAULT_SERVICE_UNITS:
                logger.warning(f"Unknown service key {key!r}, ignoring")
                continue
            units[key] = list(DEFAULT_SERVICE_UNITS[key])
        return units


def _check_binary(path: str, error: type) -> None:
    # Bare names are looked up on PATH.
    if "/" not in path:
        if shutil.which(path) is None:
            raise error(f"{path} not found in PATH")
        return

    binary = Path(path)
    if not binary.is_file():
        raise error(f"{path} does not exist")
    if not os.access(binary, os.X_OK):
        raise error(f"{path} is not executable")
