"""
Runtime configuration from environment variables.

Environment Variables:
    LOGTRUST_REGISTRY: Key registry file - default: ~/.logtrust/keys.json
    LOGTRUST_MAX_WORKERS: Validation pool size (0 = executor default, 1 = no pool) - default: 0
    LOGTRUST_PARALLEL_THRESHOLD: Minimum batch size for the pool - default: 64
    LOGTRUST_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR - default: WARNING
    LOGTRUST_LOG_FORMAT: json, text - default: text
    METRICS_ENABLED: Start Prometheus exporter (true/false) - default: false
    METRICS_PORT: Exporter port - default: 8080
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .validation.engine import DEFAULT_PARALLEL_THRESHOLD


def default_registry_path() -> str:
    return str(Path.home() / ".logtrust" / "keys.json")


def _int_env(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


@dataclass
class Settings:
    registry_path: str
    max_workers: int
    parallel_threshold: int
    log_level: str
    log_format: str
    metrics_enabled: bool
    metrics_port: int

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            registry_path=os.getenv("LOGTRUST_REGISTRY") or default_registry_path(),
            max_workers=_int_env("LOGTRUST_MAX_WORKERS", 0),
            parallel_threshold=_int_env(
                "LOGTRUST_PARALLEL_THRESHOLD", DEFAULT_PARALLEL_THRESHOLD, minimum=1
            ),
            log_level=os.getenv("LOGTRUST_LOG_LEVEL", "WARNING").upper(),
            log_format=os.getenv("LOGTRUST_LOG_FORMAT", "text").lower(),
            metrics_enabled=os.getenv("METRICS_ENABLED", "false").lower() == "true",
            metrics_port=_int_env("METRICS_PORT", 8080, minimum=1),
        )

    @property
    def pool_size(self) -> Optional[int]:
        """max_workers as ValidationEngine expects it (None = executor default)."""
        return self.max_workers or None
