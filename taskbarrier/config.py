from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict

import yaml

from .errors import EntryFailure
from .units import TimeUnit, parse_unit

_TRUTHY = ("1", "true", "yes")
_FALSY = ("0", "false", "no")
_KNOWN_KEYS = {"default_timeout", "default_unit", "log_failures"}


@dataclass
class BarrierConfig:
    """Configuration for a Barrier.

    Attributes:
        default_timeout: Timeout used when ``wait_for`` is called without one
        default_unit: Unit of ``default_timeout`` and of unit-less timeouts
        log_failures: Log contained submission/action failures
        on_failure: Optional hook called with each SubmissionFailure/ActionFailure
        extra: Unrecognised keys from a YAML file, kept for callers
    """

    default_timeout: float = 30.0
    default_unit: TimeUnit = TimeUnit.SECONDS
    log_failures: bool = True
    on_failure: Callable[[EntryFailure], None] | None = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.default_unit = parse_unit(self.default_unit)
        self.default_timeout = float(self.default_timeout)

    @classmethod
    def from_env(cls) -> "BarrierConfig":
        """Build a config from ``TASKBARRIER_*`` environment variables."""
        defaults = cls()
        return cls(
            default_timeout=_parse_float(
                os.getenv("TASKBARRIER_DEFAULT_TIMEOUT"), defaults.default_timeout
            ),
            default_unit=os.getenv("TASKBARRIER_DEFAULT_UNIT", defaults.default_unit.value),
            log_failures=_parse_bool(
                os.getenv("TASKBARRIER_LOG_FAILURES"), defaults.log_failures
            ),
        )


def load_barrier_config(path: str | Path) -> BarrierConfig:
    data = yaml.safe_load(Path(path).read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Barrier config {path} must be a mapping")
    defaults = BarrierConfig()
    return BarrierConfig(
        default_timeout=_parse_float(data.get("default_timeout"), defaults.default_timeout),
        default_unit=data.get("default_unit", defaults.default_unit),
        log_failures=_parse_bool(data.get("log_failures"), defaults.log_failures),
        extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
    )


def _parse_float(value: Any, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid timeout value: {value!r}") from None


def _parse_bool(value: Any, default: bool) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")
