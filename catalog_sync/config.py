"""Explicit configuration for offer normalization and sync runs."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_MARKUP = 300.0
DEFAULT_PRICE_MIN = 1.0
DEFAULT_PRICE_MAX = 1000.0
DEFAULT_CATEGORY_ID = 121
DEFAULT_DUMP_DIR = Path("data-dump")
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_RETENTION_DAYS = 5

_SETTINGS_KEYS = frozenset(
    {
        "markup",
        "price_range",
        "exclude_skus",
        "category_id",
        "dump_dir",
        "log_file",
        "log_level",
        "log_retention_days",
    }
)


@dataclass(frozen=True, slots=True)
class PriceRange:
    """Inclusive price bounds applied before markup."""

    min: float = 0.0
    max: float = math.inf

    def __post_init__(self) -> None:
        if math.isnan(self.min) or math.isnan(self.max) or math.isinf(self.min):
            raise ValueError(f"Invalid price range bounds: {self.min}..{self.max}")
        if self.min > self.max:
            raise ValueError(f"Price range min {self.min} is greater than max {self.max}")

    def contains(self, price: float) -> bool:
        """Return whether a finite price lies within the bounds."""

        return math.isfinite(price) and self.min <= price <= self.max


@dataclass(frozen=True, slots=True)
class TransformConfig:
    """Business filters and markup passed to the Normalizer at call time."""

    markup: float = 0.0
    price_range: PriceRange = field(default_factory=PriceRange)
    exclude_skus: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if not math.isfinite(self.markup) or self.markup < 0:
            raise ValueError(f"Markup must be a finite non-negative number: {self.markup}")


@dataclass(frozen=True, slots=True)
class SyncSettings:
    """Settings for one sync run."""

    transform: TransformConfig
    category_id: int = DEFAULT_CATEGORY_ID
    dump_dir: Path = DEFAULT_DUMP_DIR
    log_file: Path | None = None
    log_level: str = DEFAULT_LOG_LEVEL
    log_retention_days: int = DEFAULT_LOG_RETENTION_DAYS


def default_settings() -> SyncSettings:
    """Return settings populated from the module defaults."""

    return SyncSettings(
        transform=TransformConfig(
            markup=DEFAULT_MARKUP,
            price_range=PriceRange(min=DEFAULT_PRICE_MIN, max=DEFAULT_PRICE_MAX),
        )
    )


def _number(raw: dict[str, Any], key: str, default: float) -> float:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Setting '{key}' must be a number, got {value!r}")
    return float(value)


def settings_from_dict(raw: dict[str, Any]) -> SyncSettings:
    """Build validated settings from a decoded JSON object.

    Unknown keys are rejected so a typo does not silently fall back to a default.
    """

    if not isinstance(raw, dict):
        raise ValueError("Settings document must be a JSON object")

    unknown = set(raw) - _SETTINGS_KEYS
    if unknown:
        raise ValueError(f"Unknown settings keys: {', '.join(sorted(unknown))}")

    price_range_raw = raw.get("price_range", {})
    if not isinstance(price_range_raw, dict):
        raise ValueError("Setting 'price_range' must be an object with 'min' and 'max'")

    exclude_raw = raw.get("exclude_skus", [])
    if not isinstance(exclude_raw, list) or not all(isinstance(sku, str) for sku in exclude_raw):
        raise ValueError("Setting 'exclude_skus' must be a list of strings")

    category_id = raw.get("category_id", DEFAULT_CATEGORY_ID)
    if isinstance(category_id, bool) or not isinstance(category_id, int) or category_id <= 0:
        raise ValueError(f"Setting 'category_id' must be a positive integer, got {category_id!r}")

    log_level = raw.get("log_level", DEFAULT_LOG_LEVEL)
    if not isinstance(log_level, str):
        raise ValueError("Setting 'log_level' must be a string")

    log_retention_days = raw.get("log_retention_days", DEFAULT_LOG_RETENTION_DAYS)
    if isinstance(log_retention_days, bool) or not isinstance(log_retention_days, int) or log_retention_days <= 0:
        raise ValueError(f"Setting 'log_retention_days' must be a positive integer, got {log_retention_days!r}")

    log_file = raw.get("log_file")
    dump_dir = raw.get("dump_dir", str(DEFAULT_DUMP_DIR))
    if not isinstance(dump_dir, str) or (log_file is not None and not isinstance(log_file, str)):
        raise ValueError("Settings 'dump_dir' and 'log_file' must be strings")

    transform = TransformConfig(
        markup=_number(raw, "markup", DEFAULT_MARKUP),
        price_range=PriceRange(
            min=_number(price_range_raw, "min", DEFAULT_PRICE_MIN),
            max=_number(price_range_raw, "max", DEFAULT_PRICE_MAX),
        ),
        exclude_skus=frozenset(sku for sku in exclude_raw if sku != ""),
    )
    return SyncSettings(
        transform=transform,
        category_id=category_id,
        dump_dir=Path(dump_dir),
        log_file=Path(log_file) if log_file else None,
        log_level=log_level.upper(),
        log_retention_days=log_retention_days,
    )


def load_settings(path: str | Path) -> SyncSettings:
    """Load sync settings from a JSON file."""

    settings_path = Path(path)
    try:
        raw = json.loads(settings_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Settings file is not valid JSON: {settings_path}: {exc}") from exc
    return settings_from_dict(raw)
