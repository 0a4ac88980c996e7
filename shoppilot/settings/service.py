from __future__ import annotations

import logging
import time
from typing import Any

from ..errors import InvalidQuery

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: list[dict[str, Any]] = [
    {"key": "autoApproveShops", "value": False, "description": "Auto-approve new shops", "category": "shop_management"},
    {"key": "maintenanceMode", "value": False, "description": "Enable maintenance mode", "category": "system"},
    {"key": "maxShopsPerUser", "value": 5, "description": "Maximum shops per user", "category": "shop_management"},
    {"key": "sessionTimeout", "value": 30, "description": "Session timeout in minutes", "category": "security"},
    {"key": "backupFrequency", "value": "daily", "description": "Backup frequency", "category": "system"},
]


def _check_value(key: str, value: Any, default: Any) -> None:
    """Known settings keep the type of their default; counts are non-negative."""
    if isinstance(default, bool):
        ok = isinstance(value, bool)
    elif isinstance(default, int):
        ok = isinstance(value, int) and not isinstance(value, bool) and value >= 0
    else:
        ok = isinstance(value, type(default))
    if not ok:
        raise InvalidQuery(
            f"{key} expects a value like {default!r}, got {value!r}",
            message="Invalid setting value",
        )


class SettingsService:
    """Process-wide settings with defaults seeded on boot."""

    def __init__(self, defaults: list[dict[str, Any]] = DEFAULT_SETTINGS) -> None:
        self._defaults = {d["key"]: d for d in defaults}
        self._records: dict[str, dict[str, Any]] = {}

    def initialize(self) -> None:
        """Insert any default that is not stored yet. Existing values win."""
        for key, default in self._defaults.items():
            if key not in self._records:
                self._records[key] = {**default, "updated_at": time.time()}
        logger.info("Settings initialized (%d keys)", len(self._records))

    def get(self, key: str) -> Any:
        record = self._records.get(key)
        if record is not None:
            return record["value"]
        default = self._defaults.get(key)
        return default["value"] if default else None

    def all(self) -> dict[str, Any]:
        values = {key: d["value"] for key, d in self._defaults.items()}
        values.update({key: r["value"] for key, r in self._records.items()})
        return values

    def validate(self, key: str, value: Any) -> None:
        default = self._defaults.get(key)
        if default is not None:
            _check_value(key, value, default["value"])

    def set(self, key: str, value: Any) -> Any:
        self.validate(key, value)
        default = self._defaults.get(key, {})
        record = self._records.setdefault(key, {
            "key": key,
            "description": default.get("description"),
            "category": default.get("category", "system"),
        })
        record["value"] = value
        record["updated_at"] = time.time()
        return value

    def update(self, values: dict[str, Any]) -> dict[str, Any]:
        """Upsert several settings; nothing is written if any value is invalid."""
        for key, value in values.items():
            self.validate(key, value)
        return {key: self.set(key, value) for key, value in values.items()}

    def reset(self) -> None:
        self._records.clear()
        self.initialize()


_service = SettingsService()


def get_settings_service() -> SettingsService:
    return _service
