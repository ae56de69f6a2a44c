"""Utility helpers for application QSettings access."""
from PyQt5.QtCore import QSettings

from .app_constants import SETTINGS_APP, SETTINGS_ORG

_TRUTHY = {"1", "true", "yes", "on"}


def get_app_settings(*, org: str = SETTINGS_ORG, app: str = SETTINGS_APP) -> QSettings:
    """Return a QSettings instance using the default org/app identifiers."""
    return QSettings(org, app)


def is_truthy(raw: str) -> bool:
    return raw.strip().lower() in _TRUTHY


def read_bool(settings: QSettings, key: str, default: bool) -> bool:
    """Read a boolean flag, tolerating the string forms INI backends return."""
    raw = settings.value(key, default)
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        return is_truthy(raw)
    if raw is None:
        return default
    return bool(raw)


__all__ = ["get_app_settings", "is_truthy", "read_bool", "QSettings"]
