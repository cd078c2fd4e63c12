"""Configuration package for runtime settings and startup validation."""

from .settings import BulkIngestSettings, SettingsLoadError, config_load_settings

__all__ = ["BulkIngestSettings", "SettingsLoadError", "config_load_settings"]
