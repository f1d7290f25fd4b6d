"""Configuration models for decruft."""

from .config import ExtractionConfig, MonitoringConfig, Settings, find_config_file, load_settings

__all__ = ["ExtractionConfig", "MonitoringConfig", "Settings", "find_config_file", "load_settings"]
