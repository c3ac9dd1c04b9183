import os
import logging
import yaml

from settings_schema import SettingsSchema, validate_settings

APP_VERSION = "1.0.0"


class YamlConfig:
    """Load and save settings to a YAML file."""

    def __init__(self, path: str = "settings.yaml") -> None:
        self.path = path

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def save(self, data: dict) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(dict(data), f)

    def update(self, key: str, raw_value: str) -> SettingsSchema:
        """Set ``key`` from its YAML text, validating before anything is written."""
        if key not in SettingsSchema.model_fields:
            raise ValueError(f"unknown setting {key!r}")
        data = self.load()
        data[key] = yaml.safe_load(raw_value)
        settings = validate_settings(data)
        self.save(data)
        return settings


def load_settings(path: str = "settings.yaml") -> SettingsSchema:
    """Return validated settings from ``path``; defaults when it is missing."""
    return validate_settings(YamlConfig(path).load())


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
