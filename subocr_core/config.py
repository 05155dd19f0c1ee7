# subocr_core/config.py
# -*- coding: utf-8 -*-
import json
import logging
from pathlib import Path

from .errors import ConfigError
from .models.settings import AppSettings

logger = logging.getLogger(__name__)


class AppConfig:
    def __init__(self, settings_path=None):
        self.settings_path = Path(settings_path) if settings_path else None
        self.defaults = {
            # --- Preprocessing ---
            'ocr_threshold': 0.6,
            'ocr_border': 10,

            # --- OCR Engine ---
            'ocr_dpi': 150,
            'ocr_tessdata_path': None,
            'ocr_language': 'eng',
            'ocr_char_blacklist': '|\\/`_~',
            'ocr_engine_vars': [],  # [[name, value], ...] applied in order

            # --- Concurrency ---
            'ocr_workers': None,  # None = one worker per CPU

            # --- Output ---
            'ocr_output_format': 'srt',
            'ocr_dump_images': False,
            'ocr_dump_dir': '.',
        }
        self.settings = self.defaults.copy()
        if self.settings_path is not None:
            self.load()

    def load(self):
        if not self.settings_path.exists():
            raise ConfigError(f"Settings file not found: {self.settings_path}")
        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                loaded_settings = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise ConfigError(f"Could not read settings file {self.settings_path}: {e}") from e

        if not isinstance(loaded_settings, dict):
            raise ConfigError(f"Settings file {self.settings_path} must contain a JSON object")

        for key in loaded_settings:
            if key not in self.defaults:
                logger.warning("Ignoring unknown setting %r in %s", key, self.settings_path)

        self.settings = self.defaults.copy()
        self.settings.update({k: v for k, v in loaded_settings.items() if k in self.defaults})

    def save(self, path=None):
        target = Path(path) if path else self.settings_path
        if target is None:
            raise ConfigError("No settings path to save to")
        try:
            keys_to_save = self.defaults.keys()
            settings_to_save = {k: self.settings.get(k) for k in keys_to_save if k in self.settings}
            with open(target, 'w', encoding='utf-8') as f:
                json.dump(settings_to_save, f, indent=4)
        except IOError as e:
            raise ConfigError(f"Error saving settings to {target}: {e}") from e

    def get(self, key: str, default=None):
        return self.settings.get(key, default)

    def set(self, key: str, value):
        if key not in self.defaults:
            raise ConfigError(f"Unknown setting: {key}")
        self.settings[key] = value

    def update(self, overrides: dict):
        """Apply overrides, skipping keys whose value is None."""
        for key, value in overrides.items():
            if value is not None:
                self.set(key, value)

    def to_settings(self) -> AppSettings:
        settings = AppSettings.from_config(self.settings)
        settings.validate()
        return settings
