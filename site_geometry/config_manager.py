"""Configuration management with JSON persistence."""

import json
import math
import os
from dataclasses import fields
from typing import Optional, Callable, List

from .logging_config import get_logger
from .models.config import EngineConfig
from .config.defaults import DEFAULT_CONFIG, DEFAULT_PATHS

logger = get_logger("config_manager")

_FLOAT_FIELDS = (
    "min_point_distance", "closure_radius", "outward_probe_distance",
    "fallback_boundary_distance", "arrow_length_ratio", "min_arrow_length",
    "max_arrow_length", "full_view_ratio", "calibration_min_corner_distance",
    "max_dimension",
)
_INT_FIELDS = ("max_dimension_decimals", "max_verification_lines")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigManager:
    """Manages engine configuration with file persistence and change callbacks."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or DEFAULT_PATHS["config_file"]
        self._config: Optional[EngineConfig] = None
        self._config_change_callbacks: List[Callable[[EngineConfig], None]] = []

        self.load_config()

    def load_config(self) -> EngineConfig:
        """Load configuration from file or create default."""
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r') as f:
                    config_dict = json.load(f)
                known = {f.name for f in fields(EngineConfig)}
                unknown = set(config_dict) - known
                if unknown:
                    logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
                config = EngineConfig(**{k: v for k, v in config_dict.items() if k in known})
                if self.validate_config(config):
                    self._config = config
                else:
                    logger.error("Invalid values in config file. Using defaults.")
                    self._config = EngineConfig()
            except (json.JSONDecodeError, TypeError, AttributeError) as e:
                logger.error(f"Error loading config: {e}. Using defaults.")
                self._config = EngineConfig()
        else:
            self._config = EngineConfig()
            self.save_config()

        return self._config

    def save_config(self) -> None:
        """Save current configuration to file."""
        if self._config is None:
            return

        directory = os.path.dirname(self.config_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(self.config_path, 'w') as f:
            json.dump(self._config.to_dict(), f, indent=2)

    def get_config(self) -> EngineConfig:
        """Get current configuration."""
        if self._config is None:
            return self.load_config()
        return self._config

    def update_config(self, **kwargs) -> bool:
        """Update configuration with new values.

        Unknown keys are ignored. The new values are validated on a copy, so a
        rejected update leaves the current configuration untouched.
        """
        if self._config is None:
            self.load_config()

        known = {f.name for f in fields(EngineConfig)}
        updates = {}
        for key, value in kwargs.items():
            if key in known:
                updates[key] = value
            else:
                logger.warning(f"Unknown config key: {key}")

        candidate = EngineConfig(**{**self._config.to_dict(), **updates})
        if not self.validate_config(candidate):
            logger.error("Rejected invalid configuration update")
            return False

        self._config = candidate
        self.save_config()

        for callback in self._config_change_callbacks:
            try:
                callback(self._config)
            except Exception as e:
                logger.error(f"Error in config change callback: {e}")

        return True

    def add_change_callback(self, callback: Callable[[EngineConfig], None]) -> None:
        self._config_change_callbacks.append(callback)

    def validate_config(self, config: Optional[EngineConfig] = None) -> bool:
        """Validate a configuration, the current one by default."""
        config = config or self._config
        if config is None:
            return False

        for name in _FLOAT_FIELDS:
            value = getattr(config, name)
            if not _is_number(value) or not math.isfinite(value) or value <= 0:
                return False

        for name in _INT_FIELDS:
            value = getattr(config, name)
            if isinstance(value, bool) or not isinstance(value, int):
                return False

        if config.min_arrow_length > config.max_arrow_length:
            return False

        if config.full_view_ratio > 1.0:
            return False

        if config.max_verification_lines < 1 or config.max_dimension_decimals < 0:
            return False

        return True

    def reset_to_defaults(self) -> None:
        """Restore the default configuration."""
        self._config = EngineConfig(**DEFAULT_CONFIG)
        self.save_config()
