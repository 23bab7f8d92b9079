"""Configuration loader for the grant-rigor scoring engine.

Provides centralized access to the rubric constants used by the scorers.
"""
from __future__ import annotations

import os
import yaml
from pathlib import Path
from typing import Any, Optional
import structlog

logger = structlog.get_logger(__name__)

CONFIG_FILE = Path(__file__).parent / "scoring_config.yaml"
CONFIG_ENV_VAR = "GRANT_RIGOR_CONFIG"


def _resolve_config_file(path: Optional[str] = None) -> Path:
    override = path or os.getenv(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return CONFIG_FILE


class ConfigLoader:
    """Loads and provides access to scoring configuration."""

    _instance: Optional[ConfigLoader] = None
    _config: Optional[dict[str, Any]] = None

    def __new__(cls) -> ConfigLoader:
        """Singleton pattern - ensure only one config instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize config loader (only runs once due to singleton)."""
        if self._config is None:
            self._load_config()

    def _load_config(self, path: Optional[str] = None) -> None:
        """Load configuration from YAML file."""
        config_file = _resolve_config_file(path)
        if config_file.exists():
            with open(config_file, encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
            logger.info("config_loaded", path=str(config_file))
        else:
            logger.warning("config_file_not_found", path=str(config_file))
            self._config = {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot-notation key.

        Examples:
            config.get("quality.structural_cap.threshold")
            config.get("verification.batch_size")
            config.get("nonexistent.key", default=100)
        """
        if not self._config:
            return default

        keys = key.split(".")
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def get_section(self, section: str) -> dict[str, Any]:
        """Get entire configuration section.

        Examples:
            config.get_section("quality")
            config.get_section("adequacy")
        """
        return self.get(section, default={})

    def reload(self, path: Optional[str] = None) -> None:
        """Reload configuration from ``path``, the env override or the bundled file."""
        self._config = None
        self._load_config(path)


# Singleton instance
_config = ConfigLoader()


def get_config() -> ConfigLoader:
    """Get the global config instance."""
    return _config


def get_sections_config() -> dict[str, Any]:
    """Get section extraction configuration (heading rules, thresholds)."""
    return _config.get_section("sections")


def get_quality_config() -> dict[str, Any]:
    """Get module table and quality scoring configuration."""
    return _config.get_section("quality")


def get_adequacy_config() -> dict[str, Any]:
    """Get statistical adequacy rubric configuration."""
    return _config.get_section("adequacy")


def get_claims_config() -> dict[str, Any]:
    """Get claim extraction configuration."""
    return _config.get_section("claims")


def get_verification_config() -> dict[str, Any]:
    """Get claim verification configuration."""
    return _config.get_section("verification")


def get_integrity_config() -> dict[str, Any]:
    """Get integrity grade band configuration."""
    return _config.get_section("integrity")
