"""Configuration, startup checks and logging setup."""

from __future__ import annotations

from skinscores.core.config import AppSettings
from skinscores.core.logging_config import setup_logging
from skinscores.core.startup_checks import validate_settings

__all__ = ["AppSettings", "setup_logging", "validate_settings"]
