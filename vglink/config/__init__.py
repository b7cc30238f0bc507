"""Configuration management for vglink."""

from .manager import ConfigManager
from .schemas import POLICY_CONFIG_SCHEMA
from .settings import Settings
from .validator import ConfigValidationError, ConfigValidator

__all__ = ["ConfigManager", "ConfigValidationError", "ConfigValidator", "POLICY_CONFIG_SCHEMA", "Settings"]
