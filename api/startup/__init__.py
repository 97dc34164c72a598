"""Startup modules for component initialization.

- StartupManager: validate config, connect, provision, build search pipelines
- ConfigValidator: fail fast on invalid settings
"""

from .manager import StartupManager
from .config_validator import ConfigValidator, ConfigValidationError

__all__ = [
    'StartupManager',
    'ConfigValidator',
    'ConfigValidationError',
]
