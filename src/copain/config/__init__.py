"""
Configuration package.
"""

from copain.config.settings import (
    CopainConfig,
    TimeoutConfig,
    get_settings,
    load_config,
    reset_settings,
)

__all__ = [
    "CopainConfig",
    "TimeoutConfig",
    "get_settings",
    "load_config",
    "reset_settings",
]
