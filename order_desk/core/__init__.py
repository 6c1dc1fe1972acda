"""
Core module initialization.
Exports configuration and logging utilities.
"""

from order_desk.core.config import (
    EnvironmentMode,
    OrderDefaults,
    Settings,
    get_settings,
    setup_logging,
)

__all__ = ["get_settings", "setup_logging", "Settings", "EnvironmentMode", "OrderDefaults"]
