"""
Configuration and logging setup.
"""

from .config import Settings, settings
from .logging_config import configure_logging

__all__ = ['Settings', 'settings', 'configure_logging']
