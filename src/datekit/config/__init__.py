"""
datekit.config
~~~~~~~~~~~~~~

Settings (environment driven, ``DATEKIT_*``) and logging set-up.
"""

from datekit.config.logging import configure_logging
from datekit.config.settings import DatekitSettings, get_settings

__all__ = [
    "DatekitSettings",
    "configure_logging",
    "get_settings",
]
