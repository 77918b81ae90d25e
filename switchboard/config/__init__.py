"""
Switchboard Configuration

Environment-driven settings.
"""

from .schemas import PROVIDER_KEYS, AppSettings

__all__ = [
    "AppSettings",
    "PROVIDER_KEYS",
]
