"""
Switchboard API Routers
"""

from .errors import register_exception_handlers
from .routes import router as capabilities_router
from .stream import router as stream_router

__all__ = [
    "capabilities_router",
    "register_exception_handlers",
    "stream_router",
]
