"""HTTP API for YT2Blog.

This module provides the RESTful endpoints for article generation, quality
verification, and instruction enhancement.
"""

from .app import create_app
from .dependencies import get_settings, reset_dependencies, set_settings
from .routes import router

__all__ = [
    "create_app",
    "router",
    "get_settings",
    "set_settings",
    "reset_dependencies",
]
