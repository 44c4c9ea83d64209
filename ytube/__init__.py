"""
ytube

A thin asynchronous client for the YouTube Data API v3.
"""

__version__ = "0.1.0"

from .api.client import YtubeClient
from .config.settings import YtubeConfig
from .core.models import APIResponse, new_error

__all__ = [
    "YtubeClient",
    "YtubeConfig",
    "APIResponse",
    "new_error",
]
