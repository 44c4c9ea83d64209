"""API integration layer."""

from .client import YtubeClient

__all__ = ["YtubeClient"]
