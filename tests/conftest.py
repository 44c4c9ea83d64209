"""Pytest configuration and fixtures."""

import shutil
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from ytube.api.client import YtubeClient
from ytube.config.settings import YtubeConfig


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config():
    """Create a test configuration."""
    return YtubeConfig()


@pytest.fixture
def mock_client(test_config):
    """Create API client with a key and mocked HTTP client."""
    client = YtubeClient(test_config, http_client=AsyncMock())
    client.set_key("test-key")
    return client


@pytest.fixture
def keyless_client(test_config):
    """Create API client without a key and with mocked HTTP client."""
    return YtubeClient(test_config, http_client=AsyncMock())
