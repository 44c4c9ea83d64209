"""Configuration management for ytube."""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from ..core.models import DEFAULT_BASE_URL

logger = logging.getLogger(__name__)

API_KEY_ENV_VAR = "YOUTUBE_API_KEY"


class APIConfig(BaseModel):
    """API configuration."""
    base_url: str = DEFAULT_BASE_URL
    api_key: str | None = None
    timeout: float = Field(default=5.0, gt=0.0)


class YtubeConfig(BaseModel):
    """Main ytube configuration."""
    api: APIConfig = Field(default_factory=APIConfig)

    # Logging
    log_level: str = "INFO"
    log_file: str | None = None


class ConfigManager:
    """Manages configuration loading and saving."""

    DEFAULT_CONFIG_NAME = "ytube.yaml"

    def __init__(self, config_path: Path | None = None):
        """Initialize config manager."""
        self.config_path = config_path or self._get_default_config_path()
        self._config: YtubeConfig | None = None

    def load(self) -> YtubeConfig:
        """Load configuration from file or create default."""
        if self.config_path.exists():
            try:
                with open(self.config_path, encoding='utf-8') as f:
                    data = yaml.safe_load(f) or {}
                    self._config = YtubeConfig(**data)
            except Exception as e:
                logger.warning(f"Error loading config from {self.config_path}: {e}")
                logger.warning("Using default configuration")
                self._config = YtubeConfig()
        else:
            logger.info(f"Config file not found at {self.config_path}, creating default configuration")
            self._config = YtubeConfig()
            self.save()

        return self._config

    def save(self, config: YtubeConfig | None = None) -> None:
        """Save configuration to file."""
        config_to_save = config or self._config
        if config_to_save is None:
            raise ValueError("No configuration to save")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        data = config_to_save.model_dump()
        with open(self.config_path, 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False, indent=2)

        logger.info(f"Configuration saved to {self.config_path}")

    def _get_default_config_path(self) -> Path:
        """Get default configuration file path."""
        # Current directory wins over the user config dir
        current_dir = Path.cwd() / self.DEFAULT_CONFIG_NAME
        if current_dir.exists():
            return current_dir

        config_dir = Path.home() / ".config" / "ytube"
        return config_dir / self.DEFAULT_CONFIG_NAME


def resolve_api_key(config: YtubeConfig, api_key: str | None = None) -> str | None:
    """
    Pick the API key to use.

    Args:
        config: Loaded configuration
        api_key: Optional API key passed directly

    Returns:
        The explicit key, the configured key or the YOUTUBE_API_KEY
        environment variable, in that order; None if none is set.
    """
    if api_key:
        return api_key.strip()

    if config.api.api_key:
        return config.api.api_key.strip()

    env_key = os.getenv(API_KEY_ENV_VAR)
    if env_key:
        return env_key.strip()

    return None


def load_config(config_path: Path | None = None) -> YtubeConfig:
    """Load configuration from specific path."""
    return ConfigManager(config_path).load()
