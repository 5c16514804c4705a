"""Simple YAML configuration loader for SonoFlow."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


class SonoFlowConfig:
    """SonoFlow configuration loader.

    Values are read with dot notation (``config.get('server.port')``). A
    configuration file is optional; without one every lookup falls back to
    its default and credentials are taken from the environment.
    """

    def __init__(self, config_path: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file
            data: Already-parsed configuration, used instead of a file
        """
        self.config_file = Path(config_path) if config_path else None

        if self.config_file is not None:
            if not self.config_file.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_file}")
            logger.info(f"Loading configuration from: {self.config_file}")
            self.config = self._load_config()
        else:
            self.config = dict(data or {})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SonoFlowConfig":
        return cls(data=data)

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e

        if not config:
            raise ConfigurationError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ConfigurationError("Configuration file must contain a mapping at the top level")

        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        google = config.get('google_cloud') or {}
        creds_path = google.get('credentials_path')
        if creds_path and not os.path.isabs(creds_path):
            google['credentials_path'] = str(config_dir / creds_path)

        log_config = config.get('logging') or {}
        log_path = log_config.get('file_path')
        if log_path and not os.path.isabs(log_path):
            log_config['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'google_cloud.api_key').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_google_credentials_path(self) -> Optional[str]:
        """Service account file for Google Speech, from config or GOOGLE_APPLICATION_CREDENTIALS."""
        return self.get('google_cloud.credentials_path') or os.environ.get('GOOGLE_APPLICATION_CREDENTIALS')

    def get_google_api_key(self) -> Optional[str]:
        """API key for Google Speech, from config or GOOGLE_CLOUD_API_KEY."""
        return self.get('google_cloud.api_key') or os.environ.get('GOOGLE_CLOUD_API_KEY')

    def get_openai_api_key(self) -> Optional[str]:
        """API key for Whisper batch transcription, from config or OPENAI_API_KEY."""
        return self.get('openai.api_key') or os.environ.get('OPENAI_API_KEY')
