# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
Simple configuration loader for the identity bridge
Loads the deployed config.json and reports the runtime environment
"""
import json
import os
import time
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from .config_types import BridgeConfig, Environment
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

LOCAL_CONFIG_PATH = Path('idbridge/.config/config.json')


class ConfigLoader:
    """Simple configuration loader for the identity bridge"""

    def __init__(self, config_path: Optional[str] = None):
        self._config_path = config_path
        self._cache: Optional[Dict[str, Any]] = None
        self._cache_time: float = 0
        self.CACHE_TTL = 300  # 5 minutes

    def _candidate_path(self) -> Path:
        """
        Pick the configuration file

        - Explicit path passed to the loader
        - CONFIG_PATH environment variable (deployed location)
        - Local development: ./idbridge/.config/config.json
        """
        if self._config_path:
            return Path(self._config_path)
        env_path = os.environ.get('CONFIG_PATH')
        if env_path:
            return Path(env_path)
        return LOCAL_CONFIG_PATH

    def load_config(self) -> Dict[str, Any]:
        """
        Load raw configuration (cached for CACHE_TTL seconds)

        Raises:
            ConfigurationError: If the file is missing, unreadable or lacks
                a security section
        """
        if self._cache and (time.time() - self._cache_time) < self.CACHE_TTL:
            return self._cache

        config_path = self._candidate_path()
        try:
            with open(config_path, 'r') as f:
                config = json.load(f)
        except (OSError, json.JSONDecodeError) as error:
            logger.error(f"Failed to load configuration from {config_path}: {error}")
            logger.error("Set CONFIG_PATH or copy idbridge/.config/config.example.json to config.json")
            raise ConfigurationError(f"Configuration not found or invalid: {error}") from error

        if not isinstance(config, dict) or 'security' not in config:
            raise ConfigurationError("Invalid config: missing security section")

        logger.info(f"Loaded config from: {config_path}")
        self._cache = config
        self._cache_time = time.time()
        return config

    def get_bridge_config(self) -> BridgeConfig:
        """Load and validate the full configuration"""
        return BridgeConfig.from_dict(self.load_config())

    def get_environment(self) -> str:
        """
        Get environment from ENV variable
        CRITICAL: No defaults - missing ENV is a deployment error, so dev
        authenticator defaults never leak into production
        """
        # Special case: if TESTING=true, we're in test mode
        if os.getenv('TESTING') == 'true':
            return Environment.TEST.value

        env = os.getenv('ENV')
        if not env:
            logger.error("CRITICAL: ENV environment variable is not set!")
            logger.error("Set ENV=dev|test|stage|prod before starting the application")
            raise ConfigurationError("ENV environment variable MUST be set - refusing to start without explicit environment")

        valid = [e.value for e in Environment]
        if env not in valid:
            raise ConfigurationError(f"Unknown environment '{env}'. Expected one of {valid}")
        return env

    def clear_cache(self) -> None:
        """Clear configuration cache"""
        self._cache = None
        self._cache_time = 0


# Export singleton instance
config_loader = ConfigLoader()
