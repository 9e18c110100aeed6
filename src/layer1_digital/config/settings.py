"""
Configuration for the Layer1 Digital SDK

Provides the explicit configuration object handed to the HTTP client and the
digital asset service at construction time, and loading of that object from
the process environment (optionally seeded from a .env file).
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Union
from urllib.parse import urlparse

from dotenv import load_dotenv

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.sandbox.layer1.com"
DEFAULT_TIMEOUT = 30.0

# Environment variable names
ENV_ASSET_POOL_ID = "LAYER1_ASSET_POOL_ID"
ENV_CLIENT_ID = "LAYER1_CLIENT_ID"
ENV_PRIVATE_KEY = "LAYER1_PRIVATE_KEY"
ENV_BASE_URL = "LAYER1_API_BASE_URL"
ENV_TIMEOUT = "LAYER1_TIMEOUT"


@dataclass(frozen=True)
class Layer1Config:
    """
    Configuration for Layer1 API access.

    Attributes:
        asset_pool_id: Default asset pool for pool-scoped operations
        client_id: Client identifier bound to the signing key (keyid)
        private_key: PKCS#8 RSA private key text, never shown in repr
        base_url: API base URL
        timeout: Request timeout in seconds
        verify_ssl: Whether to verify TLS certificates
    """
    asset_pool_id: str
    client_id: str
    private_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: bool = True

    def __post_init__(self):
        """Validate configuration."""
        missing = [
            name for name, value in (
                (ENV_ASSET_POOL_ID, self.asset_pool_id),
                (ENV_CLIENT_ID, self.client_id),
                (ENV_PRIVATE_KEY, self.private_key),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}",
                "MISSING_CONFIG",
                {"missing": missing}
            )

        parsed = urlparse(self.base_url or "")
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ConfigurationError(f"Invalid base URL format: {self.base_url}", "INVALID_BASE_URL")

        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive", "INVALID_TIMEOUT")

    @classmethod
    def from_env(
        cls,
        env_file: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> 'Layer1Config':
        """
        Load configuration from environment variables.

        Args:
            env_file: Optional .env file loaded before reading the environment;
                existing variables are not overridden
            environ: Mapping to read instead of os.environ

        Returns:
            Layer1Config: Validated configuration

        Raises:
            ConfigurationError: If required values are missing or malformed
        """
        if environ is None:
            if env_file is not None:
                if not Path(env_file).is_file():
                    raise ConfigurationError(f"Environment file not found: {env_file}", "FILE_NOT_FOUND")
                load_dotenv(env_file)
            else:
                load_dotenv()
            environ = os.environ

        raw_timeout = environ.get(ENV_TIMEOUT)
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise ConfigurationError(f"{ENV_TIMEOUT} must be a number: {raw_timeout}", "INVALID_TIMEOUT")

        config = cls(
            asset_pool_id=environ.get(ENV_ASSET_POOL_ID, ""),
            client_id=environ.get(ENV_CLIENT_ID, ""),
            private_key=environ.get(ENV_PRIVATE_KEY, ""),
            base_url=environ.get(ENV_BASE_URL) or DEFAULT_BASE_URL,
            timeout=timeout,
        )

        logger.info(f"Loaded configuration for client {config.client_id} against {config.base_url}")
        return config
