"""
Secret Provider - Backend credential lookup
===========================================

Backends never read ``os.environ`` directly; they ask a SecretProvider for
their API key. Supported sources:
- Environment variables (default)
- Docker secrets (/run/secrets/)
- A composite that tries several sources in order

Architecture:
    SecretProvider (ABC)
        ├─ EnvSecretProvider (default, reads from environment)
        ├─ DockerSecretProvider (reads from /run/secrets/)
        └─ CompositeSecretProvider (first provider that has the key wins)
"""

import os
import logging
from abc import ABC, abstractmethod
from typing import Optional
from pathlib import Path

from switchboard.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class SecretProvider(ABC):
    """Unified interface for reading credentials from different backends."""

    @abstractmethod
    def get_secret(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a secret value

        Args:
            key: Secret key
            default: Default value if secret not found

        Returns:
            Secret value or default
        """
        pass

    @abstractmethod
    def has_secret(self, key: str) -> bool:
        """Check if a non-empty secret exists"""
        pass

    def get_required(self, key: str) -> str:
        """
        Get a required secret value

        Raises:
            ConfigurationError: If the secret is missing or empty
        """
        value = self.get_secret(key)
        if not value:
            raise ConfigurationError(key)
        return value


class EnvSecretProvider(SecretProvider):
    """
    Environment variable secret provider

    Reads secrets from environment variables (e.g., from .env file).
    This is the default provider.
    """

    def __init__(self, prefix: str = ""):
        """
        Args:
            prefix: Optional prefix for environment variables
                   (e.g., "PROD_" -> reads PROD_OPENAI_API_KEY)
        """
        self.prefix = prefix

    def _env_key(self, key: str) -> str:
        return f"{self.prefix}{key}" if self.prefix else key

    def get_secret(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = os.getenv(self._env_key(key)) or default

        if value:
            logger.debug("Secret '%s' loaded from environment", key)
        else:
            logger.debug("Secret '%s' not found in environment", key)

        return value

    def has_secret(self, key: str) -> bool:
        return bool(os.getenv(self._env_key(key)))


class DockerSecretProvider(SecretProvider):
    """
    Docker secrets provider

    Reads secrets from /run/secrets/ (Docker Swarm/Compose secrets).

    Example:
        # docker-compose.yml
        secrets:
          OPENAI_API_KEY:
            file: ./secrets/openai_api_key.txt

        # In container: /run/secrets/OPENAI_API_KEY
    """

    def __init__(self, secrets_dir: str | Path = "/run/secrets"):
        self.secrets_dir = Path(secrets_dir)

    def get_secret(self, key: str, default: Optional[str] = None) -> Optional[str]:
        secret_file = self.secrets_dir / key

        try:
            value = secret_file.read_text().strip()
        except FileNotFoundError:
            logger.debug("Secret '%s' not found in Docker secrets", key)
            return default
        except OSError as e:
            logger.warning("Error reading Docker secret '%s': %s", key, e)
            return default

        logger.debug("Secret '%s' loaded from Docker secrets", key)
        return value or default

    def has_secret(self, key: str) -> bool:
        return bool(self.get_secret(key))


class CompositeSecretProvider(SecretProvider):
    """
    Composite secret provider that tries multiple providers

    Example:
        provider = CompositeSecretProvider([
            DockerSecretProvider(),  # Try Docker secrets first
            EnvSecretProvider()      # Fall back to environment
        ])
    """

    def __init__(self, providers: list[SecretProvider]):
        self.providers = providers

    def get_secret(self, key: str, default: Optional[str] = None) -> Optional[str]:
        for provider in self.providers:
            if provider.has_secret(key):
                return provider.get_secret(key)

        logger.debug("Secret '%s' not found in any provider, using default", key)
        return default

    def has_secret(self, key: str) -> bool:
        return any(provider.has_secret(key) for provider in self.providers)


def create_secret_provider(docker_secrets_dir: str | Path | None = None) -> SecretProvider:
    """
    Environment-only provider, or Docker secrets first when a directory is given.
    """
    if docker_secrets_dir:
        return CompositeSecretProvider([
            DockerSecretProvider(docker_secrets_dir),
            EnvSecretProvider(),
        ])
    return EnvSecretProvider()


__all__ = [
    'CompositeSecretProvider',
    'DockerSecretProvider',
    'EnvSecretProvider',
    'SecretProvider',
    'create_secret_provider',
]
