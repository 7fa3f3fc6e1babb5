"""Configuration: pydantic settings and credential providers."""

from switchboard.config.secrets import (
    CompositeSecretProvider,
    DockerSecretProvider,
    EnvSecretProvider,
    SecretProvider,
    create_secret_provider,
)
from switchboard.config.settings import Settings, load_settings

__all__ = [
    "CompositeSecretProvider",
    "DockerSecretProvider",
    "EnvSecretProvider",
    "SecretProvider",
    "Settings",
    "create_secret_provider",
    "load_settings",
]
