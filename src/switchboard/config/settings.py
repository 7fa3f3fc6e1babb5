"""
Pydantic Settings Configuration
=================================

Type-safe configuration for the routing layer. Values are validated at
startup; credentials themselves are never stored here, only the names of the
environment variables that carry them.
"""

from typing import Optional
from pathlib import Path
from importlib import metadata
from pydantic import BaseModel, Field, field_validator, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml


def _project_version() -> str:
    """Resolve the project version from package metadata."""
    try:
        return metadata.version("switchboard")
    except metadata.PackageNotFoundError:
        return "0.0.0-dev"


class AgentBackendConfig(BaseModel):
    """Per-backend request parameters"""
    model: str = Field(..., description="Backend model name")
    credential_env: str = Field(..., description="Environment variable holding the API key")
    max_tokens: int = Field(8192, ge=1, description="Max output tokens for generate/stream_generate")
    chat_max_tokens: int = Field(4096, ge=1, description="Max output tokens for chat/stream_chat")
    temperature: Optional[float] = Field(None, ge=0.0, le=2.0, description="Sampling temperature for generation")
    chat_temperature: Optional[float] = Field(None, ge=0.0, le=2.0, description="Sampling temperature for chat")

    model_config = ConfigDict(extra='forbid')


def _claude_defaults() -> AgentBackendConfig:
    return AgentBackendConfig(
        model="claude-sonnet-4-20250514",
        credential_env="ANTHROPIC_API_KEY",
        max_tokens=8192,
        chat_max_tokens=4096,
    )


def _gemini_defaults() -> AgentBackendConfig:
    return AgentBackendConfig(
        model="gemini-1.5-pro",
        credential_env="GOOGLE_AI_API_KEY",
        max_tokens=8192,
        chat_max_tokens=8192,
        temperature=0.7,
    )


def _openai_defaults() -> AgentBackendConfig:
    return AgentBackendConfig(
        model="gpt-4o",
        credential_env="OPENAI_API_KEY",
        max_tokens=4096,
        chat_max_tokens=2048,
        temperature=0.7,
        chat_temperature=0.8,
    )


class BackendsConfig(BaseModel):
    """Generation backend configuration"""
    claude: AgentBackendConfig = Field(default_factory=_claude_defaults)
    gemini: AgentBackendConfig = Field(default_factory=_gemini_defaults)
    openai: AgentBackendConfig = Field(default_factory=_openai_defaults)
    default_chat_agent: str = Field("openai", description="Backend used by execute_chat without a preference")

    model_config = ConfigDict(extra='forbid')

    def for_agent(self, agent: str) -> AgentBackendConfig:
        config = getattr(self, agent, None)
        if not isinstance(config, AgentBackendConfig):
            raise KeyError(f"No backend configuration for agent '{agent}'")
        return config


class PromptsConfig(BaseModel):
    """Prompt template configuration"""
    prompts_dir: Optional[Path] = Field(None, description="Directory with <category>.md prompt overrides")
    cache_ttl_seconds: int = Field(300, ge=0, description="Override cache time-to-live")

    model_config = ConfigDict(extra='forbid')


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = Field("INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field("json", description="Log format (json, text)")

    @field_validator('level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level"""
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(sorted(valid_levels))}")
        return v_upper

    @field_validator('format')
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in {'json', 'text'}:
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    model_config = ConfigDict(extra='forbid')


class Settings(BaseSettings):
    """
    Main application settings with type validation.

    Configuration is loaded from:
    1. YAML config file (if provided)
    2. Environment variables with SWITCHBOARD_ prefix (override)
    3. Default values (fallback)

    Environment variable mapping uses double-underscore nesting:
      SWITCHBOARD_BACKENDS__CLAUDE__MODEL
      SWITCHBOARD_BACKENDS__DEFAULT_CHAT_AGENT
      SWITCHBOARD_LOGGING__LEVEL
    """

    backends: BackendsConfig = Field(default_factory=BackendsConfig)
    prompts: PromptsConfig = Field(default_factory=PromptsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    docker_secrets_dir: Optional[Path] = Field(None, description="Read credentials from Docker secrets before the environment")

    project_name: str = Field("Switchboard", description="Project name")
    version: str = Field(default_factory=_project_version, description="Project version")

    model_config = SettingsConfigDict(
        env_prefix='SWITCHBOARD_',
        env_nested_delimiter='__',
        extra='ignore',
        validate_assignment=True,
    )

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> "Settings":
        """
        Load settings from a YAML file.

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If configuration is invalid
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls()


def load_settings(config_path: Optional[str | Path] = None) -> Settings:
    """
    Load and validate application settings.

    Args:
        config_path: Optional path to YAML config file

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path:
        return Settings.from_yaml(config_path)
    return Settings.from_env()


__all__ = [
    'AgentBackendConfig',
    'BackendsConfig',
    'LoggingConfig',
    'PromptsConfig',
    'Settings',
    'load_settings',
]
