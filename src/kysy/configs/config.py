"""Configuration management using pydantic-settings.

**Not a singleton** — each call to ``get_app_config()`` builds a fresh
config so that tests and CLI overrides never leak between invocations.

Priority order (highest first):

1. Init kwargs (command-line overrides)
2. Environment variables (``KYSY_`` prefix, ``__`` nested delimiter)
3. ``.env`` dotenv file in the working directory
4. ``config.yaml`` inside the config directory
5. Field defaults

The config directory is ``config_dir`` from sources 1-3 (``KYSY_CONFIG_DIR``)
when set, otherwise ``$XDG_CONFIG_HOME/kysy``, otherwise ``~/.config/kysy``.
``config.yaml`` is always read from that same directory.
"""

import os
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .system import ContextConfig, InferenceConfig, LoggingConfig, PromptConfig

APP_NAME = "kysy"
CONFIG_FILE_NAME = "config.yaml"
DOTENV_FILE_PATH = Path(".env")
ENV_DELIMITER = "__"  # Nested environment variable delimiter
ENV_PREFIX = "KYSY_"  # Environment variable prefix for kysy

DEFAULT_ENCODING = "utf-8"


def resolve_config_dir() -> Path:
    """Return the per-user configuration directory for kysy."""
    explicit = os.environ.get(f"{ENV_PREFIX}CONFIG_DIR")
    if explicit:
        return Path(explicit).expanduser()
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / APP_NAME


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=DOTENV_FILE_PATH,
        env_file_encoding=DEFAULT_ENCODING,
        env_nested_delimiter=ENV_DELIMITER,
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
    )

    config_dir: Path = Field(
        default_factory=resolve_config_dir,
        description="Directory holding the context file and config.yaml",
    )

    inference: InferenceConfig = Field(
        default_factory=InferenceConfig,
        description="Inference server connection settings",
    )

    context: ContextConfig = Field(
        default_factory=ContextConfig,
        description="Conversation context persistence settings",
    )

    prompt: PromptConfig = Field(
        default_factory=PromptConfig,
        description="Prompt composition settings",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Diagnostic logging settings",
    )

    @field_validator("config_dir", mode="after")
    @classmethod
    def _expand_config_dir(cls, value: Path) -> Path:
        return value.expanduser()

    @property
    def context_file(self) -> Path:
        """Path of the persisted conversation context."""
        return self.config_dir / self.context.filename

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # config.yaml lives in whichever directory the higher-priority
        # sources pick for ``config_dir``
        yaml_settings = _ConfigDirYamlSettingsSource(
            settings_cls, [init_settings, env_settings, dotenv_settings]
        )
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            yaml_settings,
            file_secret_settings,
        )


class _ConfigDirYamlSettingsSource(PydanticBaseSettingsSource):
    """Loads ``config.yaml`` from the resolved config directory."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        dir_sources: list[PydanticBaseSettingsSource],
    ) -> None:
        super().__init__(settings_cls)
        self.dir_sources = dir_sources

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        # Values come from the wrapped YAML source in __call__
        return None, field_name, False

    def config_dir(self) -> Path:
        """Return the directory ``AppConfig.config_dir`` will resolve to."""
        for source in self.dir_sources:
            value = source().get("config_dir")
            if value:
                return Path(value).expanduser()
        return resolve_config_dir()

    def __call__(self) -> dict[str, Any]:
        yaml_file = self.config_dir() / CONFIG_FILE_NAME
        if not yaml_file.is_file():
            return {}
        return YamlConfigSettingsSource(
            self.settings_cls,
            yaml_file=yaml_file,
            yaml_file_encoding=DEFAULT_ENCODING,
        )()


def get_app_config(**overrides) -> AppConfig:
    """Build the application configuration.

    Keyword arguments take precedence over every other source.
    """
    return AppConfig(**overrides)
