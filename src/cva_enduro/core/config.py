"""Application configuration using pydantic-settings with a TOML file layer.

Values come from ``cva-enduro.toml`` (searched in the working directory,
``~/.config`` and ``/etc``) and from ``CVA_ENDURO_`` environment variables,
which win over the file. Nested values use ``__`` in variable names, e.g.
``CVA_ENDURO_TEMPORAL__TASK_QUEUE``.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from cva_enduro.core.exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError

CONFIG_NAME = "cva-enduro.toml"
CONFIG_SEARCH_PATHS = (Path("."), Path("~/.config"), Path("/etc"))


class BucketConfig(BaseModel):
    """S3-compatible report bucket configuration."""

    bucket: str = Field(min_length=1)
    region: str = "us-east-1"
    endpoint_url: str | None = None  # MinIO / LocalStack override
    prefix: str = "reports/"
    access_key: str | None = None
    secret_key: str | None = None
    path_style: bool = False


class EngineConfig(BaseModel):
    """Workflow engine address and workflow identification."""

    address: str = "localhost:7233"
    namespace: str = "default"
    task_queue: str = Field(min_length=1)
    workflow_name: str = Field(min_length=1)


class WorkerConfig(BaseModel):
    """Worker limits."""

    max_concurrent_sessions: int = Field(default=1, ge=1)


class RedisConfig(BaseModel):
    """Redis activity history configuration."""

    host: str = "localhost"
    port: int = 6379
    db: int = 0


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = SettingsConfigDict(
        env_prefix="CVA_ENDURO_",
        env_nested_delimiter="__",
    )

    # Human readable logs when true, JSON logs otherwise.
    debug: bool = False
    # 0 logs warnings and errors only, each step up adds a level.
    verbosity: int = 0

    reports_bucket: BucketConfig
    temporal: EngineConfig = Field(default_factory=dict, validate_default=True)
    worker: WorkerConfig = Field(default_factory=WorkerConfig)
    redis: RedisConfig | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment first so it overrides values read from the config file.
        return env_settings, init_settings, file_secret_settings


def resolve_config_file(config_file: str | Path | None = None) -> Path | None:
    """Return the configuration file to load, or None when there is none."""
    if config_file:
        path = Path(config_file).expanduser()
        if not path.is_file():
            raise ConfigNotFoundError(f"configuration file not found: {config_file}")
        return path

    for directory in CONFIG_SEARCH_PATHS:
        candidate = directory.expanduser() / CONFIG_NAME
        if candidate.is_file():
            return candidate
    return None


def format_validation_errors(exc: ValidationError) -> list[str]:
    """Render every pydantic error as ``<field path>: <problem>``."""
    messages: list[str] = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"])
        if err["type"] in ("missing", "string_too_short"):
            problem = "missing required value"
        elif err["type"] == "greater_than_equal":
            problem = f"{err['input']} is less than the minimum value ({err['ctx']['ge']})"
        else:
            problem = err["msg"]
        messages.append(f"{field}: {problem}")
    return messages


def load_settings(config_file: str | Path | None = None) -> AppSettings:
    """Load, merge and validate settings.

    Raises:
        ConfigNotFoundError: ``config_file`` was given but does not exist.
        ConfigError: the configuration file could not be parsed.
        ConfigValidationError: listing every invalid or missing value.
    """
    data: dict[str, Any] = {}
    path = resolve_config_file(config_file)
    if path is not None:
        try:
            with path.open("rb") as fh:
                data = tomllib.load(fh)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigError(f"failed to read configuration file {path}: {exc}") from exc

    try:
        return AppSettings(**data)
    except ValidationError as exc:
        raise ConfigValidationError(format_validation_errors(exc)) from exc
