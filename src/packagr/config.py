"""Configuration models and loading logic."""

from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar, Literal

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
    YamlConfigSettingsSource,
)

from packagr.errors import ConfigurationError

DEFAULT_SETTINGS_FILE = Path(".packagr.yaml")
SETTINGS_FILE_ENV = "PACKAGR_SETTINGS_FILE"
DEFAULT_PACKAGE_DIRECTORY = "./.package"


class MicroserviceConfig(BaseModel):
    """One sibling service whose dependencies and library output are bundled."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    path: str = Field(min_length=1)
    package_name: str = Field(alias="packageName", min_length=1)


class PackagingConfig(BaseModel):
    """Validated content of the project's ``packagr.json``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    compiled_sources_pattern: str = Field(
        validation_alias=AliasChoices("compiledSourcesPattern", "compiledSources", "compiled_sources_pattern"),
        min_length=1,
    )
    microservices: dict[str, MicroserviceConfig] = Field(min_length=1)
    package_directory: str = Field(
        default=DEFAULT_PACKAGE_DIRECTORY,
        validation_alias=AliasChoices("packageDirectory", "package_directory"),
        min_length=1,
    )

    def output_directory(self, project_root: Path) -> Path:
        """Resolve the package directory against the project root."""

        return (project_root / self.package_directory).resolve()


class AppSettings(BaseSettings):
    """Tool-level settings, independent of any one project's packagr.json."""

    _yaml_file_override: ClassVar[Path | None] = None

    descriptor_file: str = "serverless.yml"
    manifest_file: str = "package.json"
    config_file: str = "packagr.json"
    archive_name: str = "package.zip"
    dependency_dir: str = "node_modules"
    internal_library_subpath: str = "lib/src"
    npm_executable: str = "npm"
    npm_timeout_seconds: float | None = Field(default=None, gt=0.0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: Path | None = None

    model_config = SettingsConfigDict(
        env_prefix="PACKAGR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Use YAML defaults while allowing env vars to override values."""

        yaml_file = resolve_settings_file(cls._yaml_file_override)
        yaml_settings = YamlConfigSettingsSource(settings_cls, yaml_file=yaml_file)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            yaml_settings,
            file_secret_settings,
        )

    def as_dict(self) -> dict[str, object]:
        """Return settings as a standard nested dictionary."""

        return self.model_dump(mode="json")


def resolve_settings_file(override: Path | None = None, project_root: Path | None = None) -> Path:
    """Resolve settings file from explicit override, env var, or default."""

    chosen = override
    if chosen is None:
        env_value = os.getenv(SETTINGS_FILE_ENV)
        if env_value:
            chosen = Path(env_value)
    if chosen is None:
        chosen = DEFAULT_SETTINGS_FILE

    if not chosen.is_absolute():
        chosen = ((project_root or Path.cwd()) / chosen).resolve()
    return chosen


def load_settings(settings_file: Path | None = None, project_root: Path | None = None) -> AppSettings:
    """Load settings with YAML defaults and environment variable overrides.

    A settings file that does not exist contributes no values. Invalid values
    or an unreadable settings file raise :class:`ConfigurationError`.
    """

    AppSettings._yaml_file_override = resolve_settings_file(settings_file, project_root=project_root)
    try:
        return AppSettings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid packagr settings: {format_validation_error(exc)}") from exc
    except (OSError, SettingsError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot read packagr settings: {exc}") from exc
    finally:
        AppSettings._yaml_file_override = None


def format_validation_error(exc: ValidationError) -> str:
    """Render pydantic errors as one line of ``location: message`` pairs."""

    return "; ".join(f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors())
