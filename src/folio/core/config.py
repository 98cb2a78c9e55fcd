import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from folio.core.exceptions import ConfigError
from folio.core.ordering import OrderingPolicy, OrderMode

CONFIG_FILENAME = ".folio.toml"


def _deep_merge(destination: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    """Merge source into destination, with source values overwriting."""
    for key, value in source.items():
        if isinstance(value, Mapping) and key in destination and isinstance(destination[key], Mapping):
            destination[key] = _deep_merge(dict(destination[key]), dict(value))
        else:
            destination[key] = value
    return destination


class PathsSettings(BaseModel):
    """Path configuration.

    All paths are relative to ``site_root`` unless absolute.
    """

    site_root: Path = Field(default_factory=Path.cwd, description="Root directory of the site")
    content_dir: Path = Field(default=Path("content"), description="Directory of source documents")
    output_dir: Path = Field(default=Path("_site"), description="Directory for rendered artifacts")

    @property
    def abs_content_dir(self) -> Path:
        return self._resolve(self.content_dir)

    @property
    def abs_output_dir(self) -> Path:
        return self._resolve(self.output_dir)

    def _resolve(self, path: Path) -> Path:
        if path.is_absolute():
            return path
        return self.site_root / path


class OrderingSettings(BaseModel):
    """Ordering policy handed to the collection indexer."""

    field: str = Field(default="order", description="Front-matter field used as the sort key")
    mode: OrderMode = Field(default=OrderMode.NATURAL, description="Comparison rule for sort keys")
    descending: bool = Field(default=False, description="Reverse the sort direction")

    def as_policy(self) -> OrderingPolicy:
        return OrderingPolicy(field=self.field, mode=self.mode, descending=self.descending)


class BuildSettings(BaseModel):
    site_title: str = Field(default="Articles", description="Heading of the index page")
    encoding: str = Field(default="utf-8", description="Encoding of source documents")
    patterns: list[str] = Field(default_factory=lambda: ["*.md", "*.markdown"])
    workers: int = Field(default=4, ge=1, description="Threads used for parsing and writing")


class FolioConfig(BaseSettings):
    """Root configuration for folio.

    Supports environment variable overrides with the pattern
    FOLIO_SECTION__KEY (e.g., FOLIO_BUILD__WORKERS).
    """

    paths: PathsSettings = Field(default_factory=PathsSettings)
    ordering: OrderingSettings = Field(default_factory=OrderingSettings)
    build: BuildSettings = Field(default_factory=BuildSettings)

    model_config = SettingsConfigDict(
        extra="ignore",
        env_prefix="FOLIO_",
        env_nested_delimiter="__",
    )

    @classmethod
    def load(cls, site_root: Path | None = None) -> "FolioConfig":
        """Loads configuration from .folio.toml and environment variables.

        Priority (highest to lowest):
        1. Environment variables (FOLIO_SECTION__KEY)
        2. Config file (.folio.toml)
        3. Defaults
        """
        root_path = site_root if site_root is not None else Path.cwd()
        config_file = root_path / CONFIG_FILENAME

        file_settings: dict[str, Any] = {}
        if config_file.is_file():
            try:
                with config_file.open("rb") as f:
                    file_settings = tomllib.load(f)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigError(str(config_file), str(exc)) from exc

        try:
            env_settings = cls().model_dump(exclude_unset=True)
            merged_config = _deep_merge(file_settings, env_settings)
            merged_config.setdefault("paths", {})["site_root"] = root_path
            return cls.model_validate(merged_config)
        except ValidationError as exc:
            raise ConfigError(str(config_file), str(exc)) from exc
