"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``NOTEWRIGHT_*`` prefix, ``__`` for nesting
  3. TOML file    — ``notewright.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

The TOML source reuses :func:`notewright.config.discovery.find_config`.
"""

from __future__ import annotations

import threading
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import click
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from notewright.config.discovery import find_config
from notewright.config.models import MatchingConfig, TemplaterConfig, TemplatesConfig
from notewright.domain.presets import FrontmatterPreset, sanitize_field


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``notewright.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for the TOML path during construction.
_tls = threading.local()


class NotewrightSettings(BaseSettings):
    """Settings for the whole notewright CLI.

    Attributes:
        vault_root: Vault directory (parent of ``notewright.toml``, the
            ``--vault`` flag, or CWD when neither is given).
        config_path: The TOML file actually loaded, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "NOTEWRIGHT_",
        "env_nested_delimiter": "__",
    }

    vault_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    templates: TemplatesConfig = Field(default_factory=TemplatesConfig)
    templater: TemplaterConfig = Field(default_factory=TemplaterConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    presets: list[FrontmatterPreset] = Field(default_factory=list)

    @field_validator("presets", mode="before")
    @classmethod
    def _clean_preset_fields(cls, value: Any) -> Any:
        """Pass each ``[[presets.fields]]`` table through lenient sanitizing.

        Fields without a key or label are dropped and unknown types become
        ``text``; duplicate keys are still rejected by the preset model.
        """
        if not isinstance(value, list):
            return value
        cleaned: list[Any] = []
        for raw in value:
            if isinstance(raw, Mapping) and isinstance(raw.get("fields"), list):
                fields = [sanitize_field(item) for item in raw["fields"]]
                raw = {**raw, "fields": [f for f in fields if f is not None]}
            cleaned.append(raw)
        return cleaned

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        vault_root: Path | None = None,
        **cli_flags: Any,
    ) -> NotewrightSettings:
        """Construct settings from a CLI invocation.

        An explicit *config_path* that does not exist is an error rather
        than a silent fallback to defaults.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if not p.is_file():
                msg = f"Config file not found: {config_path}"
                raise click.ClickException(msg)
            toml_path = p
        else:
            toml_path = find_config(vault_root)

        resolved_root = vault_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(
                vault_root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        finally:
            _tls.toml_path = None
