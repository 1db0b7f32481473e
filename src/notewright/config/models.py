"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, notewright.toml only carries
overrides. A fresh vault needs nothing at all; templates are read from
``Templates/`` and no presets are defined.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from notewright.domain.matching import PresetMatchOptions


class TemplatesConfig(BaseModel):
    """[templates] section."""

    model_config = {"frozen": True}

    folder: str = "Templates"
    extensions: list[str] = Field(default_factory=lambda: ["md"])
    debounce_ms: int = Field(default=300, ge=0)

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        cleaned = [ext.strip().lower().lstrip(".") for ext in value]
        return [ext for ext in cleaned if ext] or ["md"]

    @property
    def debounce_delay(self) -> float:
        return self.debounce_ms / 1000


class TemplaterConfig(BaseModel):
    """[templater] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    date_format: str = "%Y-%m-%d"


class MatchingConfig(BaseModel):
    """[matching] section."""

    model_config = {"frozen": True}

    enable_field_name_matching: bool = True
    field_name_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    filename_match_weight: float = Field(default=0.7, ge=0.0, le=1.0)
    baseline_score: float = Field(default=0.1, ge=0.0, le=1.0)

    def to_options(self) -> PresetMatchOptions:
        return PresetMatchOptions(
            enable_field_name_matching=self.enable_field_name_matching,
            field_name_weight=self.field_name_weight,
            filename_match_weight=self.filename_match_weight,
            baseline_score=self.baseline_score,
        )
