"""Preset matching — rank presets by how well they fit a template.

Two signals are weighted and summed, capped at 1.0:

- **filename**: the preset id (or its alphanumeric core, or one of its
  tokens of three or more characters) appears in the template's name or
  path.
- **field names**: share of the template's inferred variables that are
  also preset field keys.

A preset with fields but no signal gets a small baseline, so a preset
with structure still beats one without.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from notewright.domain.content import parse_template_content
from notewright.domain.models import TemplateDocument
from notewright.domain.presets import FrontmatterPreset

_PLACEHOLDER = re.compile(r"\{\{([^}]+)\}\}")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_MIN_TOKEN_LENGTH = 3


@dataclass(frozen=True)
class PresetMatchOptions:
    """Weights for the scoring signals."""

    enable_field_name_matching: bool = True
    field_name_weight: float = 0.3
    filename_match_weight: float = 0.7
    baseline_score: float = 0.1


@dataclass(frozen=True)
class PresetMatchResult:
    """A preset with its score in ``[0, 1]`` and the reasons behind it."""

    preset: FrontmatterPreset
    score: float
    reasons: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TemplateAnalysis:
    """Per-template data reused across every preset being scored."""

    variables: list[str]
    name: str
    path: str
    stripped_name: str
    stripped_path: str

    @property
    def variable_set(self) -> frozenset[str]:
        return frozenset(self.variables)


def extract_template_variables(content: str) -> list[str]:
    """Variables a template references, in first-seen order.

    ``{{ name }}`` placeholders count, and so does any frontmatter key
    whose string value contains a placeholder.
    """
    variables: list[str] = []
    for match in _PLACEHOLDER.finditer(content):
        name = match.group(1).strip()
        if name not in variables:
            variables.append(name)

    frontmatter, _body = parse_template_content(content)
    for key, value in frontmatter.items():
        if isinstance(value, str) and "{{" in value and key not in variables:
            variables.append(key)

    return variables


def analyze_template(template: TemplateDocument) -> TemplateAnalysis:
    name = template.name.lower()
    path = template.path.lower()
    return TemplateAnalysis(
        variables=extract_template_variables(template.content),
        name=name,
        path=path,
        stripped_name=_NON_ALNUM.sub("", name),
        stripped_path=_NON_ALNUM.sub("", path),
    )


def filename_matches_preset(analysis: TemplateAnalysis, preset: FrontmatterPreset) -> bool:
    preset_id = preset.id.strip().lower()
    if not preset_id:
        return False

    if preset_id in analysis.name or preset_id in analysis.path:
        return True

    stripped = _NON_ALNUM.sub("", preset_id)
    if stripped and (stripped in analysis.stripped_name or stripped in analysis.stripped_path):
        return True

    tokens = [token for token in _NON_ALNUM.split(preset_id) if len(token) >= _MIN_TOKEN_LENGTH]
    return any(token in analysis.name or token in analysis.path for token in tokens)


def field_name_score(analysis: TemplateAnalysis, preset: FrontmatterPreset) -> float:
    """Matching preset keys divided by the number of inferred variables."""
    if not preset.fields or not analysis.variables:
        return 0.0
    known = analysis.variable_set
    matches = sum(1 for item in preset.fields if item.key and item.key in known)
    return matches / len(analysis.variables)


def recommendation_text(result: PresetMatchResult) -> str:
    """Short human label for a match result."""
    name = result.preset.name
    if result.score >= 0.8:
        return f"Strongly recommended: {name} (close match)"
    if result.score >= 0.5:
        return f"Recommended: {name} (good match)"
    if result.score >= 0.3:
        return f"Worth considering: {name} (partial match)"
    return f"{name} (low match)"


class PresetMatcher:
    """Scores presets against templates with a fixed set of options."""

    def __init__(self, options: PresetMatchOptions | None = None) -> None:
        self.options = options or PresetMatchOptions()

    def score(self, template: TemplateDocument, preset: FrontmatterPreset) -> PresetMatchResult:
        return self._score(analyze_template(template), preset)

    def match_presets(
        self,
        template: TemplateDocument,
        presets: Sequence[FrontmatterPreset],
    ) -> list[PresetMatchResult]:
        """All presets, best first. Ties keep their input order."""
        analysis = analyze_template(template)
        results = [self._score(analysis, preset) for preset in presets]
        return sorted(results, key=lambda result: result.score, reverse=True)

    def get_best_match(
        self,
        template: TemplateDocument,
        presets: Sequence[FrontmatterPreset],
    ) -> PresetMatchResult | None:
        results = self.match_presets(template, presets)
        if results and results[0].score > 0:
            return results[0]
        return None

    def _score(self, analysis: TemplateAnalysis, preset: FrontmatterPreset) -> PresetMatchResult:
        opts = self.options
        reasons: list[str] = []
        total = 0.0

        if filename_matches_preset(analysis, preset):
            total += opts.filename_match_weight
            reasons.append("Filename match: template name contains the preset id")

        if opts.enable_field_name_matching:
            ratio = field_name_score(analysis, preset)
            if ratio > 0:
                total += ratio * opts.field_name_weight
                reasons.append(f"Field name overlap: {round(ratio * 100)}%")

        if preset.fields and total == 0:
            total = opts.baseline_score
            reasons.append("Baseline: preset defines fields")

        return PresetMatchResult(preset=preset, score=min(total, 1.0), reasons=reasons)


def match_presets(
    template: TemplateDocument,
    presets: Sequence[FrontmatterPreset],
    options: PresetMatchOptions | None = None,
) -> list[PresetMatchResult]:
    return PresetMatcher(options).match_presets(template, presets)


def get_best_match(
    template: TemplateDocument,
    presets: Sequence[FrontmatterPreset],
    options: PresetMatchOptions | None = None,
) -> PresetMatchResult | None:
    return PresetMatcher(options).get_best_match(template, presets)
