"""notewright — frontmatter presets, template index and note insertion."""

__version__ = "0.1.0"
