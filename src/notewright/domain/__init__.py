"""Domain layer — presets, frontmatter merging, template parsing, matching.

This layer depends only on stdlib, pydantic and ruamel.yaml.
It must never import from services, infrastructure, commands, or config.
"""
