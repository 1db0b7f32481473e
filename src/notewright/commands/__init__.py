"""Subcommand modules for notewright.

register_commands() imports lazily so ``notewright --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the command groups on the root CLI group."""
    from notewright.commands.note import note
    from notewright.commands.presets import presets
    from notewright.commands.templates import templates

    cli.add_command(templates)
    cli.add_command(presets)
    cli.add_command(note)
