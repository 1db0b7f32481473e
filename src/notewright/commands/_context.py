"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Collaborators are built lazily so ``--help`` and
``--version`` never touch the vault, and results are emitted with the
same stdout/stderr routing and exit codes everywhere.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import TYPE_CHECKING, Any

import click

from notewright.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from notewright.config.settings import NotewrightSettings
    from notewright.domain.matching import PresetMatcher
    from notewright.domain.presets import PresetRegistry
    from notewright.infrastructure.filesystem import LocalVaultFileSystem
    from notewright.infrastructure.notify import Notifier
    from notewright.services.result import ServiceResult
    from notewright.services.template_index import TemplateIndex


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: NotewrightSettings) -> None:
        self.settings = settings
        self._file_system: LocalVaultFileSystem | None = None
        self._index: TemplateIndex | None = None
        self._presets: PresetRegistry | None = None

        from notewright.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def file_system(self) -> LocalVaultFileSystem:
        if self._file_system is None:
            from notewright.infrastructure.filesystem import LocalVaultFileSystem

            self._file_system = LocalVaultFileSystem(self.settings.vault_root)
        return self._file_system

    @property
    def notifier(self) -> Notifier:
        """Console notifications, silenced for ``--json`` and ``--quiet``."""
        if self.settings.json_output or self.settings.quiet:
            from notewright.infrastructure.notify import NullNotifier

            return NullNotifier()
        from notewright.output.console import ConsoleNotifier

        return ConsoleNotifier()

    @property
    def template_index(self) -> TemplateIndex:
        if self._index is None:
            from notewright.services.template_index import TemplateIndex

            templates = self.settings.templates
            self._index = TemplateIndex(
                self.file_system,
                lambda: templates.folder,
                extensions=templates.extensions,
                debounce_delay=templates.debounce_delay,
                notifier=self.notifier,
                notify_reloads=True,
            )
        return self._index

    @property
    def presets(self) -> PresetRegistry:
        if self._presets is None:
            from notewright.domain.presets import PresetRegistry

            self._presets = PresetRegistry(self.settings.presets)
        return self._presets

    def matcher(self) -> PresetMatcher:
        from notewright.domain.matching import PresetMatcher

        return PresetMatcher(self.settings.matching.to_options())

    def run(self, coro: Coroutine[Any, Any, Any]) -> Any:
        """Drive one coroutine to completion on a fresh event loop."""
        return asyncio.run(coro)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout, warnings on stderr (already in the payload for JSON).
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
