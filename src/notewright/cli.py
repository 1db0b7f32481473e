"""Root CLI group for notewright with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from notewright import __version__
from notewright.commands import register_commands
from notewright.commands._context import AppContext
from notewright.config.settings import NotewrightSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="notewright")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logging.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "--vault",
    "vault_root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Vault directory (default: the config file's directory or CWD).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    vault_root: Path | None,
) -> None:
    """notewright — template and frontmatter tooling for Markdown vaults."""
    ctx.ensure_object(dict)
    settings = NotewrightSettings.from_cli(
        config_path=config_path,
        vault_root=vault_root,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
