"""CLI entry point for prowners.

Commands:
  assign: request reviews from the owners of a pull request's changed files
  owners: print the declared owners of paths at a revision
  history: display past assignment runs from the configured store
  stats: most-assigned reviewers and most frequent unresolved owners
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from prowners_cli.commands.assign import assign_cmd
from prowners_cli.commands.history import history_cmd
from prowners_cli.commands.owners import owners_cmd
from prowners_cli.commands.stats import stats_cmd

console = Console()


def _configure_logging(verbose: bool) -> None:
    root_logger = logging.getLogger()
    if not any(isinstance(h, RichHandler) for h in root_logger.handlers):
        root_logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True))
    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _build_store(config: dict):
    """Instantiate the configured store from .prowners.yml settings.

      store: sqlite → SQLiteStore (store_path, default .prowners.db)
      (default)     → NoOpStore  (no persistence)
    """
    from prowners_store.noop import NoOpStore

    store_type = config.get("store", "noop")

    if store_type == "sqlite":
        from prowners_store.sqlite import SQLiteStore

        return SQLiteStore(db_path=config.get("store_path", ".prowners.db"))

    if store_type != "noop":
        console.print(f"[yellow]Unknown store {store_type!r}. Falling back to no store.[/yellow]")
    return NoOpStore()


@click.group()
@click.version_option(
    version=importlib.metadata.version("prowners"),
    prog_name="prowners",
)
@click.option(
    "--config",
    "config_path",
    default=".prowners.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PROWNERS_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every git call, lookup and reviewer outcome.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Request reviews from the owners declared in .gitattributes."""
    from prowners_core.config import load_config
    from prowners_cli.auth import resolve_github_token

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.UsageError(str(e))

    token = resolve_github_token()
    if token:
        config["github_token"] = token

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.call_on_close(store.close)


main.add_command(assign_cmd)
main.add_command(owners_cmd)
main.add_command(history_cmd)
main.add_command(stats_cmd)
