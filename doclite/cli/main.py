"""The doclite command group: global options, logging and store setup."""

import logging
from dataclasses import dataclass
from pathlib import Path

import click
from click.exceptions import Exit
from rich.console import Console

from doclite import __version__
from doclite.cli import commands
from doclite.config import load_config
from doclite.core.exceptions import DocliteError
from doclite.storage.store import DocumentStore, create_backend


@dataclass
class Context:
    """Objects shared by every command of one invocation."""

    store: DocumentStore
    console: Console
    debug: bool = False


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Pick the root log level from the verbosity flags."""
    if quiet:
        level = logging.ERROR
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_console(no_color: bool = False, width: int | None = None) -> Console:
    """Console used for tables and messages."""
    return Console(
        no_color=no_color,
        width=width or 120,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


class DocliteGroup(click.Group):
    """Custom group that handles KeyboardInterrupt and store errors."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print("[yellow]Cancelled[/yellow]")
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except DocliteError as e:
            debug = getattr(ctx.obj, "debug", False) if ctx.obj else False
            if debug:
                raise
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


@click.group(cls=DocliteGroup)
@click.option("--verbose", "-v", is_flag=True, help="Log queries and storage events")
@click.option("--quiet", "-q", is_flag=True, help="Only report errors")
@click.option("--no-color", is_flag=True, help="Plain output without colors")
@click.option("--debug", is_flag=True, help="Show tracebacks instead of short errors")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML configuration file",
)
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Database file (a .gz suffix enables compression)",
)
@click.option(
    "--backend",
    type=click.Choice(["file", "sqlite", "memory"]),
    help="Storage backend",
)
@click.option("--gzip", "use_gzip", is_flag=True, default=None, help="Compress file")
@click.option("--strict", is_flag=True, default=None, help="Reject invalid queries")
@click.version_option(
    version=__version__, prog_name="doclite", message="doclite version %(version)s"
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config: Path | None,
    db_path: Path | None,
    backend: str | None,
    use_gzip: bool | None,
    strict: bool | None,
) -> None:
    """Embeddable JSON document store.

    Queries are JSON objects in a MongoDB-like filter syntax. Strings written
    as /pattern/flags are regular expressions.
    """
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)
    console = create_console(no_color=no_color)

    try:
        store_config = load_config(
            config,
            db_path=str(db_path) if db_path else None,
            backend=backend,
            use_gzip=use_gzip,
            strict=strict,
        )
        store = DocumentStore(
            create_backend(store_config),
            strict=store_config.strict,
            exists=store_config.exists,
        )
    except (DocliteError, ValueError) as e:
        if debug:
            raise
        click.echo(f"Error opening store: {e}", err=True)
        ctx.exit(1)

    ctx.obj = Context(store=store, console=console, debug=debug)
    ctx.call_on_close(store.close)


cli.add_command(commands.insert)
cli.add_command(commands.find)
cli.add_command(commands.update)
cli.add_command(commands.remove)
cli.add_command(commands.count)
cli.add_command(commands.now)


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
