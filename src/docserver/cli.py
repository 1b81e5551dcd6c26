"""CLI interface for docserver.

Command-line tool for serving a Markdown document root over HTTP.
"""

import logging
import sys
from pathlib import Path

import click
from jinja2 import TemplateError

from docserver.config import CliSettings, Config, parse_addr


@click.group()
@click.version_option(package_name="docserver")
def cli() -> None:
    """docserver - Simple webserver for serving markdown files."""


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Path to configuration file (default: auto-discover docserver.toml)",
)
@click.option(
    "--root",
    "-r",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    help="Root directory to serve files from (overrides config)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--addr",
    default=None,
    help="addr:port to listen on, e.g. ':8000' (overrides --host/--port)",
)
@click.option(
    "--chroot/--no-chroot",
    default=None,
    help="chroot() to the document root upon starting (overrides config)",
)
@click.option(
    "--filter",
    "-f",
    "filters",
    multiple=True,
    help="Regular expression for request filtering. Any request which resolves "
    "to a file matching a filter will 404. May be repeated.",
)
@click.option(
    "--template",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Jinja2 template for Markdown pages. Variables: title, markup",
)
@click.option(
    "--error-template",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Jinja2 template for error pages. Variables: url, code, msg",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output (log path resolution steps)",
)
def serve(
    config_path: Path | None,
    root: Path | None,
    host: str | None,
    port: int | None,
    addr: str | None,
    chroot: bool | None,
    filters: tuple[str, ...],
    template: Path | None,
    error_template: Path | None,
    verbose: bool,
) -> None:
    """Start the document server."""
    from docserver.server import run_server

    _configure_logging(verbose)

    try:
        if addr is not None:
            addr_host, port = parse_addr(addr)
            host = addr_host if addr_host is not None else host

        cli_settings = CliSettings(
            host=host,
            port=port,
            root=root,
            chroot=chroot,
            filters=filters,
            page_template=template,
            error_template=error_template,
        )
        config = Config.load(config_path, cli_settings)
    except (OSError, ValueError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Document root: {config.docs.root}")
    if config.docs.filters:
        click.echo(f"Filters: {', '.join(p.pattern for p in config.docs.filters)}")
    if config.docs.chroot:
        click.echo("chroot: enabled")

    try:
        run_server(config)
    except (OSError, TemplateError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


if __name__ == "__main__":
    cli()
