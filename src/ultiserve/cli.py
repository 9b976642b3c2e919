"""CLI interface for Ultiserve.

Command-line tool for serving a directory over http.
"""

import logging
from pathlib import Path

import click

from ultiserve.config import DEFAULT_ADDRESS, Config, parse_address


def _validate_address(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> tuple[str, int] | None:
    if value is None:
        return None
    try:
        return parse_address(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
def cli() -> None:
    """Ultiserve - serve your files over http!"""


@cli.command()
@click.argument(
    "root_dir",
    required=False,
    type=click.Path(exists=True, path_type=Path, file_okay=False),
)
@click.option(
    "--addr",
    "-a",
    "address",
    default=None,
    callback=_validate_address,
    help=f"The address to bind the server to (default: {DEFAULT_ADDRESS})",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover ultiserve.toml)",
)
@click.option(
    "--theme",
    default=None,
    help="Pygments style for highlighted code (overrides config)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def serve(
    root_dir: Path | None,
    address: tuple[str, int] | None,
    config_path: Path | None,
    theme: str | None,
    verbose: bool,
) -> None:
    """Serve ROOT_DIR (default: current directory) over http."""
    from ultiserve.server import create_app, run_server

    _configure_logging(verbose)

    try:
        config = Config.load(config_path)
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    host, port = address if address is not None else (None, None)
    config = config.with_overrides(
        host=host,
        port=port,
        root_dir=root_dir,
        theme=theme,
    )

    if not config.serve.root_dir.is_dir():
        raise click.UsageError(f"Not a directory: {config.serve.root_dir}")

    try:
        app = create_app(config)
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    # Always shown as localhost, whatever the bind address
    click.echo(
        "Serving files at "
        + click.style(f"http://127.0.0.1:{config.server.port}", fg="green")
    )
    click.echo(f"Directory: {config.serve.root_dir}")
    click.echo(f"Theme: {config.highlight.theme}")

    run_server(config, app)


if __name__ == "__main__":
    cli()
