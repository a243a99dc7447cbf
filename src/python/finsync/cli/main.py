"""finsync CLI entry point."""

from __future__ import annotations

from pathlib import Path

import click

from finsync.__version__ import __version__
from finsync.cli.auth import auth
from finsync.cli.report import report
from finsync.cli.transaction import transaction


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="finsync")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    help="Path to a JSON config file.",
)
@click.option("--api-url", default=None, help="Base URL of the finance backend.")
@click.option(
    "--store",
    "store_path",
    type=click.Path(path_type=Path),
    help="Path to the session store file.",
)
@click.option("--timeout", type=float, default=None, help="Request deadline in seconds.")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    api_url: str | None,
    store_path: Path | None,
    timeout: float | None,
) -> None:
    """finsync CLI entry point."""
    ctx.obj = {
        "config_path": config_path,
        "api_url": api_url,
        "store_path": store_path,
        "timeout": timeout,
    }


main.add_command(auth)
main.add_command(transaction)
main.add_command(report)


if __name__ == "__main__":
    main()
