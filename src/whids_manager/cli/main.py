"""Main CLI entry point for whids-manager.

One command, four mutually exclusive actions:
    --key          Print a new collector API key and exit
    --dump-config  Print a configuration skeleton and exit
    --certgen      Generate cert.pem/key.pem for the configured host and exit
    (default)      Run the manager from CONFIG_FILE until it stops

Single-dash spellings (-key, -certgen, -dump-config) are accepted too.

This module is the only place that terminates the process: every fatal
error raised below it is a WhidsManagerError carrying its exit code.
"""

from __future__ import annotations

__all__ = ["cli", "main"]

import asyncio
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from whids_manager import __version__
from whids_manager.config import dump_config_skeleton, load_manager_config
from whids_manager.constants import APP_NAME, COPYRIGHT, EXIT_OK, LICENSE
from whids_manager.exceptions import ConfigurationError, WhidsManagerError
from whids_manager.manager.lifecycle import LifecycleController
from whids_manager.manager.log_config import configure_manager_logging, log_event
from whids_manager.manager.models import ManagerSystemEvent
from whids_manager.manager.server import HTTPSManager
from whids_manager.security.certgen import generate_self_signed
from whids_manager.security.keygen import generate_api_key

from .styling import style_error, style_label, style_success, style_warning


def _fail(error: WhidsManagerError) -> NoReturn:
    """Report a fatal error and exit with its code."""
    log_event(
        logging.ERROR,
        ManagerSystemEvent(
            event="fatal_error",
            message=str(error),
            error_type=type(error).__name__,
            error_message=str(error),
            details={"exit_code": error.exit_code},
        ),
    )
    click.echo(style_error(str(error)), err=True)
    sys.exit(error.exit_code)


def _print_api_key() -> None:
    key = generate_api_key()
    click.echo(f"New API key: {key}")
    click.echo("Please manually update client and manager configuration file to make it effective")


def _generate_certificate(config_file: Path) -> None:
    config = load_manager_config(config_file)
    configure_manager_logging(config)

    bundle = generate_self_signed([config.host])

    click.echo(style_success(f"Written {bundle.cert_path}"))
    click.echo(style_success(f"Written {bundle.key_path} ({bundle.private_key.pem_label})"))
    click.echo(style_label("SHA-256 fingerprint") + f" {bundle.fingerprint}")
    click.echo(style_warning("Certificate and key generated should be used for testing purposes only."))
    log_event(
        logging.INFO,
        ManagerSystemEvent(
            event="certgen_testing_only",
            message="Certificate and key generated should be used for testing purposes only",
            details={"host": config.host, "fingerprint": bundle.fingerprint},
        ),
    )


def _run_manager(config_file: Path, ctx: click.Context) -> None:
    config = load_manager_config(config_file)
    configure_manager_logging(config)

    # Tests swap the manager collaborator through the click context object
    factory = (ctx.obj or {}).get("manager_factory", HTTPSManager)

    log_event(
        logging.INFO,
        ManagerSystemEvent(
            event="manager_starting",
            message=f"Manager starting from {config_file}",
            path=str(config_file),
        ),
    )
    controller = LifecycleController(factory)
    asyncio.run(controller.run(config))


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=f"Version: {__version__}\n\nCopyright: {COPYRIGHT}\n\nLicense: {LICENSE}",
)
@click.option(
    "--key",
    "-key",
    "keygen",
    is_flag=True,
    help="Generate a random collector API key. Both collector and manager "
    "configuration files need to be updated with it.",
)
@click.option(
    "--certgen",
    "-certgen",
    is_flag=True,
    help="Generate a key/cert pair (key.pem, cert.pem) for TLS connections. "
    "The certificate is issued for the host in the configuration file.",
)
@click.option(
    "--dump-config",
    "-dump-config",
    "dump_config",
    is_flag=True,
    help="Dump a skeleton of the manager configuration.",
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.argument(
    "config_file",
    required=False,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.pass_context
def cli(
    ctx: click.Context,
    keygen: bool,
    certgen: bool,
    dump_config: bool,
    version: bool,
    config_file: Path | None,
) -> None:
    """WHIDS manager: secures and runs the collector manager.

    CONFIG_FILE is the JSON manager configuration (see --dump-config).
    """
    if version:
        click.echo(f"{APP_NAME} {__version__}")
        sys.exit(EXIT_OK)

    if keygen:
        _print_api_key()
        sys.exit(EXIT_OK)

    if dump_config:
        click.echo(dump_config_skeleton())
        sys.exit(EXIT_OK)

    if config_file is None:
        _fail(
            ConfigurationError("Missing argument 'CONFIG_FILE': a manager configuration file is required")
        )

    try:
        if certgen:
            _generate_certificate(config_file)
        else:
            _run_manager(config_file, ctx)
    except WhidsManagerError as e:
        _fail(e)

    sys.exit(EXIT_OK)


def main() -> None:
    """CLI entry point."""
    cli()
