"""Click command group acting as a minimal host for the delivery pipeline.

Purpose
-------
Let operators validate a configuration and push newline-delimited JSON records
to a collector from the shell, e.g. in smoke tests after deployment.

Contents
--------
* :func:`cli` - command group with ``info``, ``check-config`` and ``send``.
* :func:`main` - entry point delegating to :mod:`lib_cli_exit_tools`.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Callable, Sequence, TextIO

import click
import lib_cli_exit_tools
from rich.logging import RichHandler

from . import __init__conf__
from . import config as hec_config
from . import runtime
from .adapters.console import RichResultReporter
from .domain.errors import ConfigurationError
from .domain.records import BatchEntry
from .domain.settings import DeliveryConfig
from .runtime._composition import SystemClock
from .runtime._settings import unescape_line_breaker

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _unescape_option(_ctx: click.Context, _param: click.Parameter, value: str | None) -> str | None:
    return None if value is None else unescape_line_breaker(value)


_DELIVERY_OPTIONS: tuple[Callable[[Callable[..., Any]], Callable[..., Any]], ...] = (
    click.option("--host", default=None, help="Collector host (default localhost)."),
    click.option("--port", type=int, default=None, help="Collector port (default 8088)."),
    click.option("--token", default=None, help="HEC token; HEC_TOKEN takes precedence."),
    click.option("--default-host", default=None, help="Fallback 'host' metadata."),
    click.option("--host-key", default=None, help="Record field overriding 'host'."),
    click.option("--default-source", default=None, help="Fallback 'source' metadata."),
    click.option("--source-key", default=None, help="Record field overriding 'source'."),
    click.option("--default-index", default=None, help="Fallback 'index' metadata."),
    click.option("--index-key", default=None, help="Record field overriding 'index'."),
    click.option("--sourcetype", default=None, help="Static 'sourcetype' metadata."),
    click.option("--use-ack", is_flag=True, default=False, help="Poll for indexer acknowledgement."),
    click.option("--channel", default=None, help="Request channel identifier."),
    click.option("--ack-interval", type=float, default=None, help="Seconds between ack polls."),
    click.option("--ack-retry-limit", type=int, default=None, help="Ack re-polls before giving up."),
    click.option("--ssl-verify-peer", is_flag=True, default=False, help="Use HTTPS and verify the peer."),
    click.option("--ca-file", default=None, help="CA bundle for peer verification."),
    click.option("--client-cert", default=None, help="Client certificate file."),
    click.option("--client-key", default=None, help="Client key file."),
    click.option("--client-key-pass", default=None, help="Passphrase for the client key."),
    click.option("--raw", is_flag=True, default=False, help="Send raw text to the raw endpoint."),
    click.option("--event-key", default=None, help="Record field carrying the event body."),
    click.option("--use-caller-time", is_flag=True, default=False, help="Keep record time with --event-key."),
    click.option(
        "--line-breaker",
        default=None,
        callback=_unescape_option,
        help="Fragment terminator, backslash escapes allowed (default newline).",
    ),
    click.option("--request-timeout", type=float, default=None, help="HTTP timeout in seconds."),
)


def delivery_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach every delivery option to ``func``."""
    for option in reversed(_DELIVERY_OPTIONS):
        func = option(func)
    return func


def _collect_options(options: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in options.items() if value is not None}


def _resolve_config(options: dict[str, Any]) -> DeliveryConfig:
    try:
        return runtime.build_delivery_config(**_collect_options(options))
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc


def _read_records(source: TextIO) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    for lineno, line in enumerate(source, start=1):
        if not line.strip():
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as exc:
            raise click.BadParameter(f"line {lineno}: {exc.msg}", param_hint="SOURCE") from exc
        if not isinstance(record, dict):
            raise click.BadParameter(f"line {lineno}: expected a JSON object", param_hint="SOURCE")
        records.append(record)
    return records


def _configure_logging(level: str) -> None:
    package_logger = logging.getLogger(__init__conf__.name)
    package_logger.setLevel(level.upper())
    if not any(isinstance(handler, RichHandler) for handler in package_logger.handlers):
        package_logger.addHandler(RichHandler(show_path=False, markup=False))


@click.group(invoke_without_command=True, context_settings=CLICK_CONTEXT_SETTINGS)
@click.version_option(version=__init__conf__.version, prog_name=__init__conf__.shell_command, message="%(version)s")
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors.",
)
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=None,
    help=f"Load the nearest .env before reading HEC_* settings (also via {hec_config.DOTENV_ENV_VAR}).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    show_default=True,
    help="Verbosity of pipeline logging.",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool, use_dotenv: bool | None, log_level: str) -> None:
    """Deliver newline-delimited JSON records to an HTTP Event Collector."""

    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback
    if hec_config.should_use_dotenv(explicit=use_dotenv, env_value=os.getenv(hec_config.DOTENV_ENV_VAR)):
        hec_config.enable_dotenv()
    _configure_logging(log_level)
    if ctx.invoked_subcommand is None:
        click.echo(runtime.summary_info(), nl=False)


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print package metadata."""

    click.echo(runtime.summary_info(), nl=False)


@cli.command("check-config", context_settings=CLICK_CONTEXT_SETTINGS)
@delivery_options
def cli_check_config(**options: Any) -> None:
    """Validate delivery options and print the resolved settings."""

    config = _resolve_config(options)
    RichResultReporter().show_config(config)


@cli.command("send", context_settings=CLICK_CONTEXT_SETTINGS)
@delivery_options
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.pass_context
def cli_send(ctx: click.Context, source: TextIO, **options: Any) -> None:
    """Deliver every JSON object in SOURCE (one per line, '-' for stdin) as one batch."""

    config = _resolve_config(options)
    records = _read_records(source)
    clock = SystemClock()
    batch = [BatchEntry(clock.now(), record) for record in records]

    runtime.init(config=config)
    try:
        result = runtime.deliver(batch)
    finally:
        runtime.shutdown()

    RichResultReporter().report(result, records=len(batch))
    if not result.ok:
        ctx.exit(1)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI, restoring traceback preferences afterwards.

    Parameters
    ----------
    argv:
        Optional sequence of argument strings (defaults to ``sys.argv[1:]``).

    Returns
    -------
    int
        Exit code reported by :func:`lib_cli_exit_tools.run_cli`.
    """

    previous_traceback = lib_cli_exit_tools.config.traceback
    previous_force_color = lib_cli_exit_tools.config.traceback_force_color
    try:
        return lib_cli_exit_tools.run_cli(
            cli,
            argv=list(argv) if argv is not None else None,
            prog_name=__init__conf__.shell_command,
        )
    finally:
        lib_cli_exit_tools.config.traceback = previous_traceback
        lib_cli_exit_tools.config.traceback_force_color = previous_force_color


__all__ = ["cli", "delivery_options", "main"]
