"""CLI interface for waitfor"""

import logging
from pathlib import Path
from typing import Any, Callable, Optional, Tuple

import click

from waitfor.application.executor import RetryExecutor
from waitfor.domain.config import RetryConfig
from waitfor.domain.errors import ConfigurationError
from waitfor.infrastructure.config.config_manager import ConfigManager
from waitfor.infrastructure.probes import CommandProbe, HttpProbe, PortProbe

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


_RETRY_OPTIONS = [
    click.option("--attempts", "-n", type=int, help="Number of attempts (default: 5)"),
    click.option("--timeout", "-t", type=float, help="Seconds per attempt, 0 disables (default: 15)"),
    click.option("--delay", "-d", type=float, help="Initial delay between attempts (default: 1)"),
    click.option("--quiet", "-q", is_flag=True, help="Don't report rescued failures"),
]


def retry_options(func: Callable) -> Callable:
    """Shared options overriding the retry section of the config"""
    for option in reversed(_RETRY_OPTIONS):
        func = option(func)
    return func


def _build_executor(
    ctx: click.Context,
    attempts: Optional[int],
    timeout: Optional[float],
    delay: Optional[float],
    quiet: bool,
    retry_on: Tuple[type, ...] = (),
) -> Tuple[RetryExecutor, ConfigManager]:
    """Create executor from config file, env and CLI overrides

    Args:
        ctx: Click context holding the config path
        attempts: Attempt budget override
        timeout: Per-attempt timeout override
        delay: Initial delay override
        quiet: Disable diagnostics
        retry_on: Extra retryable exception classes for the chosen probe

    Returns:
        Tuple of (executor, config manager)
    """
    verbose = ctx.obj.get("verbose", False)
    try:
        config_manager = ConfigManager(config_path=ctx.obj.get("config_path"))
        base = config_manager.get_retry_config()
        config: RetryConfig = config_manager.get_retry_config(
            max_attempts=attempts,
            timeout=timeout,
            initial_delay=delay,
            verbose=False if quiet else None,
            retry_on=tuple(base.retry_on) + tuple(retry_on) if retry_on else None,
        )
    except ConfigurationError as e:
        _die(str(e), verbose=verbose, exc=e)
    return RetryExecutor(config), config_manager


def _run(ctx: click.Context, executor: RetryExecutor, probe: Callable[[int], Any]) -> Any:
    """Run a probe and translate terminal failures into a CLI error"""
    verbose = ctx.obj.get("verbose", False)
    logger.info(f"Waiting for {probe!r}")
    try:
        result = executor.run(probe)
    except Exception as e:
        _die(f"Gave up waiting for {probe!r}: {type(e).__name__}: {e}", verbose=verbose, exc=e)
    click.echo(f"Ready: {probe!r}")
    return result


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .waitfor.yml config file",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path):
    """waitfor - wait for a condition with bounded retries and backoff"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("host", type=str)
@click.argument("port", type=click.IntRange(1, 65535))
@retry_options
@click.pass_context
def port(ctx, host: str, port: int, attempts, timeout, delay, quiet):
    """Wait until HOST:PORT accepts TCP connections."""
    executor, config_manager = _build_executor(ctx, attempts, timeout, delay, quiet)
    probe_config = config_manager.get_probe_config()
    _run(ctx, executor, PortProbe(host, port, connect_timeout=probe_config.connect_timeout))


@cli.command()
@click.argument("url", type=str)
@click.option("--method", type=click.Choice(["GET", "HEAD", "POST"], case_sensitive=False), help="HTTP method. Overrides config.")
@click.option("--status", "statuses", type=int, multiple=True, help="Extra accepted status code (repeatable)")
@retry_options
@click.pass_context
def http(ctx, url: str, method: Optional[str], statuses: Tuple[int, ...], attempts, timeout, delay, quiet):
    """Wait until URL answers with a 2xx (or an accepted) status."""
    executor, config_manager = _build_executor(
        ctx, attempts, timeout, delay, quiet, retry_on=HttpProbe.RETRYABLE
    )
    probe_config = config_manager.get_probe_config()
    with HttpProbe(
        url,
        method=method or probe_config.http_method,
        request_timeout=probe_config.request_timeout,
        expected_status=list(probe_config.expected_status) + list(statuses),
    ) as probe:
        _run(ctx, executor, probe)


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("argv", nargs=-1, required=True, type=click.UNPROCESSED)
@click.option("--shell", is_flag=True, help="Run the command through the shell")
@retry_options
@click.pass_context
def cmd(ctx, argv: Tuple[str, ...], shell: bool, attempts, timeout, delay, quiet):
    """Wait until a command exits with status 0.

    ARGV: Command and arguments (put them after --)
    """
    executor, _ = _build_executor(ctx, attempts, timeout, delay, quiet)
    result = _run(ctx, executor, CommandProbe(argv, shell=shell))
    if result.stdout:
        click.echo(result.stdout.rstrip("\n"))


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
