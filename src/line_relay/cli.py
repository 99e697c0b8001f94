import sys
from functools import partial
from typing import Optional

import typer
from loguru import logger
from prometheus_client import start_http_server
from pydantic import ValidationError

from relay_client import StoreCommand, StoreConfig, connect, get_operation, validate_address

from .config import Settings, get_settings
from .coordinator import LineRelay, ReconnectPolicy, StoreWriter
from .utils import iter_lines

app = typer.Typer(help="Relay lines from stdin into a Redis list")


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def resolve_settings(**overrides) -> Settings:
    """Settings from the environment, with any non-None override applied on top."""
    given = {k: v for k, v in overrides.items() if v is not None}
    if not given:
        return get_settings()
    return Settings(**given)


@app.command()
def relay(
    hostname: str = typer.Argument(..., help="redis host"),
    store_command: StoreCommand = typer.Argument(
        ..., case_sensitive=False, help="redis command to store the line"
    ),
    key: str = typer.Argument(..., help="key to store the line into"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="timeout in seconds"),
    delay: Optional[float] = typer.Option(
        None, "--delay", "-d", help="time to wait before reconnecting in seconds"
    ),
    queue_size: Optional[int] = typer.Option(
        None, "--queue-size", "-q", help="lines to buffer before dropping the oldest"
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="loguru level name"),
    metrics_port: Optional[int] = typer.Option(
        None, "--metrics-port", help="serve Prometheus metrics on this port"
    ),
):
    """Read lines from stdin and store each one in redis until EOF."""
    try:
        settings = resolve_settings(
            connect_timeout=timeout,
            reconnect_delay=delay,
            queue_size=queue_size,
            log_level=log_level,
            metrics_port=metrics_port,
        )
    except ValidationError as e:
        raise typer.BadParameter(str(e))

    try:
        validate_address(hostname)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="HOSTNAME")

    try:
        configure_logging(settings.log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level")

    if settings.metrics_port:
        start_http_server(settings.metrics_port)
        logger.info(f"Serving metrics on :{settings.metrics_port}")

    store_config = StoreConfig(
        address=hostname,
        connect_timeout=settings.connect_timeout,
        socket_timeout=settings.connect_timeout,
    )
    operation = get_operation(store_command)
    policy = ReconnectPolicy(delay_sec=settings.reconnect_delay)

    def make_writer() -> StoreWriter:
        return StoreWriter(partial(connect, store_config), operation, key, policy)

    line_relay = LineRelay(make_writer, capacity=settings.queue_size)
    try:
        result = line_relay.run(iter_lines(sys.stdin))
    except Exception as e:
        logger.error(f"Relay failed: {e}")
        raise typer.Exit(code=1)

    logger.info(
        f"Done: sent={result.sent} stored={result.stored} dropped={result.dropped} "
        f"abandoned={result.abandoned} reconnects={result.reconnects}"
    )


if __name__ == "__main__":
    app()
