import logging
import re
import sys

import click

from thermalprint.bridge import MethodBridge, serve
from thermalprint.commands import COMMANDS
from thermalprint.config import ENV_PREFIX, Settings
from thermalprint.connection import ConnectionManager
from thermalprint.errors import PermissionDeniedError
from thermalprint.transport import TRANSPORT_TYPES
from thermalprint.transport.bluetooth import DEFAULT_CHANNEL

MAC_ADDRESS = re.compile(r"([0-9A-F]{2}:){5}([0-9A-F]{2})")
DEFAULTS = Settings()


def _setup_logging(verbose, stream=None):
    logging.basicConfig(
        level="DEBUG" if verbose else "INFO",
        format="%(asctime)s.%(msecs)03d | %(levelname)s | %(module)s:%(funcName)s:%(lineno)d - %(message)s",
        datefmt="%H:%M:%S",
        stream=stream,
    )


def _check_address(settings, addr):
    if settings.conn != "bluetooth":
        return addr
    addr = addr.upper()
    if not MAC_ADDRESS.fullmatch(addr):
        raise click.BadParameter(f"Bad MAC address: {addr}", param_hint="ADDRESS")
    return addr


def _print_session(settings, addr, build_steps):
    """Connect, run each write step built for the manager, disconnect."""
    with ConnectionManager(settings) as manager:
        try:
            status = manager.connect(addr)
        except PermissionDeniedError as e:
            raise click.ClickException(f"{e.message} ({e.details})")
        if not status.ok:
            raise click.ClickException(f"Could not connect to {addr}: {manager.last_error}")
        for step in build_steps(manager):
            if not step():
                raise click.ClickException(f"Write failed: {manager.last_error}")


@click.group()
@click.option(
    "-c",
    "--conn",
    type=click.Choice(TRANSPORT_TYPES),
    default=DEFAULTS.conn,
    show_default=True,
    envvar=ENV_PREFIX + "CONN",
    help="Connection type (serial for /dev/rfcommN or COM ports)",
)
@click.option(
    "--channel",
    type=click.IntRange(1, 30),
    default=DEFAULT_CHANNEL,
    show_default=True,
    envvar=ENV_PREFIX + "CHANNEL",
    help="RFCOMM channel of the serial port service",
)
@click.option(
    "-t",
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULTS.connect_timeout,
    show_default=True,
    envvar=ENV_PREFIX + "TIMEOUT",
    help="Connect timeout in seconds",
)
@click.option(
    "-e",
    "--encoding",
    default=DEFAULTS.encoding,
    show_default=True,
    envvar=ENV_PREFIX + "ENCODING",
    help="Single-byte encoding of printed text",
)
@click.option(
    "-b",
    "--baudrate",
    type=int,
    default=DEFAULTS.baudrate,
    show_default=True,
    envvar=ENV_PREFIX + "BAUDRATE",
    help="Baud rate for serial connections",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose logging",
)
@click.pass_context
def cli(ctx, conn, channel, timeout, encoding, baudrate, verbose):
    """Control ESC/POS thermal printers over Bluetooth RFCOMM."""
    # Logging goes to stderr so `serve` keeps stdout for responses
    _setup_logging(verbose, stream=sys.stderr)
    ctx.obj = Settings(
        conn=conn,
        channel=channel,
        connect_timeout=timeout,
        encoding=encoding,
        baudrate=baudrate,
    )


@cli.command("devices")
@click.pass_obj
def devices_cmd(settings):
    """List bonded Bluetooth devices as name#address."""
    manager = ConnectionManager(settings)
    try:
        for device in manager.list_paired_devices():
            click.echo(str(device))
    finally:
        manager.close()


@cli.command("status")
@click.pass_obj
def status_cmd(settings):
    """Show whether the Bluetooth adapter is powered on."""
    manager = ConnectionManager(settings)
    try:
        click.echo("true" if manager.is_adapter_enabled() else "false")
    finally:
        manager.close()


@cli.command("text")
@click.argument("addr", metavar="ADDRESS")
@click.argument("directive")
@click.option("-n", "--newline", is_flag=True, help="Feed a line after the text")
@click.option("--cut", is_flag=True, help="Feed paper and cut afterwards")
@click.pass_obj
def text_cmd(settings, addr, directive, newline, cut):
    """Print DIRECTIVE, given as "<size>//<text>" or plain text."""
    addr = _check_address(settings, addr)

    def steps(manager):
        yield lambda: manager.print_text(directive)
        if newline:
            yield lambda: manager.write(COMMANDS["FEED_LINE"])
        if cut:
            yield lambda: manager.write(COMMANDS["FEED_PAPER_AND_CUT"])

    _print_session(settings, addr, steps)


@cli.command("raw")
@click.argument("addr", metavar="ADDRESS")
@click.argument("values", nargs=-1, required=True, type=int)
@click.pass_obj
def raw_cmd(settings, addr, values):
    """Write raw byte VALUES (truncated to 8 bits)."""
    addr = _check_address(settings, addr)
    _print_session(settings, addr, lambda manager: [lambda: manager.write_raw(values)])


@cli.command("serve")
@click.pass_obj
def serve_cmd(settings):
    """Answer line-delimited JSON method calls on stdin/stdout."""
    with ConnectionManager(settings) as manager:
        serve(MethodBridge(manager), sys.stdin, sys.stdout)


if __name__ == "__main__":
    cli()
