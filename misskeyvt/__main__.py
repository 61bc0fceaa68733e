import argparse
import logging
import sys
import time
from typing import Optional

from vtpy import SerialTerminal, Terminal, TerminalException

from .client import Client, ClientError
from .command import Scheduler
from .config import ConfigError, load
from .message import KeyMessage, WindowSizeMessage
from .renderer import Renderer
from .session import Session
from .view import render


# How long to wait on the command queue when the terminal has nothing for us.
POLL_INTERVAL: float = 0.02


def spawnTerminal(port: str, baudrate: int, flow: bool, wide: bool) -> Terminal:
    print("Attempting to contact VT-100...", end="", file=sys.stderr)
    sys.stderr.flush()

    while True:
        try:
            terminal = SerialTerminal(port, baudrate, flowControl=flow)

            if wide:
                terminal.set132Columns()
            else:
                terminal.set80Columns()

            print("SUCCESS!", file=sys.stderr)
            return terminal
        except TerminalException:
            # Wait for terminal to re-awaken.
            time.sleep(1.0)

            print(".", end="", file=sys.stderr)
            sys.stderr.flush()


def setupLogging(debug: Optional[str]) -> None:
    if debug:
        logging.basicConfig(
            filename=debug,
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    # Connection pool chatter drowns out everything else.
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def main(
    config: str,
    port: str,
    baudrate: int,
    flow: bool,
    wide: bool,
    graphics: bool,
) -> int:
    try:
        settings = load(config)
    except ConfigError as e:
        print(f"Cannot load config: {e}", file=sys.stderr)
        return 1

    # Make sure we can actually talk to the server before bothering the terminal.
    client = Client(settings.instanceUrl, settings.accessToken)
    try:
        account = client.fetchAccountInfo()
    except ClientError as e:
        print(f"Cannot sign in to {settings.instanceUrl}: {e}", file=sys.stderr)
        return 1

    scheduler = Scheduler()
    session = Session(client, account=account, graphics=graphics)
    scheduler.dispatch(session.start())

    terminal: Optional[Terminal] = None
    try:
        while not session.exiting:
            try:
                terminal = spawnTerminal(port, baudrate, flow, wide)
            except OSError as e:
                print(f"\nCannot open {port}: {e}", file=sys.stderr)
                return 2

            renderer = Renderer(terminal)
            scheduler.post(WindowSizeMessage(terminal.rows, terminal.columns))

            try:
                while not session.exiting:
                    # Grab input, de-duplicate held down up/down presses so they don't queue up
                    # behind a slow repaint.
                    inputVal = terminal.recvInput()
                    if inputVal in {Terminal.UP, Terminal.DOWN}:
                        while inputVal == terminal.peekInput():
                            terminal.recvInput()

                    if inputVal:
                        scheduler.post(KeyMessage(inputVal))

                    messages = scheduler.drain(0 if inputVal else POLL_INTERVAL)
                    for message in messages:
                        scheduler.dispatch(session.update(message))
                        if session.exiting:
                            print("Got request to end session!", file=sys.stderr)
                            break

                    if messages and not session.exiting:
                        renderer.draw(render(session))

            except TerminalException:
                # Terminal went away mid-transaction.
                print("Lost terminal, will attempt a reconnect.", file=sys.stderr)

            except KeyboardInterrupt:
                print("Got request to end session!", file=sys.stderr)
                session.exiting = True
    finally:
        scheduler.shutdown()

    # Restore the screen before exiting.
    if terminal is not None:
        terminal.reset()

    return 0


def cli() -> None:
    parser = argparse.ArgumentParser(description="VT-100 Misskey Client")

    parser.add_argument(
        "--port",
        default="/dev/ttyUSB0",
        type=str,
        help="Serial port to open, defaults to /dev/ttyUSB0",
    )
    parser.add_argument(
        "--baud",
        default=9600,
        type=int,
        help="Baud rate to use with VT-100, defaults to 9600",
    )
    parser.add_argument(
        "--flow",
        action="store_true",
        help="Enable software-based flow control (XON/XOFF)",
    )
    parser.add_argument(
        "--wide",
        action="store_true",
        help="Enable wide mode (132 characters instead of 80 characters)",
    )
    parser.add_argument(
        "--no-graphics",
        action="store_true",
        help="Never fetch or draw custom emoji, for terminals without sixel support",
    )
    parser.add_argument(
        "--debug",
        metavar="LOGFILE",
        type=str,
        default=None,
        help="Write debug logging to LOGFILE",
    )
    parser.add_argument(
        "config",
        metavar="CONFIG",
        nargs="?",
        type=str,
        default="config.json",
        help="JSON file with instance_url and access_token, defaults to config.json",
    )
    args = parser.parse_args()

    setupLogging(args.debug)
    sys.exit(
        main(
            args.config,
            args.port,
            args.baud,
            args.flow,
            args.wide,
            not args.no_graphics,
        )
    )


if __name__ == "__main__":
    cli()
