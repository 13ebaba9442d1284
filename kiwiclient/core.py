"""Command-line entry point: stream IQ from a KiwiSDR and log summaries."""

import argparse
import logging
import os
import sys
from typing import Optional

from .common import (
    CLIENT_IDENT,
    DEFAULT_CENTER_FREQ_HZ,
    DEFAULT_SAMPLE_RATE,
    KIWI_PORT,
    log,
)
from .consumer import ConsoleIqConsumer
from .errors import KiwiConnectionError
from .models import KiwiSettings
from .session import ExitReason, KiwiSession

PASSWORD_ENV = "KIWI_PWD"

EXIT_OK          = 0
EXIT_FAILURE     = 1
EXIT_INTERRUPTED = 130


def _configure_logging(level_name: str):
    level = getattr(logging, level_name.upper(), logging.INFO)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(message)s')
    else:
        root_logger.setLevel(level)

    logging.getLogger('kiwiclient').setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="KiwiSDR IQ stream receiver")
    parser.add_argument("--host", required=True, help="KiwiSDR host name or IP")
    parser.add_argument("--port", default=KIWI_PORT, type=int,
                        help=f"KiwiSDR port (default: {KIWI_PORT})")
    parser.add_argument("--freq", default=DEFAULT_CENTER_FREQ_HZ / 1e3, type=float,
                        help="Center frequency in kHz")
    parser.add_argument("--rate", default=DEFAULT_SAMPLE_RATE, type=int,
                        help=f"IQ sample rate in Hz (default: {DEFAULT_SAMPLE_RATE})")
    parser.add_argument("--password", default=None,
                        help=f"Channel password (default: ${PASSWORD_ENV})")
    parser.add_argument("--ident", default=CLIENT_IDENT, help="Name shown in the user list")
    parser.add_argument("--print-every", default=10, type=int,
                        help="Log a summary every N packets")
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Logging verbosity (default: INFO)')
    return parser


def settings_from_args(args: argparse.Namespace) -> KiwiSettings:
    password = args.password if args.password is not None else os.environ.get(PASSWORD_ENV)
    return KiwiSettings(
        host=args.host,
        port=args.port,
        sample_rate=args.rate,
        center_freq_hz=args.freq * 1e3,
        password=password or None,
        ident=args.ident,
    )


def main(argv: Optional[list[str]] = None, transport=None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_level)

    try:
        settings = settings_from_args(args)
    except ValueError as e:
        log.error(f"Invalid configuration: {e}")
        return EXIT_FAILURE

    consumer = ConsoleIqConsumer(settings.sample_rate, args.print_every)

    with KiwiSession(settings, consumer, transport=transport) as session:
        try:
            reason = session.connect_and_stream()
        except KiwiConnectionError:
            return EXIT_FAILURE
        except KeyboardInterrupt:
            log.info("Interrupted")
            return EXIT_INTERRUPTED

    log.info(f"Done. {consumer.packet_count} packets, {consumer.sample_count} samples, "
             f"{consumer.missed_count} missed")
    if reason is ExitReason.SERVER_CLOSE:
        return EXIT_OK
    return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
