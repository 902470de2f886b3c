"""Entry point for redisview."""

from __future__ import annotations

import argparse
import logging
import sys

from redisview.backend import RedisBackend
from redisview.config import ViewerConfig
from redisview.exceptions import ConfigError
from redisview.tui.app import RedisViewTUI

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Interactive terminal browser for Redis")
    parser.add_argument("--host", type=str, help="Server host (default: localhost)")
    parser.add_argument("--port", type=int, help="Server port (default: 6379)")
    parser.add_argument("--username", type=str, help="ACL username")
    parser.add_argument("--password", type=str, help="Password")
    parser.add_argument("--ssl", action="store_true", default=None, help="Connect over TLS")
    parser.add_argument("--db", type=int, help="Initially selected database (0-15)")
    parser.add_argument("--history-size", type=int, help="Entries kept per history")
    parser.add_argument("--log-file", type=str, help="Write debug logs to this file")
    return parser


def configure_logging(log_file: str | None) -> None:
    """Send logs to a file; the terminal belongs to the TUI."""
    if log_file:
        logging.basicConfig(filename=log_file, level=logging.DEBUG, format=LOG_FORMAT)
    else:
        logging.getLogger("redisview").addHandler(logging.NullHandler())


def main(argv: list[str] | None = None) -> None:
    """Run the redisview TUI."""
    args = build_parser().parse_args(argv)
    try:
        config = ViewerConfig.load(
            host=args.host,
            port=args.port,
            username=args.username,
            password=args.password,
            ssl=args.ssl,
            db=args.db,
            history_size=args.history_size,
            log_file=args.log_file,
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    configure_logging(config.log_file)
    logging.getLogger(__name__).info("Connecting to %s", config.address)

    app = RedisViewTUI(
        backend=RedisBackend.from_config(config),
        server=config.address,
        database=config.db,
        history_size=config.history_size,
    )
    app.run()


if __name__ == "__main__":
    main()
