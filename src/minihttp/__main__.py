"""
=============================================================================
MINIHTTP CLI ENTRY POINT
=============================================================================

    # Serve files from the current directory on 127.0.0.1:4221
    python -m minihttp

    # Serve files from /tmp/data
    python -m minihttp --directory /tmp/data

Only --directory is read from the command line; anything else on argv is
ignored so wrappers can pass extra flags through. Host, port, timeout and
logging come from the environment (see ServerConfig.from_env); so does the
directory when --directory is not given (HTTP_DIRECTORY).

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Minimal thread-per-connection HTTP/1.1 server",
    )
    parser.add_argument(
        "--directory",
        default=None,
        help="Directory for /files/<name> reads and writes "
             "(default: $HTTP_DIRECTORY, else ./)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"minihttp {__version__}",
    )
    return parser


def main(argv=None):
    """Parse arguments, build the config, and run the server (blocking)."""
    args, _ = build_parser().parse_known_args(argv)

    try:
        config = ServerConfig.from_env()
        if args.directory is not None:
            config.directory = args.directory
        server = HTTPServer(config)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
