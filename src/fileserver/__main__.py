"""
=============================================================================
FILESERVER CLI ENTRY POINT
=============================================================================

    usage: fileserver [-h] [-p PORT] [-i CMD] [-l LEVEL] [--log-format FMT]
                      [-v] ROOT_PATH

    # Serve ./public on an OS-chosen port (printed in the log)
    fileserver ./public

    # Fixed port, debug logging
    fileserver -p 8080 -l DEBUG /var/www

    # Different interpreter for .php files
    fileserver -i "/usr/bin/php-cgi8.2" /var/www

    # Same thing as a module
    python -m fileserver -p 8080 /var/www

=============================================================================
EXIT STATUS
=============================================================================

    0   -h/-v, or stopped with Ctrl+C / SIGTERM
    1   ROOT_PATH unusable, or a socket error (port in use, ...)
    2   bad arguments: missing/empty ROOT_PATH, PORT outside 0-32767

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .config import MAX_PORT, LOG_FORMATS, ServerConfig, canonicalize_root
from .server import FileServer


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="fileserver",
        description="Minimal sequential HTTP/1.1 server for static files and PHP scripts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fileserver ./public                  # OS-assigned port
  fileserver -p 8080 /var/www          # Fixed port
  fileserver -l DEBUG -p 8080 .        # Verbose logging
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # POSITIONAL
    # ─────────────────────────────────────────────────────────────────────
    parser.add_argument(
        "root_path",
        metavar="ROOT_PATH",
        help="Directory to serve files from"
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────
    parser.add_argument(
        "-p", "--port",
        type=int,
        default=0,
        help=f"Port to listen on, 0-{MAX_PORT} (default: 0, chosen by the OS)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # DYNAMIC CONTENT
    # ─────────────────────────────────────────────────────────────────────
    parser.add_argument(
        "-i", "--interpreter",
        metavar="CMD",
        default="php-cgi",
        help="CGI interpreter command for .php files (default: php-cgi)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────
    parser.add_argument(
        "-l", "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=list(LOG_FORMATS),
        default="text",
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"fileserver {__version__}"
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Arguments without the program name (default: sys.argv[1:]).

    Returns:
        Process exit status. Argument errors exit with 2 from argparse.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    # =========================================================================
    # VALIDATE ARGUMENTS
    # =========================================================================
    if not 0 <= args.port <= MAX_PORT:
        parser.error(f"PORT must be between 0 and {MAX_PORT}")

    if not args.root_path:
        parser.error("ROOT_PATH must not be empty")

    try:
        root = canonicalize_root(args.root_path)
    except OSError as e:
        print(f"{args.root_path}: {e.strerror or e}", file=sys.stderr)
        return 1

    # =========================================================================
    # CREATE AND RUN SERVER
    # =========================================================================
    config = ServerConfig(
        root=root,
        port=args.port,
        interpreter=args.interpreter,
        log_level=args.log_level,
        log_format=args.log_format,
    )

    try:
        server = FileServer(config)
        server.run()  # Blocks until SIGINT/SIGTERM
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
