"""oauthbridge entry point."""

import argparse
import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

from oauthbridge.config import get_settings
from oauthbridge.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _version() -> str:
    try:
        return get_version("oauthbridge")
    except PackageNotFoundError:
        from oauthbridge import __version__

        return __version__


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="oauthbridge - OAuth authorization-code bridge backed by GitHub login",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  oauthbridge                        Start the bridge on the configured host/port
  oauthbridge --host 0.0.0.0         Listen on all interfaces
  oauthbridge --dev                  Start with auto-reload (dev mode)
""",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind (default: OAUTHBRIDGE_HOST or 127.0.0.1)",
    )
    parser.add_argument(
        "--port", "-p", type=int, default=None, help="Port to bind (default: 8787)"
    )
    parser.add_argument(
        "--dev", action="store_true", help="Development mode with auto-reload"
    )
    parser.add_argument(
        "--log-level", default="INFO", help="Log level (default: INFO)"
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {_version()}")

    args = parser.parse_args()
    setup_logging(level="DEBUG" if args.dev else args.log_level)

    settings = get_settings()
    host = args.host or settings.host
    port = args.port or settings.port

    from oauthbridge.api.serve import run_api_server

    try:
        run_api_server(host=host, port=port, dev=args.dev)
    except KeyboardInterrupt:
        logger.info("oauthbridge stopped")


if __name__ == "__main__":
    main()
