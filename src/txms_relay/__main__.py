"""CLI entry point for the TxMS relay.

Usage:
    python -m txms_relay [options]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.config
import sys
from typing import NoReturn

from pydantic import ValidationError

from txms_relay import __version__
from txms_relay.config import Settings, clear_settings_cache, get_settings
from txms_relay.provider.models import ProviderKind
from txms_relay.server import RelayServer
from txms_relay.shutdown import GracefulShutdown

# Application info
APP_NAME = "TxMS Relay"
APP_VERSION = __version__

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="txms-relay",
        description="Relay SMS/MMS encoded transactions to a blockchain node.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m txms_relay                    Serve the webhook
  python -m txms_relay --config-check     Validate config and exit
  python -m txms_relay --port 9000        Listen on another port
  python -m txms_relay --log-level DEBUG  Enable debug logging
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {APP_VERSION}",
    )

    parser.add_argument(
        "--config-check",
        action="store_true",
        help="Validate configuration and exit without serving",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level (default: from settings)",
    )

    parser.add_argument(
        "--host",
        default=None,
        help="Override listen address (default: from settings)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Override listen port (default: from settings)",
    )

    return parser


def configure_logging(level: str) -> None:
    """Configure logging for the application.

    Args:
        level: Logging level string (DEBUG, INFO, etc.)
    """
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": (
                    "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "detailed" if level == "DEBUG" else "standard",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
        # Quieter logging for noisy libraries
        "loggers": {
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
            "aiohttp.access": {"level": "WARNING"},
        },
    }
    logging.config.dictConfig(config)


def print_config_summary(settings: Settings) -> None:
    """Print a summary of the configuration.

    Args:
        settings: Application settings.
    """
    summary = settings.redacted_summary()
    provider = summary["provider"]
    print(f"{APP_NAME} v{APP_VERSION}")
    print("Configuration:")
    if isinstance(provider, dict):
        print(f"  Provider: {provider['type']} -> {provider['url']}")
        if ProviderKind.from_tag(settings.node.provider_type) == ProviderKind.JSON_RPC:
            print(f"  RPC Method: {provider['rpc_method']}")
        print(f"  Provider Timeout: {provider['timeout']}s")
    print(f"  MMS: {'enabled' if summary['mms_enabled'] == 'True' else 'disabled'}")
    print(f"  Fields: body={summary['body_name']} media={summary['media_name']}")
    print(f"  Segment Policy: {summary['segment_policy']}")
    print(f"  Log Level: {summary['log_level']}")
    print(f"  Listen: {summary['listen']}")
    print()


def validate_config() -> Settings | None:
    """Validate and load configuration.

    Returns:
        Settings instance if valid, None if invalid.
    """
    try:
        # Clear cache to force reload
        clear_settings_cache()
        return get_settings()
    except ValidationError as e:
        print("Configuration validation failed:", file=sys.stderr)
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            msg = error["msg"]
            print(f"  {field}: {msg}", file=sys.stderr)
        return None


def run_config_check(settings: Settings) -> int:
    """Run configuration check and exit.

    Args:
        settings: Validated settings.

    Returns:
        Exit code (0 for success, 2 for an unknown provider type).
    """
    print("Configuration is valid!")
    print()
    print_config_summary(settings)

    if ProviderKind.from_tag(settings.node.provider_type) is None:
        print(f"  Unknown PROVIDER_TYPE: {settings.node.provider_type}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    print("All checks passed. Ready to run.")
    return EXIT_SUCCESS


async def run_server(settings: Settings, host: str, port: int) -> int:
    """Serve the relay until a shutdown signal arrives.

    Args:
        settings: Application settings.
        host: Address to bind.
        port: Port to listen on.

    Returns:
        Exit code.
    """
    logger = logging.getLogger(__name__)

    try:
        async with GracefulShutdown() as shutdown:
            server = RelayServer.from_settings(settings)
            shutdown.register_cleanup(server.stop)

            await server.start(host=host, port=port)
            logger.info("Relay running. Press Ctrl+C to stop.")

            await shutdown.wait()
            logger.info("Shutdown signal received, stopping server...")

        return EXIT_SUCCESS
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.exception("Relay failed: %s", e)
        return EXIT_ERROR


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:]).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Validate configuration first
    settings = validate_config()
    if settings is None:
        sys.exit(EXIT_CONFIG_ERROR)

    log_level = args.log_level or settings.effective_log_level
    configure_logging(log_level)

    if args.config_check:
        sys.exit(run_config_check(settings))

    print_config_summary(settings)

    host = args.host if args.host is not None else settings.host
    port = args.port if args.port is not None else settings.port
    exit_code = asyncio.run(run_server(settings, host, port))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
