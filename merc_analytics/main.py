"""Main entry point for MERC Analytics."""

import argparse
import logging
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from .config import default_config, load_config
from .log import setup_app_logging
from .server import create_app

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="MERC Analytics - holder, transfer and liquidity API for the MERC token"
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default="config.yaml",
        help="Path to configuration file (default: config.yaml, built-in defaults if missing)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--host", type=str, default=None, help="Bind address (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="Port (overrides config)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None):
    """Main entry point."""
    args = parse_args(argv)
    load_dotenv()

    config_path = Path(args.config)
    config = load_config(config_path) if config_path.exists() else default_config()

    # Override log level if debug flag is set
    if args.debug:
        config.logging.level = "DEBUG"
    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port

    setup_app_logging(
        config.logging.level,
        log_file=config.logging.file,
        max_file_size_mb=config.logging.max_file_size_mb,
        backup_count=config.logging.backup_count,
    )
    if not config_path.exists():
        logger.info(f"No config file at {config_path}, using built-in defaults")

    app = create_app(config)
    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
