#!/usr/bin/env python3
"""
Mini-Cache Server Entry Point

This is the main entry point for starting the Mini-Cache server.

Usage:
    python -m minicache.server                    # Default settings (127.0.0.1:6379)
    python -m minicache.server --port 8080        # Custom port
    python -m minicache.server --host 0.0.0.0     # Custom host
    python -m minicache.server --debug            # Enable debug logging

Environment Variables:
    MINICACHE_HOST       - Server bind address
    MINICACHE_PORT       - Server port
    MINICACHE_DEBUG      - Enable debug mode (true/false)
    MINICACHE_LOG_LEVEL  - Log level when debug mode is off
"""

import argparse
import asyncio
import logging
import signal
import sys

from .config.settings import settings
from .network.tcp_server import CacheServer


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Mini-Cache: In-Memory Key-Value Cache Server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Host address to bind to",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Port number to listen on",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def main() -> None:
    """Main entry point for the server."""
    args = parse_args()

    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    server = CacheServer(host=args.host, port=args.port)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    async def shutdown(sig: signal.Signals) -> None:
        """Handle shutdown signal."""
        logger.info(f"Received signal {sig.name}, initiating shutdown...")
        await server.stop()

    # Register signal handlers (Unix only)
    if sys.platform != 'win32':
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(
                sig,
                lambda s=sig: asyncio.ensure_future(shutdown(s))
            )

    logger.info("Starting Mini-Cache server")
    logger.info(f"  Host: {args.host}")
    logger.info(f"  Port: {args.port}")
    logger.info(f"  Debug: {args.debug}")

    try:
        loop.run_until_complete(server.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        loop.run_until_complete(server.stop())
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise
    finally:
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    main()
