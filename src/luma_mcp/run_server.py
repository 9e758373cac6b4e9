#!/usr/bin/env python3
"""
Startup script for the Luma MCP server.

The server speaks MCP over stdio, so all logging goes to stderr (and an
optional log file).
"""

import asyncio
import logging
import signal
import sys

from mcp.server.stdio import stdio_server

from . import SERVER_NAME, __version__
from .config import config
from .server import create_server
from .session import LumaSession
from .tools import TOOL_SPECS, ToolDispatcher

logger = logging.getLogger(SERVER_NAME)


def setup_logging():
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))
    logging.basicConfig(level=logging.DEBUG if config.debug else logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", handlers=handlers)


def setup_signal_handlers():
    """Setup graceful shutdown handlers"""

    def signal_handler(signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}, shutting down...")
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)


async def serve():
    """Run the MCP server on stdio until the host closes the stream"""
    session = LumaSession.from_config(config)
    server = create_server(ToolDispatcher(session))

    logger.info(f"Starting {SERVER_NAME} {__version__} on stdio")
    logger.info(f"Calendars file: {config.calendars_file} ({len(session.store.profiles)} configured)")
    logger.info(f"Export directory: {config.export_dir}")
    logger.info(f"Tools available: {len(TOOL_SPECS)}")
    if session.store.is_empty():
        if config.api_key:
            logger.info(f"No calendars configured, using LUMA_API_KEY as '{config.bootstrap_profile_name}'")
        else:
            logger.warning("No calendars configured and LUMA_API_KEY is not set; use configure_profile to add one")

    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await session.close()


def main():
    """Main server startup function"""
    setup_logging()
    setup_signal_handlers()

    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
