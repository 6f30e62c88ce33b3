#!/usr/bin/env python3
"""Sleeper MCP Server - Main entry point.

Serves Sleeper fantasy football data to MCP clients over two transports:

    ws://HOST:PORT/mcp     WebSocket, subprotocol "mcp"
    http://HOST:PORT/sse   Server-Sent Events stream (GET) plus request
                           submission (POST ?session=<id>)

Configuration is read from config/server.yaml unless --config points
elsewhere. The default league may also be set with DEFAULT_LEAGUE_ID.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from sleeper_mcp import __version__
from sleeper_mcp.app import create_app
from sleeper_mcp.config import ConfigLoadError, ServerConfig, load_config

logger = logging.getLogger("sleeper_mcp")


def main() -> int:
    """Run the MCP server.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        description="Sleeper MCP Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config/server.yaml"),
        help="Path to server config YAML file (default: config/server.yaml)",
    )
    parser.add_argument("--host", help="Bind address (overrides config)")
    parser.add_argument("--port", type=int, help="Bind port (overrides config)")
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"sleeper-mcp {__version__}",
    )

    args = parser.parse_args()

    try:
        config = load_config(args.config) if args.config.exists() else ServerConfig.from_dict({})
    except ConfigLoadError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port

    logging.basicConfig(
        level=config.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if not args.config.exists():
        logger.warning("Config file %s not found, using defaults", args.config)

    logger.info("Sleeper MCP Server %s listening on %s:%d", __version__, config.host, config.port)

    try:
        uvicorn.run(
            create_app(config),
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
        )
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        return 130  # Standard exit code for SIGINT

    return 0


if __name__ == "__main__":
    sys.exit(main())
