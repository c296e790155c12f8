# lehrplan_mcp/run.py
import argparse
import logging
import sys
from dataclasses import replace

from lehrplan_mcp.config.settings import TRANSPORTS, load_settings, parse_log_level, parse_port
from lehrplan_mcp.errors import ConfigurationError
from lehrplan_mcp.server import build_server
from lehrplan_mcp.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Lehrplan SPARQL MCP Server")
    parser.add_argument("--transport", choices=TRANSPORTS, help="MCP transport (default: MCP_TRANSPORT or stdio)")
    parser.add_argument("--host", help="Bind address for streamable-http (default: HOST or 127.0.0.1)")
    parser.add_argument("--port", help="Port for streamable-http (default: PORT or 3000)")
    parser.add_argument("--log-level", help="Logging level (default: LOG_LEVEL or INFO)")
    return parser.parse_args(argv)


def main(argv=None):
    """Load configuration, then serve the Lehrplan tools until the transport closes."""
    args = parse_args(argv)
    try:
        settings = load_settings()
        overrides = {}
        if args.transport:
            overrides["transport"] = args.transport
        if args.host:
            overrides["host"] = args.host
        if args.port:
            overrides["port"] = parse_port(args.port)
        if args.log_level:
            overrides["log_level"] = parse_log_level(args.log_level)
        settings = replace(settings, **overrides)
    except ConfigurationError as e:
        setup_logging()
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    setup_logging(settings.log_level, settings.log_dir)

    logger.info("Starting Lehrplan SPARQL MCP Server")
    logger.info(f"SPARQL endpoint: {settings.sparql_endpoint}")
    logger.info(f"Infrastructure graphs: {', '.join(settings.graphs.infrastructure)}")
    state_graphs = ", ".join(f"{code}={g}" for code, g in settings.graphs.states.items())
    logger.info(f"State graphs: {state_graphs or '(none)'}")

    mcp = build_server(settings)
    if settings.transport == "streamable-http":
        logger.info(f"Serving streamable HTTP on {settings.host}:{settings.port}")
    try:
        mcp.run(transport=settings.transport)
    except Exception as e:
        logger.error(f"Failed to start Lehrplan SPARQL server: {str(e)}")
        sys.exit(1)
    logger.info("mcp.run() completed")


if __name__ == "__main__":
    main()
