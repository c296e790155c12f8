# lehrplan_mcp/config/settings.py
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from lehrplan_mcp.errors import ConfigurationError
from lehrplan_mcp.graph.registry import GraphRegistry

TRANSPORTS = ("stdio", "streamable-http")

DEFAULT_TRANSPORT = "stdio"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_TIMEOUT = 60.0
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    sparql_endpoint: str
    graphs: GraphRegistry
    transport: str = DEFAULT_TRANSPORT
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    # seconds; None disables the HTTP timeout
    sparql_timeout: Optional[float] = DEFAULT_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL
    log_dir: Optional[str] = None


def require_env(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name, "").strip()
    if not value:
        raise ConfigurationError(
            f"Missing required environment variable: {name}. See .env.example for reference."
        )
    return value


def parse_port(value) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f'Invalid PORT value: "{value}". Must be a number between 1 and 65535.') from None
    if not 1 <= port <= 65535:
        raise ConfigurationError(f'Invalid PORT value: "{value}". Must be a number between 1 and 65535.')
    return port


def parse_transport(value: str) -> str:
    if value not in TRANSPORTS:
        raise ConfigurationError(f'Invalid MCP_TRANSPORT value: "{value}". Use one of: {", ".join(TRANSPORTS)}.')
    return value


def parse_log_level(value: str) -> str:
    level = value.strip().upper() or DEFAULT_LOG_LEVEL
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError(f'Invalid LOG_LEVEL value: "{value}".')
    return level


def _parse_timeout(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return DEFAULT_TIMEOUT
    try:
        timeout = float(value)
    except ValueError:
        raise ConfigurationError(f'Invalid SPARQL_TIMEOUT value: "{value}". Must be a number of seconds.') from None
    if timeout < 0:
        raise ConfigurationError(f'Invalid SPARQL_TIMEOUT value: "{value}". Must not be negative.')
    return timeout or None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from ``environ``, or from ``.env`` and the process environment.

    Variables already present in the environment take precedence over ``.env``.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    return Settings(
        sparql_endpoint=require_env(environ, "SPARQL_ENDPOINT"),
        graphs=GraphRegistry.from_environ(environ),
        transport=parse_transport(environ.get("MCP_TRANSPORT", "").strip() or DEFAULT_TRANSPORT),
        host=environ.get("HOST", DEFAULT_HOST).strip() or DEFAULT_HOST,
        port=parse_port(environ.get("PORT", DEFAULT_PORT)),
        sparql_timeout=_parse_timeout(environ.get("SPARQL_TIMEOUT")),
        log_level=parse_log_level(environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL)),
        log_dir=environ.get("LOG_DIR", "").strip() or None,
    )
