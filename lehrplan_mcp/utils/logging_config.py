# lehrplan_mcp/utils/logging_config.py
import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "lehrplan_mcp.log"


def setup_logging(level: str = "INFO", log_dir: Optional[str] = None):
    """Configure root logging for the server.

    Logs go to stderr, since stdout carries the stdio transport. With
    ``log_dir`` set, they are also written to ``<log_dir>/lehrplan_mcp.log``.
    """
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(log_dir, LOG_FILE), encoding="utf-8"))

    # Remove existing handlers to avoid duplicated log lines
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers)

    # request logs of the HTTP client are too chatty at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
