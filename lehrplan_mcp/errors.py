# lehrplan_mcp/errors.py
from typing import Optional


class LehrplanError(Exception):
    """Base class for every error the Lehrplan tools report to the caller."""


class ConfigurationError(LehrplanError):
    """Required configuration is missing or invalid. Fatal at startup."""


class ResolutionError(LehrplanError):
    """A Bundesland, Schulfach or Schulart could not be resolved to a URI."""


class InvalidArgumentError(LehrplanError):
    """An argument is out of range or cannot be embedded into a query."""


class QueryExecutionError(LehrplanError):
    """The SPARQL endpoint rejected the query or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
