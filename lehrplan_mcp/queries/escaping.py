# lehrplan_mcp/queries/escaping.py
"""Escaping for values interpolated into SPARQL query text.

Every caller-influenced value goes through exactly one of these functions
before it is placed into a query.
"""
import re

from lehrplan_mcp.errors import InvalidArgumentError

# Characters not allowed inside an IRIREF (SPARQL 1.1 grammar, production 139)
_IRI_FORBIDDEN = re.compile(r'[\x00-\x20<>"{}|^`\\]')

_LITERAL_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_TOKEN_STRIP = re.compile(r"['\"\\]")


def escape_iri(value: str) -> str:
    """Return ``value`` wrapped in angle brackets, rejecting characters that would end the IRI."""
    iri = value.strip()
    if not iri:
        raise InvalidArgumentError("URI must not be empty.")
    if _IRI_FORBIDDEN.search(iri):
        raise InvalidArgumentError(f'Invalid URI: "{value}" contains characters not allowed in an IRI.')
    return f"<{iri}>"


def escape_literal(value: str) -> str:
    """Return ``value`` as a double-quoted SPARQL string literal."""
    return '"' + "".join(_LITERAL_ESCAPES.get(ch, ch) for ch in value) + '"'


def clean_search_token(token: str) -> str:
    # quotes and backslashes would terminate the bif:contains expression or its literal
    return _TOKEN_STRIP.sub("", token)
