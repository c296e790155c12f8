# lehrplan_mcp/resolvers/entities.py
import logging
from dataclasses import dataclass
from typing import Sequence

from rdflib import URIRef
from rdflib.term import Variable

from lehrplan_mcp.errors import ResolutionError
from lehrplan_mcp.graph.ontology import HAS_SCHOOL_TYPE, HAS_SUBJECT
from lehrplan_mcp.queries.builder import entity_lookup_query

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityResolver:
    """Resolves a human label (e.g. "Biologie") to the URI of a Schulfach or Schulart.

    Resolution is always restricted to one Bundesland and to the graphs in
    its scope, because the same label exists once per state.
    """

    kind: str
    link: URIRef
    list_tool: str
    plural: str

    async def resolve(self, client, label: str, bundesland_uri: str, graphs: Sequence[str]) -> str:
        query = entity_lookup_query(self.link, label, bundesland_uri, graphs)
        results = await client.execute(query)
        if not results.bindings:
            raise ResolutionError(
                f'{self.kind} "{label}" not found for this Bundesland. '
                f"Use {self.list_tool} to see available {self.plural}."
            )
        uri = str(results.bindings[0][Variable("uri")])
        logger.debug(f"Resolved {self.kind} {label!r} to {uri}")
        return uri


SCHULFACH = EntityResolver("Schulfach", HAS_SUBJECT, "list_schulfaecher", "subjects")
SCHULART = EntityResolver("Schulart", HAS_SCHOOL_TYPE, "list_schularten", "school types")
