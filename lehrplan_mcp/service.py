# lehrplan_mcp/service.py
"""Caller-facing Lehrplan operations.

Each method resolves its free-form arguments, builds one final query, runs it
and returns formatted text. Errors are raised as :class:`LehrplanError`
subclasses; turning them into tool errors is the server's job.
"""
import logging
from typing import Optional

from lehrplan_mcp.errors import InvalidArgumentError, QueryExecutionError, ResolutionError
from lehrplan_mcp.graph.registry import GraphRegistry
from lehrplan_mcp.queries import builder
from lehrplan_mcp.queries.tree import analyze_tree
from lehrplan_mcp.resolvers.bundesland import resolve_bundesland
from lehrplan_mcp.resolvers.entities import SCHULART, SCHULFACH
from lehrplan_mcp.sparql.formatting import format_results

logger = logging.getLogger(__name__)

DEFAULT_TREE_DEPTH = 2
NO_CHILDREN = "No children found (leaf node)."
HEALTH_QUERY = "ASK { ?s ?p ?o }"


class LehrplanService:
    def __init__(self, client, registry: GraphRegistry):
        self.client = client
        self.registry = registry

    async def sparql_query(self, query: str) -> str:
        if not query.strip():
            raise InvalidArgumentError("Query must not be empty.")
        results = await self.client.execute(query)
        return format_results(results)

    async def list_bundeslaender(self) -> str:
        query = builder.list_bundeslaender_query(self.registry.all_graphs())
        return format_results(await self.client.execute(query))

    async def list_schulfaecher(self, bundesland: str) -> str:
        bl = resolve_bundesland(bundesland)
        query = builder.list_schulfaecher_query(bl.uri, self.registry.scope_for(bl.code))
        return format_results(await self.client.execute(query))

    async def list_schularten(self, bundesland: str) -> str:
        bl = resolve_bundesland(bundesland)
        query = builder.list_schularten_query(bl.uri, self.registry.scope_for(bl.code))
        return format_results(await self.client.execute(query))

    async def find_lehrplaene(
        self,
        bundesland: str,
        schulfach: Optional[str] = None,
        schulart: Optional[str] = None,
        jahrgangsstufe: Optional[int] = None,
    ) -> str:
        if jahrgangsstufe is not None:
            # fail before issuing any resolution query
            builder.grade_level_uri(jahrgangsstufe)

        bl = resolve_bundesland(bundesland)
        graphs = self.registry.scope_for(bl.code)

        schulfach_uri = None
        if schulfach:
            schulfach_uri = await SCHULFACH.resolve(self.client, schulfach, bl.uri, graphs)
        schulart_uri = None
        if schulart:
            schulart_uri = await SCHULART.resolve(self.client, schulart, bl.uri, graphs)

        query = builder.find_lehrplaene_query(
            bl.uri,
            graphs,
            schulfach_uri=schulfach_uri,
            schulart_uri=schulart_uri,
            jahrgangsstufe=jahrgangsstufe,
        )
        return format_results(await self.client.execute(query))

    async def get_lehrplan_tree(self, lehrplan_uri: str, depth: int = DEFAULT_TREE_DEPTH) -> str:
        query = builder.tree_query(lehrplan_uri, depth, self.registry.all_graphs())
        shape = analyze_tree(await self.client.execute(query))

        text = format_results(shape.edges)
        if shape.may_continue:
            text += (
                f"\n\n(Tree shown to depth {depth}. Deeper levels may exist. "
                "Use get_children to explore further.)"
            )
        return text

    async def get_children(self, node_uri: str) -> str:
        query = builder.children_query(node_uri, self.registry.all_graphs())
        results = await self.client.execute(query)
        if not results.bindings:
            return NO_CHILDREN
        return format_results(results)

    async def search(
        self,
        query: str,
        bundesland: Optional[str] = None,
        schulfach: Optional[str] = None,
    ) -> str:
        if schulfach and not bundesland:
            raise ResolutionError("Bundesland is required when filtering by Schulfach.")

        graphs = self.registry.all_graphs()
        bundesland_uri = None
        if bundesland:
            bl = resolve_bundesland(bundesland)
            graphs = self.registry.scope_for(bl.code)
            bundesland_uri = bl.uri

        if schulfach:
            # reject an empty search before resolving the Schulfach
            builder.contains_expression(query)
            schulfach_uri = await SCHULFACH.resolve(self.client, schulfach, bundesland_uri, graphs)
            sparql = builder.search_by_subject_query(query, schulfach_uri, graphs)
        else:
            sparql = builder.search_query(query, graphs)

        results = await self.client.execute(sparql)
        if not results.bindings:
            return f'No results found for "{query}".'

        text = format_results(results)
        if len(results.bindings) == builder.RESULT_LIMIT:
            text += f"\n\n(Results limited to {builder.RESULT_LIMIT}. Try a more specific query or add filters.)"
        return text

    async def health_check(self) -> str:
        try:
            await self.client.execute(HEALTH_QUERY)
        except QueryExecutionError as e:
            logger.error(f"Health check error: {e}")
            return f"Unhealthy: {e}"
        return "Healthy - Lehrplan triplestore is responsive"
