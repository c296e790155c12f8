# lehrplan_mcp/server.py
"""
Lehrplan SPARQL MCP Server

Exposes curated query tools over the federated Lehrplan triple store: German
school curricula, one named graph per Bundesland plus shared ontology,
Schulart and Schulfach graphs.
"""
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any, Awaitable, Dict, Optional

import httpx
from mcp.server.fastmcp import Context, FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from lehrplan_mcp.config.settings import Settings
from lehrplan_mcp.errors import LehrplanError
from lehrplan_mcp.graph.ontology import LP
from lehrplan_mcp.queries.builder import MAX_DEPTH, MAX_GRADE, MIN_DEPTH, MIN_GRADE
from lehrplan_mcp.service import DEFAULT_TREE_DEPTH, LehrplanService
from lehrplan_mcp.sparql.client import SparqlClient

logger = logging.getLogger(__name__)

SERVER_NAME = "Lehrplan SPARQL"

BUNDESLAND_HELP = "State code (BY, SN, RP, ...) or name (Bayern, Sachsen, Rheinland-Pfalz, ...)"


@asynccontextmanager
async def lehrplan_lifespan(server: FastMCP, settings: Settings) -> AsyncIterator[Dict[str, Any]]:
    """Open the HTTP connection pool to the SPARQL endpoint for the server's lifetime.

    Yields:
        Dict[str, Any]: Context dictionary holding the service and settings.
    """
    logger.info(f"Connecting to SPARQL endpoint: {settings.sparql_endpoint}")
    async with httpx.AsyncClient(timeout=settings.sparql_timeout) as http:
        client = SparqlClient(settings.sparql_endpoint, http)
        try:
            yield {
                "service": LehrplanService(client, settings.graphs),
                "settings": settings,
            }
        finally:
            logger.info("Shutting down Lehrplan SPARQL connection")


def get_service(ctx: Context) -> LehrplanService:
    return ctx.request_context.lifespan_context["service"]


async def run_tool(operation: str, call: Awaitable[str]) -> str:
    """Await a service call, turning every failure into a tool error for the client."""
    try:
        return await call
    except LehrplanError as e:
        logger.warning(f"{operation} failed: {e}")
        raise ToolError(str(e)) from e
    except Exception as e:
        logger.exception(f"Unexpected error in {operation}")
        raise ToolError(f"Unexpected error in {operation}: {e}") from e


def build_server(settings: Settings) -> FastMCP:
    """Create the FastMCP server with every Lehrplan tool registered."""
    mcp = FastMCP(
        SERVER_NAME,
        instructions=(
            "Query German school curricula (Lehrpläne). Start with list_bundeslaender, "
            "list_schulfaecher and list_schularten, then find_lehrplaene, "
            "get_lehrplan_tree / get_children or search."
        ),
        lifespan=lambda server: lehrplan_lifespan(server, settings),
        host=settings.host,
        port=settings.port,
    )

    #################################################################
    # Raw access
    #################################################################

    @mcp.tool(
        description=(
            "Execute a SPARQL query against the Lehrplan triple store. "
            f"PREFIX lp: <{LP}> is available. "
            "You MUST include FROM clauses for the graphs you need. "
            f"Available graphs: {settings.graphs.describe()}"
        )
    )
    async def sparql_query(
        query: Annotated[str, Field(description="The full SPARQL SELECT query to execute")],
        ctx: Context,
    ) -> str:
        return await run_tool("sparql_query", get_service(ctx).sparql_query(query))

    @mcp.tool()
    async def health_check(ctx: Context) -> str:
        """Check that the SPARQL endpoint is reachable and answers queries."""
        return await run_tool("health_check", get_service(ctx).health_check())

    #################################################################
    # Listings
    #################################################################

    @mcp.tool()
    async def list_bundeslaender(ctx: Context) -> str:
        """List all German federal states (Bundesländer) available in the ontology with their URIs."""
        return await run_tool("list_bundeslaender", get_service(ctx).list_bundeslaender())

    @mcp.tool()
    async def list_schulfaecher(
        bundesland: Annotated[str, Field(description=BUNDESLAND_HELP)],
        ctx: Context,
    ) -> str:
        """List all school subjects (Schulfächer) for a Bundesland.

        Accepts a state code (BY, SN, RP, ...) or name (Bayern, Sachsen, ...).
        """
        return await run_tool("list_schulfaecher", get_service(ctx).list_schulfaecher(bundesland))

    @mcp.tool()
    async def list_schularten(
        bundesland: Annotated[str, Field(description=BUNDESLAND_HELP)],
        ctx: Context,
    ) -> str:
        """List all school types (Schularten) for a Bundesland.

        Accepts a state code (BY, SN, RP, ...) or name (Bayern, Sachsen, ...).
        """
        return await run_tool("list_schularten", get_service(ctx).list_schularten(bundesland))

    #################################################################
    # Lehrpläne
    #################################################################

    @mcp.tool()
    async def find_lehrplaene(
        bundesland: Annotated[str, Field(description=BUNDESLAND_HELP)],
        ctx: Context,
        schulfach: Annotated[
            Optional[str], Field(description="Optional: subject name in German (e.g. Biologie, Mathematik)")
        ] = None,
        schulart: Annotated[
            Optional[str], Field(description="Optional: school type name (e.g. Gymnasium, Grundschule)")
        ] = None,
        jahrgangsstufe: Annotated[
            Optional[int],
            Field(ge=MIN_GRADE, le=MAX_GRADE, description=f"Optional: grade level ({MIN_GRADE}-{MAX_GRADE})"),
        ] = None,
    ) -> str:
        """Find curricula (Lehrpläne) by Bundesland, optionally filtered by Schulfach, Schulart or Jahrgangsstufe.

        For Schulfach and Schulart, use the German name as shown by the list tools.
        """
        return await run_tool(
            "find_lehrplaene",
            get_service(ctx).find_lehrplaene(bundesland, schulfach, schulart, jahrgangsstufe),
        )

    @mcp.tool()
    async def get_lehrplan_tree(
        lehrplanUri: Annotated[str, Field(description="URI of the Lehrplan (from find_lehrplaene results)")],  # noqa: N803
        ctx: Context,
        depth: Annotated[
            int,
            Field(ge=MIN_DEPTH, le=MAX_DEPTH, description=f"How many levels deep to retrieve (default {DEFAULT_TREE_DEPTH})"),
        ] = DEFAULT_TREE_DEPTH,
    ) -> str:
        """Get the hierarchical structure (parent-child via 'hat Teil') of a Lehrplan.

        The depth parameter controls how many levels deep the tree goes. Use
        get_children to drill deeper into specific nodes.
        """
        return await run_tool("get_lehrplan_tree", get_service(ctx).get_lehrplan_tree(lehrplanUri, depth))

    @mcp.tool()
    async def get_children(
        nodeUri: Annotated[str, Field(description="URI of the node to get children for")],  # noqa: N803
        ctx: Context,
    ) -> str:
        """Get the direct children of a node in the Lehrplan hierarchy (via 'hat Teil')."""
        return await run_tool("get_children", get_service(ctx).get_children(nodeUri))

    @mcp.tool()
    async def search(
        query: Annotated[str, Field(description="Search term (e.g. 'Fisch', 'Evolution')")],
        ctx: Context,
        bundesland: Annotated[Optional[str], Field(description=f"Optional: {BUNDESLAND_HELP} to limit search")] = None,
        schulfach: Annotated[
            Optional[str],
            Field(description="Optional: subject name in German (e.g. Biologie). Requires bundesland."),
        ] = None,
    ) -> str:
        """Full-text search across all Lehrplan nodes by keyword.

        Uses prefix matching (e.g. 'Fisch' also finds 'Fische') and returns
        matching nodes with their parent for context.
        """
        return await run_tool("search", get_service(ctx).search(query, bundesland, schulfach))

    return mcp
