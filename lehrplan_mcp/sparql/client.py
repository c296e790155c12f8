# lehrplan_mcp/sparql/client.py
import io
import logging
import time

import httpx
from rdflib.query import Result

from lehrplan_mcp.errors import QueryExecutionError

logger = logging.getLogger(__name__)

ERROR_BODY_LIMIT = 200

REQUEST_HEADERS = {
    "Content-Type": "application/sparql-query",
    "Accept": "application/sparql-results+json",
}


class SparqlClient:
    """Executes query text against a SPARQL endpoint and parses the JSON results."""

    def __init__(self, endpoint: str, http: httpx.AsyncClient):
        self.endpoint = endpoint
        self._http = http

    async def execute(self, query: str) -> Result:
        logger.debug(f"Executing SPARQL query:\n{query}")
        start_time = time.time()
        try:
            response = await self._http.post(
                self.endpoint, content=query.encode("utf-8"), headers=REQUEST_HEADERS
            )
        except httpx.HTTPError as e:
            logger.error(f"SPARQL request to {self.endpoint} failed: {e}")
            raise QueryExecutionError(f"SPARQL request failed: {e}") from e

        if not response.is_success:
            body = response.text[:ERROR_BODY_LIMIT]
            raise QueryExecutionError(
                f"SPARQL query failed ({response.status_code}): {body}",
                status_code=response.status_code,
                body=body,
            )

        try:
            result = Result.parse(io.BytesIO(response.content), format="json")
        except (ValueError, KeyError, TypeError, NotImplementedError) as e:
            raise QueryExecutionError(
                f"SPARQL endpoint returned an unreadable result: {e}",
                status_code=response.status_code,
                body=response.text[:ERROR_BODY_LIMIT],
            ) from e

        logger.debug(f"SPARQL query returned {len(result.bindings)} rows in {time.time() - start_time:.2f}s")
        return result
