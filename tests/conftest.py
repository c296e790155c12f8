import io
import json

import pytest
from rdflib.query import Result

from lehrplan_mcp.graph.registry import GraphRegistry

ONTOLOGY = "https://example.org/graph/ontology"
SCHULART = "https://example.org/graph/schulart"
SCHULFACH = "https://example.org/graph/schulfach"
SACHSEN = "https://example.org/graph/sachsen"
BAYERN = "https://example.org/graph/bayern"

BASE_ENV = {
    "SPARQL_ENDPOINT": "http://localhost:8890/sparql",
    "GRAPH_ONTOLOGY": ONTOLOGY,
    "GRAPH_SCHULART": SCHULART,
    "GRAPH_SCHULFACH": SCHULFACH,
    "GRAPH_STATE_SN": SACHSEN,
    "GRAPH_STATE_BY": BAYERN,
}


def _term(value):
    if isinstance(value, dict):
        return value
    if value.startswith(("http://", "https://")):
        return {"type": "uri", "value": value}
    return {"type": "literal", "value": value}


def make_result(variables, rows=()):
    """Build a parsed SELECT result the way the endpoint would return it."""
    payload = {
        "head": {"vars": list(variables)},
        "results": {
            "bindings": [
                {name: _term(value) for name, value in row.items() if value is not None}
                for row in rows
            ]
        },
    }
    return Result.parse(io.BytesIO(json.dumps(payload).encode("utf-8")), format="json")


class FakeSparqlClient:
    """Records every query and answers with the queued results in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.queries = []

    async def execute(self, query):
        self.queries.append(query)
        if not self.responses:
            return make_result([])
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture()
def env():
    return dict(BASE_ENV)


@pytest.fixture()
def registry(env):
    return GraphRegistry.from_environ(env)


@pytest.fixture()
def result_factory():
    return make_result


@pytest.fixture()
def fake_client_factory():
    return FakeSparqlClient


def from_lines(query):
    """The FROM graphs of a query, in order."""
    return [
        line[len("FROM <"):-1]
        for line in query.splitlines()
        if line.startswith("FROM <")
    ]


@pytest.fixture()
def graphs_of():
    return from_lines
