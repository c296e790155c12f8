import asyncio

import pytest

from lehrplan_mcp.errors import InvalidArgumentError, QueryExecutionError, ResolutionError
from lehrplan_mcp.service import NO_CHILDREN, LehrplanService

from conftest import BAYERN, ONTOLOGY, SACHSEN, SCHULART, SCHULFACH

INFRA = [ONTOLOGY, SCHULART, SCHULFACH]
ALL = INFRA + [SACHSEN, BAYERN]
SN_URI = "https://w3id.org/lehrplan/ontology/LP_3000047"
BIO = "https://example.org/fach/bio-sn"
GYM = "https://example.org/art/gym-sn"


@pytest.fixture()
def make_service(registry, fake_client_factory):
    def make(*responses):
        client = fake_client_factory(*responses)
        return LehrplanService(client, registry), client

    return make


def run(coro):
    return asyncio.run(coro)


def test_find_lehrplaene_end_to_end(make_service, result_factory, graphs_of):
    service, client = make_service(
        result_factory(["uri"], [{"uri": BIO}]),
        result_factory(["uri"], [{"uri": GYM}]),
        result_factory(["s", "label"], [{"s": "https://example.org/lp/1", "label": "Biologie Gymnasium"}]),
    )
    text = run(service.find_lehrplaene(bundesland="SN", schulfach="Biologie", schulart="Gymnasium"))

    assert text.splitlines()[0] == "s | label"
    assert len(client.queries) == 3
    for query in client.queries:
        assert graphs_of(query) == INFRA + [SACHSEN]

    final = client.queries[-1]
    filters = [line.strip() for line in final.splitlines() if line.strip().startswith("?s lp:")]
    assert filters == [
        f"?s lp:LP_0000029 <{SN_URI}> .",
        f"?s lp:LP_0000537 <{BIO}> .",
        f"?s lp:LP_0000812 <{GYM}> .",
    ]
    assert "?lpsubclass rdfs:subClassOf* lp:LP_0000438 ." in final
    assert final.rstrip().endswith("LIMIT 50")


def test_find_lehrplaene_with_grade_only(make_service):
    service, client = make_service()
    run(service.find_lehrplaene("Bayern", jahrgangsstufe=5))
    (query,) = client.queries
    assert "?s lp:LP_0000026 <https://w3id.org/lehrplan/ontology/LP_2000005> ." in query


def test_find_lehrplaene_rejects_grade_before_querying(make_service):
    service, client = make_service()
    with pytest.raises(InvalidArgumentError):
        run(service.find_lehrplaene("SN", schulfach="Biologie", jahrgangsstufe=14))
    assert client.queries == []


def test_unknown_subject_stops_before_final_query(make_service):
    service, client = make_service()
    with pytest.raises(ResolutionError, match="Use list_schulfaecher to see available subjects."):
        run(service.find_lehrplaene("SN", schulfach="Alchemie"))
    assert len(client.queries) == 1


def test_listings_use_state_scope(make_service, graphs_of):
    service, client = make_service()
    run(service.list_schulfaecher("sachsen"))
    run(service.list_schularten("Rheinland-Pfalz"))
    run(service.list_bundeslaender())
    assert graphs_of(client.queries[0]) == INFRA + [SACHSEN]
    assert graphs_of(client.queries[1]) == INFRA
    assert graphs_of(client.queries[2]) == ALL


def test_unknown_bundesland(make_service):
    service, client = make_service()
    with pytest.raises(ResolutionError, match='"Atlantis"'):
        run(service.list_schulfaecher("Atlantis"))
    assert client.queries == []


def test_tree_adds_advisory_when_leaves_remain(make_service, result_factory, graphs_of):
    service, client = make_service(
        result_factory(
            ["parent", "parentLabel", "child", "childLabel"],
            [
                {"parent": "https://example.org/root", "child": "https://example.org/a"},
                {"parent": "https://example.org/a", "child": "https://example.org/a1"},
            ],
        )
    )
    text = run(service.get_lehrplan_tree("https://example.org/root", depth=2))
    assert text.startswith("parent | parentLabel | child | childLabel\n---\n")
    assert text.endswith(
        "(Tree shown to depth 2. Deeper levels may exist. Use get_children to explore further.)"
    )
    assert graphs_of(client.queries[0]) == ALL


def test_tree_without_rows_has_no_advisory(make_service):
    service, _ = make_service()
    assert run(service.get_lehrplan_tree("https://example.org/root")) == "No results."


@pytest.mark.parametrize("depth", [0, 11])
def test_tree_depth_is_validated_before_querying(make_service, depth):
    service, client = make_service()
    with pytest.raises(InvalidArgumentError):
        run(service.get_lehrplan_tree("https://example.org/root", depth=depth))
    assert client.queries == []


def test_children_of_leaf(make_service):
    service, _ = make_service()
    assert run(service.get_children("https://example.org/a1")) == NO_CHILDREN
    assert NO_CHILDREN == "No children found (leaf node)."


def test_children(make_service, result_factory):
    service, _ = make_service(
        result_factory(["child", "childLabel"], [{"child": "https://example.org/a1", "childLabel": "Zelle"}])
    )
    assert run(service.get_children("https://example.org/a")).splitlines() == [
        "child | childLabel",
        "---",
        "https://example.org/a1 | Zelle",
    ]


def test_search_subject_requires_bundesland(make_service):
    service, client = make_service()
    with pytest.raises(ResolutionError, match="Bundesland is required when filtering by Schulfach."):
        run(service.search("Fisch", schulfach="Biologie"))
    assert client.queries == []


def test_search_without_results(make_service, graphs_of):
    service, client = make_service()
    assert run(service.search("Fisch")) == 'No results found for "Fisch".'
    assert graphs_of(client.queries[0]) == ALL


def test_search_by_subject(make_service, result_factory, graphs_of):
    service, client = make_service(
        result_factory(["uri"], [{"uri": BIO}]),
        result_factory(
            ["s", "label", "lp", "lpLabel"],
            [{"s": "https://example.org/n1", "label": "Fische", "lp": "https://example.org/lp/1", "lpLabel": "Bio"}],
        ),
    )
    text = run(service.search("Fisch", bundesland="SN", schulfach="Biologie"))
    assert "Fische" in text
    assert graphs_of(client.queries[0]) == INFRA + [SACHSEN]
    search = client.queries[1]
    assert graphs_of(search) == INFRA + [SACHSEN]
    assert f"?lp lp:LP_0000537 <{BIO}> ." in search


def test_search_in_bundesland_without_subject(make_service, graphs_of):
    service, client = make_service()
    assert run(service.search("Fisch", bundesland="SN")) == 'No results found for "Fisch".'
    assert len(client.queries) == 1
    assert graphs_of(client.queries[0]) == INFRA + [SACHSEN]


def test_search_notes_result_limit(make_service, result_factory):
    rows = [{"s": f"https://example.org/n{i:02d}", "label": f"Fisch {i}"} for i in range(50)]
    service, _ = make_service(result_factory(["s", "label", "parent", "parentLabel"], rows))
    text = run(service.search("Fisch"))
    assert text.endswith("(Results limited to 50. Try a more specific query or add filters.)")


def test_sparql_query_passes_through(make_service, result_factory):
    service, client = make_service(result_factory(["x"], [{"x": "1"}]))
    assert run(service.sparql_query("SELECT ?x WHERE {}")) == "x\n---\n1"
    assert client.queries == ["SELECT ?x WHERE {}"]


def test_execution_errors_propagate(make_service):
    service, _ = make_service(QueryExecutionError("SPARQL query failed (500): boom", status_code=500, body="boom"))
    with pytest.raises(QueryExecutionError, match="500"):
        run(service.list_bundeslaender())


def test_health_check(make_service, result_factory):
    service, _ = make_service(QueryExecutionError("SPARQL request failed: refused"))
    assert run(service.health_check()).startswith("Unhealthy: SPARQL request failed")
    service, _ = make_service()
    assert run(service.health_check()).startswith("Healthy")
