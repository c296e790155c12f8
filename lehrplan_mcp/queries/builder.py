# lehrplan_mcp/queries/builder.py
"""SPARQL text for every query shape the Lehrplan tools issue.

All functions are pure: arguments in, query text out. Graph scoping is always
a block of ``FROM`` lines directly after the ``SELECT`` line, and every
interpolated value goes through :mod:`lehrplan_mcp.queries.escaping`.
"""
from typing import Optional, Sequence

from rdflib import URIRef

from lehrplan_mcp.errors import InvalidArgumentError
from lehrplan_mcp.graph.ontology import (
    GRADE_LEVEL_BASE,
    HAS_GRADE_LEVEL,
    HAS_PART,
    HAS_SCHOOL_TYPE,
    HAS_SUBJECT,
    IN_BUNDESLAND,
    LEHRPLAN_CLASS,
    LP,
    PREFIXES,
    curie,
)
from lehrplan_mcp.queries.escaping import clean_search_token, escape_iri, escape_literal

RESULT_LIMIT = 50
MIN_DEPTH, MAX_DEPTH = 1, 10
MIN_GRADE, MAX_GRADE = 1, 13

PREFIX_BLOCK = "\n".join(f"PREFIX {prefix}: <{ns}>" for prefix, ns in PREFIXES.items())


def from_clauses(graphs: Sequence[str]) -> str:
    return "\n".join(f"FROM {escape_iri(g)}" for g in graphs)


def _select(select_line: str, graphs: Sequence[str], body: str) -> str:
    parts = [PREFIX_BLOCK, select_line]
    scope = from_clauses(graphs)
    if scope:
        parts.append(scope)
    parts.append(body)
    return "\n".join(parts)


#################################################################
# Listings
#################################################################

def list_bundeslaender_query(graphs: Sequence[str]) -> str:
    return _select("SELECT DISTINCT ?uri ?label", graphs, f"""WHERE {{
  ?s {curie(IN_BUNDESLAND)} ?uri .
  ?uri rdfs:label ?label .
  FILTER(lang(?label) = "de")
}}
ORDER BY ?label""")


def _entity_listing(link: URIRef, bundesland_uri: str, graphs: Sequence[str], german_only: bool) -> str:
    lang_filter = '\n  FILTER(lang(?l) = "de")' if german_only else ""
    return _select("SELECT DISTINCT ?uri (SAMPLE(?l) AS ?label)", graphs, f"""WHERE {{
  ?s {curie(link)} ?uri .
  ?uri rdfs:label ?l .
  ?s {curie(IN_BUNDESLAND)} {escape_iri(bundesland_uri)} .{lang_filter}
}}
GROUP BY ?uri
ORDER BY ?label""")


def list_schulfaecher_query(bundesland_uri: str, graphs: Sequence[str]) -> str:
    return _entity_listing(HAS_SUBJECT, bundesland_uri, graphs, german_only=True)


def list_schularten_query(bundesland_uri: str, graphs: Sequence[str]) -> str:
    return _entity_listing(HAS_SCHOOL_TYPE, bundesland_uri, graphs, german_only=False)


def entity_lookup_query(link: URIRef, label: str, bundesland_uri: str, graphs: Sequence[str]) -> str:
    """Find the entity linked via ``link`` whose label equals ``label``, ignoring case.

    Several entities may carry the same label; the smallest URI wins.
    """
    return _select("SELECT ?uri", graphs, f"""WHERE {{
  ?s {curie(link)} ?uri .
  ?uri rdfs:label ?l .
  ?s {curie(IN_BUNDESLAND)} {escape_iri(bundesland_uri)} .
  FILTER(LCASE(STR(?l)) = {escape_literal(label.strip().lower())})
}}
ORDER BY ?uri
LIMIT 1""")


#################################################################
# Filtered search
#################################################################

def grade_level_uri(jahrgangsstufe: int) -> str:
    if not MIN_GRADE <= jahrgangsstufe <= MAX_GRADE:
        raise InvalidArgumentError(
            f"Jahrgangsstufe must be between {MIN_GRADE} and {MAX_GRADE}, got {jahrgangsstufe}."
        )
    return str(LP[f"LP_{GRADE_LEVEL_BASE + jahrgangsstufe:07d}"])


def find_lehrplaene_query(
    bundesland_uri: str,
    graphs: Sequence[str],
    schulfach_uri: Optional[str] = None,
    schulart_uri: Optional[str] = None,
    jahrgangsstufe: Optional[int] = None,
) -> str:
    filters = [f"?s {curie(IN_BUNDESLAND)} {escape_iri(bundesland_uri)} ."]
    if schulfach_uri:
        filters.append(f"?s {curie(HAS_SUBJECT)} {escape_iri(schulfach_uri)} .")
    if schulart_uri:
        filters.append(f"?s {curie(HAS_SCHOOL_TYPE)} {escape_iri(schulart_uri)} .")
    if jahrgangsstufe is not None:
        filters.append(f"?s {curie(HAS_GRADE_LEVEL)} {escape_iri(grade_level_uri(jahrgangsstufe))} .")

    filter_block = "\n  ".join(filters)
    return _select("SELECT DISTINCT ?s ?label", graphs, f"""WHERE {{
  ?lpsubclass rdfs:subClassOf* {curie(LEHRPLAN_CLASS)} .
  ?s rdf:type ?lpsubclass .
  ?s rdfs:label ?label .
  {filter_block}
}}
ORDER BY ?label
LIMIT {RESULT_LIMIT}""")


#################################################################
# Hierarchy
#################################################################

def _tree_branch(root: str, level: int) -> str:
    """One UNION branch producing the edges exactly ``level`` hops below the root."""
    has_part = curie(HAS_PART)
    if level == 1:
        return f"{{ BIND({root} AS ?parent) ?parent {has_part} ?child . }}"
    steps = [f"{root} {has_part} ?step1 ."]
    for i in range(2, level):
        steps.append(f"?step{i - 1} {has_part} ?step{i} .")
    steps.append(f"BIND(?step{level - 1} AS ?parent)")
    steps.append(f"?parent {has_part} ?child .")
    return "{ " + " ".join(steps) + " }"


def tree_query(root_uri: str, depth: int, graphs: Sequence[str]) -> str:
    """All ``hat Teil`` edges between 1 and ``depth`` hops below ``root_uri``.

    Each level is its own fixed-length chain; the chains are joined with UNION,
    so the result holds the edges of every level, not only the deepest one.
    """
    if not MIN_DEPTH <= depth <= MAX_DEPTH:
        raise InvalidArgumentError(f"Depth must be between {MIN_DEPTH} and {MAX_DEPTH}, got {depth}.")
    root = escape_iri(root_uri)
    unions = "\n  UNION\n  ".join(_tree_branch(root, level) for level in range(1, depth + 1))
    return _select("SELECT DISTINCT ?parent ?parentLabel ?child ?childLabel", graphs, f"""WHERE {{
  {unions}
  OPTIONAL {{ ?parent rdfs:label ?parentLabel . }}
  OPTIONAL {{ ?child rdfs:label ?childLabel . }}
}}
ORDER BY ?parent ?child""")


def children_query(node_uri: str, graphs: Sequence[str]) -> str:
    return _select("SELECT DISTINCT ?child ?childLabel", graphs, f"""WHERE {{
  {escape_iri(node_uri)} {curie(HAS_PART)} ?child .
  OPTIONAL {{ ?child rdfs:label ?childLabel . }}
}}
ORDER BY ?child""")


#################################################################
# Full-text search
#################################################################

def contains_expression(text: str) -> str:
    """Turn free text into a ``bif:contains`` expression of AND-ed prefix terms.

    ``"Fisch Evolution"`` becomes ``'Fisch*' AND 'Evolution*'``.
    """
    tokens = [clean_search_token(word) for word in text.split()]
    tokens = [token for token in tokens if token]
    if not tokens:
        raise InvalidArgumentError("Search query must contain at least one word.")
    return " AND ".join(f"'{token}*'" for token in tokens)


def search_query(text: str, graphs: Sequence[str]) -> str:
    return _select("SELECT DISTINCT ?s ?label ?parent ?parentLabel", graphs, f"""WHERE {{
  ?s rdfs:label ?label .
  ?label bif:contains {escape_literal(contains_expression(text))} .
  OPTIONAL {{
    ?parent {curie(HAS_PART)} ?s .
    ?parent rdfs:label ?parentLabel .
  }}
}}
ORDER BY ?s
LIMIT {RESULT_LIMIT}""")


def search_by_subject_query(text: str, schulfach_uri: str, graphs: Sequence[str]) -> str:
    """Full-text search restricted to nodes below a Lehrplan of the given Schulfach."""
    return _select("SELECT DISTINCT ?s ?label ?lp ?lpLabel", graphs, f"""WHERE {{
  ?s rdfs:label ?label .
  ?label bif:contains {escape_literal(contains_expression(text))} .
  ?lp {curie(HAS_PART)}+ ?s .
  ?lp {curie(HAS_SUBJECT)} {escape_iri(schulfach_uri)} .
  ?lp rdfs:label ?lpLabel .
}}
ORDER BY ?s
LIMIT {RESULT_LIMIT}""")
