# lehrplan_mcp/graph/ontology.py
"""Fixed identifiers of the Lehrplan ontology.

These must match the schema exactly; the query builder only ever refers to
the ontology through the names defined here.
"""
from rdflib import Namespace, URIRef
from rdflib.namespace import RDF, RDFS

LP = Namespace("https://w3id.org/lehrplan/ontology/")

# hat Teil
HAS_PART = LP.LP_0000008
# hat Schulfach
HAS_SUBJECT = LP.LP_0000537
# hat Schulart
HAS_SCHOOL_TYPE = LP.LP_0000812
# gehört zu Bundesland
IN_BUNDESLAND = LP.LP_0000029
# hat Jahrgangsstufe
HAS_GRADE_LEVEL = LP.LP_0000026
# Lehrplan (root class of all curriculum documents)
LEHRPLAN_CLASS = LP.LP_0000438

GRADE_LEVEL_BASE = 2000000

PREFIXES = {
    "lp": str(LP),
    "rdf": str(RDF),
    "rdfs": str(RDFS),
}


def curie(term: URIRef) -> str:
    """Render an ``lp:`` term in prefixed form, e.g. ``lp:LP_0000008``."""
    return "lp:" + str(term).removeprefix(str(LP))
