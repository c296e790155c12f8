# lehrplan_mcp/queries/tree.py
from dataclasses import dataclass
from typing import FrozenSet

from rdflib.query import Result
from rdflib.term import Variable

PARENT = Variable("parent")
CHILD = Variable("child")


@dataclass(frozen=True)
class TreeShape:
    """Edges of a depth-bounded tree query plus the nodes that look like leaves.

    ``possible_leaves`` only says that a node had no children *within the
    returned rows*. Nodes at the depth bound show up here even when they have
    children further down, so this is a hint for the caller, not a fact about
    the graph.
    """

    edges: Result
    possible_leaves: FrozenSet[str]

    @property
    def may_continue(self) -> bool:
        return bool(self.possible_leaves)


def analyze_tree(result: Result) -> TreeShape:
    parents = set()
    children = set()
    for row in result.bindings:
        if row.get(PARENT) is not None:
            parents.add(str(row[PARENT]))
        if row.get(CHILD) is not None:
            children.add(str(row[CHILD]))
    return TreeShape(edges=result, possible_leaves=frozenset(children - parents))
