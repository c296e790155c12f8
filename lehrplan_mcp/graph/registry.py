# lehrplan_mcp/graph/registry.py
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Tuple

from lehrplan_mcp.errors import ConfigurationError

INFRASTRUCTURE_KEYS = ("GRAPH_ONTOLOGY", "GRAPH_SCHULART", "GRAPH_SCHULFACH")
STATE_GRAPH_PREFIX = "GRAPH_STATE_"


def _unique(graphs):
    seen = set()
    ordered = []
    for graph in graphs:
        if graph not in seen:
            seen.add(graph)
            ordered.append(graph)
    return ordered


@dataclass(frozen=True)
class GraphRegistry:
    """Named graphs of the triple store, split into infrastructure and state graphs.

    Infrastructure graphs (ontology, Schulart and Schulfach taxonomies) are part
    of every query. A state graph is only added when its Bundesland is in scope.
    The registry is built once at startup and never changes afterwards.
    """

    infrastructure: Tuple[str, ...]
    states: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "infrastructure", tuple(self.infrastructure))
        object.__setattr__(self, "states", MappingProxyType(dict(self.states)))

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> "GraphRegistry":
        missing = [key for key in INFRASTRUCTURE_KEYS if not environ.get(key, "").strip()]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variable(s): {', '.join(missing)}. "
                "See .env.example for reference."
            )
        infrastructure = tuple(environ[key].strip() for key in INFRASTRUCTURE_KEYS)

        states = {}
        for key, value in environ.items():
            if key.startswith(STATE_GRAPH_PREFIX) and value.strip():
                code = key[len(STATE_GRAPH_PREFIX):].upper()
                if code:
                    states[code] = value.strip()
        return cls(infrastructure=infrastructure, states=states)

    def scope_for(self, code: str) -> List[str]:
        """Infrastructure graphs plus the state graph for ``code``, if configured."""
        state_graph = self.states.get(code.upper()) if code else None
        if state_graph:
            return _unique([*self.infrastructure, state_graph])
        return list(self.infrastructure)

    def all_graphs(self) -> List[str]:
        return _unique([*self.infrastructure, *self.states.values()])

    def describe(self) -> str:
        """One-line listing of every graph, as shown in tool descriptions."""
        parts = [f"<{g}>" for g in self.infrastructure]
        parts += [f"{code}: <{g}>" for code, g in self.states.items()]
        return ", ".join(parts)
