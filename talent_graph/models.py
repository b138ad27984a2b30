"""
talent_graph/models.py — Node / Link / NetworkGraph data structures.

The engine keeps graphs as plain dataclasses so that every stage can return a
fresh, independently mutable copy. Adjacency for traversal is derived on
demand as an undirected NetworkX graph and memoised on the graph instance, so
BFS never rescans the flat link list.

Renderer contract (NetworkGraph.to_dict):
    nodes : [{id, name, type, size, color, opacity, distance, isRoot, layoutHints, ...}]
    links : [{source, target, type, strength, width, opacity, label, synthetic, ...}]
    stats : {...}
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import networkx as nx


class EntityKind(str, Enum):
    """The six upstream entity collections."""

    COMPANY = "company"
    AUTHORITY = "authority"
    JOB_SEEKER = "jobSeeker"
    SKILL = "skill"
    POSITION = "position"
    MATCH = "match"


class LinkType(str, Enum):
    """Relationship kinds produced by the graph builder."""

    EMPLOYMENT = "employment"
    HIRING = "hiring"
    OFFERS = "offers"
    REQUIRES = "requires"
    HAS = "has"
    PREFERENCE = "preference"
    MATCH = "match"


# Kinds that materialise as nodes. Matches only ever become links.
NODE_KINDS = (
    EntityKind.COMPANY,
    EntityKind.AUTHORITY,
    EntityKind.POSITION,
    EntityKind.SKILL,
    EntityKind.JOB_SEEKER,
)


def node_id_for(kind: EntityKind | str, key: str) -> str:
    """Globally unique, kind-prefixed node id, e.g. 'company_acme'."""
    kind_value = kind.value if isinstance(kind, EntityKind) else kind
    return f"{kind_value}_{key}"


@dataclass
class Node:
    """
    A single graph node.

    Fields:
        id:           Kind-prefixed unique id ('authority_42').
        type:         EntityKind value ('company', 'jobSeeker', ...).
        name:         Display name.
        size:         Numeric visual weight.
        color:        Hex colour token (may carry an alpha suffix after emphasis).
        payload:      The original upstream record.
        distance:     BFS hops from the root, None until ego-processed.
        is_root:      True only for the ego root (distance == 0).
        opacity:      0.0–1.0.
        layout_hints: Advisory positioning for the renderer.
    """
    id: str
    type: str
    name: str
    size: float = 10.0
    color: str = "#6366f1"
    payload: dict = field(default_factory=dict)
    distance: int | None = None
    is_root: bool = False
    opacity: float = 1.0
    layout_hints: dict = field(default_factory=dict)

    def get(self, field_name: str, default: Any = None) -> Any:
        """Look a field up on the node first, then on the original record."""
        value = getattr(self, field_name, None)
        if value is None and isinstance(self.payload, dict):
            value = self.payload.get(field_name)
        return default if value is None else value

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "size": self.size,
            "color": self.color,
            "opacity": self.opacity,
            "distance": self.distance,
            "isRoot": self.is_root,
            "layoutHints": dict(self.layout_hints),
            "data": self.payload,
        }


@dataclass
class Link:
    """
    A single relationship between two nodes.

    Fields:
        source / target:    Node ids; both must exist in the same graph.
        type:               LinkType value.
        strength:           Positive relationship weight.
        label:              Human-readable description.
        synthetic:          True for densification edges (not source data).
        width / opacity:    Visual emphasis.
        color:              Hex colour token, None until ego-processed.
        status:             Match status (match links only).
        score:              Rounded match percentage (match links only).
        is_root_connection: True when either endpoint is the ego root.
    """
    source: str
    target: str
    type: str
    strength: float = 1.0
    label: str = ""
    synthetic: bool = False
    width: float = 2.0
    opacity: float = 1.0
    color: str | None = None
    status: str | None = None
    score: float | None = None
    is_root_connection: bool = False

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id

    def other(self, node_id: str) -> str:
        return self.target if self.source == node_id else self.source

    def to_dict(self) -> dict:
        out = {
            "source": self.source,
            "target": self.target,
            "type": self.type,
            "strength": self.strength,
            "width": self.width,
            "opacity": self.opacity,
            "label": self.label,
            "synthetic": self.synthetic,
            "isRootConnection": self.is_root_connection,
        }
        if self.color is not None:
            out["color"] = self.color
        if self.status is not None:
            out["status"] = self.status
        if self.score is not None:
            out["score"] = self.score
        return out


@dataclass
class NetworkGraph:
    """
    Node set + link list + derived statistics.

    Node ids are unique. Every stage that removes nodes must call
    prune_dangling_links() so links never outlive their endpoints.
    """
    nodes: list[Node] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    stats: dict = field(default_factory=dict)
    optimized: bool = False
    original_stats: dict | None = None
    root_node_id: str | None = None
    sort_method: str | None = None
    _adjacency: nx.Graph | None = field(default=None, repr=False, compare=False)

    def node_ids(self) -> set[str]:
        return {n.id for n in self.nodes}

    def get_node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def adjacency(self) -> nx.Graph:
        """
        Undirected adjacency induced by the link list.

        Built once per graph instance; parallel links collapse onto one edge.
        Nodes without links are still present so isolated roots can be found.
        """
        if self._adjacency is None:
            G = nx.Graph()
            G.add_nodes_from(n.id for n in self.nodes)
            G.add_edges_from((link.source, link.target) for link in self.links)
            self._adjacency = G
        return self._adjacency

    def prune_dangling_links(self) -> int:
        """Drop links whose source or target is no longer a node. Returns count dropped."""
        ids = self.node_ids()
        before = len(self.links)
        self.links = [l for l in self.links if l.source in ids and l.target in ids]
        self._adjacency = None
        return before - len(self.links)

    def to_dict(self) -> dict:
        """Serialise to the renderer contract (camelCase keys)."""
        out: dict[str, Any] = {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [l.to_dict() for l in self.links],
            "stats": copy.deepcopy(self.stats),
            "optimized": self.optimized,
        }
        if self.original_stats is not None:
            out["originalStats"] = dict(self.original_stats)
        if self.root_node_id is not None:
            out["rootNodeId"] = self.root_node_id
        if self.sort_method is not None:
            out["sortMethod"] = self.sort_method
        return out
