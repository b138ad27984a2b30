"""
talent_graph/graph/ego_network.py — Root-centred ego network projection.

Given a full graph and a root node, keeps every node within max_distance hops
of the root (undirected), drops everything else, and annotates what remains
with distance-driven visual emphasis and advisory layout hints.

Emphasis is monotonic in distance: the root is the largest and most
saturated node, and size / opacity / link width fade outward ring by ring.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Mapping

import networkx as nx

from talent_graph.config import DEFAULT_CONFIG, TalentGraphConfig
from talent_graph.graph.colors import (
    adjust_color_opacity,
    adjust_color_saturation,
    link_color,
    node_color,
)
from talent_graph.graph.layout import LAYOUT_TYPES, layout_hints
from talent_graph.ingestion.collections import coerce_number
from talent_graph.models import Link, NetworkGraph, Node

logger = logging.getLogger(__name__)


@dataclass
class EgoOptions:
    """
    Options for process_root_node_visualization().

    Fields:
        max_distance:        Hop bound (inclusive). 0 keeps only the root.
        layout_type:         'radial' | 'hierarchical' | 'force'.
        emphasis_multiplier: Root size multiplier.
        filters:             Link filters applied before BFS:
                               includeSynthetic (bool, default True)
                               minStrength      (float, default 0)
                             Other keys are carried through untouched for
                             later stages.
    """
    max_distance: int = DEFAULT_CONFIG.default_max_distance
    layout_type: str = "force"
    emphasis_multiplier: float = DEFAULT_CONFIG.emphasis_multiplier
    filters: dict = field(default_factory=dict)

    _ALIASES = {
        "maxDistance": "max_distance",
        "layoutType": "layout_type",
        "emphasisMultiplier": "emphasis_multiplier",
    }

    @classmethod
    def from_value(cls, value: "EgoOptions | Mapping[str, Any] | None") -> "EgoOptions":
        """
        Accept an EgoOptions, a mapping (camelCase or snake_case keys), or None.

        Raises:
            TypeError:  value is some other type.
            ValueError: any option is out of range.
        """
        if value is None:
            options = cls()
        elif isinstance(value, cls):
            options = cls(
                max_distance=value.max_distance,
                layout_type=value.layout_type,
                emphasis_multiplier=value.emphasis_multiplier,
                filters=dict(value.filters or {}),
            )
        elif isinstance(value, Mapping):
            known = {f.name for f in fields(cls)}
            kwargs = {}
            for key, item in value.items():
                name = cls._ALIASES.get(key, key)
                if name in known:
                    kwargs[name] = item
            options = cls(**kwargs)
            options.filters = dict(options.filters or {})
        else:
            raise TypeError(f"options must be EgoOptions or a mapping, got {type(value).__name__}")
        options.validate()
        return options

    def validate(self) -> None:
        if isinstance(self.max_distance, bool) or not isinstance(self.max_distance, int):
            raise ValueError(f"max_distance must be an int, got {self.max_distance!r}")
        if self.max_distance < 0:
            raise ValueError(f"max_distance must be >= 0, got {self.max_distance}")
        if self.layout_type not in LAYOUT_TYPES:
            raise ValueError(
                f"Unknown layout_type '{self.layout_type}'; expected one of {LAYOUT_TYPES}"
            )
        if not isinstance(self.emphasis_multiplier, (int, float)) or self.emphasis_multiplier <= 0:
            raise ValueError(
                f"emphasis_multiplier must be positive, got {self.emphasis_multiplier!r}"
            )
        if not isinstance(self.filters, dict):
            raise TypeError(f"filters must be a dict, got {type(self.filters).__name__}")


def calculate_node_distances(
    graph: NetworkGraph,
    root_node_id: str,
    max_distance: int,
    links: list[Link] | None = None,
) -> dict[str, int]:
    """
    BFS hop distances from the root over the undirected link adjacency.

    Args:
        graph:        Source graph. Its memoised adjacency is used when
                      `links` is None.
        root_node_id: BFS origin.
        max_distance: Nodes farther than this are not reported.
        links:        Optional filtered link subset to traverse instead.

    Returns:
        Dict node_id → distance for every reached node (root = 0).
    """
    if links is None:
        G = graph.adjacency()
    else:
        G = nx.Graph()
        G.add_nodes_from(n.id for n in graph.nodes)
        G.add_edges_from((l.source, l.target) for l in links)
    if root_node_id not in G:
        return {}
    return dict(nx.single_source_shortest_path_length(G, root_node_id, cutoff=max_distance))


def node_size_factor(distance: int | None, config: TalentGraphConfig = DEFAULT_CONFIG) -> float:
    d = distance if distance is not None else 0
    return max(config.min_node_size_factor, 1.0 - config.node_distance_decay * d)


def node_opacity(distance: int | None, config: TalentGraphConfig = DEFAULT_CONFIG) -> float:
    if distance is None:
        return config.unreached_node_opacity
    return max(config.min_node_opacity, 1.0 - config.node_distance_decay * distance)


def link_width_factor(distance: int, config: TalentGraphConfig = DEFAULT_CONFIG) -> float:
    return max(config.min_link_width_factor, 1.0 - config.link_width_decay * distance)


def link_opacity(distance: int, max_distance: int, config: TalentGraphConfig = DEFAULT_CONFIG) -> float:
    if max_distance <= 0:
        return 1.0
    return max(config.min_link_opacity, 1.0 - (distance / max_distance) * config.link_opacity_decay)


def link_color_opacity(distance: int, config: TalentGraphConfig = DEFAULT_CONFIG) -> float:
    """Alpha baked into a non-root link colour; fades per hop, independent of max_distance."""
    return max(config.min_link_color_opacity, 1.0 - distance * config.link_color_fade_decay)


def distance_distribution(distances: dict[str, int], max_distance: int) -> dict[int, int]:
    """Count of nodes at each ring 0..max_distance (empty rings included)."""
    distribution = {d: 0 for d in range(max_distance + 1)}
    for d in distances.values():
        if d <= max_distance:
            distribution[d] += 1
    return distribution


def _filter_links(links: list[Link], filters: dict) -> list[Link]:
    include_synthetic = filters.get("includeSynthetic", filters.get("include_synthetic", True))
    min_strength = coerce_number(filters.get("minStrength", filters.get("min_strength")), 0.0)
    return [
        l for l in links
        if (include_synthetic or not l.synthetic) and l.strength >= min_strength
    ]


def process_root_node_visualization(
    graph: NetworkGraph,
    root_node_id: str | None,
    options: EgoOptions | Mapping[str, Any] | None = None,
    config: TalentGraphConfig = DEFAULT_CONFIG,
) -> NetworkGraph:
    """
    Project the full graph onto the ego network of root_node_id.

    Algorithm (O(V + E)):
        1. Apply link filters (includeSynthetic, minStrength).
        2. BFS from the root with cutoff max_distance.
        3. Keep reached nodes (the root is always reached, even if isolated).
        4. Annotate nodes: root size × emphasis_multiplier, saturated colour,
           opacity 1; others size × max(0.3, 1 − 0.2·d), opacity
           max(0.4, 1 − 0.2·d), colour faded to that opacity.
        5. Keep only links with both endpoints retained; root-touching links
           get width × 1.5 and a saturated colour, the rest fade with
           max(source distance, target distance).
        6. Attach layout hints for options.layout_type.

    Args:
        graph:        Full graph (not mutated).
        root_node_id: Id of the node to centre on.
        options:      EgoOptions or a mapping with maxDistance / layoutType /
                      emphasisMultiplier / filters.
        config:       TalentGraphConfig with the emphasis constants.

    Returns:
        A new NetworkGraph. If root_node_id is empty or not in the graph, the
        input graph itself is returned unchanged and a warning is logged.

    Raises:
        TypeError / ValueError: malformed options (see EgoOptions.from_value).
    """
    opts = EgoOptions.from_value(options)

    root = graph.get_node(root_node_id) if root_node_id else None
    if root is None:
        logger.warning("Root node '%s' not found in network data; returning input unchanged.", root_node_id)
        return graph

    filtered_links = _filter_links(graph.links, opts.filters)
    if len(filtered_links) == len(graph.links):
        distances = calculate_node_distances(graph, root.id, opts.max_distance)
    else:
        distances = calculate_node_distances(graph, root.id, opts.max_distance, filtered_links)

    # ── Nodes ─────────────────────────────────────────────────────────────────
    nodes: list[Node] = []
    for node in graph.nodes:
        distance = distances.get(node.id)
        is_root = node.id == root.id
        if distance is None and not is_root:
            continue
        if is_root:
            distance = 0
        base_color = node.color or node_color(node.type)
        base_size = node.size or config.default_node_size
        if is_root:
            size = base_size * opts.emphasis_multiplier
            color = adjust_color_saturation(base_color, config.root_color_saturation)
            opacity = 1.0
        else:
            size = base_size * node_size_factor(distance, config)
            opacity = node_opacity(distance, config)
            color = adjust_color_opacity(base_color, opacity)
        nodes.append(Node(
            id=node.id,
            type=node.type,
            name=node.name,
            size=round(size, 4),
            color=color,
            payload=node.payload,
            distance=distance,
            is_root=is_root,
            opacity=round(opacity, 4),
            layout_hints=layout_hints(node, distance, opts.layout_type, config),
        ))

    # ── Links ─────────────────────────────────────────────────────────────────
    kept = {n.id: n.distance for n in nodes}
    links: list[Link] = []
    for link in filtered_links:
        if link.source not in kept or link.target not in kept:
            continue
        is_root_connection = link.touches(root.id)
        base_width = link.width or config.default_link_width
        base_color = link.color or link_color(link.type)
        hop = max(kept[link.source], kept[link.target])
        if is_root_connection:
            width = base_width * config.root_link_width_multiplier
            color = adjust_color_saturation(base_color, config.root_link_color_saturation)
            opacity = 1.0
        else:
            width = base_width * link_width_factor(hop, config)
            opacity = link_opacity(hop, opts.max_distance, config)
            color = adjust_color_opacity(base_color, link_color_opacity(hop, config))
        links.append(Link(
            source=link.source,
            target=link.target,
            type=link.type,
            strength=link.strength,
            label=link.label,
            synthetic=link.synthetic,
            width=round(width, 4),
            opacity=round(opacity, 4),
            color=color,
            status=link.status,
            score=link.score,
            is_root_connection=is_root_connection,
        ))

    stats = dict(graph.stats)
    stats.update({
        "rootNodeId": root.id,
        "effectiveMaxDistance": opts.max_distance,
        "nodesAtDistance": distance_distribution(
            {n.id: n.distance for n in nodes}, opts.max_distance
        ),
        "rootConnections": sum(1 for l in links if l.is_root_connection),
        "egoNodes": len(nodes),
        "egoLinks": len(links),
    })

    logger.info(
        "Ego network for '%s' (max_distance=%d, layout=%s): %d of %d nodes, %d links.",
        root.id,
        opts.max_distance,
        opts.layout_type,
        len(nodes),
        len(graph.nodes),
        len(links),
    )

    return NetworkGraph(
        nodes=nodes,
        links=links,
        stats=stats,
        optimized=graph.optimized,
        original_stats=graph.original_stats,
        root_node_id=root.id,
    )
