"""
talent_graph/graph/optimizer.py — Importance-based pruning for large graphs.

Renderers stall beyond a few hundred nodes. When a graph exceeds its node or
link ceiling, nodes are ranked by a degree-weighted importance heuristic

    importance = declared size + 2 × authoritative incident link count

and only the top max_nodes survive; links are then re-filtered to surviving
endpoints and capped at the max_links strongest. This is a heuristic, not a
centrality measure: it favours big, busy nodes.
"""

import logging
from collections import Counter

import numpy as np

from talent_graph.config import DEFAULT_CONFIG, TalentGraphConfig
from talent_graph.models import NetworkGraph

logger = logging.getLogger(__name__)


def _check_limit(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")


def compute_importance_scores(
    graph: NetworkGraph,
    config: TalentGraphConfig = DEFAULT_CONFIG,
) -> dict[str, float]:
    """
    Importance per node id: declared size (default 10) + weight × degree.

    Synthetic links do not count toward degree.
    """
    degree = Counter()
    for link in graph.links:
        if link.synthetic:
            continue
        degree[link.source] += 1
        degree[link.target] += 1
    return {
        n.id: (n.size if n.size else config.default_node_size)
        + config.degree_importance_weight * degree.get(n.id, 0)
        for n in graph.nodes
    }


def optimize_network_data(
    graph: NetworkGraph,
    max_nodes: int | None = None,
    max_links: int | None = None,
    config: TalentGraphConfig = DEFAULT_CONFIG,
) -> NetworkGraph:
    """
    Prune a graph to at most max_nodes nodes and max_links links.

    Algorithm:
        1. No-op (returns the input) if both counts are within limits.
        2. Rank nodes by importance (numpy stable argsort, ties keep input
           order). The ego root, when present, is always kept.
        3. Keep the top max_nodes, preserving their incoming order (so a
           previously sorted node list stays sorted).
        4. Drop links touching removed nodes, then keep the max_links
           strongest (strength defaults to 1), again in incoming order.
        5. Mark optimized=True and record original_stats.

    Args:
        graph:     Graph to prune (not mutated).
        max_nodes: Node ceiling (default config.global_max_nodes).
        max_links: Link ceiling (default config.global_max_links).
        config:    TalentGraphConfig.

    Returns:
        The input graph when within limits, else a new pruned NetworkGraph.
        Applying the optimizer to its own output is a no-op.

    Raises:
        ValueError: a limit is not a positive integer.
    """
    max_nodes = config.global_max_nodes if max_nodes is None else max_nodes
    max_links = config.global_max_links if max_links is None else max_links
    _check_limit("max_nodes", max_nodes)
    _check_limit("max_links", max_links)

    n_nodes, n_links = len(graph.nodes), len(graph.links)
    if n_nodes <= max_nodes and n_links <= max_links:
        return graph

    logger.info(
        "Optimizing network data: %d nodes, %d links (limits %d / %d).",
        n_nodes, n_links, max_nodes, max_links,
    )

    # ── Nodes ─────────────────────────────────────────────────────────────────
    importance = compute_importance_scores(graph, config)
    scores = np.array([importance[n.id] for n in graph.nodes], dtype=float)
    ranked = np.argsort(-scores, kind="stable")

    keep_idx: list[int] = []
    root_idx = next(
        (i for i, n in enumerate(graph.nodes) if n.is_root or n.id == graph.root_node_id),
        None,
    )
    if root_idx is not None:
        keep_idx.append(root_idx)
    for i in ranked:
        if len(keep_idx) >= max_nodes:
            break
        if int(i) != root_idx:
            keep_idx.append(int(i))
    keep_set = set(keep_idx)
    nodes = [n for i, n in enumerate(graph.nodes) if i in keep_set]
    kept_ids = {n.id for n in nodes}

    # ── Links ─────────────────────────────────────────────────────────────────
    surviving = [l for l in graph.links if l.source in kept_ids and l.target in kept_ids]
    if len(surviving) > max_links:
        strengths = np.array([l.strength if l.strength else 1.0 for l in surviving], dtype=float)
        top = set(int(i) for i in np.argsort(-strengths, kind="stable")[:max_links])
        links = [l for i, l in enumerate(surviving) if i in top]
    else:
        links = surviving

    stats = dict(graph.stats)
    stats.update({"optimizedNodes": len(nodes), "optimizedLinks": len(links)})

    logger.info("Optimized to: %d nodes, %d links.", len(nodes), len(links))

    return NetworkGraph(
        nodes=nodes,
        links=links,
        stats=stats,
        optimized=True,
        original_stats={"nodeCount": n_nodes, "linkCount": n_links},
        root_node_id=graph.root_node_id,
        sort_method=graph.sort_method,
    )
