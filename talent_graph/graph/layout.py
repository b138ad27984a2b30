"""
talent_graph/graph/layout.py — Advisory layout hints for the renderer.

Hints are suggestions only; the renderer's own simulation has the final say.

    radial        root pinned at the origin, rings of radius d * 80,
                  angle spread by a golden-angle hash of the node id
    hierarchical  layer = BFS distance, lane = fixed entity-type rank
    force         preferred edge length proportional to distance
"""

import zlib

import numpy as np

from talent_graph.config import DEFAULT_CONFIG, TalentGraphConfig
from talent_graph.models import Node

LAYOUT_TYPES = ("radial", "hierarchical", "force")

# Lane order for hierarchical layouts and entity_type sorting.
TYPE_ORDER = ("company", "authority", "position", "skill", "jobSeeker")


def type_rank(node_type: str, order: tuple[str, ...] | list[str] = TYPE_ORDER) -> int:
    """Index of node_type in order; unknown types rank last."""
    try:
        return list(order).index(node_type)
    except ValueError:
        return len(order)


def node_angle(node_id: str, config: TalentGraphConfig = DEFAULT_CONFIG) -> float:
    """Stable angle in degrees [0, 360) derived from the node id."""
    # crc32 rather than hash(): str hashes are salted per process.
    return float((zlib.crc32(node_id.encode("utf-8")) * config.radial_golden_angle) % 360.0)


def radial_hints(node: Node, distance: int | None, config: TalentGraphConfig = DEFAULT_CONFIG) -> dict:
    if distance == 0:
        return {"x": 0.0, "y": 0.0, "fixed": True, "angle": 0.0, "radius": 0.0}
    d = distance if distance is not None else 0
    angle = node_angle(node.id, config)
    radius = d * config.radial_ring_spacing
    theta = np.deg2rad(angle)
    return {
        "x": float(np.cos(theta) * radius),
        "y": float(np.sin(theta) * radius),
        "angle": angle,
        "radius": radius,
        "preferredDistance": radius,
    }


def hierarchical_hints(node: Node, distance: int | None, config: TalentGraphConfig = DEFAULT_CONFIG) -> dict:
    d = distance if distance is not None else 0
    lane = type_rank(node.type)
    return {
        "layer": d,
        "lane": lane,
        "x": lane * config.hierarchical_grid_spacing,
        "y": d * config.hierarchical_grid_spacing,
        "preferredDistance": d * config.hierarchical_preferred_spacing,
    }


def force_hints(node: Node, distance: int | None, config: TalentGraphConfig = DEFAULT_CONFIG) -> dict:
    d = distance if distance is not None else 0
    return {"preferredDistance": d * config.force_preferred_spacing}


def layout_hints(
    node: Node,
    distance: int | None,
    layout_type: str,
    config: TalentGraphConfig = DEFAULT_CONFIG,
) -> dict:
    """
    Dispatch to the hint function for layout_type.

    Raises:
        ValueError: layout_type is not one of LAYOUT_TYPES.
    """
    if layout_type == "radial":
        return radial_hints(node, distance, config)
    if layout_type == "hierarchical":
        return hierarchical_hints(node, distance, config)
    if layout_type == "force":
        return force_hints(node, distance, config)
    raise ValueError(f"Unknown layout_type '{layout_type}'; expected one of {LAYOUT_TYPES}")
