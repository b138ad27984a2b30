"""
talent_graph/config.py — All tunable parameters for the visualization engine.

No threshold should ever be hardcoded in a graph module. Every density target,
emphasis constant, layout spacing, pruning ceiling and cache lifetime lives
here so that calibration changes are a single-file diff.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TalentGraphConfig:
    """
    Immutable configuration for the graph visualization pipeline.

    Override by constructing a new TalentGraphConfig with the desired values.
    """

    # ── Graph construction ────────────────────────────────────────────────────
    default_node_size: float = 10.0
    # Declared size for nodes whose record carries no numeric 'size' field.

    default_match_score: float = 50.0
    # Match records with no score / matchScore are treated as a 50% match.

    default_skill_level: float = 5.0
    # Job seekers without a skillLevels entry for a skill get level 5/10.

    # ── Density safeguard (synthetic overlay) ─────────────────────────────────
    densify: bool = True
    # Set False to never add synthetic edges.

    min_connections_per_node: float = 2.0
    # Authoritative links / nodes below this ratio triggers the overlay.

    synthetic_skill_target: int = 3
    # Job seekers are topped up to this many 'has' links.

    synthetic_preference_target: int = 2
    # Authorities are topped up to this many 'preference' links.

    synthetic_seed: int = 41
    # Seed for skill sampling so identical inputs give identical graphs.

    # ── Ego network emphasis ──────────────────────────────────────────────────
    default_max_distance: int = 3
    emphasis_multiplier: float = 2.0
    # Root node size multiplier.

    node_distance_decay: float = 0.2
    min_node_size_factor: float = 0.3
    min_node_opacity: float = 0.4
    unreached_node_opacity: float = 0.3
    # size factor = max(0.3, 1 - 0.2 * d); opacity = max(0.4, 1 - 0.2 * d).

    default_link_width: float = 2.0
    root_link_width_multiplier: float = 1.5
    link_width_decay: float = 0.15
    min_link_width_factor: float = 0.5
    link_opacity_decay: float = 0.7
    min_link_opacity: float = 0.2
    link_color_fade_decay: float = 0.2
    min_link_color_opacity: float = 0.3

    root_color_saturation: float = 1.3
    root_link_color_saturation: float = 1.2

    # ── Layout hints ──────────────────────────────────────────────────────────
    radial_ring_spacing: float = 80.0
    radial_golden_angle: float = 137.5
    hierarchical_grid_spacing: float = 100.0
    hierarchical_preferred_spacing: float = 60.0
    force_preferred_spacing: float = 50.0

    # ── Optimizer ceilings ────────────────────────────────────────────────────
    global_max_nodes: int = 500
    global_max_links: int = 1000
    # Applied to the global (un-rooted) view.

    ego_max_nodes: int = 300
    ego_max_links: int = 600
    # Applied to each ego-processed, sorted visualization.

    degree_importance_weight: float = 2.0
    # importance = declared size + 2 * authoritative degree.

    # ── Caches ────────────────────────────────────────────────────────────────
    graph_cache_ttl_seconds: float = 600.0
    # Full-graph cache: 10 minutes.

    query_cache_ttl_seconds: float = 300.0
    # Per-ego-query cache: 5 minutes.

    cache_max_entries: int = 256
    cache_sweep_interval_seconds: float = 300.0


# Singleton default — import this everywhere instead of constructing anew.
DEFAULT_CONFIG = TalentGraphConfig()
