"""
talent_graph/graph/densify.py — Synthetic densification overlay.

Real talent data is often sparse: job seekers list one skill, authorities
list none. Rendered as-is the graph falls apart into islands. This overlay
tops under-connected job seekers and authorities up with sampled skill edges.

Every edge produced here carries synthetic=True. The overlay is a separate
pass so that callers (stats, ranking, pruning) can always tell authoritative
relationships from fabricated ones.
"""

import logging
import random

from talent_graph.config import DEFAULT_CONFIG, TalentGraphConfig
from talent_graph.models import EntityKind, Link, LinkType, Node

logger = logging.getLogger(__name__)

# Hard ceiling on overlay edges added to any single node.
MAX_SYNTHETIC_PER_NODE = 3


def needs_densification(
    n_nodes: int,
    n_authoritative_links: int,
    config: TalentGraphConfig = DEFAULT_CONFIG,
) -> bool:
    """True when links/nodes is below the density floor and there is more than one node."""
    if n_nodes <= 1:
        return False
    return n_authoritative_links / n_nodes < config.min_connections_per_node


def densify_sparse_graph(
    nodes: list[Node],
    links: list[Link],
    config: TalentGraphConfig = DEFAULT_CONFIG,
) -> list[Link]:
    """
    Compute synthetic skill edges for a sparse graph.

    Algorithm:
        1. Density = authoritative links / nodes. Stop if >= the configured
           floor (2.0) or if there is at most one node.
        2. Each job seeker with fewer than synthetic_skill_target 'has' links
           gets sampled skills up to that target (strength 0.5–1.0).
        3. Each authority with fewer than synthetic_preference_target
           'preference' links gets sampled skills up to that target
           (strength 0.6–1.0).
        4. Skills already linked to the node are never re-sampled; no node
           receives more than MAX_SYNTHETIC_PER_NODE overlay edges.

    Args:
        nodes:  Full node list.
        links:  Authoritative links (not mutated).
        config: TalentGraphConfig. Uses min_connections_per_node, the two
                synthetic targets and synthetic_seed.

    Returns:
        New synthetic links only. The caller appends them.
    """
    authoritative = [l for l in links if not l.synthetic]
    if not needs_densification(len(nodes), len(authoritative), config):
        return []

    skill_ids = [n.id for n in nodes if n.type == EntityKind.SKILL.value]
    if not skill_ids:
        logger.debug("Graph is sparse but has no skill nodes; nothing to densify.")
        return []

    logger.info(
        "Sparse graph (%.2f links/node < %.1f): generating synthetic skill edges.",
        len(authoritative) / len(nodes),
        config.min_connections_per_node,
    )

    rng = random.Random(config.synthetic_seed)
    synthetic: list[Link] = []

    plans = (
        (EntityKind.JOB_SEEKER, LinkType.HAS, config.synthetic_skill_target, 0.5, "has skill"),
        (EntityKind.AUTHORITY, LinkType.PREFERENCE, config.synthetic_preference_target, 0.6, "seeks"),
    )
    for kind, link_type, target, floor, label in plans:
        for node in nodes:
            if node.type != kind.value:
                continue
            linked = {
                l.target for l in authoritative
                if l.source == node.id and l.type == link_type.value
            }
            missing = min(target - len(linked), MAX_SYNTHETIC_PER_NODE)
            if missing <= 0:
                continue
            candidates = [s for s in skill_ids if s not in linked]
            for skill_id in rng.sample(candidates, min(missing, len(candidates))):
                synthetic.append(Link(
                    source=node.id,
                    target=skill_id,
                    type=link_type.value,
                    strength=round(floor + rng.random() * (1.0 - floor), 3),
                    label=label,
                    synthetic=True,
                ))

    logger.info("Added %d synthetic connections.", len(synthetic))
    return synthetic
