"""
talent_graph/graph/builder.py — Full network graph construction.

Maps the six entity collections onto one node/link graph:

    Nodes : company, authority, jobSeeker, skill, position (one per record)
    Links : employment  authority → company   (3 / 2 / 1 by hiringPower)
            hiring      authority → position  (2)
            offers      position  → company   (2)
            requires    position  → skill     (1)
            has         jobSeeker → skill     (skillLevel / 10)
            preference  authority → skill     (1 Ultimate, else 0.7)
            match       jobSeeker → authority (score / 100)

Cross-references are resolved through talent_graph.ingestion.references.
A reference that does not land on an existing node is skipped (the link is
never created, the node is kept) so the output can never contain a dangling
link.

After the authoritative links are in place, the synthetic densification
overlay (talent_graph.graph.densify) may add flagged edges to sparse graphs.
Synthetic edges are excluded from every authoritative statistic.
"""

import logging
import numbers
from collections import Counter
from typing import Any, Iterable, Mapping

from talent_graph.config import DEFAULT_CONFIG, TalentGraphConfig
from talent_graph.graph.colors import node_color
from talent_graph.graph.densify import densify_sparse_graph
from talent_graph.ingestion.collections import EntityCollections, coerce_number
from talent_graph.ingestion.references import entity_key, first_reference, resolve_reference
from talent_graph.models import NODE_KINDS, EntityKind, Link, LinkType, NetworkGraph, Node, node_id_for

logger = logging.getLogger(__name__)


_HIRING_POWER_EMPLOYMENT_STRENGTH = {"Ultimate": 3.0, "High": 2.0}


def build_network_graph(
    collections: EntityCollections | Mapping[str, Any],
    config: TalentGraphConfig = DEFAULT_CONFIG,
) -> NetworkGraph:
    """
    Build the full graph from raw entity collections.

    Args:
        collections: EntityCollections, or a fetch-layer mapping accepted by
                     EntityCollections.from_mapping().
        config:      TalentGraphConfig. Uses default_node_size,
                     default_skill_level, default_match_score and the
                     densification settings.

    Returns:
        NetworkGraph with every resolvable relationship, plus synthetic
        overlay links when the graph is sparse. graph.stats carries:
            totalNodes, totalLinks (authoritative), syntheticLinks,
            renderedLinks, connectionsPerNode, nodeTypes, linkTypes,
            skippedReferences.

    Notes:
        - Records without any identifier are skipped (a node id cannot be
          formed); this is logged at debug level.
        - A (source, target, type) triple is only ever added once.
    """
    if not isinstance(collections, EntityCollections):
        collections = EntityCollections.from_mapping(collections)

    nodes: dict[str, Node] = {}
    links: list[Link] = []
    seen: set[tuple[str, str, str]] = set()
    skipped = Counter()

    def add_link(link: Link) -> bool:
        if link.source not in nodes or link.target not in nodes:
            skipped[link.type] += 1
            logger.debug(
                "Skipping %s link %s -> %s: endpoint not in graph.",
                link.type, link.source, link.target,
            )
            return False
        triple = (link.source, link.target, link.type)
        if triple in seen:
            return False
        seen.add(triple)
        links.append(link)
        return True

    # ── Nodes ─────────────────────────────────────────────────────────────────
    _add_nodes(nodes, collections.companies, EntityKind.COMPANY, ("name",), config)
    _add_nodes(nodes, collections.authorities, EntityKind.AUTHORITY, ("name",), config)
    _add_nodes(nodes, collections.job_seekers, EntityKind.JOB_SEEKER, ("name",), config)
    _add_nodes(nodes, collections.skills, EntityKind.SKILL, ("name",), config)
    _add_nodes(nodes, collections.positions, EntityKind.POSITION, ("title", "name"), config)
    logger.info("Added %d nodes from %d records.", len(nodes), collections.total())

    skill_index = _skill_index(collections.skills)

    # ── Authority links: employment + preference ──────────────────────────────
    for authority in collections.authorities:
        key = entity_key(authority)
        if key is None:
            continue
        authority_id = node_id_for(EntityKind.AUTHORITY, key)
        hiring_power = authority.get("hiringPower")
        if not isinstance(hiring_power, str):
            hiring_power = None

        company_key = first_reference(authority, "companyId", "company")
        if company_key:
            add_link(Link(
                source=authority_id,
                target=node_id_for(EntityKind.COMPANY, company_key),
                type=LinkType.EMPLOYMENT.value,
                strength=_HIRING_POWER_EMPLOYMENT_STRENGTH.get(hiring_power, 1.0),
                label="works for",
            ))

        for skill_id in _resolve_skills(authority.get("skillsLookingFor"), skill_index):
            add_link(Link(
                source=authority_id,
                target=skill_id,
                type=LinkType.PREFERENCE.value,
                strength=1.0 if hiring_power == "Ultimate" else 0.7,
                label="seeks",
            ))

    # ── Position links: offers, hiring, requires ──────────────────────────────
    for position in collections.positions:
        key = entity_key(position)
        if key is None:
            continue
        position_id = node_id_for(EntityKind.POSITION, key)

        company_key = first_reference(position, "companyId", "company")
        if company_key:
            add_link(Link(
                source=position_id,
                target=node_id_for(EntityKind.COMPANY, company_key),
                type=LinkType.OFFERS.value,
                strength=2.0,
                label="posted by",
            ))

        authority_key = first_reference(position, "authorityId", "hiringAuthorityId", "authority")
        if authority_key:
            add_link(Link(
                source=node_id_for(EntityKind.AUTHORITY, authority_key),
                target=position_id,
                type=LinkType.HIRING.value,
                strength=2.0,
                label="manages",
            ))

        for skill_id in _resolve_skills(position.get("requirements"), skill_index):
            add_link(Link(
                source=position_id,
                target=skill_id,
                type=LinkType.REQUIRES.value,
                strength=1.0,
                label="requires",
            ))

    # ── Job seeker skills ─────────────────────────────────────────────────────
    for job_seeker in collections.job_seekers:
        key = entity_key(job_seeker)
        if key is None:
            continue
        seeker_id = node_id_for(EntityKind.JOB_SEEKER, key)
        levels = job_seeker.get("skillLevels") or {}
        if not isinstance(levels, dict):
            levels = {}

        for skill_name, skill_id in _resolve_skill_pairs(job_seeker.get("skills"), skill_index):
            level = coerce_number(levels.get(skill_name), config.default_skill_level)
            if level <= 0:
                level = config.default_skill_level
            level_label = int(level) if float(level).is_integer() else level
            add_link(Link(
                source=seeker_id,
                target=skill_id,
                type=LinkType.HAS.value,
                strength=level / 10.0,
                label=f"has skill ({level_label}/10)",
            ))

    # ── Matches ───────────────────────────────────────────────────────────────
    for match in collections.matches:
        seeker_key = first_reference(match, "jobSeekerId", "jobSeeker")
        authority_key = first_reference(
            match, "hiringAuthorityId", "authorityId", "hiringAuthority", "authority"
        )
        if not seeker_key or not authority_key:
            skipped[LinkType.MATCH.value] += 1
            continue
        raw_score = match.get("score")
        if raw_score is None:
            raw_score = match.get("matchScore")
        score = coerce_number(raw_score, config.default_match_score)
        if score <= 0:
            score = config.default_match_score
        add_link(Link(
            source=node_id_for(EntityKind.JOB_SEEKER, seeker_key),
            target=node_id_for(EntityKind.AUTHORITY, authority_key),
            type=LinkType.MATCH.value,
            strength=score / 100.0,
            label=f"match ({round(score)}%)",
            status=match.get("status"),
            score=float(round(score)),
        ))

    node_list = list(nodes.values())
    authoritative = len(links)
    logger.info(
        "Added %d authoritative links (%d references skipped).",
        authoritative,
        sum(skipped.values()),
    )

    # ── Synthetic overlay ─────────────────────────────────────────────────────
    synthetic = densify_sparse_graph(node_list, links, config) if config.densify else []
    links.extend(synthetic)

    graph = NetworkGraph(nodes=node_list, links=links)
    graph.stats = summarize_graph(graph)
    graph.stats["skippedReferences"] = dict(skipped)

    logger.info(
        "Graph construction complete: %d nodes, %d links (%d synthetic).",
        len(node_list),
        len(links),
        len(synthetic),
    )
    return graph


def summarize_graph(graph: NetworkGraph) -> dict:
    """
    Count nodes and links by type.

    Synthetic links are reported only under 'syntheticLinks' and
    'renderedLinks'; they never enter totalLinks, connectionsPerNode or
    linkTypes.
    """
    authoritative = [l for l in graph.links if not l.synthetic]
    n_nodes = len(graph.nodes)
    node_types = Counter(n.type for n in graph.nodes)
    link_types = Counter(l.type for l in authoritative)
    return {
        "totalNodes": n_nodes,
        "totalLinks": len(authoritative),
        "syntheticLinks": len(graph.links) - len(authoritative),
        "renderedLinks": len(graph.links),
        "connectionsPerNode": round(len(authoritative) / n_nodes, 2) if n_nodes else 0.0,
        "nodeTypes": {kind.value: node_types.get(kind.value, 0) for kind in NODE_KINDS},
        "linkTypes": {lt.value: link_types.get(lt.value, 0) for lt in LinkType},
    }


def _declared_size(record: dict, config: TalentGraphConfig) -> float:
    # Company records carry a categorical 'size' ("Enterprise", "Startup"),
    # so only genuinely numeric values count as a declared weight.
    value = record.get("nodeSize", record.get("size"))
    if isinstance(value, numbers.Number) and not isinstance(value, bool):
        return coerce_number(value, config.default_node_size)
    return float(config.default_node_size)


def _add_nodes(
    nodes: dict[str, Node],
    records: Iterable[dict],
    kind: EntityKind,
    name_fields: tuple[str, ...],
    config: TalentGraphConfig,
) -> None:
    added = 0
    for record in records:
        key = entity_key(record)
        if key is None:
            logger.debug("Skipping %s record with no identifier: %r", kind.value, record)
            continue
        node_id = node_id_for(kind, key)
        if node_id in nodes:
            logger.debug("Duplicate %s id '%s' — first occurrence wins.", kind.value, node_id)
            continue
        name = next(
            (str(record[f]).strip() for f in name_fields if record.get(f) not in (None, "")),
            key,
        )
        nodes[node_id] = Node(
            id=node_id,
            type=kind.value,
            name=name,
            size=_declared_size(record, config),
            color=node_color(kind.value),
            payload=record,
        )
        added += 1
    logger.debug("Added %d %s nodes.", added, kind.value)


def _skill_index(skills: Iterable[dict]) -> dict[str, dict[str, str]]:
    """Index skill node ids by exact name and by key."""
    by_name: dict[str, str] = {}
    by_key: dict[str, str] = {}
    for skill in skills:
        key = entity_key(skill)
        if key is None:
            continue
        node_id = node_id_for(EntityKind.SKILL, key)
        by_key.setdefault(key, node_id)
        name = skill.get("name")
        if isinstance(name, str) and name:
            by_name.setdefault(name, node_id)
    return {"name": by_name, "key": by_key}


def _resolve_skill_pairs(
    values: Any,
    index: dict[str, dict[str, str]],
) -> list[tuple[str, str]]:
    """
    Resolve a list of skill references to (skill name as given, skill node id).

    Items may be names, references ('skills/<key>', bare key) or objects with
    a 'name'. Names win over keys. Unresolvable items are dropped.
    """
    if not isinstance(values, (list, tuple)):
        return []
    pairs: list[tuple[str, str]] = []
    for item in values:
        name = item.get("name") if isinstance(item, dict) else item
        if isinstance(name, str) and name in index["name"]:
            pairs.append((name, index["name"][name]))
            continue
        key = resolve_reference(item)
        if key is not None and key in index["key"]:
            pairs.append((name if isinstance(name, str) else key, index["key"][key]))
        else:
            logger.debug("Unresolvable skill reference: %r", item)
    return pairs


def _resolve_skills(values: Any, index: dict[str, dict[str, str]]) -> list[str]:
    return [skill_id for _, skill_id in _resolve_skill_pairs(values, index)]
