"""
talent_graph/ranking/sorting.py — Node ordering strategies around a root.

Eight total-order strategies, each expressed as a key function so that the
primary and secondary methods combine into one lexicographic key
(primary, secondary, input position). The root node, when present and not
filtered out, is pinned in front of everything else.

    relationship_strength  sum of authoritative link strengths to the root  (desc)
    entity_type            company, authority, position, skill, jobSeeker    (fixed)
    alphabetical           case-insensitive name / title                     (asc)
    temporal               configurable timestamp field, missing = epoch     (desc)
    distance               BFS hops from root, missing last                  (asc)
    custom_importance      configurable numeric field, default 0             (desc)
    match_score            best match-link score to the root                 (desc)
    hierarchy_level        C-Suite > Executive > Director > Manager > Individual

`ascending=True` reverses the whole final order, so the descending output
reversed is exactly the ascending output.
"""

import logging
import math
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping

import pandas as pd

from talent_graph.graph.layout import TYPE_ORDER, type_rank
from talent_graph.ingestion.collections import coerce_number
from talent_graph.models import Link, LinkType, Node

logger = logging.getLogger(__name__)


class SortingMethod:
    """Sort method identifiers (plain strings on the wire)."""

    RELATIONSHIP_STRENGTH = "relationship_strength"
    ENTITY_TYPE = "entity_type"
    ALPHABETICAL = "alphabetical"
    TEMPORAL = "temporal"
    DISTANCE = "distance"
    CUSTOM_IMPORTANCE = "custom_importance"
    MATCH_SCORE = "match_score"
    HIERARCHY_LEVEL = "hierarchy_level"


SORTING_METHODS = (
    SortingMethod.RELATIONSHIP_STRENGTH,
    SortingMethod.ENTITY_TYPE,
    SortingMethod.ALPHABETICAL,
    SortingMethod.TEMPORAL,
    SortingMethod.DISTANCE,
    SortingMethod.CUSTOM_IMPORTANCE,
    SortingMethod.MATCH_SCORE,
    SortingMethod.HIERARCHY_LEVEL,
)

SORTING_METHOD_LABELS = {
    SortingMethod.RELATIONSHIP_STRENGTH: "Connection Strength",
    SortingMethod.ENTITY_TYPE: "Entity Type",
    SortingMethod.ALPHABETICAL: "Alphabetical",
    SortingMethod.TEMPORAL: "Most Recent",
    SortingMethod.DISTANCE: "Distance from Root",
    SortingMethod.CUSTOM_IMPORTANCE: "Importance",
    SortingMethod.MATCH_SCORE: "Match Score",
    SortingMethod.HIERARCHY_LEVEL: "Hierarchy Level",
}

HIERARCHY_LEVELS = ("C-Suite", "Executive", "Director", "Manager", "Individual")

_BASE_METHODS = (
    SortingMethod.ALPHABETICAL,
    SortingMethod.DISTANCE,
    SortingMethod.ENTITY_TYPE,
)

_METHODS_BY_ENTITY_TYPE = {
    "jobSeeker": (
        SortingMethod.MATCH_SCORE,
        SortingMethod.RELATIONSHIP_STRENGTH,
        SortingMethod.TEMPORAL,
    ),
    "authority": (
        SortingMethod.HIERARCHY_LEVEL,
        SortingMethod.MATCH_SCORE,
        SortingMethod.RELATIONSHIP_STRENGTH,
    ),
    "company": (
        SortingMethod.CUSTOM_IMPORTANCE,
        SortingMethod.RELATIONSHIP_STRENGTH,
        SortingMethod.TEMPORAL,
    ),
    "skill": (
        SortingMethod.CUSTOM_IMPORTANCE,
        SortingMethod.RELATIONSHIP_STRENGTH,
    ),
    "position": (
        SortingMethod.HIERARCHY_LEVEL,
        SortingMethod.TEMPORAL,
        SortingMethod.RELATIONSHIP_STRENGTH,
    ),
}

_MATCH_LINK_TYPES = (LinkType.MATCH.value, "matched_to")


@dataclass
class SortOptions:
    """
    Options for sort_network_nodes().

    Fields:
        ascending:        Reverse the final order.
        secondary_sort:   Tie-break method (ignored when equal to the primary).
        filter_types:     Only these node types are kept (before sorting).
        max_results:      Truncate to this many nodes (after sorting).
        type_order:       Custom precedence for entity_type.
        time_field:       Timestamp field for temporal.
        importance_field: Numeric field for custom_importance.
        hierarchy_field:  Level field for hierarchy_level.
    """
    ascending: bool = False
    secondary_sort: str | None = SortingMethod.ALPHABETICAL
    filter_types: list[str] | None = None
    max_results: int | None = None
    type_order: list[str] | None = None
    time_field: str = "createdAt"
    importance_field: str = "importance"
    hierarchy_field: str = "level"

    _ALIASES = {
        "secondarySort": "secondary_sort",
        "filterTypes": "filter_types",
        "entityTypes": "filter_types",
        "maxResults": "max_results",
        "typeOrder": "type_order",
        "timeField": "time_field",
        "importanceField": "importance_field",
        "hierarchyField": "hierarchy_field",
    }

    @classmethod
    def from_value(cls, value: "SortOptions | Mapping[str, Any] | None") -> "SortOptions":
        """
        Accept SortOptions, a mapping (camelCase or snake_case), or None.

        Unrelated keys in a mapping are ignored so that a UI filter dict can
        be passed straight through.

        Raises:
            TypeError:  value is some other type, or filter_types is not a list.
            ValueError: max_results is negative.
        """
        if value is None:
            options = cls()
        elif isinstance(value, cls):
            options = value
        elif isinstance(value, Mapping):
            known = {f.name for f in fields(cls)}
            kwargs = {}
            for key, item in value.items():
                name = cls._ALIASES.get(key, key)
                if name in known and item is not None:
                    kwargs[name] = item
            options = cls(**kwargs)
        else:
            raise TypeError(f"options must be SortOptions or a mapping, got {type(value).__name__}")

        if options.filter_types is not None and not isinstance(options.filter_types, (list, tuple, set)):
            raise TypeError(f"filter_types must be a list, got {type(options.filter_types).__name__}")
        if options.max_results is not None:
            if isinstance(options.max_results, bool) or not isinstance(options.max_results, int):
                raise TypeError(f"max_results must be an int, got {options.max_results!r}")
            if options.max_results < 0:
                raise ValueError(f"max_results must be >= 0, got {options.max_results}")
        return options


# ── Root-relative link aggregates ─────────────────────────────────────────────

def calculate_relationship_strengths(links: Iterable[Link], root_node_id: str) -> dict[str, float]:
    """Sum of authoritative link strengths between the root and each neighbour."""
    strengths: dict[str, float] = {}
    for link in links:
        if link.synthetic or not link.touches(root_node_id):
            continue
        other = link.other(root_node_id)
        if other == root_node_id:
            continue
        strength = link.strength if link.strength else 1.0
        strengths[other] = strengths.get(other, 0.0) + strength
    return strengths


def calculate_match_scores(links: Iterable[Link], root_node_id: str) -> dict[str, float]:
    """Best match score (0–100) between the root and each matched neighbour."""
    scores: dict[str, float] = {}
    for link in links:
        if link.type not in _MATCH_LINK_TYPES or not link.touches(root_node_id):
            continue
        score = link.score if link.score is not None else link.strength * 100.0
        other = link.other(root_node_id)
        scores[other] = max(scores.get(other, 0.0), score)
    return scores


# ── Key functions ─────────────────────────────────────────────────────────────

def _name_key(node: Node) -> str:
    name = node.name or node.get("title") or ""
    return str(name).casefold()


def _timestamp_key(node: Node, time_field: str) -> float:
    value = node.get(time_field)
    if isinstance(value, bool) or not isinstance(value, (str, int, float, datetime)):
        return 0.0
    if isinstance(value, (int, float)):
        stamp = pd.to_datetime(value, unit="ms", errors="coerce", utc=True)
    else:
        stamp = pd.to_datetime(value, errors="coerce", utc=True)
    if pd.isna(stamp):
        return 0.0
    return stamp.timestamp()


def _hierarchy_rank(node: Node, hierarchy_field: str) -> int:
    level = node.get(hierarchy_field) or "Individual"
    try:
        return HIERARCHY_LEVELS.index(level)
    except ValueError:
        return len(HIERARCHY_LEVELS)


def _distance_key(node: Node) -> float:
    return node.distance if node.distance is not None else math.inf


def _key_function(
    method: str,
    links: list[Link],
    root_node_id: str | None,
    options: SortOptions,
) -> Callable[[Node], Any] | None:
    """Key function for `method` where smaller sorts first; None if unknown."""
    if method == SortingMethod.RELATIONSHIP_STRENGTH:
        strengths = calculate_relationship_strengths(links, root_node_id) if root_node_id else {}
        return lambda n: -strengths.get(n.id, 0.0)
    if method == SortingMethod.ENTITY_TYPE:
        order = tuple(options.type_order) if options.type_order else TYPE_ORDER
        return lambda n: type_rank(n.type, order)
    if method == SortingMethod.ALPHABETICAL:
        return _name_key
    if method == SortingMethod.TEMPORAL:
        return lambda n: -_timestamp_key(n, options.time_field)
    if method == SortingMethod.DISTANCE:
        return _distance_key
    if method == SortingMethod.CUSTOM_IMPORTANCE:
        return lambda n: -coerce_number(n.get(options.importance_field), 0.0)
    if method == SortingMethod.MATCH_SCORE:
        scores = calculate_match_scores(links, root_node_id) if root_node_id else {}
        return lambda n: -scores.get(n.id, 0.0)
    if method == SortingMethod.HIERARCHY_LEVEL:
        return lambda n: _hierarchy_rank(n, options.hierarchy_field)
    return None


def sort_network_nodes(
    nodes: list[Node] | None,
    links: list[Link] | None,
    root_node_id: str | None,
    sort_method: str,
    options: SortOptions | Mapping[str, Any] | None = None,
) -> list[Node]:
    """
    Order nodes around a root using one of SORTING_METHODS.

    Algorithm:
        1. Keep only filter_types (if given).
        2. Sort by the composite key (root pin, primary, secondary, input
           position) — a genuine lexicographic order, so the secondary method
           only ever breaks primary ties.
        3. Reverse everything if ascending.
        4. Truncate to max_results.

    Args:
        nodes:        Ego-filtered nodes (not mutated).
        links:        Links used by relationship_strength / match_score.
        root_node_id: Ego root; pinned first when present.
        sort_method:  One of SORTING_METHODS.
        options:      SortOptions or mapping.

    Returns:
        New list of the same Node objects. For an unknown sort_method a
        warning is logged and the input order is returned unchanged.
    """
    if not nodes:
        return []
    opts = SortOptions.from_value(options)
    links = links or []

    primary = _key_function(sort_method, links, root_node_id, opts)
    if primary is None:
        logger.warning("Unknown sorting method '%s'; returning input order.", sort_method)
        return list(nodes)

    secondary = None
    if opts.secondary_sort and opts.secondary_sort != sort_method:
        secondary = _key_function(opts.secondary_sort, links, root_node_id, opts)
        if secondary is None:
            logger.warning("Unknown secondary sort '%s'; ignoring.", opts.secondary_sort)

    candidates = list(nodes)
    if opts.filter_types is not None:
        allowed = set(opts.filter_types)
        candidates = [n for n in candidates if n.type in allowed]

    if root_node_id and not any(n.id == root_node_id for n in candidates):
        logger.debug("Root '%s' not among nodes to sort; sorting without a pinned root.", root_node_id)

    def composite(item: tuple[int, Node]) -> tuple:
        position, node = item
        return (
            0 if node.id == root_node_id else 1,
            primary(node),
            secondary(node) if secondary is not None else 0,
            position,
        )

    ordered = [node for _, node in sorted(enumerate(candidates), key=composite)]

    if opts.ascending:
        ordered.reverse()

    if opts.max_results:
        ordered = ordered[: opts.max_results]

    return ordered


def get_available_sorting_methods(entity_type: str | None) -> list[str]:
    """Sort methods that make sense for a root of the given entity type."""
    return list(_BASE_METHODS) + list(_METHODS_BY_ENTITY_TYPE.get(entity_type, ()))


def get_sorting_method_label(method: str) -> str:
    """Human-readable label; unknown methods are returned as-is."""
    return SORTING_METHOD_LABELS.get(method, method)
