"""
talent_graph/pipeline.py — Query surface and pipeline orchestration.

    raw collections ─► build_network_graph ─► full graph   (graph cache)
                                               │
      root, sort, distance, layout, filters ───┤
                                               ▼
      process_root_node_visualization ─► sort_network_nodes ─► optimize_network_data
                                                                      │
                                                        (query cache) ▼
                                                               renderer dict

run_visualization_pipeline() is the pure, uncached sequence.
VisualizationEngine wraps it with the two injected caches and exposes the
calls the UI controls make.

Usage:
    from talent_graph.pipeline import VisualizationEngine
    engine = VisualizationEngine()
    engine.load({"companies": [...], "hiringAuthorities": [...], ...})
    view = engine.generate_enhanced_visualization("jobSeeker_42", sort_method="match_score")
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from talent_graph.cache import ResultCache
from talent_graph.config import DEFAULT_CONFIG, TalentGraphConfig
from talent_graph.graph.builder import build_network_graph
from talent_graph.graph.ego_network import EgoOptions, process_root_node_visualization
from talent_graph.graph.hierarchy import build_company_hierarchy
from talent_graph.graph.optimizer import optimize_network_data
from talent_graph.ingestion.collections import EntityCollections
from talent_graph.ingestion.references import entity_key, resolve_reference
from talent_graph.models import NetworkGraph
from talent_graph.ranking.sorting import (
    SortingMethod,
    get_available_sorting_methods,
    get_sorting_method_label,
    sort_network_nodes,
)

logger = logging.getLogger(__name__)

EMPTY_VISUALIZATION = {"nodes": [], "links": [], "stats": {}}
INVALIDATION_KINDS = ("graph", "views")


@dataclass
class VisualizationResult:
    """
    Every stage of one enhanced-visualization run.

    Fields:
        ego:       Output of process_root_node_visualization().
        sorted:    Ego graph with the sorted node list and re-filtered links.
        optimized: Final graph handed to the renderer.
    """
    ego: NetworkGraph
    sorted: NetworkGraph
    optimized: NetworkGraph


def run_visualization_pipeline(
    full_graph: NetworkGraph,
    root_node_id: str,
    sort_method: str = SortingMethod.RELATIONSHIP_STRENGTH,
    max_distance: int | None = None,
    layout_type: str = "force",
    filters: Mapping[str, Any] | None = None,
    config: TalentGraphConfig = DEFAULT_CONFIG,
) -> VisualizationResult:
    """
    Ego projection → sort → link re-filter → optimize, without caching.

    Args:
        full_graph:   Output of build_network_graph() (not mutated).
        root_node_id: Ego root.
        sort_method:  One of talent_graph.ranking.sorting.SORTING_METHODS.
        max_distance: Hop bound (default config.default_max_distance).
        layout_type:  'radial' | 'hierarchical' | 'force'.
        filters:      UI filter dict. Recognised keys:
                        entityTypes, maxResults, ascending, secondarySort
                          (passed to the sorter)
                        minStrength, includeSynthetic
                          (passed to the ego projection)
        config:       TalentGraphConfig (ego_max_nodes / ego_max_links).

    Returns:
        VisualizationResult with every intermediate graph.

    Raises:
        TypeError / ValueError: malformed options.
    """
    filters = dict(filters or {})
    max_distance = config.default_max_distance if max_distance is None else max_distance

    # ── 1. Ego projection ─────────────────────────────────────────────────────
    ego = process_root_node_visualization(
        full_graph,
        root_node_id,
        EgoOptions(
            max_distance=max_distance,
            layout_type=layout_type,
            emphasis_multiplier=config.emphasis_multiplier,
            filters=filters,
        ),
        config,
    )
    logger.info("Phase 1/3: Ego network — %d nodes, %d links.", len(ego.nodes), len(ego.links))

    # ── 2. Sort ───────────────────────────────────────────────────────────────
    ordered = sort_network_nodes(ego.nodes, ego.links, root_node_id, sort_method, filters)
    stats = dict(ego.stats)
    stats["sortMethod"] = sort_method
    stats["sortLabel"] = get_sorting_method_label(sort_method)
    sorted_graph = NetworkGraph(
        nodes=ordered,
        links=list(ego.links),
        stats=stats,
        optimized=ego.optimized,
        original_stats=ego.original_stats,
        root_node_id=ego.root_node_id,
        sort_method=sort_method,
    )
    dropped = sorted_graph.prune_dangling_links()
    logger.info(
        "Phase 2/3: Sorted by %s — %d nodes kept, %d links dropped with filtered nodes.",
        sort_method,
        len(ordered),
        dropped,
    )

    # ── 3. Optimize ───────────────────────────────────────────────────────────
    optimized = optimize_network_data(
        sorted_graph, config.ego_max_nodes, config.ego_max_links, config
    )
    logger.info(
        "Phase 3/3: Final view — %d nodes, %d links (optimized=%s).",
        len(optimized.nodes),
        len(optimized.links),
        optimized.optimized,
    )
    return VisualizationResult(ego=ego, sorted=sorted_graph, optimized=optimized)


def query_cache_key(
    signature: str,
    root_node_id: str,
    sort_method: str,
    max_distance: int,
    layout_type: str,
    filters: Mapping[str, Any] | None,
) -> str:
    """Cache key for one enhanced visualization; filters are serialised with sorted keys."""
    serialised = json.dumps(filters or {}, sort_keys=True, default=str)
    return (
        f"enhanced-viz-{signature}-{root_node_id}-{sort_method}-"
        f"{max_distance}-{layout_type}-{serialised}"
    )


class VisualizationEngine:
    """
    Cached query surface over the graph pipeline.

    Args:
        config:      TalentGraphConfig.
        graph_cache: Cache for full graphs (keyed by collection signature).
                     A private instance is created when omitted.
        query_cache: Cache for ego visualizations. A private instance is
                     created when omitted.
    """

    def __init__(
        self,
        config: TalentGraphConfig = DEFAULT_CONFIG,
        graph_cache: ResultCache | None = None,
        query_cache: ResultCache | None = None,
    ):
        self.config = config
        self.graph_cache = graph_cache if graph_cache is not None else ResultCache(
            default_ttl=config.graph_cache_ttl_seconds,
            max_entries=config.cache_max_entries,
            sweep_interval=config.cache_sweep_interval_seconds,
            name="graph",
        )
        self.query_cache = query_cache if query_cache is not None else ResultCache(
            default_ttl=config.query_cache_ttl_seconds,
            max_entries=config.cache_max_entries,
            sweep_interval=config.cache_sweep_interval_seconds,
            name="query",
        )
        self._collections: EntityCollections | None = None
        self._signature: str | None = None

    # ── Data loading ──────────────────────────────────────────────────────────

    def load(self, collections: EntityCollections | Mapping[str, Any]) -> NetworkGraph:
        """
        Accept freshly fetched collections and return the full graph.

        If the collection-size signature changed, query results derived from
        the previous dataset are dropped.
        """
        if not isinstance(collections, EntityCollections):
            collections = EntityCollections.from_mapping(collections)
        signature = collections.signature()
        if self._signature is not None and signature != self._signature:
            dropped = self.query_cache.invalidate_tag(self._signature)
            logger.info("Dataset signature changed (%s → %s); dropped %d cached views.",
                        self._signature, signature, dropped)
        self._collections = collections
        self._signature = signature
        return self.full_graph()

    @property
    def loaded(self) -> bool:
        return self._collections is not None

    @property
    def signature(self) -> str | None:
        return self._signature

    def full_graph(self) -> NetworkGraph:
        """
        Full graph for the loaded collections, from the graph cache when fresh.

        Raises:
            RuntimeError: nothing has been loaded.
        """
        if self._collections is None:
            raise RuntimeError("No entity collections loaded; call load() first")
        collections = self._collections
        return self.graph_cache.get_or_compute(
            self._signature,
            lambda: build_network_graph(collections, self.config),
            ttl=self.config.graph_cache_ttl_seconds,
        )

    # ── Views ─────────────────────────────────────────────────────────────────

    def generate_global_network(self) -> dict:
        """Whole graph pruned to the global ceilings, for the un-rooted view."""
        if not self.loaded:
            return dict(EMPTY_VISUALIZATION)
        key = f"global-view-{self._signature}"
        graph = self.query_cache.get_or_compute(
            key,
            lambda: optimize_network_data(
                self.full_graph(),
                self.config.global_max_nodes,
                self.config.global_max_links,
                self.config,
            ),
            ttl=self.config.query_cache_ttl_seconds,
            tags=(self._signature,),
        )
        return graph.to_dict()

    def generate_enhanced_visualization(
        self,
        root_node_id: str | None,
        sort_method: str = SortingMethod.RELATIONSHIP_STRENGTH,
        max_distance: int | None = None,
        layout_type: str = "force",
        filters: Mapping[str, Any] | None = None,
    ) -> dict:
        """
        Ego-centred, sorted, size-capped view of the graph around root_node_id.

        Returns the renderer dict {nodes, links, stats, ...}. With no root or
        no loaded data the empty visualization is returned. A root that is
        not in the graph yields the (sorted, optimized) full graph and a
        warning, never an error.
        """
        if not root_node_id or not self.loaded:
            return dict(EMPTY_VISUALIZATION)
        max_distance = self.config.default_max_distance if max_distance is None else max_distance
        filters = dict(filters or {})

        key = query_cache_key(
            self._signature, root_node_id, sort_method, max_distance, layout_type, filters
        )
        def compute() -> NetworkGraph:
            logger.info("Generating enhanced visualization for root '%s'.", root_node_id)
            return run_visualization_pipeline(
                self.full_graph(), root_node_id, sort_method, max_distance,
                layout_type, filters, self.config,
            ).optimized

        graph = self.query_cache.get_or_compute(
            key,
            compute,
            ttl=self.config.query_cache_ttl_seconds,
            tags=(self._signature,),
        )
        return graph.to_dict()

    def get_available_sorting_methods(self, entity_type: str | None) -> list[str]:
        return get_available_sorting_methods(entity_type)

    def get_sorting_method_label(self, method: str) -> str:
        return get_sorting_method_label(method)

    def company_hierarchy(self, company_ref: Any) -> dict | None:
        """Org tree for one company (key, 'companies/<key>' or record); None if unknown."""
        if self._collections is None:
            return None
        company_key = resolve_reference(company_ref)
        for company in self._collections.companies:
            if entity_key(company) == company_key:
                return build_company_hierarchy(
                    company, self._collections.authorities, self._collections.positions
                )
        logger.warning("Company '%s' not found for hierarchy view.", company_ref)
        return None

    # ── Cache control ─────────────────────────────────────────────────────────

    def invalidate(self, kinds: Iterable[str] | None = None) -> None:
        """
        Drop cached results for the current dataset.

        Args:
            kinds: Subset of INVALIDATION_KINDS ('graph', 'views'); None drops both.

        Raises:
            ValueError: an unknown kind was requested.
        """
        kinds = set(INVALIDATION_KINDS if kinds is None else kinds)
        unknown = kinds - set(INVALIDATION_KINDS)
        if unknown:
            raise ValueError(f"Unknown cache kinds {sorted(unknown)}; expected {INVALIDATION_KINDS}")
        if self._signature is None:
            return
        if "graph" in kinds:
            self.graph_cache.delete(self._signature)
        if "views" in kinds:
            self.query_cache.invalidate_tag(self._signature)
        logger.info("Invalidated cached %s for %s.", "/".join(sorted(kinds)), self._signature)
