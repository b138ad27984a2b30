"""
talent_graph — Graph visualization data engine for talent matching.

Turns six loosely-structured entity collections (companies, hiring
authorities, job seekers, skills, positions, matches) into a bounded,
emphasis-annotated, sorted and size-capped network graph ready for a 2D/3D
renderer.

Stages:
- Graph construction with reference repair + synthetic densification
  (talent_graph.graph.builder, talent_graph.graph.densify)
- Ego network projection with emphasis and layout hints
  (talent_graph.graph.ego_network)
- Eight node ranking strategies (talent_graph.ranking.sorting)
- Importance-based pruning (talent_graph.graph.optimizer)
- TTL/LRU result caching (talent_graph.cache)
"""

__version__ = "0.1.0"
