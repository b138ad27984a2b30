"""
talent_graph.graph — Graph construction, projection and pruning.

Modules:
    builder      — Full graph from the six entity collections.
    densify      — Synthetic edge overlay for sparse graphs.
    ego_network  — Root-centred projection with distance emphasis.
    layout       — Advisory radial / hierarchical / force hints.
    colors       — Palette and emphasis colour adjustments.
    optimizer    — Importance-based pruning to node/link ceilings.
    hierarchy    — Company organisation tree.

All graphs are talent_graph.models.NetworkGraph instances:
    Node types : company, authority, jobSeeker, skill, position
    Link types : employment, hiring, offers, requires, has, preference, match
"""
