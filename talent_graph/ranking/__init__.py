"""
talent_graph.ranking — Node ordering around an ego root.

Modules:
    sorting  — Eight sort strategies, composite tie-breaking, and the
               per-entity-type method menus shown by the UI.
"""
