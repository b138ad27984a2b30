"""
talent_graph.ingestion — Normalisation at the data-ingestion boundary.

Modules:
    references   — Resolve the three cross-reference encodings to bare keys.
    collections  — EntityCollections container + numeric coercion helpers.

The upstream fetch layer hands over six lists of plain records whose
cross-references arrive as 'companies/<key>' paths, bare keys, or nested
objects. Everything downstream works only with resolved bare keys.
"""
