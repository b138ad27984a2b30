"""
talent_graph/graph/hierarchy.py — Company organisation tree.

Builds the nested structure used by org-chart views:

    company
      ├── C-Suite authorities
      │     └── positions they manage
      ├── Executive authorities
      ├── Director authorities
      └── Manager authorities
"""

import logging
from typing import Iterable

from talent_graph.ingestion.references import entity_key, first_reference
from talent_graph.models import EntityKind, node_id_for

logger = logging.getLogger(__name__)

AUTHORITY_LEVELS = ("C-Suite", "Executive", "Director", "Manager")


def build_company_hierarchy(
    company: dict,
    authorities: Iterable[dict],
    positions: Iterable[dict],
) -> dict:
    """
    Nested {id, name, type, data, children} tree for one company.

    Args:
        company:     Company record.
        authorities: Authority records. Only those whose companyId resolves
                     to this company are placed; a missing level counts as
                     'Manager' and levels outside AUTHORITY_LEVELS are left
                     out of the tree.
        positions:   Position records, attached under the authority their
                     authorityId resolves to.

    Returns:
        Tree dict. Authorities appear in AUTHORITY_LEVELS order, input order
        within a level.

    Raises:
        ValueError: company has no identifier.
    """
    company_key = entity_key(company)
    if company_key is None:
        raise ValueError("company record has no _key / id")

    by_level: dict[str, list[dict]] = {level: [] for level in AUTHORITY_LEVELS}
    by_key: dict[str, dict] = {}
    skipped_levels = 0

    for authority in authorities:
        key = entity_key(authority)
        if key is None:
            continue
        employer = first_reference(authority, "companyId", "company")
        if employer != company_key:
            continue
        level = authority.get("level") or "Manager"
        if level not in by_level:
            skipped_levels += 1
            continue
        entry = {
            "id": node_id_for(EntityKind.AUTHORITY, key),
            "name": authority.get("name", key),
            "type": EntityKind.AUTHORITY.value,
            "level": authority.get("level"),
            "role": authority.get("role"),
            "hiringPower": authority.get("hiringPower"),
            "data": authority,
            "children": [],
        }
        by_level[level].append(entry)
        by_key[key] = entry

    for position in positions:
        authority_key = first_reference(position, "authorityId", "hiringAuthorityId", "authority")
        entry = by_key.get(authority_key) if authority_key else None
        if entry is None:
            continue
        position_key = entity_key(position)
        entry["children"].append({
            "id": node_id_for(EntityKind.POSITION, position_key) if position_key else None,
            "name": position.get("title", position_key),
            "type": EntityKind.POSITION.value,
            "level": position.get("level"),
            "data": position,
        })

    if skipped_levels:
        logger.debug("%d authorities with unrecognised levels left out of hierarchy.", skipped_levels)

    return {
        "id": node_id_for(EntityKind.COMPANY, company_key),
        "name": company.get("name", company_key),
        "type": EntityKind.COMPANY.value,
        "data": company,
        "children": [entry for level in AUTHORITY_LEVELS for entry in by_level[level]],
    }
