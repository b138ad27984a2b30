"""
talent_graph/ingestion/references.py — Cross-reference resolution.

Upstream records point at each other in at least three shapes:

    "companies/acme"                    path string (collection/key)
    "acme" or 42                        bare key
    {"_key": "acme", "name": "Acme"}    nested object (_key, id or _id)

resolve_reference() collapses all of them onto the bare key string. It never
raises: anything it cannot interpret resolves to None and the caller skips
the link it was about to create.
"""

import logging
import math
from typing import Any

logger = logging.getLogger(__name__)

# Collection names used as path prefixes by the document store.
KNOWN_COLLECTIONS = (
    "companies",
    "hiringAuthorities",
    "authorities",
    "jobSeekers",
    "skills",
    "positions",
    "matches",
)

_NESTED_KEY_FIELDS = ("_key", "id", "_id", "key")


def resolve_reference(value: Any) -> str | None:
    """
    Normalise a cross-reference to a bare key.

    Args:
        value: Path string, bare key (str / int), or a dict carrying one of
               '_key', 'id', '_id', 'key'.

    Returns:
        The bare key as a string, or None if the value is empty or
        uninterpretable.

    Notes:
        - Only the first path segment is treated as a collection prefix, so a
          key that itself contains '/' survives when the prefix is known.
        - Unknown prefixes still resolve to the final path segment.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, dict):
        for field_name in _NESTED_KEY_FIELDS:
            if value.get(field_name) not in (None, ""):
                return resolve_reference(value[field_name])
        return None

    if isinstance(value, float):
        if math.isnan(value):
            return None
        value = int(value) if value.is_integer() else value

    if isinstance(value, int):
        return str(value)

    if not isinstance(value, str):
        logger.debug("Unresolvable reference of type %s: %r", type(value).__name__, value)
        return None

    text = value.strip()
    if not text:
        return None

    if "/" in text:
        prefix, _, rest = text.partition("/")
        if prefix in KNOWN_COLLECTIONS:
            return rest.strip() or None
        return text.rsplit("/", 1)[-1].strip() or None

    return text


def entity_key(record: Any) -> str | None:
    """
    The record's own identifier: '_key', else 'id', else the tail of '_id'.

    Returns None for non-dict records or records with no usable identifier.
    """
    if not isinstance(record, dict):
        return None
    for field_name in ("_key", "id"):
        key = resolve_reference(record.get(field_name))
        if key:
            return key
    return resolve_reference(record.get("_id"))


def first_reference(record: dict, *field_names: str) -> str | None:
    """Resolve the first of several alternative reference fields that yields a key."""
    for field_name in field_names:
        key = resolve_reference(record.get(field_name))
        if key:
            return key
    return None
