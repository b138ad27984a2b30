"""
talent_graph/ingestion/collections.py — The six upstream entity collections.

EntityCollections is the single input object of the graph builder. It accepts
the fetch layer's naming (hiringAuthorities, jobSeekers) as well as snake_case,
and produces the collection-size signature the full-graph cache is keyed on.
"""

import logging
import numbers
from dataclasses import dataclass, field
from typing import Any, Mapping

import pandas as pd

logger = logging.getLogger(__name__)


# Accepted aliases for each collection, first match wins.
_COLLECTION_ALIASES: dict[str, tuple[str, ...]] = {
    "companies": ("companies",),
    "authorities": ("authorities", "hiringAuthorities", "hiring_authorities"),
    "job_seekers": ("job_seekers", "jobSeekers"),
    "skills": ("skills",),
    "positions": ("positions",),
    "matches": ("matches",),
}


def coerce_number(value: Any, default: float) -> float:
    """
    Convert a loosely-typed numeric field to float.

    Strings like "85" or " 7.5 " parse; None, NaN, booleans and garbage fall
    back to `default`. Never raises.
    """
    if value is None or isinstance(value, bool):
        return float(default)
    if not isinstance(value, (str, numbers.Real)):
        return float(default)
    if isinstance(value, str):
        value = value.strip()
    number = pd.to_numeric(value, errors="coerce")
    if pd.isna(number):
        return float(default)
    return float(number)


def _as_record_list(value: Any, name: str) -> list[dict]:
    if value is None:
        return []
    if isinstance(value, pd.DataFrame):
        return value.to_dict(orient="records")
    records = []
    for item in value:
        if isinstance(item, dict):
            records.append(item)
        else:
            logger.debug("Skipping non-record entry in %s: %r", name, item)
    return records


@dataclass
class EntityCollections:
    """
    Raw entity records, one list per kind.

    Fields:
        companies:   Company records (name, industry, size, location, ...).
        authorities: Hiring authority records (companyId, level, hiringPower,
                     skillsLookingFor, ...).
        job_seekers: Job seeker records (skills, skillLevels, currentTitle, ...).
        skills:      Skill records (name, category, demand, ...).
        positions:   Position records (title, companyId, authorityId,
                     requirements, level, ...).
        matches:     Match records (jobSeekerId, hiringAuthorityId/authorityId,
                     score/matchScore, status).
    """
    companies: list[dict] = field(default_factory=list)
    authorities: list[dict] = field(default_factory=list)
    job_seekers: list[dict] = field(default_factory=list)
    skills: list[dict] = field(default_factory=list)
    positions: list[dict] = field(default_factory=list)
    matches: list[dict] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "EntityCollections":
        """
        Build from a fetch-layer payload such as
        {"companies": [...], "hiringAuthorities": [...], "jobSeekers": [...], ...}.

        Missing collections become empty lists; list entries that are not
        dicts are dropped. DataFrames are accepted and converted to records.
        """
        if not isinstance(data, Mapping):
            raise TypeError(
                f"EntityCollections.from_mapping expects a mapping, got {type(data).__name__}"
            )
        kwargs: dict[str, list[dict]] = {}
        for attr, aliases in _COLLECTION_ALIASES.items():
            raw = None
            for alias in aliases:
                if alias in data:
                    raw = data[alias]
                    break
            kwargs[attr] = _as_record_list(raw, attr)
        return cls(**kwargs)

    def sizes(self) -> dict[str, int]:
        return {
            "companies": len(self.companies),
            "authorities": len(self.authorities),
            "jobSeekers": len(self.job_seekers),
            "skills": len(self.skills),
            "positions": len(self.positions),
            "matches": len(self.matches),
        }

    def signature(self) -> str:
        """
        Collection-size signature for the full-graph cache.

        Coarse by construction: any size change invalidates, same-size content
        edits do not.
        """
        return "global-network-" + "-".join(str(n) for n in self.sizes().values())

    def total(self) -> int:
        return sum(self.sizes().values())
