"""
talent_graph/tests/conftest.py — Shared pytest fixtures for the talent_graph test suite.

Fixtures:
    talent_records      — Small hand-built dataset covering every relation and
                          all three reference encodings.
    talent_collections  — talent_records as EntityCollections.
    no_overlay_config   — Config with the synthetic overlay switched off.
    talent_graph_full   — Full graph of talent_records (no synthetic edges).
    synthetic_collections — Seeded larger dataset (SEED=41), session-scoped.
    fake_clock          — Manually advanced clock for cache TTL tests.
"""

import random

import pytest

from talent_graph.config import TalentGraphConfig
from talent_graph.graph.builder import build_network_graph
from talent_graph.ingestion.collections import EntityCollections
from talent_graph.models import Link, NetworkGraph, Node

SEED = 41


# ── Small deterministic dataset ───────────────────────────────────────────────

def make_talent_records() -> dict:
    """
    12 nodes, 17 authoritative links once built:

        acme ◄─employment(3)─ a1 ─hiring─► p1 ─offers─► acme
        globex ◄─employment(2)─ a2 ─hiring─► p2 ─offers─► globex
        a3 references a company that does not exist (link skipped)
        js1 ─match(87)─► a1,  js2 ─match(64)─► a2
    """
    return {
        "companies": [
            {"_key": "acme", "name": "Acme Corp", "size": "Enterprise",
             "industry": "Software", "createdAt": "2023-01-15T00:00:00Z"},
            {"_key": "globex", "name": "Globex", "size": "Startup",
             "industry": "Energy", "createdAt": "2024-06-01T00:00:00Z"},
        ],
        "hiringAuthorities": [
            {"_key": "a1", "name": "Alice Chen", "companyId": "companies/acme",
             "hiringPower": "Ultimate", "level": "C-Suite", "role": "CTO",
             "skillsLookingFor": ["Python", "React"]},
            {"_key": "a2", "name": "Bob Ortiz", "companyId": {"_key": "globex", "name": "Globex"},
             "hiringPower": "High", "level": "Director", "role": "VP Engineering",
             "skillsLookingFor": ["Go"]},
            {"_key": "a3", "name": "Carol Diaz", "companyId": "companies/missing",
             "hiringPower": "Medium", "level": "Manager"},
        ],
        "jobSeekers": [
            {"_key": "js1", "name": "Dana Lee", "currentTitle": "Backend Engineer",
             "skills": ["Python", "Go"], "skillLevels": {"Python": 9},
             "createdAt": "2024-03-01T00:00:00Z"},
            {"_key": "js2", "name": "Evan Park", "skills": ["React", "Unknown Skill"],
             "createdAt": "2024-05-01T00:00:00Z"},
        ],
        "skills": [
            {"_key": "python", "name": "Python", "category": "Language", "importance": 9},
            {"_key": "react", "name": "React", "category": "Framework", "importance": 7},
            {"_key": "go", "name": "Go", "category": "Language", "importance": 5},
        ],
        "positions": [
            {"_key": "p1", "title": "Senior Engineer", "companyId": "acme",
             "authorityId": "hiringAuthorities/a1", "requirements": ["Python", "React"],
             "level": "Senior"},
            {"_key": "p2", "title": "Platform Lead", "companyId": "companies/globex",
             "authorityId": "a2", "requirements": ["Go"]},
        ],
        "matches": [
            {"_key": "m1", "jobSeekerId": "jobSeekers/js1",
             "hiringAuthorityId": "hiringAuthorities/a1", "score": 87, "status": "pending"},
            {"_key": "m2", "jobSeekerId": "js2", "authorityId": "a2",
             "matchScore": "64", "status": "reviewing"},
            {"_key": "m3", "jobSeekerId": "js2", "hiringAuthorityId": "ghost"},
        ],
    }


@pytest.fixture
def talent_records() -> dict:
    return make_talent_records()


@pytest.fixture
def talent_collections(talent_records) -> EntityCollections:
    return EntityCollections.from_mapping(talent_records)


@pytest.fixture
def no_overlay_config() -> TalentGraphConfig:
    """Config with the synthetic overlay disabled, for exact link assertions."""
    return TalentGraphConfig(densify=False)


@pytest.fixture
def talent_graph_full(talent_collections, no_overlay_config) -> NetworkGraph:
    return build_network_graph(talent_collections, no_overlay_config)


# ── Hand-built graphs ─────────────────────────────────────────────────────────

def make_chain_graph() -> NetworkGraph:
    """root ── A ── B ── C (skill-style links, strength 1)."""
    nodes = [
        Node(id="root", type="jobSeeker", name="Root"),
        Node(id="A", type="skill", name="A"),
        Node(id="B", type="position", name="B"),
        Node(id="C", type="company", name="C"),
    ]
    links = [
        Link(source="root", target="A", type="has"),
        Link(source="B", target="A", type="requires"),
        Link(source="B", target="C", type="offers"),
    ]
    return NetworkGraph(nodes=nodes, links=links)


# ── Larger seeded dataset ─────────────────────────────────────────────────────

def make_synthetic_records(
    n_companies: int = 8,
    n_authorities: int = 24,
    n_seekers: int = 80,
    n_skills: int = 30,
    n_positions: int = 40,
    n_matches: int = 120,
    seed: int = SEED,
) -> dict:
    """Deterministic random dataset; references use all three encodings."""
    rng = random.Random(seed)
    powers = ["Ultimate", "High", "Medium", "Low"]
    levels = ["C-Suite", "Executive", "Director", "Manager"]

    def ref(collection: str, key: str):
        return rng.choice([f"{collection}/{key}", key, {"_key": key}])

    skills = [{"_key": f"s{i}", "name": f"Skill {i}", "importance": rng.randint(0, 10)}
              for i in range(n_skills)]
    skill_names = [s["name"] for s in skills]
    companies = [{"_key": f"c{i}", "name": f"Company {i}",
                  "createdAt": f"202{rng.randint(0, 4)}-0{rng.randint(1, 9)}-01"}
                 for i in range(n_companies)]
    authorities = [
        {"_key": f"a{i}", "name": f"Authority {i}",
         "companyId": ref("companies", f"c{rng.randrange(n_companies)}"),
         "hiringPower": rng.choice(powers), "level": rng.choice(levels),
         "skillsLookingFor": rng.sample(skill_names, rng.randint(0, 3))}
        for i in range(n_authorities)
    ]
    seekers = [
        {"_key": f"j{i}", "name": f"Seeker {i}",
         "skills": rng.sample(skill_names, rng.randint(1, 5)),
         "createdAt": f"2024-{rng.randint(1, 12):02d}-15"}
        for i in range(n_seekers)
    ]
    for seeker in seekers:
        seeker["skillLevels"] = {name: rng.randint(1, 10) for name in seeker["skills"]}
    positions = [
        {"_key": f"p{i}", "title": f"Position {i}",
         "companyId": ref("companies", f"c{rng.randrange(n_companies)}"),
         "authorityId": ref("hiringAuthorities", f"a{rng.randrange(n_authorities)}"),
         "requirements": rng.sample(skill_names, rng.randint(1, 4))}
        for i in range(n_positions)
    ]
    matches = [
        {"_key": f"m{i}",
         "jobSeekerId": ref("jobSeekers", f"j{rng.randrange(n_seekers)}"),
         "hiringAuthorityId": ref("hiringAuthorities", f"a{rng.randrange(n_authorities)}"),
         "score": rng.randint(30, 99), "status": rng.choice(["pending", "accepted"])}
        for i in range(n_matches)
    ]
    return {
        "companies": companies,
        "hiringAuthorities": authorities,
        "jobSeekers": seekers,
        "skills": skills,
        "positions": positions,
        "matches": matches,
    }


@pytest.fixture(scope="session")
def synthetic_collections() -> EntityCollections:
    return EntityCollections.from_mapping(make_synthetic_records())


# ── Simulated clock ───────────────────────────────────────────────────────────

class FakeClock:
    """Callable clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
