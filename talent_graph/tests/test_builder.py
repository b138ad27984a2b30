"""
talent_graph/tests/test_builder.py — Tests for talent_graph.graph.builder.

Tests verify:
- One node per company / authority / job seeker / skill / position.
- Every relation type is created with the documented strength and label.
- Unresolvable references are skipped (never raise, never dangle).
- Numeric defaults (score 50, skill level 5, size 10).
- Authoritative stats exclude synthetic links.
"""

import pytest

from talent_graph.config import TalentGraphConfig
from talent_graph.graph.builder import build_network_graph, summarize_graph
from talent_graph.ingestion.collections import EntityCollections
from talent_graph.models import NODE_KINDS, NetworkGraph


def _links_of(graph: NetworkGraph, link_type: str) -> dict[tuple[str, str], object]:
    return {(l.source, l.target): l for l in graph.links if l.type == link_type}


# ── Reference scenario ────────────────────────────────────────────────────────

class TestMinimalScenario:

    def test_company_and_ultimate_authority(self):
        """1 Company + 1 Ultimate Authority → 2 nodes, 1 employment link, strength 3."""
        graph = build_network_graph({
            "companies": [{"_key": "acme", "name": "Acme"}],
            "hiringAuthorities": [
                {"_key": "a1", "name": "Alice", "hiringPower": "Ultimate",
                 "companyId": "companies/acme"},
            ],
        })
        assert len(graph.nodes) == 2
        assert len(graph.links) == 1
        link = graph.links[0]
        assert link.type == "employment"
        assert link.strength == 3
        assert (link.source, link.target) == ("authority_a1", "company_acme")
        assert link.synthetic is False

    def test_empty_input(self):
        graph = build_network_graph(EntityCollections())
        assert graph.nodes == []
        assert graph.links == []
        assert graph.stats["connectionsPerNode"] == 0.0


# ── Nodes ─────────────────────────────────────────────────────────────────────

class TestNodes:

    def test_node_count(self, talent_graph_full):
        assert len(talent_graph_full.nodes) == 12

    def test_node_ids_are_unique_and_prefixed(self, talent_graph_full):
        ids = [n.id for n in talent_graph_full.nodes]
        assert len(ids) == len(set(ids))
        assert "company_acme" in ids
        assert "authority_a1" in ids
        assert "jobSeeker_js1" in ids
        assert "skill_python" in ids
        assert "position_p1" in ids

    def test_positions_named_by_title(self, talent_graph_full):
        assert talent_graph_full.get_node("position_p1").name == "Senior Engineer"

    def test_payload_is_original_record(self, talent_graph_full, talent_records):
        node = talent_graph_full.get_node("authority_a1")
        assert node.payload == talent_records["hiringAuthorities"][0]
        assert node.get("hiringPower") == "Ultimate"

    def test_categorical_size_falls_back_to_default(self, talent_graph_full):
        """Company 'size' is categorical ("Enterprise"), so the default weight applies."""
        assert talent_graph_full.get_node("company_acme").size == 10.0

    def test_numeric_size_is_used(self):
        graph = build_network_graph({"skills": [{"_key": "s", "name": "S", "size": 25}]})
        assert graph.get_node("skill_s").size == 25.0

    def test_colors_by_type(self, talent_graph_full):
        assert talent_graph_full.get_node("company_acme").color == "#8b5cf6"
        assert talent_graph_full.get_node("skill_go").color == "#10b981"

    def test_record_without_identifier_skipped(self):
        graph = build_network_graph({"companies": [{"name": "Nameless"}, {"_key": "c", "name": "C"}]})
        assert [n.id for n in graph.nodes] == ["company_c"]

    def test_duplicate_keys_first_wins(self):
        graph = build_network_graph({"skills": [{"_key": "s", "name": "First"},
                                                {"_key": "s", "name": "Second"}]})
        assert len(graph.nodes) == 1
        assert graph.nodes[0].name == "First"

    def test_missing_name_falls_back_to_key(self):
        graph = build_network_graph({"companies": [{"_key": "nameless"}]})
        assert graph.nodes[0].name == "nameless"


# ── Links ─────────────────────────────────────────────────────────────────────

class TestLinks:

    def test_authoritative_link_count(self, talent_graph_full):
        assert len(talent_graph_full.links) == 17

    def test_employment_strength_by_hiring_power(self, talent_graph_full):
        employment = _links_of(talent_graph_full, "employment")
        assert employment[("authority_a1", "company_acme")].strength == 3
        assert employment[("authority_a2", "company_globex")].strength == 2
        assert employment[("authority_a1", "company_acme")].label == "works for"

    def test_employment_medium_power_strength_one(self):
        graph = build_network_graph({
            "companies": [{"_key": "c"}],
            "hiringAuthorities": [{"_key": "a", "hiringPower": "Medium", "companyId": "c"}],
        })
        assert graph.links[0].strength == 1

    def test_non_string_hiring_power_falls_back(self):
        graph = build_network_graph({
            "companies": [{"_key": "c"}],
            "skills": [{"_key": "py", "name": "Python"}],
            "hiringAuthorities": [{"_key": "a", "hiringPower": ["Ultimate"], "companyId": "c",
                                   "skillsLookingFor": ["Python"]}],
        }, TalentGraphConfig(densify=False))
        employment = _links_of(graph, "employment")
        pref = _links_of(graph, "preference")
        assert employment[("authority_a", "company_c")].strength == 1.0
        assert pref[("authority_a", "skill_py")].strength == pytest.approx(0.7)

    def test_nested_object_reference_resolved(self, talent_graph_full):
        """a2.companyId is a nested object."""
        assert ("authority_a2", "company_globex") in _links_of(talent_graph_full, "employment")

    def test_unresolvable_company_skipped(self, talent_graph_full):
        assert talent_graph_full.get_node("authority_a3") is not None
        assert not [l for l in talent_graph_full.links if l.source == "authority_a3"]
        assert talent_graph_full.stats["skippedReferences"]["employment"] == 1

    def test_hiring_and_offers(self, talent_graph_full):
        hiring = _links_of(talent_graph_full, "hiring")
        offers = _links_of(talent_graph_full, "offers")
        assert set(hiring) == {("authority_a1", "position_p1"), ("authority_a2", "position_p2")}
        assert set(offers) == {("position_p1", "company_acme"), ("position_p2", "company_globex")}
        assert all(l.strength == 2 for l in list(hiring.values()) + list(offers.values()))

    def test_requires(self, talent_graph_full):
        requires = _links_of(talent_graph_full, "requires")
        assert set(requires) == {
            ("position_p1", "skill_python"),
            ("position_p1", "skill_react"),
            ("position_p2", "skill_go"),
        }

    def test_has_strength_from_skill_level(self, talent_graph_full):
        has = _links_of(talent_graph_full, "has")
        assert has[("jobSeeker_js1", "skill_python")].strength == pytest.approx(0.9)
        assert has[("jobSeeker_js1", "skill_python")].label == "has skill (9/10)"

    def test_has_default_level_five(self, talent_graph_full):
        has = _links_of(talent_graph_full, "has")
        assert has[("jobSeeker_js1", "skill_go")].strength == pytest.approx(0.5)
        assert has[("jobSeeker_js2", "skill_react")].strength == pytest.approx(0.5)

    def test_unknown_skill_name_skipped(self, talent_graph_full):
        has = _links_of(talent_graph_full, "has")
        assert len([k for k in has if k[0] == "jobSeeker_js2"]) == 1

    def test_preference_strength(self, talent_graph_full):
        pref = _links_of(talent_graph_full, "preference")
        assert pref[("authority_a1", "skill_python")].strength == 1.0
        assert pref[("authority_a2", "skill_go")].strength == pytest.approx(0.7)

    def test_match_links(self, talent_graph_full):
        matches = _links_of(talent_graph_full, "match")
        m1 = matches[("jobSeeker_js1", "authority_a1")]
        assert m1.strength == pytest.approx(0.87)
        assert m1.label == "match (87%)"
        assert m1.status == "pending"
        assert m1.score == 87
        m2 = matches[("jobSeeker_js2", "authority_a2")]
        assert m2.strength == pytest.approx(0.64)

    def test_match_to_unknown_authority_skipped(self, talent_graph_full):
        assert len(_links_of(talent_graph_full, "match")) == 2
        assert talent_graph_full.stats["skippedReferences"]["match"] == 1

    def test_match_default_score(self):
        graph = build_network_graph({
            "jobSeekers": [{"_key": "j"}],
            "hiringAuthorities": [{"_key": "a"}],
            "matches": [{"jobSeekerId": "j", "authorityId": "a", "score": "not a number"}],
        }, TalentGraphConfig(densify=False))
        match = graph.links[0]
        assert match.strength == pytest.approx(0.5)
        assert match.label == "match (50%)"

    def test_skill_reference_by_key(self):
        graph = build_network_graph({
            "skills": [{"_key": "py", "name": "Python"}],
            "positions": [{"_key": "p", "title": "Dev", "requirements": ["skills/py", {"name": "Python"}]}],
        }, TalentGraphConfig(densify=False))
        requires = [l for l in graph.links if l.type == "requires"]
        assert len(requires) == 1  # duplicate triple collapsed

    def test_no_dangling_links(self, synthetic_collections):
        graph = build_network_graph(synthetic_collections)
        ids = graph.node_ids()
        assert all(l.source in ids and l.target in ids for l in graph.links)


# ── Stats ─────────────────────────────────────────────────────────────────────

class TestStats:

    def test_counts(self, talent_graph_full):
        stats = talent_graph_full.stats
        assert stats["totalNodes"] == 12
        assert stats["totalLinks"] == 17
        assert stats["syntheticLinks"] == 0
        assert stats["connectionsPerNode"] == 1.42
        assert stats["nodeTypes"] == {
            "company": 2, "authority": 3, "jobSeeker": 2, "skill": 3, "position": 2,
        }
        assert stats["linkTypes"]["employment"] == 2
        assert stats["linkTypes"]["match"] == 2

    def test_synthetic_links_excluded_from_authoritative_counts(self, talent_collections):
        graph = build_network_graph(talent_collections)
        stats = graph.stats
        assert stats["syntheticLinks"] > 0
        assert stats["totalLinks"] == 17
        assert stats["renderedLinks"] == 17 + stats["syntheticLinks"]
        assert sum(stats["linkTypes"].values()) == 17

    def test_summarize_graph_recomputes(self, talent_graph_full):
        assert summarize_graph(talent_graph_full)["totalLinks"] == 17

    def test_node_types_cover_every_node_kind(self):
        stats = summarize_graph(NetworkGraph())
        assert set(stats["nodeTypes"]) == {kind.value for kind in NODE_KINDS}
        assert "match" not in stats["nodeTypes"]
