"""
talent_graph/tests/test_layout.py — Tests for layout hints and colour helpers.
"""

import math

import pytest

from talent_graph.graph.colors import (
    adjust_color_opacity,
    adjust_color_saturation,
    link_color,
    node_color,
)
from talent_graph.graph.layout import (
    TYPE_ORDER,
    hierarchical_hints,
    layout_hints,
    node_angle,
    radial_hints,
    type_rank,
)
from talent_graph.models import Node


def _node(node_id: str = "skill_python", node_type: str = "skill") -> Node:
    return Node(id=node_id, type=node_type, name=node_id)


class TestLayoutHints:

    def test_radial_root_pinned_at_origin(self):
        hints = radial_hints(_node(), 0)
        assert hints["x"] == 0.0 and hints["y"] == 0.0
        assert hints["fixed"] is True

    def test_radial_ring_radius(self):
        hints = radial_hints(_node(), 2)
        assert hints["radius"] == 160
        assert math.hypot(hints["x"], hints["y"]) == pytest.approx(160)

    def test_angle_is_stable_and_bounded(self):
        first = node_angle("jobSeeker_js1")
        assert first == node_angle("jobSeeker_js1")
        assert 0.0 <= first < 360.0

    def test_hierarchical_layer_and_lane(self):
        hints = hierarchical_hints(_node("company_acme", "company"), 2)
        assert hints["layer"] == 2
        assert hints["lane"] == 0
        assert hints["y"] == 200

    def test_force_preferred_distance(self):
        assert layout_hints(_node(), 3, "force") == {"preferredDistance": 150}

    def test_unknown_layout_raises(self):
        with pytest.raises(ValueError):
            layout_hints(_node(), 1, "spiral")

    def test_type_rank(self):
        assert [type_rank(t) for t in TYPE_ORDER] == [0, 1, 2, 3, 4]
        assert type_rank("unknown") == len(TYPE_ORDER)


class TestColors:

    def test_node_palette(self):
        assert node_color("company") == "#8b5cf6"
        assert node_color("jobSeeker") == "#f97316"

    def test_unknown_types_get_a_default(self):
        assert node_color("alien").startswith("#")
        assert link_color("alien").startswith("#")

    def test_opacity_appends_alpha(self):
        assert adjust_color_opacity("#ff0000", 0.5) == "#ff000080"
        assert adjust_color_opacity("#ff0000", 1.0) == "#ff0000ff"

    def test_opacity_leaves_non_hex_unchanged(self):
        assert adjust_color_opacity("red", 0.5) == "red"

    def test_saturation_keeps_format(self):
        boosted = adjust_color_saturation("#8b5cf6", 1.3)
        assert boosted.startswith("#") and len(boosted) == 7

    def test_saturation_of_grey_stays_grey(self):
        boosted = adjust_color_saturation("#808080", 1.5)
        assert boosted[1:3] == boosted[3:5] == boosted[5:7]
