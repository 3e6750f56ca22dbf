"""
Forward Layout Tests
====================

Tests for the scene -> position layout.

VERIFICATION:
=============
1. Lanes are numbered by first chronological appearance
2. ABSOLUTE mode scales with ordinal time and avoids same-lane overlap
3. ORDERED mode spaces scenes evenly
4. Same input = same output
"""

import pytest

from storyboard.contracts.base import LayoutConfig, LayoutMode, Position
from storyboard.core.layout import calculate_layout, discover_lanes
from storyboard.temporal.abstract_date import sort_chronologically
from tests.fixtures import LAYOUT_EXAMPLE_CONFIG, layout_example, make_scene


class TestAbsoluteLayout:

    def test_documented_example(self):
        """Main is lane 0, Side lane 1; B is pushed clear of A."""
        positions = calculate_layout(layout_example(), LAYOUT_EXAMPLE_CONFIG)

        assert positions["A"] == Position(0, 0)
        # Raw X is 150 (5 months of 30 days); the crowd floor is 0 + 400 + 50
        assert positions["B"] == Position(450, 0)
        assert positions["C"] == Position(60, 500)

    def test_proportional_when_not_crowded(self):
        scenes = [
            make_scene("a", (2024, 1, 1)),
            make_scene("b", (2024, 3, 1)),
        ]
        positions = calculate_layout(scenes, LayoutConfig(x_scale=10, node_width=100, node_gap_x=10))
        assert positions["b"].x == 600

    def test_crowding_is_per_lane(self):
        scenes = [
            make_scene("a", (2024, 1, 1), arc="Main"),
            make_scene("b", (2024, 1, 2), arc="Side"),
        ]
        positions = calculate_layout(scenes, LayoutConfig(x_scale=10))
        assert positions["b"].x == 10

    def test_same_date_same_lane_is_pushed(self):
        scenes = [make_scene("a", (1, 1, 1)), make_scene("b", (1, 1, 1))]
        positions = calculate_layout(scenes, LayoutConfig())
        assert positions["a"].x == 0
        assert positions["b"].x == 450

    def test_earliest_scene_is_origin_even_when_listed_last(self):
        scenes = [make_scene("late", (10,)), make_scene("early", (3,))]
        positions = calculate_layout(scenes, LayoutConfig(x_scale=1, node_width=0, node_gap_x=0))
        assert positions["early"].x == 0
        assert positions["late"].x == 7


class TestOrderedLayout:

    def test_even_spacing_across_lanes(self):
        scenes = [
            make_scene("c", (2024, 9, 1), arc="Main"),
            make_scene("a", (2024, 1, 1), arc="Main"),
            make_scene("b", (2024, 2, 1), arc="Side"),
        ]
        config = LayoutConfig(mode=LayoutMode.ORDERED, node_width=400, node_gap_x=50)
        positions = calculate_layout(scenes, config)

        assert positions["a"] == Position(0, 0)
        assert positions["b"] == Position(500, 500)
        assert positions["c"] == Position(1000, 0)


class TestLanes:

    def test_first_appearance_order(self):
        scenes = sort_chronologically([
            make_scene("x", (3,), arc="Late"),
            make_scene("y", (1,), arc="Early"),
            make_scene("z", (2,), arc="Late"),
        ])
        assert discover_lanes(scenes) == ["Early", "Late"]

    def test_y_follows_lane_index(self):
        scenes = [
            make_scene("a", (1,), arc="One"),
            make_scene("b", (2,), arc="Two"),
            make_scene("c", (3,), arc="Three"),
        ]
        positions = calculate_layout(scenes, LayoutConfig(arc_spacing=250))
        assert [positions[i].y for i in "abc"] == [0, 250, 500]


class TestLayoutEdgeCases:

    def test_empty(self):
        assert calculate_layout([]) == {}

    def test_deterministic(self):
        scenes = layout_example()
        assert calculate_layout(scenes) == calculate_layout(scenes)

    @pytest.mark.parametrize("mode", list(LayoutMode))
    def test_single_scene_at_origin(self, mode):
        positions = calculate_layout([make_scene("only", (99, 9, 9))], LayoutConfig(mode=mode))
        assert positions == {"only": Position(0, 0)}
