"""
Reconciliation Tests
====================

Live drag -> proposed arc/date edits.

HARD CONTRACT VERIFIED:
=======================
Proposals are returned, never applied: the input scenes are unchanged.
"""

import pytest

from storyboard.contracts.base import LayoutConfig, Position
from storyboard.core.layout import calculate_layout
from storyboard.core.sync import (
    calculate_sync_changes, is_out_of_sequence, is_untouched, propose_arc, repair_date
)
from storyboard.temporal.abstract_date import compare
from tests.fixtures import make_scene, reconciliation_example


@pytest.fixture
def mixed_lanes():
    # Canonical: m1 (0, 0), s1 (40, 500), m2 (450, 0)
    return [
        make_scene("m1", (2024, 1, 1), arc="Main"),
        make_scene("s1", (2024, 1, 5), arc="Side"),
        make_scene("m2", (2024, 1, 10), arc="Main"),
    ]


class TestReconciliation:

    def test_documented_example(self):
        scenes, geometry = reconciliation_example()
        proposals = calculate_sync_changes(scenes, geometry)

        assert len(proposals) == 1
        proposal = proposals[0]
        assert proposal.scene_id == "R"
        assert proposal.new_date == (2024, 1, 12)
        assert proposal.new_arc is None
        assert proposal.reason == (
            'Sequence moved: 2024-2-1 is not after "P" (2024-1-10) and before "Q" (2024-1-15). '
            'Suggesting new date: 2024-1-12'
        )

    def test_proposals_are_not_applied(self):
        scenes, geometry = reconciliation_example()
        calculate_sync_changes(scenes, geometry)
        assert scenes[2].date == (2024, 2, 1)

    def test_unchanged_geometry_is_a_no_op(self, mixed_lanes):
        geometry = calculate_layout(mixed_lanes)
        assert calculate_sync_changes(mixed_lanes, geometry) == []

    def test_no_positions_no_proposals(self, mixed_lanes):
        assert calculate_sync_changes(mixed_lanes, {}) == []

    def test_arc_change(self, mixed_lanes):
        geometry = dict(calculate_layout(mixed_lanes))
        geometry["m2"] = Position(450, 480)

        proposals = calculate_sync_changes(mixed_lanes, geometry)
        assert len(proposals) == 1
        assert proposals[0].scene_id == "m2"
        assert proposals[0].new_arc == "Side"
        assert proposals[0].new_date is None
        assert proposals[0].reason == 'Arc changed from "Main" to "Side"'

    def test_small_vertical_nudge_keeps_arc(self, mixed_lanes):
        geometry = dict(calculate_layout(mixed_lanes))
        geometry["m2"] = Position(450, 120)
        assert calculate_sync_changes(mixed_lanes, geometry) == []

    def test_drag_to_front_proposes_earlier_date(self, mixed_lanes):
        geometry = dict(calculate_layout(mixed_lanes))
        geometry["m2"] = Position(-300, 0)

        proposals = calculate_sync_changes(mixed_lanes, geometry)
        assert [p.scene_id for p in proposals] == ["m2"]
        # Only successor is m1 (Jan 1): one below on the day segment
        assert proposals[0].new_date == (2024, 1, 0)

    def test_custom_formatter_in_reason(self):
        scenes, geometry = reconciliation_example()
        proposals = calculate_sync_changes(
            scenes, geometry, formatter=lambda d: "/".join(str(s) for s in reversed(d))
        )
        assert "Suggesting new date: 12/1/2024" in proposals[0].reason

    def test_scenes_without_geometry_are_ignored(self):
        scenes, geometry = reconciliation_example()
        del geometry["Q"]
        proposals = calculate_sync_changes(scenes, geometry)
        # R now sits after P with no successor: its date is in sequence
        assert proposals == []


class TestRules:

    @pytest.mark.parametrize("y, expected", [
        (400, "Side"),
        (300, None),
        (100, None),
    ])
    def test_arc_hysteresis(self, y, expected):
        scene = make_scene("m", (1,), arc="Main")
        centroids = {"Main": 0.0, "Side": 600.0}
        assert propose_arc(scene, Position(0, y), centroids, LayoutConfig(arc_spacing=500)) == expected

    def test_ties_are_out_of_sequence(self):
        p = make_scene("p", (2024, 1, 10))
        s = make_scene("s", (2024, 1, 10))
        assert is_out_of_sequence(s, p, None)
        assert is_out_of_sequence(p, None, s)

    def test_strictly_between_is_in_sequence(self):
        p, s, q = (make_scene(i, (2024, 1, d)) for i, d in (("p", 1), ("s", 5), ("q", 9)))
        assert not is_out_of_sequence(s, p, q)

    def test_repair_midpoint_collapses_to_predecessor_plus_one(self):
        p = make_scene("p", (2024, 1, 10))
        q = make_scene("q", (2024, 1, 11))
        s = make_scene("s", (2024, 3, 3))
        assert repair_date(s, p, q) == (2024, 1, 11)

    def test_repair_between_neighbours_uses_predecessor_upper_segments(self):
        p = make_scene("p", (2024, 1, 10))
        q = make_scene("q", (2024, 1, 15))
        s = make_scene("s", (2024, 2, 1))
        repaired = repair_date(s, p, q)
        assert repaired == (2024, 1, 12)
        assert compare(p.date, repaired) < 0 < compare(q.date, repaired)

    def test_repair_single_neighbour_keeps_own_upper_segments(self):
        p = make_scene("p", (2024, 1, 10))
        s = make_scene("s", (1999, 7, 2))
        assert repair_date(s, p, None) == (1999, 7, 11)
        assert repair_date(s, None, p) == (1999, 7, 9)

    def test_untouched_tolerance(self):
        assert is_untouched(Position(10.4, 0), Position(10, 0))
        assert not is_untouched(Position(11, 0), Position(10, 0))
        assert not is_untouched(Position(0, 0), None)
