"""
Tests for border gap repair.
"""

import logging

import numpy as np
import pytest

from tilemap.raster.border_mask import create_border_mask
from tilemap.raster.border_repair import RepairResult, repair_pass, repair_borders
from tests.fixtures.tile_map_fixtures import create_gapped_square, mask_from_points


class TestRepairRules:
    """Tests for the individual gap-closing rules on tiny masks."""

    def test_vertical_one_pixel_gap_closed(self):
        mask = mask_from_points((7, 7), [(3, 2), (3, 4)])

        repaired, changed = repair_pass(mask)

        assert repaired[3, 3]
        assert changed == 1

    def test_diagonal_one_pixel_gap_closed(self):
        mask = mask_from_points((7, 7), [(2, 2), (4, 4)])

        repaired, _ = repair_pass(mask)

        assert repaired[3, 3]

    def test_corner_filled(self):
        """Test that an L of top and left neighbors with an open diagonal is filled."""
        mask = mask_from_points((7, 7), [(3, 2), (2, 3)])

        repaired, changed = repair_pass(mask)

        assert repaired[3, 3]
        assert repaired[2, 2]
        assert changed == 2

    def test_three_neighbors_filled(self):
        mask = mask_from_points((7, 7), [(2, 2), (4, 2), (3, 4)])

        repaired, _ = repair_pass(mask)

        assert repaired[3, 3]

    def test_two_pixel_bridge(self):
        """Test that a neighbor plus the pixel two steps across closes a 2px gap."""
        mask = mask_from_points((9, 9), [(2, 3), (2, 2), (5, 3)])

        repaired, _ = repair_pass(mask)

        assert repaired[3, 3]

    def test_two_pixel_gap_needs_second_neighbor(self):
        mask = mask_from_points((9, 9), [(2, 3), (5, 3)])

        repaired, changed = repair_pass(mask)

        assert changed == 0
        assert np.array_equal(repaired, mask)

    def test_single_neighbor_not_filled(self):
        mask = mask_from_points((7, 7), [(3, 3)])

        _, changed = repair_pass(mask)

        assert changed == 0

    def test_frame_never_filled(self):
        """Test that a gap on the image frame is left open."""
        mask = mask_from_points((7, 7), [(0, 2), (0, 4)])

        repaired, _ = repair_pass(mask)

        assert not repaired[3, 0]

    def test_input_not_modified(self):
        mask = mask_from_points((7, 7), [(3, 2), (3, 4)])
        original = mask.copy()

        repair_pass(mask)

        assert np.array_equal(mask, original)


class TestRepairPassProperties:
    """Tests for properties that hold for any mask."""

    @pytest.fixture
    def random_mask(self):
        rng = np.random.default_rng(7)
        mask = rng.random((40, 50)) < 0.15
        mask[0, :] = mask[-1, :] = False
        mask[:, 0] = mask[:, -1] = False
        return mask

    def test_border_only_grows(self, random_mask):
        current = random_mask
        for _ in range(4):
            repaired, _ = repair_pass(current)
            assert not (current & ~repaired).any()
            current = repaired

    def test_changed_count_matches_difference(self, random_mask):
        repaired, changed = repair_pass(random_mask)

        assert changed == int(np.count_nonzero(repaired & ~random_mask))

    def test_frame_stays_open(self, random_mask):
        repaired, _ = repair_pass(random_mask)

        assert not repaired[0, :].any()
        assert not repaired[:, -1].any()

    def test_result_independent_of_scan_direction(self, random_mask):
        """Test that mirrored and transposed inputs give mirrored and transposed results."""
        repaired, _ = repair_pass(random_mask)

        assert np.array_equal(repair_pass(random_mask[::-1])[0], repaired[::-1])
        assert np.array_equal(repair_pass(random_mask[:, ::-1])[0], repaired[:, ::-1])
        assert np.array_equal(repair_pass(random_mask.T)[0], repaired.T)

    def test_stable_mask_unchanged(self):
        """Test that a mask with nothing left to close is a fixed point."""
        mask = np.zeros((20, 20), dtype=bool)
        mask[4:17:4, 4:17:4] = True

        repaired, changed = repair_pass(mask)

        assert changed == 0
        assert np.array_equal(repaired, mask)

    def test_passes_reach_a_fixed_point(self):
        """Test that once a pass changes nothing, later passes change nothing."""
        mask = create_border_mask(create_gapped_square(gap=2))[40:60, 40:60].copy()

        result = repair_borders(mask, passes=25)

        first_stable = result.changed_per_pass.index(0)
        assert all(c == 0 for c in result.changed_per_pass[first_stable:])
        assert repair_pass(result.mask)[1] == 0


class TestRepairBorders:
    """Tests for the multi-pass repair driver."""

    def test_two_pixel_gap_closed_in_three_passes(self):
        mask = create_border_mask(create_gapped_square(gap=2))
        assert not mask[44, 49] and not mask[44, 50]

        result = repair_borders(mask, passes=3)

        assert isinstance(result, RepairResult)
        assert result.mask[44, 49]
        assert result.mask[44, 50]

    def test_records_every_pass(self):
        mask = create_border_mask(create_gapped_square(gap=2))

        result = repair_borders(mask, passes=3)

        assert result.passes == 3
        assert len(result.changed_per_pass) == 3
        assert all(c > 0 for c in result.changed_per_pass)
        assert result.total_changed == sum(result.changed_per_pass)

    def test_zero_passes_returns_copy(self):
        mask = create_border_mask(create_gapped_square(gap=2))

        result = repair_borders(mask, passes=0)

        assert result.changed_per_pass == []
        assert np.array_equal(result.mask, mask)
        assert result.mask is not mask

    def test_negative_passes_rejected(self):
        with pytest.raises(ValueError, match="passes"):
            repair_borders(np.zeros((5, 5), dtype=bool), passes=-1)

    def test_input_mask_not_modified(self):
        mask = create_border_mask(create_gapped_square(gap=2))
        original = mask.copy()

        repair_borders(mask, passes=3)

        assert np.array_equal(mask, original)

    def test_logs_each_pass(self, caplog):
        mask = create_border_mask(create_gapped_square(gap=2))

        with caplog.at_level(logging.INFO, logger="tilemap.raster.border_repair"):
            repair_borders(mask, passes=2)

        messages = [r.getMessage() for r in caplog.records]
        assert any("Repair pass 1/2" in m for m in messages)
        assert any("Repair pass 2/2" in m for m in messages)

    def test_to_dict(self):
        result = RepairResult(mask=np.zeros((2, 2), dtype=bool), changed_per_pass=[4, 2, 0])

        assert result.to_dict() == {
            "passes": 3,
            "changed_per_pass": [4, 2, 0],
            "total_changed": 6,
        }
