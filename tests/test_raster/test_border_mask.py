"""
Tests for border mask creation.
"""

import numpy as np

from tilemap.raster.border_mask import create_border_mask, mask_to_image
from tests.fixtures.tile_map_fixtures import blank_map, draw_rect_border


class TestCreateBorderMask:
    """Tests for dark pixel classification."""

    def test_black_line_is_border(self):
        image = blank_map(20, 20)
        draw_rect_border(image, 5, 5, 14, 14)

        mask = create_border_mask(image)

        assert mask.shape == (20, 20)
        assert mask.dtype == bool
        assert mask[5, 5:15].all()
        assert not mask[10, 10]

    def test_all_channels_must_be_dark(self):
        """Test that one bright channel keeps a pixel open."""
        image = blank_map(5, 5)
        image[2, 2, :3] = (99, 99, 99)
        image[2, 3, :3] = (99, 99, 100)

        mask = create_border_mask(image)

        assert mask[2, 2]
        assert not mask[2, 3]

    def test_custom_threshold(self):
        image = blank_map(5, 5)
        image[2, 2, :3] = (120, 120, 120)

        assert not create_border_mask(image)[2, 2]
        assert create_border_mask(image, dark_threshold=128)[2, 2]

    def test_frame_is_open_space(self):
        """Test that the outermost pixel frame is never border."""
        image = blank_map(10, 8)
        image[:, :, :3] = 0

        mask = create_border_mask(image)

        assert not mask[0, :].any()
        assert not mask[-1, :].any()
        assert not mask[:, 0].any()
        assert not mask[:, -1].any()
        assert mask[1:-1, 1:-1].all()

    def test_alpha_ignored(self):
        image = blank_map(5, 5)
        image[2, 2] = (0, 0, 0, 0)

        assert create_border_mask(image)[2, 2]


class TestMaskToImage:
    """Tests for rendering a mask back to RGBA."""

    def test_border_black_open_white(self):
        mask = np.zeros((4, 6), dtype=bool)
        mask[1, 2] = True

        image = mask_to_image(mask)

        assert image.shape == (4, 6, 4)
        assert image.dtype == np.uint8
        assert tuple(image[1, 2]) == (0, 0, 0, 255)
        assert tuple(image[0, 0]) == (255, 255, 255, 255)

    def test_render_then_classify_matches(self):
        mask = np.zeros((10, 10), dtype=bool)
        mask[3:7, 4] = True

        assert np.array_equal(create_border_mask(mask_to_image(mask)), mask)
