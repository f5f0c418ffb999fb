"""Unit tests for the pan/zoom view and CLI option handling."""

import argparse

import numpy as np
import pytest

from flatrefract.cli import build_config
from flatrefract.core.view import ViewState, clamp_zoom
from flatrefract.geometry import Point


class TestZoom:
    """Tests for zoom limits and anchoring."""

    def test_clamped_on_creation(self):
        assert ViewState(zoom=100).zoom == 15.0
        assert ViewState(zoom=0.1).zoom == 0.5

    def test_clamp_zoom(self):
        assert clamp_zoom(3.0) == 3.0
        assert clamp_zoom(-1.0) == 0.5

    def test_zoom_keeps_anchor_fixed(self):
        """The world point under the cursor stays under the cursor."""
        view = ViewState(view_x=20.0, view_y=-5.0, zoom=1.5)
        cursor = Point(400.0, 300.0)
        before = view.screen_to_world(cursor)

        view.zoom_at(2.0, cursor)

        after = view.screen_to_world(cursor)
        assert view.zoom == 3.5
        assert np.isclose(before.x, after.x)
        assert np.isclose(before.y, after.y)

    def test_zoom_at_limit(self):
        view = ViewState(zoom=14.0)
        view.zoom_at(5.0, Point(10.0, 10.0))
        assert view.zoom == 15.0

    def test_step_scale_follows_zoom(self):
        assert ViewState(zoom=4.0).step_scale == 4.0


class TestTransforms:
    """Tests for world/screen conversion and panning."""

    def test_round_trip(self):
        view = ViewState(view_x=100.0, view_y=50.0, zoom=2.0)
        world = Point(640.0, 900.0)
        screen = view.world_to_screen(world)
        assert screen == Point(1080.0, 1700.0)
        assert view.screen_to_world(screen) == world

    def test_pan(self):
        """Dragging right moves the view left in world space."""
        view = ViewState(zoom=2.0)
        view.pan(40.0, -10.0)
        assert view.view_x == -20.0
        assert view.view_y == 5.0

    def test_reset(self):
        view = ViewState(view_x=10.0, view_y=10.0, zoom=3.0)
        view.reset()
        assert view == ViewState()


class TestVisibleGround:
    """Tests for the targeted ground span."""

    def test_unzoomed(self):
        """The full ground plane is visible at zoom 1."""
        assert ViewState().visible_ground_range(1200.0) == (0.0, 1200.0)

    def test_zoomed_and_panned(self):
        left, right = ViewState(view_x=100.0, zoom=2.0).visible_ground_range(1200.0)
        assert left == 90.0
        assert right == 720.0

    def test_panned_off_the_edge(self):
        left, right = ViewState(view_x=1500.0).visible_ground_range(1200.0)
        assert left == right == 1200.0


def make_args(**overrides):
    values = dict(
        config=None, layers=None, layer_spacing=None, top_index=None,
        bottom_index=None, sun_x=None, sun_height=None, observer_x=None,
        seed=None, rays=None,
    )
    values.update(overrides)
    return argparse.Namespace(**values)


class TestBuildConfig:
    """Tests for CLI overrides."""

    def test_no_options(self):
        assert build_config(make_args()) == {}

    def test_overrides(self):
        config = build_config(make_args(layers=5, sun_height=300.0, seed=3))
        assert config == {
            "medium": {"layer_count": 5},
            "source": {"height": 300.0},
            "obstacles": {"seed": 3},
        }

    def test_overrides_config_file(self, tmp_path):
        path = tmp_path / "scene.json"
        path.write_text('{"medium": {"layer_count": 4, "top_index": 1.1}}')
        config = build_config(make_args(config=str(path), layers=6))
        assert config["medium"]["layer_count"] == 6
        assert config["medium"]["top_index"] == pytest.approx(1.1)
