"""
Integration tests for the frame-driven scene.

Tests the complete workflow from configuration through ray tracing to
apparent-source reconstruction and output.
"""

import argparse
import json

import numpy as np
import pytest

from flatrefract import Scene, SceneConfig, ViewState
from flatrefract.cli import run_scene
from flatrefract.core.scene import FrameThrottle
from flatrefract.observer import ObserverHit


def fake_clock(times):
    """Clock returning the given timestamps in order."""
    return iter(times).__next__


@pytest.fixture
def scene():
    return Scene({"obstacles": {"seed": 42}})


class TestSceneCreation:
    """Tests for building scenes from configuration."""

    def test_default_scene(self, scene):
        assert scene.ground_y == 950
        assert scene.source.x == 650
        assert scene.source.y == 450
        assert scene.observer.y == 948
        assert scene.medium.num_layers == 10
        assert len(scene.terrain) == 38
        assert len(scene.clouds) == 32
        assert len(scene.obstacles) == 70

    def test_from_config_object(self):
        config = SceneConfig()
        config.medium.layer_count = 4
        config.obstacles.seed = 1
        assert Scene(config).medium.num_layers == 4

    def test_seeded_scenes_match(self):
        """The same seed reproduces the same obstacles."""
        a = Scene({"obstacles": {"seed": 7}})
        b = Scene({"obstacles": {"seed": 7}})
        assert a.terrain == b.terrain
        assert a.clouds == b.clouds

    def test_moon_below_sun(self, scene):
        """The first cloud becomes a sun-sized moon below the sun."""
        moon = scene.moon
        assert moon is scene.clouds[0]
        assert moon.x == 400
        assert moon.y == 500
        assert moon.width == moon.height == 10

    @pytest.mark.parametrize("config", [
        {"aggregator": {"max_hits": 1}},
        {"frame": {"max_fps": 0}},
    ])
    def test_unusable_config_rejected(self, config):
        """Settings that would fail a frame are refused when the scene is built."""
        with pytest.raises(ValueError):
            Scene(config)

    def test_moon_disabled(self):
        scene = Scene({"obstacles": {"seed": 1, "moon": False}})
        assert scene.moon is None
        assert scene.move_moon(10, 10) is None


class TestSceneState:
    """Tests for source/observer changes and hit invalidation."""

    def fill(self, scene, count=4):
        for x in range(count):
            scene.aggregator.record(ObserverHit(float(x), 948.0, 0.0, -1.0))

    def test_move_source_resets_hits(self, scene):
        self.fill(scene)
        scene.move_source(700, 400)
        assert len(scene.aggregator) == 0
        assert (scene.source.x, scene.source.y) == (700, 400)

    def test_move_observer_resets_hits(self, scene):
        self.fill(scene)
        scene.move_observer(600, 949)
        assert len(scene.aggregator) == 0

    def test_set_source_height(self, scene):
        self.fill(scene)
        scene.set_source_height(100)
        assert scene.source.y == 850
        assert len(scene.aggregator) == 0

    def test_update_layers_resets_hits(self, scene):
        self.fill(scene)
        medium = scene.update_layers(layer_count=3, bottom_index=1.1)
        assert medium is scene.medium
        assert medium.num_layers == 3
        assert np.isclose(medium.indices[0], 1.1)
        assert len(scene.aggregator) == 0

    def test_move_moon_keeps_hits(self, scene):
        self.fill(scene)
        scene.move_moon(300, 600)
        assert len(scene.aggregator) == 4
        assert (scene.moon.x, scene.moon.y) == (300, 600)

    def test_source_clamped(self, scene):
        """The sun stays on the canvas and 10 px above the ground."""
        source = scene.move_source(-10, 2000)
        assert (source.x, source.y) == (0, 940)

    def test_observer_clamped(self, scene):
        """The observer stays within its band above the ground."""
        observer = scene.move_observer(2000, 0)
        assert (observer.x, observer.y) == (1300, 948)

    def test_moon_clamped(self, scene):
        moon = scene.move_moon(-5, 1000)
        assert (moon.x, moon.y) == (0, 940)


class TestRunFrame:
    """Tests for a full tracing pass."""

    def test_frame_shape(self, scene):
        result = scene.run_frame()
        assert len(result.paths) == 100
        assert len(result.targets) == 100
        assert result.metadata["ray_count"] == 100
        assert result.metadata["visible_range"] == [0.0, 1200.0]
        assert result.source == scene.source
        assert 0 <= result.shadowed_rays <= 100

    def test_hits_bounded_across_frames(self, scene):
        for _ in range(20):
            result = scene.run_frame()
        assert len(result.hits) <= 10
        xs = [h.x for h in result.hits]
        assert xs == sorted(xs)

    def test_low_sun_traces_every_ray(self):
        """A sun dragged to the ground still sends every ray downward."""
        scene = Scene({"obstacles": {"seed": 1}})
        assert scene.move_source(650, 945).y == 940
        result = scene.run_frame()
        assert all(not p.is_empty for p in result.paths)
        assert result.metadata["discarded_rays"] == 0

    def test_zoomed_frame_targets_visible_ground(self, scene):
        result = scene.run_frame(ViewState(view_x=300.0, zoom=2.0))
        assert result.targets[0] == 290.0
        assert result.targets.max() < 920.0
        assert result.metadata["zoom"] == 2.0


class TestFrameThrottle:
    """Tests for frame pacing."""

    def test_throttle(self):
        throttle = FrameThrottle(30, clock=fake_clock([0.0, 0.01, 0.04, 0.05]))
        assert [throttle.ready() for _ in range(4)] == [True, False, True, False]

    def test_non_positive_rate_rejected(self):
        with pytest.raises(ValueError):
            FrameThrottle(0)

    def test_render_drops_fast_frames(self):
        scene = Scene(
            {"obstacles": {"seed": 1}, "tracer": {"ray_count": 5}},
            clock=fake_clock([0.0, 0.001, 1.0]),
        )
        assert scene.render() is not None
        assert scene.render() is None
        assert scene.render() is not None


class TestCommandLine:
    """Tests for the command-line runner."""

    def make_args(self, **overrides):
        values = dict(
            config=None, layers=None, layer_spacing=None, top_index=None,
            bottom_index=None, sun_x=None, sun_height=None, observer_x=None,
            seed=5, rays=20, frames=2, zoom=1.0, output=None, format=None,
        )
        values.update(overrides)
        return argparse.Namespace(**values)

    def test_report(self, capsys):
        assert run_scene(self.make_args()) == 0
        out = capsys.readouterr().out
        assert "Rays traced: 20" in out
        assert "True sun" in out

    def test_json_output(self, tmp_path):
        path = tmp_path / "frame.json"
        assert run_scene(self.make_args(output=str(path))) == 0

        with open(path) as f:
            data = json.load(f)
        assert len(data["rays"]) == 20
        assert data["configuration"]["obstacles"]["seed"] == 5

    def test_no_frames(self):
        assert run_scene(self.make_args(frames=0)) == 1
