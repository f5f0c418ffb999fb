"""Tests for ray marching through the layered medium."""

import numpy as np
import pytest

from flatrefract.atmosphere import LayeredMedium
from flatrefract.geometry import (
    Cloud,
    ObstacleKind,
    Point,
    Terrain,
    ground_targets,
    trace_ray,
    trace_rays,
)


GROUND_Y = 950.0
OBSERVER_FAR = Point(100.0, 948.0)


@pytest.fixture
def layered():
    """Default stack: index 1.3 at the ground down to 1.0 at y=750."""
    return LayeredMedium.build()


@pytest.fixture
def uniform():
    return LayeredMedium()


class TestBasicMarching:
    """Tests for ray start, stop and step behavior."""

    def test_upward_ray_discarded(self, layered):
        """A source below the ground produces an empty path."""
        path = trace_ray(Point(650, 960), 650, layered, [], OBSERVER_FAR)
        assert path.is_empty
        assert path.hit is None
        assert path.end is None
        assert path.points.shape == (0, 2)

    def test_straight_down(self, layered):
        """A vertical ray stays vertical across every boundary."""
        path = trace_ray(
            Point(600, 450), 600, layered, [], OBSERVER_FAR, emit_reflection=True
        )
        assert len(path.segments) == 1
        assert not path.in_shadow
        assert np.isclose(path.end.x, 600.0, atol=1e-6)
        assert path.end.y >= GROUND_Y
        assert path.reflections == []

    def test_source_on_ground_takes_no_steps(self, layered):
        """Without a single step there is no observer hit."""
        source = Point(650, GROUND_Y)
        path = trace_ray(source, 650, layered, [], source)
        assert path.segments[0].points == [source]
        assert path.hit is None

    def test_ray_leaving_canvas_side(self, uniform):
        """Marching stops once the ray leaves the canvas horizontally."""
        path = trace_ray(Point(10, 900), -500, uniform, [], OBSERVER_FAR)
        assert path.end.x < 0
        assert path.end.y < GROUND_Y

    def test_finer_steps_when_zoomed(self, layered):
        """Halving the step doubles the number of vertices."""
        coarse = trace_ray(Point(600, 450), 600, layered, [], OBSERVER_FAR)
        fine = trace_ray(Point(600, 450), 600, layered, [], OBSERVER_FAR, step_scale=2.0)
        assert abs(len(fine.points) - (2 * len(coarse.points) - 1)) <= 2

    def test_segment_length(self, uniform):
        """Lit length of a vertical ray is the drop to the ground."""
        path = trace_ray(Point(600, 450), 600, uniform, [], OBSERVER_FAR)
        assert 500.0 <= path.segments[0].length <= 502.0 + 1e-9


class TestRefraction:
    """Tests for bending at layer boundaries."""

    def test_uniform_medium_is_straight(self, uniform):
        """Without boundaries the ray follows its initial chord."""
        path = trace_ray(Point(650, 450), 800, uniform, [], OBSERVER_FAR)
        assert 800.0 <= path.end.x <= 800.0 + 2.0

    def test_bends_towards_vertical(self, layered, uniform):
        """Denser lower layers steepen a descending ray."""
        straight = trace_ray(Point(650, 450), 800, uniform, [], OBSERVER_FAR)
        bent = trace_ray(Point(650, 450), 800, layered, [], OBSERVER_FAR)
        assert bent.end.x < straight.end.x - 3.0
        assert bent.end.x > 650.0

    def test_leftward_ray_mirrors_rightward(self, layered):
        """Refraction is symmetric about the vertical through the source."""
        right = trace_ray(Point(650, 450), 800, layered, [], OBSERVER_FAR)
        left = trace_ray(Point(650, 450), 500, layered, [], OBSERVER_FAR)
        assert np.isclose(right.end.x - 650, 650 - left.end.x, atol=1e-6)
        assert np.isclose(right.end.y, left.end.y, atol=1e-6)


class TestReflections:
    """Tests for boundary reflection events."""

    def test_oblique_ray_records_reflections(self, layered):
        path = trace_ray(
            Point(650, 450), 100, layered, [], OBSERVER_FAR, emit_reflection=True
        )
        assert len(path.reflections) > 0
        for event in path.reflections:
            assert event.strength > 1e-4
            assert 0.0 <= event.reflectance <= 1.0
            assert 750.0 <= event.point.y <= GROUND_Y

    def test_reflections_not_emitted_by_default(self, layered):
        path = trace_ray(Point(650, 450), 100, layered, [], OBSERVER_FAR)
        assert path.reflections == []

    def test_every_fifth_ray_emits(self, layered):
        """Batches show reflections on every fifth ray only."""
        targets = ground_targets(100.0, 1000.0, 10)
        paths = trace_rays(Point(650, 450), targets, layered, [], OBSERVER_FAR)
        emitted = [bool(p.reflections) for p in paths]
        assert emitted == [i % 5 == 0 for i in range(10)]

    def test_reflections_disabled(self, layered):
        targets = ground_targets(100.0, 1000.0, 10)
        paths = trace_rays(
            Point(650, 450), targets, layered, [], OBSERVER_FAR, reflection_every=0
        )
        assert all(not p.reflections for p in paths)


class TestObserverHit:
    """Tests for the observer capture disc."""

    def test_vertical_ray_hits_observer_below(self, layered):
        path = trace_ray(Point(600, 450), 600, layered, [], Point(600, 948))
        assert path.hit is not None
        assert np.isclose(path.hit.normal_y, -1.0)
        assert np.isclose(path.hit.normal_x, 0.0, atol=1e-9)
        assert np.isclose(np.hypot(path.hit.normal_x, path.hit.normal_y), 1.0)

    def test_distant_observer_missed(self, layered):
        path = trace_ray(Point(600, 450), 600, layered, [], Point(700, 948))
        assert path.hit is None

    def test_hit_normal_points_back(self, uniform):
        """The back direction of an oblique hit points towards the source."""
        path = trace_ray(Point(650, 450), 646, uniform, [], Point(650, 948))
        assert path.hit is not None
        assert path.hit.normal_x > 0
        assert path.hit.normal_y < 0


class TestOcclusion:
    """Tests for obstacle shadowing."""

    def test_terrain_blocks_ray(self, layered):
        """A mountain under the ray starts a shadow segment."""
        mountain = Terrain(x=590, width=20, height=4, ground_y=GROUND_Y)
        path = trace_ray(Point(600, 450), 600, layered, [mountain], OBSERVER_FAR)

        assert path.in_shadow
        assert path.occlusion.kind is ObstacleKind.TERRAIN
        assert len(path.segments) == 2
        assert not path.segments[0].in_shadow
        assert path.segments[1].in_shadow
        assert path.occlusion.point.y == pytest.approx(946.0, abs=1e-3)
        assert path.occlusion.incident_angle is not None
        assert path.occlusion.refracted_angle is not None

    def test_shadow_segment_starts_at_hit(self, layered):
        mountain = Terrain(x=590, width=20, height=4, ground_y=GROUND_Y)
        path = trace_ray(Point(600, 450), 600, layered, [mountain], OBSERVER_FAR)
        lit, shadow = path.segments
        assert lit.points[-1] == path.occlusion.point
        assert shadow.points[0] == path.occlusion.point
        assert len(path.points) == len(lit.points) + len(shadow.points) - 1

    def test_cloud_blocks_ray(self, layered):
        """A ray starting a step inside a cloud is blocked there."""
        cloud = Cloud(x=590, y=900, width=20, height=5)
        path = trace_ray(Point(600, 450), 600, layered, [cloud], OBSERVER_FAR)

        assert path.occlusion.kind is ObstacleKind.CLOUD
        assert np.isclose(path.occlusion.point.x, 600.0, atol=1e-6)
        assert 900.0 <= path.occlusion.point.y <= 905.0
        assert path.occlusion.incident_angle is None
        assert path.end.y >= GROUND_Y

    def test_shadow_is_permanent(self, layered):
        """A second obstacle does not split the shadow again."""
        obstacles = [
            Cloud(x=590, y=920, width=20, height=5),
            Cloud(x=590, y=900, width=20, height=5),
        ]
        paths = trace_rays(Point(600, 450), [600.0], layered, obstacles, OBSERVER_FAR)
        path = paths[0]
        assert len(path.segments) == 2
        assert path.occlusion.point.y < 910.0

    def test_shadowed_ray_still_reports_observer_hit(self, layered):
        """The capture test ignores whether the ray was blocked."""
        mountain = Terrain(x=590, width=20, height=4, ground_y=GROUND_Y)
        path = trace_ray(Point(600, 450), 600, layered, [mountain], Point(600, 948))
        assert path.in_shadow
        assert path.hit is not None

    def test_obstacle_order_does_not_matter(self, layered):
        """Obstacles are tested in occlusion order whatever the input order."""
        cloud = Cloud(x=590, y=900, width=20, height=5)
        far_mountain = Terrain(x=100, width=20, height=4, ground_y=GROUND_Y)

        forward = trace_ray(Point(600, 450), 600, layered, [cloud, far_mountain], OBSERVER_FAR)
        reverse = trace_ray(Point(600, 450), 600, layered, [far_mountain, cloud], OBSERVER_FAR)

        assert forward.in_shadow
        assert reverse.in_shadow
        assert reverse.occlusion == forward.occlusion

    def test_shadowed_ray_does_not_refract(self, layered, uniform):
        """After occlusion the ray keeps its heading through every boundary."""
        high_cloud = Cloud(x=685, y=595, width=20, height=10)
        path = trace_ray(
            Point(650, 450), 800, layered, [high_cloud], OBSERVER_FAR, emit_reflection=True
        )

        assert path.occlusion.kind is ObstacleKind.CLOUD
        assert path.occlusion.point.y < 750.0

        shadow = np.array([(p.x, p.y) for p in path.segments[1].points])
        steps = np.diff(shadow, axis=0)
        assert shadow[-1, 1] >= GROUND_Y
        assert np.allclose(steps, steps[0], atol=1e-9)
        assert path.reflections == []

        straight = trace_ray(Point(650, 450), 800, uniform, [], OBSERVER_FAR)
        assert np.isclose(path.end.x, straight.end.x, atol=1e-6)

    def test_obstacle_off_the_path(self, layered):
        mountain = Terrain(x=100, width=20, height=4, ground_y=GROUND_Y)
        path = trace_ray(Point(600, 450), 600, layered, [mountain], OBSERVER_FAR)
        assert not path.in_shadow
        assert len(path.segments) == 1


class TestGroundTargets:
    """Tests for evenly spaced ray targets."""

    def test_spacing(self):
        targets = ground_targets(0.0, 1200.0, 100)
        assert len(targets) == 100
        assert targets[0] == 0.0
        assert np.allclose(np.diff(targets), 12.0)
        assert np.isclose(targets[-1], 1188.0)

    def test_no_rays(self):
        assert len(ground_targets(0.0, 1200.0, 0)) == 0
