"""Tests for the obstacle mask, ray sensors and motion model."""

from __future__ import annotations

import numpy as np
import pytest

from ant import Ant
from config import BLANK_COLOR, CLEAR_COLOR
from maze import generate_maze, open_field
from neural_network import NeuralNetwork, build_layers
from world import ObstacleMask, RayFan, World

BLACK = (0, 0, 0, 255)


def _world(pixels, **kwargs) -> World:
    kwargs.setdefault("n_rays", 20)
    kwargs.setdefault("ray_radius", 100)
    kwargs.setdefault("max_speed", 2)
    return World(ObstacleMask(pixels), **kwargs)


class TestObstacleMask:
    """Point lookups against the colour raster."""

    def test_sample_color_and_is_clear(self):
        pixels = open_field(10, 8)
        pixels[3, 5] = BLACK
        mask = ObstacleMask(pixels)
        assert mask.width == 10 and mask.height == 8
        assert mask.sample_color(5, 3) == BLACK
        assert mask.is_clear(mask.sample_color(4, 3))
        assert not mask.is_clear(mask.sample_color(5, 3))

    def test_sample_truncates_float_coordinates(self):
        pixels = open_field(10, 10)
        pixels[2, 7] = BLACK
        mask = ObstacleMask(pixels)
        assert mask.sample_color(7.9, 2.2) == BLACK

    def test_outside_raster_is_blank(self):
        mask = ObstacleMask(open_field(10, 10))
        assert mask.sample_color(10, 0) == BLANK_COLOR
        assert mask.sample_color(-1, 5) == BLANK_COLOR
        assert not mask.is_free(10, 0)

    def test_rgb_raster_gets_opaque_alpha(self):
        rgb = np.full((4, 4, 3), 255, dtype=np.uint8)
        mask = ObstacleMask(rgb)
        assert mask.sample_color(1, 1) == CLEAR_COLOR

    def test_greyscale_raster_is_accepted(self):
        grey = np.full((4, 4), 255, dtype=np.uint8)
        grey[0, 0] = 0
        mask = ObstacleMask(grey)
        assert mask.is_free(1, 1)
        assert not mask.is_free(0, 0)

    def test_semi_transparent_white_is_not_clear(self):
        pixels = open_field(4, 4)
        pixels[1, 1] = (255, 255, 255, 128)
        assert not ObstacleMask(pixels).is_free(1, 1)

    def test_bad_shape_rejected(self):
        with pytest.raises(ValueError):
            ObstacleMask(np.zeros((4, 4, 2), dtype=np.uint8))

    def test_mask_is_read_only(self):
        mask = ObstacleMask(open_field(4, 4))
        with pytest.raises(ValueError):
            mask.pixels[0, 0] = BLACK


class TestRayFan:
    """Precomputed ray directions."""

    def test_directions_are_evenly_spaced(self):
        fan = RayFan(4, 10)
        np.testing.assert_allclose(fan.cos, [1, 0, -1, 0], atol=1e-6)
        np.testing.assert_allclose(fan.sin, [0, 1, 0, -1], atol=1e-6)

    def test_directions_are_unit_length(self):
        fan = RayFan(20, 100)
        np.testing.assert_allclose(np.hypot(fan.cos, fan.sin), 1.0, rtol=1e-6)

    def test_invalid_fan_rejected(self):
        with pytest.raises(ValueError):
            RayFan(0, 10)


class TestCastRays:
    """Sensor readings."""

    def test_open_field_reads_exactly_zero(self, open_world):
        readings = open_world.cast_rays(150, 150)
        assert readings.shape == (20,)
        assert readings.dtype == np.float32
        assert np.all(readings == 0.0)

    def test_wall_distance_reading(self):
        pixels = open_field(300, 300)
        pixels[:, 160] = BLACK
        readings = _world(pixels).cast_rays(150, 150)
        # Ray 0 points along +x and hits the wall after 10 steps
        assert readings[0] == pytest.approx(0.9)
        # Ray 10 points along -x and never reaches it
        assert readings[10] == 0.0

    def test_fractional_position_is_truncated(self):
        pixels = open_field(300, 300)
        pixels[:, 160] = BLACK
        world = _world(pixels)
        np.testing.assert_array_equal(world.cast_rays(150.9, 150.7),
                                      world.cast_rays(150, 150))

    def test_standing_on_obstacle_reads_one(self):
        pixels = open_field(300, 300)
        pixels[150, 150] = BLACK
        readings = _world(pixels).cast_rays(150, 150)
        assert np.all(readings == 1.0)

    def test_out_of_bounds_probes_are_passable(self):
        """A wall in column 0 is never seen, one in column 1 is."""
        pixels = open_field(300, 300)
        pixels[:, 0] = BLACK
        assert _world(pixels).cast_rays(50, 150)[10] == 0.0

        pixels[:, 1] = BLACK
        assert _world(pixels).cast_rays(50, 150)[10] == pytest.approx(0.51)

    def test_near_screen_edge_reads_zero_in_open_field(self, open_world):
        assert np.all(open_world.cast_rays(3, 3) == 0.0)

    def test_readings_stay_in_unit_interval(self, rng):
        pixels = generate_maze(400, 300, 8, 6, rng=rng)
        world = _world(pixels)
        for _ in range(50):
            x, y = rng.uniform(0, 400), rng.uniform(0, 300)
            r = world.cast_rays(x, y)
            assert r.min() >= 0.0 and r.max() <= 1.0

    def test_custom_radius(self):
        pixels = open_field(100, 100)
        pixels[:, 55] = BLACK
        world = _world(pixels, n_rays=4, ray_radius=10)
        readings = world.cast_rays(50, 50)
        assert readings[0] == pytest.approx(0.5)
        assert readings[2] == 0.0


class TestMotion:
    """Clamped, collision-checked movement."""

    def test_clear_move_is_exact(self, open_world):
        x, y, moved = open_world.step_position(100.5, 100.5, [1.0, 0.0])
        assert moved
        assert x == 100.5 + 2
        assert y == 100.5

    def test_blocked_move_leaves_position_unchanged(self):
        pixels = open_field(300, 300)
        pixels[100, 102] = BLACK
        world = _world(pixels)
        x, y, moved = world.step_position(100.5, 100.5, [1.0, 0.0])
        assert not moved
        assert (x, y) == (100.5, 100.5)

    def test_only_first_two_outputs_are_used(self, open_world):
        x, y, _ = open_world.step_position(50.0, 50.0, [0.5, -0.25, 9.0, 9.0])
        assert (x, y) == (51.0, 49.5)

    def test_clamped_at_zero(self, open_world):
        x, y, moved = open_world.step_position(1.0, 10.0, [-1.0, 0.0])
        assert moved
        assert x == 0.0

    def test_clamp_onto_far_edge_is_dropped(self, open_world):
        """x clamps to the width; that pixel lies outside the raster."""
        x, y, moved = open_world.step_position(299.5, 10.0, [1.0, 0.0])
        assert not moved
        assert x == 299.5

    def test_motion_uses_float32_arithmetic(self, open_world):
        x = 100.0
        expected = np.float32(100.0)
        for _ in range(1000):
            x, _, moved = open_world.step_position(x, 50.0, [0.001, 0.0])
            assert moved
            expected = expected + np.float32(0.001) * np.float32(2)
        assert x == float(expected)

    def test_ant_position_is_float32_representable(self, small_layers):
        ant = Ant(10.1, 20.2, NeuralNetwork(small_layers))
        assert ant.x == float(np.float32(10.1))
        assert ant.y == float(np.float32(20.2))

    def test_short_output_rejected(self, open_world):
        with pytest.raises(ValueError):
            open_world.step_position(10.0, 10.0, [1.0])

    def test_move_ant_counts_blocked_moves(self, small_layers):
        pixels = open_field(300, 300)
        pixels[100, 102] = BLACK
        world = _world(pixels)
        ant = Ant(100.5, 100.5, NeuralNetwork(small_layers))
        assert world.move_ant(ant, np.array([1.0, 0.0], dtype=np.float32)) is False
        assert ant.blocked_moves == 1
        assert world.move_ant(ant, np.array([0.0, 1.0], dtype=np.float32)) is True
        assert (ant.x, ant.y) == (100.5, 102.5)

    def test_snapshot_lists_positions_and_colors(self, open_world, small_layers):
        ants = [Ant(10, 20, NeuralNetwork(small_layers)),
                Ant(30, 40, NeuralNetwork(small_layers))]
        positions, colors = open_world.snapshot(ants)
        assert positions == [(10.0, 20.0), (30.0, 40.0)]
        assert len(colors) == 2
