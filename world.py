"""
Maze World for AntMaze.

The world is a static colour raster (the obstacle mask) the size of the
screen. Opaque white pixels are free space, anything else is a wall.
The world also exposes the two models ants use every tick:

  cast_rays : fan of distance rays → readings in [0, 1] (1 = wall adjacent)
  move_ant  : network output → clamped, collision-checked position update
"""

import numpy as np

from config import (AMOUNT_OF_RAYS, RAYS_RADIUS, MAX_SPEED,
                    CLEAR_COLOR, BLANK_COLOR)


class ObstacleMask:
    """
    Read-only (height, width, channels) uint8 colour raster.
    """

    def __init__(self, pixels, clear_color=CLEAR_COLOR):
        pixels = np.asarray(pixels)
        if pixels.ndim == 2:
            # Greyscale: broadcast into RGBA with full alpha
            pixels = np.stack([pixels, pixels, pixels,
                               np.full_like(pixels, 255)], axis=-1)
        if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
            raise ValueError(f"Obstacle mask must be (H, W, 3|4), got {pixels.shape}")
        if pixels.shape[2] == 3:
            alpha  = np.full(pixels.shape[:2] + (1,), 255, dtype=np.uint8)
            pixels = np.concatenate([pixels.astype(np.uint8), alpha], axis=-1)

        self.pixels = np.array(pixels, dtype=np.uint8)
        self.pixels.setflags(write=False)
        self.height, self.width = self.pixels.shape[:2]
        self.clear_color = tuple(int(c) for c in clear_color)
        # Precomputed lookup: True where the pixel is free space
        self._clear = np.all(self.pixels == np.array(self.clear_color, dtype=np.uint8),
                             axis=-1)
        self._clear.setflags(write=False)

    # ──────────────────────────────────────────────────────────────────────────

    def sample_color(self, x, y) -> tuple:
        """Colour at integer pixel (x, y); BLANK_COLOR outside the raster."""
        x, y = int(x), int(y)
        if 0 <= x < self.width and 0 <= y < self.height:
            return tuple(int(c) for c in self.pixels[y, x])
        return BLANK_COLOR

    def is_clear(self, color) -> bool:
        return tuple(color) == self.clear_color

    def is_free(self, x, y) -> bool:
        """Shortcut for is_clear(sample_color(x, y))."""
        x, y = int(x), int(y)
        if 0 <= x < self.width and 0 <= y < self.height:
            return bool(self._clear[y, x])
        return False

    @property
    def clear_grid(self) -> np.ndarray:
        return self._clear


class RayFan:
    """
    Precomputed unit directions of N evenly spaced rays, ray k at k·2π/N.
    """

    def __init__(self, n_rays: int = AMOUNT_OF_RAYS, radius: int = RAYS_RADIUS):
        if n_rays < 1 or radius < 1:
            raise ValueError("RayFan needs at least one ray and a positive radius")
        self.n_rays = n_rays
        self.radius = radius
        angles   = np.arange(n_rays) * (2.0 * np.pi / n_rays)
        self.cos = np.cos(angles).astype(np.float32)
        self.sin = np.sin(angles).astype(np.float32)
        self.steps = np.arange(radius, dtype=np.float32)


class World:
    """
    Holds the obstacle mask and ray fan, and moves ants through the maze.
    """

    def __init__(self, mask: ObstacleMask, n_rays: int = AMOUNT_OF_RAYS,
                 ray_radius: int = RAYS_RADIUS, max_speed: float = MAX_SPEED):
        self.mask      = mask
        self.fan       = RayFan(n_rays, ray_radius)
        self.max_speed = max_speed
        self.width     = mask.width
        self.height    = mask.height

    # ──────────────────────────────────────────────────────────────────────────
    # Sensor model
    # ──────────────────────────────────────────────────────────────────────────

    def cast_rays(self, x, y) -> np.ndarray:
        """
        Walk every ray outward in unit steps from the (truncated) position.
        A ray stops at the first in-bounds pixel that is not clear; probes
        outside the screen never stop it.

        Returns:
            float32 array (n_rays,), (radius - steps_taken) / radius
        """
        fan = self.fan
        px, py = int(x), int(y)

        # (n_rays, radius) probe coordinates
        xs = px + fan.cos[:, None] * fan.steps[None, :]
        ys = py + fan.sin[:, None] * fan.steps[None, :]

        inside = (xs > 0) & (xs < self.width) & (ys > 0) & (ys < self.height)
        xi = np.where(inside, xs, 0).astype(np.intp)
        yi = np.where(inside, ys, 0).astype(np.intp)
        blocked = inside & ~self.mask.clear_grid[yi, xi]

        hit   = blocked.any(axis=1)
        first = blocked.argmax(axis=1)
        steps_taken = np.where(hit, first, fan.radius)
        return ((fan.radius - steps_taken) / fan.radius).astype(np.float32)

    # ──────────────────────────────────────────────────────────────────────────
    # Motion model
    # ──────────────────────────────────────────────────────────────────────────

    def step_position(self, x, y, outputs):
        """
        Candidate position for network `outputs` (first two components used).
        Returns (new_x, new_y, moved). The move is dropped when the clamped
        candidate lands on a non-clear pixel.
        """
        if len(outputs) < 2:
            raise ValueError(f"Movement needs 2 outputs, got {len(outputs)}")
        # Positions are float32 values; the step is computed in float32 too
        speed = np.float32(self.max_speed)
        new_x = float(np.float32(x) + np.float32(outputs[0]) * speed)
        new_y = float(np.float32(y) + np.float32(outputs[1]) * speed)

        # Clamp to screen boundaries
        new_x = max(0.0, min(new_x, float(self.width)))
        new_y = max(0.0, min(new_y, float(self.height)))

        if self.mask.is_clear(self.mask.sample_color(new_x, new_y)):
            return new_x, new_y, True
        return x, y, False

    def move_ant(self, ant, outputs) -> bool:
        """Apply step_position to an ant in place. Returns True if it moved."""
        ant.x, ant.y, moved = self.step_position(ant.x, ant.y, outputs)
        if not moved:
            ant.blocked_moves += 1
        return moved

    # ──────────────────────────────────────────────────────────────────────────
    # Snapshot for visualisation
    # ──────────────────────────────────────────────────────────────────────────

    def snapshot(self, ants):
        """
        Returns two lists for visualisation:
          positions: (x, y) for every ant
          colors:    (r, g, b) tuples
        """
        positions = [(a.x, a.y) for a in ants]
        colors    = [a.color for a in ants]
        return positions, colors
