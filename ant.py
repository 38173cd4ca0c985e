"""
Ant class for AntMaze.

Each ant has:
  - (x, y) screen position, kept at float32 precision
  - A NeuralNetwork brain it owns exclusively
  - State: spawn point, blocked-move counter, last sensor readings, colour

Every simulation tick the ant:
  1. Casts its ray fan against the maze
  2. Runs its neural network on the readings
  3. Moves by the first two outputs, unless that lands in a wall
"""

import numpy as np

from genome import weights_to_color
from neural_network import NeuralNetwork


class Ant:
    """
    A single agent in the maze simulation.
    """
    __slots__ = (
        "x", "y", "network", "color",
        "spawn_x", "spawn_y", "blocked_moves", "last_readings",
    )

    def __init__(self, x: float, y: float, network: NeuralNetwork):
        self.x = float(np.float32(x))
        self.y = float(np.float32(y))
        self.network       = network
        self.spawn_x       = self.x
        self.spawn_y       = self.y
        self.blocked_moves = 0
        self.last_readings = None
        self.color         = weights_to_color(network)

    def refresh_color(self):
        self.color = weights_to_color(self.network)

    @property
    def displacement(self) -> float:
        return float(np.hypot(self.x - self.spawn_x, self.y - self.spawn_y))

    # ──────────────────────────────────────────────────────────────────────────

    def step(self, world) -> bool:
        """Execute one tick: sense → think → act. Returns True if it moved."""
        readings = world.cast_rays(self.x, self.y)
        self.last_readings = readings
        movement = self.network.forward(readings)
        return world.move_ant(self, movement)

    def release(self):
        """Free the network's weight storage at shutdown."""
        self.network.release()
