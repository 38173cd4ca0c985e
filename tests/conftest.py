"""Shared fixtures for the AntMaze test suite."""

from __future__ import annotations

import numpy as np
import pytest

from maze import open_field
from neural_network import Layer, build_layers
from activations import Activation
from world import ObstacleMask, World


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def small_layers():
    """20 ray inputs → 6 tanh → 2 tanh outputs."""
    return build_layers([(20, "identity"), (6, "tanh"), (2, "tanh")])


@pytest.fixture
def tiny_layers():
    return (Layer(2), Layer(3, Activation.TANH), Layer(1, Activation.TANH))


@pytest.fixture
def open_world():
    """300x300 maze with no walls, 20 rays of radius 100, speed 2."""
    return World(ObstacleMask(open_field(300, 300)), n_rays=20, ray_radius=100,
                 max_speed=2)

