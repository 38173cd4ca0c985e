"""
Activation functions for AntMaze networks.

A small closed set, applied elementwise to numpy arrays. Layers refer to
them by member, config files and HTTP requests by name.
"""

from enum import Enum

import numpy as np


class Activation(Enum):
    IDENTITY = "identity"
    TANH     = "tanh"
    SIGMOID  = "sigmoid"
    RELU     = "relu"

    def __call__(self, x: np.ndarray) -> np.ndarray:
        if self is Activation.TANH:
            return np.tanh(x)
        if self is Activation.SIGMOID:
            return 1.0 / (1.0 + np.exp(-x))
        if self is Activation.RELU:
            return np.maximum(x, 0)
        return x

    @classmethod
    def from_name(cls, name) -> "Activation":
        """Look up an activation by name ("none" is an alias for identity)."""
        if isinstance(name, cls):
            return name
        if name is None:
            return cls.IDENTITY
        key = str(name).strip().lower()
        if key == "none":
            return cls.IDENTITY
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown activation '{name}'") from None
