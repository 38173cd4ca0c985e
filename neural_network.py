"""
Neural Network Brain for AntMaze.

Every ant owns a small fully connected feedforward network:
  ray sensors → [hidden layers] → movement (x, y)

Weights live in one float32 matrix per connection group, shaped
(next_layer_neurons, this_layer_neurons + 1); the last column is the bias.
The layer sequence itself is shared read-only by all ants.

Forward pass (per simulation tick):
  1. Copy the sensor readings as the current activations
  2. For each connection group: weighted sum + bias, destination activation
  3. Return the last layer's activations
"""

from dataclasses import dataclass

import numpy as np

from activations import Activation
from config import NETWORK_ARCHITECTURE


@dataclass(frozen=True)
class Layer:
    """Neuron count plus the activation applied to this layer's inputs."""
    neurons:    int
    activation: Activation = Activation.IDENTITY

    def __post_init__(self):
        if int(self.neurons) != self.neurons or self.neurons < 1:
            raise ValueError(f"Layer needs a positive neuron count, got {self.neurons!r}")
        object.__setattr__(self, "activation", Activation.from_name(self.activation))


def build_layers(architecture=NETWORK_ARCHITECTURE) -> tuple:
    """Turn a list of (neurons, activation_name) pairs into a Layer tuple."""
    return tuple(Layer(int(n), Activation.from_name(act)) for n, act in architecture)


class NeuralNetwork:
    """
    Dense feedforward network with an exclusively owned weight tensor.
    """

    def __init__(self, layers):
        layers = tuple(layers)
        if len(layers) < 2:
            raise ValueError(f"A network needs at least 2 layers, got {len(layers)}")
        self.layers = layers

        # One (n_out, n_in + 1) matrix per connection group, left at zero
        self.weights = [
            np.zeros((nxt.neurons, cur.neurons + 1), dtype=np.float32)
            for cur, nxt in zip(layers[:-1], layers[1:])
        ]

    # ──────────────────────────────────────────────────────────────────────────

    @property
    def released(self) -> bool:
        return self.weights is None

    def check_alive(self):
        if self.weights is None:
            raise RuntimeError("Network weights have been released")

    def release(self):
        """Drop the weight storage. The shared layer sequence is left alone."""
        self.weights = None

    @property
    def shape(self) -> list:
        """(rows, cols) of every connection group."""
        return [(nxt.neurons, cur.neurons + 1)
                for cur, nxt in zip(self.layers[:-1], self.layers[1:])]

    @property
    def weight_count(self) -> int:
        return sum(rows * cols for rows, cols in self.shape)

    @property
    def n_inputs(self) -> int:
        return self.layers[0].neurons

    @property
    def n_outputs(self) -> int:
        return self.layers[-1].neurons

    def weight(self, layer: int, output_neuron: int, input_neuron: int) -> float:
        self.check_alive()
        self._check_index(layer, output_neuron, input_neuron)
        return float(self.weights[layer][output_neuron, input_neuron])

    def set_weight(self, layer: int, output_neuron: int, input_neuron: int,
                   value: float):
        self.check_alive()
        self._check_index(layer, output_neuron, input_neuron)
        self.weights[layer][output_neuron, input_neuron] = value

    def _check_index(self, layer, output_neuron, input_neuron):
        if not 0 <= layer < len(self.weights):
            raise IndexError(f"connection group {layer} out of range")
        rows, cols = self.weights[layer].shape
        if not 0 <= output_neuron < rows:
            raise IndexError(f"output neuron {output_neuron} out of range for group {layer}")
        if not 0 <= input_neuron < cols:
            raise IndexError(f"input neuron {input_neuron} out of range for group {layer}")

    def copy(self) -> "NeuralNetwork":
        """Independent network with the same layers and a copy of the weights."""
        self.check_alive()
        clone = NeuralNetwork(self.layers)
        clone.weights = [w.copy() for w in self.weights]
        return clone

    # ──────────────────────────────────────────────────────────────────────────

    def forward(self, inputs) -> np.ndarray:
        """
        Run one forward pass.

        Args:
            inputs: sequence of length layers[0].neurons

        Returns:
            float32 array of length layers[-1].neurons (a new array each call)
        """
        self.check_alive()
        current = np.array(inputs, dtype=np.float32).reshape(-1)
        if current.shape[0] != self.layers[0].neurons:
            raise ValueError(
                f"Expected {self.layers[0].neurons} inputs, got {current.shape[0]}")

        # NaN / overflow flow through unchecked
        with np.errstate(all="ignore"):
            for layer, w in zip(self.layers[1:], self.weights):
                z = w[:, :-1] @ current + w[:, -1]
                current = layer.activation(z).astype(np.float32, copy=False)
        return current

    def summary(self) -> str:
        sizes = " → ".join(
            f"{l.neurons}" + ("" if i == 0 else f"/{l.activation.value}")
            for i, l in enumerate(self.layers))
        lines = [f"NeuralNetwork ({sizes}, {self.weight_count} weights)"]
        if self.weights is None:
            lines.append("  <released>")
            return "\n".join(lines)
        for i, w in enumerate(self.weights):
            lines.append(
                f"  L{i}→L{i + 1}  {w.shape[0]}x{w.shape[1]}"
                f"  mean|w|={float(np.abs(w).mean()):.3f}"
                f"  max|w|={float(np.abs(w).max()):.3f}"
            )
        return "\n".join(lines)


def forward(network: NeuralNetwork, inputs) -> np.ndarray:
    """Module-level alias for NeuralNetwork.forward."""
    return network.forward(inputs)
