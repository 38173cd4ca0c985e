"""
Weight initialisation and mutation for AntMaze.

An ant's "genome" is simply its network's weight tensor:

  randomize_weights : Xavier/Glorot uniform fill, s = sqrt(2 / (fan_in + fan_out))
  mutate_weights    : each weight (bias included) is nudged by U(-scale, scale)
                      with probability `rate`

The random generator is always passed in. Seeding it is up to the caller.
"""

import numpy as np

from config import MUTATION_RATE, MUTATION_SCALE


# ──────────────────────────────────────────────────────────────────────────────
# Initialisation / mutation
# ──────────────────────────────────────────────────────────────────────────────

def xavier_scale(fan_in: int, fan_out: int) -> float:
    return float(np.sqrt(2.0 / (fan_in + fan_out)))


def randomize_weights(network, rng=None):
    """Fill every weight and bias with U(-1, 1) * xavier_scale."""
    if rng is None:
        rng = np.random.default_rng()
    network.check_alive()
    for i, w in enumerate(network.weights):
        scale = xavier_scale(network.layers[i].neurons, network.layers[i + 1].neurons)
        w[...] = rng.uniform(-1.0, 1.0, size=w.shape) * scale


def mutate_weights(network, rng=None, rate: float = MUTATION_RATE,
                   scale: float = MUTATION_SCALE):
    """
    Perturb each weight independently with probability `rate`.
    Selected weights get U(-scale, scale) added; the rest are untouched.
    """
    if rng is None:
        rng = np.random.default_rng()
    network.check_alive()
    for w in network.weights:
        selected = rng.random(w.shape) < rate
        noise    = rng.uniform(-scale, scale, size=w.shape)
        w += np.where(selected, noise, 0.0).astype(np.float32)


# ──────────────────────────────────────────────────────────────────────────────
# Population-level helpers
# ──────────────────────────────────────────────────────────────────────────────

def weight_drift(network_a, network_b) -> float:
    """
    Mean absolute weight difference between two same-shape networks.
    0 means identical weights.
    """
    if network_a.shape != network_b.shape:
        raise ValueError("Networks have different shapes")
    total, count = 0.0, 0
    for wa, wb in zip(network_a.weights, network_b.weights):
        total += float(np.abs(wa - wb).sum())
        count += wa.size
    return total / count if count else 0.0


def weights_to_color(network) -> tuple:
    """
    Map a network's weights to an RGB colour so that ants with similar
    weights get similar colours. Each output row of the last connection
    group contributes one channel.
    """
    if network.weights is None:
        return (128, 128, 128)
    rows = [float(np.tanh(r.mean() * 4.0)) for r in network.weights[-1]]
    rows = (rows + [0.0, 0.0, 0.0])[:3]
    if len(network.weights[-1]) < 3:
        # Fill missing channels from the first hidden group
        rows[2] = float(np.tanh(network.weights[0].mean() * 4.0))
    # [-1, 1] → [50, 255] so they stay visible on a dark background
    return tuple(int(50 + (v + 1.0) / 2.0 * 205) for v in rows)
