"""
Weight file codec for AntMaze.

Layout: for each connection group in order, for each output neuron in order,
(input_neurons + 1) little-endian IEEE-754 float32 values. No header, no
length prefix, no checksum. The file does not say which architecture it
belongs to; loading it into a different layer configuration reads garbage.
"""

import numpy as np

FLOAT = np.dtype("<f4")


def expected_weight_file_size(layers) -> int:
    """Byte size of a weight file written for this layer sequence."""
    layers = list(layers)
    count = sum((cur.neurons + 1) * nxt.neurons
                for cur, nxt in zip(layers[:-1], layers[1:]))
    return count * FLOAT.itemsize


def save_weights(network, path) -> bool:
    """Write every weight of `network` to `path`. Returns False on I/O failure."""
    network.check_alive()
    try:
        with open(path, "wb") as f:
            for w in network.weights:
                # Row-major: output neuron by output neuron, bias last
                f.write(np.ascontiguousarray(w, dtype=FLOAT).tobytes())
    except OSError as exc:
        print(f"  !! Could not save weights to {path}: {exc}")
        return False
    return True


def load_weights(network, path) -> bool:
    """
    Read weights from `path` into the pre-allocated `network`.
    Returns False, leaving the network untouched, if the file cannot be
    opened or holds fewer values than the network needs.
    """
    network.check_alive()
    needed = sum(w.size for w in network.weights)
    try:
        with open(path, "rb") as f:
            raw = f.read(needed * FLOAT.itemsize)
    except OSError:
        return False

    if len(raw) < needed * FLOAT.itemsize:
        return False

    values = np.frombuffer(raw, dtype=FLOAT)
    offset = 0
    for w in network.weights:
        w[...] = values[offset:offset + w.size].reshape(w.shape)
        offset += w.size
    return True
