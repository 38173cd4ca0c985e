"""
Visualizer for AntMaze.

Produces:
  1. Maze snapshots    – the maze raster with every ant drawn on top
  2. Progress chart    – displacement, movement and blocked moves over ticks
  3. Network diagrams  – dense wiring of one ant's network
  4. CSV log           – per-tick stats

Also decodes maze images into obstacle-mask rasters.
"""

import os
import csv
import numpy as np
import matplotlib
matplotlib.use("Agg")          # non-interactive backend (no display needed)
import matplotlib.pyplot as plt

from config import SAVE_DIR, LOG_CSV


# ──────────────────────────────────────────────────────────────────────────────
# Directory setup
# ──────────────────────────────────────────────────────────────────────────────

def ensure_dirs(base: str = SAVE_DIR):
    for sub in ("snapshots", "charts", "networks"):
        os.makedirs(os.path.join(base, sub), exist_ok=True)


# ──────────────────────────────────────────────────────────────────────────────
# Maze images
# ──────────────────────────────────────────────────────────────────────────────

def load_mask_image(path: str) -> np.ndarray:
    """
    Decode an image file into a (H, W, 4) uint8 RGBA raster.
    PNGs come back from matplotlib as floats in [0, 1]; other formats
    (via Pillow) as uint8 already.
    """
    img = plt.imread(path)
    if img.dtype != np.uint8:
        img = np.round(np.clip(img, 0.0, 1.0) * 255).astype(np.uint8)
    if img.ndim == 2:
        img = np.stack([img, img, img], axis=-1)
    if img.shape[2] == 3:
        alpha = np.full(img.shape[:2] + (1,), 255, dtype=np.uint8)
        img = np.concatenate([img, alpha], axis=-1)
    return img


def save_mask_image(pixels: np.ndarray, path: str) -> str:
    """Write a raster (e.g. a generated maze) out as a PNG."""
    plt.imsave(path, np.asarray(pixels, dtype=np.uint8))
    return path


# ──────────────────────────────────────────────────────────────────────────────
# Maze snapshot
# ──────────────────────────────────────────────────────────────────────────────

def save_maze_snapshot(world, tick: int, ants: list, base: str = SAVE_DIR):
    """
    Render the maze with every ant as a small coloured dot.
    The spawn point is marked with a ring.
    """
    fig, ax = plt.subplots(figsize=(12, 8), dpi=100)
    ax.imshow(world.mask.pixels, origin="upper", interpolation="nearest")
    ax.set_xlim(0, world.width)
    ax.set_ylim(world.height, 0)
    ax.set_aspect("equal")
    fig.patch.set_facecolor("#111111")
    ax.set_title(f"Tick {tick}  ({len(ants)} ants)", color="white", fontsize=10)
    ax.tick_params(colors="white")
    for spine in ax.spines.values():
        spine.set_edgecolor("#444444")

    positions, colors = world.snapshot(ants)
    if positions:
        xs = [p[0] for p in positions]
        ys = [p[1] for p in positions]
        rgba = [[r/255, g/255, b/255, 1.0] for (r, g, b) in colors]
        ax.scatter(xs, ys, c=rgba, s=3, linewidths=0, zorder=3)

        sx = [a.spawn_x for a in ants[:1]]
        sy = [a.spawn_y for a in ants[:1]]
        ax.scatter(sx, sy, s=80, facecolors="none", edgecolors="lime",
                   linewidths=1.2, zorder=4)

    path = os.path.join(base, "snapshots", f"tick_{tick:07d}.png")
    plt.savefig(path, dpi=100, bbox_inches="tight", facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# Progress chart
# ──────────────────────────────────────────────────────────────────────────────

def save_progress_chart(stats: list, base: str = SAVE_DIR,
                        filename: str = "progress.png"):
    """
    Plot mean/max displacement from spawn and the share of ants that moved
    each tick.
    """
    if not stats:
        return
    ticks     = [s["tick"]      for s in stats]
    mean_disp = [s["mean_disp"] for s in stats]
    max_disp  = [s["max_disp"]  for s in stats]
    moved     = [s["moved_pct"] for s in stats]

    fig, ax1 = plt.subplots(figsize=(12, 5), dpi=100)
    fig.patch.set_facecolor("#111111")
    ax1.set_facecolor("#111111")

    # Displacement (green, left axis in pixels)
    ax1.plot(ticks, mean_disp, color="#44FF44", linewidth=1.2,
             label="Mean displacement", zorder=3)
    ax1.plot(ticks, max_disp, color="#FF8800", linewidth=1.0,
             alpha=0.8, label="Max displacement", zorder=2)
    ax1.set_ylabel("Pixels from spawn", color="white")
    ax1.set_ylim(0, max(max_disp) * 1.05 if max(max_disp) > 0 else 1)
    ax1.tick_params(axis="both", colors="white")
    ax1.set_xlabel("Tick", color="white")

    ax2 = ax1.twinx()
    ax2.set_facecolor("#111111")

    # Share that moved (purple, right axis 0–100)
    ax2.plot(ticks, moved, color="#CC44FF", linewidth=1.0,
             linestyle="--", label="Moved %", zorder=2)
    ax2.set_ylabel("Ants that moved (%)", color="white")
    ax2.set_ylim(0, 105)
    ax2.tick_params(colors="white")

    for spine in ax1.spines.values():
        spine.set_edgecolor("#444444")

    # Combined legend
    lines1, labels1 = ax1.get_legend_handles_labels()
    lines2, labels2 = ax2.get_legend_handles_labels()
    ax1.legend(lines1 + lines2, labels1 + labels2,
               facecolor="#222222", labelcolor="white",
               loc="lower right", fontsize=8)

    ax1.set_title("Maze Exploration", color="white", fontsize=12)
    plt.tight_layout()
    path = os.path.join(base, "charts", filename)
    plt.savefig(path, dpi=100, bbox_inches="tight",
                facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# Network diagram
# ──────────────────────────────────────────────────────────────────────────────

def save_network_diagram(ant, tick: int, label: str = "",
                         base: str = SAVE_DIR, min_weight: float = 0.05):
    """
    Draw the ant's network as layered columns of neurons.
    Green edges = positive weights, red edges = negative; width ∝ |w|.
    Edges with |w| < min_weight are skipped to keep the plot readable.
    """
    network = ant.network
    if network.weights is None:
        return

    sizes = [layer.neurons for layer in network.layers]
    n_cols = len(sizes)

    # (x, y) position of every neuron
    node_pos = {}
    for col, n in enumerate(sizes):
        x = col / max(1, n_cols - 1)
        for i in range(n):
            node_pos[(col, i)] = (x, (i + 1) / (n + 1))

    fig, ax = plt.subplots(figsize=(10, 6), dpi=100)
    fig.patch.set_facecolor("#111111")
    ax.set_facecolor("#111111")
    ax.axis("off")
    ax.set_xlim(-0.1, 1.1)
    ax.set_ylim(-0.05, 1.08)

    # Draw edges (bias column excluded)
    n_edges = 0
    for col, w in enumerate(network.weights):
        for out in range(w.shape[0]):
            for inp in range(w.shape[1] - 1):
                weight = float(w[out, inp])
                if abs(weight) < min_weight:
                    continue
                x1, y1 = node_pos[(col, inp)]
                x2, y2 = node_pos[(col + 1, out)]
                color = "#44FF44" if weight >= 0 else "#FF4444"
                lw    = 0.3 + min(2.5, abs(weight) * 2)
                ax.plot([x1, x2], [y1, y2], color=color, lw=lw, alpha=0.5, zorder=1)
                n_edges += 1

    # Draw nodes, shaded by bias
    for (col, i), (x, y) in node_pos.items():
        if col == 0:
            color = "#4499FF"
        else:
            bias = float(network.weights[col - 1][i, -1])
            color = "#FF88AA" if col == n_cols - 1 else "#AAAAAA"
            if bias < 0:
                color = "#777777" if col < n_cols - 1 else "#AA5577"
        ax.add_patch(plt.Circle((x, y), 0.012, color=color, zorder=3))

    # Column headers
    for col, n in enumerate(sizes):
        x = col / max(1, n_cols - 1)
        title = ("Rays" if col == 0 else
                 "Move" if col == n_cols - 1 else f"Hidden {col}")
        act = "" if col == 0 else f"\n{network.layers[col].activation.value}"
        ax.text(x, 1.02, f"{title} ({n}){act}", color="#CCCCCC", ha="center",
                fontsize=8, fontweight="bold")

    ax.set_title(
        f"Tick {tick} — Network of {label}  "
        f"({n_edges}/{network.weight_count} weights shown)",
        color="white", fontsize=10, pad=4)

    path = os.path.join(base, "networks", f"tick_{tick:07d}_{label}.png")
    plt.savefig(path, dpi=100, bbox_inches="tight",
                facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# CSV log
# ──────────────────────────────────────────────────────────────────────────────

def append_csv(stats: dict, base: str = SAVE_DIR):
    """Append one tick's stats to a CSV file."""
    if not LOG_CSV:
        return
    path = os.path.join(base, "run_log.csv")
    file_exists = os.path.isfile(path)
    with open(path, "a", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(stats.keys()))
        if not file_exists:
            writer.writeheader()
        writer.writerow(stats)
    return path
