"""
AntMaze – Main Entry Point
==========================

Usage examples:
  python main.py                           # Labyrint.png if present, else a generated maze
  python main.py --maze my_maze.png        # custom maze image (white = free)
  python main.py --ants 500 --ticks 5000   # custom parameters
  python main.py --weights eve.bin         # another founding weight file
  python main.py --no_mutation             # load founding weights unchanged
  python main.py --seed 42                 # reproducible run
"""

import argparse
import os

import numpy as np

from maze import generate_maze
from simulation import Simulation
from visualizer import (ensure_dirs, load_mask_image, save_mask_image,
                        save_maze_snapshot, save_progress_chart,
                        save_network_diagram, append_csv)
from world import ObstacleMask, World
from config import (SAVE_DIR, SNAPSHOT_INTERVAL, SAVE_NETWORK_SAMPLE,
                    AMOUNT_OF_ANTS, MAX_TICKS, WEIGHTS_FILE, MAZE_IMAGE,
                    SCREEN_WIDTH, SCREEN_HEIGHT, MAZE_CELLS_X, MAZE_CELLS_Y,
                    AMOUNT_OF_RAYS, RAYS_RADIUS, MAX_SPEED)


# ──────────────────────────────────────────────────────────────────────────────
# CLI
# ──────────────────────────────────────────────────────────────────────────────

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="AntMaze – Neural Network Ants in a Maze")
    p.add_argument("--ants",       type=int,   default=AMOUNT_OF_ANTS,
                   help="Population size")
    p.add_argument("--ticks",      type=int,   default=MAX_TICKS,
                   help="Number of simulation ticks")
    p.add_argument("--maze",       default=MAZE_IMAGE,
                   help="Maze image; a maze is generated if the file is missing")
    p.add_argument("--maze_cells", type=int, nargs=2, default=[MAZE_CELLS_X, MAZE_CELLS_Y],
                   metavar=("X", "Y"),
                   help="Cell grid of a generated maze")
    p.add_argument("--weights",    default=WEIGHTS_FILE,
                   help="Founding weight file (created if missing)")
    p.add_argument("--no_mutation",action="store_true",
                   help="Do not mutate weights loaded from disk")
    p.add_argument("--seed",       type=int,   default=None,
                   help="Random seed for reproducibility")
    p.add_argument("--outdir",     default=SAVE_DIR,
                   help="Output directory")
    p.add_argument("--snapshot_interval", type=int, default=SNAPSHOT_INTERVAL,
                   help="Save a maze snapshot every N ticks")
    return p.parse_args(argv)


# ──────────────────────────────────────────────────────────────────────────────
# Maze
# ──────────────────────────────────────────────────────────────────────────────

def build_world(maze_path: str, cells, seed=None, outdir: str = SAVE_DIR) -> World:
    """Load the maze image, or generate one (and save it) when it is missing."""
    if maze_path and os.path.isfile(maze_path):
        pixels = load_mask_image(maze_path)
        print(f"  Maze       : {maze_path} ({pixels.shape[1]}x{pixels.shape[0]})")
    else:
        rng = np.random.default_rng(seed)
        pixels = generate_maze(SCREEN_WIDTH, SCREEN_HEIGHT, cells[0], cells[1], rng=rng)
        path = save_mask_image(pixels, os.path.join(outdir, "generated_maze.png"))
        print(f"  Maze       : generated {cells[0]}x{cells[1]} cells → {path}")
    return World(ObstacleMask(pixels), AMOUNT_OF_RAYS, RAYS_RADIUS, MAX_SPEED)


# ──────────────────────────────────────────────────────────────────────────────
# Callbacks
# ──────────────────────────────────────────────────────────────────────────────

class SimCallbacks:
    """Bundles the per-tick callbacks used by the simulation."""

    def __init__(self, outdir: str, snapshot_interval: int, all_stats: list):
        self.outdir            = outdir
        self.snapshot_interval = max(1, snapshot_interval)
        self.all_stats         = all_stats

    def on_tick(self, tick, stats, world, ants):
        self.all_stats.append(stats)

        # CSV log
        append_csv(stats, self.outdir)

        if tick % self.snapshot_interval == 0:
            path = save_maze_snapshot(world, tick, ants, self.outdir)
            print(f"  → Snapshot: {path}")

            # Network diagram of the ant furthest from spawn
            if SAVE_NETWORK_SAMPLE and ants:
                best = max(ants, key=lambda a: a.displacement)
                npath = save_network_diagram(best, tick, "furthest", self.outdir)
                if npath:
                    print(f"  → Network diagram: {npath}")

        # Chart update every 10 snapshots
        if tick % (self.snapshot_interval * 10) == 0 and tick > 0:
            save_progress_chart(self.all_stats, self.outdir)


# ──────────────────────────────────────────────────────────────────────────────
# Main
# ──────────────────────────────────────────────────────────────────────────────

def main(argv=None):
    args = parse_args(argv)
    ensure_dirs(args.outdir)

    print("=" * 60)
    print("  AntMaze – Neural Network Ants in a Maze")
    print("=" * 60)
    world = build_world(args.maze, args.maze_cells, args.seed, args.outdir)
    print(f"  Ants       : {args.ants}")
    print(f"  Ticks      : {args.ticks}")
    print(f"  Rays       : {AMOUNT_OF_RAYS} x {RAYS_RADIUS}px")
    print(f"  Weights    : {args.weights}")
    print(f"  Mutation   : {'off' if args.no_mutation else 'on load'}")
    print(f"  Output dir : {args.outdir}")
    print("=" * 60)

    all_stats = []
    cb = SimCallbacks(
        outdir            = args.outdir,
        snapshot_interval = args.snapshot_interval,
        all_stats         = all_stats,
    )

    sim = Simulation(
        world,
        n_ants           = args.ants,
        max_ticks        = args.ticks,
        weights_path     = args.weights,
        mutate_on_load   = not args.no_mutation,
        seed             = args.seed,
        on_tick_callback = cb.on_tick,
    )

    sim.populate()
    print(sim.ants[0].network.summary() if sim.ants else "  (no ants)")
    sim.run()

    # Final chart
    print("\nSaving final progress chart …")
    chart_path = save_progress_chart(all_stats, args.outdir, "progress_final.png")
    print(f"  → {chart_path}")

    # Final maze snapshot
    snap = save_maze_snapshot(world, sim.tick_count, sim.ants, args.outdir)
    print(f"  → Final snapshot: {snap}")

    sim.shutdown()
    print("\nDone! All outputs saved to:", args.outdir)


if __name__ == "__main__":
    main()
