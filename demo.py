"""
Quick demo – 300 ants, 600 ticks in a generated maze.
Saves snapshots + charts without needing a display.
"""
import os, sys
sys.path.insert(0, os.path.dirname(__file__))

import numpy as np

from maze import generate_maze
from simulation import Simulation
from world import ObstacleMask, World
from visualizer import (ensure_dirs, save_maze_snapshot, save_mask_image,
                        save_progress_chart, save_network_diagram, append_csv)

OUT = "output/demo"
ensure_dirs(OUT)

pixels = generate_maze(rng=np.random.default_rng(42))
save_mask_image(pixels, os.path.join(OUT, "maze.png"))
world = World(ObstacleMask(pixels))

all_stats = []

def on_tick(tick, stats, world, ants):
    all_stats.append(stats)
    append_csv(stats, OUT)
    if tick % 100 == 0:
        save_maze_snapshot(world, tick, ants, OUT)
        best = max(ants, key=lambda a: a.displacement)
        save_network_diagram(best, tick, "furthest", OUT)

sim = Simulation(
    world,
    n_ants           = 300,
    max_ticks        = 600,
    weights_path     = os.path.join(OUT, "adam.bin"),
    seed             = 42,
    on_tick_callback = on_tick,
)
sim.run()

save_progress_chart(all_stats, OUT, "demo_chart.png")
save_maze_snapshot(world, sim.tick_count, sim.ants, OUT)
sim.shutdown()
print("\nAll outputs in:", OUT)
