"""
Simulation Engine for AntMaze.

Orchestrates one run:
  1. Populate: every ant gets its own network. The first ant finds no
     weight file, randomises and saves it; every later ant loads those
     founding weights and mutates them. An existing file that does not fit
     the architecture is rejected, never overwritten.
  2. Tick: each ant casts rays, runs its network and moves.
  3. Log stats every STATS_INTERVAL ticks
  4. Shutdown: release every network
"""

import os
import time

import numpy as np

from ant import Ant
from genome import randomize_weights, mutate_weights, weight_drift
from neural_network import NeuralNetwork, build_layers
from weight_codec import expected_weight_file_size, load_weights, save_weights
from config import (
    AMOUNT_OF_ANTS, MAX_TICKS, NETWORK_ARCHITECTURE, WEIGHTS_FILE,
    SPAWN_X, SPAWN_Y, MUTATION_RATE, MUTATION_SCALE, MUTATE_ON_LOAD,
    STATS_INTERVAL, DRIFT_SAMPLE,
)


class Simulation:
    """
    Main simulation controller.
    """

    def __init__(
        self,
        world,
        n_ants:          int   = AMOUNT_OF_ANTS,
        max_ticks:       int   = MAX_TICKS,
        architecture           = NETWORK_ARCHITECTURE,
        weights_path:    str   = WEIGHTS_FILE,
        spawn:           tuple = (SPAWN_X, SPAWN_Y),
        mutate_on_load:  bool  = MUTATE_ON_LOAD,
        mutation_rate:   float = MUTATION_RATE,
        mutation_scale:  float = MUTATION_SCALE,
        seed:            int   = None,
        stats_interval:  int   = STATS_INTERVAL,
        verbose:         bool  = True,
        on_tick_callback = None,    # called after every tick
    ):
        self.world          = world
        self.n_ants         = n_ants
        self.max_ticks      = max_ticks
        self.layers         = build_layers(architecture)
        self.weights_path   = weights_path
        self.spawn          = spawn
        self.mutate_on_load = mutate_on_load
        self.mutation_rate  = mutation_rate
        self.mutation_scale = mutation_scale
        self.rng            = np.random.default_rng(seed)
        self.stats_interval = max(1, stats_interval)
        self.verbose        = verbose
        self.on_tick_callback = on_tick_callback

        if self.layers[0].neurons != world.fan.n_rays:
            raise ValueError(
                f"Input layer has {self.layers[0].neurons} neurons but the "
                f"world casts {world.fan.n_rays} rays")
        if self.layers[-1].neurons < 2:
            raise ValueError("Output layer needs at least 2 neurons for movement")

        # History
        self.tick_count = 0
        self.stats      = []          # list of dicts, one per tick
        self.ants       = []
        self.founder    = None        # network holding the weights as found on disk
        self.drift      = 0.0         # weight drift from the founder, fixed after populate

    # ──────────────────────────────────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────────────────────────────────

    def populate(self, stop_event=None):
        """
        Create every ant at the spawn point with load-or-create weights.

        A weight file that exists but does not fit the architecture is never
        overwritten; it raises ValueError instead.
        """
        sx, sy = self.spawn
        if not self.world.mask.is_free(sx, sy):
            self._log(f"  !! Spawn point ({sx:.0f}, {sy:.0f}) is inside a wall")

        self.ants = []
        created = 0
        for _ in range(self.n_ants):
            if stop_event is not None and stop_event.is_set():
                break
            network = NeuralNetwork(self.layers)
            if load_weights(network, self.weights_path):
                if self.founder is None:
                    self.founder = network.copy()
                if self.mutate_on_load:
                    mutate_weights(network, self.rng,
                                   self.mutation_rate, self.mutation_scale)
            elif os.path.isfile(self.weights_path):
                network.release()
                self._reject_weight_file()
            else:
                # No weights yet: found them and persist for the rest
                randomize_weights(network, self.rng)
                if save_weights(network, self.weights_path):
                    self._log(f"  → Created founding weights: {self.weights_path}")
                created += 1
            if self.founder is None:
                self.founder = network.copy()
            self.ants.append(Ant(sx, sy, network))

        if created == 0 and self.ants:
            self._log(f"  → Loaded weights from {self.weights_path}"
                      f"{' (mutated)' if self.mutate_on_load else ''}")
        self.drift = self._weight_drift()
        return self.ants

    def tick(self) -> dict:
        """Advance every ant by one step and return this tick's stats."""
        moved = 0
        for ant in self.ants:
            if ant.step(self.world):
                moved += 1
        stats = self._compute_stats(moved)
        self.tick_count += 1
        return stats

    def run(self, ticks: int = None, stop_event=None):
        """Run `ticks` ticks (default max_ticks), populating first if needed."""
        if not self.ants:
            self.populate(stop_event)
        ticks = self.max_ticks if ticks is None else ticks

        for _ in range(ticks):
            if stop_event is not None and stop_event.is_set():
                break
            t0 = time.time()
            stats = self.tick()
            stats["elapsed_s"] = round(time.time() - t0, 4)
            self.stats.append(stats)

            self._print_stats(stats)

            if self.on_tick_callback:
                self.on_tick_callback(stats["tick"], stats, self.world, self.ants)

        self._log("\n=== Run complete ===")
        return self.stats

    def shutdown(self):
        """Release every ant's network."""
        for ant in self.ants:
            ant.release()
        if self.founder is not None:
            self.founder.release()
            self.founder = None
        self.drift = 0.0
        self.ants = []

    # ──────────────────────────────────────────────────────────────────────────
    # Stats
    # ──────────────────────────────────────────────────────────────────────────

    def _compute_stats(self, moved: int) -> dict:
        n_pop = len(self.ants)
        if n_pop == 0:
            return {"tick": self.tick_count, "population": 0,
                    "mean_x": 0.0, "mean_y": 0.0, "mean_disp": 0.0,
                    "max_disp": 0.0, "moved_pct": 0.0, "blocked": 0,
                    "proximity": 0.0, "weight_drift": 0.0}

        xs   = np.fromiter((a.x for a in self.ants), dtype=float, count=n_pop)
        ys   = np.fromiter((a.y for a in self.ants), dtype=float, count=n_pop)
        disp = np.fromiter((a.displacement for a in self.ants), dtype=float, count=n_pop)
        proximity = [float(a.last_readings.mean()) for a in self.ants
                     if a.last_readings is not None]

        return {
            "tick":          self.tick_count,
            "population":    n_pop,
            "mean_x":        float(xs.mean()),
            "mean_y":        float(ys.mean()),
            "mean_disp":     float(disp.mean()),
            "max_disp":      float(disp.max()),
            "moved_pct":     100.0 * moved / n_pop,
            "blocked":       int(sum(a.blocked_moves for a in self.ants)),
            "proximity":     float(np.mean(proximity)) if proximity else 0.0,
            "weight_drift":  self.drift,
        }

    def _weight_drift(self, sample: int = DRIFT_SAMPLE) -> float:
        """
        Estimate how far the population's weights sit from the founding
        weights (mean absolute difference over a random sample of ants).
        Weights do not change after populate, so this runs once per run.
        """
        if self.founder is None or not self.ants:
            return 0.0
        sample_size = min(sample, len(self.ants))
        idx = self.rng.choice(len(self.ants), sample_size, replace=False)
        return float(np.mean([weight_drift(self.ants[i].network, self.founder)
                              for i in idx]))

    def _reject_weight_file(self):
        size     = os.path.getsize(self.weights_path)
        expected = expected_weight_file_size(self.layers)
        raise ValueError(
            f"Weight file {self.weights_path} holds {size} bytes but this "
            f"architecture needs {expected}; it was left untouched")

    def _print_stats(self, stats: dict):
        t = stats["tick"]
        if t % self.stats_interval == 0 or t < 5:
            self._log(
                f"Tick {t:>6}  |  "
                f"ants {stats['population']:>5}  |  "
                f"moved {stats['moved_pct']:>5.1f}%  |  "
                f"disp {stats['mean_disp']:>7.2f} (max {stats['max_disp']:.1f})  |  "
                f"blocked {stats['blocked']:>7}  |  "
                f"{stats['elapsed_s']:.3f}s"
            )

    def _log(self, message: str):
        if self.verbose:
            print(message)
