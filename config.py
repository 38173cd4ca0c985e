"""
AntMaze Configuration
All tunable parameters for the neural-network ant maze simulation.
"""

# ─── Screen / Maze ────────────────────────────────────────────────────────────
SCREEN_WIDTH  = 1200   # pixels, also the obstacle mask width
SCREEN_HEIGHT = 800    # pixels, also the obstacle mask height
MAZE_IMAGE    = "Labyrint.png"   # maze raster; non-white pixels are walls
MAZE_CELLS_X  = 12     # corridors east-west when a maze is generated
MAZE_CELLS_Y  = 8      # corridors north-south when a maze is generated

# Pixel value meaning "no obstacle" (opaque white, RGBA)
CLEAR_COLOR = (255, 255, 255, 255)
# Returned for lookups outside the raster (transparent black)
BLANK_COLOR = (0, 0, 0, 0)

# ─── Sensing ──────────────────────────────────────────────────────────────────
AMOUNT_OF_RAYS = 20    # sensor rays per ant, evenly spread over 360°
RAYS_RADIUS    = 100   # how far (in unit steps) each ray can detect

# ─── Population / Motion ──────────────────────────────────────────────────────
AMOUNT_OF_ANTS = 3000  # population size
MAX_SPEED      = 1     # pixels per tick at full network output
SPAWN_X        = SCREEN_WIDTH / 2
SPAWN_Y        = SCREEN_HEIGHT / 2
MAX_TICKS      = 2000  # ticks per headless run

# ─── Neural Network ───────────────────────────────────────────────────────────
# (neurons, activation) per layer. The input layer's activation is never used.
NETWORK_ARCHITECTURE = [
    (AMOUNT_OF_RAYS, "identity"),   # sensor inputs
    (8, "tanh"),                    # hidden 1
    (8, "tanh"),                    # hidden 2
    (8, "tanh"),                    # hidden 3
    (2, "tanh"),                    # movement x / y
]

# ─── Weights ──────────────────────────────────────────────────────────────────
WEIGHTS_FILE   = "adam.bin"   # founding weights, raw little-endian float32
MUTATION_RATE  = 0.3          # probability each weight is perturbed on load
MUTATION_SCALE = 0.5          # perturbation drawn from [-scale, scale]
MUTATE_ON_LOAD = True

# ─── Output / Logging ─────────────────────────────────────────────────────────
SAVE_DIR            = "output"   # directory for snapshots, charts and logs
SNAPSHOT_INTERVAL   = 250        # save a maze snapshot every N ticks
STATS_INTERVAL      = 50         # print a stats line every N ticks
DRIFT_SAMPLE        = 50         # ants sampled for the weight-drift statistic
SAVE_NETWORK_SAMPLE = True       # save network diagrams with snapshots
LOG_CSV             = True       # write per-tick CSV log
