"""
Procedural maze rasters for AntMaze.

Used when no maze image is supplied. The maze is a grid of cells carved by
a randomised depth-first search (recursive backtracker), drawn as black
walls on a white background. A small square around the screen centre is
always cleared so ants spawned there start in free space.
"""

import numpy as np

from config import (SCREEN_WIDTH, SCREEN_HEIGHT, MAZE_CELLS_X, MAZE_CELLS_Y,
                    CLEAR_COLOR)

WALL_COLOR     = (0, 0, 0, 255)
WALL_THICKNESS = 4   # pixels


def carve_passages(cells_x: int, cells_y: int, rng=None) -> tuple:
    """
    Randomised DFS over a cells_x × cells_y grid.

    Returns:
        (open_east, open_south) boolean arrays of shape (cells_y, cells_x);
        open_east[cy, cx] means no wall between (cx, cy) and (cx + 1, cy).
    """
    if cells_x < 1 or cells_y < 1:
        raise ValueError("Maze needs at least one cell in each direction")
    if rng is None:
        rng = np.random.default_rng()

    open_east  = np.zeros((cells_y, cells_x), dtype=bool)
    open_south = np.zeros((cells_y, cells_x), dtype=bool)
    visited    = np.zeros((cells_y, cells_x), dtype=bool)

    start = (cells_x // 2, cells_y // 2)
    visited[start[1], start[0]] = True
    stack = [start]
    while stack:
        cx, cy = stack[-1]
        neighbours = [
            (nx, ny) for nx, ny in ((cx + 1, cy), (cx - 1, cy), (cx, cy + 1), (cx, cy - 1))
            if 0 <= nx < cells_x and 0 <= ny < cells_y and not visited[ny, nx]
        ]
        if not neighbours:
            stack.pop()
            continue
        nx, ny = neighbours[int(rng.integers(0, len(neighbours)))]
        if nx != cx:
            open_east[cy, min(cx, nx)] = True
        else:
            open_south[min(cy, ny), cx] = True
        visited[ny, nx] = True
        stack.append((nx, ny))

    return open_east, open_south


def check_maze_fits(width: int, height: int, cells_x: int, cells_y: int,
                    wall: int = WALL_THICKNESS):
    """Raise ValueError unless a cells_x × cells_y maze can be drawn at this size."""
    if cells_x < 1 or cells_y < 1:
        raise ValueError("Maze needs at least one cell in each direction")
    if width < cells_x * (wall + 1) or height < cells_y * (wall + 1):
        raise ValueError(
            f"Raster too small for the requested cell count: at most "
            f"{width // (wall + 1)}x{height // (wall + 1)} cells fit in "
            f"{width}x{height}")


def generate_maze(width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT,
                  cells_x: int = MAZE_CELLS_X, cells_y: int = MAZE_CELLS_Y,
                  wall: int = WALL_THICKNESS, rng=None) -> np.ndarray:
    """
    Draw a perfect maze into a (height, width, 4) uint8 RGBA raster.
    Walls are `wall` pixels thick; the outer border is closed.
    """
    check_maze_fits(width, height, cells_x, cells_y, wall)
    open_east, open_south = carve_passages(cells_x, cells_y, rng)

    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[...] = CLEAR_COLOR

    xs = np.linspace(0, width, cells_x + 1).astype(int)
    ys = np.linspace(0, height, cells_y + 1).astype(int)

    # Outer border
    pixels[:wall, :] = WALL_COLOR
    pixels[-wall:, :] = WALL_COLOR
    pixels[:, :wall] = WALL_COLOR
    pixels[:, -wall:] = WALL_COLOR

    half = wall // 2
    for cy in range(cells_y):
        for cx in range(cells_x):
            if cx < cells_x - 1 and not open_east[cy, cx]:
                x = xs[cx + 1]
                pixels[ys[cy]:ys[cy + 1] + half, x - half:x - half + wall] = WALL_COLOR
            if cy < cells_y - 1 and not open_south[cy, cx]:
                y = ys[cy + 1]
                pixels[y - half:y - half + wall, xs[cx]:xs[cx + 1] + half] = WALL_COLOR

    # Spawn clearing
    r = wall + 2
    pixels[height // 2 - r:height // 2 + r, width // 2 - r:width // 2 + r] = CLEAR_COLOR

    return pixels


def open_field(width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT) -> np.ndarray:
    """An all-clear raster with no walls at all."""
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[...] = CLEAR_COLOR
    return pixels
