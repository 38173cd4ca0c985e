"""
AntMaze Server  –  Flask + Server-Sent Events
=============================================

Endpoints:
  POST /start        Start (or restart) a run with a JSON config body
  POST /stop         Stop the running simulation
  GET  /stream       SSE stream – browser subscribes here for live ant positions
  GET  /status       Current run state as JSON

Run:
  python server.py
  # → http://localhost:5000
"""

import threading
import queue
import json
import sys
import os

import numpy as np
from flask import Flask, Response, request, jsonify

# Make sure the flat modules are importable from this folder
sys.path.insert(0, os.path.dirname(__file__))

from maze import check_maze_fits, generate_maze
from simulation import Simulation
from world import ObstacleMask, World
from config import (
    AMOUNT_OF_ANTS, MAX_TICKS, WEIGHTS_FILE, MUTATE_ON_LOAD,
    SCREEN_WIDTH, SCREEN_HEIGHT, MAZE_CELLS_X, MAZE_CELLS_Y,
    AMOUNT_OF_RAYS, RAYS_RADIUS, MAX_SPEED,
)

# ──────────────────────────────────────────────────────────────────────────────
app = Flask(__name__)

# Global simulation state
_sim_thread:  threading.Thread | None = None
_stop_event   = threading.Event()
_tick_queue   = queue.Queue(maxsize=200)   # holds dicts to stream
_sim_status   = {                         # replaced by a fresh dict per run
    "running":   False,
    "tick":      0,
    "max_ticks": 0,
    "cfg":       {},
    "error":     None,
}
_status_lock  = threading.Lock()


# ──────────────────────────────────────────────────────────────────────────────
# CORS helper – allow a separate front-end dev server to call us
# ──────────────────────────────────────────────────────────────────────────────

@app.after_request
def add_cors(response):
    response.headers["Access-Control-Allow-Origin"]  = "*"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    return response

@app.route("/", methods=["OPTIONS"])
@app.route("/<path:p>", methods=["OPTIONS"])
def preflight(p=""):
    return Response(status=200)


# ──────────────────────────────────────────────────────────────────────────────
# Simulation thread
# ──────────────────────────────────────────────────────────────────────────────

def _new_status(cfg: dict = None) -> dict:
    """Fresh status dict; every run writes only to its own."""
    return {
        "running":   False,
        "tick":      0,
        "max_ticks": cfg["max_ticks"] if cfg else 0,
        "cfg":       cfg or {},
        "error":     None,
    }


def _build_cfg(data: dict) -> dict:
    """Merge request JSON with defaults. Raises TypeError/ValueError on bad values."""
    if not isinstance(data, dict):
        raise TypeError("Config must be a JSON object")
    seed = data.get("seed")
    cfg = {
        "ants":          int(data.get("ants",         AMOUNT_OF_ANTS)),
        "max_ticks":     int(data.get("maxTicks",     MAX_TICKS)),
        "stream_every":  max(1, int(data.get("streamEvery", 1))),
        "mutate":        bool(data.get("mutate",      MUTATE_ON_LOAD)),
        "weights":       str(data.get("weights",      WEIGHTS_FILE)),
        "maze_cells_x":  int(data.get("mazeCellsX",   MAZE_CELLS_X)),
        "maze_cells_y":  int(data.get("mazeCellsY",   MAZE_CELLS_Y)),
        "seed":          None if seed is None else int(seed),
    }
    if cfg["ants"] < 0 or cfg["max_ticks"] < 0:
        raise ValueError("ants and maxTicks must not be negative")
    if cfg["seed"] is not None and cfg["seed"] < 0:
        raise ValueError("seed must not be negative")
    check_maze_fits(SCREEN_WIDTH, SCREEN_HEIGHT,
                    cfg["maze_cells_x"], cfg["maze_cells_y"])
    return cfg


def _make_payload(tick: int, stats: dict, ants: list, max_ticks: int) -> dict:
    """Compact per-tick frame: stats plus (x, y, colour) of every ant."""
    return {
        "type":      "tick",
        "tick":      tick,
        "maxTicks":  max_ticks,
        "meanDisp":  round(stats["mean_disp"], 3),
        "maxDisp":   round(stats["max_disp"], 3),
        "movedPct":  round(stats["moved_pct"], 1),
        "blocked":   stats["blocked"],
        "snapshot":  [
            {"x": round(a.x, 2), "y": round(a.y, 2),
             "r": int(a.color[0]), "g": int(a.color[1]), "b": int(a.color[2])}
            for a in ants
        ],
    }


def _push(out_q: queue.Queue, payload: dict):
    """Non-blocking put; drop the oldest frame if the queue is full."""
    while True:
        try:
            out_q.put_nowait(payload)
            return
        except queue.Full:
            try:
                out_q.get_nowait()
            except queue.Empty:
                pass


def _sim_worker(cfg: dict, stop_evt: threading.Event, out_q: queue.Queue,
                status: dict):
    """
    Run the simulation in a background thread; push streamed ticks into the
    queue. A final {"type": "done"} frame is always pushed, also when set-up
    or the run fails.
    """

    def on_tick(tick, stats, world, ants):
        with _status_lock:
            status["tick"] = tick
        if tick % cfg["stream_every"] != 0:
            return

        _push(out_q, _make_payload(tick, stats, ants, cfg["max_ticks"]))

    sim   = None
    error = None
    try:
        pixels = generate_maze(SCREEN_WIDTH, SCREEN_HEIGHT,
                               cfg["maze_cells_x"], cfg["maze_cells_y"],
                               rng=np.random.default_rng(cfg["seed"]))
        world = World(ObstacleMask(pixels), AMOUNT_OF_RAYS, RAYS_RADIUS, MAX_SPEED)

        sim = Simulation(
            world,
            n_ants           = cfg["ants"],
            max_ticks        = cfg["max_ticks"],
            weights_path     = cfg["weights"],
            mutate_on_load   = cfg["mutate"],
            seed             = cfg["seed"],
            verbose          = False,
            on_tick_callback = on_tick,
        )

        with _status_lock:
            status["running"] = True
        sim.run(stop_event=stop_evt)
    except Exception as exc:
        error = str(exc)
        print(f"  !! Simulation failed: {error}")
        raise
    finally:
        if sim is not None:
            sim.shutdown()
        with _status_lock:
            status["running"] = False
            status["error"]   = error
            last_tick = status["tick"]
        done = {"type": "done", "tick": last_tick}
        if error is not None:
            done["error"] = error
        _push(out_q, done)


# ──────────────────────────────────────────────────────────────────────────────
# Routes
# ──────────────────────────────────────────────────────────────────────────────

@app.route("/start", methods=["POST"])
def start():
    global _sim_thread, _stop_event, _tick_queue, _sim_status

    try:
        cfg = _build_cfg(request.get_json(force=True, silent=True) or {})
    except (TypeError, ValueError) as exc:
        return jsonify({"status": "error", "error": str(exc)}), 400

    # Stop any running sim
    _stop_event.set()
    if _sim_thread and _sim_thread.is_alive():
        _sim_thread.join(timeout=3)

    # Reset
    _stop_event = threading.Event()
    _tick_queue = queue.Queue(maxsize=200)
    run_status = _new_status(cfg)
    with _status_lock:
        _sim_status = run_status

    _sim_thread = threading.Thread(
        target=_sim_worker,
        args=(cfg, _stop_event, _tick_queue, run_status),
        daemon=True,
    )
    _sim_thread.start()
    return jsonify({"status": "started", "cfg": cfg})


@app.route("/stop", methods=["POST"])
def stop():
    _stop_event.set()
    return jsonify({"status": "stopped"})


@app.route("/status", methods=["GET"])
def status():
    with _status_lock:
        return jsonify(dict(_sim_status))


@app.route("/stream", methods=["GET"])
def stream():
    """SSE endpoint – browser subscribes and receives each streamed tick as an event."""
    q = _tick_queue

    def event_gen():
        # Send a hello so the browser knows it's connected
        yield "data: {\"type\": \"connected\"}\n\n"

        while True:
            try:
                payload = q.get(timeout=1)
                yield f"data: {json.dumps(payload)}\n\n"
                if payload.get("type") == "done":
                    break
            except queue.Empty:
                # Keep-alive ping
                yield "data: {\"type\": \"ping\"}\n\n"

    return Response(
        event_gen(),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",    # disable nginx buffering if behind proxy
        },
    )


# ──────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    print("=" * 50)
    print("  AntMaze Server  →  http://localhost:5000")
    print("  SSE stream      →  http://localhost:5000/stream")
    print("=" * 50)
    app.run(host="0.0.0.0", port=5000, threaded=True, debug=False)
