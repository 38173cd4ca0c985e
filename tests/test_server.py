"""Tests for the Flask control/streaming server."""

from __future__ import annotations

import json
import queue
import threading

import pytest

import server
from config import AMOUNT_OF_ANTS, MAX_TICKS, WEIGHTS_FILE


@pytest.fixture
def client():
    server.app.config["TESTING"] = True
    with server.app.test_client() as c:
        yield c
    server._stop_event.set()
    if server._sim_thread is not None:
        server._sim_thread.join(timeout=10)


def _events(body: str) -> list:
    return [json.loads(line[len("data: "):])
            for line in body.splitlines() if line.startswith("data: ")]


class TestBuildCfg:
    """Request JSON merged with defaults."""

    def test_defaults(self):
        cfg = server._build_cfg({})
        assert cfg["ants"] == AMOUNT_OF_ANTS
        assert cfg["max_ticks"] == MAX_TICKS
        assert cfg["weights"] == WEIGHTS_FILE
        assert cfg["stream_every"] == 1
        assert cfg["seed"] is None

    def test_overrides(self):
        cfg = server._build_cfg({"ants": "12", "maxTicks": 7, "streamEvery": 0,
                                 "mutate": False, "mazeCellsX": 4, "seed": 9})
        assert cfg["ants"] == 12
        assert cfg["max_ticks"] == 7
        assert cfg["stream_every"] == 1
        assert cfg["mutate"] is False
        assert cfg["maze_cells_x"] == 4
        assert cfg["seed"] == 9

    def test_bad_value_raises(self):
        with pytest.raises(ValueError):
            server._build_cfg({"ants": "many"})

    @pytest.mark.parametrize("data", [
        {"seed": "abc"},
        {"seed": -1},
        {"mazeCellsX": 1000},
        {"mazeCellsY": 0},
        {"ants": -5},
    ])
    def test_invalid_values_rejected(self, data):
        with pytest.raises(ValueError):
            server._build_cfg(data)

    def test_non_object_rejected(self):
        with pytest.raises(TypeError):
            server._build_cfg([1, 2])


class TestRoutes:
    """HTTP endpoints."""

    def test_status_shape(self, client):
        body = client.get("/status").get_json()
        assert set(body) == {"running", "tick", "max_ticks", "cfg", "error"}

    def test_bad_config_is_rejected(self, client):
        resp = client.post("/start", json={"ants": "many"})
        assert resp.status_code == 400
        assert resp.get_json()["status"] == "error"

    def test_run_streams_ticks_then_done(self, client, tmp_path):
        resp = client.post("/start", json={
            "ants": 3, "maxTicks": 2, "seed": 1,
            "mazeCellsX": 4, "mazeCellsY": 3,
            "weights": str(tmp_path / "adam.bin"),
        })
        assert resp.status_code == 200
        assert resp.get_json()["cfg"]["ants"] == 3

        events = _events(client.get("/stream").get_data(as_text=True))
        kinds = [e["type"] for e in events]
        assert kinds[0] == "connected"
        assert kinds[-1] == "done"

        ticks = [e for e in events if e["type"] == "tick"]
        assert [e["tick"] for e in ticks] == [0, 1]
        assert len(ticks[0]["snapshot"]) == 3
        assert set(ticks[0]["snapshot"][0]) == {"x", "y", "r", "g", "b"}

        server._sim_thread.join(timeout=10)
        status = client.get("/status").get_json()
        assert status["running"] is False
        assert status["tick"] == 1
        assert (tmp_path / "adam.bin").is_file()

    def test_stop(self, client):
        resp = client.post("/stop")
        assert resp.get_json() == {"status": "stopped"}
        assert server._stop_event.is_set()

    def test_cors_headers(self, client):
        resp = client.get("/status")
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    @pytest.mark.parametrize("data", [{"seed": "abc"}, {"mazeCellsX": 1000}])
    def test_unusable_config_never_starts_a_run(self, client, data):
        before = server._sim_thread
        resp = client.post("/start", json=data)
        assert resp.status_code == 400
        assert server._sim_thread is before


class TestWorker:
    """Background run lifecycle."""

    def _cfg(self, weights):
        return server._build_cfg({"ants": 2, "maxTicks": 1, "seed": 4,
                                  "mazeCellsX": 4, "mazeCellsY": 3,
                                  "weights": str(weights)})

    def test_failed_setup_still_sends_done(self, tmp_path):
        weights = tmp_path / "notes.bin"
        weights.write_bytes(b"not a weight file")
        out_q = queue.Queue()
        status = server._new_status()

        with pytest.raises(ValueError):
            server._sim_worker(self._cfg(weights), threading.Event(), out_q, status)

        frames = [out_q.get_nowait() for _ in range(out_q.qsize())]
        assert frames[-1]["type"] == "done"
        assert "left untouched" in frames[-1]["error"]
        assert status["running"] is False
        assert status["error"] == frames[-1]["error"]
        assert weights.read_bytes() == b"not a weight file"

    def test_worker_only_touches_its_own_status(self, tmp_path, monkeypatch):
        current = server._new_status()
        current["running"] = True
        monkeypatch.setattr(server, "_sim_status", current)
        own = server._new_status()

        server._sim_worker(self._cfg(tmp_path / "adam.bin"), threading.Event(),
                           queue.Queue(), own)

        assert current["running"] is True
        assert current["tick"] == 0
        assert own["running"] is False
        assert own["error"] is None
