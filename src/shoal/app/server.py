from __future__ import annotations

import asyncio
import json
import logging
import os
from collections import deque
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Set

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ..sim.core.config import SimulationConfig
from ..sim.core.world import World

logger = logging.getLogger("shoal.server")


@dataclass(frozen=True)
class QueuedSnapshot:
    tick: int
    payload: str


class SimulationController:
    """Steps a world on the event loop and fans snapshots out to WebSocket clients.

    Serialized snapshots wait in a queue until a client acknowledges them. The
    queue keeps at most ``config.snapshot_queue_limit`` entries, so an idle
    server or a client that never acks only holds the newest snapshots.
    """

    def __init__(self, config: SimulationConfig, broadcast_interval: int = 1):
        self.config = config
        self.world = World(config)
        self.broadcast_interval = max(1, broadcast_interval)
        self.running = False
        self.speed_multiplier = 1.0
        self.clients: Set[WebSocket] = set()
        self._client_last_sent: Dict[WebSocket, int] = {}
        self._snapshot_queue: deque[QueuedSnapshot] = deque(maxlen=config.snapshot_queue_limit)
        self._lock = asyncio.Lock()
        self._queue_lock = asyncio.Lock()
        self._loop_task: asyncio.Task | None = None

    @property
    def tick(self) -> int:
        return self.world.tick

    async def start(self) -> None:
        if self._loop_task is None:
            self._loop_task = asyncio.create_task(self._run())
        self.running = True

    async def stop(self) -> None:
        self.running = False

    async def reset(self) -> None:
        async with self._lock:
            self.world.reset()
        async with self._queue_lock:
            self._snapshot_queue.clear()
        for client in self._client_last_sent:
            self._client_last_sent[client] = -1
        await self._broadcast_snapshot()

    async def step_once(self) -> None:
        # World.step clamps the frame time, so a stalled loop cannot feed it a long dt.
        async with self._lock:
            self.world.step(self.config.time_step)
        if self.tick % self.broadcast_interval == 0:
            await self._broadcast_snapshot()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.config.time_step / self.speed_multiplier)
            if self.running:
                await self.step_once()

    async def queued_ticks(self) -> List[int]:
        async with self._queue_lock:
            return [item.tick for item in self._snapshot_queue]

    async def acknowledge(self, tick: int) -> None:
        async with self._queue_lock:
            while self._snapshot_queue and self._snapshot_queue[0].tick <= tick:
                self._snapshot_queue.popleft()

    async def connect(self, client: WebSocket) -> None:
        self.clients.add(client)
        self._client_last_sent[client] = -1
        await self._send_pending_snapshots(client)

    def disconnect(self, client: WebSocket) -> None:
        self.clients.discard(client)
        self._client_last_sent.pop(client, None)

    def _serialize_snapshot(self) -> QueuedSnapshot:
        snapshot = self.world.snapshot()
        payload = {
            "type": "snapshot",
            "tick": snapshot.tick,
            "payload": {
                "tick": snapshot.tick,
                "metrics": asdict(snapshot.metrics),
                "boids": snapshot.boids,
                "target": snapshot.target,
                "metadata": asdict(snapshot.metadata),
            },
        }
        return QueuedSnapshot(tick=snapshot.tick, payload=json.dumps(payload))

    async def _send_pending_snapshots(self, client: WebSocket) -> None:
        last_sent = self._client_last_sent.get(client, -1)
        async with self._queue_lock:
            pending = [item for item in self._snapshot_queue if item.tick > last_sent]
        for item in pending:
            await client.send_text(item.payload)
            last_sent = item.tick
        self._client_last_sent[client] = last_sent

    async def _broadcast_snapshot(self) -> None:
        queued = self._serialize_snapshot()
        async with self._queue_lock:
            if len(self._snapshot_queue) == self._snapshot_queue.maxlen:
                logger.debug("Snapshot queue full; dropping tick %d", self._snapshot_queue[0].tick)
            self._snapshot_queue.append(queued)
        stale: List[WebSocket] = []
        for client in list(self.clients):
            try:
                await self._send_pending_snapshots(client)
            except WebSocketDisconnect:
                stale.append(client)
        for client in stale:
            logger.info("Dropping disconnected client")
            self.disconnect(client)


def _load_app_config() -> SimulationConfig:
    path = os.environ.get("SHOAL_CONFIG")
    if path:
        return SimulationConfig.from_yaml(Path(path))
    return SimulationConfig()


app = FastAPI(title="Shoal Flocking Simulation")
controller = SimulationController(_load_app_config())


@app.on_event("startup")
async def _startup() -> None:
    await controller.start()


@app.get("/api/status")
async def status() -> JSONResponse:
    snapshot = controller.world.snapshot()
    return JSONResponse(
        {
            "running": controller.running,
            "tick": controller.tick,
            "population": len(controller.world.boids),
            "metrics": asdict(snapshot.metrics),
            "target": snapshot.target,
        }
    )


@app.get("/api/snapshot")
async def full_snapshot() -> JSONResponse:
    snapshot = controller.world.snapshot()
    return JSONResponse(
        {
            "tick": snapshot.tick,
            "boids": snapshot.boids,
            "target": snapshot.target,
            "metadata": asdict(snapshot.metadata),
        }
    )


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    controller.running = True
    return JSONResponse({"running": True})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    controller.running = False
    return JSONResponse({"running": False})


@app.post("/api/control/reset")
async def reset_simulation() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.running, "tick": controller.tick})


@app.post("/api/control/speed")
async def set_speed(payload: dict) -> JSONResponse:
    speed = float(payload.get("multiplier", 1.0))
    controller.speed_multiplier = max(0.1, min(5.0, speed))
    return JSONResponse({"multiplier": controller.speed_multiplier})


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    await controller.connect(websocket)
    try:
        while True:
            message = await websocket.receive_text()
            try:
                payload = json.loads(message)
            except json.JSONDecodeError:
                logger.debug("Ignoring non-JSON client message")
                continue
            if payload.get("type") == "ack":
                tick = payload.get("tick")
                if isinstance(tick, int):
                    await controller.acknowledge(tick)
    except WebSocketDisconnect:
        controller.disconnect(websocket)


__all__ = ["app", "controller"]
