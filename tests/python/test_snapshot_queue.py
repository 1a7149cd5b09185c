import asyncio
import json

from shoal.app.server import SimulationController
from shoal.sim.core.config import SimulationConfig


def test_snapshot_queue_ack_cleanup() -> None:
    controller = SimulationController(SimulationConfig(boid_count=4))

    async def exercise() -> None:
        await controller.step_once()
        await controller.step_once()
        async with controller._queue_lock:
            queued_ticks = [item.tick for item in controller._snapshot_queue]
        assert queued_ticks == [1, 2]
        await controller.acknowledge(1)
        async with controller._queue_lock:
            remaining_ticks = [item.tick for item in controller._snapshot_queue]
        assert remaining_ticks == [2]

    asyncio.run(exercise())


def test_snapshot_payload_shape() -> None:
    controller = SimulationController(SimulationConfig(boid_count=3))
    controller.world.step(0.016)
    queued = controller._serialize_snapshot()
    payload = json.loads(queued.payload)

    assert payload["type"] == "snapshot"
    assert payload["tick"] == 1
    body = payload["payload"]
    assert len(body["boids"]) == 3
    assert set(body["target"]) >= {"x", "y", "z", "radius", "y_radius"}
    assert body["metadata"]["boid_count"] == 3
    assert body["metrics"]["population"] == 3


def test_reset_clears_queue_and_rewinds() -> None:
    controller = SimulationController(SimulationConfig(boid_count=2))

    async def exercise() -> None:
        await controller.step_once()
        await controller.reset()
        assert controller.tick == 0
        async with controller._queue_lock:
            assert [item.tick for item in controller._snapshot_queue] == [0]

    asyncio.run(exercise())


def test_queue_stays_bounded_without_clients() -> None:
    controller = SimulationController(SimulationConfig(boid_count=2, snapshot_queue_limit=16))

    async def exercise() -> None:
        for _ in range(200):
            await controller.step_once()
        ticks = await controller.queued_ticks()
        assert len(ticks) == 16
        # oldest entries are the ones dropped
        assert ticks == list(range(185, 201))

    asyncio.run(exercise())


class _SilentClient:
    def __init__(self) -> None:
        self.sent: list[str] = []

    async def send_text(self, text: str) -> None:
        self.sent.append(text)


def test_queue_stays_bounded_when_client_never_acks() -> None:
    controller = SimulationController(SimulationConfig(boid_count=2, snapshot_queue_limit=8))
    client = _SilentClient()

    async def exercise() -> None:
        await controller.connect(client)
        for _ in range(50):
            await controller.step_once()
        assert len(await controller.queued_ticks()) == 8
        assert len(client.sent) == 50
        assert json.loads(client.sent[-1])["tick"] == 50
        controller.disconnect(client)
        assert client not in controller.clients

    asyncio.run(exercise())
