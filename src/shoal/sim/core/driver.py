from __future__ import annotations

from time import perf_counter
from typing import Callable, List, Optional

from .world import World
from ..types.metrics import TickMetrics

InitializeCallback = Callable[[World], None]
StepCallback = Callable[[World, TickMetrics], None]


class SimulationDriver:
    """Frame loop around a world, customised through callbacks instead of subclassing."""

    def __init__(
        self,
        world: World,
        on_initialize: Optional[InitializeCallback] = None,
        on_step: Optional[StepCallback] = None,
        clock: Callable[[], float] = perf_counter,
    ):
        self.world = world
        self._on_initialize = on_initialize
        self._on_step = on_step
        self._clock = clock
        self._last_time: float | None = None
        self.running = False
        self.frames = 0

    def start(self) -> None:
        if self.running:
            return
        self.running = True
        self._last_time = None
        if self._on_initialize is not None:
            self._on_initialize(self.world)

    def stop(self) -> None:
        self.running = False

    def advance(self, dt: float) -> Optional[TickMetrics]:
        if not self.running:
            return None
        metrics = self.world.step(dt)
        self.frames += 1
        if self._on_step is not None:
            self._on_step(self.world, metrics)
        return metrics

    def tick_from_clock(self) -> Optional[TickMetrics]:
        now = self._clock()
        dt = 0.0 if self._last_time is None else now - self._last_time
        self._last_time = now
        return self.advance(dt)

    def run(self, frames: int, dt: float) -> List[TickMetrics]:
        self.start()
        collected: List[TickMetrics] = []
        for _ in range(frames):
            if not self.running:
                break
            metrics = self.advance(dt)
            if metrics is not None:
                collected.append(metrics)
        return collected
