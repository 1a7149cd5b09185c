from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .agent import Boid


class SceneRenderer(Protocol):
    """Visual side of the simulation. The core only ever calls out to it."""

    def create_visual(self, boid: "Boid", geometry: Any, material: Any) -> Any:
        ...

    def update_visual(self, boid: "Boid") -> None:
        ...


class NullRenderer:
    def create_visual(self, boid: "Boid", geometry: Any, material: Any) -> Any:
        return None

    def update_visual(self, boid: "Boid") -> None:
        return None
